"""Request/response access to the IEX API.

Public API:
    IEXClient    - One async method per REST path
    API_ENDPOINT - Default HTTPS origin
    ATTRIBUTION  - Citation IEX requires alongside its data
"""

from .attribution import ATTRIBUTION
from .client import API_ENDPOINT, IEXClient

__all__ = [
    "API_ENDPOINT",
    "ATTRIBUTION",
    "IEXClient",
]
