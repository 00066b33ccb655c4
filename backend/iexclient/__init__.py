"""Client library for the IEX market data API.

Subpackages:
    realtime - Streaming quotes multiplexed over one Socket.IO connection
    rest     - Request/response access to the reference and historical endpoints
"""
