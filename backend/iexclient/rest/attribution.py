"""Attribution IEX requires wherever its data is displayed.

See https://iextrading.com/developer/docs/#attribution
"""

CITATION = "Data provided for free by IEX."
LINK = "https://iextrading.com/developer"
TERMS_OF_SERVICE_LINK = "https://iextrading.com/api-exhibit-a"
TOPS_PRICE_DATA_CITATION = "IEX Real-Time Price"

ATTRIBUTION: dict[str, str] = {
    "citation": CITATION,
    "link": LINK,
    "terms_of_service_link": TERMS_OF_SERVICE_LINK,
    "tops_price_data_citation": TOPS_PRICE_DATA_CITATION,
}
