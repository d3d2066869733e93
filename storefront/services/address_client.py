# storefront/services/address_client.py
import re

import requests
from requests import RequestException

from storefront.domain.errors import DependencyFailure, InvalidZipcode
from storefront.utils.retry import http_retry
from storefront.utils.settings import ADDRESS_LOOKUP_URL, ADDRESS_LOOKUP_TIMEOUT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AddressClient:
    """
    Klient API kodow pocztowych (ViaCEP).
    Wynik sluzy tylko do wypelnienia formularza, nie do walidacji zamowienia.
    """

    def __init__(self, base_url: str | None = None, timeout: int = ADDRESS_LOOKUP_TIMEOUT):
        self.base_url = (base_url or ADDRESS_LOOKUP_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def fetch_raw(self, zipcode: str) -> dict:
        url = f"{self.base_url}/{zipcode}/json/"
        logger.info(f"AddressClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def lookup(self, zipcode: str) -> dict | None:
        digits = re.sub(r"[^0-9]", "", zipcode or "")
        if len(digits) != 8:
            raise InvalidZipcode("Nieprawidlowy kod pocztowy")

        try:
            data = self.fetch_raw(digits)
        except (RequestException, ValueError) as e:
            logger.error(f"Blad zapytania o kod pocztowy {digits}: {e}")
            raise DependencyFailure("Blad podczas pobierania adresu", detail=str(e)) from e

        if data.get("erro"):
            return None

        return {
            "address": data.get("logradouro"),
            "neighborhood": data.get("bairro"),
            "city": data.get("localidade"),
            "state": data.get("uf"),
            "zipcode": digits,
        }
