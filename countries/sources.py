import logging

import requests
from django.conf import settings
from requests.exceptions import RequestException

from .serializers import RawCountrySerializer

logger = logging.getLogger(__name__)


class UpstreamUnavailable(Exception):
    """One or more external data sources could not be fetched."""

    def __init__(self, sources, details):
        self.sources = tuple(sources)
        self.details = details
        super().__init__(details)


def _get_json(url, timeout):
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


class CountrySource:
    name = "countries"
    label = "Countries API"

    def __init__(self, url, timeout):
        self.url = url
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(settings.COUNTRIES_API_URL, settings.EXTERNAL_API_TIMEOUT)

    def fetch(self):
        """Return the upstream country list as RawCountry records."""
        try:
            payload = _get_json(self.url, self.timeout)
        except (RequestException, ValueError) as exc:
            logger.warning("Could not fetch %s: %s", self.url, exc)
            raise UpstreamUnavailable([self.name], f"Could not fetch data from {self.label}") from exc
        if not isinstance(payload, list):
            raise UpstreamUnavailable([self.name], f"Unexpected response from {self.label}")

        countries = []
        for item in payload:
            serializer = RawCountrySerializer(data=item)
            if not serializer.is_valid():
                name = item.get("name") if isinstance(item, dict) else None
                logger.warning("Skipping invalid country entry %r: %s", name, serializer.errors)
                continue
            countries.append(serializer.to_raw_country())
        return countries


class ExchangeRateSource:
    name = "exchange_rates"
    label = "Exchange rates API"

    def __init__(self, url, timeout):
        self.url = url
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(settings.EXCHANGE_API_URL, settings.EXTERNAL_API_TIMEOUT)

    def fetch(self):
        """Return {currency_code: units per USD}, positive rates only."""
        try:
            payload = _get_json(self.url, self.timeout)
        except (RequestException, ValueError) as exc:
            logger.warning("Could not fetch %s: %s", self.url, exc)
            raise UpstreamUnavailable([self.name], f"Could not fetch data from {self.label}") from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailable([self.name], f"Unexpected response from {self.label}")

        table = payload.get("rates") or {}
        if not isinstance(table, dict):
            raise UpstreamUnavailable([self.name], f"Unexpected response from {self.label}")

        rates = {}
        for code, value in table.items():
            try:
                rate = float(value)
            except (TypeError, ValueError):
                continue
            if rate > 0:
                rates[code] = rate
        return rates
