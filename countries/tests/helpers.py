from datetime import datetime, timezone

import requests

from countries.gdp import RawCountry
from countries.sources import UpstreamUnavailable

FIXED_NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FixedRandom:
    """Stands in for random.Random with fixed draws."""

    def __init__(self, factor=1500, smoothing=1.0):
        self.factor = factor
        self.smoothing = smoothing
        self.calls = []

    def randint(self, a, b):
        self.calls.append(("randint", a, b))
        return self.factor

    def uniform(self, a, b):
        self.calls.append(("uniform", a, b))
        return self.smoothing


class StaticSource:
    def __init__(self, result=None, fail=None):
        self.result = result
        self.fail = fail
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailable([self.fail], f"Could not fetch data from {self.fail}")
        return self.result


class FakeResp:
    def __init__(self, json_data, status=200):
        self._json = json_data
        self.status_code = status

    def json(self):
        return self._json

    def raise_for_status(self):
        if not (200 <= self.status_code < 300):
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


def raw(name="Testland", population=1000000, currencies=("TST",), **kwargs):
    return RawCountry(name=name, population=population, currency_list=tuple(currencies), **kwargs)
