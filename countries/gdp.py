"""
Estimated GDP for a single country.

The estimate is a simulated proxy, not a measurement:
``population * factor / exchange_rate`` with ``factor`` drawn from
[1000, 2000] on every computation. A country ends up in exactly one of
three states:

* ``COMPUTED``       - currency and rate known, estimate is a number.
* ``NOT_APPLICABLE`` - the country declares no currency; estimate is 0.
* ``UNKNOWN``        - currency declared but no rate available; estimate is None.
"""
import enum
from dataclasses import dataclass
from typing import Optional

from . import utils


class GdpState(enum.Enum):
    COMPUTED = "computed"
    NOT_APPLICABLE = "not_applicable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawCountry:
    name: str
    population: int
    capital: Optional[str] = None
    region: Optional[str] = None
    flag_url: Optional[str] = None
    currency_list: tuple = ()


@dataclass(frozen=True)
class ComputedCountry:
    name: str
    population: int
    capital: Optional[str]
    region: Optional[str]
    flag_url: Optional[str]
    currency_code: Optional[str]
    exchange_rate: Optional[float]
    gdp_state: GdpState
    gdp_value: Optional[float] = None

    @property
    def estimated_gdp(self) -> Optional[float]:
        if self.gdp_state is GdpState.NOT_APPLICABLE:
            return 0.0
        if self.gdp_state is GdpState.UNKNOWN:
            return None
        return self.gdp_value


def estimate_gdp(raw: RawCountry, rates: dict, rng) -> ComputedCountry:
    common = dict(
        name=raw.name,
        population=raw.population,
        capital=raw.capital,
        region=raw.region,
        flag_url=raw.flag_url,
    )

    if not raw.currency_list:
        return ComputedCountry(
            currency_code=None,
            exchange_rate=None,
            gdp_state=GdpState.NOT_APPLICABLE,
            **common,
        )

    currency_code = raw.currency_list[0]
    exchange_rate = rates.get(currency_code)
    if exchange_rate is None or exchange_rate <= 0:
        return ComputedCountry(
            currency_code=currency_code,
            exchange_rate=None,
            gdp_state=GdpState.UNKNOWN,
            **common,
        )

    multiplier = utils.make_multiplier(rng)
    return ComputedCountry(
        currency_code=currency_code,
        exchange_rate=exchange_rate,
        gdp_state=GdpState.COMPUTED,
        gdp_value=(raw.population * multiplier) / exchange_rate,
        **common,
    )
