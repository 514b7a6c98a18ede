"""
Refresh pipeline: fetch both sources, estimate GDP per country, upsert each
country on its own, then rebuild and render the summary.

    Idle -> FetchingSources -> Aborted(UpstreamUnavailable)
                            -> Reconciling -> Summarizing -> Idle

Nothing is written unless both sources were fetched. Once reconciling
starts every country is an independent unit of work: a failed write is
recorded and the batch carries on, and already written rows stay written.
"""
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from django.apps import apps
from django.db import DatabaseError, IntegrityError, transaction

from . import utils
from .gdp import ComputedCountry, estimate_gdp
from .sources import CountrySource, ExchangeRateSource, UpstreamUnavailable

logger = logging.getLogger(__name__)

INSERTED = "inserted"
UPDATED = "updated"


class RowVanished(DatabaseError):
    """The row to update no longer exists."""


@dataclass
class Summary:
    total_countries: int
    top5_countries: list
    last_refreshed_at: Optional[datetime]


@dataclass
class RowFailure:
    name: str
    reason: str


@dataclass
class RefreshOutcome:
    total_countries: int
    last_refreshed_at: Optional[datetime]
    inserted: int = 0
    updated: int = 0
    failures: List[RowFailure] = field(default_factory=list)
    image_generated: bool = False

    @property
    def status(self):
        return "partial" if self.failures else "success"


def build_summary(store) -> Summary:
    return Summary(
        total_countries=store.count(),
        top5_countries=store.top_by_gdp(5),
        last_refreshed_at=store.last_refreshed_at(),
    )


class Reconciler:
    """Case-insensitive upsert of one computed country."""

    def __init__(self, store, rng, clock=utils.get_now):
        self.store = store
        self.rng = rng
        self.clock = clock

    def smooth(self, gdp):
        if gdp is None:
            return None
        return gdp * utils.make_smoothing_factor(self.rng)

    def reconcile(self, country: ComputedCountry) -> str:
        fields = {
            "capital": country.capital,
            "region": country.region,
            "population": country.population,
            "currency_code": country.currency_code,
            "exchange_rate": country.exchange_rate,
            "estimated_gdp": country.estimated_gdp,
            "flag_url": country.flag_url,
            "last_refreshed_at": self.clock(),
        }

        if self.store.find_by_name(country.name) is None:
            try:
                with transaction.atomic():
                    self.store.insert(country.name, **fields)
                logger.debug("Inserted %s", country.name)
                return INSERTED
            except IntegrityError:
                # Another refresh created the row after our lookup.
                logger.info("%s was inserted concurrently, updating instead", country.name)

        fields["estimated_gdp"] = self.smooth(country.estimated_gdp)
        if self.store.update(country.name, **fields) == 0:
            raise RowVanished(f"{country.name} was deleted before it could be updated")
        logger.debug("Updated %s", country.name)
        return UPDATED


class RefreshService:
    def __init__(self, store, country_source, rate_source, rng=None, clock=utils.get_now,
                 renderer=utils.render_summary_image, image_writer=utils.save_summary_image):
        self.store = store
        self.country_source = country_source
        self.rate_source = rate_source
        self.rng = rng or random.Random()
        self.reconciler = Reconciler(store, self.rng, clock)
        self.renderer = renderer
        self.image_writer = image_writer

    def fetch_sources(self):
        """Fetch both sources in parallel; raise if either failed."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            countries_fut = pool.submit(self.country_source.fetch)
            rates_fut = pool.submit(self.rate_source.fetch)

        failed, details = [], []
        results = {}
        for key, fut in (("countries", countries_fut), ("rates", rates_fut)):
            try:
                results[key] = fut.result()
            except UpstreamUnavailable as exc:
                failed.extend(exc.sources)
                details.append(exc.details)
        if failed:
            raise UpstreamUnavailable(failed, "; ".join(details))
        return results["countries"], results["rates"]

    def refresh(self) -> RefreshOutcome:
        raw_countries, rates = self.fetch_sources()
        logger.info("Fetched %d countries and %d exchange rates", len(raw_countries), len(rates))

        inserted = updated = 0
        failures = []
        for raw in raw_countries:
            computed = estimate_gdp(raw, rates, self.rng)
            try:
                with transaction.atomic():
                    result = self.reconciler.reconcile(computed)
            except DatabaseError as exc:
                logger.exception("Failed to save %s", raw.name)
                failures.append(RowFailure(name=raw.name, reason=str(exc)))
                continue
            if result == INSERTED:
                inserted += 1
            else:
                updated += 1

        summary = build_summary(self.store)
        image_generated = self.publish_summary(summary)

        logger.info(
            "Refresh finished: %d inserted, %d updated, %d failed, %d total",
            inserted, updated, len(failures), summary.total_countries,
        )
        return RefreshOutcome(
            total_countries=summary.total_countries,
            last_refreshed_at=summary.last_refreshed_at,
            inserted=inserted,
            updated=updated,
            failures=failures,
            image_generated=image_generated,
        )

    def publish_summary(self, summary):
        # Rows are already committed; the image is only a cache.
        try:
            data = self.renderer(summary)
        except Exception:
            logger.exception("Could not render summary image")
            return False
        try:
            self.image_writer(data)
        except OSError:
            logger.exception("Could not write summary image")
            return False
        return True


def build_refresh_service(rng=None):
    store = apps.get_app_config("countries").store
    return RefreshService(
        store=store,
        country_source=CountrySource.from_settings(),
        rate_source=ExchangeRateSource.from_settings(),
        rng=rng,
    )
