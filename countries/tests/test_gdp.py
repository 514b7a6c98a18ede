import random

from django.test import SimpleTestCase

from countries.gdp import GdpState, estimate_gdp
from .helpers import FixedRandom, raw


class EstimateGdpTests(SimpleTestCase):

    def test_no_currency_is_explicit_zero(self):
        computed = estimate_gdp(raw(currencies=()), {"TST": 2.0}, FixedRandom())
        self.assertEqual(computed.gdp_state, GdpState.NOT_APPLICABLE)
        self.assertIsNone(computed.currency_code)
        self.assertIsNone(computed.exchange_rate)
        self.assertEqual(computed.estimated_gdp, 0)
        self.assertIsNotNone(computed.estimated_gdp)

    def test_missing_rate_is_unknown(self):
        computed = estimate_gdp(raw(currencies=("TST",)), {}, FixedRandom())
        self.assertEqual(computed.gdp_state, GdpState.UNKNOWN)
        self.assertEqual(computed.currency_code, "TST")
        self.assertIsNone(computed.exchange_rate)
        self.assertIsNone(computed.estimated_gdp)

    def test_first_currency_is_used(self):
        rates = {"AAA": 4.0, "BBB": 1.0}
        computed = estimate_gdp(raw(population=1000, currencies=("AAA", "BBB")), rates, FixedRandom(factor=1000))
        self.assertEqual(computed.currency_code, "AAA")
        self.assertEqual(computed.exchange_rate, 4.0)
        self.assertEqual(computed.estimated_gdp, 250000.0)

    def test_multiplier_drawn_from_closed_range(self):
        rng = FixedRandom(factor=2000)
        computed = estimate_gdp(raw(population=10, currencies=("TST",)), {"TST": 2.0}, rng)
        self.assertEqual(rng.calls, [("randint", 1000, 2000)])
        self.assertEqual(computed.gdp_state, GdpState.COMPUTED)
        self.assertEqual(computed.estimated_gdp, 10000.0)

    def test_estimate_within_bounds(self):
        rng = random.Random(42)
        population, rate = 5000000, 3.5
        for _ in range(200):
            gdp = estimate_gdp(raw(population=population), {"TST": rate}, rng).estimated_gdp
            self.assertGreaterEqual(gdp, population * 1000 / rate)
            self.assertLessEqual(gdp, population * 2000 / rate)

    def test_no_random_draw_without_rate(self):
        rng = FixedRandom()
        estimate_gdp(raw(currencies=()), {}, rng)
        estimate_gdp(raw(currencies=("XXX",)), {}, rng)
        self.assertEqual(rng.calls, [])
