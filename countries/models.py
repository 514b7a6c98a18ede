from django.db import models


def name_key(name):
    """Case-insensitive lookup key for a country name (Unicode-aware)."""
    return name.strip().casefold()


class Country(models.Model):
    # id — auto-generated, defines storage order
    name = models.CharField(max_length=200)
    # name_key — casefolded name, the unique natural key; kept in sync by save()
    name_key = models.CharField(max_length=200, unique=True, editable=False)
    capital = models.CharField(max_length=200, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True)
    population = models.BigIntegerField(default=0)
    # currency_code — null when the country declares no currency
    currency_code = models.CharField(max_length=10, null=True, blank=True)
    # exchange_rate — units per USD; null when unknown
    exchange_rate = models.FloatField(null=True, blank=True)
    # estimated_gdp — 0 when no currency, null when the rate is unknown
    estimated_gdp = models.FloatField(null=True, blank=True)
    flag_url = models.URLField(max_length=500, null=True, blank=True)
    # last_refreshed_at — set on every insert or update by a refresh
    last_refreshed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name_plural = "countries"

    def save(self, *args, **kwargs):
        self.name_key = name_key(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name
