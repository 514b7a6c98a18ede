from django.db.models import F, Max

from .models import Country, name_key

# Columns a refresh may rewrite; name is fixed once the row exists.
MUTABLE_FIELDS = (
    "capital", "region", "population", "currency_code",
    "exchange_rate", "estimated_gdp", "flag_url", "last_refreshed_at",
)

SORT_FIELDS = {
    "gdp": "estimated_gdp",
    "name": "name",
    "population": "population",
}


class CountryStore:
    """
    Storage access for Country rows. Name lookups are always
    case-insensitive exact matches on the casefolded ``name_key``.
    """

    def find_by_name(self, name):
        return Country.objects.filter(name_key=name_key(name)).first()

    def insert(self, name, **fields):
        return Country.objects.create(name=name, **fields)

    def update(self, name, **fields):
        unknown = set(fields) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        return Country.objects.filter(name_key=name_key(name)).update(**fields)

    def delete_by_name(self, name):
        deleted, _ = Country.objects.filter(name_key=name_key(name)).delete()
        return deleted

    def list_all(self):
        return Country.objects.order_by("id")

    def filter(self, region=None, currency=None, sort=None, descending=False):
        """
        Rows matching the optional region/currency filters (case-insensitive),
        in storage order unless ``sort`` names one of SORT_FIELDS.
        Null values sort last in both directions.
        """
        qs = self.list_all()
        if region:
            qs = qs.filter(region__iexact=region)
        if currency:
            qs = qs.filter(currency_code__iexact=currency)
        if sort:
            column = F(SORT_FIELDS[sort])
            ordering = column.desc(nulls_last=True) if descending else column.asc(nulls_last=True)
            qs = qs.order_by(ordering, "id")
        return qs

    def count(self):
        return Country.objects.count()

    def top_by_gdp(self, limit=5):
        return list(
            Country.objects
            .order_by(F("estimated_gdp").desc(nulls_last=True), "id")
            .values("name", "estimated_gdp")[:limit]
        )

    def last_refreshed_at(self):
        return Country.objects.aggregate(latest=Max("last_refreshed_at"))["latest"]
