from rest_framework import serializers

from .gdp import RawCountry
from .models import Country


class CountrySerializer(serializers.ModelSerializer):
    class Meta:
        model = Country
        fields = [
            'id', 'name', 'capital', 'region', 'population',
            'currency_code', 'exchange_rate', 'estimated_gdp',
            'flag_url', 'last_refreshed_at'
        ]
        read_only_fields = fields


class RawCountrySerializer(serializers.Serializer):
    """
    Validates one entry of the countries API payload.
    - name is required
    - population must be a non-negative integer (missing means 0)
    - currencies is a list of {"code": ...} objects and may be absent
    """
    name = serializers.CharField(max_length=200)
    capital = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    region = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    population = serializers.IntegerField(min_value=0, default=0)
    flag = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=500)
    currencies = serializers.ListField(
        child=serializers.DictField(allow_empty=True),
        allow_null=True,
        default=list,
    )

    def to_raw_country(self):
        data = self.validated_data
        codes = [
            c.get("code").strip()
            for c in data.get("currencies") or []
            if isinstance(c.get("code"), str) and c.get("code").strip()
        ]
        return RawCountry(
            name=data["name"],
            population=data["population"],
            capital=data.get("capital") or None,
            region=data.get("region") or None,
            flag_url=data.get("flag") or None,
            currency_list=tuple(codes),
        )


class TopCountrySerializer(serializers.Serializer):
    name = serializers.CharField()
    estimated_gdp = serializers.FloatField(allow_null=True)


class SummarySerializer(serializers.Serializer):
    total_countries = serializers.IntegerField()
    top5_countries = TopCountrySerializer(many=True)
    last_refreshed_at = serializers.DateTimeField(allow_null=True)


class StatusSerializer(serializers.Serializer):
    total_countries = serializers.IntegerField()
    last_refreshed_at = serializers.DateTimeField(allow_null=True)


class RefreshOutcomeSerializer(serializers.Serializer):
    status = serializers.CharField()
    total_countries = serializers.IntegerField()
    last_refreshed_at = serializers.DateTimeField(allow_null=True)
    inserted = serializers.IntegerField()
    updated = serializers.IntegerField()
    failed_countries = serializers.SerializerMethodField()
    image_generated = serializers.BooleanField()

    def get_failed_countries(self, outcome):
        return [{"name": f.name, "reason": f.reason} for f in outcome.failures]
