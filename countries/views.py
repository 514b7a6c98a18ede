import logging
import os

from django.apps import apps
from django.http import FileResponse
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from . import utils
from .refresh import build_refresh_service, build_summary
from .serializers import (
    CountrySerializer, RefreshOutcomeSerializer, StatusSerializer, SummarySerializer,
)
from .sources import UpstreamUnavailable
from .store import SORT_FIELDS

logger = logging.getLogger(__name__)

ALLOWED_FILTERS = ("region", "currency")


def get_store():
    return apps.get_app_config("countries").store


def internal_error():
    return Response(
        {"error": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@api_view(['POST'])
def refresh_countries(request):
    """
    POST /countries/refresh
    Fetch countries and exchange rates, then insert or update each country.
    200 with the outcome (status "success" or "partial"), 503 if a source
    is unavailable, in which case nothing was written.
    """
    try:
        outcome = build_refresh_service().refresh()
    except UpstreamUnavailable as exc:
        return Response(
            {"error": "External data source unavailable", "details": exc.details},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    except Exception:
        logger.exception("Refresh failed")
        return internal_error()

    data = RefreshOutcomeSerializer(outcome).data
    data["message"] = (
        "Countries refreshed successfully" if outcome.status == "success"
        else "Countries refreshed with errors"
    )
    return Response(data, status=status.HTTP_200_OK)


@api_view(['GET'])
def list_countries(request):
    """
    GET /countries
    Filters (case-insensitive): ?region=Africa ?currency=NGN
    Sorting: ?sort=<field>_asc or <field>_desc for gdp, name, population
    Default order is storage order.
    """
    errors = {}
    for key in request.GET.keys():
        if key != "sort" and key not in ALLOWED_FILTERS:
            errors[key] = "is not a valid filter"
        elif not request.GET.get(key):
            errors[key] = "is required"

    sort_field, descending = None, False
    sort_param = request.GET.get("sort")
    if sort_param and "sort" not in errors:
        field, _, direction = sort_param.lower().rpartition("_")
        if field not in SORT_FIELDS or direction not in ("asc", "desc"):
            errors["sort"] = "invalid format (use gdp_asc, gdp_desc, name_asc, ...)"
        else:
            sort_field, descending = field, direction == "desc"

    if errors:
        return Response(
            {"error": "Validation failed", "details": errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        qs = get_store().filter(
            region=request.GET.get("region"),
            currency=request.GET.get("currency"),
            sort=sort_field,
            descending=descending,
        )
        return Response(CountrySerializer(qs, many=True).data)
    except Exception:
        logger.exception("Listing countries failed")
        return internal_error()


@api_view(['GET', 'DELETE'])
def country_detail(request, name):
    """
    GET /countries/:name  -> country or 404
    DELETE /countries/:name -> 204 or 404
    """
    store = get_store()
    try:
        if request.method == 'GET':
            country = store.find_by_name(name)
            if country is None:
                return Response({"error": "Country not found"}, status=status.HTTP_404_NOT_FOUND)
            return Response(CountrySerializer(country).data)

        if store.delete_by_name(name) == 0:
            return Response({"error": "Country not found"}, status=status.HTTP_404_NOT_FOUND)
        logger.info("Deleted country %s", name)
        return Response(status=status.HTTP_204_NO_CONTENT)
    except Exception:
        logger.exception("Country lookup failed for %s", name)
        return internal_error()


@api_view(['GET'])
def get_status(request):
    """
    GET /status -> { total_countries, last_refreshed_at }
    last_refreshed_at is the max(last_refreshed_at) across records (or null)
    """
    store = get_store()
    try:
        data = {"total_countries": store.count(), "last_refreshed_at": store.last_refreshed_at()}
    except Exception:
        logger.exception("Status lookup failed")
        return internal_error()
    return Response(StatusSerializer(data).data)


@api_view(['GET'])
def get_summary(request):
    """GET /countries/summary -> summary rebuilt from the stored rows."""
    try:
        summary = build_summary(get_store())
    except Exception:
        logger.exception("Summary lookup failed")
        return internal_error()
    return Response(SummarySerializer(summary).data)


@api_view(['GET'])
def get_summary_image(request):
    """
    GET /countries/image
    Serve the summary image written by the last refresh, 404 if none yet.
    """
    path = utils.get_summary_image_path()
    if not os.path.exists(path):
        return Response({"error": "Summary image not found"}, status=status.HTTP_404_NOT_FOUND)
    return FileResponse(open(path, 'rb'), content_type='image/png')
