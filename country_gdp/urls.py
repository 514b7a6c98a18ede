"""
URL configuration for country_gdp project.

All API routes live in the countries app; this module only mounts them and
installs JSON handlers for unknown routes and unhandled server errors.
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('countries.urls'))
]


def custom_404(request, exception):
    return JsonResponse({"error": "Endpoint not found, try /countries or /status"}, status=404)


def custom_500(request):
    return JsonResponse({"error": "Internal server error"}, status=500)


handler404 = "country_gdp.urls.custom_404"
handler500 = "country_gdp.urls.custom_500"
