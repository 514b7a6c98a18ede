from django.apps import AppConfig


class CountriesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "countries"

    def ready(self):
        from .store import CountryStore

        # One storage handle per process, handed to the refresh pipeline.
        self.store = CountryStore()
