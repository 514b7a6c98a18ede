import django.db.models.functions.text
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Country",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("capital", models.CharField(blank=True, max_length=200, null=True)),
                ("region", models.CharField(blank=True, max_length=100, null=True)),
                ("population", models.BigIntegerField(default=0)),
                ("currency_code", models.CharField(blank=True, max_length=10, null=True)),
                ("exchange_rate", models.FloatField(blank=True, null=True)),
                ("estimated_gdp", models.FloatField(blank=True, null=True)),
                ("flag_url", models.URLField(blank=True, max_length=500, null=True)),
                ("last_refreshed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "verbose_name_plural": "countries",
            },
        ),
        migrations.AddConstraint(
            model_name="country",
            constraint=models.UniqueConstraint(
                django.db.models.functions.text.Lower("name"), name="country_name_ci_unique"
            ),
        ),
    ]
