from django.db import migrations, models


def fill_name_key(apps, schema_editor):
    Country = apps.get_model("countries", "Country")
    for country in Country.objects.all():
        country.name_key = country.name.strip().casefold()
        country.save(update_fields=["name_key"])


class Migration(migrations.Migration):

    dependencies = [
        ("countries", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="country",
            name="name_key",
            field=models.CharField(editable=False, max_length=200, null=True),
        ),
        migrations.RunPython(fill_name_key, migrations.RunPython.noop),
        migrations.AlterField(
            model_name="country",
            name="name_key",
            field=models.CharField(editable=False, max_length=200, unique=True),
        ),
        migrations.RemoveConstraint(
            model_name="country",
            name="country_name_ci_unique",
        ),
    ]
