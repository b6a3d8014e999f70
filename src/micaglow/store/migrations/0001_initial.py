from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("category", models.CharField(max_length=100)),
                ("price_per_vial", models.DecimalField(decimal_places=2, max_digits=10)),
                ("price_per_box", models.DecimalField(decimal_places=2, max_digits=10)),
                ("vials_per_box", models.PositiveIntegerField(default=10)),
                ("is_active", models.BooleanField(default=True)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                ("specifications", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["category", "name"],
            },
        ),
    ]
