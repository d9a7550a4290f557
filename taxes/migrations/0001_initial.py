import uuid

import core.utils.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("shops", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TaxRate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                (
                    "rate",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Percent, 0 to 100.",
                        max_digits=5,
                        validators=[core.utils.validators.percentage_0_100],
                    ),
                ),
                ("country", models.CharField(blank=True, max_length=2)),
                ("state", models.CharField(blank=True, max_length=100)),
                ("zip", models.CharField(blank=True, max_length=20)),
                ("priority", models.PositiveIntegerField(default=1)),
                ("is_active", models.BooleanField(default=True)),
                ("is_compound", models.BooleanField(default=False)),
                (
                    "shop",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tax_rates",
                        to="shops.shop",
                    ),
                ),
            ],
            options={
                "verbose_name": "Tax rate",
                "verbose_name_plural": "Tax rates",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["shop", "is_active"], name="taxes_shop_active_idx"),
                    models.Index(fields=["country"], name="taxes_country_idx"),
                ],
            },
        ),
    ]
