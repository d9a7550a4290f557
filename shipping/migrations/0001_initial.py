import uuid

import core.utils.validators
import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("marketplace", "0001_initial"),
        ("shops", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ShippingMethod",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "name",
                    models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(2)]),
                ),
                ("description", models.TextField(blank=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=12,
                        validators=[core.utils.validators.validate_non_negative_amount],
                    ),
                ),
                ("duration", models.CharField(help_text='e.g. "3-5 business days"', max_length=50)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "shop",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shipping_methods",
                        to="shops.shop",
                    ),
                ),
            ],
            options={
                "verbose_name": "Shipping method",
                "verbose_name_plural": "Shipping methods",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["shop", "is_active"], name="shipping_shop_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductShippingMethod",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shipping_restrictions",
                        to="marketplace.product",
                    ),
                ),
                (
                    "shipping_method",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="product_restrictions",
                        to="shipping.shippingmethod",
                    ),
                ),
            ],
            options={
                "verbose_name": "Product shipping method",
                "verbose_name_plural": "Product shipping methods",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("product", "shipping_method"),
                        name="unique_product_shipping_method",
                    ),
                ],
            },
        ),
    ]
