import uuid

import core.utils.validators
import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models

TYPE_CHOICES = [
    ("percentage", "Percentage"),
    ("fixed", "Fixed amount"),
    ("free_shipping", "Free shipping"),
]
APPLICABLE_TO_CHOICES = [
    ("all", "All products"),
    ("specific_products", "Specific products"),
    ("specific_categories", "Specific categories"),
]


def _coupon_fields():
    return [
        ("code", models.CharField(max_length=50)),
        ("description", models.CharField(blank=True, max_length=255)),
        ("type", models.CharField(choices=TYPE_CHOICES, default="percentage", max_length=20)),
        (
            "discount_amount",
            models.DecimalField(
                decimal_places=2,
                help_text="Percent for percentage coupons, currency amount for fixed ones.",
                max_digits=12,
                validators=[core.utils.validators.validate_non_negative_amount],
            ),
        ),
        (
            "minimum_cart_amount",
            models.DecimalField(
                decimal_places=2,
                default=0,
                max_digits=12,
                validators=[core.utils.validators.validate_non_negative_amount],
            ),
        ),
        (
            "maximum_discount_amount",
            models.DecimalField(
                blank=True,
                decimal_places=2,
                max_digits=12,
                null=True,
                validators=[core.utils.validators.validate_non_negative_amount],
            ),
        ),
        ("usage_limit", models.PositiveIntegerField(blank=True, null=True)),
        ("usage_limit_per_user", models.PositiveIntegerField(blank=True, null=True)),
        ("usage_count", models.PositiveIntegerField(default=0)),
        ("active_from", models.DateTimeField(default=django.utils.timezone.now)),
        ("active_to", models.DateTimeField(blank=True, null=True)),
        ("is_active", models.BooleanField(default=True)),
        ("applicable_to", models.CharField(choices=APPLICABLE_TO_CHOICES, default="all", max_length=30)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("marketplace", "0001_initial"),
        ("shops", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Coupon",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                *_coupon_fields(),
                (
                    "shop",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="coupons",
                        to="shops.shop",
                    ),
                ),
            ],
            options={
                "verbose_name": "Coupon",
                "verbose_name_plural": "Coupons",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("shop", "code"), name="unique_coupon_code_per_shop"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CouponProduct",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "coupon",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="coupons.coupon"),
                ),
                (
                    "product",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="marketplace.product"),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("coupon", "product"), name="unique_coupon_product"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CouponCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "category",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="marketplace.category"),
                ),
                (
                    "coupon",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="coupons.coupon"),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("coupon", "category"), name="unique_coupon_category"),
                ],
            },
        ),
        migrations.AddField(
            model_name="coupon",
            name="products",
            field=models.ManyToManyField(
                blank=True,
                related_name="coupons",
                through="coupons.CouponProduct",
                to="marketplace.product",
            ),
        ),
        migrations.AddField(
            model_name="coupon",
            name="categories",
            field=models.ManyToManyField(
                blank=True,
                related_name="coupons",
                through="coupons.CouponCategory",
                to="marketplace.category",
            ),
        ),
        migrations.CreateModel(
            name="HistoricalCoupon",
            fields=[
                ("id", models.UUIDField(db_index=True, default=uuid.uuid4, editable=False)),
                ("created_at", models.DateTimeField(blank=True, editable=False)),
                ("updated_at", models.DateTimeField(blank=True, editable=False)),
                *_coupon_fields(),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "shop",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="shops.shop",
                    ),
                ),
            ],
            options={
                "verbose_name": "historical Coupon",
                "verbose_name_plural": "historical Coupons",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="CouponUsage",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                (
                    "coupon",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="usages",
                        to="coupons.coupon",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="coupon_usages",
                        to="marketplace.order",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="coupon_usages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Coupon usage",
                "verbose_name_plural": "Coupon usages",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["coupon", "user"], name="coupons_usage_coupon_user_idx"),
                ],
            },
        ),
    ]
