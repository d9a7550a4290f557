from django.db import models

from core.models import BaseModel
from core.utils import percentage_0_100


class TaxRate(BaseModel):
    shop = models.ForeignKey("shops.Shop", on_delete=models.CASCADE, related_name="tax_rates")
    name = models.CharField(max_length=100)
    rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[percentage_0_100],
        help_text="Percent, 0 to 100.",
    )
    country = models.CharField(max_length=2, blank=True)
    state = models.CharField(max_length=100, blank=True)
    zip = models.CharField(max_length=20, blank=True)
    priority = models.PositiveIntegerField(default=1)
    is_active = models.BooleanField(default=True)
    is_compound = models.BooleanField(default=False)

    class Meta:
        verbose_name = "Tax rate"
        verbose_name_plural = "Tax rates"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["shop", "is_active"], name="taxes_shop_active_idx"),
            models.Index(fields=["country"], name="taxes_country_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.rate}%)"
