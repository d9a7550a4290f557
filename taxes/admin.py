from django.contrib import admin

from .models import TaxRate


@admin.register(TaxRate)
class TaxRateAdmin(admin.ModelAdmin):
    list_display = ['name', 'shop', 'rate', 'country', 'state', 'priority', 'is_active']
    list_filter = ['is_active', 'is_compound', 'country']
    search_fields = ['name', 'shop__name', 'country', 'state']
