import logging

from core.exceptions import ResourceConflictError

logger = logging.getLogger(__name__)


class TaxRateService:

    @staticmethod
    def set_active(tax_rate, is_active=None):
        if is_active is None:
            is_active = not tax_rate.is_active
        tax_rate.is_active = bool(is_active)
        tax_rate.save(update_fields=["is_active", "updated_at"])
        return {
            "success": True,
            "message": "Tax rate activated" if tax_rate.is_active else "Tax rate deactivated",
        }

    @staticmethod
    def delete(tax_rate, deleted_by=None):
        """Deletes a tax rate that no product references."""
        if tax_rate.products.exists():
            raise ResourceConflictError(
                "Cannot delete a tax rate that is assigned to products. Please reassign products first."
            )
        tax_rate_id = tax_rate.id
        tax_rate.delete()
        logger.info(
            "Tax rate %s deleted by %s",
            tax_rate_id,
            getattr(deleted_by, "id", None),
        )
        return {"success": True, "message": "Tax rate deleted successfully"}
