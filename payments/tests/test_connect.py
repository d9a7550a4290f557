from types import SimpleNamespace
from unittest.mock import patch

import pytest

from core.exceptions import BusinessLogicError
from payments.gateway import PaymentGatewayError
from payments.services import ConnectService


pytestmark = pytest.mark.django_db


def test_onboarding_creates_account_once(shop, vendor_user, fake_gateway):
    fake_gateway.create_connected_account.return_value = SimpleNamespace(id="acct_new")
    fake_gateway.create_account_link.return_value = "https://connect.stripe.com/setup/abc"

    result = ConnectService.start_onboarding(shop, vendor_user, gateway=fake_gateway)

    assert result == {"url": "https://connect.stripe.com/setup/abc"}
    shop.vendor.refresh_from_db()
    assert shop.vendor.stripe_connected_account_id == "acct_new"
    fake_gateway.create_account_link.assert_called_once_with(
        "acct_new",
        "http://localhost:3000/shop/vera-goods/settings?stripe_onboarding=refresh",
        "http://localhost:3000/shop/vera-goods/settings?stripe_onboarding=success",
    )

    ConnectService.start_onboarding(shop, vendor_user, return_path="/payouts", gateway=fake_gateway)
    assert fake_gateway.create_connected_account.call_count == 1
    assert fake_gateway.create_account_link.call_args.args[2] == (
        "http://localhost:3000/shop/vera-goods/payouts?stripe_onboarding=success"
    )


def test_status_without_account(vendor, fake_gateway):
    status = ConnectService.get_status(vendor, gateway=fake_gateway)

    assert status["is_connected"] is False
    assert status["account_id"] is None
    fake_gateway.get_account_status.assert_not_called()


def test_status_syncs_flags(vendor, fake_gateway):
    vendor.stripe_connected_account_id = "acct_1"
    vendor.save()
    fake_gateway.get_account_status.return_value = {
        "details_submitted": True,
        "charges_enabled": True,
        "payouts_enabled": True,
        "currently_due": ["external_account"],
    }

    status = ConnectService.get_status(vendor, gateway=fake_gateway)

    assert status["onboarding_complete"] is True
    assert status["requires_action"] is True
    vendor.refresh_from_db()
    assert vendor.stripe_charges_enabled is True
    assert vendor.can_receive_destination_charges is True


def test_status_falls_back_to_stored_flags(vendor, fake_gateway):
    vendor.stripe_connected_account_id = "acct_1"
    vendor.stripe_onboarding_complete = True
    vendor.save()
    fake_gateway.get_account_status.side_effect = PaymentGatewayError("down")

    status = ConnectService.get_status(vendor, gateway=fake_gateway)

    assert status["is_connected"] is True
    assert status["onboarding_complete"] is True
    assert status["requires_action"] is False


def test_dashboard_requires_completed_onboarding(vendor, fake_gateway):
    vendor.stripe_connected_account_id = "acct_1"
    vendor.save()

    with pytest.raises(BusinessLogicError) as excinfo:
        ConnectService.dashboard_link(vendor, gateway=fake_gateway)

    assert excinfo.value.detail["detail"] == "Please complete Stripe onboarding first"


def test_disconnect_clears_flags(vendor, fake_gateway):
    vendor.stripe_connected_account_id = "acct_1"
    vendor.stripe_charges_enabled = True
    vendor.save()

    assert ConnectService.disconnect(vendor, gateway=fake_gateway) == {"success": True}

    fake_gateway.delete_connected_account.assert_called_once_with("acct_1")
    vendor.refresh_from_db()
    assert vendor.stripe_connected_account_id == ""
    assert vendor.stripe_charges_enabled is False


def test_disconnect_without_account(vendor, fake_gateway):
    with pytest.raises(BusinessLogicError):
        ConnectService.disconnect(vendor, gateway=fake_gateway)


def test_status_endpoint(api_client, vendor_user, shop, fake_gateway):
    api_client.force_authenticate(vendor_user)
    with patch("payments.services.get_gateway", return_value=fake_gateway):
        response = api_client.get("/api/v1/vendor/shops/vera-goods/stripe-connect/status/")

    assert response.status_code == 200
    assert response.json()["is_connected"] is False


def test_connect_endpoints_are_shop_scoped(api_client, vendor_user, other_shop):
    api_client.force_authenticate(vendor_user)
    response = api_client.get("/api/v1/vendor/shops/other-shop/stripe-connect/status/")
    assert response.status_code == 403
