from types import SimpleNamespace

import pytest
from django.contrib.auth.models import AnonymousUser

from core.api import IsAdmin, IsVendorOrAdmin


def _request(user):
    return SimpleNamespace(user=user)


def _user(role):
    return SimpleNamespace(is_authenticated=True, role=role)


@pytest.mark.parametrize(
    "role, admin_allowed, vendor_allowed",
    [
        ("ADMIN", True, True),
        ("VENDOR", False, True),
        ("CUSTOMER", False, False),
    ],
)
def test_roles(role, admin_allowed, vendor_allowed):
    request = _request(_user(role))
    assert IsAdmin().has_permission(request, None) is admin_allowed
    assert IsVendorOrAdmin().has_permission(request, None) is vendor_allowed


def test_anonymous_is_rejected():
    request = _request(AnonymousUser())
    assert IsAdmin().has_permission(request, None) is False
    assert IsVendorOrAdmin().has_permission(request, None) is False
