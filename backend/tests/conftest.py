"""
Pytest configuration and fixtures.
"""

import pytest
from django.conf import settings
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from apps.accounts.context import AuthContext
from apps.accounts.models import Principal, Profile
from apps.core.validators import BLOOD_TYPES
from apps.hospitals.models import HospitalRecord
from apps.stock.models import BloodStockEntry

from tests.factories import PASSWORD, blood_request_form, registration_form


@pytest.fixture
def make_profile(db):
    """Factory: create a principal and its profile with the given role."""

    def _make(role="public", email=None, full_name=None, **fields):
        email = email or f"{role}-{Principal.objects.count() + 1}@example.com"
        principal = Principal.objects.create_user(email=email, password=PASSWORD)
        return Profile.objects.create(
            principal=principal,
            email=email,
            full_name=full_name or f"{role.capitalize()} User",
            role=role,
            **fields,
        )

    return _make


@pytest.fixture
def admin_profile(make_profile):
    return make_profile("admin", email="admin@example.com", full_name="Admin User")


@pytest.fixture
def donor_profile(make_profile):
    return make_profile("donor", email="donor@example.com", full_name="Dana Donor", blood_type="O+")


@pytest.fixture
def hospital_profile(make_profile):
    return make_profile("hospital", email="hospital@example.com", full_name="City Hospital Desk")


@pytest.fixture
def public_profile(make_profile):
    return make_profile("public", email="public@example.com", full_name="Pat Public")


@pytest.fixture
def make_ctx(db):
    """Factory: a signed-in AuthContext for a profile."""
    contexts = []

    def _make(profile):
        ctx = AuthContext.anonymous()
        ctx.sign_in(profile.email, PASSWORD)
        contexts.append(ctx)
        return ctx

    yield _make
    for ctx in contexts:
        ctx.close()


@pytest.fixture
def admin_ctx(make_ctx, admin_profile):
    return make_ctx(admin_profile)


@pytest.fixture
def donor_ctx(make_ctx, donor_profile):
    return make_ctx(donor_profile)


@pytest.fixture
def hospital_ctx(make_ctx, hospital_profile):
    return make_ctx(hospital_profile)


@pytest.fixture
def public_ctx(make_ctx, public_profile):
    return make_ctx(public_profile)


@pytest.fixture
def anonymous_ctx(db):
    ctx = AuthContext.anonymous()
    yield ctx
    ctx.close()


@pytest.fixture
def api_client():
    """API client carrying the public client key, not signed in."""
    client = APIClient()
    client.credentials(HTTP_APIKEY=settings.STORE_ANON_KEY)
    return client


@pytest.fixture
def client_for(db):
    """Factory: API client signed in as ``profile``."""

    def _make(profile):
        token, _ = Token.objects.get_or_create(user=profile.principal)
        client = APIClient()
        client.credentials(
            HTTP_APIKEY=settings.STORE_ANON_KEY,
            HTTP_AUTHORIZATION=f"Bearer {token.key}",
        )
        return client

    return _make


@pytest.fixture
def stock(db):
    """One entry per blood type with 20 units, 2 of them reserved."""
    return {
        blood_type: BloodStockEntry.objects.create(
            blood_type=blood_type,
            quantity=20,
            reserved_quantity=2,
            status="sufficient",
        )
        for blood_type in BLOOD_TYPES
    }


@pytest.fixture
def hospital(db):
    return HospitalRecord.objects.create(
        name="General Hospital",
        address="1 Main Street",
        city="Springfield",
    )


@pytest.fixture
def registration_data():
    return registration_form()


@pytest.fixture
def blood_request_data():
    return blood_request_form()
