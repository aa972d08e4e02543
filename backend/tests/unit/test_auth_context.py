"""
Unit tests for AuthContext: sign-up, own profile updates and the gate.
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError
from rest_framework.authtoken.models import Token

from apps.accounts.context import AuthContext
from apps.accounts.models import Principal, Profile
from apps.core.exceptions import EmailInUse, NotAuthorized, ValidationFailed
from apps.core.gate import Action, Resource
from apps.hospitals.models import HospitalRecord
from tests.factories import PASSWORD


@pytest.mark.django_db
class TestSignUp:
    """Principal, profile and hospital record creation."""

    def test_donor_sign_up_signs_in(self, anonymous_ctx):
        profile = anonymous_ctx.sign_up(
            "new.donor@example.com",
            PASSWORD,
            "  New   Donor ",
            role="donor",
            blood_type="B-",
        )

        assert profile.role == "donor"
        assert profile.full_name == "New Donor"
        assert profile.blood_type == "B-"
        assert anonymous_ctx.is_authenticated
        assert anonymous_ctx.profile == profile

    def test_hospital_sign_up_creates_hospital_record(self, anonymous_ctx):
        profile = anonymous_ctx.sign_up(
            "desk@cityhospital.example.com",
            PASSWORD,
            "City Desk",
            role="hospital",
            hospital_name="City Hospital",
            hospital_address="5 Harbour Road",
        )

        assert profile.role == "hospital"
        hospital = HospitalRecord.objects.get(name="City Hospital")
        assert hospital.address == "5 Harbour Road"
        assert hospital.email == "desk@cityhospital.example.com"
        assert hospital.contact_person == "City Desk"

    def test_hospital_record_failure_keeps_account(self, anonymous_ctx):
        with patch.object(
            HospitalRecord.objects, "create", side_effect=DatabaseError("insert failed")
        ):
            profile = anonymous_ctx.sign_up(
                "desk2@example.com",
                PASSWORD,
                "Second Desk",
                role="hospital",
                hospital_name="Harbour Hospital",
            )

        assert profile.role == "hospital"
        assert anonymous_ctx.is_authenticated
        assert not HospitalRecord.objects.filter(name="Harbour Hospital").exists()

    def test_sign_up_loads_profile_once(self, anonymous_ctx):
        loaded = []
        anonymous_ctx.profiles.on_profile_change(loaded.append)

        anonymous_ctx.sign_up("once@example.com", PASSWORD, "Once Only", role="donor")

        assert len(loaded) == 1

    def test_default_role_is_public(self, anonymous_ctx):
        profile = anonymous_ctx.sign_up("visitor@example.com", PASSWORD, "Visitor")
        assert profile.role == "public"

    def test_admin_role_rejected(self, anonymous_ctx):
        with pytest.raises(ValidationFailed) as exc_info:
            anonymous_ctx.sign_up("boss@example.com", PASSWORD, "Boss", role="admin")

        assert "role" in exc_info.value.fields
        assert not Principal.objects.filter(email="boss@example.com").exists()

    def test_missing_full_name_writes_nothing(self, anonymous_ctx):
        with pytest.raises(ValidationFailed) as exc_info:
            anonymous_ctx.sign_up("nameless@example.com", PASSWORD, "   ")

        assert "full_name" in exc_info.value.fields
        assert not Principal.objects.filter(email="nameless@example.com").exists()

    def test_over_long_full_name_writes_nothing(self, anonymous_ctx):
        with pytest.raises(ValidationFailed) as exc_info:
            anonymous_ctx.sign_up("long@example.com", PASSWORD, "N" * 201, role="donor")

        assert list(exc_info.value.fields) == ["full_name"]
        assert not Principal.objects.filter(email="long@example.com").exists()

    def test_invalid_blood_type_rejected(self, anonymous_ctx):
        with pytest.raises(ValidationFailed) as exc_info:
            anonymous_ctx.sign_up(
                "typo@example.com", PASSWORD, "Typo", role="donor", blood_type="Z+"
            )
        assert "blood_type" in exc_info.value.fields

    def test_existing_email_rejected(self, anonymous_ctx, donor_profile):
        with pytest.raises(EmailInUse):
            anonymous_ctx.sign_up("donor@example.com", PASSWORD, "Copy Cat", role="donor")

        assert Profile.objects.filter(email="donor@example.com").count() == 1
        assert not anonymous_ctx.is_authenticated


@pytest.mark.django_db
class TestSessionLifecycle:

    def test_from_token(self, donor_profile):
        token, _ = Token.objects.get_or_create(user=donor_profile.principal)

        ctx = AuthContext.from_token(token.key)
        try:
            assert ctx.principal_id == donor_profile.pk
            assert ctx.profile == donor_profile
        finally:
            ctx.close()

    def test_from_invalid_token(self, db):
        assert AuthContext.from_token("0" * 40) is None

    def test_sign_out(self, donor_ctx):
        donor_ctx.sign_out()
        assert not donor_ctx.is_authenticated
        assert donor_ctx.profile is None
        assert not donor_ctx.can(Resource.BLOOD_STOCK, Action.READ)


@pytest.mark.django_db
class TestOwnProfile:
    """Self-service profile updates."""

    def test_update_own_fields(self, donor_ctx, donor_profile):
        profile = donor_ctx.update_profile({"phone": "555-0102", "city": "Shelbyville"})

        assert profile.phone == "555-0102"
        assert profile.city == "Shelbyville"
        assert donor_ctx.profile.city == "Shelbyville"
        donor_profile.refresh_from_db()
        assert donor_profile.phone == "555-0102"

    def test_role_cannot_be_self_assigned(self, donor_ctx, donor_profile):
        with pytest.raises(NotAuthorized):
            donor_ctx.update_profile({"role": "admin"})

        donor_profile.refresh_from_db()
        assert donor_profile.role == "donor"

    def test_unknown_field_rejected(self, donor_ctx):
        with pytest.raises(ValidationFailed) as exc_info:
            donor_ctx.update_profile({"favourite_colour": "red"})
        assert "favourite_colour" in exc_info.value.fields

    def test_invalid_avatar_url_rejected(self, donor_ctx, donor_profile):
        with pytest.raises(ValidationFailed) as exc_info:
            donor_ctx.update_profile({"avatar_url": "not a url"})

        assert list(exc_info.value.fields) == ["avatar_url"]
        donor_profile.refresh_from_db()
        assert donor_profile.avatar_url is None

    def test_over_long_phone_rejected(self, donor_ctx):
        with pytest.raises(ValidationFailed) as exc_info:
            donor_ctx.update_profile({"phone": "5" * 31})
        assert list(exc_info.value.fields) == ["phone"]

    def test_blank_value_clears_field(self, donor_ctx, donor_profile):
        donor_ctx.update_profile({"city": "Shelbyville"})

        profile = donor_ctx.update_profile({"city": ""})

        assert profile.city is None
        donor_profile.refresh_from_db()
        assert donor_profile.blood_type == "O+"

    def test_blank_full_name_rejected(self, donor_ctx):
        with pytest.raises(ValidationFailed):
            donor_ctx.update_profile({"full_name": " "})

    def test_public_user_cannot_update(self, public_ctx):
        with pytest.raises(NotAuthorized):
            public_ctx.update_profile({"phone": "555-0000"})

    def test_anonymous_cannot_update(self, anonymous_ctx):
        with pytest.raises(NotAuthorized):
            anonymous_ctx.update_profile({"phone": "555-0000"})


@pytest.mark.django_db
class TestRequire:

    def test_require_passes_for_allowed(self, admin_ctx):
        admin_ctx.require(Resource.BLOOD_STOCK, Action.UPDATE)

    def test_require_raises_for_denied(self, donor_ctx):
        with pytest.raises(NotAuthorized):
            donor_ctx.require(Resource.BLOOD_STOCK, Action.UPDATE)
