"""
Unit tests for the donor registration workflow and donation history.
"""

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from apps.core.exceptions import AlreadyDecided, NotAuthorized, NotFound, ValidationFailed
from apps.donors.models import Donation, DonorRegistration
from apps.donors.services import RegistrationWorkflow, validate_registration


class TestValidateRegistration:
    """Form checks before anything is stored."""

    def test_valid_form_is_cleaned(self, registration_data):
        registration_data["full_name"] = "  Dana   Donor "
        registration_data["email"] = "Dana@Example.com"

        cleaned = validate_registration(registration_data)

        assert cleaned["full_name"] == "Dana Donor"
        assert cleaned["email"] == "dana@example.com"
        assert cleaned["weight"] == Decimal("60")
        assert cleaned["date_of_birth"] == date(1990, 4, 12)
        assert cleaned["medications"] is None

    def test_weight_below_minimum(self, registration_data):
        registration_data["weight"] = 44

        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration(registration_data)

        assert list(exc_info.value.fields) == ["weight"]

    def test_weight_at_minimum(self, registration_data):
        registration_data["weight"] = 45
        assert validate_registration(registration_data)["weight"] == Decimal("45")

    def test_every_missing_field_reported(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration({})

        fields = exc_info.value.fields
        for field in ("full_name", "email", "phone", "blood_type", "date_of_birth", "gender", "weight", "address"):
            assert field in fields

    def test_bad_email_and_gender(self, registration_data):
        registration_data["email"] = "not-an-email"
        registration_data["gender"] = "unknown"

        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration(registration_data)

        assert set(exc_info.value.fields) == {"email", "gender"}

    def test_height_out_of_range(self, registration_data):
        registration_data["height"] = 230
        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration(registration_data)
        assert "height" in exc_info.value.fields

    def test_height_is_optional(self, registration_data):
        registration_data.pop("height")
        assert validate_registration(registration_data)["height"] is None

    def test_last_donation_in_future(self, registration_data):
        registration_data["last_donation_date"] = (date.today() + timedelta(days=3)).isoformat()
        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration(registration_data)
        assert "last_donation_date" in exc_info.value.fields

    def test_over_long_values_reported_per_field(self, registration_data):
        registration_data["phone"] = "9" * 500
        registration_data["full_name"] = "D" * 201

        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration(registration_data)

        assert set(exc_info.value.fields) == {"phone", "full_name"}

    def test_preferred_donation_time_choices(self, registration_data):
        registration_data["preferred_donation_time"] = "evening"
        assert validate_registration(registration_data)["preferred_donation_time"] == "evening"

        registration_data["preferred_donation_time"] = "midnight"
        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration(registration_data)
        assert list(exc_info.value.fields) == ["preferred_donation_time"]

    def test_blank_optional_fields_stored_as_none(self, registration_data):
        registration_data["height"] = ""
        registration_data["city"] = "   "
        registration_data["emergency_phone"] = None

        cleaned = validate_registration(registration_data)

        assert cleaned["height"] is None
        assert cleaned["city"] is None
        assert cleaned["emergency_phone"] is None

    def test_unknown_blood_type(self, registration_data):
        registration_data["blood_type"] = "o+"
        with pytest.raises(ValidationFailed) as exc_info:
            validate_registration(registration_data)
        assert list(exc_info.value.fields) == ["blood_type"]


@pytest.mark.django_db
class TestSubmit:

    def test_submit_starts_pending(self, donor_ctx, donor_profile, registration_data):
        registration_data["status"] = "approved"
        registration_data["approved_by"] = str(donor_profile.pk)

        registration = RegistrationWorkflow(donor_ctx).submit(registration_data)

        assert registration.status == "pending"
        assert registration.approved_by is None
        assert registration.approved_at is None
        assert registration.user_id == donor_profile.pk

    def test_invalid_form_stores_nothing(self, donor_ctx, registration_data):
        registration_data["weight"] = 44

        with pytest.raises(ValidationFailed):
            RegistrationWorkflow(donor_ctx).submit(registration_data)

        assert DonorRegistration.objects.count() == 0

    def test_public_cannot_submit(self, public_ctx, registration_data):
        with pytest.raises(NotAuthorized):
            RegistrationWorkflow(public_ctx).submit(registration_data)

    def test_anonymous_cannot_submit(self, anonymous_ctx, registration_data):
        with pytest.raises(NotAuthorized):
            RegistrationWorkflow(anonymous_ctx).submit(registration_data)


@pytest.mark.django_db
class TestDecide:
    """Approve / reject decisions."""

    @pytest.fixture
    def registration(self, donor_ctx, registration_data):
        return RegistrationWorkflow(donor_ctx).submit(registration_data)

    def test_approve(self, admin_ctx, admin_profile, registration, donor_profile):
        decided = RegistrationWorkflow(admin_ctx).decide(registration.id, approve=True)

        assert decided.status == "approved"
        assert decided.approved_by == admin_profile.pk
        assert decided.approved_at is not None
        # role and donation counters are not touched by a decision
        donor_profile.refresh_from_db()
        assert donor_profile.role == "donor"
        assert donor_profile.total_donations == 0

    def test_reject(self, admin_ctx, registration):
        decided = RegistrationWorkflow(admin_ctx).decide(registration.id, approve=False)
        assert decided.status == "rejected"

    def test_second_decision_fails(self, admin_ctx, registration):
        workflow = RegistrationWorkflow(admin_ctx)
        workflow.decide(registration.id, approve=True)

        with pytest.raises(AlreadyDecided):
            workflow.decide(registration.id, approve=False)

        registration.refresh_from_db()
        assert registration.status == "approved"

    def test_race_lost_between_read_and_update(self, admin_ctx, registration):
        workflow = RegistrationWorkflow(admin_ctx)
        stale = DonorRegistration.objects.get(pk=registration.pk)
        DonorRegistration.objects.filter(pk=registration.pk).update(status="rejected")

        with patch.object(workflow, "_get_any", return_value=stale):
            with pytest.raises(AlreadyDecided):
                workflow.decide(registration.id, approve=True)

        registration.refresh_from_db()
        assert registration.status == "rejected"

    def test_inactive_registration_cannot_be_decided(self, admin_ctx, registration):
        DonorRegistration.objects.filter(pk=registration.pk).update(status="inactive")

        with pytest.raises(AlreadyDecided):
            RegistrationWorkflow(admin_ctx).decide(registration.id, approve=True)

        registration.refresh_from_db()
        assert registration.status == "inactive"

    def test_non_admin_cannot_decide(self, donor_ctx, registration):
        with pytest.raises(NotAuthorized):
            RegistrationWorkflow(donor_ctx).decide(registration.id, approve=True)

        registration.refresh_from_db()
        assert registration.status == "pending"

    def test_admin_id_must_be_caller(self, admin_ctx, registration, donor_profile):
        with pytest.raises(NotAuthorized):
            RegistrationWorkflow(admin_ctx).decide(
                registration.id, approve=True, admin_id=donor_profile.pk
            )

    def test_unknown_registration(self, admin_ctx):
        with pytest.raises(NotFound):
            RegistrationWorkflow(admin_ctx).decide("00000000-0000-0000-0000-000000000000", approve=True)

    def test_malformed_id(self, admin_ctx):
        with pytest.raises(NotFound):
            RegistrationWorkflow(admin_ctx).decide("abc", approve=True)

    def test_decision_email_sent(self, admin_ctx, registration, mailoutbox):
        RegistrationWorkflow(admin_ctx).decide(registration.id, approve=True)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["dana@example.com"]
        assert "approved" in mailoutbox[0].subject

    def test_broker_failure_does_not_fail_decision(self, admin_ctx, registration):
        with patch(
            "apps.donors.services.send_registration_decision_email.delay",
            side_effect=ConnectionError("broker down"),
        ):
            decided = RegistrationWorkflow(admin_ctx).decide(registration.id, approve=True)

        assert decided.status == "approved"


@pytest.mark.django_db
class TestListing:
    """Pending queue and visibility."""

    def test_list_pending_newest_first_and_limited(self, admin_ctx, donor_ctx, registration_data):
        workflow = RegistrationWorkflow(donor_ctx)
        created = [workflow.submit(registration_data) for _ in range(3)]

        pending = RegistrationWorkflow(admin_ctx).list_pending(limit=2)

        assert len(pending) == 2
        assert pending[0].created_at >= pending[1].created_at
        assert {r.pk for r in pending} <= {r.pk for r in created}

    def test_list_pending_excludes_decided(self, admin_ctx, donor_ctx, registration_data):
        registration = RegistrationWorkflow(donor_ctx).submit(registration_data)
        RegistrationWorkflow(admin_ctx).decide(registration.id, approve=False)

        assert RegistrationWorkflow(admin_ctx).list_pending() == []

    def test_list_pending_admin_only(self, donor_ctx):
        with pytest.raises(NotAuthorized):
            RegistrationWorkflow(donor_ctx).list_pending()

    def test_donor_sees_only_own(self, make_profile, make_ctx, admin_ctx, donor_ctx, registration_data):
        RegistrationWorkflow(donor_ctx).submit(registration_data)
        other_ctx = make_ctx(make_profile("donor"))
        RegistrationWorkflow(other_ctx).submit(registration_data)

        assert RegistrationWorkflow(donor_ctx).list_visible().count() == 1
        assert RegistrationWorkflow(admin_ctx).list_visible().count() == 2

    def test_get_hides_other_donors_registration(self, make_profile, make_ctx, donor_ctx, registration_data):
        other_ctx = make_ctx(make_profile("donor"))
        registration = RegistrationWorkflow(other_ctx).submit(registration_data)

        with pytest.raises(NotFound):
            RegistrationWorkflow(donor_ctx).get(registration.id)

    def test_status_filter(self, admin_ctx, donor_ctx, registration_data):
        workflow = RegistrationWorkflow(donor_ctx)
        first = workflow.submit(registration_data)
        workflow.submit(registration_data)
        RegistrationWorkflow(admin_ctx).decide(first.id, approve=True)

        admin_workflow = RegistrationWorkflow(admin_ctx)
        assert admin_workflow.list_visible(status="approved").count() == 1
        assert admin_workflow.list_visible(status="pending").count() == 1
        assert admin_workflow.list_visible(status="all").count() == 2

    def test_anonymous_sees_nothing(self, anonymous_ctx):
        assert RegistrationWorkflow(anonymous_ctx).list_visible().count() == 0


@pytest.mark.django_db
class TestDonationHistory:

    @pytest.fixture
    def donations(self, donor_profile, make_profile):
        other = make_profile("donor", full_name="Olly Other")
        return [
            Donation.objects.create(
                donor_id=donor_profile.pk,
                donation_date=date(2026, 1, 10),
                blood_type="O+",
                status="completed",
                location="Central Clinic",
            ),
            Donation.objects.create(
                donor_id=donor_profile.pk,
                donation_date=date(2026, 3, 5),
                blood_type="O+",
                status="scheduled",
                location="Mobile Unit",
            ),
            Donation.objects.create(
                donor_id=other.pk,
                donation_date=date(2026, 2, 1),
                blood_type="AB-",
                status="completed",
                location="Central Clinic",
            ),
        ]

    def test_donor_sees_own_newest_first(self, donor_ctx, donations):
        history = list(RegistrationWorkflow(donor_ctx).list_donations())
        assert [d.pk for d in history] == [donations[1].pk, donations[0].pk]

    def test_admin_sees_all(self, admin_ctx, donations):
        assert RegistrationWorkflow(admin_ctx).list_donations().count() == 3

    def test_status_filter(self, admin_ctx, donations):
        workflow = RegistrationWorkflow(admin_ctx)
        assert workflow.list_donations(status="completed").count() == 2
        assert workflow.list_donations(status="all").count() == 3

    def test_search_by_donor_name_and_location(self, admin_ctx, donations):
        workflow = RegistrationWorkflow(admin_ctx)
        assert workflow.list_donations(search="olly").count() == 1
        assert workflow.list_donations(search="mobile").count() == 1
        assert workflow.list_donations(search="AB-").count() == 1
