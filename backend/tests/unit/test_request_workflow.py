"""
Unit tests for the blood request workflow.
"""

from datetime import date, timedelta

import pytest

from apps.blood_requests.models import BloodRequest
from apps.blood_requests.services import RequestWorkflow, validate_request
from apps.core.exceptions import (
    InvalidQuantity,
    InvalidTransition,
    NotAuthorized,
    NotFound,
    ValidationFailed,
)
from apps.stock.models import BloodStockEntry


class TestValidateRequest:
    """Form checks for a new blood request."""

    @pytest.mark.parametrize("quantity", [0, 11, -1, "lots"])
    def test_quantity_out_of_range(self, blood_request_data, quantity):
        blood_request_data["quantity"] = quantity

        with pytest.raises(ValidationFailed) as exc_info:
            validate_request(blood_request_data)

        assert "quantity" in exc_info.value.fields

    def test_quantity_upper_bound_accepted(self, blood_request_data):
        blood_request_data["quantity"] = 10
        assert validate_request(blood_request_data)["quantity"] == 10

    def test_past_required_date(self, blood_request_data):
        blood_request_data["required_date"] = (date.today() - timedelta(days=1)).isoformat()
        with pytest.raises(ValidationFailed) as exc_info:
            validate_request(blood_request_data)
        assert "required_date" in exc_info.value.fields

    def test_hospital_required(self, blood_request_data):
        blood_request_data.pop("hospital_name")
        with pytest.raises(ValidationFailed) as exc_info:
            validate_request(blood_request_data)
        assert "hospital_name" in exc_info.value.fields

    def test_malformed_hospital_id(self, blood_request_data):
        blood_request_data["hospital_id"] = "general"
        with pytest.raises(ValidationFailed) as exc_info:
            validate_request(blood_request_data)
        assert "hospital_id" in exc_info.value.fields

    def test_default_urgency(self, blood_request_data):
        blood_request_data.pop("urgency")
        assert validate_request(blood_request_data)["urgency"] == "normal"

    def test_unknown_urgency(self, blood_request_data):
        blood_request_data["urgency"] = "whenever"
        with pytest.raises(ValidationFailed):
            validate_request(blood_request_data)

    def test_over_long_values_reported_per_field(self, blood_request_data):
        blood_request_data["contact_phone"] = "9" * 500
        blood_request_data["patient_name"] = "P" * 201

        with pytest.raises(ValidationFailed) as exc_info:
            validate_request(blood_request_data)

        assert set(exc_info.value.fields) == {"contact_phone", "patient_name"}

    def test_blank_optional_text_is_none(self, blood_request_data):
        blood_request_data["medical_reason"] = "  "
        blood_request_data["urgency"] = ""

        cleaned = validate_request(blood_request_data)

        assert cleaned["medical_reason"] is None
        assert cleaned["notes"] is None
        assert cleaned["hospital_id"] is None
        assert cleaned["urgency"] == "normal"


@pytest.mark.django_db
class TestSubmit:

    def test_submit_free_text_hospital(self, hospital_ctx, hospital_profile, blood_request_data):
        blood_request = RequestWorkflow(hospital_ctx).submit(blood_request_data)

        assert blood_request.status == "pending"
        assert blood_request.fulfilled_quantity == 0
        assert blood_request.hospital_id is None
        assert blood_request.hospital_name == "County Clinic"
        assert blood_request.requester_id == hospital_profile.pk

    def test_submit_with_hospital_id_copies_name(self, donor_ctx, hospital, blood_request_data):
        blood_request_data["hospital_id"] = str(hospital.pk)
        blood_request_data["hospital_name"] = "Something Else"

        blood_request = RequestWorkflow(donor_ctx).submit(blood_request_data)

        assert blood_request.hospital_id == hospital.pk
        assert blood_request.hospital_name == "General Hospital"

    def test_inactive_hospital_rejected(self, donor_ctx, hospital, blood_request_data):
        hospital.is_active = False
        hospital.save()
        blood_request_data["hospital_id"] = str(hospital.pk)

        with pytest.raises(ValidationFailed) as exc_info:
            RequestWorkflow(donor_ctx).submit(blood_request_data)

        assert "hospital_id" in exc_info.value.fields
        assert BloodRequest.objects.count() == 0

    def test_public_cannot_submit(self, public_ctx, blood_request_data):
        with pytest.raises(NotAuthorized):
            RequestWorkflow(public_ctx).submit(blood_request_data)


@pytest.mark.django_db
class TestTransitions:
    """approve / reject / cancel."""

    @pytest.fixture
    def blood_request(self, hospital_ctx, blood_request_data):
        return RequestWorkflow(hospital_ctx).submit(blood_request_data)

    def test_approve(self, admin_ctx, blood_request):
        assert RequestWorkflow(admin_ctx).decide(blood_request.id, approve=True).status == "approved"

    def test_reject_cancels(self, admin_ctx, blood_request):
        assert RequestWorkflow(admin_ctx).decide(blood_request.id, approve=False).status == "cancelled"

    def test_decide_twice_fails(self, admin_ctx, blood_request):
        workflow = RequestWorkflow(admin_ctx)
        workflow.decide(blood_request.id, approve=True)

        with pytest.raises(InvalidTransition):
            workflow.decide(blood_request.id, approve=False)

        blood_request.refresh_from_db()
        assert blood_request.status == "approved"

    def test_cancel_approved(self, admin_ctx, blood_request):
        workflow = RequestWorkflow(admin_ctx)
        workflow.decide(blood_request.id, approve=True)
        assert workflow.cancel(blood_request.id).status == "cancelled"

    def test_cancel_pending_fails(self, admin_ctx, blood_request):
        with pytest.raises(InvalidTransition):
            RequestWorkflow(admin_ctx).cancel(blood_request.id)

    def test_cancelled_is_terminal(self, admin_ctx, blood_request, stock):
        workflow = RequestWorkflow(admin_ctx)
        workflow.decide(blood_request.id, approve=False)

        with pytest.raises(InvalidTransition):
            workflow.fulfill(blood_request.id, 1)

    def test_requester_cannot_decide(self, hospital_ctx, blood_request):
        with pytest.raises(NotAuthorized):
            RequestWorkflow(hospital_ctx).decide(blood_request.id, approve=True)

    def test_unknown_request(self, admin_ctx):
        with pytest.raises(NotFound):
            RequestWorkflow(admin_ctx).decide("00000000-0000-0000-0000-000000000000", approve=True)

    def test_status_email_sent_to_requester(self, admin_ctx, blood_request, mailoutbox):
        RequestWorkflow(admin_ctx).decide(blood_request.id, approve=True)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["hospital@example.com"]
        assert mailoutbox[0].subject == "Blood request approved"


@pytest.mark.django_db
class TestFulfill:
    """Fulfillment and the stock it consumes."""

    @pytest.fixture
    def approved(self, admin_ctx, hospital_ctx, blood_request_data):
        blood_request = RequestWorkflow(hospital_ctx).submit(blood_request_data)
        return RequestWorkflow(admin_ctx).decide(blood_request.id, approve=True)

    def test_fulfill_decrements_stock(self, admin_ctx, admin_profile, approved, stock):
        fulfilled = RequestWorkflow(admin_ctx).fulfill(approved.id, 3, notes="Courier 7")

        assert fulfilled.status == "fulfilled"
        assert fulfilled.fulfilled_quantity == 3
        assert fulfilled.fulfilled_by == admin_profile.pk
        assert fulfilled.fulfilled_date is not None
        assert fulfilled.notes == "Courier 7"
        entry = BloodStockEntry.objects.get(blood_type="A+")
        assert entry.quantity == 17
        assert entry.reserved_quantity == 2

    def test_partial_fulfillment(self, admin_ctx, approved, stock):
        fulfilled = RequestWorkflow(admin_ctx).fulfill(approved.id, "1")
        assert fulfilled.fulfilled_quantity == 1
        assert BloodStockEntry.objects.get(blood_type="A+").quantity == 19

    @pytest.mark.parametrize("units", [0, 4, -2, "two", True])
    def test_invalid_units(self, admin_ctx, approved, stock, units):
        with pytest.raises(InvalidQuantity):
            RequestWorkflow(admin_ctx).fulfill(approved.id, units)

        approved.refresh_from_db()
        assert approved.status == "approved"
        assert BloodStockEntry.objects.get(blood_type="A+").quantity == 20

    def test_insufficient_stock(self, admin_ctx, approved, stock):
        BloodStockEntry.objects.filter(blood_type="A+").update(quantity=4, reserved_quantity=2)

        with pytest.raises(InvalidQuantity):
            RequestWorkflow(admin_ctx).fulfill(approved.id, 3)

        approved.refresh_from_db()
        assert approved.status == "approved"
        assert BloodStockEntry.objects.get(blood_type="A+").quantity == 4

    def test_missing_stock_entry(self, admin_ctx, approved):
        with pytest.raises(NotFound):
            RequestWorkflow(admin_ctx).fulfill(approved.id, 1)

        approved.refresh_from_db()
        assert approved.status == "approved"

    def test_pending_cannot_be_fulfilled(self, admin_ctx, hospital_ctx, blood_request_data, stock):
        blood_request = RequestWorkflow(hospital_ctx).submit(blood_request_data)

        with pytest.raises(InvalidTransition):
            RequestWorkflow(admin_ctx).fulfill(blood_request.id, 1)

    def test_fulfill_twice_fails(self, admin_ctx, approved, stock):
        workflow = RequestWorkflow(admin_ctx)
        workflow.fulfill(approved.id, 3)

        with pytest.raises(InvalidTransition):
            workflow.fulfill(approved.id, 1)
        assert BloodStockEntry.objects.get(blood_type="A+").quantity == 17

    def test_non_admin_cannot_fulfill(self, hospital_ctx, approved, stock):
        with pytest.raises(NotAuthorized):
            RequestWorkflow(hospital_ctx).fulfill(approved.id, 1)


@pytest.mark.django_db
class TestListing:

    def test_active_excludes_finished(self, admin_ctx, hospital_ctx, blood_request_data, stock):
        submitter = RequestWorkflow(hospital_ctx)
        admin = RequestWorkflow(admin_ctx)
        pending = submitter.submit(blood_request_data)
        approved = admin.decide(submitter.submit(blood_request_data).id, approve=True)
        cancelled = admin.decide(submitter.submit(blood_request_data).id, approve=False)
        fulfilled = admin.fulfill(admin.decide(submitter.submit(blood_request_data).id, approve=True).id, 1)

        active_ids = {r.pk for r in admin.list_active()}

        assert active_ids == {pending.pk, approved.pk}
        assert cancelled.pk not in active_ids
        assert fulfilled.pk not in active_ids

    def test_active_admin_only(self, hospital_ctx):
        with pytest.raises(NotAuthorized):
            RequestWorkflow(hospital_ctx).list_active()

    def test_requester_sees_only_own(self, hospital_ctx, donor_ctx, admin_ctx, blood_request_data):
        RequestWorkflow(hospital_ctx).submit(blood_request_data)
        mine = RequestWorkflow(donor_ctx).submit(blood_request_data)

        assert [r.pk for r in RequestWorkflow(donor_ctx).list_visible()] == [mine.pk]
        assert RequestWorkflow(admin_ctx).list_visible().count() == 2

    def test_get_other_requesters_request(self, hospital_ctx, donor_ctx, blood_request_data):
        theirs = RequestWorkflow(hospital_ctx).submit(blood_request_data)
        with pytest.raises(NotFound):
            RequestWorkflow(donor_ctx).get(theirs.id)

    def test_status_filter(self, admin_ctx, hospital_ctx, blood_request_data):
        submitted = RequestWorkflow(hospital_ctx).submit(blood_request_data)
        RequestWorkflow(admin_ctx).decide(submitted.id, approve=True)

        workflow = RequestWorkflow(admin_ctx)
        assert workflow.list_visible(status="approved").count() == 1
        assert workflow.list_visible(status="pending").count() == 0
        assert workflow.list_visible(status="all").count() == 1
