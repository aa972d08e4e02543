"""
Unit tests for management commands.
"""

from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.accounts.models import Principal, Profile
from apps.stock.models import BloodStockEntry


@pytest.mark.django_db
class TestCreateAdmin:

    def test_creates_admin_profile(self):
        call_command(
            "create_admin",
            "--email", "Root@Example.com",
            "--password", "Blood-bank-2024",
            "--full-name", "Root Admin",
            stdout=StringIO(),
        )

        principal = Principal.objects.get(email="root@example.com")
        assert principal.is_superuser
        assert principal.is_staff
        assert Profile.objects.get(pk=principal.pk).role == "admin"

    def test_existing_email_fails(self, donor_profile):
        with pytest.raises(CommandError):
            call_command(
                "create_admin",
                "--email", "donor@example.com",
                "--password", "Blood-bank-2024",
                stdout=StringIO(),
            )
        assert Profile.objects.get(pk=donor_profile.pk).role == "donor"


@pytest.mark.django_db
class TestSeedBloodStock:

    def test_creates_eight_rows(self):
        call_command("seed_blood_stock", "--quantity", "5", stdout=StringIO())

        assert BloodStockEntry.objects.count() == 8
        assert set(BloodStockEntry.objects.values_list("quantity", flat=True)) == {5}

    def test_existing_rows_untouched(self):
        BloodStockEntry.objects.create(blood_type="O-", quantity=40)

        out = StringIO()
        call_command("seed_blood_stock", stdout=out)

        assert BloodStockEntry.objects.count() == 8
        assert BloodStockEntry.objects.get(blood_type="O-").quantity == 40
        assert "Created 7 entries" in out.getvalue()
