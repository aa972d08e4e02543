"""
Create one stock entry per blood type.
Usage: python manage.py seed_blood_stock [--quantity 0]
"""

from django.core.management.base import BaseCommand

from apps.core.validators import BLOOD_TYPES
from apps.stock.models import BloodStockEntry


class Command(BaseCommand):
    help = "Create the 8 blood stock rows (existing rows are left untouched)"

    def add_arguments(self, parser):
        parser.add_argument("--quantity", type=int, default=0)
        parser.add_argument("--location", default=None)

    def handle(self, *args, **options):
        self.stdout.write("Seeding blood stock...")

        created = 0
        for blood_type in BLOOD_TYPES:
            _, was_created = BloodStockEntry.objects.get_or_create(
                blood_type=blood_type,
                defaults={
                    "quantity": max(options["quantity"], 0),
                    "location": options["location"],
                },
            )
            created += int(was_created)

        self.stdout.write(
            self.style.SUCCESS(f"  Created {created} entries ({len(BLOOD_TYPES) - created} already present)")
        )
