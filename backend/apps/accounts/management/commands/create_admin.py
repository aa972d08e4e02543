"""
Create an administrator account.
Usage: python manage.py create_admin --email admin@example.com --password ... --full-name "Admin"
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.accounts.models import Principal, Profile
from apps.core.gate import Role


class Command(BaseCommand):
    help = "Create a principal with an admin profile (and Django admin access)"

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", required=True)
        parser.add_argument("--full-name", default="Administrator")

    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        if Principal.objects.filter(email__iexact=email).exists():
            raise CommandError(f"A principal with email {email} already exists")

        with transaction.atomic():
            principal = Principal.objects.create_superuser(
                email=email, password=options["password"]
            )
            Profile.objects.create(
                principal=principal,
                email=email,
                full_name=options["full_name"],
                role=Role.ADMIN.value,
            )

        self.stdout.write(self.style.SUCCESS(f"Admin {email} created"))
