import uuid

from django.db import migrations, models

BLOOD_TYPE_CHOICES = [
    ("A+", "A+"),
    ("A-", "A-"),
    ("B+", "B+"),
    ("B-", "B-"),
    ("AB+", "AB+"),
    ("AB-", "AB-"),
    ("O+", "O+"),
    ("O-", "O-"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DonorRegistration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("full_name", models.CharField(max_length=200)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(max_length=30)),
                ("blood_type", models.CharField(choices=BLOOD_TYPE_CHOICES, max_length=3)),
                ("date_of_birth", models.DateField()),
                ("gender", models.CharField(choices=[("male", "Male"), ("female", "Female")], max_length=10)),
                ("weight", models.DecimalField(decimal_places=1, max_digits=5)),
                ("height", models.DecimalField(blank=True, decimal_places=1, max_digits=5, null=True)),
                ("address", models.TextField()),
                ("city", models.CharField(blank=True, max_length=100, null=True)),
                ("medical_conditions", models.TextField(blank=True, null=True)),
                ("medications", models.TextField(blank=True, null=True)),
                ("last_donation_date", models.DateField(blank=True, null=True)),
                ("is_eligible", models.BooleanField(default=True)),
                ("eligibility_notes", models.TextField(blank=True, null=True)),
                ("preferred_donation_time", models.CharField(blank=True, max_length=50, null=True)),
                ("emergency_contact", models.CharField(blank=True, max_length=200, null=True)),
                ("emergency_phone", models.CharField(blank=True, max_length=30, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("inactive", "Inactive"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("approved_by", models.UUIDField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "donor_registrations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="donor_reg_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Donation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("donor_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("donation_date", models.DateField()),
                ("blood_type", models.CharField(choices=BLOOD_TYPE_CHOICES, max_length=3)),
                ("quantity", models.PositiveIntegerField(default=1)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("postponed", "Postponed"),
                        ],
                        default="scheduled",
                        max_length=20,
                    ),
                ),
                ("location", models.CharField(blank=True, default="", max_length=200)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "donations",
                "ordering": ["-donation_date"],
            },
        ),
    ]
