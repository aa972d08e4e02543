import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BloodRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("requester_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("patient_name", models.CharField(max_length=200)),
                (
                    "blood_type",
                    models.CharField(
                        choices=[
                            ("A+", "A+"),
                            ("A-", "A-"),
                            ("B+", "B+"),
                            ("B-", "B-"),
                            ("AB+", "AB+"),
                            ("AB-", "AB-"),
                            ("O+", "O+"),
                            ("O-", "O-"),
                        ],
                        max_length=3,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                (
                    "urgency",
                    models.CharField(
                        choices=[
                            ("low", "Low"),
                            ("normal", "Normal"),
                            ("high", "High"),
                            ("emergency", "Emergency"),
                        ],
                        default="normal",
                        max_length=20,
                    ),
                ),
                ("hospital_id", models.UUIDField(blank=True, null=True)),
                ("hospital_name", models.CharField(blank=True, max_length=200, null=True)),
                ("contact_person", models.CharField(max_length=200)),
                ("contact_phone", models.CharField(max_length=30)),
                ("medical_reason", models.TextField(blank=True, null=True)),
                ("required_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("fulfilled", "Fulfilled"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("fulfilled_quantity", models.PositiveIntegerField(default=0)),
                ("fulfilled_date", models.DateTimeField(blank=True, null=True)),
                ("fulfilled_by", models.UUIDField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "blood_requests",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="blood_req_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(fulfilled_quantity__lte=models.F("quantity")),
                        name="blood_req_fulfilled_lte_quantity",
                    ),
                ],
            },
        ),
    ]
