from django.apps import AppConfig


class BloodRequestsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.blood_requests"
    verbose_name = "Blood Requests"
