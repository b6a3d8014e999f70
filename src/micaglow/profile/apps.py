from django.apps import AppConfig


class ProfileConfig(AppConfig):
    name = "micaglow.profile"
    verbose_name = "User Profile"
    default_auto_field = "django.db.models.BigAutoField"
