from django.apps import AppConfig


class UploadsConfig(AppConfig):
    name = "micaglow.uploads"
    verbose_name = "Uploads"
