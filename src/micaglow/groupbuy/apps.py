from django.apps import AppConfig


class GroupBuyConfig(AppConfig):
    name = "micaglow.groupbuy"
    verbose_name = "Group buys"
    default_auto_field = "django.db.models.BigAutoField"
