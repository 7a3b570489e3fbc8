from django.apps import AppConfig


class PointmanConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pointman"
    verbose_name = "Pointman - Loyalty Points Ledger"
