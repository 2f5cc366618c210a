from django.apps import AppConfig


class ArmyConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "army"
    verbose_name = "Army personnel"
