from django.apps import AppConfig


class FlocksConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.flocks'
    verbose_name = 'Flocks'
