from django.apps import AppConfig


class VisasConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'visas'
