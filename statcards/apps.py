from django.apps import AppConfig


class StatcardsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'statcards'
    verbose_name = 'GitHub stat cards'
