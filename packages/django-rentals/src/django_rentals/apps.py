"""Django app configuration for django-rentals."""

from django.apps import AppConfig


class DjangoRentalsConfig(AppConfig):
    """App configuration for django-rentals."""

    name = 'django_rentals'
    verbose_name = 'Equipment Rentals'
    default_auto_field = 'django.db.models.BigAutoField'
