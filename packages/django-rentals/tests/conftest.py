"""Pytest configuration for django-rentals tests.

Runs on in-memory SQLite by default. Set RENTALS_TEST_DB=postgres to run
against PostgreSQL (POSTGRES_DB, POSTGRES_USER, POSTGRES_PASSWORD,
POSTGRES_HOST, POSTGRES_PORT), which the row-locking tests need.
"""
import os
from decimal import Decimal

import django
import pytest
from django.conf import settings


def _test_databases():
    if os.environ.get('RENTALS_TEST_DB', 'sqlite') == 'postgres':
        return {
            'default': {
                'ENGINE': 'django.db.backends.postgresql',
                'NAME': os.environ.get('POSTGRES_DB', 'rentals'),
                'USER': os.environ.get('POSTGRES_USER', 'postgres'),
                'PASSWORD': os.environ.get('POSTGRES_PASSWORD', ''),
                'HOST': os.environ.get('POSTGRES_HOST', 'localhost'),
                'PORT': os.environ.get('POSTGRES_PORT', '5432'),
                'OPTIONS': {
                    'connect_timeout': 10,
                },
            }
        }
    return {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }


def pytest_configure():
    """Configure Django settings for pytest."""
    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY="test-secret-key-do-not-use-in-production",
            DATABASES=_test_databases(),
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'django.contrib.auth',
                'django_rentals',
            ],
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='UTC',
        )
    django.setup()


@pytest.fixture
def customer(db):
    """Create a test customer."""
    from django_rentals.models import Customer
    return Customer.objects.create(
        first_name="Ana",
        last_name="Souza",
        email="ana@example.com",
    )


@pytest.fixture
def make_equipment(db):
    """Factory for equipment with a full counter."""
    from django_rentals.models import Equipment

    def _make(total_quantity=5, daily_price=Decimal("10.00"), **kwargs):
        kwargs.setdefault("name", "Hospital Bed")
        return Equipment.objects.create(
            daily_price=daily_price,
            total_quantity=total_quantity,
            available_quantity=kwargs.pop("available_quantity", total_quantity),
            **kwargs,
        )

    return _make


@pytest.fixture
def equipment(make_equipment):
    """Create equipment with five units at 10.00 per day."""
    return make_equipment()
