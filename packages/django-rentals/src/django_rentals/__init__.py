"""Django Rentals - Equipment reservation and availability engine.

Provides:
- Equipment: Rentable inventory with a finite unit count
- Customer: Minimal renter record referenced by reservations
- Reservation: One customer's claim on units over an inclusive date span
- Availability, pricing and lifecycle services operating on those records

Usage:
    INSTALLED_APPS = [
        ...
        'django_rentals',
    ]

    from django_rentals.services import create_reservation, check_availability

See conf.py for all configuration options.
"""

__version__ = "0.1.0"

__all__ = [
    "Equipment",
    "Customer",
    "Reservation",
]


def __getattr__(name):
    """Lazy import models to avoid AppRegistryNotReady errors."""
    if name in __all__:
        from django_rentals import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
