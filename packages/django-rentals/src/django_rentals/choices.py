"""Status choices shared by models, transitions and services."""

from django.db import models


class EquipmentStatus(models.TextChoices):
    """Equipment status.

    AVAILABLE and RENTED follow the global available counter.
    MAINTENANCE and RETIRED are administrative overrides.
    """

    AVAILABLE = 'available', 'Available'
    RENTED = 'rented', 'Rented'
    MAINTENANCE = 'maintenance', 'Maintenance'
    RETIRED = 'retired', 'Retired'


class ReservationStatus(models.TextChoices):
    """Reservation lifecycle status."""

    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    ACTIVE = 'active', 'Active'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    OVERDUE = 'overdue', 'Overdue'


# Reservations in these states still hold inventory
OPEN_STATUSES = frozenset({
    ReservationStatus.PENDING.value,
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.ACTIVE.value,
})
