"""Selectors for equipment rentals.

Read-only queries against committed state. None of these take locks; list
results carry their customer and equipment via select_related.
"""

from datetime import date

from django.utils import timezone

from django_rentals.exceptions import InvalidArgumentError, NotFoundError
from django_rentals.models import Customer, Equipment, Reservation
from django_rentals.transitions import normalize_status


def _reservations():
    return Reservation.objects.select_related('customer', 'equipment')


def get_reservation(reservation_id) -> Reservation:
    """Get a reservation with its customer and equipment.

    Raises:
        NotFoundError: If the reservation does not exist
    """
    try:
        return _reservations().get(pk=reservation_id)
    except Reservation.DoesNotExist:
        raise NotFoundError("Reservation", reservation_id) from None


def list_reservations() -> list[Reservation]:
    return list(_reservations())


def list_reservations_for_customer(customer_id) -> list[Reservation]:
    return list(_reservations().for_customer(customer_id))


def list_reservations_for_equipment(equipment_id) -> list[Reservation]:
    return list(_reservations().for_equipment(equipment_id))


def list_reservations_by_status(status) -> list[Reservation]:
    """List reservations in the given status.

    Raises:
        InvalidArgumentError: If status is not a reservation status
    """
    try:
        status = normalize_status(status)
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown reservation status: {status}", field='status', value=status,
        ) from None
    return list(_reservations().with_status(status))


def list_reservations_on_date(day: date) -> list[Reservation]:
    """List reservations of any status whose span covers day."""
    return list(_reservations().on_date(day))


def list_overdue_reservations(today: date | None = None) -> list[Reservation]:
    """List active reservations whose end date is before today.

    Overdue is classified at query time; stored statuses are not changed.
    """
    today = today or timezone.localdate()
    return list(_reservations().overdue(today).order_by('end_date'))


def get_equipment(equipment_id) -> Equipment:
    """Get a non-deleted equipment type.

    Raises:
        NotFoundError: If the equipment does not exist
    """
    try:
        return Equipment.objects.get(pk=equipment_id)
    except Equipment.DoesNotExist:
        raise NotFoundError("Equipment", equipment_id) from None


def list_equipment() -> list[Equipment]:
    return list(Equipment.objects.all())


def list_in_stock_equipment() -> list[Equipment]:
    """List equipment with units left on the global counter."""
    return list(Equipment.objects.in_stock())


def list_equipment_by_status(status) -> list[Equipment]:
    return list(Equipment.objects.with_status(status))


def search_equipment(keyword: str) -> list[Equipment]:
    return list(Equipment.objects.search(keyword))


def list_equipment_by_price_range(min_price, max_price) -> list[Equipment]:
    return list(Equipment.objects.priced_between(min_price, max_price))


def get_customer(customer_id) -> Customer:
    """Get a non-deleted customer.

    Raises:
        NotFoundError: If the customer does not exist
    """
    try:
        return Customer.objects.get(pk=customer_id)
    except Customer.DoesNotExist:
        raise NotFoundError("Customer", customer_id) from None


def get_customer_by_email(email: str) -> Customer:
    try:
        return Customer.objects.get(email__iexact=email)
    except Customer.DoesNotExist:
        raise NotFoundError("Customer", email) from None


def search_customers(name: str) -> list[Customer]:
    return list(Customer.objects.search(name))
