"""Rental services: admission, lifecycle and inventory counter.

Business logic for reserving equipment over date spans. All write
operations are atomic transactions.

Concurrency: every operation that admits a reservation or moves the
available counter first takes a row lock on the equipment record
(select_for_update). That serializes admission and counter changes per
equipment type while different equipment types proceed in parallel. Locks
are always taken equipment first, then reservation.

Two availability signals are kept side by side:
- Date-aware free capacity, computed from the open reservations that
  overlap a period.
- Equipment.available_quantity, a date-agnostic counter moved by
  admission, cancellation, completion and deletion. It drives the
  AVAILABLE/RENTED equipment status.
Admission needs both: the equipment must be AVAILABLE and the period must
have enough free capacity. The lifecycle keeps the counter inside
[0, total_quantity] by clamping and logs a warning when it has to, because
a date-aware admission can take more units than the counter has left when
other reservations hold units on other dates.
"""

import logging
from datetime import date

from django.db import IntegrityError, transaction
from django.utils import timezone

from django_rentals import conf
from django_rentals.availability import free_capacity, validate_span
from django_rentals.choices import EquipmentStatus, ReservationStatus
from django_rentals.exceptions import (
    CapacityExceededError,
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from django_rentals.models import Customer, Equipment, Reservation
from django_rentals.pricing import RentalQuote, build_quote, price
from django_rentals.transitions import (
    RELEASE,
    RETURN,
    can_delete,
    can_edit,
    normalize_status,
    releases_on_delete,
    side_effects,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Lookups
# =============================================================================


def _get_customer(customer_id) -> Customer:
    try:
        return Customer.objects.get(pk=customer_id)
    except Customer.DoesNotExist:
        raise NotFoundError("Customer", customer_id) from None


def _get_equipment(equipment_id) -> Equipment:
    try:
        return Equipment.objects.get(pk=equipment_id)
    except Equipment.DoesNotExist:
        raise NotFoundError("Equipment", equipment_id) from None


def _for_update(qs):
    """Add the row lock to qs unless RENTALS_LOCK_EQUIPMENT is off."""
    if conf.is_equipment_locking_enabled():
        return qs.select_for_update()
    return qs


def _lock_equipment(equipment_id) -> Equipment:
    """Fetch equipment holding its row lock for the current transaction."""
    try:
        return _for_update(Equipment.objects.all()).get(pk=equipment_id)
    except Equipment.DoesNotExist:
        raise NotFoundError("Equipment", equipment_id) from None


def _lock_reservation(reservation_id) -> tuple[Reservation, Equipment]:
    """Lock a reservation and its equipment, equipment first.

    The reservation is read once unlocked to learn its equipment, then
    re-read under lock so the status acted on is the committed one.
    """
    try:
        equipment_id = Reservation.objects.values_list('equipment_id', flat=True).get(pk=reservation_id)
    except Reservation.DoesNotExist:
        raise NotFoundError("Reservation", reservation_id) from None

    equipment = _lock_equipment_any(equipment_id)

    try:
        reservation = _for_update(Reservation.objects.all()).get(pk=reservation_id)
    except Reservation.DoesNotExist:
        raise NotFoundError("Reservation", reservation_id) from None
    return reservation, equipment


def _lock_equipment_any(equipment_id) -> Equipment:
    """Lock equipment including soft-deleted rows.

    Reservations keep pointing at equipment after it is soft-deleted, and
    their lifecycle still has to move its counter.
    """
    return _for_update(Equipment.all_objects.all()).get(pk=equipment_id)


# =============================================================================
# Availability
# =============================================================================


def _free_for_period(equipment: Equipment, start_date: date, end_date: date) -> int:
    spans = list(
        Reservation.objects.for_equipment(equipment.pk)
        .open()
        .overlapping(start_date, end_date)
        .only('start_date', 'end_date', 'quantity')
    )
    free = free_capacity(equipment.total_quantity, spans, start_date, end_date)
    logger.debug(
        "Equipment %s %s..%s: total=%s open=%s free=%s",
        equipment.pk, start_date, end_date, equipment.total_quantity, len(spans), free,
    )
    return free


def get_available_quantity_for_period(equipment_id, start_date: date, end_date: date) -> int:
    """Return free units of an equipment type for an inclusive period.

    free = total_quantity - sum(quantity of open reservations overlapping
    the period). Independent of the global available counter and of the
    equipment status. Read-only.

    Raises:
        InvalidRangeError: If end_date is before start_date
        NotFoundError: If the equipment does not exist
    """
    validate_span(start_date, end_date)
    equipment = _get_equipment(equipment_id)
    return _free_for_period(equipment, start_date, end_date)


def check_availability(equipment_id, start_date: date, end_date: date, quantity: int) -> bool:
    """Check if quantity units can be reserved for an inclusive period.

    True iff the equipment status is AVAILABLE (not rented out on the global
    counter, in maintenance or retired) and the free capacity for the period
    is at least quantity. Read-only.

    Raises:
        InvalidRangeError: If the span is reversed or quantity < 1
        NotFoundError: If the equipment does not exist
    """
    validate_span(start_date, end_date, quantity)
    equipment = _get_equipment(equipment_id)
    if not equipment.is_bookable:
        return False
    return _free_for_period(equipment, start_date, end_date) >= quantity


def quote_rental(equipment_id, start_date: date, end_date: date, quantity: int) -> RentalQuote:
    """Quote the price of renting quantity units at the current daily price.

    Raises:
        InvalidRangeError: If the span is reversed or quantity < 1
        NotFoundError: If the equipment does not exist
    """
    equipment = _get_equipment(equipment_id)
    return build_quote(
        equipment.daily_price,
        start_date,
        end_date,
        quantity,
        currency=conf.get_currency(),
        decimals=conf.get_currency_decimals(),
    )


def is_equipment_in_stock(equipment_id, quantity: int = 1) -> bool:
    """Coarse check against the global counter, ignoring dates.

    Answers "is this type fully booked at all right now". The per-period
    answer is get_available_quantity_for_period.
    """
    try:
        equipment = _get_equipment(equipment_id)
    except NotFoundError:
        return False
    return (
        str(equipment.status) == EquipmentStatus.AVAILABLE.value
        and equipment.available_quantity >= quantity
    )


# =============================================================================
# Inventory counter
# =============================================================================


def _set_counter(equipment: Equipment, new_value: int) -> None:
    """Store the counter and derive AVAILABLE/RENTED from it.

    Administrative statuses are left untouched.
    """
    status = str(equipment.status)
    equipment.available_quantity = new_value
    if new_value == 0 and status == EquipmentStatus.AVAILABLE.value:
        equipment.status = EquipmentStatus.RENTED
    elif new_value > 0 and status == EquipmentStatus.RENTED.value:
        equipment.status = EquipmentStatus.AVAILABLE
    equipment.save(update_fields=['available_quantity', 'status', 'updated_at'])


def _shift_counter(equipment: Equipment, delta: int) -> None:
    """Move the counter for a lifecycle side effect, clamped to [0, total]."""
    current = equipment.available_quantity
    target = current + delta
    clamped = min(max(target, 0), equipment.total_quantity)
    if clamped != target:
        logger.warning(
            "Available counter for equipment %s clamped: %s%+d -> %s (total=%s)",
            equipment.pk, current, delta, clamped, equipment.total_quantity,
        )
    _set_counter(equipment, clamped)


@transaction.atomic
def adjust_available_quantity(equipment_id, delta: int) -> Equipment:
    """Add delta to the equipment's global available counter.

    Sets status to RENTED when the counter reaches 0 and back to AVAILABLE
    when it recovers from RENTED. Maintenance and retired equipment keep
    their status.

    Raises:
        NotFoundError: If the equipment does not exist
        InvalidArgumentError: If the result would be negative or exceed
            total_quantity. Nothing is written in that case.
    """
    equipment = _lock_equipment(equipment_id)
    new_value = equipment.available_quantity + delta
    if new_value < 0:
        raise InvalidArgumentError(
            f"Available quantity cannot be negative (equipment {equipment.pk}: "
            f"{equipment.available_quantity}{delta:+d})",
            field='available_quantity',
            value=new_value,
        )
    if new_value > equipment.total_quantity:
        raise InvalidArgumentError(
            f"Available quantity cannot exceed total quantity {equipment.total_quantity} "
            f"(equipment {equipment.pk}: {equipment.available_quantity}{delta:+d})",
            field='available_quantity',
            value=new_value,
        )
    _set_counter(equipment, new_value)
    logger.info(
        "Adjusted available counter for equipment %s by %+d to %s",
        equipment.pk, delta, new_value,
    )
    return equipment


# =============================================================================
# Reservation lifecycle
# =============================================================================


@transaction.atomic
def create_reservation(
    customer_id,
    equipment_id,
    start_date: date,
    end_date: date,
    quantity: int = 1,
    notes: str = '',
) -> Reservation:
    """Admit a new reservation.

    Locks the equipment, checks date-aware capacity, snapshots the current
    daily price, persists the reservation as PENDING and takes quantity
    off the global counter, all in one transaction.

    Args:
        customer_id: The renting customer
        equipment_id: The equipment type to reserve
        start_date: First day of the rental (inclusive)
        end_date: Last day of the rental (inclusive)
        quantity: Units held for the whole span
        notes: Free-form notes

    Returns:
        The created Reservation

    Raises:
        InvalidRangeError: If the span is reversed or quantity < 1
        NotFoundError: If the customer or equipment does not exist
        CapacityExceededError: If the units are not free for the span or
            the equipment is not AVAILABLE (rented out, maintenance, retired)
    """
    validate_span(start_date, end_date, quantity)
    customer = _get_customer(customer_id)
    equipment = _lock_equipment(equipment_id)

    if not equipment.is_bookable:
        logger.warning(
            "Rejected reservation for equipment %s: status is %s",
            equipment.pk, equipment.status,
        )
        raise CapacityExceededError(
            equipment.pk, quantity, 0, start_date, end_date,
            reason=f"equipment status is {equipment.status}",
        )

    free = _free_for_period(equipment, start_date, end_date)
    if free < quantity:
        logger.warning(
            "Rejected reservation for equipment %s %s..%s: requested=%s free=%s",
            equipment.pk, start_date, end_date, quantity, free,
        )
        raise CapacityExceededError(equipment.pk, quantity, max(free, 0), start_date, end_date)

    reservation = Reservation.objects.create(
        customer=customer,
        equipment=equipment,
        start_date=start_date,
        end_date=end_date,
        quantity=quantity,
        daily_rate=equipment.daily_price,
        total_amount=price(equipment.daily_price, start_date, end_date, quantity),
        status=ReservationStatus.PENDING,
        notes=notes or '',
    )
    _shift_counter(equipment, -quantity)

    logger.info(
        "Created reservation %s: customer=%s equipment=%s %s..%s quantity=%s",
        reservation.pk, customer.pk, equipment.pk, start_date, end_date, quantity,
    )
    return reservation


@transaction.atomic
def update_reservation(
    reservation_id,
    start_date: date,
    end_date: date,
    quantity: int,
    notes: str = '',
) -> Reservation:
    """Overwrite a reservation's span, quantity and notes.

    Recomputes total_amount from the captured daily rate. Capacity is NOT
    re-checked and the global counter is NOT moved for a changed quantity,
    so an edit can overbook; check_rentals reports such overruns.

    Raises:
        NotFoundError: If the reservation does not exist
        InvalidStateError: If the reservation is completed
        InvalidRangeError: If the new span is reversed or quantity < 1
    """
    reservation, _equipment = _lock_reservation(reservation_id)

    if not can_edit(reservation.status):
        raise InvalidStateError("Reservation", reservation.pk, str(reservation.status), "update")

    total = price(reservation.daily_rate, start_date, end_date, quantity)

    reservation.start_date = start_date
    reservation.end_date = end_date
    reservation.quantity = quantity
    reservation.notes = notes or ''
    reservation.total_amount = total
    reservation.save(update_fields=[
        'start_date', 'end_date', 'quantity', 'notes', 'total_amount', 'updated_at',
    ])

    logger.info(
        "Updated reservation %s: %s..%s quantity=%s",
        reservation.pk, start_date, end_date, quantity,
    )
    return reservation


@transaction.atomic
def set_reservation_status(reservation_id, status) -> Reservation:
    """Move a reservation to a new status and apply the transition's side effects.

    See django_rentals.transitions for the table. Unlisted transitions are
    accepted as plain status changes.

    Raises:
        NotFoundError: If the reservation does not exist
        InvalidArgumentError: If status is not a reservation status
    """
    try:
        new_status = normalize_status(status)
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown reservation status: {status}", field='status', value=status,
        ) from None

    reservation, equipment = _lock_reservation(reservation_id)
    old_status = str(reservation.status)
    effects = side_effects(old_status, new_status)

    reservation.status = new_status
    update_fields = ['status', 'updated_at']

    if RELEASE in effects:
        _shift_counter(equipment, reservation.quantity)
    if RETURN in effects and reservation.actual_return_date is None:
        reservation.actual_return_date = timezone.localdate()
        update_fields.append('actual_return_date')
        _shift_counter(equipment, reservation.quantity)

    reservation.save(update_fields=update_fields)

    logger.info(
        "Reservation %s status %s -> %s%s",
        reservation.pk, old_status, new_status,
        f" ({', '.join(effects)})" if effects else "",
    )
    return reservation


@transaction.atomic
def delete_reservation(reservation_id) -> None:
    """Remove a reservation record.

    Pending and confirmed reservations give their quantity back to the
    global counter. Cancelled (and other non-active) records are removed
    without counter changes.

    Raises:
        NotFoundError: If the reservation does not exist
        InvalidStateError: If the reservation is active or completed
    """
    reservation, equipment = _lock_reservation(reservation_id)
    status = str(reservation.status)

    if not can_delete(status):
        raise InvalidStateError("Reservation", reservation.pk, status, "delete")

    if releases_on_delete(status):
        _shift_counter(equipment, reservation.quantity)

    pk = reservation.pk
    reservation.delete()
    logger.info("Deleted reservation %s (was %s)", pk, status)


# =============================================================================
# Equipment administration
# =============================================================================


@transaction.atomic
def create_equipment(
    name: str,
    daily_price,
    total_quantity: int = 1,
    available_quantity: int | None = None,
    status=EquipmentStatus.AVAILABLE,
    description: str = '',
    model: str = '',
    manufacturer: str = '',
) -> Equipment:
    """Register a new equipment type.

    The available counter starts at total_quantity unless given.

    Raises:
        InvalidArgumentError: If quantities or price are out of bounds
    """
    if available_quantity is None:
        available_quantity = total_quantity
    _validate_inventory(total_quantity, available_quantity, daily_price)

    equipment = Equipment.objects.create(
        name=name,
        description=description,
        model=model,
        manufacturer=manufacturer,
        daily_price=daily_price,
        total_quantity=total_quantity,
        available_quantity=available_quantity,
        status=status,
    )
    logger.info("Created equipment %s (%s x%s)", equipment.pk, name, total_quantity)
    return equipment


_EQUIPMENT_FIELDS = (
    'name', 'description', 'model', 'manufacturer',
    'daily_price', 'total_quantity', 'available_quantity', 'status',
)


@transaction.atomic
def update_equipment(equipment_id, **fields) -> Equipment:
    """Update equipment fields under the equipment lock.

    Price changes never touch existing reservations: they keep the daily
    rate captured when they were created.

    Raises:
        NotFoundError: If the equipment does not exist
        InvalidArgumentError: If an unknown field is passed or the counter
            would fall outside [0, total_quantity]
    """
    unknown = set(fields) - set(_EQUIPMENT_FIELDS)
    if unknown:
        raise InvalidArgumentError(
            f"Unknown equipment fields: {', '.join(sorted(unknown))}",
            field=sorted(unknown)[0],
        )

    equipment = _lock_equipment(equipment_id)
    for field, value in fields.items():
        setattr(equipment, field, value)
    _validate_inventory(equipment.total_quantity, equipment.available_quantity, equipment.daily_price)

    equipment.save()
    logger.info("Updated equipment %s: %s", equipment.pk, ', '.join(sorted(fields)))
    return equipment


@transaction.atomic
def delete_equipment(equipment_id) -> None:
    """Soft-delete an equipment type.

    Raises:
        NotFoundError: If the equipment does not exist
        InvalidStateError: If an open reservation still references it
    """
    equipment = _lock_equipment(equipment_id)
    if Reservation.objects.for_equipment(equipment.pk).open().exists():
        raise InvalidStateError("Equipment", equipment.pk, str(equipment.status), "delete")
    equipment.delete()
    logger.info("Deleted equipment %s", equipment.pk)


def _validate_inventory(total_quantity: int, available_quantity: int, daily_price) -> None:
    if total_quantity is None or total_quantity < 0:
        raise InvalidArgumentError(
            "Total quantity cannot be negative", field='total_quantity', value=total_quantity,
        )
    if available_quantity is None or available_quantity < 0 or available_quantity > total_quantity:
        raise InvalidArgumentError(
            f"Available quantity must be between 0 and {total_quantity}",
            field='available_quantity',
            value=available_quantity,
        )
    if daily_price is None or daily_price < 0:
        raise InvalidArgumentError(
            "Daily price cannot be negative", field='daily_price', value=daily_price,
        )


# =============================================================================
# Customer registry
# =============================================================================


_CUSTOMER_FIELDS = (
    'first_name', 'last_name', 'email', 'phone', 'address', 'city', 'state', 'zip_code',
)


def _email_taken(email: str, exclude_id=None) -> bool:
    qs = Customer.objects.filter(email__iexact=email)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.exists()


@transaction.atomic
def create_customer(first_name: str, last_name: str, email: str, **fields) -> Customer:
    """Register a customer.

    Raises:
        ConflictError: If another customer already uses the e-mail
        InvalidArgumentError: If an unknown field is passed
    """
    unknown = set(fields) - set(_CUSTOMER_FIELDS)
    if unknown:
        raise InvalidArgumentError(
            f"Unknown customer fields: {', '.join(sorted(unknown))}",
            field=sorted(unknown)[0],
        )
    if _email_taken(email):
        raise ConflictError("Customer", "email", email)

    try:
        with transaction.atomic():
            customer = Customer.objects.create(
                first_name=first_name, last_name=last_name, email=email, **fields,
            )
    except IntegrityError as e:
        # Lost a race with a concurrent insert of the same e-mail
        raise ConflictError("Customer", "email", email) from e

    logger.info("Created customer %s", customer.pk)
    return customer


@transaction.atomic
def update_customer(customer_id, **fields) -> Customer:
    """Update customer contact fields.

    Raises:
        NotFoundError: If the customer does not exist
        ConflictError: If the new e-mail belongs to another customer
        InvalidArgumentError: If an unknown field is passed
    """
    unknown = set(fields) - set(_CUSTOMER_FIELDS)
    if unknown:
        raise InvalidArgumentError(
            f"Unknown customer fields: {', '.join(sorted(unknown))}",
            field=sorted(unknown)[0],
        )

    customer = _get_customer(customer_id)
    email = fields.get('email')
    if email is not None and email.lower() != customer.email.lower() and _email_taken(email, customer.pk):
        raise ConflictError("Customer", "email", email)

    for field, value in fields.items():
        setattr(customer, field, value)
    try:
        with transaction.atomic():
            customer.save()
    except IntegrityError as e:
        raise ConflictError("Customer", "email", email) from e

    logger.info("Updated customer %s", customer.pk)
    return customer


@transaction.atomic
def delete_customer(customer_id) -> None:
    """Soft-delete a customer.

    Raises:
        NotFoundError: If the customer does not exist
        InvalidStateError: If the customer holds open reservations
    """
    customer = _get_customer(customer_id)
    if Reservation.objects.for_customer(customer.pk).open().exists():
        raise InvalidStateError("Customer", customer.pk, "has open reservations", "delete")
    customer.delete()
    logger.info("Deleted customer %s", customer.pk)
