"""Reservation status transition table.

The table lists the transitions that carry side effects. Any (old, new)
pair that is not listed is still accepted as a plain status change with no
side effects, so tightening the status graph later means editing only
this module.
"""

from django_rentals.choices import ReservationStatus

# Return the reservation's quantity to the equipment's available counter
RELEASE = 'release'

# Stamp actual_return_date and release, only when no return date is recorded
RETURN = 'return'

_S = ReservationStatus

TRANSITIONS: dict[tuple[str, str], tuple[str, ...]] = {
    (_S.PENDING.value, _S.CONFIRMED.value): (),
    (_S.PENDING.value, _S.ACTIVE.value): (),
    (_S.CONFIRMED.value, _S.ACTIVE.value): (),
    (_S.PENDING.value, _S.CANCELLED.value): (RELEASE,),
    (_S.PENDING.value, _S.COMPLETED.value): (RETURN,),
    (_S.CONFIRMED.value, _S.COMPLETED.value): (RETURN,),
    (_S.ACTIVE.value, _S.COMPLETED.value): (RETURN,),
    (_S.OVERDUE.value, _S.COMPLETED.value): (RETURN,),
    (_S.ACTIVE.value, _S.OVERDUE.value): (),
}

# Field edits are refused in these states
EDIT_FORBIDDEN = frozenset({_S.COMPLETED.value})

# Deletion is refused in these states
DELETE_FORBIDDEN = frozenset({_S.ACTIVE.value, _S.COMPLETED.value})

# Deleting a reservation in these states returns its quantity to the counter
DELETE_RELEASES = frozenset({_S.PENDING.value, _S.CONFIRMED.value})


def normalize_status(status) -> str:
    """Return the stored string value for a status member or string.

    Raises:
        ValueError: If status is not a ReservationStatus value
    """
    return ReservationStatus(str(status)).value


def side_effects(old_status, new_status) -> tuple[str, ...]:
    """Return the side effects for moving from old_status to new_status."""
    key = (normalize_status(old_status), normalize_status(new_status))
    return TRANSITIONS.get(key, ())


def is_listed(old_status, new_status) -> bool:
    """Check if the transition appears in the table."""
    return (normalize_status(old_status), normalize_status(new_status)) in TRANSITIONS


def can_edit(status) -> bool:
    return normalize_status(status) not in EDIT_FORBIDDEN


def can_delete(status) -> bool:
    return normalize_status(status) not in DELETE_FORBIDDEN


def releases_on_delete(status) -> bool:
    return normalize_status(status) in DELETE_RELEASES
