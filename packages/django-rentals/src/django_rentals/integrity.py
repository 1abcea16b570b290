"""Integrity checks for equipment rentals.

Each check returns (check_name, passed, detail) tuples. passed is True,
False, or None for skipped. The checks only report; they never repair.
"""

from django_rentals.availability import capacity_overruns
from django_rentals.models import Equipment, Reservation


def verify_equipment(equipment: Equipment) -> list[tuple[str, bool | None, str]]:
    """Run all checks for one equipment type."""
    results = []
    prefix = f"equipment_{equipment.pk}"

    counter = equipment.available_quantity
    if 0 <= counter <= equipment.total_quantity:
        results.append((f"{prefix}_counter_bounds", True, f"{counter}/{equipment.total_quantity}"))
    else:
        results.append((
            f"{prefix}_counter_bounds",
            False,
            f"available_quantity={counter} outside [0, {equipment.total_quantity}]",
        ))

    spans = list(
        Reservation.objects.for_equipment(equipment.pk).open().only('start_date', 'end_date', 'quantity')
    )
    if not spans:
        results.append((f"{prefix}_daily_capacity", None, "Skipped - no open reservations"))
        return results

    overruns = capacity_overruns(equipment.total_quantity, spans)
    if overruns:
        days = ", ".join(f"{day}={held}" for day, held in overruns[:5])
        more = f" (+{len(overruns) - 5} more)" if len(overruns) > 5 else ""
        results.append((
            f"{prefix}_daily_capacity",
            False,
            f"over capacity {equipment.total_quantity} on {days}{more}",
        ))
    else:
        results.append((f"{prefix}_daily_capacity", True, f"{len(spans)} open reservation(s) fit"))

    return results


def verify_all(equipment_ids=None) -> list[tuple[str, bool | None, str]]:
    """Run checks across all equipment, including soft-deleted rows."""
    qs = Equipment.all_objects.order_by('pk')
    if equipment_ids:
        qs = qs.filter(pk__in=equipment_ids)

    results = []
    for equipment in qs:
        results.extend(verify_equipment(equipment))
    return results
