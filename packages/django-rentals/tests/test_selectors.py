"""Tests for rental selectors."""
from datetime import date
from decimal import Decimal

import pytest
from freezegun import freeze_time

from django_rentals import selectors
from django_rentals.choices import EquipmentStatus, ReservationStatus
from django_rentals.exceptions import InvalidArgumentError, NotFoundError
from django_rentals.services import (
    create_customer,
    create_reservation,
    delete_equipment,
    set_reservation_status,
)


def jan(day):
    return date(2026, 1, day)


@pytest.fixture
def other_customer(db):
    return create_customer("Bruno", "Lima", "bruno@example.com")


@pytest.fixture
def booked(customer, other_customer, make_equipment):
    """Two equipment types with a handful of reservations."""
    bed = make_equipment(name="Hospital Bed")
    chair = make_equipment(name="Wheelchair", total_quantity=3)

    def book(who, what, start, end, status=None):
        reservation = create_reservation(who.pk, what.pk, start, end)
        if status is not None:
            reservation = set_reservation_status(reservation.pk, status)
        return reservation

    return {
        "bed": bed,
        "chair": chair,
        "a": book(customer, bed, jan(1), jan(5), ReservationStatus.ACTIVE),
        "b": book(customer, chair, jan(3), jan(10)),
        "c": book(other_customer, bed, jan(8), jan(12), ReservationStatus.ACTIVE),
        "d": book(other_customer, chair, jan(2), jan(4), ReservationStatus.CANCELLED),
    }


@pytest.mark.django_db
class TestReservationSelectors:
    """Tests for reservation listings."""

    def test_get_reservation(self, booked):
        reservation = selectors.get_reservation(booked["a"].pk)

        assert reservation.pk == booked["a"].pk
        assert reservation.equipment.name == "Hospital Bed"

    def test_get_missing_reservation_raises(self, db):
        with pytest.raises(NotFoundError):
            selectors.get_reservation(424242)

    def test_list_all(self, booked):
        assert len(selectors.list_reservations()) == 4

    def test_by_customer(self, booked, other_customer):
        pks = {r.pk for r in selectors.list_reservations_for_customer(other_customer.pk)}

        assert pks == {booked["c"].pk, booked["d"].pk}

    def test_by_equipment(self, booked):
        pks = {r.pk for r in selectors.list_reservations_for_equipment(booked["chair"].pk)}

        assert pks == {booked["b"].pk, booked["d"].pk}

    def test_by_status(self, booked):
        pks = {r.pk for r in selectors.list_reservations_by_status(ReservationStatus.ACTIVE)}

        assert pks == {booked["a"].pk, booked["c"].pk}
        assert [r.pk for r in selectors.list_reservations_by_status("pending")] == [booked["b"].pk]

    def test_by_unknown_status_raises(self, db):
        with pytest.raises(InvalidArgumentError):
            selectors.list_reservations_by_status("lost")

    def test_on_date_includes_every_status(self, booked):
        pks = {r.pk for r in selectors.list_reservations_on_date(jan(4))}

        assert pks == {booked["a"].pk, booked["b"].pk, booked["d"].pk}

    def test_on_date_span_edges_are_inclusive(self, booked):
        assert {r.pk for r in selectors.list_reservations_on_date(jan(12))} == {booked["c"].pk}
        assert selectors.list_reservations_on_date(jan(13)) == []

    def test_overdue_with_explicit_today(self, booked):
        overdue = selectors.list_overdue_reservations(today=jan(9))

        assert [r.pk for r in overdue] == [booked["a"].pk]

    def test_overdue_ordered_by_end_date(self, booked):
        overdue = selectors.list_overdue_reservations(today=jan(20))

        assert [r.pk for r in overdue] == [booked["a"].pk, booked["c"].pk]

    def test_overdue_ignores_pending_past_end(self, booked):
        assert booked["b"].pk not in {
            r.pk for r in selectors.list_overdue_reservations(today=jan(20))
        }

    @freeze_time("2026-01-06")
    def test_overdue_defaults_to_today(self, booked):
        assert [r.pk for r in selectors.list_overdue_reservations()] == [booked["a"].pk]

    def test_overdue_does_not_change_stored_status(self, booked):
        selectors.list_overdue_reservations(today=jan(20))

        booked["a"].refresh_from_db()
        assert booked["a"].status == ReservationStatus.ACTIVE
        assert booked["a"].is_overdue(today=jan(20))


@pytest.mark.django_db
class TestEquipmentSelectors:
    """Tests for equipment listings."""

    def test_get_equipment(self, equipment):
        assert selectors.get_equipment(equipment.pk) == equipment

    def test_get_missing_equipment_raises(self, db):
        with pytest.raises(NotFoundError):
            selectors.get_equipment(424242)

    def test_soft_deleted_equipment_is_hidden(self, equipment):
        delete_equipment(equipment.pk)

        with pytest.raises(NotFoundError):
            selectors.get_equipment(equipment.pk)
        assert selectors.list_equipment() == []

    def test_in_stock(self, make_equipment):
        bed = make_equipment(name="Bed")
        make_equipment(name="Walker", available_quantity=0)
        make_equipment(name="Hoist", status=EquipmentStatus.MAINTENANCE)

        assert selectors.list_in_stock_equipment() == [bed]

    def test_by_status(self, make_equipment):
        hoist = make_equipment(name="Hoist", status=EquipmentStatus.MAINTENANCE)
        make_equipment(name="Bed")

        assert selectors.list_equipment_by_status(EquipmentStatus.MAINTENANCE) == [hoist]

    def test_search_matches_name_description_and_manufacturer(self, make_equipment):
        bed = make_equipment(name="Electric Bed")
        chair = make_equipment(name="Wheelchair", description="Folding, electric assist")
        hoist = make_equipment(name="Hoist", manufacturer="ElectroMed")
        make_equipment(name="Walker")

        assert set(selectors.search_equipment("electr")) == {bed, chair, hoist}

    def test_price_range_is_inclusive(self, make_equipment):
        cheap = make_equipment(name="Cane", daily_price=Decimal("2.00"))
        mid = make_equipment(name="Walker", daily_price=Decimal("5.00"))
        make_equipment(name="Bed", daily_price=Decimal("25.00"))

        found = selectors.list_equipment_by_price_range(Decimal("2.00"), Decimal("5.00"))

        assert set(found) == {cheap, mid}


@pytest.mark.django_db
class TestCustomerSelectors:
    """Tests for customer lookups."""

    def test_get_customer(self, customer):
        assert selectors.get_customer(customer.pk) == customer

    def test_get_by_email_is_case_insensitive(self, customer):
        assert selectors.get_customer_by_email("ANA@example.com") == customer

    def test_get_by_unknown_email_raises(self, db):
        with pytest.raises(NotFoundError):
            selectors.get_customer_by_email("nobody@example.com")

    def test_search_by_name(self, customer, other_customer):
        assert selectors.search_customers("souz") == [customer]
        assert selectors.search_customers("bruno") == [other_customer]
