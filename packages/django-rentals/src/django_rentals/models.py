"""Equipment, Customer and Reservation models for equipment rentals.

Reservations reference equipment and customers by foreign key with
PROTECT: neither side owns the other. Equipment and customers are
soft-deleted so reservation history keeps resolving.
"""

from decimal import Decimal

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_rentals.choices import (
    OPEN_STATUSES,
    EquipmentStatus,
    ReservationStatus,
)


class TimeStampedModel(models.Model):
    """Abstract base model with created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteManager(models.Manager):
    """Manager that excludes soft-deleted objects by default."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class SoftDeleteModel(TimeStampedModel):
    """Abstract base model marking rows deleted instead of removing them.

    Attributes:
        deleted_at: Timestamp when soft-deleted, None if active
        objects: Manager that excludes deleted records
        all_objects: Manager that includes all records
    """

    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

    def delete(self, using=None, keep_parents=False):
        """Soft delete the object by setting deleted_at timestamp."""
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at', 'updated_at'])

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class EquipmentQuerySet(models.QuerySet):
    """Custom queryset for Equipment model."""

    def in_stock(self):
        """Return equipment with units on the global counter and AVAILABLE status."""
        return self.filter(available_quantity__gt=0, status=EquipmentStatus.AVAILABLE)

    def with_status(self, status):
        return self.filter(status=status)

    def search(self, keyword: str):
        """Case-insensitive match on name, description or manufacturer."""
        return self.filter(
            Q(name__icontains=keyword)
            | Q(description__icontains=keyword)
            | Q(manufacturer__icontains=keyword)
        )

    def priced_between(self, min_price, max_price):
        return self.filter(daily_price__gte=min_price, daily_price__lte=max_price)


class Equipment(SoftDeleteModel):
    """
    Rentable equipment type with a finite unit count.

    available_quantity is a global, date-agnostic counter: it drops when a
    reservation is admitted and recovers when one is cancelled, completed
    or deleted. Date-aware capacity is computed separately from the
    reservation set (see django_rentals.availability).

    Usage:
        equipment = Equipment.objects.create(
            name='Hospital Bed',
            daily_price=Decimal('25.00'),
            total_quantity=5,
            available_quantity=5,
        )
    """

    name = models.CharField(
        max_length=200,
        help_text="Display name of the equipment type",
    )
    description = models.TextField(
        blank=True,
        default='',
    )
    model = models.CharField(
        max_length=100,
        blank=True,
        default='',
        help_text="Manufacturer model designation",
    )
    manufacturer = models.CharField(
        max_length=100,
        blank=True,
        default='',
    )
    daily_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Current price per unit per day",
    )
    total_quantity = models.PositiveIntegerField(
        default=1,
        help_text="Physical unit count",
    )
    available_quantity = models.PositiveIntegerField(
        default=1,
        help_text="Global counter of units not held by a reservation",
    )
    status = models.CharField(
        max_length=20,
        choices=EquipmentStatus.choices,
        default=EquipmentStatus.AVAILABLE,
        db_index=True,
    )

    objects = SoftDeleteManager.from_queryset(EquipmentQuerySet)()
    all_objects = models.Manager()

    class Meta:
        app_label = 'django_rentals'
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=Q(available_quantity__lte=F('total_quantity')),
                name='rentals_equipment_available_lte_total',
            ),
            models.CheckConstraint(
                condition=Q(daily_price__gte=0),
                name='rentals_equipment_price_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.available_quantity}/{self.total_quantity})"

    @property
    def is_bookable(self) -> bool:
        """Check if the equipment accepts new reservations.

        Only AVAILABLE equipment does. RENTED (global counter spent),
        MAINTENANCE and RETIRED all refuse admission.
        """
        return str(self.status) == EquipmentStatus.AVAILABLE.value


class CustomerQuerySet(models.QuerySet):
    """Custom queryset for Customer model."""

    def search(self, name: str):
        """Case-insensitive match on first or last name."""
        return self.filter(Q(first_name__icontains=name) | Q(last_name__icontains=name))


class Customer(SoftDeleteModel):
    """Renter referenced by reservations.

    Only the fields reservations need plus contact details.
    """

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(
        max_length=254,
        help_text="Unique among customers that are not deleted",
    )
    phone = models.CharField(max_length=40, blank=True, default='')
    address = models.CharField(max_length=255, blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='')
    state = models.CharField(max_length=100, blank=True, default='')
    zip_code = models.CharField(max_length=20, blank=True, default='')

    objects = SoftDeleteManager.from_queryset(CustomerQuerySet)()
    all_objects = models.Manager()

    class Meta:
        app_label = 'django_rentals'
        ordering = ['last_name', 'first_name']
        constraints = [
            models.UniqueConstraint(
                fields=['email'],
                condition=Q(deleted_at__isnull=True),
                name='rentals_customer_unique_active_email',
            ),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ReservationQuerySet(models.QuerySet):
    """Custom queryset for Reservation model."""

    def open(self):
        """Return reservations that still hold inventory."""
        return self.filter(status__in=OPEN_STATUSES)

    def for_equipment(self, equipment_id):
        return self.filter(equipment_id=equipment_id)

    def for_customer(self, customer_id):
        return self.filter(customer_id=customer_id)

    def with_status(self, status):
        return self.filter(status=status)

    def overlapping(self, start_date, end_date):
        """Return reservations whose inclusive span shares a day with the given one."""
        return self.filter(start_date__lte=end_date, end_date__gte=start_date)

    def on_date(self, day):
        """Return reservations whose span covers the given day."""
        return self.overlapping(day, day)

    def overdue(self, today):
        """Return active reservations whose end date has passed."""
        return self.filter(status=ReservationStatus.ACTIVE, end_date__lt=today)


class Reservation(TimeStampedModel):
    """
    One customer's claim on units of an equipment type over a date span.

    start_date and end_date are inclusive. daily_rate is a snapshot of the
    equipment price at creation; total_amount is recomputed whenever the
    span or quantity changes.

    Usage:
        from django_rentals.services import create_reservation

        reservation = create_reservation(
            customer_id=customer.pk,
            equipment_id=equipment.pk,
            start_date=date(2026, 1, 1),
            end_date=date(2026, 1, 5),
            quantity=2,
        )
    """

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name='reservations',
    )
    equipment = models.ForeignKey(
        Equipment,
        on_delete=models.PROTECT,
        related_name='reservations',
    )
    start_date = models.DateField(db_index=True)
    end_date = models.DateField(db_index=True)
    actual_return_date = models.DateField(
        null=True,
        blank=True,
        help_text="Set when the reservation is completed",
    )
    quantity = models.PositiveIntegerField(default=1)
    daily_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Equipment price captured at creation",
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
    )
    status = models.CharField(
        max_length=20,
        choices=ReservationStatus.choices,
        default=ReservationStatus.PENDING,
        db_index=True,
    )
    notes = models.TextField(blank=True, default='')

    objects = ReservationQuerySet.as_manager()

    class Meta:
        app_label = 'django_rentals'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['equipment', 'status'], name='rentals_res_equip_status_idx'),
            models.Index(fields=['start_date', 'end_date'], name='rentals_res_span_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=F('start_date')),
                name='rentals_reservation_end_after_start',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name='rentals_reservation_quantity_positive',
            ),
        ]

    def __str__(self):
        return f"Reservation {self.pk}: {self.quantity} x {self.equipment_id} ({self.start_date}..{self.end_date})"

    @property
    def is_open(self) -> bool:
        """Check if the reservation still holds inventory."""
        return str(self.status) in OPEN_STATUSES

    def is_overdue(self, today=None) -> bool:
        """Active and past its end date."""
        today = today or timezone.localdate()
        return str(self.status) == ReservationStatus.ACTIVE.value and self.end_date < today
