"""Exceptions for django-rentals.

Every error here is an expected, caller-recoverable condition. Each one
carries enough context (entity kind, id, offending values) for a transport
layer to map it to a user-facing status.
"""


class RentalError(Exception):
    """Base exception for rental errors."""

    pass


class NotFoundError(RentalError):
    """Raised when a customer, equipment or reservation id does not resolve."""

    def __init__(self, kind: str, identifier):
        super().__init__(f"{kind} not found with id: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidRangeError(RentalError):
    """Raised when a date span ends before it starts or a quantity is not positive."""

    def __init__(self, message: str, start_date=None, end_date=None, quantity=None):
        super().__init__(message)
        self.start_date = start_date
        self.end_date = end_date
        self.quantity = quantity


class CapacityExceededError(RentalError):
    """Raised when admitting a reservation would exceed per-period capacity."""

    def __init__(self, equipment_id, requested: int, available: int, start_date, end_date, reason: str = ''):
        message = (
            f"Equipment {equipment_id} not available for {start_date}..{end_date}: "
            f"requested={requested}, available={available}"
        )
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.equipment_id = equipment_id
        self.requested = requested
        self.available = available
        self.start_date = start_date
        self.end_date = end_date
        self.reason = reason


class InvalidStateError(RentalError):
    """Raised when an operation is forbidden in the record's current state."""

    def __init__(self, kind: str, identifier, status: str, action: str):
        super().__init__(f"Cannot {action} {kind} {identifier} with status {status}")
        self.kind = kind
        self.identifier = identifier
        self.status = status
        self.action = action


class InvalidArgumentError(RentalError, ValueError):
    """Raised when a value falls outside its allowed bounds."""

    def __init__(self, message: str, field: str | None = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class ConflictError(RentalError):
    """Raised when a unique value is already taken by another record."""

    def __init__(self, kind: str, field: str, value):
        super().__init__(f"{kind} with {field} '{value}' already exists")
        self.kind = kind
        self.field = field
        self.value = value
