"""Django Rentals configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    RENTALS_CURRENCY = 'EUR'
    RENTALS_CURRENCY_DECIMALS = 2
    RENTALS_LOCK_EQUIPMENT = True

Settings are read on every call so that override_settings() in tests and
late configuration both take effect.
"""

from django.conf import settings


DEFAULTS = {
    # ISO currency code stamped on price quotes
    'CURRENCY': 'USD',
    # Decimal places quotes are quantized to (banker's rounding)
    'CURRENCY_DECIMALS': 2,
    # Row-lock the equipment record around admission and counter changes.
    # Only disable on backends without SELECT ... FOR UPDATE support.
    'LOCK_EQUIPMENT': True,
}


def get_setting(name: str, default=None):
    """Get a setting with RENTALS_ prefix, falling back to DEFAULTS."""
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"RENTALS_{name}", default)


def get_currency() -> str:
    """Return the currency code used for quotes."""
    return get_setting('CURRENCY')


def get_currency_decimals() -> int:
    """Return the number of decimal places amounts are quantized to."""
    return int(get_setting('CURRENCY_DECIMALS'))


def is_equipment_locking_enabled() -> bool:
    """Check if equipment rows are locked for admission and counter changes."""
    return bool(get_setting('LOCK_EQUIPMENT'))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# RENTALS_CURRENCY = 'USD'
# RENTALS_CURRENCY_DECIMALS = 2
# RENTALS_LOCK_EQUIPMENT = True
