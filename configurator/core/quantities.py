from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from configurator.core.errors import NegativeQuantity


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        raise ValueError("quantity is required")
    if isinstance(value, float):
        # str() keeps the short repr, so 1.4 stays 1.4 instead of 1.39999...
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError("invalid quantity: {!r}".format(value)) from exc


def require_non_negative(field: str, value) -> Decimal:
    quantity = to_decimal(value)
    if quantity < 0:
        raise NegativeQuantity(field, quantity)
    return quantity


def round_quantity(value, places: int = 2) -> Decimal:
    """Round for persistence or display; never call between fold steps."""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def round_quantities(quantities: dict, places: int = 2) -> dict:
    return {key: round_quantity(value, places) for key, value in quantities.items()}
