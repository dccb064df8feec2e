import hashlib
import itertools
import re
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from configurator.core.axes import Axis, AxisOption, OptionRef
from configurator.core.errors import SKUCollisionUnresolved

_NON_ALNUM_RE = re.compile(r"[^0-9A-Za-z]+")

Combination = tuple[tuple[Axis, AxisOption], ...]


def cartesian_product(axes: Sequence[Axis]) -> list[Combination]:
    if not axes:
        return []
    per_axis = [[(axis, option) for option in axis.options] for axis in axes]
    return [tuple(combo) for combo in itertools.product(*per_axis)]


def combination_refs(combo: Combination) -> list[OptionRef]:
    return [axis.ref(option) for axis, option in combo]


def identity_key(refs: Iterable[OptionRef]) -> str:
    """Canonical identity of an option set; independent of axis order."""
    return "|".join(sorted(ref.token for ref in refs))


def identity_hash(refs: Iterable[OptionRef]) -> str:
    return hashlib.sha256(identity_key(refs).encode("utf-8")).hexdigest()


def abbreviate(value: str, length: int = 3, fallback: str = "X") -> str:
    cleaned = _NON_ALNUM_RE.sub("", value or "")
    if not cleaned:
        return fallback
    return cleaned[:length].upper()


def default_sku_prefix(sku_prefix: Optional[str], product_name: str) -> str:
    prefix = (sku_prefix or "").strip()
    if prefix:
        return prefix
    return abbreviate(product_name, 3, fallback="SKU")


def base_sku(prefix: str, combo: Combination, length: int = 3) -> str:
    parts = [prefix]
    for _axis, option in combo:
        parts.append(abbreviate(option.value, length, fallback=str(option.id)))
    return "-".join(parts)


class SkuAllocator:
    """Hands out SKUs unique against ``taken`` and against each other.

    A base SKU already in use gets a numeric suffix: ``BAG-BLA-LAR-2``,
    ``BAG-BLA-LAR-3``, ... until ``max_attempts`` candidates were tried.
    """

    def __init__(self, taken: Iterable[str], max_attempts: int = 50):
        self._taken = set(taken)
        self._max_attempts = max(1, int(max_attempts))

    def allocate(self, base: str) -> str:
        candidate = base
        for attempt in range(1, self._max_attempts + 1):
            if attempt > 1:
                candidate = "{}-{}".format(base, attempt)
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate
        raise SKUCollisionUnresolved(base, self._max_attempts)


def computed_price(base_price, options: Iterable[AxisOption]) -> Decimal:
    total = Decimal(base_price or 0)
    for option in options:
        if option.price_modifier is not None:
            total += Decimal(option.price_modifier)
    return total


def computed_weight(base_weight: Optional[int], options: Iterable[AxisOption]) -> int:
    total = int(base_weight or 0)
    for option in options:
        if option.weight_modifier is not None:
            total += int(option.weight_modifier)
    return total


__all__ = [
    "Combination",
    "SkuAllocator",
    "abbreviate",
    "base_sku",
    "cartesian_product",
    "combination_refs",
    "computed_price",
    "computed_weight",
    "default_sku_prefix",
    "identity_hash",
    "identity_key",
]
