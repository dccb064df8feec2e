"""Attribute axes: the ordered dimensions a product's variants vary by.

Everything here works on plain values already loaded from storage. The
``AxisService`` in ``configurator.services.axis_service`` does the loading.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from configurator.core.constants import AXIS_SOURCE_GLOBAL, AXIS_SOURCE_PRODUCT
from configurator.core.errors import DuplicateAxisKey

_SOURCE_RANK = {AXIS_SOURCE_PRODUCT: 0, AXIS_SOURCE_GLOBAL: 1}
_SOURCE_TOKEN = {AXIS_SOURCE_PRODUCT: "a", AXIS_SOURCE_GLOBAL: "g"}


@dataclass(frozen=True)
class AxisOption:
    id: int
    value: str
    display_value: str
    position: int = 0
    price_modifier: Optional[Decimal] = None
    weight_modifier: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class OptionSelection:
    """Per-product override of one global option; ``None`` keeps the option's value."""

    option_id: int
    price_modifier: Optional[Decimal] = None
    weight_modifier: Optional[int] = None
    position_override: Optional[int] = None


@dataclass(frozen=True, order=True)
class OptionRef:
    source: str
    axis_id: int
    option_id: int

    @property
    def token(self) -> str:
        return "{}{}:{}".format(_SOURCE_TOKEN[self.source], self.axis_id, self.option_id)


@dataclass
class Axis:
    source: str
    axis_id: int
    key: str
    display_name: str
    position: int
    options: list[AxisOption] = field(default_factory=list)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.position, _SOURCE_RANK[self.source], self.axis_id)

    @property
    def cardinality(self) -> int:
        return len(self.options)

    def ref(self, option: AxisOption) -> OptionRef:
        return OptionRef(self.source, self.axis_id, option.id)


def _ordered_active(options: Iterable[AxisOption]) -> list[AxisOption]:
    active = [option for option in options if option.is_active]
    return sorted(active, key=lambda option: (option.position, option.id))


def product_axis(
    attribute_id: int,
    key: str,
    display_name: str,
    position: int,
    options: Iterable[AxisOption],
) -> Axis:
    return Axis(
        source=AXIS_SOURCE_PRODUCT,
        axis_id=attribute_id,
        key=key,
        display_name=display_name,
        position=position,
        options=_ordered_active(options),
    )


def global_axis(
    link_id: int,
    key: str,
    display_name: str,
    position: int,
    options: Iterable[AxisOption],
    selections: Sequence[OptionSelection] = (),
) -> Axis:
    """Build the axis a product sees through one global attribute link.

    Without selections every active global option applies unmodified. With
    selections only the selected options apply, and each selection's
    non-null modifiers and position replace the option's own values.
    """
    if selections:
        by_option = {selection.option_id: selection for selection in selections}
        effective = []
        for option in options:
            selection = by_option.get(option.id)
            if selection is None:
                continue
            changes = {}
            if selection.price_modifier is not None:
                changes["price_modifier"] = selection.price_modifier
            if selection.weight_modifier is not None:
                changes["weight_modifier"] = selection.weight_modifier
            if selection.position_override is not None:
                changes["position"] = selection.position_override
            effective.append(replace(option, **changes) if changes else option)
    else:
        effective = list(options)

    return Axis(
        source=AXIS_SOURCE_GLOBAL,
        axis_id=link_id,
        key=key,
        display_name=display_name,
        position=position,
        options=_ordered_active(effective),
    )


def order_axes(axes: Iterable[Axis]) -> tuple[list[Axis], list[Axis]]:
    """Return ``(usable, empty)`` axes, each sorted by position.

    Axes without active options are set aside first; ``DuplicateAxisKey`` is
    raised when two remaining axes share a key, whatever their source.
    """
    seen = set()
    usable: list[Axis] = []
    empty: list[Axis] = []
    for axis in sorted(axes, key=lambda item: item.sort_key):
        if not axis.options:
            empty.append(axis)
            continue
        if axis.key in seen:
            raise DuplicateAxisKey(axis.key)
        seen.add(axis.key)
        usable.append(axis)
    return usable, empty


__all__ = [
    "Axis",
    "AxisOption",
    "OptionRef",
    "OptionSelection",
    "global_axis",
    "order_axes",
    "product_axis",
]
