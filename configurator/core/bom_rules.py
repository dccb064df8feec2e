"""Layered bill-of-materials resolution.

A variant's material list is produced by folding an ordered list of steps
over a working ``{raw_material_id: quantity}`` map:

    Layer 1   Seed                      product baseline
    Layer 2b  Multiply | Add | Set      option modifiers on baseline lines
    Layer 2a  Merge                     option additions
    Layer 3   Replace | Merge | Remove | SetQuantity    variant overrides

``plan_steps`` fixes the order (axis position, then option position, then
row id) so the result only depends on the rule data, never on the order the
options were picked in. Quantities stay ``Decimal`` at full precision; callers
round with ``configurator.core.quantities.round_quantity`` at the boundary.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from configurator.core.constants import (
    MODIFIER_ADD,
    MODIFIER_MULTIPLY,
    MODIFIER_SET,
    OVERRIDE_ADD,
    OVERRIDE_REMOVE,
    OVERRIDE_REPLACE,
    OVERRIDE_SET_QUANTITY,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal(0)


# ---------------------------------------------------------------------------
# Rule rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BaselineLine:
    entry_id: int
    raw_material_id: int
    quantity: Decimal
    unit: str = "unit"


@dataclass(frozen=True)
class OptionAddition:
    id: int
    option_id: int
    raw_material_id: int
    quantity: Decimal
    unit: str = "unit"


@dataclass(frozen=True)
class OptionModifier:
    id: int
    option_id: int
    product_bom_entry_id: int
    modifier_type: str
    modifier_value: Decimal


@dataclass(frozen=True)
class VariantOverride:
    id: int
    override_type: str
    raw_material_id: int
    replaces_material_id: Optional[int] = None
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None


@dataclass(frozen=True)
class SelectedOption:
    """One of a variant's options with the positions that order its rules."""

    option_id: int
    axis_position: int
    option_position: int = 0
    axis_rank: int = 0
    axis_id: int = 0

    @property
    def sort_key(self) -> tuple[int, int, int, int, int]:
        return (
            self.axis_position,
            self.axis_rank,
            self.axis_id,
            self.option_position,
            self.option_id,
        )


@dataclass
class BOMRules:
    baseline: list[BaselineLine] = field(default_factory=list)
    additions: list[OptionAddition] = field(default_factory=list)
    modifiers: list[OptionModifier] = field(default_factory=list)
    overrides: list[VariantOverride] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Working map and steps
# ---------------------------------------------------------------------------


@dataclass
class MaterialMap:
    quantities: dict[int, Decimal] = field(default_factory=dict)
    units: dict[int, str] = field(default_factory=dict)

    def merge(self, material_id: int, quantity: Decimal, unit: Optional[str]) -> None:
        self.quantities[material_id] = self.quantities.get(material_id, _ZERO) + quantity
        if unit and material_id not in self.units:
            self.units[material_id] = unit

    def put(self, material_id: int, quantity: Decimal, unit: Optional[str]) -> None:
        self.quantities[material_id] = quantity
        if unit:
            self.units[material_id] = unit
        else:
            self.units.setdefault(material_id, "unit")

    def pop(self, material_id: int) -> Optional[Decimal]:
        self.units.pop(material_id, None)
        return self.quantities.pop(material_id, None)


@dataclass(frozen=True)
class Seed:
    material_id: int
    quantity: Decimal
    unit: str

    def apply(self, state: MaterialMap) -> None:
        state.put(self.material_id, self.quantity, self.unit)


@dataclass(frozen=True)
class Multiply:
    material_id: int
    factor: Decimal

    def apply(self, state: MaterialMap) -> None:
        if self.material_id in state.quantities:
            state.quantities[self.material_id] *= self.factor


@dataclass(frozen=True)
class Add:
    material_id: int
    amount: Decimal

    def apply(self, state: MaterialMap) -> None:
        if self.material_id in state.quantities:
            # a negative add never takes a line below zero
            state.quantities[self.material_id] = max(
                _ZERO, state.quantities[self.material_id] + self.amount
            )


@dataclass(frozen=True)
class Set:
    material_id: int
    value: Decimal

    def apply(self, state: MaterialMap) -> None:
        if self.material_id in state.quantities:
            state.quantities[self.material_id] = self.value


@dataclass(frozen=True)
class Merge:
    material_id: int
    quantity: Decimal
    unit: Optional[str] = None

    def apply(self, state: MaterialMap) -> None:
        state.merge(self.material_id, self.quantity, self.unit)


@dataclass(frozen=True)
class Replace:
    material_id: int
    replaces_material_id: Optional[int]
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None

    def apply(self, state: MaterialMap) -> None:
        removed_unit = None
        removed = None
        if self.replaces_material_id is not None:
            removed_unit = state.units.get(self.replaces_material_id)
            removed = state.pop(self.replaces_material_id)
        quantity = self.quantity if self.quantity is not None else removed
        if quantity is None:
            return
        state.merge(self.material_id, quantity, self.unit or removed_unit)


@dataclass(frozen=True)
class Remove:
    material_id: int

    def apply(self, state: MaterialMap) -> None:
        state.pop(self.material_id)


@dataclass(frozen=True)
class SetQuantity:
    material_id: int
    quantity: Decimal
    unit: Optional[str] = None

    def apply(self, state: MaterialMap) -> None:
        state.put(self.material_id, self.quantity, self.unit or state.units.get(self.material_id))


# ---------------------------------------------------------------------------
# Planning and folding
# ---------------------------------------------------------------------------


_MODIFIER_STEPS = {
    MODIFIER_MULTIPLY: Multiply,
    MODIFIER_ADD: Add,
    MODIFIER_SET: Set,
}


def _override_step(override: VariantOverride):
    if override.override_type == OVERRIDE_REPLACE:
        return Replace(
            override.raw_material_id,
            override.replaces_material_id,
            override.quantity,
            override.unit,
        )
    if override.override_type == OVERRIDE_ADD:
        if override.quantity is None:
            return None
        return Merge(override.raw_material_id, override.quantity, override.unit)
    if override.override_type == OVERRIDE_REMOVE:
        return Remove(override.raw_material_id)
    if override.override_type == OVERRIDE_SET_QUANTITY:
        if override.quantity is None:
            return None
        return SetQuantity(override.raw_material_id, override.quantity, override.unit)
    raise ValueError("unknown override type: {}".format(override.override_type))


def plan_steps(rules: BOMRules, selected: Sequence[SelectedOption]) -> list:
    steps: list = []

    baseline = sorted(rules.baseline, key=lambda line: line.entry_id)
    entry_materials = {line.entry_id: line.raw_material_id for line in baseline}
    for line in baseline:
        steps.append(Seed(line.raw_material_id, line.quantity, line.unit))

    ordered = sorted(selected, key=lambda option: option.sort_key)

    modifiers_by_option = defaultdict(list)
    for modifier in rules.modifiers:
        modifiers_by_option[modifier.option_id].append(modifier)
    for option in ordered:
        for modifier in sorted(modifiers_by_option.get(option.option_id, ()), key=lambda m: m.id):
            material_id = entry_materials.get(modifier.product_bom_entry_id)
            if material_id is None:
                logger.warning(
                    "Skipping BOM modifier %s: entry %s is not in this product's baseline.",
                    modifier.id,
                    modifier.product_bom_entry_id,
                )
                continue
            step_type = _MODIFIER_STEPS.get(modifier.modifier_type)
            if step_type is None:
                raise ValueError("unknown modifier type: {}".format(modifier.modifier_type))
            steps.append(step_type(material_id, modifier.modifier_value))

    additions_by_option = defaultdict(list)
    for addition in rules.additions:
        additions_by_option[addition.option_id].append(addition)
    for option in ordered:
        for addition in sorted(additions_by_option.get(option.option_id, ()), key=lambda a: a.id):
            steps.append(Merge(addition.raw_material_id, addition.quantity, addition.unit))

    for override in sorted(rules.overrides, key=lambda item: item.id):
        step = _override_step(override)
        if step is None:
            logger.warning("Skipping BOM override %s: quantity is not set.", override.id)
            continue
        steps.append(step)

    return steps


@dataclass(frozen=True)
class ResolvedBOM:
    quantities: dict[int, Decimal]
    units: dict[int, str]

    def as_dict(self) -> dict[int, Decimal]:
        return dict(self.quantities)

    def scaled(self, factor) -> "ResolvedBOM":
        factor = Decimal(factor)
        return ResolvedBOM(
            {material_id: quantity * factor for material_id, quantity in self.quantities.items()},
            dict(self.units),
        )


def fold(steps: Iterable) -> ResolvedBOM:
    state = MaterialMap()
    for step in steps:
        step.apply(state)
    quantities = {
        material_id: quantity
        for material_id, quantity in state.quantities.items()
        if quantity != _ZERO
    }
    units = {material_id: state.units.get(material_id, "unit") for material_id in quantities}
    return ResolvedBOM(quantities, units)


def resolve_bom(rules: BOMRules, selected: Sequence[SelectedOption]) -> ResolvedBOM:
    return fold(plan_steps(rules, selected))


__all__ = [
    "Add",
    "BOMRules",
    "BaselineLine",
    "MaterialMap",
    "Merge",
    "Multiply",
    "OptionAddition",
    "OptionModifier",
    "Remove",
    "Replace",
    "ResolvedBOM",
    "SelectedOption",
    "Set",
    "SetQuantity",
    "Seed",
    "VariantOverride",
    "fold",
    "plan_steps",
    "resolve_bom",
]
