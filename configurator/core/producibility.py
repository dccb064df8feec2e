from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Mapping, Optional

_ZERO = Decimal(0)


@dataclass(frozen=True)
class Producibility:
    """Buildable units for one resolved BOM.

    ``units`` is ``None`` when nothing positive is required: the variant is
    unconstrained by raw material stock, which is not the same as zero.
    """

    units: Optional[int]
    limiting_material_id: Optional[int] = None
    missing_material_ids: tuple = ()

    @property
    def unconstrained(self) -> bool:
        return self.units is None

    @property
    def status(self) -> str:
        return "unconstrained" if self.units is None else "constrained"


def producible_units(resolved: Mapping, stock: Mapping) -> Producibility:
    best: Optional[int] = None
    limiting: Optional[int] = None
    missing = []
    for material_id in sorted(resolved):
        required = Decimal(resolved[material_id])
        if required <= _ZERO:
            continue
        available = stock.get(material_id)
        if available is None:
            missing.append(material_id)
            available = _ZERO
        available = Decimal(available)
        if available <= _ZERO:
            units = 0
        else:
            units = int((available / required).to_integral_value(rounding=ROUND_FLOOR))
        if best is None or units < best:
            best = units
            limiting = material_id
    return Producibility(units=best, limiting_material_id=limiting, missing_material_ids=tuple(missing))


__all__ = ["Producibility", "producible_units"]
