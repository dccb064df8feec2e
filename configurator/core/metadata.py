"""Typed metadata for global attribute options.

Each global attribute declares its metadata fields; option metadata is
validated and normalised against them when it is written.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Sequence
from urllib.parse import urlparse

from configurator.core.errors import InvalidMetadata

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class MetadataField:
    field_name: str
    field_type: str = "text"
    is_required: bool = False
    default_value: Optional[str] = None
    select_options: tuple = ()


def _coerce(field: MetadataField, value):
    name = field.field_name
    if field.field_type == "text":
        return str(value)
    if field.field_type == "number":
        if isinstance(value, bool):
            raise InvalidMetadata("{} must be a number.".format(name))
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidMetadata("{} must be a number.".format(name)) from exc
        if not number.is_finite():
            raise InvalidMetadata("{} must be a finite number.".format(name))
        return str(number)
    if field.field_type == "boolean":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise InvalidMetadata("{} must be a boolean.".format(name))
    if field.field_type == "select":
        text = str(value)
        if text not in field.select_options:
            raise InvalidMetadata(
                "{} must be one of: {}.".format(name, ", ".join(field.select_options))
            )
        return text
    if field.field_type == "url":
        text = str(value).strip()
        parsed = urlparse(text)
        if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
            raise InvalidMetadata("{} must be an absolute HTTP(S) URL.".format(name))
        return text
    raise InvalidMetadata("{} has unknown field type {}.".format(name, field.field_type))


def validate_metadata(fields: Sequence[MetadataField], values: Optional[Mapping]) -> dict:
    values = dict(values or {})
    known = {field.field_name for field in fields}
    unknown = sorted(set(values) - known)
    if unknown:
        raise InvalidMetadata("Unknown metadata field(s): {}.".format(", ".join(unknown)))

    result = {}
    for field in fields:
        value = values.get(field.field_name)
        if value is None or value == "":
            if field.default_value is not None:
                value = field.default_value
            elif field.is_required:
                raise InvalidMetadata("{} is required.".format(field.field_name))
            else:
                continue
        result[field.field_name] = _coerce(field, value)
    return result


def metadata_decimal(metadata: Optional[Mapping], field_name: Optional[str]) -> Optional[Decimal]:
    if not field_name or not metadata:
        return None
    value = metadata.get(field_name)
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


__all__ = ["MetadataField", "metadata_decimal", "validate_metadata"]
