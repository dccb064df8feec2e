class ConfiguratorError(Exception):
    """Base class for domain errors; ``status_code`` is what the HTTP layer returns."""

    status_code = 400


class NotFound(ConfiguratorError):
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__("{} {} not found.".format(entity, entity_id))
        self.entity = entity
        self.entity_id = entity_id


class Conflict(ConfiguratorError):
    status_code = 409


class NoAttributeAxes(ConfiguratorError):
    def __init__(self, product_id, empty_axes=()):
        self.product_id = product_id
        self.empty_axes = tuple(empty_axes)
        if self.empty_axes:
            message = (
                "Cannot generate variants for product {}: no active options on axis {}."
            ).format(product_id, ", ".join(self.empty_axes))
        else:
            message = (
                "Cannot generate variants for product {}: it has no attributes "
                "and no linked global attributes."
            ).format(product_id)
        super().__init__(message)


class DuplicateAxisKey(ConfiguratorError):
    status_code = 409

    def __init__(self, key: str):
        super().__init__("Two attribute axes resolve to the same key '{}'.".format(key))
        self.key = key


class InvalidModifierReference(ConfiguratorError):
    pass


class NegativeQuantity(ConfiguratorError):
    def __init__(self, field: str, value):
        super().__init__("{} must be non-negative (got {}).".format(field, value))
        self.field = field
        self.value = value


class InvalidOverride(ConfiguratorError):
    pass


class InvalidMetadata(ConfiguratorError):
    pass


class SKUCollisionUnresolved(ConfiguratorError):
    status_code = 409

    def __init__(self, base_sku: str, attempts: int):
        super().__init__(
            "SKU '{}' collides with existing SKUs after {} attempts.".format(base_sku, attempts)
        )
        self.base_sku = base_sku
        self.attempts = attempts


class InvalidStatusTransition(ConfiguratorError):
    status_code = 409


class InsufficientStock(ConfiguratorError):
    status_code = 409

    def __init__(self, raw_material_id, required, available):
        super().__init__(
            "Raw material {} has {} in stock, {} required.".format(
                raw_material_id, available, required
            )
        )
        self.raw_material_id = raw_material_id
        self.required = required
        self.available = available


__all__ = [
    "ConfiguratorError",
    "Conflict",
    "DuplicateAxisKey",
    "InsufficientStock",
    "InvalidMetadata",
    "InvalidModifierReference",
    "InvalidOverride",
    "InvalidStatusTransition",
    "NegativeQuantity",
    "NoAttributeAxes",
    "NotFound",
    "SKUCollisionUnresolved",
]
