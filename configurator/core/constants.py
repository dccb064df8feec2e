AXIS_SOURCE_PRODUCT = "product"
AXIS_SOURCE_GLOBAL = "global"
AXIS_SOURCES = (AXIS_SOURCE_PRODUCT, AXIS_SOURCE_GLOBAL)

ATTRIBUTE_TYPES = ("select", "color_swatch", "button_group", "image_swatch")

UNITS_OF_MEASURE = ("unit", "kg", "g", "m", "m2", "m3", "l", "ml")

MODIFIER_MULTIPLY = "multiply"
MODIFIER_ADD = "add"
MODIFIER_SET = "set"
MODIFIER_TYPES = (MODIFIER_MULTIPLY, MODIFIER_ADD, MODIFIER_SET)

OVERRIDE_REPLACE = "replace"
OVERRIDE_ADD = "add"
OVERRIDE_REMOVE = "remove"
OVERRIDE_SET_QUANTITY = "set_quantity"
OVERRIDE_TYPES = (OVERRIDE_REPLACE, OVERRIDE_ADD, OVERRIDE_REMOVE, OVERRIDE_SET_QUANTITY)

METADATA_FIELD_TYPES = ("text", "number", "boolean", "select", "url")

BATCH_DRAFT = "draft"
BATCH_IN_PROGRESS = "in_progress"
BATCH_COMPLETED = "completed"
BATCH_CANCELLED = "cancelled"
BATCH_STATUSES = (BATCH_DRAFT, BATCH_IN_PROGRESS, BATCH_COMPLETED, BATCH_CANCELLED)

STOCK_ENTITY_RAW_MATERIAL = "raw_material"
STOCK_ENTITY_VARIANT = "product_variant"

MOVEMENT_TYPES = (
    "purchase",
    "sale",
    "adjustment",
    "production_consume",
    "production_output",
    "return",
    "damage",
)

EVENT_VARIANT_GENERATED = "variant.generated"
EVENT_PRODUCTION_COMPLETED = "production.completed"
EVENT_STOCK_LOW = "stock.low"
