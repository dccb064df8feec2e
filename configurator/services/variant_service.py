from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError

from configurator.core.axes import AxisOption
from configurator.core.constants import AXIS_SOURCE_PRODUCT, EVENT_VARIANT_GENERATED
from configurator.core.errors import ConfiguratorError, Conflict, NoAttributeAxes
from configurator.core.metadata import metadata_decimal
from configurator.core.variant_matrix import (
    SkuAllocator,
    base_sku,
    cartesian_product,
    combination_refs,
    computed_price,
    computed_weight,
    default_sku_prefix,
    identity_hash,
)
from configurator.models.attribute import ProductAttributeOption
from configurator.models.global_attribute import (
    GlobalAttributeOption,
    ProductGlobalAttributeLink,
    ProductGlobalOptionSelection,
)
from configurator.models.product import Product
from configurator.models.variant import (
    ProductVariant,
    ProductVariantGlobalOption,
    ProductVariantOption,
)
from configurator.services.axis_service import AxisService
from configurator.services.base import Service

_EDITABLE_FIELDS = (
    "price",
    "compare_at_price",
    "weight_grams",
    "low_stock_threshold",
    "barcode",
    "is_active",
)


class VariantService(Service):
    def __init__(self, db, *, axes: Optional[AxisService] = None, **kwargs):
        super().__init__(db, **kwargs)
        self.axes = axes or AxisService(db, settings=self.settings)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_variants(self, product_id: int) -> list[ProductVariant]:
        """Create the variants missing from the product's option matrix.

        Returns only the newly created variants; running it again with the same
        axes creates nothing. Existing variants are never modified or deleted.
        A concurrent generator inserting the same combination makes the commit
        fail on the identity constraint; the whole reconciliation is then rolled
        back and re-run against a fresh read.
        """
        product = self._get(Product, product_id, "Product")
        usable, empty = self.axes.resolve_all(product_id)
        if not usable:
            raise NoAttributeAxes(product_id, [axis.key for axis in empty])
        combinations = cartesian_product(usable)

        max_retries = max(0, int(self.settings.VARIANT_GENERATION_MAX_RETRIES))
        attempt = 0
        while True:
            try:
                created = self._create_missing(product, combinations)
                break
            except IntegrityError as exc:
                self.db.rollback()
                attempt += 1
                if attempt > max_retries:
                    raise Conflict(
                        "Variant generation for product {} kept colliding with concurrent writes.".format(
                            product_id
                        )
                    ) from exc
                self.logger.warning(
                    "Variant generation for product %s collided with a concurrent insert; retry %s/%s.",
                    product_id,
                    attempt,
                    max_retries,
                )

        self.logger.info(
            "Generated %s new variant(s) for product %s (%s combination(s)).",
            len(created),
            product_id,
            len(combinations),
        )
        if created:
            self.events.publish(
                EVENT_VARIANT_GENERATED,
                {"product_id": product_id, "variant_ids": [variant.id for variant in created]},
            )
        return created

    def _create_missing(self, product: Product, combinations) -> list[ProductVariant]:
        existing = self._existing_identities(product.id)
        pending = []
        for combo in combinations:
            digest = identity_hash(combination_refs(combo))
            if digest not in existing:
                pending.append((combo, digest))
        if not pending:
            return []

        length = min(4, max(3, int(self.settings.SKU_ABBREVIATION_LENGTH)))
        prefix = default_sku_prefix(product.sku_prefix, product.name)
        allocator = SkuAllocator(
            self._taken_skus(prefix), self.settings.SKU_MAX_COLLISION_ATTEMPTS
        )
        position = self._max_position(product.id)

        created = []
        try:
            for combo, digest in pending:
                position += 1
                variant = ProductVariant(
                    product_id=product.id,
                    sku=allocator.allocate(base_sku(prefix, combo, length)),
                    identity_hash=digest,
                    price=None,
                    weight_grams=None,
                    stock_quantity=0,
                    is_active=True,
                    position=position,
                )
                for axis, option in combo:
                    if axis.source == AXIS_SOURCE_PRODUCT:
                        variant.options.append(
                            ProductVariantOption(attribute_id=axis.axis_id, option_id=option.id)
                        )
                    else:
                        variant.global_options.append(
                            ProductVariantGlobalOption(link_id=axis.axis_id, global_option_id=option.id)
                        )
                self.db.add(variant)
                created.append(variant)
        except ConfiguratorError:
            self.db.rollback()
            raise
        self.db.commit()
        return created

    def _existing_identities(self, product_id: int) -> set[str]:
        return set(
            self.db.execute(
                select(ProductVariant.identity_hash).where(ProductVariant.product_id == product_id)
            ).scalars()
        )

    def _taken_skus(self, prefix: str) -> set[str]:
        return set(
            self.db.execute(
                select(ProductVariant.sku).where(
                    ProductVariant.sku.startswith(prefix + "-", autoescape=True)
                )
            ).scalars()
        )

    def _max_position(self, product_id: int) -> int:
        current = self.db.execute(
            select(func.max(ProductVariant.position)).where(ProductVariant.product_id == product_id)
        ).scalar()
        return -1 if current is None else current

    # ------------------------------------------------------------------
    # Reads and edits
    # ------------------------------------------------------------------

    def get_variant(self, variant_id: int) -> ProductVariant:
        return self._get(ProductVariant, variant_id, "Variant")

    def list_variants(self, product_id: int, *, active_only: bool = False) -> list[ProductVariant]:
        self._get(Product, product_id, "Product")
        stmt = select(ProductVariant).where(ProductVariant.product_id == product_id)
        if active_only:
            stmt = stmt.where(ProductVariant.is_active.is_(True))
        stmt = stmt.order_by(ProductVariant.position, ProductVariant.id)
        return list(self.db.execute(stmt).scalars().all())

    def update_variant(self, variant_id: int, **changes) -> ProductVariant:
        """Edit a variant's commercial fields; its option set never changes."""
        variant = self.get_variant(variant_id)
        unknown = sorted(set(changes) - set(_EDITABLE_FIELDS))
        if unknown:
            raise ConfiguratorError("Variant field(s) not editable: {}.".format(", ".join(unknown)))
        for name in ("price", "compare_at_price"):
            if name in changes and changes[name] is not None:
                changes[name] = Decimal(str(changes[name]))
        for name, value in changes.items():
            setattr(variant, name, value)
        self._commit("Variant {} could not be updated.".format(variant_id))
        self.logger.info("Variant %s updated (%s).", variant_id, ", ".join(sorted(changes)))
        return variant

    def option_modifiers(self, variant: ProductVariant) -> list[AxisOption]:
        """The variant's options with the modifiers currently in effect for its product."""
        options = []
        product_option_ids = [row.option_id for row in variant.options]
        if product_option_ids:
            rows = self.db.execute(
                select(ProductAttributeOption).where(ProductAttributeOption.id.in_(product_option_ids))
            ).scalars()
            for row in rows:
                options.append(
                    AxisOption(
                        id=row.id,
                        value=row.value,
                        display_value=row.display_value,
                        position=row.position,
                        price_modifier=row.price_modifier,
                        weight_modifier=row.weight_modifier_grams,
                        is_active=row.is_active,
                    )
                )

        pairs = {(row.link_id, row.global_option_id) for row in variant.global_options}
        if pairs:
            rows = self.db.execute(
                select(ProductGlobalAttributeLink, GlobalAttributeOption, ProductGlobalOptionSelection)
                .join(
                    GlobalAttributeOption,
                    GlobalAttributeOption.global_attribute_id == ProductGlobalAttributeLink.global_attribute_id,
                )
                .outerjoin(
                    ProductGlobalOptionSelection,
                    and_(
                        ProductGlobalOptionSelection.link_id == ProductGlobalAttributeLink.id,
                        ProductGlobalOptionSelection.global_option_id == GlobalAttributeOption.id,
                    ),
                )
                .where(
                    ProductGlobalAttributeLink.id.in_(sorted({link_id for link_id, _ in pairs})),
                    GlobalAttributeOption.id.in_(sorted({option_id for _, option_id in pairs})),
                )
            ).all()
            for link, option, selection in rows:
                if (link.id, option.id) not in pairs:
                    continue
                price = metadata_decimal(option.option_metadata, link.price_modifier_field)
                weight = metadata_decimal(option.option_metadata, link.weight_modifier_field)
                if selection is not None:
                    if selection.price_modifier is not None:
                        price = selection.price_modifier
                    if selection.weight_modifier_grams is not None:
                        weight = selection.weight_modifier_grams
                options.append(
                    AxisOption(
                        id=option.id,
                        value=option.value,
                        display_value=option.display_value,
                        position=option.position,
                        price_modifier=price,
                        weight_modifier=None if weight is None else int(weight),
                        is_active=option.is_active,
                    )
                )
        return options

    def effective_price(self, variant: ProductVariant) -> Decimal:
        if variant.price is not None:
            return Decimal(variant.price)
        product = self._get(Product, variant.product_id, "Product")
        return computed_price(product.base_price, self.option_modifiers(variant))

    def effective_weight(self, variant: ProductVariant) -> int:
        if variant.weight_grams is not None:
            return int(variant.weight_grams)
        product = self._get(Product, variant.product_id, "Product")
        return computed_weight(product.base_weight_grams, self.option_modifiers(variant))


__all__ = ["VariantService"]
