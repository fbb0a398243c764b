"""Load catalog and pricing configuration rows into pricing inputs."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from studio_quotes.models import CatalogCategory, PricingConfiguration
from studio_quotes.pricing.catalog_calculator import (
    Catalog,
    CatalogCategorySpec,
    CatalogItemSpec,
    CatalogPriceResult,
    PricingConfig,
    compute_catalog_price,
)
from studio_quotes.services.base_service import BaseService


class CatalogService(BaseService):
    def load_catalog(self, studio_id: int) -> Catalog:
        categories = self.db.scalars(
            select(CatalogCategory)
            .where(CatalogCategory.studio_id == studio_id)
            .options(selectinload(CatalogCategory.items))
            .order_by(CatalogCategory.order, CatalogCategory.id)
        ).all()
        return Catalog(
            categories=tuple(
                CatalogCategorySpec(
                    id=category.id,
                    name=category.name,
                    margin_class=category.margin_class,
                    items=tuple(
                        CatalogItemSpec(
                            id=item.id,
                            name=item.name,
                            cost=item.cost,
                            expense=item.expense,
                            billing_type=item.billing_type,
                        )
                        for item in category.items
                    ),
                )
                for category in categories
            )
        )

    def load_pricing_config(self, studio_id: int) -> PricingConfig | None:
        """Studio pricing percentages, or None while the studio has not configured them."""
        row = self.db.scalar(select(PricingConfiguration).where(PricingConfiguration.studio_id == studio_id))
        if row is None:
            return None
        return PricingConfig.from_model(row)

    def price_selection(
        self,
        studio_id: int,
        selection: Mapping[int, int],
        event_duration: Decimal | None = None,
    ) -> CatalogPriceResult:
        return compute_catalog_price(
            selection,
            self.load_catalog(studio_id),
            self.load_pricing_config(studio_id),
            event_duration=event_duration,
        )
