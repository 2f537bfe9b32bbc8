"""Row normalizer: one raw spreadsheet row -> one product draft (or None)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .fields import to_integer, to_number, to_text
from .profiles import GENERAL, MEDICAL, RESTAURANT, StoreProfile

logger = logging.getLogger(__name__)

Draft = Dict[str, Any]


def resolve_prices(base_price: float, selling_price: float) -> Optional[tuple]:
    """Return (price, discount_price) or None when neither price is usable.

    The base price wins when positive, otherwise the selling price stands in.
    A selling price only counts as a discount when it is positive and
    strictly below the final price; anything else collapses to no discount.
    """
    if base_price <= 0 and selling_price <= 0:
        return None
    price = base_price if base_price > 0 else selling_price
    if 0 < selling_price < price:
        discount_price = selling_price
    else:
        discount_price = price
    return round(price, 2), round(discount_price, 2)


def normalize_row(row: Dict[str, Any], store_id: Any, vendor_id: Any, profile: StoreProfile = GENERAL) -> Optional[Draft]:
    """Map one raw row to a product draft using ``profile``'s rules.

    Returns None when the row has no product name or no positive price.
    Never raises on malformed cell data.
    """
    name = to_text(profile.value(row, "name"))
    if not name:
        logger.debug("row rejected: no %s name", profile.store_type)
        return None

    prices = resolve_prices(
        to_number(profile.value(row, "price"), 0),
        to_number(profile.value(row, "selling_price"), 0),
    )
    if prices is None:
        logger.debug("row rejected: no valid price for %r", name)
        return None
    price, discount_price = prices

    policy = profile.stock_policy
    if policy.tracked:
        stock = to_integer(profile.value(row, "stock"), policy.default)
        in_stock = stock > 0
    else:
        stock = policy.default
        in_stock = True
    image_url = profile.text(row, "image_url")

    draft: Draft = {
        "store": store_id,
        "vendor": vendor_id,
        "name": name,
        "description": profile.text(row, "description"),
        "category": profile.text(row, "category", profile.category_default),
        "brand": "",
        "price": price,
        "discount_price": discount_price,
        "unit": profile.text(row, "unit", profile.unit_default),
        "stock": stock,
        "stock_quantity": stock,
        "in_stock": in_stock,
        "images": [image_url] if image_url else [],
        "is_active": True,
        "store_type": profile.store_type,
        "product_type": profile.product_type,
    }
    draft.update(profile.build_fields(profile, row, draft))
    draft["meta"] = profile.build_meta(profile, row, draft)
    return draft


def process_general_product(row: Dict[str, Any], store_id: Any, vendor_id: Any) -> Optional[Draft]:
    return normalize_row(row, store_id, vendor_id, GENERAL)


def process_medical_product(row: Dict[str, Any], store_id: Any, vendor_id: Any) -> Optional[Draft]:
    return normalize_row(row, store_id, vendor_id, MEDICAL)


def process_restaurant_product(row: Dict[str, Any], store_id: Any, vendor_id: Any) -> Optional[Draft]:
    return normalize_row(row, store_id, vendor_id, RESTAURANT)
