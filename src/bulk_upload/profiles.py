"""Per-store-type upload profiles.

A `StoreProfile` bundles everything that differs between a general store, a
pharmacy and a restaurant: the header aliases for each logical field, the
defaults, how stock is modelled, the extra columns to copy onto the product
and the `meta` block. The row normalizer is a single function driven by one
of these profiles, and the template generator reads the same alias tables so
a downloaded template always re-uploads cleanly.

Alias tables are read-only mappings; build a new profile with
`dataclasses.replace` to try a different header set.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .fields import extract_field, to_boolean, to_date, to_integer, to_list, to_number, to_text

Aliases = Mapping[str, Tuple[str, ...]]
RowBuilder = Callable[["StoreProfile", Dict[str, Any], Dict[str, Any]], Dict[str, Any]]

NON_VEG_TOKENS = frozenset({"non", "nonveg", "nonvegetarian", "chicken", "mutton", "meat", "fish", "egg", "eggs", "prawn", "prawns"})
VEG_EXACT = frozenset({"veg", "vegetarian", "pureveg", "vegan"})


@dataclass(frozen=True)
class StockPolicy:
    """How a store type models stock.

    Tracked stock comes from the sheet (``default`` when the column is
    blank) and ``in_stock`` follows it. Untracked stock is pinned to
    ``default`` and the item is always in stock.
    """
    tracked: bool
    default: int


@dataclass(frozen=True)
class StoreProfile:
    store_type: str
    product_type: str
    aliases: Aliases
    category_default: str
    unit_default: str
    stock_policy: StockPolicy
    build_fields: RowBuilder
    build_meta: RowBuilder
    template_fields: Tuple[str, ...] = ()
    sample_rows: Tuple[Tuple[Any, ...], ...] = field(default=())

    def value(self, row: Dict[str, Any], name: str, default: Any = "") -> Any:
        return extract_field(row, self.aliases.get(name, ()), default)

    def text(self, row: Dict[str, Any], name: str, default: str = "") -> str:
        return to_text(self.value(row, name), default)

    def header(self, name: str) -> str:
        """Primary (first-listed) header for a logical field."""
        return self.aliases[name][0]

    def template_headers(self) -> Tuple[str, ...]:
        return tuple(self.header(name) for name in self.template_fields)


def _aliases(**table: Tuple[str, ...]) -> Aliases:
    return MappingProxyType(dict(table))


_COMMON = dict(
    description=("Description", "Details"),
    image_url=("Image URL", "Image", "Image Link"),
    sku=("SKU", "Product Code", "Item Code"),
    unit=("Unit", "UOM"),
    hsn_code=("HSN Code", "HSN"),
)


def classify_food_type(value: Any) -> str:
    """Return ``"veg"`` or ``"nonveg"`` for a raw Veg/Non-Veg cell.

    Matching is done on whole tokens so "Eggplant Curry" stays veg. A cell
    that names both ("Veg / Non-Veg") is treated as non-veg.
    """
    raw = to_text(value).lower()
    if not raw:
        return "veg"
    collapsed = re.sub(r"[\s_\-]+", "", raw)
    if collapsed in VEG_EXACT:
        return "veg"
    if collapsed in ("nonveg", "nonvegetarian"):
        return "nonveg"
    tokens = [t for t in re.split(r"[^a-z]+", raw) if t]
    if any(t in NON_VEG_TOKENS for t in tokens):
        return "nonveg"
    return "veg"


# ---- general ----

def _general_fields(profile: StoreProfile, row: Dict[str, Any], draft: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "brand": profile.text(row, "brand"),
        "quantity": profile.text(row, "quantity", "1"),
        "pack_size": profile.text(row, "pack_size", "1"),
        "min_stock": to_integer(profile.value(row, "min_stock"), 5),
        "barcode": profile.text(row, "barcode"),
        "sku": profile.text(row, "sku"),
        "hsn_code": profile.text(row, "hsn_code"),
        "gst_rate": to_number(profile.value(row, "gst_rate"), 0),
        "expiry_date": to_date(profile.value(row, "expiry_date", None)),
    }


def _no_meta(profile: StoreProfile, row: Dict[str, Any], draft: Dict[str, Any]) -> Dict[str, Any]:
    return {}


GENERAL = StoreProfile(
    store_type="general",
    product_type="general",
    aliases=_aliases(
        name=("Product Name", "Name", "Item Name"),
        price=("MRP", "Price"),
        selling_price=("Selling Price", "Sale Price", "Offer Price"),
        category=("Category",),
        brand=("Brand", "Company"),
        quantity=("Size", "Weight", "Volume"),
        pack_size=("Pack Size", "Pack"),
        stock=("Stock", "Qty", "Quantity"),
        min_stock=("Min Stock", "Reorder Level"),
        barcode=("Barcode", "EAN"),
        gst_rate=("GST %", "GST Rate"),
        expiry_date=("Expiry Date", "Expiry"),
        **_COMMON,
    ),
    category_default="General",
    unit_default="pcs",
    stock_policy=StockPolicy(tracked=True, default=10),
    build_fields=_general_fields,
    build_meta=_no_meta,
    template_fields=(
        "name", "category", "brand", "price", "selling_price", "unit", "quantity", "stock",
        "barcode", "sku", "hsn_code", "gst_rate", "expiry_date", "description", "image_url",
    ),
    sample_rows=(
        ("Tata Salt", "Grocery", "Tata", 28, 26, "kg", "1", 100, "8901234567890", "SALT001",
         "25010010", 5, "", "Iodised salt", ""),
        ("Amul Butter", "Dairy", "Amul", 56, 54, "g", "100", 50, "8901234567891", "BUTTER001",
         "04051000", 12, "2027-03-15", "Salted butter", ""),
    ),
)


# ---- medical ----

def _medical_fields(profile: StoreProfile, row: Dict[str, Any], draft: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "generic_name": profile.text(row, "generic_name"),
        "brand": profile.text(row, "brand"),
        "manufacturer": profile.text(row, "manufacturer"),
        "batch_number": profile.text(row, "batch_number"),
        "hsn_code": profile.text(row, "hsn_code"),
        "sku": profile.text(row, "sku"),
        "expiry_date": to_date(profile.value(row, "expiry_date", None)),
        "manufacture_date": to_date(profile.value(row, "manufacture_date", None)),
        "pack_size": profile.text(row, "pack_size", "1"),
        "prescription_required": to_boolean(profile.value(row, "prescription_required")),
        "is_controlled": to_boolean(profile.value(row, "is_controlled")),
    }


def _medical_meta(profile: StoreProfile, row: Dict[str, Any], draft: Dict[str, Any]) -> Dict[str, Any]:
    raw_expiry = profile.value(row, "expiry_date", None)
    return {
        "mrp": draft["price"],
        "brand": draft["brand"],
        "salt_name": draft["generic_name"],
        "batch_no": draft["batch_number"],
        # keep what the vendor typed when it is not a recognisable date
        "expiry_date": draft["expiry_date"] or to_text(raw_expiry),
        "prescription_required": draft["prescription_required"],
    }


MEDICAL = StoreProfile(
    store_type="medical",
    product_type="medical",
    aliases=_aliases(
        name=("Medicine Name", "Name", "Product Name"),
        generic_name=("Generic Name", "Salt", "Salt Name"),
        price=("MRP", "Price"),
        selling_price=("Selling Price", "Sale Price", "Offer Price"),
        category=("Category",),
        brand=("Brand", "Manufacturer", "Company"),
        manufacturer=("Manufacturer", "Company", "Brand"),
        batch_number=("Batch No", "Batch", "Batch Number"),
        expiry_date=("Expiry Date", "Expiry"),
        manufacture_date=("Manufacture Date", "Mfg Date"),
        stock=("Stock", "Quantity", "Qty"),
        pack_size=("Pack Size", "Pack"),
        prescription_required=("Prescription Required", "Rx Required"),
        is_controlled=("Controlled", "Schedule H"),
        **_COMMON,
    ),
    category_default="Medicine",
    unit_default="strip",
    stock_policy=StockPolicy(tracked=True, default=10),
    build_fields=_medical_fields,
    build_meta=_medical_meta,
    template_fields=(
        "name", "generic_name", "category", "price", "selling_price", "manufacturer", "batch_number",
        "expiry_date", "stock", "unit", "pack_size", "prescription_required", "hsn_code",
        "description", "image_url",
    ),
    sample_rows=(
        ("Paracetamol 500mg", "Paracetamol", "Pain Relief", 25, 22, "Cipla", "B001", "2027-12-31",
         100, "strip", "10 tablets", "No", "30049099", "For fever and pain", ""),
        ("Amoxicillin 250mg", "Amoxicillin", "Antibiotics", 85, 78, "Sun Pharma", "B002", "2027-06-30",
         50, "strip", "10 capsules", "Yes", "30041000", "Antibiotic medication", ""),
    ),
)


# ---- restaurant ----

def _restaurant_fields(profile: StoreProfile, row: Dict[str, Any], draft: Dict[str, Any]) -> Dict[str, Any]:
    available = to_boolean(profile.value(row, "available", "yes"))
    if to_boolean(profile.value(row, "not_available")):
        available = False
    return {
        "sku": profile.text(row, "sku"),
        "food_type": classify_food_type(profile.value(row, "food_type", "veg")),
        "spice_level": profile.text(row, "spice_level", "medium").lower(),
        "cuisine": profile.text(row, "cuisine"),
        "preparation_time": to_integer(profile.value(row, "prep_time"), 20),
        "serves": profile.text(row, "serves", "1"),
        "ingredients": to_list(profile.value(row, "ingredients")),
        "allergens": to_list(profile.value(row, "allergens")),
        "calories": to_integer(profile.value(row, "calories"), 0),
        "is_available": available,
    }


def _restaurant_meta(profile: StoreProfile, row: Dict[str, Any], draft: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "is_veg": draft["food_type"] == "veg",
        "prep_time": draft["preparation_time"],
        "serves": to_integer(draft["serves"], 1),
    }


RESTAURANT = StoreProfile(
    store_type="restaurant",
    product_type="food",
    aliases=_aliases(
        name=("Item Name", "Dish Name", "Name"),
        category=("Category", "Menu Category"),
        price=("Price", "MRP"),
        selling_price=("Selling Price", "Offer Price", "Sale Price"),
        food_type=("Veg/Non-Veg", "Food Type", "Type"),
        prep_time=("Prep Time", "Preparation Time"),
        serves=("Serves", "Portion"),
        cuisine=("Cuisine", "Cuisine Type"),
        spice_level=("Spice Level",),
        calories=("Calories",),
        ingredients=("Ingredients",),
        allergens=("Allergens",),
        available=("Available",),
        not_available=("Not Available",),
        **_COMMON,
    ),
    category_default="Main Course",
    unit_default="plate",
    stock_policy=StockPolicy(tracked=False, default=100),
    build_fields=_restaurant_fields,
    build_meta=_restaurant_meta,
    template_fields=(
        "name", "category", "price", "selling_price", "food_type", "prep_time", "serves",
        "description", "cuisine", "spice_level", "calories", "ingredients", "available", "image_url",
    ),
    sample_rows=(
        ("Butter Chicken", "Main Course", 320, 299, "Non-Veg", 30, "2", "Creamy tomato gravy with chicken",
         "North Indian", "Medium", 450, "Chicken, Butter, Cream, Tomatoes", "Yes", ""),
        ("Paneer Tikka", "Starters", 220, 199, "Veg", 20, "2", "Grilled cottage cheese with spices",
         "North Indian", "Mild", 280, "Paneer, Bell Peppers, Onions", "Yes", ""),
    ),
)


PROFILES: Mapping[str, StoreProfile] = MappingProxyType({
    "general": GENERAL,
    "medical": MEDICAL,
    "restaurant": RESTAURANT,
})


def get_profile(store_type: Optional[str], profiles: Optional[Mapping[str, StoreProfile]] = None) -> StoreProfile:
    """Pick the profile for a declared store type.

    Matching is case-insensitive; anything that is not a known special type
    ("grocery", typos, None) gets the general rules.
    """
    table = profiles if profiles is not None else PROFILES
    key = (store_type or "").strip().lower()
    if key in table:
        return table[key]
    return table["general"]
