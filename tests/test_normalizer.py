import dataclasses
from types import MappingProxyType

import pytest

from src.bulk_upload.normalizer import (
    normalize_row,
    process_general_product,
    process_medical_product,
    process_restaurant_product,
    resolve_prices,
)
from src.bulk_upload.profiles import GENERAL, classify_food_type

NORMALIZERS = [process_general_product, process_medical_product, process_restaurant_product]


@pytest.mark.parametrize("fn", NORMALIZERS)
@pytest.mark.parametrize("prices", [
    {},
    {"MRP": 0, "Selling Price": 0},
    {"MRP": -5, "Selling Price": "0"},
    {"MRP": "free", "Price": ""},
])
def test_rejects_rows_without_positive_price(fn, prices):
    row = {"Name": "Something", **prices}
    assert fn(row, 1, 2) is None


@pytest.mark.parametrize("fn", NORMALIZERS)
def test_rejects_rows_without_name(fn):
    assert fn({"Name": "   ", "MRP": 10, "Price": 10}, 1, 2) is None


@pytest.mark.parametrize("base,selling,expected", [
    (100, 80, (100, 80)),
    (100, 0, (100, 100)),
    (100, 100, (100, 100)),
    (100, 120, (100, 100)),
    (0, 60, (60, 60)),
    (-1, 60, (60, 60)),
])
def test_resolve_prices(base, selling, expected):
    assert resolve_prices(base, selling) == expected


@pytest.mark.parametrize("fn", NORMALIZERS)
@pytest.mark.parametrize("base,selling", [(50, 40), (50, 60), (0, 30), (25, 25), (10, "x")])
def test_discount_never_exceeds_price(fn, base, selling):
    row = {"Name": "Thing", "MRP": base, "Price": base, "Selling Price": selling}
    draft = fn(row, 1, 2)
    assert draft is not None
    assert draft["discount_price"] <= draft["price"]


def test_general_draft_defaults():
    draft = process_general_product({"Product Name": " Tata Salt ", "MRP": "28", "Selling Price": "26"}, 5, 9)
    assert draft["store"] == 5 and draft["vendor"] == 9
    assert draft["name"] == "Tata Salt"
    assert draft["price"] == 28 and draft["discount_price"] == 26
    assert draft["category"] == "General"
    assert draft["brand"] == ""
    assert draft["unit"] == "pcs"
    assert draft["stock"] == 10 and draft["stock_quantity"] == 10
    assert draft["in_stock"] is True
    assert draft["min_stock"] == 5
    assert draft["meta"] == {}
    assert draft["product_type"] == "general"
    assert draft["images"] == []


@pytest.mark.parametrize("fn", [process_general_product, process_medical_product])
@pytest.mark.parametrize("stock", [0, 3, "", "n/a"])
def test_tracked_stock_matches_in_stock(fn, stock):
    draft = fn({"Name": "Item", "MRP": 10, "Stock": stock}, 1, 2)
    assert draft["in_stock"] == (draft["stock"] > 0)


def test_explicit_zero_stock_is_out_of_stock():
    draft = process_general_product({"Name": "Item", "MRP": 10, "Stock": 0}, 1, 2)
    assert draft["stock"] == 0
    assert draft["in_stock"] is False


def test_medical_draft_and_meta():
    row = {
        "Medicine Name": "Paracetamol 500mg",
        "Name": "ignored",
        "Generic Name": "Paracetamol",
        "MRP": 25,
        "Selling Price": 22,
        "Manufacturer": "Cipla",
        "Batch No": "B001",
        "Expiry Date": "2027-12-31",
        "Prescription Required": "No",
        "Image URL": "http://img/1.png",
    }
    draft = process_medical_product(row, 1, 2)
    assert draft["name"] == "Paracetamol 500mg"
    assert draft["category"] == "Medicine"
    assert draft["unit"] == "strip"
    assert draft["brand"] == "Cipla"
    assert draft["images"] == ["http://img/1.png"]
    assert draft["meta"] == {
        "mrp": 25,
        "brand": "Cipla",
        "salt_name": "Paracetamol",
        "batch_no": "B001",
        "expiry_date": "2027-12-31",
        "prescription_required": False,
    }


def test_medical_meta_keeps_unparseable_expiry_text():
    draft = process_medical_product({"Medicine Name": "X", "MRP": 5, "Expiry": "Dec 27"}, 1, 2)
    assert draft["expiry_date"] is None
    assert draft["meta"]["expiry_date"] == "Dec 27"


def test_restaurant_stock_is_fixed_and_always_in_stock():
    draft = process_restaurant_product({"Dish Name": "Dal", "Price": 120, "Stock": 0, "Not Available": "yes"}, 1, 2)
    assert draft["stock"] == 100
    assert draft["in_stock"] is True
    assert draft["is_available"] is False
    assert draft["category"] == "Main Course"
    assert draft["product_type"] == "food"


def test_restaurant_meta_defaults():
    draft = process_restaurant_product({"Item Name": "Paneer Tikka", "Price": 220, "Offer Price": 199}, 1, 2)
    assert draft["discount_price"] == 199
    assert draft["meta"] == {"is_veg": True, "prep_time": 20, "serves": 1}
    assert draft["is_available"] is True


def test_restaurant_lists_and_food_type():
    row = {
        "Item Name": "Butter Chicken",
        "Price": 320,
        "Veg/Non-Veg": "Non-Veg",
        "Ingredients": "Chicken, Butter, Cream",
        "Prep Time": 30,
        "Serves": 2,
    }
    draft = process_restaurant_product(row, 1, 2)
    assert draft["food_type"] == "nonveg"
    assert draft["ingredients"] == ["Chicken", "Butter", "Cream"]
    assert draft["meta"] == {"is_veg": False, "prep_time": 30, "serves": 2}


@pytest.mark.parametrize("raw,expected", [
    ("Veg", "veg"),
    (" VEGETARIAN ", "veg"),
    ("Non-Veg", "nonveg"),
    ("non_veg", "nonveg"),
    ("NON VEG", "nonveg"),
    ("Chicken", "nonveg"),
    ("contains egg", "nonveg"),
    ("Eggplant", "veg"),
    ("Veg / Non-Veg", "nonveg"),
    ("", "veg"),
    (None, "veg"),
])
def test_classify_food_type(raw, expected):
    assert classify_food_type(raw) == expected


def test_custom_alias_profile_can_be_substituted():
    aliases = dict(GENERAL.aliases)
    aliases["name"] = ("Artikel",)
    aliases["price"] = ("Preis",)
    german = dataclasses.replace(GENERAL, aliases=MappingProxyType(aliases))
    draft = normalize_row({"Artikel": "Brot", "Preis": "3,5"}, 1, 2, german)
    # "3,5" reads as 35: commas are thousands separators
    assert draft["name"] == "Brot"
    assert draft["price"] == 35
    assert normalize_row({"Product Name": "Brot", "MRP": 3}, 1, 2, german) is None
