from datetime import date, datetime

import pytest

from receiptpoints.mappers import (
    ApiItemMapper,
    ApiReceiptMapper,
    JsonItemMapper,
    JsonReceiptMapper,
    MapperFactory,
    MappingError,
    convert_to_cents,
    map_to_item,
    map_to_receipt,
)
from receiptpoints.rules import Item, RulesEngine
from receiptpoints.schema import ApiItem, ApiReceipt

MORNING_RECEIPT = b"""{
    "retailer": "Walgreens",
    "purchaseDate": "2022-01-02",
    "purchaseTime": "08:13",
    "total": "2.65",
    "items": [
        {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
        {"shortDescription": "Dasani", "price": "1.40"}
    ]
}"""

SIMPLE_RECEIPT = b"""{
    "retailer": "Target",
    "purchaseDate": "2022-01-02",
    "purchaseTime": "13:13",
    "total": "1.25",
    "items": [
        {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
    ]
}"""

POINTS_TEST_28 = b"""{
  "retailer": "Target",
  "purchaseDate": "2022-01-01",
  "purchaseTime": "13:01",
  "items": [
    {"shortDescription": "Mountain Dew 12PK", "price": "6.49"},
    {"shortDescription": "Emils Cheese Pizza", "price": "12.25"},
    {"shortDescription": "Knorr Creamy Chicken", "price": "1.26"},
    {"shortDescription": "Doritos Nacho Cheese", "price": "3.35"},
    {"shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ", "price": "12.00"}
  ],
  "total": "35.35"
}"""

POINTS_TEST_109 = b"""{
  "retailer": "M&M Corner Market",
  "purchaseDate": "2022-03-20",
  "purchaseTime": "14:33",
  "items": [
    {"shortDescription": "Gatorade", "price": "2.25"},
    {"shortDescription": "Gatorade", "price": "2.25"},
    {"shortDescription": "Gatorade", "price": "2.25"},
    {"shortDescription": "Gatorade", "price": "2.25"}
  ],
  "total": "9.00"
}"""


def test_api_item_mapper():
    item = map_to_item(ApiItem(short_description="Pepsi - 12-oz", price="1.25"))
    assert item.short_description == "Pepsi - 12-oz"
    assert item.price == 125


def test_api_receipt_mapper():
    api_receipt = ApiReceipt(
        retailer="Walgreens",
        purchase_date=date(2022, 1, 2),
        purchase_time="08:13",
        total="2.65",
        items=[
            ApiItem(short_description="Pepsi - 12-oz", price="1.25"),
            ApiItem(short_description="Dasani", price="1.40"),
        ],
    )
    receipt = map_to_receipt(api_receipt)
    assert receipt.retailer == "Walgreens"
    assert receipt.purchase_datetime == datetime(2022, 1, 2, 8, 13)
    assert receipt.total == 265
    assert receipt.items == (
        Item(short_description="Pepsi - 12-oz", price=125),
        Item(short_description="Dasani", price=140),
    )


def test_mappers_are_registered():
    factory = MapperFactory()
    assert set(factory.item_mappers) == {ApiItem, bytes}
    assert set(factory.receipt_mappers) == {ApiReceipt, bytes}
    assert factory.item_mapper_for(b"{}") is factory.item_mappers[bytes]
    assert factory.receipt_mapper_for(ApiReceipt()) is factory.receipt_mappers[ApiReceipt]


def test_unregistered_type_raises():
    with pytest.raises(MappingError, match="Mapper does not exist for type: int"):
        map_to_item(42)
    with pytest.raises(MappingError, match="Mapper does not exist for type: str"):
        map_to_receipt("{}")


def test_json_item_mapper_simple():
    item = map_to_item(b'{"shortDescription": "Pepsi - 12-oz", "price": "1.25"}')
    assert item == Item(short_description="Pepsi - 12-oz", price=125)


def test_json_receipt_mapper_for_morning_receipt():
    receipt = map_to_receipt(MORNING_RECEIPT)
    assert receipt.retailer == "Walgreens"
    assert receipt.purchase_datetime == datetime(2022, 1, 2, 8, 13)
    assert receipt.total == 265
    assert receipt.items == (
        Item(short_description="Pepsi - 12-oz", price=125),
        Item(short_description="Dasani", price=140),
    )


def test_json_receipt_mapper_for_simple_receipt():
    mapper = JsonReceiptMapper(item_mapper=JsonItemMapper())
    receipt = mapper.to_domain(SIMPLE_RECEIPT)
    assert receipt.retailer == "Target"
    assert receipt.purchase_datetime == datetime(2022, 1, 2, 13, 13)
    assert receipt.total == 125
    assert receipt.items == (Item(short_description="Pepsi - 12-oz", price=125),)


@pytest.mark.parametrize(
    "raw, expected_points",
    [(POINTS_TEST_28, 28), (POINTS_TEST_109, 109)],
    ids=["Target Receipt", "M&M Corner Market Receipt"],
)
def test_rules_engine_against_provided_receipts(raw, expected_points):
    receipt = map_to_receipt(raw)
    assert RulesEngine().calculate_total_points(receipt) == expected_points


def test_json_and_api_mappers_agree():
    api_receipt = ApiReceipt(
        retailer="Walgreens",
        purchase_date=date(2022, 1, 2),
        purchase_time="08:13",
        total="2.65",
        items=[
            ApiItem(short_description="Pepsi - 12-oz", price="1.25"),
            ApiItem(short_description="Dasani", price="1.40"),
        ],
    )
    assert ApiReceiptMapper().to_domain(api_receipt) == map_to_receipt(MORNING_RECEIPT)


@pytest.mark.parametrize(
    "amount, cents",
    [("1.25", 125), ("2.65", 265), ("9.00", 900), ("0.29", 29), ("12", 1200)],
)
def test_convert_to_cents(amount, cents):
    assert convert_to_cents(amount) == cents


@pytest.mark.parametrize("amount", ["", "abc", "1.2.3", " 1.25", "1_0", "inf", "1e400"])
def test_convert_to_cents_rejects_bad_amounts(amount):
    with pytest.raises(MappingError):
        convert_to_cents(amount)


def test_api_item_mapper_rejects_bad_price():
    with pytest.raises(MappingError):
        ApiItemMapper().to_domain(ApiItem(short_description="Dasani", price="$1.40"))


def test_json_item_mapper_rejects_invalid_json():
    with pytest.raises(MappingError):
        JsonItemMapper().to_domain(b'{"shortDescription": ')


def test_json_item_mapper_rejects_non_string_price():
    with pytest.raises(MappingError):
        JsonItemMapper().to_domain(b'{"shortDescription": "Dasani", "price": 1.40}')


@pytest.mark.parametrize(
    "purchase_date, purchase_time",
    [("2022-01-02", "25:00"), ("2022-02-30", "08:13"), ("2022-01-02", "8:1"), ("01/02/2022", "08:13")],
)
def test_json_receipt_mapper_rejects_bad_datetime(purchase_date, purchase_time):
    raw = (
        '{"retailer": "Target", "purchaseDate": "%s", "purchaseTime": "%s", '
        '"total": "1.25", "items": [{"shortDescription": "Dasani", "price": "1.25"}]}'
        % (purchase_date, purchase_time)
    ).encode()
    with pytest.raises(MappingError):
        map_to_receipt(raw)


def test_json_receipt_mapper_rejects_bad_item():
    raw = (
        b'{"retailer": "Target", "purchaseDate": "2022-01-02", "purchaseTime": "13:13", '
        b'"total": "1.25", "items": [{"shortDescription": "Dasani", "price": "cheap"}]}'
    )
    with pytest.raises(MappingError):
        map_to_receipt(raw)


def test_json_receipt_mapper_rejects_items_not_array():
    raw = (
        b'{"retailer": "Target", "purchaseDate": "2022-01-02", "purchaseTime": "13:13", '
        b'"total": "1.25", "items": {"shortDescription": "Dasani"}}'
    )
    with pytest.raises(MappingError, match="items"):
        map_to_receipt(raw)


def test_single_digit_hour_is_accepted():
    raw = (
        b'{"retailer": "Target", "purchaseDate": "2022-01-02", "purchaseTime": "8:13", '
        b'"total": "1.25", "items": []}'
    )
    receipt = map_to_receipt(raw)
    assert receipt.purchase_datetime == datetime(2022, 1, 2, 8, 13)
    assert receipt.items == ()