# receiptpoints

A small HTTP service that takes receipts, keeps them in memory and awards
reward points for each one by a fixed set of rules. It needs nothing
outside the Python standard library.

## Installing

```
pip install .
```

## Running the server

```
receiptpoints
receiptpoints --port 9000
```

The server listens on the port given with `--port`, otherwise on the port
in the `PORT` environment variable, or on 8080 when neither is set. It
logs each request as it starts and completes. Ctrl+C or SIGTERM stops it.
The command exits with status 1 if it cannot bind the port or does not
stop within five seconds.

## Endpoints

`POST /receipts/process` takes a receipt as JSON:

```json
{
  "retailer": "Target",
  "purchaseDate": "2022-01-01",
  "purchaseTime": "13:01",
  "items": [
    {"shortDescription": "Mountain Dew 12PK", "price": "6.49"}
  ],
  "total": "6.49"
}
```

and answers `{"id": "<receipt id>"}`. A body that is not JSON, does not
have the schema's shape, or fails validation gets a 400 with the body
`The receipt is invalid.`

`GET /receipts/{id}/points` answers `{"points": <n>}`, or a 404 with the
body `No receipt found for that ID.` when no receipt has that id.

`GET /healthz` answers `OK`. Other paths get a 404, and a wrong method on
a receipt endpoint gets a 405. Every response carries permissive CORS
headers, and `OPTIONS` requests are answered with 200 straight away.

## Validation

- `purchaseDate` is required and must be a `YYYY-MM-DD` date
- `retailer` must be one or more ASCII letters, digits, `_`, whitespace,
  `-` or `&`
- `purchaseTime` must be a 24-hour `H:MM` or `HH:MM` time
- `items` must hold at least one item; each `shortDescription` must be one
  or more ASCII letters, digits, `_`, whitespace or `-`, and each `price`
  must match `^\d+\.\d{2}$`
- `total` must match `^\d+\.\d{2}$`

## Points

Points are the sum of these rules (`receiptpoints.rules`):

- `RetailerNameRule`: one point for every alphanumeric character in the
  retailer name;
- `RoundDollarRule`: 50 points if the total is a round dollar amount;
- `MultipleOfQuarterRule`: 25 points if the total is a multiple of 0.25;
- `ItemPairRule`: 5 points for every two items;
- `ItemDescriptionRule`: for each item whose trimmed description length is
  a multiple of 3, the price times 0.2, rounded up;
- `OddDayRule`: 6 points if the day of the purchase date is odd;
- `AfternoonPurchaseRule`: 10 points if the purchase time is from 14:00 up
  to 15:59.

`RulesEngine().calculate_total_points(receipt)` applies them all.

## Using it as a library

```python
from receiptpoints.mappers import map_to_receipt
from receiptpoints.rules import RulesEngine

with open("receipt.json", "rb") as fh:
    receipt = map_to_receipt(fh.read())

print(RulesEngine().calculate_total_points(receipt))
```

`map_to_receipt` and `map_to_item` accept raw JSON as `bytes` or the
parsed `ApiReceipt` / `ApiItem` objects from `receiptpoints.schema`, and
raise `MappingError` when the input cannot be mapped. Amounts are held in
whole cents.

`receiptpoints.validation.ReceiptValidationEngine` checks an `ApiReceipt`
against the rules above. `receiptpoints.server.Server` holds the two
request handlers on top of a `receiptpoints.repository.Repository` such as
`MemoryRepository`, and `receiptpoints.app.make_app(server)` wraps a server
into the WSGI application that the `receiptpoints` command runs.

## What it does not do

- Receipts are kept in memory only; they are lost when the server stops.
- There is no endpoint that serves a machine-readable API description.

## Running the tests

```
pip install ".[test]"
pytest
```