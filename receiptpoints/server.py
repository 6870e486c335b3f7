"""Request handlers for submitting receipts and querying their points."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from receiptpoints.mappers import MappingError, map_to_receipt
from receiptpoints.repository import ReceiptNotFoundError, Repository
from receiptpoints.rules import RulesEngine
from receiptpoints.schema import ApiReceipt
from receiptpoints.validation import ReceiptValidationEngine

INVALID_RECEIPT_MESSAGE = "The receipt is invalid."
NOT_FOUND_MESSAGE = "No receipt found for that ID."

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


class InvalidReceiptError(ValueError):
    """Raised when a submitted receipt is missing, invalid or cannot be mapped."""


@dataclass(frozen=True)
class Response:
    """An HTTP response: status code, body bytes and optional content type."""

    status: int
    body: bytes = b""
    content_type: Optional[str] = None

    @classmethod
    def json(cls, status: int, payload: Any) -> "Response":
        """Build a compact JSON response terminated by a newline."""
        text = json.dumps(payload, separators=(",", ":")) + "\n"
        return cls(status, text.encode("utf-8"), JSON_CONTENT_TYPE)

    @classmethod
    def text(cls, status: int, message: str) -> "Response":
        """Build a plain-text response."""
        return cls(status, message.encode("utf-8"), TEXT_CONTENT_TYPE)


class Server:
    """Handles the receipt endpoints on top of a repository."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def post_receipts_process(self, body: Optional[ApiReceipt]) -> Response:
        """Validate, map and store a receipt; respond with its new ID.

        Raises InvalidReceiptError when the receipt is missing or invalid.
        """
        if body is None:
            raise InvalidReceiptError("invalid request: missing receipt")
        if not ReceiptValidationEngine().is_valid(body):
            raise InvalidReceiptError("receipt failed validation")
        try:
            receipt = map_to_receipt(body)
        except MappingError as exc:
            raise InvalidReceiptError(f"failed to map receipt: {exc}") from exc
        receipt_id = self.repository.save_receipt(receipt)
        return Response.json(200, {"id": receipt_id})

    def get_receipts_id_points(self, receipt_id: str) -> Response:
        """Respond with the points awarded for a stored receipt, or 404."""
        try:
            receipt = self.repository.load_receipt(receipt_id)
        except ReceiptNotFoundError:
            return Response.text(404, NOT_FOUND_MESSAGE)
        points = RulesEngine().calculate_total_points(receipt)
        return Response.json(200, {"points": points})