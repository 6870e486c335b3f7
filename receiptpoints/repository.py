"""Storage for processed receipts."""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod

from receiptpoints.rules import Receipt


class ReceiptNotFoundError(LookupError):
    """Raised when no receipt is stored under the requested ID."""

    def __init__(self, receipt_id: str) -> None:
        super().__init__(f"receipt with ID {receipt_id} was not found in the repository")
        self.receipt_id = receipt_id


class Repository(ABC):
    """Persists receipts and loads them back by ID."""

    @abstractmethod
    def save_receipt(self, receipt: Receipt) -> str:
        """Store the receipt and return its new ID."""

    @abstractmethod
    def load_receipt(self, receipt_id: str) -> Receipt:
        """Return the receipt stored under the ID, or raise ReceiptNotFoundError."""


class MemoryRepository(Repository):
    """A thread-safe repository that keeps receipts in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._receipts: dict[str, Receipt] = {}

    def save_receipt(self, receipt: Receipt) -> str:
        receipt_id = str(uuid.uuid4())
        with self._lock:
            self._receipts[receipt_id] = receipt
        return receipt_id

    def load_receipt(self, receipt_id: str) -> Receipt:
        with self._lock:
            try:
                return self._receipts[receipt_id]
            except KeyError:
                raise ReceiptNotFoundError(receipt_id) from None