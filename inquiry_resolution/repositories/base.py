"""Persistence contract the engine reads and writes through."""

from typing import Any, Dict, Iterable, List, Optional, Protocol

from inquiry_resolution.models.customer import Customer
from inquiry_resolution.models.inquiry import Inquiry


class InquiryStore(Protocol):
    """
    Customer and inquiry tables as seen by the engine.

    Implementations raise TransientStoreError for connectivity failures and
    ConflictError when an inquiry number collides.
    """

    def list_active_customers(self) -> List[Customer]:
        ...

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        ...

    def create_customer(self, fields: Dict[str, Any]) -> Customer:
        """Insert a customer; the store assigns ``id``."""
        ...

    def update_customer(self, customer_id: str, fields: Dict[str, Any]) -> None:
        ...

    def count_inquiries_by_customer(self, customer_ids: Iterable[str]) -> Dict[str, int]:
        ...

    def insert_inquiries(self, rows: List[Dict[str, Any]]) -> List[Inquiry]:
        """Insert rows in order; the store assigns ``id`` and ``inquiry_number``."""
        ...

    def update_inquiry_number(self, inquiry_id: str, inquiry_number: str) -> None:
        ...

    def update_inquiry(self, inquiry_id: str, fields: Dict[str, Any]) -> None:
        ...
