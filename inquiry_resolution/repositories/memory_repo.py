"""In-memory store for local runs and tests."""

import uuid
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from inquiry_resolution.models.customer import Customer
from inquiry_resolution.models.inquiry import Inquiry
from inquiry_resolution.utils.error_handling import ConflictError, NotFoundError


class InMemoryStore:
    """Thread-safe dict-backed tables with server-style id and number assignment."""

    def __init__(self, number_prefix: str = "INQ-", first_number: int = 1001):
        self.number_prefix = number_prefix
        self._next_number = first_number
        self._customers: Dict[str, Dict[str, Any]] = {}
        self._inquiries: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def list_active_customers(self) -> List[Customer]:
        with self._lock:
            return [Customer(**row) for row in self._customers.values() if row["is_active"]]

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        with self._lock:
            row = self._customers.get(customer_id)
            return Customer(**row) if row else None

    def create_customer(self, fields: Dict[str, Any]) -> Customer:
        with self._lock:
            row = {"is_active": True, **fields, "id": str(uuid.uuid4())}
            customer = Customer(**row)
            self._customers[customer.id] = customer.model_dump()
            return customer

    def update_customer(self, customer_id: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            if customer_id not in self._customers:
                raise NotFoundError(f"Customer {customer_id} not found")
            self._customers[customer_id].update(fields)

    def deactivate_customer(self, customer_id: str) -> None:
        """Customers are never hard-deleted."""
        self.update_customer(customer_id, {"is_active": False})

    def count_inquiries_by_customer(self, customer_ids: Iterable[str]) -> Dict[str, int]:
        wanted = set(customer_ids)
        counts: Dict[str, int] = {}
        with self._lock:
            for row in self._inquiries.values():
                cid = row.get("customer_id")
                if cid in wanted:
                    counts[cid] = counts.get(cid, 0) + 1
        return counts

    def insert_inquiries(self, rows: List[Dict[str, Any]]) -> List[Inquiry]:
        with self._lock:
            taken = {row["inquiry_number"] for row in self._inquiries.values()}
            staged = []
            for fields in rows:
                number = fields.get("inquiry_number") or self._allocate_number()
                if number in taken:
                    raise ConflictError()
                taken.add(number)
                staged.append({**fields, "id": str(uuid.uuid4()), "inquiry_number": number})

            # All rows are validated before any is stored, like a single INSERT.
            inserted = [Inquiry(**row) for row in staged]
            for row in staged:
                self._inquiries[row["id"]] = row
            return inserted

    def update_inquiry_number(self, inquiry_id: str, inquiry_number: str) -> None:
        with self._lock:
            row = self._get_inquiry_row(inquiry_id)
            clash = any(
                other["inquiry_number"] == inquiry_number and other_id != inquiry_id
                for other_id, other in self._inquiries.items()
            )
            if clash:
                raise ConflictError()
            row["inquiry_number"] = inquiry_number

    def update_inquiry(self, inquiry_id: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            self._get_inquiry_row(inquiry_id).update(fields)

    def get_inquiry(self, inquiry_id: str) -> Optional[Inquiry]:
        with self._lock:
            row = self._inquiries.get(inquiry_id)
            return Inquiry(**row) if row else None

    def list_inquiries(self) -> List[Inquiry]:
        with self._lock:
            return [Inquiry(**row) for row in self._inquiries.values()]

    def _allocate_number(self) -> str:
        number = f"{self.number_prefix}{self._next_number}"
        self._next_number += 1
        return number

    def _get_inquiry_row(self, inquiry_id: str) -> Dict[str, Any]:
        row = self._inquiries.get(inquiry_id)
        if row is None:
            raise NotFoundError(f"Inquiry {inquiry_id} not found")
        return row
