"""
Inquiry commit service.

Turns a resolved draft into stored inquiry rows. Multi-product drafts
become one row per product: the rows are inserted as a batch, then each is
renamed to ``<base>.<n>`` where ``<base>`` is the number the store gave the
first row. The store assigns numbers on insert, so the suffixes cannot be
written up front, and the rename pass is not atomic with the insert.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Union

from inquiry_resolution.models.inquiry import Inquiry, InquiryDraft, ProductLine
from inquiry_resolution.repositories.base import InquiryStore
from inquiry_resolution.utils.error_handling import PartialMultiProductFailure, ValidationError
from inquiry_resolution.utils.logging_config import get_logger
from inquiry_resolution.utils.validators import is_blank, parse_date, parse_numeric

logger = get_logger(__name__)

DATE_FIELDS = ("inquiry_date", "delivery_date", "delivery_date_expected")
NUMERIC_FIELDS = ("purchase_price", "offered_price")

# Fields a product line overrides; anything else is shared across lines.
PRODUCT_FIELDS = (
    "product_name",
    "specification",
    "quantity",
    "supplier_name",
    "supplier_country",
    "delivery_date",
    "delivery_terms",
)

# Draft-only keys that never reach the inquiry table.
DRAFT_ONLY_FIELDS = {"products", "is_multi_product"}


def sanitize_inquiry_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Blank dates and numbers become None; the rest must parse or the row is rejected."""
    sanitized = dict(fields)
    for name in DATE_FIELDS:
        if name in sanitized:
            sanitized[name] = parse_date(sanitized[name], name)
    for name in NUMERIC_FIELDS:
        if name in sanitized:
            sanitized[name] = parse_numeric(sanitized[name], name)
    return sanitized


class InquiryCommitter:
    """Writes resolved drafts through the store."""

    def __init__(self, store: InquiryStore):
        self.store = store

    def commit(self, draft: InquiryDraft) -> Union[Inquiry, List[Inquiry]]:
        """Insert the draft; a list comes back for multi-product drafts."""
        if is_blank(draft.customer_id):
            raise ValidationError("customer_id must be resolved before an inquiry is saved")

        rows = self._rows(draft)
        if not draft.has_product_lines:
            inquiry = self.store.insert_inquiries(rows)[0]
            logger.info(
                "Inquiry committed",
                extra={"inquiry_number": inquiry.inquiry_number, "customer_id": draft.customer_id},
            )
            return inquiry

        inserted = self.store.insert_inquiries(rows)
        return self._renumber(inserted)

    def validate(self, draft: InquiryDraft) -> None:
        """Sanitize every row the draft would produce, without touching the store."""
        self._rows(draft)

    def update(self, inquiry_id: str, draft: InquiryDraft) -> None:
        """Edit an existing inquiry in place; its number is left alone."""
        fields = sanitize_inquiry_fields(draft.model_dump(exclude=DRAFT_ONLY_FIELDS))
        fields.pop("inquiry_number", None)
        if is_blank(fields.get("customer_id")):
            fields.pop("customer_id", None)
        self.store.update_inquiry(inquiry_id, fields)
        logger.info("Inquiry updated", extra={"inquiry_id": inquiry_id})

    def _rows(self, draft: InquiryDraft) -> List[Dict[str, Any]]:
        shared = self._shared_fields(draft)
        if not draft.has_product_lines:
            return [sanitize_inquiry_fields(shared)]
        return [
            sanitize_inquiry_fields(self._line_fields(shared, line)) for line in draft.products
        ]

    def _shared_fields(self, draft: InquiryDraft) -> Dict[str, Any]:
        fields = draft.model_dump(exclude=DRAFT_ONLY_FIELDS)
        if is_blank(fields.get("inquiry_date")):
            fields["inquiry_date"] = date.today()
        # Line items are stored as sibling inquiries, never as child rows.
        fields["is_multi_product"] = False
        fields["has_items"] = False
        return fields

    def _line_fields(self, shared: Dict[str, Any], line: ProductLine) -> Dict[str, Any]:
        fields = dict(shared)
        for name in PRODUCT_FIELDS:
            value = getattr(line, name)
            fields[name] = shared.get(name) if is_blank(value) else value
        return fields

    def _renumber(self, inserted: List[Inquiry]) -> List[Inquiry]:
        base = inserted[0].inquiry_number
        renumbered: List[Inquiry] = []
        for index, inquiry in enumerate(inserted):
            number = f"{base}.{index + 1}"
            try:
                self.store.update_inquiry_number(inquiry.id, number)
            except Exception as exc:
                logger.error(
                    "Multi-product renumbering incomplete",
                    extra={
                        "base_number": base,
                        "renumbered": len(renumbered),
                        "total": len(inserted),
                        "error": str(exc),
                    },
                )
                raise PartialMultiProductFailure(
                    f"Inserted {len(inserted)} inquiries under {base} but only "
                    f"{len(renumbered)} were renumbered",
                    inserted=renumbered + inserted[len(renumbered):],
                    renumbered=len(renumbered),
                ) from exc
            renumbered.append(inquiry.model_copy(update={"inquiry_number": number}))

        logger.info(
            "Multi-product inquiry committed",
            extra={"base_number": base, "lines": len(renumbered)},
        )
        return renumbered
