"""
Pydantic model validation tests.

Run with: pytest tests/unit/test_models.py -v
"""

import pytest
from pydantic import ValidationError

from inquiry_resolution.models import (
    Customer,
    InquiryDraft,
    MatchCandidate,
    ProductLine,
    ResolutionState,
)


class TestInquiryDraft:
    """Form payload shape and defaults."""

    def test_defaults(self):
        draft = InquiryDraft(company_name="Kimia Farma")
        assert draft.customer_id is None
        assert draft.status == "new"
        assert draft.pipeline_status == "new"
        assert draft.priority == "medium"
        assert draft.purchase_price_currency == "USD"
        assert draft.products == []
        assert draft.has_product_lines is False

    def test_raw_numeric_text_is_kept_for_the_committer(self):
        draft = InquiryDraft(company_name="Kimia Farma", purchase_price="12.5", offered_price="")
        assert draft.purchase_price == "12.5"
        assert draft.offered_price == ""

    def test_numeric_quantity_becomes_text(self):
        draft = InquiryDraft(company_name="Kimia Farma", quantity=500)
        assert draft.quantity == "500"

    def test_unknown_fields_are_carried(self):
        draft = InquiryDraft(company_name="Kimia Farma", mail_subject="RFQ Paracetamol")
        assert draft.model_dump()["mail_subject"] == "RFQ Paracetamol"

    def test_multi_product_needs_lines(self):
        assert not InquiryDraft(company_name="X", is_multi_product=True).has_product_lines
        draft = InquiryDraft(
            company_name="X", is_multi_product=True, products=[{"product_name": "Ibuprofen"}]
        )
        assert draft.has_product_lines


class TestProductLine:
    def test_accepts_parser_camel_case_keys(self):
        line = ProductLine.model_validate(
            {
                "productName": "Amoxicillin Trihydrate",
                "supplierName": "CSPC",
                "supplierCountry": "China",
                "deliveryDate": "2026-02-01",
                "deliveryTerms": "CIF Jakarta",
                "quantity": 1000,
            }
        )
        assert line.product_name == "Amoxicillin Trihydrate"
        assert line.supplier_name == "CSPC"
        assert line.delivery_terms == "CIF Jakarta"
        assert line.quantity == "1000"

    def test_accepts_snake_case_keys(self):
        line = ProductLine(product_name="Metformin HCl", supplier_country="India")
        assert line.product_name == "Metformin HCl"
        assert line.supplier_country == "India"


class TestMatchCandidate:
    def test_score_bounds(self):
        customer = Customer(id="c1", company_name="Kimia Farma")
        assert MatchCandidate(customer=customer, score=100).inquiry_count == 0
        with pytest.raises(ValidationError):
            MatchCandidate(customer=customer, score=101)


def test_resolution_state_flags():
    assert ResolutionState.AWAIT_SELECTION.is_awaiting
    assert ResolutionState.AWAIT_UPDATE_DECISION.is_awaiting
    assert not ResolutionState.RESOLVED.is_awaiting
    assert ResolutionState.COMMITTED.is_terminal
    assert ResolutionState.CANCELLED.is_terminal
    assert not ResolutionState.FUZZY_MATCH.is_terminal
