"""Inquiry models: the pending draft, its product lines and stored rows."""

from datetime import date
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Raw form values for numbers and dates arrive as text; the committer
# sanitizes them, so the draft accepts either shape.
NumericInput = Optional[Union[float, str]]
DateInput = Optional[Union[date, str]]


def _quantity_as_text(cls, value):
    """Quantities are free text ("25 kg"); plain numbers are kept as text."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ProductLine(BaseModel):
    """One product of a multi-product inquiry; blanks fall back to the draft."""

    model_config = ConfigDict(populate_by_name=True)

    product_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("product_name", "productName")
    )
    specification: Optional[str] = None
    quantity: Optional[str] = None
    supplier_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("supplier_name", "supplierName")
    )
    supplier_country: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("supplier_country", "supplierCountry")
    )
    delivery_date: DateInput = Field(
        default=None, validation_alias=AliasChoices("delivery_date", "deliveryDate")
    )
    delivery_terms: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("delivery_terms", "deliveryTerms")
    )

    normalize_quantity = field_validator("quantity", mode="before")(_quantity_as_text)


class InquiryDraft(BaseModel):
    """
    Form payload waiting for its owning customer.

    Fields not declared here are carried through to the store untouched.
    """

    model_config = ConfigDict(extra="allow")

    customer_id: Optional[str] = None
    company_name: str = ""

    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None

    product_name: Optional[str] = None
    specification: Optional[str] = None
    quantity: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_country: Optional[str] = None
    delivery_date: DateInput = None
    delivery_terms: Optional[str] = None

    inquiry_date: DateInput = None
    purchase_price: NumericInput = None
    purchase_price_currency: str = "USD"
    offered_price: NumericInput = None
    offered_price_currency: str = "USD"

    status: str = "new"
    pipeline_status: str = "new"
    priority: str = "medium"
    inquiry_source: Optional[str] = None
    remarks: Optional[str] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None

    is_multi_product: bool = False
    products: List[ProductLine] = Field(default_factory=list)

    normalize_quantity = field_validator("quantity", mode="before")(_quantity_as_text)

    @property
    def has_product_lines(self) -> bool:
        return self.is_multi_product and bool(self.products)


class Inquiry(BaseModel):
    """Persisted inquiry row as returned by the store."""

    model_config = ConfigDict(extra="allow")

    id: str
    inquiry_number: str
    customer_id: str
    company_name: Optional[str] = None
    product_name: Optional[str] = None
    specification: Optional[str] = None
    quantity: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_country: Optional[str] = None
    delivery_date: Optional[date] = None
    delivery_terms: Optional[str] = None
    inquiry_date: Optional[date] = None
    purchase_price: Optional[float] = None
    offered_price: Optional[float] = None
    status: str = "new"
    pipeline_status: str = "new"
    priority: str = "medium"
    is_multi_product: bool = False
    has_items: bool = False
