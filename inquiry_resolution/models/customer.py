"""Customer models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Customer(BaseModel):
    """Customer identity record; company_name is the human-facing key."""

    id: str
    company_name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    is_active: bool = True


class MatchCandidate(BaseModel):
    """Existing customer that may own the incoming inquiry."""

    customer: Customer
    score: float = Field(ge=0, le=100)
    inquiry_count: int = 0


class FieldChangeSet(BaseModel):
    """Contact fields on an inquiry that disagree with the stored customer."""

    customer: Customer
    changed_fields: List[str] = Field(default_factory=list)
    old_values: Dict[str, Optional[str]] = Field(default_factory=dict)
    new_values: Dict[str, Optional[str]] = Field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_fields)

    def update_payload(self) -> Dict[str, Optional[str]]:
        """Partial customer update that applies the incoming values."""
        return {field: self.new_values[field] for field in self.changed_fields}
