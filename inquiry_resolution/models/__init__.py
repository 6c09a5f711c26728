"""Pydantic models for customers, inquiries and resolution sessions."""

from inquiry_resolution.models.customer import (  # noqa: F401
    Customer,
    FieldChangeSet,
    MatchCandidate,
)
from inquiry_resolution.models.inquiry import Inquiry, InquiryDraft, ProductLine  # noqa: F401
from inquiry_resolution.models.resolution import (  # noqa: F401
    ResolutionSession,
    ResolutionState,
)
