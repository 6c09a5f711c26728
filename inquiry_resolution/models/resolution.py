"""State carried by one customer resolution session."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from inquiry_resolution.models.customer import FieldChangeSet, MatchCandidate
from inquiry_resolution.models.inquiry import Inquiry, InquiryDraft


class ResolutionState(str, Enum):
    """Workflow states; transient ones are re-run on resume."""

    DIRECT_CHANGE_CHECK = "direct_change_check"
    FUZZY_MATCH = "fuzzy_match"
    AWAIT_UPDATE_DECISION = "await_update_decision"
    AWAIT_SELECTION = "await_selection"
    AWAIT_NEW_CUSTOMER_CONFIRM = "await_new_customer_confirm"
    RESOLVED = "resolved"
    COMMITTED = "committed"
    CANCELLED = "cancelled"

    @property
    def is_awaiting(self) -> bool:
        return self in AWAIT_STATES

    @property
    def is_terminal(self) -> bool:
        return self in (ResolutionState.COMMITTED, ResolutionState.CANCELLED)


AWAIT_STATES = frozenset(
    {
        ResolutionState.AWAIT_UPDATE_DECISION,
        ResolutionState.AWAIT_SELECTION,
        ResolutionState.AWAIT_NEW_CUSTOMER_CONFIRM,
    }
)


class ResolutionSession(BaseModel):
    """One in-flight attempt to find the owning customer for a draft."""

    session_id: str
    draft: InquiryDraft
    state: ResolutionState
    candidates: List[MatchCandidate] = Field(default_factory=list)
    change_set: Optional[FieldChangeSet] = None
    new_customer_defaults: Dict[str, Any] = Field(default_factory=dict)
    inquiries: List[Inquiry] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def customer_id(self) -> Optional[str]:
        return self.draft.customer_id
