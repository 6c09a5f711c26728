"""
Customer resolution workflow.

Each new inquiry runs through an explicit state machine before it is saved:

    direct_change_check -> await_update_decision | resolved
    fuzzy_match         -> direct_change_check (auto-match)
                         | await_selection
                         | await_new_customer_confirm
    resolved            -> committed

Await states park the session until the caller reports a decision; there is
no timeout. Sessions live in an arena keyed by session id, so two drafts
never share state, and a session id can hold only one draft at a time.
A session is claimed while a call is working on it; a concurrent call on
the same session raises SessionStateError instead of repeating side effects.
"""

from __future__ import annotations

import re
import uuid
from contextlib import contextmanager
from threading import Lock
from typing import Any, Dict, Iterator, List, Optional

from inquiry_resolution.config.settings import Settings
from inquiry_resolution.models.customer import MatchCandidate
from inquiry_resolution.models.inquiry import InquiryDraft
from inquiry_resolution.models.resolution import ResolutionSession, ResolutionState
from inquiry_resolution.repositories.base import InquiryStore
from inquiry_resolution.services.candidate_matcher import CandidateMatcher
from inquiry_resolution.services.change_detector import CONTACT_FIELD_MAP, detect_customer_changes
from inquiry_resolution.services.inquiry_committer import InquiryCommitter
from inquiry_resolution.utils.error_handling import (
    NotFoundError,
    PartialMultiProductFailure,
    SessionStateError,
    TransientStoreError,
    ValidationError,
)
from inquiry_resolution.utils.logging_config import get_logger
from inquiry_resolution.utils.validators import ensure_present, is_blank

logger = get_logger(__name__)

# Customer fields a caller may set when confirming a new customer.
NEW_CUSTOMER_FIELDS = ("company_name", "contact_person", "email", "phone", "country", "address", "city")


def _primary_email(value: Optional[str]) -> Optional[str]:
    """Parsed emails can carry several addresses; the first one is the contact."""
    if is_blank(value):
        return None
    return re.split(r"[,;]", value)[0].strip() or None


class ResolutionWorkflow:
    """Drives drafts from raw form data to committed inquiries."""

    def __init__(
        self,
        store: InquiryStore,
        committer: Optional[InquiryCommitter] = None,
        matcher: Optional[CandidateMatcher] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.store = store
        self.committer = committer or InquiryCommitter(store)
        self.matcher = matcher or CandidateMatcher(settings=self.settings)
        self._sessions: Dict[str, ResolutionSession] = {}
        self._busy: Dict[str, ResolutionSession] = {}
        self._lock = Lock()

    # Entry points

    def start(self, draft: InquiryDraft, session_id: Optional[str] = None) -> ResolutionSession:
        """
        Open a session for ``draft`` and run it until it commits or needs a decision.

        The draft is copied; the caller's object is never mutated. Numbers and
        dates are checked before anything else, so an invalid draft opens no
        session. If a store call fails later, the session stays registered so
        it can be resumed or cancelled.
        """
        self.committer.validate(draft)
        session_id = session_id or str(uuid.uuid4())
        state = (
            ResolutionState.FUZZY_MATCH
            if is_blank(draft.customer_id)
            else ResolutionState.DIRECT_CHANGE_CHECK
        )
        with self._lock:
            if session_id in self._sessions:
                raise SessionStateError(f"Session {session_id} already has an inquiry in flight")
            session = ResolutionSession(
                session_id=session_id, draft=draft.model_copy(deep=True), state=state
            )
            self._sessions[session_id] = session
            self._busy[session_id] = session

        logger.info(
            "Resolution started",
            extra={"session_id": session_id, "state": state.value, "company_name": draft.company_name},
        )
        try:
            return self._advance(session)
        finally:
            self._unclaim(session)

    def resume(self, session_id: str) -> ResolutionSession:
        """Re-enter the current state; parked sessions come back unchanged."""
        with self._claimed(session_id) as session:
            if session.state.is_awaiting:
                return session
            return self._advance(session)

    def get_session(self, session_id: str) -> Optional[ResolutionSession]:
        with self._lock:
            return self._sessions.get(session_id)

    # Decisions

    def select_candidate(self, session_id: str, customer_id: str) -> ResolutionSession:
        """Attach one of the presented candidates; its contact details are checked next."""
        with self._claimed(session_id, ResolutionState.AWAIT_SELECTION) as session:
            if customer_id not in {c.customer.id for c in session.candidates}:
                raise ValidationError(f"Customer {customer_id} was not offered as a candidate")

            session.draft.customer_id = customer_id
            session.candidates = []
            self._transition(session, ResolutionState.DIRECT_CHANGE_CHECK)
            return self._advance(session)

    def request_new_customer(self, session_id: str) -> ResolutionSession:
        """None of the candidates fit; ask for new customer details instead."""
        with self._claimed(session_id, ResolutionState.AWAIT_SELECTION) as session:
            self._await_new_customer(session)
            return session

    def confirm_new_customer(
        self, session_id: str, fields: Optional[Dict[str, Any]] = None
    ) -> ResolutionSession:
        """Create the customer from the defaults overlaid with ``fields``, then commit."""
        with self._claimed(session_id, ResolutionState.AWAIT_NEW_CUSTOMER_CONFIRM) as session:
            merged = {**session.new_customer_defaults, **(fields or {})}
            payload = {}
            for name in NEW_CUSTOMER_FIELDS:
                value = merged.get(name)
                payload[name] = None if is_blank(value) else str(value).strip()
            ensure_present(payload["company_name"], "company_name")
            payload["is_active"] = True

            customer = self.store.create_customer(payload)
            logger.info(
                "Customer created",
                extra={"session_id": session_id, "customer_id": customer.id, "company_name": customer.company_name},
            )
            # Fresh record, so no contact check.
            session.draft.customer_id = customer.id
            self._transition(session, ResolutionState.RESOLVED)
            return self._advance(session)

    def apply_update(self, session_id: str) -> ResolutionSession:
        """Write the inquiry's contact details onto the customer, then commit."""
        with self._claimed(session_id, ResolutionState.AWAIT_UPDATE_DECISION) as session:
            change_set = session.change_set
            self.store.update_customer(change_set.customer.id, change_set.update_payload())
            logger.info(
                "Customer contact details updated",
                extra={
                    "session_id": session_id,
                    "customer_id": change_set.customer.id,
                    "fields": change_set.changed_fields,
                },
            )
            session.change_set = None
            self._transition(session, ResolutionState.RESOLVED)
            return self._advance(session)

    def keep_existing(self, session_id: str) -> ResolutionSession:
        """Leave the customer record as it is and commit."""
        with self._claimed(session_id, ResolutionState.AWAIT_UPDATE_DECISION) as session:
            session.change_set = None
            self._transition(session, ResolutionState.RESOLVED)
            return self._advance(session)

    def cancel(self, session_id: str) -> ResolutionSession:
        """Drop the draft. Nothing is written."""
        with self._claimed(session_id) as session:
            self._transition(session, ResolutionState.CANCELLED)
            self._release(session)
            return session

    # State machine

    def _advance(self, session: ResolutionSession) -> ResolutionSession:
        while True:
            if session.state == ResolutionState.DIRECT_CHANGE_CHECK:
                self._check_known_customer(session)
            elif session.state == ResolutionState.FUZZY_MATCH:
                self._fuzzy_match(session)
            elif session.state == ResolutionState.RESOLVED:
                self._commit(session)
            else:
                return session

    def _check_known_customer(self, session: ResolutionSession) -> None:
        customer = self.store.get_customer(session.draft.customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {session.draft.customer_id} not found")

        incoming = session.draft.model_dump(include=set(CONTACT_FIELD_MAP))
        change_set = detect_customer_changes(incoming, customer)
        if change_set.has_changes:
            session.change_set = change_set
            self._transition(session, ResolutionState.AWAIT_UPDATE_DECISION)
        else:
            self._transition(session, ResolutionState.RESOLVED)

    def _fuzzy_match(self, session: ResolutionSession) -> None:
        customers = self.store.list_active_customers()
        company_name = session.draft.company_name

        best = self.matcher.best_match(company_name, customers)
        if self.matcher.is_auto_match(best):
            logger.info(
                "Customer auto-matched",
                extra={
                    "session_id": session.session_id,
                    "customer_id": best.customer.id,
                    "score": best.score,
                },
            )
            session.draft.customer_id = best.customer.id
            self._transition(session, ResolutionState.DIRECT_CHANGE_CHECK)
            return

        candidates = self.matcher.match(company_name, customers)
        if candidates:
            session.candidates = self._annotate(candidates)
            self._transition(session, ResolutionState.AWAIT_SELECTION)
        else:
            self._await_new_customer(session)

    def _commit(self, session: ResolutionSession) -> None:
        try:
            result = self.committer.commit(session.draft)
        except PartialMultiProductFailure:
            # Rows already exist; a retry would insert them twice.
            self._release(session)
            raise
        session.inquiries = result if isinstance(result, list) else [result]
        self._transition(session, ResolutionState.COMMITTED)
        self._release(session)

    def _await_new_customer(self, session: ResolutionSession) -> None:
        draft = session.draft
        session.candidates = []
        session.new_customer_defaults = {
            "company_name": draft.company_name,
            "contact_person": draft.contact_person,
            "email": _primary_email(draft.contact_email),
            "phone": draft.contact_phone,
            "country": draft.supplier_country or self.settings.default_country,
        }
        self._transition(session, ResolutionState.AWAIT_NEW_CUSTOMER_CONFIRM)

    def _annotate(self, candidates: List[MatchCandidate]) -> List[MatchCandidate]:
        """Attach existing inquiry counts; informational, so a failed lookup is not fatal."""
        try:
            counts = self.store.count_inquiries_by_customer([c.customer.id for c in candidates])
        except TransientStoreError as exc:
            logger.warning("Failed to load inquiry counts", extra={"error": str(exc)})
            counts = {}
        return [
            c.model_copy(update={"inquiry_count": counts.get(c.customer.id, 0)})
            for c in candidates
        ]

    # Arena helpers

    def _transition(self, session: ResolutionSession, state: ResolutionState) -> None:
        logger.info(
            "Resolution state changed",
            extra={"session_id": session.session_id, "from": session.state.value, "to": state.value},
        )
        session.state = state

    @contextmanager
    def _claimed(
        self, session_id: str, state: Optional[ResolutionState] = None
    ) -> Iterator[ResolutionSession]:
        """Hold the session for one call; checking and claiming happen under the lock."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionStateError(f"No resolution in flight for session {session_id}")
            if session_id in self._busy:
                raise SessionStateError(f"Session {session_id} is already being processed")
            if state is not None and session.state != state:
                raise SessionStateError(
                    f"Session {session_id} is in {session.state.value}, expected {state.value}"
                )
            self._busy[session_id] = session
        try:
            yield session
        finally:
            self._unclaim(session)

    def _unclaim(self, session: ResolutionSession) -> None:
        with self._lock:
            # The key may already belong to a newer session.
            if self._busy.get(session.session_id) is session:
                del self._busy[session.session_id]

    def _release(self, session: ResolutionSession) -> None:
        with self._lock:
            if self._sessions.get(session.session_id) is session:
                del self._sessions[session.session_id]
