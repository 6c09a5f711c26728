"""Rank existing customers against an incoming company name."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from inquiry_resolution.config.settings import Settings
from inquiry_resolution.models.customer import Customer, MatchCandidate
from inquiry_resolution.services.name_normalizer import normalize_company_name
from inquiry_resolution.services.similarity import similarity_score


@dataclass
class CandidateMatcher:
    """Scores every active customer and keeps the plausible ones."""

    settings: Settings = field(default_factory=Settings)

    def match(self, company_name: str, customers: Iterable[Customer]) -> List[MatchCandidate]:
        """Candidates at or above the inclusion floor, best first, at most max_candidates."""
        ranked = self._rank(company_name, customers)
        kept = [c for c in ranked if c.score >= self.settings.inclusion_floor]
        return kept[: self.settings.max_candidates]

    def best_match(
        self, company_name: str, customers: Iterable[Customer]
    ) -> Optional[MatchCandidate]:
        """Top-scoring customer regardless of the floor."""
        ranked = self._rank(company_name, customers)
        return ranked[0] if ranked else None

    def is_auto_match(self, candidate: Optional[MatchCandidate]) -> bool:
        return candidate is not None and candidate.score >= self.settings.auto_match_threshold

    def _rank(self, company_name: str, customers: Iterable[Customer]) -> List[MatchCandidate]:
        target = normalize_company_name(company_name)
        if not target:
            return []

        scored = []
        for customer in customers:
            candidate_name = normalize_company_name(customer.company_name)
            if not candidate_name:
                continue
            scored.append(
                MatchCandidate(customer=customer, score=similarity_score(target, candidate_name))
            )
        scored.sort(key=lambda c: (-c.score, c.customer.company_name.casefold()))
        return scored
