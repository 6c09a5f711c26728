"""
Engine configuration.

Matching thresholds are tunable; only the auto-accept threshold of 95 is
fixed by how the CRM behaves today.
"""

from dataclasses import dataclass
import os
from typing import Optional


@dataclass
class Settings:
    """Application settings with conservative matching defaults."""

    # Environment
    environment: str = "dev"
    aws_region: str = "eu-west-2"

    # Matching
    auto_match_threshold: float = 95.0  # Resolve silently at or above this score
    inclusion_floor: float = 60.0  # Candidates below this are not shown
    max_candidates: int = 10

    # New customers inherit this when the inquiry has no supplier country
    default_country: str = "Indonesia"

    # Database
    database_url: Optional[str] = None
    db_secret_arn: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 <= self.inclusion_floor <= self.auto_match_threshold <= 100:
            raise ValueError(
                "expected 0 <= inclusion_floor <= auto_match_threshold <= 100"
            )
        if self.max_candidates < 1:
            raise ValueError("max_candidates must be at least 1")

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            aws_region=os.environ.get("AWS_REGION", "eu-west-2"),
            auto_match_threshold=float(os.environ.get("AUTO_MATCH_THRESHOLD", "95")),
            inclusion_floor=float(os.environ.get("MATCH_INCLUSION_FLOOR", "60")),
            max_candidates=int(os.environ.get("MAX_MATCH_CANDIDATES", "10")),
            default_country=os.environ.get("DEFAULT_CUSTOMER_COUNTRY", "Indonesia"),
            database_url=os.environ.get("DATABASE_URL") or None,
            db_secret_arn=os.environ.get("DB_SECRET_ARN") or None,
        )
