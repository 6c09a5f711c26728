"""
Shared pytest fixtures.

Tests run against the in-memory store so no database or AWS account is
needed; the SQL store has its own SQLite-backed tests.
"""

import os
import sys
from pathlib import Path

import pytest


def _ensure_repo_on_sys_path() -> None:
    """Allow running the suite from a checkout without installing the package."""
    repo_root = str(Path(__file__).resolve().parents[1])
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_ensure_repo_on_sys_path()

# Offline-friendly defaults so boto3 never reaches for real credentials.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("ENVIRONMENT", "dev")

from inquiry_resolution.config.settings import Settings  # noqa: E402
from inquiry_resolution.models.inquiry import InquiryDraft  # noqa: E402
from inquiry_resolution.repositories.memory_repo import InMemoryStore  # noqa: E402
from inquiry_resolution.services.resolution_workflow import ResolutionWorkflow  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def kimia_farma(store):
    """Customer whose normalized name is "kimia farma"."""
    return store.create_customer(
        {
            "company_name": "PT. Kimia Farma Tbk",
            "contact_person": "Budi Santoso",
            "email": "budi@kimiafarma.co.id",
            "phone": "+62 21 4283 0000",
            "country": "Indonesia",
            "city": "Jakarta",
        }
    )


@pytest.fixture
def indofarma_global(store):
    return store.create_customer(
        {
            "company_name": "Indofarma Global",
            "contact_person": "Siti Rahma",
            "email": "siti@indofarma.id",
            "country": "Indonesia",
        }
    )


@pytest.fixture
def workflow(store, settings) -> ResolutionWorkflow:
    return ResolutionWorkflow(store, settings=settings)


def make_draft(**overrides) -> InquiryDraft:
    """Realistic single-product inquiry as captured by the CRM form."""
    fields = {
        "company_name": "Kimia Farma",
        "contact_person": "Budi Santoso",
        "contact_email": "budi@kimiafarma.co.id",
        "contact_phone": "+62 21 4283 0000",
        "product_name": "Paracetamol BP",
        "specification": "BP 2023",
        "quantity": "500 kg",
        "supplier_name": "Anqiu Lu'an",
        "supplier_country": "China",
        "purchase_price": "4.25",
        "offered_price": "",
        "inquiry_source": "email",
    }
    fields.update(overrides)
    return InquiryDraft(**fields)


@pytest.fixture
def draft_factory():
    return make_draft
