"""PostgreSQL repository using SQLAlchemy Core."""

from __future__ import annotations

import json
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional

import boto3
from sqlalchemy import bindparam, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.pool import QueuePool

from inquiry_resolution.config.settings import Settings
from inquiry_resolution.models.customer import Customer
from inquiry_resolution.models.inquiry import Inquiry
from inquiry_resolution.utils.error_handling import (
    ConflictError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)
from inquiry_resolution.utils.logging_config import get_logger

logger = get_logger(__name__)

CUSTOMER_COLUMNS = (
    "id, company_name, contact_person, email, phone, country, address, city, is_active"
)

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def get_db_engine(settings: Settings) -> Optional[Engine]:
    """Create a pooled SQLAlchemy engine from the URL or the RDS secret."""
    db_url = settings.database_url
    if not db_url and settings.db_secret_arn:
        db_url = _secret_to_db_url(settings.db_secret_arn, settings.aws_region)
    if not db_url:
        logger.warning(
            "DATABASE_URL not set; no SQL store available",
            extra={"environment": settings.environment},
        )
        return None
    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=2,
        max_overflow=2,
        pool_pre_ping=True,
        pool_recycle=300,
    )


def _secret_to_db_url(secret_arn: str, region: str) -> Optional[str]:
    """Build a SQLAlchemy URL from an RDS secret."""
    sm = boto3.client("secretsmanager", region_name=region)
    secret = json.loads(sm.get_secret_value(SecretId=secret_arn)["SecretString"])
    host = secret.get("host")
    port = secret.get("port", 5432)
    username = secret.get("username")
    password = secret.get("password")
    dbname = secret.get("dbname", "postgres")
    if not (host and username and password):
        logger.warning("DB secret is missing host or credentials", extra={"secret_arn": secret_arn})
        return None
    return f"postgresql+psycopg2://{username}:{password}@{host}:{port}/{dbname}"


def _columns(fields: Dict[str, Any]) -> List[str]:
    """Column names come from payload keys, so they must be plain identifiers."""
    columns = list(fields)
    for column in columns:
        if not _IDENTIFIER.match(column):
            raise ValidationError(f"Invalid column name: {column!r}")
    return columns


@contextmanager
def _store_errors() -> Iterator[None]:
    """Translate driver errors into the engine's error taxonomy."""
    try:
        yield
    except IntegrityError as exc:
        if "inquiry_number" in str(exc.orig) or "duplicate key" in str(exc.orig).lower():
            raise ConflictError() from exc
        raise ValidationError(f"Rejected by the database: {exc.orig}") from exc
    except OperationalError as exc:
        raise TransientStoreError(f"Database unavailable: {exc.orig}") from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            raise TransientStoreError("Database connection lost") from exc
        raise


class PostgresRepository:
    """Thin wrapper to keep SQL organized and parameterized."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def list_active_customers(self) -> List[Customer]:
        rows = self._fetch_all(
            f"SELECT {CUSTOMER_COLUMNS} FROM customers WHERE is_active = :active",
            {"active": True},
        )
        return [self._to_customer(row) for row in rows]

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        rows = self._fetch_all(
            f"SELECT {CUSTOMER_COLUMNS} FROM customers WHERE id = :id", {"id": customer_id}
        )
        return self._to_customer(rows[0]) if rows else None

    def create_customer(self, fields: Dict[str, Any]) -> Customer:
        payload = {"is_active": True, **fields}
        payload.pop("id", None)
        columns = _columns(payload)
        stmt = text(
            f"INSERT INTO customers ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)}) "
            f"RETURNING {CUSTOMER_COLUMNS}"
        )
        with _store_errors(), self.engine.begin() as conn:
            row = conn.execute(stmt, payload).mappings().one()
        return self._to_customer(row)

    def update_customer(self, customer_id: str, fields: Dict[str, Any]) -> None:
        self._update("customers", customer_id, fields)

    def count_inquiries_by_customer(self, customer_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(customer_ids)
        if not ids:
            return {}
        stmt = text(
            "SELECT customer_id, COUNT(*) AS total FROM crm_inquiries "
            "WHERE customer_id IN :ids GROUP BY customer_id"
        ).bindparams(bindparam("ids", expanding=True))
        with _store_errors(), self.engine.connect() as conn:
            result = conn.execute(stmt, {"ids": ids})
            return {str(row.customer_id): int(row.total) for row in result}

    def insert_inquiries(self, rows: List[Dict[str, Any]]) -> List[Inquiry]:
        """Insert every row in one transaction; numbers come from the table default."""
        inserted = []
        with _store_errors(), self.engine.begin() as conn:
            for fields in rows:
                columns = _columns(fields)
                stmt = text(
                    f"INSERT INTO crm_inquiries ({', '.join(columns)}) "
                    f"VALUES ({', '.join(':' + c for c in columns)}) RETURNING *"
                )
                inserted.append(conn.execute(stmt, fields).mappings().one())
        return [self._to_inquiry(row) for row in inserted]

    def update_inquiry_number(self, inquiry_id: str, inquiry_number: str) -> None:
        self._update("crm_inquiries", inquiry_id, {"inquiry_number": inquiry_number})

    def update_inquiry(self, inquiry_id: str, fields: Dict[str, Any]) -> None:
        self._update("crm_inquiries", inquiry_id, fields)

    def _update(self, table: str, row_id: str, fields: Dict[str, Any]) -> None:
        if not fields:
            return
        assignments = ", ".join(f"{c} = :{c}" for c in _columns(fields))
        stmt = text(f"UPDATE {table} SET {assignments} WHERE id = :row_id")
        with _store_errors(), self.engine.begin() as conn:
            updated = conn.execute(stmt, {**fields, "row_id": row_id}).rowcount
        if updated == 0:
            raise NotFoundError(f"{table} row {row_id} not found")

    def _fetch_all(self, query: str, params: dict) -> List[Dict[str, Any]]:
        with _store_errors(), self.engine.connect() as conn:
            return [dict(row) for row in conn.execute(text(query), params).mappings()]

    @staticmethod
    def _to_customer(row) -> Customer:
        data = dict(row)
        data["id"] = str(data["id"])
        return Customer(**data)

    @staticmethod
    def _to_inquiry(row) -> Inquiry:
        data = dict(row)
        for key in ("id", "customer_id", "assigned_to", "created_by"):
            if data.get(key) is not None:
                data[key] = str(data[key])
        return Inquiry(**data)
