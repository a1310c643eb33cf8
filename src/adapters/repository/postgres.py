"""
PostgreSQL repository adapters - Implement MemberRepository and AdminRepository.

This module provides the PostgreSQL implementations of the domain's
record-store ports using psycopg3 with raw SQL.

Consistency model:
------------------
Services read a record, mutate it in memory and write the whole row back
with save(). There is no row locking around that read-modify-write, so two
concurrent updates of the same member are last-write-wins.

The database still guards the two uniqueness rules the domain relies on:

1. **members_active_email_key**: partial unique index, one non-rejected row
   per email. Concurrent first submissions for the same email cannot both
   create a record.

2. **members_unique_member_id_key**: an issued member id belongs to exactly
   one row.

Violations surface as the domain's Conflict exception.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from psycopg import errors
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from src.domain.exceptions import Conflict
from src.domain.ports import AdminRecord, MemberRecord, MemberStatus, PaymentEntry

logger = logging.getLogger(__name__)

_MEMBER_COLUMNS = """
    id, name, email, phone, document_type, document_number, document_url,
    document_ref, terms_accepted, terms_accepted_at, speciality, qualifications,
    status, otp_verified, otp_hash, otp_expires_at, temp_password_hash,
    password_hash, is_verified, unique_member_id, is_payment_done,
    payment_history, admin_notes, reviewed_at, reviewed_by, created_at, updated_at
"""

_ADMIN_COLUMNS = """
    id, name, email, admin_id, password_hash, otp_hash, otp_expires_at,
    created_at, updated_at
"""


def _dump_payments(payments: list[PaymentEntry]) -> Jsonb:
    return Jsonb(
        [
            {
                "paymentId": p.payment_id,
                "paymentDate": p.paid_at.isoformat(),
                "paymentAmount": p.amount,
            }
            for p in payments
        ]
    )


def _load_payments(raw: list[dict[str, Any]] | None) -> list[PaymentEntry]:
    return [
        PaymentEntry(
            payment_id=item["paymentId"],
            paid_at=datetime.fromisoformat(item["paymentDate"]),
            amount=item["paymentAmount"],
        )
        for item in raw or []
    ]


def _member_from_row(row: dict[str, Any]) -> MemberRecord:
    return MemberRecord(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        phone=row["phone"],
        document_type=row["document_type"],
        document_number=row["document_number"],
        document_url=row["document_url"],
        document_ref=row["document_ref"],
        terms_accepted=row["terms_accepted"],
        terms_accepted_at=row["terms_accepted_at"],
        speciality=row["speciality"],
        qualifications=list(row["qualifications"] or []),
        status=MemberStatus(row["status"]),
        otp_verified=row["otp_verified"],
        otp_hash=row["otp_hash"],
        otp_expires_at=row["otp_expires_at"],
        temp_password_hash=row["temp_password_hash"],
        password_hash=row["password_hash"],
        is_verified=row["is_verified"],
        unique_member_id=row["unique_member_id"],
        is_payment_done=row["is_payment_done"],
        payment_history=_load_payments(row["payment_history"]),
        admin_notes=row["admin_notes"],
        reviewed_at=row["reviewed_at"],
        reviewed_by=row["reviewed_by"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _admin_from_row(row: dict[str, Any]) -> AdminRecord:
    return AdminRecord(**row)


class PostgresMemberRepository:
    """
    Implements MemberRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create(self, member: MemberRecord) -> MemberRecord:
        """
        Insert a new pending member.

        Raises:
            Conflict: If a non-rejected record already uses the email
        """
        sql = f"""
            INSERT INTO members (
                name, email, phone, document_type, document_number, document_url,
                document_ref, terms_accepted, terms_accepted_at, speciality,
                qualifications, status, otp_verified, otp_hash, otp_expires_at,
                payment_history
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_MEMBER_COLUMNS}
        """
        params = (
            member.name,
            member.email,
            member.phone,
            member.document_type,
            member.document_number,
            member.document_url,
            member.document_ref,
            member.terms_accepted,
            member.terms_accepted_at,
            member.speciality,
            member.qualifications,
            member.status.value,
            member.otp_verified,
            member.otp_hash,
            member.otp_expires_at,
            _dump_payments(member.payment_history),
        )

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            raise Conflict("Member with this email already exists") from e

        return _member_from_row(row)

    def save(self, member: MemberRecord) -> None:
        """
        Write back every mutable column of the record (last write wins).

        Raises:
            Conflict: If the member id is already held by another row, or
                another non-rejected row holds the email
        """
        sql = """
            UPDATE members
            SET name = %s, phone = %s, speciality = %s, qualifications = %s,
                status = %s, otp_verified = %s, otp_hash = %s, otp_expires_at = %s,
                temp_password_hash = %s, password_hash = %s, is_verified = %s,
                unique_member_id = %s, is_payment_done = %s, payment_history = %s,
                admin_notes = %s, reviewed_at = %s, reviewed_by = %s,
                updated_at = NOW()
            WHERE id = %s
        """
        params = (
            member.name,
            member.phone,
            member.speciality,
            member.qualifications,
            member.status.value,
            member.otp_verified,
            member.otp_hash,
            member.otp_expires_at,
            member.temp_password_hash,
            member.password_hash,
            member.is_verified,
            member.unique_member_id,
            member.is_payment_done,
            _dump_payments(member.payment_history),
            member.admin_notes,
            member.reviewed_at,
            member.reviewed_by,
            member.id,
        )

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
        except errors.UniqueViolation as e:
            if e.diag.constraint_name == "members_active_email_key":
                raise Conflict("A newer registration exists for this email") from e
            raise Conflict("Unique member ID is already in use") from e

    def get(self, member_id: UUID) -> MemberRecord | None:
        sql = f"SELECT {_MEMBER_COLUMNS} FROM members WHERE id = %s"
        return self._fetch_one(sql, (member_id,))

    def find_active_by_email(self, email: str) -> MemberRecord | None:
        sql = f"""
            SELECT {_MEMBER_COLUMNS} FROM members
            WHERE email = %s AND status <> %s
            ORDER BY created_at DESC
            LIMIT 1
        """
        return self._fetch_one(sql, (email, MemberStatus.REJECTED.value))

    def find_by_unique_id(self, unique_member_id: str) -> MemberRecord | None:
        sql = f"SELECT {_MEMBER_COLUMNS} FROM members WHERE unique_member_id = %s"
        return self._fetch_one(sql, (unique_member_id,))

    def list(self, status: MemberStatus | None = None) -> list[MemberRecord]:
        if status is None:
            sql = f"SELECT {_MEMBER_COLUMNS} FROM members ORDER BY created_at DESC"
            params: tuple[Any, ...] = ()
        else:
            sql = f"SELECT {_MEMBER_COLUMNS} FROM members WHERE status = %s ORDER BY created_at DESC"
            params = (status.value,)

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            return [_member_from_row(row) for row in cursor.fetchall()]

    def delete(self, member_id: UUID) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM members WHERE id = %s", (member_id,))
            conn.commit()
            return cursor.rowcount == 1

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> MemberRecord | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return _member_from_row(row) if row is not None else None


class PostgresAdminRepository:
    """Implements AdminRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create(self, admin: AdminRecord) -> AdminRecord:
        sql = f"""
            INSERT INTO admins (name, email, admin_id, password_hash)
            VALUES (%s, %s, %s, %s)
            RETURNING {_ADMIN_COLUMNS}
        """
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (admin.name, admin.email, admin.admin_id, admin.password_hash))
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            raise Conflict(f"Admin {admin.admin_id} already exists") from e

        return _admin_from_row(row)

    def save(self, admin: AdminRecord) -> None:
        sql = """
            UPDATE admins
            SET name = %s, email = %s, password_hash = %s, otp_hash = %s,
                otp_expires_at = %s, updated_at = NOW()
            WHERE id = %s
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    admin.name,
                    admin.email,
                    admin.password_hash,
                    admin.otp_hash,
                    admin.otp_expires_at,
                    admin.id,
                ),
            )
            conn.commit()

    def get(self, admin_pk: UUID) -> AdminRecord | None:
        return self._fetch_one(f"SELECT {_ADMIN_COLUMNS} FROM admins WHERE id = %s", (admin_pk,))

    def find_by_admin_id(self, admin_id: str) -> AdminRecord | None:
        return self._fetch_one(
            f"SELECT {_ADMIN_COLUMNS} FROM admins WHERE admin_id = %s", (admin_id,)
        )

    def find_by_email(self, email: str) -> AdminRecord | None:
        return self._fetch_one(
            f"SELECT {_ADMIN_COLUMNS} FROM admins WHERE email = %s LIMIT 1", (email,)
        )

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> AdminRecord | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return _admin_from_row(row) if row is not None else None


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
