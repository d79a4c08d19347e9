from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User, UserPatch
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, name, email, password_hash, role, department, position, is_active, created_at,
    reset_token_hash, reset_token_expires
"""

# UserPatch field -> column
_PATCHABLE = {
    "name": "name",
    "email": "email",
    "department": "department",
    "position": "position",
    "role": "role",
    "is_active": "is_active",
}

_DUPLICATE_EMAIL = "A user with this email already exists"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        position=row.get("position"),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
        reset_token_hash=row.get("reset_token_hash"),
        reset_token_expires=row.get("reset_token_expires"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(name, email, password_hash, role, department, position, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (name, email, password_hash, role.value, department, position),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            raise ValidationError(_DUPLICATE_EMAIL)

    def update_user(self, user_id: int, *, patch: UserPatch, password_hash: Optional[str] = None) -> bool:
        changes = patch.changes()
        assignments = [f"{_PATCHABLE[field]}=%s" for field in changes]
        params: list[object] = list(changes.values())
        if password_hash is not None:
            assignments.append("password_hash=%s")
            params.append(password_hash)
        if not assignments:
            return False

        params.append(int(user_id))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE users SET {', '.join(assignments)} WHERE user_id=%s", tuple(params))
                return cur.rowcount > 0
        except mysql.connector.IntegrityError:
            raise ValidationError(_DUPLICATE_EMAIL)

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0

    def list_users(self, *, limit: int, offset: int, search: str = "") -> Sequence[User]:
        pattern = f"%{search}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE name LIKE %s OR email LIKE %s
                ORDER BY created_at DESC, user_id DESC
                LIMIT %s OFFSET %s
                """,
                (pattern, pattern, int(limit), int(offset)),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def list_active(self, *, department: Optional[str] = None) -> Sequence[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE is_active=1"
        params: tuple = ()
        if department:
            sql += " AND department=%s"
            params = (department,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY user_id", params)
            return [_to_user(r) for r in fetchall(cur)]

    def list_admin_emails(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT email FROM users WHERE role=%s AND is_active=1", (Role.ADMIN.value,))
            return [r["email"] for r in fetchall(cur)]

    def set_reset_token(self, user_id: int, *, token_hash: Optional[str], expires_at: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET reset_token_hash=%s, reset_token_expires=%s WHERE user_id=%s",
                (token_hash, expires_at, int(user_id)),
            )
            return cur.rowcount > 0

    def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE reset_token_hash=%s", (token_hash,))
            row = fetchone(cur)
            return _to_user(row) if row else None
