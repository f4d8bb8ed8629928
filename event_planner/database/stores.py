"""
User and event persistence on top of the shared Database pool.

Stores return plain dicts and raise psycopg2 errors as-is, except for the
duplicate-email case which is reported as a ConflictError.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import psycopg2.errors
from flask import current_app

from event_planner.database.db_connection import Database
from event_planner.errors import ConflictError

EVENT_COLUMNS = "id, title, description, start_time, end_time, all_day"


class UserStore:
    def __init__(self, db: Database):
        self.db = db

    def create(self, name: str, email: str, password_hash: str) -> Dict[str, Any]:
        """
        Insert a new user.

        Returns:
            dict: {id, name, email}. The hash is not read back.

        Raises:
            ConflictError: The email is already registered.
        """
        sql = """
            INSERT INTO users (name, email, password)
            VALUES (%s, %s, %s)
            RETURNING id, name, email;
        """
        try:
            with self.db.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (name, email, password_hash))
                    return dict(cur.fetchone())
        except psycopg2.errors.UniqueViolation as e:
            raise ConflictError("Email already exists") from e

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        sql = "SELECT id, name, email, password FROM users WHERE email = %s;"
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (email,))
                row = cur.fetchone()
        return dict(row) if row else None


class EventStore:
    """
    CRUD over the events table. The database assigns ids.

    Rows look like {id, title, description, start_time, end_time, all_day}.
    """

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> List[Dict[str, Any]]:
        # id breaks ties between events sharing a start time
        sql = f"SELECT {EVENT_COLUMNS} FROM events ORDER BY start_time ASC, id ASC;"
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [dict(row) for row in cur.fetchall()]

    def create(
        self,
        title: str,
        description: str,
        start: datetime,
        end: datetime,
        all_day: bool,
    ) -> Dict[str, Any]:
        sql = f"""
            INSERT INTO events (title, description, start_time, end_time, all_day)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {EVENT_COLUMNS};
        """
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (title, description, start, end, all_day))
                return dict(cur.fetchone())

    def replace(
        self,
        event_id: int,
        title: str,
        description: str,
        start: datetime,
        end: datetime,
        all_day: bool,
    ) -> Optional[Dict[str, Any]]:
        """
        Overwrite every editable field of an event.

        Returns:
            dict: The updated row, or None if no event has this id.
        """
        sql = f"""
            UPDATE events
            SET title = %s, description = %s, start_time = %s, end_time = %s,
                all_day = %s, updated_at = CURRENT_TIMESTAMP
            WHERE id = %s
            RETURNING {EVENT_COLUMNS};
        """
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (title, description, start, end, all_day, event_id))
                row = cur.fetchone()
        return dict(row) if row else None

    def delete(self, event_id: int) -> bool:
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM events WHERE id = %s;", (event_id,))
                return cur.rowcount > 0


# --- ACCESSORS FOR ROUTE HANDLERS ---
def get_user_store() -> UserStore:
    """Return the UserStore bound to the current application."""
    return current_app.extensions["event_planner"]["user_store"]


def get_event_store() -> EventStore:
    """Return the EventStore bound to the current application."""
    return current_app.extensions["event_planner"]["event_store"]
