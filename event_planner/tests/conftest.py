import pytest

from event_planner.errors import ConflictError
from event_planner.gateway.server import create_app

ALLOWED_ORIGIN = "http://localhost:3000"


class FakeUserStore:
    """In-memory UserStore with the same contract as the PostgreSQL one."""

    def __init__(self):
        self.users = []

    def create(self, name, email, password_hash):
        if any(u["email"] == email for u in self.users):
            raise ConflictError("Email already exists")
        user = {"id": len(self.users) + 1, "name": name, "email": email, "password": password_hash}
        self.users.append(user)
        return {"id": user["id"], "name": name, "email": email}

    def find_by_email(self, email):
        for user in self.users:
            if user["email"] == email:
                return dict(user)
        return None


class FakeEventStore:
    """In-memory EventStore; lists by start time, then id."""

    def __init__(self):
        self.events = {}
        self.next_id = 1

    def list_all(self):
        rows = [dict(e) for e in self.events.values()]
        return sorted(rows, key=lambda e: (e["start_time"], e["id"]))

    def create(self, title, description, start, end, all_day):
        row = {
            "id": self.next_id,
            "title": title,
            "description": description,
            "start_time": start,
            "end_time": end,
            "all_day": all_day,
        }
        self.events[row["id"]] = row
        self.next_id += 1
        return dict(row)

    def replace(self, event_id, title, description, start, end, all_day):
        if event_id not in self.events:
            return None
        self.events[event_id].update(
            title=title, description=description, start_time=start, end_time=end, all_day=all_day
        )
        return dict(self.events[event_id])

    def delete(self, event_id):
        return self.events.pop(event_id, None) is not None


@pytest.fixture
def user_store():
    return FakeUserStore()


@pytest.fixture
def event_store():
    return FakeEventStore()


@pytest.fixture
def app(user_store, event_store):
    app = create_app(
        config={"TESTING": True, "CORS_ORIGINS": [ALLOWED_ORIGIN]},
        user_store=user_store,
        event_store=event_store,
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the Database handle, its pooled connection and cursor.
    """
    mock_conn = mocker.MagicMock()
    mock_cursor = mocker.MagicMock()

    # Setup the context manager for cursor
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None
    mock_conn.cursor.return_value = mock_cursor

    # db.connection() is a context manager yielding the connection
    db = mocker.MagicMock()
    db.connection.return_value.__enter__.return_value = mock_conn
    db.connection.return_value.__exit__.return_value = None

    return db, mock_conn, mock_cursor
