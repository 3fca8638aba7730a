"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import Boolean, Date, DateTime, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from live_filter.filters.query import RecordStore

if TYPE_CHECKING:
    from collections.abc import Generator


class TodoBase(DeclarativeBase):
    """Base class for test ORM models."""

    pass


class Todo(TodoBase):
    """A small task record covering each column kind the compiler handles."""

    __tablename__ = "todos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(32))
    assigned_to: Mapped[str | None] = mapped_column(String(64))
    is_urgent: Mapped[bool] = mapped_column(Boolean, default=False)
    estimated_hours: Mapped[float | None] = mapped_column(Float)
    due_date: Mapped[date | None] = mapped_column(Date)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    def __repr__(self) -> str:
        return f"<Todo(id={self.id}, title='{self.title}')>"


TODOS = [
    {
        "id": 1,
        "title": "Write quarterly report",
        "description": "Finance summary for Q2",
        "status": "in_progress",
        "assigned_to": "alice",
        "is_urgent": True,
        "estimated_hours": 6.0,
        "due_date": date(2025, 7, 10),
        "completed_at": None,
    },
    {
        "id": 2,
        "title": "Fix login bug",
        "description": "Users cannot sign in with SSO",
        "status": "todo",
        "assigned_to": "bob",
        "is_urgent": True,
        "estimated_hours": 2.5,
        "due_date": date(2025, 7, 5),
        "completed_at": None,
    },
    {
        "id": 3,
        "title": "Plan team offsite",
        "description": None,
        "status": "todo",
        "assigned_to": None,
        "is_urgent": False,
        "estimated_hours": 10.0,
        "due_date": date(2025, 8, 1),
        "completed_at": None,
    },
    {
        "id": 4,
        "title": "Update dependencies",
        "description": "",
        "status": "done",
        "assigned_to": "alice",
        "is_urgent": False,
        "estimated_hours": 1.0,
        "due_date": date(2025, 7, 1),
        "completed_at": datetime(2025, 7, 2, 15, 30),
    },
    {
        "id": 5,
        "title": "Review pull requests",
        "description": "Backend report review",
        "status": "done",
        "assigned_to": "carol",
        "is_urgent": False,
        "estimated_hours": None,
        "due_date": None,
        "completed_at": datetime(2025, 7, 9, 23, 0),
    },
]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[display]
colored_output = false

[sql]
dialect = "postgresql"

[url]
param_key = "filters"

[search]
fields = ["title", "description"]
""")
    return config_path


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """In-memory SQLite session seeded with the TODOS rows."""
    engine = create_engine("sqlite:///:memory:")
    TodoBase.metadata.create_all(engine)
    db = sessionmaker(bind=engine)()
    db.add_all(Todo(**row) for row in TODOS)
    db.commit()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def store(session: Session) -> RecordStore:
    """RecordStore over the seeded todos, searching title and description."""
    return RecordStore(session, Todo, search_fields=("title", "description"))
