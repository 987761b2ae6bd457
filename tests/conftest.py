"""Shared pytest fixtures for the dashboard test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from backend import db
from models.appointment import Appointment

SAMPLE_CSV = (
    "Timestamp,Name,Date,Time,Service,Contact\r\n"
    '1/1/2024 09:00:00,"Smith, John",2024-01-05,10:00,Haircut,0811111111\r\n'
    "1/1/2024 09:05:00,,2024-01-05,11:00,Massage,0822222222\r\n"
    "\r\n"
    "1/1/2024 09:10:00,Ann Lee,2024-01-06,13:30,Massage,0833333333\r\n"
)


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def temp_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the preference store at a fresh SQLite file."""
    path = tmp_path / "dashboard.db"
    monkeypatch.setattr(db, "DB_PATH", str(path))
    db.init_db()
    return path


@pytest.fixture
def appointments() -> list[Appointment]:
    return [
        Appointment(id="row-1-b", customer_name="Ann Lee", date="2024-01-06",
                    time="13:30", service_type="Massage", contact="0833333333"),
        Appointment(id="row-0-a", customer_name="John", date="2024-01-05",
                    time="10:00", service_type="Haircut", contact="0811111111"),
    ]


@pytest.fixture
def make_response():
    """Factory for fake `requests` responses."""
    def _make(text: str = "", status_code: int = 200) -> MagicMock:
        response = MagicMock()
        response.text = text
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        return response
    return _make
