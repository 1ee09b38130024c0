from __future__ import annotations

import io
from pathlib import Path
from typing import Callable

import pytest

from carsharing.console import ConsoleIO, make_console
from carsharing.persistence import CarRepository, CompanyRepository, CustomerRepository, bootstrap_schema
from carsharing.session import Session


@pytest.fixture(autouse=True)
def _plain_console(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FORCE_COLOR", "TTY_COMPATIBLE", "TTY_INTERACTIVE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "carsharing.db"
    bootstrap_schema(path)
    return path


@pytest.fixture
def make_session(db_path: Path) -> Callable[[str], tuple[Session, io.StringIO]]:
    """Return a factory building a session that reads ``text`` and prints into a buffer."""

    def factory(text: str = "") -> tuple[Session, io.StringIO]:
        out = io.StringIO()
        session = Session(
            io=ConsoleIO(stream=io.StringIO(text), console=make_console(out)),
            companies=CompanyRepository(db_path),
            cars=CarRepository(db_path),
            customers=CustomerRepository(db_path),
        )
        return session, out

    return factory
