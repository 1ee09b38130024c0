"""SQLite persistence for companies, cars and customers."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence, TypeVar

from carsharing.config import resolve_db_path
from carsharing.models import Car, Company, Customer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageError(Exception):
    """A persistence operation failed."""


class DuplicateNameError(StorageError):
    """A record with the same unique name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"'{name}' already exists")
        self.name = name


@contextmanager
def _connect(db_path: str | Path) -> Iterator[sqlite3.Connection]:
    db_file = Path(db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(db_file)) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        with conn:
            yield conn


def bootstrap_schema(db_path: str | Path | None = None) -> None:
    """Create persistence schema if it does not already exist."""
    path = db_path or resolve_db_path()
    try:
        with _connect(path) as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS company (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE
                );

                CREATE TABLE IF NOT EXISTS car (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    company_id INTEGER NOT NULL,
                    FOREIGN KEY(company_id) REFERENCES company(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS customer (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    rented_car_id INTEGER,
                    FOREIGN KEY(rented_car_id) REFERENCES car(id) ON DELETE SET NULL
                );

                CREATE INDEX IF NOT EXISTS idx_car_company_id
                    ON car(company_id);

                CREATE INDEX IF NOT EXISTS idx_customer_rented_car_id
                    ON customer(rented_car_id);
                """
            )
    except sqlite3.Error as exc:
        logger.exception("Schema bootstrap failed for %s", path)
        raise StorageError(f"could not prepare database: {exc}") from exc
    logger.info("Schema ready at %s", path)


class _Repository:
    """Shared connection handling: one scoped connection per statement."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = Path(db_path or resolve_db_path())

    def _execute(self, sql: str, params: Sequence[Any] = (), name: str | None = None) -> None:
        try:
            with _connect(self.db_path) as conn:
                conn.execute(sql, params)
        except sqlite3.IntegrityError as exc:
            if name is not None and "UNIQUE" in str(exc):
                logger.warning("Duplicate name rejected: %s", name)
                raise DuplicateNameError(name) from exc
            logger.exception("Integrity error running %s", sql)
            raise StorageError(str(exc)) from exc
        except sqlite3.Error as exc:
            logger.exception("Statement failed: %s", sql)
            raise StorageError(str(exc)) from exc

    def _fetch_all(self, sql: str, params: Sequence[Any], row_to_model: Callable[[sqlite3.Row], T]) -> list[T]:
        try:
            with _connect(self.db_path) as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.exception("Query failed: %s", sql)
            raise StorageError(str(exc)) from exc
        return [row_to_model(row) for row in rows]

    def _fetch_one(self, sql: str, params: Sequence[Any], row_to_model: Callable[[sqlite3.Row], T]) -> T | None:
        rows = self._fetch_all(sql, params, row_to_model)
        return rows[0] if rows else None


def _company_from_row(row: sqlite3.Row) -> Company:
    return Company(id=int(row["id"]), name=str(row["name"]))


def _car_from_row(row: sqlite3.Row) -> Car:
    return Car(id=int(row["id"]), name=str(row["name"]), company_id=int(row["company_id"]))


def _customer_from_row(row: sqlite3.Row) -> Customer:
    rented = row["rented_car_id"]
    return Customer(
        id=int(row["id"]),
        name=str(row["name"]),
        rented_car_id=int(rented) if rented is not None else None,
    )


class CompanyRepository(_Repository):
    """Company records keyed by unique name."""

    def create(self, name: str) -> None:
        self._execute("INSERT INTO company (name) VALUES (?)", (name,), name=name)
        logger.info("Created company %r", name)

    def list_all(self) -> list[Company]:
        return self._fetch_all("SELECT id, name FROM company ORDER BY id", (), _company_from_row)

    def get_by_name(self, name: str) -> Company | None:
        return self._fetch_one("SELECT id, name FROM company WHERE name = ? LIMIT 1", (name,), _company_from_row)

    def get_by_id(self, company_id: int) -> Company | None:
        return self._fetch_one("SELECT id, name FROM company WHERE id = ? LIMIT 1", (company_id,), _company_from_row)


class CarRepository(_Repository):
    """Car records; each car belongs to exactly one company."""

    def create(self, name: str, company_id: int) -> None:
        self._execute("INSERT INTO car (name, company_id) VALUES (?, ?)", (name, company_id), name=name)
        logger.info("Created car %r for company id %s", name, company_id)

    def list_all(self) -> list[Car]:
        return self._fetch_all("SELECT id, name, company_id FROM car ORDER BY id", (), _car_from_row)

    def list_by_company(self, company_id: int) -> list[Car]:
        return self._fetch_all(
            "SELECT id, name, company_id FROM car WHERE company_id = ? ORDER BY id",
            (company_id,),
            _car_from_row,
        )

    def list_available_by_company(self, company_id: int) -> list[Car]:
        """Cars of the company that no customer currently holds."""
        return self._fetch_all(
            """
            SELECT car.id AS id, car.name AS name, car.company_id AS company_id
            FROM car
            LEFT JOIN customer ON customer.rented_car_id = car.id
            WHERE car.company_id = ? AND customer.id IS NULL
            ORDER BY car.id
            """,
            (company_id,),
            _car_from_row,
        )

    def get_by_name(self, name: str) -> Car | None:
        return self._fetch_one("SELECT id, name, company_id FROM car WHERE name = ? LIMIT 1", (name,), _car_from_row)

    def get_by_id(self, car_id: int) -> Car | None:
        return self._fetch_one("SELECT id, name, company_id FROM car WHERE id = ? LIMIT 1", (car_id,), _car_from_row)


class CustomerRepository(_Repository):
    """Customer records with a single nullable rental slot."""

    def create(self, name: str) -> None:
        self._execute("INSERT INTO customer (name) VALUES (?)", (name,), name=name)
        logger.info("Created customer %r", name)

    def list_all(self) -> list[Customer]:
        return self._fetch_all("SELECT id, name, rented_car_id FROM customer ORDER BY id", (), _customer_from_row)

    def get_by_name(self, name: str) -> Customer | None:
        return self._fetch_one(
            "SELECT id, name, rented_car_id FROM customer WHERE name = ? LIMIT 1",
            (name,),
            _customer_from_row,
        )

    def get_by_id(self, customer_id: int) -> Customer | None:
        return self._fetch_one(
            "SELECT id, name, rented_car_id FROM customer WHERE id = ? LIMIT 1",
            (customer_id,),
            _customer_from_row,
        )

    def set_rented_car(self, name: str, car_id: int | None) -> None:
        """Set or clear (car_id=None) the customer's rental slot."""
        self._execute("UPDATE customer SET rented_car_id = ? WHERE name = ?", (car_id, name))
        logger.info("Customer %r rented car id set to %s", name, car_id)
