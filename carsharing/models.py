"""Domain models for carsharing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Company:
    """A rental company."""

    id: int
    name: str


@dataclass(frozen=True)
class Car:
    """A car owned by a company."""

    id: int
    name: str
    company_id: int


@dataclass(frozen=True)
class Customer:
    """A customer with at most one rented car."""

    id: int
    name: str
    rented_car_id: int | None = None

    @property
    def has_rental(self) -> bool:
        return self.rented_car_id is not None
