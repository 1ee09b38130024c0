"""Session context passed to every menu action."""

from __future__ import annotations

from dataclasses import dataclass

from carsharing.console import ConsoleIO
from carsharing.models import Company, Customer
from carsharing.persistence import CarRepository, CompanyRepository, CustomerRepository


@dataclass
class Session:
    """Collaborators plus the current company/customer slots.

    The slots are set by pre-display hooks when a company or customer menu
    is entered and read by the actions nested under it.
    """

    io: ConsoleIO
    companies: CompanyRepository
    cars: CarRepository
    customers: CustomerRepository
    current_company: Company | None = None
    current_customer: Customer | None = None
