"""Car sharing menu tree and its actions."""

from __future__ import annotations

import functools
import logging
from typing import Callable

from carsharing.menu import Menu, Option, navigate
from carsharing.models import Company, Customer
from carsharing.persistence import DuplicateNameError, StorageError
from carsharing.rendering import format_numbered
from carsharing.session import Session

logger = logging.getLogger(__name__)


def _recover_to(fallback: str) -> Callable:
    """On a storage failure, print it and go to the menu named by ``fallback``."""

    def decorate(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self: CarSharingApp, session: Session, *args: object, **kwargs: object) -> Menu | None:
            try:
                return func(self, session, *args, **kwargs)
            except DuplicateNameError as exc:
                session.io.print(f"'{exc.name}' already exists!")
            except StorageError as exc:
                logger.warning("%s failed: %s", func.__name__, exc)
                session.io.print(f"Storage error: {exc}")
            return getattr(self, fallback)

        return wrapper

    return decorate


class CarSharingApp:
    """Builds the fixed menu tree once and runs it from the welcome menu."""

    def __init__(self, session: Session) -> None:
        self.session = session

        self.root = Menu(
            [
                Option("Log in as a manager"),
                Option("Log in as a customer"),
                Option("Create a customer"),
            ],
            title="Welcome select an option: ",
        )
        self.manager = Menu([Option("Company list"), Option("Create a company")])
        self.companies_manager = Menu(title="Choose a company: ", empty_message="The company list is empty!")
        self.companies_customer = Menu(title="Choose a company: ", empty_message="The company list is empty!")
        self.customers = Menu(title="Choose a customer: ", empty_message="The customer list is empty!")
        self.cars = Menu([Option("Car list"), Option("Create a car")])
        self.rentals = Menu(
            [
                Option("Rent a car"),
                Option("Return a rented car"),
                Option("My rented car"),
            ]
        )

        self._wire()

    def _wire(self) -> None:
        self.root.add_sub_menu(0, self.manager)
        self.root.add_sub_menu(1, self.customers)
        self.root.options[2].action = self.create_customer

        self.manager.add_sub_menu(0, self.companies_manager)
        self.manager.options[1].action = self.create_company

        self.cars.options[0].action = self.print_car_list
        self.cars.options[1].action = self.create_car

        self.rentals.options[0].action = self.rent_car
        self.rentals.options[1].action = self.return_rented_car
        self.rentals.options[2].action = self.print_rented_car

        # Car and rental menus are reached from listings but go back one level higher.
        self.cars.set_parent_menu(self.manager)
        self.rentals.set_parent_menu(self.root)
        self.companies_customer.set_parent_menu(self.rentals)

        self.refresh_companies()
        self.refresh_customers()

    def run(self) -> None:
        navigate(self.root, self.session)

    def refresh_companies(self) -> None:
        """Rebuild both company listings from storage and re-wire their options."""
        names = [company.name for company in self.session.companies.list_all()]

        self.companies_manager.set_options_list(Option(name) for name in names)
        for idx in range(len(names)):
            self.companies_manager.add_sub_menu(idx, self.cars, self.enter_company, self.manager)

        self.companies_customer.set_options_list(Option(name, self.show_available_cars) for name in names)

    def refresh_customers(self) -> None:
        """Rebuild the customer listing from storage and re-wire its options."""
        names = [customer.name for customer in self.session.customers.list_all()]
        self.customers.set_options_list(Option(name) for name in names)
        for idx in range(len(names)):
            self.customers.add_sub_menu(idx, self.rentals, self.enter_customer, self.root)

    def _ask_name(self, session: Session, prompt: str) -> str | None:
        session.io.print()
        session.io.print(prompt)
        # Stored names hold single spaces only; tabs print expanded.
        name = " ".join(session.io.read_line().split())
        if not name:
            session.io.print("The name cannot be empty!")
            return None
        return name

    def _company(self, session: Session) -> Company:
        if session.current_company is None:
            raise RuntimeError("No company selected")
        return session.current_company

    def _reload_customer(self, session: Session) -> Customer:
        if session.current_customer is None:
            raise RuntimeError("No customer selected")
        customer = session.customers.get_by_name(session.current_customer.name)
        if customer is None:
            raise RuntimeError(f"Customer {session.current_customer.name!r} disappeared")
        session.current_customer = customer
        return customer

    # Pre-display hooks

    @_recover_to("companies_manager")
    def enter_company(self, session: Session, option: Option) -> Menu | None:
        company = session.companies.get_by_name(option.description)
        if company is None:
            session.io.print(f"'{option.description}' no longer exists!")
            return self.companies_manager
        session.current_company = company
        self.cars.set_title(f"'{company.name}' company: ")
        return None

    @_recover_to("customers")
    def enter_customer(self, session: Session, option: Option) -> Menu | None:
        customer = session.customers.get_by_name(option.description)
        if customer is None:
            session.io.print(f"'{option.description}' no longer exists!")
            return self.customers
        session.current_customer = customer
        self.rentals.set_title(f"Welcome '{customer.name}': ")
        return None

    # Welcome and manager actions

    @_recover_to("root")
    def create_customer(self, session: Session) -> Menu | None:
        name = self._ask_name(session, "Enter the customer name:")
        if name is None:
            return self.root
        session.customers.create(name)
        session.io.print("The customer was created!")
        self.refresh_customers()
        return self.root

    @_recover_to("manager")
    def create_company(self, session: Session) -> Menu | None:
        name = self._ask_name(session, "Enter the company name:")
        if name is None:
            return self.manager
        session.companies.create(name)
        session.io.print("The company was created!")
        self.refresh_companies()
        return self.manager

    @_recover_to("cars")
    def print_car_list(self, session: Session) -> Menu | None:
        company = self._company(session)
        session.io.print()
        session.io.print(f"'{company.name}' cars:")
        cars = session.cars.list_by_company(company.id)
        if not cars:
            session.io.print("The car list is empty!")
        for line in format_numbered([car.name for car in cars]):
            session.io.print(line)
        return self.cars

    @_recover_to("cars")
    def create_car(self, session: Session) -> Menu | None:
        company = self._company(session)
        name = self._ask_name(session, "Enter the car name:")
        if name is None:
            return self.cars
        session.cars.create(name, company.id)
        session.io.print("The car was added!")
        return self.cars

    # Customer actions

    @_recover_to("rentals")
    def rent_car(self, session: Session) -> Menu | None:
        customer = self._reload_customer(session)
        if customer.has_rental:
            session.io.print()
            session.io.print("You've already rented a car!")
            return self.rentals
        return self.companies_customer

    @_recover_to("rentals")
    def show_available_cars(self, session: Session) -> Menu | None:
        option = self.companies_customer.selected()
        if option is None:
            return self.companies_customer
        company = session.companies.get_by_name(option.description)
        if company is None:
            session.io.print(f"'{option.description}' no longer exists!")
            return self.companies_customer

        car_menu = Menu(title="Choose a car: ", empty_message="No available cars!", parent=self.rentals)
        rent = functools.partial(self.rent_selected_car, car_menu=car_menu)
        car_menu.set_options_list(
            Option(car.name, rent) for car in session.cars.list_available_by_company(company.id)
        )
        return car_menu

    @_recover_to("rentals")
    def rent_selected_car(self, session: Session, car_menu: Menu) -> Menu | None:
        option = car_menu.selected()
        if option is None:
            return car_menu
        car = session.cars.get_by_name(option.description)
        if car is None:
            session.io.print(f"'{option.description}' no longer exists!")
            return self.rentals
        customer = self._reload_customer(session)
        if customer.has_rental:
            session.io.print("You've already rented a car!")
            return self.rentals
        session.customers.set_rented_car(customer.name, car.id)
        self._reload_customer(session)
        session.io.print()
        session.io.print(f"You rented '{car.name}'")
        return self.rentals

    @_recover_to("rentals")
    def return_rented_car(self, session: Session) -> Menu | None:
        customer = self._reload_customer(session)
        session.io.print()
        if customer.has_rental:
            session.customers.set_rented_car(customer.name, None)
            self._reload_customer(session)
            session.io.print("You've returned a rented car!")
        else:
            session.io.print("You didn't rent a car!")
        return self.rentals

    @_recover_to("rentals")
    def print_rented_car(self, session: Session) -> Menu | None:
        customer = self._reload_customer(session)
        session.io.print()
        car = session.cars.get_by_id(customer.rented_car_id) if customer.rented_car_id is not None else None
        if car is None:
            session.io.print("You didn't rent a car!")
            return self.rentals
        company = session.companies.get_by_id(car.company_id)
        session.io.print("You rented car:")
        session.io.print(car.name)
        session.io.print("Company:")
        session.io.print(company.name if company is not None else "")
        return self.rentals
