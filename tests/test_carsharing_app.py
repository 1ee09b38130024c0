from __future__ import annotations

import io
import logging
import sys
from pathlib import Path

import pytest

from carsharing.carsharing_app import CarSharingApp
from carsharing.main import main
from carsharing.persistence import CompanyRepository, StorageError


def _run(make_session, text: str):
    session, out = make_session(text)
    app = CarSharingApp(session)
    app.run()
    return app, session, out.getvalue()


def _lines(*lines: str) -> str:
    return "\n".join(lines) + "\n"


@pytest.fixture
def acme_fleet(make_session):
    """Acme with Civic and Golf; Alice without a car and Bob renting Civic."""
    session, _ = make_session()
    session.companies.create("Acme")
    session.cars.create("Civic", 1)
    session.cars.create("Golf", 1)
    session.customers.create("Alice")
    session.customers.create("Bob")
    session.customers.set_rented_car("Bob", 1)
    return session


def test_exit_from_welcome_menu(make_session) -> None:
    _, _, out = _run(make_session, "0\n")

    assert out == _lines(
        "",
        "Welcome select an option: ",
        "",
        "1. Log in as a manager",
        "2. Log in as a customer",
        "3. Create a customer",
        "0. Exit",
    )


def test_create_customer_then_listed(make_session) -> None:
    app, session, out = _run(make_session, "3\nAlice\n2\n0\n0\n")

    alice = session.customers.get_by_name("Alice")
    assert alice is not None and alice.rented_car_id is None
    assert "The customer was created!" in out
    assert out.count("Welcome select an option:") == 3
    assert "1. Alice" in out.split("Choose a customer:")[1]
    assert [o.description for o in app.customers.options] == ["Alice"]


def test_empty_lists_show_their_messages(make_session) -> None:
    _, _, out = _run(make_session, "2\n1\n1\n0\n0\n0\n")

    assert "The customer list is empty!" in out
    assert "The company list is empty!" in out


def test_manager_customer_full_rental_scenario(make_session) -> None:
    text = "1\n2\nAcme\n1\n1\n2\nCivic\n0\n0\n3\nAlice\n2\n1\n1\n1\n1\n3\n0\n0\n"
    _, session, out = _run(make_session, text)

    assert "The company was created!" in out
    assert "'Acme' company:" in out
    assert "The car was added!" in out
    assert "Welcome 'Alice':" in out
    assert "You rented 'Civic'" in out
    assert _lines("You rented car:", "Civic", "Company:", "Acme") in out
    assert session.customers.get_by_name("Alice").rented_car_id == session.cars.get_by_name("Civic").id


def test_car_list_shows_company_cars(make_session, acme_fleet) -> None:
    _, _, out = _run(make_session, "1\n1\n1\n1\n0\n0\n0\n")

    assert _lines("'Acme' cars:", "1. Civic", "2. Golf") in out


def test_empty_car_list(make_session) -> None:
    session, _ = make_session()
    session.companies.create("Acme")

    _, _, out = _run(make_session, "1\n1\n1\n1\n0\n0\n0\n")

    assert _lines("'Acme' cars:", "The car list is empty!") in out


def test_back_from_cars_goes_to_manager(make_session, acme_fleet) -> None:
    app, _, out = _run(make_session, "1\n1\n1\n0\n0\n0\n")

    assert app.cars.parent is app.manager
    after_cars = out.split("'Acme' company:")[1]
    assert "Company list" in after_cars.split("Welcome select an option:")[0]


def test_available_cars_exclude_rented(make_session, acme_fleet) -> None:
    _, _, out = _run(make_session, "2\n1\n1\n1\n0\n0\n0\n")

    car_screen = out.split("Choose a car:")[1].split("Welcome 'Alice':")[0]
    assert "1. Golf" in car_screen
    assert "Civic" not in car_screen


def test_no_available_cars(make_session) -> None:
    session, _ = make_session()
    session.companies.create("Empty Motors")
    session.customers.create("Alice")

    _, _, out = _run(make_session, "2\n1\n1\n1\n0\n0\n")

    assert "No available cars!" in out


def test_second_rental_is_refused(make_session, acme_fleet) -> None:
    _, session, out = _run(make_session, "2\n2\n1\n0\n0\n")

    assert "You've already rented a car!" in out
    assert session.customers.get_by_name("Bob").rented_car_id == 1


def test_return_without_rental_changes_nothing(make_session, acme_fleet) -> None:
    _, session, out = _run(make_session, "2\n1\n2\n3\n0\n0\n")

    assert out.count("You didn't rent a car!") == 2
    assert session.customers.get_by_name("Alice").rented_car_id is None


def test_return_rented_car_frees_it(make_session, acme_fleet) -> None:
    _, session, out = _run(make_session, "2\n2\n2\n1\n1\n1\n0\n0\n")

    assert "You've returned a rented car!" in out
    assert "You rented 'Civic'" in out
    assert session.customers.get_by_name("Bob").rented_car_id == 1


def test_company_listing_is_rewired_after_create(make_session) -> None:
    app, _, out = _run(make_session, "1\n2\nAcme\n2\nBeta\n1\n2\n0\n0\n0\n")

    assert [o.description for o in app.companies_manager.options] == ["Acme", "Beta"]
    assert [o.description for o in app.companies_customer.options] == ["Acme", "Beta"]
    assert "'Beta' company:" in out
    assert "'Acme' company:" not in out


def test_duplicate_company_is_reported(make_session) -> None:
    _, session, out = _run(make_session, "1\n2\nAcme\n2\nAcme\n0\n0\n")

    assert "'Acme' already exists!" in out
    assert len(session.companies.list_all()) == 1


def test_blank_name_is_rejected(make_session) -> None:
    _, session, out = _run(make_session, "3\n   \n0\n")

    assert "The name cannot be empty!" in out
    assert session.customers.list_all() == []


def test_storage_failure_is_reported_and_navigation_continues(make_session, monkeypatch) -> None:
    session, out = make_session("3\nAlice\n0\n")
    app = CarSharingApp(session)

    def broken(name: str) -> None:
        raise StorageError("disk I/O error")

    monkeypatch.setattr(session.customers, "create", broken)
    app.run()

    assert "Storage error: disk I/O error" in out.getvalue()
    assert out.getvalue().count("Welcome select an option:") == 2


def test_end_of_input_propagates(make_session) -> None:
    session, _ = make_session("1\n")
    with pytest.raises(EOFError):
        CarSharingApp(session).run()


def test_main_runs_until_exit(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("CARSHARING_DB_PATH", str(tmp_path / "db" / "carsharing.db"))
    monkeypatch.setenv("CARSHARING_LOG_PATH", str(tmp_path / "log" / "carsharing.log"))
    monkeypatch.setattr(sys, "stdin", io.StringIO("3\nAlice\n0\n"))
    try:
        main()
    finally:
        package_logger = logging.getLogger("carsharing")
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()
        package_logger.propagate = True

    assert "The customer was created!" in capsys.readouterr().out
    assert (tmp_path / "db" / "carsharing.db").exists()
    assert "Starting carsharing" in (tmp_path / "log" / "carsharing.log").read_text()


def test_name_whitespace_is_normalised(make_session) -> None:
    _, session, out = _run(make_session, "3\n  A\tB   C \n2\n0\n0\n")

    assert [c.name for c in session.customers.list_all()] == ["A B C"]
    assert "1. A B C\n" in out


@pytest.fixture
def package_logger():
    yield logging.getLogger("carsharing")
    package_logger = logging.getLogger("carsharing")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True


def test_main_exits_with_status_1_on_startup_storage_failure(tmp_path: Path, monkeypatch, package_logger) -> None:
    log_file = tmp_path / "carsharing.log"
    monkeypatch.setenv("CARSHARING_DB_PATH", str(tmp_path / "carsharing.db"))
    monkeypatch.setenv("CARSHARING_LOG_PATH", str(log_file))
    monkeypatch.setattr(sys, "stdin", io.StringIO("0\n"))

    def broken(self) -> list:
        raise StorageError("database is locked")

    monkeypatch.setattr(CompanyRepository, "list_all", broken)

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1
    for handler in package_logger.handlers:
        handler.flush()
    log_text = log_file.read_text()
    assert "Fatal error" in log_text
    assert "database is locked" in log_text
