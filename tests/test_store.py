"""Unit tests for auth/store.py -- AccountStore and its unit of work.

Covers:
- unit_of_work() commits on clean exit and rolls back every write on error
- duplicate email surfaces as ConflictError
- save_token / get_customer_by_user_id raise NotFoundError for missing rows
- history entries are listed newest first
"""

import pytest

from auth.errors import ConflictError, NotFoundError
from auth.models import Customer, History, User
from auth.store import AccountStore
from tests.helpers import count_rows


def _user(email: str = "a@example.com") -> User:
    return User(email=email, password="$2b$04$digest")


def test_unit_of_work_commits(store: AccountStore) -> None:
    user = _user()
    with store.unit_of_work() as uow:
        uow.create_user(user)
        uow.create_customer(Customer(first_name="A", last_name="B", user_id=user.id))

    saved = store.get_by_email("a@example.com")
    assert saved is not None
    assert saved.id == user.id
    assert saved.token == ""
    assert saved.created_at
    customer = store.get_customer_by_user_id(user.id)
    assert customer is not None
    assert (customer.first_name, customer.last_name) == ("A", "B")


def test_unit_of_work_rolls_back_on_error(store: AccountStore) -> None:
    user = _user()
    with pytest.raises(RuntimeError):
        with store.unit_of_work() as uow:
            uow.create_user(user)
            uow.create_customer(Customer(first_name="A", last_name="B", user_id=user.id))
            raise RuntimeError("abort")

    assert count_rows(store, "users") == 0
    assert count_rows(store, "customers") == 0


def test_duplicate_email_is_conflict(store: AccountStore) -> None:
    with store.unit_of_work() as uow:
        uow.create_user(_user())

    with pytest.raises(ConflictError):
        with store.unit_of_work() as uow:
            uow.create_user(_user())

    assert count_rows(store, "users") == 1


def test_second_customer_for_user_is_conflict(store: AccountStore) -> None:
    user = _user()
    with store.unit_of_work() as uow:
        uow.create_user(user)
        uow.create_customer(Customer(first_name="A", last_name="B", user_id=user.id))

    with pytest.raises(ConflictError):
        with store.unit_of_work() as uow:
            uow.create_customer(Customer(first_name="C", last_name="D", user_id=user.id))


def test_save_token_round_trip(store: AccountStore) -> None:
    user = _user()
    with store.unit_of_work() as uow:
        uow.create_user(user)
    with store.unit_of_work() as uow:
        uow.save_token(user.id, "tok")
    assert store.get_by_id(user.id).token == "tok"

    with store.unit_of_work() as uow:
        uow.save_token(user.id, "")
    assert store.get_by_id(user.id).token == ""


def test_save_token_unknown_user(store: AccountStore) -> None:
    with pytest.raises(NotFoundError):
        with store.unit_of_work() as uow:
            uow.save_token("missing", "tok")


def test_uow_customer_lookup_missing(store: AccountStore) -> None:
    with pytest.raises(NotFoundError):
        with store.unit_of_work() as uow:
            uow.get_customer_by_user_id("missing")


def test_history_listed_newest_first(store: AccountStore) -> None:
    user = _user()
    customer = Customer(first_name="A", last_name="B", user_id=user.id)
    with store.unit_of_work() as uow:
        uow.create_user(user)
        uow.create_customer(customer)
        uow.append_history(History(activity="first", customer_id=customer.id, date="2026-01-01T00:00:00+00:00"))
        uow.append_history(History(activity="second", customer_id=customer.id, date="2026-02-01T00:00:00+00:00"))

    entries = store.list_history(customer.id)
    assert [h.activity for h in entries] == ["second", "first"]
    assert all(h.customer_id == customer.id for h in entries)


def test_reads_return_none_when_missing(store: AccountStore) -> None:
    assert store.get_by_email("nobody@example.com") is None
    assert store.get_by_id("missing") is None
    assert store.get_customer_by_user_id("missing") is None
    assert store.list_history("missing") == []


def test_ping(store: AccountStore) -> None:
    assert store.ping() is True
