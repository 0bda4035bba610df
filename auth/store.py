"""
auth/store.py -- SQLAlchemy Core persistence layer for auth entities.

Pattern: Repository + Data Mapper + Unit of Work.
AccountStore is the repository for single-statement reads; UnitOfWork groups
the writes of one request into a single transaction; _row_to_* are the
mappers. Route and service code never touches SQL directly.

Transactions:
  AccountStore.unit_of_work() is a context manager. It begins a transaction
  on entry, commits on a clean exit, and rolls back on any exception
  (including KeyboardInterrupt and GeneratorExit) before re-raising. Partial
  writes are never observable by other connections.

Security:
  All queries use bound parameters. No f-strings in SQL.

DB path: auth/custauth.db by default (see core.config.Settings.database_url).

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import ConflictError, NotFoundError
from auth.models import Customer, History, User

logger = logging.getLogger("custauth.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt digest
    Column("token", Text, nullable=False, server_default=""),  # "" = logged out
    Column("created_at", String(32), nullable=False),
)

_customers = Table(
    "customers",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("user_id", String(36), ForeignKey("users.id"), nullable=False, unique=True),
    Column("created_at", String(32), nullable=False),
)

_histories = Table(
    "histories",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("date", String(32), nullable=False),
    Column("activity", Text, nullable=False),
    Column("customer_id", String(36), ForeignKey("customers.id"), nullable=False, index=True),
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. Foreign keys are off by default in SQLite.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------


class UnitOfWork:
    """The writes (and reads-for-write) of one request, bound to one transaction.

    Instances are only handed out by AccountStore.unit_of_work(); the
    transaction boundary is owned by that context manager, not by this class.
    """

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def create_user(self, user: User) -> str:
        """Insert a user row and return its id.

        Raises ConflictError if the email is already registered.
        """
        try:
            self._conn.execute(
                _users.insert().values(
                    id=user.id,
                    email=user.email,
                    password=user.password,
                    token=user.token,
                    created_at=_now_iso(),
                )
            )
        except IntegrityError as exc:
            raise ConflictError("a user with that email already exists") from exc
        return user.id

    def create_customer(self, customer: Customer) -> str:
        """Insert a customer row and return its id.

        Raises ConflictError if the user already owns a customer record.
        """
        try:
            self._conn.execute(
                _customers.insert().values(
                    id=customer.id,
                    first_name=customer.first_name,
                    last_name=customer.last_name,
                    user_id=customer.user_id,
                    created_at=_now_iso(),
                )
            )
        except IntegrityError as exc:
            raise ConflictError("customer record conflicts with an existing row") from exc
        return customer.id

    def get_customer_by_user_id(self, user_id: str) -> Customer:
        """Return the customer owned by user_id. Raises NotFoundError if none."""
        row = self._conn.execute(_customers.select().where(_customers.c.user_id == user_id)).fetchone()
        if row is None:
            raise NotFoundError(f"no customer for user {user_id}")
        return _row_to_customer(row)

    def save_token(self, user_id: str, token: str) -> None:
        """Overwrite the stored token. Raises NotFoundError if the user is gone."""
        result = self._conn.execute(_users.update().where(_users.c.id == user_id).values(token=token))
        if result.rowcount == 0:
            raise NotFoundError(f"no user {user_id}")

    def append_history(self, history: History) -> str:
        """Insert an audit entry and return its id. History rows are never updated."""
        self._conn.execute(
            _histories.insert().values(
                id=history.id,
                date=history.date or _now_iso(),
                activity=history.activity,
                customer_id=history.customer_id,
            )
        )
        return history.id


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for User, Customer and History entities.

    Usage:
        store = AccountStore("sqlite:///:memory:")
        with store.unit_of_work() as uow:
            uow.create_user(user)
            uow.create_customer(customer)
        user = store.get_by_email("a@example.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        _metadata.create_all(self.engine)

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """Run the enclosed block in one transaction.

        Commits if the block exits normally. Any exception rolls back every
        write made through the yielded UnitOfWork and is re-raised unchanged.
        """
        with self.engine.connect() as conn:
            trans = conn.begin()
            try:
                yield UnitOfWork(conn)
            except BaseException:
                trans.rollback()
                logger.debug("Unit of work rolled back", exc_info=True)
                raise
            trans.commit()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_customer_by_user_id(self, user_id: str) -> Customer | None:
        with self.engine.connect() as conn:
            row = conn.execute(_customers.select().where(_customers.c.user_id == user_id)).fetchone()
        return _row_to_customer(row) if row is not None else None

    def list_history(self, customer_id: str) -> list[History]:
        """Return a customer's audit entries, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _histories.select()
                .where(_histories.c.customer_id == customer_id)
                .order_by(_histories.c.date.desc())
            ).fetchall()
        return [_row_to_history(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password=row.password,
        token=row.token or "",
        created_at=row.created_at,
    )


def _row_to_customer(row) -> Customer:
    return Customer(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        user_id=row.user_id,
        created_at=row.created_at,
    )


def _row_to_history(row) -> History:
    return History(
        id=row.id,
        date=row.date,
        activity=row.activity,
        customer_id=row.customer_id,
    )
