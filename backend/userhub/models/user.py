"""
UserHub Backend — User SQLAlchemy Model
=========================================

What:  ORM model representing the `users` table.
How:   Inherits from the shared DeclarativeBase; Alembic and the startup
       bootstrap read it to create the table.
Who:   Used by UserService for CRUD operations.

Table Design:
    - id:        integer autoincrement primary key, assigned by the store
    - email:     UNIQUE; the store is the arbiter of uniqueness
    - role:      short enum-like text with server default 'user'
    - birth:     calendar date
    - timestamp: server default CURRENT_TIMESTAMP, set once at insertion
    - age:       NOT a column. It is a SQL expression over `birth` that every
                 SELECT evaluates, so it always reflects the current date.
"""

from datetime import date, datetime
from typing import Literal

from sqlalchemy import Date, DateTime, Index, Integer, String, Text, func, text
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Mapped, column_property, mapped_column
from sqlalchemy.sql.functions import FunctionElement

from userhub.database import Base

# Roles accepted on the wire; the table stores plain text.
Role = Literal["admin", "user", "moderator"]
DEFAULT_ROLE = "user"


class years_since(FunctionElement):
    """
    Whole years elapsed between a date expression and today.

    Compiles to PostgreSQL's age() by default and to a strftime()
    calculation on SQLite, which has no interval arithmetic.
    """

    type = Integer()
    name = "years_since"
    inherit_cache = True


@compiles(years_since)
def _compile_years_since(element, compiler, **kw):
    return "CAST(EXTRACT(YEAR FROM age(%s)) AS INTEGER)" % compiler.process(
        element.clauses, **kw
    )


@compiles(years_since, "sqlite")
def _compile_years_since_sqlite(element, compiler, **kw):
    birth = compiler.process(element.clauses, **kw)
    # Year difference, minus one when this year's birthday has not happened yet
    return (
        "(CAST(strftime('%Y', 'now') AS INTEGER) - CAST(strftime('%Y', {0}) AS INTEGER)"
        " - (strftime('%m-%d', 'now') < strftime('%m-%d', {0})))"
    ).format(birth)


class User(Base):
    """
    A managed user record.

    Lifecycle:
        1. Created by POST /users (store assigns id and timestamp)
        2. Overwritten in place by PUT /users/{id} (id and timestamp preserved)
        3. Hard-deleted by DELETE /users/{id}
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DEFAULT_ROLE,
        server_default=text("'user'"),
    )

    birth: Mapped[date] = mapped_column(Date, nullable=False)

    # No Python-side default: the store stamps insertion time
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )

    # Derived at read time; loaded with every SELECT of User, never written
    age: Mapped[int] = column_property(years_since(birth))

    # sqlite_autoincrement: SQLite otherwise reuses the id of a deleted last row
    __table_args__ = (
        Index("idx_users_timestamp", timestamp.desc()),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
