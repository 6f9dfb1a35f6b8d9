"""
UserHub Backend — User Service (Data-Access Layer)
====================================================

What:  CRUD operations on users and the dynamic list query builder.
How:   Builds parameterized SQLAlchemy statements, executes them on the
       request's AsyncSession and maps rows to UserResponse schemas.
       Driver errors are translated into the application exception hierarchy.
Who:   Called by route handlers in userhub.routes.users.
When:  Once per API request; the service itself holds no state.

Query Construction (GET /users):
    SELECT users.*, <age expression> FROM users
    [WHERE (name ILIKE :s OR email ILIKE :s OR role ILIKE :s) [AND ...]]
    ORDER BY <allow-listed column> <ASC|DESC>, users.id <ASC|DESC>

    - The search term is always a bound parameter; LIKE wildcards in it are
      escaped so it matches as a literal substring.
    - The sort column comes from SORTABLE_FIELDS only. Unknown values fall
      back to timestamp DESC.
    - Filter conditions are collected in a list and joined with AND.

Error Translation:
    IntegrityError on users.email  → ConflictError  (409)
    Any other SQLAlchemy/OS error  → DatabaseError  (500, opaque message)
    Unknown / non-numeric id       → NotFoundError  (404)
"""

import logging
from typing import List, Optional

from sqlalchemy import Select, and_, asc, delete, desc, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from userhub.exceptions import ConflictError, DatabaseError, NotFoundError
from userhub.models.user import User
from userhub.schemas.user import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

# Fixed allow-list: query-string value → mapped attribute
SORTABLE_FIELDS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "age": User.age,
    "timestamp": User.timestamp,
}

# Upper bound of the PostgreSQL INTEGER primary key
MAX_USER_ID = 2**31 - 1


def build_user_query(
    search: Optional[str] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> Select:
    """
    Build the SELECT for the user listing from optional query parameters.

    Args:
        search: Case-insensitive substring matched against name, email or role.
                Empty or None applies no filter.
        sort:   One of SORTABLE_FIELDS; anything else means timestamp DESC.
        order:  "desc" for descending; any other value is ascending.
                Ignored when `sort` is not recognized.
    """
    query = select(User)

    conditions = []
    if search:
        conditions.append(
            or_(
                User.name.icontains(search, autoescape=True),
                User.email.icontains(search, autoescape=True),
                User.role.icontains(search, autoescape=True),
            )
        )

    if conditions:
        query = query.where(and_(*conditions))

    column = SORTABLE_FIELDS.get(sort) if sort else None
    if column is None:
        column, descending = User.timestamp, True
    else:
        descending = order == "desc"

    direction = desc if descending else asc
    # id breaks ties (equal names, same-second timestamps)
    return query.order_by(direction(column), direction(User.id))


def parse_user_id(user_id: str) -> int:
    """
    Convert the opaque path token to a primary key.

    Raises NotFoundError for anything that cannot be a stored id, so a
    malformed id behaves exactly like a missing one.
    """
    token = user_id.strip()
    if not (token.isascii() and token.isdigit()):
        raise NotFoundError(resource_id=user_id)
    pk = int(token)
    if pk < 1 or pk > MAX_USER_ID:
        raise NotFoundError(resource_id=user_id)
    return pk


def _is_email_conflict(exc: IntegrityError) -> bool:
    # PostgreSQL: ... unique constraint "users_email_key"; SQLite: UNIQUE constraint failed: users.email
    return "email" in str(exc.orig).lower()


class UserService:
    """
    Business logic layer for user operations.

    Responsibilities:
        - list_users():  filtered, sorted listing (no pagination)
        - get_user():    single record by id
        - create_user(): insert, then re-read store-assigned fields
        - update_user(): full replacement, then re-read in the same transaction
        - delete_user(): hard delete

    Every method receives the request's session. Write methods commit
    before returning; a failed commit surfaces as DatabaseError (500).
    Rollback on any error is owned by get_db_session.
    """

    async def list_users(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> List[UserResponse]:
        query = build_user_query(search=search, sort=sort, order=order)
        logger.debug("List query: %s | search=%r", query, search)

        try:
            result = await db.execute(query)
            users = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error listing users: %s", e, exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__, "error": str(e)},
            ) from e

        return [UserResponse.model_validate(user) for user in users]

    async def get_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        """
        Retrieve a single user by id.

        Raises:
            NotFoundError: id is non-numeric or no such row exists (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        pk = parse_user_id(user_id)
        user = await self._fetch(db, pk)
        return UserResponse.model_validate(user)

    async def create_user(self, db: AsyncSession, payload: UserCreate) -> UserResponse:
        """
        Insert a new user and return it with id, timestamp and age.

        Workflow:
            1. Add the row and flush (INSERT; the store assigns id/timestamp)
            2. Re-select it so server defaults and the derived age are loaded
            3. Commit before the route builds its response

        Raises:
            ConflictError: the email is already taken (nothing is written)
            DatabaseError: any other store failure
        """
        user = User(
            name=payload.name,
            email=payload.email,
            role=payload.role,
            birth=payload.birth,
        )
        db.add(user)
        await self._flush_write(db, email=payload.email)

        created = await self._fetch(db, user.id)
        await self._commit(db)
        logger.info("User %s created (role=%s)", created.id, created.role)
        return UserResponse.model_validate(created)

    async def update_user(
        self, db: AsyncSession, user_id: str, payload: UserUpdate
    ) -> UserResponse:
        """
        Overwrite every mutable field of an existing user.

        The UPDATE and the re-read share the request transaction, so a
        concurrent delete cannot slip between them. Never creates a row.

        Raises:
            NotFoundError: no row matched (→ 404)
            ConflictError: the new email belongs to another user (→ 409)
        """
        pk = parse_user_id(user_id)
        stmt = (
            update(User)
            .where(User.id == pk)
            .values(
                name=payload.name,
                email=payload.email,
                role=payload.role,
                birth=payload.birth,
            )
        )
        result = await self._execute_write(db, stmt, email=payload.email)
        if result.rowcount == 0:
            raise NotFoundError(resource_id=user_id)

        updated = await self._fetch(db, pk)
        await self._commit(db)
        logger.info("User %s updated", pk)
        return UserResponse.model_validate(updated)

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        """Hard-delete a user. Raises NotFoundError when nothing was deleted."""
        pk = parse_user_id(user_id)
        result = await self._execute_write(db, delete(User).where(User.id == pk))
        if result.rowcount == 0:
            raise NotFoundError(resource_id=user_id)
        await self._commit(db)
        logger.info("User %s deleted", pk)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _fetch(self, db: AsyncSession, pk: int) -> User:
        # populate_existing reloads an instance already in the identity map,
        # picking up server defaults and the recomputed age
        query = (
            select(User)
            .where(User.id == pk)
            .execution_options(populate_existing=True)
        )
        try:
            result = await db.execute(query)
            user = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error fetching user %s: %s", pk, e)
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"user_id": pk, "error": str(e)},
            ) from e

        if user is None:
            raise NotFoundError(resource_id=str(pk))
        return user

    async def _flush_write(self, db: AsyncSession, email: Optional[str] = None) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            raise self._integrity_error(e, email) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error writing user: %s", e, exc_info=True)
            raise DatabaseError(context={"error": str(e)}) from e

    async def _execute_write(self, db: AsyncSession, stmt, email: Optional[str] = None):
        try:
            return await db.execute(stmt)
        except IntegrityError as e:
            raise self._integrity_error(e, email) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error writing user: %s", e, exc_info=True)
            raise DatabaseError(context={"error": str(e)}) from e

    async def _commit(self, db: AsyncSession) -> None:
        try:
            await db.commit()
        except IntegrityError as e:
            raise self._integrity_error(e, None) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error committing user write: %s", e, exc_info=True)
            raise DatabaseError(context={"error": str(e)}) from e

    @staticmethod
    def _integrity_error(exc: IntegrityError, email: Optional[str]):
        if _is_email_conflict(exc):
            logger.warning("Email conflict for %s", email)
            return ConflictError(context={"email": email})
        logger.error("Integrity error writing user: %s", exc)
        return DatabaseError(context={"error": str(exc.orig)})


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
