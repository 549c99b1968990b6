"""
SQLAlchemy implementation of CustomerRepository
"""

import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ...application.dtos.customer_dtos import CustomerSearchFilter, CustomerStatistics
from ...domain.entities.customer_entity import Customer as DomainCustomer
from ...domain.exceptions import (
    ConcurrencyConflictError,
    CustomerNotFoundError,
    StorageError,
    UniqueConstraintViolationError,
    ValidationError,
)
from ...domain.repositories.customer_repository import CustomerRepository
from ...domain.value_objects.address import Address
from ...domain.value_objects.customer_id import CustomerId
from ...domain.value_objects.customer_status import CustomerStatus
from ...domain.value_objects.customer_type import CustomerType
from ...domain.value_objects.email import Email
from ...domain.value_objects.phone_number import PhoneNumber
from ..database.models import Customer as SQLCustomer
from ..utilities.constants import DatabaseSettings
from .session_handler import managed_session

logger = logging.getLogger(__name__)

_ADD = "add"
_UPDATE = "update"
_DELETE = "delete"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored values are always UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SQLAlchemyCustomerRepository(CustomerRepository):
    """
    SQLAlchemy implementation of customer repository

    Staged operations are kept in memory until save_changes(), which replays
    them in order inside one session and commits once.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._pending: List[Tuple[str, DomainCustomer]] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._pending)

    @contextmanager
    def _read_session(self, operation: str) -> Generator[Session, None, None]:
        try:
            with managed_session(self._session_factory) as session:
                yield session
        except SQLAlchemyError as e:
            self._logger.error("Customer query %s failed: %s", operation, e)
            raise StorageError(f"Customer query failed: {operation}", operation) from e

    def _not_deleted(self, query: Query) -> Query:
        return query.filter(SQLCustomer.status != CustomerStatus.DELETED.value)

    def _ordered(self, query: Query) -> Query:
        return query.order_by(SQLCustomer.first_name, SQLCustomer.last_name, SQLCustomer.id)

    # Basic operations

    async def get_by_id(self, customer_id: CustomerId) -> Optional[DomainCustomer]:
        """Find customer by ID"""
        with self._read_session("get_by_id") as session:
            sql_customer = session.get(SQLCustomer, str(customer_id))
            if not sql_customer:
                return None
            return self._map_to_domain(sql_customer)

    async def get_by_email(self, email: Email) -> Optional[DomainCustomer]:
        """Find customer by email"""
        with self._read_session("get_by_email") as session:
            sql_customer = (
                self._not_deleted(session.query(SQLCustomer))
                .filter(SQLCustomer.email == email.value)
                .first()
            )
            if not sql_customer:
                return None
            return self._map_to_domain(sql_customer)

    async def get_all(self) -> List[DomainCustomer]:
        """Find all customers"""
        with self._read_session("get_all") as session:
            sql_customers = self._ordered(self._not_deleted(session.query(SQLCustomer))).all()
            return [self._map_to_domain(customer) for customer in sql_customers]

    async def get_paged(
        self, search_text: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[DomainCustomer], int]:
        """Get one page of customers matching an optional search text"""
        self._validate_paging(page, page_size)
        with self._read_session("get_paged") as session:
            query = self._apply_search_text(
                self._not_deleted(session.query(SQLCustomer)), search_text
            )
            return self._page(query, page, page_size)

    async def add(self, customer: DomainCustomer) -> None:
        """Stage a new customer"""
        if not isinstance(customer, DomainCustomer):
            raise ValidationError("customer is required", "customer")
        self._pending.append((_ADD, customer))

    def update(self, customer: DomainCustomer) -> None:
        """Stage an update"""
        if not isinstance(customer, DomainCustomer):
            raise ValidationError("customer is required", "customer")
        self._pending.append((_UPDATE, customer))

    def delete(self, customer: DomainCustomer) -> None:
        """Stage a soft delete"""
        if not isinstance(customer, DomainCustomer):
            raise ValidationError("customer is required", "customer")
        self._pending.append((_DELETE, customer))

    async def exists(self, customer_id: CustomerId) -> bool:
        """Check if customer exists by ID"""
        with self._read_session("exists") as session:
            return (
                session.query(SQLCustomer.id)
                .filter(SQLCustomer.id == str(customer_id))
                .first()
                is not None
            )

    async def email_exists(self, email: Email) -> bool:
        """Check if a non-deleted customer uses the email"""
        with self._read_session("email_exists") as session:
            return (
                self._not_deleted(session.query(SQLCustomer.id))
                .filter(SQLCustomer.email == email.value)
                .first()
                is not None
            )

    # Advanced queries

    async def search(
        self, search_filter: CustomerSearchFilter
    ) -> Tuple[List[DomainCustomer], int]:
        """Filtered, paged search"""
        self._validate_paging(search_filter.page, search_filter.page_size)
        with self._read_session("search") as session:
            query = session.query(SQLCustomer)

            if search_filter.status is not None:
                query = query.filter(SQLCustomer.status == search_filter.status.value)
            elif not search_filter.include_deleted:
                query = self._not_deleted(query)

            query = self._apply_search_text(query, search_filter.search_text)

            if search_filter.customer_type is not None:
                query = query.filter(
                    SQLCustomer.customer_type == search_filter.customer_type.value
                )
            if search_filter.city:
                query = query.filter(
                    func.lower(SQLCustomer.city) == search_filter.city.strip().lower()
                )
            if search_filter.state:
                query = query.filter(
                    func.lower(SQLCustomer.state) == search_filter.state.strip().lower()
                )
            if search_filter.created_from:
                query = query.filter(
                    SQLCustomer.created_at >= _as_utc(search_filter.created_from)
                )
            if search_filter.created_to:
                query = query.filter(
                    SQLCustomer.created_at <= _as_utc(search_filter.created_to)
                )

            return self._page(query, search_filter.page, search_filter.page_size)

    async def get_by_type(self, customer_type: CustomerType) -> List[DomainCustomer]:
        return await self._list_where(
            "get_by_type", SQLCustomer.customer_type == CustomerType(customer_type).value
        )

    async def get_by_status(self, status: CustomerStatus) -> List[DomainCustomer]:
        status = CustomerStatus(status)
        with self._read_session("get_by_status") as session:
            sql_customers = self._ordered(
                session.query(SQLCustomer).filter(SQLCustomer.status == status.value)
            ).all()
            return [self._map_to_domain(customer) for customer in sql_customers]

    async def get_by_city(self, city: str) -> List[DomainCustomer]:
        if not city or not city.strip():
            raise ValidationError("city is required", "city")
        return await self._list_where(
            "get_by_city", func.lower(SQLCustomer.city) == city.strip().lower()
        )

    async def get_by_state(self, state: str) -> List[DomainCustomer]:
        if not state or not state.strip():
            raise ValidationError("state is required", "state")
        return await self._list_where(
            "get_by_state", func.lower(SQLCustomer.state) == state.strip().lower()
        )

    async def get_created_between(
        self, start_date: datetime, end_date: datetime
    ) -> List[DomainCustomer]:
        start, end = _as_utc(start_date), _as_utc(end_date)
        if start > end:
            raise ValidationError("start_date must not be after end_date", "start_date")
        with self._read_session("get_created_between") as session:
            sql_customers = (
                self._not_deleted(session.query(SQLCustomer))
                .filter(SQLCustomer.created_at >= start, SQLCustomer.created_at <= end)
                .order_by(SQLCustomer.created_at)
                .all()
            )
            return [self._map_to_domain(customer) for customer in sql_customers]

    # Statistics

    async def get_statistics(self) -> CustomerStatistics:
        """Aggregate counts over all customers"""
        now = datetime.now(UTC)
        start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        start_of_year = start_of_month.replace(month=1)

        with self._read_session("get_statistics") as session:
            by_status = dict(
                session.query(SQLCustomer.status, func.count(SQLCustomer.id))
                .group_by(SQLCustomer.status)
                .all()
            )
            live = self._not_deleted(session.query(SQLCustomer))
            by_type = dict(
                self._not_deleted(
                    session.query(SQLCustomer.customer_type, func.count(SQLCustomer.id))
                )
                .group_by(SQLCustomer.customer_type)
                .all()
            )

            return CustomerStatistics(
                total_customers=live.count(),
                active_customers=by_status.get(CustomerStatus.ACTIVE.value, 0),
                inactive_customers=by_status.get(CustomerStatus.INACTIVE.value, 0),
                deleted_customers=by_status.get(CustomerStatus.DELETED.value, 0),
                standard_customers=by_type.get(CustomerType.STANDARD.value, 0),
                premium_customers=by_type.get(CustomerType.PREMIUM.value, 0),
                corporate_customers=by_type.get(CustomerType.CORPORATE.value, 0),
                customers_created_this_month=live.filter(
                    SQLCustomer.created_at >= start_of_month
                ).count(),
                customers_created_this_year=live.filter(
                    SQLCustomer.created_at >= start_of_year
                ).count(),
                customers_by_city=self._top_locations(session, SQLCustomer.city),
                customers_by_state=self._top_locations(session, SQLCustomer.state),
            )

    async def get_total_count(self) -> int:
        with self._read_session("get_total_count") as session:
            return self._not_deleted(session.query(SQLCustomer)).count()

    async def get_active_count(self) -> int:
        return await self._count_status("get_active_count", CustomerStatus.ACTIVE)

    async def get_inactive_count(self) -> int:
        return await self._count_status("get_inactive_count", CustomerStatus.INACTIVE)

    # Persistence

    async def save_changes(self) -> None:
        await self.save_changes_with_result()

    async def save_changes_with_result(self) -> int:
        """
        Commit staged changes in one transaction

        The staged batch is discarded whether the commit succeeds or fails.

        Returns:
            Number of affected records

        Raises:
            UniqueConstraintViolationError: If an email is already in use
            ConcurrencyConflictError: If a customer changed since it was loaded
            CustomerNotFoundError: If an updated customer is not stored
            StorageError: On any other database failure
        """
        if not self._pending:
            return 0

        pending, self._pending = self._pending, []
        versions: Dict[CustomerId, int] = {}
        current: Optional[DomainCustomer] = None

        try:
            with managed_session(self._session_factory) as session:
                for operation, customer in pending:
                    current = customer
                    if operation == _ADD:
                        session.add(SQLCustomer(**self._to_row(customer), version=1))
                        session.flush()
                        versions[customer.id] = 1
                    else:
                        expected = versions.get(customer.id, customer.version)
                        self._apply_update(
                            session, customer, expected, deleted=operation == _DELETE
                        )
                        versions[customer.id] = expected + 1
        except IntegrityError as e:
            email = current.email.value if current else None
            self._logger.warning("Unique constraint violated while saving customers")
            raise UniqueConstraintViolationError(
                f"Email already registered: {email}", "email", email
            ) from e
        except SQLAlchemyError as e:
            self._logger.error("Failed to save customer changes: %s", e)
            raise StorageError("Failed to save customer changes", "save_changes") from e

        for _, customer in pending:
            customer.mark_persisted(versions[customer.id])

        self._logger.info("Saved %d customer change(s)", len(pending))
        return len(pending)

    def _apply_update(
        self, session: Session, customer: DomainCustomer, expected: int, deleted: bool
    ) -> None:
        values = self._to_row(customer)
        values.pop("id")
        values.pop("created_at")
        if deleted:
            values["status"] = CustomerStatus.DELETED.value

        result = session.execute(
            update(SQLCustomer)
            .where(SQLCustomer.id == str(customer.id), SQLCustomer.version == expected)
            .values(**values, version=expected + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            return

        actual = (
            session.query(SQLCustomer.version)
            .filter(SQLCustomer.id == str(customer.id))
            .scalar()
        )
        if actual is None:
            raise CustomerNotFoundError(customer.id)
        self._logger.warning(
            "Concurrency conflict on customer %s (expected %d, found %d)",
            customer.id, expected, actual,
        )
        raise ConcurrencyConflictError(customer.id, expected, actual)

    # Helpers

    @staticmethod
    def _validate_paging(page: int, page_size: int) -> None:
        if page < 1:
            raise ValidationError("page must be greater than or equal to 1", "page")
        if page_size <= 0:
            raise ValidationError("page_size must be greater than 0", "page_size")

    @staticmethod
    def _apply_search_text(query: Query, search_text: Optional[str]) -> Query:
        if not search_text or not search_text.strip():
            return query
        pattern = f"%{search_text.strip().lower()}%"
        return query.filter(
            or_(
                func.lower(SQLCustomer.first_name).like(pattern),
                func.lower(SQLCustomer.last_name).like(pattern),
                func.lower(SQLCustomer.email).like(pattern),
                SQLCustomer.phone.like(pattern),
            )
        )

    def _page(
        self, query: Query, page: int, page_size: int
    ) -> Tuple[List[DomainCustomer], int]:
        total_count = query.count()
        sql_customers = (
            self._ordered(query).offset((page - 1) * page_size).limit(page_size).all()
        )
        return [self._map_to_domain(customer) for customer in sql_customers], total_count

    async def _list_where(self, operation: str, criterion: Any) -> List[DomainCustomer]:
        with self._read_session(operation) as session:
            sql_customers = self._ordered(
                self._not_deleted(session.query(SQLCustomer)).filter(criterion)
            ).all()
            return [self._map_to_domain(customer) for customer in sql_customers]

    async def _count_status(self, operation: str, status: CustomerStatus) -> int:
        with self._read_session(operation) as session:
            return session.query(SQLCustomer).filter(SQLCustomer.status == status.value).count()

    def _top_locations(self, session: Session, column: Any) -> Dict[str, int]:
        count = func.count(SQLCustomer.id)
        rows = (
            self._not_deleted(session.query(column, count))
            .group_by(column)
            .order_by(count.desc(), column)
            .limit(DatabaseSettings.TOP_LOCATIONS_LIMIT)
            .all()
        )
        return {name: total for name, total in rows}

    @staticmethod
    def _to_row(customer: DomainCustomer) -> Dict[str, Any]:
        address = customer.address
        return {
            "id": str(customer.id),
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email.value,
            "phone": customer.phone.value,
            "street": address.street,
            "number": address.number,
            "complement": address.complement,
            "neighborhood": address.neighborhood,
            "city": address.city,
            "state": address.state,
            "zip_code": address.zip_code,
            "country": address.country,
            "customer_type": customer.customer_type.value,
            "status": customer.status.value,
            "created_at": _as_utc(customer.created_at),
            "updated_at": _as_utc(customer.updated_at),
        }

    def _map_to_domain(self, sql_customer: SQLCustomer) -> DomainCustomer:
        """Map SQLAlchemy model to domain entity"""
        return DomainCustomer(
            id=CustomerId.from_string(sql_customer.id),
            first_name=sql_customer.first_name,
            last_name=sql_customer.last_name,
            email=Email(sql_customer.email),
            phone=PhoneNumber(sql_customer.phone),
            address=Address(
                street=sql_customer.street,
                number=sql_customer.number,
                neighborhood=sql_customer.neighborhood,
                city=sql_customer.city,
                state=sql_customer.state,
                zip_code=sql_customer.zip_code,
                country=sql_customer.country,
                complement=sql_customer.complement,
            ),
            customer_type=CustomerType(sql_customer.customer_type),
            status=CustomerStatus(sql_customer.status),
            created_at=_as_utc(sql_customer.created_at),
            updated_at=_as_utc(sql_customer.updated_at),
            version=sql_customer.version,
        )
