"""
HTTP client for the remote customer service

Read-through caching for every query, cache invalidation after every
successful write, and translation of HTTP failures into domain errors.
"""

import hashlib
import json
import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from ...application.dtos.customer_dtos import (
    BatchItemFailure,
    BatchOperationResult,
    CreateCustomerDto,
    CustomerDto,
    CustomerSearchFilter,
    CustomerStatistics,
    PagedResult,
    UpdateCustomerDto,
)
from ...domain.exceptions import (
    AuthenticationError,
    ConcurrencyConflictError,
    CustomerManagementError,
    CustomerNotFoundError,
    OperationTimeoutError,
    RemoteServiceError,
    UniqueConstraintViolationError,
    ValidationError,
)
from ...domain.services.authentication_manager import AuthenticationManager
from ...domain.services.cache_manager import CacheManager
from ...domain.services.customer_api_service import CustomerApiService
from ...domain.value_objects.customer_id import CustomerId
from ...domain.value_objects.customer_type import CustomerType
from ..logging.logger_config import PerformanceLogger
from ..utilities.constants import CacheKeys, CacheSettings

logger = logging.getLogger(__name__)
T = TypeVar("T")

_MAX_ERROR_DETAIL = 200


def customer_key(customer_id: CustomerId) -> str:
    return CacheKeys.BY_ID.format(customer_id=customer_id)


def email_key(email: str) -> str:
    return CacheKeys.BY_EMAIL.format(email=email.strip().lower())


def query_key(kind: str, params: Dict[str, Any], hashed: bool = False) -> str:
    """Deterministic key for a listing or aggregate query"""
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    if hashed or len(canonical) > CacheSettings.MAX_KEY_LENGTH:
        canonical = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return CacheKeys.QUERY.format(kind=kind, params=canonical)


def _segment(value: str) -> str:
    return quote(value.strip(), safe="")


class HttpCustomerApiClient(CustomerApiService):
    """
    Customer service client over httpx

    Cached values are the JSON wire form of the DTOs so any cache backend can
    hold them.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        auth_manager: AuthenticationManager,
        cache_manager: CacheManager,
        customer_ttl: timedelta = timedelta(seconds=CacheSettings.CUSTOMER_TTL_SECONDS),
        listing_ttl: timedelta = timedelta(seconds=CacheSettings.LISTING_TTL_SECONDS),
    ):
        self._http = http_client
        self._auth = auth_manager
        self._cache = cache_manager
        self._customer_ttl = customer_ttl
        self._listing_ttl = listing_ttl
        self._generation = 0
        self._logger = logging.getLogger(self.__class__.__name__)

    # Queries

    async def get_customers(
        self, page: int = 1, page_size: int = 20, search_text: Optional[str] = None
    ) -> PagedResult[CustomerDto]:
        if page < 1:
            raise ValidationError("page must be greater than or equal to 1", "page")
        if page_size <= 0:
            raise ValidationError("page_size must be greater than 0", "page_size")

        search_text = search_text.strip() if search_text and search_text.strip() else None
        params: Dict[str, Any] = {"page": page, "pageSize": page_size}
        if search_text:
            params["searchText"] = search_text

        async def fetch() -> Any:
            response = await self._send("GET", "customers", "get_customers", params=params)
            await self._ensure_success(response, "get_customers")
            return self._json(response, "get_customers")

        return await self._read_through(
            query_key("page", params),
            self._listing_ttl,
            fetch,
            PagedResult[CustomerDto].model_validate,
            "get_customers",
        )

    async def get_customer_by_id(self, customer_id: CustomerId) -> Optional[CustomerDto]:
        async def fetch() -> Any:
            response = await self._send("GET", f"customers/{customer_id}", "get_customer_by_id")
            if response.status_code == 404:
                return None
            await self._ensure_success(response, "get_customer_by_id", customer_id)
            return self._json(response, "get_customer_by_id")

        return await self._read_through(
            customer_key(customer_id),
            self._customer_ttl,
            fetch,
            CustomerDto.model_validate,
            "get_customer_by_id",
        )

    async def get_customer_by_email(self, email: str) -> Optional[CustomerDto]:
        if not email or not email.strip():
            raise ValidationError("email is required", "email")

        async def fetch() -> Any:
            response = await self._send(
                "GET", f"customers/by-email/{_segment(email)}", "get_customer_by_email"
            )
            if response.status_code == 404:
                return None
            await self._ensure_success(response, "get_customer_by_email")
            return self._json(response, "get_customer_by_email")

        return await self._read_through(
            email_key(email),
            self._customer_ttl,
            fetch,
            CustomerDto.model_validate,
            "get_customer_by_email",
        )

    async def search_customers(
        self, search_filter: CustomerSearchFilter
    ) -> PagedResult[CustomerDto]:
        body = search_filter.to_wire()

        async def fetch() -> Any:
            response = await self._send("POST", "customers/search", "search_customers", json=body)
            await self._ensure_success(response, "search_customers")
            return self._json(response, "search_customers")

        return await self._read_through(
            query_key("search", body, hashed=True),
            self._listing_ttl,
            fetch,
            PagedResult[CustomerDto].model_validate,
            "search_customers",
        )

    async def get_customers_by_city(self, city: str) -> List[CustomerDto]:
        if not city or not city.strip():
            raise ValidationError("city is required", "city")
        return await self._get_list("by-city", city.strip())

    async def get_customers_by_state(self, state: str) -> List[CustomerDto]:
        if not state or not state.strip():
            raise ValidationError("state is required", "state")
        return await self._get_list("by-state", state.strip())

    async def get_customers_by_type(self, customer_type: CustomerType) -> List[CustomerDto]:
        return await self._get_list("by-type", CustomerType(customer_type).value)

    async def get_statistics(self) -> CustomerStatistics:
        return await self._get_value(
            "customers/statistics", "statistics", CustomerStatistics.model_validate
        )

    async def get_total_customers_count(self) -> int:
        return await self._get_value("customers/count", "count", int)

    async def email_exists(self, email: str) -> bool:
        if not email or not email.strip():
            raise ValidationError("email is required", "email")
        return await self._get_value(
            f"customers/email-exists/{_segment(email)}",
            "email-exists",
            bool,
            {"email": email.strip().lower()},
        )

    # Commands

    async def create_customer(self, customer: CreateCustomerDto) -> CustomerDto:
        created = await self._send_create(customer)
        await self._invalidate([CustomerId(created.id)])
        self._logger.info("Customer created: %s", created.id)
        return created

    async def update_customer(
        self, customer_id: CustomerId, customer: UpdateCustomerDto
    ) -> CustomerDto:
        updated = await self._send_update(customer_id, customer)
        await self._invalidate([customer_id])
        self._logger.info("Customer updated: %s", customer_id)
        return updated

    async def delete_customer(self, customer_id: CustomerId) -> None:
        await self._send_command("DELETE", f"customers/{customer_id}", "delete_customer", customer_id)
        await self._invalidate([customer_id])
        self._logger.info("Customer deleted: %s", customer_id)

    async def activate_customer(self, customer_id: CustomerId) -> None:
        await self._change_status(customer_id, "activate")

    async def deactivate_customer(self, customer_id: CustomerId) -> None:
        await self._change_status(customer_id, "deactivate")

    async def restore_customer(self, customer_id: CustomerId) -> None:
        await self._change_status(customer_id, "restore")

    # Batch operations

    async def create_customers(
        self, customers: List[CreateCustomerDto]
    ) -> BatchOperationResult[CustomerDto]:
        result = BatchOperationResult[CustomerDto]()
        touched: List[CustomerId] = []
        try:
            for customer in customers:
                try:
                    created = await self._send_create(customer)
                except AuthenticationError:
                    raise
                except CustomerManagementError as e:
                    result.failed.append(self._failure(customer.email, e))
                    continue
                result.succeeded.append(created)
                touched.append(CustomerId(created.id))
        finally:
            if touched:
                await self._invalidate(touched)

        self._log_batch("create_customers", result)
        return result

    async def update_customers(
        self, updates: Dict[CustomerId, UpdateCustomerDto]
    ) -> BatchOperationResult[CustomerDto]:
        result = BatchOperationResult[CustomerDto]()
        touched: List[CustomerId] = []
        try:
            for customer_id, customer in updates.items():
                try:
                    updated = await self._send_update(customer_id, customer)
                except AuthenticationError:
                    raise
                except CustomerManagementError as e:
                    result.failed.append(self._failure(str(customer_id), e))
                    continue
                result.succeeded.append(updated)
                touched.append(customer_id)
        finally:
            if touched:
                await self._invalidate(touched)

        self._log_batch("update_customers", result)
        return result

    async def delete_customers(
        self, customer_ids: List[CustomerId]
    ) -> BatchOperationResult[str]:
        result = BatchOperationResult[str]()
        touched: List[CustomerId] = []
        try:
            for customer_id in customer_ids:
                try:
                    await self._send_command(
                        "DELETE", f"customers/{customer_id}", "delete_customer", customer_id
                    )
                except AuthenticationError:
                    raise
                except CustomerManagementError as e:
                    result.failed.append(self._failure(str(customer_id), e))
                    continue
                result.succeeded.append(str(customer_id))
                touched.append(customer_id)
        finally:
            if touched:
                await self._invalidate(touched)

        self._log_batch("delete_customers", result)
        return result

    # Requests

    async def _send_create(self, customer: CreateCustomerDto) -> CustomerDto:
        response = await self._send(
            "POST", "customers", "create_customer", json=customer.to_wire()
        )
        await self._ensure_success(response, "create_customer")
        try:
            return self._parse(response, CustomerDto.model_validate, "create_customer")
        except RemoteServiceError:
            await self._invalidate([])
            raise

    async def _send_update(
        self, customer_id: CustomerId, customer: UpdateCustomerDto
    ) -> CustomerDto:
        response = await self._send(
            "PUT", f"customers/{customer_id}", "update_customer", json=customer.to_wire()
        )
        await self._ensure_success(response, "update_customer", customer_id)
        try:
            return self._parse(response, CustomerDto.model_validate, "update_customer")
        except RemoteServiceError:
            await self._invalidate([customer_id])
            raise

    async def _send_command(
        self, method: str, path: str, operation: str, customer_id: CustomerId
    ) -> None:
        response = await self._send(method, path, operation)
        await self._ensure_success(response, operation, customer_id)

    async def _change_status(self, customer_id: CustomerId, action: str) -> None:
        operation = f"{action}_customer"
        await self._send_command("PATCH", f"customers/{customer_id}/{action}", operation, customer_id)
        await self._invalidate([customer_id])
        self._logger.info("Customer %s: %s", action, customer_id)

    async def _get_list(self, route: str, value: str) -> List[CustomerDto]:
        operation = f"get_customers_{route.replace('-', '_')}"

        async def fetch() -> Any:
            response = await self._send("GET", f"customers/{route}/{_segment(value)}", operation)
            await self._ensure_success(response, operation)
            return self._json(response, operation)

        return await self._read_through(
            query_key(route, {"value": value}),
            self._listing_ttl,
            fetch,
            lambda data: [CustomerDto.model_validate(item) for item in data],
            operation,
        )

    async def _get_value(
        self,
        path: str,
        kind: str,
        parser: Callable[[Any], T],
        params: Optional[Dict[str, Any]] = None,
    ) -> T:
        operation = kind.replace("-", "_")

        async def fetch() -> Any:
            response = await self._send("GET", path, operation)
            await self._ensure_success(response, operation)
            return self._json(response, operation)

        return await self._read_through(
            query_key(kind, params or {}), self._listing_ttl, fetch, parser, operation
        )

    async def _send(
        self,
        method: str,
        path: str,
        operation: str,
        json: Any = None,  # pylint: disable=redefined-outer-name
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send an authenticated request, translating transport failures"""
        token = await self._auth.get_access_token()
        headers = {"Authorization": f"Bearer {token}"}
        try:
            with PerformanceLogger(operation, self._logger, {"method": method}):
                return await self._http.request(
                    method, path, json=json, params=params, headers=headers
                )
        except httpx.TimeoutException as e:
            self._logger.warning("Customer service timed out during %s", operation)
            raise OperationTimeoutError(operation) from e
        except httpx.HTTPError as e:
            self._logger.error("Customer service unreachable during %s: %s", operation, type(e).__name__)
            raise RemoteServiceError(
                "Customer service unreachable", operation=operation
            ) from e

    async def _ensure_success(
        self,
        response: httpx.Response,
        operation: str,
        customer_id: Optional[CustomerId] = None,
    ) -> None:
        if response.status_code == 401:
            self._logger.warning("Request %s unauthorized, refreshing token", operation)
            try:
                await self._auth.refresh_token()
            except CustomerManagementError as e:
                self._logger.warning("Token refresh after 401 failed: %s", e.error_code)
            raise AuthenticationError("Request was not authorized")
        self._raise_for_status(response, operation, customer_id)

    def _raise_for_status(
        self,
        response: httpx.Response,
        operation: str,
        customer_id: Optional[CustomerId] = None,
    ) -> None:
        """Map an unsuccessful response to a domain error"""
        status = response.status_code
        if response.is_success:
            return

        detail = response.text[:_MAX_ERROR_DETAIL]
        if status in (400, 422):
            self._logger.warning("Invalid request in %s: %s", operation, detail)
            raise ValidationError(f"Invalid data: {detail}")
        if status == 401:
            raise AuthenticationError("Request was not authorized")
        if status == 404 and customer_id is not None:
            raise CustomerNotFoundError(customer_id)
        if status == 409:
            raise UniqueConstraintViolationError(f"Conflicting customer data: {detail}")
        if status == 412:
            raise ConcurrencyConflictError(customer_id)
        if status in (408, 504):
            raise OperationTimeoutError(operation)

        self._logger.error("Customer service error in %s: HTTP %d", operation, status)
        raise RemoteServiceError(
            f"Customer service returned HTTP {status}", status_code=status, operation=operation
        )

    def _json(self, response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            self._logger.error("Response of %s is not JSON", operation)
            raise RemoteServiceError(
                "Malformed response from customer service",
                status_code=response.status_code,
                operation=operation,
            ) from e

    def _parse(self, response: httpx.Response, parser: Callable[[Any], T], operation: str) -> T:
        try:
            return parser(response.json())
        except (ValueError, TypeError, PydanticValidationError) as e:
            self._logger.error("Malformed response in %s", operation)
            raise RemoteServiceError(
                "Malformed response from customer service",
                status_code=response.status_code,
                operation=operation,
            ) from e

    # Cache

    async def _read_through(
        self,
        key: str,
        ttl: timedelta,
        fetch: Callable[[], Awaitable[Any]],
        parser: Callable[[Any], T],
        operation: str,
    ) -> Optional[T]:
        """Serve from cache, otherwise fetch, parse and cache the wire payload"""
        cached = await self._cache.get(key)
        if cached is not None:
            try:
                value = parser(cached)
            except (ValueError, TypeError, PydanticValidationError):
                self._logger.warning("Discarding unreadable cache entry %s", key)
                await self._cache.remove(key)
            else:
                self._logger.debug("Cache hit for %s", operation)
                return value

        generation = self._generation
        data = await fetch()
        if data is None:
            return None

        try:
            value = parser(data)
        except (ValueError, TypeError, PydanticValidationError) as e:
            self._logger.error("Malformed response in %s", operation)
            raise RemoteServiceError(
                "Malformed response from customer service", operation=operation
            ) from e

        if generation != self._generation:
            self._logger.debug("Skipping cache fill for %s, a write happened during the read", operation)
            return value

        await self._cache.set(key, data, ttl)
        return value

    async def _invalidate(self, customer_ids: List[CustomerId]) -> None:
        """Drop every entry that could observe the written customers"""
        self._generation += 1
        for customer_id in customer_ids:
            await self._cache.remove(customer_key(customer_id))
        await self._cache.remove_pattern(CacheKeys.ALL_EMAILS_PATTERN)
        await self._cache.remove_pattern(CacheKeys.ALL_QUERIES_PATTERN)

    @staticmethod
    def _failure(key: str, error: CustomerManagementError) -> BatchItemFailure:
        return BatchItemFailure(key=key, error_code=error.error_code, message=error.message)

    def _log_batch(self, operation: str, result: BatchOperationResult) -> None:
        if result.failed:
            self._logger.warning(
                "%s finished with %d succeeded and %d failed",
                operation, len(result.succeeded), result.failure_count,
            )
        else:
            self._logger.info("%s finished, %d succeeded", operation, len(result.succeeded))
