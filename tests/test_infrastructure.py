"""
Tests for infrastructure components: logging, event publishing, database
manager and the dependency container
"""

import logging
from unittest.mock import patch

import pytest

from customer_management.domain.events.customer_events import (
    CustomerCreated,
    CustomerDeleted,
)
from customer_management.domain.value_objects.customer_id import CustomerId
from customer_management.infrastructure.auth.authentication_manager import (
    HttpAuthenticationManager,
)
from customer_management.infrastructure.cache.cache_manager import InMemoryCacheManager
from customer_management.infrastructure.configuration.config import Settings
from customer_management.infrastructure.container.dependency_injection import (
    DependencyContainer,
    get_container,
    initialize_container,
    reset_container,
)
from customer_management.infrastructure.database.operations import DatabaseManager
from customer_management.infrastructure.logging.logger_config import (
    LoggingConfigOptions,
    PerformanceLogger,
    SensitiveDataFilter,
    redact,
    redact_sensitive_data,
    setup_logging,
)
from customer_management.infrastructure.services.customer_api_client import (
    HttpCustomerApiClient,
)
from customer_management.infrastructure.services.event_publisher import (
    LoggingEventPublisher,
)

from .factories import make_create_dto


def _record(msg, *args, **extra):
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSensitiveDataMasking:
    """Test credential masking in log output"""

    def test_redact_bearer_token(self):
        assert redact("Authorization: Bearer eyJhbGciOi.abc-def") == "Authorization: Bearer ***"

    def test_redact_key_values(self):
        assert redact('{"accessToken": "abc123", "page": 1}') == '{"accessToken": "***", "page": 1}'
        assert redact("password=hunter2&user=maria") == "password=***&user=maria"

    def test_plain_text_untouched(self):
        assert redact("Customer created: 42") == "Customer created: 42"

    def test_filter_masks_formatted_message(self):
        """Secrets passed as arguments are masked after formatting"""
        record = _record("Refreshing with refresh_token=%s", "r-123")

        assert SensitiveDataFilter().filter(record) is True
        assert record.getMessage() == "Refreshing with refresh_token=***"

    def test_filter_masks_extra_fields(self):
        record = _record("login", password="hunter2", header="Bearer xyz", customer="ana")

        SensitiveDataFilter().filter(record)

        assert record.password == "***"
        assert record.header == "Bearer ***"
        assert record.customer == "ana"

    def test_structlog_processor(self):
        event_dict = {"event": "token issued", "access_token": "abc", "note": "Bearer xyz"}

        result = redact_sensitive_data(None, "info", event_dict)

        assert result == {"event": "token issued", "access_token": "***", "note": "Bearer ***"}


class TestPerformanceLogger:
    """Test PerformanceLogger context manager"""

    def test_successful_operation(self, caplog):
        caplog.set_level(logging.DEBUG, logger="perf")

        with PerformanceLogger("load_customer", logging.getLogger("perf")) as perf:
            pass

        assert perf.duration_ms >= 0
        assert any("Completed operation: load_customer" in r.message for r in caplog.records)

    def test_failed_operation(self, caplog):
        caplog.set_level(logging.DEBUG, logger="perf")

        with pytest.raises(RuntimeError):
            with PerformanceLogger("load_customer", logging.getLogger("perf")):
                raise RuntimeError("boom")

        failed = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert "Failed operation: load_customer" in failed[0].message
        assert failed[0].error_type == "RuntimeError"
        assert failed[0].success is False

    def test_slow_operation(self, caplog):
        caplog.set_level(logging.DEBUG, logger="perf")

        with patch(
            "customer_management.infrastructure.logging.logger_config.time.perf_counter",
            side_effect=[10.0, 12.5],
        ):
            with PerformanceLogger("search", logging.getLogger("perf"), {"method": "POST"}):
                pass

        slow = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert "Slow operation: search took 2500.0ms" in slow[0].message
        assert slow[0].method == "POST"


class TestSetupLogging:
    """Test logging setup"""

    def test_handlers_carry_sensitive_filter(self, tmp_path):
        root_logger = logging.getLogger()
        saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
        try:
            setup_logging(LoggingConfigOptions(log_level="debug", log_dir=str(tmp_path)))

            assert len(root_logger.handlers) == 4
            assert root_logger.level == logging.DEBUG
            for handler in root_logger.handlers:
                assert any(isinstance(f, SensitiveDataFilter) for f in handler.filters)
            assert (tmp_path / "customer_management.log").exists()
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            for handler in root_logger.handlers:
                handler.close()
            root_logger.handlers[:] = saved_handlers
            root_logger.setLevel(saved_level)


class TestLoggingEventPublisher:
    """Test logging event publisher"""

    @pytest.mark.asyncio
    async def test_publish_keeps_history(self):
        publisher = LoggingEventPublisher()
        customer_id = CustomerId.new()
        events = [
            CustomerCreated(customer_id, "ana@example.com"),
            CustomerDeleted(customer_id, "ana@example.com"),
        ]

        await publisher.publish(events)

        assert publisher.published_events == events

    @pytest.mark.asyncio
    async def test_history_is_bounded(self):
        publisher = LoggingEventPublisher(history_size=2)
        customer_id = CustomerId.new()
        events = [CustomerCreated(customer_id, f"user{i}@example.com") for i in range(5)]

        await publisher.publish(events)

        assert publisher.published_events == events[-2:]

    @pytest.mark.asyncio
    async def test_zero_history_keeps_nothing(self):
        publisher = LoggingEventPublisher(history_size=0)
        customer_id = CustomerId.new()

        await publisher.publish([CustomerCreated(customer_id, "ana@example.com")])
        await publisher.publish([CustomerDeleted(customer_id, "ana@example.com")])

        assert publisher.published_events == []


class TestDatabaseManager:
    """Test database manager"""

    def test_health_check(self):
        manager = DatabaseManager(database_url="sqlite:///:memory:")
        try:
            manager.create_tables()
            assert manager.health_check() == {"status": "healthy", "environment": "test"}
        finally:
            manager.close()


class TestDependencyContainer:
    """Test dependency injection container"""

    @pytest.fixture
    def container(self):
        container = DependencyContainer(Settings())
        container.get_database_manager().create_tables()
        yield container
        container.cleanup()

    def test_registers_services(self, container):
        assert isinstance(container.get_cache_manager(), InMemoryCacheManager)
        assert isinstance(container.get_authentication_manager(), HttpAuthenticationManager)
        assert isinstance(container.get_customer_api_service(), HttpCustomerApiClient)
        assert isinstance(container.get_event_publisher(), LoggingEventPublisher)
        assert container.get_settings().environment == "test"

    def test_each_use_case_gets_its_own_repository(self, container):
        first = container.create_customer_management_use_case()
        second = container.create_customer_management_use_case()

        assert first._customer_repository is not second._customer_repository

    @pytest.mark.asyncio
    async def test_use_case_end_to_end(self, container):
        """Registration through the container publishes through its publisher"""
        use_case = container.create_customer_management_use_case()

        customer = await use_case.register_customer(make_create_dto())

        published = container.get_event_publisher().published_events
        assert [str(event.customer_id) for event in published] == [str(customer.id)]

    @pytest.mark.asyncio
    async def test_aclose(self):
        container = DependencyContainer(Settings())
        http_client = container._instances["api_http_client"]

        await container.aclose()

        assert http_client.is_closed

    def test_global_container(self):
        reset_container()
        try:
            container = get_container()
            assert get_container() is container

            replaced = initialize_container(Settings())
            assert replaced is not container
            assert get_container() is replaced
        finally:
            reset_container()
