"""
Tests for customer DTOs
"""

import pytest

from customer_management.application.dtos.customer_dtos import CustomerSearchFilter, PagedResult
from customer_management.domain.exceptions import CustomerManagementError, ValidationError
from customer_management.domain.value_objects.customer_type import CustomerType


class TestCustomerSearchFilter:
    """Test search filter construction"""

    def test_defaults(self):
        search_filter = CustomerSearchFilter()

        assert search_filter.page == 1
        assert search_filter.page_size == 20
        assert search_filter.include_deleted is False

    def test_invalid_page_raises_domain_error(self):
        """Paging bounds are reported through the error taxonomy"""
        with pytest.raises(ValidationError) as exc_info:
            CustomerSearchFilter(page=0)

        assert exc_info.value.field == "page"
        assert isinstance(exc_info.value, CustomerManagementError)

    def test_invalid_page_size_raises_domain_error(self):
        with pytest.raises(ValidationError) as exc_info:
            CustomerSearchFilter(page_size=0)

        assert exc_info.value.field == "page_size"
        assert exc_info.value.error_code == "VALIDATION_ERROR"

    def test_wire_names(self):
        body = CustomerSearchFilter(search_text="ana", customer_type=CustomerType.PREMIUM).to_wire()

        assert body["searchText"] == "ana"
        assert body["type"] == "premium"
        assert body["pageSize"] == 20


class TestPagedResult:
    """Test paging metadata"""

    def test_page_navigation(self):
        page = PagedResult[int](items=[1, 2], page=2, page_size=2, total_count=5)

        assert page.total_pages == 3
        assert page.has_next_page is True
        assert page.has_previous_page is True
