"""
Pagination Tests
Tests for pagination utilities and paginated responses
"""
import pytest

from cmdb.utils.pagination import PaginationParams, PaginatedResponse


class TestPaginationParams:
    """Tests for PaginationParams"""

    def test_default_values(self):
        """Test default pagination parameters"""
        params = PaginationParams()
        assert params.page == 1
        assert params.page_size == 20

    def test_offset_calculation(self):
        """Test offset calculation"""
        assert PaginationParams(page=1, page_size=20).offset == 0
        assert PaginationParams(page=2, page_size=20).offset == 20
        assert PaginationParams(page=3, page_size=10).offset == 20

    def test_limit_property(self):
        params = PaginationParams(page_size=15)
        assert params.limit == 15

    def test_page_size_validation(self):
        """Test page size constraints"""
        with pytest.raises(ValueError):
            PaginationParams(page_size=0)

        with pytest.raises(ValueError):
            PaginationParams(page_size=101)

        assert PaginationParams(page_size=100).page_size == 100


class TestPaginatedResponse:
    """Tests for PaginatedResponse.create"""

    def test_middle_page(self):
        response = PaginatedResponse[int].create(items=[3, 4], total_items=5, page=2, page_size=2)

        assert response.pagination.total_pages == 3
        assert response.pagination.has_next is True
        assert response.pagination.has_prev is True
        assert response.pagination.next_page == 3
        assert response.pagination.prev_page == 1

    def test_empty(self):
        response = PaginatedResponse[int].create(items=[], total_items=0, page=1, page_size=20)

        assert response.pagination.total_pages == 0
        assert response.pagination.has_next is False
        assert response.pagination.next_page is None
