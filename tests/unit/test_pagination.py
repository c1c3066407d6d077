"""Unit tests for listing pagination defaults and bounds."""

import pytest

from config import get_settings
from src.core.errors import InvalidInputError
from src.core.pagination import Pagination


class TestPaginationResolve:
    """Tests for Pagination.resolve."""

    @pytest.mark.parametrize("limit", [None, 0])
    def test_missing_limit_uses_default(self, limit):
        page = Pagination.resolve("test", limit, None)

        assert page.limit == get_settings().default_page_limit
        assert page.offset == 0

    def test_limit_above_maximum_is_clamped(self):
        maximum = get_settings().max_page_limit

        assert Pagination.resolve("test", maximum + 50, 0).limit == maximum

    def test_explicit_values_kept(self):
        page = Pagination.resolve("test", 5, 20)

        assert (page.limit, page.offset) == (5, 20)

    @pytest.mark.parametrize("limit,offset", [(-1, 0), (5, -3)])
    def test_negative_values_rejected(self, limit, offset):
        with pytest.raises(InvalidInputError) as exc_info:
            Pagination.resolve("pages.list_by_lesson", limit, offset)

        assert exc_info.value.op == "pages.list_by_lesson"
        assert exc_info.value.code == "invalid_input"
