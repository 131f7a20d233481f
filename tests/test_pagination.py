"""
Unit tests for pagination arithmetic and contact filter translation.
"""

import pytest

from phonebook.db.repositories.contact_filters import ContactFilters, build_contact_predicates
from phonebook.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Pagination


class TestPagination:
    def test_defaults(self):
        pagination = Pagination()

        assert pagination.page == DEFAULT_PAGE
        assert pagination.limit == DEFAULT_LIMIT
        assert pagination.total_pages == 0

    @pytest.mark.parametrize(
        "total, limit, expected_pages",
        [
            (0, 10, 0),
            (1, 10, 1),
            (10, 10, 1),
            (11, 10, 2),
            (7, 3, 3),
        ],
    )
    def test_total_pages_rounds_up(self, total, limit, expected_pages):
        assert Pagination(page=1, limit=limit, total=total).total_pages == expected_pages

    def test_offset(self):
        assert Pagination(page=3, limit=5, total=20).offset == 10

    def test_paginate_slices_one_page(self):
        items = list(range(7))

        assert Pagination(page=1, limit=3, total=7).paginate(items) == [0, 1, 2]
        assert Pagination(page=3, limit=3, total=7).paginate(items) == [6]

    def test_page_past_the_end_is_empty(self):
        assert Pagination(page=4, limit=3, total=7).paginate(list(range(7))) == []

    def test_to_dict(self):
        assert Pagination(page=2, limit=3, total=7).to_dict() == {
            "page": 2,
            "limit": 3,
            "total": 7,
            "total_pages": 3,
        }

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page": 0},
            {"limit": 0},
            {"total": -1},
        ],
    )
    def test_rejects_out_of_range_values(self, kwargs):
        with pytest.raises(ValueError):
            Pagination(**kwargs)


class TestContactFilters:
    def test_from_mapping_ignores_empty_and_unknown_keys(self):
        filters = ContactFilters.from_mapping({
            "name": "ana",
            "email": "",
            "phone": None,
            "page": "2",
        })

        assert filters == ContactFilters(name="ana")
        assert not filters.is_empty

    def test_from_mapping_with_nothing(self):
        assert ContactFilters.from_mapping(None).is_empty
        assert ContactFilters.from_mapping({}).is_empty

    def test_predicates_always_exclude_deleted(self):
        predicates = build_contact_predicates()

        assert len(predicates) == 1
        assert "deleted_at IS NULL" in str(predicates[0])

    def test_one_predicate_per_present_field(self):
        filters = ContactFilters(name="a", address="b", email="c", phone="1")

        assert len(build_contact_predicates(filters)) == 5

    def test_phone_filter_is_an_exists_subquery(self):
        predicates = build_contact_predicates(ContactFilters(phone="1234"))

        assert "EXISTS" in str(predicates[-1])
