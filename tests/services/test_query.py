"""Tests for search, sorting and pagination of note listings."""

from datetime import UTC, datetime, timedelta

import pytest
from bson import ObjectId

from api.services.query import NoteQuery, SortState, matches, paginate, query_notes, sort_notes

BASE = datetime(2024, 1, 1, tzinfo=UTC)


def make_doc(title, day=0, pinned=False, content="", tags=None, modified_day=None):
    return {
        "_id": ObjectId(),
        "title": title,
        "content": content,
        "tags": tags or [],
        "is_pinned": pinned,
        "main_created_at": BASE + timedelta(days=day),
        "main_last_modified": BASE + timedelta(days=modified_day if modified_day is not None else day),
    }


class TestMatches:
    def test_case_insensitive_title(self):
        assert matches(make_doc("Weekly Report"), "report")

    def test_content(self):
        assert matches(make_doc("x", content="Call the PLUMBER"), "plumber")

    def test_tag_substring(self):
        assert matches(make_doc("x", tags=["Gardening"]), "garden")

    def test_no_match(self):
        assert not matches(make_doc("x", content="y", tags=["z"]), "nothing")


class TestSortNotes:
    def test_pinned_group_first(self):
        docs = [make_doc("a", day=3), make_doc("b", day=1, pinned=True), make_doc("c", day=2)]

        ordered = sort_notes(docs, "created_at", "desc")

        assert [d["title"] for d in ordered] == ["b", "a", "c"]

    def test_created_ascending(self):
        docs = [make_doc("a", day=3), make_doc("b", day=1), make_doc("c", day=2)]

        ordered = sort_notes(docs, "created_at", "asc")

        assert [d["title"] for d in ordered] == ["b", "c", "a"]

    def test_last_modified(self):
        docs = [make_doc("a", modified_day=1), make_doc("b", modified_day=5)]

        ordered = sort_notes(docs, "last_modified", "desc")

        assert [d["title"] for d in ordered] == ["b", "a"]

    def test_ties_broken_by_id(self):
        docs = [make_doc("same") for _ in range(5)]

        first = sort_notes(docs, "title", "asc")
        second = sort_notes(list(reversed(docs)), "title", "asc")

        assert [d["_id"] for d in first] == [d["_id"] for d in second]

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            sort_notes([], "size", "asc")


class TestPaginate:
    def test_last_page_partial(self):
        result = paginate(list(range(25)), page=3, limit=12)

        assert result.notes == [24]
        assert result.pagination.total == 3

    def test_page_clamped(self):
        result = paginate(list(range(25)), page=10, limit=12)

        assert result.pagination.current == 3
        assert result.pagination.count == 1

    def test_empty_has_one_page(self):
        result = paginate([], page=1, limit=12)

        assert result.pagination.total == 1
        assert result.pagination.count == 0

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            paginate([], page=1, limit=0)


class TestQueryNotes:
    def test_search_then_paginate(self):
        docs = [make_doc(f"todo {i}", day=i) for i in range(5)] + [make_doc("other")]

        result = query_notes(docs, NoteQuery(search="  TODO ", limit=2, page=2))

        assert result.pagination.total_notes == 5
        assert [d["title"] for d in result.notes] == ["todo 2", "todo 1"]

    def test_blank_search_returns_all(self):
        docs = [make_doc("a"), make_doc("b")]

        assert query_notes(docs, NoteQuery(search="   ")).pagination.total_notes == 2


class TestSortState:
    def test_same_field_flips_order(self):
        state = SortState(page=4).select("created_at")

        assert state.sort_order == "asc"
        assert state.page == 1

    def test_new_field_starts_descending(self):
        state = SortState(sort_by="created_at", sort_order="asc", page=2).select("title")

        assert state == SortState(sort_by="title", sort_order="desc", page=1)

    def test_goto_floors_at_one(self):
        assert SortState().goto(0).page == 1
