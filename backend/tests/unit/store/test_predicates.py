"""Unit tests for store-agnostic filters and sort keys."""

from __future__ import annotations

from datetime import UTC, datetime

from message_archive.store.predicates import (
    DELETED_AT,
    Condition,
    Filter,
    Op,
    SortKey,
    descending,
    live,
    sort_documents,
)

T0 = datetime(2024, 1, 1, tzinfo=UTC)
T1 = datetime(2024, 1, 2, tzinfo=UTC)


class TestFilter:
    def test_empty_filter_matches_everything(self):
        assert Filter().matches({}) is True
        assert Filter().matches({"a": 1}) is True

    def test_builders_are_immutable_and_conjunctive(self):
        base = Filter().eq("channel_id", "general")
        narrowed = base.gte("sent_at", T0)

        assert len(base.conditions) == 1
        assert len(narrowed.conditions) == 2
        assert narrowed.fields() == {"channel_id", "sent_at"}

        assert narrowed.matches({"channel_id": "general", "sent_at": T1})
        assert not narrowed.matches({"channel_id": "random", "sent_at": T1})
        assert not narrowed.matches({"channel_id": "general", "sent_at": T0.replace(year=2023)})

    def test_range_operators_are_inclusive_or_strict_as_named(self):
        doc = {"sent_at": T0}
        assert Filter().gte("sent_at", T0).matches(doc)
        assert Filter().lte("sent_at", T0).matches(doc)
        assert not Filter().gt("sent_at", T0).matches(doc)
        assert not Filter().lt("sent_at", T0).matches(doc)

    def test_missing_or_null_field_never_satisfies_a_comparison(self):
        assert not Condition("sent_at", Op.GTE, T0).matches({})
        assert not Condition("sent_at", Op.EQ, None).matches({"sent_at": None})
        assert Condition("sent_at", Op.IS_NULL).matches({"sent_at": None})


class TestLive:
    def test_live_appends_tombstone_check(self):
        f = live(Filter().eq("uid", "a"))
        assert f.conditions[-1] == Condition(DELETED_AT, Op.IS_NULL)
        assert f.matches({"uid": "a", "deleted_at": None})
        assert not f.matches({"uid": "a", "deleted_at": T0})

    def test_live_without_base(self):
        assert live().conditions == (Condition(DELETED_AT, Op.IS_NULL),)


class TestSortDocuments:
    def test_descending_single_key(self):
        docs = [{"n": 1}, {"n": 3}, {"n": 2}]
        assert [d["n"] for d in sort_documents(docs, [descending("n")])] == [3, 2, 1]

    def test_first_key_has_precedence(self):
        docs = [
            {"a": 1, "b": 1},
            {"a": 2, "b": 0},
            {"a": 1, "b": 2},
        ]
        ordered = sort_documents(docs, [SortKey("a"), descending("b")])
        assert ordered == [{"a": 1, "b": 2}, {"a": 1, "b": 1}, {"a": 2, "b": 0}]

    def test_no_keys_keeps_input_order(self):
        docs = [{"n": 2}, {"n": 1}]
        assert sort_documents(docs, []) == docs


class TestContains:
    def test_contains_is_case_insensitive_substring(self):
        doc = {"content": "Deploy finished on Friday"}
        assert Filter().contains("content", "friday").matches(doc)
        assert Filter().contains("content", "DEPLOY").contains("content", "fin").matches(doc)
        assert not Filter().contains("content", "deploy").contains("content", "monday").matches(doc)

    def test_contains_any_needs_one_hit(self):
        flt = Filter().contains_any("content", ["monday", "friday"])

        assert flt.conditions[0].op is Op.CONTAINS_ANY
        assert flt.conditions[0].value == ("monday", "friday")
        assert flt.matches({"content": "see you friday"})
        assert not flt.matches({"content": "see you sunday"})
        assert not flt.matches({})
