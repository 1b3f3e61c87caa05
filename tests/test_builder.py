"""Unit tests for BaseQuery clause accumulation and argument checks."""
from __future__ import annotations

import pytest

from minidb.builder import BaseQuery, InvalidArgumentError, raw
from minidb.builder.expressions import (
    Aggregate,
    ColumnsCriterion,
    GroupCriterion,
    InCriterion,
    NullCriterion,
    RawCriterion,
    SelectItem,
    ValueCriterion,
)


def _items() -> BaseQuery:
    return BaseQuery().from_("items")


# ---------------------------------------------------------------------------
# Clause accumulation
# ---------------------------------------------------------------------------


def test_clause_methods_return_self():
    query = _items()
    assert query.where("a", 1) is query
    assert query.order_by("a") is query
    assert query.limit(5) is query


def test_where_two_arguments_means_equality():
    query = _items().where("name", "apple")
    assert query.wheres == [ValueCriterion("name", "=", "apple")]


def test_where_operator_is_normalised():
    query = _items().where("name", "not   like", "a%")
    assert query.wheres[0].operator == "NOT LIKE"


def test_where_none_becomes_null_check():
    query = _items().where("deleted_at", None).or_where("archived_at", "!=", None)
    assert query.wheres == [
        NullCriterion("deleted_at", False, "AND"),
        NullCriterion("archived_at", True, "OR"),
    ]


def test_where_callable_builds_group():
    query = _items().where(lambda q: q.where("a", 1).or_where("b", 2))
    group = query.wheres[0]
    assert isinstance(group, GroupCriterion)
    assert len(group.criteria) == 2
    assert group.criteria[1].boolean == "OR"


def test_empty_group_is_dropped():
    query = _items().where(lambda q: None)
    assert query.wheres == []


def test_where_raw_expression():
    query = _items().where(raw("LOWER(name) = ?", "apple"))
    assert query.wheres == [RawCriterion(raw("LOWER(name) = ?", "apple"))]


def test_where_in_accepts_empty_sequence():
    query = _items().where_in("id", [])
    assert query.wheres == [InCriterion("id", ())]


def test_where_in_callable_builds_subquery():
    query = _items().where_in("id", lambda q: q.from_("orders").select("item_id"))
    subquery = query.wheres[0].values
    assert isinstance(subquery, BaseQuery)
    assert subquery.table == "orders"


def test_select_replaces_previous_columns():
    query = _items().select("a", "b").select("c")
    assert query.columns == [SelectItem("c")]


def test_aggregate_helpers():
    query = _items().add_count().add_max("value", "top")
    assert query.columns == [
        SelectItem(Aggregate("COUNT", "*")),
        SelectItem(Aggregate("MAX", "value"), "top"),
    ]


def test_join_with_callable_criteria():
    query = _items().join(
        "users", lambda j: j.where_column("users.id", "items.user_id").where("users.active", True)
    )
    join = query.joins[0]
    assert join.kind == "INNER"
    assert join.criteria[0] == ColumnsCriterion("users.id", "=", "items.user_id")
    assert len(join.criteria) == 2


def test_limit_and_offset_can_be_cleared():
    query = _items().limit(10).offset(20).limit(None).offset(None)
    assert query.row_limit is None
    assert query.row_offset is None


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("call", [
    lambda q: q.where(object()),
    lambda q: q.where("a", "~~", 1),
    lambda q: q.where("a", [1, 2]),
    lambda q: q.where("a", {"b": 1}),
    lambda q: q.where_in("a", 5),
    lambda q: q.where_in("a", [1, [2]]),
    lambda q: q.limit(-1),
    lambda q: q.limit(True),
    lambda q: q.offset("10"),
    lambda q: q.order_by("a", "sideways"),
    lambda q: q.add_update(["a", 1]),
    lambda q: q.add_update({"a": object()}),
    lambda q: q.add_aggregate("MEDIAN", "a"),
    lambda q: q.from_(42),
    lambda q: q.join("users", "a"),
    lambda q: q.add_select("a", ""),
])
def test_malformed_arguments_raise(call):
    with pytest.raises(InvalidArgumentError):
        call(_items())


def test_handle_exception_hook_receives_builder_errors():
    class Collecting(BaseQuery):
        def handle_exception(self, exception):
            raise LookupError(str(exception)) from exception

    with pytest.raises(LookupError, match="operator"):
        Collecting().where("a", "~~", 1)


# ---------------------------------------------------------------------------
# Copies
# ---------------------------------------------------------------------------


def test_copy_is_independent():
    original = _items().where("a", 1).limit(3)
    clone = original.copy().where("b", 2).limit(None)
    assert len(original.wheres) == 1
    assert original.row_limit == 3
    assert len(clone.wheres) == 2


def test_make_empty_copy_keeps_subclass():
    class Custom(BaseQuery):
        pass

    assert type(Custom().make_empty_copy()) is Custom


def test_add_tables_to_column_names():
    query = _items().select("name", "other.id").add_count("value").where("value", ">", 3).order_by("name")
    qualified = query.add_tables_to_column_names()
    assert [item.expr for item in qualified.columns] == [
        "items.name", "other.id", Aggregate("COUNT", "items.value"),
    ]
    assert qualified.wheres[0].column == "items.value"
    assert qualified.orders[0].column == "items.name"
    assert query.columns[0].expr == "name"


def test_add_tables_to_column_names_prefers_alias():
    qualified = BaseQuery().from_("items", "i").where("value", 1).add_tables_to_column_names()
    assert qualified.wheres[0].column == "i.value"
