"""Tests for WorkflowDefinition construction and graph queries."""

import pytest

from app.domain.entities.workflow import (
    StatusDefinition,
    TransitionRule,
    WorkflowDefinition,
    edge_key,
    split_edge_key,
)


def _statuses(*ids: str) -> tuple[StatusDefinition, ...]:
    return tuple(StatusDefinition(id=s, name=s.title(), display_order=i) for i, s in enumerate(ids))


def _definition(**overrides) -> WorkflowDefinition:
    fields = {
        "id": "wf-1",
        "tenant_id": "t1",
        "name": "Tasks",
        "statuses": _statuses("pending", "in_progress", "completed", "cancelled"),
        "transitions": (
            TransitionRule.of("pending", ["in_progress", "cancelled"]),
            TransitionRule.of("in_progress", ["completed", "cancelled"]),
        ),
        "role_restrictions": {"pending->cancelled": ["admin"]},
    }
    fields.update(overrides)
    return WorkflowDefinition(**fields)


def test_outgoing_edges_and_terminal_statuses() -> None:
    definition = _definition()
    assert definition.outgoing_edges("pending") == frozenset({"in_progress", "cancelled"})
    assert definition.outgoing_edges("completed") == frozenset()
    assert definition.is_terminal("completed")
    assert definition.is_terminal("cancelled")
    assert not definition.is_terminal("pending")
    # Undeclared statuses are neither terminal nor have edges.
    assert not definition.is_terminal("archived")
    assert definition.outgoing_edges("archived") == frozenset()


def test_initial_status_is_lowest_display_order() -> None:
    statuses = (
        StatusDefinition(id="done", name="Done", display_order=5),
        StatusDefinition(id="todo", name="To do", display_order=1),
    )
    definition = _definition(
        statuses=statuses,
        transitions=(TransitionRule.of("todo", ["done"]),),
        role_restrictions={},
    )
    assert definition.initial_status == "todo"
    assert definition.status_ids == ["todo", "done"]


def test_rules_with_same_source_are_merged() -> None:
    definition = _definition(
        transitions=(
            TransitionRule.of("pending", ["in_progress"]),
            TransitionRule.of("pending", ["cancelled"]),
        ),
    )
    assert definition.outgoing_edges("pending") == frozenset({"in_progress", "cancelled"})
    assert len(definition.transitions) == 1


def test_allowed_roles_empty_means_any_role() -> None:
    definition = _definition()
    assert definition.allowed_roles("pending", "cancelled") == frozenset({"admin"})
    assert definition.allowed_roles("pending", "in_progress") == frozenset()


def test_empty_role_list_is_dropped() -> None:
    definition = _definition(role_restrictions={"pending->cancelled": []})
    assert dict(definition.role_restrictions) == {}


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"statuses": ()}, "at least one status"),
        ({"statuses": _statuses("a", "a")}, "Duplicate status ids"),
        (
            {"transitions": (TransitionRule.of("pending", ["archived"]),), "role_restrictions": {}},
            "not a declared status",
        ),
        (
            {"transitions": (TransitionRule.of("pending", ["pending"]),), "role_restrictions": {}},
            "Self-loop",
        ),
        ({"role_restrictions": {"pending->archived": ["admin"]}}, "undeclared status"),
        ({"role_restrictions": {"pending": ["admin"]}}, "from->to"),
    ],
)
def test_structural_errors_raise_value_error(overrides: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        _definition(**overrides)


def test_definition_is_immutable() -> None:
    definition = _definition()
    with pytest.raises(AttributeError):
        definition.name = "Other"  # type: ignore[misc]
    with pytest.raises(TypeError):
        definition.role_restrictions["in_progress->completed"] = frozenset({"x"})  # type: ignore[index]


def test_edge_key_round_trip() -> None:
    assert edge_key("a", "b") == "a->b"
    assert split_edge_key(" a -> b ") == ("a", "b")
