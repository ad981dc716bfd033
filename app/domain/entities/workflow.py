"""Workflow definition domain entity.

A workflow definition is the directed status graph a task moves through:
declared statuses, allowed edges and optional per-edge role restrictions.
Definitions are immutable values; a replacement is a new value with
version + 1, swapped in atomically by the repository.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

EDGE_SEPARATOR = "->"


def edge_key(from_status: str, to_status: str) -> str:
    """Key used in role_restrictions for the edge from_status -> to_status."""
    return f"{from_status}{EDGE_SEPARATOR}{to_status}"


def split_edge_key(key: str) -> tuple[str, str]:
    """Inverse of edge_key. Raises ValueError on a malformed key."""
    from_status, sep, to_status = key.partition(EDGE_SEPARATOR)
    if not sep or not from_status or not to_status:
        raise ValueError(f"Role restriction key must look like 'from->to', got {key!r}")
    return from_status.strip(), to_status.strip()


@dataclass(frozen=True)
class StatusDefinition:
    """A node of the workflow graph."""

    id: str
    name: str
    display_order: int = 0
    color: str | None = None


@dataclass(frozen=True)
class TransitionRule:
    """All edges leaving one status."""

    from_status: str
    to_statuses: frozenset[str]

    @classmethod
    def of(cls, from_status: str, to_statuses: Iterable[str]) -> "TransitionRule":
        return cls(from_status=from_status, to_statuses=frozenset(to_statuses))


@dataclass(frozen=True)
class WorkflowDefinition:
    """Immutable, validated status graph bound to tasks by id.

    Construction enforces the structural invariants and raises ValueError:
    at least one status, unique status ids, no self-loops, every edge
    endpoint declared, every role-restriction key naming declared statuses.
    Rules sharing a from_status are merged.
    """

    id: str
    tenant_id: str
    name: str
    statuses: tuple[StatusDefinition, ...]
    transitions: tuple[TransitionRule, ...] = ()
    role_restrictions: Mapping[str, frozenset[str]] = field(default_factory=dict)
    description: str | None = None
    is_default: bool = False
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    _edges: Mapping[str, frozenset[str]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        statuses = tuple(self.statuses)
        if not statuses:
            raise ValueError("A workflow needs at least one status")
        ids = [s.id for s in statuses]
        if any(not s for s in ids):
            raise ValueError("Status ids must be non-empty")
        duplicates = sorted({s for s in ids if ids.count(s) > 1})
        if duplicates:
            raise ValueError(f"Duplicate status ids: {', '.join(duplicates)}")
        declared = set(ids)

        edges: dict[str, set[str]] = {}
        for rule in self.transitions:
            if rule.from_status not in declared:
                raise ValueError(f"Transition source '{rule.from_status}' is not a declared status")
            for target in rule.to_statuses:
                if target not in declared:
                    raise ValueError(f"Transition target '{target}' is not a declared status")
                if target == rule.from_status:
                    raise ValueError(f"Self-loop on '{target}' is not allowed")
            edges.setdefault(rule.from_status, set()).update(rule.to_statuses)

        restrictions: dict[str, frozenset[str]] = {}
        for key, roles in self.role_restrictions.items():
            from_status, to_status = split_edge_key(key)
            for status in (from_status, to_status):
                if status not in declared:
                    raise ValueError(
                        f"Role restriction '{key}' names undeclared status '{status}'"
                    )
            role_set = frozenset(r for r in roles if r)
            if role_set:
                restrictions[edge_key(from_status, to_status)] = role_set

        merged = tuple(
            TransitionRule(from_status=src, to_statuses=frozenset(dst))
            for src, dst in edges.items()
        )
        object.__setattr__(self, "statuses", statuses)
        object.__setattr__(self, "transitions", merged)
        object.__setattr__(self, "role_restrictions", MappingProxyType(restrictions))
        object.__setattr__(
            self,
            "_edges",
            MappingProxyType({src: frozenset(dst) for src, dst in edges.items()}),
        )

    @property
    def ordered_statuses(self) -> list[StatusDefinition]:
        """Statuses by display_order, declaration order breaking ties."""
        return sorted(self.statuses, key=lambda s: s.display_order)

    @property
    def status_ids(self) -> list[str]:
        return [s.id for s in self.ordered_statuses]

    @property
    def initial_status(self) -> str:
        """Status new tasks start in: the lowest display_order."""
        return self.ordered_statuses[0].id

    def has_status(self, status: str) -> bool:
        return any(s.id == status for s in self.statuses)

    def get_status(self, status: str) -> StatusDefinition | None:
        return next((s for s in self.statuses if s.id == status), None)

    def outgoing_edges(self, status: str) -> frozenset[str]:
        """Statuses reachable from status in one step (empty for unknown statuses)."""
        return self._edges.get(status, frozenset())

    def is_terminal(self, status: str) -> bool:
        """A declared status with no outgoing edges."""
        return self.has_status(status) and not self.outgoing_edges(status)

    def allowed_roles(self, from_status: str, to_status: str) -> frozenset[str]:
        """Roles allowed on the edge; empty means any role."""
        return self.role_restrictions.get(edge_key(from_status, to_status), frozenset())

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        return self.tenant_id == tenant_id
