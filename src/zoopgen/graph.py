"""Dependency graph over the frozen registry.

Edges run from a declaration to its parent and to each of its mixins. A
depth-first walk over every declaration, in registration order, yields a
postorder (dependencies first) that is the global generation order; a node
found in the `RESOLVING` state on the current path closes a cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .errors import DependencyCycle, InheritanceDepthExceeded
from .registry import Registry

logger = logging.getLogger(__name__)


class ResolutionState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


@dataclass
class DependencyEdge:
    source: int
    target: int
    kind: str  # "extends" | "mixes-in"


@dataclass
class GenerationPlan:
    order: list[int] = field(default_factory=list)
    # Longest dependency path below each declaration, by id
    depth: list[int] = field(default_factory=list)
    # Per declaration id: the ids it depends on, parent first
    dependencies: list[list[int]] = field(default_factory=list)

    @property
    def waves(self) -> list[list[int]]:
        """Groups of declarations whose dependencies are all in earlier groups."""
        if not self.depth:
            return []
        waves: list[list[int]] = [[] for _ in range(max(self.depth) + 1)]
        for decl_id in self.order:
            waves[self.depth[decl_id]].append(decl_id)
        return waves


class GraphBuilder:
    def __init__(self, registry: Registry, max_depth: int = 256):
        self.registry = registry
        self.max_depth = max_depth
        self.states = [ResolutionState.UNRESOLVED] * len(registry)
        self.plan = GenerationPlan(
            depth=[0] * len(registry),
            dependencies=[[] for _ in range(len(registry))],
        )
        self.edges: list[DependencyEdge] = []

    def build(self) -> GenerationPlan:
        for decl_id in range(len(self.registry)):
            if self.states[decl_id] == ResolutionState.UNRESOLVED:
                self._visit(decl_id)
        logger.debug("generation order: %s", ", ".join(
            self.registry.display_name(i) for i in self.plan.order))
        return self.plan

    def _visit(self, root: int):
        # Iterative DFS; each frame is (id, remaining dependency ids)
        path: list[int] = []
        stack: list[tuple[int, list[int]]] = []

        def enter(decl_id: int):
            self.states[decl_id] = ResolutionState.RESOLVING
            path.append(decl_id)
            deps = self._resolve_edges(decl_id)
            stack.append((decl_id, list(reversed(deps))))

        enter(root)
        while stack:
            decl_id, pending = stack[-1]
            if pending:
                dep = pending.pop()
                state = self.states[dep]
                if state == ResolutionState.RESOLVING:
                    raise self._cycle(path, dep)
                if state == ResolutionState.UNRESOLVED:
                    enter(dep)
                continue

            stack.pop()
            path.pop()
            deps = self.plan.dependencies[decl_id]
            depth = 1 + max(self.plan.depth[d] for d in deps) if deps else 0
            if depth > self.max_depth:
                record = self.registry.get(decl_id)
                raise InheritanceDepthExceeded(
                    f"Inheritance depth of '{record.name}' is {depth}, "
                    f"maximum is {self.max_depth}",
                    record.line, record.col,
                    declaration=record.name, unit=record.unit,
                )
            self.plan.depth[decl_id] = depth
            self.states[decl_id] = ResolutionState.RESOLVED
            self.plan.order.append(decl_id)

    def _resolve_edges(self, decl_id: int) -> list[int]:
        deps = []
        for kind, target in self.registry.dependencies(decl_id):
            self.edges.append(DependencyEdge(decl_id, target, kind))
            deps.append(target)
        self.plan.dependencies[decl_id] = deps
        return deps

    def _cycle(self, path: list[int], repeated: int) -> DependencyCycle:
        cycle = path[path.index(repeated):] + [repeated]
        names = [self.registry.display_name(i) for i in cycle]
        head = self.registry.get(repeated)
        return DependencyCycle(
            names, head.line, head.col, declaration=head.name, unit=head.unit)


def build_plan(registry: Registry, max_depth: int = 256) -> GenerationPlan:
    return GraphBuilder(registry, max_depth).build()
