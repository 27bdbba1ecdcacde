"""Field and property flattening.

The flattened member list of a declaration is its parent's flattened list,
then each mixin's flattened list in declaration order, then its own fields
and properties. A member the declaration writes itself replaces an
inherited member of the same name in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import GeneratorConfig
from .decls import AccessMode, DeclarationRecord, NestedDecl
from .errors import AccessModeConflict, FieldCollision, FieldCountOverflow
from .methods import ResolvedMethod
from .registry import Registry

logger = logging.getLogger(__name__)


class MemberKind(Enum):
    FIELD = "field"
    PROPERTY = "property"


@dataclass
class Member:
    name: str
    kind: MemberKind
    type_text: str
    default_text: Optional[str] = None
    access: Optional[AccessMode] = None
    doc: Optional[str] = None
    # Id of the declaration that wrote the member
    origin: int = -1
    line: int = 0
    col: int = 0

    @property
    def is_property(self) -> bool:
        return self.kind == MemberKind.PROPERTY


@dataclass
class Accessor:
    name: str
    property_name: str
    text: str
    is_setter: bool = False


@dataclass
class FlattenedResult:
    """Everything emitted for one declaration."""
    decl_id: int
    name: str
    members: list[Member] = field(default_factory=list)
    methods: list[ResolvedMethod] = field(default_factory=list)
    inherited_aliases: list[NestedDecl] = field(default_factory=list)
    # Inherited aliases plus the declaration's own `@This()` aliases
    self_aliases: list[NestedDecl] = field(default_factory=list)
    accessors: list[Accessor] = field(default_factory=list)

    @property
    def properties(self) -> list[Member]:
        return [m for m in self.members if m.kind == MemberKind.PROPERTY]

    @property
    def copied_methods(self) -> list[ResolvedMethod]:
        return [m for m in self.methods if m.inherited]

    @property
    def own_methods(self) -> list[ResolvedMethod]:
        return [m for m in self.methods if not m.inherited]

    @property
    def field_count(self) -> int:
        return len(self.members)


def own_members(record: DeclarationRecord, decl_id: int) -> list[Member]:
    """A record's own fields, then its own properties."""
    members = [
        Member(f.name, MemberKind.FIELD, f.type_text, default_text=f.default_text,
               doc=f.doc, origin=decl_id, line=f.line, col=f.col)
        for f in record.fields
    ]
    members.extend(
        Member(p.name, MemberKind.PROPERTY, p.type_text, access=p.access,
               doc=p.doc, origin=decl_id, line=p.line, col=p.col)
        for p in record.properties
    )
    return members


class Flattener:
    def __init__(self, registry: Registry, config: GeneratorConfig):
        self.registry = registry
        self.config = config

    def flatten(self, decl_id: int, deps: list[FlattenedResult]) -> list[Member]:
        record = self.registry.get(decl_id)
        own = own_members(record, decl_id)
        own_names = self._check_own_duplicates(record, own)

        merged: list[Member] = []
        index: dict[str, int] = {}
        # name -> every distinct inherited declaration of it, first one merged
        variants: dict[str, list[Member]] = {}
        count = 0

        for dep in deps:
            for member in dep.members:
                seen = variants.get(member.name)
                if seen is None:
                    count = self._count(record, count)
                    index[member.name] = len(merged)
                    merged.append(member)
                    variants[member.name] = [member]
                    continue
                if any(v.origin == member.origin for v in seen):
                    # Same declaration reached twice (diamond)
                    continue
                seen.append(member)

        for name, seen in variants.items():
            if len(seen) > 1 and name not in own_names:
                raise FieldCollision(
                    name, [self.registry.display_name(v.origin) for v in seen],
                    record.line, record.col,
                    reason=f"'{record.name}' must redeclare it to pick one",
                    declaration=record.name, unit=record.unit,
                )

        for member in own:
            pos = index.get(member.name)
            if pos is None:
                count = self._count(record, count)
                index[member.name] = len(merged)
                merged.append(member)
                continue
            for inherited in variants[member.name]:
                self._check_shadow(record, inherited, member)
            merged[pos] = member

        logger.debug("%s: %d members", record.name, len(merged))
        return merged

    def _count(self, record: DeclarationRecord, count: int) -> int:
        limit = self.config.max_field_count
        if count >= limit:
            raise FieldCountOverflow(
                f"'{record.name}' has more than {limit} fields and properties",
                record.line, record.col, declaration=record.name, unit=record.unit,
            )
        return count + 1

    def _check_own_duplicates(self, record: DeclarationRecord, own: list[Member]) -> set[str]:
        seen: set[str] = set()
        for member in own:
            if member.name in seen:
                raise FieldCollision(
                    member.name, [record.name, record.name], member.line, member.col,
                    reason="declared twice", declaration=record.name, unit=record.unit,
                )
            seen.add(member.name)
        return seen

    def _check_shadow(self, record: DeclarationRecord, inherited: Member, own: Member):
        source = self.registry.display_name(inherited.origin)
        if own.is_property and inherited.is_property and own.access != inherited.access:
            raise AccessModeConflict(
                f"Property '{own.name}' is {inherited.access.value} in '{source}' "
                f"but redeclared {own.access.value} in '{record.name}'",
                own.line, own.col, declaration=record.name, unit=record.unit,
            )
        logger.debug("%s.%s shadows %s.%s", record.name, own.name, source, own.name)
