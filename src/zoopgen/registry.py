"""Process-wide table of declaration records, keyed by qualified name.

Records live in an arena (a list indexed by integer id); every other stage
refers to a declaration by its id. The registry is filled once from the scan
results and frozen; after freezing it is read-only and safe to share between
worker threads without locking.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Iterable, Optional

from .decls import DeclarationRecord, ImportDecl, TypeRef, UnitScan, qualify
from .errors import DuplicateDeclaration, UnknownDeclaration

logger = logging.getLogger(__name__)


class Registry:
    def __init__(self):
        self.records: list[DeclarationRecord] = []
        self.by_name: dict[str, int] = {}
        # unit name -> alias -> import
        self.imports: dict[str, dict[str, ImportDecl]] = {}
        self._lock = threading.Lock()
        self._frozen = False
        # Short names declared in more than one unit, filled by freeze()
        self._ambiguous: set[str] = set()

    @classmethod
    def build(cls, scans: Iterable[UnitScan]) -> Registry:
        """Register every record of every scan, then freeze."""
        registry = cls()
        for scan in scans:
            registry.add_unit(scan)
        registry.freeze()
        return registry

    # ---- Build phase ----

    def add_unit(self, scan: UnitScan):
        self._check_writable()
        with self._lock:
            self.imports[scan.unit.name] = dict(scan.imports)
        for record in scan.records:
            self.register(record.qualified_name, record)

    def register(self, name: str, record: DeclarationRecord) -> int:
        self._check_writable()
        with self._lock:
            if name in self.by_name:
                existing = self.records[self.by_name[name]]
                raise DuplicateDeclaration(
                    f"'{record.name}' is already declared in '{existing.unit}' "
                    f"at line {existing.line}",
                    record.line, record.col,
                    declaration=record.name, unit=record.unit,
                )
            decl_id = len(self.records)
            self.records.append(record)
            self.by_name[name] = decl_id
        logger.debug("registered %s as #%d", name, decl_id)
        return decl_id

    def freeze(self):
        self._ambiguous = self._ambiguous_names()
        self._frozen = True

    def _ambiguous_names(self) -> set[str]:
        counts = Counter(r.name for r in self.records)
        return {name for name, n in counts.items() if n > 1}

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_writable(self):
        if self._frozen:
            raise RuntimeError("registry is frozen")

    # ---- Lookup ----

    def __len__(self):
        return len(self.records)

    def __contains__(self, name: str) -> bool:
        return name in self.by_name

    def get(self, decl_id: int) -> DeclarationRecord:
        return self.records[decl_id]

    def id_of(self, name: str) -> int:
        decl_id = self.by_name.get(name)
        if decl_id is None:
            raise UnknownDeclaration(f"Unknown declaration '{name}'")
        return decl_id

    def resolve(self, name: str) -> DeclarationRecord:
        return self.records[self.id_of(name)]

    def display_name(self, decl_id: int) -> str:
        """Short name, or the qualified one when the short name is ambiguous."""
        record = self.records[decl_id]
        ambiguous = self._ambiguous if self._frozen else self._ambiguous_names()
        if record.name in ambiguous:
            return record.qualified_name
        return record.name

    def resolve_reference(self, ref: TypeRef, unit: str, *,
                          declaration: str = "") -> int:
        """Resolve a reference written in `unit` to a declaration id.

        `alias.Name` goes through the unit's import table; a bare `Name` is
        the unit's own declaration, or else an import alias bound directly to
        a declaration (`const Name = @import("x.zig").Decl;`).
        """
        qualified = self._qualify_reference(ref, unit)
        if qualified is None or qualified not in self.by_name:
            shown = qualified or ref.text
            raise UnknownDeclaration(
                f"Unknown declaration '{ref.text}'"
                + (f" (resolved as '{shown}')" if shown != ref.text else ""),
                ref.line, ref.col, declaration=declaration, unit=unit,
            )
        return self.by_name[qualified]

    def _qualify_reference(self, ref: TypeRef, unit: str) -> Optional[str]:
        unit_imports = self.imports.get(unit, {})
        if ref.alias is None:
            own = qualify(unit, ref.name)
            if own in self.by_name:
                return own
            imp = unit_imports.get(ref.name)
            if imp is not None and imp.member is not None:
                return qualify(imp.path, imp.member)
            return None
        if len(ref.parts) != 2:
            return None
        imp = unit_imports.get(ref.alias)
        if imp is None or imp.member is not None:
            return None
        return qualify(imp.path, ref.name)

    def dependencies(self, decl_id: int) -> list[tuple[str, int]]:
        """Resolved (edge kind, id) pairs: the parent first, then each mixin."""
        record = self.records[decl_id]
        edges = []
        if record.parent is not None:
            edges.append(("extends", self.resolve_reference(
                record.parent, record.unit, declaration=record.name)))
        for ref in record.mixins:
            edges.append(("mixes-in", self.resolve_reference(
                ref, record.unit, declaration=record.name)))
        return edges
