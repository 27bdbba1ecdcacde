"""Renders a scanned unit with every class/mixin declaration expanded.

Everything outside the declarations is copied through byte for byte (each
token renders with its leading trivia); the `const zoop = @import("zoop");`
line is dropped since the generated code no longer references the marker
module.
"""

from __future__ import annotations

from typing import Optional

from .decls import DeclarationRecord, UnitScan
from .flatten import FlattenedResult, Member
from .tokens import Token, render

BANNER = "// Auto-generated by zoopgen\n// DO NOT EDIT - changes will be overwritten\n\n"

INDENT = "    "


class Emitter:
    def __init__(self, indent: str = INDENT):
        self.indent = indent
        self.lines: list[str] = []

    def _emit(self, line: str = ""):
        self.lines.append(line)

    def _emit_doc(self, doc: Optional[str]):
        if doc:
            for line in doc.split("\n"):
                self._emit(f"{self.indent}/// {line}".rstrip())

    def _section(self):
        if self.lines and self.lines[-1] != "" and not self.lines[-1].endswith("{"):
            self._emit()

    # ---- Declaration ----

    def emit_declaration(self, record: DeclarationRecord, result: FlattenedResult) -> str:
        """`[pub] const Name = struct { ... };` without the leading doc comment."""
        self.lines = []
        header = f"{'pub ' if record.is_pub else ''}const {record.name} = struct {{"
        body_sections = (
            result.members or record.nested or result.inherited_aliases
            or result.accessors or result.methods)
        if not body_sections:
            return header + "};"
        self._emit(header)

        for member in result.members:
            self._emit_member(member)

        if result.inherited_aliases or record.nested:
            self._section()
            for nested in result.inherited_aliases + record.nested:
                self._emit_doc(nested.doc)
                self._emit(self.indent + render(nested.tokens))

        if result.accessors:
            self._section()
            for accessor in result.accessors:
                self._emit(self.indent + accessor.text)

        for resolved in result.copied_methods + result.own_methods:
            self._section()
            self._emit_doc(resolved.method.doc)
            self._emit(self.indent + render(resolved.method.tokens))

        self._emit("};")
        return "\n".join(self.lines)

    def _emit_member(self, member: Member):
        self._emit_doc(member.doc)
        line = f"{self.indent}{member.name}: {member.type_text}"
        if member.default_text is not None:
            line += f" = {member.default_text}"
        self._emit(line + ",")


def _drop_first_newline(leading: str) -> str:
    head, sep, tail = leading.partition("\n")
    if sep and not head.strip():
        return tail
    return leading


def emit_unit(scan: UnitScan, results: dict[str, FlattenedResult],
              emitter: Emitter | None = None) -> str:
    """Generated text for one unit.

    `results` maps each declaration's qualified name to its resolved form.
    """
    emitter = emitter or Emitter()
    tokens: list[Token] = scan.tokens
    spans = sorted(
        [(start, end, None) for start, end in scan.marker_imports]
        + [(r.span[0], r.span[1], r) for r in scan.records],
        key=lambda s: s[0],
    )

    out = [BANNER]
    pos = 0
    drop_newline = False

    def passthrough(upto: int):
        nonlocal drop_newline
        for tok in tokens[pos:upto]:
            leading = tok.leading
            if drop_newline:
                leading = _drop_first_newline(leading)
                drop_newline = False
            out.append(leading + tok.value)

    for start, end, record in spans:
        passthrough(start)
        leading = tokens[start].leading
        if drop_newline:
            leading = _drop_first_newline(leading)
            drop_newline = False
        if record is None:
            out.append(leading.rstrip(" \t"))
            drop_newline = True
        else:
            out.append(leading)
            out.append(emitter.emit_declaration(record, results[record.qualified_name]))
        pos = end

    # EOF token carries the trailing trivia
    passthrough(len(tokens))
    text = "".join(out)
    if not text.endswith("\n"):
        text += "\n"
    return text
