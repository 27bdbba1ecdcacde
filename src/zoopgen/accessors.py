"""Getter/setter generation for flattened properties."""

from __future__ import annotations

from .config import GeneratorConfig
from .decls import AccessMode
from .diagnostics import DiagnosticSink
from .flatten import Accessor, FlattenedResult, Member
from .registry import Registry


def getter_text(prop: Member, name: str) -> str:
    return (f"pub inline fn {name}(self: *const @This()) {prop.type_text} "
            f"{{ return self.{prop.name}; }}")


def setter_text(prop: Member, name: str) -> str:
    return (f"pub inline fn {name}(self: *@This(), value: {prop.type_text}) void "
            f"{{ self.{prop.name} = value; }}")


def generate_accessors(result: FlattenedResult, config: GeneratorConfig,
                       registry: Registry, sink: DiagnosticSink) -> list[Accessor]:
    """One getter per property, plus a setter for read-write ones.

    An accessor whose name is already taken by a method is not generated.
    """
    record = registry.get(result.decl_id)
    taken = {m.name for m in result.methods}
    accessors = []
    for prop in result.properties:
        wanted = [(config.getter_prefix + prop.name, getter_text, False)]
        if prop.access == AccessMode.READ_WRITE:
            wanted.append((config.setter_prefix + prop.name, setter_text, True))
        for name, render_fn, is_setter in wanted:
            if name in taken:
                at = prop if prop.origin == result.decl_id else record
                sink.warn(
                    record.name, "AccessorSuppressed",
                    f"Accessor '{name}' for property '{prop.name}' is not generated: "
                    f"a method of that name already exists",
                    unit=record.unit, line=at.line, col=at.col,
                )
                continue
            taken.add(name)
            accessors.append(Accessor(name, prop.name, render_fn(prop, name), is_setter))
    return accessors
