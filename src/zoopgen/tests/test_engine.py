"""End-to-end tests for a generation run over several units."""

from zoopgen import generate
from zoopgen.config import GeneratorConfig
from zoopgen.decls import SourceUnit
from zoopgen.diagnostics import Severity
from zoopgen.engine import Generator


BASE = '''\
const zoop = @import("zoop");

pub const Animal = zoop.class(struct {
    name: []const u8,

    pub fn rename(self: *Animal, name: []const u8) void {
        self.name = name;
    }
});
'''

DOG = '''\
const zoop = @import("zoop");
const base = @import("base.zig");

pub const Dog = zoop.class(struct {
    pub const extends = base.Animal;
    breed: []const u8,
});
'''

CAT = '''\
const zoop = @import("zoop");
const Animal = @import("../base.zig").Animal;

pub const Cat = zoop.class(struct {
    pub const extends = Animal;
    lives: u8 = 9,
});
'''


def project() -> list[SourceUnit]:
    return [
        SourceUnit("dog.zig", DOG),
        SourceUnit("base.zig", BASE),
        SourceUnit("pets/cat.zig", CAT),
    ]


def chain(length: int) -> str:
    lines = ["const C0 = zoop.class(struct {});"]
    for i in range(1, length):
        lines.append(f"const C{i} = zoop.class(struct {{ pub const extends = C{i - 1}; }});")
    return "\n".join(lines) + "\n"


class TestRun:
    def test_every_unit_generated(self):
        result = generate(project())
        assert result.ok, [str(d) for d in result.errors]
        assert sorted(result.outputs) == ["base.zig", "dog.zig", "pets/cat.zig"]

    def test_order_puts_ancestors_first(self):
        result = generate(project())
        order = result.order
        assert order.index("base.zig:Animal") < order.index("dog.zig:Dog")
        assert order.index("base.zig:Animal") < order.index("pets/cat.zig:Cat")

    def test_alias_member_reference(self):
        text = generate(project()).outputs["dog.zig"]
        assert "    name: []const u8,\n    breed: []const u8," in text
        assert "pub fn rename(self: *Dog, name: []const u8) void {" in text

    def test_imported_declaration_reference(self):
        text = generate(project()).outputs["pets/cat.zig"]
        assert "    name: []const u8,\n    lives: u8 = 9," in text
        assert "self: *Cat" in text

    def test_import_lines_kept(self):
        text = generate(project()).outputs["dog.zig"]
        assert 'const base = @import("base.zig");' in text
        assert '@import("zoop")' not in text

    def test_idempotent(self):
        first = generate(project())
        second = generate(project())
        assert first.outputs == second.outputs
        assert first.order == second.order

    def test_parallel_matches_serial(self):
        serial = generate(project())
        parallel = generate(project(), GeneratorConfig(jobs=4))
        assert parallel.outputs == serial.outputs
        assert parallel.order == serial.order

    def test_same_name_in_two_units(self):
        result = generate([
            SourceUnit("a.zig", "const Node = zoop.class(struct { a: u8, });\n"),
            SourceUnit("b.zig", "const Node = zoop.class(struct { b: u8, });\n"),
        ])
        assert result.ok
        assert result.order == ["a.zig:Node", "b.zig:Node"]

    def test_no_units(self):
        result = generate([])
        assert result.ok
        assert result.outputs == {}


class TestFailures:
    def test_scan_errors_from_every_unit(self):
        result = generate([
            SourceUnit("a.zig", "const A = zoop.class(struct {\n    ???\n});\n"),
            SourceUnit("ok.zig", "const B = zoop.class(struct {});\n"),
            SourceUnit("c.zig", 'const s = "open;\n'),
        ])
        assert not result.ok
        assert result.outputs == {}
        assert sorted(d.unit for d in result.errors) == ["a.zig", "c.zig"]
        assert {d.kind for d in result.errors} == {"ParseError"}

    def test_cycle_produces_no_output(self):
        result = generate([SourceUnit("main.zig", '''\
const A = zoop.class(struct { pub const extends = C; });
const B = zoop.class(struct { pub const extends = A; });
const C = zoop.class(struct { pub const extends = B; });
''')])
        assert result.outputs == {}
        [err] = result.errors
        assert err.kind == "DependencyCycle"
        assert "A -> C -> B -> A" in err.message

    def test_cross_unit_cycle(self):
        result = generate([
            SourceUnit("a.zig", 'const b = @import("b.zig");\n'
                                "pub const A = zoop.class(struct { pub const extends = b.B; });\n"),
            SourceUnit("b.zig", 'const a = @import("a.zig");\n'
                                "pub const B = zoop.class(struct { pub const extends = a.A; });\n"),
        ])
        assert result.errors[0].kind == "DependencyCycle"
        assert result.outputs == {}

    def test_unknown_parent(self):
        result = generate([SourceUnit(
            "main.zig", "const A = zoop.class(struct { pub const extends = Missing; });\n")])
        [err] = result.errors
        assert err.kind == "UnknownDeclaration"
        assert "Missing" in err.message
        assert err.unit == "main.zig"

    def test_unknown_import_member(self):
        result = generate([
            SourceUnit("base.zig", "pub const Animal = zoop.class(struct {});\n"),
            SourceUnit("dog.zig", 'const base = @import("base.zig");\n'
                                  "const Dog = zoop.class(struct { pub const extends = base.Animl; });\n"),
        ])
        assert result.errors[0].kind == "UnknownDeclaration"
        assert "base.zig:Animl" in result.errors[0].message

    def test_duplicate_declaration(self):
        result = generate([SourceUnit("main.zig", '''\
const A = zoop.class(struct {});
const A = zoop.mixin(struct {});
''')])
        [err] = result.errors
        assert err.kind == "DuplicateDeclaration"
        assert err.line == 2

    def test_depth_limit(self):
        config = GeneratorConfig(max_inheritance_depth=4)
        assert generate([SourceUnit("main.zig", chain(5))], config).ok
        result = generate([SourceUnit("main.zig", chain(6))], config)
        assert result.errors[0].kind == "InheritanceDepthExceeded"
        assert result.outputs == {}

    def test_unresolved_reference_stops_before_methods(self):
        result = Generator().run([SourceUnit("main.zig", '''\
const M1 = zoop.mixin(struct { pub fn t(self: *M1) void { _ = self; } });
const M2 = zoop.mixin(struct { pub fn t(self: *M2) void { _ = self; } });
const C = zoop.class(struct { pub const mixins = .{ M1, M2 }; });
const D = zoop.class(struct { pub const extends = Nope; });
''')])
        assert [d.severity for d in result.diagnostics] == [Severity.ERROR]
        assert result.warnings == []
        assert result.outputs == {}
