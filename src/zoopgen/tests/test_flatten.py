"""Tests for field and property flattening."""

from zoopgen.config import GeneratorConfig
from zoopgen.decls import AccessMode, SourceUnit
from zoopgen.engine import Generator
from zoopgen.flatten import MemberKind


def run(source: str, config: GeneratorConfig | None = None):
    return Generator(config).run([SourceUnit("main.zig", source)])


def flattened(source: str, name: str, config: GeneratorConfig | None = None):
    result = run(source, config)
    assert result.ok, [str(d) for d in result.errors]
    return result.results[f"main.zig:{name}"]


def member_names(source: str, name: str) -> list[str]:
    return [m.name for m in flattened(source, name).members]


def error_kind(source: str, config: GeneratorConfig | None = None) -> str:
    result = run(source, config)
    assert not result.ok
    assert result.outputs == {}
    return result.errors[0].kind


class TestOrdering:
    def test_ancestor_fields_first(self):
        names = member_names('''
const Animal = zoop.class(struct { name: []const u8, });
const Dog = zoop.class(struct {
    pub const extends = Animal;
    breed: []const u8,
});''', "Dog")
        assert names == ["name", "breed"]

    def test_parent_then_mixins_then_own(self):
        names = member_names('''
const Base = zoop.class(struct { id: u64, });
const M1 = zoop.mixin(struct { created: i64, });
const M2 = zoop.mixin(struct { owner: u32, });
const C = zoop.class(struct {
    pub const extends = Base;
    pub const mixins = .{ M1, M2 };
    own: bool,
});''', "C")
        assert names == ["id", "created", "owner", "own"]

    def test_mixin_declaration_order_wins(self):
        names = member_names('''
const M1 = zoop.mixin(struct { a: u8, });
const M2 = zoop.mixin(struct { b: u8, });
const C = zoop.class(struct { pub const mixins = .{ M2, M1 }; });
''', "C")
        assert names == ["b", "a"]

    def test_fields_before_properties_per_source(self):
        names = member_names('''
const P = zoop.class(struct {
    pub const properties = .{ .p1 = .{ .type = u8 } };
    f1: u8,
});
const C = zoop.class(struct {
    pub const extends = P;
    pub const properties = .{ .p2 = .{ .type = u8 } };
    f2: u8,
});''', "C")
        assert names == ["f1", "p1", "f2", "p2"]

    def test_three_levels(self):
        names = member_names('''
const A = zoop.class(struct { a: u8, });
const B = zoop.class(struct { pub const extends = A; b: u8, });
const C = zoop.class(struct { pub const extends = B; c: u8, });
''', "C")
        assert names == ["a", "b", "c"]

    def test_empty_declaration_flattens_to_itself(self):
        flat = flattened("const E = zoop.class(struct {});", "E")
        assert flat.members == []
        assert flat.methods == []

    def test_empty_parent(self):
        names = member_names('''
const E = zoop.class(struct {});
const C = zoop.class(struct { pub const extends = E; x: u8, });
''', "C")
        assert names == ["x"]


class TestShadowing:
    def test_own_field_replaces_in_place(self):
        flat = flattened('''
const P = zoop.class(struct { id: u32, name: []const u8, });
const C = zoop.class(struct {
    pub const extends = P;
    extra: u8,
    id: u64,
});''', "C")
        assert [(m.name, m.type_text) for m in flat.members] == [
            ("id", "u64"), ("name", "[]const u8"), ("extra", "u8"),
        ]

    def test_own_property_replaces_inherited_property(self):
        flat = flattened('''
const P = zoop.class(struct {
    pub const properties = .{ .size = .{ .type = u32, .access = .read_write } };
});
const C = zoop.class(struct {
    pub const extends = P;
    pub const properties = .{ .size = .{ .type = u64, .access = .read_write } };
});''', "C")
        assert [(p.name, p.type_text) for p in flat.properties] == [("size", "u64")]

    def test_redeclaring_resolves_mixin_collision(self):
        flat = flattened('''
const M1 = zoop.mixin(struct { id: u32, });
const M2 = zoop.mixin(struct { id: u64, });
const C = zoop.class(struct {
    pub const mixins = .{ M1, M2 };
    id: u128,
});''', "C")
        assert [(m.name, m.type_text) for m in flat.members] == [("id", "u128")]

    def test_diamond_is_not_a_collision(self):
        names = member_names('''
const M = zoop.mixin(struct { stamp: i64, });
const B = zoop.class(struct { pub const mixins = .{ M }; b: u8, });
const C = zoop.class(struct {
    pub const extends = B;
    pub const mixins = .{ M };
});''', "C")
        assert names == ["stamp", "b"]

    def test_origin_tracked(self):
        result = run('''
const P = zoop.class(struct { a: u8, });
const C = zoop.class(struct { pub const extends = P; b: u8, });
''')
        flat = result.results["main.zig:C"]
        origins = [result.registry.get(m.origin).name for m in flat.members]
        assert origins == ["P", "C"]


class TestCollisions:
    def test_two_mixins_same_field(self):
        result = run('''
const M1 = zoop.mixin(struct { id: u32, });
const M2 = zoop.mixin(struct { id: u32, });
const C = zoop.class(struct { pub const mixins = .{ M1, M2 }; });
''')
        assert not result.ok
        err = result.errors[0]
        assert err.kind == "FieldCollision"
        assert err.declaration == "C"
        assert "'M1'" in err.message and "'M2'" in err.message

    def test_parent_and_mixin_same_property(self):
        assert error_kind('''
const P = zoop.class(struct { pub const properties = .{ .x = .{ .type = u8 } }; });
const M = zoop.mixin(struct { pub const properties = .{ .x = .{ .type = u8 } }; });
const C = zoop.class(struct { pub const extends = P; pub const mixins = .{ M }; });
''') == "FieldCollision"

    def test_property_shadows_field(self):
        flat = flattened('''
const P = zoop.class(struct { x: u8, y: u8, });
const C = zoop.class(struct {
    pub const extends = P;
    pub const properties = .{ .x = .{ .type = u16 } };
});''', "C")
        assert [(m.name, m.kind, m.type_text) for m in flat.members] == [
            ("x", MemberKind.PROPERTY, "u16"), ("y", MemberKind.FIELD, "u8"),
        ]
        assert [a.name for a in flat.accessors] == ["get_x"]

    def test_field_shadows_property(self):
        flat = flattened('''
const P = zoop.class(struct { pub const properties = .{ .x = .{ .type = u8 } }; });
const C = zoop.class(struct { pub const extends = P; x: u8, });
''', "C")
        assert [(m.name, m.kind) for m in flat.members] == [("x", MemberKind.FIELD)]
        assert flat.accessors == []

    def test_duplicate_own_member(self):
        assert error_kind('''
const C = zoop.class(struct {
    pub const properties = .{ .x = .{ .type = u8 } };
    x: u8,
});''') == "FieldCollision"

    def test_access_mode_conflict(self):
        result = run('''
const P = zoop.class(struct { pub const properties = .{ .x = .{ .type = u8 } }; });
const C = zoop.class(struct {
    pub const extends = P;
    pub const properties = .{ .x = .{ .type = u8, .access = .read_write } };
});''')
        err = result.errors[0]
        assert err.kind == "AccessModeConflict"
        assert "read_only" in err.message and "read_write" in err.message

    def test_access_mode_checked_against_every_source(self):
        result = run('''
const M1 = zoop.mixin(struct { pub const properties = .{ .x = .{ .type = u8 } }; });
const M2 = zoop.mixin(struct {
    pub const properties = .{ .x = .{ .type = u8, .access = .read_write } };
});
const C = zoop.class(struct {
    pub const mixins = .{ M1, M2 };
    pub const properties = .{ .x = .{ .type = u8 } };
});''')
        assert result.outputs == {}
        [err] = result.errors
        assert err.kind == "AccessModeConflict"
        assert "'M2'" in err.message

    def test_redeclared_property_matching_every_source(self):
        flat = flattened('''
const M1 = zoop.mixin(struct { pub const properties = .{ .x = .{ .type = u8 } }; });
const M2 = zoop.mixin(struct { pub const properties = .{ .x = .{ .type = u16 } }; });
const C = zoop.class(struct {
    pub const mixins = .{ M1, M2 };
    pub const properties = .{ .x = .{ .type = u32 } };
});''', "C")
        assert [(p.name, p.type_text) for p in flat.properties] == [("x", "u32")]

    def test_default_access_is_read_only(self):
        flat = flattened(
            "const C = zoop.class(struct { pub const properties = .{ .x = .{ .type = u8 } }; });",
            "C")
        assert flat.properties[0].access == AccessMode.READ_ONLY


class TestFieldCount:
    def test_overflow_is_an_error(self):
        config = GeneratorConfig(max_field_count=3)
        assert error_kind('''
const P = zoop.class(struct { a: u8, b: u8, });
const M = zoop.mixin(struct { c: u8, });
const C = zoop.class(struct {
    pub const extends = P;
    pub const mixins = .{ M };
    d: u8,
});''', config) == "FieldCountOverflow"

    def test_exactly_at_limit(self):
        config = GeneratorConfig(max_field_count=3)
        flat = flattened('''
const P = zoop.class(struct { a: u8, b: u8, });
const C = zoop.class(struct { pub const extends = P; c: u8, });
''', "C", config)
        assert flat.field_count == 3

    def test_shadowing_does_not_count_twice(self):
        config = GeneratorConfig(max_field_count=2)
        flat = flattened('''
const P = zoop.class(struct { a: u8, b: u8, });
const C = zoop.class(struct { pub const extends = P; a: u16, });
''', "C", config)
        assert flat.field_count == 2

    def test_properties_count(self):
        config = GeneratorConfig(max_field_count=1)
        assert error_kind('''
const C = zoop.class(struct {
    pub const properties = .{ .p = .{ .type = u8 } };
    f: u8,
});''', config) == "FieldCountOverflow"
