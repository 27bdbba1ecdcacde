"""Tests for the language server's analysis, symbol and hover providers."""

from lsprotocol import types as lsp
from zoopgen.lsp.diagnostics import compute_diagnostics, uri_to_path
from zoopgen.lsp.hover import get_hover_info
from zoopgen.lsp.symbols import get_document_symbols

BASE = '''\
const zoop = @import("zoop");

pub const Animal = zoop.class(struct {
    name: []const u8,
    pub fn speak(self: *Animal) void { _ = self; }
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


def analyze(tmp_path, source: str, name: str = "doc.zig"):
    return compute_diagnostics((tmp_path / name).as_uri(), source)


class TestDiagnostics:
    def test_uri_to_path(self, tmp_path):
        path = tmp_path / "with space.zig"
        assert uri_to_path(path.as_uri()) == str(path)

    def test_clean_document(self, tmp_path):
        (tmp_path / "base.zig").write_text(BASE)
        result = analyze(tmp_path, DOG, "dog.zig")
        assert result.diagnostics == []
        assert "dog.zig:Dog" in result.generation.results

    def test_error_position_is_zero_based(self, tmp_path):
        result = analyze(tmp_path, "const A = zoop.class(struct {\n    ???\n});\n")
        [diag] = result.diagnostics
        assert diag.severity == lsp.DiagnosticSeverity.Error
        assert diag.range.start == lsp.Position(line=1, character=4)
        assert diag.message.startswith("ParseError: ")

    def test_missing_import_reported(self, tmp_path):
        result = analyze(tmp_path, DOG, "dog.zig")
        [diag] = result.diagnostics
        assert "UnknownDeclaration" in diag.message
        assert diag.range.start.line == 4

    def test_error_in_imported_unit_pinned_to_top(self, tmp_path):
        (tmp_path / "base.zig").write_text(
            "pub const Animal = zoop.class(struct { pub const extends = Missing; });\n")
        result = analyze(tmp_path, DOG, "dog.zig")
        [diag] = result.diagnostics
        assert diag.range.start == lsp.Position(line=0, character=0)
        assert diag.message.startswith("base.zig:1:")

    def test_warning_severity(self, tmp_path):
        result = analyze(tmp_path, '''\
const A = zoop.class(struct {
    pub const properties = .{ .x = .{ .type = u8 } };
    pub fn get_x(self: *const A) u8 { return self.x; }
});
''')
        [diag] = result.diagnostics
        assert diag.severity == lsp.DiagnosticSeverity.Warning
        assert diag.source == "zoopgen"


class TestSymbols:
    SOURCE = '''\
const Stamped = zoop.mixin(struct {
    created: i64,
});

const Account = zoop.class(struct {
    pub const mixins = .{ Stamped };
    pub const properties = .{ .email = .{ .type = []const u8, .access = .read_write } };
    id: u64,

    pub fn init(id: u64) Account { return .{ .id = id }; }
    pub fn close(self: *Account) void { _ = self; }
});
'''

    def test_declarations(self, tmp_path):
        symbols = get_document_symbols(analyze(tmp_path, self.SOURCE))
        assert [(s.name, s.kind) for s in symbols] == [
            ("Stamped", lsp.SymbolKind.Interface),
            ("Account", lsp.SymbolKind.Class),
        ]
        assert symbols[1].detail == "class with Stamped"
        assert symbols[1].range.start.line == 4
        assert symbols[1].range.end.line == 11

    def test_members(self, tmp_path):
        account = get_document_symbols(analyze(tmp_path, self.SOURCE))[1]
        assert [(c.name, c.kind) for c in account.children] == [
            ("id", lsp.SymbolKind.Field),
            ("email", lsp.SymbolKind.Property),
            ("init", lsp.SymbolKind.Function),
            ("close", lsp.SymbolKind.Method),
        ]
        assert account.children[1].detail == "[]const u8 (read_write)"

    def test_symbols_survive_resolution_errors(self, tmp_path):
        source = self.SOURCE.replace("Stamped }", "Missing }")
        result = analyze(tmp_path, source)
        assert result.diagnostics
        assert len(get_document_symbols(result)) == 2

    def test_no_symbols_after_scan_error(self, tmp_path):
        result = analyze(tmp_path, 'const s = "open;\n')
        assert get_document_symbols(result) == []


class TestHover:
    def test_resolved_declaration(self, tmp_path):
        (tmp_path / "base.zig").write_text(BASE)
        result = analyze(tmp_path, DOG, "dog.zig")
        # `Dog` on line 4
        hover = get_hover_info(result, lsp.Position(line=3, character=11))
        value = hover.contents.value
        assert "const Dog = zoop.class  // extends base.Animal" in value
        assert "- `name: []const u8` from `Animal`" in value
        assert "- `breed: []const u8`\n" in value
        assert "- `pub fn speak(self: *Dog) void` *(inherited)*" in value
        assert hover.range.start == lsp.Position(line=3, character=10)

    def test_accessors_listed(self, tmp_path):
        result = analyze(tmp_path, TestSymbols.SOURCE)
        hover = get_hover_info(result, lsp.Position(line=4, character=6))
        value = hover.contents.value
        assert "*(read_write property)*" in value
        assert "from `Stamped`" in value
        assert "**Accessors:** `get_email`, `set_email`" in value

    def test_unresolved_declaration(self, tmp_path):
        result = analyze(
            tmp_path, "const A = zoop.class(struct { pub const extends = A; x: u8, });\n")
        hover = get_hover_info(result, lsp.Position(line=0, character=6))
        value = hover.contents.value
        assert "Not resolved" in value
        assert "- `x: u8`" in value

    def test_nothing_on_keywords_or_other_names(self, tmp_path):
        result = analyze(tmp_path, "const x = 1;\nconst A = zoop.class(struct {});\n")
        assert get_hover_info(result, lsp.Position(line=1, character=1)) is None
        assert get_hover_info(result, lsp.Position(line=0, character=6)) is None
