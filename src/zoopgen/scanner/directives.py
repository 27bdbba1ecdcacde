"""Ancestry and property-table directives inside a class/mixin body.

    pub const extends = Parent;
    pub const mixins = .{ Timestamped, base.Serializable };
    pub const properties = .{
        .id = .{ .type = u64, .access = .read_only },
    };
"""

from __future__ import annotations

from ..decls import AccessMode, DeclarationRecord, PropertyDef
from ..tokens import TokenType, leading_doc_comment, render

DIRECTIVES = ("extends", "mixins", "properties")

_ACCESS_MODES = {mode.value: mode for mode in AccessMode}


class DirectivesMixin:

    def _is_directive(self) -> bool:
        offset = 1 if self._check(TokenType.PUB) else 0
        return (self._peek(offset).type == TokenType.CONST
                and self._peek(offset + 1).type == TokenType.IDENT
                and self._peek(offset + 1).value in DIRECTIVES
                and self._peek(offset + 2).type == TokenType.EQ)

    def _scan_directive(self, record: DeclarationRecord, seen: set[str]):
        self._match(TokenType.PUB)
        self._expect(TokenType.CONST)
        name_tok = self._advance()
        directive = name_tok.value
        if directive in seen:
            raise self._error(
                f"Duplicate '{directive}' directive in '{record.name}'",
                name_tok, declaration=record.name)
        seen.add(directive)
        self._expect(TokenType.EQ)

        if directive == "extends":
            record.parent = self._parse_type_ref()
        elif directive == "mixins":
            self._scan_mixin_list(record)
        else:
            self._scan_property_table(record)
        self._expect(TokenType.SEMICOLON, f"';' after '{directive}' directive")

    # ---- Mixins ----

    def _scan_mixin_list(self, record: DeclarationRecord):
        self._expect(TokenType.DOT_LBRACE, "'.{' opening mixin list")
        seen: set[str] = set()
        while not self._check(TokenType.RBRACE):
            ref = self._parse_type_ref()
            if ref.text in seen:
                raise self._error(
                    f"Mixin '{ref.text}' listed twice in '{record.name}'",
                    declaration=record.name)
            seen.add(ref.text)
            record.mixins.append(ref)
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE, "'}' closing mixin list")

    # ---- Properties ----

    def _scan_property_table(self, record: DeclarationRecord):
        self._expect(TokenType.DOT_LBRACE, "'.{' opening property table")
        while not self._check(TokenType.RBRACE):
            record.properties.append(self._scan_property(record))
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE, "'}' closing property table")

    def _scan_property(self, record: DeclarationRecord) -> PropertyDef:
        dot = self._expect(TokenType.DOT, "'.name' property entry")
        doc = leading_doc_comment(dot)
        name_tok = self._expect(TokenType.IDENT, "property name")
        self._expect(TokenType.EQ)
        self._expect(TokenType.DOT_LBRACE, "'.{' opening property attributes")

        type_text = None
        access = AccessMode.READ_ONLY
        while not self._check(TokenType.RBRACE):
            self._expect(TokenType.DOT, "'.' before property attribute")
            attr = self._expect(TokenType.IDENT, "property attribute")
            self._expect(TokenType.EQ)
            if attr.value == "type":
                start = self.pos
                self._skip_until(TokenType.COMMA, TokenType.RBRACE)
                if start == self.pos:
                    raise self._error(
                        f"Missing type for property '{name_tok.value}'", attr,
                        declaration=record.name)
                type_text = render(self.tokens[start:self.pos])
            elif attr.value == "access":
                self._expect(TokenType.DOT, "'.read_only' or '.read_write'")
                mode = self._expect(TokenType.IDENT, "access mode")
                if mode.value not in _ACCESS_MODES:
                    raise self._error(
                        f"Unknown access mode '.{mode.value}' for property "
                        f"'{name_tok.value}'", mode, declaration=record.name)
                access = _ACCESS_MODES[mode.value]
            else:
                raise self._error(
                    f"Unknown property attribute '.{attr.value}'", attr,
                    declaration=record.name)
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE, "'}' closing property attributes")

        if type_text is None:
            raise self._error(
                f"Property '{name_tok.value}' has no '.type'", name_tok,
                declaration=record.name)
        return PropertyDef(
            name=name_tok.value, type_text=type_text, access=access, doc=doc,
            line=name_tok.line, col=name_tok.col,
        )
