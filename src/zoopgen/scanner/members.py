"""Struct body scanning: fields, methods, and nested declarations."""

from __future__ import annotations

from ..decls import DeclarationRecord, FieldDef, MethodDef, NestedDecl
from ..tokens import TokenType, leading_doc_comment, render

# Function qualifiers that may precede `fn`
_FN_QUALIFIERS = (TokenType.INLINE, TokenType.EXPORT, TokenType.EXTERN)


class MembersMixin:

    def _scan_body(self, record: DeclarationRecord):
        method_names: set[str] = set()
        directives: set[str] = set()
        while not self._check(TokenType.RBRACE) and not self._at_end():
            tok = self._peek()
            doc = leading_doc_comment(tok)

            if self._is_directive():
                self._scan_directive(record, directives)
            elif self._is_method_start():
                method = self._scan_method(record, doc)
                if method is None:
                    continue
                if method.name in method_names:
                    raise self._error(
                        f"Duplicate method '{method.name}' in '{record.name}'",
                        method.tokens[method.name_index], declaration=record.name)
                method_names.add(method.name)
                record.methods.append(method)
            elif self._is_nested_decl_start():
                record.nested.append(self._scan_nested_decl(doc))
            elif tok.type == TokenType.IDENT and self._peek(1).type == TokenType.COLON:
                record.fields.append(self._scan_field(doc))
            elif tok.type == TokenType.COMPTIME and self._peek(1).type == TokenType.IDENT:
                raise self._error(
                    f"comptime field '{self._peek(1).value}' is not supported in "
                    f"'{record.name}'", tok, declaration=record.name)
            else:
                raise self._error(
                    f"Unexpected '{tok.value}' in body of '{record.name}'",
                    tok, declaration=record.name)

        # Aliases may follow the methods that use them
        aliases = {n.name for n in record.nested if n.is_self_alias}
        for method in record.methods:
            method.is_static = not method.takes_receiver(record.name, aliases)

    # ---- Classification ----

    def _is_method_start(self) -> bool:
        offset = 0
        if self._peek(offset).type == TokenType.PUB:
            offset += 1
        while self._peek(offset).type in _FN_QUALIFIERS:
            offset += 1
            # extern "c" fn
            if self._peek(offset).type == TokenType.STRING_LIT:
                offset += 1
        return self._peek(offset).type == TokenType.FN

    def _is_nested_decl_start(self) -> bool:
        offset = 1 if self._check(TokenType.PUB) else 0
        tok = self._peek(offset)
        if tok.type in (TokenType.CONST, TokenType.VAR):
            return True
        if tok.type == TokenType.COMPTIME and self._peek(offset + 1).type == TokenType.LBRACE:
            return True
        return tok.type == TokenType.OTHER_KEYWORD and tok.value in ("test", "usingnamespace")

    # ---- Fields ----

    def _scan_field(self, doc: str | None) -> FieldDef:
        name_tok = self._advance()
        self._expect(TokenType.COLON)
        type_start = self.pos
        self._skip_until(TokenType.COMMA, TokenType.EQ, TokenType.RBRACE)
        type_tokens = self.tokens[type_start:self.pos]
        if not type_tokens:
            raise self._error(f"Missing type for field '{name_tok.value}'", name_tok)

        default_text = None
        if self._match(TokenType.EQ):
            default_start = self.pos
            self._skip_until(TokenType.COMMA, TokenType.RBRACE)
            if default_start == self.pos:
                raise self._error(
                    f"Missing default value for field '{name_tok.value}'", name_tok)
            default_text = render(self.tokens[default_start:self.pos])
        self._match(TokenType.COMMA)

        return FieldDef(
            name=name_tok.value, type_text=render(type_tokens),
            default_text=default_text, doc=doc,
            line=name_tok.line, col=name_tok.col,
        )

    # ---- Methods ----

    def _scan_method(self, record: DeclarationRecord, doc: str | None) -> MethodDef | None:
        start = self.pos
        first = self._peek()
        self._match(TokenType.PUB)
        while self._match(*_FN_QUALIFIERS):
            self._match(TokenType.STRING_LIT)
        self._expect(TokenType.FN)
        name_index = self.pos - start
        name_tok = self._expect(TokenType.IDENT, "method name")
        if not self._check(TokenType.LPAREN):
            raise self._error(f"Expected '(' after method name '{name_tok.value}'",
                              declaration=record.name)
        params_end = self._skip_group()

        # Return type runs to the body; `error{...}` and container types
        # in the return type carry braces of their own.
        while not self._check(TokenType.LBRACE, TokenType.SEMICOLON):
            tok = self._peek()
            if tok.type == TokenType.EOF or tok.type in (TokenType.RBRACE, TokenType.RPAREN):
                raise self._error(
                    f"Expected body for method '{name_tok.value}'", tok,
                    declaration=record.name)
            if (tok.type in (TokenType.STRUCT, TokenType.OTHER_KEYWORD)
                    and tok.value in ("struct", "error", "enum", "union", "opaque")
                    and self._peek(1).type in (TokenType.LBRACE, TokenType.LPAREN)):
                self._advance()
                if self._check(TokenType.LPAREN):
                    self._skip_group()
                if self._check(TokenType.LBRACE):
                    self._skip_group()
            elif tok.type in (TokenType.LPAREN, TokenType.LBRACKET, TokenType.DOT_LBRACE):
                self._skip_group()
            else:
                self._advance()

        if self._check(TokenType.SEMICOLON):
            # Body-less prototype (extern fn); kept verbatim, never inherited
            self._advance()
            record.nested.append(NestedDecl(
                name=name_tok.value, tokens=self.tokens[start:self.pos], doc=doc,
                line=first.line, col=first.col,
            ))
            return None

        body_start = self.pos
        self._skip_group()
        tokens = self.tokens[start:self.pos]
        return MethodDef(
            name=name_tok.value,
            tokens=tokens,
            name_index=name_index,
            params_end=params_end - start,
            body_index=body_start - start,
            doc=doc,
            line=name_tok.line,
            col=name_tok.col,
        )

    # ---- Nested declarations ----

    def _scan_nested_decl(self, doc: str | None) -> NestedDecl:
        start = self.pos
        first = self._peek()
        self._match(TokenType.PUB)
        kw = self._advance()
        name = ""
        if kw.type in (TokenType.CONST, TokenType.VAR):
            name = self._expect(TokenType.IDENT, "declaration name").value
            self._skip_until(TokenType.SEMICOLON)
            self._advance()
        elif kw.type == TokenType.COMPTIME:
            self._skip_group()
        elif kw.value == "test":
            if self._check(TokenType.STRING_LIT, TokenType.IDENT):
                name = self._advance().value
            if not self._check(TokenType.LBRACE):
                raise self._error("Expected '{' after test name")
            self._skip_group()
        else:
            self._skip_until(TokenType.SEMICOLON)
            self._advance()

        tokens = self.tokens[start:self.pos]
        values = [t.value for t in tokens]
        is_self_alias = (
            kw.type == TokenType.CONST
            and values[-5:] == ["=", "@This", "(", ")", ";"]
            and len(values) == (8 if first.type == TokenType.PUB else 7)
        )
        return NestedDecl(
            name=name, tokens=tokens, is_self_alias=is_self_alias, doc=doc,
            line=first.line, col=first.col,
        )
