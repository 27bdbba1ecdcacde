"""Method copying with self-type rewriting.

A copied method is the source method's token stream with every identifier
token equal to the source declaration's name replaced by the descendant's
name. Matching is by whole token, so `Animal` never matches inside
`AnimalKind`, and string literals and comments are never touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .config import GeneratorConfig
from .decls import DeclarationRecord, MethodDef, NestedDecl
from .diagnostics import DiagnosticSink
from .registry import Registry
from .tokens import CLOSERS, OPENERS, Token, TokenType

if TYPE_CHECKING:
    from .flatten import FlattenedResult

logger = logging.getLogger(__name__)

# Parameter names that would shadow a generated struct's declarations
RESERVED_PARAMS = ("init", "deinit")


@dataclass
class ResolvedMethod:
    """A method as it appears on a fully resolved declaration."""
    method: MethodDef
    # Id of the declaration that wrote the method
    origin: int
    inherited: bool = False

    @property
    def name(self) -> str:
        return self.method.name


@dataclass
class SourceNames:
    """Every spelling of a source declaration inside its own unit.

    `aliases` are bare names bound to the declaration by
    `@import("...").Name`; `qualifiers` are module aliases for which
    `alias.Name` names it.
    """
    name: str
    aliases: frozenset[str] = frozenset()
    qualifiers: frozenset[str] = frozenset()


def rewrite_type_name(tokens: list[Token], old: str | SourceNames, new: str) -> list[Token]:
    """Replace every `old` identifier token with `new`.

    Field and declaration accesses (`x.Animal`) are left alone: after a dot
    the name belongs to another namespace, unless `x` is a module alias
    naming the source's unit, in which case `x.Animal` becomes `new`.
    """
    return _rewrite(tokens, old, new)[0]


def _rewrite(tokens: list[Token], old: str | SourceNames,
             new: str) -> tuple[list[Token], list[int]]:
    """Rewritten tokens and the indices of input tokens that were dropped."""
    names = old if isinstance(old, SourceNames) else SourceNames(old)
    matches = names.aliases | {names.name}
    out: list[Token] = []
    dropped: list[int] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        after_dot = i > 0 and tokens[i - 1].type == TokenType.DOT
        if tok.type == TokenType.IDENT and not after_dot:
            if (tok.value in names.qualifiers and i + 2 < len(tokens)
                    and tokens[i + 1].type == TokenType.DOT
                    and tokens[i + 2].type == TokenType.IDENT
                    and tokens[i + 2].value == names.name):
                out.append(replace(tok, value=new))
                dropped.extend((i + 1, i + 2))
                i += 3
                continue
            if tok.value in matches and tok.value != new:
                tok = replace(tok, value=new)
        out.append(tok)
        i += 1
    return out, dropped


def rename_reserved_params(method: MethodDef) -> MethodDef:
    """Rename parameters called `init` or `deinit` to `init_` / `deinit_`.

    Inside the generated struct those names are declarations, and Zig
    rejects a parameter shadowing them.
    """
    params = method.tokens[method.name_index + 2:method.params_end]
    renamed = set()
    depth = 0
    for i, tok in enumerate(params):
        if tok.type in OPENERS:
            depth += 1
        elif tok.type in CLOSERS:
            depth -= 1
        elif (depth == 0 and tok.type == TokenType.IDENT and tok.value in RESERVED_PARAMS
              and i + 1 < len(params) and params[i + 1].type == TokenType.COLON):
            renamed.add(tok.value)
    if not renamed:
        return method
    tokens = list(method.tokens)
    for i, tok in enumerate(tokens):
        if (i != method.name_index and tok.type == TokenType.IDENT and tok.value in renamed
                and not (i > 0 and tokens[i - 1].type == TokenType.DOT)):
            tokens[i] = replace(tok, value=tok.value + "_")
    return replace(method, tokens=tokens)


def copy_method(method: MethodDef, old: str | SourceNames, new: str,
                name: str | None = None) -> MethodDef:
    tokens, dropped = _rewrite(method.tokens, old, new)

    def shift(index: int) -> int:
        return index - sum(1 for d in dropped if d < index)

    name_index = shift(method.name_index)
    if name is not None and name != method.name:
        tokens[name_index] = replace(tokens[name_index], value=name)
    copy = replace(
        method, name=name or method.name, tokens=tokens, name_index=name_index,
        params_end=shift(method.params_end), body_index=shift(method.body_index),
    )
    return rename_reserved_params(copy)


def copy_alias(alias: NestedDecl, old: str | SourceNames, new: str) -> NestedDecl:
    return replace(alias, tokens=rewrite_type_name(alias.tokens, old, new))


def find_init(result: FlattenedResult) -> ResolvedMethod | None:
    """The static `init` a resolved declaration offers, if any."""
    for resolved in result.methods:
        if resolved.name == "init" and resolved.method.is_static:
            return resolved
    return None


class MethodCopier:
    def __init__(self, registry: Registry, config: GeneratorConfig, sink: DiagnosticSink):
        self.registry = registry
        self.config = config
        self.sink = sink

    def resolve(self, decl_id: int, deps: list[FlattenedResult],
                self_aliases: list[NestedDecl] = (),
                init: MethodDef | None = None) -> list[ResolvedMethod]:
        """Full method list: copies from the parent and each mixin, then own methods.

        `init`, when given, takes the place of the parent's `init`.
        """
        record = self.registry.get(decl_id)
        own = {m.name for m in record.methods}
        copied = self.copy_inherited(decl_id, deps, own, init)
        alias_names = {a.name for a in self_aliases}
        return copied + [ResolvedMethod(self._classify(m, record.name, alias_names), decl_id)
                         for m in record.methods]

    @staticmethod
    def _classify(method: MethodDef, owner: str, alias_names: set[str]) -> MethodDef:
        # Inherited aliases are unknown while scanning
        if method.is_static and method.takes_receiver(owner, alias_names):
            return replace(method, is_static=False)
        return method

    def copy_inherited(self, decl_id: int, deps: list[FlattenedResult],
                       own: set[str], init: MethodDef | None = None) -> list[ResolvedMethod]:
        record = self.registry.get(decl_id)
        replaced = find_init(deps[0]) if init is not None else None
        taken: dict[str, ResolvedMethod] = {}
        copies: list[ResolvedMethod] = []
        for dep in deps:
            source = self.registry.get(dep.decl_id)
            names = self.source_names(source)
            for name, resolved in self._candidates(dep):
                if resolved is replaced:
                    copy = ResolvedMethod(init, decl_id, inherited=True)
                    taken[init.name] = copy
                    copies.append(copy)
                    continue
                if name in own:
                    logger.debug("%s overrides %s.%s", record.name, source.name, name)
                    continue
                if name in taken:
                    first = taken[name]
                    if first.origin != resolved.origin:
                        self._warn_conflict(record, name, first, resolved)
                    continue
                copy = ResolvedMethod(
                    copy_method(resolved.method, names, record.name, name),
                    resolved.origin, inherited=True,
                )
                taken[name] = copy
                copies.append(copy)
        return copies

    def source_names(self, source: DeclarationRecord) -> SourceNames:
        """Names the source's unit uses for the source through its imports."""
        aliases, qualifiers = set(), set()
        for imp in self.registry.imports.get(source.unit, {}).values():
            if imp.path != source.unit:
                continue
            if imp.member is None:
                qualifiers.add(imp.alias)
            elif imp.member == source.name:
                aliases.add(imp.alias)
        return SourceNames(source.name, frozenset(aliases), frozenset(qualifiers))

    def _candidates(self, dep: FlattenedResult) -> list[tuple[str, ResolvedMethod]]:
        """(copy name, method) pairs offered by one source, in its order.

        Only a source's own methods get the prefix; its copies already carry
        it. When the prefix makes an own method and a copy share a name, the
        own method is the one passed on.
        """
        named = []
        for resolved in dep.methods:
            name = resolved.name
            if not resolved.inherited:
                name = self.config.method_prefix + name
            named.append((name, resolved))
        preferred: dict[str, ResolvedMethod] = {}
        for name, resolved in named:
            if name not in preferred or not resolved.inherited:
                preferred[name] = resolved
        return [(name, r) for name, r in named if preferred[name] is r]

    def inherited_aliases(self, decl_id: int, deps: list[FlattenedResult]) -> list[NestedDecl]:
        """`const Self = @This();` style aliases the copied methods may rely on."""
        record = self.registry.get(decl_id)
        declared = {n.name for n in record.nested}
        declared.update(m.name for m in record.methods)
        aliases: list[NestedDecl] = []
        for dep in deps:
            source = self.registry.get(dep.decl_id)
            for alias in dep.self_aliases:
                if alias.name in declared:
                    continue
                declared.add(alias.name)
                aliases.append(copy_alias(alias, self.source_names(source), record.name))
        return aliases

    def _warn_conflict(self, record, name, first: ResolvedMethod, second: ResolvedMethod):
        kept = self.registry.display_name(first.origin)
        dropped = self.registry.display_name(second.origin)
        self.sink.warn(
            record.name, "MethodConflict",
            f"Method '{name}' is inherited from both '{kept}' and '{dropped}'; "
            f"keeping the one from '{kept}'",
            unit=record.unit, line=record.line, col=record.col,
        )
