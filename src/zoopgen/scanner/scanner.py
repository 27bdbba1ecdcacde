"""Scanner assembly: combines the scanning mixins into the final Scanner class."""

from ..decls import SourceUnit, UnitScan
from ..errors import ParseError, SourceTooLarge
from ..lexer import Lexer, LexerError
from .core import ScannerBase
from .declarations import DeclarationsMixin
from .directives import DirectivesMixin
from .members import MembersMixin


class Scanner(
    MembersMixin,
    DirectivesMixin,
    DeclarationsMixin,
    ScannerBase,
):
    """Declaration-level recursive descent scanner for zoop source units."""
    pass


def scan_unit(unit: SourceUnit, max_source_bytes: int | None = None) -> UnitScan:
    """Lex and scan one unit.

    Errors never escape: a failing unit yields a UnitScan whose `errors`
    holds the single error that aborted it, and no records.
    """
    size = len(unit.text.encode("utf-8"))
    if max_source_bytes is not None and size > max_source_bytes:
        return UnitScan(unit=unit, errors=[SourceTooLarge(
            f"Source unit is {size} bytes, limit is {max_source_bytes}",
            unit=unit.name)])

    try:
        tokens = Lexer(unit.text, unit.name).tokenize()
    except LexerError as e:
        raw_msg = str(e).rsplit(" at ", 1)[0]
        return UnitScan(unit=unit, errors=[
            ParseError(raw_msg, e.line, e.col, unit=unit.name)])

    try:
        return Scanner(tokens, unit).scan()
    except ParseError as e:
        return UnitScan(unit=unit, tokens=tokens, errors=[e])


__all__ = ["Scanner", "scan_unit"]
