"""Error taxonomy for the resolution-and-generation engine.

Every error renders as "message at line:col" so the CLI and the language
server can split location information back out of the string.
"""

from __future__ import annotations


class ZoopError(Exception):
    def __init__(self, message: str, line: int = 0, col: int = 0, *,
                 declaration: str = "", unit: str = ""):
        self.message = message
        self.line = line
        self.col = col
        self.declaration = declaration
        self.unit = unit
        super().__init__(f"{message} at {line}:{col}")

    @property
    def kind(self) -> str:
        return type(self).__name__


# --- Scan phase (per unit, other units keep scanning) ---

class ParseError(ZoopError):
    pass


class SourceTooLarge(ZoopError):
    pass


# --- Registry phase ---

class DuplicateDeclaration(ZoopError):
    pass


class UnknownDeclaration(ZoopError):
    pass


# --- Graph phase ---

class DependencyCycle(ZoopError):
    def __init__(self, path: list[str], line: int = 0, col: int = 0, **kwargs):
        self.path = path
        super().__init__(
            "Dependency cycle detected: " + " -> ".join(path), line, col, **kwargs)


class InheritanceDepthExceeded(ZoopError):
    pass


# --- Flattening phase ---

class FieldCollision(ZoopError):
    def __init__(self, name: str, sources: list[str], line: int = 0, col: int = 0,
                 *, reason: str = "", **kwargs):
        self.name = name
        self.sources = sources
        message = f"Member '{name}' is declared by both " + " and ".join(
            f"'{s}'" for s in sources)
        if reason:
            message += f" ({reason})"
        super().__init__(message, line, col, **kwargs)


class FieldCountOverflow(ZoopError):
    pass


class AccessModeConflict(ZoopError):
    pass
