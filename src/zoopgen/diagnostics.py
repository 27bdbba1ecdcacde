"""Diagnostics collected over a generation run."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum

from .errors import ZoopError


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    declaration: str
    kind: str
    message: str
    unit: str = ""
    line: int = 0
    col: int = 0
    severity: Severity = Severity.ERROR

    @classmethod
    def from_error(cls, err: ZoopError) -> Diagnostic:
        return cls(
            declaration=err.declaration,
            kind=err.kind,
            message=err.message,
            unit=err.unit,
            line=err.line,
            col=err.col,
        )

    def __str__(self):
        where = self.unit or "<unknown>"
        if self.line:
            where += f":{self.line}:{self.col}"
        subject = f" [{self.declaration}]" if self.declaration else ""
        return f"{where}: {self.severity.value}: {self.kind}{subject}: {self.message}"


class DiagnosticSink:
    """Append-only, thread-safe diagnostics list."""

    def __init__(self):
        self._lock = threading.Lock()
        self._items: list[Diagnostic] = []

    def report(self, err: ZoopError):
        self.append(Diagnostic.from_error(err))

    def warn(self, declaration: str, kind: str, message: str, *,
             unit: str = "", line: int = 0, col: int = 0):
        self.append(Diagnostic(
            declaration=declaration, kind=kind, message=message, unit=unit,
            line=line, col=col, severity=Severity.WARNING,
        ))

    def append(self, diag: Diagnostic):
        with self._lock:
            self._items.append(diag)

    @property
    def items(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._items)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.items if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.items if d.severity == Severity.WARNING]

    def __len__(self):
        with self._lock:
            return len(self._items)
