"""User-facing diagnostics accumulated by provider and resource operations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single error or warning surfaced to the operator.

    Attributes:
        severity: ERROR aborts the operation, WARNING does not
        summary: Short title
        detail: Longer explanation, may include raw API response text
        attribute: Name of the attribute the diagnostic refers to, if any
    """

    severity: Severity
    summary: str
    detail: str = ""
    attribute: Optional[str] = None


@dataclass
class Diagnostics:
    """Ordered collection of diagnostics for one operation."""

    items: list[Diagnostic] = field(default_factory=list)

    def add_error(self, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic(Severity.ERROR, summary, detail))

    def add_warning(self, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic(Severity.WARNING, summary, detail))

    def add_attribute_error(self, attribute: str, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic(Severity.ERROR, summary, detail, attribute))

    def extend(self, other: Iterable[Diagnostic]) -> None:
        self.items.extend(other)

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.items)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self.items if d.severity is Severity.ERROR]

    def to_list(self) -> list[dict]:
        """Plain dicts, for JSON output."""
        return [
            {**asdict(d), "severity": d.severity.value}
            for d in self.items
        ]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
