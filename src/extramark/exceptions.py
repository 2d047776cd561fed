"""Custom exceptions for extramark."""

from __future__ import annotations


class ExtraMarkError(Exception):
    """Base exception for all extramark errors."""

    pass


class MarkerNotFoundError(ExtraMarkError):
    """Raised when no start anchor carries the requested marker name."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Marker not found: {name}")


class SpanUnresolvedError(MarkerNotFoundError):
    """Raised when a marker's start anchor exists but its end anchor does not."""

    def __init__(self, name: str, anchor_id: str) -> None:
        self.anchor_id = anchor_id
        super().__init__(
            name,
            f"Marker {name!r} (id {anchor_id}) has no matching end anchor",
        )


class SpanMismatchError(MarkerNotFoundError):
    """Raised when two markers compared block by block differ in block count."""

    def __init__(self, name_a: str, name_b: str, count_a: int, count_b: int) -> None:
        self.name_a = name_a
        self.name_b = name_b
        self.count_a = count_a
        self.count_b = count_b
        super().__init__(
            name_b,
            f"Marker {name_a!r} spans {count_a} blocks but {name_b!r} spans {count_b}",
        )


class SpliceError(ExtraMarkError):
    """Raised when span content cannot be rewritten consistently."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot rewrite content of marker {name!r}: {reason}")


class DuplicationError(ExtraMarkError):
    """Raised when a new marker cannot be created next to a reference marker."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot create marker {name!r}: {reason}")


class MarkerExistsError(DuplicationError):
    """Raised when a marker name is already used in the document."""

    def __init__(self, name: str) -> None:
        super().__init__(name, "a marker with this name already exists")


class InvalidPackageError(ExtraMarkError):
    """Raised when a .docx package cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid document package {path}: {reason}")
