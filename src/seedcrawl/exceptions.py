from __future__ import annotations

from typing import List, Optional

from jsonschema import ValidationError


class SeedcrawlError(Exception):
    """Base exception for the seedcrawl project."""


class RulesError(SeedcrawlError):
    """Raised when a rules file cannot be located or parsed."""


class RulesValidationError(RulesError):
    """Raised when a rules document does not match the bundled schema."""

    def __init__(self, message: str, errors: Optional[List[ValidationError]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_human(self) -> str:
        parts = [str(self)]
        for e in self.errors:
            path = "/".join(str(p) for p in e.path) or "<root>"
            parts.append(f" - at {path}: {e.message}")
        return "\n".join(parts)
