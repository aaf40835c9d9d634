"""Exceptions raised while loading the service's own configuration."""

from pathlib import Path
from typing import List, Optional, Union


class ConfigurationError(Exception):
    """
    Service configuration is missing or invalid.

    Collects every validation problem found in one pass so the operator can
    fix them together, plus suggestions printed after the errors.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
        source: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            message: Primary error message
            errors: Individual validation errors
            suggestions: Hints for fixing the errors
            source: File or environment the bad values came from
        """
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        self.source = str(source) if source is not None else None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        head = self.message
        if self.source:
            head = f"{head} ({self.source})"
        parts = [head]

        if self.errors:
            parts.append("\nValidation Errors:")
            parts.extend(f"  {i}. {error}" for i, error in enumerate(self.errors, 1))

        if self.suggestions:
            parts.append("\nSuggestions:")
            parts.extend(f"  - {suggestion}" for suggestion in self.suggestions)

        return "\n".join(parts)
