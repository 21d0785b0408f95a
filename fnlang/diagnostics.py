"""
Diagnostics shared by the parser and the semantic analyzer.

A `Diagnostic` is the unit the front-end reports to its caller: parse and
analysis failures are collected as diagnostics on the result instead of being
printed, and the caller decides whether to print, collect or suppress them.

Author: xwest
"""

from typing import Optional, List
from dataclasses import dataclass

from .lexer.tokens import SourceLocation


@dataclass
class Diagnostic:
    """A single error, warning or note with its source location."""
    message: str
    location: SourceLocation
    severity: str  # "error", "warning", "info"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result

    def summary(self) -> str:
        """One-line form: `<file>:<line>:<index>: error[P001]: message`."""
        code = f"[{self.code}]" if self.code else ""
        return f"{self.location}: {self.severity}{code}: {self.message}"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"
