"""Default-lookup access to raw questionnaire answers.

Answers arrive as a flat JSON object keyed by question field. Nothing about
them is guaranteed: numbers may be strings, lists may be single strings and
any field may be missing. Every accessor here is total and falls back to the
caller's default rather than raising.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Iterator, Optional


class AuditResponse(Mapping):
    """Read-only view over one client's questionnaire answers."""

    def __init__(self, answers: Optional[Mapping[str, Any]] = None):
        self._answers: dict[str, Any] = dict(answers or {})

    def __getitem__(self, key: str) -> Any:
        return self._answers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"AuditResponse({len(self._answers)} answers)"

    def has(self, key: str) -> bool:
        """True when the field holds a usable answer (not blank, not empty)."""
        value = self._answers.get(key)
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip() != ""
        if isinstance(value, (list, tuple, dict)):
            return len(value) > 0
        if isinstance(value, float):
            return math.isfinite(value)
        return True

    def optional_number(self, key: str) -> Optional[float]:
        """Numeric answer, or None when missing or unparsable."""
        value = self._answers.get(key)
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return value if math.isfinite(value) else None
        if isinstance(value, str):
            cleaned = value.strip().replace(",", "").rstrip("%").lstrip("$")
            if not cleaned:
                return None
            try:
                parsed = float(cleaned)
            except ValueError:
                return None
            return parsed if math.isfinite(parsed) else None
        return None

    def number(self, key: str, default: float = 0) -> float:
        value = self.optional_number(key)
        return default if value is None else value

    def text(self, key: str, default: str = "") -> str:
        """String answer; lists are joined with commas."""
        value = self._answers.get(key)
        if isinstance(value, str):
            return value if value.strip() else default
        if isinstance(value, (list, tuple)):
            joined = ", ".join(str(v) for v in value if v is not None)
            return joined or default
        if isinstance(value, bool) or value is None:
            return default
        if isinstance(value, (int, float)):
            return format_answer_number(value) if math.isfinite(value) else default
        return default

    def selections(self, key: str) -> list[str]:
        """Multi-select answer as a list; a bare string counts as one item."""
        value = self._answers.get(key)
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value if v is not None and str(v).strip()]
        if isinstance(value, str) and value.strip():
            return [value]
        return []

    def equals(self, key: str, expected: str) -> bool:
        return self._answers.get(key) == expected

    def to_dict(self) -> dict[str, Any]:
        return dict(self._answers)


def format_answer_number(value: float) -> str:
    """Render a number the way it was typed: 75.0 -> '75', 7.5 -> '7.5'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
