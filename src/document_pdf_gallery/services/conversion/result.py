from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class AttemptResult:
    """Outcome of one strategy attempt; ``unavailable`` means it was never invoked."""
    method: str
    ok: bool
    output_path: Optional[str] = None
    error: Optional[str] = None
    unavailable: bool = False

    @classmethod
    def success(cls, method: str, output_path: str) -> "AttemptResult":
        return cls(method=method, ok=True, output_path=output_path)

    @classmethod
    def failure(cls, method: str, error: str) -> "AttemptResult":
        return cls(method=method, ok=False, error=error)

    @classmethod
    def skipped(cls, method: str, reason: str) -> "AttemptResult":
        return cls(method=method, ok=False, error=reason, unavailable=True)
