# File: hotpatch/core/patch_engine/contracts.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class PatchResult(str, Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class PatchRequest:
    """
    Insert `insertion` right before the last occurrence of `anchor` in
    `target_path`, unless `marker` already occurs in the file.
    """
    target_path: Path
    anchor: str
    insertion: str
    marker: str
    name: str = ""

    kind = "insert"

    def __post_init__(self) -> None:
        object.__setattr__(self, "target_path", Path(self.target_path))

    def validate(self) -> None:
        if not self.anchor:
            raise ValueError("anchor must be a non-empty string")
        if not self.marker:
            raise ValueError("marker must be a non-empty string")

    @property
    def label(self) -> str:
        return self.name or f"insert into {self.target_path.name}"


@dataclass(frozen=True)
class AppendRequest:
    """Append `line` to `target_path` unless `key` already occurs in it."""
    target_path: Path
    key: str
    line: str
    name: str = ""

    kind = "append"

    def __post_init__(self) -> None:
        object.__setattr__(self, "target_path", Path(self.target_path))

    def validate(self) -> None:
        if not self.key:
            raise ValueError("key must be a non-empty string")
        if "\n" in self.line or "\r" in self.line:
            raise ValueError("line must be a single line")

    @property
    def label(self) -> str:
        return self.name or f"append {self.key} to {self.target_path.name}"


AnyRequest = Union[PatchRequest, AppendRequest]


@dataclass
class PatchOutcome:
    name: str
    kind: str
    target_path: Path
    result: PatchResult
    reason: Optional[str] = None
    diff: Optional[str] = None
    problem: Optional[Dict[str, Any]] = None

    @property
    def failed(self) -> bool:
        return self.result is PatchResult.FAILED


__all__ = ["PatchResult", "PatchRequest", "AppendRequest", "AnyRequest", "PatchOutcome"]
