# File: hotpatch/core/patch_engine/errors.py
from __future__ import annotations

"""
Error types for the patch engine.

Core operations raise these; the runner converts them into FAILED outcomes
with a one-line reason so sibling requests keep going.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union


# -------------------------- Exceptions --------------------------

class PatchEngineError(RuntimeError):
    """Base class for patch engine failures. Never mutates the target file."""

    code = "patch_error"

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None


class PatchFileNotFound(PatchEngineError):
    """Target file is missing (fatal for insert-before-anchor)."""

    code = "file_not_found"


class PatchIOError(PatchEngineError):
    """Read/write failure other than absence: permissions, disk, undecodable bytes."""

    code = "io_error"


class AnchorNotFound(PatchEngineError):
    """The insertion anchor does not occur in the target file."""

    code = "anchor_not_found"

    def __init__(self, anchor: str, path: Optional[Union[str, Path]] = None):
        super().__init__(f"anchor {anchor!r} not found in {path}", path)
        self.anchor = anchor


class PlanError(PatchEngineError):
    """A plan, checklist or probe file has the wrong shape."""

    code = "plan_invalid"


# -------------------------- Problem helper --------------------------

@dataclass
class ProblemSpec:
    code: str
    message: str
    retryable: bool = False
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_error(cls, err: BaseException) -> "ProblemSpec":
        if isinstance(err, PatchEngineError):
            details = {"path": str(err.path)} if err.path is not None else {}
            return cls(code=err.code, message=err.message, details=details)
        if isinstance(err, ValueError):
            return cls(code="invalid_request", message=str(err))
        return cls(code=type(err).__name__, message=str(err))


def to_problem_meta(spec: ProblemSpec) -> Dict[str, Any]:
    """
    Convert a ProblemSpec to a canonical 'problem' mapping for structured reports.
    Patch failures are never retryable.
    """
    return {
        "problem": {
            "code": spec.code,
            "message": spec.message,
            "retryable": bool(spec.retryable),
            "details": dict(spec.details or {}),
        }
    }


__all__ = [
    "PatchEngineError",
    "PatchFileNotFound",
    "PatchIOError",
    "AnchorNotFound",
    "PlanError",
    "ProblemSpec",
    "to_problem_meta",
]
