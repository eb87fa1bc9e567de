# File: hotpatch/core/patch_engine/__init__.py
"""
File-only text patch primitives (no network, no parser).

Main components:
- PatchRequest / AppendRequest / PatchResult: request and result types
- patch_insert_before_anchor: idempotent insert before the last anchor match
- append_line_if_absent: idempotent KEY=VALUE append for config files
- preview_*: unified-diff dry runs of the above
- PatchEngineConfig: encoding, atomic writes, diff context

Plans and the sequential runner live in `.plan` and `.runner`.
"""

from .config import PatchEngineConfig
from .contracts import AppendRequest, PatchOutcome, PatchRequest, PatchResult
from .errors import AnchorNotFound, PatchEngineError, PatchFileNotFound, PatchIOError, PlanError
from .patcher import append_line_if_absent, patch_insert_before_anchor
from .preview import preview_append_line_if_absent, preview_insert_before_anchor

__all__ = [
    "PatchEngineConfig",
    "PatchRequest",
    "AppendRequest",
    "PatchResult",
    "PatchOutcome",
    "PatchEngineError",
    "PatchFileNotFound",
    "PatchIOError",
    "AnchorNotFound",
    "PlanError",
    "patch_insert_before_anchor",
    "append_line_if_absent",
    "preview_insert_before_anchor",
    "preview_append_line_if_absent",
]
