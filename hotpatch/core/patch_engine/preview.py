# File: hotpatch/core/patch_engine/preview.py
from __future__ import annotations

import difflib
from typing import Optional, Tuple

from .config import PatchEngineConfig
from .contracts import AppendRequest, PatchRequest, PatchResult
from .patcher import compute_append, compute_insert


def unified_diff(
    original_text: str,
    updated_text: str,
    relpath_label: str,
    context_lines: int = 3,
) -> str:
    """
    Create a unified diff with minimal, readable context.
    Returns "" when nothing changes, otherwise text with a trailing newline.
    """
    if original_text == updated_text:
        return ""
    orig_lines = original_text.splitlines(keepends=True)
    new_lines = updated_text.splitlines(keepends=True)

    # Header labels are informative, not file system paths
    diff = difflib.unified_diff(
        orig_lines,
        new_lines,
        fromfile=f"a/{relpath_label}",
        tofile=f"b/{relpath_label}",
        n=context_lines,
    )
    text = "".join(ln if ln.endswith("\n") else ln + "\n" for ln in diff)
    return text


def preview_insert_before_anchor(
    request: PatchRequest, cfg: Optional[PatchEngineConfig] = None
) -> Tuple[PatchResult, str]:
    """Dry run of patch_insert_before_anchor: (result, diff). Never writes."""
    cfg = cfg or PatchEngineConfig.defaults()
    result, old, new = compute_insert(request, cfg)
    return result, unified_diff(old, new, request.target_path.as_posix(), cfg.context_lines)


def preview_append_line_if_absent(
    request: AppendRequest, cfg: Optional[PatchEngineConfig] = None
) -> Tuple[PatchResult, str]:
    """Dry run of append_line_if_absent: (result, diff). Never writes."""
    cfg = cfg or PatchEngineConfig.defaults()
    result, old, new = compute_append(request, cfg)
    return result, unified_diff(old, new, request.target_path.as_posix(), cfg.context_lines)


__all__ = ["unified_diff", "preview_insert_before_anchor", "preview_append_line_if_absent"]
