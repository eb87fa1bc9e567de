# File: hotpatch/core/patch_engine/patcher.py
"""
Idempotent text patcher.

Two operations, both safe to re-run:

- patch_insert_before_anchor: splice a block before the LAST occurrence of an
  anchor string, unless a marker substring shows the block is already there.
- append_line_if_absent: add a KEY=VALUE line to a config file unless the key
  already occurs in it. Missing files are skipped, not created.

Anchors are plain text, not syntax nodes. Whether the result is valid source
in the host language is up to the caller's anchor and insertion text.

Failures raise PatchEngineError subclasses and never touch the file. The
`compute_*` helpers return the would-be content without writing so previews
and real runs share one code path.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .config import PatchEngineConfig
from .contracts import AppendRequest, PatchRequest, PatchResult
from .errors import AnchorNotFound, PatchFileNotFound
from .textops import ends_with_newline, read_text_preserve, split_at_last, write_text


def compute_insert(
    request: PatchRequest, cfg: Optional[PatchEngineConfig] = None
) -> Tuple[PatchResult, str, str]:
    """
    Return (result, old_content, new_content) for an insert request.
    new_content == old_content unless result is APPLIED.
    """
    cfg = cfg or PatchEngineConfig.defaults()
    request.validate()
    content = read_text_preserve(request.target_path, cfg.encoding)

    if request.marker in content:
        return PatchResult.ALREADY_APPLIED, content, content

    parts = split_at_last(content, request.anchor)
    if parts is None:
        raise AnchorNotFound(request.anchor, request.target_path)
    before, after = parts
    return PatchResult.APPLIED, content, before + request.insertion + "\n" + after


def compute_append(
    request: AppendRequest, cfg: Optional[PatchEngineConfig] = None
) -> Tuple[PatchResult, str, str]:
    """Return (result, old_content, new_content) for an append request."""
    cfg = cfg or PatchEngineConfig.defaults()
    request.validate()
    try:
        content = read_text_preserve(request.target_path, cfg.encoding)
    except PatchFileNotFound:
        return PatchResult.SKIPPED, "", ""

    if request.key in content:
        return PatchResult.ALREADY_APPLIED, content, content

    # keep the new line on its own when the file lacks a trailing newline
    sep = "\n" if content and not ends_with_newline(content) else ""
    return PatchResult.APPLIED, content, content + sep + request.line + "\n"


def patch_insert_before_anchor(
    request: PatchRequest, cfg: Optional[PatchEngineConfig] = None
) -> PatchResult:
    cfg = cfg or PatchEngineConfig.defaults()
    result, _, new_content = compute_insert(request, cfg)
    if result is PatchResult.APPLIED:
        write_text(request.target_path, new_content, encoding=cfg.encoding, atomic=cfg.atomic_writes)
    return result


def append_line_if_absent(
    request: AppendRequest, cfg: Optional[PatchEngineConfig] = None
) -> PatchResult:
    cfg = cfg or PatchEngineConfig.defaults()
    result, _, new_content = compute_append(request, cfg)
    if result is PatchResult.APPLIED:
        write_text(request.target_path, new_content, encoding=cfg.encoding, atomic=cfg.atomic_writes)
    return result


__all__ = [
    "compute_insert",
    "compute_append",
    "patch_insert_before_anchor",
    "append_line_if_absent",
]
