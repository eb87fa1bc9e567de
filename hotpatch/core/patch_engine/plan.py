# File: hotpatch/core/patch_engine/plan.py
"""
Patch plans: a YAML file listing insert/append requests to run in order.

    root: ../backend            # optional; defaults to the plan file's directory
    requests:
      - kind: insert
        name: status route
        target: src/routes/authRoutes.js
        anchor: "export default router"
        marker: "/status"
        insertion: |
          router.get('/status', statusHandler);
      - kind: insert
        target: src/routes/adminRoutes.js
        anchor: "export default router"
        marker: "getAllProfessionals"
        insertion_file: snippets/professional_routes.js
      - kind: append
        target: .env
        key: FEATURE_ADMIN_PROFESSIONALS
        line: FEATURE_ADMIN_PROFESSIONALS=1

Relative `target` and `insertion_file` paths resolve against `root`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from hotpatch.core.configuration.loader import ConfigError, read_yaml

from .contracts import AnyRequest, AppendRequest, PatchRequest
from .errors import PlanError


@dataclass
class PatchPlan:
    root: Path
    requests: List[AnyRequest]
    source: Optional[Path] = None


def _resolve(root: Path, raw: str) -> Path:
    p = Path(raw).expanduser()
    return p if p.is_absolute() else (root / p)


def _str_field(entry: Dict[str, Any], key: str, where: str, *, required: bool = True) -> str:
    val = entry.get(key)
    if val is None and not required:
        return ""
    if not isinstance(val, str) or (required and not val):
        raise PlanError(f"{where}: '{key}' must be a non-empty string")
    return val


def _parse_entry(entry: Any, idx: int, root: Path) -> AnyRequest:
    where = f"requests[{idx}]"
    if not isinstance(entry, dict):
        raise PlanError(f"{where}: expected a mapping")

    kind = entry.get("kind", "insert")
    target = _resolve(root, _str_field(entry, "target", where))
    name = _str_field(entry, "name", where, required=False)

    if kind == "insert":
        has_inline = "insertion" in entry
        has_file = "insertion_file" in entry
        if has_inline == has_file:
            raise PlanError(f"{where}: give exactly one of 'insertion' or 'insertion_file'")
        if has_inline:
            insertion = entry["insertion"]
            if not isinstance(insertion, str):
                raise PlanError(f"{where}: 'insertion' must be a string")
        else:
            snippet = _resolve(root, _str_field(entry, "insertion_file", where))
            try:
                insertion = snippet.read_text(encoding="utf-8")
            except OSError as e:
                raise PlanError(f"{where}: cannot read insertion_file {snippet}: {e.strerror or e}", snippet)
        return PatchRequest(
            target_path=target,
            anchor=_str_field(entry, "anchor", where),
            insertion=insertion,
            marker=_str_field(entry, "marker", where),
            name=name,
        )

    if kind == "append":
        return AppendRequest(
            target_path=target,
            key=_str_field(entry, "key", where),
            line=_str_field(entry, "line", where),
            name=name,
        )

    raise PlanError(f"{where}: unknown kind {kind!r} (expected 'insert' or 'append')")


def parse_plan(data: Dict[str, Any], base_dir: Path, root_override: Optional[Path] = None) -> PatchPlan:
    if root_override is not None:
        root = root_override
    elif data.get("root"):
        root = _resolve(base_dir, str(data["root"]))
    else:
        root = base_dir

    entries = data.get("requests")
    if not isinstance(entries, list) or not entries:
        raise PlanError("plan must contain a non-empty 'requests' list")
    return PatchPlan(root=root, requests=[_parse_entry(e, i, root) for i, e in enumerate(entries)])


def load_plan(path: Path, root_override: Optional[Path] = None) -> PatchPlan:
    if not path.is_file():
        raise PlanError(f"plan file not found: {path}", path)
    try:
        data = read_yaml(path)
    except ConfigError as e:
        raise PlanError(str(e), path)
    plan = parse_plan(data, path.resolve().parent, root_override)
    plan.source = path
    return plan


__all__ = ["PatchPlan", "parse_plan", "load_plan"]
