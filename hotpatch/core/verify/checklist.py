# hotpatch/core/verify/checklist.py
# Description: Pass/fail checks on file content after a patch session
#
#   root: ../app
#   checks:
#     - name: admin dashboard hook
#       path: src/hooks/useAdmin.ts
#       contains: ["export const useAdminDashboard"]
#       absent: ["TODO: wire dashboard"]
#       patterns: ["verifyOtp[\\s\\S]*?response\\.success === true"]

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from hotpatch.core.configuration.loader import ConfigError, read_yaml
from hotpatch.core.patch_engine.errors import PatchEngineError, PlanError
from hotpatch.core.patch_engine.textops import read_text_preserve
from hotpatch.core.utils.logging.logging import ConsoleLog


@dataclass
class ContentCheck:
    name: str
    path: Path
    contains: List[str] = field(default_factory=list)
    absent: List[str] = field(default_factory=list)
    patterns: List[str] = field(default_factory=list)


@dataclass
class CheckResult:
    name: str
    passed: bool
    missing: List[str] = field(default_factory=list)
    unexpected: List[str] = field(default_factory=list)
    error: Optional[str] = None


def run_check(check: ContentCheck, encoding: str = "utf-8") -> CheckResult:
    try:
        content = read_text_preserve(check.path, encoding)
    except PatchEngineError as e:
        return CheckResult(name=check.name, passed=False, error=e.message)

    missing = [s for s in check.contains if s not in content]
    unexpected = [s for s in check.absent if s in content]
    for pat in check.patterns:
        try:
            if not re.search(pat, content, flags=re.DOTALL | re.MULTILINE):
                missing.append(f"/{pat}/")
        except re.error as e:
            return CheckResult(name=check.name, passed=False, error=f"bad pattern {pat!r}: {e}")

    return CheckResult(
        name=check.name,
        passed=not missing and not unexpected,
        missing=missing,
        unexpected=unexpected,
    )


def run_checks(
    checks: Iterable[ContentCheck],
    *,
    log: Optional[ConsoleLog] = None,
    encoding: str = "utf-8",
) -> List[CheckResult]:
    log = log or ConsoleLog("verify")
    results: List[CheckResult] = []
    for check in checks:
        res = run_check(check, encoding)
        if res.passed:
            log.info(f"{res.name}")
        elif res.error:
            log.error(f"{res.name}: {res.error}")
        else:
            detail = []
            if res.missing:
                detail.append("missing " + ", ".join(repr(m) for m in res.missing))
            if res.unexpected:
                detail.append("still present " + ", ".join(repr(u) for u in res.unexpected))
            log.error(f"{res.name}: {'; '.join(detail)}")
        results.append(res)
    return results


def _str_list(entry: Dict[str, Any], key: str, where: str) -> List[str]:
    val = entry.get(key) or []
    if isinstance(val, str):
        val = [val]
    if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
        raise PlanError(f"{where}: '{key}' must be a string or list of strings")
    return list(val)


def parse_checklist(data: Dict[str, Any], base_dir: Path, root_override: Optional[Path] = None) -> List[ContentCheck]:
    root = root_override or (base_dir / str(data["root"]) if data.get("root") else base_dir)
    entries = data.get("checks")
    if not isinstance(entries, list) or not entries:
        raise PlanError("checklist must contain a non-empty 'checks' list")

    checks: List[ContentCheck] = []
    for i, entry in enumerate(entries):
        where = f"checks[{i}]"
        if not isinstance(entry, dict):
            raise PlanError(f"{where}: expected a mapping")
        raw_path = entry.get("path")
        if not isinstance(raw_path, str) or not raw_path:
            raise PlanError(f"{where}: 'path' must be a non-empty string")
        p = Path(raw_path).expanduser()
        check = ContentCheck(
            name=str(entry.get("name") or raw_path),
            path=p if p.is_absolute() else root / p,
            contains=_str_list(entry, "contains", where),
            absent=_str_list(entry, "absent", where),
            patterns=_str_list(entry, "patterns", where),
        )
        if not (check.contains or check.absent or check.patterns):
            raise PlanError(f"{where}: needs at least one of contains/absent/patterns")
        checks.append(check)
    return checks


def load_checklist(path: Path, root_override: Optional[Path] = None) -> List[ContentCheck]:
    if not path.is_file():
        raise PlanError(f"checklist file not found: {path}", path)
    try:
        data = read_yaml(path)
    except ConfigError as e:
        raise PlanError(str(e), path)
    return parse_checklist(data, path.resolve().parent, root_override)


__all__ = ["ContentCheck", "CheckResult", "run_check", "run_checks", "parse_checklist", "load_checklist"]
