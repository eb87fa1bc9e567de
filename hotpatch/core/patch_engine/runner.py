# File: hotpatch/core/patch_engine/runner.py
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional

from hotpatch.core.utils.logging.logging import ConsoleLog

from .config import PatchEngineConfig
from .contracts import AnyRequest, AppendRequest, PatchOutcome, PatchRequest, PatchResult
from .errors import PatchEngineError, ProblemSpec, to_problem_meta
from .patcher import append_line_if_absent, patch_insert_before_anchor
from .preview import preview_append_line_if_absent, preview_insert_before_anchor


class PatchRunner:
    """
    Execute patch requests one after another.

    Each request finishes (read, decide, optionally write) before the next one
    starts. A failing request becomes a FAILED outcome and its siblings still
    run. With dry_run=True nothing is written and each outcome carries a diff.
    """

    def __init__(
        self,
        cfg: Optional[PatchEngineConfig] = None,
        *,
        dry_run: bool = False,
        log: Optional[ConsoleLog] = None,
    ):
        self.cfg = cfg or PatchEngineConfig.defaults()
        self.dry_run = dry_run
        self.log = log or ConsoleLog("patch")

    def run(self, requests: Iterable[AnyRequest]) -> List[PatchOutcome]:
        outcomes: List[PatchOutcome] = []
        for req in requests:
            outcome = self.run_one(req)
            self._report(outcome)
            outcomes.append(outcome)
        return outcomes

    def run_one(self, req: AnyRequest) -> PatchOutcome:
        if isinstance(req, PatchRequest) and req.marker and req.marker not in req.insertion:
            self.log.warn(f"{req.label}: marker {req.marker!r} is not part of the insertion; re-runs will insert again")

        diff: Optional[str] = None
        try:
            if isinstance(req, PatchRequest):
                if self.dry_run:
                    result, diff = preview_insert_before_anchor(req, self.cfg)
                else:
                    result = patch_insert_before_anchor(req, self.cfg)
            elif isinstance(req, AppendRequest):
                if self.dry_run:
                    result, diff = preview_append_line_if_absent(req, self.cfg)
                else:
                    result = append_line_if_absent(req, self.cfg)
            else:
                raise TypeError(f"unsupported request type: {type(req).__name__}")
        except (PatchEngineError, ValueError) as e:
            return PatchOutcome(
                name=req.label,
                kind=req.kind,
                target_path=req.target_path,
                result=PatchResult.FAILED,
                reason=str(e),
                problem=to_problem_meta(ProblemSpec.from_error(e)),
            )

        return PatchOutcome(
            name=req.label,
            kind=req.kind,
            target_path=req.target_path,
            result=result,
            diff=diff,
        )

    def _report(self, o: PatchOutcome) -> None:
        prefix = "[dry-run] " if self.dry_run else ""
        if o.result is PatchResult.APPLIED:
            verb = "would apply" if self.dry_run else "applied"
            self.log.info(f"{prefix}{o.name}: {verb} ({o.target_path})")
        elif o.result is PatchResult.ALREADY_APPLIED:
            self.log.info(f"{prefix}{o.name}: already applied")
        elif o.result is PatchResult.SKIPPED:
            self.log.stage("⏭️", f"{prefix}{o.name}: skipped, {o.target_path} does not exist")
        else:
            self.log.error(f"{prefix}{o.name}: {o.reason}")
        if o.diff:
            self.log.block(o.diff)


def summarize(outcomes: Iterable[PatchOutcome]) -> Dict[PatchResult, int]:
    counts = Counter(o.result for o in outcomes)
    return {r: counts.get(r, 0) for r in PatchResult}


def ok(outcomes: Iterable[PatchOutcome]) -> bool:
    return not any(o.failed for o in outcomes)


__all__ = ["PatchRunner", "summarize", "ok"]
