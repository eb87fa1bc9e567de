# File: hotpatch/cli/hotpatch.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from hotpatch.core.configuration.loader import ConfigError, Settings, get_settings
from hotpatch.core.patch_engine.contracts import AppendRequest, PatchRequest, PatchResult
from hotpatch.core.patch_engine.errors import PlanError
from hotpatch.core.patch_engine.plan import load_plan
from hotpatch.core.patch_engine.runner import PatchRunner, ok, summarize
from hotpatch.core.probes.http_probe import HttpProber, load_probes
from hotpatch.core.utils.logging.logging import ConsoleLog
from hotpatch.core.verify.checklist import load_checklist, run_checks

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {raw!r}")
    return value


# ------------------------------------------------------------------------------
# Subcommands
# ------------------------------------------------------------------------------

def _run_requests(settings: Settings, requests, dry_run: bool, log: ConsoleLog) -> int:
    runner = PatchRunner(settings.patch_engine, dry_run=dry_run, log=log)
    outcomes = runner.run(requests)
    counts = summarize(outcomes)
    log.stage(
        "📊",
        f"applied={counts[PatchResult.APPLIED]} already={counts[PatchResult.ALREADY_APPLIED]} "
        f"skipped={counts[PatchResult.SKIPPED]} failed={counts[PatchResult.FAILED]}",
    )
    return EXIT_OK if ok(outcomes) else EXIT_FAILED


def _cmd_apply(args: argparse.Namespace, settings: Settings, log: ConsoleLog) -> int:
    plan = load_plan(args.plan, root_override=args.root)
    log.stage("🚀", f"applying {len(plan.requests)} request(s) from {args.plan} (root: {plan.root})")
    return _run_requests(settings, plan.requests, args.dry_run, log)


def _cmd_insert(args: argparse.Namespace, settings: Settings, log: ConsoleLog) -> int:
    if args.insertion_file is not None:
        try:
            insertion = args.insertion_file.read_text(encoding="utf-8")
        except OSError as e:
            raise PlanError(f"cannot read insertion file {args.insertion_file}: {e.strerror or e}", args.insertion_file)
    else:
        insertion = args.insertion
    req = PatchRequest(
        target_path=args.file,
        anchor=args.anchor,
        insertion=insertion,
        marker=args.marker,
        name=args.name or "",
    )
    return _run_requests(settings, [req], args.dry_run, log)


def _cmd_append(args: argparse.Namespace, settings: Settings, log: ConsoleLog) -> int:
    reqs = [AppendRequest(target_path=f, key=args.key, line=args.line) for f in args.file]
    return _run_requests(settings, reqs, args.dry_run, log)


def _cmd_verify(args: argparse.Namespace, settings: Settings, log: ConsoleLog) -> int:
    checks = load_checklist(args.checklist, root_override=args.root)
    log.stage("🔍", f"running {len(checks)} check(s) from {args.checklist}")
    results = run_checks(checks, log=log, encoding=settings.patch_engine.encoding)
    passed = sum(1 for r in results if r.passed)
    log.stage("📊", f"{passed}/{len(results)} checks passed")
    return EXIT_OK if passed == len(results) else EXIT_FAILED


def _cmd_probe(args: argparse.Namespace, settings: Settings, log: ConsoleLog) -> int:
    suite = load_probes(args.probes, base_url_override=args.base_url)
    timeout = args.timeout if args.timeout is not None else (suite.timeout or settings.probes.timeout)
    prober = HttpProber(timeout=timeout, headers={**settings.probes.headers, **suite.headers}, log=log)
    try:
        log.stage("🧪", f"running {len(suite.probes)} probe(s), timeout {timeout:g}s")
        results = prober.probe_all(suite.probes)
    finally:
        prober.close()
    passed = sum(1 for r in results if r.passed)
    log.stage("📊", f"{passed}/{len(results)} probes passed")
    return EXIT_OK if passed == len(results) else EXIT_FAILED


# ------------------------------------------------------------------------------
# Main
# ------------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hotpatch",
        description="Idempotent source patching, content checks and HTTP probes for debugging sessions.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings YAML (default: config/hotpatch.yml when present).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("apply", help="Run every request in a YAML patch plan.")
    p.add_argument("plan", type=Path)
    p.add_argument("--root", type=Path, default=None, help="Resolve relative targets against this directory.")
    p.add_argument("--dry-run", action="store_true", help="Show diffs, write nothing.")
    p.set_defaults(func=_cmd_apply)

    p = sub.add_parser("insert", help="Insert a block before the last occurrence of an anchor.")
    p.add_argument("--file", type=Path, required=True)
    p.add_argument("--anchor", required=True)
    p.add_argument("--marker", required=True, help="Substring that shows the block is already applied.")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--insertion")
    src.add_argument("--insertion-file", type=Path)
    p.add_argument("--name", default=None)
    p.add_argument("--dry-run", action="store_true")
    p.set_defaults(func=_cmd_insert)

    p = sub.add_parser("append", help="Append KEY=VALUE to config files that exist and lack KEY.")
    p.add_argument("--file", type=Path, required=True, action="append", help="Repeatable.")
    p.add_argument("--key", required=True)
    p.add_argument("--line", required=True)
    p.add_argument("--dry-run", action="store_true")
    p.set_defaults(func=_cmd_append)

    p = sub.add_parser("verify", help="Run a YAML content checklist.")
    p.add_argument("checklist", type=Path)
    p.add_argument("--root", type=Path, default=None)
    p.set_defaults(func=_cmd_verify)

    p = sub.add_parser("probe", help="Run YAML-described HTTP probes.")
    p.add_argument("probes", type=Path)
    p.add_argument("--base-url", default=None)
    p.add_argument("--timeout", type=_positive_float, default=None, help="Seconds per request.")
    p.set_defaults(func=_cmd_probe)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.config)
    except ConfigError as e:
        ConsoleLog("hotpatch").error(f"config: {e}")
        return EXIT_CONFIG

    log = ConsoleLog(settings.log_tag)
    try:
        return args.func(args, settings, log)
    except PlanError as e:
        log.error(f"{e.code}: {e}")
        return EXIT_CONFIG


if __name__ == "__main__":
    sys.exit(main())
