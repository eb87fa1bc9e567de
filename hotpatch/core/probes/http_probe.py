# File: hotpatch/core/probes/http_probe.py
"""
Single-shot HTTP probes against a known REST API.

Each probe is one request with a bounded timeout and no retry; the status code
is compared against the expected set. Probes are independent and run in order.

    base_url: http://localhost:5000/api
    timeout: 10
    headers: {Accept: application/json}
    probes:
      - name: sync user
        method: POST
        path: /auth/sync-user
        json: {phone: "+10000000000"}
        expect_status: [200]
      - name: dashboard requires auth
        path: /admins/dashboard
        expect_status: [401, 403]
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import requests

from hotpatch.core.configuration.loader import ConfigError, read_yaml
from hotpatch.core.patch_engine.errors import PlanError
from hotpatch.core.utils.logging.logging import ConsoleLog

_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


@dataclass(frozen=True)
class ProbeSpec:
    name: str
    url: str
    method: str = "GET"
    json: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    expect_status: tuple = (200,)


@dataclass
class ProbeResult:
    name: str
    status: Optional[int]
    passed: bool
    data: Any = None
    error: Optional[str] = None
    elapsed: float = 0.0


class HttpProber:
    """
    Thin wrapper around a requests.Session. One attempt per probe.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        log: Optional[ConsoleLog] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "hotpatch-probe/1.0", **(headers or {})})
        self.log = log or ConsoleLog("probe")

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def probe(self, spec: ProbeSpec) -> ProbeResult:
        started = time.monotonic()
        try:
            resp = self.session.request(
                spec.method,
                spec.url,
                json=spec.json,
                headers=spec.headers or None,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            return ProbeResult(
                name=spec.name,
                status=None,
                passed=False,
                error=f"{type(e).__name__}: {e}",
                elapsed=time.monotonic() - started,
            )
        return ProbeResult(
            name=spec.name,
            status=resp.status_code,
            passed=resp.status_code in spec.expect_status,
            data=self._decode(resp),
            elapsed=time.monotonic() - started,
        )

    def probe_all(self, specs: Iterable[ProbeSpec]) -> List[ProbeResult]:
        results: List[ProbeResult] = []
        for spec in specs:
            res = self.probe(spec)
            if res.status is None:
                self.log.error(f"{res.name}: {spec.method} {spec.url} -> network error ({res.error})")
            elif res.passed:
                self.log.info(f"{res.name}: {spec.method} {spec.url} -> {res.status} ({res.elapsed:.2f}s)")
            else:
                expected = ", ".join(str(s) for s in spec.expect_status)
                self.log.error(f"{res.name}: {spec.method} {spec.url} -> {res.status}, expected {expected}; body: {res.data}")
            results.append(res)
        return results

    def close(self) -> None:
        self.session.close()


@dataclass
class ProbeSuite:
    probes: List[ProbeSpec]
    timeout: Optional[float] = None
    headers: Dict[str, str] = field(default_factory=dict)


def _join(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def parse_probes(data: Dict[str, Any], base_url_override: Optional[str] = None) -> ProbeSuite:
    base_url = base_url_override or data.get("base_url") or ""
    if not isinstance(base_url, str):
        raise PlanError("'base_url' must be a string")

    timeout = data.get("timeout")
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise PlanError("'timeout' must be a number")
        if timeout <= 0:
            raise PlanError("'timeout' must be positive")

    headers = data.get("headers") or {}
    if not isinstance(headers, dict):
        raise PlanError("'headers' must be a mapping")

    entries = data.get("probes")
    if not isinstance(entries, list) or not entries:
        raise PlanError("probe file must contain a non-empty 'probes' list")

    specs: List[ProbeSpec] = []
    for i, entry in enumerate(entries):
        where = f"probes[{i}]"
        if not isinstance(entry, dict):
            raise PlanError(f"{where}: expected a mapping")
        method = str(entry.get("method", "GET")).upper()
        if method not in _METHODS:
            raise PlanError(f"{where}: unsupported method {method!r}")

        if entry.get("url"):
            url = str(entry["url"])
        elif entry.get("path") is not None:
            if not base_url:
                raise PlanError(f"{where}: 'path' given but no 'base_url'")
            url = _join(base_url, str(entry["path"]))
        else:
            raise PlanError(f"{where}: needs 'url' or 'path'")

        expect = entry.get("expect_status", [200])
        if isinstance(expect, int) and not isinstance(expect, bool):
            expect = [expect]
        if not isinstance(expect, list) or not expect or not all(isinstance(s, int) and not isinstance(s, bool) for s in expect):
            raise PlanError(f"{where}: 'expect_status' must be an int or list of ints")

        probe_headers = entry.get("headers") or {}
        if not isinstance(probe_headers, dict):
            raise PlanError(f"{where}: 'headers' must be a mapping")

        specs.append(ProbeSpec(
            name=str(entry.get("name") or f"{method} {url}"),
            url=url,
            method=method,
            json=entry.get("json"),
            headers={str(k): str(v) for k, v in probe_headers.items()},
            expect_status=tuple(expect),
        ))

    return ProbeSuite(
        probes=specs,
        timeout=timeout,
        headers={str(k): str(v) for k, v in headers.items()},
    )


def load_probes(path: Path, base_url_override: Optional[str] = None) -> ProbeSuite:
    if not path.is_file():
        raise PlanError(f"probe file not found: {path}", path)
    try:
        data = read_yaml(path)
    except ConfigError as e:
        raise PlanError(str(e), path)
    return parse_probes(data, base_url_override)


__all__ = ["ProbeSpec", "ProbeResult", "HttpProber", "ProbeSuite", "parse_probes", "load_probes"]
