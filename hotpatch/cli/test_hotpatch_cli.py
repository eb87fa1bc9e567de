# File: hotpatch/cli/test_hotpatch_cli.py
"""
End-to-end CLI tests against a throwaway backend tree (no network).
"""

from pathlib import Path

import pytest

from hotpatch.cli import hotpatch as cli
from hotpatch.core.probes.http_probe import HttpProber


@pytest.fixture
def settings_file(tmp_path: Path, monkeypatch) -> Path:
    for name in ("HOTPATCH_ENCODING", "HOTPATCH_ATOMIC_WRITES", "HOTPATCH_CONTEXT_LINES"):
        monkeypatch.delenv(name, raising=False)
    p = tmp_path / "settings.yml"
    p.write_text("logging:\n  tag: t\n", encoding="utf-8")
    return p


def _write(p: Path, content: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")


def test_insert_then_rerun(tmp_path: Path, settings_file: Path, capsys):
    routes = tmp_path / "authRoutes.js"
    _write(routes, "router.post(...)\nexport default router")
    argv = [
        "--config", str(settings_file),
        "insert",
        "--file", str(routes),
        "--anchor", "export default router",
        "--insertion", "router.post('/new', handler)",
        "--marker", "'/new'",
    ]
    assert cli.main(argv) == cli.EXIT_OK
    assert routes.read_text(encoding="utf-8") == "router.post(...)\nrouter.post('/new', handler)\nexport default router"

    assert cli.main(argv) == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "already applied" in out
    assert "applied=0 already=1" in out


def test_insert_missing_anchor_exits_1(tmp_path: Path, settings_file: Path):
    f = tmp_path / "a.js"
    _write(f, "module.exports = router;\n")
    rc = cli.main([
        "--config", str(settings_file), "insert", "--file", str(f),
        "--anchor", "export default router", "--insertion", "router.post('/new')", "--marker", "'/new'",
    ])
    assert rc == cli.EXIT_FAILED
    assert f.read_text(encoding="utf-8") == "module.exports = router;\n"


def test_append_to_several_env_files(tmp_path: Path, settings_file: Path):
    env = tmp_path / ".env"
    _write(env, "PORT=5000\n")
    prod = tmp_path / ".env.production"
    rc = cli.main([
        "--config", str(settings_file), "append",
        "--file", str(env), "--file", str(prod),
        "--key", "FEATURE_X", "--line", "FEATURE_X=1",
    ])
    assert rc == cli.EXIT_OK
    assert env.read_text(encoding="utf-8") == "PORT=5000\nFEATURE_X=1\n"
    assert not prod.exists()


def test_apply_dry_run(tmp_path: Path, settings_file: Path, capsys):
    _write(tmp_path / "app/.env", "A=1\n")
    plan = tmp_path / "plan.yml"
    _write(plan, "root: app\nrequests:\n  - kind: append\n    target: .env\n    key: B\n    line: B=2\n")
    assert cli.main(["--config", str(settings_file), "apply", str(plan), "--dry-run"]) == cli.EXIT_OK
    assert (tmp_path / "app/.env").read_text(encoding="utf-8") == "A=1\n"
    assert "+B=2" in capsys.readouterr().out


def test_bad_plan_exits_2(tmp_path: Path, settings_file: Path):
    plan = tmp_path / "plan.yml"
    _write(plan, "requests: []\n")
    assert cli.main(["--config", str(settings_file), "apply", str(plan)]) == cli.EXIT_CONFIG


def test_bad_config_exits_2(tmp_path: Path):
    assert cli.main(["--config", str(tmp_path / "missing.yml"), "verify", "x.yml"]) == cli.EXIT_CONFIG


def test_verify(tmp_path: Path, settings_file: Path):
    _write(tmp_path / "src/hooks/useAdmin.ts", "export const useAdminDashboard = () => {};\n")
    checks = tmp_path / "checks.yml"
    _write(checks, (
        "checks:\n"
        "  - path: src/hooks/useAdmin.ts\n"
        "    contains: [export const useAdminDashboard]\n"
        "  - path: src/hooks/useAdmin.ts\n"
        "    contains: [export const useAdminProfessionals]\n"
    ))
    assert cli.main(["--config", str(settings_file), "verify", str(checks)]) == cli.EXIT_FAILED


def test_probe_uses_timeout_override(tmp_path: Path, settings_file: Path, monkeypatch):
    seen = {}

    def fake_probe_all(self, specs):
        seen["timeout"] = self.timeout
        seen["urls"] = [s.url for s in specs]
        return []

    monkeypatch.setattr(HttpProber, "probe_all", fake_probe_all)
    probes = tmp_path / "probes.yml"
    _write(probes, "base_url: http://localhost:5000/api\nprobes:\n  - path: /health\n")

    rc = cli.main(["--config", str(settings_file), "probe", str(probes), "--timeout", "1.5"])
    assert rc == cli.EXIT_OK
    assert seen == {"timeout": 1.5, "urls": ["http://localhost:5000/api/health"]}


@pytest.mark.parametrize("value", ["-1", "0", "abc"])
def test_timeout_must_be_positive(tmp_path: Path, settings_file: Path, value: str):
    probes = tmp_path / "probes.yml"
    _write(probes, "base_url: http://localhost:5000/api\nprobes:\n  - path: /health\n")
    with pytest.raises(SystemExit) as exc:
        cli.main(["--config", str(settings_file), "probe", str(probes), "--timeout", value])
    assert exc.value.code == 2


def test_bad_encoding_in_config_exits_2(tmp_path: Path, settings_file: Path):
    settings_file.write_text("patch_engine:\n  encoding: utf-9\n", encoding="utf-8")
    f = tmp_path / ".env"
    _write(f, "A=1\n")
    rc = cli.main(["--config", str(settings_file), "append", "--file", str(f), "--key", "B", "--line", "B=2"])
    assert rc == cli.EXIT_CONFIG
    assert f.read_text(encoding="utf-8") == "A=1\n"
