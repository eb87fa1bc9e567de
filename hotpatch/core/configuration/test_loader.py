from pathlib import Path

import pytest

from hotpatch.core.configuration.loader import ConfigError, get_settings, read_yaml
from hotpatch.core.patch_engine.config import PatchEngineConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("HOTPATCH_ENCODING", "HOTPATCH_ATOMIC_WRITES", "HOTPATCH_CONTEXT_LINES"):
        monkeypatch.delenv(name, raising=False)


def test_settings_from_explicit_file(tmp_path: Path):
    cfg = tmp_path / "settings.yml"
    cfg.write_text(
        "patch_engine:\n  encoding: latin-1\n  atomic_writes: false\n  context_lines: 1\n"
        "probes:\n  timeout: 2.5\n  headers: {X-Debug: 1}\n"
        "logging:\n  tag: dbg\n",
        encoding="utf-8",
    )
    s = get_settings(cfg)
    assert s.patch_engine == PatchEngineConfig(encoding="latin-1", atomic_writes=False, context_lines=1)
    assert s.probes.timeout == 2.5
    assert s.probes.headers == {"X-Debug": "1"}
    assert s.log_tag == "dbg"
    assert s.source == cfg


def test_empty_file_gives_defaults(tmp_path: Path):
    cfg = tmp_path / "settings.yml"
    cfg.write_text("", encoding="utf-8")
    s = get_settings(cfg)
    assert s.patch_engine == PatchEngineConfig.defaults()
    assert s.probes.timeout == 10.0
    assert s.log_tag == "hotpatch"


def test_env_overrides_patch_engine(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "settings.yml"
    cfg.write_text("patch_engine:\n  context_lines: 5\n", encoding="utf-8")
    monkeypatch.setenv("HOTPATCH_ATOMIC_WRITES", "off")
    monkeypatch.setenv("HOTPATCH_CONTEXT_LINES", "not-a-number")
    s = get_settings(cfg)
    assert s.patch_engine.atomic_writes is False
    assert s.patch_engine.context_lines == 5


def test_missing_explicit_file_is_an_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        get_settings(tmp_path / "nope.yml")


@pytest.mark.parametrize(
    "body",
    [
        "- a\n- b\n",
        "patch_engine: [1, 2]\n",
        "probes:\n  timeout: -1\n",
        "probes:\n  timeout: soon\n",
        "patch_engine:\n  encoding: ''\n",
        "patch_engine:\n  encoding: utf-9\n",
        "key: [unclosed\n",
    ],
)
def test_bad_settings_raise_config_error(tmp_path: Path, body: str):
    cfg = tmp_path / "settings.yml"
    cfg.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        get_settings(cfg)


def test_unknown_env_encoding_raises_config_error(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "settings.yml"
    cfg.write_text("patch_engine:\n  encoding: utf-8\n", encoding="utf-8")
    monkeypatch.setenv("HOTPATCH_ENCODING", "no-such-codec")
    with pytest.raises(ConfigError, match="HOTPATCH_ENCODING"):
        get_settings(cfg)


def test_read_yaml_missing_is_empty(tmp_path: Path):
    assert read_yaml(tmp_path / "absent.yml") == {}
