# hotpatch/core/patch_engine/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
import codecs
import os


_FALSY = {"0", "false", "off", "no"}


def _checked_encoding(name: str, source: str) -> str:
    try:
        codecs.lookup(name)
    except LookupError:
        raise ValueError(f"{source}: unknown encoding {name!r}")
    return name


@dataclass
class PatchEngineConfig:
    """
    Knobs for the text patcher.

    Fields:
      - encoding: text encoding used to read and write target files.
      - atomic_writes: write through a temp file + rename so readers never see
        a partially written file. When False, files are overwritten in place.
      - context_lines: lines of context in dry-run diff previews.
    """
    encoding: str = "utf-8"
    atomic_writes: bool = True
    context_lines: int = 3

    @classmethod
    def defaults(cls) -> "PatchEngineConfig":
        return cls()

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "PatchEngineConfig":
        """Build from the `patch_engine:` section of the settings YAML."""
        data = data or {}
        base = cls()
        encoding = data.get("encoding", base.encoding)
        if not isinstance(encoding, str) or not encoding.strip():
            raise ValueError("patch_engine.encoding must be a non-empty string")
        try:
            context_lines = int(data.get("context_lines", base.context_lines))
        except (TypeError, ValueError):
            raise ValueError("patch_engine.context_lines must be an integer")
        return cls(
            encoding=_checked_encoding(encoding.strip(), "patch_engine.encoding"),
            atomic_writes=bool(data.get("atomic_writes", base.atomic_writes)),
            context_lines=max(0, context_lines),
        )

    def with_env(self) -> "PatchEngineConfig":
        """Apply lightweight overrides from HOTPATCH_* env vars on top of self."""
        def _int(name: str, default: int) -> int:
            try:
                return int(os.environ.get(name, "").strip() or default)
            except ValueError:
                return default

        atomic_raw = os.environ.get("HOTPATCH_ATOMIC_WRITES")
        return PatchEngineConfig(
            encoding=_checked_encoding(os.environ.get("HOTPATCH_ENCODING", "").strip() or self.encoding, "HOTPATCH_ENCODING"),
            atomic_writes=self.atomic_writes if atomic_raw is None else atomic_raw.strip().lower() not in _FALSY,
            context_lines=max(0, _int("HOTPATCH_CONTEXT_LINES", self.context_lines)),
        )

    @classmethod
    def from_env(cls) -> "PatchEngineConfig":
        return cls().with_env()


__all__ = ["PatchEngineConfig"]
