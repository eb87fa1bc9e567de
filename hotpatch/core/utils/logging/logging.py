from __future__ import annotations

import sys
from typing import Optional, TextIO


def _one_line(s: str, max_len: int = 160) -> str:
    s = " ".join((s or "").split())
    return s[:max_len] + ("…" if len(s) > max_len else "")


class ConsoleLog:
    def __init__(self, tag: str, stream: Optional[TextIO] = None):
        self.tag = tag
        self.stream = stream

    def _emit(self, emoji: str, msg: str) -> None:
        print(f"[{self.tag} {emoji}] {_one_line(msg)}", file=self.stream or sys.stdout)

    def info(self, msg: str):
        self._emit("✅", msg)

    def warn(self, msg: str):
        self._emit("⚠️", msg)

    def error(self, msg: str):
        self._emit("❌", msg)

    def stage(self, emoji: str, msg: str):
        self._emit(emoji, msg)

    def block(self, text: str):
        """Print multi-line text (diffs) verbatim."""
        out = self.stream or sys.stdout
        out.write(text if text.endswith("\n") else text + "\n")
