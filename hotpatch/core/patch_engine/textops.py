from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple
import os
import shutil
import tempfile

from .errors import PatchFileNotFound, PatchIOError


def read_text_preserve(path: Path, encoding: str = "utf-8") -> str:
    """
    Read text preserving original newlines (no implicit translation).

    Decoding is strict: writing back a lossy decode would corrupt the file.
    """
    try:
        with path.open("r", encoding=encoding, newline="") as f:
            return f.read()
    except FileNotFoundError:
        raise PatchFileNotFound(f"file not found: {path}", path)
    except UnicodeDecodeError as e:
        raise PatchIOError(f"cannot decode {path} as {encoding}: {e.reason}", path)
    except LookupError:
        raise PatchIOError(f"unknown encoding {encoding!r} for {path}", path)
    except OSError as e:
        raise PatchIOError(f"cannot read {path}: {e.strerror or e}", path)


def write_text_preserve(path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Overwrite path in place, avoiding platform newline translation.
    """
    try:
        with path.open("w", encoding=encoding, newline="") as f:
            f.write(content)
    except (OSError, LookupError, UnicodeError) as e:
        raise PatchIOError(f"cannot write {path}: {getattr(e, 'strerror', None) or e}", path)


def write_text_atomic(path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write content to a temp file next to path, then rename it over path.

    Readers see either the old or the new content. The original file mode is
    carried over when the target already exists.
    """
    tmp: Optional[Path] = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        tmp = Path(tmp_name)
        try:
            f = os.fdopen(fd, "w", encoding=encoding, newline="")
        except Exception:
            os.close(fd)
            raise
        with f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except (OSError, LookupError, UnicodeError) as e:
        if tmp is not None:
            tmp.unlink(missing_ok=True)
        raise PatchIOError(f"cannot write {path}: {getattr(e, 'strerror', None) or e}", path)


def write_text(path: Path, content: str, *, encoding: str = "utf-8", atomic: bool = True) -> None:
    if atomic:
        write_text_atomic(path, content, encoding)
    else:
        write_text_preserve(path, content, encoding)


def split_at_last(content: str, anchor: str) -> Tuple[str, str] | None:
    """
    Split content at the start of the LAST occurrence of anchor.

    Returns (before, after) where `after` begins with the anchor, or None when
    the anchor does not occur.
    """
    idx = content.rfind(anchor)
    if idx == -1:
        return None
    return content[:idx], content[idx:]


def ends_with_newline(content: str) -> bool:
    return content.endswith("\n") or content.endswith("\r")
