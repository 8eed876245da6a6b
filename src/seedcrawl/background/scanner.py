from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42
MIN_LINES = 60
MAX_FILES = 5

SKIP_DIRS = frozenset({"node_modules", "vendor", "dist", "build"})

CODE_EXTENSIONS = frozenset(
    {
        ".go", ".js", ".ts", ".tsx", ".jsx", ".py", ".rb", ".rs", ".c", ".cpp", ".cc", ".h", ".hpp",
        ".java", ".cs", ".swift", ".kt", ".scala", ".php", ".pl", ".sh", ".bash", ".zsh", ".lua",
        ".r", ".m", ".mm", ".zig", ".nim", ".ex", ".exs", ".erl", ".hs", ".ml", ".fs", ".clj",
        ".lisp", ".el", ".vim",
    }
)


@dataclass(frozen=True)
class CodeFile:
    """A source file chosen as seed material. Only identity is kept, never content."""

    path: Path
    line_count: int
    sha: bytes

    @property
    def hexdigest(self) -> str:
        return self.sha.hex()


def _split_lines(data: bytes) -> List[bytes]:
    lines = data.split(b"\n")
    if lines and lines[-1] == b"":
        lines.pop()
    return [ln[:-1] if ln.endswith(b"\r") else ln for ln in lines]


def read_code_file(path: Path) -> CodeFile:
    """Count lines and hash them joined by newlines, so line-ending style does not change the digest."""
    lines = _split_lines(path.read_bytes())
    digest = hashlib.sha256(b"\n".join(lines)).digest()
    return CodeFile(path=path, line_count=len(lines), sha=digest)


def _walk(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk never descends into skipped directories.
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d not in SKIP_DIRS)
        for name in sorted(filenames):
            yield Path(dirpath) / name


def find_code_files(
    root: os.PathLike | str,
    min_lines: int = MIN_LINES,
    max_files: int = MAX_FILES,
    extensions: Optional[Iterable[str]] = None,
) -> List[CodeFile]:
    """
    Collect the longest source files under ``root``.

    Hidden directories and dependency/build output are skipped. Files that
    cannot be read are logged and ignored. The result is ordered by line count,
    longest first, with the path breaking ties.
    """
    exts = frozenset(e.lower() for e in extensions) if extensions is not None else CODE_EXTENSIONS
    root_path = Path(root)
    if not root_path.is_dir():
        logger.warning("Scan root %s is not a directory", root_path)
        return []

    candidates: List[CodeFile] = []
    for path in _walk(root_path):
        if path.suffix.lower() not in exts:
            continue
        try:
            cf = read_code_file(path)
        except OSError as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            continue
        if cf.line_count >= min_lines:
            candidates.append(cf)

    candidates.sort(key=lambda c: (-c.line_count, str(c.path)))
    chosen = candidates[:max_files]
    logger.debug("Scanned %s: %d candidates, kept %d", root_path, len(candidates), len(chosen))
    return chosen


def compute_seed(files: Sequence[CodeFile]) -> int:
    """Fold the files' digests into a signed 64-bit seed; no files means the default seed."""
    if not files:
        return DEFAULT_SEED
    h = hashlib.sha256()
    for f in files:
        h.update(f.sha)
    return int.from_bytes(h.digest()[:8], "big", signed=True)
