from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import GeneratedArtifact, LogFn, RestGenError


# ---------------- constants ----------------

EXCLUDE_DIRS = {
    ".restgen",
    ".git", ".idea", ".vscode",
    "target", "build", "out", ".gradle",
    "node_modules", "__pycache__", ".mvn",
}

BUILD_FILES = ("pom.xml", "build.gradle", "build.gradle.kts")

STANDARD_SOURCE_ROOTS = (
    "src/main/java",
    "src/main/kotlin",
    "src/test/java",
    "src/test/kotlin",
)

OVERWRITE_POLICIES = ("error", "skip", "overwrite")

# ---------------- tiny utils ----------------

def read_text(pth: Path) -> str:
    return pth.read_text(encoding="utf-8", errors="replace")

def relpath(pth: Path, root: Path) -> str:
    try:
        return str(pth.relative_to(root))
    except ValueError:
        return str(pth)

def split_segments(path: str) -> List[str]:
    return [x for x in path.replace("\\", "/").split("/") if x]

# ---------------- directory handle ----------------

@dataclass(frozen=True)
class Directory:
    path: Path

    @property
    def parent(self) -> Optional["Directory"]:
        par = self.path.parent
        if par == self.path:
            return None
        return Directory(par)

    def find_subdirectory(self, name: str) -> Optional["Directory"]:
        cand = self.path / name
        if cand.is_dir():
            return Directory(cand)
        return None

    def create_subdirectory(self, name: str) -> "Directory":
        cand = self.path / name
        try:
            cand.mkdir()
        except OSError as e:
            raise RestGenError(f"Cannot create directory {cand}: {e}") from e
        return Directory(cand)

    def insert_text_file(self, file_name: str, content: str, overwrite: bool = False) -> Path:
        target = self.path / file_name
        if target.exists() and not overwrite:
            raise RestGenError(f"File already exists: {target}")
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise RestGenError(f"Cannot write {target}: {e}") from e
        return target

# ---------------- package / path resolution ----------------

def package_name_of(directory: Optional[Directory], source_roots: Iterable[Path]) -> str:
    """Dotted package of ``directory`` relative to its nearest source root.

    Returns an empty string when the directory is missing, is a source root
    itself, or lies outside every root.
    """
    if directory is None:
        return ""
    best: Optional[Path] = None
    for root in source_roots:
        try:
            directory.path.relative_to(root)
        except ValueError:
            continue
        if best is None or len(root.parts) > len(best.parts):
            best = root
    if best is None:
        return ""
    return ".".join(directory.path.relative_to(best).parts)

def ensure_subdirectories(base: Optional[Directory], path: str) -> Optional[Directory]:
    current = base
    for name in split_segments(path):
        if current is None:
            return None
        current = current.find_subdirectory(name) or current.create_subdirectory(name)
    return current

def find_project_root(start: Path) -> Path:
    here = start if start.is_dir() else start.parent
    for cand in [here, *here.parents]:
        if any((cand / b).exists() for b in BUILD_FILES):
            return cand
    return here

def detect_source_roots(project_root: Path) -> List[Path]:
    found: List[Path] = []
    for rel in STANDARD_SOURCE_ROOTS:
        for pth in sorted(project_root.rglob(rel)):
            if not pth.is_dir():
                continue
            if any(x in EXCLUDE_DIRS for x in pth.relative_to(project_root).parts):
                continue
            found.append(pth.resolve())
    return found

# ---------------- project model ----------------

@dataclass(frozen=True)
class ProjectModel:
    root: Path
    source_roots: Tuple[Path, ...]

    @classmethod
    def load(cls, root: Path, source_roots: Optional[Sequence[str]] = None) -> "ProjectModel":
        root = root.resolve()
        if source_roots:
            roots = [(root / r).resolve() for r in source_roots]
        else:
            roots = detect_source_roots(root)
        return cls(root=root, source_roots=tuple(roots))

    def directory(self, path: Path) -> Directory:
        return Directory(path.resolve())

    def package_name_of(self, directory: Optional[Directory]) -> str:
        return package_name_of(directory, self.source_roots)

# ---------------- write transaction ----------------

class WriteTransaction:
    """Buffers generated artifacts and writes them to disk in one commit.

    Nothing is written until ``commit``; a commit that fails part-way
    removes the files it created, restores the ones it replaced and drops
    directories it created if they are left empty.
    """

    def __init__(
        self,
        base: Optional[Directory],
        *,
        root: Optional[Path] = None,
        overwrite_policy: str = "error",
        dry_run: bool = False,
        on_line: Optional[LogFn] = None,
    ) -> None:
        if overwrite_policy not in OVERWRITE_POLICIES:
            raise RestGenError(f"Unknown overwrite policy: {overwrite_policy}")
        self.base = base
        self.root = root or (base.path if base else Path("."))
        self.overwrite_policy = overwrite_policy
        self.dry_run = dry_run
        self.on_line = on_line
        self.staged: List[GeneratedArtifact] = []
        self.written: List[Path] = []
        self.skipped: List[Path] = []
        self.committed = False
        self._replaced: Dict[Path, bytes] = {}

    def __enter__(self) -> "WriteTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self._log(f"[WARN] Discarded {len(self.staged)} staged file(s)")
            self.staged.clear()
        return False

    def _log(self, line: str) -> None:
        if self.on_line:
            self.on_line(line)

    def add(self, artifact: GeneratedArtifact) -> None:
        if self.committed:
            raise RestGenError("Transaction already committed.")
        self.staged.append(artifact)

    def target_path(self, artifact: GeneratedArtifact) -> Path:
        if self.base is None:
            raise RestGenError("No base directory to generate into.")
        return self.base.path.joinpath(*split_segments(artifact.relative_path), artifact.file_name)

    def _missing_dirs(self) -> List[Path]:
        out: List[Path] = []
        for art in self.staged:
            cur = self.base.path
            for seg in split_segments(art.relative_path):
                cur = cur / seg
                if not cur.exists() and cur not in out:
                    out.append(cur)
        return out

    def commit(self) -> List[Path]:
        if self.committed:
            raise RestGenError("Transaction already committed.")
        plan = [(art, self.target_path(art)) for art in self.staged]

        existing = [t for _, t in plan if t.exists()]
        if existing and self.overwrite_policy == "error":
            names = ", ".join(relpath(t, self.root) for t in existing)
            raise RestGenError(f"Refusing to overwrite existing file(s): {names}")

        if self.dry_run:
            for _, target in plan:
                self._log(f"[DRY] {relpath(target, self.root)}")
            self.committed = True
            return []

        new_dirs = self._missing_dirs()
        try:
            for art, target in plan:
                if target.exists():
                    if self.overwrite_policy == "skip":
                        self.skipped.append(target)
                        self._log(f"[WARN] Skipped existing {relpath(target, self.root)}")
                        continue
                    self._replaced[target] = target.read_bytes()
                directory = ensure_subdirectories(self.base, art.relative_path)
                if directory is None:
                    raise RestGenError(f"Cannot resolve directory {art.relative_path}")
                written = directory.insert_text_file(
                    art.file_name, art.content, overwrite=(self.overwrite_policy == "overwrite")
                )
                self.written.append(written)
                self._log(f"[OK] {relpath(written, self.root)}")
        except Exception:
            self._rollback(new_dirs)
            raise

        self.committed = True
        return list(self.written)

    def _rollback(self, new_dirs: List[Path]) -> None:
        for pth in reversed(self.written):
            if pth in self._replaced:
                pth.write_bytes(self._replaced[pth])
            elif pth.exists():
                pth.unlink()
        for d in reversed(new_dirs):
            if d.is_dir() and not any(d.iterdir()):
                d.rmdir()
        self._log(f"[WARN] Rolled back {len(self.written)} file(s)")
        self.written.clear()
