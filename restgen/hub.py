from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_config
from .generators import generate_all
from .models import (
    ClassDescriptor,
    GeneratedArtifact,
    GenerationContext,
    LogFn,
    Message,
    RestGenError,
)
from .project import ProjectModel, WriteTransaction, find_project_root
from .resolver import resolve_class


MSG_NO_FILE = "No file selected"
MSG_NO_CLASS = "No class found in the selected file."
MSG_GENERATING = "Generating REST components for {name}"

PROJECT_DEFAULT = "(project default)"
TYPE_CHECKS = {"warn": False, "fail": True}


@dataclass
class RestGenConfig:
    source_file: Optional[Path]
    project_root: Optional[Path] = None
    source_roots: List[str] = field(default_factory=list)
    api_prefix: Optional[str] = None
    overwrite_policy: Optional[str] = None
    strict_types: Optional[bool] = None
    dry_run: bool = False


def form_config(
    source_file: str,
    project_root: str = "",
    api_prefix: str = "",
    overwrite_policy: str = PROJECT_DEFAULT,
    type_check: str = PROJECT_DEFAULT,
    dry_run: bool = False,
) -> RestGenConfig:
    """Build a run config from form values.

    A blank prefix and the ``PROJECT_DEFAULT`` choice leave the option unset,
    so the project config file and the defaults still apply.
    """
    return RestGenConfig(
        source_file=Path(source_file) if source_file else None,
        project_root=Path(project_root) if project_root else None,
        api_prefix=api_prefix.strip() or None,
        overwrite_policy=None if overwrite_policy == PROJECT_DEFAULT else overwrite_policy,
        strict_types=TYPE_CHECKS.get(type_check),
        dry_run=dry_run,
    )


@dataclass
class GenerationResult:
    return_code: int
    message: Message
    descriptor: Optional[ClassDescriptor] = None
    artifacts: List[GeneratedArtifact] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)


def _noop(line: str) -> None:
    return None


class RestGenHub:
    def settings(self, config: RestGenConfig, project_root: Path) -> Dict[str, Any]:
        cfg = load_config(project_root)
        if config.source_roots:
            cfg["source_roots"] = list(config.source_roots)
        if config.api_prefix is not None:
            cfg["api_prefix"] = config.api_prefix
        if config.overwrite_policy is not None:
            cfg["overwrite_policy"] = config.overwrite_policy
        if config.strict_types is not None:
            cfg["strict_types"] = config.strict_types
        return cfg

    def inspect(self, source_file: Optional[Path], on_line: Optional[LogFn] = None) -> Optional[ClassDescriptor]:
        return resolve_class(source_file, on_line=on_line)

    def run(self, config: RestGenConfig, on_line: Optional[LogFn] = None) -> GenerationResult:
        log = on_line or _noop

        src = config.source_file
        if src is None or not Path(src).is_file():
            log(f"[ERROR] {MSG_NO_FILE}")
            return GenerationResult(2, Message("error", "Error", MSG_NO_FILE))
        src = Path(src).resolve()

        desc = resolve_class(src, on_line=log)
        if desc is None:
            log(f"[ERROR] {MSG_NO_CLASS}")
            return GenerationResult(2, Message("error", "Error", MSG_NO_CLASS))

        root = (config.project_root or find_project_root(src)).resolve()
        settings = self.settings(config, root)

        unresolved = [f.name for f in desc.fields if f.unresolved]
        if unresolved and settings["strict_types"]:
            raise RestGenError(f"{desc.name}: undeclared field type(s): {', '.join(unresolved)}")

        project = ProjectModel.load(root, settings["source_roots"])
        base_dir = project.directory(src.parent).parent
        ctx = GenerationContext(
            base_package=project.package_name_of(base_dir),
            base_directory=base_dir,
            api_prefix=settings["api_prefix"],
        )

        log(f"[INFO] Class: {desc.qualified_name} ({desc.language}, {len(desc.fields)} field(s))")
        log(f"[INFO] Base package: {ctx.base_package or '(default)'}")
        if config.dry_run:
            log("[INFO] Dry run: nothing will be written")

        tx = WriteTransaction(
            base_dir,
            root=project.root,
            overwrite_policy=settings["overwrite_policy"],
            dry_run=config.dry_run,
            on_line=log,
        )
        with tx:
            for art in generate_all(desc, ctx):
                tx.add(art)

        message = Message("info", "In Progress", MSG_GENERATING.format(name=desc.name))
        log(f"[DONE] {message.text}")
        return GenerationResult(
            return_code=0,
            message=message,
            descriptor=desc,
            artifacts=list(tx.staged),
            written=list(tx.written),
            skipped=list(tx.skipped),
        )
