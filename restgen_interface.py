#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
restgen command line.

Generate a Spring Boot REST slice (repository, DTO, request models, mapper,
service, controller) from one Java or Kotlin data class:

  restgen generate src/main/java/com/app/domain/Order.java
  restgen generate Order.kt --dry-run --overwrite-policy skip
  restgen inspect src/main/java/com/app/domain/Order.java
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from restgen import RestGenConfig, RestGenError, RestGenHub
from restgen.project import OVERWRITE_POLICIES
from restgen.hub import MSG_NO_CLASS, MSG_NO_FILE


console = Console()


def _log(line: str) -> None:
    console.print(line, markup=False, highlight=False)


def _resolve_root(raw: Optional[str]) -> Optional[Path]:
    if not raw:
        return None
    root = Path(raw).expanduser().resolve()
    if not root.is_dir():
        raise SystemExit(f"Project root not found: {root}")
    return root


def _source_file(raw: Optional[str]) -> Optional[Path]:
    return Path(raw).expanduser() if raw else None


def run_generate(args: argparse.Namespace, hub: RestGenHub) -> int:
    config = RestGenConfig(
        source_file=_source_file(args.file),
        project_root=_resolve_root(args.root),
        source_roots=list(args.source_root or []),
        api_prefix=args.api_prefix,
        overwrite_policy=args.overwrite_policy,
        strict_types=True if args.strict_types else None,
        dry_run=args.dry_run,
    )
    try:
        result = hub.run(config, on_line=_log)
    except RestGenError as e:
        _log(f"[ERROR] {e}")
        return 1

    if result.return_code == 0 and result.artifacts:
        show_artifacts(result.artifacts, dry_run=args.dry_run)
    return result.return_code


def run_inspect(args: argparse.Namespace, hub: RestGenHub) -> int:
    src = _source_file(args.file)
    if src is None or not src.is_file():
        _log(f"[ERROR] {MSG_NO_FILE}")
        return 2
    desc = hub.inspect(src, on_line=_log)
    if desc is None:
        _log(f"[ERROR] {MSG_NO_CLASS}")
        return 2

    t = Table(title=f"{desc.qualified_name} ({desc.language})")
    t.add_column("#", justify="right")
    t.add_column("Field")
    t.add_column("Type")
    for i, f in enumerate(desc.fields, start=1):
        t.add_row(str(i), f.name, f.type_text)
    console.print(t)
    return 0


def show_artifacts(artifacts, dry_run: bool) -> None:
    t = Table(title="Planned files" if dry_run else "Generated files")
    t.add_column("Package")
    t.add_column("File")
    for a in artifacts:
        t.add_row(a.package, f"{a.relative_path}/{a.file_name}")
    console.print(t)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Spring Boot REST slice generator")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate REST components for a class")
    gen.add_argument("file", nargs="?", help="Java or Kotlin source file holding the class")
    gen.add_argument("--root", help="Project root (default: nearest dir with pom.xml/build.gradle)")
    gen.add_argument("--source-root", action="append",
                     help="Source root relative to the project root (repeatable)")
    gen.add_argument("--api-prefix", default=None, help="Route prefix (default: /api)")
    gen.add_argument("--overwrite-policy", default=None, choices=list(OVERWRITE_POLICIES))
    gen.add_argument("--strict-types", action="store_true",
                     help="Fail when a field has no declared type")
    gen.add_argument("--dry-run", action="store_true", help="Do not write files")

    insp = sub.add_parser("inspect", help="Show the class and fields that would be used")
    insp.add_argument("file", nargs="?", help="Java or Kotlin source file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    hub = RestGenHub()

    if args.command == "generate":
        return run_generate(args, hub)
    if args.command == "inspect":
        return run_inspect(args, hub)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
