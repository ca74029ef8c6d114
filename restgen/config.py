from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .project import OVERWRITE_POLICIES, read_text


CONFIG_DIR = ".restgen"
CONFIG_FILE = "config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "source_roots": [],
    "api_prefix": "/api",
    "overwrite_policy": "error",
    "strict_types": False,
}


def config_path(project_root: Path) -> Path:
    return project_root / CONFIG_DIR / CONFIG_FILE


def load_config(project_root: Path) -> Dict[str, Any]:
    """Read ``.restgen/config.json`` merged over the defaults.

    A missing or malformed file yields the defaults; unknown keys and
    values of the wrong shape are ignored.
    """
    cfg = dict(DEFAULT_CONFIG)
    pth = config_path(project_root)
    if not pth.exists():
        return cfg
    try:
        data = json.loads(read_text(pth))
    except (OSError, ValueError):
        return cfg
    if not isinstance(data, dict):
        return cfg

    roots = data.get("source_roots")
    if isinstance(roots, list):
        cfg["source_roots"] = [str(r) for r in roots if str(r).strip()]
    prefix = data.get("api_prefix")
    if isinstance(prefix, str):
        cfg["api_prefix"] = prefix
    policy = data.get("overwrite_policy")
    if policy in OVERWRITE_POLICIES:
        cfg["overwrite_policy"] = policy
    strict = data.get("strict_types")
    if isinstance(strict, bool):
        cfg["strict_types"] = strict
    return cfg
