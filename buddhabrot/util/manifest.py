import json
import os
import platform
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import importlib.metadata as importlib_metadata

STACK_PACKAGES = ("numpy", "numba", "Pillow", "matplotlib", "tqdm")

@dataclass(frozen=True)
class RunManifest:
    started_utc: str
    config: Dict[str, Any]
    summary: Dict[str, Any]
    python: Dict[str, Any]
    packages: Dict[str, str]
    git: Dict[str, Any]
    system: Dict[str, Any]

def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def _safe_pkg_version(name: str) -> Optional[str]:
    try:
        return importlib_metadata.version(name)
    except importlib_metadata.PackageNotFoundError:
        return None

def build_manifest(*, config: Dict[str, Any], summary: Dict[str, Any], git_commit: Optional[str]) -> RunManifest:
    pkgs = {}
    for name in STACK_PACKAGES:
        v = _safe_pkg_version(name)
        if v:
            pkgs[name] = v

    return RunManifest(
        started_utc=_utc_iso(),
        config=config,
        summary=summary,
        python={"version": sys.version, "executable": sys.executable},
        packages=pkgs,
        git={"commit": git_commit},
        system={"platform": platform.platform(), "machine": platform.machine(), "cpu_count": os.cpu_count()},
    )

def write_manifest(path: str, manifest: RunManifest) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(manifest), f, indent=2, sort_keys=True, default=str)
