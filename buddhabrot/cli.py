from __future__ import annotations

import argparse
import logging
import subprocess
from typing import Optional

from buddhabrot.config import load_config, normalise_config
from buddhabrot.pipeline import render_buddhabrot, render_seed_mask
from buddhabrot.util.logging_setup import configure_root_logging, get_logger
from buddhabrot.util.manifest import build_manifest, write_manifest

def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="buddhabrot", description="Multi-threaded Buddhabrot renderer with edge-biased sampling.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="buddhabrot.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Sample the Buddhabrot and write the image.")
    r.add_argument("--output", type=str, default=None, help="Image path; .ppm writes plain PPM, other suffixes go through Pillow.")
    r.add_argument("--samples", type=int, default=None, help="Total sample budget across all workers.")
    r.add_argument("--workers", type=int, default=None, help="Number of sampling threads.")
    r.add_argument("--size", type=int, default=None, help="Grid side length.")
    r.add_argument("--seed", type=int, default=None, help="Base random seed.")
    r.add_argument("--colormap", type=str, default=None, help="Colormap name.")
    r.add_argument("--manifest", type=str, default="artifacts/run.json", help="Run manifest path. Set empty to skip.")
    r.add_argument("--no-progress", action="store_true", help="Hide the progress bar.")

    s = sub.add_parser("seeds", help="Write the edge-point selection mask as an image.")
    s.add_argument("--output", type=str, default="seeds.png", help="Image path.")
    s.add_argument("--size", type=int, default=None, help="Grid side length.")
    s.add_argument("--seed", type=int, default=None, help="Base random seed.")

    return p

def _apply_overrides(cfg: dict, args: argparse.Namespace) -> dict:
    for key in ("output", "samples", "workers", "size", "seed", "colormap"):
        value = getattr(args, key, None)
        if value is not None and not (args.cmd == "seeds" and key == "output"):
            cfg[key] = value
    return cfg

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    configure_root_logging(level=log_level, console=True, log_file=log_file)
    logger = get_logger()

    try:
        cfg = normalise_config(_apply_overrides(load_config(args.config), args))

        if args.cmd == "render":
            summary = render_buddhabrot(cfg, show_progress=not args.no_progress)
            if args.manifest:
                manifest = build_manifest(config=cfg, summary=summary, git_commit=_git_commit())
                write_manifest(args.manifest, manifest)
                logger.info("Run manifest written: %s", args.manifest)
            return 0

        if args.cmd == "seeds":
            render_seed_mask(cfg, args.output)
            return 0

        raise RuntimeError("Unknown command.")
    except ValueError as e:
        logger.error("%s", e)
        return 2
