import json
import os
from typing import Any, Dict, Optional

DEFAULTS: Dict[str, Any] = {
    "size": 4096,
    "orbit_max_iter": 20,
    "raster_max_iter": 1000,
    "dilations": 2,
    "workers": None,
    "samples": 100_000_000,
    "p_uniform": 0.5,
    "point_radius": None,
    "colormap": "magma",
    "vmin": None,
    "vmax": None,
    "output": "buddhabrot.ppm",
    "seed": None,
    "progress_interval": 0.1,
    "progress_stride": 1000,
    "bailout": 8.0,
    "escape": 4.0,
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    cfg = dict(DEFAULTS)
    if not config_path:
        return cfg

    with open(config_path, "r", encoding="utf-8") as f:
        user = json.load(f)
    if not isinstance(user, dict):
        raise ValueError("Config JSON must be an object.")
    cfg.update(user)
    return cfg

def _optional_float(v: Any) -> Optional[float]:
    return None if v is None else float(v)

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(cfg) - set(DEFAULTS))
    if unknown:
        raise ValueError(f"Unknown config field(s): {', '.join(unknown)}")

    out = dict(DEFAULTS)
    out.update(cfg)

    out["size"] = int(out["size"])
    out["orbit_max_iter"] = int(out["orbit_max_iter"])
    out["raster_max_iter"] = int(out["raster_max_iter"])
    out["dilations"] = int(out["dilations"])
    out["workers"] = int(out["workers"]) if out["workers"] is not None else (os.cpu_count() or 1)
    out["samples"] = int(out["samples"])
    out["progress_stride"] = int(out["progress_stride"])
    if out["size"] <= 0 or out["orbit_max_iter"] <= 0 or out["workers"] <= 0 or out["progress_stride"] <= 0:
        raise ValueError("size/orbit_max_iter/workers/progress_stride must be positive.")
    if out["raster_max_iter"] < 0 or out["dilations"] < 0 or out["samples"] < 0:
        raise ValueError("raster_max_iter/dilations/samples must not be negative.")

    out["p_uniform"] = float(out["p_uniform"])
    if not 0.0 <= out["p_uniform"] <= 1.0:
        raise ValueError("p_uniform must be within [0, 1].")

    if out["point_radius"] is None:
        out["point_radius"] = 2.0 / out["size"]
    out["point_radius"] = float(out["point_radius"])
    if out["point_radius"] < 0:
        raise ValueError("point_radius must not be negative.")

    out["bailout"] = float(out["bailout"])
    out["escape"] = float(out["escape"])
    if out["escape"] > out["bailout"]:
        raise ValueError("escape must not exceed bailout.")

    out["progress_interval"] = float(out["progress_interval"])
    if out["progress_interval"] <= 0:
        raise ValueError("progress_interval must be positive.")

    out["vmin"] = _optional_float(out["vmin"])
    out["vmax"] = _optional_float(out["vmax"])
    out["colormap"] = str(out["colormap"])
    out["output"] = str(out["output"])
    out["seed"] = int(out["seed"]) if out["seed"] is not None else None
    return out
