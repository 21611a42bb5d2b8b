from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from buddhabrot.output.colormap import colorize, get_colormap
from buddhabrot.output.image_writer import write_image
from buddhabrot.sampling.aggregate import merge_histograms
from buddhabrot.sampling.bitmap import Bitmap
from buddhabrot.sampling.morphology import find_good_points, select_edges
from buddhabrot.sampling.orbits import OrbitSampler
from buddhabrot.sampling.rasterizer import binary_mandelbrot
from buddhabrot.util.logging_setup import get_logger

def split_samples(total: int, workers: int) -> List[int]:
    if workers < 1:
        raise ValueError("workers must be >= 1")
    base, rem = divmod(total, workers)
    return [base + 1 if i < rem else base for i in range(workers)]

def _seeds(seed: Optional[int], n: int) -> Tuple[int, List[int]]:
    ss = np.random.SeedSequence(seed)
    raster_seed = int(ss.generate_state(1)[0])
    worker_seeds = [int(child.generate_state(1)[0]) for child in ss.spawn(n)]
    return raster_seed, worker_seeds

def run_samplers(
    samplers: Sequence[OrbitSampler],
    counts: Sequence[int],
    *,
    poll_interval: float = 0.1,
    show_progress: bool = True,
) -> List[int]:
    """Run each sampler on its own thread and poll their progress until all samples are drawn.

    Returns the per-sampler visit counts. The executor is left (all threads
    joined) before this returns, so the samplers' histograms are stable.
    """
    if not samplers:
        raise ValueError("run_samplers needs at least one sampler")
    if len(samplers) != len(counts):
        raise ValueError("one sample count per sampler is required")

    logger = get_logger()
    total = int(sum(counts))
    start = time.monotonic()

    with ThreadPoolExecutor(max_workers=len(samplers), thread_name_prefix="sampler") as pool:
        futures = [pool.submit(s.sample, int(n)) for s, n in zip(samplers, counts)]

        with tqdm(total=total, desc="Sampling", unit="pt", unit_scale=True, disable=not show_progress) as bar:
            shown = 0
            while shown < total:
                finished = all(f.done() for f in futures)
                current = sum(s.progress for s in samplers)
                if current > shown:
                    bar.update(current - shown)
                    shown = current
                if finished:
                    break
                time.sleep(poll_interval)

        visits = [f.result() for f in futures]

    logger.info("Sampling done: %s samples on %s workers in %.2fs", total, len(samplers), time.monotonic() - start)
    return visits

def sample_histogram(
    cfg: Dict[str, Any],
    good_points: Optional[np.ndarray],
    *,
    worker_seeds: Sequence[int],
    show_progress: bool = True,
) -> Tuple[np.ndarray, int]:
    logger = get_logger()
    workers = int(cfg["workers"])
    counts = split_samples(int(cfg["samples"]), workers)

    samplers = [
        OrbitSampler(
            size=int(cfg["size"]),
            max_iter=int(cfg["orbit_max_iter"]),
            p_uniform=float(cfg["p_uniform"]),
            good_points=good_points,
            radius=float(cfg["point_radius"]),
            seed=worker_seeds[i],
            bailout=float(cfg["bailout"]),
            escape=float(cfg["escape"]),
            progress_stride=int(cfg["progress_stride"]),
        )
        for i in range(workers)
    ]

    visits = run_samplers(samplers, counts, poll_interval=float(cfg["progress_interval"]), show_progress=show_progress)

    logger.info("Merging %s worker histograms", workers)
    histogram = merge_histograms(s.counts for s in samplers)
    return histogram, int(sum(visits))

def render_buddhabrot(cfg: Dict[str, Any], *, show_progress: bool = True) -> Dict[str, Any]:
    logger = get_logger()
    started = time.monotonic()

    # fail before any sampling if the colormap is unusable
    cmap = get_colormap(cfg["colormap"])

    logger.info(
        "Render start size=%s samples=%s workers=%s p_uniform=%s orbit_max_iter=%s",
        cfg["size"], cfg["samples"], cfg["workers"], cfg["p_uniform"], cfg["orbit_max_iter"],
    )

    raster_seed, worker_seeds = _seeds(cfg["seed"], int(cfg["workers"]))

    if cfg["p_uniform"] >= 1.0:
        logger.info("p_uniform is 1, skipping edge point selection")
        good_points = np.empty((0, 2), dtype=np.float64)
    else:
        good_points = find_good_points(int(cfg["size"]), int(cfg["raster_max_iter"]), int(cfg["dilations"]), seed=raster_seed)
    selected = time.monotonic()

    histogram, visits = sample_histogram(cfg, good_points, worker_seeds=worker_seeds, show_progress=show_progress)
    sampled = time.monotonic()

    rgb = colorize(histogram, cmap, vmin=cfg["vmin"], vmax=cfg["vmax"])
    path = write_image(cfg["output"], rgb)

    summary = {
        "output": path,
        "good_points": int(good_points.shape[0]),
        "visits": visits,
        "histogram_total": int(histogram.sum()),
        "histogram_max": int(histogram.max()),
        "seconds_selecting": round(selected - started, 3),
        "seconds_sampling": round(sampled - selected, 3),
        "seconds_total": round(time.monotonic() - started, 3),
    }
    logger.info("Render complete %s", summary)
    return summary

def render_seed_mask(cfg: Dict[str, Any], output: str) -> Dict[str, Any]:
    """Write the edge selector's output as a black/white image."""
    logger = get_logger()
    raster_seed, _ = _seeds(cfg["seed"], 1)
    mandel = binary_mandelbrot(int(cfg["size"]), int(cfg["raster_max_iter"]), seed=raster_seed)
    selected: Bitmap = select_edges(mandel, int(cfg["dilations"]))

    gray = np.where(selected.grid, 255, 0).astype(np.uint8)
    path = write_image(output, np.repeat(gray[:, :, None], 3, axis=2))
    logger.info("Seed mask: %s of %s cells selected", selected.count(), selected.size * selected.size)
    return {"output": path, "selected": selected.count(), "inside": mandel.count()}
