import json

from buddhabrot.cli import main


def _write_config(tmp_path, **kw):
    cfg = {
        "size": 32,
        "orbit_max_iter": 25,
        "raster_max_iter": 25,
        "dilations": 1,
        "workers": 2,
        "samples": 3000,
        "seed": 1,
        "progress_interval": 0.01,
    }
    cfg.update(kw)
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps(cfg))
    return str(path)


def test_render_command(tmp_path):
    out = tmp_path / "out.ppm"
    manifest = tmp_path / "artifacts" / "run.json"
    rc = main([
        "--log-file", "", "--config", _write_config(tmp_path),
        "render", "--output", str(out), "--manifest", str(manifest), "--no-progress",
    ])

    assert rc == 0
    assert out.read_text().startswith("P3\n32 32\n255\n")
    data = json.loads(manifest.read_text())
    assert data["config"]["size"] == 32
    assert data["summary"]["histogram_total"] == 2 * data["summary"]["visits"]
    assert "numpy" in data["packages"]


def test_render_overrides(tmp_path):
    out = tmp_path / "small.png"
    rc = main([
        "--log-file", "", "--config", _write_config(tmp_path),
        "render", "--output", str(out), "--size", "16", "--samples", "500",
        "--workers", "1", "--manifest", "", "--no-progress",
    ])
    assert rc == 0
    assert out.exists()


def test_unknown_colormap_exits_with_error(tmp_path):
    out = tmp_path / "out.ppm"
    rc = main([
        "--log-file", "", "--config", _write_config(tmp_path, colormap="nope"),
        "render", "--output", str(out), "--manifest", "", "--no-progress",
    ])
    assert rc == 2
    assert not out.exists()


def test_seeds_command(tmp_path):
    out = tmp_path / "seeds.png"
    rc = main(["--log-file", "", "--config", _write_config(tmp_path), "seeds", "--output", str(out)])
    assert rc == 0
    assert out.exists()
