import json

import pytest

from buddhabrot.config import DEFAULTS, load_config, normalise_config


def test_defaults_normalise():
    cfg = normalise_config(load_config(None))
    assert cfg["size"] == 4096
    assert cfg["workers"] >= 1
    assert cfg["point_radius"] == pytest.approx(2.0 / 4096)
    assert cfg["seed"] is None
    assert set(cfg) == set(DEFAULTS)


def test_load_config_merges_over_defaults(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"size": 256, "p_uniform": 0.25, "seed": 3}))
    cfg = normalise_config(load_config(str(path)))
    assert cfg["size"] == 256
    assert cfg["point_radius"] == pytest.approx(2.0 / 256)
    assert cfg["p_uniform"] == 0.25
    assert cfg["dilations"] == DEFAULTS["dilations"]


def test_load_config_requires_object(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(str(path))


@pytest.mark.parametrize(
    "override",
    [
        {"size": 0},
        {"workers": 0},
        {"samples": -1},
        {"dilations": -2},
        {"p_uniform": 1.01},
        {"point_radius": -0.5},
        {"escape": 16.0},
        {"progress_interval": 0},
        {"colour_map": "magma"},
    ],
)
def test_invalid_values(override):
    with pytest.raises(ValueError):
        normalise_config(override)


def test_explicit_radius_is_kept():
    cfg = normalise_config({"size": 64, "point_radius": 0.1, "workers": 3})
    assert cfg["point_radius"] == 0.1
    assert cfg["workers"] == 3
