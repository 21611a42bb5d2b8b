import numpy as np
import pytest

from buddhabrot.sampling.bitmap import Bitmap
from buddhabrot.sampling.coords import complex_to_grid
from buddhabrot.sampling.morphology import (
    bitmap_or,
    collect_points,
    dilate,
    edge,
    invert,
    select_edges,
)


def _random_bitmap(size, seed, density=0.5):
    rng = np.random.default_rng(seed)
    return Bitmap.from_grid(rng.random((size, size)) < density)


def _single(size, x, y):
    grid = np.zeros((size, size), dtype=bool)
    grid[y, x] = True
    return Bitmap.from_grid(grid)


@pytest.mark.parametrize("size", [1, 2, 7, 16])
def test_edge_is_subset(size):
    for seed in range(5):
        b = _random_bitmap(size, seed)
        e = edge(b)
        assert not np.any(e.cells & ~b.cells)


@pytest.mark.parametrize("size", [1, 5, 32])
def test_edge_of_empty_is_empty(size):
    assert edge(Bitmap.empty(size)).count() == 0


def test_edge_of_full_grid_is_empty():
    """Cells outside the grid are absent, so a full grid has no edge."""
    full = invert(Bitmap.empty(6))
    assert edge(full).count() == 0


def test_edge_of_square_is_its_outline():
    grid = np.zeros((8, 8), dtype=bool)
    grid[2:6, 2:6] = True
    e = edge(Bitmap.from_grid(grid)).grid

    expected = grid.copy()
    expected[3:5, 3:5] = False
    np.testing.assert_array_equal(e, expected)


@pytest.mark.parametrize("size", [1, 3, 9, 16])
def test_dilate_is_superset(size):
    for seed in range(5):
        b = _random_bitmap(size, seed, density=0.2)
        d = dilate(b)
        assert not np.any(b.cells & ~d.cells)


def test_dilate_single_cell_is_a_plus():
    d = dilate(_single(5, 2, 2))
    assert d.count() == 5
    for x, y in [(2, 2), (1, 2), (3, 2), (2, 1), (2, 3)]:
        assert d[x, y]
    assert not d[1, 1]


def test_dilate_does_not_wrap_rows():
    d = dilate(_single(4, 0, 1))
    assert d.count() == 4
    assert not d[3, 0]
    assert not d[3, 1]


def test_invert_twice_is_identity():
    for size in (1, 4, 13):
        b = _random_bitmap(size, size)
        assert invert(invert(b)) == b
        assert invert(b) != b


def test_or_requires_equal_sizes():
    with pytest.raises(ValueError):
        bitmap_or(Bitmap.empty(4), Bitmap.empty(5))


def test_bitmap_is_read_only():
    b = _random_bitmap(4, 0)
    with pytest.raises(ValueError):
        b.cells[0] = True


def test_select_edges_without_dilation_brackets_boundary():
    b = _random_bitmap(16, 3)
    expected = bitmap_or(edge(b), edge(invert(b)))
    assert select_edges(b, 0) == expected


def test_select_edges_grows_with_dilations():
    yy, xx = np.mgrid[0:32, 0:32]
    disk = Bitmap.from_grid((xx - 16) ** 2 + (yy - 16) ** 2 < 36)

    previous = select_edges(disk, 0)
    for n in range(1, 4):
        current = select_edges(disk, n)
        assert not np.any(previous.cells & ~current.cells)
        assert current.count() > previous.count()
        previous = current


def test_select_edges_rejects_negative_dilations():
    with pytest.raises(ValueError):
        select_edges(Bitmap.empty(4), -1)


def test_collected_points_map_back_onto_selected_cells():
    b = _random_bitmap(32, 7, density=0.1)
    points = collect_points(b)

    assert points.shape == (b.count(), 2)
    xs = complex_to_grid(points[:, 0], b.size)
    ys = complex_to_grid(points[:, 1], b.size)
    assert all(b[x, y] for x, y in zip(xs, ys))
    # row-major order
    flat = ys * b.size + xs
    assert np.all(np.diff(flat) > 0)


def test_collect_points_of_empty_bitmap():
    points = collect_points(Bitmap.empty(8))
    assert points.shape == (0, 2)


def test_collect_points_uses_lattice_mapping():
    points = collect_points(_single(4, 1, 3))
    np.testing.assert_allclose(points, [[-1.0, 1.0]])
