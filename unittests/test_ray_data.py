import pytest
import numpy as np

from watertight.intersects import RayData


@pytest.mark.parametrize(
    "direction",
    [
        (1, 0, 0), (0, 1, 0), (0, 0, 1),
        (-1, 0, 0), (0, -1, 0), (0, 0, -1),
        (1, 1, 1), (2, 2, 1), (1e-12, 3, -3), (0.3, -0.2, 0.1),
    ]
)
def test_permutation_is_cyclic(direction):
    ray = RayData((0, 0, 0), direction)
    assert {ray.kx, ray.ky, ray.kz} == {0, 1, 2}
    assert ray.kx == (ray.kz + 1) % 3
    assert ray.ky == (ray.kz + 2) % 3


def test_random_directions_give_valid_permutation():
    rng = np.random.default_rng(1)
    for direction in rng.standard_normal((500, 3)):
        ray = RayData((0, 0, 0), direction)
        assert sorted((ray.kx, ray.ky, ray.kz)) == [0, 1, 2]
        assert abs(direction[ray.kz]) == np.max(np.abs(direction))


def test_shear_coefficients():
    ray = RayData((1, 2, 3), (1, -2, 4))
    assert (ray.kx, ray.ky, ray.kz) == (0, 1, 2)
    assert ray.sx == 0.25
    assert ray.sy == -0.5
    assert ray.sz == 0.25


def test_no_winding_swap_for_negative_direction():
    ray = RayData((0, 0, 0), (0, 0, -2))
    assert (ray.kx, ray.ky, ray.kz) == (0, 1, 2)
    assert ray.sz == -0.5


def test_origin_is_copied():
    origin = np.array([1.0, 2.0, 3.0])
    direction = np.array([0.0, 0.0, 1.0])
    ray = RayData(origin, direction)

    origin[:] = 100.0
    direction[:] = 5.0

    assert np.array_equal(ray.origin, [1.0, 2.0, 3.0])
    assert np.array_equal(ray.direction, [0.0, 0.0, 1.0])


def test_is_read_only():
    ray = RayData((0, 0, 0), (0, 0, 1))
    with pytest.raises(AttributeError):
        ray.kz = 0
    with pytest.raises(AttributeError):
        ray.sx = 1.0
    with pytest.raises(ValueError):
        ray.origin[0] = 1.0


def test_zero_direction_is_unchecked():
    ray = RayData((0, 0, 0), (0, 0, 0))
    assert ray.kz == 2
    assert not np.isfinite(ray.sz)
    assert np.isnan(ray.sx)
    assert np.isnan(ray.sy)


@pytest.mark.parametrize("dtype", [np.float32, np.float64])
def test_dtype_is_preserved(dtype):
    ray = RayData(np.zeros(3, dtype=dtype), np.array([0, 0, 3], dtype=dtype))
    assert ray.dtype == dtype
    assert isinstance(ray.sz, dtype)
    assert isinstance(ray.sx, dtype)


def test_integer_input_is_promoted():
    ray = RayData([0, 0, 0], [0, 0, 3])
    assert ray.dtype == np.float64
    assert ray.sz == 1 / 3


def test_point_at():
    ray = RayData((1, 0, -5), (0, 0, 2))
    assert np.allclose(ray.point_at(2.5), [1, 0, 0])
