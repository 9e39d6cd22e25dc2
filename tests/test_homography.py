import numpy as np
import pytest
from skimage.transform import estimate_transform

from src.geometry.errors import DegenerateGeometryError, InvalidInputError
from src.geometry.homography import (
    DENOMINATOR_EPS,
    OUT_OF_RANGE,
    apply_homography,
    apply_homography_array,
    compute_homography,
    normalize_homography,
)
from src.geometry.points import Point2D

SRC = [(0, 0), (100, 0), (100, 80), (0, 80)]
KEYSTONE = [(20, 5), (85, 0), (110, 90), (-5, 70)]


def random_quad(rng):
    return (np.array(SRC, dtype=float) + rng.uniform(-15, 15, size=(4, 2))).tolist()


def test_bottom_right_entry_is_one():
    H = compute_homography(SRC, KEYSTONE)
    assert H.shape == (3, 3)
    assert H[2, 2] == 1.0


def test_identity_correspondence_gives_identity():
    H = compute_homography(SRC, SRC)
    assert np.allclose(H, np.eye(3), atol=1e-12)


def test_maps_corners_onto_destination():
    rng = np.random.default_rng(0)
    for _ in range(20):
        dst = random_quad(rng)
        H = compute_homography(SRC, dst)
        for s, d in zip(SRC, dst):
            p = apply_homography(H, s)
            assert np.allclose(p, d, rtol=1e-6, atol=1e-6)


def test_inverse_from_swapped_corners_round_trips():
    H = compute_homography(SRC, KEYSTONE)
    H_inv = compute_homography(KEYSTONE, SRC)
    for p in [(10.0, 10.0), (50.0, 40.0), (99.0, 1.0), (33.3, 77.7)]:
        back = apply_homography(H_inv, apply_homography(H, p))
        assert np.allclose(back, p, atol=1e-6)


def test_matches_skimage_projective_estimate():
    reference = estimate_transform(
        "projective", np.array(SRC, dtype=float), np.array(KEYSTONE, dtype=float)
    )
    expected = reference.params / reference.params[2, 2]
    assert np.allclose(compute_homography(SRC, KEYSTONE), expected, atol=1e-8)


def test_accepts_point2d_inputs():
    src = [Point2D(x, y) for x, y in SRC]
    H = compute_homography(src, src)
    assert np.allclose(H, np.eye(3), atol=1e-12)


@pytest.mark.parametrize("dst", [
    [(0, 0), (10, 0), (20, 0), (0, 10)],      # three collinear corners
    [(0, 0), (0, 0), (10, 10), (0, 10)],      # duplicate corner
    [(5, 5), (5, 5), (5, 5), (5, 5)],         # zero area
])
def test_degenerate_destination_rejected(dst):
    with pytest.raises(DegenerateGeometryError):
        compute_homography(SRC, dst)


def test_degenerate_source_rejected():
    with pytest.raises(DegenerateGeometryError):
        compute_homography([(0, 0), (10, 0), (20, 0), (0, 10)], SRC)


@pytest.mark.parametrize("pts", [
    [(0, 0), (1, 0), (1, 1)],
    [(0, 0), (1, 0), (1, 1), (0, 1), (2, 2)],
    [(0, 0), (1, 0), (1, float("inf")), (0, 1)],
    "abcd",
])
def test_wrong_point_count_rejected(pts):
    with pytest.raises(InvalidInputError):
        compute_homography(pts, SRC)


def test_apply_returns_sentinel_on_vanishing_line():
    H = np.array([[1.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0],
                  [1.0, 0.0, 1.0]])
    assert apply_homography(H, (-1.0, 5.0)) == OUT_OF_RANGE
    assert apply_homography(H, (-1.0 + DENOMINATOR_EPS / 2, 5.0)) == OUT_OF_RANGE
    assert np.allclose(apply_homography(H, (1.0, 4.0)), (0.5, 2.0))


def test_apply_array_matches_single_point_version():
    H = compute_homography(SRC, KEYSTONE)
    pts = np.array([[0.0, 0.0], [12.5, 7.0], [100.0, 80.0], [64.0, 3.0]])
    mapped = apply_homography_array(H, pts)
    for p, m in zip(pts, mapped):
        assert np.allclose(apply_homography(H, p), m)


def test_apply_array_marks_undefined_rows():
    H = np.array([[2.0, 0.0, 0.0],
                  [0.0, 2.0, 0.0],
                  [0.0, 1.0, 1.0]])
    mapped = apply_homography_array(H, [[3.0, -1.0], [3.0, 1.0]])
    assert tuple(mapped[0]) == OUT_OF_RANGE
    assert np.allclose(mapped[1], [3.0, 1.0])


def test_normalize_homography_scales_copy():
    H = np.array([[2.0, 0.0, 4.0],
                  [0.0, 2.0, 6.0],
                  [0.0, 0.0, 2.0]])
    N = normalize_homography(H)
    assert N[2, 2] == 1.0
    assert H[2, 2] == 2.0
    assert np.allclose(N[:2, 2], [2.0, 3.0])


def test_normalize_rejects_zero_corner_entry():
    with pytest.raises(DegenerateGeometryError):
        normalize_homography(np.zeros((3, 3)))
