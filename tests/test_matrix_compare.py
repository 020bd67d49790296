"""Tests for the 4x4 matrix comparator"""

import numpy as np
import pytest

from core import MATRIX_TOLERANCE, as_matrix, identity_matrix, matrices_match, max_abs_difference
from conftest import translation


def test_matrix_matches_itself():
    m = translation(1.5, -2.0, 3.25)
    assert matrices_match(m, m)
    assert matrices_match(identity_matrix(), identity_matrix())


def test_match_is_symmetric():
    a = identity_matrix()
    b = identity_matrix()
    b[2, 1] = 5e-7
    c = translation(1.0)
    assert matrices_match(a, b) == matrices_match(b, a)
    assert matrices_match(a, c) == matrices_match(c, a)


def test_difference_exactly_at_tolerance_matches():
    a = np.zeros((4, 4))
    b = np.zeros((4, 4))
    b[0, 0] = 1e-6
    assert matrices_match(a, b, tolerance=1e-6)


def test_difference_above_tolerance_fails():
    a = identity_matrix()
    b = identity_matrix()
    b[3, 0] = 2e-6
    assert not matrices_match(a, b)
    assert matrices_match(a, b, tolerance=1e-5)


def test_small_difference_within_default_tolerance():
    a = identity_matrix()
    b = identity_matrix()
    b[1, 2] = 1e-7
    assert MATRIX_TOLERANCE == 1e-6
    assert matrices_match(a, b)


def test_nan_never_matches():
    a = identity_matrix()
    b = identity_matrix()
    b[0, 0] = np.nan
    assert not matrices_match(a, b)
    assert not matrices_match(b, b)


def test_as_matrix_accepts_flat_row_major_values():
    m = as_matrix([1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 4, 5, 6, 1])
    assert m.shape == (4, 4)
    assert list(m[3]) == [4.0, 5.0, 6.0, 1.0]


def test_as_matrix_rejects_wrong_shape():
    with pytest.raises(ValueError):
        as_matrix([1, 2, 3])
    with pytest.raises(ValueError):
        as_matrix(np.identity(3))


def test_max_abs_difference():
    a = identity_matrix()
    b = translation(0.25, -0.5)
    assert max_abs_difference(a, b) == 0.5
