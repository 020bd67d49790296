#!/usr/bin/env python3
"""
Matrix Compare Module
Tolerance-based equality for 4x4 transform matrices.

Every transform comparison in the validators goes through matrices_match()
so that file-sourced and scene-sourced matrices are held to one tolerance.
"""

import numpy as np

# Default absolute tolerance per matrix entry
MATRIX_TOLERANCE = 1e-6


def as_matrix(value) -> np.ndarray:
    """Convert a matrix-like value to a float64 (4, 4) numpy array

    Args:
        value: Nested 4x4 sequence, numpy array, Gf.Matrix4d or a flat
               sequence of 16 values (row-major)

    Returns:
        np.ndarray: (4, 4) float64 array

    Raises:
        ValueError: If the value cannot be read as a 4x4 matrix
    """
    try:
        m = np.array(value, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Not a 4x4 matrix: {e}")

    if m.shape == (16,):
        m = m.reshape(4, 4)
    if m.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {m.shape}")
    return m


def identity_matrix() -> np.ndarray:
    """Return a fresh 4x4 identity matrix"""
    return np.identity(4, dtype=np.float64)


def matrices_match(a, b, tolerance: float = MATRIX_TOLERANCE) -> bool:
    """Check whether two 4x4 matrices are equal within tolerance

    Args:
        a: First matrix
        b: Second matrix
        tolerance: Maximum allowed absolute difference per entry

    Returns:
        bool: True iff every entrywise absolute difference is <= tolerance
    """
    diff = np.abs(as_matrix(a) - as_matrix(b))
    # NaN compares False, so a NaN entry never matches
    return bool(np.all(diff <= tolerance))


def max_abs_difference(a, b) -> float:
    """Largest entrywise absolute difference between two matrices"""
    return float(np.max(np.abs(as_matrix(a) - as_matrix(b))))
