"""
Dense linear system solver.

Gaussian elimination with partial pivoting on an augmented working copy of
the system.  Intended for the small fixed-size systems produced by the
homography estimator (8 x 8, solved once per corner change).
"""

import numpy as np

from src.geometry.errors import DegenerateGeometryError, InvalidInputError

# Pivots at or below this fraction of the largest coefficient count as zero.
PIVOT_TOLERANCE = 1e-12


def solve_linear_system(A, b) -> np.ndarray:
    """Solve ``A @ x = b`` by Gaussian elimination with partial pivoting.

    At elimination step *i* the row (among rows i..n-1) holding the largest
    absolute value in column *i* is swapped into position *i*; the first
    such row wins ties.  Rows below the pivot are then reduced and the
    solution is recovered by back substitution.

    Parameters
    ----------
    A : array_like
        n x n coefficient matrix.  Not modified.
    b : array_like
        Length-n right-hand side.  Not modified.

    Returns
    -------
    np.ndarray
        Length-n solution vector.

    Raises
    ------
    InvalidInputError
        If the shapes do not describe a square system or contain
        non-finite values.
    DegenerateGeometryError
        If a pivot column is numerically all-zero (singular system).
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float)

    if b.ndim != 1 or b.shape[0] == 0:
        raise InvalidInputError(f"b must be a non-empty vector, got shape {b.shape}")
    n = b.shape[0]
    if A.shape != (n, n):
        raise InvalidInputError(
            f"A must be {n} x {n} to match b, got shape {A.shape}"
        )
    if not (np.all(np.isfinite(A)) and np.all(np.isfinite(b))):
        raise InvalidInputError("linear system contains non-finite values")

    # Augmented matrix [A | b]; hstack allocates, so the inputs stay intact
    aug = np.hstack([A, b[:, np.newaxis]])
    tol = PIVOT_TOLERANCE * np.max(np.abs(A))

    for i in range(n):
        max_row = i + int(np.argmax(np.abs(aug[i:, i])))
        if abs(aug[max_row, i]) <= tol:
            raise DegenerateGeometryError(
                f"singular system: no usable pivot in column {i}"
            )

        if max_row != i:
            aug[[i, max_row]] = aug[[max_row, i]]

        for j in range(i + 1, n):
            factor = aug[j, i] / aug[i, i]
            aug[j, i:] -= factor * aug[i, i:]

    x = np.zeros(n)
    for i in range(n - 1, -1, -1):
        x[i] = (aug[i, n] - aug[i, i + 1:n] @ x[i + 1:]) / aug[i, i]
    return x
