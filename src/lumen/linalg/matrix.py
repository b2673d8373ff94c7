"""Matrix helpers over row-major NumPy arrays.

Matrices are 2-D ``numpy.ndarray`` objects of float64; multiplication is the
``@`` operator. This module adds checked access, a determinant that is exact
for structurally singular matrices, and an inverse that fails loudly.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import numpy.typing as npt

Matrix = npt.NDArray[np.float64]

# Relative threshold on |det| below which a matrix is treated as singular
SINGULAR_THRESHOLD = 1e-12


class SingularMatrixError(ValueError):
    """Raised when inverting a matrix whose determinant is (nearly) zero."""


def matrix(rows: int, cols: int, values: Iterable[float] | None = None) -> Matrix:
    """Create a ``rows`` x ``cols`` matrix from row-major values (zeros if omitted).

    Raises:
        ValueError: If the number of values does not match the shape.
    """
    if values is None:
        return np.zeros((rows, cols), dtype=np.float64)
    flat = np.array(list(values), dtype=np.float64)
    if flat.shape[0] != rows * cols:
        raise ValueError(f"Expected {rows * cols} values for a {rows}x{cols} matrix, got {flat.shape[0]}")
    return flat.reshape(rows, cols)


def identity(size: int) -> Matrix:
    return np.eye(size, dtype=np.float64)


def fill(rows: int, cols: int, value: float) -> Matrix:
    return np.full((rows, cols), value, dtype=np.float64)


def at(m: Matrix, row: int, col: int) -> float:
    """Checked element access.

    Raises:
        IndexError: If ``(row, col)`` lies outside the matrix.
    """
    rows, cols = m.shape
    if not (0 <= row < rows and 0 <= col < cols):
        raise IndexError(f"Index ({row}, {col}) out of range for a {rows}x{cols} matrix")
    return float(m[row, col])


def transpose(m: Matrix) -> Matrix:
    return np.ascontiguousarray(m.T)


def _require_square(m: Matrix) -> int:
    rows, cols = m.shape
    if rows != cols:
        raise ValueError(f"Operation requires a square matrix, got {rows}x{cols}")
    return rows


def determinant(m: Matrix) -> float:
    """Determinant by Gaussian elimination with partial pivoting.

    A matrix with a zero column after elimination (e.g. two identical rows or
    a zero row) yields exactly 0.0 rather than a rounding residue.

    Raises:
        ValueError: If the matrix is not square.
    """
    size = _require_square(m)
    work = np.array(m, dtype=np.float64)
    det = 1.0
    for col in range(size):
        pivot = col + int(np.argmax(np.abs(work[col:, col])))
        if work[pivot, col] == 0.0:
            return 0.0
        if pivot != col:
            work[[col, pivot]] = work[[pivot, col]]
            det = -det
        det *= work[col, col]
        factors = work[col + 1 :, col] / work[col, col]
        work[col + 1 :, col:] -= np.outer(factors, work[col, col:])
    return float(det)


def inverse(m: Matrix) -> Matrix:
    """Invert a square matrix.

    Raises:
        ValueError: If the matrix is not square.
        SingularMatrixError: If |det| is at or below the singular threshold.
    """
    size = _require_square(m)
    scale = max(float(np.max(np.abs(m))), 1.0)
    det = determinant(m)
    if abs(det) <= SINGULAR_THRESHOLD * scale**size:
        raise SingularMatrixError(f"Matrix is singular (det={det:.3e})")
    return np.linalg.inv(m)
