"""
Input checks for the t-SNE transform.

Everything here runs before any distance is computed. A failing check
raises DataValidationError naming the row or condition at fault.
"""

import numbers
import math

import numpy as np


class DataValidationError(ValueError):
    """Input matrix is not an N x D array of finite numbers with N >= 2."""


def _is_number(item):
    if isinstance(item, (bool, np.bool_)):
        return False
    return isinstance(item, numbers.Real)


def _check_items(i, row):
    for item in row:
        if not _is_number(item):
            raise DataValidationError(
                f"All items in a row must be numbers. Row {i} contains items that are not numbers.")
        try:
            finite = math.isfinite(item)
        except OverflowError:
            finite = False
        if not finite:
            raise DataValidationError(
                f"All items in a row must be finite numbers. Row {i} contains NaN or infinity.")


def _validate_array(X):
    if X.ndim != 2:
        raise DataValidationError(
            f"Input must be an array of rows. Got an array with {X.ndim} dimension(s)")

    if X.shape[0] < 2:
        raise DataValidationError(
            f"Input must have at least 2 rows (vectors). Current input has {X.shape[0]} rows")

    # Object arrays may still hold plain numbers; check them item by item.
    if X.dtype == object:
        for i, row in enumerate(X):
            _check_items(i, row)
        return X.astype(np.float64)

    if X.dtype == np.bool_ or not np.issubdtype(X.dtype, np.number) \
            or np.issubdtype(X.dtype, np.complexfloating):
        raise DataValidationError(
            f"All items in a row must be numbers. Got array of dtype {X.dtype}")

    finite = np.isfinite(X)
    if not finite.all():
        row = int(np.argwhere(~finite)[0, 0])
        raise DataValidationError(
            f"All items in a row must be finite numbers. Row {row} contains NaN or infinity.")

    return X.astype(np.float64, copy=True)


def validate_input(X):
    """
    Check that X is a matrix of finite numbers with at least 2 rows.

    Args:
        X: list/tuple of equal-length rows, or a 2-D numpy array

    Returns:
        float64 copy of X, shape (n_samples, n_features)

    Raises:
        DataValidationError: on the first violated constraint
    """
    if isinstance(X, np.ndarray):
        return _validate_array(X)

    if not isinstance(X, (list, tuple)):
        raise DataValidationError("Input must be an array")

    if len(X) < 2:
        raise DataValidationError(
            f"Input must have at least 2 rows (vectors). Current input has {len(X)} rows")

    width = None
    for i, row in enumerate(X):
        if not isinstance(row, (list, tuple, np.ndarray)) \
                or (isinstance(row, np.ndarray) and row.ndim != 1):
            raise DataValidationError(
                f"Elements of the input array must be arrays. Row {i} is not an array")

        if width is None:
            width = len(row)
        elif len(row) != width:
            raise DataValidationError(
                f"Rows must have the same length. Row 0 has {width} items, "
                f"but row {i} has {len(row)} items.")

        _check_items(i, row)

    return np.array(X, dtype=np.float64)
