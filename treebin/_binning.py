# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause


"""This modules contains private jit-compiled utilities for binning
continuous and categorical features.
"""

import numpy as np
from math import floor
from numba import jit

from ._utils import NOPYTHON, NOGIL, BOUNDSCHECK, CACHE


@jit(
    nopython=NOPYTHON,
    nogil=NOGIL,
    boundscheck=BOUNDSCHECK,
    cache=CACHE,
)
def _search_thresholds(x, binning_thresholds):
    """Binary search giving the number of thresholds strictly smaller than ``x``.

    Parameters
    ----------
    x : float
        The value to bin

    binning_thresholds : numpy.ndarray
        Increasing and unique thresholds of the feature

    Returns
    -------
    output : int
        The bin index of ``x``, in ``[0, binning_thresholds.shape[0]]``. A value
        equal to ``binning_thresholds[i]`` goes to bin ``i``, and a nan goes to
        the last bin since it never compares smaller or equal to a threshold.
    """
    left, right = 0, binning_thresholds.shape[0]
    while left < right:
        # Equal to (right + left - 1) // 2 but avoids overflow
        middle = left + (right - left - 1) // 2
        if x <= binning_thresholds[middle]:
            right = middle
        else:
            left = middle + 1
    return left


@jit(
    nopython=NOPYTHON,
    nogil=NOGIL,
    boundscheck=BOUNDSCHECK,
    cache=CACHE,
)
def _bin_continuous_column(col, binning_thresholds, binned_col):
    """This performs binary search to find the bin index of each value in the column

    Parameters
    ----------
    col : numpy.ndarray
        Raw values of the column

    binning_thresholds : numpy.ndarray
        Increasing and unique thresholds of the column

    binned_col : numpy.ndarray
        Output array with the same shape as ``col``, filled inplace
    """
    for i, x in enumerate(col):
        binned_col[i] = _search_thresholds(x, binning_thresholds)


@jit(
    nopython=NOPYTHON,
    nogil=NOGIL,
    boundscheck=BOUNDSCHECK,
    cache=CACHE,
)
def _is_valid_category(x, arity, truncate):
    # nan fails both comparisons
    if not (x >= 0 and x < arity):
        return False
    if not truncate and x != floor(x):
        return False
    return True


@jit(
    nopython=NOPYTHON,
    nogil=NOGIL,
    boundscheck=BOUNDSCHECK,
    cache=CACHE,
)
def _bin_categorical_column(col, arity, truncate, binned_col, invalid_rows):
    """Categorical values are their own bin index. Rows with a value outside of
    ``[0, arity)`` (or non-integral when ``truncate`` is False) are flagged in
    ``invalid_rows`` and get no bin.

    Parameters
    ----------
    col : numpy.ndarray
        Raw values of the column

    arity : int
        Number of categories of the column

    truncate : bool
        If True, a non-integral value in range is truncated toward zero

    binned_col : numpy.ndarray
        Output array with the same shape as ``col``, filled inplace

    invalid_rows : numpy.ndarray
        Boolean array with the same shape as ``col``. It is only ever set to True,
        so that it accumulates invalid rows over several columns

    Returns
    -------
    output : int
        The number of invalid values in the column
    """
    n_invalid = 0
    for i, x in enumerate(col):
        if _is_valid_category(x, arity, truncate):
            binned_col[i] = int(x)
        else:
            binned_col[i] = 0
            invalid_rows[i] = True
            n_invalid += 1
    return n_invalid


def _bin_matrix(X, binning_thresholds, feature_arity, truncate):
    """Bins all the columns of ``X``.

    Parameters
    ----------
    X : numpy.ndarray
        Float64 matrix of shape (n_samples, n_features)

    binning_thresholds : sequence of numpy.ndarray
        Thresholds of each column, empty for categorical columns

    feature_arity : numpy.ndarray
        Arity of each column, 0 for continuous columns

    truncate : bool
        How non-integral categorical values are handled

    Returns
    -------
    X_binned : numpy.ndarray
        Int32 matrix of shape (n_samples, n_features). Rows flagged in
        ``invalid_rows`` must not be used.

    invalid_rows : numpy.ndarray
        Boolean array of shape (n_samples,), True for rows containing an invalid
        categorical value
    """
    n_samples, n_features = X.shape
    X_binned = np.empty((n_samples, n_features), dtype=np.int32, order="F")
    invalid_rows = np.zeros(n_samples, dtype=np.bool_)
    for col_idx in range(n_features):
        arity = feature_arity[col_idx]
        if arity == 0:
            _bin_continuous_column(
                X[:, col_idx], binning_thresholds[col_idx], X_binned[:, col_idx]
            )
        else:
            _bin_categorical_column(
                X[:, col_idx], arity, truncate, X_binned[:, col_idx], invalid_rows
            )
    return X_binned, invalid_rows
