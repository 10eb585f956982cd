# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""This modules contains functions that check the inputs given by the
collaborators of the binning code: the arity of each feature, the thresholds of
the continuous features and the matrix of raw features. Any problem found here is
a broken call contract and raises a ``ValueError``.
"""

import numbers
import numpy as np
import pandas as pd

from ._utils import read_only


def check_feature_arity(feature_arity, n_features=None):
    """Performs checks on feature_arity and converts it to a read-only
    ``numpy.ndarray`` with int64 dtype.

    Parameters
    ----------
    feature_arity : array-like or dict
        - If **array-like** : the arity of each feature, 0 for a continuous feature
          and the number of categories for a categorical feature.
        - If **dict** : maps the index of each categorical feature to its number of
          categories. Features which are not in the dict are continuous, and
          ``n_features`` must be given.

    n_features : None or int
        The expected number of features.

    Returns
    -------
    output : numpy.ndarray
        A read-only numpy array of shape (n_features,) with int64 dtype.
    """
    if isinstance(feature_arity, dict):
        if n_features is None:
            raise ValueError(
                "n_features must be given when feature_arity is a dict"
            )
        arity = np.zeros(n_features, dtype=np.int64)
        for col_idx, col_arity in feature_arity.items():
            if (
                not isinstance(col_idx, numbers.Integral)
                or col_idx < 0
                or col_idx >= n_features
            ):
                raise ValueError(
                    f"feature_arity keys must be feature indices in [0, "
                    f"{n_features - 1}], got {col_idx}"
                )
            arity[col_idx] = _check_one_arity(col_idx, col_arity)
        return read_only(arity)

    values = np.asarray(feature_arity)
    if values.ndim != 1:
        raise ValueError(
            f"feature_arity must be one-dimensional, got shape {values.shape}"
        )
    if values.size > 0 and values.dtype.kind not in "uif":
        raise ValueError(
            f"feature_arity must contain integers, got dtype {values.dtype}"
        )
    if n_features is not None and values.size != n_features:
        raise ValueError(
            f"feature_arity has {values.size} entries while {n_features} features "
            f"are expected"
        )
    arity = np.empty(values.size, dtype=np.int64)
    for col_idx, col_arity in enumerate(values):
        arity[col_idx] = _check_one_arity(col_idx, col_arity)
    return read_only(arity)


def _check_one_arity(col_idx, col_arity):
    if isinstance(col_arity, (bool, np.bool_)) or col_arity != int(col_arity):
        raise ValueError(
            f"The arity of feature {col_idx} must be an integer, got {col_arity}"
        )
    if col_arity < 0:
        raise ValueError(
            f"The arity of feature {col_idx} must be >= 0, got {col_arity}"
        )
    return int(col_arity)


def check_binning_thresholds(col_idx, thresholds, arity):
    """Checks the thresholds of a single feature and returns them as a read-only
    float64 array. Thresholds are not sorted nor deduplicated here: they must
    already be finite, increasing and unique, and empty for a categorical feature.
    """
    thresholds = np.asarray(thresholds, dtype=np.float64)
    if thresholds.ndim != 1:
        raise ValueError(
            f"The thresholds of feature {col_idx} must be one-dimensional, got "
            f"shape {thresholds.shape}"
        )
    if arity > 0:
        if thresholds.size > 0:
            raise ValueError(
                f"Feature {col_idx} is categorical with arity {arity}, its "
                f"thresholds must be empty but {thresholds.size} were given"
            )
    else:
        if not np.all(np.isfinite(thresholds)):
            raise ValueError(f"The thresholds of feature {col_idx} must be finite")
        if np.any(np.diff(thresholds) <= 0):
            raise ValueError(
                f"The thresholds of feature {col_idx} must be strictly increasing, "
                f"got {thresholds.tolist()}"
            )
    return read_only(thresholds)


def check_X(X, n_features):
    """Checks if input is a 2D numerical ``numpy.ndarray`` or a ``pandas.DataFrame``
    with ``n_features`` columns and returns it as a float64 ``numpy.ndarray``.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        The raw features. It can be either a pandas dataframe or a 2D numpy array.

    n_features : int
        The expected number of features, namely the number of features in the
        threshold table.

    Returns
    -------
    output : numpy.ndarray
        A float64 numpy array of shape (n_samples, n_features).
    """
    if isinstance(X, pd.DataFrame):
        for col_name, col in X.items():
            if col.dtype.kind not in "buif":
                raise ValueError(
                    f"Column {col_name} has dtype {col.dtype} which is not "
                    f"numerical. Categorical columns must hold category indices."
                )
        X = X.to_numpy(dtype=np.float64)
    elif isinstance(X, np.ndarray):
        if X.ndim != 2:
            raise ValueError(
                "X is must be a `pandas.DataFrame` or a "
                "two-dimensional `numpy.ndarray`."
            )
        if X.dtype.kind not in "buif":
            raise ValueError(f"The dtype of X {X.dtype} is not supported")
        X = X.astype(np.float64, copy=False)
    else:
        msg = (
            f"X is must be a `pandas.DataFrame` or a `numpy.ndarray`, a {type(X)} "
            f"was received."
        )
        raise ValueError(msg)

    if X.shape[1] != n_features:
        msg = (
            "The number of features in X is different from the number of "
            "features of the threshold table. The table has {0} features "
            "and X has {1} features.".format(n_features, X.shape[1])
        )
        raise ValueError(msg)

    return X


def check_labels(y, n_samples):
    """Returns the labels as a float64 array of shape (n_samples,). Missing labels
    (``y=None``) are nan.
    """
    if y is None:
        return np.full(n_samples, np.nan)
    y = np.asarray(y, dtype=np.float64)
    if y.shape != (n_samples,):
        raise ValueError(
            f"y must have shape ({n_samples},) to match X, got shape {y.shape}"
        )
    return y
