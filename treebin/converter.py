# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""This module converts raw points into binned points using a threshold table.

- A continuous feature value is replaced by the number of thresholds of the feature
  which are strictly smaller than it.
- A categorical feature value is its own bin index, and must be an integer in
  ``{0, ..., arity - 1}``.

All the functions here are pure: the threshold table is only read, and nothing is
returned when some point contains an invalid categorical value.
"""

from math import floor
import numpy as np
from joblib import Parallel, delayed, effective_n_jobs

from ._binning import _search_thresholds, _bin_matrix
from ._checks import check_binning_thresholds, check_X, check_labels
from .errors import InvalidCategoricalValue, InvalidCategoricalValues
from .points import RawPoint, BinnedPoint
from .thresholds import check_threshold_table


def check_non_integral(non_integral):
    if non_integral not in {"error", "truncate"}:
        raise ValueError(
            "non_integral must be 'error' or 'truncate' but got {0}".format(
                non_integral
            )
        )
    return non_integral


def check_on_error(on_error):
    if on_error not in {"raise", "collect"}:
        raise ValueError(
            "on_error must be 'raise' or 'collect' but got {0}".format(on_error)
        )
    return on_error


def find_bin(feature_index, value, arity, thresholds=(), non_integral="error"):
    """Finds the bin index of a single feature value.

    Parameters
    ----------
    feature_index : int
        Index of the feature, used in error messages

    value : float
        The raw value

    arity : int
        0 for a continuous feature, the number of categories otherwise

    thresholds : array-like
        Increasing and unique thresholds of a continuous feature. Ignored for a
        categorical feature.

    non_integral : {"error", "truncate"}, default="error"
        What to do with a categorical value in range which is not an integer:
        raise an error or truncate it.

    Returns
    -------
    output : int
        For a continuous feature, the number of thresholds strictly smaller than
        ``value``. For a categorical feature, ``value`` itself.

    Raises
    ------
    InvalidCategoricalValue
        If the feature is categorical and ``value`` is not in ``{0, ..., arity - 1}``

    ValueError
        If the feature is continuous and ``thresholds`` are not finite, increasing
        and unique
    """
    check_non_integral(non_integral)
    value = float(value)
    if arity < 0:
        raise ValueError(f"The arity of feature {feature_index} must be >= 0")
    if arity == 0:
        # Thresholds of a ThresholdTable are read-only float64 arrays already
        # checked
        if not (
            isinstance(thresholds, np.ndarray)
            and thresholds.dtype == np.float64
            and not thresholds.flags.writeable
        ):
            thresholds = check_binning_thresholds(feature_index, thresholds, arity)
        return int(_search_thresholds(value, thresholds))

    if not (0 <= value < arity):
        raise InvalidCategoricalValue(feature_index, value, arity)
    if value != floor(value) and non_integral == "error":
        raise InvalidCategoricalValue(
            feature_index, value, arity, reason="not an integer"
        )
    return int(value)


def _as_raw_point(point):
    if isinstance(point, RawPoint):
        return point
    try:
        label, features = point
    except (TypeError, ValueError):
        raise ValueError(
            f"Expected a RawPoint or a (label, features) pair, got {point!r}"
        )
    return RawPoint(label, features)


def _convert_point(point, table, non_integral):
    if point.n_features != table.n_features:
        raise ValueError(
            f"The point has {point.n_features} features while the threshold table "
            f"has {table.n_features} features"
        )
    bins = np.empty(point.n_features, dtype=np.int32)
    try:
        for col_idx, (x, arity, thresholds) in enumerate(
            zip(point.features, table.feature_arity, table.binning_thresholds)
        ):
            bins[col_idx] = find_bin(col_idx, x, arity, thresholds, non_integral)
    except InvalidCategoricalValue as exc:
        exc.point = point
        raise
    return BinnedPoint(point.label, bins)


def convert_point(point, binning_thresholds, feature_arity=None, non_integral="error"):
    """Converts a raw point into a binned point.

    Parameters
    ----------
    point : RawPoint or (label, features) pair
        The raw point

    binning_thresholds : ThresholdTable or sequence of array-like
        The thresholds of each feature

    feature_arity : array-like or dict or None
        The arity of each feature. It can be None only if ``binning_thresholds``
        is a ``ThresholdTable``.

    non_integral : {"error", "truncate"}, default="error"
        See ``find_bin``

    Returns
    -------
    output : BinnedPoint
        The bin indices of the features of ``point``, with the same label

    Raises
    ------
    InvalidCategoricalValue
        For the first feature of ``point`` with an invalid categorical value. The
        exception holds ``point`` in its ``point`` attribute.
    """
    table = check_threshold_table(binning_thresholds, feature_arity)
    check_non_integral(non_integral)
    return _convert_point(_as_raw_point(point), table, non_integral)


def _bin_chunk(X, start, end, table, truncate, X_binned, invalid_rows):
    """This is a utility function for joblib's Parallel. Each call writes only the
    rows ``start:end`` of ``X_binned`` and ``invalid_rows``.
    """
    X_binned[start:end], invalid_rows[start:end] = _bin_matrix(
        X[start:end], table.binning_thresholds, table.feature_arity, truncate
    )


def _bin_rows(X, table, non_integral, n_jobs):
    n_samples, n_features = X.shape
    X_binned = np.empty((n_samples, n_features), dtype=np.int32)
    invalid_rows = np.zeros(n_samples, dtype=np.bool_)
    if n_samples == 0:
        return X_binned, invalid_rows

    truncate = non_integral == "truncate"
    n_chunks = max(1, min(effective_n_jobs(n_jobs), n_samples))
    bounds = np.linspace(0, n_samples, n_chunks + 1).astype(np.intp)
    # Threads only: the jit-compiled binning releases the GIL and chunks write
    # disjoint rows of the outputs
    Parallel(n_jobs=n_jobs, require="sharedmem")(
        delayed(_bin_chunk)(X, start, end, table, truncate, X_binned, invalid_rows)
        for start, end in zip(bounds[:-1], bounds[1:])
    )
    return X_binned, invalid_rows


def _invalid_rows_error(X, labels, invalid_rows, table, non_integral, on_error):
    """Builds the exception to raise for the rows flagged as invalid: the error of
    the first bad row if ``on_error="raise"``, all of them otherwise.
    """
    rows = np.flatnonzero(invalid_rows)
    if on_error == "raise":
        rows = rows[:1]
    errors = []
    for point_index in rows:
        point = RawPoint(labels[point_index], X[point_index])
        try:
            _convert_point(point, table, non_integral)
        except InvalidCategoricalValue as exc:
            exc.point_index = int(point_index)
            errors.append(exc)
    if on_error == "raise":
        return errors[0]
    return InvalidCategoricalValues(errors)


def convert_matrix(
    X,
    binning_thresholds,
    feature_arity=None,
    y=None,
    non_integral="error",
    on_error="raise",
    n_jobs=None,
):
    """Bins the columns of a matrix of raw features, row by row.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        The raw features. It can be either a pandas dataframe or a 2D numpy array.

    binning_thresholds : ThresholdTable or sequence of array-like
        The thresholds of each feature

    feature_arity : array-like or dict or None
        The arity of each feature. It can be None only if ``binning_thresholds``
        is a ``ThresholdTable``.

    y : None or array-like of shape (n_samples,)
        The labels, only used to describe bad data points in errors

    non_integral : {"error", "truncate"}, default="error"
        See ``find_bin``

    on_error : {"raise", "collect"}, default="raise"
        With "raise", the error of the first bad row is raised. With "collect",
        all the rows are checked and an ``InvalidCategoricalValues`` with the
        errors of every bad row is raised.

    n_jobs : int or None, default=None
        Number of threads used to bin the rows, in joblib's convention

    Returns
    -------
    output : numpy.ndarray
        An int32 matrix of shape (n_samples, n_features) with the bin indices
    """
    table = check_threshold_table(binning_thresholds, feature_arity)
    check_non_integral(non_integral)
    check_on_error(on_error)
    X = check_X(X, table.n_features)
    labels = check_labels(y, X.shape[0])
    X_binned, invalid_rows = _bin_rows(X, table, non_integral, n_jobs)
    if invalid_rows.any():
        raise _invalid_rows_error(
            X, labels, invalid_rows, table, non_integral, on_error
        )
    return X_binned


def convert_dataset(
    points,
    binning_thresholds,
    feature_arity=None,
    non_integral="error",
    on_error="raise",
    n_jobs=None,
):
    """Converts raw points into binned points, in the same order.

    Parameters
    ----------
    points : iterable of RawPoint or (label, features) pairs
        The raw points

    binning_thresholds : ThresholdTable or sequence of array-like
        The thresholds of each feature

    feature_arity : array-like or dict or None
        The arity of each feature. It can be None only if ``binning_thresholds``
        is a ``ThresholdTable``.

    non_integral : {"error", "truncate"}, default="error"
        See ``find_bin``

    on_error : {"raise", "collect"}, default="raise"
        See ``convert_matrix``

    n_jobs : int or None, default=None
        Number of threads used to bin the points, in joblib's convention

    Returns
    -------
    output : list of BinnedPoint
        The binned point at index i comes from the raw point at index i

    Raises
    ------
    InvalidCategoricalValue
        With ``on_error="raise"``, for the first bad point. Its ``point_index``
        attribute gives the index of the bad point.

    InvalidCategoricalValues
        With ``on_error="collect"``, holding the errors of every bad point.
    """
    table = check_threshold_table(binning_thresholds, feature_arity)
    check_non_integral(non_integral)
    check_on_error(on_error)
    points = [_as_raw_point(point) for point in points]
    for point_index, point in enumerate(points):
        if point.n_features != table.n_features:
            raise ValueError(
                f"Point {point_index} has {point.n_features} features while the "
                f"threshold table has {table.n_features} features"
            )
    if not points:
        return []

    X = np.array([point.features for point in points], dtype=np.float64)
    labels = np.array([point.label for point in points], dtype=np.float64)
    X = X.reshape(len(points), table.n_features)
    X_binned, invalid_rows = _bin_rows(X, table, non_integral, n_jobs)
    if invalid_rows.any():
        raise _invalid_rows_error(
            X, labels, invalid_rows, table, non_integral, on_error
        )
    return [
        BinnedPoint(point.label, X_binned[point_index])
        for point_index, point in enumerate(points)
    ]
