# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""This module contains the TreePointEncoder class. The TreePointEncoder builds the
threshold table of a training run from the splits of each feature, and then bins
raw features matrices or raw points with it.
"""

import logging
import warnings
from time import time
import numpy as np
import pandas as pd
from sklearn.base import TransformerMixin, BaseEstimator

from ._checks import check_X
from ._utils import get_min_uint_dtype
from .converter import (
    check_non_integral,
    check_on_error,
    convert_dataset,
    convert_matrix,
)
from .thresholds import build_threshold_table


logger = logging.getLogger(__name__)


class TreePointEncoder(TransformerMixin, BaseEstimator):
    """A class that transforms an input ``pandas.DataFrame`` or ``numpy.ndarray`` of
    raw features into a matrix of bin indices, as required by histogram-based
    decision trees.

    Continuous columns are binned using the thresholds of their splits: a value
    goes to the bin given by the number of thresholds strictly smaller than it.
    Categorical columns must already contain category indices in ``{0, ...,
    arity - 1}``, which are used as bin indices.

    The ``.fit()`` method builds the threshold table once, from the splits
    computed elsewhere for each feature. The ``.transform()`` and ``.convert()``
    methods only read it, and can be called concurrently.

    Parameters
    ----------
    feature_arity : array-like or dict
        The arity of each feature: 0 for a continuous feature, the number of
        categories for a categorical one. A dict maps the index of each
        categorical feature to its number of categories, the other features being
        continuous.

    non_integral : {"error", "truncate"}, default="error"
        If set to "error", an error is raised when a categorical value is not an
        integer. If set to "truncate", such a value is truncated toward zero.

    on_error : {"raise", "collect"}, default="raise"
        If set to "raise", the first row with an invalid categorical value raises
        an ``InvalidCategoricalValue``. If set to "collect", all the rows are
        checked first, and an ``InvalidCategoricalValues`` describing every bad
        row is raised.

    n_jobs : int or None, default=None
        The number of threads used to bin the rows, in joblib's convention.

    verbose : bool, default=False
        If True, warn when non-integral categorical values are truncated.

    Attributes
    ----------
    threshold_table_ : ThresholdTable
        The thresholds of each feature, built by ``fit``.

    n_features_in_ : int
        The number of features.

    n_bins_ : numpy.ndarray
        A numpy array of shape (n_features,) with the number of bins used by each
        feature.
    """

    def __init__(
        self,
        feature_arity=None,
        non_integral="error",
        on_error="raise",
        n_jobs=None,
        verbose=False,
    ):
        self.feature_arity = feature_arity
        self.non_integral = non_integral
        self.on_error = on_error
        self.n_jobs = n_jobs
        self.verbose = verbose

        self._fitted = False
        self._threshold_table_ = None

    def fit(self, X=None, y=None, splits=None):
        """Builds the threshold table from the splits of each feature.

        Parameters
        ----------
        X : None or array-like of shape (n_samples, n_features)
            If given, it is only used to check its number of features.

        y : None
            This is ignored.

        splits : sequence of sequences of splits
            For each feature, its candidate splits. Splits of continuous features
            must expose a ``threshold`` and be increasing and unique. Splits of
            categorical features are discarded.

        Returns
        -------
        self : TreePointEncoder
            The current TreePointEncoder instance
        """
        if splits is None:
            raise ValueError("splits must be given to fit a TreePointEncoder")
        if self.feature_arity is None:
            raise ValueError("feature_arity must be given to fit a TreePointEncoder")

        tic = time()
        threshold_table = build_threshold_table(self.feature_arity, splits)
        if X is not None:
            check_X(X, threshold_table.n_features)

        self._threshold_table_ = threshold_table
        self._fitted = True
        logger.debug(
            "Built threshold table with %d features (%d categorical) in %.3f seconds",
            threshold_table.n_features,
            threshold_table.is_categorical.sum(),
            time() - tic,
        )
        return self

    def transform(self, X, y=None):
        """Bins the columns in X.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            The raw features to bin. It can be either a pandas dataframe or a 2d
            numpy array.

        y : None or array-like of shape (n_samples,)
            The labels. They are only used to describe bad rows in errors.

        Returns
        -------
        output : numpy.ndarray
            A matrix of shape (n_samples, n_features) with the bin indices, with the
            smallest unsigned integer dtype able to store them.
        """
        threshold_table = self.threshold_table_
        tic = time()
        X = check_X(X, threshold_table.n_features)
        if self.verbose and self.non_integral == "truncate":
            self._warn_non_integral(X)

        X_binned = convert_matrix(
            X,
            threshold_table,
            y=y,
            non_integral=self.non_integral,
            on_error=self.on_error,
            n_jobs=self.n_jobs,
        )
        n_bins = threshold_table.n_bins
        max_value = n_bins.max() - 1 if n_bins.size > 0 else 0
        X_binned = X_binned.astype(get_min_uint_dtype(max_value))
        logger.debug("Binned %d rows in %.3f seconds", X.shape[0], time() - tic)
        return X_binned

    def convert(self, points):
        """Converts raw points into binned points, in the same order.

        Parameters
        ----------
        points : iterable of RawPoint or (label, features) pairs
            The raw points

        Returns
        -------
        output : list of BinnedPoint
            The binned points
        """
        threshold_table = self.threshold_table_
        tic = time()
        binned_points = convert_dataset(
            points,
            threshold_table,
            non_integral=self.non_integral,
            on_error=self.on_error,
            n_jobs=self.n_jobs,
        )
        logger.debug(
            "Converted %d points in %.3f seconds", len(binned_points), time() - tic
        )
        return binned_points

    def inverse_transform(self, X_binned):
        """Gives back, for each bin index, the interval of raw values mapped into
        it for continuous columns, and the category index for categorical columns.

        Parameters
        ----------
        X_binned : numpy.ndarray
            A matrix of shape (n_samples, n_features) of bin indices

        Returns
        -------
        output : pandas.DataFrame
            Continuous columns contain ``pandas.Interval`` closed on the right,
            categorical columns contain integers.
        """
        threshold_table = self.threshold_table_
        X_binned = np.asarray(X_binned)
        if X_binned.ndim != 2 or X_binned.shape[1] != threshold_table.n_features:
            raise ValueError(
                f"X_binned must have shape (n_samples, "
                f"{threshold_table.n_features}), got {X_binned.shape}"
            )
        n_bins = threshold_table.n_bins
        if X_binned.size > 0 and (
            np.any(X_binned < 0) or np.any(X_binned >= n_bins[np.newaxis, :])
        ):
            raise ValueError("X_binned contains bin indices out of range")

        df = pd.DataFrame(index=pd.RangeIndex(X_binned.shape[0]))
        for col_idx, (col_thresholds, is_col_categorical) in enumerate(
            zip(threshold_table.binning_thresholds, threshold_table.is_categorical)
        ):
            binned_col = X_binned[:, col_idx].astype(np.intp)
            if is_col_categorical:
                df[col_idx] = binned_col
            else:
                edges = np.concatenate(([-np.inf], col_thresholds, [np.inf]))
                intervals = pd.arrays.IntervalArray.from_arrays(
                    edges[:-1], edges[1:], closed="right"
                )
                df[col_idx] = intervals[binned_col]
        return df

    def _warn_non_integral(self, X):
        for col_idx, arity in enumerate(self.threshold_table_.feature_arity):
            if arity > 0:
                col = X[:, col_idx]
                # NaN and out of range values are rejected, not truncated
                n_truncated = np.count_nonzero(
                    (col >= 0) & (col < arity) & (col != np.floor(col))
                )
                if n_truncated > 0:
                    warnings.warn(
                        f"Column {col_idx} is categorical but has {n_truncated} "
                        f"non-integer values, which will be truncated."
                    )

    @property
    def threshold_table_(self):
        if self._fitted:
            return self._threshold_table_
        else:
            raise ValueError("You must call fit before asking for threshold_table_")

    @property
    def n_features_in_(self):
        return self.threshold_table_.n_features

    @property
    def n_bins_(self):
        return self.threshold_table_.n_bins

    @property
    def feature_arity(self):
        return self._feature_arity

    @feature_arity.setter
    def feature_arity(self, val):
        if val is None or isinstance(val, dict):
            self._feature_arity = val
        else:
            val = np.asarray(val)
            if val.ndim != 1:
                raise ValueError(
                    "feature_arity must be either None, a dict or a "
                    "one-dimensional array-like of integers"
                )
            self._feature_arity = val

    @property
    def non_integral(self):
        return self._non_integral

    @non_integral.setter
    def non_integral(self, val):
        self._non_integral = check_non_integral(val)

    @property
    def on_error(self):
        return self._on_error

    @on_error.setter
    def on_error(self, val):
        self._on_error = check_on_error(val)

    @property
    def n_jobs(self):
        return self._n_jobs

    @n_jobs.setter
    def n_jobs(self, val):
        if val is None:
            self._n_jobs = val
        elif not isinstance(val, int) or isinstance(val, bool):
            raise ValueError("n_jobs must be None or an integer")
        elif val == 0:
            raise ValueError("n_jobs must be different from 0")
        else:
            self._n_jobs = val

    @property
    def verbose(self):
        return self._verbose

    @verbose.setter
    def verbose(self, val):
        if not isinstance(val, bool):
            raise ValueError("verbose must be boolean")
        self._verbose = val
