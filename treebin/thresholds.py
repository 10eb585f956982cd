# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""This module contains the ``ThresholdTable`` class, which stores the binning
thresholds of each feature, and ``build_threshold_table``, which builds it from the
splits computed for each feature.

The table is built once per training run and is then shared, read-only, by all the
conversions of raw points into binned points.
"""

from collections import namedtuple
import numpy as np

from ._checks import check_feature_arity, check_binning_thresholds
from ._utils import read_only


class ContinuousSplit(namedtuple("ContinuousSplit", ["feature_index", "threshold"])):
    """A split of a continuous feature: values ``<= threshold`` go left."""

    __slots__ = ()

    def goes_left(self, value):
        return value <= self.threshold


class CategoricalSplit(
    namedtuple("CategoricalSplit", ["feature_index", "left_categories", "n_categories"])
):
    """A split of a categorical feature: categories in ``left_categories`` go left."""

    __slots__ = ()

    def goes_left(self, value):
        return value in self.left_categories


class ThresholdTable(object):
    """Binning thresholds of all the features.

    For a continuous feature (arity 0) with thresholds ``t``, a value ``x`` is
    mapped into bin ``i`` iff ``t[i - 1] < x <= t[i]``, so that the feature uses
    ``t.size + 1`` bins. A categorical feature has no thresholds and uses as many
    bins as it has categories.

    Parameters
    ----------
    binning_thresholds : sequence of array-like
        The thresholds of each feature. They must be finite, strictly increasing,
        and empty for categorical features.

    feature_arity : array-like or dict
        The arity of each feature, 0 for continuous features. See
        ``check_feature_arity``.

    Attributes
    ----------
    binning_thresholds : tuple of numpy.ndarray
        Read-only float64 thresholds of each feature

    feature_arity : numpy.ndarray
        Read-only int64 array of shape (n_features,)
    """

    def __init__(self, binning_thresholds, feature_arity):
        binning_thresholds = list(binning_thresholds)
        n_features = len(binning_thresholds)
        feature_arity = check_feature_arity(feature_arity, n_features=n_features)
        self._binning_thresholds = tuple(
            check_binning_thresholds(col_idx, col_thresholds, arity)
            for col_idx, (col_thresholds, arity) in enumerate(
                zip(binning_thresholds, feature_arity)
            )
        )
        self._feature_arity = feature_arity
        n_bins = np.array(
            [
                arity if arity > 0 else col_thresholds.size + 1
                for col_thresholds, arity in zip(
                    self._binning_thresholds, feature_arity
                )
            ],
            dtype=np.int64,
        )
        self._n_bins = read_only(n_bins)

    @property
    def binning_thresholds(self):
        return self._binning_thresholds

    @property
    def feature_arity(self):
        return self._feature_arity

    @property
    def n_features(self):
        return len(self._binning_thresholds)

    @property
    def n_bins(self):
        """Number of bins used by each feature"""
        return self._n_bins

    @property
    def is_categorical(self):
        return self._feature_arity > 0

    def __len__(self):
        return len(self._binning_thresholds)

    def __getitem__(self, col_idx):
        return self._binning_thresholds[col_idx]

    def __iter__(self):
        return iter(self._binning_thresholds)

    def __eq__(self, other):
        if not isinstance(other, ThresholdTable):
            return NotImplemented
        return np.array_equal(self._feature_arity, other._feature_arity) and all(
            np.array_equal(a, b)
            for a, b in zip(self._binning_thresholds, other._binning_thresholds)
        )

    def __hash__(self):
        return hash(
            (self._feature_arity.tobytes(),)
            + tuple((t + 0.0).tobytes() for t in self._binning_thresholds)
        )

    def __repr__(self):
        return (
            f"ThresholdTable(n_features={self.n_features}, "
            f"n_bins={self._n_bins.tolist()})"
        )

    def __reduce__(self):
        return self.__class__, (self._binning_thresholds, self._feature_arity)


def _split_threshold(col_idx, split):
    threshold = getattr(split, "threshold", None)
    if threshold is None:
        raise ValueError(
            f"Feature {col_idx} is continuous, but it got a split without "
            f"threshold: {split!r}"
        )
    split_feature_index = getattr(split, "feature_index", None)
    if split_feature_index is not None and split_feature_index != col_idx:
        raise ValueError(
            f"A split of feature {split_feature_index} was given at index {col_idx}"
        )
    return threshold


def build_threshold_table(feature_arity, splits):
    """Builds the threshold table from the splits of each feature.

    For a continuous feature, the thresholds of its splits are kept in the given
    order (they are expected increasing and unique). The splits of a categorical
    feature are discarded.

    Parameters
    ----------
    feature_arity : array-like or dict
        The arity of each feature, 0 for continuous features. See
        ``check_feature_arity``.

    splits : sequence of sequences of splits
        For each feature, its candidate splits. The splits of a continuous
        feature must expose a ``threshold`` (such as ``ContinuousSplit``).

    Returns
    -------
    output : ThresholdTable
        The thresholds of all the features
    """
    splits = list(splits)
    n_features = len(splits)
    feature_arity = check_feature_arity(feature_arity, n_features=n_features)

    binning_thresholds = []
    for col_idx, (arity, col_splits) in enumerate(zip(feature_arity, splits)):
        if arity == 0:
            col_thresholds = [_split_threshold(col_idx, split) for split in col_splits]
        else:
            for split in col_splits:
                if isinstance(split, ContinuousSplit):
                    raise ValueError(
                        f"Feature {col_idx} is categorical with arity {arity}, but "
                        f"it got a continuous split: {split!r}"
                    )
            col_thresholds = []
        binning_thresholds.append(col_thresholds)

    return ThresholdTable(binning_thresholds, feature_arity)


def check_threshold_table(binning_thresholds, feature_arity):
    """Returns a ``ThresholdTable`` from ``binning_thresholds``, which is either a
    table already or the sequence of thresholds of each feature. An existing table
    must have been built with the same ``feature_arity``, which can be left to
    None in that case.
    """
    if isinstance(binning_thresholds, ThresholdTable):
        table = binning_thresholds
        if feature_arity is None:
            return table
        feature_arity = check_feature_arity(
            feature_arity, n_features=table.n_features
        )
        if not np.array_equal(feature_arity, table.feature_arity):
            raise ValueError(
                "feature_arity differs from the one the threshold table was built "
                "with"
            )
        return table
    return ThresholdTable(binning_thresholds, feature_arity)
