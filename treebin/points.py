# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""Raw and binned data points. Both are immutable: their arrays are read-only
copies of what they were built from.
"""

import numpy as np

from ._utils import read_only


class RawPoint(object):
    """A label and the raw values of its features.

    Parameters
    ----------
    label : float
        Label of the point

    features : array-like
        Raw values of the features, one per feature index
    """

    __slots__ = ("label", "features")

    def __init__(self, label, features):
        features = np.asarray(features, dtype=np.float64)
        if features.ndim != 1:
            raise ValueError(
                f"features must be one-dimensional, got shape {features.shape}"
            )
        object.__setattr__(self, "label", float(label))
        object.__setattr__(self, "features", read_only(features))

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def n_features(self):
        return self.features.shape[0]

    def __eq__(self, other):
        if not isinstance(other, RawPoint):
            return NotImplemented
        return self.label == other.label and np.array_equal(
            self.features, other.features
        )

    def __hash__(self):
        # Adding 0.0 maps -0.0 to 0.0, which compare equal
        return hash((self.label, (self.features + 0.0).tobytes()))

    def __repr__(self):
        return f"RawPoint(label={self.label}, features={self.features.tolist()})"

    def __reduce__(self):
        return self.__class__, (self.label, self.features)


class BinnedPoint(object):
    """A label and the bin indices of its features.

    Parameters
    ----------
    label : float
        Label of the point, carried unchanged from the raw point

    bins : array-like
        Bin index of each feature, aligned with the raw features
    """

    __slots__ = ("label", "bins")

    def __init__(self, label, bins):
        bins = np.asarray(bins, dtype=np.int32)
        if bins.ndim != 1:
            raise ValueError(f"bins must be one-dimensional, got shape {bins.shape}")
        object.__setattr__(self, "label", float(label))
        object.__setattr__(self, "bins", read_only(bins))

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def n_features(self):
        return self.bins.shape[0]

    def __eq__(self, other):
        if not isinstance(other, BinnedPoint):
            return NotImplemented
        return self.label == other.label and np.array_equal(self.bins, other.bins)

    def __hash__(self):
        return hash((self.label, self.bins.tobytes()))

    def __repr__(self):
        return f"BinnedPoint(label={self.label}, bins={self.bins.tolist()})"

    def __reduce__(self):
        return self.__class__, (self.label, self.bins)
