# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""
This module performs unittests for the conversion of raw points and datasets into
binned points
"""

import pickle
import pytest
import numpy as np
import pandas as pd

from treebin import (
    BinnedPoint,
    InvalidCategoricalValue,
    InvalidCategoricalValues,
    RawPoint,
    ThresholdTable,
    convert_dataset,
    convert_matrix,
    convert_point,
)


np.random.seed(42)


def get_random_dataset(n_samples, feature_arity, n_thresholds=15):
    """Random points whose categorical values are all valid, along with a matching
    threshold table
    """
    binning_thresholds = []
    X = np.empty((n_samples, len(feature_arity)))
    for col_idx, arity in enumerate(feature_arity):
        if arity == 0:
            binning_thresholds.append(np.unique(np.random.randn(n_thresholds)))
            X[:, col_idx] = np.random.randn(n_samples)
        else:
            binning_thresholds.append([])
            X[:, col_idx] = np.random.randint(arity, size=n_samples)
    y = np.random.randn(n_samples)
    points = [RawPoint(label, features) for label, features in zip(y, X)]
    return points, ThresholdTable(binning_thresholds, feature_arity)


def test_convert_point():
    binning_thresholds = [[2.0], []]
    feature_arity = [0, 2]
    point = RawPoint(1.0, [1.5, 1])
    binned_point = convert_point(point, binning_thresholds, feature_arity)
    assert binned_point == BinnedPoint(1.0, [0, 1])
    assert binned_point.label == 1.0
    assert binned_point.bins.dtype == np.int32
    # A (label, features) pair works as well
    assert convert_point((1.0, [2.5, 0]), binning_thresholds, feature_arity) == (
        BinnedPoint(1.0, [1, 0])
    )


def test_convert_point_with_threshold_table():
    table = ThresholdTable([[1.0, 3.0, 5.0], [], []], [0, 3, 0])
    point = RawPoint(-2.5, [5.0, 2, 12.0])
    binned_point = convert_point(point, table)
    np.testing.assert_array_equal(binned_point.bins, [2, 2, 0])
    assert binned_point.label == -2.5


def test_convert_point_first_error_wins():
    binning_thresholds = [[], [0.0], [], []]
    feature_arity = [2, 0, 3, 2]
    point = RawPoint(0.5, [1, 7.0, 3, -1])
    with pytest.raises(InvalidCategoricalValue) as exc_info:
        convert_point(point, binning_thresholds, feature_arity)
    exc = exc_info.value
    assert exc.feature_index == 2
    assert exc.value == 3
    assert exc.arity == 3
    assert exc.point == point
    assert exc.point_index is None
    msg = str(exc)
    assert "feature 2 is categorical with values in {0,...,2}" in msg
    assert "value 3.0" in msg
    assert "Bad data point: RawPoint(label=0.5, features=[1.0, 7.0, 3.0, -1.0])" in msg


def test_convert_point_bad_number_of_features():
    with pytest.raises(ValueError, match="The point has 3 features while the"):
        convert_point(RawPoint(0.0, [1.0, 2.0, 3.0]), [[], []], [0, 0])
    with pytest.raises(ValueError, match="Expected a RawPoint"):
        convert_point(1.0, [[]], [0])


def test_convert_point_non_integral():
    with pytest.raises(InvalidCategoricalValue, match="not an integer"):
        convert_point(RawPoint(0.0, [1.7]), [[]], [3])
    binned_point = convert_point(
        RawPoint(0.0, [1.7]), [[]], [3], non_integral="truncate"
    )
    np.testing.assert_array_equal(binned_point.bins, [1])


@pytest.mark.parametrize("n_jobs", [None, 1, 2, 4, -1])
def test_convert_dataset(n_jobs):
    feature_arity = [0, 3, 0, 5, 0]
    points, table = get_random_dataset(257, feature_arity)
    binned_points = convert_dataset(points, table, feature_arity, n_jobs=n_jobs)
    assert len(binned_points) == len(points)
    for point, binned_point in zip(points, binned_points):
        assert binned_point.label == point.label
        assert binned_point.n_features == point.n_features
        assert binned_point == convert_point(point, table)
        bins = binned_point.bins
        assert np.all(bins >= 0)
        assert np.all(bins < table.n_bins)


def test_convert_dataset_is_deterministic():
    feature_arity = [0, 4, 0]
    points, table = get_random_dataset(100, feature_arity)
    first = convert_dataset(points, table, n_jobs=2)
    second = convert_dataset(points, table, n_jobs=3)
    assert first == second


def test_convert_dataset_empty():
    assert convert_dataset([], [[1.0], []], [0, 2]) == []


def test_convert_dataset_no_features():
    binned_points = convert_dataset([RawPoint(1.0, []), RawPoint(2.0, [])], [], [])
    assert binned_points == [BinnedPoint(1.0, []), BinnedPoint(2.0, [])]


@pytest.mark.parametrize("n_jobs", [None, 2])
def test_convert_dataset_raises_on_first_bad_point(n_jobs):
    binning_thresholds = [[2.0], []]
    feature_arity = [0, 2]
    points = [
        RawPoint(1.0, [1.5, 1]),
        RawPoint(0.0, [3.0, 2]),
        RawPoint(1.0, [0.5, 5]),
    ]
    with pytest.raises(InvalidCategoricalValue) as exc_info:
        convert_dataset(points, binning_thresholds, feature_arity, n_jobs=n_jobs)
    exc = exc_info.value
    assert exc.point_index == 1
    assert exc.point == points[1]
    assert exc.feature_index == 1
    assert exc.value == 2
    assert "Index of the bad data point: 1" in str(exc)
    assert "RawPoint(label=0.0, features=[3.0, 2.0])" in str(exc)


def test_convert_dataset_collects_all_bad_points():
    binning_thresholds = [[2.0], [], []]
    feature_arity = [0, 2, 3]
    points = [
        RawPoint(1.0, [1.5, 1, 0]),
        RawPoint(0.0, [3.0, 2, 0]),
        RawPoint(1.0, [0.5, 1, 2]),
        RawPoint(1.0, [0.5, -1, 7]),
        RawPoint(1.0, [0.5, 1, 1.5]),
    ]
    with pytest.raises(InvalidCategoricalValues) as exc_info:
        convert_dataset(points, binning_thresholds, feature_arity, on_error="collect")
    errors = exc_info.value.errors
    assert [error.point_index for error in errors] == [1, 3, 4]
    assert [error.feature_index for error in errors] == [1, 1, 2]
    assert [error.reason for error in errors] == [
        "out of range",
        "out of range",
        "not an integer",
    ]
    assert errors[1].point == points[3]
    assert str(exc_info.value).startswith(
        "Found 3 data points with invalid categorical values"
    )


def test_convert_dataset_bad_parameters():
    points = [RawPoint(0.0, [1.0])]
    with pytest.raises(ValueError, match="on_error must be 'raise' or 'collect'"):
        convert_dataset(points, [[]], [0], on_error="skip")
    with pytest.raises(ValueError, match="non_integral must be"):
        convert_dataset(points, [[]], [0], non_integral="round")
    with pytest.raises(ValueError, match="Point 1 has 2 features"):
        convert_dataset(
            [RawPoint(0.0, [1.0]), RawPoint(0.0, [1.0, 2.0])], [[]], [0]
        )


def test_convert_matrix():
    X = np.array([[0.5, 0], [1.0, 2], [2.0, 1], [5.0, 0], [6.0, 2]])
    X_binned = convert_matrix(X, [[1.0, 3.0, 5.0], []], [0, 3], n_jobs=2)
    assert X_binned.dtype == np.int32
    np.testing.assert_array_equal(X_binned, [[0, 0], [0, 2], [1, 1], [2, 0], [3, 2]])


def test_convert_matrix_dataframe():
    df = pd.DataFrame({"a": [0.5, 3.5], "b": [1, 0]})
    X_binned = convert_matrix(df, [[1.0, 3.0, 5.0], []], {1: 2})
    np.testing.assert_array_equal(X_binned, [[0, 1], [2, 0]])


def test_convert_matrix_error_uses_labels():
    X = np.array([[0.5, 0], [1.0, 3]])
    with pytest.raises(InvalidCategoricalValue) as exc_info:
        convert_matrix(X, [[1.0], []], [0, 3], y=[4.0, 5.0])
    assert exc_info.value.point == RawPoint(5.0, [1.0, 3.0])
    assert exc_info.value.point_index == 1
    with pytest.raises(InvalidCategoricalValue) as exc_info:
        convert_matrix(X, [[1.0], []], [0, 3])
    assert np.isnan(exc_info.value.point.label)


def test_raw_and_binned_points_are_immutable():
    features = np.array([1.0, 2.0])
    point = RawPoint(1, features)
    assert point.label == 1.0
    assert isinstance(point.label, float)
    features[0] = 10.0
    np.testing.assert_array_equal(point.features, [1.0, 2.0])
    with pytest.raises(AttributeError):
        point.label = 2.0
    with pytest.raises(ValueError):
        point.features[0] = 3.0
    binned_point = BinnedPoint(1.0, [0, 1])
    with pytest.raises(AttributeError):
        binned_point.bins = np.array([1, 1])
    with pytest.raises(ValueError):
        binned_point.bins[0] = 1
    with pytest.raises(ValueError, match="features must be one-dimensional"):
        RawPoint(0.0, [[1.0]])


def test_equal_points_have_equal_hashes():
    point = RawPoint(0.0, [0.0, 1.0])
    other = RawPoint(-0.0, [-0.0, 1.0])
    assert point == other
    assert hash(point) == hash(other)
    assert len({point, other}) == 1
    assert hash(BinnedPoint(1.0, [0, 2])) == hash(BinnedPoint(1.0, [0, 2]))


def test_points_and_errors_pickle():
    point = RawPoint(1.0, [1.0, 2.0])
    assert pickle.loads(pickle.dumps(point)) == point
    binned_point = BinnedPoint(1.0, [0, 3])
    assert pickle.loads(pickle.dumps(binned_point)) == binned_point
    exc = InvalidCategoricalValue(1, 4.0, 3, point=point, point_index=7)
    unpickled = pickle.loads(pickle.dumps(exc))
    assert str(unpickled) == str(exc)
    assert unpickled.point == point
    assert unpickled.point_index == 7
    exc = InvalidCategoricalValues([exc])
    assert pickle.loads(pickle.dumps(exc)).errors[0].point_index == 7
