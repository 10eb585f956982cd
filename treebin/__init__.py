# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

from .errors import InvalidCategoricalValue, InvalidCategoricalValues
from .points import RawPoint, BinnedPoint
from .thresholds import (
    ContinuousSplit,
    CategoricalSplit,
    ThresholdTable,
    build_threshold_table,
)
from .converter import find_bin, convert_point, convert_dataset, convert_matrix
from .encoder import TreePointEncoder

__version__ = "0.1.0"
