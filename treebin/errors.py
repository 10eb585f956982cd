# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""Exceptions raised when raw data disagrees with the declared feature metadata.
Broken call contracts (mismatched lengths, unsorted thresholds, ...) raise a plain
``ValueError`` instead.
"""


class InvalidCategoricalValue(ValueError):
    """A categorical feature got a value outside of ``{0, ..., arity - 1}``.

    Parameters
    ----------
    feature_index : int
        Index of the categorical feature

    value : float
        The offending raw value

    arity : int
        Number of categories declared for the feature

    reason : str, default="out of range"
        Either "out of range" or "not an integer"

    point : RawPoint or None
        The data point containing the value, when known

    point_index : int or None
        The position of ``point`` in the converted dataset, when known
    """

    def __init__(
        self,
        feature_index,
        value,
        arity,
        reason="out of range",
        point=None,
        point_index=None,
    ):
        super().__init__(feature_index, value, arity)
        self.feature_index = feature_index
        self.value = value
        self.arity = arity
        self.reason = reason
        self.point = point
        self.point_index = point_index

    def __str__(self):
        msg = (
            f"Invalid data: feature {self.feature_index} is categorical with values "
            f"in {{0,...,{self.arity - 1}}}, but a data point gives it value "
            f"{self.value} ({self.reason})."
        )
        if self.point is not None:
            msg += f"\n  Bad data point: {self.point!r}"
        if self.point_index is not None:
            msg += f"\n  Index of the bad data point: {self.point_index}"
        return msg

    def __reduce__(self):
        return (
            self.__class__,
            (
                self.feature_index,
                self.value,
                self.arity,
                self.reason,
                self.point,
                self.point_index,
            ),
        )


class InvalidCategoricalValues(ValueError):
    """Several data points contain an invalid categorical value. ``errors`` holds
    the first ``InvalidCategoricalValue`` of each bad point, sorted by point index.
    """

    # Number of errors detailed in the message
    max_displayed = 5

    def __init__(self, errors):
        super().__init__(errors)
        self.errors = list(errors)

    def __str__(self):
        lines = [f"Found {len(self.errors)} data points with invalid categorical values"]
        for error in self.errors[: self.max_displayed]:
            lines.append(
                f"  point {error.point_index}: feature {error.feature_index} has "
                f"value {error.value} with arity {error.arity} ({error.reason})"
            )
        if len(self.errors) > self.max_displayed:
            lines.append(f"  ... and {len(self.errors) - self.max_displayed} more")
        return "\n".join(lines)

    def __reduce__(self):
        return self.__class__, (self.errors,)
