# Authors: Stephane Gaiffas <stephane.gaiffas@gmail.com>
# License: BSD 3 clause

"""Shared options for jit-compiled functions and small helpers for the output
matrices.
"""

import numpy as np


# Global jit decorator options
NOPYTHON = True
NOGIL = True
BOUNDSCHECK = False
CACHE = True

_UINT8_MAX = np.iinfo(np.uint8).max
_UINT16_MAX = np.iinfo(np.uint16).max
_UINT32_MAX = np.iinfo(np.uint32).max
_UINT64_MAX = np.iinfo(np.uint64).max


def get_min_uint_dtype(max_value):
    """Gives the smallest unsigned integer dtype able to store ``max_value``.

    Parameters
    ----------
    max_value : int
        Maximum value expected in the matrix

    Returns
    -------
    output : numpy.dtype
        One of uint8, uint16, uint32 or uint64
    """
    if max_value <= _UINT8_MAX:
        return np.dtype(np.uint8)
    elif _UINT8_MAX < max_value <= _UINT16_MAX:
        return np.dtype(np.uint16)
    elif _UINT16_MAX < max_value <= _UINT32_MAX:
        return np.dtype(np.uint32)
    elif _UINT32_MAX < max_value <= _UINT64_MAX:
        return np.dtype(np.uint64)
    else:
        raise ValueError(f"No unsigned integer dtype can store {max_value}")


def read_only(a):
    """Returns a copy of ``a`` with its writeable flag turned off, so that neither
    the caller nor anyone holding the result can change it afterwards.
    """
    a = np.array(a, copy=True)
    a.flags.writeable = False
    return a
