# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Argument Resolution Utilities

Shared defaulting, broadcasting and validation of the optional vector and
matrix arguments accepted by model constructors and the simulator.

Resolution order for every optional argument:
1. ``None`` or an empty array -> default value of the full target size
2. A single value where the target size exceeds 1 -> broadcast, with a
   BroadcastWarning recorded on the DiagnosticLog
3. Shape validation (ValueError for vectors, ShapeMismatchError for
   matrices)
"""

from typing import Any, Dict, Optional

import numpy as np

from polysysid.systems.base.diagnostics import BroadcastWarning, DiagnosticLog
from polysysid.systems.base.exceptions import ShapeMismatchError

VALID_NORM_TYPES = (1.0, 2.0, np.inf)


# ============================================================================
# Helpers
# ============================================================================


def is_empty(value: Any) -> bool:
    """True for None or an array-like with no entries."""
    if value is None:
        return True
    return np.size(value) == 0


def freeze(array: np.ndarray, dtype: type = float) -> np.ndarray:
    """Return a read-only copy of ``array``."""
    frozen = np.array(array, dtype=dtype, copy=True)
    frozen.setflags(write=False)
    return frozen


def build_options(options_class: type, options: Any, overrides: Dict[str, Any]):
    """
    Return the options record for a constructor or simulation call.

    Options come either as an instance of ``options_class`` or as keyword
    arguments naming its fields, never both.

    Raises
    ------
    TypeError
        If both forms are given, the instance has the wrong type, or a
        keyword does not name a field
    """
    if options is None:
        return options_class(**overrides)
    if overrides:
        raise TypeError(
            f"Pass either a {options_class.__name__} or keyword options, "
            f"not both (got {sorted(overrides)})"
        )
    if not isinstance(options, options_class):
        raise TypeError(
            f"options must be a {options_class.__name__}, "
            f"got {type(options).__name__}"
        )
    return options


def _is_vector(array: np.ndarray) -> bool:
    # at most one axis may be longer than 1 (row and column vectors pass)
    return sum(1 for d in array.shape if d != 1) <= 1


# ============================================================================
# Vector Arguments
# ============================================================================


def resolve_vector(
    value: Any,
    length: int,
    fill: float,
    name: str,
    log: DiagnosticLog,
    label: Optional[str] = None,
) -> np.ndarray:
    """
    Default, broadcast and validate a per-channel vector argument.

    Parameters
    ----------
    value : ArrayLike or None
        User-supplied value
    length : int
        Required number of entries
    fill : float
        Entry used when the argument is omitted (np.inf or 0.0)
    name : str
        Argument description used in error messages
    log : DiagnosticLog
        Receives the broadcast notice
    label : Optional[str]
        Argument description used in the broadcast notice (defaults to name)

    Returns
    -------
    np.ndarray
        Vector of shape (length,)

    Raises
    ------
    ValueError
        If the value is not a vector or has the wrong number of entries

    Examples
    --------
    >>> log = DiagnosticLog()
    >>> resolve_vector(None, 3, np.inf, 'norm types', log)
    array([inf, inf, inf])
    >>> resolve_vector(2, 3, np.inf, 'norm types', log)  # warns once
    array([2., 2., 2.])
    """
    if is_empty(value):
        return np.full(length, fill, dtype=float)

    array = np.asarray(value, dtype=float)

    if array.size == 1 and length > 1:
        array = np.full(length, array.item(), dtype=float)
        log.emit(
            f"{(label or name).capitalize()} is a scalar, converted to a "
            f"vector with identical entries.",
            BroadcastWarning,
        )
        return array

    if not _is_vector(array):
        raise ValueError(
            f"The {name} must be a vector, got an array of shape {array.shape}"
        )
    array = array.reshape(-1)
    if array.size != length:
        raise ValueError(
            f"The number of {name} is not correct: expected {length}, "
            f"got {array.size}"
        )
    return array


def check_norm_types(norm_types: np.ndarray, name: str) -> np.ndarray:
    """
    Verify every entry is a supported norm type (1, 2 or inf).

    Raises
    ------
    ValueError
        If an entry is not 1, 2 or inf
    """
    invalid = [v for v in norm_types if v not in VALID_NORM_TYPES]
    if invalid:
        raise ValueError(
            f"Unsupported {name}: {invalid}. Norm types must be 1, 2 or inf."
        )
    return norm_types


def check_bounds(bounds: np.ndarray, name: str) -> np.ndarray:
    """
    Verify every bound is non-negative (inf allowed).

    Raises
    ------
    ValueError
        If a bound is negative or NaN
    """
    if np.any(np.isnan(bounds)) or np.any(bounds < 0):
        raise ValueError(f"The {name} must be non-negative, got {bounds}")
    return bounds


# ============================================================================
# Matrix Arguments
# ============================================================================


def resolve_square_matrix(value: Any, size: int, name: str) -> np.ndarray:
    """
    Default and validate a square noise-shaping factor.

    An omitted or empty value becomes the identity of the given size.

    Raises
    ------
    ShapeMismatchError
        If the value is not (size, size)
    """
    if is_empty(value):
        return np.eye(size)

    matrix = np.asarray(value, dtype=float)
    if matrix.ndim == 0:
        matrix = matrix.reshape(1, 1)
    if matrix.shape != (size, size):
        raise ShapeMismatchError(
            f"The factor (matrix) for {name} is not valid: expected shape "
            f"({size}, {size}), got {matrix.shape}"
        )
    return matrix


__all__ = [
    "VALID_NORM_TYPES",
    "is_empty",
    "freeze",
    "build_options",
    "resolve_vector",
    "check_norm_types",
    "check_bounds",
    "resolve_square_matrix",
]
