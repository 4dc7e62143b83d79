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
Core Array Types

Array aliases shared by the model descriptors, the polynomial evaluator,
the noise generator and the simulator.

Shape Conventions
-----------------
All signals are stored channel-major, one row per channel and one column
per time step:

- State trace:        (n, T)
- Output trace:       (n_y, T)
- Input sequence:     (n_i, T)
- Noise trace:        (n_channels, T)

Norm-type vectors hold one entry per channel, each entry in {1, 2, inf}.
A bound of inf means the channel is unconstrained.
"""

from typing import Sequence, Union

import numpy as np

# ============================================================================
# Basic Array Types
# ============================================================================

ArrayLike = Union[np.ndarray, Sequence[float], float, int]
"""Anything numpy can turn into a float array."""

ScalarLike = Union[float, int, np.floating, np.integer]

# ============================================================================
# Vector Types
# ============================================================================

NormTypeVector = np.ndarray
"""
Per-channel norm types, shape (n_channels,).

Each entry is 1, 2 or np.inf and selects the vector norm used to measure
the channel's whole time series.

Examples
--------
>>> pn_norm: NormTypeVector = np.array([2.0, np.inf])
"""

BoundVector = np.ndarray
"""
Per-channel upper bounds, shape (n_channels,).

Non-negative; np.inf marks an unconstrained channel.
"""

StateVector = np.ndarray
"""State at one time step, shape (n,)."""

InputVector = np.ndarray
"""Input at one time step, shape (n_i,)."""

MonomialVector = np.ndarray
"""Monomial values at one time step, shape (n_mono,)."""

# ============================================================================
# Matrix Types
# ============================================================================

CoefficientMatrix = np.ndarray
"""
Polynomial coefficient matrix, shape (n, n_mono).

Row j holds the weights of every monomial in the update of state j.
"""

DegreeMatrix = np.ndarray
"""
Exponent table, shape (n_mono, n + n_i).

Row l describes monomial l: the first n columns are the exponents of the
state variables, the remaining n_i columns those of the input variables.

Examples
--------
>>> # monomials x1, u1 and x1**2 * u1 for n = 1, n_i = 1
>>> degmat: DegreeMatrix = np.array([[1, 0], [0, 1], [2, 1]])
"""

NoiseShapingMatrix = np.ndarray
"""Square noise-shaping factor (Ep or Em), shape (n_y, n_y)."""

OffsetMatrix = np.ndarray
"""Additive ARX constants, shape (n_y, n_mode); column i belongs to mode i."""

__all__ = [
    "ArrayLike",
    "ScalarLike",
    "NormTypeVector",
    "BoundVector",
    "StateVector",
    "InputVector",
    "MonomialVector",
    "CoefficientMatrix",
    "DegreeMatrix",
    "NoiseShapingMatrix",
    "OffsetMatrix",
]
