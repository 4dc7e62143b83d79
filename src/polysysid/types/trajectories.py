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
Trajectory and Simulation Result Types

Time series produced by the polynomial simulator and the containers that
bundle them.

Mathematical Context
-------------------
For a polynomial model with monomial map m(x, u):

    x[k+1] = (coeffmat + Δ) · m(x[k], u[k]) + Ep · pn[k]
    y[k]   = x[k] + Em · mn[k]

where Δ is the sampled coefficient uncertainty (zero for nominal models).

Usage
-----
>>> from polysysid.types.trajectories import PolySimulationResult
>>>
>>> result: PolySimulationResult = simulator.simulate(model, u)
>>> y = result['y']          # (n, T)
>>> x = result['x']          # (n, T)
>>> pn = result['p_noise']   # (n, T)
"""

from typing import List

import numpy as np
from typing_extensions import TypedDict

from .core import ArrayLike

# ============================================================================
# Trajectory Types
# ============================================================================

StateTrajectory = ArrayLike
"""
State trace, shape (n, T).

Column k is x[k]; column 0 is the initial condition.
"""

OutputSequence = ArrayLike
"""Measured output trace, shape (n_y, T)."""

InputSequence = ArrayLike
"""Input sequence, shape (n_i, T). The column count sets the horizon T."""

NoiseSequence = ArrayLike
"""
Bounded noise trace, shape (n_channels, T).

Row i satisfies norm(row_i, norm_type[i]) <= bound[i].
"""

# ============================================================================
# Diagnostics
# ============================================================================


class Notice(TypedDict):
    """
    One non-fatal diagnostic.

    Attributes
    ----------
    category : str
        Warning class name ('BroadcastWarning', 'BoundViolationWarning')
    message : str
        Human-readable description
    """

    category: str
    message: str


# ============================================================================
# Simulation Results
# ============================================================================


class PolySimulationResult(TypedDict):
    """
    Result of one polynomial simulation run.

    Attributes
    ----------
    y : np.ndarray
        Output trace (n, T)
    x : np.ndarray
        State trace (n, T), x[:, 0] is the initial condition
    p_noise : np.ndarray
        Process noise used (n, T)
    m_noise : np.ndarray
        Measurement noise used (n, T)
    unc_coeffmat : np.ndarray
        Sampled coefficient perturbation (n, n_mono), zeros for nominal models
    horizon : int
        Number of time steps T
    notices : List[Notice]
        Diagnostics raised while resolving arguments and checking bounds
    """

    y: np.ndarray
    x: np.ndarray
    p_noise: np.ndarray
    m_noise: np.ndarray
    unc_coeffmat: np.ndarray
    horizon: int
    notices: List[Notice]


class MonteCarloStatistics(TypedDict):
    """
    Per-entry statistics across Monte Carlo paths.

    Every array has shape (dim, T).
    """

    mean: np.ndarray
    std: np.ndarray
    min: np.ndarray
    max: np.ndarray
    median: np.ndarray
    q25: np.ndarray
    q75: np.ndarray


__all__ = [
    "StateTrajectory",
    "OutputSequence",
    "InputSequence",
    "NoiseSequence",
    "Notice",
    "PolySimulationResult",
    "MonteCarloStatistics",
]
