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
Monte Carlo Result Container

Stores repeated polynomial simulations of one model and input sequence
and computes statistics across paths.
"""

import numpy as np

from polysysid.types.trajectories import MonteCarloStatistics


class MonteCarloResult:
    """
    Container for Monte Carlo simulation results.

    Attributes
    ----------
    outputs : np.ndarray
        Output traces, shape (n_paths, n_y, T)
    states : np.ndarray
        State traces, shape (n_paths, n, T)
    p_noise : np.ndarray
        Process noise, shape (n_paths, n, T)
    m_noise : np.ndarray
        Measurement noise, shape (n_paths, n_y, T)
    n_paths : int
        Number of trajectories
    horizon : int
        Number of time steps per trajectory

    Examples
    --------
    >>> result = sim.simulate_monte_carlo(model, u, n_paths=1000, pn_bound=0.1)
    >>> stats = result.get_statistics()
    >>> mean_traj = stats['mean']   # (n_y, T)
    >>> first_path = result.outputs[0]
    """

    _FIELDS = ("outputs", "states", "p_noise", "m_noise")

    def __init__(
        self,
        outputs: np.ndarray,
        states: np.ndarray,
        p_noise: np.ndarray,
        m_noise: np.ndarray,
        n_paths: int,
        horizon: int,
    ):
        self.outputs = outputs
        self.states = states
        self.p_noise = p_noise
        self.m_noise = m_noise
        self.n_paths = n_paths
        self.horizon = horizon

    def get_statistics(self, field: str = "outputs") -> MonteCarloStatistics:
        """
        Per-entry statistics across paths.

        Parameters
        ----------
        field : str
            One of 'outputs', 'states', 'p_noise', 'm_noise'

        Returns
        -------
        MonteCarloStatistics
            mean, std, min, max, median, q25, q75, each of shape (dim, T)
        """
        if field not in self._FIELDS:
            raise ValueError(f"field must be one of {self._FIELDS}, got '{field}'")
        data = getattr(self, field)
        return MonteCarloStatistics(
            mean=np.mean(data, axis=0),
            std=np.std(data, axis=0),
            min=np.min(data, axis=0),
            max=np.max(data, axis=0),
            median=np.median(data, axis=0),
            q25=np.quantile(data, 0.25, axis=0),
            q75=np.quantile(data, 0.75, axis=0),
        )

    def __repr__(self) -> str:
        return f"MonteCarloResult(n_paths={self.n_paths}, horizon={self.horizon})"
