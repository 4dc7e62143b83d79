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
Polynomial Model Simulator

Simulates (uncertain) polynomial models over a finite horizon with
bounded process noise, bounded measurement noise and sampled coefficient
uncertainty.

Recursion for k = 0 .. T-1:

    y[k]   = x[k] + Em · mn[k]
    x[k+1] = (coeffmat + Δ) · m(x[k], u[k]) + Ep · pn[k]

where Δ is drawn once per simulation from the model's uncertainty bounds
(zero for PolyModel).

Procedure
---------
1. Reject non-polynomial models (ConfigurationError) before any work
2. Resolve defaults and scalar broadcasts of the optional arguments
3. Validate bound lengths (ValueError)
4. Validate the input row count (ShapeMismatchError)
5. Check input channels against finite bounds (first violation only)
6. Validate the initial condition length (ValueError)
7. Process noise (honours the deterministic flag)
8. Measurement noise (always non-deterministic)
9. Coefficient uncertainty (its own deterministic stream)
10. Time recursion
11. Check state channels against finite bounds (first violation only)

The model is never modified; all traces live in the call.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from polysysid.systems.base.argument_utils import (
    build_options,
    check_bounds,
    is_empty,
    resolve_vector,
)
from polysysid.systems.base.diagnostics import BoundViolationWarning, DiagnosticLog
from polysysid.systems.base.exceptions import ConfigurationError, ShapeMismatchError
from polysysid.systems.base.hybrid_model import ModelMark
from polysysid.systems.base.utils.bounded_noise import (
    BoundedNoiseGenerator,
    BoundedNoiseSource,
)
from polysysid.systems.models.poly_model import PolyModel
from polysysid.systems.simulation.monte_carlo_result import MonteCarloResult
from polysysid.types.core import ArrayLike
from polysysid.types.trajectories import PolySimulationResult

# Keys of the deterministic noise sequences drawn in one simulation
PROCESS_NOISE_STREAM = 0
UNCERTAINTY_STREAM = 1


@dataclass(frozen=True)
class SimulationOptions:
    """
    Optional simulation arguments.

    Attributes
    ----------
    ini_cond : Optional[ArrayLike]
        Initial state (n,), default zeros
    pn_bound : Optional[ArrayLike]
        Process-noise bounds (n,), default zeros (noiseless)
    mn_bound : Optional[ArrayLike]
        Measurement-noise bounds (n,), default zeros (noiseless)
    input_bound : Optional[ArrayLike]
        Input bounds (n_i,), default inf
    state_bound : Optional[ArrayLike]
        State bounds (n,), default inf
    deterministic : Optional[bool]
        Reproducible process noise and uncertainty, default False
    """

    ini_cond: Optional[Any] = None
    pn_bound: Optional[Any] = None
    mn_bound: Optional[Any] = None
    input_bound: Optional[Any] = None
    state_bound: Optional[Any] = None
    deterministic: Optional[bool] = None


class PolySimulator:
    """
    Simulates polynomial models with bounded noise.

    Parameters
    ----------
    noise_generator : Optional[BoundedNoiseSource]
        Bounded-noise service; a fresh BoundedNoiseGenerator by default

    Examples
    --------
    >>> model = PolyModel(degmat=[[1, 0], [0, 1]], coeffmat=[[0.5, 0.3]])
    >>> sim = PolySimulator()
    >>> result = sim.simulate(model, np.ones((1, 3)))
    >>> result['x']
    array([[0.  , 0.3 , 0.45]])
    >>>
    >>> # Noisy, reproducible process noise
    >>> result = sim.simulate(
    ...     model, np.ones((1, 50)),
    ...     pn_bound=0.1, mn_bound=0.05, deterministic=True,
    ... )
    >>> result['p_noise'].shape
    (1, 50)
    """

    def __init__(self, noise_generator: Optional[BoundedNoiseSource] = None):
        if noise_generator is None:
            noise_generator = BoundedNoiseGenerator()
        if not isinstance(noise_generator, BoundedNoiseSource):
            raise TypeError(
                f"noise_generator must provide generate(), got "
                f"{type(noise_generator).__name__}"
            )
        self.noise_generator = noise_generator

    # ========================================================================
    # Single Trajectory Simulation
    # ========================================================================

    def simulate(
        self,
        model: PolyModel,
        u: ArrayLike,
        options: Optional[SimulationOptions] = None,
        **option_fields: Any,
    ) -> PolySimulationResult:
        """
        Simulate one trajectory.

        Parameters
        ----------
        model : PolyModel
            Polynomial or uncertain polynomial model
        u : ArrayLike
            Input sequence (n_i, T); a 1D sequence is accepted for n_i = 1
        options : Optional[SimulationOptions]
            Optional arguments; alternatively pass the fields as keywords

        Returns
        -------
        PolySimulationResult
            Output, state and noise traces plus diagnostics

        Raises
        ------
        ConfigurationError
            If the model is not a polynomial model
        ValueError
            If a bound vector or the initial condition has the wrong length,
            a bound is negative, or the horizon is empty
        ShapeMismatchError
            If the input row count differs from the model's input dimension

        Warns
        -----
        BroadcastWarning
            For every scalar bound expanded to a vector
        BoundViolationWarning
            When an input or state channel exceeds its bound
        """
        mark = getattr(model, "mark", None)
        if not isinstance(mark, ModelMark) or not mark.is_polynomial:
            raise ConfigurationError("The system model must be a polynomial model.")

        options = build_options(SimulationOptions, options, option_fields)
        log = DiagnosticLog()

        n, n_i, n_mono = model.n, model.n_i, model.n_mono

        ini_cond = options.ini_cond
        pn_bound = resolve_vector(
            options.pn_bound, n, 0.0, "bounds for process noise", log,
            label="bound for process noise",
        )
        mn_bound = resolve_vector(
            options.mn_bound, model.n_y, 0.0, "bounds for measurement noise", log,
            label="bound for measurement noise",
        )
        input_bound = resolve_vector(
            options.input_bound, n_i, np.inf, "bounds for inputs", log,
            label="input bound",
        )
        state_bound = resolve_vector(
            options.state_bound, n, np.inf, "bounds for states", log,
            label="state bound",
        )
        deterministic = bool(options.deterministic) if options.deterministic is not None else False

        check_bounds(pn_bound, "bounds for process noise")
        check_bounds(mn_bound, "bounds for measurement noise")
        check_bounds(input_bound, "bounds for inputs")
        check_bounds(state_bound, "bounds for states")

        u = self._validate_input(u, n_i)
        horizon = u.shape[1]

        self._check_bounds_first_violation(
            u, model.input_norm, input_bound, "input", log
        )

        x0 = self._validate_initial_condition(ini_cond, n)

        p_noise = self.noise_generator.generate(
            model.pn_norm, pn_bound, horizon, deterministic, stream=PROCESS_NOISE_STREAM
        )
        m_noise = self.noise_generator.generate(model.mn_norm, mn_bound, horizon)
        unc_coeffmat = self._sample_uncertainty(model, deterministic)

        coeffmat = model.coeffmat + unc_coeffmat
        evaluator = model.evaluator
        Ep, Em = model.Ep, model.Em

        x_trace = np.zeros((n, horizon))
        y = np.zeros((model.n_y, horizon))
        x = x0
        for k in range(horizon):
            x_trace[:, k] = x
            y[:, k] = x + Em @ m_noise[:, k]
            x = coeffmat @ evaluator.evaluate(x, u[:, k]) + Ep @ p_noise[:, k]

        self._check_bounds_first_violation(
            x_trace, model.state_norm, state_bound, "state", log
        )

        return PolySimulationResult(
            y=y,
            x=x_trace,
            p_noise=p_noise,
            m_noise=m_noise,
            unc_coeffmat=unc_coeffmat,
            horizon=horizon,
            notices=log.notices,
        )

    # ========================================================================
    # Monte Carlo Simulation
    # ========================================================================

    def simulate_monte_carlo(
        self,
        model: PolyModel,
        u: ArrayLike,
        n_paths: int,
        options: Optional[SimulationOptions] = None,
        **option_fields: Any,
    ) -> MonteCarloResult:
        """
        Simulate ``n_paths`` independent trajectories.

        Each path draws fresh noise and uncertainty; with
        ``deterministic=True`` every path reuses the same process noise and
        uncertainty and only the measurement noise differs.

        Returns
        -------
        MonteCarloResult
            Stacked traces of shape (n_paths, dim, T)

        Examples
        --------
        >>> mc = sim.simulate_monte_carlo(model, u, n_paths=200, mn_bound=0.1)
        >>> stats = mc.get_statistics('outputs')
        >>> stats['mean'].shape
        (1, 50)
        """
        if n_paths <= 0:
            raise ValueError(f"n_paths must be positive, got {n_paths}")
        options = build_options(SimulationOptions, options, option_fields)

        runs = [self.simulate(model, u, options) for _ in range(n_paths)]
        return MonteCarloResult(
            outputs=np.stack([r["y"] for r in runs]),
            states=np.stack([r["x"] for r in runs]),
            p_noise=np.stack([r["p_noise"] for r in runs]),
            m_noise=np.stack([r["m_noise"] for r in runs]),
            n_paths=n_paths,
            horizon=runs[0]["horizon"],
        )

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _validate_input(u: ArrayLike, n_i: int) -> np.ndarray:
        u = np.asarray(u, dtype=float)
        if u.ndim == 1 and n_i == 1:
            u = u.reshape(1, -1)
        if u.ndim != 2 or u.shape[0] != n_i:
            raise ShapeMismatchError(
                f"The input dimension is not correct: expected {n_i} rows, "
                f"got shape {u.shape}"
            )
        if u.shape[1] == 0:
            raise ValueError("The input sequence must contain at least one time step")
        return u

    @staticmethod
    def _validate_initial_condition(ini_cond: Any, n: int) -> np.ndarray:
        if is_empty(ini_cond):
            return np.zeros(n)
        x0 = np.asarray(ini_cond, dtype=float)
        if sum(1 for d in x0.shape if d != 1) > 1 or x0.size != n:
            raise ValueError(
                f"The initial condition is not consistent with the model: "
                f"expected {n} entries, got shape {x0.shape}"
            )
        return x0.reshape(-1)

    @staticmethod
    def _check_bounds_first_violation(
        trace: np.ndarray,
        norm_types: np.ndarray,
        bounds: np.ndarray,
        name: str,
        log: DiagnosticLog,
    ):
        # only the first violated channel is reported
        for i, bound in enumerate(bounds):
            if np.isinf(bound):
                continue
            if np.linalg.norm(trace[i], ord=norm_types[i]) > bound:
                log.emit(
                    f"At least one dimension of the {name} sequence exceeds "
                    f"its bound (channel {i})",
                    BoundViolationWarning,
                )
                break

    def _sample_uncertainty(self, model: PolyModel, deterministic: bool) -> np.ndarray:
        shape = model.coeffmat.shape
        d_coeffmat = getattr(model, "d_coeffmat", None)
        if d_coeffmat is None:
            return np.zeros(shape)

        # one channel per coefficient, inf-norm, horizon 1
        n_entries = d_coeffmat.size
        draws = self.noise_generator.generate(
            np.full(n_entries, np.inf),
            d_coeffmat.reshape(-1),
            1,
            deterministic,
            stream=UNCERTAINTY_STREAM,
        )
        return np.asarray(draws, dtype=float).reshape(shape)

    def __repr__(self) -> str:
        return f"PolySimulator(noise_generator={self.noise_generator!r})"


def poly_sim(
    model: PolyModel,
    u: ArrayLike,
    ini_cond: Optional[ArrayLike] = None,
    pn_bound: Optional[ArrayLike] = None,
    mn_bound: Optional[ArrayLike] = None,
    input_bound: Optional[ArrayLike] = None,
    state_bound: Optional[ArrayLike] = None,
    deterministic: bool = False,
    noise_generator: Optional[BoundedNoiseSource] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Simulate a polynomial model and return (y, p_noise, m_noise).

    Every optional argument may be omitted or passed as None to take its
    default. See PolySimulator.simulate.

    Examples
    --------
    >>> y, pn, mn = poly_sim(model, np.ones((1, 3)), ini_cond=[0.0])
    >>> y
    array([[0.  , 0.3 , 0.45]])
    """
    result = PolySimulator(noise_generator).simulate(
        model,
        u,
        SimulationOptions(
            ini_cond=ini_cond,
            pn_bound=pn_bound,
            mn_bound=mn_bound,
            input_bound=input_bound,
            state_bound=state_bound,
            deterministic=deterministic,
        ),
    )
    return result["y"], result["p_noise"], result["m_noise"]


__all__ = ["SimulationOptions", "PolySimulator", "poly_sim"]
