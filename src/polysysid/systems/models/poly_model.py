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
Polynomial Model Descriptors

Discrete-time polynomial state-space models with bounded noise:

    x[k+1] = coeffmat · m(x[k], u[k]) + Ep · pn[k]
    y[k]   = x[k] + Em · mn[k]

The monomial vector m is defined by the degree matrix (see
PolynomialEvaluator). The output observes the full state, so n_y = n.

UnPolyModel adds a per-coefficient uncertainty bound d_coeffmat; each
simulation samples a perturbation Δ with |Δ[j, l]| <= d_coeffmat[j, l]
and uses coeffmat + Δ.

Mathematical Background
-----------------------
Example: the scalar model x[k+1] = 0.5·x[k] + 0.3·u[k] has

    degmat   = [[1, 0],      # x
                [0, 1]]      # u
    coeffmat = [[0.5, 0.3]]

and the Hénon-like map x1' = 1 - a·x1² + x2, x2' = b·x1 has

    degmat   = [[0, 0], [2, 0], [0, 1], [1, 0]]   # 1, x1², x2, x1
    coeffmat = [[1, -a, 1, 0],
                [0,  0, 0, b]]
"""

from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np
import sympy as sp

from polysysid.systems.base.argument_utils import (
    build_options,
    check_norm_types,
    freeze,
    is_empty,
    resolve_vector,
)
from polysysid.systems.base.diagnostics import BroadcastWarning, DiagnosticLog
from polysysid.systems.base.exceptions import ConfigurationError, ShapeMismatchError
from polysysid.systems.base.hybrid_model import HybridModel, ModelMark
from polysysid.systems.base.utils.polynomial_evaluator import PolynomialEvaluator
from polysysid.types.core import ArrayLike, CoefficientMatrix, DegreeMatrix


@dataclass(frozen=True)
class PolyModelOptions:
    """
    Optional polynomial construction parameters.

    Omitted norm vectors default to all-inf, Ep/Em to the identity (n, n).
    """

    pn_norm: Optional[Any] = None
    mn_norm: Optional[Any] = None
    Ep: Optional[Any] = None
    Em: Optional[Any] = None
    input_norm: Optional[Any] = None
    state_norm: Optional[Any] = None


@dataclass(frozen=True, eq=False)
class PolyMode:
    """
    Polynomial dynamics of one regime.

    Attributes
    ----------
    coeffmat : np.ndarray
        Coefficients (n, n_mono), read-only
    degmat : np.ndarray
        Exponent table (n_mono, n + n_i), read-only
    """

    coeffmat: np.ndarray
    degmat: np.ndarray

    @property
    def n_mono(self) -> int:
        return self.coeffmat.shape[1]


class PolyModel(HybridModel):
    """
    Validated, immutable polynomial model.

    Parameters
    ----------
    degmat : DegreeMatrix
        Exponent table (n_mono, n + n_i)
    coeffmat : CoefficientMatrix
        Coefficients (n, n_mono); a 1D array is one state row
    options : Optional[PolyModelOptions]
        Optional parameters; alternatively pass the fields as keywords

    Raises
    ------
    ShapeMismatchError
        If coeffmat and degmat disagree on the monomial count, degmat has
        fewer columns than states, or Ep/Em are not (n, n)
    ConfigurationError
        If the model has no state or no monomial
    ValueError
        If degmat holds negative or fractional exponents, or a norm-type
        vector has the wrong length

    Examples
    --------
    >>> model = PolyModel(degmat=[[1, 0], [0, 1]], coeffmat=[[0.5, 0.3]])
    >>> model.n, model.n_i, model.n_mono
    (1, 1, 2)
    >>> model.symbolic_dynamics()
    Matrix([[0.3*u1 + 0.5*x1]])
    """

    def __init__(
        self,
        degmat: DegreeMatrix,
        coeffmat: CoefficientMatrix,
        options: Optional[PolyModelOptions] = None,
        **option_fields: Any,
    ):
        options = build_options(PolyModelOptions, options, option_fields)
        log = DiagnosticLog()
        self._build_polynomial(degmat, coeffmat, options, log)
        self.mark = ModelMark.POLY
        self._freeze(log)

    def _build_polynomial(
        self,
        degmat: DegreeMatrix,
        coeffmat: CoefficientMatrix,
        options: PolyModelOptions,
        log: DiagnosticLog,
    ):
        coeffmat = np.asarray(coeffmat, dtype=float)
        degmat = np.asarray(degmat, dtype=float)
        if coeffmat.ndim == 1:
            coeffmat = coeffmat.reshape(1, -1)

        if coeffmat.ndim != 2:
            raise ShapeMismatchError(
                f"Coefficient matrix must be 2D (n, n_mono), got shape {coeffmat.shape}"
            )
        if degmat.ndim != 2:
            raise ShapeMismatchError(
                f"Degree matrix must be 2D (n_mono, n + n_i), got shape {degmat.shape}"
            )
        if coeffmat.shape[1] != degmat.shape[0]:
            raise ShapeMismatchError(
                f"Coefficient matrix has {coeffmat.shape[1]} monomial columns "
                f"but the degree matrix has {degmat.shape[0]} rows"
            )

        n, n_mono = coeffmat.shape
        if n == 0 or n_mono == 0:
            raise ConfigurationError(
                "A polynomial model needs at least one state and one monomial."
            )

        # validates degmat columns and exponents
        evaluator = PolynomialEvaluator(degmat, n)

        self._n = n
        self._n_i = evaluator.n_inputs
        self.evaluator = evaluator
        self.modes = (PolyMode(coeffmat=freeze(coeffmat), degmat=evaluator.degmat),)

        self._resolve_noise_parameters(options, log)
        state_norm = resolve_vector(
            options.state_norm, n, np.inf,
            "norm types for states", log,
            label="state norm type",
        )
        check_norm_types(state_norm, "norm types for states")
        self.state_norm = freeze(state_norm)

    # ========================================================================
    # Dimensions and Coefficients
    # ========================================================================

    @property
    def n(self) -> int:
        """Number of states."""
        return self._n

    @property
    def n_y(self) -> int:
        """Number of outputs (the full state is measured)."""
        return self._n

    @property
    def n_i(self) -> int:
        return self._n_i

    @property
    def n_mono(self) -> int:
        """Number of monomials."""
        return self.modes[0].n_mono

    @property
    def coeffmat(self) -> np.ndarray:
        return self.modes[0].coeffmat

    @property
    def degmat(self) -> np.ndarray:
        return self.modes[0].degmat

    @property
    def is_uncertain(self) -> bool:
        return False

    # ========================================================================
    # Symbolic View
    # ========================================================================

    def state_symbols(self) -> List[sp.Symbol]:
        return [sp.Symbol(f"x{i + 1}", real=True) for i in range(self.n)]

    def input_symbols(self) -> List[sp.Symbol]:
        return [sp.Symbol(f"u{i + 1}", real=True) for i in range(self.n_i)]

    def symbolic_dynamics(self) -> sp.Matrix:
        """
        Nominal next-state map as a sympy column Matrix (n, 1).

        Noise and coefficient uncertainty are not included.
        """
        monomials = self.evaluator.symbolic_monomials(
            self.state_symbols(), self.input_symbols()
        )
        return sp.Matrix(self.coeffmat.tolist()) * monomials

    def step(self, x: ArrayLike, u: ArrayLike) -> np.ndarray:
        """Nominal noise-free update x[k+1] = coeffmat · m(x[k], u[k])."""
        return self.coeffmat @ self.evaluator.evaluate(x, u)


class UnPolyModel(PolyModel):
    """
    Polynomial model with bounded coefficient uncertainty.

    Parameters
    ----------
    degmat : DegreeMatrix
        Exponent table (n_mono, n + n_i)
    coeffmat : CoefficientMatrix
        Nominal coefficients (n, n_mono)
    d_coeffmat : ArrayLike
        Non-negative uncertainty bounds, same shape as coeffmat; a scalar
        is broadcast (BroadcastWarning)
    options : Optional[PolyModelOptions]
        Optional parameters; alternatively pass the fields as keywords

    Examples
    --------
    >>> model = UnPolyModel([[1, 0], [0, 1]], [[0.5, 0.3]], d_coeffmat=[[0.05, 0.0]])
    >>> model.mark
    <ModelMark.UNCERTAIN_POLY: 'unpoly'>
    """

    def __init__(
        self,
        degmat: DegreeMatrix,
        coeffmat: CoefficientMatrix,
        d_coeffmat: ArrayLike,
        options: Optional[PolyModelOptions] = None,
        **option_fields: Any,
    ):
        options = build_options(PolyModelOptions, options, option_fields)
        log = DiagnosticLog()
        self._build_polynomial(degmat, coeffmat, options, log)
        self.d_coeffmat = freeze(self._resolve_uncertainty(d_coeffmat, log))
        self.mark = ModelMark.UNCERTAIN_POLY
        self._freeze(log)

    @property
    def is_uncertain(self) -> bool:
        return True

    def _resolve_uncertainty(self, d_coeffmat: ArrayLike, log: DiagnosticLog) -> np.ndarray:
        shape = self.coeffmat.shape
        if is_empty(d_coeffmat):
            return np.zeros(shape)

        d_coeffmat = np.asarray(d_coeffmat, dtype=float)
        if d_coeffmat.size == 1:
            if self.coeffmat.size > 1:
                log.emit(
                    "Uncertainty bound is a scalar, converted to a matrix with "
                    "identical entries.",
                    BroadcastWarning,
                )
            d_coeffmat = np.full(shape, d_coeffmat.item())
        elif d_coeffmat.ndim == 1 and shape[0] == 1:
            d_coeffmat = d_coeffmat.reshape(1, -1)

        if d_coeffmat.shape != shape:
            raise ShapeMismatchError(
                f"Uncertainty bounds must match the coefficient matrix shape "
                f"{shape}, got {d_coeffmat.shape}"
            )
        if np.any(np.isnan(d_coeffmat)) or np.any(d_coeffmat < 0):
            raise ValueError("Uncertainty bounds must be non-negative")
        return d_coeffmat


__all__ = ["PolyModelOptions", "PolyMode", "PolyModel", "UnPolyModel"]
