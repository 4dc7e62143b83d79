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
Polynomial Evaluator

Evaluates the monomial expansion of a polynomial model.

A degree matrix with one row per monomial and n + n_i columns maps a
state x (n,) and an input u (n_i,) to the monomial vector m (n_mono,):

    m_l = Π_s x_s^deg[l, s] · Π_s u_s^deg[l, n + s]

Evaluation is pure and costs O(n_mono · (n + n_i)).
"""

from typing import Sequence

import numpy as np
import sympy as sp

from polysysid.systems.base.exceptions import ShapeMismatchError
from polysysid.types.core import ArrayLike, DegreeMatrix, MonomialVector


class PolynomialEvaluator:
    """
    Evaluates monomial vectors for a fixed degree matrix.

    Parameters
    ----------
    degmat : DegreeMatrix
        Exponent table (n_mono, n + n_i) of non-negative integers
    n_states : int
        Number of state columns at the left of the table

    Examples
    --------
    >>> evaluator = PolynomialEvaluator(np.array([[1, 0], [0, 1], [2, 1]]), 1)
    >>> evaluator.evaluate(np.array([2.0]), np.array([3.0]))
    array([ 2.,  3., 12.])
    """

    def __init__(self, degmat: DegreeMatrix, n_states: int):
        degmat = np.asarray(degmat, dtype=float)
        if degmat.ndim != 2:
            raise ShapeMismatchError(
                f"Degree matrix must be 2D (n_mono, n + n_i), got shape {degmat.shape}"
            )
        if degmat.shape[1] < n_states:
            raise ShapeMismatchError(
                f"Degree matrix needs at least {n_states} columns (one per "
                f"state), got {degmat.shape[1]}"
            )
        if np.any(degmat < 0) or np.any(degmat != np.round(degmat)):
            raise ValueError("Degree matrix entries must be non-negative integers")

        self.degmat = degmat.astype(int)
        self.degmat.setflags(write=False)
        self.n_states = int(n_states)
        self.n_inputs = degmat.shape[1] - self.n_states
        self.n_mono = degmat.shape[0]

    def evaluate(self, x: ArrayLike, u: ArrayLike) -> MonomialVector:
        """
        Monomial values at one time step.

        Args:
            x: State (n,)
            u: Input (n_i,)

        Returns:
            Monomial vector (n_mono,)
        """
        x = np.asarray(x, dtype=float).reshape(-1)
        u = np.asarray(u, dtype=float).reshape(-1)
        if x.size != self.n_states:
            raise ValueError(f"Expected state dimension {self.n_states}, got {x.size}")
        if u.size != self.n_inputs:
            raise ValueError(f"Expected input dimension {self.n_inputs}, got {u.size}")

        z = np.concatenate([x, u])
        return np.prod(np.power(z[np.newaxis, :], self.degmat), axis=1)

    __call__ = evaluate

    def symbolic_monomials(
        self, state_symbols: Sequence[sp.Symbol], input_symbols: Sequence[sp.Symbol]
    ) -> sp.Matrix:
        """Monomial vector as a sympy column Matrix (n_mono, 1)."""
        state_symbols = list(state_symbols)
        input_symbols = list(input_symbols)
        if len(state_symbols) != self.n_states:
            raise ValueError(
                f"Expected {self.n_states} state symbols, got {len(state_symbols)}"
            )
        if len(input_symbols) != self.n_inputs:
            raise ValueError(
                f"Expected {self.n_inputs} input symbols, got {len(input_symbols)}"
            )
        variables = state_symbols + input_symbols
        monomials = []
        for row in self.degmat:
            term = sp.Integer(1)
            for var, power in zip(variables, row):
                term *= var ** int(power)
            monomials.append(term)
        return sp.Matrix(monomials)

    def __repr__(self) -> str:
        return (
            f"PolynomialEvaluator(n_mono={self.n_mono}, "
            f"n_states={self.n_states}, n_inputs={self.n_inputs})"
        )


def evaluate_monomials(degmat: DegreeMatrix, x: ArrayLike, u: ArrayLike) -> MonomialVector:
    """
    Evaluate the monomials of ``degmat`` at (x, u).

    The state dimension is taken from ``x``.

    Examples
    --------
    >>> evaluate_monomials([[1, 0], [0, 1]], [0.5], [2.0])
    array([0.5, 2. ])
    """
    x = np.asarray(x, dtype=float).reshape(-1)
    return PolynomialEvaluator(degmat, x.size).evaluate(x, u)


__all__ = ["PolynomialEvaluator", "evaluate_monomials"]
