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
ARX Model Descriptor

Discrete-time, possibly switched, ARX model with bounded noise. With a
switching sequence σ the model reads

    y[k]   = Σ_i A[σ[k]](i)·y[k-i] + Σ_i C[σ[k]](i)·u[k-i] + f[σ[k]] + Ep·pn[k]
    y_n[k] = y[k] + Em·mn[k]

where pn is the process noise and mn the measurement noise. Each mode owns
its own lag matrices A (n_a of them) and C (n_c of them) and an offset f.

Coefficient layout (modes first):
- A: (n_mode, n_a, n_y, n_y), or (n_a, n_y, n_y) for one mode, or
  (n_y, n_y) for one lag of one mode
- C: (n_mode, n_c, n_y, n_i), same promotion rules
- f: (n_y, n_mode); a 1D vector of length n_y is read as one column

A model with one mode is marked ARX, with several modes SWITCHED_ARX.

Examples
--------
>>> # Two-mode scalar ARX with offsets
>>> A = np.array([[[[0.5]]], [[[-0.3]]]])   # (2, 1, 1, 1)
>>> C = np.array([[[[1.0]]], [[[2.0]]]])    # (2, 1, 1, 1)
>>> model = ARXModel(A, C, f=[[0.1, -0.1]])
>>> model.mark
<ModelMark.SWITCHED_ARX: 'swarx'>
>>> model.modes[1].f
array([-0.1])
"""

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from polysysid.systems.base.argument_utils import build_options, freeze, is_empty
from polysysid.systems.base.diagnostics import BroadcastWarning, DiagnosticLog
from polysysid.systems.base.exceptions import ConfigurationError, ShapeMismatchError
from polysysid.systems.base.hybrid_model import HybridModel, ModelMark
from polysysid.types.core import ArrayLike


@dataclass(frozen=True)
class ARXModelOptions:
    """
    Optional ARX construction parameters.

    Every field left as None (or given as an empty array) is defaulted:
    f to zeros (n_y, n_mode), the norm vectors to all-inf and Ep/Em to the
    identity (n_y, n_y).
    """

    f: Optional[Any] = None
    pn_norm: Optional[Any] = None
    mn_norm: Optional[Any] = None
    Ep: Optional[Any] = None
    Em: Optional[Any] = None
    input_norm: Optional[Any] = None


@dataclass(frozen=True, eq=False)
class ARXMode:
    """
    One ARX regime.

    Attributes
    ----------
    A : np.ndarray
        Autoregressive matrices (n_a, n_y, n_y), read-only
    C : np.ndarray
        Input matrices (n_c, n_y, n_i), read-only
    f : np.ndarray
        Additive constant (n_y,), read-only
    """

    A: np.ndarray
    C: np.ndarray
    f: np.ndarray

    @property
    def n_a(self) -> int:
        return self.A.shape[0]

    @property
    def n_c(self) -> int:
        return self.C.shape[0]


def _as_mode_tensor(value: ArrayLike, name: str) -> np.ndarray:
    """Promote a coefficient argument to (n_mode, n_lags, rows, cols)."""
    tensor = np.asarray(value, dtype=float)
    if tensor.ndim == 2:
        tensor = tensor[np.newaxis, np.newaxis]
    elif tensor.ndim == 3:
        tensor = tensor[np.newaxis]
    elif tensor.ndim != 4:
        raise ShapeMismatchError(
            f"{name} must be a 2D, 3D or 4D array, got shape {tensor.shape}"
        )
    return tensor


class ARXModel(HybridModel):
    """
    Validated, immutable (switched) ARX model.

    Parameters
    ----------
    A : ArrayLike
        Autoregressive coefficients, see module docstring for layouts
    C : ArrayLike
        Input coefficients
    options : Optional[ARXModelOptions]
        Optional parameters; alternatively pass the fields as keywords

    Raises
    ------
    ShapeMismatchError
        If A and C disagree in mode count or output dimension, A is not
        square, or f/Ep/Em have the wrong shape
    ConfigurationError
        If no mode is given
    ValueError
        If a norm-type vector has the wrong length or is not a vector

    Warns
    -----
    BroadcastWarning
        For every scalar norm type or offset expanded to full size

    Examples
    --------
    >>> A = np.array([[0.9, 0.1], [0.0, 0.8]])
    >>> C = np.array([[1.0], [0.5]])
    >>> model = ARXModel(A, C)
    >>> model.mark, model.n_y, model.n_i
    (<ModelMark.ARX: 'arx'>, 2, 1)
    >>>
    >>> # Scalar norm type is broadcast to both outputs (BroadcastWarning)
    >>> model = ARXModel(A, C, pn_norm=2)
    >>> model.pn_norm
    array([2., 2.])
    """

    def __init__(
        self,
        A: ArrayLike,
        C: ArrayLike,
        options: Optional[ARXModelOptions] = None,
        **option_fields: Any,
    ):
        options = build_options(ARXModelOptions, options, option_fields)
        log = DiagnosticLog()

        A = _as_mode_tensor(A, "A")
        C = _as_mode_tensor(C, "C")

        if A.shape[0] != C.shape[0]:
            raise ShapeMismatchError(
                f"The first two arguments must represent the same number of "
                f"modes: A has {A.shape[0]}, C has {C.shape[0]}"
            )
        if A.shape[2] != A.shape[3]:
            raise ShapeMismatchError(
                f"The first argument must hold square matrices, got "
                f"{A.shape[2]}x{A.shape[3]}"
            )
        if A.shape[2] != C.shape[2]:
            raise ShapeMismatchError(
                f"The matrices described by the first two arguments are not "
                f"consistent: A has {A.shape[2]} rows, C has {C.shape[2]}"
            )

        n_mode = A.shape[0]
        if n_mode == 0:
            raise ConfigurationError("There should be at least one mode.")

        self.mark = ModelMark.SWITCHED_ARX if n_mode > 1 else ModelMark.ARX
        self._n_y = A.shape[2]
        self._n_i = C.shape[3]

        self._resolve_noise_parameters(options, log)
        f = self._resolve_offset(options.f, n_mode, log)

        self.modes = tuple(
            ARXMode(A=freeze(A[i]), C=freeze(C[i]), f=freeze(f[:, i]))
            for i in range(n_mode)
        )
        self._freeze(log)

    # ========================================================================
    # Dimensions
    # ========================================================================

    @property
    def n_y(self) -> int:
        return self._n_y

    @property
    def n_i(self) -> int:
        return self._n_i

    @property
    def n_a(self) -> int:
        """Number of autoregressive lags per mode."""
        return self.modes[0].n_a

    @property
    def n_c(self) -> int:
        """Number of input lags per mode."""
        return self.modes[0].n_c

    @property
    def f(self) -> np.ndarray:
        """Offsets stacked as columns, shape (n_y, n_mode)."""
        return np.column_stack([mode.f for mode in self.modes])

    # ========================================================================
    # Construction Helpers
    # ========================================================================

    def _resolve_offset(self, f: Any, n_mode: int, log: DiagnosticLog) -> np.ndarray:
        n_y = self._n_y
        if is_empty(f):
            return np.zeros((n_y, n_mode))

        f = np.asarray(f, dtype=float)
        if f.size == 1 and n_y + n_mode > 2:
            log.emit(
                "Additive constant for outputs is a scalar, converted to a "
                "matrix with identical entries.",
                BroadcastWarning,
            )
            return np.full((n_y, n_mode), f.item())

        if f.ndim <= 1:
            f = f.reshape(-1, 1)
        if f.shape != (n_y, n_mode):
            raise ShapeMismatchError(
                f"The additive constant (notation f) is not valid: expected "
                f"shape ({n_y}, {n_mode}), got {f.shape}"
            )
        return f


__all__ = ["ARXModelOptions", "ARXMode", "ARXModel"]
