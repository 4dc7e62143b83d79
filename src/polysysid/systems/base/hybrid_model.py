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
Hybrid Model Base Class

Common state of every model descriptor: the variant mark, the ordered
modes, the per-channel noise norm types, the noise-shaping factors and the
input norm types.

Descriptors validate everything in their constructor and are read-only
afterwards. Array attributes are stored as non-writeable copies and any
attribute assignment after construction raises AttributeError, so a model
can be shared by several simulations at once.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Tuple

import numpy as np

from polysysid.systems.base.argument_utils import (
    check_norm_types,
    freeze,
    resolve_square_matrix,
    resolve_vector,
)
from polysysid.systems.base.diagnostics import DiagnosticLog
from polysysid.types.trajectories import Notice


class ModelMark(Enum):
    """
    Model variant tag.

    Attributes
    ----------
    ARX : str
        Single-mode ARX model
    SWITCHED_ARX : str
        ARX model with more than one mode
    POLY : str
        Polynomial state-space model
    UNCERTAIN_POLY : str
        Polynomial model with bounded coefficient uncertainty
    """

    ARX = "arx"
    SWITCHED_ARX = "swarx"
    POLY = "poly"
    UNCERTAIN_POLY = "unpoly"

    @property
    def is_polynomial(self) -> bool:
        """True for the variants the polynomial simulator accepts."""
        return self in (ModelMark.POLY, ModelMark.UNCERTAIN_POLY)


class HybridModel(ABC):
    """
    Abstract base for validated, immutable model descriptors.

    Subclasses validate their coefficient data, then call
    ``_resolve_noise_parameters`` and finally ``_freeze``.

    Attributes
    ----------
    mark : ModelMark
        Model variant
    modes : tuple
        Ordered per-mode records, never empty
    pn_norm : np.ndarray
        Process-noise norm types, shape (n_y,)
    mn_norm : np.ndarray
        Measurement-noise norm types, shape (n_y,)
    Ep : np.ndarray
        Process-noise factor, shape (n_y, n_y)
    Em : np.ndarray
        Measurement-noise factor, shape (n_y, n_y)
    input_norm : np.ndarray
        Input norm types, shape (n_i,)
    notices : Tuple[Notice, ...]
        Diagnostics raised during construction
    """

    _frozen = False

    def __setattr__(self, name: str, value: Any):
        if self._frozen:
            raise AttributeError(
                f"{self.__class__.__name__} is immutable; cannot set '{name}'"
            )
        super().__setattr__(name, value)

    def __delattr__(self, name: str):
        if self._frozen:
            raise AttributeError(
                f"{self.__class__.__name__} is immutable; cannot delete '{name}'"
            )
        super().__delattr__(name)

    # ========================================================================
    # Dimensions
    # ========================================================================

    @property
    @abstractmethod
    def n_y(self) -> int:
        """Number of outputs."""
        pass

    @property
    @abstractmethod
    def n_i(self) -> int:
        """Number of inputs."""
        pass

    @property
    def n_mode(self) -> int:
        """Number of modes."""
        return len(self.modes)

    @property
    def is_switched(self) -> bool:
        return self.n_mode > 1

    # ========================================================================
    # Construction Helpers
    # ========================================================================

    def _resolve_noise_parameters(self, options: Any, log: DiagnosticLog):
        """
        Default, broadcast and validate pn_norm, mn_norm, input_norm, Ep, Em.

        Norm vectors default to all-inf, the factors to the identity.
        """
        n_y, n_i = self.n_y, self.n_i

        pn_norm = resolve_vector(
            options.pn_norm, n_y, np.inf,
            "norm types for process noise", log,
            label="norm type of process noise",
        )
        mn_norm = resolve_vector(
            options.mn_norm, n_y, np.inf,
            "norm types for measurement noise", log,
            label="norm type of measurement noise",
        )
        input_norm = resolve_vector(
            options.input_norm, n_i, np.inf,
            "norm types for input", log,
            label="input norm type",
        )
        check_norm_types(pn_norm, "norm types for process noise")
        check_norm_types(mn_norm, "norm types for measurement noise")
        check_norm_types(input_norm, "norm types for input")

        Ep = resolve_square_matrix(options.Ep, n_y, "process noise")
        Em = resolve_square_matrix(options.Em, n_y, "measurement noise")

        self.pn_norm = freeze(pn_norm)
        self.mn_norm = freeze(mn_norm)
        self.input_norm = freeze(input_norm)
        self.Ep = freeze(Ep)
        self.Em = freeze(Em)

    def _freeze(self, log: DiagnosticLog):
        self.notices: Tuple[Notice, ...] = tuple(log.notices)
        self._frozen = True

    # ========================================================================
    # String Representations
    # ========================================================================

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"mark='{self.mark.value}', n_y={self.n_y}, n_i={self.n_i}, "
            f"n_mode={self.n_mode})"
        )


__all__ = ["ModelMark", "HybridModel"]
