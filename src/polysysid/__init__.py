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
PolySysID: Bounded-Noise Polynomial and ARX Models for System Identification

Construction and validation of (switched) ARX and (uncertain) polynomial
model descriptors, and forward simulation under norm-bounded process and
measurement noise.
"""

# Library version
__version__ = "1.0.0"

# Submodules
from . import systems, types

from .systems.base import (
    BoundViolationWarning,
    BroadcastWarning,
    ConfigurationError,
    HybridModel,
    ModelMark,
    ShapeMismatchError,
)
from .systems.base.utils import (
    BoundedNoiseGenerator,
    BoundedNoiseSource,
    PolynomialEvaluator,
    bounded_noise,
    evaluate_monomials,
)
from .systems.models import (
    ARXMode,
    ARXModel,
    ARXModelOptions,
    PolyMode,
    PolyModel,
    PolyModelOptions,
    UnPolyModel,
)
from .systems.simulation import (
    MonteCarloResult,
    PolySimulator,
    SimulationOptions,
    poly_sim,
)
from .types import PolySimulationResult

__all__ = [
    # Version
    "__version__",
    # Submodules
    "systems",
    "types",
    # Errors and diagnostics
    "ConfigurationError",
    "ShapeMismatchError",
    "BroadcastWarning",
    "BoundViolationWarning",
    # Models
    "HybridModel",
    "ModelMark",
    "ARXMode",
    "ARXModel",
    "ARXModelOptions",
    "PolyMode",
    "PolyModel",
    "PolyModelOptions",
    "UnPolyModel",
    # Utilities
    "BoundedNoiseGenerator",
    "BoundedNoiseSource",
    "bounded_noise",
    "PolynomialEvaluator",
    "evaluate_monomials",
    # Simulation
    "MonteCarloResult",
    "PolySimulator",
    "SimulationOptions",
    "poly_sim",
    "PolySimulationResult",
]
