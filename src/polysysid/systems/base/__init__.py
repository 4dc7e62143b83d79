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
Base Model Infrastructure
=========================

Foundations shared by every model descriptor and by the simulator.

Submodules
----------
- **exceptions**: ShapeMismatchError and ConfigurationError
- **diagnostics**: warning categories and the DiagnosticLog channel
- **argument_utils**: defaulting, broadcasting and validation helpers
- **hybrid_model**: ModelMark and the immutable HybridModel base class
- **utils**: PolynomialEvaluator and the bounded noise generator

Authors
-------
Gil Benezer

License
-------
AGPL-3.0
"""

from .diagnostics import BoundViolationWarning, BroadcastWarning, DiagnosticLog
from .exceptions import ConfigurationError, ShapeMismatchError
from .hybrid_model import HybridModel, ModelMark

__all__ = [
    "BoundViolationWarning",
    "BroadcastWarning",
    "DiagnosticLog",
    "ConfigurationError",
    "ShapeMismatchError",
    "HybridModel",
    "ModelMark",
]
