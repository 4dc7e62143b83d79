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
Exceptions raised by model construction and simulation.

Wrong-length or non-vector norm/bound arguments raise the builtin
ValueError; the classes below cover the remaining failure kinds.
"""


class ShapeMismatchError(ValueError):
    """Raised when tensor or vector dimensions disagree."""

    pass


class ConfigurationError(Exception):
    """Raised for a wrong model variant or a model without modes."""

    pass


__all__ = ["ShapeMismatchError", "ConfigurationError"]
