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
Non-fatal diagnostics.

Diagnostics are issued through ``warnings.warn`` and recorded at the same
time, so callers can either filter/capture warnings or inspect the
``notices`` attached to a model or simulation result. Recording never
changes control flow.

Examples
--------
>>> log = DiagnosticLog()
>>> log.emit("Bound is a scalar, converted to a vector.", BroadcastWarning)
>>> log.notices[0]['category']
'BroadcastWarning'
"""

import sys
import warnings
from typing import List, Type

from polysysid.types.trajectories import Notice


def _caller_stacklevel() -> int:
    """Stack level of the first frame outside the polysysid package."""
    # level 1 is DiagnosticLog.emit, the frame that calls warnings.warn
    level = 1
    frame = sys._getframe(1)
    while frame is not None and frame.f_globals.get("__name__", "").startswith(
        "polysysid."
    ):
        frame = frame.f_back
        level += 1
    return level


class BroadcastWarning(UserWarning):
    """A scalar argument was expanded to a vector or matrix."""

    pass


class BoundViolationWarning(UserWarning):
    """An input or state sequence exceeds its declared bound."""

    pass


class DiagnosticLog:
    """
    Collects the diagnostics of one construction or simulation call.

    Attributes
    ----------
    notices : List[Notice]
        Diagnostics in emission order
    """

    def __init__(self):
        self.notices: List[Notice] = []

    def emit(self, message: str, category: Type[UserWarning] = UserWarning):
        """Record a notice and issue it as a warning."""
        self.notices.append(Notice(category=category.__name__, message=message))
        warnings.warn(message, category, stacklevel=_caller_stacklevel())

    def __len__(self) -> int:
        return len(self.notices)

    def __repr__(self) -> str:
        return f"DiagnosticLog(n_notices={len(self.notices)})"


__all__ = ["BroadcastWarning", "BoundViolationWarning", "DiagnosticLog"]
