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
Bounded Noise Generation

Produces per-channel random sequences whose whole-horizon norm respects a
declared bound:

    norm(noise[i, :], norm_type[i]) <= bound[i]

Sampling per channel:
- bound = inf: standard normal samples (unconstrained)
- norm type inf: uniform samples in [-bound, bound]
- norm type 1 or 2: a random direction scaled to a radius drawn
  uniformly from [0, bound]

Randomness comes from explicitly seeded numpy Generators. The
deterministic path restarts on every call from the seed sequence
``SeedSequence(fixed_seed, spawn_key=(stream,))``, so identical arguments
give identical noise while distinct ``stream`` keys give independent
sequences. The default path consumes the instance's own stream and ignores
the key.

Any object with a compatible ``generate`` method (see BoundedNoiseSource)
can replace BoundedNoiseGenerator in the simulator.
"""

from typing import Optional

import numpy as np
from typing_extensions import Protocol, runtime_checkable

from polysysid.systems.base.argument_utils import check_bounds, check_norm_types
from polysysid.types.core import ArrayLike, NormTypeVector, BoundVector


@runtime_checkable
class BoundedNoiseSource(Protocol):
    """Interface of a bounded-noise service."""

    def generate(
        self,
        norm_types: NormTypeVector,
        bounds: BoundVector,
        horizon: int,
        deterministic: bool = False,
        stream: int = 0,
    ) -> np.ndarray:
        """Return a (n_channels, horizon) array satisfying the bounds."""
        ...


class BoundedNoiseGenerator:
    """
    Default bounded-noise service.

    Parameters
    ----------
    seed : Optional[int]
        Seed of the non-deterministic stream (None draws OS entropy)
    fixed_seed : int
        Seed used whenever ``deterministic=True``

    Examples
    --------
    >>> gen = BoundedNoiseGenerator()
    >>> noise = gen.generate([2, np.inf], [0.5, 0.1], horizon=100)
    >>> noise.shape
    (2, 100)
    >>> bool(np.linalg.norm(noise[0], 2) <= 0.5)
    True
    >>>
    >>> # Reproducible
    >>> a = gen.generate([np.inf], [1.0], 10, deterministic=True)
    >>> b = gen.generate([np.inf], [1.0], 10, deterministic=True)
    >>> bool(np.array_equal(a, b))
    True
    """

    DEFAULT_FIXED_SEED = 0

    def __init__(self, seed: Optional[int] = None, fixed_seed: int = DEFAULT_FIXED_SEED):
        self.seed = seed
        self.fixed_seed = fixed_seed
        self._rng = np.random.default_rng(seed)

    def set_seed(self, seed: Optional[int]):
        """Restart the non-deterministic stream from ``seed``."""
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def generate(
        self,
        norm_types: ArrayLike,
        bounds: ArrayLike,
        horizon: int,
        deterministic: bool = False,
        stream: int = 0,
    ) -> np.ndarray:
        """
        Generate bounded noise.

        Parameters
        ----------
        norm_types : ArrayLike
            Norm type per channel (1, 2 or inf)
        bounds : ArrayLike
            Non-negative bound per channel, inf for unconstrained
        horizon : int
            Number of time steps
        deterministic : bool
            Use the fixed seed for reproducible output
        stream : int
            Key of the deterministic sequence; draws that must be independent
            of each other use different keys

        Returns
        -------
        np.ndarray
            Noise of shape (n_channels, horizon)

        Raises
        ------
        ValueError
            If the vectors differ in length, a norm type is unsupported,
            a bound is negative, or horizon < 1
        """
        norm_types = np.atleast_1d(np.asarray(norm_types, dtype=float)).reshape(-1)
        bounds = np.atleast_1d(np.asarray(bounds, dtype=float)).reshape(-1)

        if norm_types.size != bounds.size:
            raise ValueError(
                f"Got {norm_types.size} norm types but {bounds.size} bounds"
            )
        if int(horizon) != horizon or horizon < 1:
            raise ValueError(f"horizon must be a positive integer, got {horizon}")
        check_norm_types(norm_types, "noise norm types")
        check_bounds(bounds, "noise bounds")

        if deterministic:
            rng = np.random.default_rng(
                np.random.SeedSequence(self.fixed_seed, spawn_key=(int(stream),))
            )
        else:
            rng = self._rng

        horizon = int(horizon)
        noise = np.empty((norm_types.size, horizon))
        for i, (norm_type, bound) in enumerate(zip(norm_types, bounds)):
            noise[i] = self._sample_channel(rng, norm_type, bound, horizon)
        return noise

    @staticmethod
    def _sample_channel(
        rng: np.random.Generator, norm_type: float, bound: float, horizon: int
    ) -> np.ndarray:
        if np.isinf(bound):
            return rng.standard_normal(horizon)
        if np.isinf(norm_type):
            return rng.uniform(-bound, bound, horizon)

        direction = rng.standard_normal(horizon)
        length = np.linalg.norm(direction, ord=norm_type)
        radius = bound * rng.uniform()
        if length == 0.0:
            return np.zeros(horizon)
        return direction / length * radius

    def __repr__(self) -> str:
        return f"BoundedNoiseGenerator(seed={self.seed}, fixed_seed={self.fixed_seed})"


def bounded_noise(
    norm_types: ArrayLike,
    bounds: ArrayLike,
    horizon: int,
    deterministic: bool = False,
    stream: int = 0,
) -> np.ndarray:
    """
    Generate bounded noise with a fresh BoundedNoiseGenerator.

    See BoundedNoiseGenerator.generate for the arguments.
    """
    return BoundedNoiseGenerator().generate(
        norm_types, bounds, horizon, deterministic, stream=stream
    )


__all__ = ["BoundedNoiseSource", "BoundedNoiseGenerator", "bounded_noise"]
