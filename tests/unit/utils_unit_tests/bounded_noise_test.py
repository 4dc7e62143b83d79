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
Unit tests for BoundedNoiseGenerator

Tests cover:
1. Norm bounds per channel for every norm type
2. Zero and infinite bounds
3. Determinism and seeding
4. Argument validation
"""

import numpy as np
import pytest

from polysysid import BoundedNoiseGenerator, BoundedNoiseSource, bounded_noise

TOL = 1e-12


# ============================================================================
# Test Class 1: Bounds
# ============================================================================


class TestBounds:
    """Generated rows respect their declared norm bound"""

    @pytest.mark.parametrize("norm_type", [1, 2, np.inf])
    def test_row_norm_within_bound(self, norm_type):
        gen = BoundedNoiseGenerator(seed=1)
        for _ in range(20):
            noise = gen.generate([norm_type], [0.7], horizon=25)
            assert noise.shape == (1, 25)
            assert np.linalg.norm(noise[0], ord=norm_type) <= 0.7 + TOL

    def test_mixed_channels(self):
        gen = BoundedNoiseGenerator(seed=2)
        norm_types = [1, 2, np.inf]
        bounds = [0.5, 1.0, 0.1]
        noise = gen.generate(norm_types, bounds, horizon=40)
        assert noise.shape == (3, 40)
        for row, p, b in zip(noise, norm_types, bounds):
            assert np.linalg.norm(row, ord=p) <= b + TOL

    @pytest.mark.parametrize("norm_type", [1, 2, np.inf])
    def test_zero_bound_gives_zero_noise(self, norm_type):
        noise = BoundedNoiseGenerator().generate([norm_type], [0.0], horizon=10)
        assert np.array_equal(noise, np.zeros((1, 10)))

    def test_infinite_bound_is_unconstrained(self):
        noise = BoundedNoiseGenerator(seed=0).generate([2], [np.inf], horizon=1000)
        assert np.all(np.isfinite(noise))
        # standard normal samples, so the 2-norm grows with the horizon
        assert np.linalg.norm(noise[0]) > 10.0

    def test_inf_norm_uses_full_range(self):
        noise = BoundedNoiseGenerator(seed=0).generate([np.inf], [1.0], horizon=5000)
        assert noise.max() > 0.9
        assert noise.min() < -0.9


# ============================================================================
# Test Class 2: Determinism
# ============================================================================


class TestDeterminism:
    """Reproducibility through explicit seeding"""

    def test_deterministic_calls_repeat(self):
        gen = BoundedNoiseGenerator()
        a = gen.generate([2, np.inf], [1.0, 0.5], 30, deterministic=True)
        b = gen.generate([2, np.inf], [1.0, 0.5], 30, deterministic=True)
        assert np.array_equal(a, b)

    def test_deterministic_across_instances(self):
        a = BoundedNoiseGenerator(seed=5).generate([1], [1.0], 10, deterministic=True)
        b = BoundedNoiseGenerator(seed=9).generate([1], [1.0], 10, deterministic=True)
        assert np.array_equal(a, b)

    def test_fixed_seed_changes_deterministic_output(self):
        a = BoundedNoiseGenerator(fixed_seed=0).generate([np.inf], [1.0], 10, True)
        b = BoundedNoiseGenerator(fixed_seed=1).generate([np.inf], [1.0], 10, True)
        assert not np.array_equal(a, b)

    def test_streams_are_independent(self):
        gen = BoundedNoiseGenerator()
        a = gen.generate([np.inf], [1.0], 10, deterministic=True, stream=0)
        b = gen.generate([np.inf], [1.0], 10, deterministic=True, stream=1)
        assert not np.array_equal(a, b)
        assert not np.allclose(a / b, a[0] / b[0])

    def test_stream_reproducible(self):
        gen = BoundedNoiseGenerator()
        a = gen.generate([2], [1.0], 10, deterministic=True, stream=3)
        b = BoundedNoiseGenerator().generate([2], [1.0], 10, deterministic=True, stream=3)
        assert np.array_equal(a, b)

    def test_default_calls_differ(self):
        gen = BoundedNoiseGenerator()
        a = gen.generate([np.inf], [1.0], 50)
        b = gen.generate([np.inf], [1.0], 50)
        assert not np.array_equal(a, b)

    def test_seeded_stream_reproducible(self):
        a = BoundedNoiseGenerator(seed=42).generate([2], [1.0], 20)
        b = BoundedNoiseGenerator(seed=42).generate([2], [1.0], 20)
        assert np.array_equal(a, b)

    def test_set_seed(self):
        gen = BoundedNoiseGenerator(seed=3)
        first = gen.generate([np.inf], [1.0], 10)
        gen.set_seed(3)
        assert np.array_equal(gen.generate([np.inf], [1.0], 10), first)

    def test_no_global_state(self):
        np.random.seed(0)
        before = np.random.random()
        np.random.seed(0)
        BoundedNoiseGenerator().generate([2], [1.0], 10, deterministic=True)
        assert np.random.random() == before


# ============================================================================
# Test Class 3: Validation
# ============================================================================


class TestValidation:
    """Invalid arguments"""

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            BoundedNoiseGenerator().generate([2, 2], [1.0], 5)

    def test_negative_bound(self):
        with pytest.raises(ValueError, match="non-negative"):
            BoundedNoiseGenerator().generate([2], [-1.0], 5)

    def test_unsupported_norm(self):
        with pytest.raises(ValueError):
            BoundedNoiseGenerator().generate([4], [1.0], 5)

    @pytest.mark.parametrize("horizon", [0, -3, 2.5])
    def test_invalid_horizon(self, horizon):
        with pytest.raises(ValueError, match="horizon"):
            BoundedNoiseGenerator().generate([2], [1.0], horizon)

    def test_scalar_arguments(self):
        noise = BoundedNoiseGenerator().generate(np.inf, 0.2, 4)
        assert noise.shape == (1, 4)

    def test_empty_channel_list(self):
        noise = BoundedNoiseGenerator().generate([], [], 4)
        assert noise.shape == (0, 4)


# ============================================================================
# Test Class 4: Interface
# ============================================================================


class TestInterface:
    """Protocol conformance and functional entry point"""

    def test_satisfies_protocol(self):
        assert isinstance(BoundedNoiseGenerator(), BoundedNoiseSource)

    def test_functional_entry_point(self):
        noise = bounded_noise([1, 2], [0.3, 0.4], 15, deterministic=True)
        assert noise.shape == (2, 15)
        assert np.array_equal(noise, bounded_noise([1, 2], [0.3, 0.4], 15, True))
