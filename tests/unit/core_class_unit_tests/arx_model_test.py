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
Unit Tests for ARXModel
=======================

Test suite covering:
1. Mode count and model mark
2. Validation order and error types
3. Defaulting of omitted and empty arguments
4. Scalar broadcasting and its diagnostics
5. Immutability of the constructed model
"""

import warnings

import numpy as np
import pytest

from polysysid import (
    ARXModel,
    ARXModelOptions,
    BroadcastWarning,
    ConfigurationError,
    ModelMark,
    ShapeMismatchError,
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def siso_tensors():
    """One mode, one lag, scalar output and input."""
    return np.array([[0.5]]), np.array([[1.0]])


@pytest.fixture
def mimo_tensors():
    """Two outputs, one input, two lags, three modes."""
    rng = np.random.default_rng(0)
    A = rng.standard_normal((3, 2, 2, 2))
    C = rng.standard_normal((3, 2, 2, 1))
    return A, C


# ============================================================================
# Test Class 1: Mode Count and Mark
# ============================================================================


class TestModeCount:
    """Mark follows the number of modes"""

    def test_single_mode_is_arx(self, siso_tensors):
        model = ARXModel(*siso_tensors)
        assert model.mark is ModelMark.ARX
        assert model.n_mode == 1
        assert not model.is_switched

    def test_multiple_modes_is_switched(self, mimo_tensors):
        model = ARXModel(*mimo_tensors)
        assert model.mark is ModelMark.SWITCHED_ARX
        assert model.n_mode == 3
        assert model.is_switched

    def test_zero_modes_raises_configuration_error(self):
        A = np.zeros((0, 1, 2, 2))
        C = np.zeros((0, 1, 2, 1))
        with pytest.raises(ConfigurationError, match="at least one mode"):
            ARXModel(A, C)

    def test_dimensions(self, mimo_tensors):
        model = ARXModel(*mimo_tensors)
        assert model.n_y == 2
        assert model.n_i == 1
        assert model.n_a == 2
        assert model.n_c == 2

    def test_three_dimensional_tensor_is_one_mode(self):
        A = np.stack([np.eye(2) * 0.5, np.eye(2) * 0.1])  # (2 lags, 2, 2)
        C = np.ones((1, 2, 3))
        model = ARXModel(A, C)
        assert model.n_mode == 1
        assert model.n_a == 2
        assert model.n_i == 3

    def test_modes_own_their_coefficients(self, mimo_tensors):
        A, C = mimo_tensors
        model = ARXModel(A, C)
        for i, mode in enumerate(model.modes):
            assert np.allclose(mode.A, A[i])
            assert np.allclose(mode.C, C[i])
            assert mode.A.shape == (2, 2, 2)
        # Later changes to the caller's arrays do not leak into the model
        A[0] += 100.0
        assert not np.allclose(model.modes[0].A, A[0])

    def test_modes_are_distinct_objects(self, mimo_tensors):
        model = ARXModel(*mimo_tensors)
        assert model.modes[0].A is not model.modes[1].A
        assert not np.shares_memory(model.modes[0].A, model.modes[1].A)


# ============================================================================
# Test Class 2: Validation
# ============================================================================


class TestValidation:
    """Malformed tensors are rejected eagerly"""

    def test_mode_count_mismatch(self):
        A = np.zeros((2, 1, 2, 2))
        C = np.zeros((3, 1, 2, 1))
        with pytest.raises(ShapeMismatchError, match="same number of modes"):
            ARXModel(A, C)

    def test_non_square_autoregressive_block(self):
        A = np.zeros((1, 1, 2, 3))
        C = np.zeros((1, 1, 2, 1))
        with pytest.raises(ShapeMismatchError, match="square"):
            ARXModel(A, C)

    def test_output_dimension_mismatch(self):
        A = np.zeros((1, 1, 2, 2))
        C = np.zeros((1, 1, 3, 1))
        with pytest.raises(ShapeMismatchError, match="not consistent"):
            ARXModel(A, C)

    def test_mode_count_checked_before_square(self):
        A = np.zeros((2, 1, 2, 3))
        C = np.zeros((1, 1, 2, 1))
        with pytest.raises(ShapeMismatchError, match="same number of modes"):
            ARXModel(A, C)

    def test_invalid_tensor_rank(self):
        with pytest.raises(ShapeMismatchError):
            ARXModel(np.zeros(3), np.zeros((1, 1)))

    def test_shape_mismatch_is_value_error(self):
        assert issubclass(ShapeMismatchError, ValueError)

    def test_wrong_process_noise_norm_length(self, mimo_tensors):
        with pytest.raises(ValueError, match="process noise"):
            ARXModel(*mimo_tensors, pn_norm=[2, 2, 2])

    def test_wrong_measurement_noise_norm_length(self, mimo_tensors):
        with pytest.raises(ValueError, match="measurement noise"):
            ARXModel(*mimo_tensors, mn_norm=[1, 2, 2])

    def test_wrong_input_norm_length(self, mimo_tensors):
        with pytest.raises(ValueError, match="input"):
            ARXModel(*mimo_tensors, input_norm=[2, 2])

    def test_norm_matrix_rejected(self, mimo_tensors):
        with pytest.raises(ValueError, match="vector"):
            ARXModel(*mimo_tensors, pn_norm=np.full((2, 2), 2.0))

    def test_column_vector_norm_accepted(self, mimo_tensors):
        model = ARXModel(*mimo_tensors, pn_norm=np.array([[1.0], [2.0]]))
        assert model.pn_norm.shape == (2,)
        assert np.array_equal(model.pn_norm, [1.0, 2.0])

    def test_unsupported_norm_type(self, mimo_tensors):
        with pytest.raises(ValueError, match="1, 2 or inf"):
            ARXModel(*mimo_tensors, pn_norm=[3, 2])

    def test_wrong_ep_shape(self, mimo_tensors):
        with pytest.raises(ShapeMismatchError, match="process noise"):
            ARXModel(*mimo_tensors, Ep=np.eye(3))

    def test_wrong_em_shape(self, mimo_tensors):
        with pytest.raises(ShapeMismatchError, match="measurement noise"):
            ARXModel(*mimo_tensors, Em=np.ones((2, 1)))

    def test_wrong_offset_shape(self, mimo_tensors):
        with pytest.raises(ShapeMismatchError, match="additive constant"):
            ARXModel(*mimo_tensors, f=np.zeros((2, 2)))

    def test_options_and_keywords_together(self, siso_tensors):
        with pytest.raises(TypeError):
            ARXModel(*siso_tensors, ARXModelOptions(f=0.1), pn_norm=2)

    def test_unknown_keyword(self, siso_tensors):
        with pytest.raises(TypeError):
            ARXModel(*siso_tensors, unknown=1)


# ============================================================================
# Test Class 3: Defaults
# ============================================================================


class TestDefaults:
    """Omitted or empty arguments take their documented defaults"""

    def test_all_defaults(self, mimo_tensors):
        model = ARXModel(*mimo_tensors)
        assert np.array_equal(model.f, np.zeros((2, 3)))
        assert np.all(np.isinf(model.pn_norm)) and model.pn_norm.shape == (2,)
        assert np.all(np.isinf(model.mn_norm)) and model.mn_norm.shape == (2,)
        assert np.all(np.isinf(model.input_norm)) and model.input_norm.shape == (1,)
        assert np.array_equal(model.Ep, np.eye(2))
        assert np.array_equal(model.Em, np.eye(2))
        assert model.notices == ()

    def test_empty_arguments_are_defaulted(self, mimo_tensors):
        model = ARXModel(
            *mimo_tensors,
            f=[], pn_norm=[], mn_norm=np.array([]), Ep=[], Em=None, input_norm=[],
        )
        assert np.array_equal(model.f, np.zeros((2, 3)))
        assert np.all(np.isinf(model.pn_norm))
        assert np.all(np.isinf(model.mn_norm))
        assert np.array_equal(model.Ep, np.eye(2))

    def test_each_field_defaults_independently(self, mimo_tensors):
        model = ARXModel(*mimo_tensors, mn_norm=[1, 2], Em=2 * np.eye(2))
        assert np.all(np.isinf(model.pn_norm))
        assert np.array_equal(model.mn_norm, [1.0, 2.0])
        assert np.array_equal(model.Ep, np.eye(2))
        assert np.array_equal(model.Em, 2 * np.eye(2))

    def test_options_object(self, mimo_tensors):
        options = ARXModelOptions(pn_norm=[2, np.inf], input_norm=[1])
        model = ARXModel(*mimo_tensors, options)
        assert np.array_equal(model.pn_norm, [2.0, np.inf])
        assert np.array_equal(model.input_norm, [1.0])

    def test_offset_vector_for_single_mode(self):
        model = ARXModel(np.eye(2), np.ones((2, 1)), f=[0.1, 0.2])
        assert np.allclose(model.modes[0].f, [0.1, 0.2])

    def test_offset_columns_per_mode(self):
        A = np.zeros((2, 1, 1, 1))
        C = np.zeros((2, 1, 1, 1))
        model = ARXModel(A, C, f=[[0.1, -0.1]])
        assert np.allclose(model.modes[0].f, [0.1])
        assert np.allclose(model.modes[1].f, [-0.1])


# ============================================================================
# Test Class 4: Broadcasting
# ============================================================================


class TestBroadcasting:
    """Scalars are expanded with exactly one diagnostic each"""

    def test_scalar_process_noise_norm(self, mimo_tensors):
        with pytest.warns(BroadcastWarning, match="process noise"):
            model = ARXModel(*mimo_tensors, pn_norm=2)
        assert np.array_equal(model.pn_norm, [2.0, 2.0])
        assert len(model.notices) == 1
        assert model.notices[0]["category"] == "BroadcastWarning"

    def test_scalar_measurement_noise_norm(self, mimo_tensors):
        with pytest.warns(BroadcastWarning, match="measurement noise"):
            model = ARXModel(*mimo_tensors, mn_norm=1)
        assert np.array_equal(model.mn_norm, [1.0, 1.0])

    def test_scalar_offset(self, mimo_tensors):
        with pytest.warns(BroadcastWarning, match="Additive constant"):
            model = ARXModel(*mimo_tensors, f=0.5)
        assert np.array_equal(model.f, np.full((2, 3), 0.5))

    def test_scalar_input_norm(self):
        with pytest.warns(BroadcastWarning, match="Input norm type"):
            model = ARXModel(np.eye(2), np.ones((2, 3)), input_norm=np.inf)
        assert model.input_norm.shape == (3,)

    def test_multiple_broadcasts_recorded_in_order(self, mimo_tensors):
        with pytest.warns(BroadcastWarning):
            model = ARXModel(*mimo_tensors, pn_norm=2, mn_norm=2)
        assert len(model.notices) == 2
        assert "process noise" in model.notices[0]["message"]
        assert "measurement noise" in model.notices[1]["message"]

    def test_no_broadcast_for_scalar_dimension(self, siso_tensors):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            model = ARXModel(*siso_tensors, f=0.2, pn_norm=2, input_norm=1)
        assert np.array_equal(model.f, [[0.2]])
        assert np.array_equal(model.pn_norm, [2.0])
        assert model.notices == ()


# ============================================================================
# Test Class 5: Immutability
# ============================================================================


class TestImmutability:
    """Constructed models cannot be changed"""

    def test_attribute_assignment_rejected(self, siso_tensors):
        model = ARXModel(*siso_tensors)
        with pytest.raises(AttributeError):
            model.pn_norm = np.array([1.0])
        with pytest.raises(AttributeError):
            model.mark = ModelMark.POLY

    def test_arrays_are_read_only(self, siso_tensors):
        model = ARXModel(*siso_tensors)
        with pytest.raises(ValueError):
            model.Ep[0, 0] = 5.0
        with pytest.raises(ValueError):
            model.modes[0].A[0, 0, 0] = 5.0

    def test_mode_records_are_frozen(self, siso_tensors):
        model = ARXModel(*siso_tensors)
        with pytest.raises(AttributeError):
            model.modes[0].f = np.zeros(1)

    def test_repr(self, mimo_tensors):
        text = repr(ARXModel(*mimo_tensors))
        assert "ARXModel" in text
        assert "swarx" in text
