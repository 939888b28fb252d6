import numpy as np
import pytest

from layerchain.errors import ShapeError, StateError
from layerchain.initializers import Constant
from layerchain.layers import FullyConnected


def test_weights_have_input_by_output_shape():
    layer = FullyConnected(4, 3, seed=1)

    assert layer.weights.shape == (4, 3)
    assert layer.params["W"] is layer.weights


def test_same_seed_gives_same_weights_and_outputs():
    first = FullyConnected(5, 3, seed=7)
    second = FullyConnected(5, 3, seed=7)
    x = np.array([0.5, -1.0, 2.0, 0.0, 1.5])

    np.testing.assert_array_equal(first.weights, second.weights)
    np.testing.assert_array_equal(first.compute_output(x),
                                  second.compute_output(x))


def test_different_seeds_give_different_weights():
    assert not np.array_equal(
        FullyConnected(5, 3, seed=1).weights,
        FullyConnected(5, 3, seed=2).weights)


def test_forward_with_identity_weights(identity_layer):
    y = identity_layer.compute_output([1.0, 2.0])

    np.testing.assert_array_equal(y, [1.0, 2.0])
    np.testing.assert_array_equal(identity_layer.last_x, [1.0, 2.0])
    np.testing.assert_array_equal(identity_layer.last_z, [1.0, 2.0])


def test_forward_cuts_negative_pre_activations_to_zero():
    layer = FullyConnected(2, 2, seed=0)
    layer.weights[...] = [[1.0, -1.0], [0.0, 0.0]]

    y = layer.compute_output([3.0, 1.0])

    np.testing.assert_array_equal(y, [3.0, 0.0])
    np.testing.assert_array_equal(layer.last_z, [3.0, -3.0])


def test_forward_accepts_tensor_input():
    layer = FullyConnected(4, 2, seed=3)

    from_tensor = layer.compute_output([[[1.0, 2.0], [3.0, 4.0]]])
    from_grid = layer.compute_output(np.array([[1.0, 2.0], [3.0, 4.0]]))
    from_list_grid = layer.compute_output([[1.0, 2.0], [3.0, 4.0]])
    from_vector = layer.compute_output([1.0, 2.0, 3.0, 4.0])

    np.testing.assert_array_equal(from_tensor, from_vector)
    np.testing.assert_array_equal(from_grid, from_vector)
    np.testing.assert_array_equal(from_list_grid, from_vector)


def test_backward_decreases_weights_feeding_active_neuron(identity_layer):
    identity_layer.compute_output([1.0, 2.0])
    before = identity_layer.weights.copy()

    identity_layer.propagate_gradient([1.0, 0.0])

    after = identity_layer.weights
    assert np.all(after[:, 0] < before[:, 0])
    np.testing.assert_allclose(after[:, 0], [0.9, -0.2])
    np.testing.assert_array_equal(after[:, 1], before[:, 1])


def test_backward_uses_weights_from_before_the_update():
    layer = FullyConnected(2, 2, seed=0, learning_rate=0.5)
    layer.weights[...] = [[1.0, 2.0], [3.0, 4.0]]
    layer.compute_output([1.0, 1.0])

    dL_dx = layer.propagate_gradient([1.0, 1.0])

    np.testing.assert_allclose(dL_dx, [3.0, 7.0])
    np.testing.assert_allclose(layer.weights, [[0.5, 1.5], [2.5, 3.5]])
    np.testing.assert_allclose(layer.grads["W"], np.ones((2, 2)))


def test_inactive_neuron_passes_gradient_scaled_by_leak():
    layer = FullyConnected(2, 1, seed=0, learning_rate=0.1)
    layer.weights[...] = [[-1.0], [-2.0]]

    y = layer.compute_output([1.0, 1.0])
    dL_dx = layer.propagate_gradient([1.0])

    np.testing.assert_array_equal(y, [0.0])
    np.testing.assert_allclose(dL_dx, [-0.01, -0.02])
    assert np.all(dL_dx != 0.0)
    np.testing.assert_allclose(layer.weights, [[-1.001], [-2.001]])


def test_zero_pre_activation_counts_as_inactive():
    layer = FullyConnected(2, 1, initializer=Constant(), learning_rate=1.0)

    y = layer.compute_output([2.0, 3.0])
    dL_dx = layer.propagate_gradient([1.0])

    np.testing.assert_array_equal(y, [0.0])
    np.testing.assert_array_equal(dL_dx, [0.0, 0.0])
    np.testing.assert_allclose(layer.weights, [[-0.02], [-0.03]])


def test_zero_learning_rate_leaves_weights_untouched():
    layer = FullyConnected(3, 2, seed=4, learning_rate=0.0)
    before = layer.weights.copy()

    layer.compute_output([1.0, 2.0, 3.0])
    layer.propagate_gradient([1.0, -1.0])

    np.testing.assert_array_equal(layer.weights, before)


def test_set_random_weights_restores_seeded_weights(identity_layer):
    reference = FullyConnected(2, 2, seed=0)

    identity_layer.set_random_weights()

    np.testing.assert_array_equal(identity_layer.weights, reference.weights)


def test_output_shape_accessors():
    layer = FullyConnected(4, 3, seed=0)

    assert layer.output_elements == 3
    assert layer.output_shape == (1, 1, 3)


@pytest.mark.parametrize("input_length, output_length", [(0, 2), (2, 0),
                                                         (-1, 3)])
def test_non_positive_lengths_raise_shape_error(input_length, output_length):
    with pytest.raises(ShapeError):
        FullyConnected(input_length, output_length, seed=0)


def test_negative_learning_rate_raises_value_error():
    with pytest.raises(ValueError):
        FullyConnected(2, 2, seed=0, learning_rate=-0.1)


def test_forward_with_wrong_length_raises_shape_error(identity_layer):
    with pytest.raises(ShapeError, match="Expected vector of length 2"):
        identity_layer.compute_output([1.0, 2.0, 3.0])


def test_backward_with_wrong_length_raises_shape_error(identity_layer):
    identity_layer.compute_output([1.0, 2.0])

    with pytest.raises(ShapeError):
        identity_layer.propagate_gradient([1.0])


def test_backward_before_forward_raises_state_error(identity_layer):
    with pytest.raises(StateError):
        identity_layer.propagate_gradient([1.0, 1.0])


def test_second_backward_without_forward_raises_state_error(identity_layer):
    identity_layer.compute_output([1.0, 2.0])
    identity_layer.propagate_gradient([1.0, 1.0])

    with pytest.raises(StateError):
        identity_layer.propagate_gradient([1.0, 1.0])

    assert identity_layer.last_x is None


def test_constant_initializer_fills_weights():
    layer = FullyConnected(3, 2, initializer=Constant(0.5))

    np.testing.assert_array_equal(layer.weights, np.full((3, 2), 0.5))
    np.testing.assert_array_equal(layer.compute_output([1.0, 1.0, 2.0]),
                                  [2.0, 2.0])
