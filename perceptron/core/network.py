""" The network state: one :class:`Transition` per pair of consecutive
neuron layers, holding the weights, biases and gradient accumulators that
connect them.
"""
import numpy

from perceptron.core.exception import DimensionMismatch
from perceptron.linalg import Matrix, Vector


class Transition:
    """ The weights, biases and gradients between layer `i` and `i+1`

    Attributes
    ----------
    weights: Matrix, shape=(next layer size, previous layer size)

    biases: Vector, dimension=next layer size

    weight_gradient, bias_gradient: Matrix, Vector
        Gradient accumulators of the same shapes as `weights` and `biases`

    history: object or None
        Per-transition state of the active update strategy (e.g., previous
        gradients and step ranges), or None if the strategy keeps none
    """

    def __init__(self, weights, biases):
        self.weights = weights.copy()
        self.biases = biases.copy()
        self.weight_gradient = Matrix.zeros(*weights.shape)
        self.bias_gradient = Vector.zeros(biases.dimension)
        self.history = None

    def __repr__(self):
        return "<Transition {} -> {}>".format(
            self.input_dimension, self.output_dimension)

    @property
    def input_dimension(self):
        return self.weights.width

    @property
    def output_dimension(self):
        return self.weights.height

    def zero_gradients(self):
        self.weight_gradient = Matrix.zeros(*self.weights.shape)
        self.bias_gradient = Vector.zeros(self.biases.dimension)


def build_transitions(weights, biases):
    """ Validate the starting weights and biases and create the transitions

    Parameters
    ----------
    weights: list of Matrix
        `weights[i]` connects layer `i` to layer `i+1`

    biases: list of Vector
        `biases[i]` holds the biases of layer `i+1`

    Returns
    -------
    transitions: list of Transition
    """
    if len(weights) != len(biases):
        msg = "Got {} weight matrices but {} bias vectors"
        raise DimensionMismatch(msg.format(len(weights), len(biases)))

    if len(weights) == 0:
        raise DimensionMismatch("At least one weight matrix is required")

    for i, (weight, bias) in enumerate(zip(weights, biases)):

        if not isinstance(weight, Matrix):
            msg = "weights[{}] was type {} but should be Matrix"
            raise TypeError(msg.format(i, type(weight).__name__))

        if not isinstance(bias, Vector):
            msg = "biases[{}] was type {} but should be Vector"
            raise TypeError(msg.format(i, type(bias).__name__))

        if weight.height != bias.dimension:
            msg = "weights[{}] height ({}) does not match biases[{}] ({})"
            raise DimensionMismatch(
                msg.format(i, weight.height, i, bias.dimension))

        if i > 0 and weight.width != weights[i-1].height:
            msg = ("weights[{}] width ({}) does not match the size of the "
                   "previous layer ({})")
            raise DimensionMismatch(
                msg.format(i, weight.width, weights[i-1].height))

        if weight.width < 1 or weight.height < 1:
            msg = "weights[{}] shape {} has an empty neuron layer"
            raise DimensionMismatch(msg.format(i, weight.shape))

    return [Transition(weights=weight, biases=bias)
            for weight, bias in zip(weights, biases)]


def random_parameters(layer_dimensions, lower_bound, higher_bound,
                      random_state):
    """ Draw uniformly random weights and biases in
    :code:`[lower_bound, higher_bound]`

    Parameters
    ----------
    layer_dimensions: list of int
        The number of neurons per layer, input layer first

    random_state: numpy.random.RandomState

    Returns
    -------
    weights, biases: list of Matrix, list of Vector
    """
    weights = []
    biases = []

    for n_in, n_out in zip(layer_dimensions[:-1], layer_dimensions[1:]):
        biases.append(Vector(random_state.uniform(
            lower_bound, higher_bound, size=n_out)))
        weights.append(Matrix(random_state.uniform(
            lower_bound, higher_bound, size=(n_out, n_in))))

    return weights, biases


def layer_dimensions_of(transitions):
    """ The neuron layer sizes, input layer first
    """
    return ([transitions[0].input_dimension] +
            [transition.output_dimension for transition in transitions])


def as_numpy(transitions):
    """ Flatten all weights and biases into a single array (weights and
    biases of the first transition first)
    """
    return numpy.hstack([
        numpy.hstack([transition.weights.to_numpy().ravel(),
                      transition.biases.to_numpy()])
        for transition in transitions
    ])
