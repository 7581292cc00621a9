from collections import namedtuple
import logging

import numpy
from scipy.special import expit

from perceptron.core.exception import ConfigurationError, DimensionMismatch
from perceptron.core.network import (
    as_numpy, build_transitions, layer_dimensions_of, random_parameters)
from perceptron.linalg import Matrix, Vector
from perceptron.strategy.strategy_base import UpdateStrategy


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


class ActivationTrace(namedtuple('ActivationTrace', ['outputs'])):
    """ The outputs of every neuron layer for one forward propagation,
    input layer first. Produced by :meth:`MultilayerPerceptron.propagate`
    and consumed by :meth:`MultilayerPerceptron.backward_propagate`.
    """
    __slots__ = ()

    @property
    def input(self):
        return self.outputs[0]

    @property
    def output(self):
        return self.outputs[-1]

    @property
    def layer_dimensions(self):
        return [output.dimension for output in self.outputs]


def _validate_weight_decay(weight_decay):
    if weight_decay < 0 or weight_decay >= 1:
        msg = "Weight decay factor ({}) must be in [0, 1)"
        raise ConfigurationError(msg.format(weight_decay))


class MultilayerPerceptron:
    """ A multilayer perceptron with the logistic function as activation
    function for all neurons and the identity as output function, trained by
    backpropagation with weight decay.

    Each neuron layer computes::

        output[i+1] = logistic(weights[i] @ output[i] - biases[i])

    How the accumulated gradients change the weights and biases is decided
    by the update strategy, see :mod:`perceptron.strategy`.
    """

    def __init__(self, weights, biases, strategy, weight_decay=0.0):
        """ Create a multilayer perceptron from starting weights and biases

        Parameters
        ----------
        weights: list of Matrix
            `weights[i]` has shape (size of layer i+1, size of layer i)

        biases: list of Vector
            `biases[i]` has the size of layer i+1

        strategy: UpdateStrategy
            The weight update strategy,
            e.g., :class:`perceptron.strategy.ConstantRate`

        weight_decay: float, default=0.0
            The fraction in [0, 1) of all weights and biases that is
            removed after every training cycle; commonly between 0.005
            and 0.03
        """
        if not isinstance(strategy, UpdateStrategy):
            msg = "`strategy` ({}) should be an instance of UpdateStrategy"
            raise TypeError(msg.format(type(strategy).__name__))

        _validate_weight_decay(weight_decay)

        self.strategy = strategy
        self.weight_decay = float(weight_decay)
        self.transitions = build_transitions(weights=weights, biases=biases)

        for transition in self.transitions:
            transition.history = strategy.create_history(transition)

        self._trace = None

        logger.debug("Created %r with %r", self, strategy)

    @classmethod
    def random(cls, input_dimension, hidden_dimensions, output_dimension,
               strategy, lower_bound=-1.0, higher_bound=1.0,
               weight_decay=0.0, random_state=None):
        """ Create a multilayer perceptron with uniformly random starting
        weights and biases

        Parameters
        ----------
        input_dimension, output_dimension: int
            The number of input and output neurons

        hidden_dimensions: list of int
            The number of neurons per hidden layer, starting with the hidden
            layer after the input layer. May be empty.

        strategy: UpdateStrategy
            The weight update strategy

        lower_bound, higher_bound: float, default=-1.0, 1.0
            The range of the random starting values

        weight_decay: float, default=0.0
            See :meth:`__init__`

        random_state: numpy.random.RandomState, default=None
            Provide for reproducible starting weights
        """
        layer_dimensions = ([input_dimension] + list(hidden_dimensions) +
                            [output_dimension])

        for dimension in layer_dimensions:
            if dimension < 1:
                msg = "Neuron layer dimensions ({}) must all be >= 1"
                raise ConfigurationError(msg.format(layer_dimensions))

        if lower_bound > higher_bound:
            msg = "Lower bound ({}) must not exceed higher bound ({})"
            raise ConfigurationError(msg.format(lower_bound, higher_bound))

        _validate_weight_decay(weight_decay)

        if random_state is None:
            random_state = numpy.random.RandomState()
            msg = ("RandomState not provided; results will "
                   "not be reproducible")
            logger.warning(msg)
        elif not isinstance(random_state, numpy.random.RandomState):
            msg = "`random_state` ({}) not instance numpy.random.RandomState"
            raise TypeError(msg.format(type(random_state)))

        weights, biases = random_parameters(
            layer_dimensions=layer_dimensions, lower_bound=lower_bound,
            higher_bound=higher_bound, random_state=random_state)

        return cls(weights=weights, biases=biases, strategy=strategy,
                   weight_decay=weight_decay)

    def __repr__(self):
        dimensions = '-'.join(str(d) for d in self.layer_dimensions)
        return "<MultilayerPerceptron layers={}>".format(dimensions)

    @property
    def neuron_layer_count(self):
        return len(self.transitions) + 1

    @property
    def layer_dimensions(self):
        return layer_dimensions_of(self.transitions)

    @property
    def input_dimension(self):
        return self.transitions[0].input_dimension

    @property
    def output_dimension(self):
        return self.transitions[-1].output_dimension

    @property
    def input(self):
        """ The input of the last forward propagation (None before any)
        """
        return None if self._trace is None else self._trace.input

    @property
    def output(self):
        """ The output of the last forward propagation (None before any)
        """
        return None if self._trace is None else self._trace.output

    @property
    def weights(self):
        return [transition.weights.copy() for transition in self.transitions]

    @property
    def biases(self):
        return [transition.biases.copy() for transition in self.transitions]

    def get_params(self, flat=False):
        """
        Parameters
        ----------
        flat: bool, default=False
            If True, the parameters are flattened into a single array.

        Returns
        -------
        params: list or array
            If `flat` is False (default), then the parameters are returned
            as [weights, biases]. Otherwise, these are flattened into a
            single array, transition by transition.
        """
        if flat:
            return as_numpy(self.transitions)
        else:
            return [self.weights, self.biases]

    ###########################################################################
    # Forward and backward propagation

    def propagate(self, input):
        """ Propagate `input` through the network

        Returns
        -------
        trace: ActivationTrace
            The outputs of all layers, to be passed to
            :meth:`backward_propagate`
        """
        if not isinstance(input, Vector):
            input = Vector(input)

        if input.dimension != self.input_dimension:
            msg = "Input dimension ({}) does not match input layer ({})"
            raise DimensionMismatch(
                msg.format(input.dimension, self.input_dimension))

        outputs = [input.copy()]
        for transition in self.transitions:
            net_input = transition.weights @ outputs[-1] - transition.biases
            outputs.append(Vector(expit(net_input.to_numpy())))

        self._trace = ActivationTrace(outputs=tuple(outputs))

        return self._trace

    def forward_propagate(self, input):
        """ Propagate `input` through the network

        Returns
        -------
        output: Vector
            The output of the network for the given input
        """
        return self.propagate(input).output

    def backward_propagate(self, trace, desired_output):
        """ Backpropagate the error between the output in `trace` and
        `desired_output` and add the resulting gradients to the gradient
        accumulators. The weights and biases are not changed.

        Parameters
        ----------
        trace: ActivationTrace
            The result of :meth:`propagate` for the current example

        desired_output: Vector
            The desired output of the network for the current example
        """
        if not isinstance(trace, ActivationTrace):
            msg = "`trace` ({}) should be an ActivationTrace from propagate"
            raise TypeError(msg.format(type(trace).__name__))

        if trace.layer_dimensions != self.layer_dimensions:
            msg = "Trace layer dimensions {} do not match network {}"
            raise DimensionMismatch(
                msg.format(trace.layer_dimensions, self.layer_dimensions))

        if not isinstance(desired_output, Vector):
            desired_output = Vector(desired_output)

        if desired_output.dimension != self.output_dimension:
            msg = "Desired output dimension ({}) does not match output ({})"
            raise DimensionMismatch(
                msg.format(desired_output.dimension, self.output_dimension))

        delta_terms = self._delta_terms(trace, desired_output)

        for transition, delta, output in zip(
                self.transitions, delta_terms, trace.outputs[:-1]):
            transition.weight_gradient = (transition.weight_gradient -
                                          Matrix.outer(delta, output))
            transition.bias_gradient = transition.bias_gradient + delta

    def _derivative(self, output, flat_spot=None):
        """ The derivative of the logistic function in terms of its value,
        increased by the flat-spot elimination coefficient of the strategy
        """
        if flat_spot is None:
            flat_spot = self.strategy.flat_spot
        derivative = output - output.hadamard(output)
        return derivative.add_to_all_components(flat_spot)

    def _delta_terms(self, trace, desired_output):
        outputs = trace.outputs
        delta_terms = [None] * len(self.transitions)

        # The output error is collapsed to the sum of its components
        error = (desired_output - trace.output).component_sum()
        delta_terms[-1] = error * self._derivative(trace.output)

        for i in range(len(self.transitions) - 1, 0, -1):
            back = self.transitions[i].weights.T @ delta_terms[i]
            delta_terms[i-1] = back.hadamard(self._derivative(outputs[i]))

        return delta_terms

    ###########################################################################
    # Weight updates

    def adapt(self):
        """ Change weights and biases according to the update strategy
        """
        self.strategy.adapt(self.transitions)

    def punish(self):
        """ Shrink all weights and biases by the weight decay factor
        """
        factor = 1.0 - self.weight_decay
        for transition in self.transitions:
            transition.weights = factor * transition.weights
            transition.biases = factor * transition.biases

    def reset_gradients(self):
        self.strategy.reset_gradients(self.transitions)

    def _complete_cycle(self):
        self.adapt()
        self.punish()
        self.reset_gradients()

    ###########################################################################
    # Training

    def _check_task(self, task):
        if (task.input_dimension != self.input_dimension or
                task.output_dimension != self.output_dimension):
            msg = ("Learning task dimensions ({} -> {}) not compatible with "
                   "multilayer perceptron ({} -> {})")
            raise DimensionMismatch(msg.format(
                task.input_dimension, task.output_dimension,
                self.input_dimension, self.output_dimension))

    def online_train(self, task):
        """ One online training cycle: weights and biases are adapted after
        every example of `task`
        """
        self._check_task(task)

        for example in task:
            trace = self.propagate(example.input)
            self.backward_propagate(trace, example.output)
            self._complete_cycle()

    def batch_train(self, task):
        """ One batch training cycle: the gradients of all examples of
        `task` are summed before weights and biases are adapted once
        """
        self._check_task(task)

        for example in task:
            trace = self.propagate(example.input)
            self.backward_propagate(trace, example.output)

        self._complete_cycle()

    def total_squared_error(self, task):
        """ The squared error of the network output summed over all
        examples of `task`
        """
        self._check_task(task)

        return sum((
            (example.output - self.forward_propagate(example.input))
            .squared_component_sum()
            for example in task), 0.0)

    ###########################################################################
    # Sensitivity analysis

    def sensitivity(self, input_index, task):
        """ The average over `task` of the derivative of the summed network
        output with respect to input neuron `input_index`

        Returns
        -------
        sensitivity: float
            0.0 for an empty task
        """
        self._check_task(task)

        if not 0 <= input_index < self.input_dimension:
            msg = "Input neuron index {} out of range for {} inputs"
            raise IndexError(msg.format(input_index, self.input_dimension))

        if len(task) == 0:
            return 0.0

        total = 0.0
        for example in task:
            total += self._example_sensitivity(input_index, example)

        return total / len(task)

    def _example_sensitivity(self, input_index, example):
        outputs = self.propagate(example.input).outputs

        first_weights = self.transitions[0].weights.to_numpy()
        sensitivities = self._derivative(outputs[1], flat_spot=0.0).hadamard(
            Vector(first_weights[:, input_index]))

        for i in range(2, self.neuron_layer_count):
            derivative = self._derivative(outputs[i], flat_spot=0.0)
            sensitivities = derivative.hadamard(
                self.transitions[i-1].weights @ sensitivities)

        return sensitivities.component_sum()

    def sensitivities(self, task):
        """ The sensitivity of every input neuron, see :meth:`sensitivity`
        """
        return [self.sensitivity(index, task)
                for index in range(self.input_dimension)]
