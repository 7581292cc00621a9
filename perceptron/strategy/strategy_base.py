import abc

import numpy

from perceptron.linalg import Matrix, Vector


class UpdateStrategy(abc.ABC):
    """ The abstract base class for weight update strategies.

    A strategy decides how the accumulated gradients of each
    :class:`perceptron.core.network.Transition` change its weights and
    biases (:meth:`adapt`) and how the gradient accumulators are prepared
    for the next training cycle (:meth:`reset_gradients`). Strategies hold
    only their hyperparameters; anything they need to remember between
    cycles lives in :code:`transition.history`, created once by
    :meth:`create_history` when the network is built.
    """

    #: Added to the derivative of the logistic function during
    #: backpropagation. Zero unless the strategy eliminates flat spots.
    flat_spot = 0.0

    def create_history(self, transition):
        """ Returns the per-transition state of the strategy (None if the
        strategy remembers nothing between training cycles)
        """
        return None

    @abc.abstractmethod
    def adapt(self, transitions):
        """ Change the weights and biases of all `transitions` using their
        accumulated gradients
        """
        raise NotImplementedError

    @abc.abstractmethod
    def reset_gradients(self, transitions):
        """ Prepare the gradient accumulators of all `transitions` for the
        next training cycle
        """
        raise NotImplementedError

    def __repr__(self):
        params = ', '.join(
            '{}={}'.format(key, value)
            for key, value in sorted(vars(self).items()))
        return '<{} {}>'.format(self.__class__.__name__, params)


class StepRangeState:
    """ Previous gradients and signed per-parameter step ranges of one
    transition, as kept by the step range adapting strategies
    """

    def __init__(self, transition, starting_step_range):
        height, width = transition.weights.shape
        dimension = transition.biases.dimension

        self.previous_weight_gradient = Matrix.zeros(height, width)
        self.previous_bias_gradient = Vector.zeros(dimension)
        self.weight_step_range = Matrix.full(
            height, width, starting_step_range)
        self.bias_step_range = Vector.full(dimension, starting_step_range)


class ElasticState(StepRangeState):
    """ History of :class:`perceptron.strategy.Elastic` """


class QuickPropState(StepRangeState):
    """ History of :class:`perceptron.strategy.QuickPropagation` """


def adapt_by_step_ranges(transitions, next_step_range):
    """ Update the step ranges of each transition's history and add them to
    the weights and biases

    Parameters
    ----------
    transitions: list of Transition
        Transitions whose history is a :class:`StepRangeState`

    next_step_range: callable
        Has signature::

            next_step_range(step_range, gradient, previous_gradient)

        taking ndarrays of equal shape and returning the 3-tuple
        :code:`(step_range, gradient, moved)` of the new step ranges,
        the (possibly modified) current gradients, and a boolean mask of
        the parameters that should be changed by their step range
    """
    for transition in transitions:
        history = transition.history

        step, gradient, moved = next_step_range(
            history.weight_step_range.to_numpy(),
            transition.weight_gradient.to_numpy(),
            history.previous_weight_gradient.to_numpy())

        history.weight_step_range = Matrix(step)
        transition.weight_gradient = Matrix(gradient)
        transition.weights = (transition.weights +
                              Matrix(numpy.where(moved, step, 0.0)))

        step, gradient, moved = next_step_range(
            history.bias_step_range.to_numpy(),
            transition.bias_gradient.to_numpy(),
            history.previous_bias_gradient.to_numpy())

        history.bias_step_range = Vector(step)
        transition.bias_gradient = Vector(gradient)
        transition.biases = (transition.biases +
                             Vector(numpy.where(moved, step, 0.0)))


def zero_gradients(transitions):
    for transition in transitions:
        transition.zero_gradients()


def move_gradients_to_history(transitions):
    """ Copy the current gradients into the previous gradients of each
    transition's history, then zero the current gradients
    """
    for transition in transitions:
        history = transition.history
        history.previous_weight_gradient = transition.weight_gradient.copy()
        history.previous_bias_gradient = transition.bias_gradient.copy()
        transition.zero_gradients()
