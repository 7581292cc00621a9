import logging

from perceptron.core.exception import ConfigurationError
from perceptron.strategy.strategy_base import UpdateStrategy, zero_gradients


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


class ConstantRate(UpdateStrategy):
    """ Gradient descent with a constant learn rate and flat-spot
    elimination::

        w -= learn_rate * gradient

    The gradients are zeroed after each training cycle.
    """

    def __init__(self, learn_rate, flat_spot=0.0):
        """
        Parameters
        ----------
        learn_rate: float
            The (positive) factor applied to the gradients

        flat_spot: float, default=0.0
            The non-negative value added to the derivative of the logistic
            function so that saturated neurons keep learning; 0.1 is a
            common choice
        """
        if learn_rate <= 0:
            msg = "Learn rate ({}) must be positive"
            raise ConfigurationError(msg.format(learn_rate))

        if flat_spot < 0:
            msg = "Flat-spot elimination coefficient ({}) must be >= 0"
            raise ConfigurationError(msg.format(flat_spot))

        self.learn_rate = float(learn_rate)
        self.flat_spot = float(flat_spot)

        logger.debug("Created %r", self)

    def adapt(self, transitions):
        for transition in transitions:
            transition.weights = (transition.weights -
                                  self.learn_rate * transition.weight_gradient)
            transition.biases = (transition.biases -
                                 self.learn_rate * transition.bias_gradient)

    def reset_gradients(self, transitions):
        zero_gradients(transitions)
