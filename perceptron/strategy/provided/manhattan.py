import logging

import numpy

from perceptron.core.exception import ConfigurationError
from perceptron.strategy.strategy_base import UpdateStrategy, zero_gradients


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


class Manhattan(UpdateStrategy):
    """ Manhattan training: only the signs of the gradients are used::

        w -= step_range * sign(gradient)
    """

    def __init__(self, step_range):
        """
        Parameters
        ----------
        step_range: float
            The (positive) amount by which every weight and bias changes
        """
        if step_range <= 0:
            msg = "Step range ({}) must be positive"
            raise ConfigurationError(msg.format(step_range))

        self.step_range = float(step_range)

        logger.debug("Created %r", self)

    def adapt(self, transitions):
        for transition in transitions:
            weight_signs = transition.weight_gradient.map(numpy.sign)
            bias_signs = transition.bias_gradient.map(numpy.sign)

            transition.weights = (transition.weights -
                                  self.step_range * weight_signs)
            transition.biases = transition.biases - self.step_range * bias_signs

    def reset_gradients(self, transitions):
        zero_gradients(transitions)
