import logging

import numpy

from perceptron.core.exception import ConfigurationError
from perceptron.strategy.strategy_base import (
    ElasticState, UpdateStrategy, adapt_by_step_ranges,
    move_gradients_to_history)


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


class Elastic(UpdateStrategy):
    """ Elastic (resilient) propagation.

    Every weight and bias has its own signed step range which is added to
    it once per training cycle. Comparing the current gradient `g` with the
    gradient `p` of the previous cycle, a step range `s` becomes

    * :code:`g * p > 0`: :code:`s * growth`, the sign of the gradient
      did not change so the steps get larger;
    * :code:`g * p < 0`: :code:`-s * shrink`, a minimum was jumped over
      so the step is reversed and made smaller. The gradient `g` is then
      zeroed so that the next cycle does not compare against it;
    * otherwise: :code:`-sign(g) * |s|`.

    The magnitude of a step range always stays within
    :code:`[min_step_range, max_step_range]`. A parameter whose current
    gradient is exactly zero keeps its step range and is not changed.
    """

    def __init__(self, starting_step_range=0.1, shrink=0.5, growth=1.2,
                 min_step_range=1e-6, max_step_range=50.0):
        """
        Parameters
        ----------
        starting_step_range: float, default=0.1
            The (positive) initial step range of every weight and bias

        shrink: float, default=0.5
            The factor in (0, 1] by which step ranges shrink on a change
            of the gradient sign

        growth: float, default=1.2
            The factor (> 1) by which step ranges grow while the gradient
            sign is unchanged

        min_step_range, max_step_range: float, default=1e-6, 50.0
            Bounds on the magnitude of the step ranges
        """
        if starting_step_range <= 0:
            msg = "Starting step range ({}) must be positive"
            raise ConfigurationError(msg.format(starting_step_range))

        if shrink <= 0 or shrink > 1:
            msg = "Step range shrink factor ({}) must be in (0, 1]"
            raise ConfigurationError(msg.format(shrink))

        if growth <= 1:
            msg = "Step range growth factor ({}) must be greater than 1"
            raise ConfigurationError(msg.format(growth))

        if min_step_range < 0:
            msg = "Minimal step range ({}) must be >= 0"
            raise ConfigurationError(msg.format(min_step_range))

        if max_step_range <= 0:
            msg = "Maximal step range ({}) must be positive"
            raise ConfigurationError(msg.format(max_step_range))

        if min_step_range > max_step_range:
            msg = "Minimal step range ({}) exceeds maximal step range ({})"
            raise ConfigurationError(
                msg.format(min_step_range, max_step_range))

        self.starting_step_range = float(starting_step_range)
        self.shrink = float(shrink)
        self.growth = float(growth)
        self.min_step_range = float(min_step_range)
        self.max_step_range = float(max_step_range)

        logger.debug("Created %r", self)

    def create_history(self, transition):
        return ElasticState(
            transition, starting_step_range=self.starting_step_range)

    def next_step_range(self, step_range, gradient, previous_gradient):
        """ Compute the next step ranges from the current and previous
        gradients (all ndarrays of equal shape)

        Returns
        -------
        step_range, gradient, moved: ndarray, ndarray, ndarray (bool)
            See :func:`perceptron.strategy.strategy_base.adapt_by_step_ranges`
        """
        product = gradient * previous_gradient
        descent = -numpy.sign(gradient)

        shrunk = -self.shrink * step_range
        shrunk = numpy.where(numpy.abs(shrunk) < self.min_step_range,
                             descent * self.min_step_range, shrunk)

        grown = self.growth * step_range
        grown = numpy.where(numpy.abs(grown) > self.max_step_range,
                            descent * self.max_step_range, grown)

        signed = numpy.where(gradient != 0,
                             descent * numpy.abs(step_range), step_range)

        step_range = numpy.select(
            [product < 0, product > 0], [shrunk, grown], default=signed)
        step_range = numpy.copysign(
            numpy.clip(numpy.abs(step_range),
                       self.min_step_range, self.max_step_range),
            step_range)

        moved = gradient != 0
        gradient = numpy.where(product < 0, 0.0, gradient)

        return step_range, gradient, moved

    def adapt(self, transitions):
        adapt_by_step_ranges(transitions, self.next_step_range)

    def reset_gradients(self, transitions):
        move_gradients_to_history(transitions)
