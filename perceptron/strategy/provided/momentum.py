from perceptron.core.exception import ConfigurationError
from perceptron.strategy.provided.constant_rate import ConstantRate


class Momentum(ConstantRate):
    """ Constant learn rate gradient descent with a momentum term.

    Rather than being zeroed after a training cycle, the gradients are
    scaled by the momentum coefficient and so carry over into the next
    cycle's update.
    """

    def __init__(self, learn_rate, flat_spot=0.0, momentum=0.9):
        """
        Parameters
        ----------
        learn_rate, flat_spot: float
            See :class:`ConstantRate`

        momentum: float, default=0.9
            The factor in [0, 1] by which the gradients are scaled after
            each training cycle
        """
        if momentum < 0 or momentum > 1:
            msg = "Momentum coefficient ({}) must be between 0 and 1"
            raise ConfigurationError(msg.format(momentum))

        self.momentum = float(momentum)

        super().__init__(learn_rate=learn_rate, flat_spot=flat_spot)

    def reset_gradients(self, transitions):
        for transition in transitions:
            transition.weight_gradient = (
                self.momentum * transition.weight_gradient)
            transition.bias_gradient = self.momentum * transition.bias_gradient
