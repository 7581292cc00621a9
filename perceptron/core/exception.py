

class ConfigurationError(ValueError):
    """ Raised when a hyperparameter (learn rate, weight decay, step range,
    etc.) is outside of its allowed range
    """


class DimensionMismatch(ValueError):
    """ Raised when the shapes of vectors, matrices, examples, tasks or
    networks do not agree
    """
