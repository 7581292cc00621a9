# flake8: noqa

from ._version import version as __version__

from .core.exception import ConfigurationError, DimensionMismatch
from .core.multilayer_perceptron import ActivationTrace, MultilayerPerceptron
from .core.training import train
from .data.learning_task import LearningExample, LearningTask
from .linalg import Matrix, Vector
from .strategy import (
    ConstantRate,
    Elastic,
    Manhattan,
    Momentum,
    QuickPropagation,
    UpdateStrategy,
)
