# flake8: noqa

from .strategy_base import (
    ElasticState,
    QuickPropState,
    StepRangeState,
    UpdateStrategy,
)

from .provided import (
    ConstantRate,
    Elastic,
    Manhattan,
    Momentum,
    QuickPropagation,
)
