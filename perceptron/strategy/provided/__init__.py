# flake8: noqa

from .constant_rate import ConstantRate
from .elastic import Elastic
from .manhattan import Manhattan
from .momentum import Momentum
from .quick_propagation import QuickPropagation
