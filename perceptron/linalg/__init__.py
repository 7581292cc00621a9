# flake8: noqa

from .vector import Vector
from .matrix import Matrix
