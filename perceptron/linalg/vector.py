import numbers

import numpy

from perceptron.core.exception import DimensionMismatch


class Vector:
    """ A dense real vector of fixed dimension

    Arithmetic operations return new vectors; the components of a vector
    are only changed through indexed assignment, e.g., :code:`v[2] = 1.0`.
    """

    def __init__(self, components):
        """ Create a vector holding a copy of `components`

        Parameters
        ----------
        components: sequence of float or ndarray, ndim=1
            The components of the vector
        """
        if isinstance(components, Vector):
            components = components._components

        components = numpy.array(components, dtype=float)

        if components.ndim != 1:
            msg = "Vector components must be 1d (got ndim={})"
            raise DimensionMismatch(msg.format(components.ndim))

        self._components = components

    @classmethod
    def zeros(cls, dimension):
        """ Create a vector of `dimension` zeros
        """
        return cls(numpy.zeros(dimension))

    @classmethod
    def full(cls, dimension, value):
        """ Create a vector of `dimension` components equal to `value`
        """
        return cls(numpy.full(dimension, value, dtype=float))

    @property
    def dimension(self):
        return self._components.shape[0]

    @property
    def length(self):
        """ The Euclidean norm of the vector
        """
        return float(numpy.sqrt(self.squared_component_sum()))

    def to_numpy(self):
        """ Returns a copy of the components as a 1d ndarray
        """
        return self._components.copy()

    def copy(self):
        return Vector(self._components)

    def __len__(self):
        return self.dimension

    def __iter__(self):
        return (float(c) for c in self._components)

    def __getitem__(self, index):
        return float(self._components[index])

    def __setitem__(self, index, value):
        self._components[index] = value

    def __eq__(self, other):
        if not isinstance(other, Vector):
            return NotImplemented
        return (self.dimension == other.dimension and
                bool((self._components == other._components).all()))

    def __repr__(self):
        return "Vector({})".format(self._components.tolist())

    def _check_dimension(self, other, operation):
        if not isinstance(other, Vector):
            msg = "Cannot {} Vector and {}"
            raise TypeError(msg.format(operation, type(other).__name__))

        if other.dimension != self.dimension:
            msg = "Cannot {} vectors of dimension {} and {}"
            raise DimensionMismatch(
                msg.format(operation, self.dimension, other.dimension))

    def __add__(self, other):
        self._check_dimension(other, 'add')
        return Vector(self._components + other._components)

    def __sub__(self, other):
        self._check_dimension(other, 'subtract')
        return Vector(self._components - other._components)

    def __neg__(self):
        return Vector(-self._components)

    def __mul__(self, scalar):
        if not isinstance(scalar, numbers.Real):
            return NotImplemented
        return Vector(scalar * self._components)

    __rmul__ = __mul__

    def hadamard(self, other):
        """ The component-wise (Schur) product with `other`
        """
        self._check_dimension(other, 'multiply component-wise')
        return Vector(self._components * other._components)

    def dot(self, other):
        """ The scalar product with `other`
        """
        self._check_dimension(other, 'take the scalar product of')
        return float(numpy.dot(self._components, other._components))

    def component_sum(self):
        return float(self._components.sum())

    def squared_component_sum(self):
        return float((self._components ** 2).sum())

    def add_to_all_components(self, value):
        return Vector(self._components + value)

    def map(self, function):
        """ Returns the vector of `function` applied to each component

        Parameters
        ----------
        function: callable
            A real function of a single real argument
        """
        return Vector(numpy.fromiter(
            (function(c) for c in self._components),
            dtype=float, count=self.dimension))
