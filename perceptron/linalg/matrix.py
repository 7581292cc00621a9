import numbers

import numpy

from perceptron.core.exception import DimensionMismatch
from perceptron.linalg.vector import Vector


class Matrix:
    """ A dense real matrix of fixed height and width

    Indexing with a pair, :code:`m[i, j]`, reads or writes a single
    element. Indexing with a single integer, :code:`m[i]`, reads or
    writes the i'th row as a :class:`Vector`.
    """

    def __init__(self, components):
        """ Create a matrix holding a copy of `components`

        Parameters
        ----------
        components: nested sequence of float or ndarray, ndim=2
            The rows of the matrix
        """
        if isinstance(components, Matrix):
            components = components._components

        components = numpy.array(components, dtype=float)

        if components.ndim != 2:
            msg = "Matrix components must be 2d (got ndim={})"
            raise DimensionMismatch(msg.format(components.ndim))

        self._components = components

    @classmethod
    def zeros(cls, height, width):
        return cls(numpy.zeros((height, width)))

    @classmethod
    def full(cls, height, width, value):
        return cls(numpy.full((height, width), value, dtype=float))

    @classmethod
    def from_components(cls, width, components):
        """ Create a matrix from a flat, row-major list of `components`

        The number of components must be a multiple of `width`.
        """
        components = numpy.array(components, dtype=float)

        if width < 1 or components.size % width != 0:
            msg = "Width {} does not divide the number of components ({})"
            raise DimensionMismatch(msg.format(width, components.size))

        return cls(components.reshape(-1, width))

    @classmethod
    def outer(cls, left, right):
        """ The outer product of two vectors, i.e., the matrix with
        element (i, j) equal to :code:`left[i] * right[j]`
        """
        return cls(numpy.outer(left.to_numpy(), right.to_numpy()))

    @property
    def height(self):
        return self._components.shape[0]

    @property
    def width(self):
        return self._components.shape[1]

    @property
    def shape(self):
        return self._components.shape

    @property
    def number_of_elements(self):
        return self._components.size

    @property
    def is_quadratic(self):
        return self.height == self.width

    @property
    def T(self):
        return self.transpose()

    def to_numpy(self):
        """ Returns a copy of the elements as a 2d ndarray
        """
        return self._components.copy()

    def copy(self):
        return Matrix(self._components)

    def __iter__(self):
        return (float(c) for c in self._components.flat)

    def __getitem__(self, key):
        if isinstance(key, tuple):
            return float(self._components[key])
        return Vector(self._components[key])

    def __setitem__(self, key, value):
        if isinstance(key, tuple):
            self._components[key] = value
            return

        if not isinstance(value, Vector):
            msg = "Rows must be assigned a Vector (got {})"
            raise TypeError(msg.format(type(value).__name__))

        if value.dimension != self.width:
            msg = "Cannot assign vector of dimension {} to row of width {}"
            raise DimensionMismatch(msg.format(value.dimension, self.width))

        self._components[key] = value.to_numpy()

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return (self.shape == other.shape and
                bool((self._components == other._components).all()))

    def __repr__(self):
        return "Matrix({})".format(self._components.tolist())

    def _check_shape(self, other, operation):
        if not isinstance(other, Matrix):
            msg = "Cannot {} Matrix and {}"
            raise TypeError(msg.format(operation, type(other).__name__))

        if other.shape != self.shape:
            msg = "Cannot {} matrices of shape {} and {}"
            raise DimensionMismatch(
                msg.format(operation, self.shape, other.shape))

    def transpose(self):
        return Matrix(self._components.T)

    def __add__(self, other):
        self._check_shape(other, 'add')
        return Matrix(self._components + other._components)

    def __sub__(self, other):
        self._check_shape(other, 'subtract')
        return Matrix(self._components - other._components)

    def __neg__(self):
        return Matrix(-self._components)

    def __mul__(self, scalar):
        if not isinstance(scalar, numbers.Real):
            return NotImplemented
        return Matrix(scalar * self._components)

    __rmul__ = __mul__

    def __matmul__(self, other):
        """ The matrix product with another matrix or with a vector
        """
        if isinstance(other, Vector):
            if other.dimension != self.width:
                msg = ("Cannot multiply matrix of shape {} with vector "
                       "of dimension {}")
                raise DimensionMismatch(msg.format(self.shape, other.dimension))
            return Vector(self._components.dot(other.to_numpy()))

        if isinstance(other, Matrix):
            if other.height != self.width:
                msg = "Cannot multiply matrices of shape {} and {}"
                raise DimensionMismatch(msg.format(self.shape, other.shape))
            return Matrix(self._components.dot(other._components))

        return NotImplemented

    def hadamard(self, other):
        """ The element-wise (Schur) product with `other`
        """
        self._check_shape(other, 'multiply element-wise')
        return Matrix(self._components * other._components)

    def map(self, function):
        """ Returns the matrix of `function` applied to each element

        Parameters
        ----------
        function: callable
            A real function of a single real argument
        """
        mapped = numpy.fromiter(
            (function(c) for c in self._components.flat),
            dtype=float, count=self.number_of_elements)
        return Matrix(mapped.reshape(self.shape))
