from collections import namedtuple
import logging
import os

import h5py
import numpy

from perceptron.core.exception import ConfigurationError, DimensionMismatch
from perceptron.linalg import Vector


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


INPUTS_KEY = 'inputs'
OUTPUTS_KEY = 'outputs'


# Yielded when iterating over a learning task
LearningExample = namedtuple('LearningExample', ['input', 'output'])


class LearningTask:
    """ An ordered collection of learning examples with fixed input and
    output dimensions
    """

    def __init__(self, input_dimension, output_dimension, examples=None):
        """
        Parameters
        ----------
        input_dimension, output_dimension: int
            The dimensions (>= 1) every example's input and output must have

        examples: iterable of (input, output) pairs, default=None
            Examples added with :meth:`add` on creation
        """
        if input_dimension < 1 or output_dimension < 1:
            msg = ("Input dimension ({}) and output dimension ({}) "
                   "must be >= 1")
            raise ConfigurationError(
                msg.format(input_dimension, output_dimension))

        self.input_dimension = input_dimension
        self.output_dimension = output_dimension
        self._examples = []

        if examples is not None:
            for input, output in examples:
                self.add(input, output)

    def __repr__(self):
        return "<LearningTask {} -> {}, size={}>".format(
            self.input_dimension, self.output_dimension, self.size)

    @property
    def size(self):
        return len(self._examples)

    def __len__(self):
        return self.size

    def __iter__(self):
        return iter(self._examples)

    def __getitem__(self, index):
        return self._examples[index]

    def add(self, input, output):
        """ Add an example; `input` and `output` may be vectors or sequences
        of floats
        """
        if not isinstance(input, Vector):
            input = Vector(input)

        if not isinstance(output, Vector):
            output = Vector(output)

        self.add_example(LearningExample(input=input, output=output))

    def add_example(self, example):
        """ Add a :class:`LearningExample` after validating its dimensions
        """
        if (example.input.dimension != self.input_dimension or
                example.output.dimension != self.output_dimension):
            msg = ("Dimensions of learning example ({} -> {}) do not match "
                   "learning task ({} -> {})")
            raise DimensionMismatch(msg.format(
                example.input.dimension, example.output.dimension,
                self.input_dimension, self.output_dimension))

        self._examples.append(example)

    def inputs(self):
        """ Returns the inputs as an array of shape `(size, input_dimension)`
        """
        return numpy.array(
            [example.input.to_numpy() for example in self._examples],
            dtype=float).reshape(self.size, self.input_dimension)

    def outputs(self):
        """ Returns the outputs as an array of shape
        `(size, output_dimension)`
        """
        return numpy.array(
            [example.output.to_numpy() for example in self._examples],
            dtype=float).reshape(self.size, self.output_dimension)

    def save(self, filename, compress=True, overwrite=False):
        """ Store the examples in an hdf5 file

        The format assuming `hf` is an h5py `File` is as follows::

            'inputs'   shape=(size, input_dimension)
            'outputs'  shape=(size, output_dimension)

        Parameters
        ----------
        filename: str
            The hdf5 file to create

        compress: bool, default=True
            If True, :code:`gzip` compression is used for the datasets

        overwrite: bool, default=False
            If False, an existing file is never replaced
        """
        if os.path.exists(filename) and not overwrite:
            msg = "Learning task file already exists at {}"
            raise FileExistsError(msg.format(filename))

        compress_method = "gzip" if compress else None

        with h5py.File(filename, mode='w') as hf:
            hf.create_dataset(INPUTS_KEY, data=self.inputs(),
                              compression=compress_method)
            hf.create_dataset(OUTPUTS_KEY, data=self.outputs(),
                              compression=compress_method)

        msg = "Saved learning task with {} examples to {}"
        logger.info(msg.format(self.size, filename))

    @classmethod
    def load(cls, filename):
        """ Load a learning task stored with :meth:`save`
        """
        with h5py.File(filename, mode='r') as hf:
            for key in (INPUTS_KEY, OUTPUTS_KEY):
                if key not in hf:
                    msg = "Learning task file {} has no `{}` dataset"
                    raise KeyError(msg.format(filename, key))

            inputs = hf[INPUTS_KEY][...]
            outputs = hf[OUTPUTS_KEY][...]

        if inputs.ndim != 2 or outputs.ndim != 2:
            msg = "Inputs and outputs in {} must be 2d"
            raise DimensionMismatch(msg.format(filename))

        if inputs.shape[0] != outputs.shape[0]:
            msg = "Mismatch in number of examples: inputs ({}), outputs ({})"
            raise DimensionMismatch(
                msg.format(inputs.shape[0], outputs.shape[0]))

        task = cls(input_dimension=inputs.shape[1],
                   output_dimension=outputs.shape[1],
                   examples=zip(inputs, outputs))

        msg = "Loaded learning task with {} examples from {}"
        logger.info(msg.format(task.size, filename))

        return task
