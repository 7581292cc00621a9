import unittest
from unittest import mock

import numpy

from perceptron.core.exception import ConfigurationError, DimensionMismatch
from perceptron.core.multilayer_perceptron import (
    ActivationTrace, MultilayerPerceptron)
from perceptron.data.learning_task import LearningTask
from perceptron.linalg import Matrix, Vector
from perceptron.strategy import (
    ConstantRate, Elastic, Manhattan, Momentum, QuickPropagation)


def logistic(x):
    return 1. / (1. + numpy.exp(-x))


def make_xor_task():
    return LearningTask(input_dimension=2, output_dimension=1, examples=[
        ([0, 0], [0.]),
        ([0, 1], [1.]),
        ([1, 0], [1.]),
        ([1, 1], [1.]),
    ])


def all_strategies():
    return [
        ConstantRate(learn_rate=1.0, flat_spot=0.1),
        Momentum(learn_rate=0.1, flat_spot=0.1, momentum=0.95),
        Manhattan(step_range=0.01),
        Elastic(starting_step_range=0.1, shrink=0.6, growth=1.1,
                min_step_range=0.05, max_step_range=0.2),
        QuickPropagation(starting_step_range=0.1, max_step_range=1.0,
                         learn_rate=0.3),
    ]


class TestMultilayerPerceptron(unittest.TestCase):

    def setUp(self):
        self.random_state = numpy.random.RandomState(1234)

    def make_random(self, strategy=None, hidden_dimensions=(2,), **kwargs):
        return MultilayerPerceptron.random(
            input_dimension=2, hidden_dimensions=list(hidden_dimensions),
            output_dimension=1,
            strategy=strategy or ConstantRate(learn_rate=1.0, flat_spot=0.1),
            random_state=self.random_state, **kwargs)

    def test_accessors(self):

        perceptron = MultilayerPerceptron.random(
            input_dimension=3, hidden_dimensions=[4, 5], output_dimension=2,
            strategy=ConstantRate(learn_rate=0.5),
            random_state=self.random_state)

        self.assertEqual(perceptron.neuron_layer_count, 4)
        self.assertEqual(perceptron.input_dimension, 3)
        self.assertEqual(perceptron.output_dimension, 2)
        self.assertEqual(perceptron.layer_dimensions, [3, 4, 5, 2])
        self.assertEqual([w.shape for w in perceptron.weights],
                         [(4, 3), (5, 4), (2, 5)])
        self.assertEqual([b.dimension for b in perceptron.biases], [4, 5, 2])

        self.assertIsNone(perceptron.output)
        output = perceptron.forward_propagate(Vector([1., 2., 3.]))
        self.assertEqual(perceptron.output, output)
        self.assertEqual(perceptron.input, Vector([1., 2., 3.]))

    def test_forward_propagate_output_range(self):

        for strategy in all_strategies():
            perceptron = MultilayerPerceptron.random(
                input_dimension=3, hidden_dimensions=[4, 5],
                output_dimension=2, strategy=strategy,
                random_state=self.random_state)

            for _ in range(20):
                input = Vector(self.random_state.uniform(-5, 5, size=3))
                output = perceptron.forward_propagate(input)

                self.assertEqual(output.dimension, 2)
                self.assertTrue(all(0 < value < 1 for value in output))

    def test_forward_propagate_identity_weights(self):

        perceptron = MultilayerPerceptron(
            weights=[Matrix([[1., 0.], [0., 1.]])],
            biases=[Vector([0., 0.])],
            strategy=ConstantRate(learn_rate=1.0))

        output = perceptron.forward_propagate(Vector([0.5, -0.5]))

        self.assertAlmostEqual(output[0], logistic(0.5))
        self.assertAlmostEqual(output[1], logistic(-0.5))

    def test_bias_is_subtracted(self):

        perceptron = MultilayerPerceptron(
            weights=[Matrix([[2.]])], biases=[Vector([0.5])],
            strategy=ConstantRate(learn_rate=1.0))

        output = perceptron.forward_propagate([1.])

        self.assertAlmostEqual(output[0], logistic(2. - 0.5))

    def test_forward_propagate_wrong_input_dimension(self):

        perceptron = self.make_random()

        with self.assertRaises(DimensionMismatch):
            perceptron.forward_propagate(Vector([1., 2., 3.]))

    def test_random_construction_validation(self):

        for strategy in all_strategies():

            with self.assertRaises(ConfigurationError):
                MultilayerPerceptron.random(
                    0, [2], 1, strategy=strategy,
                    random_state=self.random_state)

            with self.assertRaises(ConfigurationError):
                MultilayerPerceptron.random(
                    2, [0], 1, strategy=strategy,
                    random_state=self.random_state)

            with self.assertRaises(ConfigurationError):
                MultilayerPerceptron.random(
                    2, [2], 1, strategy=strategy, lower_bound=1,
                    higher_bound=-1, random_state=self.random_state)

            for weight_decay in (-0.1, 1.0, 1.5):
                with self.assertRaises(ConfigurationError):
                    MultilayerPerceptron.random(
                        2, [2], 1, strategy=strategy,
                        weight_decay=weight_decay,
                        random_state=self.random_state)

    def test_explicit_construction_validation(self):

        weights = [Matrix([[1., 0.], [0., 1.]])]
        biases = [Vector([0., 0.])]

        for strategy in all_strategies():
            for weight_decay in (-0.01, 1.0):
                with self.assertRaises(ConfigurationError):
                    MultilayerPerceptron(weights, biases, strategy,
                                         weight_decay=weight_decay)

        with self.assertRaises(TypeError):
            MultilayerPerceptron(weights, biases, strategy='constant')

        with self.assertRaises(DimensionMismatch):
            MultilayerPerceptron(weights, [Vector([0.])],
                                 ConstantRate(learn_rate=1.0))

    def test_random_state_type(self):

        with self.assertRaises(TypeError):
            MultilayerPerceptron.random(
                2, [2], 1, strategy=ConstantRate(learn_rate=1.0),
                random_state=1234)

    def test_strategy_history_created(self):

        for strategy in all_strategies():
            perceptron = self.make_random(strategy=strategy)

            for transition in perceptron.transitions:
                if isinstance(strategy, (Elastic, QuickPropagation)):
                    self.assertEqual(
                        transition.history.weight_step_range,
                        Matrix.full(*transition.weights.shape, value=0.1))
                    self.assertEqual(
                        transition.history.previous_bias_gradient,
                        Vector.zeros(transition.biases.dimension))
                else:
                    self.assertIsNone(transition.history)

    def test_backward_propagate_gradients(self):

        # Single layer: one output neuron with two inputs
        perceptron = MultilayerPerceptron(
            weights=[Matrix([[0.5, -0.25]])], biases=[Vector([0.1])],
            strategy=ConstantRate(learn_rate=1.0, flat_spot=0.1))

        trace = perceptron.propagate(Vector([1., 2.]))
        perceptron.backward_propagate(trace, Vector([1.]))

        output = logistic(0.5 - 0.5 - 0.1)
        delta = (1. - output) * (output - output**2 + 0.1)

        transition = perceptron.transitions[0]
        self.assertAlmostEqual(transition.weight_gradient[0, 0], -delta)
        self.assertAlmostEqual(transition.weight_gradient[0, 1], -2 * delta)
        self.assertAlmostEqual(transition.bias_gradient[0], delta)

        # The weights are not changed by backpropagation
        self.assertEqual(transition.weights, Matrix([[0.5, -0.25]]))

    def test_backward_propagate_accumulates(self):

        perceptron = self.make_random()

        trace = perceptron.propagate(Vector([1., 0.]))
        perceptron.backward_propagate(trace, Vector([1.]))
        once = perceptron.transitions[0].weight_gradient

        perceptron.backward_propagate(trace, Vector([1.]))
        twice = perceptron.transitions[0].weight_gradient

        self.assertTrue(numpy.allclose(twice.to_numpy(),
                                       2 * once.to_numpy()))

    def test_output_error_is_collapsed_to_its_sum(self):

        # With two output neurons, errors of opposite sign cancel out
        perceptron = MultilayerPerceptron(
            weights=[Matrix([[0., 0.], [0., 0.]])],
            biases=[Vector([0., 0.])],
            strategy=ConstantRate(learn_rate=1.0))

        trace = perceptron.propagate(Vector([1., 1.]))
        perceptron.backward_propagate(trace, Vector([1., 0.]))

        transition = perceptron.transitions[0]
        self.assertEqual(transition.weight_gradient, Matrix.zeros(2, 2))
        self.assertEqual(transition.bias_gradient, Vector.zeros(2))

    def test_backward_propagate_validation(self):

        perceptron = self.make_random()
        other = MultilayerPerceptron.random(
            2, [3], 1, strategy=ConstantRate(learn_rate=1.0),
            random_state=self.random_state)

        with self.assertRaises(TypeError):
            perceptron.backward_propagate(None, Vector([1.]))

        with self.assertRaises(DimensionMismatch):
            trace = other.propagate(Vector([1., 0.]))
            perceptron.backward_propagate(trace, Vector([1.]))

        with self.assertRaises(DimensionMismatch):
            trace = perceptron.propagate(Vector([1., 0.]))
            perceptron.backward_propagate(trace, Vector([1., 0.]))

    def test_propagate_returns_trace(self):

        perceptron = self.make_random(hidden_dimensions=(3, 4))
        trace = perceptron.propagate([0.5, 0.5])

        self.assertIsInstance(trace, ActivationTrace)
        self.assertEqual(trace.layer_dimensions, [2, 3, 4, 1])
        self.assertEqual(trace.input, Vector([0.5, 0.5]))
        self.assertEqual(trace.output, perceptron.output)

    def test_batch_train_calls(self):

        task = make_xor_task()
        strategy = ConstantRate(learn_rate=1.0, flat_spot=0.1)
        perceptron = self.make_random(strategy=strategy)

        with mock.patch.object(perceptron, 'propagate',
                               wraps=perceptron.propagate) as propagate, \
                mock.patch.object(perceptron, 'backward_propagate',
                                  wraps=perceptron.backward_propagate) \
                as backward, \
                mock.patch.object(strategy, 'adapt',
                                  wraps=strategy.adapt) as adapt:

            perceptron.batch_train(task)

        self.assertEqual(propagate.call_count, len(task))
        self.assertEqual(backward.call_count, len(task))
        self.assertEqual(adapt.call_count, 1)

    def test_online_train_calls(self):

        task = make_xor_task()
        strategy = ConstantRate(learn_rate=1.0, flat_spot=0.1)
        perceptron = self.make_random(strategy=strategy)

        with mock.patch.object(strategy, 'adapt',
                               wraps=strategy.adapt) as adapt:
            perceptron.online_train(task)

        self.assertEqual(adapt.call_count, len(task))

    def test_online_and_batch_single_example(self):

        task = LearningTask(2, 1, examples=[([0.3, 0.9], [1.])])

        for strategy in all_strategies():
            weights, biases = self.make_random().get_params()

            online = MultilayerPerceptron(
                weights, biases, strategy, weight_decay=0.01)
            batch = MultilayerPerceptron(
                weights, biases, strategy, weight_decay=0.01)

            for _ in range(3):
                online.online_train(task)
                batch.batch_train(task)

            self.assertTrue(numpy.allclose(online.get_params(flat=True),
                                           batch.get_params(flat=True)))

    def test_online_and_batch_differ(self):

        task = make_xor_task()
        weights, biases = self.make_random().get_params()
        strategy = ConstantRate(learn_rate=1.0, flat_spot=0.1)

        online = MultilayerPerceptron(weights, biases, strategy)
        batch = MultilayerPerceptron(weights, biases, strategy)

        online.online_train(task)
        batch.batch_train(task)

        self.assertFalse(numpy.allclose(online.get_params(flat=True),
                                        batch.get_params(flat=True)))

    def test_task_dimension_mismatch(self):

        perceptron = self.make_random()
        before = perceptron.get_params(flat=True)
        task = LearningTask(3, 1, examples=[([0, 0, 0], [1])])

        with self.assertRaises(DimensionMismatch):
            perceptron.online_train(task)

        with self.assertRaises(DimensionMismatch):
            perceptron.batch_train(task)

        with self.assertRaises(DimensionMismatch):
            perceptron.batch_train(LearningTask(2, 2))

        self.assertTrue((perceptron.get_params(flat=True) == before).all())

    def test_weight_decay(self):

        perceptron = self.make_random(weight_decay=0.25)
        before = perceptron.get_params(flat=True)

        # No examples => zero gradients => only the decay acts
        perceptron.batch_train(LearningTask(2, 1))

        self.assertTrue(numpy.allclose(perceptron.get_params(flat=True),
                                       0.75 * before))

    def test_online_weight_decay_per_example(self):

        # Zero input and biases give equal outputs of 0.5, so the summed
        # error against (1, 0) vanishes and only the decay acts
        perceptron = MultilayerPerceptron(
            weights=[Matrix([[1., 2.], [3., 4.]])],
            biases=[Vector([0., 0.])],
            strategy=ConstantRate(learn_rate=1.0),
            weight_decay=0.5)
        task = LearningTask(2, 2, examples=[([0., 0.], [1., 0.])] * 3)

        with mock.patch.object(perceptron, 'punish',
                               wraps=perceptron.punish) as punish:
            perceptron.online_train(task)

        self.assertEqual(punish.call_count, len(task))
        self.assertTrue(numpy.allclose(
            perceptron.weights[0].to_numpy(),
            0.125 * numpy.array([[1., 2.], [3., 4.]])))

    def test_momentum_carries_gradients(self):

        momentum = 0.5
        perceptron = self.make_random(
            strategy=Momentum(learn_rate=0.1, flat_spot=0.1,
                              momentum=momentum))
        transition = perceptron.transitions[0]

        trace = perceptron.propagate(Vector([1., 1.]))
        perceptron.backward_propagate(trace, Vector([0.]))
        gradient = transition.weight_gradient.to_numpy()

        perceptron.adapt()
        perceptron.punish()
        perceptron.reset_gradients()

        self.assertTrue(numpy.allclose(
            transition.weight_gradient.to_numpy(), momentum * gradient))
        self.assertGreater(numpy.abs(gradient).sum(), 0)

        # A second cycle without examples decays the carried gradient again
        perceptron.batch_train(LearningTask(2, 1))

        self.assertTrue(numpy.allclose(
            transition.weight_gradient.to_numpy(), momentum**2 * gradient))

    def test_elastic_step_ranges_stay_bounded(self):

        strategy = Elastic(starting_step_range=0.1, shrink=0.6, growth=1.1,
                           min_step_range=0.05, max_step_range=0.2)
        perceptron = self.make_random(strategy=strategy)
        task = make_xor_task()

        for i in range(50):
            if i % 2:
                perceptron.online_train(task)
            else:
                perceptron.batch_train(task)

            for transition in perceptron.transitions:
                history = transition.history
                for steps in (history.weight_step_range.to_numpy(),
                              history.bias_step_range.to_numpy()):
                    self.assertTrue((numpy.abs(steps) >= 0.05 - 1e-12).all())
                    self.assertTrue((numpy.abs(steps) <= 0.2 + 1e-12).all())

    def test_batch_training_decreases_error(self):

        perceptron = self.make_random(
            strategy=ConstantRate(learn_rate=1.0, flat_spot=0.1),
            weight_decay=0.0)
        task = make_xor_task()

        initial_error = perceptron.total_squared_error(task)

        for _ in range(100):
            perceptron.batch_train(task)

        self.assertLess(perceptron.total_squared_error(task), initial_error)

    def test_total_squared_error(self):

        perceptron = MultilayerPerceptron(
            weights=[Matrix([[1., 0.], [0., 1.]])],
            biases=[Vector([0., 0.])],
            strategy=ConstantRate(learn_rate=1.0))
        task = LearningTask(2, 2, examples=[([0.5, -0.5], [0., 0.])])

        expected = logistic(0.5)**2 + logistic(-0.5)**2

        self.assertAlmostEqual(perceptron.total_squared_error(task), expected)

    def test_sensitivity_single_neuron(self):

        perceptron = MultilayerPerceptron(
            weights=[Matrix([[3.]])], biases=[Vector([0.])],
            strategy=ConstantRate(learn_rate=1.0, flat_spot=0.1))
        task = LearningTask(1, 1, examples=[([0.], [1.])])

        # logistic'(0) = 0.25; the flat-spot coefficient is not used
        self.assertAlmostEqual(perceptron.sensitivity(0, task), 0.75)

    def test_sensitivity_matches_finite_differences(self):

        perceptron = MultilayerPerceptron.random(
            input_dimension=3, hidden_dimensions=[4, 3], output_dimension=2,
            strategy=ConstantRate(learn_rate=1.0),
            random_state=self.random_state)

        task = LearningTask(3, 2)
        for _ in range(5):
            task.add(self.random_state.uniform(-1, 1, size=3), [0., 1.])

        eps = 1e-6
        for index in range(3):
            total = 0.0
            for example in task:
                shift = numpy.zeros(3)
                shift[index] = eps
                x = example.input.to_numpy()

                up = perceptron.forward_propagate(x + shift).component_sum()
                down = perceptron.forward_propagate(x - shift).component_sum()
                total += (up - down) / (2 * eps)

            self.assertAlmostEqual(perceptron.sensitivity(index, task),
                                   total / len(task), places=6)

        self.assertEqual(len(perceptron.sensitivities(task)), 3)

    def test_sensitivity_validation(self):

        perceptron = self.make_random()
        task = make_xor_task()

        with self.assertRaises(IndexError):
            perceptron.sensitivity(2, task)

        with self.assertRaises(DimensionMismatch):
            perceptron.sensitivity(0, LearningTask(3, 1))

        self.assertEqual(perceptron.sensitivity(0, LearningTask(2, 1)), 0.0)
