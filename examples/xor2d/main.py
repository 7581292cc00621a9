import sys

import matplotlib.pyplot as plt
import numpy as np

from perceptron import LearningTask, MultilayerPerceptron, train
from perceptron.core.training import setup_logging
from perceptron.strategy import (
    ConstantRate, Elastic, Manhattan, Momentum, QuickPropagation)
from perceptron.util import report
from perceptron.visualize import plot_error_history


setup_logging()

random_state = np.random.RandomState(1234)


# The learning task ###########################################################

task = LearningTask(input_dimension=2, output_dimension=1, examples=[
    ([0, 0], [0.0]),
    ([0, 1], [1.0]),
    ([1, 0], [1.0]),
    ([1, 1], [1.0]),
])

# Pick an update strategy #####################################################

strategies = {
    'constant': (ConstantRate(learn_rate=1.0, flat_spot=0.1), 0.0),
    'manhattan': (Manhattan(step_range=0.01), 0.0),
    'momentum': (Momentum(learn_rate=0.1, flat_spot=0.1, momentum=0.95),
                 0.0005),
    'elastic': (Elastic(starting_step_range=0.1, shrink=0.6, growth=1.1,
                        min_step_range=0.05, max_step_range=0.2), 0.01),
    'quick': (QuickPropagation(starting_step_range=0.1, max_step_range=1.0,
                               learn_rate=0.3), 0.0),
}

name = sys.argv[1] if len(sys.argv) > 1 else 'constant'
strategy, weight_decay = strategies[name]

# Set up the network and train it #############################################

perceptron = MultilayerPerceptron.random(
    input_dimension=2, hidden_dimensions=[2], output_dimension=1,
    strategy=strategy, lower_bound=-1, higher_bound=1,
    weight_decay=weight_decay, random_state=random_state)

errors = train(perceptron, task, iterations=100, mode='batch')

report.print_results(perceptron, task)
report.print_network(perceptron)
report.print_sensitivities(perceptron, task)

plot_error_history(errors)
plt.show()
