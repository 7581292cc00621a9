""" Plain text reports of a multilayer perceptron's state, its results on a
learning task and the sensitivity of its input neurons
"""

DIVIDING_LINE = "-----------------------------------------------"


def _format_components(components):
    return ",".join("{:7.3f}".format(c) for c in components)


def format_vector(vector):
    """ Format as a row vector, e.g., :code:`(  0.500, -1.250)`
    """
    return "(" + _format_components(vector) + ")"


def format_matrix(matrix):
    """ Format a matrix over several lines with bracket-like borders::

        /  1.000,  0.000\\
        |  0.000,  1.000|
        \\  0.500,  0.500/
    """
    rows = [_format_components(matrix[i]) for i in range(matrix.height)]

    if len(rows) == 1:
        return "(" + rows[0] + ")"

    lines = ["/" + rows[0] + "\\"]
    lines.extend("|" + row + "|" for row in rows[1:-1])
    lines.append("\\" + rows[-1] + "/")

    return "\n".join(lines)


def format_results(perceptron, task):
    """ The network output next to the desired output for every example of
    `task`, followed by the total squared error
    """
    lines = ["Neural network outputs for given learning task"]
    total_error = 0.0

    for example in task:
        output = perceptron.forward_propagate(example.input)
        total_error += (example.output - output).squared_component_sum()

        lines.extend([
            DIVIDING_LINE,
            "Input:", format_vector(example.input),
            "", "Output:", format_vector(output),
            "", "Desired output:", format_vector(example.output),
        ])

    lines.extend([
        DIVIDING_LINE,
        "Total error over all learning examples:",
        "{:.10f}".format(total_error),
    ])

    return "\n".join(lines)


def _layer_name(index, neuron_layer_count):
    if index == 0:
        return "input-layer"
    elif index == neuron_layer_count - 1:
        return "output-layer"
    else:
        return "hidden-layer {}".format(index)


def format_network(perceptron):
    """ All weights and biases of `perceptron`, labelled by layer
    """
    count = perceptron.neuron_layer_count
    lines = ["Current neural network state", DIVIDING_LINE]

    for i, transition in enumerate(perceptron.transitions):
        if i > 0:
            lines.extend(["", DIVIDING_LINE])

        lines.extend([
            "Weights between {} and {}:".format(
                _layer_name(i, count), _layer_name(i+1, count)),
            "",
            format_matrix(transition.weights),
            "",
            DIVIDING_LINE,
            "{} bias:".format(_layer_name(i+1, count).capitalize()),
            "",
            format_vector(transition.biases),
        ])

    return "\n".join(lines)


def format_sensitivities(perceptron, task):
    """ One line per input neuron with its average sensitivity over `task`
    """
    lines = ["Input neuron sensitivities", DIVIDING_LINE]
    lines.extend("{:d}: {:.10f}".format(index, sensitivity)
                 for index, sensitivity in
                 enumerate(perceptron.sensitivities(task)))

    return "\n".join(lines)


def print_results(perceptron, task):
    print(format_results(perceptron, task))


def print_network(perceptron):
    print(format_network(perceptron))


def print_sensitivities(perceptron, task):
    print(format_sensitivities(perceptron, task))
