import pyrtl

from .isa import WIDTH


class Producer(object):
    """An in-flight result another instruction may need.

    `target` is the register it will write and `value` what it will write.
    """

    def __init__(self, name, valid, target, value):
        self.name = name
        self.valid = valid
        self.target = target
        self.value = value

    def supplies(self, src):
        return self.valid & (self.target == src)


def forward_operand(src, stored, producers, name=''):
    """Pick the freshest value of register `src`.

    r0 always reads zero. Otherwise `producers` are tried in order, freshest
    first, and the first one targeting `src` wins; with no match the value
    read from the register file (`stored`) is used.
    """
    is_zero = src == 0
    matches = [p.supplies(src) for p in producers]

    operand = pyrtl.WireVector(WIDTH, name)
    with pyrtl.conditional_assignment:
        with is_zero:
            operand |= 0
        for producer, match in zip(producers, matches):
            with match:
                operand |= producer.value
        with pyrtl.otherwise:
            operand |= stored
    return operand
