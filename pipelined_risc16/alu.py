import pyrtl
from enum import IntEnum

from .isa import WIDTH, MASK


class ALUOp(IntEnum):
    ADD  = 0x0
    NAND = 0x1


def compute(op, a, b):
    """Return (result, a == b) for a 1-bit op selector."""
    a &= MASK
    b &= MASK
    if op == ALUOp.ADD:
        result = (a + b) & MASK
    else:
        result = ~(a & b) & MASK
    return result, a == b


def alu(op, in1, in2):
    """Datapath version of `compute`.

    `op` is a 1-bit wire. Returns (result, eq) wires.
    """
    result = pyrtl.WireVector(WIDTH)
    eq = pyrtl.WireVector(1)

    result <<= pyrtl.enum_mux(
            op,
            {
                ALUOp.ADD:  in1 + in2,
                ALUOp.NAND: ~(in1 & in2),
            })
    eq <<= in1 == in2
    return result, eq
