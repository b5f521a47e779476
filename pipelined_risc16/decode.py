import pyrtl

from .isa import OP, WIDTH, REG_BITS


def is_halt(inst):
    # JALR with a nonzero immediate
    return (inst[13:16] == OP.JALR) & (inst[0:7] != 0)


def decode_inst(inst):
    """Split an instruction word into the fields a pipeline slot carries.

    Returns (op, target, src1, src2, imm, halt). Unused register fields
    come out as r0 so they can never match a producer, and `target` is r0
    for SW, BEQ and HALT.
    """
    op = inst[13:16]
    reg_a = inst[10:13]
    reg_b = inst[7:10]
    reg_c = inst[0:3]
    zero = pyrtl.Const(0, bitwidth=REG_BITS)

    halt = pyrtl.WireVector(1)
    halt <<= is_halt(inst)

    # SW and BEQ read the high field instead of writing it
    reads_a = (op == OP.SW) | (op == OP.BEQ)

    target = pyrtl.select(reads_a | halt, zero, reg_a)
    src1 = pyrtl.select(op == OP.LUI, zero, reg_b)
    src2 = pyrtl.enum_mux(
            op,
            {
                OP.ADD:  reg_c,
                OP.NAND: reg_c,
                OP.SW:   reg_a,
                OP.BEQ:  reg_a,
            },
            default=zero)

    # 7-bit signed for RRI, 10-bit unsigned for LUI, nothing for RRR
    imm = pyrtl.enum_mux(
            op,
            {
                OP.ADD:  pyrtl.Const(0, bitwidth=WIDTH),
                OP.NAND: pyrtl.Const(0, bitwidth=WIDTH),
                OP.LUI:  inst[0:10].zero_extended(WIDTH),
            },
            default=inst[0:7].sign_extended(WIDTH))

    return op, target, src1, src2, imm, halt
