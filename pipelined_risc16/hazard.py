"""
Stall control.

Each stage may raise a local stall from what the stage registers hold right
now. The effective stall of a stage is its local stall or the effective stall
of the stage after it, computed from writeback back to fetch. A stage that is
stalled only by itself hands a bubble to the next stage's register; a stage
stalled from downstream holds its contents.
"""
import pyrtl

from .decode import is_halt
from .isa import OP


def fetch_stall(f_valid, f_inst):
    # Don't fetch past a jump or branch whose target is unknown
    op = f_inst[13:16]
    jump = (op == OP.JALR) & ~is_halt(f_inst)
    return f_valid & ((op == OP.BEQ) | jump)


def branch_stall(d_valid, d_op):
    return d_valid & (d_op == OP.BEQ)


def load_use_stall(x_valid, x_op, x_target, d_valid, d_src1, d_src2):
    loading = x_valid & (x_op == OP.LW) & (x_target != 0)
    return loading & d_valid & ((d_src1 == x_target) | (d_src2 == x_target))


def stall_chain(local, names):
    """effective[i] = local[i] | effective[i + 1], built writeback first."""
    effective = [None] * len(local)
    downstream = pyrtl.Const(0, bitwidth=1)
    for i in reversed(range(len(local))):
        stall = pyrtl.WireVector(1, names[i])
        stall <<= local[i] | downstream
        effective[i] = stall
        downstream = stall
    return effective
