"""
Five-stage pipelined RiSC-16 datapath.

Pipeline registers are grouped per stage and named with a stage prefix:
`f_` fetch, `d_` decode, `x_` execute, `m_` memory, `w_` writeback.
Each holds a valid bit (0 = bubble) and the fields that stage needs.

Operands are resolved in decode through the forwarding network and latched
into the execute registers. The register file and data memory are written
from the memory stage; the writeback registers only remember what just
retired so it can still be forwarded.
"""
from collections import namedtuple

import pyrtl

from .alu import ALUOp, alu
from .decode import decode_inst, is_halt
from .forwarding import Producer, forward_operand
from .hazard import branch_stall, fetch_stall, load_use_stall, stall_chain
from .isa import LUI_SHIFT, OP, OP_BITS, REG_BITS, WIDTH

STAGE_PREFIXES = ("f", "d", "x", "m", "w")

Core = namedtuple("Core", ["pc", "halted", "imem", "rf", "dmem", "slots"])


class Slot(object):
    """The pipeline register bank in front of one stage."""

    def __init__(self, prefix, **widths):
        self.prefix = prefix
        self.valid = pyrtl.Register(1, prefix + "_valid")
        self.fields = {name: pyrtl.Register(bitwidth, "%s_%s" % (prefix, name))
                       for name, bitwidth in widths.items()}

    def __getattr__(self, name):
        try:
            return self.__dict__["fields"][name]
        except KeyError:
            raise AttributeError(name)

    def latch(self, hold, bubble, valid, **values):
        # hold: keep everything; bubble: clear valid only; otherwise load
        with pyrtl.conditional_assignment:
            with hold:
                self.valid.next |= self.valid
                for reg in self.fields.values():
                    reg.next |= reg
            with bubble:
                self.valid.next |= 0
            with pyrtl.otherwise:
                self.valid.next |= valid
                for name, reg in self.fields.items():
                    reg.next |= values[name]


def build_core(config):
    """Build the datapath into the current working block."""

    # Declarations:
    # -------------

    # Program counter: next address to fetch when not redirected
    pc = pyrtl.Register(WIDTH, "pc")
    # Set once a HALT has been fetched; no fetching after that
    halted = pyrtl.Register(1, "halted")

    imem = pyrtl.MemBlock(bitwidth=WIDTH, addrwidth=WIDTH, name="imem", asynchronous=True)
    # Register file is a memory mapping 3-bit index to 16-bit value.
    # r0 is never written, so it stays 0
    rf = pyrtl.MemBlock(bitwidth=WIDTH, addrwidth=REG_BITS, name="rf", asynchronous=True)
    dmem = pyrtl.MemBlock(bitwidth=WIDTH, addrwidth=config.dmem_addrwidth, name="dmem",
                          asynchronous=True)

    f = Slot("f", pc=WIDTH, inst=WIDTH)
    d = Slot("d", pc=WIDTH, op=OP_BITS, target=REG_BITS, src1=REG_BITS, src2=REG_BITS,
             imm=WIDTH, halt=1)
    x = Slot("x", pc=WIDTH, op=OP_BITS, target=REG_BITS, imm=WIDTH, halt=1,
             opnd1=WIDTH, opnd2=WIDTH)
    m = Slot("m", pc=WIDTH, op=OP_BITS, target=REG_BITS, halt=1, result=WIDTH, store=WIDTH)
    w = Slot("w", pc=WIDTH, op=OP_BITS, target=REG_BITS, value=WIDTH)

    # Results produced later in the pipe, needed earlier
    x_result = pyrtl.WireVector(WIDTH, "x_result")
    m_value = pyrtl.WireVector(WIDTH, "m_value")
    branch_resolved = pyrtl.WireVector(1, "branch_resolved")
    branch_target = pyrtl.WireVector(WIDTH, "branch_target")
    jump_taken = pyrtl.WireVector(1, "jump_taken")
    jump_target = pyrtl.WireVector(WIDTH, "jump_target")

    # Hazard control
    # --------------
    local = [
        fetch_stall(f.valid, f.inst),
        branch_stall(d.valid, d.op),
        load_use_stall(x.valid, x.op, x.target, d.valid, d.src1, d.src2),
        pyrtl.Const(0, bitwidth=1),
        pyrtl.Const(0, bitwidth=1),
    ]
    for prefix, stall in zip(STAGE_PREFIXES, local):
        named = pyrtl.WireVector(1, "local_" + prefix)
        named <<= stall
    stall_f, stall_d, stall_x, stall_m, stall_w = stall_chain(
            local, ["stall_" + p for p in STAGE_PREFIXES])

    # Stage 1: Fetch
    # --------------
    # A branch resolving in execute beats a jump resolving in decode
    fetch_addr = pyrtl.WireVector(WIDTH, "fetch_addr")
    with pyrtl.conditional_assignment:
        with branch_resolved:
            fetch_addr |= branch_target
        with jump_taken:
            fetch_addr |= jump_target
        with pyrtl.otherwise:
            fetch_addr |= pc

    inst = pyrtl.WireVector(WIDTH, "fetch_inst")
    inst <<= imem[fetch_addr]

    fetch_en = pyrtl.WireVector(1, "fetch_en")
    fetch_en <<= ~stall_f & ~halted

    pc.next <<= pyrtl.select(fetch_en, fetch_addr + 1, pc)
    halted.next <<= halted | (fetch_en & is_halt(inst))

    f.latch(stall_d, local[0] | halted, 1, pc=fetch_addr, inst=inst)

    # Stage 2: Decode
    # ---------------
    # The word is split into fields on its way into the decode registers
    op, target, src1, src2, imm, halt = decode_inst(f.inst)
    d.latch(stall_x, local[1], f.valid, pc=f.pc, op=op, target=target,
            src1=src1, src2=src2, imm=imm, halt=halt)

    # Read from register file and do register forwarding,
    # freshest producer first
    producers = [
        Producer("execute", x.valid, x.target, x_result),
        Producer("memory", m.valid, m.target, m_value),
        Producer("writeback", w.valid, w.target, w.value),
    ]
    opnd1 = forward_operand(d.src1, rf[d.src1], producers, "d_opnd1")
    opnd2 = forward_operand(d.src2, rf[d.src2], producers, "d_opnd2")

    # Jumps resolve here, against the forwarded source register
    jump_taken <<= d.valid & (d.op == OP.JALR) & ~d.halt & ~stall_d
    jump_target <<= opnd1

    x.latch(stall_m, local[2], d.valid, pc=d.pc, op=d.op, target=d.target, imm=d.imm,
            halt=d.halt, opnd1=opnd1, opnd2=opnd2)

    # Stage 3: Execute
    # ----------------
    # JALR computes its link value pc + 1 on the adder
    alu_in1 = pyrtl.select(x.op == OP.JALR, x.pc, x.opnd1)
    alu_in2 = pyrtl.enum_mux(
            x.op,
            {
                OP.ADD:  x.opnd2,
                OP.NAND: x.opnd2,
                OP.BEQ:  x.opnd2,
                OP.LUI:  pyrtl.concat(x.imm[0:WIDTH - LUI_SHIFT],
                                      pyrtl.Const(0, bitwidth=LUI_SHIFT)),
                OP.JALR: pyrtl.Const(1, bitwidth=WIDTH),
            },
            default=x.imm)
    alu_op = pyrtl.select(x.op == OP.NAND,
                          pyrtl.Const(ALUOp.NAND, bitwidth=1),
                          pyrtl.Const(ALUOp.ADD, bitwidth=1))
    result, eq = alu(alu_op, alu_in1, alu_in2)
    x_result <<= result

    # The ALU equality flag is the branch condition
    branch_resolved <<= x.valid & (x.op == OP.BEQ)
    branch_target <<= pyrtl.select(eq, x.pc + 1 + x.imm, x.pc + 1)

    branch_taken = pyrtl.WireVector(1, "branch_taken")
    branch_taken <<= branch_resolved & eq

    m.latch(stall_w, local[3], x.valid, pc=x.pc, op=x.op, target=x.target, halt=x.halt,
            result=x_result, store=x.opnd2)

    # Stage 4: Memory
    # ---------------
    # Out-of-range addresses never write and read back the default
    in_range = m.result < config.dmem_size
    dmem_addr = m.result[0:config.dmem_addrwidth]

    store_en = pyrtl.WireVector(1, "store_en")
    store_en <<= m.valid & (m.op == OP.SW) & in_range
    dmem[dmem_addr] <<= pyrtl.MemBlock.EnabledWrite(m.store, store_en)

    loaded = pyrtl.select(in_range, dmem[dmem_addr],
                          pyrtl.Const(config.dmem_default, bitwidth=WIDTH))
    m_value <<= pyrtl.select(m.op == OP.LW, loaded, m.result)

    # Write result back to register file. This is the architectural write;
    # it lands one stage ahead of the writeback registers
    reg_write_enable = pyrtl.WireVector(1, "reg_write_enable")
    reg_write_enable <<= m.valid & (m.target != 0)
    rf[m.target] <<= pyrtl.MemBlock.EnabledWrite(m_value, reg_write_enable)

    w.latch(pyrtl.Const(0, bitwidth=1), local[4], m.valid, pc=m.pc, op=m.op,
            target=m.target, value=m_value)

    # What commits this cycle
    for name, wire in (("retire_valid", m.valid), ("retire_pc", m.pc), ("retire_op", m.op),
                       ("retire_target", m.target), ("retire_value", m_value),
                       ("retire_halt", m.valid & m.halt)):
        named = pyrtl.WireVector(len(wire), name)
        named <<= wire

    # Stage 5: Writeback
    # ------------------
    # Nothing left to do: w_* only feeds the forwarding network above

    return Core(pc, halted, imem, rf, dmem, (f, d, x, m, w))
