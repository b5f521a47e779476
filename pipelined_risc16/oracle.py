"""
Architectural single-step RiSC-16 model.

One instruction per step, no pipeline. It owns its own register file, data
memory and program counter and is only used to produce the values the
pipeline must agree with.
"""
import logging

from .alu import ALUOp, compute
from .config import CoreConfig
from .isa import MASK, OP, LUI_SHIFT, Instruction
from .records import Retirement
from .storage import DataMemory, InstructionMemory, RegisterFile

log = logging.getLogger(__name__)


class ArchSimulator(object):
    def __init__(self, program=(), registers=None, memory=None, config=None):
        self.config = config or CoreConfig()
        self.imem = InstructionMemory(program)
        self.rf = RegisterFile(registers)
        self.dmem = DataMemory(self.config.dmem_size, self.config.dmem_default, memory)
        self.pc = self.config.entry_point & MASK
        self.halted = False
        self.steps = 0
        self.retirements = []

    def execute_one(self, inst, pc=None):
        """Apply one instruction to the architectural state and return its retirement."""
        if pc is None:
            pc = self.pc
        op = inst.opcode
        a = self.rf.read(inst.src1)
        b = self.rf.read(inst.src2)
        imm = inst.imm & MASK
        next_pc = (pc + 1) & MASK
        value = None

        if op == OP.ADD:
            value, _ = compute(ALUOp.ADD, a, b)
        elif op == OP.ADDI:
            value, _ = compute(ALUOp.ADD, a, imm)
        elif op == OP.NAND:
            value, _ = compute(ALUOp.NAND, a, b)
        elif op == OP.LUI:
            value = (inst.imm << LUI_SHIFT) & MASK
        elif op == OP.SW:
            addr, _ = compute(ALUOp.ADD, a, imm)
            self.dmem.write(addr, b)
        elif op == OP.LW:
            addr, _ = compute(ALUOp.ADD, a, imm)
            value = self.dmem.read(addr)
        elif op == OP.BEQ:
            _, taken = compute(ALUOp.ADD, a, b)
            if taken:
                next_pc = (pc + 1 + imm) & MASK
        elif inst.is_halt:
            self.halted = True
        else:
            value = (pc + 1) & MASK
            next_pc = a

        dest = inst.dest
        if value is None or not dest:
            value = 0
        else:
            self.rf.write(dest, value)

        self.pc = next_pc
        self.steps += 1
        retirement = Retirement(pc, op, dest, value)
        self.retirements.append(retirement)
        return retirement

    def step(self):
        if self.halted:
            return None
        pc = self.pc
        inst = Instruction.decode(self.imem.read(pc))
        log.debug("oracle %04x: %s", pc, inst)
        return self.execute_one(inst, pc)

    def run(self, max_steps=None):
        if max_steps is None:
            max_steps = self.config.max_ticks
        while not self.halted and self.steps < max_steps:
            self.step()
        if not self.halted:
            log.warning("oracle stopped after %d steps without halting", self.steps)
        return self.retirements

    # Accessors shared with the pipeline driver

    def register(self, index):
        return self.rf.read(index)

    def registers(self):
        return self.rf.snapshot()

    def memory_word(self, addr):
        return self.dmem.read(addr)

    def memory(self):
        return self.dmem.nonzero()
