"""
RiSC-16 instruction set.

Every word is 16 bits with the opcode in bits 15-13 and one of three layouts
below it:

      RRR: ooo aaa bbb 0000 ccc     rA <- rB op rC
      RRI: ooo aaa bbb iiiiiii      7-bit signed immediate
       RI: ooo aaa iiiiiiiiii       10-bit unsigned immediate

Instructions:

      ADD  rA, rB, rC   rA <- rB + rC
      ADDI rA, rB, imm  rA <- rB + imm
      NAND rA, rB, rC   rA <- ~(rB & rC)
      LUI  rA, imm      rA <- imm << 6
      SW   rA, rB, imm  mem[rB + imm] <- rA
      LW   rA, rB, imm  rA <- mem[rB + imm]
      BEQ  rA, rB, imm  if rA == rB: pc <- pc + 1 + imm
      JALR rA, rB       rA <- pc + 1; pc <- rB

A JALR with a nonzero immediate is a HALT: it neither links nor jumps.
"""
from dataclasses import dataclass
from enum import IntEnum

WIDTH = 16
MASK = (1 << WIDTH) - 1
NUM_REGS = 8
REG_BITS = 3
OP_BITS = 3

IMM7_MIN, IMM7_MAX = -64, 63
IMM10_MAX = 0x3FF

# LUI places its immediate in the top 10 bits of the word
LUI_SHIFT = 6


class OP(IntEnum):
    ADD  = 0x0
    ADDI = 0x1
    NAND = 0x2
    LUI  = 0x3
    SW   = 0x4
    LW   = 0x5
    BEQ  = 0x6
    JALR = 0x7


class Format(IntEnum):
    RRR = 0
    RRI = 1
    RI  = 2


FORMAT = {
    OP.ADD:  Format.RRR,
    OP.ADDI: Format.RRI,
    OP.NAND: Format.RRR,
    OP.LUI:  Format.RI,
    OP.SW:   Format.RRI,
    OP.LW:   Format.RRI,
    OP.BEQ:  Format.RRI,
    OP.JALR: Format.RRI,
}

# RRI opcodes whose high register field is read, not written
READS_HIGH_FIELD = frozenset({OP.SW, OP.BEQ})

NOP_WORD = 0x0000
HALT_WORD = (OP.JALR << 13) | 1


def sign_extend(value, bits):
    value &= (1 << bits) - 1
    if value & (1 << (bits - 1)):
        return value - (1 << bits)
    return value


def to_signed(value):
    return sign_extend(value, WIDTH)


def _check_reg(name, index):
    if not 0 <= index < NUM_REGS:
        raise ValueError("%s register r%d out of range" % (name, index))


def _pack(opcode, target, src1, src2, imm):
    opcode = OP(opcode)
    fmt = FORMAT[opcode]
    for name, index in (("target", target), ("source1", src1), ("source2", src2)):
        _check_reg(name, index)

    if fmt is Format.RRR:
        if imm:
            raise ValueError("%s takes no immediate" % opcode.name)
        return (opcode << 13) | (target << 10) | (src1 << 7) | src2

    if fmt is Format.RI:
        if src1 or src2:
            raise ValueError("%s takes no source registers" % opcode.name)
        if not 0 <= imm <= IMM10_MAX:
            raise ValueError("%s immediate %d does not fit in 10 bits" % (opcode.name, imm))
        return (opcode << 13) | (target << 10) | imm

    if not IMM7_MIN <= imm <= IMM7_MAX:
        raise ValueError("%s immediate %d does not fit in 7 signed bits" % (opcode.name, imm))
    if opcode in READS_HIGH_FIELD:
        if target:
            raise ValueError("%s has no target register" % opcode.name)
        high = src2
    else:
        if src2:
            raise ValueError("%s has no second source register" % opcode.name)
        high = target
    return (opcode << 13) | (high << 10) | (src1 << 7) | (imm & 0x7F)


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction word.

    `target` is the register written (0 for SW and BEQ), `src1` the middle
    register field and `src2` the second register read, if any. `imm` is
    signed for RRI and unsigned for RI.
    """
    opcode: OP
    target: int = 0
    src1: int = 0
    src2: int = 0
    imm: int = 0
    word: int = 0

    @classmethod
    def decode(cls, word):
        word &= MASK
        opcode = OP(word >> 13)
        high = (word >> 10) & 0x7
        mid = (word >> 7) & 0x7
        fmt = FORMAT[opcode]

        if fmt is Format.RRR:
            return cls(opcode, high, mid, word & 0x7, 0, word)
        if fmt is Format.RI:
            return cls(opcode, high, 0, 0, word & IMM10_MAX, word)

        imm = sign_extend(word, 7)
        if opcode in READS_HIGH_FIELD:
            return cls(opcode, 0, mid, high, imm, word)
        return cls(opcode, high, mid, 0, imm, word)

    @classmethod
    def build(cls, opcode, target=0, src1=0, src2=0, imm=0):
        word = _pack(opcode, target, src1, src2, imm)
        return cls(OP(opcode), target, src1, src2, imm, word)

    def encode(self):
        return _pack(self.opcode, self.target, self.src1, self.src2, self.imm)

    @property
    def format(self):
        return FORMAT[self.opcode]

    @property
    def is_halt(self):
        return self.opcode == OP.JALR and self.imm != 0

    @property
    def dest(self):
        """Register actually written, 0 when nothing is."""
        if self.is_halt:
            return 0
        return self.target

    @property
    def sources(self):
        return tuple(r for r in (self.src1, self.src2) if r)

    def __str__(self):
        op = self.opcode
        name = op.name.lower()
        if self.word == NOP_WORD and op == OP.ADD:
            return "nop"
        if self.format is Format.RRR:
            return "%s r%d, r%d, r%d" % (name, self.target, self.src1, self.src2)
        if self.format is Format.RI:
            return "%s r%d, 0x%x" % (name, self.target, self.imm)
        if op == OP.JALR:
            if self.word == HALT_WORD:
                return "halt"
            if self.is_halt:
                return "jalr r%d, r%d, %d" % (self.target, self.src1, self.imm)
            return "jalr r%d, r%d" % (self.target, self.src1)
        if op in READS_HIGH_FIELD:
            return "%s r%d, r%d, %d" % (name, self.src2, self.src1, self.imm)
        return "%s r%d, r%d, %d" % (name, self.target, self.src1, self.imm)


def disassemble(words, base=0):
    return ["%04x: %04x  %s" % (base + i, w & MASK, Instruction.decode(w))
            for i, w in enumerate(words)]
