"""
Two-pass assembler for RiSC-16 source.

    # comment
    loop:   lw   r1, r2, 0       # commas optional, registers as rN or N
            beq  r1, r0, done    # branch labels are PC-relative
            addi r2, r2, 1
            jalr r0, r5
    done:   halt
    data:   .fill 42
            .fill loop           # a label's address
            .space 4             # four zero words

Pseudo-ops: nop, halt, lli rA, imm (add the low 6 bits of imm to rA),
movi rA, imm (lui + lli, two words).
"""
import re

from .errors import AssemblerError
from .isa import HALT_WORD, IMM10_MAX, LUI_SHIFT, MASK, NOP_WORD, NUM_REGS, OP, Instruction

_LABEL = re.compile(r"^[A-Za-z_.][\w.]*$")
_REG = re.compile(r"^[rR]?([0-9])$")

RRR_OPS = {"add": OP.ADD, "nand": OP.NAND}
RRI_OPS = {"addi": OP.ADDI, "sw": OP.SW, "lw": OP.LW, "beq": OP.BEQ}

# words emitted per mnemonic; everything else is one word
_SIZE = {"movi": 2}


def _split(line):
    line = line.split("#", 1)[0].strip()
    labels = []
    while ":" in line:
        label, line = line.split(":", 1)
        labels.append(label.strip())
        line = line.strip()
    if not line:
        return labels, None, []
    parts = line.replace(",", " ").split()
    return labels, parts[0].lower(), parts[1:]


def _reg(text, lineno):
    match = _REG.match(text)
    if not match or int(match.group(1)) >= NUM_REGS:
        raise AssemblerError("bad register %r" % text, lineno)
    return int(match.group(1))


def _value(text, symbols, lineno):
    if text in symbols:
        return symbols[text]
    try:
        return int(text, 0)
    except ValueError:
        if _LABEL.match(text):
            raise AssemblerError("undefined label %r" % text, lineno)
        raise AssemblerError("bad immediate %r" % text, lineno)


def _expect(args, count, mnemonic, lineno):
    if len(args) != count:
        raise AssemblerError("%s takes %d operand(s), got %d" % (mnemonic, count, len(args)),
                             lineno)


def _build(lineno, opcode, **fields):
    try:
        return Instruction.build(opcode, **fields).encode()
    except ValueError as e:
        raise AssemblerError(str(e), lineno)


def _encode(mnemonic, args, pc, symbols, lineno):
    if mnemonic in RRR_OPS:
        _expect(args, 3, mnemonic, lineno)
        a, b, c = (_reg(x, lineno) for x in args)
        return [_build(lineno, RRR_OPS[mnemonic], target=a, src1=b, src2=c)]

    if mnemonic in RRI_OPS:
        _expect(args, 3, mnemonic, lineno)
        opcode = RRI_OPS[mnemonic]
        a, b = _reg(args[0], lineno), _reg(args[1], lineno)
        imm = _value(args[2], symbols, lineno)
        if opcode == OP.BEQ:
            if args[2] in symbols:
                imm = imm - (pc + 1)
            return [_build(lineno, opcode, src1=b, src2=a, imm=imm)]
        if opcode == OP.SW:
            return [_build(lineno, opcode, src1=b, src2=a, imm=imm)]
        return [_build(lineno, opcode, target=a, src1=b, imm=imm)]

    if mnemonic == "lui":
        _expect(args, 2, mnemonic, lineno)
        return [_build(lineno, OP.LUI, target=_reg(args[0], lineno),
                       imm=_value(args[1], symbols, lineno))]

    if mnemonic == "jalr":
        if len(args) not in (2, 3):
            raise AssemblerError("jalr takes 2 or 3 operands", lineno)
        imm = _value(args[2], symbols, lineno) if len(args) == 3 else 0
        return [_build(lineno, OP.JALR, target=_reg(args[0], lineno),
                       src1=_reg(args[1], lineno), imm=imm)]

    if mnemonic == "nop":
        _expect(args, 0, mnemonic, lineno)
        return [NOP_WORD]

    if mnemonic == "halt":
        _expect(args, 0, mnemonic, lineno)
        return [HALT_WORD]

    if mnemonic == "lli":
        _expect(args, 2, mnemonic, lineno)
        a = _reg(args[0], lineno)
        imm = _value(args[1], symbols, lineno) & 0x3F
        return [_build(lineno, OP.ADDI, target=a, src1=a, imm=imm)]

    if mnemonic == "movi":
        _expect(args, 2, mnemonic, lineno)
        a = _reg(args[0], lineno)
        value = _value(args[1], symbols, lineno) & MASK
        return [_build(lineno, OP.LUI, target=a, imm=(value >> LUI_SHIFT) & IMM10_MAX),
                _build(lineno, OP.ADDI, target=a, src1=a, imm=value & 0x3F)]

    if mnemonic == ".fill":
        _expect(args, 1, mnemonic, lineno)
        return [_value(args[0], symbols, lineno) & MASK]

    if mnemonic == ".space":
        _expect(args, 1, mnemonic, lineno)
        return [0] * _value(args[0], symbols, lineno)

    raise AssemblerError("unknown mnemonic %r" % mnemonic, lineno)


def _size(mnemonic, args, lineno):
    if mnemonic == ".space":
        _expect(args, 1, mnemonic, lineno)
        try:
            count = int(args[0], 0)
        except ValueError:
            raise AssemblerError(".space needs a literal count", lineno)
        if count < 0:
            raise AssemblerError(".space count must not be negative", lineno)
        return count
    return _SIZE.get(mnemonic, 1)


def assemble(source, base=0):
    """Assemble `source` into a list of 16-bit words loaded at `base`."""
    lines = [(n, _split(text)) for n, text in enumerate(source.splitlines(), 1)]

    # first pass: label addresses
    symbols = {}
    pc = base
    for lineno, (labels, mnemonic, args) in lines:
        for label in labels:
            if not _LABEL.match(label):
                raise AssemblerError("bad label %r" % label, lineno)
            if label in symbols:
                raise AssemblerError("label %r defined twice" % label, lineno)
            symbols[label] = pc
        if mnemonic is not None:
            pc += _size(mnemonic, args, lineno)

    # second pass: encode
    words = []
    for lineno, (labels, mnemonic, args) in lines:
        if mnemonic is None:
            continue
        words.extend(_encode(mnemonic, args, base + len(words), symbols, lineno))
    return words
