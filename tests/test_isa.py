import pytest

from pipelined_risc16.isa import (HALT_WORD, MASK, NOP_WORD, OP, Format, Instruction,
                                  disassemble, sign_extend)


def test_every_legal_word_round_trips():
    for word in range(1 << 16):
        inst = Instruction.decode(word)
        if inst.format is Format.RRR and word & 0x0078:
            # bits 6-3 are unused in RRR and not preserved
            continue
        assert inst.encode() == word, hex(word)


def test_field_layout():
    # add r1, r2, r3
    inst = Instruction.decode(0b000_001_010_0000_011)
    assert (inst.opcode, inst.target, inst.src1, inst.src2, inst.imm) == (OP.ADD, 1, 2, 3, 0)

    # addi r4, r5, -1
    inst = Instruction.decode(0b001_100_101_1111111)
    assert (inst.opcode, inst.target, inst.src1, inst.src2, inst.imm) == (OP.ADDI, 4, 5, 0, -1)

    # lui r7, 0x3ff
    inst = Instruction.decode(0b011_111_1111111111)
    assert (inst.opcode, inst.target, inst.src1, inst.src2, inst.imm) == (OP.LUI, 7, 0, 0, 0x3FF)


@pytest.mark.parametrize("opcode", [OP.SW, OP.BEQ])
def test_store_and_branch_read_the_high_field(opcode):
    word = (opcode << 13) | (3 << 10) | (6 << 7) | 0x05
    inst = Instruction.decode(word)
    assert inst.target == 0
    assert inst.src1 == 6
    assert inst.src2 == 3
    assert inst.imm == 5
    assert inst.sources == (6, 3)


def test_jalr_links_through_target():
    inst = Instruction.build(OP.JALR, target=1, src1=2)
    assert inst.word == 0b111_001_010_0000000
    assert inst.dest == 1
    assert not inst.is_halt


def test_halt():
    inst = Instruction.decode(HALT_WORD)
    assert inst.opcode == OP.JALR
    assert inst.is_halt
    assert inst.dest == 0
    assert str(inst) == "halt"
    # any nonzero immediate halts, even with a link register named
    assert Instruction.build(OP.JALR, target=3, src1=1, imm=2).dest == 0


def test_build_rejects_fields_outside_the_format():
    with pytest.raises(ValueError):
        Instruction.build(OP.ADDI, target=1, imm=64)
    with pytest.raises(ValueError):
        Instruction.build(OP.ADDI, target=1, imm=-65)
    with pytest.raises(ValueError):
        Instruction.build(OP.LUI, target=1, imm=0x400)
    with pytest.raises(ValueError):
        Instruction.build(OP.ADD, target=8)
    with pytest.raises(ValueError):
        Instruction.build(OP.SW, target=1, src1=2, imm=0)
    with pytest.raises(ValueError):
        Instruction.build(OP.ADD, target=1, imm=3)


def test_sign_extend():
    assert sign_extend(0x3F, 7) == 63
    assert sign_extend(0x40, 7) == -64
    assert sign_extend(0x7F, 7) == -1
    assert sign_extend(0xFFFF, 16) == -1


def test_disassembly():
    assert str(Instruction.decode(NOP_WORD)) == "nop"
    assert str(Instruction.build(OP.NAND, 1, 2, 3)) == "nand r1, r2, r3"
    assert str(Instruction.build(OP.SW, src1=2, src2=1, imm=-4)) == "sw r1, r2, -4"
    assert str(Instruction.build(OP.LUI, target=5, imm=0x12)) == "lui r5, 0x12"
    assert str(Instruction.build(OP.JALR, target=7, src1=4)) == "jalr r7, r4"
    assert disassemble([HALT_WORD], base=0x10) == ["0010: e001  halt"]


def test_decode_masks_to_word_width():
    assert Instruction.decode(0x1_0000 | HALT_WORD).word == HALT_WORD & MASK
