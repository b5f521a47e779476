import pytest

from pipelined_risc16 import HALT_WORD, OP, AssemblerError, Instruction, assemble


def decode_all(words):
    return [Instruction.decode(w) for w in words]


def test_basic_program():
    words = assemble("""
    # sum two registers
    start:  add  r1, r2, r3
            addi r4 r4 -1        # commas are optional
            nand 5, 6, 7
            lui  r1, 0x3ff
            halt
    """)
    insts = decode_all(words)
    assert [i.opcode for i in insts] == [OP.ADD, OP.ADDI, OP.NAND, OP.LUI, OP.JALR]
    assert (insts[0].target, insts[0].src1, insts[0].src2) == (1, 2, 3)
    assert (insts[1].target, insts[1].src1, insts[1].imm) == (4, 4, -1)
    assert (insts[2].target, insts[2].src1, insts[2].src2) == (5, 6, 7)
    assert insts[3].imm == 0x3FF
    assert words[4] == HALT_WORD


def test_store_and_branch_operand_order():
    sw, beq = decode_all(assemble("sw r1, r2, 3\nbeq r4, r5, -2"))
    # sw rA, rB, imm stores rA at rB + imm
    assert (sw.src2, sw.src1, sw.imm) == (1, 2, 3)
    assert (beq.src2, beq.src1, beq.imm) == (4, 5, -2)


def test_branch_labels_are_pc_relative():
    words = assemble("""
    top:    beq  r0, r0, end
            nop
            beq  r1, r2, top
    end:    halt
    """)
    assert Instruction.decode(words[0]).imm == 2
    assert Instruction.decode(words[2]).imm == -3


def test_other_labels_are_absolute():
    words = assemble("""
            addi r1, r0, data
            jalr r7, r1
    data:   .fill 42
            .fill data
            .space 2
            .fill 0x1ffff
    """, base=0x10)
    assert Instruction.decode(words[0]).imm == 0x12
    assert words[2:] == [42, 0x12, 0, 0, 0xFFFF]


def test_jalr_forms():
    plain, with_imm = decode_all(assemble("jalr r7, r1\njalr r0, r0, 1"))
    assert (plain.target, plain.src1, plain.imm) == (7, 1, 0)
    assert with_imm.is_halt


def test_pseudo_ops():
    words = assemble("nop\nlli r2, 0x1234\nmovi r3, 0x1234")
    assert words[0] == 0
    lli, lui, addi = decode_all(words[1:])
    assert (lli.opcode, lli.target, lli.src1, lli.imm) == (OP.ADDI, 2, 2, 0x34)
    assert (lui.opcode, lui.target, lui.imm) == (OP.LUI, 3, 0x48)
    assert (addi.opcode, addi.target, addi.src1, addi.imm) == (OP.ADDI, 3, 3, 0x34)


def test_movi_runs_to_value(pipeline):
    sim = pipeline("movi r3, 0xbeef\nhalt")
    sim.run()
    assert sim.register(3) == 0xBEEF


@pytest.mark.parametrize("source, message", [
    ("frob r1, r2", "line 1: unknown mnemonic 'frob'"),
    ("nop\nadd r1, r2, r8", "line 2: bad register 'r8'"),
    ("beq r0, r0, nowhere", "line 1: undefined label 'nowhere'"),
    ("addi r1, r0, 64", "line 1: ADDI immediate 64 does not fit in 7 signed bits"),
    ("lui r1, 1024", "line 1: LUI immediate 1024 does not fit in 10 bits"),
    ("a: nop\na: nop", "line 2: label 'a' defined twice"),
    ("add r1, r2", "line 1: add takes 3 operand(s), got 2"),
    (".space -1", "line 1: .space count must not be negative"),
])
def test_errors(source, message):
    with pytest.raises(AssemblerError) as excinfo:
        assemble(source)
    assert str(excinfo.value) == message


def test_error_carries_line_number():
    with pytest.raises(AssemblerError) as excinfo:
        assemble("nop\n\n  halt 3")
    assert excinfo.value.lineno == 3
