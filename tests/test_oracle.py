import pytest

from pipelined_risc16 import OP, ArchSimulator, CoreConfig, Instruction, Retirement


@pytest.fixture
def arch():
    return ArchSimulator(registers={1: 0x00FF, 2: 0x0F0F, 3: 10})


@pytest.mark.parametrize("inst, target, value", [
    (Instruction.build(OP.ADD, 4, 1, 2), 4, 0x100E),
    (Instruction.build(OP.ADDI, 4, 3, imm=-11), 4, 0xFFFF),
    (Instruction.build(OP.NAND, 4, 1, 2), 4, 0xFFF0),
    (Instruction.build(OP.LUI, 4, imm=0x3FF), 4, 0xFFC0),
])
def test_arithmetic(arch, inst, target, value):
    assert arch.execute_one(inst) == Retirement(0, inst.opcode, target, value)
    assert arch.register(target) == value
    assert arch.pc == 1


def test_store_then_load(arch):
    arch.execute_one(Instruction.build(OP.SW, src1=3, src2=1, imm=2))
    assert arch.memory() == {12: 0x00FF}
    ret = arch.execute_one(Instruction.build(OP.LW, 5, 3, imm=2))
    assert ret.value == 0x00FF
    assert arch.register(5) == 0x00FF


def test_branch(arch):
    arch.pc = 10
    arch.execute_one(Instruction.build(OP.BEQ, src1=0, src2=0, imm=-5))
    assert arch.pc == 6
    arch.execute_one(Instruction.build(OP.BEQ, src1=1, src2=2, imm=20))
    assert arch.pc == 7


def test_jalr_links_then_jumps(arch):
    arch.pc = 40
    ret = arch.execute_one(Instruction.build(OP.JALR, 6, 3))
    assert ret == Retirement(40, OP.JALR, 6, 41)
    assert arch.pc == 10


def test_jalr_reads_before_linking(arch):
    # jalr r3, r3: jump through the old value
    arch.pc = 40
    arch.execute_one(Instruction.build(OP.JALR, 3, 3))
    assert arch.pc == 10
    assert arch.register(3) == 41


def test_writes_to_r0_are_discarded(arch):
    ret = arch.execute_one(Instruction.build(OP.ADDI, 0, 3, imm=1))
    assert ret == Retirement(0, OP.ADDI, 0, 0)
    assert arch.register(0) == 0


def test_halt_stops_stepping():
    arch = ArchSimulator([0x2081, 0xE001, 0x2081])  # addi r0, r1, 1; halt; addi r0, r1, 1
    arch.run()
    assert arch.halted
    assert arch.steps == 2
    assert arch.step() is None


def test_out_of_range_load_reads_default():
    arch = ArchSimulator(config=CoreConfig(dmem_size=8, dmem_default=0xBEEF))
    arch.execute_one(Instruction.build(OP.LW, 1, 0, imm=9))
    assert arch.register(1) == 0xBEEF
