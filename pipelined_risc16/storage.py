"""
Architectural storage used by the oracle and for loading/inspecting the
pipeline: an 8-entry register file with a hardwired zero register, a data
memory that drops out-of-range writes and reads a default value instead of
faulting, and an instruction memory that reads unloaded words as 0.
"""
from .config import ADDR_SPACE
from .isa import MASK, NUM_REGS


def pairs(values):
    """(index, value) pairs from either a mapping or a sequence."""
    if isinstance(values, dict):
        return list(values.items())
    return list(enumerate(values))


class RegisterFile(object):
    def __init__(self, values=None):
        self._regs = [0] * NUM_REGS
        if values:
            for index, value in pairs(values):
                self.write(index, value)

    def read(self, index):
        if index == 0:
            return 0
        return self._regs[index]

    def write(self, index, value):
        if not 0 <= index < NUM_REGS:
            raise IndexError("register r%d does not exist" % index)
        # r0 is hardwired to zero
        if index != 0:
            self._regs[index] = value & MASK

    def snapshot(self):
        return [self.read(i) for i in range(NUM_REGS)]

    def __getitem__(self, index):
        return self.read(index)

    def __setitem__(self, index, value):
        self.write(index, value)


class DataMemory(object):
    def __init__(self, size=ADDR_SPACE, default=0, contents=None):
        self.size = size
        self.default = default & MASK
        self._words = {}
        if contents:
            for addr, value in pairs(contents):
                self.write(addr, value)

    def in_range(self, addr):
        return 0 <= addr < self.size

    def read(self, addr):
        if not self.in_range(addr):
            return self.default
        return self._words.get(addr, 0)

    def write(self, addr, value):
        if not self.in_range(addr):
            return
        value &= MASK
        if value:
            self._words[addr] = value
        else:
            self._words.pop(addr, None)

    def nonzero(self):
        """Every in-range word that is not zero, by address."""
        return dict(sorted(self._words.items()))


class InstructionMemory(object):
    def __init__(self, program=(), base=0):
        if isinstance(program, dict):
            self._words = {a & MASK: w & MASK for a, w in program.items()}
        else:
            self._words = {(base + i) & MASK: w & MASK for i, w in enumerate(program)}

    def read(self, addr):
        return self._words.get(addr & MASK, 0)

    def items(self):
        return sorted(self._words.items())

    def __len__(self):
        return len(self._words)
