"""
Plain records describing what the cores do: retirements, per-stage slot
contents, per-tick reports and run statistics.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .isa import OP

STAGES = ("fetch", "decode", "execute", "memory", "writeback")


@dataclass(frozen=True)
class Retirement:
    pc: int
    opcode: OP
    target: int
    value: int

    def __str__(self):
        if self.target:
            return "%04x %-4s r%d <- %04x" % (self.pc, self.opcode.name, self.target, self.value)
        return "%04x %-4s" % (self.pc, self.opcode.name)


@dataclass(frozen=True)
class Bubble:
    def __str__(self):
        return "-"


@dataclass(frozen=True)
class Occupied:
    pc: int
    opcode: Optional[OP] = None
    target: int = 0

    def __str__(self):
        if self.opcode is None:
            return "%04x" % self.pc
        return "%04x:%s" % (self.pc, self.opcode.name)


BUBBLE = Bubble()


@dataclass(frozen=True)
class StallSignals:
    """Local and cascaded stall per stage, ordered fetch..writeback."""
    local: Tuple[bool, ...]
    effective: Tuple[bool, ...]

    def __getitem__(self, stage):
        return self.effective[STAGES.index(stage)]

    @property
    def inserted_bubble(self):
        return self.effective[0]


@dataclass(frozen=True)
class TickReport:
    """One clock of the pipeline.

    `slots` and `stalls` are what the stage registers held during the tick,
    `fetch_pc` the address fetched (None if fetch stalled or halted) and
    `retired` the instruction whose memory-stage write committed at its end.
    """
    tick: int
    fetch_pc: Optional[int]
    stalls: StallSignals
    retired: Optional[Retirement]
    slots: Tuple[object, ...]

    def slot(self, stage):
        return self.slots[STAGES.index(stage)]

    def __str__(self):
        cells = " ".join("%-10s" % s for s in self.slots)
        fetch = "----" if self.fetch_pc is None else "%04x" % self.fetch_pc
        stall = "".join("S" if s else "." for s in self.stalls.effective)
        return "%5d  %s  %s  %s  %s" % (self.tick, fetch, cells, stall, self.retired or "")


@dataclass
class RunStats:
    ticks: int = 0
    fetched: int = 0
    retired: int = 0
    bubbles: int = 0
    halted: bool = False
    retirements: list = field(default_factory=list, repr=False)

    @property
    def cpi(self):
        if not self.retired:
            return 0.0
        return round(self.ticks / self.retired, 2)
