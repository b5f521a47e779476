import logging

import pyrtl

from .config import CoreConfig
from .core import STAGE_PREFIXES, build_core
from .isa import MASK, NUM_REGS, OP, Instruction
from .records import BUBBLE, Occupied, Retirement, RunStats, StallSignals, TickReport
from .storage import InstructionMemory, pairs

log = logging.getLogger(__name__)

TRACED = ("fetch_en", "fetch_addr", "stall_f", "retire_valid", "retire_pc",
          "retire_target", "retire_value")


class PipelineSimulator(object):
    """Drives one pipelined core.

    Every instance builds its datapath into its own PyRTL block, so any
    number of them can coexist. Each `tick()` is one clock: all stage logic
    is evaluated from the current registers, then registers, register file
    and data memory are committed together.
    """

    def __init__(self, program=(), registers=None, memory=None, config=None):
        self.config = config or CoreConfig()
        self.block = pyrtl.Block()
        with pyrtl.set_working_block(self.block, no_sanity_check=True):
            self.core = build_core(self.config)
        self.load(program, registers, memory)

    def load(self, program=(), registers=None, memory=None):
        """(Re)start the core with a program and initial state."""
        self.program = InstructionMemory(program)

        rf_init = {}
        for index, value in pairs(registers or {}):
            if not 0 <= index < NUM_REGS:
                raise IndexError("register r%d does not exist" % index)
            if index != 0:
                rf_init[index] = value & MASK

        dmem_init = {}
        for addr, value in pairs(memory or {}):
            # Out-of-range initial contents are dropped like any other write
            if 0 <= addr < self.config.dmem_size:
                dmem_init[addr] = value & MASK

        with pyrtl.set_working_block(self.block):
            self.trace = pyrtl.SimulationTrace(
                    wires_to_track=[self.block.wirevector_by_name[n] for n in TRACED])
            self.sim = pyrtl.Simulation(
                    tracer=self.trace,
                    register_value_map={self.core.pc: self.config.entry_point},
                    memory_value_map={
                        self.core.imem: dict(self.program.items()),
                        self.core.rf: rf_init,
                        self.core.dmem: dmem_init,
                    })

        self.stats = RunStats()
        self.retirements = self.stats.retirements
        self.last = None

    @property
    def halted(self):
        return self.stats.halted

    def tick(self):
        self.sim.step({})
        self.stats.ticks += 1
        v = self.sim.inspect

        stalls = StallSignals(
                tuple(bool(v("local_" + p)) for p in STAGE_PREFIXES),
                tuple(bool(v("stall_" + p)) for p in STAGE_PREFIXES))

        fetch_pc = None
        if v("fetch_en"):
            fetch_pc = v("fetch_addr")
            self.stats.fetched += 1
        if stalls.inserted_bubble:
            self.stats.bubbles += 1

        retired = None
        if v("retire_valid"):
            target = v("retire_target")
            retired = Retirement(v("retire_pc"), OP(v("retire_op")), target,
                                 v("retire_value") if target else 0)
            self.stats.retired += 1
            self.retirements.append(retired)
            if v("retire_halt"):
                self.stats.halted = True

        report = TickReport(self.stats.ticks, fetch_pc, stalls, retired, self._slots())
        self.last = report
        log.debug("%s", report)
        return report

    def _slots(self):
        v = self.sim.inspect
        slots = []
        for prefix in STAGE_PREFIXES:
            if not v(prefix + "_valid"):
                slots.append(BUBBLE)
            elif prefix == "f":
                inst = Instruction.decode(v("f_inst"))
                slots.append(Occupied(v("f_pc"), inst.opcode, inst.dest))
            else:
                slots.append(Occupied(v(prefix + "_pc"), OP(v(prefix + "_op")),
                                      v(prefix + "_target")))
        return tuple(slots)

    def run(self, max_ticks=None):
        """Tick until a HALT retires or `max_ticks` more ticks have passed."""
        if max_ticks is None:
            max_ticks = self.config.max_ticks
        for _ in range(max_ticks):
            if self.halted:
                break
            self.tick()

        if self.halted:
            log.info("halted after %d ticks: %d retired, %d bubbles",
                     self.stats.ticks, self.stats.retired, self.stats.bubbles)
        else:
            log.warning("no HALT retired within %d ticks", max_ticks)
        return self.stats

    # Architectural state

    def register(self, index):
        if not 0 <= index < NUM_REGS:
            raise IndexError("register r%d does not exist" % index)
        if index == 0:
            return 0
        return self.sim.inspect_mem(self.core.rf).get(index, 0)

    def registers(self):
        return [self.register(i) for i in range(NUM_REGS)]

    def memory_word(self, addr):
        if not 0 <= addr < self.config.dmem_size:
            return self.config.dmem_default
        return self.sim.inspect_mem(self.core.dmem).get(addr, 0)

    def memory(self):
        words = self.sim.inspect_mem(self.core.dmem)
        return {addr: value for addr, value in sorted(words.items())
                if value and addr < self.config.dmem_size}
