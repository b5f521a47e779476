"""
Differential check of the pipeline against the architectural model.

Both run the same program from the same initial state to HALT. They must
retire the same (pc, opcode, target, value) sequence and end with the same
register file and data memory.
"""
import logging
from dataclasses import dataclass

from .errors import VerificationError
from .oracle import ArchSimulator
from .simulator import PipelineSimulator

log = logging.getLogger(__name__)


@dataclass
class VerificationReport:
    pipeline: PipelineSimulator
    oracle: ArchSimulator
    mismatches: list

    @property
    def ok(self):
        return not self.mismatches

    @property
    def stats(self):
        return self.pipeline.stats


def compare(pipeline, oracle):
    """List every disagreement between two finished runs."""
    mismatches = []
    got, want = pipeline.retirements, oracle.retirements

    for i, (g, w) in enumerate(zip(got, want)):
        if g != w:
            mismatches.append("retirement %d: pipeline %s, oracle %s" % (i, g, w))
    if len(got) != len(want):
        mismatches.append("pipeline retired %d instructions, oracle %d" % (len(got), len(want)))
    if pipeline.halted != oracle.halted:
        mismatches.append("pipeline halted=%s, oracle halted=%s" % (pipeline.halted, oracle.halted))

    for index, (g, w) in enumerate(zip(pipeline.registers(), oracle.registers())):
        if g != w:
            mismatches.append("r%d: pipeline %04x, oracle %04x" % (index, g, w))

    got_mem, want_mem = pipeline.memory(), oracle.memory()
    for addr in sorted(set(got_mem) | set(want_mem)):
        g, w = got_mem.get(addr, 0), want_mem.get(addr, 0)
        if g != w:
            mismatches.append("mem[%04x]: pipeline %04x, oracle %04x" % (addr, g, w))
    return mismatches


def verify_program(program, registers=None, memory=None, config=None, max_ticks=None,
                   strict=True):
    pipeline = PipelineSimulator(program, registers, memory, config)
    oracle = ArchSimulator(program, registers, memory, pipeline.config)

    pipeline.run(max_ticks)
    oracle.run(max_ticks)

    mismatches = compare(pipeline, oracle)
    for line in mismatches:
        log.error("%s", line)
    if mismatches and strict:
        raise VerificationError(mismatches)
    return VerificationReport(pipeline, oracle, mismatches)
