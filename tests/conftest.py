import pytest

from pipelined_risc16 import ArchSimulator, PipelineSimulator, assemble


@pytest.fixture
def pipeline():
    """Build a PipelineSimulator from assembly source."""
    def make(source, registers=None, memory=None, config=None):
        return PipelineSimulator(assemble(source), registers, memory, config)
    return make


@pytest.fixture
def oracle():
    def make(source, registers=None, memory=None, config=None):
        return ArchSimulator(assemble(source), registers, memory, config)
    return make


@pytest.fixture
def run_to_halt():
    """Tick until HALT retires, returning every TickReport."""
    def run(sim, limit=500):
        reports = []
        while not sim.halted:
            assert len(reports) < limit, "no HALT retired within %d ticks" % limit
            reports.append(sim.tick())
        return reports
    return run
