import argparse
import sys

from .asm import assemble
from .config import CoreConfig, configure_logging
from .errors import AssemblerError, ConfigError
from .simulator import PipelineSimulator
from .verify import verify_program


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog = "pipelined_risc16",
        description = "Run a RiSC-16 program on the five-stage pipeline model",
    )
    parser.add_argument('source', help = 'Assembly source file')
    parser.add_argument('--verify', help = 'Check the run against the architectural model',
                        action = 'store_true')
    parser.add_argument('--max-ticks', type = int, default = None,
                        help = 'Give up after this many clock ticks')
    parser.add_argument('--dmem-size', type = int, default = 1 << 16,
                        help = 'Number of data memory words')
    parser.add_argument('--entry', type = lambda s: int(s, 0), default = 0,
                        help = 'First fetch address')
    parser.add_argument('-t', '--trace', help = 'Print a line per tick',
                        action = 'store_true')
    parser.add_argument('-v', '--verbose', action = 'count', default = 0)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        with open(args.source) as f:
            program = assemble(f.read(), base = args.entry)
        config = CoreConfig(entry_point = args.entry, dmem_size = args.dmem_size)
    except (OSError, AssemblerError, ConfigError) as e:
        print("error: %s" % e, file = sys.stderr)
        return 2

    program = {args.entry + i: word for i, word in enumerate(program)}

    if args.verify:
        report = verify_program(program, config = config, max_ticks = args.max_ticks,
                                strict = False)
        sim = report.pipeline
    else:
        sim = PipelineSimulator(program, config = config)
        if args.trace:
            limit = args.max_ticks or config.max_ticks
            while not sim.halted and sim.stats.ticks < limit:
                print(sim.tick())
        else:
            sim.run(args.max_ticks)

    stats = sim.stats
    print("ticks %d  fetched %d  retired %d  bubbles %d  cpi %.2f%s" % (
        stats.ticks, stats.fetched, stats.retired, stats.bubbles, stats.cpi,
        "" if stats.halted else "  (no halt)"))

    print("Reg file contents:")
    for index, value in enumerate(sim.registers()):
        print("  r%d = %04x" % (index, value))
    memory = sim.memory()
    if memory:
        print("Data memory contents:")
        for addr, value in memory.items():
            print("  %04x: %04x" % (addr, value))

    if args.verify:
        if not report.ok:
            print("MISMATCH against oracle:", file = sys.stderr)
            for line in report.mismatches:
                print("  " + line, file = sys.stderr)
            return 1
        print("matches oracle")
    return 0


if __name__ == "__main__":
    sys.exit(main())
