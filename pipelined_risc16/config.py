import logging
from dataclasses import dataclass

from .errors import ConfigError
from .isa import MASK

ADDR_SPACE = 1 << 16


@dataclass(frozen=True)
class CoreConfig:
    # First fetch address
    entry_point: int = 0
    # Number of data words; addresses at or above this are out of range
    dmem_size: int = ADDR_SPACE
    # Value read back from an out-of-range data address
    dmem_default: int = 0
    # Default cap for run()
    max_ticks: int = 10000

    def __post_init__(self):
        if not 0 <= self.entry_point <= MASK:
            raise ConfigError("entry_point %r is not a 16-bit address" % self.entry_point)
        if not 1 <= self.dmem_size <= ADDR_SPACE:
            raise ConfigError("dmem_size must be between 1 and %d, got %r" % (ADDR_SPACE, self.dmem_size))
        if not 0 <= self.dmem_default <= MASK:
            raise ConfigError("dmem_default %r is not a 16-bit word" % self.dmem_default)
        if self.max_ticks < 1:
            raise ConfigError("max_ticks must be positive")

    @property
    def dmem_addrwidth(self):
        return max(1, (self.dmem_size - 1).bit_length())


def configure_logging(verbosity=0):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
