from .alu import ALUOp, compute
from .asm import assemble
from .config import CoreConfig, configure_logging
from .errors import AssemblerError, ConfigError, Risc16Error, VerificationError
from .isa import HALT_WORD, NOP_WORD, OP, Format, Instruction, disassemble
from .oracle import ArchSimulator
from .records import BUBBLE, Bubble, Occupied, Retirement, RunStats, TickReport
from .simulator import PipelineSimulator
from .storage import DataMemory, InstructionMemory, RegisterFile
from .verify import VerificationReport, verify_program

__version__ = "0.1.0"
