"""Intel 8080 processor state, registers, flags, memory and stack."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

NUMBER_OF_OPCODE_REGISTERS = 8
NUMBER_OF_GENERAL_REGISTERS = NUMBER_OF_OPCODE_REGISTERS - 1
NUMBER_OF_REGISTER_PAIRS = 3
NUMBER_OF_CONDITIONS = 8

ROM_END = 0x2000
RAM_END = 0x4000
DEFAULT_MEMORY_SIZE = 0x10000

ReadPort = Callable[[int], int]
WritePort = Callable[[int, int], None]


class GeneralRegister(IntEnum):
    """Register indices as encoded in opcodes; M is the memory byte at HL."""

    B = 0
    C = 1
    D = 2
    E = 3
    H = 4
    L = 5
    M = 6
    A = 7


class RegisterPair(IntEnum):
    """Register pair indices as encoded in opcodes."""

    BC = 0
    DE = 1
    HL = 2
    SP = 3
    PSW = 3
    PC = 4


class Flag(IntEnum):
    """Condition flags, valued by their bit position in the flags byte."""

    CARRY = 0
    PARITY = 2
    AC = 4
    ZERO = 6
    SIGN = 7


class Condition(IntEnum):
    """Conditions of conditional jumps, calls and returns, in opcode order."""

    NZ = 0
    Z = 1
    NC = 2
    CY = 3
    PO = 4
    PE = 5
    PLUS = 6
    MINUS = 7
    NO_CONDITION = 9


class Opcode(IntEnum):
    """Named 8080 opcodes and the bounds of the register-encoded ranges."""

    SHLD = 0x22
    LHLD = 0x2A
    DAA = 0x27
    CMA = 0x2F
    STA = 0x32
    STC = 0x37
    CMC = 0x3F
    HLT = 0x76
    OUT = 0xD3
    IN = 0xDB
    PCHL = 0xE9
    DI = 0xF3
    EI = 0xFB
    SPHL = 0xF9
    XTHL = 0xE3
    XCHG = 0xEB
    LDA = 0x3A

    LXI_B = 0x01
    LXI_D = 0x11
    LXI_H = 0x21
    LXI_SP = 0x31

    STAX_B = 0x02
    STAX_D = 0x12

    INX_B = 0x03
    INX_D = 0x13
    INX_H = 0x23
    INX_SP = 0x33

    INR_B = 0x04
    INR_C = 0x0C
    INR_D = 0x14
    INR_E = 0x1C
    INR_H = 0x24
    INR_L = 0x2C
    INR_HL = 0x34
    INR_A = 0x3C

    DCR_B = 0x05
    DCR_C = 0x0D
    DCR_D = 0x15
    DCR_E = 0x1D
    DCR_H = 0x25
    DCR_L = 0x2D
    DCR_HL = 0x35
    DCR_A = 0x3D

    DAD_B = 0x09
    DAD_D = 0x19
    DAD_H = 0x29
    DAD_SP = 0x39

    LDAX_B = 0x0A
    LDAX_D = 0x1A

    MVI_B = 0x06
    MVI_C = 0x0E
    MVI_D = 0x16
    MVI_E = 0x1E
    MVI_H = 0x26
    MVI_L = 0x2E
    MVI_M = 0x36
    MVI_A = 0x3E

    RLC = 0x07
    RRC = 0x0F
    RAL = 0x17
    RAR = 0x1F

    DCX_B = 0x0B
    DCX_D = 0x1B
    DCX_H = 0x2B
    DCX_SP = 0x3B

    MOV = 0x40
    MOV_END_RANGE = 0x40 + NUMBER_OF_OPCODE_REGISTERS * NUMBER_OF_OPCODE_REGISTERS - 1

    ADD = 0x80
    ADD_END_RANGE = 0x80 + NUMBER_OF_OPCODE_REGISTERS - 1
    ADD_IMMEDIATE = 0xC6
    ADC = 0x88
    ADC_END_RANGE = 0x88 + NUMBER_OF_OPCODE_REGISTERS - 1
    ADC_IMMEDIATE = 0xCE

    SUB = 0x90
    SUB_END_RANGE = 0x90 + NUMBER_OF_OPCODE_REGISTERS - 1
    SUB_IMMEDIATE = 0xD6
    SBB = 0x98
    SBB_END_RANGE = 0x98 + NUMBER_OF_OPCODE_REGISTERS - 1
    SBB_IMMEDIATE = 0xDE

    ANA = 0xA0
    ANA_END_RANGE = 0xA0 + NUMBER_OF_OPCODE_REGISTERS - 1
    ANA_IMMEDIATE = 0xE6

    XRA = 0xA8
    XRA_END_RANGE = 0xA8 + NUMBER_OF_OPCODE_REGISTERS - 1
    XRA_IMMEDIATE = 0xEE

    ORA = 0xB0
    ORA_END_RANGE = 0xB0 + NUMBER_OF_OPCODE_REGISTERS - 1
    ORA_IMMEDIATE = 0xF6

    CMP = 0xB8
    CMP_END_RANGE = 0xB8 + NUMBER_OF_OPCODE_REGISTERS - 1
    CMP_IMMEDIATE = 0xFE

    POP_BC = 0xC1
    POP_DE = 0xD1
    POP_HL = 0xE1
    POP_PSW = 0xF1

    PUSH_BC = 0xC5
    PUSH_DE = 0xD5
    PUSH_HL = 0xE5
    PUSH_PSW = 0xF5

    CALL = 0xCD
    CNZ = 0xC4
    CZ = 0xCC
    CNC = 0xD4
    CC = 0xDC
    CPO = 0xE4
    CPE = 0xEC
    CP = 0xF4
    CM = 0xFC

    RST0 = 0xC7
    RST1 = 0xCF
    RST2 = 0xD7
    RST3 = 0xDF
    RST4 = 0xE7
    RST5 = 0xEF
    RST6 = 0xF7
    RST7 = 0xFF

    RET = 0xC9
    RNZ = 0xC0
    RZ = 0xC8
    RNC = 0xD0
    RC = 0xD8
    RPO = 0xE0
    RPE = 0xE8
    RP = 0xF0
    RM = 0xF8

    JMP = 0xC3
    JNZ = 0xC2
    JZ = 0xCA
    JNC = 0xD2
    JC = 0xDA
    JPO = 0xE2
    JPE = 0xEA
    JP = 0xF2
    JM = 0xFA


_PAIR_REGISTERS = {
    RegisterPair.BC: (GeneralRegister.B, GeneralRegister.C),
    RegisterPair.DE: (GeneralRegister.D, GeneralRegister.E),
    RegisterPair.HL: (GeneralRegister.H, GeneralRegister.L),
}

_OPCODE_TO_CYCLES = bytes([
    4, 10, 7, 5, 5, 5, 7, 4, 4, 10, 7, 5, 5, 5, 7, 4,
    4, 10, 7, 5, 5, 5, 7, 4, 4, 10, 7, 5, 5, 5, 7, 4,
    4, 10, 16, 5, 5, 5, 7, 4, 4, 10, 16, 5, 5, 5, 7, 4,
    4, 10, 13, 5, 10, 10, 10, 4, 4, 10, 13, 5, 5, 5, 7, 4,

    5, 5, 5, 5, 5, 5, 7, 5, 5, 5, 5, 5, 5, 5, 7, 5,
    5, 5, 5, 5, 5, 5, 7, 5, 5, 5, 5, 5, 5, 5, 7, 5,
    5, 5, 5, 5, 5, 5, 7, 5, 5, 5, 5, 5, 5, 5, 7, 5,
    7, 7, 7, 7, 7, 7, 7, 7, 5, 5, 5, 5, 5, 5, 7, 5,

    4, 4, 4, 4, 4, 4, 7, 4, 4, 4, 4, 4, 4, 4, 7, 4,
    4, 4, 4, 4, 4, 4, 7, 4, 4, 4, 4, 4, 4, 4, 7, 4,
    4, 4, 4, 4, 4, 4, 7, 4, 4, 4, 4, 4, 4, 4, 7, 4,
    4, 4, 4, 4, 4, 4, 7, 4, 4, 4, 4, 4, 4, 4, 7, 4,

    11, 10, 10, 10, 17, 11, 7, 11, 11, 10, 10, 10, 10, 17, 7, 11,
    11, 10, 10, 10, 17, 11, 7, 11, 11, 10, 10, 10, 10, 17, 7, 11,
    11, 10, 10, 18, 17, 11, 7, 11, 11, 5, 10, 5, 17, 17, 7, 11,
    11, 10, 10, 4, 17, 11, 7, 11, 11, 5, 10, 4, 17, 17, 7, 11,
])


def is_pair(register: int) -> bool:
    """Return whether the register index names BC, DE or HL."""
    return register < NUMBER_OF_REGISTER_PAIRS


def bytes_to_word(low: int, high: int) -> int:
    """Combine a low and a high byte into a 16-bit word."""
    return ((high << 8) | low) & 0xFFFF


def parity(value: int, size: int) -> bool:
    """Return True when the lowest ``size`` bits of ``value`` hold an even count of ones."""
    masked = value & ((1 << size) - 1)
    return bin(masked).count("1") % 2 == 0


def opcode_to_cycles(opcode: int) -> int:
    """Return the number of cycles the 8080 takes to run ``opcode``."""
    if opcode in (Opcode.OUT, Opcode.IN):
        return 3
    return _OPCODE_TO_CYCLES[opcode & 0xFF]


class Cpu8080:
    """Registers, flags, memory and I/O hooks of one 8080 processor.

    Without I/O hooks, ports act as simple latches: a read returns the last
    byte written to that port, or 0.
    """

    def __init__(
        self,
        code: bytes = b"",
        memory_size: int = DEFAULT_MEMORY_SIZE,
        read_port: Optional[ReadPort] = None,
        write_port: Optional[WritePort] = None,
    ) -> None:
        if len(code) > memory_size:
            raise ValueError(
                f"code of {len(code)} bytes does not fit in {memory_size} bytes of memory"
            )
        self.registers = bytearray(NUMBER_OF_OPCODE_REGISTERS)
        self._sp = 0
        self._pc = 0
        self.memory = bytearray(memory_size)
        self.memory[: len(code)] = code
        self.flags: Dict[Flag, bool] = {flag: False for flag in Flag}
        self.interrupt_enable = False
        self._port_latch: Dict[int, int] = {}
        self.read_port: ReadPort = read_port or self._read_latch
        self.write_port: WritePort = write_port or self._write_latch

    def _read_latch(self, port: int) -> int:
        return self._port_latch.get(port & 0xFF, 0)

    def _write_latch(self, port: int, value: int) -> None:
        self._port_latch[port & 0xFF] = value & 0xFF

    @property
    def sp(self) -> int:
        return self._sp

    @sp.setter
    def sp(self, value: int) -> None:
        self._sp = value & 0xFFFF

    @property
    def pc(self) -> int:
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        self._pc = value & 0xFFFF

    def get_register_pair(self, pair: int) -> int:
        """Return the 16-bit value of BC, DE or HL."""
        try:
            high, low = _PAIR_REGISTERS[RegisterPair(pair)]
        except (KeyError, ValueError):
            raise ValueError(f"invalid register pair {pair}") from None
        return (self.registers[high] << 8) | self.registers[low]

    def set_register_pair(self, pair: int, value: int) -> None:
        """Store a 16-bit value into BC, DE or HL."""
        try:
            high, low = _PAIR_REGISTERS[RegisterPair(pair)]
        except (KeyError, ValueError):
            raise ValueError(f"invalid register pair {pair}") from None
        self.registers[high] = (value >> 8) & 0xFF
        self.registers[low] = value & 0xFF

    def write_memory(self, offset: int, value: int) -> None:
        """Write a byte to memory, warning when it lands outside RAM."""
        offset &= 0xFFFF
        if offset < ROM_END:
            logger.warning("writing to ROM at %04x", offset)
        elif offset >= RAM_END:
            logger.warning("writing outside of RAM at %04x", offset)
        self.memory[offset] = value & 0xFF

    def read_memory(self, offset: int) -> int:
        """Read a byte from memory."""
        return self.memory[offset & 0xFFFF]

    def pop_byte(self) -> int:
        """Read the byte at SP and move SP up by one."""
        result = self.read_memory(self.sp)
        self.sp += 1
        return result

    def push(self, low: int, high: int) -> None:
        """Move SP down by two and store low at SP and high at SP + 1."""
        self.sp -= 2
        self.write_memory(self.sp, low)
        self.write_memory(self.sp + 1, high)

    def push_pair(self, pair: int) -> None:
        """Push the value of a register pair onto the stack."""
        value = self.get_register_pair(pair)
        self.push(value & 0xFF, (value >> 8) & 0xFF)

    def pop_to_pair(self, pair: int) -> None:
        """Pop a 16-bit value from the stack into a register pair."""
        low = self.pop_byte()
        high = self.pop_byte()
        self.set_register_pair(pair, bytes_to_word(low, high))

    def read_pair_address(self, pair: int) -> int:
        """Read the memory byte addressed by a register pair."""
        return self.read_memory(self.get_register_pair(pair))

    def write_pair_address(self, pair: int, value: int) -> None:
        """Write a memory byte at the address held by a register pair."""
        self.write_memory(self.get_register_pair(pair), value)

    def flags_from_byte(self, flags: int) -> None:
        """Load the flags from their byte layout."""
        for flag in Flag:
            self.flags[flag] = bool((flags >> flag) & 1)

    def flags_to_byte(self) -> int:
        """Pack the flags into their byte layout; bit 1 is always set."""
        result = 1 << 1
        for flag in Flag:
            if self.flags[flag]:
                result |= 1 << flag
        return result

    def set_flags_zsp(self, value: int) -> None:
        """Set the zero, sign and parity flags from an 8-bit result."""
        value &= 0xFF
        self.flags[Flag.ZERO] = value == 0
        self.flags[Flag.SIGN] = (value & 0x80) != 0
        self.flags[Flag.PARITY] = parity(value, 8)

    def set_flags(self, value: int) -> None:
        """Set carry from a wide result and zero, sign, parity from its low byte."""
        self.flags[Flag.CARRY] = value > 0xFF
        self.set_flags_zsp(value & 0xFF)

    def rst(self, n: int) -> None:
        """Push PC and jump to address ``n * 8``."""
        self.push(self.pc & 0xFF, (self.pc >> 8) & 0xFF)
        self.pc = n * 8

    def generate_interrupt(self, interrupt_num: int) -> None:
        """Service an interrupt as RST ``interrupt_num`` and disable interrupts."""
        self.rst(interrupt_num)
        self.interrupt_enable = False

    def next_opcode(self) -> int:
        """Return the opcode at PC without executing it."""
        return self.read_memory(self.pc)