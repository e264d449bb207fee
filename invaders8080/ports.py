"""I/O ports of the Space Invaders cabinet: inputs, the shift register and sound latches."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List

from .cpu import Cpu8080
from .display import FRAME_BUFFER_SIZE

NUMBER_OF_INPUT_PORTS = 3
FRAME_BUFFER_START = 0x2400
SHIFT_OFFSET_MASK = 0b111


class InputPort(IntEnum):
    """Ports the processor reads with IN."""

    INPUT_0 = 0
    INPUT_1 = 1
    INPUT_2 = 2
    SHIFT_READ = 3


class OutputPort(IntEnum):
    """Ports the processor writes with OUT."""

    SHIFT_OFFSET = 2
    SOUND_1 = 3
    SHIFT_VALUE = 4
    SOUND_2 = 5
    WATCH_DOG = 6


@dataclass
class PortsState:
    """Latched values of the cabinet's input and output ports."""

    input_ports: List[int] = field(default_factory=lambda: [0] * NUMBER_OF_INPUT_PORTS)
    shift_offset: int = 0
    sound_bits_1: int = 0
    shift_value: int = 0
    sound_bits_2: int = 0
    watchdog: int = 0

    def write(self, port: int, value: int) -> None:
        """Handle an OUT to ``port``; unknown ports and the watchdog are ignored."""
        value &= 0xFF
        if port == OutputPort.SHIFT_OFFSET:
            self.shift_offset = value & SHIFT_OFFSET_MASK
        elif port == OutputPort.SOUND_1:
            self.sound_bits_1 = value
        elif port == OutputPort.SHIFT_VALUE:
            self.shift_value = ((value << 8) | (self.shift_value >> 8)) & 0xFFFF
        elif port == OutputPort.SOUND_2:
            self.sound_bits_2 = value

    def read(self, port: int) -> int:
        """Handle an IN from ``port``; unknown ports read as zero."""
        if 0 <= port < NUMBER_OF_INPUT_PORTS:
            return self.input_ports[port]
        if port == InputPort.SHIFT_READ:
            return (self.shift_value >> (8 - self.shift_offset)) & 0xFF
        return 0


def attach_ports(cpu: Cpu8080) -> PortsState:
    """Create the cabinet ports and wire them to the processor's IN and OUT."""
    ports = PortsState()
    cpu.read_port = ports.read
    cpu.write_port = ports.write
    return ports


def frame_buffer(cpu: Cpu8080) -> memoryview:
    """Return a live view of the video memory."""
    return memoryview(cpu.memory)[FRAME_BUFFER_START:FRAME_BUFFER_START + FRAME_BUFFER_SIZE]