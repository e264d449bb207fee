"""The Space Invaders cabinet: processor, ports, video, sound and the main loop."""

from __future__ import annotations

from itertools import islice
from os import PathLike
from typing import Iterable, List, Protocol, Sequence, Union

from .cpu import Cpu8080
from .display import Color, get_colored_frame
from .keys import MAX_KEY_PRESSES, KeyPress, machine_key_press
from .opcodes import run_cpu
from .ports import attach_ports, frame_buffer
from .sound import NUMBER_OF_SOUND_EFFECTS, SoundEffects, active_sound_effects, effects_to_play

SP_START = 0x2400
INVADERS_RAM_SIZE = 0x4000
MICROSECONDS_PER_FRAME = 16666
MILLISECONDS_PER_MACHINE_ITERATION = 1

ColoredFrame = List[List[Color]]


class PlatformInterface(Protocol):
    """What a host platform supplies to drive the cabinet."""

    def poll_key_presses(self, machine: "Machine") -> Iterable[KeyPress]:
        """Return the key changes since the last poll."""

    def poll_system_events(self, machine: "Machine") -> None:
        """Handle window and system events, such as a request to close."""

    def sleep(self, milliseconds: int) -> None:
        """Pause between iterations of the machine loop."""

    def microsecond_tick(self) -> int:
        """Return microseconds since the program started."""

    def render_frame(self, frame: ColoredFrame) -> None:
        """Show a coloured frame."""

    def play_sound_effects(self, effects: Sequence[bool]) -> None:
        """Start the sound effects flagged True."""


def load_rom(rom_path: Union[str, PathLike]) -> bytes:
    """Read a game ROM image."""
    with open(rom_path, "rb") as rom_file:
        return rom_file.read()


class Machine:
    """A Space Invaders cabinet running a ROM on a host platform."""

    def __init__(self, rom: bytes, platform: PlatformInterface) -> None:
        if not rom:
            raise ValueError("game ROM is empty")
        self.cpu = Cpu8080(rom, INVADERS_RAM_SIZE)
        self.cpu.sp = SP_START
        self.ports = attach_ports(self.cpu)
        self.platform = platform
        self.previous_sound_effects: SoundEffects = (False,) * NUMBER_OF_SOUND_EFFECTS
        self.is_running = False
        self.should_exit = False

    @classmethod
    def from_rom_file(cls, rom_path: Union[str, PathLike], platform: PlatformInterface) -> "Machine":
        """Build a machine from a ROM file."""
        return cls(load_rom(rom_path), platform)

    def toggle_running(self) -> bool:
        """Pause or resume execution; return whether it now runs."""
        self.is_running = not self.is_running
        return self.is_running

    def exit(self) -> None:
        """Stop the machine loop."""
        self.is_running = False
        self.should_exit = True

    def handle_input(self) -> None:
        """Apply polled key presses, up to the first invalid one."""
        presses = self.platform.poll_key_presses(self)
        for key_press in islice(presses, MAX_KEY_PRESSES):
            if not key_press.is_valid:
                break
            machine_key_press(key_press, self.ports)

    def render_frame(self) -> ColoredFrame:
        """Colour the video memory, hand it to the platform and return it."""
        frame = get_colored_frame(frame_buffer(self.cpu))
        self.platform.render_frame(frame)
        return frame

    def play_sound_effects(self) -> SoundEffects:
        """Start the effects that became active this frame and return them."""
        current = active_sound_effects(self.ports)
        to_play = effects_to_play(current, self.previous_sound_effects)
        self.previous_sound_effects = current
        self.platform.play_sound_effects(to_play)
        return to_play

    def run(self) -> None:
        """Run the machine loop until ``exit`` is called.

        Interrupts 1 and 2 alternate every half frame while interrupts are
        enabled, and a frame is rendered with each.
        """
        platform = self.platform
        last_run_time = platform.microsecond_tick()
        next_interrupt = last_run_time + MICROSECONDS_PER_FRAME
        current_interrupt = 1
        while not self.should_exit:
            self.handle_input()
            platform.poll_system_events(self)
            if self.is_running:
                now = platform.microsecond_tick()
                if now > next_interrupt and self.cpu.interrupt_enable:
                    self.cpu.generate_interrupt(current_interrupt + 1)
                    current_interrupt = (current_interrupt + 1) % 2
                    next_interrupt = now + MICROSECONDS_PER_FRAME // 2
                    self.render_frame()
                run_cpu(self.cpu, now - last_run_time, 1)
                self.play_sound_effects()
                last_run_time = now
            platform.sleep(MILLISECONDS_PER_MACHINE_ITERATION)