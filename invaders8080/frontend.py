"""Desktop front end: a pygame window, keyboard, sound effects and the command entry point."""

from __future__ import annotations

import argparse
import logging
import os
import time
from typing import List, NamedTuple, Optional, Sequence, Tuple

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

from .display import FRAME_HEIGHT, FRAME_WIDTH, SPACE_INVADERS_ASPECT_RATIO, Color  # noqa: E402
from .keys import (  # noqa: E402
    INVALID_KEY_PRESS,
    MAX_KEY_PRESSES,
    Key,
    KeyPress,
    KeyPressType,
    Player,
)
from .machine import ColoredFrame, Machine, load_rom  # noqa: E402
from .sound import NUMBER_OF_SOUND_EFFECTS  # noqa: E402

logger = logging.getLogger(__name__)

WINDOW_STARTING_SCALE = 5
WINDOW_TITLE = "Space Invaders"

PALETTE = {
    Color.BLACK: (0, 0, 0, 255),
    Color.WHITE: (255, 255, 255, 255),
    Color.RED: (255, 0, 0, 255),
    Color.GREEN: (0, 255, 0, 255),
}

# Only player 1 is mapped.
KEY_MAPPINGS = {
    pygame.K_LEFT: (Key.LEFT, Player.PLAYER_1),
    pygame.K_RIGHT: (Key.RIGHT, Player.PLAYER_1),
    pygame.K_SPACE: (Key.SHOOT, Player.PLAYER_1),
    pygame.K_RETURN: (Key.START, Player.PLAYER_1),
    pygame.K_RSHIFT: (Key.COIN, Player.IRRELEVANT),
}


class DestinationRect(NamedTuple):
    """Where the frame is drawn inside the window."""

    x: float
    y: float
    w: float
    h: float


def color_to_rgba(color: Color) -> int:
    """Pack a filter colour as a 32-bit value whose little-endian bytes are R, G, B, A."""
    r, g, b, a = PALETTE[Color(color)]
    return (a << 24) | (b << 16) | (g << 8) | r


_PIXEL_BYTES = {color: color_to_rgba(color).to_bytes(4, "little") for color in Color}


def calculate_dst_rect(window_width: int, window_height: int, aspect_ratio: float) -> DestinationRect:
    """Return the largest rectangle of the given aspect ratio centred in the window."""
    if window_width <= 0 or window_height <= 0:
        raise ValueError("window size must be positive")
    current_aspect = window_width / window_height
    if current_aspect > aspect_ratio:
        # Window too wide: bars left and right.
        h = float(window_height)
        w = h * aspect_ratio
        return DestinationRect((window_width - w) * 0.5, 0.0, w, h)
    # Window too tall or narrow: bars above and below.
    w = float(window_width)
    h = w / aspect_ratio
    return DestinationRect(0.0, (window_height - h) * 0.5, w, h)


def key_event_to_key_press(key: int, is_down: bool) -> KeyPress:
    """Translate a pygame key code into a cabinet key press, or the invalid press if unmapped."""
    mapping = KEY_MAPPINGS.get(key)
    if mapping is None:
        return INVALID_KEY_PRESS
    game_key, player = mapping
    kind = KeyPressType.KEY_DOWN if is_down else KeyPressType.KEY_UP
    return KeyPress(game_key, player, kind)


def sound_effect_paths(sound_directory: str) -> Tuple[str, ...]:
    """Return the WAV file of each sound effect: the directory prefix followed by ``<n>.wav``."""
    return tuple(f"{sound_directory}{index}.wav" for index in range(NUMBER_OF_SOUND_EFFECTS))


class PygamePlatform:
    """Window, keyboard, clock and sound effects for the cabinet, backed by pygame."""

    def __init__(self, sound_paths: Sequence[str]) -> None:
        if len(sound_paths) != NUMBER_OF_SOUND_EFFECTS:
            raise ValueError(f"expected {NUMBER_OF_SOUND_EFFECTS} sound effect paths")
        self._start_ns = time.perf_counter_ns()
        self._sounds: List[pygame.mixer.Sound] = []
        self._channels: List[pygame.mixer.Channel] = []
        try:
            logger.info("initializing sound effects")
            pygame.mixer.init()
            pygame.mixer.set_num_channels(NUMBER_OF_SOUND_EFFECTS)
            for index, path in enumerate(sound_paths):
                self._sounds.append(pygame.mixer.Sound(path))
                self._channels.append(pygame.mixer.Channel(index))

            logger.info("initializing renderer")
            pygame.display.init()
            pygame.display.set_caption(WINDOW_TITLE)
            pygame.display.set_mode(
                (FRAME_WIDTH * WINDOW_STARTING_SCALE, FRAME_HEIGHT * WINDOW_STARTING_SCALE),
                pygame.RESIZABLE,
            )
        except Exception:
            self.close()
            raise
        logger.info("renderer initialized")

    def __enter__(self) -> "PygamePlatform":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def poll_key_presses(self, machine: Machine) -> List[KeyPress]:
        """Return the mapped key changes since the last poll."""
        pygame.event.pump()
        presses = []
        for event in pygame.event.get((pygame.KEYDOWN, pygame.KEYUP)):
            key_press = key_event_to_key_press(event.key, event.type == pygame.KEYDOWN)
            if not key_press.is_valid:
                continue
            logger.debug(
                "key %d is %s",
                key_press.key,
                "down" if key_press.kind == KeyPressType.KEY_DOWN else "up",
            )
            presses.append(key_press)
            if len(presses) == MAX_KEY_PRESSES:
                break
        return presses

    def poll_system_events(self, machine: Machine) -> None:
        """Stop the machine when the window is asked to close."""
        pygame.event.pump()
        if pygame.event.get(pygame.QUIT):
            machine.exit()

    def sleep(self, milliseconds: int) -> None:
        """Pause for the given milliseconds."""
        pygame.time.delay(int(milliseconds))

    def microsecond_tick(self) -> int:
        """Return microseconds since this platform was created."""
        return (time.perf_counter_ns() - self._start_ns) // 1000

    def render_frame(self, frame: ColoredFrame) -> None:
        """Draw a coloured frame, scaled and centred in the window."""
        data = b"".join(_PIXEL_BYTES[color] for row in frame for color in row)
        image = pygame.image.frombuffer(data, (FRAME_WIDTH, FRAME_HEIGHT), "RGBA")
        window = pygame.display.get_surface()
        window.fill(PALETTE[Color.BLACK])
        width, height = window.get_size()
        dst = calculate_dst_rect(width, height, SPACE_INVADERS_ASPECT_RATIO)
        scaled = pygame.transform.scale(image, (max(1, round(dst.w)), max(1, round(dst.h))))
        window.blit(scaled, (round(dst.x), round(dst.y)))
        pygame.display.flip()

    def play_sound_effects(self, effects: Sequence[bool]) -> None:
        """Start each flagged effect that is not already playing."""
        for wanted, sound, channel in zip(effects, self._sounds, self._channels):
            if wanted and not channel.get_busy():
                channel.play(sound)

    def close(self) -> None:
        """Release the window, the audio device and pygame."""
        logger.info("destroying platform context")
        self._channels.clear()
        self._sounds.clear()
        if pygame.mixer.get_init():
            pygame.mixer.quit()
        pygame.display.quit()
        pygame.quit()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run Space Invaders from a ROM file and a sound directory prefix."""
    parser = argparse.ArgumentParser(
        prog="invaders8080", description="Run a Space Invaders arcade ROM."
    )
    parser.add_argument("rom_path", help="path to the game ROM image")
    parser.add_argument(
        "sound_directory", help="prefix of the sound files, which are named 0.wav to 8.wav"
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    try:
        rom = load_rom(args.rom_path)
    except OSError as error:
        logger.error("not able to open the game ROM %s: %s", args.rom_path, error)
        return 1
    if not rom:
        logger.error("failed to load game ROM from %s", args.rom_path)
        return 1

    try:
        platform = PygamePlatform(sound_effect_paths(args.sound_directory))
    except (OSError, pygame.error) as error:
        logger.error("failed to initialize the platform: %s", error)
        return 1

    with platform:
        machine = Machine(rom, platform)
        machine.is_running = True
        machine.run()
    return 0