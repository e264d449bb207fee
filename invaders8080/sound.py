"""Sound effects latched in the cabinet's sound ports."""

from __future__ import annotations

from enum import IntEnum
from typing import Sequence, Tuple

from .ports import PortsState

NUMBER_OF_SOUND_EFFECTS_PORT_3 = 4
NUMBER_OF_SOUND_EFFECTS_PORT_5 = 5
NUMBER_OF_SOUND_EFFECTS = NUMBER_OF_SOUND_EFFECTS_PORT_3 + NUMBER_OF_SOUND_EFFECTS_PORT_5

SoundEffects = Tuple[bool, ...]


class SoundEffect(IntEnum):
    """Sound effects in port order: port 3 bits 0-3, then port 5 bits 0-4."""

    UFO = 0
    SHOT = 1
    FLASH = 2
    INVADER_DIE = 3
    FLEET_MOVEMENT_1 = 4
    FLEET_MOVEMENT_2 = 5
    FLEET_MOVEMENT_3 = 6
    FLEET_MOVEMENT_4 = 7
    UFO_HIT = 8


def active_sound_effects(ports: PortsState) -> SoundEffects:
    """Return, for each sound effect, whether its port bit is set."""
    result = []
    for effect in SoundEffect:
        if effect < NUMBER_OF_SOUND_EFFECTS_PORT_3:
            bits, bit = ports.sound_bits_1, int(effect)
        else:
            bits, bit = ports.sound_bits_2, effect - NUMBER_OF_SOUND_EFFECTS_PORT_3
        result.append(bool((bits >> bit) & 1))
    return tuple(result)


def effects_to_play(current: Sequence[bool], previous: Sequence[bool]) -> SoundEffects:
    """Return the effects to start this frame.

    The UFO sound plays whenever it is active; every other effect plays only
    in the frame where it becomes active.
    """
    if len(current) != NUMBER_OF_SOUND_EFFECTS or len(previous) != NUMBER_OF_SOUND_EFFECTS:
        raise ValueError(f"expected {NUMBER_OF_SOUND_EFFECTS} sound effect states")
    return tuple(
        bool(now) if effect == SoundEffect.UFO else bool(now and not before)
        for effect, now, before in zip(SoundEffect, current, previous)
    )