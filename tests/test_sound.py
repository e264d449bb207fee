import pytest

from invaders8080.ports import PortsState
from invaders8080.sound import (
    NUMBER_OF_SOUND_EFFECTS,
    SoundEffect,
    active_sound_effects,
    effects_to_play,
)

NONE = (False,) * NUMBER_OF_SOUND_EFFECTS


def test_no_bits_no_effects():
    assert active_sound_effects(PortsState()) == NONE


def test_port_three_bits_map_to_first_effects():
    ports = PortsState(sound_bits_1=0b1010)
    active = active_sound_effects(ports)
    assert [e for e in SoundEffect if active[e]] == [SoundEffect.SHOT, SoundEffect.INVADER_DIE]


def test_port_five_bits_map_after_port_three():
    ports = PortsState(sound_bits_2=0b10001)
    active = active_sound_effects(ports)
    assert [e for e in SoundEffect if active[e]] == [
        SoundEffect.FLEET_MOVEMENT_1,
        SoundEffect.UFO_HIT,
    ]


def test_high_unused_bits_are_ignored():
    ports = PortsState(sound_bits_1=0xF0, sound_bits_2=0xE0)
    assert active_sound_effects(ports) == NONE


def test_new_effects_play_once():
    current = active_sound_effects(PortsState(sound_bits_1=0b0010))
    first = effects_to_play(current, NONE)
    assert first[SoundEffect.SHOT]
    second = effects_to_play(current, current)
    assert second == NONE


def test_ufo_sound_persists():
    current = active_sound_effects(PortsState(sound_bits_1=0b0001))
    assert effects_to_play(current, current)[SoundEffect.UFO]
    assert effects_to_play(current, NONE)[SoundEffect.UFO]


def test_stopped_effect_does_not_play():
    previous = active_sound_effects(PortsState(sound_bits_2=0b1))
    assert effects_to_play(NONE, previous) == NONE


def test_wrong_length_raises():
    with pytest.raises(ValueError):
        effects_to_play((True,), NONE)