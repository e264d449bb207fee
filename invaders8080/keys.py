"""Player controls and how they set bits in the cabinet's input ports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .ports import InputPort, PortsState

MAX_KEY_PRESSES = 10
_PLAYER_1_START_BIT = 2


class KeyPressType(IntEnum):
    """Whether a key went up or down."""

    INVALID = -1
    KEY_UP = 0
    KEY_DOWN = 1


class Key(IntEnum):
    """Cabinet controls, valued by their bit in the input port."""

    INVALID = -1
    COIN = 0
    START = 1
    TILT = 2
    PADDING = 3
    SHOOT = 4
    LEFT = 5
    RIGHT = 6


class Player(IntEnum):
    """Player a control belongs to."""

    INVALID = -1
    PLAYER_1 = 1
    PLAYER_2 = 2
    IRRELEVANT = 1


@dataclass(frozen=True)
class KeyPress:
    """One change of a control's state."""

    key: Key
    player: Player
    kind: KeyPressType

    @property
    def is_valid(self) -> bool:
        """Whether key, player and kind are all set."""
        return (
            self.key != Key.INVALID
            and self.player != Player.INVALID
            and self.kind != KeyPressType.INVALID
        )


INVALID_KEY_PRESS = KeyPress(Key.INVALID, Player.INVALID, KeyPressType.INVALID)


def key_press_port(key_press: KeyPress) -> InputPort:
    """Return the input port a control lives in; both START buttons are in port 1."""
    if key_press.player == Player.PLAYER_1 or key_press.key == Key.START:
        return InputPort.INPUT_1
    return InputPort.INPUT_2


def key_press_bit(key_press: KeyPress) -> int:
    """Return the bit index of a control in its input port."""
    if key_press.key == Key.START and key_press.player == Player.PLAYER_1:
        return _PLAYER_1_START_BIT
    return int(key_press.key)


def machine_key_press(key_press: KeyPress, ports: PortsState) -> None:
    """Set the control's bit on key down and clear it otherwise."""
    port = key_press_port(key_press)
    bit = 1 << key_press_bit(key_press)
    if key_press.kind == KeyPressType.KEY_DOWN:
        ports.input_ports[port] |= bit
    else:
        ports.input_ports[port] &= ~bit & 0xFF