# invaders8080

An Intel 8080 CPU emulator, together with the hardware around it in the 1978
Midway Space Invaders arcade machine. The machine has a bit-shift register,
input ports, sound ports and a rotated, colour-filtered video frame buffer.
A pygame front end provides a window, the keyboard and the sound effects. A
small disassembler turns 8080 machine code into listing lines.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the game

You need your own Space Invaders ROM image, with the game code joined into
one file. You also need a set of sound effect files.

```
invaders8080 path/to/invaders.rom path/to/sounds/
```

The second argument is used as a prefix. The files it looks for are
`<sound_directory>0.wav` to `<sound_directory>8.wav`, so end the directory
with a separator. The sound effects are numbered in this order:

| Index | Effect |
|-------|--------|
| 0 | UFO |
| 1 | Shot |
| 2 | Flash (player dies) |
| 3 | Invader dies |
| 4–7 | Fleet movement 1–4 |
| 8 | UFO hit |

The UFO sound is started on every frame in which it is active and not
already playing. Every other effect is started only in the frame in which it
becomes active.

The command exits with status 1 if the ROM cannot be read or is empty, or if
the window or the sound files cannot be set up.

### Controls (player 1)

| Key | Action |
|-----|--------|
| Right Shift | Insert coin |
| Enter | Start |
| Left / Right arrows | Move |
| Space | Shoot |

Close the window to quit. The window can be resized; the picture keeps its
aspect ratio and is centred with black bars.

## Using the library

### The CPU

`invaders8080.cpu.Cpu8080` holds the registers, flags, memory and I/O hooks.
`invaders8080.opcodes.emulate_op` runs one instruction and returns its cycle
count, and `invaders8080.opcodes.run_cpu` runs instructions for a given
number of microseconds at 2 MHz.

```python
from invaders8080.cpu import Cpu8080, GeneralRegister
from invaders8080.opcodes import emulate_op

cpu = Cpu8080(bytes([0x3E, 0x42, 0x76]), 0x10000, None, None)  # MVI A,42h ; HLT
emulate_op(cpu)
assert cpu.registers[GeneralRegister.A] == 0x42
```

Without I/O hooks, ports act as simple latches: `IN` returns the last byte
written to that port with `OUT`, or 0. A byte that is not an instruction the
CPU runs raises `invaders8080.opcodes.UnimplementedInstructionError`.
Writes below 0x2000 or at 0x4000 and above are still carried out, but are
logged as warnings.

### The disassembler

```python
from invaders8080.disassembler import disassemble, disassemble_op

for line in disassemble(bytes([0x00, 0xC3, 0x00, 0x20])):
    print(line)

line, size = disassemble_op(bytes([0xC3, 0x00, 0x20]), 0)
```

Each line starts with the address as four hex digits.

### The machine

To drive the machine from your own front end, write an object with the
methods of `invaders8080.machine.PlatformInterface` (`poll_key_presses`,
`poll_system_events`, `sleep`, `microsecond_tick`, `render_frame` and
`play_sound_effects`). Pass it to `invaders8080.machine.Machine` with the ROM
bytes, or to `Machine.from_rom_file` with a ROM path. Set `is_running` or call
`Machine.toggle_running` to start and pause, start the loop with
`Machine.run`, and call `Machine.exit` to stop it.

The pieces the machine is built from can be used on their own:
`invaders8080.ports` (the port latches and shift register),
`invaders8080.keys` (how controls set input port bits),
`invaders8080.sound` (which effects are latched and which to start) and
`invaders8080.display` (turning video memory into a coloured frame).

## What it does not do

- Only player 1 is mapped to the keyboard; there are no keys for player 2 or
  for tilt.
- There is no key to pause; pausing is only available through
  `Machine.toggle_running`.
- The disassembler has no command of its own; it is a library function.
- No ROM image or sound files are included.