"""Intel 8080 emulator, disassembler and Space Invaders arcade machine with a pygame front end."""

__version__ = "0.1.0"