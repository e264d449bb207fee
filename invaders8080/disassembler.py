"""Text listing of 8080 machine code."""

from __future__ import annotations

from typing import Iterator, Sequence, Tuple

_REGISTER_NAMES = ("B", "C", "D", "E", "H", "L", "M", "A")
_ALU_NAMES = ("ADD", "ADC", "SUB", "SBB", "ANA", "XRA", "ORA", "CMP")

# "{w}" stands for a 16-bit operand (three-byte instruction),
# "{b}" for an 8-bit operand (two-byte instruction).
_LOW_TEMPLATES = {
    0x00: "NOP",
    0x01: "LXI    B,#${w}",
    0x02: "STAX   B",
    0x03: "INX    B",
    0x04: "INR    B",
    0x05: "DCR    B",
    0x06: "MVI    B,#${b}",
    0x07: "RLC",
    0x08: "NOP",
    0x09: "DAD    B",
    0x0A: "LDAX   B",
    0x0B: "DCX    B",
    0x0C: "INR    C",
    0x0D: "DCR    C",
    0x0E: "MVI    C,#${b}",
    0x0F: "RRC",
    0x10: "NOP",
    0x11: "LXI    D,#${w}",
    0x12: "STAX   D",
    0x13: "INX    D",
    0x14: "INR    D",
    0x15: "DCR    D",
    0x16: "MVI    D, #${b}",
    0x17: "RAL",
    0x18: "NOP",
    0x19: "DAD    D",
    0x1A: "LDAX   D",
    0x1B: "DCX    D",
    0x1C: "INR    E",
    0x1D: "DCR    E",
    0x1E: "MVI    E,#${b}",
    0x1F: "RAR",
    0x20: "RIM",
    0x21: "LXI    H,#${w}",
    0x22: "SHLD   ${w}",
    0x23: "INX    H",
    0x24: "INR    H",
    0x25: "DCR    H",
    0x26: "MVI    H,#${b}",
    0x27: "DAA",
    0x28: "NOP",
    0x29: "DAD    H",
    0x2A: "LHLD   ${w}",
    0x2B: "DCX    H",
    0x2C: "INR    L",
    0x2D: "DCR    L",
    0x2E: "MVI    L,#${b}",
    0x2F: "CMA",
    0x30: "SIM",
    0x31: "LXI    SP,#${w}",
    0x32: "STA    ${w}",
    0x33: "INX    SP",
    0x34: "INR    M",
    0x35: "DCR    M",
    0x36: "MVI    M,#${b}",
    0x37: "STC",
    0x38: "NOP",
    0x39: "DAD    SP",
    0x3A: "LDA    ${w}",
    0x3B: "DCX    SP",
    0x3C: "INR    A",
    0x3D: "DCR    A",
    0x3E: "MVI    A,#0x{b}",
    0x3F: "CMC",
}

_HIGH_TEMPLATES = {
    0xC0: "RNZ",
    0xC1: "POP    B",
    0xC2: "JNZ    ${w}",
    0xC3: "JMP    ${w}",
    0xC4: "CNZ    ${w}",
    0xC5: "PUSH   BC",
    0xC6: "ADI    #${b}",
    0xC7: "RST    0",
    0xC8: "RZ",
    0xC9: "RET",
    0xCA: "JZ     ${w}",
    0xCB: "NOP",
    0xCC: "CZ     ${w}",
    0xCD: "CALL   ${w}",
    0xCE: "ACI    #${b}",
    0xCF: "RST    1",
    0xD0: "RNC",
    0xD1: "POP    D",
    0xD2: "JNC    ${w}",
    0xD3: "OUT    #${b}",
    0xD4: "CNC    ${w}",
    0xD5: "PUSH   D",
    0xD6: "SUI    #${b}",
    0xD7: "RST    2",
    0xD8: "RC",
    0xD9: "NOP",
    0xDA: "JC     ${w}",
    0xDB: "IN     #${b}",
    0xDC: "CC     ${w}",
    0xDD: "NOP",
    0xDE: "SBI    #${b}",
    0xDF: "RST    3",
    0xE0: "RPO",
    0xE1: "POP    H",
    0xE2: "JPO    ${w}",
    0xE3: "XTHL",
    0xE4: "CPO    ${w}",
    0xE5: "PUSH   H",
    0xE6: "ANI    #${b}",
    0xE7: "RST    4",
    0xE8: "RPE",
    0xE9: "PCHL",
    0xEA: "JPE    ${w}",
    0xEB: "XCHG",
    0xEC: "CPE    ${w}",
    0xED: "NOP",
    0xEE: "XRI    #${b}",
    0xEF: "RST    5",
    0xF0: "RP",
    0xF1: "POP    PSW",
    0xF2: "JP    ${w}",
    0xF3: "DI",
    0xF4: "CP    ${w}",
    0xF5: "PUSH  PSW",
    0xF6: "ORI   #${b}",
    0xF7: "RST   6",
    0xF8: "RM",
    0xF9: "SPHL",
    0xFA: "JM    ${w}",
    0xFB: "EI",
    0xFC: "NOP",
    0xFD: "CPI    #${b}",
    0xFE: "RST   7",
    0xFF: "",
}


def _build_templates() -> Tuple[str, ...]:
    templates = dict(_LOW_TEMPLATES)
    for target_index, target in enumerate(_REGISTER_NAMES):
        for source_index, source in enumerate(_REGISTER_NAMES):
            templates[0x40 + target_index * 8 + source_index] = f"MOV    {target},{source}"
    templates[0x76] = "HLT"
    for op_index, name in enumerate(_ALU_NAMES):
        for register_index, register in enumerate(_REGISTER_NAMES):
            templates[0x80 + op_index * 8 + register_index] = f"{name}    {register}"
    templates.update(_HIGH_TEMPLATES)
    return tuple(templates[opcode] for opcode in range(0x100))


_TEMPLATES = _build_templates()


def _operand_bytes(code: Sequence[int], pc: int) -> Tuple[int, int]:
    following = list(code[pc + 1:pc + 3])
    following.extend([0] * (2 - len(following)))
    return following[0], following[1]


def disassemble_op(code: Sequence[int], pc: int) -> Tuple[str, int]:
    """Describe the instruction at ``pc``.

    Returns the listing line, prefixed with the address, and the size of the
    instruction in bytes. Operand bytes past the end of ``code`` read as zero.
    """
    if not 0 <= pc < len(code):
        raise IndexError(f"offset {pc} is outside the code")
    template = _TEMPLATES[code[pc] & 0xFF]
    low, high = _operand_bytes(code, pc)
    if "{w}" in template:
        size = 3
    elif "{b}" in template:
        size = 2
    else:
        size = 1
    text = template.format(w=f"{high:02x}{low:02x}", b=f"{low:02x}")
    return f"{pc:04x} {text}", size


def disassemble(code: Sequence[int]) -> Iterator[str]:
    """Yield one listing line for each instruction in ``code``."""
    pc = 0
    while pc < len(code):
        line, size = disassemble_op(code, pc)
        yield line
        pc += size