"""Instruction dispatch and the data-movement and control-flow instructions of the 8080."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from . import alu
from .cpu import (
    NUMBER_OF_CONDITIONS,
    Cpu8080,
    Flag,
    GeneralRegister,
    Opcode,
    RegisterPair,
    bytes_to_word,
    is_pair,
    opcode_to_cycles,
)

Handler = Callable[[Cpu8080, Sequence[int]], None]

_PAIR_SPACING = 0x10
_REGISTER_SPACING = 0x8

_CONDITION_FLAGS = (Flag.ZERO, Flag.CARRY, Flag.PARITY, Flag.SIGN)

_NOP_OPCODES = (0x00, 0x08, 0x10, 0x18, 0x20, 0x28, 0x38, 0xCB, 0xD9, 0xDD, 0xED, 0xFD)


class UnimplementedInstructionError(Exception):
    """Raised when the byte at PC is not an instruction the processor runs."""

    def __init__(self, opcode: int, pc: int) -> None:
        super().__init__(f"unimplemented instruction 0x{opcode:02x} at {pc:04x}")
        self.opcode = opcode
        self.pc = pc


def should_do_conditional_op(cpu: Cpu8080, opcode: int, base_opcode: int) -> bool:
    """Return whether a JMP, CALL or RET variant should take effect.

    ``base_opcode`` is the first conditional form of the family (JNZ, CNZ or
    RNZ). The condition is found from the opcode's distance to it; even
    conditions are the inverted ones (NZ, NC, PO, P).
    """
    if opcode in (Opcode.JMP, Opcode.CALL, Opcode.RET):
        return True
    condition_type = (opcode - base_opcode) // NUMBER_OF_CONDITIONS
    invert = condition_type % 2 == 0
    if 0 <= condition_type < NUMBER_OF_CONDITIONS:
        flag = _CONDITION_FLAGS[condition_type // 2]
    else:
        flag = Flag.CARRY
    met = cpu.flags[flag]
    return not met if invert else met


def _immediate_word(code: Sequence[int]) -> int:
    return bytes_to_word(code[1], code[2])


def handle_mov(cpu: Cpu8080, code: Sequence[int]) -> None:
    """MOV target, source between registers or the memory byte at HL."""
    offset = code[0] - Opcode.MOV
    source = offset % 8
    target = offset // 8
    if target == GeneralRegister.M:
        cpu.write_pair_address(RegisterPair.HL, cpu.registers[source])
    elif source == GeneralRegister.M:
        cpu.registers[target] = cpu.read_pair_address(RegisterPair.HL)
    else:
        cpu.registers[target] = cpu.registers[source]


def handle_nop(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Leave the processor unchanged; reject bytes that are not NOP encodings."""
    if code[0] not in _NOP_OPCODES:
        raise ValueError(f"0x{code[0]:02x} is not a NOP opcode")


def handle_hlt(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Accept HLT, which leaves the processor unchanged; reject other bytes."""
    if code[0] != Opcode.HLT:
        raise ValueError(f"0x{code[0]:02x} is not the HLT opcode")


def handle_lxi(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Load a 16-bit immediate into a register pair or SP."""
    register = code[0] // _PAIR_SPACING
    value = _immediate_word(code)
    if is_pair(register):
        cpu.set_register_pair(register, value)
    else:
        cpu.sp = value
    cpu.pc += 2


def handle_stax(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Store A at the address in BC or DE."""
    pair = code[0] // _PAIR_SPACING
    cpu.write_memory(cpu.get_register_pair(pair), cpu.registers[GeneralRegister.A])


def handle_jmp(cpu: Cpu8080, code: Sequence[int]) -> None:
    """JMP and its conditional forms."""
    if should_do_conditional_op(cpu, code[0], Opcode.JNZ):
        cpu.pc = _immediate_word(code)
    else:
        cpu.pc += 2


def handle_ret(cpu: Cpu8080, code: Sequence[int]) -> None:
    """RET and its conditional forms."""
    if should_do_conditional_op(cpu, code[0], Opcode.RNZ):
        low = cpu.pop_byte()
        high = cpu.pop_byte()
        cpu.pc = bytes_to_word(low, high)


def handle_call(cpu: Cpu8080, code: Sequence[int]) -> None:
    """CALL and its conditional forms."""
    if should_do_conditional_op(cpu, code[0], Opcode.CNZ):
        return_address = (cpu.pc + 2) & 0xFFFF
        cpu.push(return_address & 0xFF, (return_address >> 8) & 0xFF)
        cpu.pc = _immediate_word(code)
    else:
        cpu.pc += 2


def handle_inx(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Increment a register pair or SP."""
    register = code[0] // _PAIR_SPACING
    if is_pair(register):
        cpu.set_register_pair(register, (cpu.get_register_pair(register) + 1) & 0xFFFF)
    else:
        cpu.sp += 1


def handle_sta(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Store A at an immediate address."""
    cpu.write_memory(_immediate_word(code), cpu.registers[GeneralRegister.A])
    cpu.pc += 2


def handle_in(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Read an input port into A."""
    cpu.registers[GeneralRegister.A] = cpu.read_port(code[1]) & 0xFF
    cpu.pc += 1


def handle_out(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Write A to an output port."""
    cpu.write_port(code[1], cpu.registers[GeneralRegister.A])
    cpu.pc += 1


def handle_di_ei(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Disable (DI) or enable (EI) interrupts."""
    cpu.interrupt_enable = code[0] == Opcode.EI


def handle_pchl(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Jump to the address in HL."""
    cpu.pc = cpu.get_register_pair(RegisterPair.HL)


def handle_mvi(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Move an immediate byte into a register or the memory byte at HL."""
    register = code[0] // _REGISTER_SPACING
    value = code[1]
    if register == GeneralRegister.M:
        cpu.write_pair_address(RegisterPair.HL, value)
    else:
        cpu.registers[register] = value
    cpu.pc += 1


def handle_dad(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Add a register pair or SP to HL, setting carry on overflow."""
    register = code[0] // _PAIR_SPACING
    value = cpu.get_register_pair(register) if is_pair(register) else cpu.sp
    combined = cpu.get_register_pair(RegisterPair.HL) + value
    cpu.set_register_pair(RegisterPair.HL, combined & 0xFFFF)
    cpu.flags[Flag.CARRY] = bool((combined >> 16) & 1)


def handle_stc(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Set carry."""
    cpu.flags[Flag.CARRY] = True


def handle_cmc(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Complement carry."""
    cpu.flags[Flag.CARRY] = not cpu.flags[Flag.CARRY]


def handle_dcx(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Decrement a register pair or SP."""
    register = code[0] // _PAIR_SPACING
    if is_pair(register):
        cpu.set_register_pair(register, (cpu.get_register_pair(register) - 1) & 0xFFFF)
    else:
        cpu.sp -= 1


def handle_ldax(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Load A from the address in BC or DE."""
    cpu.registers[GeneralRegister.A] = cpu.read_pair_address(code[0] // _PAIR_SPACING)


def handle_push(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Push a register pair, or A and the flags for PUSH PSW."""
    register = (code[0] - Opcode.PUSH_BC) // _PAIR_SPACING
    if is_pair(register):
        cpu.push_pair(register)
    else:
        cpu.push(cpu.flags_to_byte(), cpu.registers[GeneralRegister.A])


def handle_pop(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Pop a register pair, or the flags and A for POP PSW."""
    register = (code[0] - Opcode.POP_BC) // _PAIR_SPACING
    if is_pair(register):
        cpu.pop_to_pair(register)
    else:
        cpu.flags_from_byte(cpu.pop_byte())
        cpu.registers[GeneralRegister.A] = cpu.pop_byte()


def handle_rst(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Call the restart vector encoded in the opcode."""
    cpu.rst((code[0] - Opcode.RST0) // 8)


def handle_lda(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Load A from an immediate address."""
    cpu.registers[GeneralRegister.A] = cpu.read_memory(_immediate_word(code))
    cpu.pc += 2


def handle_sphl(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Copy HL into SP."""
    cpu.sp = cpu.get_register_pair(RegisterPair.HL)


def handle_xchg(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Swap HL and DE."""
    hl = cpu.get_register_pair(RegisterPair.HL)
    cpu.set_register_pair(RegisterPair.HL, cpu.get_register_pair(RegisterPair.DE))
    cpu.set_register_pair(RegisterPair.DE, hl)


def handle_xthl(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Swap HL with the word at the top of the stack."""
    old_l = cpu.registers[GeneralRegister.L]
    old_h = cpu.registers[GeneralRegister.H]
    cpu.registers[GeneralRegister.L] = cpu.read_memory(cpu.sp)
    cpu.registers[GeneralRegister.H] = cpu.read_memory(cpu.sp + 1)
    cpu.write_memory(cpu.sp, old_l)
    cpu.write_memory(cpu.sp + 1, old_h)


def handle_shld(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Store L and H at an immediate address."""
    address = _immediate_word(code)
    cpu.write_memory(address, cpu.registers[GeneralRegister.L])
    cpu.write_memory(address + 1, cpu.registers[GeneralRegister.H])
    cpu.pc += 2


def handle_lhld(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Load L and H from an immediate address."""
    address = _immediate_word(code)
    cpu.registers[GeneralRegister.L] = cpu.read_memory(address)
    cpu.registers[GeneralRegister.H] = cpu.read_memory(address + 1)
    cpu.pc += 2


def _single_target(base: int, immediate: int) -> List[int]:
    return [*range(base, base + 8), immediate]


_HANDLER_ORDER: Tuple[Tuple[Iterable[int], Handler], ...] = (
    ((Opcode.LXI_B, Opcode.LXI_D, Opcode.LXI_H, Opcode.LXI_SP), handle_lxi),
    ((Opcode.SHLD,), handle_shld),
    ((Opcode.LHLD,), handle_lhld),
    ((Opcode.DAA,), alu.handle_daa),
    ((Opcode.CMA,), alu.handle_cma),
    ((Opcode.STA,), handle_sta),
    ((Opcode.STC,), handle_stc),
    ((Opcode.CMC,), handle_cmc),
    ((Opcode.IN,), handle_in),
    ((Opcode.OUT,), handle_out),
    (range(Opcode.DCR_B, 0x40, 8), alu.handle_dcr),
    ((Opcode.DAD_B, Opcode.DAD_D, Opcode.DAD_H, Opcode.DAD_SP), handle_dad),
    ((Opcode.LDAX_B, Opcode.LDAX_D), handle_ldax),
    ((Opcode.DI, Opcode.EI), handle_di_ei),
    ((Opcode.PCHL,), handle_pchl),
    ((Opcode.SPHL,), handle_sphl),
    ((Opcode.XTHL,), handle_xthl),
    ((Opcode.XCHG,), handle_xchg),
    (range(Opcode.INR_B, 0x40, 8), alu.handle_inr),
    ((Opcode.INX_B, Opcode.INX_D, Opcode.INX_H, Opcode.INX_SP), handle_inx),
    ((Opcode.STAX_B, Opcode.STAX_D), handle_stax),
    ([op for op in range(Opcode.MOV, Opcode.MOV_END_RANGE + 1) if op != Opcode.HLT], handle_mov),
    (range(Opcode.MVI_B, 0x40, 8), handle_mvi),
    ((Opcode.DCX_B, Opcode.DCX_D, Opcode.DCX_H, Opcode.DCX_SP), handle_dcx),
    ((Opcode.LDA,), handle_lda),
    ((Opcode.HLT,), handle_hlt),
    (_NOP_OPCODES, handle_nop),
    ((Opcode.RLC,), alu.handle_rlc),
    ((Opcode.RRC,), alu.handle_rrc),
    ((Opcode.RAL,), alu.handle_ral),
    ((Opcode.RAR,), alu.handle_rar),
    (_single_target(Opcode.ADD, Opcode.ADD_IMMEDIATE), alu.handle_add),
    (_single_target(Opcode.ADC, Opcode.ADC_IMMEDIATE), alu.handle_adc),
    (_single_target(Opcode.SUB, Opcode.SUB_IMMEDIATE), alu.handle_sub),
    (_single_target(Opcode.SBB, Opcode.SBB_IMMEDIATE), alu.handle_sbb),
    (_single_target(Opcode.ANA, Opcode.ANA_IMMEDIATE), alu.handle_ana),
    (_single_target(Opcode.XRA, Opcode.XRA_IMMEDIATE), alu.handle_xra),
    (_single_target(Opcode.ORA, Opcode.ORA_IMMEDIATE), alu.handle_ora),
    (_single_target(Opcode.CMP, Opcode.CMP_IMMEDIATE), alu.handle_cmp),
    ((Opcode.POP_BC, Opcode.POP_DE, Opcode.POP_HL, Opcode.POP_PSW), handle_pop),
    ((Opcode.PUSH_BC, Opcode.PUSH_DE, Opcode.PUSH_HL, Opcode.PUSH_PSW), handle_push),
    (range(Opcode.RST0, 0x100, 8), handle_rst),
    (range(Opcode.CNZ, 0x100, 8), handle_call),
    ((Opcode.CALL,), handle_call),
    (range(Opcode.RNZ, 0x100, 8), handle_ret),
    ((Opcode.RET,), handle_ret),
    (range(Opcode.JNZ, 0x100, 8), handle_jmp),
    ((Opcode.JMP,), handle_jmp),
)


def _build_dispatch() -> Dict[int, Handler]:
    table: Dict[int, Handler] = {}
    for opcodes, handler in _HANDLER_ORDER:
        for opcode in opcodes:
            table.setdefault(int(opcode), handler)
    return table


_DISPATCH = _build_dispatch()


def find_handler(opcode: int) -> Optional[Handler]:
    """Return the handler that runs ``opcode``, or None if it is not implemented."""
    return _DISPATCH.get(opcode)


def emulate_op(cpu: Cpu8080) -> int:
    """Run the instruction at PC and return the cycles it takes."""
    pc = cpu.pc
    opcode = cpu.read_memory(pc)
    handler = find_handler(opcode)
    if handler is None:
        raise UnimplementedInstructionError(opcode, pc)
    code = cpu.memory[pc:pc + 3]
    cpu.pc = pc + 1
    handler(cpu, code)
    return opcode_to_cycles(opcode)


def run_cpu(cpu: Cpu8080, real_time_to_run: int, speed_scaling: int) -> int:
    """Run instructions for the given microseconds at 2 MHz times ``speed_scaling``.

    Returns the number of cycles actually run.
    """
    cycles_to_run = real_time_to_run * 2 * speed_scaling
    cycles_ran = 0
    while cycles_ran < cycles_to_run:
        cycles_ran += emulate_op(cpu)
    return cycles_ran