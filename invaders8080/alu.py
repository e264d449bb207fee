"""Arithmetic, logic, rotate and increment instructions of the 8080."""

from __future__ import annotations

from typing import Callable, Sequence

from .cpu import Cpu8080, Flag, GeneralRegister, Opcode, RegisterPair

Operation = Callable[[Cpu8080, int], None]


def single_target_value(cpu: Cpu8080, code: Sequence[int], base: int, immediate: int) -> int:
    """Return the operand of an ADD-style instruction.

    ``code`` starts at the opcode. The operand is the immediate byte after the
    opcode when it is the immediate form, otherwise the register encoded in the
    opcode's distance from ``base``, with M meaning the memory byte at HL.
    """
    opcode = code[0]
    if opcode == immediate:
        return code[1]
    target = opcode - base
    if target == GeneralRegister.M:
        return cpu.read_pair_address(RegisterPair.HL)
    return cpu.registers[target]


def _run_single_target(
    cpu: Cpu8080, code: Sequence[int], operation: Operation, base: int, immediate: int
) -> None:
    value = single_target_value(cpu, code, base, immediate)
    if code[0] == immediate:
        cpu.pc += 1
    operation(cpu, value)


def op_add(cpu: Cpu8080, value: int) -> None:
    """Add ``value`` to A, setting carry, zero, sign and parity."""
    result = cpu.registers[GeneralRegister.A] + value
    cpu.set_flags(result)
    cpu.registers[GeneralRegister.A] = result & 0xFF


def op_adc(cpu: Cpu8080, value: int) -> None:
    """Add ``value`` and the carry to A."""
    op_add(cpu, value + int(cpu.flags[Flag.CARRY]))


def op_sub(cpu: Cpu8080, value: int) -> None:
    """Subtract ``value`` from A; carry is set on borrow."""
    a = cpu.registers[GeneralRegister.A]
    cpu.flags[Flag.CARRY] = a < value
    cpu.registers[GeneralRegister.A] = (a - value) & 0xFF
    cpu.set_flags_zsp(cpu.registers[GeneralRegister.A])


def op_sbb(cpu: Cpu8080, value: int) -> None:
    """Subtract ``value`` and the carry from A."""
    op_sub(cpu, value + int(cpu.flags[Flag.CARRY]))


def _logical(cpu: Cpu8080, result: int) -> None:
    cpu.registers[GeneralRegister.A] = result & 0xFF
    cpu.set_flags_zsp(cpu.registers[GeneralRegister.A])
    cpu.flags[Flag.CARRY] = False


def op_ana(cpu: Cpu8080, value: int) -> None:
    """AND ``value`` into A and clear carry."""
    _logical(cpu, cpu.registers[GeneralRegister.A] & value)


def op_xra(cpu: Cpu8080, value: int) -> None:
    """XOR ``value`` into A and clear carry."""
    _logical(cpu, cpu.registers[GeneralRegister.A] ^ value)


def op_ora(cpu: Cpu8080, value: int) -> None:
    """OR ``value`` into A and clear carry."""
    _logical(cpu, cpu.registers[GeneralRegister.A] | value)


def op_cmp(cpu: Cpu8080, value: int) -> None:
    """Compare A with ``value``, leaving A unchanged."""
    a = cpu.registers[GeneralRegister.A]
    cpu.set_flags_zsp((a - value) & 0xFF)
    cpu.flags[Flag.CARRY] = a < value


def op_daa(cpu: Cpu8080) -> None:
    """Decimal-adjust A."""
    a = cpu.registers[GeneralRegister.A]
    correction = 0
    if (a & 0x0F) > 9:
        correction += 0x06
    if (a >> 4) > 9 or cpu.flags[Flag.CARRY]:
        correction += 0x60
    result = a + correction
    cpu.registers[GeneralRegister.A] = result & 0xFF
    cpu.set_flags(result)


def op_rlc(cpu: Cpu8080) -> None:
    """Shift A left, filling bit 0 from carry; carry takes the old bit 7."""
    a = cpu.registers[GeneralRegister.A]
    previous_bit7 = a >> 7
    cpu.registers[GeneralRegister.A] = ((a << 1) & 0xFE) | int(cpu.flags[Flag.CARRY])
    cpu.flags[Flag.CARRY] = bool(previous_bit7)


def op_rrc(cpu: Cpu8080) -> None:
    """Rotate A right; bit 0 goes to bit 7 and to carry."""
    a = cpu.registers[GeneralRegister.A]
    previous_bit0 = a & 1
    cpu.registers[GeneralRegister.A] = (a >> 1) | (previous_bit0 << 7)
    cpu.flags[Flag.CARRY] = bool(previous_bit0)


def op_ral(cpu: Cpu8080) -> None:
    """Shift A left keeping bits 1-6, put carry in bit 7; carry takes the old bit 7."""
    a = cpu.registers[GeneralRegister.A]
    previous_bit7 = a >> 7
    cpu.registers[GeneralRegister.A] = ((a << 1) & 0x7F) | (int(cpu.flags[Flag.CARRY]) << 7)
    cpu.flags[Flag.CARRY] = bool(previous_bit7)


def op_rar(cpu: Cpu8080) -> None:
    """Rotate A right through carry."""
    a = cpu.registers[GeneralRegister.A]
    previous_bit0 = a & 1
    cpu.registers[GeneralRegister.A] = (a >> 1) | (int(cpu.flags[Flag.CARRY]) << 7)
    cpu.flags[Flag.CARRY] = bool(previous_bit0)


def handle_add(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run ADD r/M or ADI."""
    _run_single_target(cpu, code, op_add, Opcode.ADD, Opcode.ADD_IMMEDIATE)


def handle_adc(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run ADC r/M or ACI."""
    _run_single_target(cpu, code, op_adc, Opcode.ADC, Opcode.ADC_IMMEDIATE)


def handle_sub(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run SUB r/M or SUI."""
    _run_single_target(cpu, code, op_sub, Opcode.SUB, Opcode.SUB_IMMEDIATE)


def handle_sbb(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run SBB r/M or SBI."""
    _run_single_target(cpu, code, op_sbb, Opcode.SBB, Opcode.SBB_IMMEDIATE)


def handle_ana(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run ANA r/M or ANI."""
    _run_single_target(cpu, code, op_ana, Opcode.ANA, Opcode.ANA_IMMEDIATE)


def handle_xra(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run XRA r/M or XRI."""
    _run_single_target(cpu, code, op_xra, Opcode.XRA, Opcode.XRA_IMMEDIATE)


def handle_ora(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run ORA r/M or ORI."""
    _run_single_target(cpu, code, op_ora, Opcode.ORA, Opcode.ORA_IMMEDIATE)


def handle_cmp(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run CMP r/M or CPI."""
    _run_single_target(cpu, code, op_cmp, Opcode.CMP, Opcode.CMP_IMMEDIATE)


def _step_register(cpu: Cpu8080, register: int, delta: int) -> None:
    if register == GeneralRegister.M:
        address = cpu.get_register_pair(RegisterPair.HL)
        value = (cpu.read_memory(address) + delta) & 0xFF
        cpu.write_memory(address, value)
    else:
        value = (cpu.registers[register] + delta) & 0xFF
        cpu.registers[register] = value
    cpu.set_flags_zsp(value)


def handle_inr(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Increment a register or the memory byte at HL."""
    _step_register(cpu, code[0] // 8, 1)


def handle_dcr(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Decrement a register or the memory byte at HL."""
    _step_register(cpu, code[0] // 8, -1)


def handle_daa(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run DAA."""
    op_daa(cpu)


def handle_cma(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Complement A."""
    cpu.registers[GeneralRegister.A] = ~cpu.registers[GeneralRegister.A] & 0xFF


def handle_rlc(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run RLC."""
    op_rlc(cpu)


def handle_rrc(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run RRC."""
    op_rrc(cpu)


def handle_ral(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run RAL."""
    op_ral(cpu)


def handle_rar(cpu: Cpu8080, code: Sequence[int]) -> None:
    """Run RAR."""
    op_rar(cpu)