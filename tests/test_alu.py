from typing import NamedTuple, Optional

import pytest

from invaders8080.alu import (
    handle_adc,
    handle_add,
    handle_ana,
    handle_cma,
    handle_cmp,
    handle_daa,
    handle_dcr,
    handle_inr,
    handle_ral,
    handle_rar,
    handle_rlc,
    handle_rrc,
    handle_sbb,
    handle_sub,
    handle_xra,
    handle_ora,
    single_target_value,
)
from invaders8080.cpu import Cpu8080, Flag, GeneralRegister as R, Opcode, RegisterPair


@pytest.fixture
def cpu():
    return Cpu8080(bytes([0x00, 0x00]), 0x10000)


@pytest.mark.parametrize(
    "a_value, src, src_value, expected, carry, zero, sign, par",
    [
        (0x10, R.C, 0x20, 0x30, False, False, False, True),
        (0xFF, R.A, 0xFF, 0xFE, True, False, True, False),
        (0xF0, R.D, 0x30, 0x20, True, False, False, False),
        (0x00, R.E, 0x00, 0x00, False, True, False, True),
        (0x7F, R.B, 0x01, 0x80, False, False, True, False),
        (0x8F, R.L, 0x01, 0x90, False, False, True, True),
        (0x0F, R.H, 0x01, 0x10, False, False, False, False),
    ],
)
def test_add_without_carry(cpu, a_value, src, src_value, expected, carry, zero, sign, par):
    cpu.registers[R.A] = a_value
    cpu.registers[src] = src_value
    handle_add(cpu, bytes([0x80 + src]))
    assert cpu.registers[R.A] == expected
    assert cpu.flags[Flag.CARRY] is carry
    assert cpu.flags[Flag.ZERO] is zero
    assert cpu.flags[Flag.SIGN] is sign
    assert cpu.flags[Flag.PARITY] is par


def test_add_immediate(cpu):
    cpu.registers[R.A] = 0x01
    cpu.pc = 0
    handle_add(cpu, bytes([Opcode.ADD_IMMEDIATE, 0xFE]))
    assert cpu.registers[R.A] == 0xFF
    assert cpu.pc == 1


def test_add_with_carry(cpu):
    cpu.registers[R.A] = 0x01
    cpu.registers[R.B] = 0xFE
    cpu.flags[Flag.CARRY] = False
    code = bytes([Opcode.ADC + R.B])
    handle_adc(cpu, code)
    assert cpu.registers[R.A] == 0xFF

    cpu.registers[R.A] = 0x01
    cpu.flags[Flag.CARRY] = True
    handle_adc(cpu, code)
    assert cpu.registers[R.A] == 0x00


def test_sub_immediate(cpu):
    cpu.registers[R.A] = 0x02
    cpu.pc = 0
    handle_sub(cpu, bytes([Opcode.SUB_IMMEDIATE, 0x01]))
    assert cpu.registers[R.A] == 0x01
    assert cpu.pc == 1


def test_sub_without_carry(cpu):
    cpu.registers[R.A] = 0x02
    cpu.registers[R.C] = 0x01
    code = bytes([Opcode.SUB + R.C])
    handle_sub(cpu, code)
    assert cpu.registers[R.A] == 0x01

    cpu.registers[R.A] = 0x00
    handle_sub(cpu, code)
    assert cpu.registers[R.A] == 0xFF
    assert cpu.flags[Flag.CARRY] is True


def test_sub_with_carry(cpu):
    cpu.registers[R.A] = 0x02
    cpu.registers[R.C] = 0x01
    cpu.flags[Flag.CARRY] = False
    code = bytes([Opcode.SBB + R.C])
    handle_sbb(cpu, code)
    assert cpu.registers[R.A] == 0x01

    cpu.registers[R.A] = 0x01
    cpu.flags[Flag.CARRY] = True
    handle_sbb(cpu, code)
    assert cpu.registers[R.A] == 0xFF


class BitwiseCase(NamedTuple):
    a_value: int
    source_value: int
    expected: int
    zero: bool
    sign: bool
    parity: bool
    src: Optional[R]
    opcode: int
    handler: object


BITWISE_CASES = [
    BitwiseCase(0b11110000, 0b00001111, 0x00, True, False, True, R.D, Opcode.ANA + R.D, handle_ana),
    BitwiseCase(0b11110001, 0b00000001, 0x01, False, False, False, R.D, Opcode.ANA + R.D, handle_ana),
    BitwiseCase(0b11110000, 0b00001111, 0x00, True, False, True, None, Opcode.ANA_IMMEDIATE, handle_ana),
    BitwiseCase(0b11110001, 0b00000001, 0x01, False, False, False, None, Opcode.ANA_IMMEDIATE, handle_ana),
    BitwiseCase(0b11110000, 0b00001111, 0xFF, False, True, True, R.D, Opcode.XRA + R.D, handle_xra),
    BitwiseCase(0b11110001, 0b00000001, 0xF0, False, True, True, R.D, Opcode.XRA + R.D, handle_xra),
    BitwiseCase(0b11110000, 0b00001111, 0xFF, False, True, True, None, Opcode.XRA_IMMEDIATE, handle_xra),
    BitwiseCase(0b11110001, 0b00000001, 0xF0, False, True, True, None, Opcode.XRA_IMMEDIATE, handle_xra),
    BitwiseCase(0b11110000, 0b00001111, 0xFF, False, True, True, R.E, Opcode.ORA + R.E, handle_ora),
    BitwiseCase(0x00, 0x00, 0x00, True, False, True, None, Opcode.ORA_IMMEDIATE, handle_ora),
]


@pytest.mark.parametrize("case", BITWISE_CASES)
def test_bitwise(cpu, case):
    cpu.registers[R.A] = case.a_value
    cpu.flags[Flag.CARRY] = True
    start_pc = cpu.pc
    if case.src is not None:
        cpu.registers[case.src] = case.source_value
        code = bytes([case.opcode])
    else:
        code = bytes([case.opcode, case.source_value])
    case.handler(cpu, code)

    assert cpu.registers[R.A] == case.expected
    assert cpu.flags[Flag.CARRY] is False
    assert cpu.flags[Flag.ZERO] is case.zero
    assert cpu.flags[Flag.SIGN] is case.sign
    assert cpu.flags[Flag.PARITY] is case.parity
    if case.src is None:
        assert cpu.pc == start_pc + 1
    else:
        assert cpu.pc == start_pc


def test_single_target_value_reads_memory_at_hl(cpu):
    cpu.set_register_pair(RegisterPair.HL, 0x2400)
    cpu.memory[0x2400] = 0x5A
    assert single_target_value(cpu, bytes([Opcode.ADD + R.M]), Opcode.ADD, Opcode.ADD_IMMEDIATE) == 0x5A


def test_single_target_value_immediate(cpu):
    assert single_target_value(cpu, bytes([Opcode.CMP_IMMEDIATE, 0x42]), Opcode.CMP, Opcode.CMP_IMMEDIATE) == 0x42


def test_cmp_equal_keeps_a(cpu):
    cpu.registers[R.A] = 0x05
    cpu.registers[R.B] = 0x05
    handle_cmp(cpu, bytes([Opcode.CMP + R.B]))
    assert cpu.registers[R.A] == 0x05
    assert cpu.flags[Flag.ZERO] is True
    assert cpu.flags[Flag.CARRY] is False


def test_cmp_less_sets_carry(cpu):
    cpu.registers[R.A] = 0x01
    handle_cmp(cpu, bytes([Opcode.CMP_IMMEDIATE, 0x02]))
    assert cpu.registers[R.A] == 0x01
    assert cpu.flags[Flag.CARRY] is True
    assert cpu.pc == 1


def test_inr_register_wraps(cpu):
    cpu.registers[R.B] = 0xFF
    handle_inr(cpu, bytes([Opcode.INR_B]))
    assert cpu.registers[R.B] == 0x00
    assert cpu.flags[Flag.ZERO] is True


def test_inr_memory(cpu):
    cpu.set_register_pair(RegisterPair.HL, 0x2400)
    cpu.memory[0x2400] = 0x7F
    handle_inr(cpu, bytes([Opcode.INR_HL]))
    assert cpu.memory[0x2400] == 0x80
    assert cpu.flags[Flag.SIGN] is True


def test_dcr_register_wraps(cpu):
    cpu.registers[R.A] = 0x00
    handle_dcr(cpu, bytes([Opcode.DCR_A]))
    assert cpu.registers[R.A] == 0xFF
    assert cpu.flags[Flag.SIGN] is True


def test_dcr_memory(cpu):
    cpu.set_register_pair(RegisterPair.HL, 0x2401)
    cpu.memory[0x2401] = 0x01
    handle_dcr(cpu, bytes([Opcode.DCR_HL]))
    assert cpu.memory[0x2401] == 0x00
    assert cpu.flags[Flag.ZERO] is True


def test_daa_low_nibble(cpu):
    cpu.registers[R.A] = 0x0A
    handle_daa(cpu, bytes([Opcode.DAA]))
    assert cpu.registers[R.A] == 0x10
    assert cpu.flags[Flag.CARRY] is False


def test_daa_high_nibble_carries(cpu):
    cpu.registers[R.A] = 0xA0
    handle_daa(cpu, bytes([Opcode.DAA]))
    assert cpu.registers[R.A] == 0x00
    assert cpu.flags[Flag.CARRY] is True
    assert cpu.flags[Flag.ZERO] is True


def test_cma(cpu):
    cpu.registers[R.A] = 0x51
    handle_cma(cpu, bytes([Opcode.CMA]))
    assert cpu.registers[R.A] == 0xAE


def test_rrc(cpu):
    cpu.registers[R.A] = 0x01
    handle_rrc(cpu, bytes([Opcode.RRC]))
    assert cpu.registers[R.A] == 0x80
    assert cpu.flags[Flag.CARRY] is True


def test_rar(cpu):
    cpu.registers[R.A] = 0x02
    cpu.flags[Flag.CARRY] = True
    handle_rar(cpu, bytes([Opcode.RAR]))
    assert cpu.registers[R.A] == 0x81
    assert cpu.flags[Flag.CARRY] is False


def test_rlc(cpu):
    cpu.registers[R.A] = 0x81
    cpu.flags[Flag.CARRY] = True
    handle_rlc(cpu, bytes([Opcode.RLC]))
    assert cpu.registers[R.A] == 0x03
    assert cpu.flags[Flag.CARRY] is True


def test_rlc_high_bit_to_carry(cpu):
    cpu.registers[R.A] = 0x80
    cpu.flags[Flag.CARRY] = False
    handle_rlc(cpu, bytes([Opcode.RLC]))
    assert cpu.registers[R.A] == 0x00
    assert cpu.flags[Flag.CARRY] is True


def test_ral(cpu):
    cpu.registers[R.A] = 0x81
    cpu.flags[Flag.CARRY] = True
    handle_ral(cpu, bytes([Opcode.RAL]))
    assert cpu.registers[R.A] == 0x82
    assert cpu.flags[Flag.CARRY] is True