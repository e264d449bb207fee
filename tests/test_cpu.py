import pytest

from invaders8080.cpu import (
    Cpu8080,
    Flag,
    GeneralRegister,
    RegisterPair,
    bytes_to_word,
    is_pair,
    opcode_to_cycles,
    parity,
)


@pytest.fixture
def cpu():
    return Cpu8080(bytes([0x00, 0x00]), 0x10000)


def test_flags_from_byte_all_set_and_cleared(cpu):
    cpu.flags_from_byte(0b11010101)
    assert all(cpu.flags[flag] for flag in Flag)
    cpu.flags_from_byte(0)
    assert not any(cpu.flags[flag] for flag in Flag)


def test_flags_to_byte(cpu):
    for flag in Flag:
        cpu.flags[flag] = True
    assert cpu.flags_to_byte() == 0b11010111
    for flag in Flag:
        cpu.flags[flag] = False
    assert cpu.flags_to_byte() == 0b00000010


def test_flags_round_trip(cpu):
    cpu.flags_from_byte(0b10000101)
    assert cpu.flags_to_byte() == 0b10000111


def test_is_pair_valid():
    assert is_pair(RegisterPair.BC)
    assert is_pair(RegisterPair.DE)
    assert is_pair(RegisterPair.HL)


def test_is_pair_invalid():
    assert not is_pair(RegisterPair.SP)
    assert not is_pair(RegisterPair.PSW)
    assert not is_pair(RegisterPair.PC)


@pytest.mark.parametrize(
    "value,size,expected",
    [
        (0b00000000, 8, True),
        (0b00000001, 8, False),
        (0b00000011, 8, True),
        (0b11111111, 8, True),
        (0b00001111, 4, True),
        (0b00001111, 3, False),
    ],
)
def test_parity(value, size, expected):
    assert parity(value, size) is expected


def test_push_writes_bytes_and_updates_sp(cpu):
    original_sp = cpu.sp
    cpu.push(0x34, 0x12)
    assert cpu.sp == (original_sp - 2) & 0xFFFF
    assert cpu.memory[cpu.sp] == 0x34
    assert cpu.memory[cpu.sp + 1] == 0x12


def test_pop_byte_returns_byte_and_increments_sp(cpu):
    initial_sp = cpu.sp
    cpu.memory[initial_sp] = 0xAB
    assert cpu.pop_byte() == 0xAB
    assert cpu.sp == initial_sp + 1


def test_read_memory(cpu):
    cpu.memory[0x0000] = 0xAA
    cpu.memory[0x1234] = 0x55
    cpu.memory[0xFFFF] = 0xFF
    assert cpu.read_memory(0x0000) == 0xAA
    assert cpu.read_memory(0x1234) == 0x55
    assert cpu.read_memory(0xFFFF) == 0xFF


def test_write_memory(cpu):
    cpu.write_memory(0x2001, 0xAB)
    assert cpu.memory[0x2001] == 0xAB


@pytest.mark.parametrize(
    "low,high,expected",
    [(0x34, 0x12, 0x1234), (0xFF, 0x00, 0x00FF), (0x00, 0xFF, 0xFF00)],
)
def test_bytes_to_word(low, high, expected):
    assert bytes_to_word(low, high) == expected


def test_set_register_pair(cpu):
    cpu.set_register_pair(RegisterPair.BC, 0xABCD)
    assert cpu.registers[GeneralRegister.B] == 0xAB
    assert cpu.registers[GeneralRegister.C] == 0xCD
    cpu.set_register_pair(RegisterPair.DE, 0xABCD)
    assert cpu.registers[GeneralRegister.D] == 0xAB
    assert cpu.registers[GeneralRegister.E] == 0xCD
    cpu.set_register_pair(RegisterPair.HL, 0xABCD)
    assert cpu.registers[GeneralRegister.H] == 0xAB
    assert cpu.registers[GeneralRegister.L] == 0xCD


def test_get_register_pair(cpu):
    cpu.registers[GeneralRegister.B] = 0x12
    cpu.registers[GeneralRegister.C] = 0x34
    assert cpu.get_register_pair(RegisterPair.BC) == 0x1234
    cpu.registers[GeneralRegister.D] = 0xAB
    cpu.registers[GeneralRegister.E] = 0xCD
    assert cpu.get_register_pair(RegisterPair.DE) == 0xABCD
    cpu.registers[GeneralRegister.H] = 0x56
    cpu.registers[GeneralRegister.L] = 0x78
    assert cpu.get_register_pair(RegisterPair.HL) == 0x5678


def test_get_register_pair_invalid(cpu):
    with pytest.raises(ValueError):
        cpu.get_register_pair(RegisterPair.SP)


def test_set_flags(cpu):
    cpu.flags[Flag.CARRY] = False

    cpu.set_flags(0x00)
    assert cpu.flags[Flag.ZERO] is True
    assert cpu.flags[Flag.SIGN] is False
    assert cpu.flags[Flag.PARITY] is True
    assert cpu.flags[Flag.CARRY] is False

    cpu.set_flags(0x80)
    assert cpu.flags[Flag.ZERO] is False
    assert cpu.flags[Flag.SIGN] is True
    assert cpu.flags[Flag.PARITY] is False
    assert cpu.flags[Flag.CARRY] is False

    cpu.set_flags(0xFFF)
    assert cpu.flags[Flag.ZERO] is False
    assert cpu.flags[Flag.SIGN] is True
    assert cpu.flags[Flag.PARITY] is True
    assert cpu.flags[Flag.CARRY] is True

    cpu.set_flags(0b100111101)
    assert cpu.flags[Flag.ZERO] is False
    assert cpu.flags[Flag.SIGN] is False
    assert cpu.flags[Flag.PARITY] is False
    assert cpu.flags[Flag.CARRY] is True


def test_read_pair_address(cpu):
    cpu.set_register_pair(RegisterPair.HL, 0x1234)
    cpu.memory[0x1234] = 0xAB
    assert cpu.read_pair_address(RegisterPair.HL) == 0xAB


def test_write_pair_address(cpu):
    cpu.set_register_pair(RegisterPair.HL, 0x2001)
    cpu.write_pair_address(RegisterPair.HL, 0xCD)
    assert cpu.memory[0x2001] == 0xCD


def test_rst_pushes_pc_and_jumps(cpu):
    cpu.pc = 0x2001
    cpu.sp = 0x2400
    cpu.rst(3)
    assert cpu.sp == 0x2400 - 2
    assert cpu.memory[cpu.sp] == 0x01
    assert cpu.memory[cpu.sp + 1] == 0x20
    assert cpu.pc == 24


def test_generate_interrupt_disables_interrupts(cpu):
    cpu.pc = 0x1234
    cpu.sp = 0x2400
    cpu.interrupt_enable = True
    cpu.generate_interrupt(2)
    assert cpu.pc == 0x10
    assert cpu.interrupt_enable is False
    assert cpu.memory[0x23FE] == 0x34
    assert cpu.memory[0x23FF] == 0x12


def test_push_pair_pop_to_pair_round_trip(cpu):
    cpu.sp = 0x2400
    cpu.set_register_pair(RegisterPair.BC, 0xBEEF)
    cpu.push_pair(RegisterPair.BC)
    cpu.pop_to_pair(RegisterPair.DE)
    assert cpu.get_register_pair(RegisterPair.DE) == 0xBEEF
    assert cpu.sp == 0x2400


def test_init_rejects_oversized_code():
    with pytest.raises(ValueError):
        Cpu8080(bytes(10), 4)


def test_init_copies_code():
    cpu = Cpu8080(bytes([0xC3, 0x12, 0x34]), 0x100)
    assert cpu.next_opcode() == 0xC3
    assert len(cpu.memory) == 0x100
    assert cpu.memory[2] == 0x34


@pytest.mark.parametrize(
    "opcode,cycles",
    [(0x00, 4), (0xD3, 3), (0xDB, 3), (0xCD, 17), (0x76, 7), (0xE3, 18), (0x01, 10)],
)
def test_opcode_to_cycles(opcode, cycles):
    assert opcode_to_cycles(opcode) == cycles


def test_default_ports(cpu):
    assert cpu.read_port(1) == 0
    assert cpu.write_port(3, 5) is None