from ...address import AddressLayout


__all__ = [
    "ROM_SIZE", "OPCODE_WIDTH", "FLAG_COND_FAIL", "LAYOUT",
    "REGISTERS", "DEVICES", "R_FORMAT",
    "OPCLASS_MOV", "OPCLASS_ADD", "OPCLASS_SUB", "OPCLASS_AND", "OPCLASS_OR", "OPCLASS_XOR",
    "OPCLASS_CMP", "OPCLASS_IN", "OPCLASS_OUT", "OPCLASS_LD", "OPCLASS_ST",
    "OPCODE_NOP", "OPCODE_SETC", "OPCODE_CLRC",
    "OPCODE_LDI", "OPCODE_LDI_SP", "OPCODE_JMP", "OPCODE_CALL", "OPCODE_RET",
    "CONDITIONAL",
]


ROM_SIZE       = 1024 * 32
OPCODE_WIDTH   = 12
FLAG_COND_FAIL = 0          # high when the condition of the current instruction is not met

LAYOUT = AddressLayout(ROM_SIZE, OPCODE_WIDTH, condition_bit=FLAG_COND_FAIL)


REGISTERS = range(1, 16)
DEVICES   = range(8)


def R_FORMAT(opclass, rd, rs):
    assert opclass in range(16) and rd in range(16) and rs in range(16)
    return (opclass << 8) | (rd << 4) | rs


OPCLASS_MOV   = 0x1
OPCLASS_ADD   = 0x2
OPCLASS_SUB   = 0x3
OPCLASS_AND   = 0x4
OPCLASS_OR    = 0x5
OPCLASS_XOR   = 0x6
OPCLASS_CMP   = 0x7
OPCLASS_IN    = 0x8         # rs field is the device port
OPCLASS_OUT   = 0x9         # rd field is the device port
OPCLASS_LD    = 0xa
OPCLASS_ST    = 0xb

OPCODE_NOP    = 0x000
OPCODE_SETC   = 0x001
OPCODE_CLRC   = 0x002
OPCODE_LDI    = 0xc00       # | rd
OPCODE_LDI_SP = 0xc10
OPCODE_JMP    = 0xc11
OPCODE_CALL   = 0xc12
OPCODE_RET    = 0xc13


# Instructions followed by an operand word. When their condition is not met, the operand
# word must be stepped over instead of being decoded.
CONDITIONAL = frozenset([
    *(OPCODE_LDI | rd for rd in REGISTERS),
    OPCODE_LDI_SP,
    OPCODE_JMP,
    OPCODE_CALL,
])
