import enum

from ...support.bitstruct import *


__all__ = [
    # Enumerations
    "Xfer", "Addr", "Bus", "AluOp",
    # Control word
    "CONTROL_WORD",
    # Named control words
    "NOP", "SKIP",
]


class Xfer(enum.IntEnum):
    HOLD = 0b00
    LOAD = 0b01
    INC  = 0b10
    DEC  = 0b11


class Addr(enum.IntEnum):
    PC     = 0b000
    SP     = 0b001
    RA     = 0b010
    INT_PC = 0b011


class Bus(enum.IntEnum):
    NONE      = 0x00
    # General purpose registers; R0 does not exist.
    R1        = 0x01
    R2        = 0x02
    R3        = 0x03
    R4        = 0x04
    R5        = 0x05
    R6        = 0x06
    R7        = 0x07
    R8        = 0x08
    R9        = 0x09
    R10       = 0x0a
    R11       = 0x0b
    R12       = 0x0c
    R13       = 0x0d
    R14       = 0x0e
    R15       = 0x0f
    SP        = 0x10
    RA        = 0x11
    PC        = 0x12
    # Interrupt shadow registers
    INT_PC    = 0x13
    INT_RA    = 0x14
    INT_SP    = 0x15
    INT_FLAGS = 0x16
    FLAGS     = 0x17
    # Device ports
    DEV0      = 0x18
    DEV1      = 0x19
    DEV2      = 0x1a
    DEV3      = 0x1b
    DEV4      = 0x1c
    DEV5      = 0x1d
    DEV6      = 0x1e
    DEV7      = 0x1f
    # Control module ports
    CTL0      = 0x20
    CTL1      = 0x21
    CTL2      = 0x22
    CTL3      = 0x23
    CTL4      = 0x24
    CTL5      = 0x25
    CTL6      = 0x26
    CTL7      = 0x27
    # Sources only
    ALU       = 0x28
    MEM       = 0x29
    FETCH     = 0x2a

    @classmethod
    def reg(cls, index):
        return cls(cls.R1 + index - 1)

    @classmethod
    def dev(cls, index):
        return cls(cls.DEV0 + index)


class AluOp(enum.IntEnum):
    NONE = 0x0
    ADD  = 0x1
    ADC  = 0x2
    SUB  = 0x3
    SBB  = 0x4
    AND  = 0x5
    OR   = 0x6
    XOR  = 0x7
    NOT  = 0x8
    SHL  = 0x9
    SHR  = 0xa
    ROL  = 0xb
    ROR  = 0xc


CONTROL_WORD = bitstruct("CONTROL_WORD", 64, [
    ("PC",              2, Xfer),   # LOAD latches MAIN_BUS
    ("SP",              2, Xfer),   # LOAD latches MAIN_BUS
    ("RA",              2, Xfer),   # LOAD latches the incremented PC
    ("ADDR_BUS_1",      3, Addr),   # instruction memory port
    ("ADDR_BUS_2",      6, Bus),    # data memory port
    ("MAIN_BUS",        6, Bus),
    ("MAIN_LATCH",      6, Bus),
    ("ALU_A",           6, Bus),
    ("ALU_B",           6, Bus),
    ("ALU_OP",          4, AluOp),
    ("LOAD",            1),         # latch MAIN_BUS into MAIN_LATCH
    ("DECODE",          1),         # assert ADDR_BUS_1 word and latch it into IR
    ("SUPPRESS_FETCH",  1),         # decode the latched word as NOP
    ("LATCH_C",         1),
    ("LATCH_Z",         1),
    ("LATCH_N",         1),
    ("LATCH_V",         1),
    ("LATCH_L",         1),
    ("SET_C",           1),
    ("CLR_C",           1),
    ("MEM_WRITE",       1),         # write MAIN_BUS to ADDR_BUS_2
    (None,             10),
])


# Fetch and decode the next instruction. Every other control word includes this.
NOP  = CONTROL_WORD(PC=Xfer.INC, ADDR_BUS_1=Addr.PC, DECODE=1)

# Step over the operand word of a conditional instruction whose condition is not met.
SKIP = NOP | CONTROL_WORD(SUPPRESS_FETCH=1)
