# Introduction
# ------------
#
# _fs16_ is the 16-bit discrete-logic CPU whose control lines are driven by the microcode ROMs
# built by this package. Its control store is single-cycle: every instruction executes in one
# clock, and the control word for that clock is looked up in a set of parallel 8-bit EEPROMs
# addressed by the condition flags and the opcode of the instruction being executed.
#
# This file, together with `signals.py`, `opcode.py` and `rules.py`, defines the wiring
# contract between the ROMs and the board. Renumbering a field or an enumeration value changes
# the wiring, not just the software.
#
# Control store address
# ---------------------
#
#             +----+----+----+----+----+----+---+---+---+---+---+---+---+---+---+
#             | 14 | 13 | 12 | 11 | 10 |  9 | 8 | 7 | 6 | 5 | 4 | 3 | 2 | 1 | 0 |
#             +----+----+----+----+----+----+---+---+---+---+---+---+---+---+---+
#             |    flags     |                      opcode                      |
#             +----+----+----+----+----+----+---+---+---+---+---+---+---+---+---+
#
# The ROMs are 32 KiB (27C256 or 28C256), giving 15 address lines. Flag bit 0 is the output of
# the condition evaluation logic and is high when the condition of the instruction is *not*
# met. Flag bits 1 and 2 are routed to the ROMs but not consulted by the current microcode.
#
# Control word
# ------------
#
# The control word is 64 bits wide, split across eight ROMs; ROM 1 holds bits 7:0, ROM 8 holds
# bits 63:56. See `signals.CONTROL_WORD` for the field layout. Every field is idle at zero,
# except that address bus 1 is driven by PC when its field is zero.
#
# Every control word also fetches the next instruction: PC drives address bus 1, the word read
# is latched into the instruction register (DECODE), and PC is incremented. `NOP` is exactly
# this fetch.
#
# Operand words
# -------------
#
# Instructions with an operand word (LDI, JMP, CALL) consume it in the same cycle they execute:
# the fetched word is routed onto the main bus from FETCH, and SUPPRESS_FETCH makes the
# instruction register decode it as NOP in the next cycle.
#
# These instructions are conditional. When flag bit 0 is high, the instruction is replaced with
# `SKIP`, which is `NOP` with SUPPRESS_FETCH asserted: the operand word is stepped over without
# taking effect.
#
# Instruction set summary
# -----------------------
#
# * 0x000 NOP
# * 0x001 SETC
# * 0x002 CLRC
# * 0x1ds MOV  Rd, Rs
# * 0x2ds ADD  Rd, Rs             (latches CZNV)
# * 0x3ds SUB  Rd, Rs             (latches CZNV)
# * 0x4ds AND  Rd, Rs             (latches ZN)
# * 0x5ds OR   Rd, Rs             (latches ZN)
# * 0x6ds XOR  Rd, Rs             (latches ZN)
# * 0x7ds CMP  Rd, Rs             (latches CZNV)
# * 0x8dn IN   Rd, DEVn
# * 0x9ns OUT  DEVn, Rs
# * 0xAds LD   Rd, [Rs]
# * 0xBds ST   [Rd], Rs
# * 0xC0d LDI  Rd, #imm           (conditional)
# * 0xC10 LDI  SP, #imm           (conditional)
# * 0xC11 JMP  #addr              (conditional)
# * 0xC12 CALL #addr              (conditional)
# * 0xC13 RET
#
# Register fields are 1..15; encodings with a zero register field, and all other opcodes, are
# unassigned and execute as NOP.

from .signals import *
from .opcode import *
from .rules import *
