from ...microcode import Rule, Microcode
from .signals import *
from .opcode import *


__all__ = ["RULES", "MICROCODE"]


def _operand(**fields):
    # Latch the operand word at PC from FETCH, and do not decode it.
    return CONTROL_WORD(ADDR_BUS_1=Addr.PC, DECODE=1, SUPPRESS_FETCH=1,
                        MAIN_BUS=Bus.FETCH, **fields)


def _alu(op, rd, rs, *, write=True, logic=False):
    word = NOP | CONTROL_WORD(ALU_A=Bus.reg(rd), ALU_B=Bus.reg(rs), ALU_OP=op,
                              LATCH_Z=1, LATCH_N=1)
    if not logic:
        word |= CONTROL_WORD(LATCH_C=1, LATCH_V=1)
    if write:
        word |= CONTROL_WORD(MAIN_BUS=Bus.ALU, MAIN_LATCH=Bus.reg(rd), LOAD=1)
    return word


def define_rule(rules, opcode, mnemonic, word):
    """Add the rule for ``opcode`` to ``rules``, which must not define it yet."""
    if opcode in rules:
        raise ValueError("opcode %#05x is defined as both %s and %s"
                         % (opcode, rules[opcode].mnemonic, mnemonic))
    rules[opcode] = Rule(mnemonic, int(word), opcode in CONDITIONAL)


def _build_rules():
    rules = {}

    def define(opcode, mnemonic, word):
        define_rule(rules, opcode, mnemonic, word)

    define(OPCODE_NOP,  "NOP",  NOP)
    define(OPCODE_SETC, "SETC", NOP | CONTROL_WORD(SET_C=1))
    define(OPCODE_CLRC, "CLRC", NOP | CONTROL_WORD(CLR_C=1))

    for rd in REGISTERS:
        for rs in REGISTERS:
            define(R_FORMAT(OPCLASS_MOV, rd, rs), f"MOV R{rd}, R{rs}",
                   NOP | CONTROL_WORD(MAIN_BUS=Bus.reg(rs), MAIN_LATCH=Bus.reg(rd), LOAD=1))

            define(R_FORMAT(OPCLASS_ADD, rd, rs), f"ADD R{rd}, R{rs}",
                   _alu(AluOp.ADD, rd, rs))
            define(R_FORMAT(OPCLASS_SUB, rd, rs), f"SUB R{rd}, R{rs}",
                   _alu(AluOp.SUB, rd, rs))
            define(R_FORMAT(OPCLASS_AND, rd, rs), f"AND R{rd}, R{rs}",
                   _alu(AluOp.AND, rd, rs, logic=True))
            define(R_FORMAT(OPCLASS_OR,  rd, rs), f"OR R{rd}, R{rs}",
                   _alu(AluOp.OR,  rd, rs, logic=True))
            define(R_FORMAT(OPCLASS_XOR, rd, rs), f"XOR R{rd}, R{rs}",
                   _alu(AluOp.XOR, rd, rs, logic=True))
            define(R_FORMAT(OPCLASS_CMP, rd, rs), f"CMP R{rd}, R{rs}",
                   _alu(AluOp.SUB, rd, rs, write=False))

            define(R_FORMAT(OPCLASS_LD, rd, rs), f"LD R{rd}, [R{rs}]",
                   NOP | CONTROL_WORD(ADDR_BUS_2=Bus.reg(rs), MAIN_BUS=Bus.MEM,
                                      MAIN_LATCH=Bus.reg(rd), LOAD=1))
            define(R_FORMAT(OPCLASS_ST, rd, rs), f"ST [R{rd}], R{rs}",
                   NOP | CONTROL_WORD(ADDR_BUS_2=Bus.reg(rd), MAIN_BUS=Bus.reg(rs),
                                      MEM_WRITE=1))

        for port in DEVICES:
            define(R_FORMAT(OPCLASS_IN, rd, port), f"IN R{rd}, DEV{port}",
                   NOP | CONTROL_WORD(MAIN_BUS=Bus.dev(port), MAIN_LATCH=Bus.reg(rd), LOAD=1))
            define(R_FORMAT(OPCLASS_OUT, port, rd), f"OUT DEV{port}, R{rd}",
                   NOP | CONTROL_WORD(MAIN_BUS=Bus.reg(rd), MAIN_LATCH=Bus.dev(port), LOAD=1))

        define(OPCODE_LDI | rd, f"LDI R{rd}, #imm",
               _operand(PC=Xfer.INC, MAIN_LATCH=Bus.reg(rd), LOAD=1))

    define(OPCODE_LDI_SP, "LDI SP, #imm", _operand(PC=Xfer.INC, SP=Xfer.LOAD))
    define(OPCODE_JMP,    "JMP #addr",    _operand(PC=Xfer.LOAD))
    define(OPCODE_CALL,   "CALL #addr",   _operand(PC=Xfer.LOAD, RA=Xfer.LOAD))
    # The word fetched alongside RET is not the return target, so it is discarded.
    define(OPCODE_RET,    "RET",
           CONTROL_WORD(ADDR_BUS_1=Addr.PC, DECODE=1, SUPPRESS_FETCH=1,
                        MAIN_BUS=Bus.RA, PC=Xfer.LOAD))

    return rules


RULES = _build_rules()

MICROCODE = Microcode(LAYOUT, CONTROL_WORD.bit_length(), RULES, default=NOP, skip=SKIP)
