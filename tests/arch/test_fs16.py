import unittest

from microrom.arch.fs16 import *
from microrom.arch.fs16.rules import define_rule


class Fs16SignalsTestCase(unittest.TestCase):
    def test_layout(self):
        self.assertEqual(CONTROL_WORD.bit_length(), 64)
        self.assertEqual(CONTROL_WORD.field_range("PC"), (0, 2))
        self.assertEqual(CONTROL_WORD.field_range("ADDR_BUS_1"), (6, 3))
        self.assertEqual(CONTROL_WORD.field_range("MAIN_BUS"), (15, 6))
        self.assertEqual(CONTROL_WORD.field_range("LOAD"), (43, 1))
        self.assertEqual(CONTROL_WORD.field_range("DECODE"), (44, 1))
        self.assertEqual(CONTROL_WORD.field_range("SUPPRESS_FETCH"), (45, 1))
        self.assertEqual(CONTROL_WORD.field_range("MEM_WRITE"), (53, 1))

    def test_fields_disjoint(self):
        covered = 0
        for name in CONTROL_WORD.fields():
            offset, width = CONTROL_WORD.field_range(name)
            mask = ((1 << width) - 1) << offset
            self.assertEqual(covered & mask, 0, name)
            covered |= mask
        self.assertLess(covered, 1 << 64)

    def test_nop(self):
        self.assertEqual(int(NOP), (0b10 << 0) | (1 << 44))
        self.assertEqual(NOP.ADDR_BUS_1, Addr.PC)
        self.assertEqual(NOP.PC, Xfer.INC)

    def test_skip(self):
        self.assertEqual(int(SKIP), int(NOP) | (1 << 45))

    def test_conflicting_address_bus(self):
        # Addr.PC is encoded as zero, but NOP still selects it.
        with self.assertRaisesRegex(ValueError, r"conflicting values for field ADDR_BUS_1"):
            NOP | CONTROL_WORD(ADDR_BUS_1=Addr.SP)
        with self.assertRaisesRegex(ValueError, r"conflicting values for field ADDR_BUS_1"):
            CONTROL_WORD(ADDR_BUS_1=Addr.RA) | NOP

    def test_same_address_bus(self):
        self.assertEqual(NOP | CONTROL_WORD(ADDR_BUS_1=Addr.PC), NOP)

    def test_bus(self):
        self.assertEqual(len(Bus), 43)
        self.assertIs(Bus.reg(1), Bus.R1)
        self.assertIs(Bus.reg(15), Bus.R15)
        self.assertIs(Bus.dev(7), Bus.DEV7)


class Fs16OpcodeTestCase(unittest.TestCase):
    def test_layout(self):
        self.assertEqual(LAYOUT.rom_size, ROM_SIZE)
        self.assertEqual(LAYOUT.opcode_width, 12)
        self.assertEqual(LAYOUT.flags_width, 3)
        self.assertEqual(LAYOUT.condition_bit, FLAG_COND_FAIL)

    def test_r_format(self):
        self.assertEqual(R_FORMAT(OPCLASS_MOV, 1, 2), 0x112)
        self.assertEqual(R_FORMAT(OPCLASS_ST, 15, 3), 0xbf3)

    def test_conditional(self):
        self.assertIn(OPCODE_LDI | 1, CONDITIONAL)
        self.assertIn(OPCODE_JMP, CONDITIONAL)
        self.assertNotIn(OPCODE_LDI, CONDITIONAL)
        self.assertNotIn(OPCODE_RET, CONDITIONAL)
        self.assertNotIn(OPCODE_SETC, CONDITIONAL)


class Fs16MicrocodeTestCase(unittest.TestCase):
    def encode(self, flags, opcode):
        return MICROCODE.encode(LAYOUT.compose(flags, opcode))

    def decode(self, word):
        return CONTROL_WORD.from_int(word)

    def test_total(self):
        for address in range(ROM_SIZE):
            word = MICROCODE.encode(address)
            self.assertIn(word, range(1 << 64))

    def test_unmapped(self):
        for opcode in (0x003, 0x100, 0x808, 0x9f1, 0xc00, 0xc14, 0xfff):
            self.assertNotIn(opcode, RULES)
            for flags in LAYOUT.flag_values():
                self.assertEqual(self.encode(flags, opcode), int(NOP))

    def test_rules_consistent(self):
        for opcode, rule in RULES.items():
            self.assertEqual(rule.conditional, opcode in CONDITIONAL, rule.mnemonic)
            self.assertEqual(self.decode(rule.word).DECODE, 1, rule.mnemonic)
        self.assertEqual(set(CONDITIONAL) - set(RULES), set())

    def test_conditional_suppression(self):
        for opcode in CONDITIONAL:
            base = RULES[opcode].word
            for flags in LAYOUT.flag_values():
                if flags & (1 << FLAG_COND_FAIL):
                    self.assertEqual(self.encode(flags, opcode),
                                     int(NOP | CONTROL_WORD(SUPPRESS_FETCH=1)))
                else:
                    self.assertEqual(self.encode(flags, opcode), base)

    def test_unconditional_invariance(self):
        for opcode, rule in RULES.items():
            if rule.conditional:
                continue
            for flags in LAYOUT.flag_values():
                self.assertEqual(self.encode(flags, opcode), rule.word)

    def test_setc(self):
        word = self.decode(RULES[OPCODE_SETC].word)
        self.assertEqual(word, NOP | CONTROL_WORD(SET_C=1))
        self.assertEqual(word.CLR_C, 0)

    def test_mov(self):
        word = self.decode(RULES[R_FORMAT(OPCLASS_MOV, 3, 7)].word)
        self.assertEqual(RULES[R_FORMAT(OPCLASS_MOV, 3, 7)].mnemonic, "MOV R3, R7")
        self.assertIs(word.MAIN_BUS, Bus.R7)
        self.assertIs(word.MAIN_LATCH, Bus.R3)
        self.assertEqual(word.LOAD, 1)
        self.assertIs(word.PC, Xfer.INC)

    def test_ldi(self):
        word = self.decode(self.encode(0b110, OPCODE_LDI | 1))
        self.assertIs(word.ADDR_BUS_1, Addr.PC)
        self.assertIs(word.MAIN_BUS, Bus.FETCH)
        self.assertIs(word.MAIN_LATCH, Bus.R1)
        self.assertEqual(word.LOAD, 1)
        self.assertEqual(word.SUPPRESS_FETCH, 1)
        self.assertIs(word.PC, Xfer.INC)

    def test_jmp(self):
        word = self.decode(self.encode(0, OPCODE_JMP))
        self.assertIs(word.PC, Xfer.LOAD)
        self.assertIs(word.MAIN_BUS, Bus.FETCH)
        self.assertEqual(word.SUPPRESS_FETCH, 1)

    def test_call(self):
        word = self.decode(self.encode(0, OPCODE_CALL))
        self.assertIs(word.PC, Xfer.LOAD)
        self.assertIs(word.RA, Xfer.LOAD)

    def test_alu(self):
        word = self.decode(RULES[R_FORMAT(OPCLASS_ADD, 2, 5)].word)
        self.assertIs(word.ALU_OP, AluOp.ADD)
        self.assertIs(word.ALU_A, Bus.R2)
        self.assertIs(word.ALU_B, Bus.R5)
        self.assertIs(word.MAIN_BUS, Bus.ALU)
        self.assertIs(word.MAIN_LATCH, Bus.R2)
        self.assertEqual((word.LATCH_C, word.LATCH_Z, word.LATCH_N, word.LATCH_V), (1, 1, 1, 1))

        word = self.decode(RULES[R_FORMAT(OPCLASS_XOR, 2, 5)].word)
        self.assertEqual((word.LATCH_C, word.LATCH_Z, word.LATCH_N, word.LATCH_V), (0, 1, 1, 0))

        word = self.decode(RULES[R_FORMAT(OPCLASS_CMP, 2, 5)].word)
        self.assertIs(word.ALU_OP, AluOp.SUB)
        self.assertEqual(word.LOAD, 0)
        self.assertIs(word.MAIN_BUS, Bus.NONE)

    def test_io(self):
        word = self.decode(RULES[R_FORMAT(OPCLASS_IN, 4, 6)].word)
        self.assertEqual(RULES[R_FORMAT(OPCLASS_IN, 4, 6)].mnemonic, "IN R4, DEV6")
        self.assertIs(word.MAIN_BUS, Bus.DEV6)
        self.assertIs(word.MAIN_LATCH, Bus.R4)

        word = self.decode(RULES[R_FORMAT(OPCLASS_OUT, 6, 4)].word)
        self.assertEqual(RULES[R_FORMAT(OPCLASS_OUT, 6, 4)].mnemonic, "OUT DEV6, R4")
        self.assertIs(word.MAIN_BUS, Bus.R4)
        self.assertIs(word.MAIN_LATCH, Bus.DEV6)

    def test_memory(self):
        word = self.decode(RULES[R_FORMAT(OPCLASS_LD, 1, 2)].word)
        self.assertIs(word.ADDR_BUS_2, Bus.R2)
        self.assertIs(word.MAIN_BUS, Bus.MEM)
        self.assertIs(word.MAIN_LATCH, Bus.R1)

        word = self.decode(RULES[R_FORMAT(OPCLASS_ST, 1, 2)].word)
        self.assertIs(word.ADDR_BUS_2, Bus.R1)
        self.assertIs(word.MAIN_BUS, Bus.R2)
        self.assertEqual(word.MEM_WRITE, 1)
        self.assertEqual(word.LOAD, 0)

    def test_rule_count(self):
        self.assertEqual(len(RULES), 3 + 9 * 15 * 15 + 2 * 15 * 8 + 15 + 4)

    def test_define_rule(self):
        rules = {}
        define_rule(rules, OPCODE_JMP, "JMP #addr", NOP)
        self.assertEqual(rules[OPCODE_JMP], ("JMP #addr", int(NOP), True))
        define_rule(rules, OPCODE_SETC, "SETC", NOP)
        self.assertFalse(rules[OPCODE_SETC].conditional)

    def test_define_rule_twice(self):
        rules = {}
        define_rule(rules, OPCODE_SETC, "SETC", NOP)
        with self.assertRaisesRegex(ValueError,
                r"opcode 0x001 is defined as both SETC and CLRC"):
            define_rule(rules, OPCODE_SETC, "CLRC", NOP)
        self.assertEqual(rules[OPCODE_SETC].mnemonic, "SETC")
