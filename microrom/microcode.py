import types
import logging
import operator
from collections import namedtuple


__all__ = ["Rule", "Microcode"]


logger = logging.getLogger(__name__)


Rule = namedtuple("Rule", ("mnemonic", "word", "conditional"))


class Microcode:
    """
    Control store contents, as a pure function of the control store address.

    ``rules`` maps opcodes to :class:`Rule` tuples. The ``word`` of a rule is the control word
    asserted when its condition is met; a conditional rule whose condition is not met asserts
    ``skip`` instead. Opcodes without a rule assert ``default``.
    """

    def __init__(self, layout, word_width, rules, *, default, skip):
        self._layout     = layout
        self._word_width = operator.index(word_width)
        self._default    = Rule("NOP", self._check_word("default", default), False)
        self._skip       = self._check_word("skip", skip)

        checked_rules = {}
        for opcode, rule in rules.items():
            if opcode not in range(1 << layout.opcode_width):
                raise ValueError("opcode {:#x} of {} does not fit in {} bits"
                                 .format(opcode, rule.mnemonic, layout.opcode_width))
            checked_rules[opcode] = Rule(rule.mnemonic,
                self._check_word(rule.mnemonic, rule.word), bool(rule.conditional))
        self._rules = types.MappingProxyType(checked_rules)

        logger.debug("microcode: %d rules (%d conditional) for %d opcodes, %d-bit words",
                     len(self._rules), sum(rule.conditional for rule in self._rules.values()),
                     1 << layout.opcode_width, self._word_width)

    def _check_word(self, what, word):
        word = operator.index(word)
        if word < 0 or word.bit_length() > self._word_width:
            raise ValueError("control word {:#x} of {} does not fit in {} bits"
                             .format(word, what, self._word_width))
        return word

    @property
    def layout(self):
        return self._layout

    @property
    def word_width(self):
        return self._word_width

    @property
    def plane_count(self):
        return (self._word_width + 7) // 8

    @property
    def rules(self):
        return self._rules

    @property
    def default(self):
        return self._default.word

    @property
    def skip(self):
        return self._skip

    def rule(self, opcode):
        return self._rules.get(opcode, self._default)

    def encode(self, address):
        flags, opcode = self._layout.decompose(address)
        rule = self._rules.get(opcode, self._default)
        if rule.conditional and not self._layout.condition_met(flags):
            return self._skip
        return rule.word

    __call__ = encode
