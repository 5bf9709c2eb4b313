import operator


__all__ = ["AddressLayout"]


class AddressLayout:
    """
    Partition of a control store address into condition flags and an opcode.

    The opcode occupies the ``opcode_width`` least significant address bits, and the flags
    occupy all of the remaining (most significant) bits. When ``condition_bit`` is not ``None``,
    that bit of the flags is the output of the condition evaluation logic; with
    ``condition_inverted`` (the default) a ``1`` in that position means the condition is *not*
    met. When ``condition_bit`` is ``None``, the condition is always considered met.
    """

    def __init__(self, rom_size, opcode_width, *, condition_bit=None, condition_inverted=True):
        rom_size     = operator.index(rom_size)
        opcode_width = operator.index(opcode_width)
        if rom_size < 2 or rom_size & (rom_size - 1):
            raise ValueError("ROM size must be a power of two, not {}"
                             .format(rom_size))

        address_width = rom_size.bit_length() - 1
        if opcode_width not in range(1, address_width + 1):
            raise ValueError("opcode width must be between 1 and {} bits, not {}"
                             .format(address_width, opcode_width))

        flags_width = address_width - opcode_width
        if condition_bit is not None and condition_bit not in range(flags_width):
            raise ValueError("condition bit {} is outside of the {}-bit flags field"
                             .format(condition_bit, flags_width))

        self._rom_size           = rom_size
        self._opcode_width       = opcode_width
        self._flags_width        = flags_width
        self._condition_bit      = condition_bit
        self._condition_inverted = bool(condition_inverted)

    @property
    def rom_size(self):
        return self._rom_size

    @property
    def address_width(self):
        return self._opcode_width + self._flags_width

    @property
    def opcode_width(self):
        return self._opcode_width

    @property
    def flags_width(self):
        return self._flags_width

    @property
    def condition_bit(self):
        return self._condition_bit

    def decompose(self, address):
        """Split ``address`` into a ``(flags, opcode)`` pair."""
        if address not in range(self._rom_size):
            raise ValueError("address {:#x} is outside of the {}-byte ROM"
                             .format(address, self._rom_size))
        return (address >> self._opcode_width,
                address & ((1 << self._opcode_width) - 1))

    def compose(self, flags, opcode):
        if flags not in range(1 << self._flags_width):
            raise ValueError("flags {:#x} do not fit in {} bits"
                             .format(flags, self._flags_width))
        if opcode not in range(1 << self._opcode_width):
            raise ValueError("opcode {:#x} does not fit in {} bits"
                             .format(opcode, self._opcode_width))
        return (flags << self._opcode_width) | opcode

    def condition_met(self, flags):
        if self._condition_bit is None:
            return True
        condition = (flags >> self._condition_bit) & 1
        if self._condition_inverted:
            return condition == 0
        else:
            return condition == 1

    def flag_values(self):
        return range(1 << self._flags_width)

    def __repr__(self):
        return ("AddressLayout(rom_size={}, opcode_width={}, flags_width={}, condition_bit={})"
                .format(self._rom_size, self._opcode_width, self._flags_width,
                        self._condition_bit))
