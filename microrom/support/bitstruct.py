import sys
import enum
import types
import textwrap
from collections import OrderedDict


__all__ = ["bitstruct"]


class _bitstruct:
    __slots__ = ()

    @staticmethod
    def _check_int_(action, expected_width, value):
        if not isinstance(value, int):
            raise TypeError("%s requires an integer, got %r"
                            % (action, value))
        if value < 0:
            raise ValueError("%s requires a non-negative integer, got %d"
                             % (action, value))
        if value.bit_length() > expected_width:
            raise ValueError("%s requires a %d-bit integer, got %d-bit (%d)"
                             % (action, expected_width, value.bit_length(), value))

    @staticmethod
    def _check_enum_(action, expected_enum, value):
        if isinstance(value, enum.Enum) and not isinstance(value, expected_enum):
            raise TypeError("%s requires a member of %s, got %r"
                            % (action, expected_enum.__name__, value))

    @staticmethod
    def _check_bytes_(action, expected_length, value):
        assert isinstance(value, (bytes, bytearray, memoryview))
        if len(value) != expected_length:
            raise ValueError("%s requires %d bytes, got %d bytes (%s)"
                             % (action, expected_length, len(value), bytes(value).hex()))

    @staticmethod
    def _define_fields_(cls, declared_bits, fields):
        total_bits = sum(field[1] for field in fields)
        if total_bits != declared_bits:
            raise TypeError("declared width is %d bits, but sum of field widths is %d bits"
                            % (declared_bits, total_bits))

        cls["_size_bits_"]    = declared_bits
        cls["_size_bytes_"]   = (declared_bits + 7) // 8
        cls["_named_fields_"] = []
        cls["_layout_"]       = OrderedDict()
        cls["_enums_"]        = {}

        offset = 0
        for name, width, *field_enum in fields:
            if width < 1:
                raise TypeError("field %s must be at least 1 bit wide, not %d"
                                % (name, width))
            if name is None:
                name = "padding_%d" % offset
            elif name in cls["_layout_"]:
                raise TypeError("field %s is declared more than once" % name)
            else:
                cls["_named_fields_"].append(name)
            if field_enum:
                field_enum, = field_enum
                for member in field_enum:
                    if member.value < 0 or member.value.bit_length() > width:
                        raise TypeError("%s.%s does not fit in %d-bit field %s"
                                        % (field_enum.__name__, member.name, width, name))
                cls["_enums_"][name] = field_enum
            cls["_layout_"][name] = (offset, width)
            offset += width

        cls["__slots__"] = ("_assigned_",) + tuple(f"_f_{field}" for field in cls["_layout_"])

        code = textwrap.dedent(f"""
        def __init__(self, {", ".join(f"{field}=None" for field in cls["_named_fields_"])}):
            self._assigned_ = set()
            {"; ".join(f"self._f_{field} = 0" for field in cls["_layout_"])}
            for name, value in [{", ".join(f"('{field}', {field})"
                                           for field in cls["_named_fields_"])}]:
                if value is not None:
                    setattr(self, name, value)

        @classmethod
        def from_int(cls, value):
            cls._check_int_("initialization", cls._size_bits_, value)
            self = object.__new__(cls)
            {"; ".join(f"self._f_{field} = (value >> {offset}) & {(1 << width) - 1:#x}"
                       for field, (offset, width) in cls["_layout_"].items())}
            self._assigned_ = self._nonzero_fields_()
            return self

        def to_int(self):
            value = 0
            {"; ".join(f"value |= self._f_{field} << {offset}"
                       for field, (offset, width) in cls["_layout_"].items())}
            return value
        """)

        for field, (offset, width) in cls["_layout_"].items():
            if field in cls["_enums_"]:
                code += textwrap.dedent(f"""
                @property
                def {field}(self):
                    return self._enum_value_("{field}", self._f_{field})

                @{field}.setter
                def {field}(self, value):
                    self._check_enum_("field assignment", self._enums_["{field}"], value)
                    self._check_int_("field assignment", {width}, value)
                    self._f_{field} = int(value)
                    self._assigned_.add("{field}")
                """)
            else:
                code += textwrap.dedent(f"""
                @property
                def {field}(self):
                    return self._f_{field}

                @{field}.setter
                def {field}(self, value):
                    self._check_int_("field assignment", {width}, value)
                    self._f_{field} = int(value)
                    self._assigned_.add("{field}")
                """)

        methods = {}
        exec(code, globals(), methods)
        for name, method in methods.items():
            cls[name] = method

    def _enum_value_(self, field, value):
        field_enum = self._enums_[field]
        try:
            return field_enum(value)
        except ValueError:
            # Reserved encodings are kept as plain integers.
            return value

    @classmethod
    def from_bytes(cls, value):
        cls._check_bytes_("initialization", cls._size_bytes_, value)
        return cls.from_int(int.from_bytes(value, "little"))

    @classmethod
    def bit_length(cls):
        return cls._size_bits_

    @classmethod
    def fields(cls):
        return list(cls._named_fields_)

    @classmethod
    def field_range(cls, name):
        """Return the ``(offset, width)`` of the field ``name``."""
        return cls._layout_[name]

    def __int__(self):
        return self.to_int()

    __index__ = __int__

    def to_bytes(self):
        return self.to_int().to_bytes(self._size_bytes_, "little")

    __bytes__ = to_bytes

    def _nonzero_fields_(self):
        return {name for name in self._named_fields_ if getattr(self, f"_f_{name}")}

    def assigned_fields(self):
        """
        Return the names of the fields that were assigned, explicitly or by merging.

        A field assigned zero counts as assigned, since zero may be a meaningful encoding.
        A structure created from an integer treats its non-zero fields as assigned.
        """
        return frozenset(self._assigned_)

    def copy(self):
        result = self.__class__.from_int(self.to_int())
        result._assigned_ = set(self._assigned_)
        return result

    def __or__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        result = self.copy()
        for name in self._named_fields_:
            if name not in other._assigned_:
                continue
            ours, theirs = getattr(self, f"_f_{name}"), getattr(other, f"_f_{name}")
            if name in self._assigned_ and ours != theirs:
                raise ValueError("conflicting values for field %s: %r and %r"
                                 % (name, getattr(self, name), getattr(other, name)))
            setattr(result, f"_f_{name}", theirs)
        result._assigned_ |= other._assigned_
        return result

    def bits_repr(self, omit_zero=False, omit_padding=True):
        fields = []
        if omit_padding:
            names = self._named_fields_
        else:
            names = self._layout_.keys()

        for name in names:
            offset, width = self._layout_[name]
            value = getattr(self, name)
            if omit_zero and value == 0:
                continue

            if isinstance(value, enum.Enum):
                fields.append("{}={}".format(name, value.name))
            else:
                fields.append("{}={:0{}b}".format(name, value, width))

        return " ".join(fields)

    def __repr__(self):
        return f"<{self.__module__}.{self.__class__.__name__} {self.bits_repr()}>"

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.to_int() == other.to_int()


def bitstruct(name, size_bits, fields):
    """
    Define a fixed-width bit field structure.

    ``fields`` is a list of ``(name, width)`` or ``(name, width, enum)`` tuples, starting at
    the least significant bit. A ``None`` name declares padding, which always reads as zero.
    Fields with an ``enum.IntEnum`` only accept members of that enumeration (or plain integers
    that fit the field), and read back as enumeration members.

    Two structures of the same type combine with ``|``. A field assigned on both sides must
    have the same value on both sides, even if one of them is zero, or ``ValueError`` is raised.
    """
    mod = sys._getframe(1).f_globals["__name__"] # see namedtuple()

    cls = types.new_class(name, (_bitstruct,),
        exec_body=lambda ns: _bitstruct._define_fields_(ns, size_bits, fields))
    cls.__module__ = mod

    return cls
