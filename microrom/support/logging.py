__all__ = ["lazy", "dump_hex", "dump_fields"]


class lazy:
    """
    A wrapper for lazily formatting a log message argument.

    E.g. ``logger.trace("table: %s", lazy(lambda: slow_format(table)))`` only calls
    ``slow_format`` when the message is actually emitted.
    """

    __slots__ = ("_thunk_",)

    def __init__(self, thunk):
        self._thunk_ = thunk

    def __str__(self):
        return str(self._thunk_())

    def __repr__(self):
        return f"<lazy {self._thunk_!r}>"


def dump_hex(data):
    def to_hex(data):
        data = memoryview(data)
        if dump_hex.limit is None or len(data) < dump_hex.limit:
            return data.hex()
        else:
            return "{}... ({} bytes total)".format(
                data[:dump_hex.limit].hex(), len(data))
    return lazy(lambda: to_hex(data))

dump_hex.limit = 64


def dump_fields(word):
    return lazy(lambda: word.bits_repr(omit_zero=True) or "(idle)")
