import os
import sys
import logging
import argparse
import platform

from . import __version__
from .support.logging import *
from .image import build_images, write_images
from .arch.fs16 import CONTROL_WORD, MICROCODE


# When running as `-m microrom.cli`, `__name__` is `__main__`, and the real name
# can be retrieved from `__loader__.name`.
logger = logging.getLogger(__loader__.name)


DEFAULT_TEMPLATES = {
    "bin":  "ctrl{index}.bin",
    "ihex": "ctrl{index}.hex",
    "hex":  "ctrl{index}.txt",
}


def version_info():
    python_version = ".".join(map(str, sys.version_info[:3]))
    python_implementation = platform.python_implementation()
    return f"microrom {__version__} ({python_implementation} {python_version})"


def name_template(arg):
    try:
        first, second = arg.format(index=1), arg.format(index=2)
    except (KeyError, IndexError, ValueError) as e:
        raise argparse.ArgumentTypeError(f"{arg} is not a valid file name template ({e!r})")
    if first == second:
        raise argparse.ArgumentTypeError(f"{arg} does not contain '{{index}}'")
    return arg


def create_argparser():
    parser = argparse.ArgumentParser(prog="microrom",
        description="Build the control store ROM images of the fs16 CPU.")

    parser.add_argument(
        "-V", "--version", action="version", version=version_info(),
        help="show version and exit")
    parser.add_argument(
        "-v", "--verbose", default=0, action="count",
        help="increase logging verbosity")
    parser.add_argument(
        "-q", "--quiet", default=0, action="count",
        help="decrease logging verbosity")
    parser.add_argument(
        "-L", "--log-file", metavar="FILE", type=argparse.FileType("w"),
        help="save log messages at highest verbosity to FILE")
    parser.add_argument(
        "--no-shorten", default=False, action="store_true",
        help="do not shorten data dumps in logs")

    subparsers = parser.add_subparsers(dest="action", metavar="COMMAND")
    subparsers.required = True

    p_build = subparsers.add_parser(
        "build", help="build ROM images",
        description="Evaluate the microcode at every address and write one image per ROM.")
    p_build.add_argument(
        "-o", "--output-dir", metavar="DIR", default=".",
        help="write images to DIR (default: current directory)")
    p_build.add_argument(
        "-f", "--format", choices=tuple(DEFAULT_TEMPLATES), default="bin",
        help="image file format (default: %(default)s)")
    p_build.add_argument(
        "-n", "--name", metavar="TEMPLATE", type=name_template, default=None,
        help="image file name, with '{index}' replaced by the ROM number "
             "(default: 'ctrl{index}' with an extension matching the format)")

    p_list = subparsers.add_parser(
        "list", help="list microcode rules",
        description="Print the control word of every assigned opcode.")
    p_list.add_argument(
        "--conditional", default=False, action="store_true",
        help="only list conditional instructions")

    return parser


LOG_COLORS = {
    "TRACE"   : "\033[0m",
    "DEBUG"   : "\033[36m",
    "INFO"    : "\033[1m",
    "WARNING" : "\033[1;33m",
    "ERROR"   : "\033[1;31m",
    "CRITICAL": "\033[1;41m",
}


def parse_colors(overrides):
    """
    Parse a list of color overrides such as ``INFO=32:ERROR=1;35``, as found in
    the ``MICROROM_COLORS`` environment variable, into a map of SGR escape sequences.
    Entries without a ``=`` are ignored.
    """
    colors = {}
    for override in overrides.split(":"):
        level, sep, sgr = override.partition("=")
        if sep:
            colors[level.strip().upper()] = f"\033[{sgr}m"
    return colors


class TerminalFormatter(logging.Formatter):
    def __init__(self, *args, colors=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.colors = dict(LOG_COLORS)
        self.colors.update(colors or {})

    def format(self, record):
        # microrom.arch.fs16 → arch.fs16; the record is shared with the log file handler.
        record = logging.makeLogRecord(record.__dict__)
        if record.name.startswith("microrom."):
            record.name = record.name[len("microrom."):]
        message = super().format(record)
        color = self.colors.get(record.levelname)
        if color is None:
            return message
        return f"{color}{message}\033[0m"


def create_logger():
    root_logger = logging.getLogger()

    term_formatter_args = {"style": "{",
        "fmt": "{levelname[0]:s}: {name:s}: {message:s}"}
    term_handler = logging.StreamHandler()
    if sys.stderr.isatty() and sys.platform != 'win32':
        colors = parse_colors(os.getenv("MICROROM_COLORS", ""))
        term_handler.setFormatter(TerminalFormatter(**term_formatter_args, colors=colors))
    else:
        term_handler.setFormatter(logging.Formatter(**term_formatter_args))
    root_logger.addHandler(term_handler)
    return term_handler


def configure_logger(args, term_handler):
    root_logger = logging.getLogger()

    level = logging.INFO + (args.quiet - args.verbose) * 10
    if level < logging.DEBUG or args.no_shorten:
        dump_hex.limit = None
    term_handler.setLevel(level)

    if args.log_file:
        file_handler = logging.StreamHandler(args.log_file)
        file_handler.setFormatter(logging.Formatter(style="{",
            fmt="[{asctime:s}] {levelname:s}: {name:s}: {message:s}"))
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.TRACE)
    else:
        root_logger.setLevel(level)


def list_rules(microcode, *, conditional_only=False, file=None):
    for opcode, rule in sorted(microcode.rules.items()):
        if conditional_only and not rule.conditional:
            continue
        word = CONTROL_WORD.from_int(rule.word)
        print("{:03x}  {:<16s} {:<4s} {}".format(
              opcode, rule.mnemonic, "cond" if rule.conditional else "",
              word.bits_repr(omit_zero=True)), file=file)


def main(argv=None):
    term_handler = create_logger()

    args = create_argparser().parse_args(argv)
    configure_logger(args, term_handler)

    if args.action == "build":
        template = args.name or DEFAULT_TEMPLATES[args.format]
        logger.debug("NOP: %s", dump_fields(CONTROL_WORD.from_int(MICROCODE.default)))
        logger.debug("SKIP: %s", dump_fields(CONTROL_WORD.from_int(MICROCODE.skip)))
        images = build_images(MICROCODE)
        failed = write_images(images, args.output_dir, template, args.format)
        if failed:
            logger.error("%d of %d images could not be written", len(failed), len(images))
            return 1

    if args.action == "list":
        list_rules(MICROCODE, conditional_only=args.conditional)

    return 0


# This entry point is invoked via `console_scripts` when installing the package.
def run_main():
    exit(main())


# This entry point is invoked when running `python -m microrom.cli`.
if __name__ == "__main__":
    run_main()
