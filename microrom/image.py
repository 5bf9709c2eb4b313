import logging
from pathlib import Path

import crcmod.predefined
from fx2.format import output_data

from .support.logging import *


__all__ = [
    "RomImageError",
    "build_table", "slice_planes", "build_images", "image_crc",
    "image_path", "write_image", "write_images",
]


logger = logging.getLogger(__name__)


_crc32 = crcmod.predefined.mkCrcFun("crc-32")


class RomImageError(Exception):
    pass


def build_table(microcode):
    """Evaluate ``microcode`` at every address of its control store."""
    return [microcode.encode(address) for address in range(microcode.layout.rom_size)]


def slice_planes(table, plane_count):
    """
    Split a control word table into byte planes. Plane 0 holds the least significant byte
    of every control word, in address order.
    """
    data = b"".join(word.to_bytes(plane_count, "little") for word in table)
    return [data[index::plane_count] for index in range(plane_count)]


def build_images(microcode):
    table  = build_table(microcode)
    images = slice_planes(table, microcode.plane_count)
    logger.debug("built %d images of %d bytes", len(images), microcode.layout.rom_size)
    return images


def image_crc(image):
    return _crc32(image)


def image_path(directory, template, index):
    return Path(directory) / template.format(index=index)


def write_image(path, image, fmt="bin"):
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as file:
            output_data(file, image, fmt=fmt)
    except OSError as e:
        raise RomImageError("cannot write ROM image {}: {}"
                            .format(path, e.strerror or e)) from e


def write_images(images, directory=".", template="ctrl{index}.bin", fmt="bin"):
    """
    Write each of ``images`` to ``directory``, naming them by ``template`` with a 1-based
    ``index`` (least significant plane first). A plane that cannot be written is reported and
    skipped; the remaining planes are still written.

    Returns the list of paths that could not be written.
    """
    failed = []
    for index, image in enumerate(images, start=1):
        path = image_path(directory, template, index)
        logger.trace("plane %d: %s", index, dump_hex(image))
        try:
            write_image(path, image, fmt)
        except RomImageError as e:
            logger.error("%s", e)
            failed.append(path)
            continue
        logger.info("wrote plane %d to %s (%d bytes, CRC-32 %08x)",
                    index, path, len(image), image_crc(image))
    return failed
