"""Minimal reader and writer for single-channel 32-bit unsigned TIFF images."""

from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

_UINT32_MAX = 0xFFFFFFFF

# Baseline tag numbers.
_IMAGE_WIDTH = 256
_IMAGE_LENGTH = 257
_BITS_PER_SAMPLE = 258
_COMPRESSION = 259
_PHOTOMETRIC = 262
_STRIP_OFFSETS = 273
_ORIENTATION = 274
_SAMPLES_PER_PIXEL = 277
_ROWS_PER_STRIP = 278
_STRIP_BYTE_COUNTS = 279
_PLANAR_CONFIG = 284
_SAMPLE_FORMAT = 339

_SHORT = 3
_LONG = 4

_COMPRESSION_NONE = 1
_PHOTOMETRIC_MINISBLACK = 1
_ORIENTATION_TOPLEFT = 1
_PLANARCONFIG_CONTIG = 1
_SAMPLEFORMAT_UINT = 1

# Field types whose values can be decoded into integers.
_INT_TYPE_FORMATS = {1: "B", 3: "H", 4: "I", 6: "b", 8: "h", 9: "i"}
# Byte size of every baseline field type, so unknown entries can be skipped.
_TYPE_SIZES = {1: 1, 2: 1, 3: 2, 4: 4, 5: 8, 6: 1, 7: 1, 8: 2, 9: 4,
               10: 8, 11: 4, 12: 8}


class TiffError(ValueError):
    """The image cannot be written, or the file is not a supported TIFF."""


def _as_uint32_image(image) -> np.ndarray:
    array = np.asarray(image)
    if array.ndim != 2:
        raise TiffError(f"image must be two-dimensional, got {array.ndim} dimensions")
    if array.size == 0:
        raise TiffError("image must not be empty")
    if array.dtype.kind not in "iu":
        raise TiffError(f"image must hold integers, got dtype {array.dtype}")
    if array.dtype.kind == "i" and array.min() < 0:
        raise TiffError("image values must not be negative")
    if int(array.max()) > _UINT32_MAX:
        raise TiffError("image values must fit in 32 bits")
    return array.astype("<u4")


def _entry(tag: int, field_type: int, value: int) -> bytes:
    if field_type == _SHORT:
        return struct.pack("<HHIH2x", tag, field_type, 1, value)
    return struct.pack("<HHII", tag, field_type, 1, value)


def write_tiff_uint32(path, image) -> None:
    """Write a 2-D integer image as an uncompressed 32-bit grayscale TIFF.

    Rows run top to bottom; the whole image is stored as one strip.
    """
    pixels = _as_uint32_image(image)
    height, width = pixels.shape
    data = pixels.tobytes()

    data_offset = 8
    ifd_offset = data_offset + len(data)
    entries = sorted(
        [
            (_IMAGE_WIDTH, _LONG, width),
            (_IMAGE_LENGTH, _LONG, height),
            (_BITS_PER_SAMPLE, _SHORT, 32),
            (_COMPRESSION, _SHORT, _COMPRESSION_NONE),
            (_PHOTOMETRIC, _SHORT, _PHOTOMETRIC_MINISBLACK),
            (_STRIP_OFFSETS, _LONG, data_offset),
            (_ORIENTATION, _SHORT, _ORIENTATION_TOPLEFT),
            (_SAMPLES_PER_PIXEL, _SHORT, 1),
            (_ROWS_PER_STRIP, _LONG, height),
            (_STRIP_BYTE_COUNTS, _LONG, len(data)),
            (_PLANAR_CONFIG, _SHORT, _PLANARCONFIG_CONTIG),
            (_SAMPLE_FORMAT, _SHORT, _SAMPLEFORMAT_UINT),
        ]
    )

    ifd = b"".join(
        [
            struct.pack("<H", len(entries)),
            *(_entry(*entry) for entry in entries),
            struct.pack("<I", 0),
        ]
    )
    header = b"II" + struct.pack("<HI", 42, ifd_offset)

    with open(path, "wb") as handle:
        handle.write(header)
        handle.write(data)
        handle.write(ifd)


def _read_ifd(data: bytes, order: str, offset: int) -> dict[int, tuple[int, ...]]:
    (count,) = struct.unpack_from(order + "H", data, offset)
    tags: dict[int, tuple[int, ...]] = {}
    position = offset + 2
    for _ in range(count):
        tag, field_type, n, raw = struct.unpack_from(order + "HHI4s", data, position)
        position += 12
        size = _TYPE_SIZES.get(field_type)
        fmt = _INT_TYPE_FORMATS.get(field_type)
        if size is None or fmt is None:
            continue
        length = size * n
        if length <= 4:
            buffer = raw[:length]
        else:
            (value_offset,) = struct.unpack(order + "I", raw)
            buffer = data[value_offset:value_offset + length]
            if len(buffer) != length:
                raise TiffError(f"tag {tag} points outside the file")
        tags[tag] = struct.unpack(order + fmt * n, buffer)
    return tags


def _single(tags: dict[int, tuple[int, ...]], tag: int, default: int | None) -> int:
    values = tags.get(tag)
    if values is None:
        if default is None:
            raise TiffError(f"required tag {tag} is missing")
        return default
    if not values:
        raise TiffError(f"tag {tag} holds no value")
    return values[0]


def read_tiff_uint32(path) -> np.ndarray:
    """Read the first image of an uncompressed 32-bit grayscale TIFF.

    Returns an array of dtype ``uint32`` with shape ``(height, width)``.
    """
    data = Path(path).read_bytes()
    if len(data) < 8:
        raise TiffError("file is too short to be a TIFF")

    marker = data[:2]
    if marker == b"II":
        order = "<"
    elif marker == b"MM":
        order = ">"
    else:
        raise TiffError("missing TIFF byte-order marker")

    try:
        magic, ifd_offset = struct.unpack_from(order + "HI", data, 2)
        if magic != 42:
            raise TiffError(f"unsupported TIFF version {magic}")
        tags = _read_ifd(data, order, ifd_offset)
    except struct.error as exc:
        raise TiffError(f"truncated TIFF directory: {exc}") from exc

    width = _single(tags, _IMAGE_WIDTH, None)
    height = _single(tags, _IMAGE_LENGTH, None)
    if width <= 0 or height <= 0:
        raise TiffError(f"invalid image size {width}x{height}")

    bits = tags.get(_BITS_PER_SAMPLE, (1,))
    if any(value != 32 for value in bits):
        raise TiffError(f"unsupported bits per sample {bits}")
    if _single(tags, _SAMPLES_PER_PIXEL, 1) != 1:
        raise TiffError("only single-sample images are supported")
    if _single(tags, _COMPRESSION, _COMPRESSION_NONE) != _COMPRESSION_NONE:
        raise TiffError("compressed images are not supported")
    if _single(tags, _PLANAR_CONFIG, _PLANARCONFIG_CONTIG) != _PLANARCONFIG_CONTIG:
        raise TiffError("only contiguous planar configuration is supported")
    if _single(tags, _SAMPLE_FORMAT, _SAMPLEFORMAT_UINT) != _SAMPLEFORMAT_UINT:
        raise TiffError("only unsigned integer samples are supported")

    offsets = tags.get(_STRIP_OFFSETS)
    counts = tags.get(_STRIP_BYTE_COUNTS)
    if offsets is None or counts is None:
        raise TiffError("strip location tags are missing")
    if len(offsets) != len(counts):
        raise TiffError("strip offsets and byte counts disagree")

    strips = []
    for start, size in zip(offsets, counts):
        strip = data[start:start + size]
        if len(strip) != size:
            raise TiffError("strip data runs past the end of the file")
        strips.append(strip)
    pixels = b"".join(strips)

    expected = width * height * 4
    if len(pixels) < expected:
        raise TiffError(
            f"image data holds {len(pixels)} bytes, expected {expected}"
        )
    array = np.frombuffer(pixels[:expected], dtype=np.dtype(order + "u4"))
    return array.reshape(height, width).astype(np.uint32)