"""Time-of-flight imaging: 2-D histograms per TOF bin, spectra and TIFF output."""

from __future__ import annotations

import logging
import math
import time
from bisect import bisect_left
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from .tiff import TiffError, read_tiff_uint32, write_tiff_uint32

log = logging.getLogger(__name__)

# One chip covers pixels 0-255; two chips plus a 5 pixel gap span 517 pixels.
DETECTOR_SIZE = 517


@dataclass(frozen=True)
class PositionTOF:
    """A detected position (in pixels) with its time of flight in nanoseconds.

    Any object with ``x``, ``y`` and ``tof_ns`` attributes can stand in for it.
    """

    x: float
    y: float
    tof_ns: float


@dataclass
class TOFBatch:
    """Hits and neutron events decoded from one batch of raw data."""

    hits: list = field(default_factory=list)
    neutrons: list = field(default_factory=list)


def _image_dim(super_resolution: float) -> int:
    return int(DETECTOR_SIZE * super_resolution)


def _check_edges(tof_bin_edges: Sequence[float]) -> None:
    if len(tof_bin_edges) < 2:
        raise ValueError("Invalid TOF bin edges: at least 2 edges are required")


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _is_finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))


def initialize_tof_images(super_resolution, tof_bin_edges) -> np.ndarray:
    """Return zeroed images of shape ``(bins, dim, dim)`` with ``dim = 517 * sr``."""
    _check_edges(tof_bin_edges)
    dim = _image_dim(super_resolution)
    return np.zeros((len(tof_bin_edges) - 1, dim, dim), dtype=np.uint32)


def _entries(batch: TOFBatch, mode: str) -> list:
    return list(batch.hits) if mode == "hit" else list(batch.neutrons)


def update_tof_images(tof_images, batch, super_resolution, tof_bin_edges, mode) -> int:
    """Add the batch's hits (mode ``"hit"``) or neutrons (any other mode) in place.

    Entries with an invalid TOF, a TOF outside the edges, or a position outside
    the image are skipped. Returns the number of entries binned.
    """
    if len(tof_images) == 0:
        raise ValueError("Invalid TOF images: no bins")
    _check_edges(tof_bin_edges)

    edges = list(tof_bin_edges)
    dim = _image_dim(super_resolution)
    binned = 0

    for entry in _entries(batch, mode):
        if entry is None:
            continue
        tof_ns = float(entry.tof_ns)
        if tof_ns < 0 or not _is_finite(tof_ns):
            log.debug("Skipping entry with invalid TOF: %s", tof_ns)
            continue

        tof_s = tof_ns / 1e9
        if tof_s < edges[0] or tof_s >= edges[-1]:
            log.debug("TOF out of bin range: %s", tof_s)
            continue

        position = bisect_left(edges, tof_s)
        if position == 0:
            continue
        bin_index = position - 1
        if bin_index >= len(tof_images):
            log.debug("Bin index out of range: %s", bin_index)
            continue

        raw_x = float(entry.x)
        raw_y = float(entry.y)
        if not (_is_finite(raw_x) and _is_finite(raw_y)):
            continue

        x = _round_half_away(raw_x * super_resolution)
        y = _round_half_away(raw_y * super_resolution)
        if 0 <= x < dim and 0 <= y < dim:
            tof_images[bin_index][y][x] += 1
            binned += 1

    return binned


def create_tof_images(batches, super_resolution, tof_bin_edges, mode) -> np.ndarray:
    """Build TOF images from all batches; see :func:`update_tof_images`."""
    start = time.perf_counter()
    tof_images = initialize_tof_images(super_resolution, tof_bin_edges)
    batches = list(batches)
    if not batches:
        log.error("No batches to process")
        return tof_images

    log.debug(
        "Creating TOF images with dimensions: %d x %d",
        tof_images.shape[2],
        tof_images.shape[1],
    )
    total = 0
    binned = 0
    for index, batch in enumerate(batches):
        count = len(_entries(batch, mode))
        if count == 0:
            log.debug("Batch %d is empty", index)
            continue
        total += count
        binned += update_tof_images(
            tof_images, batch, super_resolution, tof_bin_edges, mode
        )

    log.info("TOF image creation time: %s s", time.perf_counter() - start)
    log.info("Total entries: %d, Binned entries: %d", total, binned)
    return tof_images


def calculate_spectral_counts(tof_images) -> list[int]:
    """Return the total count of each TOF bin image."""
    return [int(np.asarray(image, dtype=np.uint64).sum()) for image in tof_images]


def write_spectral_file(filename, spectral_counts, tof_bin_edges) -> None:
    """Write ``shutter_time,counts`` lines, one per bin, keyed by its upper edge."""
    _check_edges(tof_bin_edges)
    upper_edges = list(tof_bin_edges)[1:]
    counts = list(spectral_counts)
    if len(counts) < len(upper_edges):
        raise ValueError(
            f"{len(counts)} spectral counts for {len(upper_edges)} TOF bins"
        )
    with open(filename, "w", encoding="utf-8") as handle:
        handle.write("shutter_time,counts\n")
        for edge, count in zip(upper_edges, counts):
            handle.write(f"{edge:g},{count}\n")
    log.info("Wrote spectral file: %s", filename)


def _accumulate_existing(path: Path, image: np.ndarray) -> np.ndarray:
    try:
        existing = read_tiff_uint32(path)
    except (TiffError, OSError) as exc:
        log.error("Failed to open existing TIFF file for reading: %s (%s)", path, exc)
        return image
    if existing.shape != image.shape:
        log.error(
            "Dimension mismatch for file: %s. Expected %dx%d, got %dx%d. Overwriting.",
            path,
            image.shape[1],
            image.shape[0],
            existing.shape[1],
            existing.shape[0],
        )
        return image
    log.debug("Accumulated counts for existing file: %s", path)
    return image + existing


def save_tof_imaging_to_tiff(
    out_dir, tof_images, tof_bin_edges, filename_base
) -> list[Path]:
    """Save one TIFF per bin, adding to matching existing files, plus a spectrum.

    Files are named ``<base>_bin_<NNNN>.tiff`` and ``<base>_Spectra.txt``.
    Returns the paths of the TIFF files written.
    """
    start = time.perf_counter()
    out_path = Path(out_dir)
    if not out_path.exists():
        out_path.mkdir(parents=True)
        log.info("Created output directory: %s", out_path)

    written = []
    for bin_number, image in enumerate(tof_images, start=1):
        path = out_path / f"{filename_base}_bin_{bin_number:04d}.tiff"
        pixels = np.asarray(image, dtype=np.uint32)
        if path.exists():
            pixels = _accumulate_existing(path, pixels)
        write_tiff_uint32(path, pixels)
        log.debug("Wrote TIFF file: %s", path)
        written.append(path)

    write_spectral_file(
        out_path / f"{filename_base}_Spectra.txt",
        calculate_spectral_counts(tof_images),
        tof_bin_edges,
    )
    log.info(
        "TIFF and spectra file writing completed in %d ms",
        int((time.perf_counter() - start) * 1000),
    )
    return written