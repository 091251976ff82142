"""Options and CSV output for extracting GDC timestamps from TPX3 files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Iterable, TextIO

log = logging.getLogger(__name__)

_MIB = 1024 * 1024
_GIB = 1024 * _MIB

CSV_HEADER = "chip_id,gdc_value,file_offset,timestamp_ns\n"
GDC_TICK_NS = 25


class OptionsError(ValueError):
    """The extractor options are unusable."""


@dataclass
class GDCExtractorOptions:
    """Settings of a GDC extraction run."""

    input_tpx3: str = ""
    output_csv: str = ""
    chunk_size: int = 5 * _GIB
    debug_logging: bool = False
    verbose: bool = False

    MIN_CHUNK_SIZE: ClassVar[int] = 1 * _MIB
    MAX_CHUNK_SIZE: ClassVar[int] = 20 * _GIB

    def validate(self) -> None:
        """Check the files and chunk size, creating the output directory if needed.

        Raises :class:`OptionsError` describing the first problem found.
        """
        input_path = Path(self.input_tpx3)
        if not input_path.exists():
            log.error("Input file does not exist: %s", self.input_tpx3)
            raise OptionsError(f"Input file does not exist: {self.input_tpx3}")

        try:
            with open(input_path, "rb"):
                pass
        except OSError as exc:
            log.error("Input file is not readable: %s", self.input_tpx3)
            raise OptionsError(
                f"Input file is not readable: {self.input_tpx3}"
            ) from exc

        output_dir = Path(self.output_csv).parent
        if str(output_dir) not in ("", ".") and not output_dir.exists():
            try:
                output_dir.mkdir(parents=True)
            except OSError as exc:
                log.error("Failed to create output directory: %s", output_dir)
                raise OptionsError(
                    f"Failed to create output directory: {output_dir}"
                ) from exc

        try:
            with open(self.output_csv, "a"):
                pass
        except OSError as exc:
            log.error("Output file is not writable: %s", self.output_csv)
            raise OptionsError(
                f"Output file is not writable: {self.output_csv}"
            ) from exc

        if not self.MIN_CHUNK_SIZE <= self.chunk_size <= self.MAX_CHUNK_SIZE:
            message = (
                f"Invalid chunk size: {self.chunk_size // _MIB}. Must be between "
                f"{self.MIN_CHUNK_SIZE // _MIB} MB and "
                f"{self.MAX_CHUNK_SIZE // _GIB} GB"
            )
            log.error(message)
            raise OptionsError(message)


def write_csv_header(stream: TextIO) -> None:
    """Write the column names of the GDC CSV file."""
    stream.write(CSV_HEADER)


def write_records(stream: TextIO, records: Iterable) -> None:
    """Write one CSV line per record, with the timestamp converted to ns.

    Each record needs ``chip_id``, ``gdc_value`` and ``file_offset``.
    """
    for record in records:
        stream.write(
            f"{record.chip_id},{record.gdc_value},{record.file_offset},"
            f"{record.gdc_value * GDC_TICK_NS}\n"
        )