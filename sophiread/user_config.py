"""Clustering and binning settings from the legacy plain-text format."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .tof_binning import TOFBinning

log = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass
class UserConfig:
    """User-defined settings for the adaptive box search clustering."""

    abs_radius: float = 5.0
    abs_min_cluster_size: int = 1
    abs_spider_time_range: int = 75
    tof_binning: TOFBinning = field(default_factory=TOFBinning)
    super_resolution: float = 1.0

    def tof_bin_edges(self) -> list[float]:
        """Return the TOF bin edges in seconds."""
        return self.tof_binning.bin_edges()

    def set_custom_tof_bin_edges(self, edges) -> None:
        """Replace the bin edges with an explicit list."""
        self.tof_binning.custom_edges = list(edges)

    def __str__(self) -> str:
        parts = [
            f"ABS: radius={self.abs_radius:g}",
            f"min_cluster_size={self.abs_min_cluster_size}",
            f"spider_time_range={self.abs_spider_time_range}",
        ]
        binning = self.tof_binning
        if binning.is_uniform():
            parts.append(f"TOF bins={binning.num_bins}")
            parts.append(f"TOF max={binning.tof_max * 1000:g} ms")
        elif binning.is_custom():
            parts.append(
                f"Custom TOF binning with {len(binning.custom_edges) - 1} bins"
            )
        else:
            parts.append("TOF binning not set")
        parts.append(f"Super Resolution={self.super_resolution:g}")
        return ", ".join(parts)


def _leading_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(0)) if match else 0


def _leading_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(0)) if match else 0.0


def parse_user_config_file(filepath) -> UserConfig:
    """Read a ``name value`` per line configuration file.

    Lines starting with ``#`` are comments. Unknown names are reported and
    ignored. A missing file raises :class:`FileNotFoundError`; a file that
    exists but cannot be read yields the defaults.
    """
    path = Path(filepath)
    if not path.exists():
        log.error("The user-defined configuration file %s does not exist.", path)
        raise FileNotFoundError(
            f"The user-defined configuration file {path} does not exist."
        )

    config = UserConfig()
    try:
        text = path.read_text()
    except OSError:
        log.error("Failed to open %s.", path)
        log.warning("Fallback to default user configurations!")
        return config

    for line in text.splitlines():
        tokens = line.split(maxsplit=1)
        if not tokens:
            continue
        name = tokens[0]
        rest = tokens[1].lstrip() if len(tokens) > 1 else ""

        if name.startswith("#"):
            continue
        if name == "abs_radius":
            config.abs_radius = _leading_float(rest)
        elif name == "abs_min_cluster_size":
            config.abs_min_cluster_size = _leading_int(rest)
        elif name == "spider_time_range":
            config.abs_spider_time_range = _leading_int(rest)
        elif name in ("tof_bins", "tof_max"):
            # Accepted for compatibility; these no longer affect the binning.
            continue
        else:
            log.warning(
                "Unknown parameter %s in the user-defined configuration file.", name
            )

    log.info("User-defined parameters: %s", config)
    return config