"""Clustering and binning settings read from a JSON document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .tof_binning import TOFBinning

DEFAULT_ABS_RADIUS = 5.0
DEFAULT_ABS_MIN_CLUSTER_SIZE = 1
DEFAULT_ABS_SPIDER_TIME_RANGE = 75
DEFAULT_TOF_BINS = 1500
DEFAULT_TOF_MAX = 16.7e-3
DEFAULT_SUPER_RESOLUTION = 1.0

_MISSING = object()


class ConfigError(RuntimeError):
    """The configuration could not be read or holds values of the wrong type."""


def _as_float(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{where} must be a number, got {value!r}")
    return float(value)


def _as_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{where} must be a number, got {value!r}")
    return int(value)


class JSONConfig:
    """Settings document with defaults for every missing entry."""

    def __init__(self, config: Any):
        self._config = config
        self._tof_binning = self._parse_tof_binning()

    @classmethod
    def create_default(cls) -> JSONConfig:
        """Build a configuration holding only the default values."""
        return cls(
            {
                "abs": {
                    "radius": DEFAULT_ABS_RADIUS,
                    "min_cluster_size": DEFAULT_ABS_MIN_CLUSTER_SIZE,
                    "spider_time_range": DEFAULT_ABS_SPIDER_TIME_RANGE,
                },
                "tof_imaging": {
                    "uniform_bins": {
                        "num_bins": DEFAULT_TOF_BINS,
                        "end": DEFAULT_TOF_MAX,
                    },
                    "super_resolution": DEFAULT_SUPER_RESOLUTION,
                },
            }
        )

    @classmethod
    def from_file(cls, filepath) -> JSONConfig:
        """Load a configuration from a JSON file."""
        try:
            with open(filepath, encoding="utf-8") as handle:
                document = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Error parsing JSON file: {exc}") from exc
        except OSError as exc:
            raise ConfigError(
                f"Failed to open configuration file: {Path(filepath)}"
            ) from exc
        return cls(document)

    def _lookup(self, *keys: str) -> Any:
        node = self._config
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return _MISSING
            node = node[key]
        return node

    def _float(self, default: float, *keys: str) -> float:
        value = self._lookup(*keys)
        if value is _MISSING:
            return default
        return _as_float(value, "/" + "/".join(keys))

    def _int(self, default: int, *keys: str) -> int:
        value = self._lookup(*keys)
        if value is _MISSING:
            return default
        return _as_int(value, "/" + "/".join(keys))

    def _parse_tof_binning(self) -> TOFBinning:
        edges = self._lookup("tof_imaging", "bin_edges")
        if edges is not _MISSING:
            if not isinstance(edges, list):
                raise ConfigError("/tof_imaging/bin_edges must be a list")
            return TOFBinning(
                custom_edges=[
                    _as_float(edge, "/tof_imaging/bin_edges") for edge in edges
                ]
            )

        uniform = self._lookup("tof_imaging", "uniform_bins")
        if uniform is not _MISSING:
            if not isinstance(uniform, dict):
                raise ConfigError("/tof_imaging/uniform_bins must be an object")
            num_bins = uniform.get("num_bins", DEFAULT_TOF_BINS)
            end = uniform.get("end", DEFAULT_TOF_MAX)
            return TOFBinning(
                num_bins=_as_int(num_bins, "/tof_imaging/uniform_bins/num_bins"),
                tof_max=_as_float(end, "/tof_imaging/uniform_bins/end"),
            )

        return TOFBinning(num_bins=DEFAULT_TOF_BINS, tof_max=DEFAULT_TOF_MAX)

    @property
    def abs_radius(self) -> float:
        return self._float(DEFAULT_ABS_RADIUS, "abs", "radius")

    @property
    def abs_min_cluster_size(self) -> int:
        return self._int(DEFAULT_ABS_MIN_CLUSTER_SIZE, "abs", "min_cluster_size")

    @property
    def abs_spider_time_range(self) -> int:
        return self._int(DEFAULT_ABS_SPIDER_TIME_RANGE, "abs", "spider_time_range")

    @property
    def super_resolution(self) -> float:
        return self._float(
            DEFAULT_SUPER_RESOLUTION, "tof_imaging", "super_resolution"
        )

    def tof_bin_edges(self) -> list[float]:
        """Return the TOF bin edges in seconds."""
        return self._tof_binning.bin_edges()

    def __str__(self) -> str:
        parts = [
            f"ABS: radius={self.abs_radius:g}",
            f"min_cluster_size={self.abs_min_cluster_size}",
            f"spider_time_range={self.abs_spider_time_range}",
        ]
        binning = self._tof_binning
        if binning.is_custom():
            parts.append(
                f"Custom TOF binning with {len(binning.custom_edges) - 1} bins"
            )
        else:
            num_bins = DEFAULT_TOF_BINS if binning.num_bins is None else binning.num_bins
            tof_max = DEFAULT_TOF_MAX if binning.tof_max is None else binning.tof_max
            parts.append(f"TOF bins={num_bins}")
            parts.append(f"TOF max={tof_max * 1000:g} ms")
        parts.append(f"Super Resolution={self.super_resolution:g}")
        return ", ".join(parts)