"""Time-of-flight binning description."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_NUM_BINS = 1500
DEFAULT_TOF_MAX = 1.0 / 60


@dataclass
class TOFBinning:
    """Either uniform bins (count and maximum) or an explicit list of edges.

    Explicit edges, when present, take precedence over the uniform settings.
    """

    num_bins: int | None = DEFAULT_NUM_BINS
    tof_max: float | None = DEFAULT_TOF_MAX
    custom_edges: list[float] = field(default_factory=list)

    def is_uniform(self) -> bool:
        """True when uniform bins are fully specified and no edges override them."""
        return (
            self.num_bins is not None
            and self.tof_max is not None
            and not self.custom_edges
        )

    def is_custom(self) -> bool:
        """True when explicit bin edges are set."""
        return bool(self.custom_edges)

    def bin_edges(self) -> list[float]:
        """Return the bin edges in seconds."""
        if self.is_custom():
            return list(self.custom_edges)

        bins = DEFAULT_NUM_BINS if self.num_bins is None else self.num_bins
        tof_max = DEFAULT_TOF_MAX if self.tof_max is None else self.tof_max
        if bins < 1:
            raise ValueError(f"number of TOF bins must be positive, got {bins}")
        return [tof_max * i / bins for i in range(bins + 1)]