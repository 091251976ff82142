"""Timepix3 neutron imaging: configuration, GDC CSV output, TOF images, TIFF and spectra."""

__version__ = "0.1.0"

__all__ = [
    "gdc_extractor",
    "json_config",
    "tiff",
    "tof_binning",
    "tof_imaging",
    "user_config",
]