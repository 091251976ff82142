# sophiread

A library for Timepix3 (TPX3) neutron imaging work: clustering and
time-of-flight (TOF) configuration, the GDC timestamp CSV format, TOF image
histograms, 32-bit TIFF output and spectra files.

## Installing

Install the package with your usual Python package installer; its only
runtime dependency is NumPy. The `test` extra adds pytest for running the
test suite.

## Modules

- `sophiread.tof_binning` — `TOFBinning` describes TOF bins either as a
  uniform grid (`num_bins` and `tof_max`, 1500 bins up to 1/60 s by default)
  or as an explicit list in `custom_edges`, which takes precedence.
  `bin_edges()` returns the edges in seconds; `is_uniform()` and
  `is_custom()` tell which form is in use.
- `sophiread.user_config` — `UserConfig`, a dataclass holding `abs_radius`,
  `abs_min_cluster_size`, `abs_spider_time_range`, `tof_binning` and
  `super_resolution`, and `parse_user_config_file`, which reads the
  plain-text `name value` format (`abs_radius`, `abs_min_cluster_size`,
  `spider_time_range`; lines starting with `#` are comments; `tof_bins` and
  `tof_max` are accepted but ignored; unknown names are logged and skipped).
  A missing file raises `FileNotFoundError`.
- `sophiread.json_config` — `JSONConfig`, built with `JSONConfig.from_file`
  or `JSONConfig.create_default`, with the properties `abs_radius`,
  `abs_min_cluster_size`, `abs_spider_time_range` and `super_resolution`
  and the method `tof_bin_edges()`. Failing to open or parse a file, or a
  value of the wrong type, raises `ConfigError`.
- `sophiread.gdc_extractor` — `GDCExtractorOptions` (`input_tpx3`,
  `output_csv`, `chunk_size` defaulting to 5 GiB, `debug_logging`,
  `verbose`). Its `validate()` checks that the input exists and is
  readable, creates the output directory if needed, checks that the output
  is writable and that the chunk size lies between 1 MiB and 20 GiB;
  any failure raises `OptionsError`. `write_csv_header` and
  `write_records` write the `chip_id,gdc_value,file_offset,timestamp_ns`
  CSV format, where `timestamp_ns` is `gdc_value * 25`. Records are any
  objects with `chip_id`, `gdc_value` and `file_offset` attributes.
- `sophiread.tiff` — `write_tiff_uint32` and `read_tiff_uint32` for
  uncompressed single-channel 32-bit unsigned TIFF images; unsupported
  images or malformed files raise `TiffError`.
- `sophiread.tof_imaging` — TOF image stacks: `initialize_tof_images`,
  `update_tof_images`, `create_tof_images`, `calculate_spectral_counts`,
  `write_spectral_file` and `save_tof_imaging_to_tiff`. Events are
  `PositionTOF` values (`x`, `y` in pixels, `tof_ns`) grouped in a
  `TOFBatch` with `hits` and `neutrons` lists.

## JSON configuration

```json
{
  "abs": {
    "radius": 6.0,
    "min_cluster_size": 2,
    "spider_time_range": 80
  },
  "tof_imaging": {
    "uniform_bins": {"num_bins": 1000, "end": 0.0167},
    "super_resolution": 2.0
  }
}
```

Instead of `uniform_bins`, `tof_imaging` may carry `bin_edges`, an explicit
list of edges in seconds. Every key is optional; missing values fall back to
a radius of 5.0, a minimum cluster size of 1, a spider time range of 75,
1500 bins up to 16.7 ms and a super resolution of 1.0.

## TOF images and spectra

A TOF image stack is a NumPy `uint32` array with one 2-D histogram per TOF
bin. The image side is `int(517 * super_resolution)` pixels. An entry is
counted in the bin whose edges enclose its TOF in seconds, at its position
scaled by the super-resolution factor and rounded to the nearest pixel.
Entries with an invalid TOF, a TOF outside the edges or a position outside
the image are skipped. In mode `"hit"` the batch's `hits` are used; in any
other mode its `neutrons`.

```python
from sophiread.tof_imaging import (
    PositionTOF,
    TOFBatch,
    calculate_spectral_counts,
    initialize_tof_images,
    save_tof_imaging_to_tiff,
    update_tof_images,
    write_spectral_file,
)

edges = [0.0, 0.1, 0.2, 0.3]
images = initialize_tof_images(1.0, edges)

batch = TOFBatch(neutrons=[PositionTOF(x=10, y=20, tof_ns=150e6)])
update_tof_images(images, batch, 1.0, edges, "neutron")  # returns 1

counts = calculate_spectral_counts(images)  # [0, 1, 0]
write_spectral_file("Spectra.txt", counts, edges)

save_tof_imaging_to_tiff("tof_out", images, edges, "tof_image")
```

`save_tof_imaging_to_tiff` writes `tof_out/tof_image_bin_0001.tiff`,
`tof_out/tof_image_bin_0002.tiff`, … and `tof_out/tof_image_Spectra.txt`,
and returns the TIFF paths. When a TIFF with matching dimensions already
exists, its counts are added to the new ones, so repeated runs accumulate
into the same set of images.

The spectra file is a small CSV; each line gives the upper edge of a TOF bin
and the total count in it. For the example above:

```
shutter_time,counts
0.1,0
0.2,1
0.3,0
```

## What this package does not do

It does not decode raw TPX3 files into hits, cluster hits into neutron
events, extract GDC records from raw data or write HDF5 files. It provides
no command-line programs and no graphical viewer: hits and events must be
supplied by the caller as `PositionTOF` (or similar) objects, and GDC
records as objects with the attributes listed above.