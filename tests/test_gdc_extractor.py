import io
from collections import namedtuple

import pytest

from sophiread.gdc_extractor import (
    GDCExtractorOptions,
    OptionsError,
    write_csv_header,
    write_records,
)

Record = namedtuple("Record", "chip_id gdc_value file_offset")


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "input.tpx3"
    path.write_bytes(b"")
    return path


def test_chunk_size_below_minimum(input_file, tmp_path):
    opts = GDCExtractorOptions(
        input_tpx3=str(input_file),
        output_csv=str(tmp_path / "test.csv"),
        chunk_size=GDCExtractorOptions.MIN_CHUNK_SIZE - 1,
    )
    with pytest.raises(OptionsError, match="Invalid chunk size"):
        opts.validate()


def test_chunk_size_above_maximum(input_file, tmp_path):
    opts = GDCExtractorOptions(
        input_tpx3=str(input_file),
        output_csv=str(tmp_path / "test.csv"),
        chunk_size=GDCExtractorOptions.MAX_CHUNK_SIZE + 1,
    )
    with pytest.raises(OptionsError, match="Must be between 1 MB and 20 GB"):
        opts.validate()


@pytest.mark.parametrize(
    "chunk_size",
    [
        10 * 1024 * 1024,
        GDCExtractorOptions.MIN_CHUNK_SIZE,
        GDCExtractorOptions.MAX_CHUNK_SIZE,
    ],
)
def test_valid_chunk_size_creates_output(input_file, tmp_path, chunk_size):
    output = tmp_path / "new" / "dir" / "test.csv"
    opts = GDCExtractorOptions(
        input_tpx3=str(input_file), output_csv=str(output), chunk_size=chunk_size
    )
    opts.validate()
    assert output.parent.is_dir()
    assert output.exists()


def test_default_chunk_size_is_accepted(input_file, tmp_path):
    output = tmp_path / "out.csv"
    opts = GDCExtractorOptions(input_tpx3=str(input_file), output_csv=str(output))
    assert opts.chunk_size == 5 * 1024**3
    opts.validate()
    assert output.exists()


def test_nonexistent_input(tmp_path):
    opts = GDCExtractorOptions(
        input_tpx3=str(tmp_path / "nonexistent.tpx3"),
        output_csv=str(tmp_path / "out.csv"),
        chunk_size=10 * 1024 * 1024,
    )
    with pytest.raises(OptionsError, match="does not exist"):
        opts.validate()


def test_unwritable_output(input_file, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    opts = GDCExtractorOptions(
        input_tpx3=str(input_file),
        output_csv=str(blocker / "path" / "output.csv"),
        chunk_size=10 * 1024 * 1024,
    )
    with pytest.raises(OptionsError):
        opts.validate()


def test_csv_header():
    stream = io.StringIO()
    write_csv_header(stream)
    assert stream.getvalue() == "chip_id,gdc_value,file_offset,timestamp_ns\n"


def test_records_converted_to_nanoseconds():
    stream = io.StringIO()
    write_records(stream, [Record(1, 100, 8), Record(2, 40, 32)])
    assert stream.getvalue() == "1,100,8,2500\n2,40,32,1000\n"


def test_header_and_records_together():
    stream = io.StringIO()
    write_csv_header(stream)
    write_records(stream, [Record(0, 0x123400000007C3, 16)])
    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[1] == f"0,{0x123400000007C3},16,{0x123400000007C3 * 25}"


def test_no_records_writes_nothing():
    stream = io.StringIO()
    write_records(stream, [])
    assert stream.getvalue() == ""