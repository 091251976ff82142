import pytest

from sophiread.tof_binning import TOFBinning


def test_default_is_uniform_with_1500_bins():
    binning = TOFBinning()
    assert binning.is_uniform()
    assert not binning.is_custom()
    edges = binning.bin_edges()
    assert len(edges) == 1501
    assert edges[0] == 0.0
    assert edges[-1] == pytest.approx(1.0 / 60, rel=1e-12)


def test_uniform_settings():
    binning = TOFBinning(num_bins=1000, tof_max=20000.0)
    edges = binning.bin_edges()
    assert len(edges) == 1001
    assert edges[0] == 0.0
    assert edges[-1] == pytest.approx(20000.0)
    assert edges[500] == pytest.approx(10000.0)


def test_custom_edges_take_precedence():
    custom = [0.0, 100.0, 200.0, 300.0, 400.0]
    binning = TOFBinning(custom_edges=list(custom))
    assert binning.is_custom()
    assert not binning.is_uniform()
    assert binning.bin_edges() == custom


def test_bin_edges_returns_a_copy():
    binning = TOFBinning(custom_edges=[0.0, 1.0])
    edges = binning.bin_edges()
    edges.append(2.0)
    assert binning.custom_edges == [0.0, 1.0]


def test_missing_values_fall_back_to_defaults():
    binning = TOFBinning(num_bins=None, tof_max=None)
    assert not binning.is_uniform()
    edges = binning.bin_edges()
    assert len(edges) == 1501
    assert edges[-1] == pytest.approx(1.0 / 60, rel=1e-12)


def test_edges_are_increasing():
    edges = TOFBinning(num_bins=10, tof_max=1.0).bin_edges()
    assert all(a < b for a, b in zip(edges, edges[1:]))


def test_zero_bins_rejected():
    with pytest.raises(ValueError):
        TOFBinning(num_bins=0, tof_max=1.0).bin_edges()