"""
Tests for the command-line front end and the spectrum plot.
"""

import csv

import numpy as np
import pytest

from fast_nft.cli import (
    load_signal_csv,
    load_spectrum_csv,
    main,
    write_spectrum_csv,
)
from fast_nft.errors import InvalidInputError
from fast_nft.nsev import NsevResult
from fast_nft.plot import plot_discrete_spectrum
from fast_nft.testcases import sech_bound_states, sech_signal


def _write_signal(path, q):
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['re', 'im'])
        for x in q:
            writer.writerow([repr(float(x.real)), repr(float(x.imag))])


@pytest.fixture
def sech_csv(tmp_path):
    q, _ = sech_signal(512, 2.2, (-16.0, 16.0))
    path = tmp_path / "signal.csv"
    _write_signal(path, q)
    return path


class TestCsv:
    """Test CSV input and output."""

    def test_signal_round_trip(self, tmp_path):
        """Samples written as re,im are read back exactly."""
        q = np.array([1.5 - 0.25j, 0.0, -3.0 + 1e-9j])
        path = tmp_path / "q.csv"
        _write_signal(path, q)
        np.testing.assert_array_equal(load_signal_csv(path), q)

    def test_missing_imaginary_column(self, tmp_path):
        """A file without an im column is read as real."""
        path = tmp_path / "q.csv"
        path.write_text("re\n1.0\n2.0\n")
        np.testing.assert_array_equal(load_signal_csv(path), [1.0, 2.0])

    def test_malformed_value_raises(self, tmp_path):
        """Malformed rows raise InvalidInputError."""
        path = tmp_path / "q.csv"
        path.write_text("re\n1.0\n--\n")
        with pytest.raises(InvalidInputError):
            load_signal_csv(path)

    def test_spectrum_without_residues(self, tmp_path):
        """Absent amplitude kinds are left empty and read back as None."""
        result = NsevResult(bound_states=np.array([0.7j, 1.7j]),
                            normconsts=np.array([1.0 + 0j, -1.0 + 0j]))
        path = tmp_path / "out" / "spectrum.csv"
        write_spectrum_csv(path, result)
        loaded = load_spectrum_csv(path)
        np.testing.assert_array_equal(loaded.bound_states, result.bound_states)
        np.testing.assert_array_equal(loaded.normconsts, result.normconsts)
        assert loaded.residues is None


class TestMain:
    """Test the fast-nft entry point."""

    def test_writes_spectrum(self, sech_csv, tmp_path):
        """The bound states of 2.2 sech(t) end up in the output file."""
        out = tmp_path / "spectrum.csv"
        status = main([str(sech_csv), "--t0", "-16", "--t1", "16",
                       "--dstype", "both", "--output", str(out)])
        assert status == 0
        result = load_spectrum_csv(out)
        assert result.K == 2
        assert result.normconsts is not None and result.residues is not None
        assert np.max(np.abs(np.sort(result.bound_states.imag)
                             - np.sort(sech_bound_states(2.2).imag))) < 1e-2

    def test_prints_to_stdout(self, sech_csv, capsys):
        """Without --output the spectrum is printed."""
        status = main([str(sech_csv), "--t0", "-16", "--t1", "16"])
        assert status == 0
        assert "K = 2" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        """A missing signal file is an error."""
        status = main([str(tmp_path / "nope.csv"), "--t0", "0", "--t1", "1"])
        assert status == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_interval(self, sech_csv, capsys):
        """Library errors are reported, not raised."""
        status = main([str(sech_csv), "--t0", "1", "--t1", "0"])
        assert status == 1
        assert "ERROR" in capsys.readouterr().err

    def test_malformed_value(self, tmp_path, capsys):
        """A non-numeric sample is reported, not raised."""
        path = tmp_path / "bad.csv"
        path.write_text("re,im\n1.0,0.0\nabc,0.0\n")
        status = main([str(path), "--t0", "0", "--t1", "1"])
        assert status == 1
        err = capsys.readouterr().err
        assert "ERROR" in err
        assert "line 3" in err

    def test_missing_re_column(self, tmp_path, capsys):
        """A file without an re column is reported."""
        path = tmp_path / "bad.csv"
        path.write_text("x,y\n1.0,0.0\n")
        status = main([str(path), "--t0", "0", "--t1", "1"])
        assert status == 1
        assert "ERROR" in capsys.readouterr().err

    def test_plot(self, sech_csv, tmp_path):
        """--plot writes a figure."""
        fig_path = tmp_path / "spectrum.png"
        status = main([str(sech_csv), "--t0", "-16", "--t1", "16",
                       "--plot", str(fig_path)])
        assert status == 0
        assert fig_path.exists()


class TestPlot:
    """Test the spectrum plot."""

    def test_empty_spectrum(self, tmp_path):
        """An empty spectrum still produces a figure."""
        result = NsevResult(bound_states=np.zeros(0, dtype=complex),
                            normconsts=np.zeros(0, dtype=complex))
        fig = plot_discrete_spectrum(result, output=tmp_path / "empty.png", dpi=50)
        assert (tmp_path / "empty.png").exists()
        assert len(fig.axes) == 2

    def test_with_reference(self, tmp_path):
        """Reference values are drawn alongside the computed ones."""
        result = NsevResult(bound_states=np.array([0.69j, 1.71j]),
                            normconsts=np.array([1.0 + 0j, -1.0 + 0j]),
                            residues=np.array([0.5j, -2.0j]))
        fig = plot_discrete_spectrum(result, reference=sech_bound_states(2.2))
        assert len(fig.axes[0].lines) >= 2
