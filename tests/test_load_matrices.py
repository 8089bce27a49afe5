"""Tests for loading matrices and the strict-fit command."""

import pandas as pd
import pytest

from sigrefit.constants import canonical_types_order
from sigrefit.load_matrices import (load_mutation_matrix,
                                    load_signature_matrix,
                                    order_mutation_types)
from sigrefit.strict_fit_cli import main


def _write(path, df, index_label="MutationType"):
    df.to_csv(path, sep="\t", index_label=index_label)
    return path


def test_load_signature_matrix_type_column(tmp_path,
                                           orthogonal_signatures):
    """Index by the 'Type' column and name the index 'type'."""
    path = _write(tmp_path / "sigs.tsv", orthogonal_signatures,
                  index_label="Type")

    df = load_signature_matrix(path)

    assert df.index.name == "type"
    assert list(df.index) == ["A", "B"]
    assert list(df.columns) == ["S1", "S2"]


def test_load_mutation_matrix_numeric_sample_names(tmp_path):
    """Keep sample names as strings even if they look like numbers."""
    counts = pd.DataFrame({1: [1, 2], 2: [3, 4]}, index=["A", "B"])
    path = _write(tmp_path / "counts.tsv", counts)

    df = load_mutation_matrix(path)

    assert list(df.columns) == ["1", "2"]


def test_missing_file(tmp_path):
    """Report a file that does not exist."""
    with pytest.raises(FileNotFoundError):
        load_signature_matrix(tmp_path / "missing.tsv")


def test_missing_type_column(tmp_path):
    """Require a mutation type column."""
    path = tmp_path / "bad.tsv"
    pd.DataFrame({"x": [1.0], "y": [2.0]}).to_csv(path, sep="\t",
                                                  index=False)

    with pytest.raises(ValueError):
        load_mutation_matrix(path)


def test_order_mutation_types_sbs96():
    """Sort SBS96 rows canonically and leave other alphabets alone."""
    shuffled = pd.DataFrame({"s": range(96)},
                            index=list(reversed(canonical_types_order)))

    ordered = order_mutation_types(shuffled)
    assert list(ordered.index) == canonical_types_order

    other = pd.DataFrame({"s": [1, 2]}, index=["B", "A"])
    assert list(order_mutation_types(other).index) == ["B", "A"]


def test_command_line_writes_results(tmp_path, orthogonal_signatures):
    """Write contribution, reconstruction and decay traces."""
    counts = pd.DataFrame({"t1": [10.0, 5.0], "t2": [0.0, 3.0]},
                          index=orthogonal_signatures.index)
    counts_path = _write(tmp_path / "counts.tsv", counts)
    sigs_path = _write(tmp_path / "sigs.tsv", orthogonal_signatures)
    out = tmp_path / "out"

    code = main([str(counts_path), str(sigs_path), "-o", str(out),
                 "--max-delta", "1.0"])

    assert code == 0
    contribution = pd.read_csv(out / "contribution.tsv", sep="\t",
                               index_col=0)
    assert list(contribution.index) == ["S1", "S2"]
    assert list(contribution.columns) == ["t1", "t2"]
    assert contribution.loc["S2", "t1"] == 0.0
    assert (out / "reconstructed.tsv").exists()
    traces = pd.read_csv(out / "decay_traces.tsv", sep="\t")
    assert set(traces["sample"]) == {"t1", "t2"}


def test_command_line_reports_mismatch(tmp_path, orthogonal_signatures):
    """Return 1 when the mutation types do not match."""
    counts = pd.DataFrame({"t1": [1.0, 2.0, 3.0]}, index=["A", "B", "C"])
    counts_path = _write(tmp_path / "counts.tsv", counts)
    sigs_path = _write(tmp_path / "sigs.tsv", orthogonal_signatures)

    code = main([str(counts_path), str(sigs_path),
                 "-o", str(tmp_path / "out")])

    assert code == 1


def test_command_line_saves_plots(tmp_path, orthogonal_signatures):
    """Save one decay plot per sample with --plots."""
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    counts = pd.DataFrame({"t1": [10.0, 5.0], "t2": [0.0, 3.0]},
                          index=orthogonal_signatures.index)
    counts_path = _write(tmp_path / "counts.tsv", counts)
    sigs_path = _write(tmp_path / "sigs.tsv", orthogonal_signatures)
    out = tmp_path / "out"

    code = main([str(counts_path), str(sigs_path), "-o", str(out),
                 "--plots"])

    assert code == 0
    assert (out / "sim_decay_t1.png").exists()
    assert (out / "sim_decay_t2.png").exists()


def test_module_dispatches_strict_fit(tmp_path, orthogonal_signatures,
                                      monkeypatch):
    """Run the strict-fit command through python -m sigrefit."""
    from sigrefit.__main__ import main as module_main

    counts = pd.DataFrame({"t1": [10.0, 5.0]},
                          index=orthogonal_signatures.index)
    counts_path = _write(tmp_path / "counts.tsv", counts)
    sigs_path = _write(tmp_path / "sigs.tsv", orthogonal_signatures)
    out = tmp_path / "out"
    monkeypatch.setattr(
        "sys.argv", ["sigrefit", "strict-fit", str(counts_path),
                     str(sigs_path), "-o", str(out)])

    assert module_main() == 0
    assert (out / "contribution.tsv").exists()


@pytest.mark.parametrize("argv", [["sigrefit"], ["sigrefit", "refit"]])
def test_module_rejects_unknown_commands(argv, monkeypatch, capsys):
    """Print usage and fail without a known command."""
    from sigrefit.__main__ import main as module_main

    monkeypatch.setattr("sys.argv", argv)

    assert module_main() == 1
    assert "strict-fit" in capsys.readouterr().out
