"""Non-negative least squares refit of mutation counts to signatures.

This module is the refit step used by the strict refitting in
:mod:`sigrefit.fit_to_signatures_strict`. For every sample (column of
the mutation matrix) it finds the non-negative weights over the
signature columns that minimize the Euclidean distance between the
observed counts and the reconstructed profile, using
:func:`scipy.optimize.nnls`.

The mutation matrix and the signature matrix have to be indexed by the
same mutation types, in the same order. Both are used read-only.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.optimize import nnls

from .errors import DimensionMismatchError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitResult:
    """Contributions and reconstructed profiles of a refit.

    Attributes
    ----------
    contribution : pd.DataFrame
        Signatures x samples, non-negative weights.
    reconstructed : pd.DataFrame
        Mutation types x samples, ``signatures @ contribution``.
    """

    contribution: pd.DataFrame
    reconstructed: pd.DataFrame


def as_mutation_matrix(data, index=None) -> pd.DataFrame:
    """Return `data` as a mutation types x columns DataFrame.

    A Series becomes a one-column DataFrame named after the Series
    (or ``"1"`` when unnamed). Arrays get string column labels
    ``"1"``, ``"2"``, ... so that samples always carry a name, and
    take `index` as mutation types when it has one label per row.
    """
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, pd.Series):
        name = data.name if data.name is not None else "1"
        return data.to_frame(name=name)

    arr = np.asarray(data, dtype=float)
    if arr.ndim == 1:
        arr = arr[:, None]
    if arr.ndim != 2:
        raise ValueError(
            f"Expected a matrix with 2 dimensions, got {arr.ndim}")
    if index is not None and len(index) != arr.shape[0]:
        index = None
    return pd.DataFrame(
        arr, index=index,
        columns=[str(i + 1) for i in range(arr.shape[1])])


def as_mutation_matrices(mut_matrix, signatures):
    """Return both inputs as DataFrames over the same mutation types.

    An unlabelled array takes the mutation types of the other input,
    since it has no labels that could disagree with them.
    """
    labelled = (pd.DataFrame, pd.Series)
    if (isinstance(signatures, labelled)
            and not isinstance(mut_matrix, labelled)):
        signatures = as_mutation_matrix(signatures)
        mut_matrix = as_mutation_matrix(mut_matrix,
                                        index=signatures.index)
    else:
        mut_matrix = as_mutation_matrix(mut_matrix)
        signatures = as_mutation_matrix(signatures,
                                        index=mut_matrix.index)
    return mut_matrix, signatures


def check_mutation_types(mut_matrix: pd.DataFrame,
                         signatures: pd.DataFrame) -> None:
    """Raise if the rows of both matrices are not the same alphabet.

    Raises
    ------
    DimensionMismatchError
        If the number of rows differs, or the row labels are not the
        same labels in the same order.
    """
    n_types = mut_matrix.shape[0]
    n_sig_types = signatures.shape[0]
    if n_types != n_sig_types:
        raise DimensionMismatchError(
            f"Mutation matrix has {n_types} mutation types but the "
            f"signature matrix has {n_sig_types}")
    if not mut_matrix.index.equals(signatures.index):
        mismatched = [
            (a, b) for a, b in zip(mut_matrix.index, signatures.index)
            if a != b]
        raise DimensionMismatchError(
            f"Mutation types of the mutation matrix and the signature "
            f"matrix differ; first mismatches: {mismatched[:3]}")


def fit_to_signatures(mut_matrix, signatures) -> FitResult:
    """Refit mutation counts to signatures with non-negative weights.

    Parameters
    ----------
    mut_matrix : pd.DataFrame, pd.Series or array
        Mutation counts, mutation types x samples. A Series is
        treated as a single sample.
    signatures : pd.DataFrame or array
        Signature matrix, mutation types x signatures. A single
        signature column is allowed. An array takes the mutation
        types of `mut_matrix`, and the other way around.

    Returns
    -------
    FitResult
        Contribution (signatures x samples) and reconstructed profile
        (mutation types x samples).

    Raises
    ------
    DimensionMismatchError
        If the mutation types of both matrices differ.
    ValueError
        If there are no mutation types.

    Notes
    -----
    Errors from the solver (e.g. exceeding its iteration limit) are
    not caught.
    """
    mut_matrix, signatures = as_mutation_matrices(mut_matrix, signatures)
    check_mutation_types(mut_matrix, signatures)
    if mut_matrix.shape[0] == 0:
        raise ValueError("Mutation matrix has no mutation types")

    sig_arr = signatures.to_numpy(dtype=float)
    counts = mut_matrix.to_numpy(dtype=float)

    weights = np.zeros((sig_arr.shape[1], counts.shape[1]))
    for j in range(counts.shape[1]):
        weights[:, j], _ = nnls(sig_arr, counts[:, j])

    contribution = pd.DataFrame(
        weights, index=signatures.columns, columns=mut_matrix.columns)
    reconstructed = pd.DataFrame(
        sig_arr @ weights,
        index=mut_matrix.index,
        columns=mut_matrix.columns)

    return FitResult(contribution=contribution,
                     reconstructed=reconstructed)
