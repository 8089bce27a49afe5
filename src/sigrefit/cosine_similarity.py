"""Cosine similarity between observed and reconstructed profiles.

The similarity between a sample and its reconstruction is undefined
when either profile has zero norm, e.g. a sample without mutations or
a refit where every contribution collapsed to zero. In that case the
column counts as 0 in the mean and the returned
:class:`SimilarityResult` carries a note describing the offending fit,
so that refitting can go on.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .errors import DimensionMismatchError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarityResult:
    """Mean cosine similarity of a fit.

    Attributes
    ----------
    value : float
        Mean over samples, undefined similarities counted as 0.
    per_sample : pd.Series
        Similarity of each sample, undefined ones already set to 0.
    note : str or None
        Description of the undefined similarities, None if there
        were none.
    """

    value: float
    per_sample: pd.Series
    note: str | None = None


def cos_sim(x, y) -> float:
    """Cosine similarity of two vectors, NaN if a norm is zero."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise DimensionMismatchError(
            f"Cannot compare vectors of shape {x.shape} and {y.shape}")

    denom = np.linalg.norm(x) * np.linalg.norm(y)
    if denom == 0:
        return float("nan")
    return float(np.dot(x, y) / denom)


def cos_sim_matrix(mut_matrix1: pd.DataFrame,
                   mut_matrix2: pd.DataFrame) -> pd.DataFrame:
    """Pairwise cosine similarity between the columns of two matrices.

    Returns
    -------
    pd.DataFrame
        Columns of `mut_matrix1` as index, columns of `mut_matrix2`
        as columns.
    """
    if mut_matrix1.shape[0] != mut_matrix2.shape[0]:
        raise DimensionMismatchError(
            f"Matrices have {mut_matrix1.shape[0]} and "
            f"{mut_matrix2.shape[0]} mutation types")

    sims = [[cos_sim(mut_matrix1.iloc[:, i], mut_matrix2.iloc[:, j])
             for j in range(mut_matrix2.shape[1])]
            for i in range(mut_matrix1.shape[1])]
    return pd.DataFrame(
        sims, index=mut_matrix1.columns, columns=mut_matrix2.columns)


def mean_cos_sim_ori_vs_rec(mut_matrix: pd.DataFrame,
                            reconstructed: pd.DataFrame
                            ) -> SimilarityResult:
    """Mean cosine similarity of original vs reconstructed profiles.

    Each column of `mut_matrix` is compared with the column at the
    same position in `reconstructed`.

    Parameters
    ----------
    mut_matrix : pd.DataFrame
        Observed counts, mutation types x samples.
    reconstructed : pd.DataFrame
        Reconstructed profiles with the same shape.

    Returns
    -------
    SimilarityResult

    Raises
    ------
    DimensionMismatchError
        If the shapes differ.
    """
    if mut_matrix.shape != reconstructed.shape:
        raise DimensionMismatchError(
            f"Original matrix has shape {mut_matrix.shape} but the "
            f"reconstructed matrix has shape {reconstructed.shape}")

    sims = pd.Series(
        [cos_sim(mut_matrix.iloc[:, i], reconstructed.iloc[:, i])
         for i in range(mut_matrix.shape[1])],
        index=mut_matrix.columns, dtype=float)

    note = None
    undefined = sims.isna().to_numpy()
    if undefined.any():
        offending = reconstructed.iloc[:, np.flatnonzero(undefined)]
        note = (
            f"Cosine similarity between the original and the "
            f"reconstructed spectra of {list(offending.columns)} was "
            f"NaN. It has been converted into a 0. Reconstructed "
            f"profile: {offending.to_dict(orient='list')}")
        logger.warning(note)
        sims = sims.fillna(0.0)

    return SimilarityResult(value=float(sims.mean()),
                            per_sample=sims,
                            note=note)
