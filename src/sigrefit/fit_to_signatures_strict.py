"""Strict refitting of mutational signatures.

Refitting a sample with every signature of a catalogue tends to
overfit: many signatures receive a small, spurious contribution. This
module refits each sample with a reduced set of signatures, obtained
by backward elimination:

1. Signatures without contribution in any sample of the cohort are
   dropped (:func:`remove_zero_contribution_signatures`).
2. Per sample, the signature with the lowest relative contribution is
   removed and the sample is refitted. The removal is kept while the
   mean cosine similarity between the original and the reconstructed
   profile drops by at most `max_delta`
   (:func:`try_remove_weakest`, :func:`refit_sample_strict`).
3. The first removal that loses more than `max_delta` stops the
   elimination. It is not applied, and the sample is refitted with the
   signatures that were kept before it.
4. The per-sample fits are combined into cohort matrices with the
   original signature and sample order
   (:func:`combine_sample_fits`).

The elimination is greedy: it never tries to remove a signature other
than the weakest one, and it stops at the first rejected removal.

Typical usage
-------------
>>> result = fit_to_signatures_strict(mut_matrix, signatures,
...                                   max_delta=0.004)
>>> result.contribution        # signatures x samples
>>> result.traces[0].to_frame()
"""

import logging
from dataclasses import dataclass
from multiprocessing import Pool, cpu_count

import numpy as np
import pandas as pd

from .constants import default_max_delta
from .cosine_similarity import mean_cos_sim_ori_vs_rec
from .decay_trace import SampleTrace, build_sample_trace
from .errors import EmptySignatureSetError
from .fit_to_signatures import (FitResult, as_mutation_matrices,
                                as_mutation_matrix, check_mutation_types,
                                fit_to_signatures)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrictFitState:
    """Active state of the elimination of one sample.

    Attributes
    ----------
    signatures : tuple of str
        Signatures still in use, in the column order of the signature
        matrix.
    similarity : float
        Mean cosine similarity of `fit`.
    fit : FitResult
        Refit of the sample with `signatures`.
    """

    signatures: tuple
    similarity: float
    fit: FitResult


@dataclass(frozen=True)
class Accepted:
    """Removal that lost at most `max_delta`; `state` is the new state."""

    state: StrictFitState
    removed: str
    delta: float
    note: str | None = None

    @property
    def similarity(self) -> float:
        return self.state.similarity


@dataclass(frozen=True)
class Rejected:
    """Removal that lost more than `max_delta`; it is not applied."""

    removed: str
    similarity: float
    delta: float
    note: str | None = None


@dataclass(frozen=True)
class SampleFit:
    """Final refit and decay trace of one sample."""

    sample: str
    fit: FitResult
    trace: SampleTrace

    @property
    def signatures(self) -> tuple:
        """Signatures kept for the sample."""
        return tuple(self.fit.contribution.index)


@dataclass(frozen=True)
class StrictFitResult:
    """Result of :func:`fit_to_signatures_strict`.

    Attributes
    ----------
    contribution : pd.DataFrame
        Signatures x samples. One row per signature of the input
        signature matrix, in its order; 0 for signatures not used by a
        sample.
    reconstructed : pd.DataFrame
        Mutation types x samples, in the order of the mutation matrix.
    traces : list of SampleTrace
        Decay of the cosine similarity per sample, in sample order.
    max_delta : float
        Tolerance used for the refit.
    """

    contribution: pd.DataFrame
    reconstructed: pd.DataFrame
    traces: list
    max_delta: float

    @property
    def fit_res(self) -> FitResult:
        """Contribution and reconstruction as a :class:`FitResult`."""
        return FitResult(contribution=self.contribution,
                         reconstructed=self.reconstructed)


def _check_non_negative(df: pd.DataFrame, name: str) -> None:
    values = df.to_numpy(dtype=float)
    if not np.isfinite(values).all():
        raise ValueError(f"{name} contains missing or infinite values")
    if (values < 0).any():
        raise ValueError(f"{name} contains negative values")


def _check_max_delta(max_delta) -> float:
    try:
        max_delta = float(max_delta)
    except (TypeError, ValueError):
        raise ValueError(
            f"max_delta must be a number, got {max_delta!r}") from None
    if not np.isfinite(max_delta) or max_delta < 0:
        raise ValueError(
            f"max_delta must be finite and non-negative, got {max_delta}")
    return max_delta


def validate_inputs(mut_matrix: pd.DataFrame,
                    signatures: pd.DataFrame) -> None:
    """Check the inputs of a strict refit before any fitting is done.

    Raises
    ------
    DimensionMismatchError
        If the mutation types of both matrices differ.
    ValueError
        If a matrix is empty, has negative or missing values, or
        duplicated sample or signature names.
    """
    check_mutation_types(mut_matrix, signatures)

    if mut_matrix.shape[0] == 0:
        raise ValueError("Mutation matrix has no mutation types")
    if mut_matrix.shape[1] == 0:
        raise ValueError("Mutation matrix has no samples")
    if signatures.shape[1] == 0:
        raise ValueError("Signature matrix has no signatures")
    if mut_matrix.columns.has_duplicates:
        raise ValueError(
            f"Duplicated sample names: "
            f"{list(mut_matrix.columns[mut_matrix.columns.duplicated()])}")
    if signatures.columns.has_duplicates:
        raise ValueError(
            f"Duplicated signature names: "
            f"{list(signatures.columns[signatures.columns.duplicated()])}")

    _check_non_negative(mut_matrix, "Mutation matrix")
    _check_non_negative(signatures, "Signature matrix")


def remove_zero_contribution_signatures(
        mut_matrix: pd.DataFrame,
        signatures: pd.DataFrame,
        fit: FitResult | None = None) -> pd.DataFrame:
    """Drop signatures that contribute to no sample of the cohort.

    Parameters
    ----------
    mut_matrix : pd.DataFrame
        Mutation counts of all samples.
    signatures : pd.DataFrame
        Candidate signatures.
    fit : FitResult, optional
        Refit of `mut_matrix` with `signatures`, computed if not
        given.

    Returns
    -------
    pd.DataFrame
        Columns of `signatures` with a strictly positive total
        contribution, in their original order.

    Raises
    ------
    EmptySignatureSetError
        If no signature contributes to any sample.
    """
    if fit is None:
        fit = fit_to_signatures(mut_matrix, signatures)

    present = fit.contribution.sum(axis=1) > 0
    if not present.any():
        raise EmptySignatureSetError(
            f"None of the {signatures.shape[1]} signatures contributes "
            f"to any of the {mut_matrix.shape[1]} samples")

    kept = signatures.loc[:, present.to_numpy()]
    logger.info(
        f"Kept {kept.shape[1]} of {signatures.shape[1]} signatures "
        f"with contribution across samples")
    logger.debug(
        f"Signatures without contribution: "
        f"{list(signatures.columns[~present.to_numpy()])}")
    return kept


def weakest_signature(contribution: pd.DataFrame) -> str:
    """Signature with the lowest relative contribution.

    Contributions are turned into proportions per sample and summed
    over samples. Ties go to the first signature in row order. Samples
    without any contribution add nothing.
    """
    totals = contribution.sum(axis=0)
    denom = totals.replace(0.0, np.nan)
    proportions = contribution.div(denom, axis=1).fillna(0.0)
    scores = proportions.sum(axis=1).to_numpy()
    return contribution.index[np.argsort(scores, kind="stable")[0]]


def initial_state(mut_sample: pd.DataFrame,
                  signatures: pd.DataFrame):
    """Refit with all `signatures`.

    Returns
    -------
    tuple
        The :class:`StrictFitState` and the diagnostic note of its
        similarity (None if the similarity was defined).
    """
    fit = fit_to_signatures(mut_sample, signatures)
    similarity = mean_cos_sim_ori_vs_rec(mut_sample, fit.reconstructed)
    state = StrictFitState(signatures=tuple(signatures.columns),
                           similarity=similarity.value,
                           fit=fit)
    return state, similarity.note


def try_remove_weakest(state: StrictFitState,
                       mut_sample: pd.DataFrame,
                       signatures: pd.DataFrame,
                       max_delta: float) -> Accepted | Rejected:
    """Try to remove the weakest signature of `state`.

    Parameters
    ----------
    state : StrictFitState
        Current state, with at least two signatures.
    mut_sample : pd.DataFrame
        Counts of the sample, one column.
    signatures : pd.DataFrame
        Signature matrix containing at least ``state.signatures``.
    max_delta : float
        Largest tolerated drop in similarity.

    Returns
    -------
    Accepted or Rejected
        Accepted with the reduced state if the similarity dropped by
        at most `max_delta`, otherwise Rejected. `state` itself is
        never modified.
    """
    if len(state.signatures) < 2:
        raise ValueError(
            "Cannot remove a signature from a state with fewer than "
            "two signatures")

    weakest = weakest_signature(state.fit.contribution)
    remaining = tuple(sig for sig in state.signatures if sig != weakest)

    fit = fit_to_signatures(mut_sample, signatures.loc[:, list(remaining)])
    similarity = mean_cos_sim_ori_vs_rec(mut_sample, fit.reconstructed)
    delta = state.similarity - similarity.value

    if delta <= max_delta:
        new_state = StrictFitState(signatures=remaining,
                                   similarity=similarity.value,
                                   fit=fit)
        return Accepted(state=new_state, removed=weakest, delta=delta,
                        note=similarity.note)
    return Rejected(removed=weakest, similarity=similarity.value,
                    delta=delta, note=similarity.note)


def refit_sample_strict(mut_sample: pd.DataFrame,
                        signatures: pd.DataFrame,
                        max_delta: float = default_max_delta
                        ) -> SampleFit:
    """Strictly refit a single sample.

    Starting from all `signatures`, the weakest signature is removed
    while the similarity loss of each removal is at most `max_delta`
    and more than one signature remains. The sample is then refitted
    with the signatures that were kept.

    Parameters
    ----------
    mut_sample : pd.DataFrame
        Counts of one sample (one column).
    signatures : pd.DataFrame
        Signatures, usually after
        :func:`remove_zero_contribution_signatures`.
    max_delta : float
        Largest tolerated drop in similarity per removal.

    Returns
    -------
    SampleFit
    """
    mut_sample = as_mutation_matrix(mut_sample)
    if mut_sample.shape[1] != 1:
        raise ValueError(
            f"Expected the counts of one sample, got "
            f"{mut_sample.shape[1]} columns")
    sample = mut_sample.columns[0]

    state, initial_note = initial_state(mut_sample, signatures)
    initial_similarity = state.similarity
    steps = []
    while len(state.signatures) > 1:
        step = try_remove_weakest(state, mut_sample, signatures,
                                  max_delta)
        steps.append(step)
        if isinstance(step, Rejected):
            logger.debug(
                f"{sample}: removing {step.removed} lowers the cosine "
                f"similarity by {step.delta:.4g} > {max_delta}; "
                f"keeping {len(state.signatures)} signatures")
            break
        logger.debug(
            f"{sample}: removed {step.removed} "
            f"(similarity {step.similarity:.4g})")
        state = step.state

    fit = fit_to_signatures(mut_sample,
                            signatures.loc[:, list(state.signatures)])
    trace = build_sample_trace(sample, initial_similarity, steps,
                               max_delta, initial_note=initial_note)
    return SampleFit(sample=sample, fit=fit, trace=trace)


def combine_sample_fits(sample_fits,
                        signature_order,
                        sample_order) -> FitResult:
    """Combine per-sample fits into cohort matrices.

    Parameters
    ----------
    sample_fits : iterable of SampleFit
        One fit per sample, possibly over different signatures.
    signature_order : sequence of str
        All signatures of the original signature matrix.
    sample_order : sequence of str
        Samples in the order of the mutation matrix.

    Returns
    -------
    FitResult
        Contribution with one row per signature in `signature_order`
        (0 where a signature was not used by a sample) and one column
        per sample in `sample_order`; reconstructed profiles in
        `sample_order`.
    """
    sample_fits = list(sample_fits)
    signature_order = pd.Index(signature_order)
    sample_order = pd.Index(sample_order)

    contribution = pd.concat(
        [sf.fit.contribution for sf in sample_fits], axis=1)
    contribution = (contribution
                    .reindex(index=signature_order, columns=sample_order)
                    .fillna(0.0))

    reconstructed = pd.concat(
        [sf.fit.reconstructed for sf in sample_fits], axis=1)
    reconstructed = reconstructed.reindex(columns=sample_order)

    return FitResult(contribution=contribution,
                     reconstructed=reconstructed)


def _resolve_n_jobs(n_jobs: int | None, n_samples: int) -> int:
    if n_jobs is None or n_jobs < 0:
        n_jobs = cpu_count()
    return max(1, min(int(n_jobs), n_samples))


def fit_to_signatures_strict(mut_matrix,
                             signatures: pd.DataFrame,
                             max_delta: float = default_max_delta,
                             n_jobs: int | None = 1
                             ) -> StrictFitResult:
    """Refit mutational signatures to samples with less overfitting.

    Signatures without contribution across the cohort are dropped
    first. Then each sample is refitted while iteratively removing
    the signature with the lowest contribution, as long as the cosine
    similarity between the original and reconstructed profile drops
    by at most `max_delta` per removal. The set of signatures before
    the first removal that exceeds `max_delta` is used for the final
    refit of the sample.

    Parameters
    ----------
    mut_matrix : pd.DataFrame or pd.Series
        Mutation counts, mutation types x samples.
    signatures : pd.DataFrame
        Signature matrix, mutation types x signatures, with the same
        mutation types as `mut_matrix` in the same order.
    max_delta : float, default 0.004
        Largest tolerated drop in mean cosine similarity per removed
        signature. 0 tolerates no loss at all; a large value lets
        every sample go down to a single signature.
    n_jobs : int or None, default 1
        Number of processes to refit samples in parallel. None or a
        negative value uses all CPUs. Results do not depend on it.

    Returns
    -------
    StrictFitResult
        Contribution (one row per input signature, in input order),
        reconstructed profiles and one decay trace per sample.

    Raises
    ------
    DimensionMismatchError
        If the mutation types of both matrices differ.
    EmptySignatureSetError
        If no signature contributes to any sample.
    ValueError
        If `max_delta` is negative or not finite, or an input matrix
        is invalid.
    """
    mut_matrix, signatures = as_mutation_matrices(mut_matrix, signatures)
    validate_inputs(mut_matrix, signatures)
    max_delta = _check_max_delta(max_delta)

    n_samples = mut_matrix.shape[1]
    logger.info(
        f"Removing signatures without contribution across "
        f"{n_samples} samples...")
    kept_signatures = remove_zero_contribution_signatures(
        mut_matrix, signatures)

    tasks = [(mut_matrix.iloc[:, [i]], kept_signatures, max_delta)
             for i in range(n_samples)]
    n_jobs = _resolve_n_jobs(n_jobs, n_samples)

    logger.info(
        f"Strictly refitting {n_samples} samples "
        f"(max_delta={max_delta}, {n_jobs} processes)...")
    if n_jobs == 1:
        sample_fits = [refit_sample_strict(*task) for task in tasks]
    else:
        with Pool(processes=n_jobs) as pool:
            sample_fits = pool.starmap(refit_sample_strict, tasks)

    combined = combine_sample_fits(sample_fits,
                                   signature_order=signatures.columns,
                                   sample_order=mut_matrix.columns)
    logger.info("... done.")

    return StrictFitResult(contribution=combined.contribution,
                           reconstructed=combined.reconstructed,
                           traces=[sf.trace for sf in sample_fits],
                           max_delta=max_delta)
