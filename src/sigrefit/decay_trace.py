"""Decay of the cosine similarity while signatures are removed.

For every sample the strict refit records which signature was removed
in each iteration and the cosine similarity between the original and
the reconstructed profile after its removal. The first entry is always
``"None"`` with the similarity of the fit using all signatures.

These traces carry no weight in the refit results; they are the data
behind the decay bar charts of :func:`sigrefit.figures.plot_sim_decay`.
"""

from dataclasses import dataclass

import pandas as pd

from .constants import no_signature_removed


@dataclass(frozen=True)
class SampleTrace:
    """Ordered (removed signature, similarity) record of one sample."""

    sample: str
    removed: tuple
    similarities: tuple
    max_delta: float
    notes: tuple = ()

    def __post_init__(self):
        if len(self.removed) != len(self.similarities):
            raise ValueError(
                f"Trace of sample {self.sample!r} has "
                f"{len(self.removed)} removed signatures but "
                f"{len(self.similarities)} similarities")
        if not self.removed or self.removed[0] != no_signature_removed:
            raise ValueError(
                f"Trace of sample {self.sample!r} must start with "
                f"{no_signature_removed!r}")

    def __len__(self):
        return len(self.removed)

    @property
    def deltas(self) -> tuple:
        """Drop in similarity caused by each recorded removal."""
        sims = self.similarities
        return tuple(sims[i - 1] - sims[i] for i in range(1, len(sims)))

    @property
    def final_delta(self) -> float | None:
        """Delta between the last two entries, None if nothing removed."""
        if len(self) < 2:
            return None
        return self.similarities[-2] - self.similarities[-1]

    @property
    def final_delta_exceeded(self) -> bool:
        """Whether the last recorded removal lost more than max_delta.

        This is True exactly when the refit stopped because a removal
        was rejected.
        """
        final_delta = self.final_delta
        return final_delta is not None and final_delta > self.max_delta

    def to_frame(self) -> pd.DataFrame:
        """Return the trace as a table, one row per iteration.

        Columns are ``removed_signature``, ``cosine_similarity``,
        ``delta`` (NaN for the first row) and ``high_delta``, which
        flags the final bar when its delta exceeded `max_delta`.
        """
        high_delta = [False] * len(self)
        if self.final_delta_exceeded:
            high_delta[-1] = True

        return pd.DataFrame({
            "removed_signature": list(self.removed),
            "cosine_similarity": list(self.similarities),
            "delta": [float("nan")] + list(self.deltas),
            "high_delta": high_delta,
        })


def build_sample_trace(sample, initial_similarity, steps, max_delta,
                       initial_note=None) -> SampleTrace:
    """Assemble the trace of a sample from its removal steps.

    Parameters
    ----------
    sample : str
        Sample name.
    initial_similarity : float
        Similarity of the fit with all signatures.
    steps : iterable
        Removal outcomes in iteration order, each with ``removed``,
        ``similarity`` and ``note`` attributes. Rejected removals are
        recorded too.
    max_delta : float
        Tolerance used for the refit.
    initial_note : str or None
        Diagnostic of the initial similarity, if any.
    """
    removed = [no_signature_removed]
    similarities = [initial_similarity]
    notes = [initial_note] if initial_note else []

    for step in steps:
        removed.append(step.removed)
        similarities.append(step.similarity)
        if step.note:
            notes.append(step.note)

    return SampleTrace(sample=sample,
                       removed=tuple(removed),
                       similarities=tuple(similarities),
                       max_delta=max_delta,
                       notes=tuple(notes))


def traces_to_frame(traces) -> pd.DataFrame:
    """Concatenate the traces of several samples in long format."""
    frames = []
    for trace in traces:
        frame = trace.to_frame()
        frame.insert(0, "sample", trace.sample)
        frame.insert(1, "iteration", range(len(trace)))
        frames.append(frame)

    if not frames:
        return pd.DataFrame(
            columns=["sample", "iteration", "removed_signature",
                     "cosine_similarity", "delta", "high_delta"])
    return pd.concat(frames, ignore_index=True)
