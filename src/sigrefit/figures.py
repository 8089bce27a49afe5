"""Plotting utilities for strict refitting results.

Bar charts of how the cosine similarity between original and
reconstructed profiles decayed while signatures were removed from a
sample. matplotlib is only needed when plotting (``pip install
sigrefit[plot]``).
"""

from .decay_trace import SampleTrace


def plot_sim_decay(trace: SampleTrace,
                   *,
                   save: str | None = None,
                   show: bool = False):
    """Plot the cosine similarity after each removed signature.

    Parameters
    ----------
    trace : SampleTrace
        Decay trace of one sample.
    save : str or None, optional
        File path to save the figure. If None (default) the figure is
        not written to disk.
    show : bool, default False
        Whether to display the figure after creation.

    Returns
    -------
    matplotlib.figure.Figure
        The created figure. The last bar is red when its removal
        lost more than ``trace.max_delta`` and was therefore not
        applied; the others are grey.
    """
    from matplotlib import pyplot as plt

    df = trace.to_frame()
    colors = ["red" if high else "grey" for high in df["high_delta"]]

    fig, ax = plt.subplots(figsize=(max(3, 0.4 * len(df) + 1), 3))
    ax.bar(range(len(df)), df["cosine_similarity"], color=colors)
    ax.set_xticks(range(len(df)))
    ax.set_xticklabels(df["removed_signature"], rotation=90, fontsize=10)
    ax.set_xlabel("Removed signatures", fontsize=12)
    ax.set_ylabel(f"Cosine similarity (max delta: {trace.max_delta})",
                  fontsize=12)
    ax.set_title(str(trace.sample), fontsize=12)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    fig.tight_layout()

    if save:
        fig.savefig(save, bbox_inches="tight")
    if show:
        plt.show()

    return fig
