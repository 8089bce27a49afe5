"""Run a strict refit from the command line.

Users can run this as:

    python -m sigrefit strict-fit COUNTS SIGNATURES --output DIR

Or import and call programmatically:

    from sigrefit.strict_fit_cli import write_strict_fit_results
    write_strict_fit_results(result, "results/")
"""

import logging
from pathlib import Path

from .constants import default_max_delta, default_n_jobs
from .decay_trace import traces_to_frame
from .fit_to_signatures_strict import (StrictFitResult,
                                       fit_to_signatures_strict)
from .load_matrices import (load_mutation_matrix, load_signature_matrix,
                            order_mutation_types)


logger = logging.getLogger(__name__)


def write_strict_fit_results(result: StrictFitResult, output,
                             plots: bool = False) -> Path:
    """Write the results of a strict refit to a directory.

    Creates ``contribution.tsv``, ``reconstructed.tsv`` and
    ``decay_traces.tsv`` in `output`, and one
    ``sim_decay_<sample>.png`` per sample if `plots` is True.

    Returns
    -------
    Path
        The output directory.
    """
    output = Path(output)
    output.mkdir(parents=True, exist_ok=True)

    result.contribution.to_csv(output / "contribution.tsv", sep="\t")
    result.reconstructed.to_csv(output / "reconstructed.tsv", sep="\t")
    traces_to_frame(result.traces).to_csv(
        output / "decay_traces.tsv", sep="\t", index=False)

    if plots:
        from matplotlib import pyplot as plt
        from .figures import plot_sim_decay

        for trace in result.traces:
            fig = plot_sim_decay(
                trace, save=output / f"sim_decay_{trace.sample}.png")
            plt.close(fig)

    logger.info(f"Results saved to {output}")
    return output


def main(argv=None):
    """Main entry point for command-line usage."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="python -m sigrefit strict-fit",
        description=("Refit mutational signatures per sample, removing "
                     "signatures while the cosine similarity does not "
                     "drop by more than max-delta"),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Refit with the default tolerance
  python -m sigrefit strict-fit counts.tsv COSMIC_v3.4_SBS_GRCh38.txt -o out

  # Fit more strictly, using 4 processes
  python -m sigrefit strict-fit counts.tsv sigs.tsv -o out \\
      --max-delta 0.002 --n-jobs 4
        """,
    )

    parser.add_argument(
        "mut_matrix",
        type=Path,
        help="Tab-delimited mutation count matrix (types x samples)",
    )
    parser.add_argument(
        "signatures",
        type=Path,
        help="Tab-delimited signature matrix (types x signatures)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        required=True,
        help="Output directory",
    )
    parser.add_argument(
        "--max-delta",
        type=float,
        default=default_max_delta,
        help=("Maximum loss of cosine similarity per removed signature "
              f"(default: {default_max_delta})"),
    )
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=default_n_jobs,
        help=("Number of processes, -1 for all CPUs "
              "(default: $SIGREFIT_N_JOBS or 1)"),
    )
    parser.add_argument(
        "--plots",
        action="store_true",
        help="Save a similarity decay plot per sample (needs matplotlib)",
    )

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        mut_matrix = order_mutation_types(
            load_mutation_matrix(args.mut_matrix))
        signatures = order_mutation_types(
            load_signature_matrix(args.signatures))
        result = fit_to_signatures_strict(
            mut_matrix, signatures,
            max_delta=args.max_delta,
            n_jobs=args.n_jobs)
        write_strict_fit_results(result, args.output, plots=args.plots)
    except (OSError, ValueError) as e:
        logger.error(f"\nError: {e}")
        return 1

    return 0
