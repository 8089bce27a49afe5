"""Basic usage example for sigrefit.

This script demonstrates how to strictly refit a mutation count
matrix to a signature catalogue and inspect how the cosine similarity
decayed while signatures were removed.
"""

from pathlib import Path

from sigrefit import fit_to_signatures, fit_to_signatures_strict
from sigrefit.decay_trace import traces_to_frame
from sigrefit.load_matrices import (load_mutation_matrix,
                                    load_signature_matrix)


def main():
    # Tab-delimited files with a 'MutationType' column, e.g. a
    # SigProfiler SBS96 matrix and COSMIC_v3.4_SBS_GRCh38.txt
    mut_matrix = load_mutation_matrix(Path("/path/to/your/counts.tsv"))
    signatures = load_signature_matrix(
        Path("/path/to/COSMIC_v3.4_SBS_GRCh38.txt"))

    # Regular refit with all signatures, prone to overfitting
    fit = fit_to_signatures(mut_matrix, signatures)
    print("Signatures used per sample (regular refit):")
    print((fit.contribution > 0).sum())

    # Strict refit: remove signatures while the cosine similarity
    # drops by at most 0.004 per removed signature
    result = fit_to_signatures_strict(mut_matrix, signatures,
                                      max_delta=0.004, n_jobs=4)
    print("Signatures used per sample (strict refit):")
    print((result.contribution > 0).sum())

    # Decay of the cosine similarity per sample
    print(traces_to_frame(result.traces).head(20))

    # Plot it for the first sample (needs matplotlib)
    # from sigrefit.figures import plot_sim_decay
    # plot_sim_decay(result.traces[0], save="sim_decay.png")


if __name__ == "__main__":
    main()
