"""Constants that we use in multiple modules."""

import os


# Maximum drop in mean cosine similarity that is tolerated when a
# signature is removed during strict refitting
default_max_delta = 0.004

# Label of the first entry of every decay trace, before anything was
# removed
no_signature_removed = "None"

# Number of worker processes used by the command line when --n-jobs
# is not given
default_n_jobs = int(os.environ.get("SIGREFIT_N_JOBS", 1))


# Trinucleotide contexts canonical order. Order first by mutation,
# then by previous nucleotide and then by next nucleotide.
canonical_types_order = [f"{first}[{mid_from}>{mid_to}]{third}"
                         for mid_from in "CT"
                         for mid_to in "ACGT".replace(mid_from, "")
                         for first in "ACGT"
                         for third in "ACGT"]
