"""sigrefit: Strict refitting of mutational signatures.

This package refits mutation count matrices to a catalogue of
mutational signatures with non-negative least squares, iteratively
removing the weakest signature of each sample while the cosine
similarity between the original and reconstructed profile does not
drop by more than a tolerance.

"""

__version__ = "0.1.0"

from sigrefit.errors import (DimensionMismatchError,
                             EmptySignatureSetError,
                             SigrefitError)
from sigrefit.fit_to_signatures import FitResult, fit_to_signatures
from sigrefit.fit_to_signatures_strict import (StrictFitResult,
                                               fit_to_signatures_strict)
from sigrefit.decay_trace import SampleTrace

__all__ = [
    "fit_to_signatures",
    "fit_to_signatures_strict",
    "FitResult",
    "StrictFitResult",
    "SampleTrace",
    "SigrefitError",
    "DimensionMismatchError",
    "EmptySignatureSetError",
]
