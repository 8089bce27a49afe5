"""Exceptions raised by sigrefit."""


class SigrefitError(Exception):
    """Base class for sigrefit errors."""


class DimensionMismatchError(SigrefitError, ValueError):
    """Mutation matrix and signature matrix rows do not line up."""


class EmptySignatureSetError(SigrefitError, ValueError):
    """No signature contributes to any sample of the cohort.

    Raised when fitting leaves no basis to refit the samples against,
    instead of silently producing an all-zero result.
    """
