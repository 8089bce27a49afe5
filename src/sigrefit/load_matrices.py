"""Load mutation count matrices and mutational signature matrices.

Both kinds of matrices are tab-delimited files with one row per
mutation type and a 'MutationType' or 'Type' column naming it. The
remaining columns are samples (mutation matrix) or signatures
(signature matrix), e.g. COSMIC v3.x files or SigProfiler
mutational matrices.

- Functions
  ----------
  - load_signature_matrix :
      Load a signature matrix with mutation types as index and
      signatures as columns.
  - load_mutation_matrix :
      Load a mutation count matrix with mutation types as index and
      samples as columns.
  - order_mutation_types :
      Reorder SBS96 rows into the canonical COSMIC order.

Usage
-----
>>> from sigrefit.load_matrices import load_signature_matrix
>>> sig_matrix = load_signature_matrix("/path/to/matrix.txt")

Notes
-----
- The returned DataFrames will always have index name 'type'.
"""

import os
import logging
import pandas as pd

from .constants import canonical_types_order


logger = logging.getLogger(__name__)


def _load_matrix(location, kind: str) -> pd.DataFrame:
    if not os.path.exists(location):
        msg = f"{kind} file does not exist: {location}"
        logger.error(msg)
        raise FileNotFoundError(msg)

    df = pd.read_csv(location, sep="\t")

    if "MutationType" in df.columns:
        df = df.set_index("MutationType")
    elif "Type" in df.columns:
        df = df.set_index("Type")
    else:
        msg = (f"{kind} must contain either a 'MutationType' "
               "or 'Type' column.")
        logger.error(msg)
        raise ValueError(msg)

    non_numeric = [c for c in df.columns
                   if not pd.api.types.is_numeric_dtype(df[c])]
    if non_numeric:
        msg = f"{kind} has non-numeric columns: {non_numeric}"
        logger.error(msg)
        raise ValueError(msg)

    df.index.name = "type"
    df.columns = df.columns.astype(str)
    return df


def load_signature_matrix(location) -> pd.DataFrame:
    """Load a mutational signature matrix from file.

    Parameters
    ----------
    location : str or Path
        Path to the signature matrix file. Must be a tab-delimited
        file with either a 'MutationType' or 'Type' column as index.

    Returns
    -------
    pd.DataFrame
        Signature matrix with mutation types as index (named 'type' to
        avoid confusion) and signature names as columns.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file lacks the required columns.

    """
    return _load_matrix(location, "Signature matrix")


def load_mutation_matrix(location) -> pd.DataFrame:
    """Load a mutation count matrix from file.

    Same format as :func:`load_signature_matrix`, with samples as
    columns.
    """
    df = _load_matrix(location, "Mutation matrix")
    logger.info(
        f"Loaded {df.shape[1]} samples over {df.shape[0]} mutation "
        f"types from {location}")
    return df


def order_mutation_types(df: pd.DataFrame) -> pd.DataFrame:
    """Reorder the rows of an SBS96 matrix into the canonical order.

    Matrices over any other alphabet are returned unchanged.
    """
    if set(df.index) != set(canonical_types_order):
        logger.debug(
            "Mutation types are not the SBS96 alphabet; keeping order")
        return df
    return df.loc[canonical_types_order]
