"""Shared fixtures: small orthogonal signature catalogues."""

import pandas as pd
import pytest


@pytest.fixture
def orthogonal_signatures():
    """Two signatures over a two-type alphabet, S1=[1,0], S2=[0,1]."""
    return pd.DataFrame({"S1": [1.0, 0.0], "S2": [0.0, 1.0]},
                        index=pd.Index(["A", "B"], name="type"))


@pytest.fixture
def single_sample():
    """One sample with counts [10, 5]."""
    return pd.DataFrame({"sample1": [10.0, 5.0]},
                        index=pd.Index(["A", "B"], name="type"))


@pytest.fixture
def three_signatures():
    """Identity catalogue over three mutation types."""
    return pd.DataFrame({"S1": [1.0, 0.0, 0.0],
                         "S2": [0.0, 1.0, 0.0],
                         "S3": [0.0, 0.0, 1.0]},
                        index=pd.Index(["A", "B", "C"], name="type"))
