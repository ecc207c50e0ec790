import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def tiny_train():
    """Two causes, two deaths each; A always has X, B never does."""
    return pd.DataFrame(
        {
            "ID": ["d1", "d2", "d3", "d4"],
            "cause": ["A", "A", "B", "B"],
            "X": ["Y", "Y", "", ""],
            "Z": [".", "Y", "Y", ""],
        }
    )


@pytest.fixture
def tiny_test():
    return pd.DataFrame(
        {
            "ID": ["t1", "t2"],
            "X": ["Y", ""],
            "Z": ["Y", "Y"],
        }
    )


@pytest.fixture
def synthetic_pair():
    """Three causes with distinct symptom profiles, 30 deaths each."""
    rng = np.random.default_rng(11)
    profiles = {
        "injury": [0.9, 0.1, 0.1, 0.2, 0.5],
        "malaria": [0.1, 0.9, 0.2, 0.7, 0.5],
        "stroke": [0.1, 0.2, 0.9, 0.1, 0.5],
    }
    symptoms = ["s_wound", "s_fever", "s_paralysis", "s_chills", "s_cough"]

    def draw(n_per, prefix):
        rows = []
        for cause, probs in profiles.items():
            for i in range(n_per):
                hits = rng.random(len(probs)) < np.asarray(probs)
                row = {"ID": f"{prefix}{cause}{i}", "cause": cause}
                row.update({s: ("Y" if h else "") for s, h in zip(symptoms, hits)})
                rows.append(row)
        return pd.DataFrame(rows)

    return draw(30, "tr_"), draw(10, "te_")
