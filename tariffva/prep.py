from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import numpy as np
import pandas as pd

from .util import TariffWarning, _log


@dataclass
class PreparedData:
    id_train: pd.Series
    id_test: pd.Series
    symps_train: pd.DataFrame
    symps_test: pd.DataFrame
    causes_train: np.ndarray
    causes_test: Optional[pd.Series]
    causes_table: List[Any]


def split_cause_column(
    causes_train: Any,
    symps_train: pd.DataFrame,
    symps_test: pd.DataFrame,
) -> tuple[np.ndarray, pd.DataFrame, pd.DataFrame, Optional[pd.Series]]:
    '''Resolve the training labels.
    A single string is taken as a column name: it is pulled out of the
    training table, and out of the test table too when present there (its
    values are returned as the test truth). Anything else is a label vector.
    '''
    if not isinstance(causes_train, str):
        labels = np.asarray(list(causes_train), dtype=object)
        if len(labels) != len(symps_train):
            raise ValueError(
                f"causes_train has {len(labels)} labels but training data has {len(symps_train)} rows"
            )
        return labels, symps_train, symps_test, None

    n_train = int((symps_train.columns == causes_train).sum())
    n_test = int((symps_test.columns == causes_train).sum())
    if n_train == 0:
        raise ValueError("Cannot find the cause-of-death column in training data")
    if n_train > 1 or n_test > 1:
        raise ValueError("Multiple cause columns exist in the dataset.")

    labels = symps_train[causes_train].to_numpy(dtype=object)
    symps_train = symps_train.drop(columns=[causes_train])
    causes_test = None
    if n_test == 1:
        causes_test = symps_test[causes_train].reset_index(drop=True)
        symps_test = symps_test.drop(columns=[causes_train])
    return labels, symps_train, symps_test, causes_test


def align_symptoms(symps_train: pd.DataFrame, symps_test: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Restrict both tables to their shared symptom columns, in training order."""
    test_cols = set(symps_test.columns)
    train_cols = set(symps_train.columns)
    joint = [c for c in symps_train.columns if c in test_cols]
    if len(joint) < symps_train.shape[1]:
        dropped = [c for c in symps_train.columns if c not in test_cols]
        warnings.warn(
            f"There exist columns in training but not testing data. They have been removed: {dropped}",
            TariffWarning,
            stacklevel=4,
        )
        _log(f"[prep] dropped {len(dropped)} training-only columns")
    if len(joint) < symps_test.shape[1]:
        dropped = [c for c in symps_test.columns if c not in train_cols]
        warnings.warn(
            f"There exist columns in testing but not training data. They have been removed: {dropped}",
            TariffWarning,
            stacklevel=4,
        )
        _log(f"[prep] dropped {len(dropped)} testing-only columns")
    return symps_train.loc[:, joint], symps_test.loc[:, joint]


def effective_causes(causes_table: Optional[Sequence[Any]], causes_train: Sequence[Any]) -> List[Any]:
    '''Causes of the table that actually occur in training, table order kept.
    Without a table, the distinct training causes in order of appearance.'''
    observed = pd.unique(pd.Series(list(causes_train), dtype=object))
    if causes_table is None:
        return list(observed)
    seen = set(observed)
    return [c for c in pd.unique(pd.Series(list(causes_table), dtype=object)) if c in seen]


def prepare_inputs(
    causes_train: Any,
    symps_train: pd.DataFrame,
    symps_test: pd.DataFrame,
    causes_table: Optional[Sequence[Any]] = None,
) -> PreparedData:
    if len(symps_train) == 0:
        raise ValueError("Training data has no records")
    if len(symps_test) == 0:
        raise ValueError("Testing data has no records")

    labels, symps_train, symps_test, causes_test = split_cause_column(causes_train, symps_train, symps_test)
    table = effective_causes(causes_table, labels)

    # first column is the record ID
    id_train = symps_train.iloc[:, 0].reset_index(drop=True)
    id_test = symps_test.iloc[:, 0].reset_index(drop=True)
    symps_train, symps_test = align_symptoms(symps_train.iloc[:, 1:], symps_test.iloc[:, 1:])

    return PreparedData(
        id_train=id_train,
        id_test=id_test,
        symps_train=symps_train.reset_index(drop=True),
        symps_test=symps_test.reset_index(drop=True),
        causes_train=labels,
        causes_test=causes_test,
        causes_table=table,
    )
