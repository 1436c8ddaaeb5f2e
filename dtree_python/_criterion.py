# dtree_python/_criterion.py
from enum import Enum

import numpy as np


class SplitRule(Enum):
    """Impurity measure used to score candidate splits."""

    GINI = "gini"
    ENTROPY = "entropy"
    CLASSIFICATION_ERROR = "classification_error"

    @classmethod
    def parse(cls, rule):
        if isinstance(rule, cls):
            return rule
        if isinstance(rule, str):
            try:
                return cls(rule.lower())
            except ValueError:
                pass
        raise ValueError(
            f"Unknown split rule: {rule!r}, expected one of "
            f"{[r.value for r in cls]}"
        )


def impurity(count, n, rule=SplitRule.GINI):
    """Impurity of class histogram(s).

    Parameters
    ----------
    count : array-like of shape (k,) or (m, k)
        Weighted sample count of each class.
    n : float or array-like of shape (m,)
        Total of ``count`` along the last axis. Must be positive.
    rule : SplitRule

    Returns
    -------
    float for a single histogram, ndarray of shape (m,) for a stack.
    """
    count = np.asarray(count, dtype=np.float64)
    n = np.asarray(n, dtype=np.float64)
    p = count / n[..., np.newaxis]

    if rule is SplitRule.GINI:
        value = 1.0 - np.sum(p * p, axis=-1)
    elif rule is SplitRule.ENTROPY:
        # 0 * log2(0) is taken as 0
        log_p = np.log2(p, out=np.zeros_like(p), where=p > 0)
        value = -np.sum(p * log_p, axis=-1)
    elif rule is SplitRule.CLASSIFICATION_ERROR:
        value = np.abs(1.0 - np.max(p, axis=-1))
    else:
        raise ValueError(f"Unknown split rule: {rule!r}")

    if np.ndim(value) == 0:
        return float(value)
    return value
