# -*- coding: utf-8 -*-
"""
cartree.criteria
================

Split-quality criteria for CART.

Three classification criteria measure how mixed the class labels of a region
are (Gini index, entropy and classification error) and one regression
criterion measures the spread of the target (mean squared error around the
region mean).  All of them are 0 for a perfectly homogeneous region.

The single entry point :func:`impurity` works on pre-aggregated statistics:

- classification: a vector of per-class counts;
- regression: the pair ``(sum, sum_of_squares)`` of the target values
  (see :func:`regression_stats`).

It broadcasts over leading axes, so the split search can score every
candidate threshold of a feature in one call.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from .exceptions import InvalidConfigurationError


# -----------------------------------------------------------------------------
# Criterion
# -----------------------------------------------------------------------------
class SplitCriterion(str, Enum):
    """The function used to measure the quality of a split."""

    GINI = "gini"
    ENTROPY = "entropy"
    CLASSIFICATION_ERROR = "classification_error"
    MSE = "mse"

    @property
    def is_classification(self) -> bool:
        return self is not SplitCriterion.MSE

    @classmethod
    def coerce(cls, value) -> "SplitCriterion":
        """Return the member matching ``value`` (a member or its string name)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        valid = ", ".join(repr(m.value) for m in cls)
        raise InvalidConfigurationError(
            f"unknown criterion {value!r}; expected one of {valid}", parameter="criterion"
        )


# -----------------------------------------------------------------------------
# Impurity
# -----------------------------------------------------------------------------
def impurity(criterion, counts, n):
    """
    Impurity of one or many regions.

    Parameters
    ----------
    criterion : SplitCriterion or str
        Criterion to evaluate.
    counts : array-like of shape (..., n_classes) or (..., 2)
        Per-class counts for classification criteria, ``(sum, sum_of_squares)``
        of the target values for ``MSE``.
    n : int or array-like of shape (...)
        Number of samples in each region.

    Returns
    -------
    float or ndarray
        A Python float when a single region is given, otherwise an array with
        the leading shape of ``counts``.  Empty regions score 0.
    """
    criterion = SplitCriterion.coerce(criterion)
    counts = np.asarray(counts, dtype=float)
    n = np.asarray(n, dtype=float)
    safe_n = np.where(n > 0, n, 1.0)

    if criterion is SplitCriterion.MSE:
        mean = counts[..., 0] / safe_n
        # E[x^2] - E[x]^2 can dip below zero by rounding
        out = np.maximum(counts[..., 1] / safe_n - mean * mean, 0.0)
    else:
        p = counts / safe_n[..., None]
        if criterion is SplitCriterion.GINI:
            out = 1.0 - np.sum(p * p, axis=-1)
        elif criterion is SplitCriterion.ENTROPY:
            # 0 * log2(1) == 0 covers the p == 0 terms
            logp = np.log2(np.where(p > 0, p, 1.0))
            out = -np.sum(p * logp, axis=-1) + 0.0
        else:
            out = np.abs(1.0 - np.max(p, axis=-1))

    out = np.where(n > 0, out, 0.0)
    if out.ndim == 0:
        return float(out)
    return out


def gini(counts) -> float:
    """Gini index ``1 - sum(p_i^2)`` of a class-count vector."""
    counts = np.asarray(counts, dtype=float)
    return impurity(SplitCriterion.GINI, counts, counts.sum())


def entropy(counts) -> float:
    """Shannon entropy in bits of a class-count vector."""
    counts = np.asarray(counts, dtype=float)
    return impurity(SplitCriterion.ENTROPY, counts, counts.sum())


def classification_error(counts) -> float:
    """Misclassification rate ``1 - max(p_i)`` of a class-count vector."""
    counts = np.asarray(counts, dtype=float)
    return impurity(SplitCriterion.CLASSIFICATION_ERROR, counts, counts.sum())


def mse(values) -> float:
    """Mean squared deviation of ``values`` from their mean."""
    values = np.asarray(values, dtype=float).ravel()
    return impurity(SplitCriterion.MSE, regression_stats(values), values.size)


def region_impurity(criterion, y: np.ndarray, n_classes: int | None = None) -> float:
    """
    Impurity of a region given its raw targets.

    ``y`` holds class codes ``0..n_classes-1`` for classification criteria and
    numeric targets for ``MSE``.
    """
    criterion = SplitCriterion.coerce(criterion)
    if criterion is SplitCriterion.MSE:
        return impurity(criterion, regression_stats(y), len(y))
    return impurity(criterion, class_counts(y, n_classes), len(y))


def class_counts(y_codes: np.ndarray, n_classes: int) -> np.ndarray:
    """Per-class counts of integer class codes ``0..n_classes-1``."""
    return np.bincount(y_codes, minlength=n_classes).astype(float)


def regression_stats(values: np.ndarray) -> np.ndarray:
    """
    ``(sum, sum_of_squares)`` of ``values`` shifted by their first element.

    The MSE is shift invariant; shifting keeps the two sums small so the
    difference ``E[x^2] - E[x]^2`` loses less precision, and makes a run of
    identical values score exactly 0.
    """
    values = np.asarray(values, dtype=float)
    if values.size:
        values = values - values.flat[0]
    return np.array([values.sum(), np.dot(values, values)])
