# -*- coding: utf-8 -*-
"""
cartree.splitter
================

Best-split search for a single region.

For every feature the region is sorted once by that feature and scanned left
to right while class counts (or target sums) are accumulated, so all
candidate thresholds of a feature are scored in ``O(n log n)``.  Candidates
sit between consecutive distinct values; a sample goes left when
``x <= threshold``, the same rule :class:`cartree.model.TreeModel` uses for
routing.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .criteria import SplitCriterion, impurity, region_impurity

# Relative tolerance for "strictly better than the parent", scaled by the
# magnitude of the statistics the impurities were computed from.
IMPURITY_EPSILON = 1e-12


@dataclass(frozen=True)
class CandidateSplit:
    """
    Best split found for a region.

    Attributes
    ----------
    feature_index : int
        Column the region is split on.
    threshold : float
        Samples with ``x[feature_index] <= threshold`` go left.
    n_left, n_right : int
        Number of samples on each side.
    left_stats, right_stats : ndarray
        Class counts on each side (classification) or ``(sum, sum_of_squares)``
        of the targets shifted by the region's first target (regression).
    weighted_impurity : float
        ``(n_left/n) * I(left) + (n_right/n) * I(right)``.
    """

    feature_index: int
    threshold: float
    n_left: int
    n_right: int
    left_stats: np.ndarray
    right_stats: np.ndarray
    weighted_impurity: float


def find_best_split(X: np.ndarray, y: np.ndarray, criterion, *,
                    n_classes: int | None = None,
                    min_samples_leaf: int = 1,
                    parent_impurity: float | None = None) -> CandidateSplit | None:
    """
    Find the split of ``(X, y)`` with the lowest weighted child impurity.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
        Feature values of the region.
    y : ndarray of shape (n_samples,)
        Class codes ``0..n_classes-1`` for classification criteria, float
        targets for ``MSE``.
    criterion : SplitCriterion or str
        Impurity measure to minimise.
    n_classes : int, optional
        Number of classes; required for classification criteria.
    min_samples_leaf : int, default=1
        Candidates leaving fewer samples on either side are skipped.
    parent_impurity : float, optional
        Impurity of the whole region; computed when not given.

    Returns
    -------
    CandidateSplit or None
        ``None`` when no candidate exists (e.g. every feature is constant) or
        when the best candidate does not strictly improve on the parent.

    Notes
    -----
    Ties keep the first candidate met: features in ascending index order,
    thresholds in ascending value order.
    """
    criterion = SplitCriterion.coerce(criterion)
    n, n_features = X.shape
    if criterion.is_classification and n_classes is None:
        n_classes = int(y.max()) + 1 if n else 0
    if parent_impurity is None:
        parent_impurity = region_impurity(criterion, y, n_classes)
    min_leaf = max(int(min_samples_leaf), 1)
    if n < 2 * min_leaf:
        return None

    if criterion.is_classification:
        per_sample = np.zeros((n, n_classes), dtype=float)
        per_sample[np.arange(n), y] = 1.0
    else:
        yc = np.asarray(y, dtype=float)
        yc = yc - yc[0]
        per_sample = np.column_stack([yc, yc * yc])
    total = per_sample.sum(axis=0)

    best: CandidateSplit | None = None
    for j in range(n_features):
        order = np.argsort(X[:, j], kind="mergesort")
        v = X[order, j]
        # boundary i splits the sorted region into [0..i] and [i+1..n-1]
        bd = np.nonzero(v[:-1] < v[1:])[0]
        if bd.size == 0:
            continue
        n_left = bd + 1
        n_right = n - n_left
        ok = (n_left >= min_leaf) & (n_right >= min_leaf)
        if not ok.any():
            continue
        bd, n_left, n_right = bd[ok], n_left[ok], n_right[ok]

        left = per_sample[order].cumsum(axis=0)[bd]
        right = total - left
        score = (n_left / n) * impurity(criterion, left, n_left) \
            + (n_right / n) * impurity(criterion, right, n_right)

        k = int(np.argmin(score))
        if best is not None and not score[k] < best.weighted_impurity:
            continue
        i = bd[k]
        thr = 0.5 * (v[i] + v[i + 1])
        if thr >= v[i + 1]:
            # midpoint of adjacent floats can round onto the upper value
            thr = v[i]
        best = CandidateSplit(
            feature_index=j,
            threshold=float(thr),
            n_left=int(n_left[k]),
            n_right=int(n_right[k]),
            left_stats=left[k].copy(),
            right_stats=right[k].copy(),
            weighted_impurity=float(score[k]),
        )

    if best is None:
        return None
    if criterion.is_classification:
        scale = parent_impurity
    else:
        # rounding in E[x^2] - E[x]^2 is proportional to E[x^2], not to the variance
        scale = max(parent_impurity, total[1] / n)
    if parent_impurity - best.weighted_impurity <= IMPURITY_EPSILON * scale:
        return None
    return best
