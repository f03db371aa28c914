# -*- coding: utf-8 -*-
"""
cartree.builder
===============

Tree growth.

:func:`fit` validates the training data and configuration, then
:class:`TreeBuilder` grows the tree depth-first.  Every region is either
finalized as a leaf (too small, too deep, already pure, or no split improves
the impurity) or split in two by the best candidate from
:func:`cartree.splitter.find_best_split`, after which both halves are grown
the same way.

Growth uses an explicit stack of pending regions instead of Python
recursion, so very deep trees never hit the interpreter's recursion limit.
The result does not depend on the traversal order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger
from sklearn.utils.multiclass import type_of_target

from .criteria import SplitCriterion, class_counts, region_impurity
from .exceptions import DegenerateInputError, InvalidConfigurationError
from .model import Node, TreeModel
from .splitter import IMPURITY_EPSILON, find_best_split


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TreeConfig:
    """
    Hyperparameters of a single tree.

    Parameters
    ----------
    criterion : SplitCriterion or str, default="gini"
        Impurity measure.  ``"gini"``, ``"entropy"`` and
        ``"classification_error"`` grow classification trees, ``"mse"`` grows
        regression trees.
    max_depth : int or None, default=None
        Regions at this depth become leaves.  ``None`` means unbounded and
        ``0`` yields a single leaf.
    min_samples_split : int, default=2
        Regions with fewer samples become leaves.  Values below 2 behave
        like 2, since a single sample cannot be split.
    min_samples_leaf : int, default=1
        Splits leaving fewer samples on either side are not considered.
    """

    criterion: SplitCriterion = SplitCriterion.GINI
    max_depth: Optional[int] = None
    min_samples_split: int = 2
    min_samples_leaf: int = 1

    def __post_init__(self):
        object.__setattr__(self, "criterion", SplitCriterion.coerce(self.criterion))
        if self.max_depth is not None:
            object.__setattr__(self, "max_depth", _as_int(self.max_depth, "max_depth", 0))
        object.__setattr__(self, "min_samples_split",
                           _as_int(self.min_samples_split, "min_samples_split", 1))
        object.__setattr__(self, "min_samples_leaf",
                           _as_int(self.min_samples_leaf, "min_samples_leaf", 1))


def _as_int(value, name: str, minimum: int) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise InvalidConfigurationError(f"must be an integer, got {value!r}", parameter=name)
    if value < minimum:
        raise InvalidConfigurationError(f"must be >= {minimum}, got {value}", parameter=name)
    return int(value)


# -----------------------------------------------------------------------------
# Builder
# -----------------------------------------------------------------------------
class TreeBuilder:
    """
    Grow a :class:`~cartree.model.TreeModel` from prepared arrays.

    ``build`` expects data that already passed :func:`fit`'s validation:
    a finite float matrix and, for classification criteria, integer class
    codes ``0..len(classes)-1``.
    """

    def __init__(self, config: TreeConfig | None = None):
        self.config = config if config is not None else TreeConfig()

    def build(self, X: np.ndarray, y: np.ndarray, classes: np.ndarray | None = None) -> TreeModel:
        cfg = self.config
        criterion = cfg.criterion
        n_classes = len(classes) if classes is not None else None
        min_split = max(cfg.min_samples_split, 2)

        # (indices, depth, parent, side); side is "left"/"right", None for the root
        root: Node | None = None
        stack = [(np.arange(X.shape[0]), 0, None, None)]
        while stack:
            idx, depth, parent, side = stack.pop()
            n = idx.shape[0]
            if n == 0:
                raise DegenerateInputError(depth)
            y_node = y[idx]
            node_imp = region_impurity(criterion, y_node, n_classes)
            node = self._make_node(y_node, n, node_imp, depth, classes)
            if parent is None:
                root = node
            else:
                setattr(parent, side, node)

            if n < min_split or _is_pure(criterion, y_node, node_imp) \
                    or (cfg.max_depth is not None and depth >= cfg.max_depth):
                logger.trace("leaf", depth=depth, n_samples=n, value=node.value)
                continue

            split = find_best_split(X[idx], y_node, criterion,
                                    n_classes=n_classes,
                                    min_samples_leaf=cfg.min_samples_leaf,
                                    parent_impurity=node_imp)
            if split is None:
                logger.trace("leaf (no improving split)", depth=depth, n_samples=n, value=node.value)
                continue

            goes_left = X[idx, split.feature_index] <= split.threshold
            left_idx, right_idx = idx[goes_left], idx[~goes_left]
            node.feature_index = split.feature_index
            node.threshold = split.threshold
            logger.debug("split", depth=depth, n_samples=n, feature=split.feature_index,
                         threshold=split.threshold, impurity=node_imp,
                         weighted_impurity=split.weighted_impurity,
                         n_left=left_idx.shape[0], n_right=right_idx.shape[0])
            # right first so the left subtree is grown first
            stack.append((right_idx, depth + 1, node, "right"))
            stack.append((left_idx, depth + 1, node, "left"))

        return TreeModel(root, criterion, X.shape[1], classes=classes, config=cfg)

    @staticmethod
    def _make_node(y_node, n, node_imp, depth, classes) -> Node:
        if classes is None:
            return Node(n_samples=n, impurity=node_imp, depth=depth,
                        value=float(np.mean(y_node)))
        dist = class_counts(y_node, len(classes))
        # argmax keeps the lowest class index on ties
        return Node(n_samples=n, impurity=node_imp, depth=depth,
                    value=classes[int(np.argmax(dist))], distribution=dist)


def _is_pure(criterion, y_node, node_imp) -> bool:
    if criterion is SplitCriterion.MSE:
        # the MSE of a tiny-range target can sit below any fixed tolerance
        return bool(y_node.min() == y_node.max())
    return node_imp <= IMPURITY_EPSILON


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------
def _validate_matrix(matrix) -> np.ndarray:
    try:
        X = np.asarray(matrix, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError("feature matrix must be numeric", parameter="X") from e
    if X.ndim != 2:
        raise InvalidConfigurationError(f"expected a 2-D matrix, got {X.ndim}-D", parameter="X")
    if X.shape[0] == 0:
        raise InvalidConfigurationError("feature matrix has no rows", parameter="X")
    if X.shape[1] == 0:
        raise InvalidConfigurationError("feature matrix has no columns", parameter="X")
    if not np.isfinite(X).all():
        raise InvalidConfigurationError("feature matrix contains NaN or infinite values", parameter="X")
    return X


def _validate_targets(targets, n_rows: int, criterion: SplitCriterion):
    y = np.asarray(targets)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y.ravel()
    if y.ndim != 1:
        raise InvalidConfigurationError(f"expected a 1-D target vector, got shape {y.shape}", parameter="y")
    if y.shape[0] != n_rows:
        raise InvalidConfigurationError(
            f"length {y.shape[0]} does not match the {n_rows} rows of X", parameter="y")

    if criterion is SplitCriterion.MSE:
        if y.dtype.kind not in "iuf":
            raise InvalidConfigurationError(
                f"criterion 'mse' needs a numeric target, got dtype {y.dtype}", parameter="criterion")
        y = y.astype(float)
        if not np.isfinite(y).all():
            raise InvalidConfigurationError("target contains NaN or infinite values", parameter="y")
        return y, None

    try:
        kind = type_of_target(y)
    except ValueError as e:
        raise InvalidConfigurationError(str(e), parameter="y") from e
    if kind == "continuous":
        raise InvalidConfigurationError(
            f"criterion {criterion.value!r} needs class labels, got a continuous target",
            parameter="criterion")
    classes, codes = np.unique(y, return_inverse=True)
    return codes.ravel(), classes


def fit(matrix, targets, config: TreeConfig | None = None) -> TreeModel:
    """
    Grow a CART tree.

    Parameters
    ----------
    matrix : array-like of shape (n_samples, n_features)
        Numeric, finite feature values.
    targets : array-like of shape (n_samples,)
        Class labels for classification criteria, numbers for ``MSE``.
    config : TreeConfig, optional
        Hyperparameters; defaults to ``TreeConfig()`` (Gini, unbounded depth).

    Returns
    -------
    TreeModel
        The fitted tree.

    Raises
    ------
    InvalidConfigurationError
        If the data is empty, malformed or incompatible with the criterion.
    """
    config = config if config is not None else TreeConfig()
    X = _validate_matrix(matrix)
    y, classes = _validate_targets(targets, X.shape[0], config.criterion)
    logger.info("growing tree", n_samples=X.shape[0], n_features=X.shape[1],
                criterion=config.criterion.value, max_depth=config.max_depth)
    model = TreeBuilder(config).build(X, y, classes)
    logger.info("tree grown", depth=model.depth, n_leaves=model.n_leaves, n_nodes=model.n_nodes)
    return model
