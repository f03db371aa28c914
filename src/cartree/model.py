# -*- coding: utf-8 -*-
"""
cartree.model
=============

The fitted tree: :class:`Node` holds one region of the partition and
:class:`TreeModel` owns the root and routes samples to leaves.

Routing rule, shared with training: a sample goes to the left child when
``sample[feature_index] <= threshold`` and to the right child otherwise.

Besides prediction the model offers the inspection helpers of a full CART
package: leaf indices (``apply``), impurity-based feature importances, rule
export, pretty printing and Graphviz export.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

import numpy as np

from .criteria import SplitCriterion


# -----------------------------------------------------------------------------
# Node
# -----------------------------------------------------------------------------
@dataclass(eq=False)
class Node:
    """
    One region of the partition.

    Attributes
    ----------
    n_samples : int
        Number of training samples in the region.
    impurity : float
        Impurity of the region under the training criterion.
    depth : int
        Distance from the root (the root has depth 0).
    value : Any
        Predicted class label (majority class) or predicted value (mean).
        Internal nodes carry it too; only leaves use it for prediction.
    distribution : ndarray or None
        Class counts aligned with :attr:`TreeModel.classes`; ``None`` for
        regression trees.
    feature_index, threshold : int, float
        Split of an internal node; ``None`` on leaves.
    left, right : Node
        Children of an internal node; ``None`` on leaves.
    """

    n_samples: int
    impurity: float
    depth: int
    value: Any
    distribution: Optional[np.ndarray] = None
    feature_index: Optional[int] = None
    threshold: Optional[float] = None
    left: Optional["Node"] = None
    right: Optional["Node"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None


def _feature_name(index: int, fn) -> str:
    if fn is not None and 0 <= index < len(fn):
        return str(fn[index])
    return f"X[{index}]"


def _format_threshold(threshold: float) -> str:
    # shortest text that parses back to the same float
    return repr(float(threshold))


# -----------------------------------------------------------------------------
# Tree model
# -----------------------------------------------------------------------------
class TreeModel:
    """
    A fitted binary decision tree.

    Instances are produced by :class:`cartree.builder.TreeBuilder` and never
    change afterwards, so one model can serve predictions from many threads.

    Parameters
    ----------
    root : Node
        Root of the grown tree.
    criterion : SplitCriterion
        Criterion the tree was grown with.
    n_features : int
        Number of columns seen during training.
    classes : ndarray or None
        Sorted class labels for classification trees; ``None`` for regression.
    config : TreeConfig or None
        Configuration used to grow the tree.
    """

    def __init__(self, root: Node, criterion: SplitCriterion, n_features: int,
                 classes: Optional[np.ndarray] = None, config=None):
        self.root = root
        self.criterion = criterion
        self.n_features = int(n_features)
        self.classes = classes
        self.config = config
        self._nodes = list(self._preorder())
        self._ids = {id(node): i for i, node in enumerate(self._nodes)}

    def __repr__(self) -> str:
        return (f"TreeModel(criterion={self.criterion.value!r}, n_features={self.n_features}, "
                f"depth={self.depth}, n_leaves={self.n_leaves})")

    @property
    def is_classifier(self) -> bool:
        return self.classes is not None

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    def _preorder(self) -> Iterator[Node]:
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            if not node.is_leaf:
                stack.append(node.right)
                stack.append(node.left)

    def nodes(self) -> List[Node]:
        """All nodes in pre-order (root, left subtree, right subtree)."""
        return list(self._nodes)

    @property
    def n_nodes(self) -> int:
        return len(self._nodes)

    @property
    def n_leaves(self) -> int:
        return sum(1 for node in self._nodes if node.is_leaf)

    @property
    def depth(self) -> int:
        return max(node.depth for node in self._nodes)

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def _check_sample(self, sample) -> np.ndarray:
        x = np.asarray(sample, dtype=float).ravel()
        if x.shape[0] != self.n_features:
            raise ValueError(f"sample has {x.shape[0]} features, tree expects {self.n_features}")
        return x

    def _check_matrix(self, X) -> np.ndarray:
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        if X.ndim != 2 or X.shape[1] != self.n_features:
            raise ValueError(f"X must have shape (n_samples, {self.n_features}), got {X.shape}")
        return X

    def _leaf(self, x: np.ndarray) -> Node:
        node = self.root
        while not node.is_leaf:
            if x[node.feature_index] <= node.threshold:
                node = node.left
            else:
                node = node.right
        return node

    def predict(self, sample):
        """
        Predict the output for one sample.

        Parameters
        ----------
        sample : array-like of shape (n_features,)

        Returns
        -------
        Class label (classification) or float (regression) stored at the leaf
        the sample reaches.
        """
        return self._leaf(self._check_sample(sample)).value

    def predict_all(self, X) -> np.ndarray:
        """Predict every row of ``X``; returns an array of shape (n_samples,)."""
        X = self._check_matrix(X)
        values = [self._leaf(x).value for x in X]
        if self.is_classifier:
            return np.asarray(values, dtype=self.classes.dtype)
        return np.asarray(values, dtype=float)

    def predict_proba(self, X) -> np.ndarray:
        """
        Class probabilities of every row of ``X``.

        The probabilities are the class frequencies of the training samples in
        the leaf each row reaches, ordered like :attr:`classes`.

        Raises
        ------
        ValueError
            If the tree is a regression tree.
        """
        if not self.is_classifier:
            raise ValueError("predict_proba is only available for classification trees")
        X = self._check_matrix(X)
        out = np.empty((X.shape[0], len(self.classes)), dtype=float)
        for i, x in enumerate(X):
            dist = self._leaf(x).distribution
            out[i] = dist / dist.sum()
        return out

    def apply(self, X) -> np.ndarray:
        """Pre-order index of the leaf reached by every row of ``X``."""
        X = self._check_matrix(X)
        return np.array([self._ids[id(self._leaf(x))] for x in X], dtype=int)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    def feature_importances(self) -> np.ndarray:
        """
        Normalised total impurity decrease contributed by each feature.

        Each split adds ``n * I(node) - n_l * I(left) - n_r * I(right)`` to its
        feature.  The result sums to 1, or is all zeros for a single-leaf tree.
        """
        imp = np.zeros(self.n_features, dtype=float)
        for node in self._nodes:
            if node.is_leaf:
                continue
            imp[node.feature_index] += (
                node.n_samples * node.impurity
                - node.left.n_samples * node.left.impurity
                - node.right.n_samples * node.right.impurity
            )
        total = imp.sum()
        if total > 0:
            imp /= total
        return imp

    def _format_value(self, node: Node, cn=None) -> str:
        if self.is_classifier:
            if cn is not None:
                k = int(np.searchsorted(self.classes, node.value))
                if 0 <= k < len(cn):
                    return str(cn[k])
            return str(node.value)
        return f"{node.value:.6g}"

    def export_rules(self, feature_names=None, class_names=None) -> List[str]:
        """
        Export one rule per leaf.

        Returns
        -------
        list[str]
            Strings of the form ``"<antecedent> => <prediction> (N=<n>)"``,
            left subtrees first.  The antecedent of a single-leaf tree is
            ``"<root>"``.
        """
        rules: List[str] = []
        stack = [(self.root, [])]
        while stack:
            node, parts = stack.pop()
            if node.is_leaf:
                body = " AND ".join(parts) if parts else "<root>"
                rules.append(f"{body} => {self._format_value(node, class_names)} (N={node.n_samples})")
                continue
            name = _feature_name(node.feature_index, feature_names)
            thr = _format_threshold(node.threshold)
            stack.append((node.right, parts + [f"{name} > {thr}"]))
            stack.append((node.left, parts + [f"{name} <= {thr}"]))
        return rules

    def print_tree(self, feature_names=None, class_names=None) -> None:
        """Pretty-print the tree to ``stdout`` as nested if/else blocks."""
        # entries are (node, indent); a None node prints the "else:" line
        stack: List[tuple] = [(self.root, "")]
        while stack:
            node, indent = stack.pop()
            if node is None:
                print(f"{indent}else:")
                continue
            if node.is_leaf:
                print(f"{indent}Predict {self._format_value(node, class_names)} (N={node.n_samples})")
                continue
            name = _feature_name(node.feature_index, feature_names)
            print(f"{indent}if {name} <= {_format_threshold(node.threshold)}:")
            stack.append((node.right, indent + "  "))
            stack.append((None, indent))
            stack.append((node.left, indent + "  "))

    def export_graphviz(self, filename: str = "cart_tree", feature_names=None,
                        class_names=None, format: str = "png") -> str:
        """
        Export the tree with Graphviz.

        With ``format='dot'`` only the DOT source is written, which needs the
        ``graphviz`` Python package but not the ``dot`` binary.  For other
        formats the binary is invoked; if that fails the DOT source is written
        instead.

        Returns
        -------
        str
            Path of the written file.

        Raises
        ------
        RuntimeError
            If the ``graphviz`` package is not installed.
        """
        try:
            from graphviz import Digraph
        except ImportError as e:
            raise RuntimeError("Please install the 'graphviz' Python package.") from e
        dot = Digraph(comment="CART tree", format=format)
        self._add_graph_nodes(dot, feature_names, class_names)
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except Exception:
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    def _add_graph_nodes(self, dot, fn, cn):
        # graph node names are the pre-order ids used by ``apply``
        for node in self._nodes:
            name = f"n{self._ids[id(node)]}"
            if node.is_leaf:
                dot.node(name, f"{self._format_value(node, cn)}\nN={node.n_samples}",
                         shape="box", style="filled", color="lightgrey")
                continue
            label = (f"{_feature_name(node.feature_index, fn)} <= {_format_threshold(node.threshold)}\n"
                     f"{self.criterion.value}={node.impurity:.4f}\nN={node.n_samples}")
            dot.node(name, label, shape="ellipse", style="filled", color="lightblue")
            dot.edge(name, f"n{self._ids[id(node.left)]}", label="True")
            dot.edge(name, f"n{self._ids[id(node.right)]}", label="False")
