# -*- coding: utf-8 -*-
"""
cartree.tree
============

This module implements a CART decision tree classifier with a scikit-learn
API.  The tree is grown by :func:`cartree.builder.fit`: binary splits on
numeric features chosen to minimise the weighted Gini index, entropy or
classification error of the two children, with pre-pruning via
``max_depth``/``min_samples_split``/``min_samples_leaf``.

In addition to training and prediction the classifier exposes the helpers of
the underlying :class:`~cartree.model.TreeModel`: leaf indices, feature
importances, rule export, pretty printing and Graphviz export.
"""

from __future__ import annotations

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_is_fitted

from .builder import TreeConfig, fit
from .criteria import SplitCriterion
from .exceptions import InvalidConfigurationError


class CARTClassifier(ClassifierMixin, BaseEstimator):
    """
    CART decision tree classifier.

    Parameters
    ----------
    criterion : {"gini", "entropy", "classification_error"}, default="gini"
        Function measuring the quality of a split.
    max_depth : int or None, default=None
        Maximum depth of the tree.  If ``None`` nodes are expanded until they
        are pure or smaller than ``min_samples_split``.
    min_samples_split : int, default=2
        Minimum number of samples required to split a node.
    min_samples_leaf : int, default=1
        Minimum number of samples required in each child after a split.

    Attributes
    ----------
    tree_ : TreeModel
        The fitted tree.
    classes_ : ndarray of shape (n_classes,)
        Sorted class labels.
    n_features_in_ : int
        Number of features seen during ``fit``.

    Notes
    -----
    Training is deterministic: fitting twice on the same data yields the same
    tree.  Ties between equally good splits go to the lowest feature index
    and then the lowest threshold.
    """

    def __init__(self, *, criterion="gini", max_depth=None, min_samples_split=2,
                 min_samples_leaf=1):
        self.criterion = criterion
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf

    def _config(self) -> TreeConfig:
        config = TreeConfig(criterion=self.criterion, max_depth=self.max_depth,
                            min_samples_split=self.min_samples_split,
                            min_samples_leaf=self.min_samples_leaf)
        if config.criterion is SplitCriterion.MSE:
            raise InvalidConfigurationError(
                "'mse' is a regression criterion; use CARTRegressor", parameter="criterion")
        return config

    def fit(self, X, y):
        """
        Build the tree from the training set ``(X, y)``.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Numeric training samples without missing values.
        y : array-like of shape (n_samples,)
            Class labels.

        Returns
        -------
        self : CARTClassifier
        """
        self.tree_ = fit(X, y, self._config())
        self.classes_ = self.tree_.classes
        self.n_features_in_ = self.tree_.n_features
        return self

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)

        Returns
        -------
        ndarray of shape (n_samples,)
            Majority class of the leaf each sample reaches.
        """
        check_is_fitted(self, "tree_")
        return self.tree_.predict_all(X)

    def predict_proba(self, X):
        """
        Predict class probabilities for the provided samples.

        Returns
        -------
        ndarray of shape (n_samples, n_classes)
            Training class frequencies of the leaf each sample reaches, in the
            order of ``classes_``.
        """
        check_is_fitted(self, "tree_")
        return self.tree_.predict_proba(X)

    def predict_log_proba(self, X):
        """Natural logarithm of :meth:`predict_proba`; empty classes give ``-inf``."""
        with np.errstate(divide="ignore"):
            return np.log(self.predict_proba(X))

    def apply(self, X):
        """Index of the leaf each sample ends up in."""
        check_is_fitted(self, "tree_")
        return self.tree_.apply(X)

    def get_depth(self) -> int:
        check_is_fitted(self, "tree_")
        return self.tree_.depth

    def get_n_leaves(self) -> int:
        check_is_fitted(self, "tree_")
        return self.tree_.n_leaves

    @property
    def feature_importances_(self):
        """Normalised impurity decrease per feature."""
        check_is_fitted(self, "tree_")
        return self.tree_.feature_importances()

    def export_rules(self, *, feature_names=None, class_names=None):
        """
        Export the tree as a list of ``"<antecedent> => <class> (N=<n>)"`` rules.

        Parameters
        ----------
        feature_names : list[str], optional
            Names used for the features instead of ``X[i]``.
        class_names : list[str], optional
            Names used for the classes, aligned with ``classes_``.
        """
        check_is_fitted(self, "tree_")
        return self.tree_.export_rules(feature_names, class_names)

    def print_tree(self, feature_names=None, class_names=None):
        """Pretty-print the fitted tree to ``stdout``."""
        check_is_fitted(self, "tree_")
        self.tree_.print_tree(feature_names, class_names)

    def export_graphviz(self, filename: str = "cart_tree", *, feature_names=None,
                        class_names=None, format: str = "png") -> str:
        """
        Export the fitted tree with Graphviz.

        See :meth:`cartree.model.TreeModel.export_graphviz`; ``format='dot'``
        does not need the Graphviz binary.
        """
        check_is_fitted(self, "tree_")
        return self.tree_.export_graphviz(filename, feature_names, class_names, format)
