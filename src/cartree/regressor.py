"""CART regression tree with a scikit-learn API.

Splits minimise the weighted mean squared error of the two children; leaves
predict the mean target of their training samples.
"""
from __future__ import annotations

from typing import List, Optional

from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_is_fitted

from .builder import TreeConfig, fit
from .criteria import SplitCriterion
from .exceptions import InvalidConfigurationError


class CARTRegressor(RegressorMixin, BaseEstimator):
    r"""
    CARTRegressor(criterion="mse", max_depth=None, min_samples_split=2,
                  min_samples_leaf=1)

    A CART regression tree.

    Parameters
    ----------
    criterion : {"mse"}, default="mse"
        Split criterion; only mean squared error applies to regression.
    max_depth : int or None, default=None
        Maximum depth of the tree; ``None`` means unbounded.
    min_samples_split : int, default=2
        Minimum number of samples at a node to allow splitting.
    min_samples_leaf : int, default=1
        Minimum number of samples required in each child after the split.

    Attributes
    ----------
    tree_ : TreeModel
        Root and metadata of the trained regression tree.
    n_features_in_ : int
        Number of features seen during ``fit``.
    """

    def __init__(self, *, criterion="mse", max_depth=None, min_samples_split=2,
                 min_samples_leaf=1):
        self.criterion = criterion
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf

    # ----------------------------- Public API -----------------------------

    def fit(self, X, y):
        config = TreeConfig(criterion=self.criterion, max_depth=self.max_depth,
                            min_samples_split=self.min_samples_split,
                            min_samples_leaf=self.min_samples_leaf)
        if config.criterion is not SplitCriterion.MSE:
            raise InvalidConfigurationError(
                f"{config.criterion.value!r} is a classification criterion; use CARTClassifier",
                parameter="criterion")
        self.tree_ = fit(X, y, config)
        self.n_features_in_ = self.tree_.n_features
        return self

    def predict(self, X):
        check_is_fitted(self, "tree_")
        return self.tree_.predict_all(X)

    def apply(self, X):
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
        check_is_fitted(self, "tree_")
        return self.tree_.feature_importances()

    # ----------------------------- Pretty / Rules / Graphviz -----------------------------

    def print_tree(self, feature_names: Optional[List[str]] = None) -> None:
        """
        Pretty-print the fitted regression tree to ``stdout``.

        Raises
        ------
        NotFittedError
            If the estimator has not been fitted.
        """
        check_is_fitted(self, "tree_")
        self.tree_.print_tree(feature_names)

    def export_rules(self, feature_names: Optional[List[str]] = None) -> List[str]:
        """
        Export all decision rules in the fitted regression tree.

        Each string has the form ``"<antecedent> => <prediction> (N=<n>)"``.
        """
        check_is_fitted(self, "tree_")
        return self.tree_.export_rules(feature_names)

    def export_graphviz(self, filename: str = "cart_reg_tree",
                        feature_names: Optional[List[str]] = None,
                        format: str = "png") -> str:
        check_is_fitted(self, "tree_")
        return self.tree_.export_graphviz(filename, feature_names, None, format)
