# cartree/__init__.py
"""
cartree: CART classification and regression trees (scikit-learn style).

Exports:
    - CARTClassifier, CARTRegressor: scikit-learn estimators
    - fit, TreeConfig, TreeModel: the core tree engine
    - SplitCriterion, impurity: split-quality criteria
"""
from loguru import logger

from .builder import TreeBuilder, TreeConfig, fit
from .criteria import SplitCriterion, impurity
from .exceptions import CartreeError, DegenerateInputError, InvalidConfigurationError
from .logging import PACKAGE_NAME, enable_logging
from .model import Node, TreeModel
from .regressor import CARTRegressor
from .splitter import CandidateSplit, find_best_split
from .tree import CARTClassifier

logger.disable(PACKAGE_NAME)

__all__ = [
    "CARTClassifier",
    "CARTRegressor",
    "CandidateSplit",
    "CartreeError",
    "DegenerateInputError",
    "InvalidConfigurationError",
    "Node",
    "PACKAGE_NAME",
    "SplitCriterion",
    "TreeBuilder",
    "TreeConfig",
    "TreeModel",
    "enable_logging",
    "find_best_split",
    "fit",
    "impurity",
]
__version__ = "0.1.0"
