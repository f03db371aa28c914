"""
cartree.exceptions
==================

Errors raised by the tree-growing engine.

- ``CartreeError``: base class, catch this to handle any cartree failure.
- ``InvalidConfigurationError``: bad hyperparameters or training data,
  raised before any growth starts.  Subclasses ``ValueError`` so callers
  written against scikit-learn conventions keep working.
- ``DegenerateInputError``: an empty region reached the builder.  This is an
  internal invariant violation and points at a bug, not at user input.
"""
from __future__ import annotations


class CartreeError(Exception):
    """Base class for all cartree errors."""


class InvalidConfigurationError(CartreeError, ValueError):
    """Raised when a configuration value or the training data is unusable.

    Parameters
    ----------
    message : str
        Human-readable description of the problem.
    parameter : str or None, default=None
        Name of the offending parameter or input, if there is one.

    Examples
    --------
    >>> err = InvalidConfigurationError("must be >= 1", parameter="min_samples_leaf")
    >>> err.parameter
    'min_samples_leaf'
    >>> str(err)
    'min_samples_leaf: must be >= 1'
    """

    def __init__(self, message: str, *, parameter: str | None = None):
        self.parameter = parameter
        super().__init__(f"{parameter}: {message}" if parameter else message)


class DegenerateInputError(CartreeError, RuntimeError):
    """Raised when the builder is handed a region with no samples.

    Correct partitioning never produces an empty region, so seeing this
    error means a split was applied inconsistently.
    """

    def __init__(self, depth: int):
        self.depth = depth
        super().__init__(f"empty region reached during tree growth at depth {depth}")
