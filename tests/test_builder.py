import numpy as np
import pytest

from cartree import (
    DegenerateInputError,
    InvalidConfigurationError,
    SplitCriterion,
    TreeBuilder,
    TreeConfig,
    TreeModel,
    fit,
)


def _blobs(seed=0, n=80):
    """Three noisy classes over four features."""
    rng = np.random.RandomState(seed)
    X = rng.normal(size=(n, 4))
    y = np.digitize(X[:, 0] + 0.5 * X[:, 3] + 0.2 * rng.normal(size=n), [-0.5, 0.5])
    return X, y


def _structure(model: TreeModel):
    return [(node.n_samples, node.feature_index, node.threshold, node.value)
            for node in model.nodes()]


def test_four_points_two_pure_leaves():
    X = [[1], [2], [3], [4]]
    y = [0, 0, 1, 1]
    model = fit(X, y, TreeConfig(criterion="gini"))
    assert model.root.feature_index == 0
    assert model.root.threshold == pytest.approx(2.5)
    assert model.root.left.is_leaf and model.root.right.is_leaf
    assert model.root.left.impurity == 0.0 and model.root.right.impurity == 0.0
    assert model.predict_all(X).tolist() == [0, 0, 1, 1]
    assert model.n_leaves == 2
    assert model.depth == 1


@pytest.mark.parametrize("criterion", ["gini", "entropy", "classification_error"])
def test_children_partition_parent(criterion):
    X, y = _blobs()
    model = fit(X, y, TreeConfig(criterion=criterion))
    for node in model.nodes():
        if node.is_leaf:
            continue
        assert node.left.n_samples + node.right.n_samples == node.n_samples
        assert node.left.depth == node.depth + 1
        weighted = (node.left.n_samples * node.left.impurity
                    + node.right.n_samples * node.right.impurity) / node.n_samples
        assert weighted < node.impurity


def test_leaf_distribution_matches_training_rows():
    X, y = _blobs(seed=1)
    model = fit(X, y)
    leaves = model.apply(X)
    nodes = model.nodes()
    for leaf_id in np.unique(leaves):
        leaf = nodes[leaf_id]
        rows = y[leaves == leaf_id]
        assert leaf.is_leaf
        assert leaf.n_samples == rows.size
        assert np.array_equal(leaf.distribution, np.bincount(rows, minlength=3))


def test_unbounded_tree_fits_training_data():
    X, y = _blobs(seed=2)
    model = fit(X, y)
    assert np.array_equal(model.predict_all(X), y)


def test_fit_is_idempotent():
    X, y = _blobs(seed=4)
    config = TreeConfig(criterion="entropy", max_depth=4)
    first = fit(X, y, config)
    second = fit(X, y, config)
    assert _structure(first) == _structure(second)
    assert first.export_rules() == second.export_rules()


def test_single_sample_is_a_leaf():
    for criterion in SplitCriterion:
        model = fit([[1.0, 2.0]], [3], TreeConfig(criterion=criterion, min_samples_split=1))
        assert model.root.is_leaf
        assert model.n_nodes == 1
        assert model.predict([5.0, 5.0]) == 3


def test_max_depth_zero_gives_majority_leaf():
    model = fit([[1], [2], [3]], [0, 1, 1], TreeConfig(max_depth=0))
    assert model.root.is_leaf
    assert model.predict([1]) == 1


def test_majority_tie_goes_to_lowest_class():
    model = fit([[1], [1]], ["b", "a"])
    assert model.root.is_leaf
    assert model.predict([1]) == "a"


def test_max_depth_bounds_tree():
    X, y = _blobs(seed=5)
    for depth in (1, 2, 3):
        assert fit(X, y, TreeConfig(max_depth=depth)).depth <= depth


def test_min_samples_split_forces_leaves():
    X, y = _blobs(seed=6)
    model = fit(X, y, TreeConfig(min_samples_split=20))
    for node in model.nodes():
        if not node.is_leaf:
            assert node.n_samples >= 20


def test_min_samples_leaf_respected():
    X, y = _blobs(seed=7)
    model = fit(X, y, TreeConfig(min_samples_leaf=5))
    assert all(node.n_samples >= 5 for node in model.nodes() if node.is_leaf)


def test_identical_rows_become_one_leaf():
    X = np.zeros((6, 2))
    y = [0, 1, 1, 0, 1, 1]
    model = fit(X, y)
    assert model.root.is_leaf
    assert model.predict([0, 0]) == 1


def test_regression_tree_predicts_means():
    X = [[1], [2], [3], [10], [11], [12]]
    y = [1.0, 2.0, 3.0, 10.0, 11.0, 12.0]
    model = fit(X, y, TreeConfig(criterion="mse", max_depth=1))
    assert model.root.threshold == pytest.approx(6.5)
    assert model.predict([0]) == pytest.approx(2.0)
    assert model.predict([20]) == pytest.approx(11.0)
    assert model.classes is None


def test_regression_pure_region_stops():
    model = fit([[1], [2], [3]], [4.0, 4.0, 4.0], TreeConfig(criterion="mse"))
    assert model.root.is_leaf
    assert model.root.impurity == 0.0


def test_regression_tiny_target_range_still_splits():
    y = [0.0, 0.0, 1e-6, 1e-6]
    model = fit([[1], [2], [3], [4]], y, TreeConfig(criterion="mse"))
    assert model.root.feature_index == 0
    assert model.root.threshold == pytest.approx(2.5)
    assert model.n_leaves == 2
    assert model.predict_all([[1], [2], [3], [4]]).tolist() == y


@pytest.mark.parametrize("scale", [1e-5, 1e-8])
def test_regression_structure_ignores_target_scale(scale):
    rng = np.random.RandomState(7)
    X = rng.normal(size=(200, 3))
    y = np.sin(2 * X[:, 0]) + 0.5 * X[:, 1] + 0.1 * rng.normal(size=200)
    cfg = TreeConfig(criterion="mse", max_depth=4, min_samples_leaf=5)
    ref = fit(X, y, cfg)
    scaled = fit(X, y * scale, cfg)

    def shape(model):
        return [(node.n_samples, node.feature_index, node.threshold) for node in model.nodes()]

    assert shape(scaled) == shape(ref)
    assert ref.n_leaves > 4
    assert scaled.predict_all(X) == pytest.approx(ref.predict_all(X) * scale, rel=1e-9)


def test_string_labels_round_trip():
    X = [[0.1], [0.2], [0.8], [0.9]]
    y = np.array(["no", "no", "yes", "yes"], dtype=object)
    model = fit(X, y)
    assert list(model.classes) == ["no", "yes"]
    assert model.predict_all(X).tolist() == ["no", "no", "yes", "yes"]


def test_empty_region_is_an_internal_error():
    builder = TreeBuilder(TreeConfig())
    with pytest.raises(DegenerateInputError):
        builder.build(np.empty((0, 2)), np.empty(0, dtype=int), classes=np.array([0]))


@pytest.mark.parametrize("X, y", [
    (np.empty((0, 2)), []),
    ([[1, 2], [3, 4]], [0]),
    ([1, 2, 3], [0, 1, 0]),
    ([[1.0], [np.nan]], [0, 1]),
    ([[1.0], [np.inf]], [0, 1]),
    ([["a"], ["b"]], [0, 1]),
    (np.empty((2, 0)), [0, 1]),
    ([[1], [2]], [[0, 1], [1, 0]]),
])
def test_invalid_inputs_fail_before_growth(X, y):
    with pytest.raises(InvalidConfigurationError):
        fit(X, y)


def test_mse_requires_numeric_target():
    with pytest.raises(InvalidConfigurationError):
        fit([[1], [2]], ["a", "b"], TreeConfig(criterion="mse"))


def test_classification_rejects_continuous_target():
    with pytest.raises(InvalidConfigurationError):
        fit([[1], [2], [3]], [0.5, 1.7, 2.2], TreeConfig(criterion="gini"))


def test_float_class_labels_are_accepted():
    model = fit([[1], [2]], [0.0, 1.0])
    assert list(model.classes) == [0.0, 1.0]


@pytest.mark.parametrize("kwargs", [
    {"max_depth": -1},
    {"min_samples_split": 0},
    {"min_samples_leaf": 0},
    {"min_samples_leaf": 1.5},
    {"max_depth": True},
    {"criterion": "friedman_mse"},
])
def test_invalid_config(kwargs):
    with pytest.raises(InvalidConfigurationError):
        TreeConfig(**kwargs)


def test_config_defaults():
    config = TreeConfig()
    assert config.criterion is SplitCriterion.GINI
    assert config.max_depth is None
    assert config.min_samples_split == 2
    assert config.min_samples_leaf == 1
    assert TreeConfig(criterion="MSE").criterion is SplitCriterion.MSE
