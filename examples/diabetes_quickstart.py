from time import perf_counter

from sklearn.datasets import load_diabetes
from sklearn.model_selection import train_test_split

from cartree import CARTRegressor

data = load_diabetes()
feats = list(data.feature_names)
X_train, X_test, y_train, y_test = train_test_split(
    data.data, data.target, test_size=0.3, random_state=42
)

reg = CARTRegressor(max_depth=4, min_samples_split=30, min_samples_leaf=10)

t0 = perf_counter(); reg.fit(X_train, y_train); print(f"fit: {perf_counter()-t0:.3f} s")
print(f"test R^2: {reg.score(X_test, y_test):.3f}")
print("feature importances:")
for name, imp in sorted(zip(feats, reg.feature_importances_), key=lambda t: -t[1]):
    print(f"  {name:>4}: {imp:.3f}")
try:
    reg.export_graphviz("diabetes_tree", feature_names=feats, format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
reg.print_tree(feature_names=feats)
