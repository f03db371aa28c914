from time import perf_counter

from sklearn.datasets import load_iris
from sklearn.model_selection import train_test_split

from cartree import CARTClassifier, enable_logging

data = load_iris()
feats = list(data.feature_names)
X_train, X_test, y_train, y_test = train_test_split(
    data.data, data.target, test_size=0.3, random_state=42, stratify=data.target
)

clf = CARTClassifier(criterion="gini", max_depth=4, min_samples_split=10, min_samples_leaf=3)

with enable_logging(level="DEBUG"):
    t0 = perf_counter(); clf.fit(X_train, y_train); print(f"fit: {perf_counter()-t0:.3f} s")

print(f"test accuracy: {clf.score(X_test, y_test):.3f}")
clf.print_tree(feature_names=feats, class_names=list(data.target_names))
for rule in clf.export_rules(feature_names=feats, class_names=list(data.target_names)):
    print(rule)
try:
    clf.export_graphviz("iris_tree", feature_names=feats, class_names=list(data.target_names), format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
