"""Decision tree classifier grown best-first under a leaf budget."""
import numbers

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_array, check_is_fitted, column_or_1d

from ._attribute import infer_attributes
from ._criterion import SplitRule
from ._partitioner import OrderIndex
from ._splitter import Splitter
from ._tree import BestFirstTreeBuilder, DepthFirstTreeBuilder, Tree
from ._utils import check_attributes, check_labels, check_order, check_samples

BUILDERS = {
    "best": BestFirstTreeBuilder,
    "depth": DepthFirstTreeBuilder,
}


class DecisionTreeClassifier(ClassifierMixin, BaseEstimator):
    """A decision tree classifier.

    The tree is grown by repeatedly splitting the leaf with the largest
    impurity decrease until ``max_nodes`` leaves exist or no leaf can be
    split any more. Leaf posteriors use add-one smoothing.

    Parameters
    ----------
    max_nodes : int, default=100
        Maximum number of leaf nodes, at least 2.

    node_size : int, default=1
        Minimum weighted number of samples in a leaf.

    split_rule : {"gini", "entropy", "classification_error"} or SplitRule, \
            default="gini"
        The function to measure the quality of a split.

    mtry : int, default=None
        Number of attributes drawn at random as split candidates at every
        node. None uses all attributes, which makes the tree deterministic.

    attributes : list of Attribute, default=None
        Attribute schema. None treats every column as numeric.

    growth : {"best", "depth"}, default="best"
        Expand the frontier by decreasing gain or depth first.

    n_jobs : int, default=None
        Number of joblib threads used to search attributes in parallel
        when all of them are evaluated.

    random_state : int, RandomState instance or None, default=None
        Controls the attribute permutation when ``mtry`` is set.

    Attributes
    ----------
    tree_ : Tree
        The underlying tree.

    classes_ : ndarray of shape (n_classes,)

    n_classes_ : int

    n_features_in_ : int

    attributes_ : list of Attribute
        The schema used for training.

    feature_importances_ : ndarray of shape (n_features,)
        Sum of the split gains of every attribute.
    """

    def __init__(
        self,
        max_nodes=100,
        node_size=1,
        split_rule="gini",
        mtry=None,
        attributes=None,
        growth="best",
        n_jobs=None,
        random_state=None,
    ):
        self.max_nodes = max_nodes
        self.node_size = node_size
        self.split_rule = split_rule
        self.mtry = mtry
        self.attributes = attributes
        self.growth = growth
        self.n_jobs = n_jobs
        self.random_state = random_state

    @staticmethod
    def build_order(X, attributes=None):
        """Sort the numeric attributes of X once.

        The result can be passed as ``order`` to several :meth:`fit` calls
        on the same X; it is never modified by them.
        """
        X = check_array(X, dtype=np.float64)
        if attributes is None:
            attributes = infer_attributes(X.shape[1])
        return OrderIndex.build(X, attributes)

    def _check_params(self, n_features):
        if not isinstance(self.max_nodes, numbers.Integral) or self.max_nodes < 2:
            raise ValueError(f"Invalid maximum number of leaf nodes: {self.max_nodes}")
        if not isinstance(self.node_size, numbers.Integral) or self.node_size < 1:
            raise ValueError(f"Invalid minimum size of leaf nodes: {self.node_size}")

        mtry = n_features if self.mtry is None else self.mtry
        if not isinstance(mtry, numbers.Integral) or not 1 <= mtry <= n_features:
            raise ValueError(
                f"Invalid number of variables to split on at a node of the tree: {mtry}"
            )

        if self.growth not in BUILDERS:
            raise ValueError(
                f"Invalid growth: {self.growth!r}, expected one of {sorted(BUILDERS)}"
            )
        return int(mtry), SplitRule.parse(self.split_rule)

    def fit(self, X, y, sample_weight=None, order=None):
        """Build a decision tree classifier from the training set (X, y).

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Encoded feature vectors. Nominal columns hold category codes.

        y : array-like of shape (n_samples,)
            Class labels, covering every integer in ``[0, n_classes)``.

        sample_weight : array-like of int of shape (n_samples,), default=None
            Multiplicity of every sample, e.g. from bootstrap resampling.
            Zero excludes the sample.

        order : OrderIndex, default=None
            Index from :meth:`build_order` on the same X.

        Returns
        -------
        self : DecisionTreeClassifier
        """
        X = check_array(X, dtype=np.float64)
        y = column_or_1d(y, warn=True)
        n_samples, n_features = X.shape
        if y.shape[0] != n_samples:
            raise ValueError(
                f"The sizes of X and Y don't match: {n_samples} != {y.shape[0]}"
            )

        mtry, rule = self._check_params(n_features)
        y, n_classes = check_labels(y)
        samples = check_samples(sample_weight, n_samples)

        attributes = self.attributes
        if attributes is None:
            attributes = infer_attributes(n_features)
        attributes = list(attributes)
        check_attributes(attributes, X)

        if order is None:
            order = OrderIndex.build(X, attributes).compress(samples)
        else:
            check_order(order, attributes, n_samples)
            order = order.compress(samples, copy=True)

        splitter = Splitter(
            X, y, samples, attributes, order, n_classes,
            rule=rule,
            node_size=self.node_size,
            mtry=mtry,
            n_jobs=self.n_jobs,
            random_state=self.random_state,
        )
        builder = BUILDERS[self.growth](splitter, self.max_nodes, self.node_size)

        self.tree_ = builder.build(Tree(attributes, n_classes))
        self.attributes_ = attributes
        self.n_classes_ = n_classes
        self.classes_ = np.arange(n_classes)
        self.n_features_in_ = n_features
        return self

    def _validate_X_predict(self, X):
        check_is_fitted(self)
        X = check_array(X, dtype=np.float64)
        if X.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has {X.shape[1]} features, but {type(self).__name__} "
                f"is expecting {self.n_features_in_} features as input"
            )
        return X

    def predict(self, X):
        """Predict class for X."""
        X = self._validate_X_predict(X)
        return self.tree_.predict(X)

    def predict_proba(self, X):
        """Predict class probabilities of the input samples X."""
        X = self._validate_X_predict(X)
        return self.tree_.predict_proba(X)

    def apply(self, X):
        """Return the index of the leaf that each sample is predicted as."""
        X = self._validate_X_predict(X)
        return self.tree_.apply(X)

    def decision_path(self, X):
        """Return the decision path in the tree as a sparse indicator matrix."""
        X = self._validate_X_predict(X)
        return self.tree_.decision_path(X)

    def get_depth(self):
        """Return the depth of the tree, counting the root as 1."""
        check_is_fitted(self)
        return self.tree_.max_depth

    def get_n_leaves(self):
        """Return the number of leaves of the tree."""
        check_is_fitted(self)
        return self.tree_.n_leaves

    @property
    def feature_importances_(self):
        check_is_fitted(self)
        return self.tree_.importance
