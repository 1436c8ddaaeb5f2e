"""Tests for parameter and input validation of the estimator."""

import numpy as np
import pytest
from sklearn.base import clone
from sklearn.exceptions import NotFittedError

from dtree_python import DecisionTreeClassifier, NominalAttribute, NumericAttribute

X = np.array([[0.1], [0.2], [0.3], [0.7], [0.8], [0.9]])
Y = np.array([0, 0, 0, 1, 1, 1])


class TestParameters:

    @pytest.mark.parametrize("max_nodes", [1, 0, -3, 2.5])
    def test_invalid_max_nodes(self, max_nodes):
        with pytest.raises(ValueError, match="maximum number of leaf nodes"):
            DecisionTreeClassifier(max_nodes=max_nodes).fit(X, Y)

    @pytest.mark.parametrize("node_size", [0, -1])
    def test_invalid_node_size(self, node_size):
        with pytest.raises(ValueError, match="minimum size of leaf nodes"):
            DecisionTreeClassifier(node_size=node_size).fit(X, Y)

    @pytest.mark.parametrize("mtry", [0, 2])
    def test_invalid_mtry(self, mtry):
        with pytest.raises(ValueError, match="number of variables"):
            DecisionTreeClassifier(mtry=mtry).fit(X, Y)

    def test_invalid_split_rule(self):
        with pytest.raises(ValueError, match="Unknown split rule"):
            DecisionTreeClassifier(split_rule="mse").fit(X, Y)

    def test_invalid_growth(self):
        with pytest.raises(ValueError, match="Invalid growth"):
            DecisionTreeClassifier(growth="breadth").fit(X, Y)

    def test_get_params_and_clone(self):
        clf = DecisionTreeClassifier(max_nodes=5, split_rule="entropy")
        assert clf.get_params()["max_nodes"] == 5
        cloned = clone(clf)
        assert cloned.get_params()["split_rule"] == "entropy"
        assert not hasattr(cloned, "tree_")


class TestLabels:

    def test_label_gap(self):
        with pytest.raises(ValueError, match="Missing class: 1"):
            DecisionTreeClassifier().fit(X, [0, 0, 0, 2, 2, 2])

    def test_negative_label(self):
        with pytest.raises(ValueError, match="Negative class label"):
            DecisionTreeClassifier().fit(X, [-1, 0, 0, 1, 1, 1])

    def test_single_class(self):
        with pytest.raises(ValueError, match="Only one class"):
            DecisionTreeClassifier().fit(X, np.zeros(6))

    def test_non_integer_labels(self):
        with pytest.raises(ValueError, match="integers"):
            DecisionTreeClassifier().fit(X, [0, 0.5, 0, 1, 1, 1])

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="don't match"):
            DecisionTreeClassifier().fit(X, [0, 1, 0, 1])

    def test_float_labels_are_accepted(self):
        clf = DecisionTreeClassifier().fit(X, Y.astype(float))
        np.testing.assert_array_equal(clf.classes_, [0, 1])
        assert clf.n_classes_ == 2


class TestSampleWeight:

    def test_negative_weight(self):
        with pytest.raises(ValueError, match="Negative sample weight"):
            DecisionTreeClassifier().fit(X, Y, sample_weight=[1, 1, -1, 1, 1, 1])

    def test_fractional_weight(self):
        with pytest.raises(ValueError, match="integer multiplicities"):
            DecisionTreeClassifier().fit(X, Y, sample_weight=[1, 1, 0.5, 1, 1, 1])

    def test_all_zero(self):
        with pytest.raises(ValueError, match="All sample weights are zero"):
            DecisionTreeClassifier().fit(X, Y, sample_weight=np.zeros(6))

    def test_wrong_length(self):
        with pytest.raises(ValueError, match="sample_weight"):
            DecisionTreeClassifier().fit(X, Y, sample_weight=[1, 1, 1])


class TestSchema:

    def test_schema_length(self):
        with pytest.raises(ValueError, match="attributes don't match"):
            DecisionTreeClassifier(
                attributes=[NumericAttribute("a"), NumericAttribute("b")]).fit(X, Y)

    def test_nominal_code_out_of_range(self):
        codes = np.array([[0], [1], [2], [3], [1], [0]])
        with pytest.raises(ValueError, match="category codes"):
            DecisionTreeClassifier(attributes=[NominalAttribute("c", 3)]).fit(codes, Y)

    def test_nominal_needs_categories(self):
        with pytest.raises(ValueError, match="Invalid number of categories"):
            NominalAttribute("c", 0)

    def test_order_for_other_schema(self):
        order = DecisionTreeClassifier.build_order(X)
        codes = np.array([[0], [1], [2], [0], [1], [2]])
        with pytest.raises(ValueError, match="must have no order"):
            DecisionTreeClassifier(attributes=[NominalAttribute("c", 3)]).fit(
                codes, Y, order=order)

    def test_order_for_other_data(self):
        order = DecisionTreeClassifier.build_order(X[:4])
        with pytest.raises(ValueError, match="Invalid order"):
            DecisionTreeClassifier().fit(X, Y, order=order)

    def test_non_finite_values(self):
        X_nan = X.copy()
        X_nan[0, 0] = np.nan
        with pytest.raises(ValueError):
            DecisionTreeClassifier().fit(X_nan, Y)


class TestPredictInput:

    def test_not_fitted(self):
        with pytest.raises(NotFittedError):
            DecisionTreeClassifier().predict(X)

    def test_feature_count(self):
        clf = DecisionTreeClassifier().fit(X, Y)
        with pytest.raises(ValueError, match="expecting 1 features"):
            clf.predict(np.zeros((2, 3)))

    def test_fitted_attributes(self):
        clf = DecisionTreeClassifier().fit(X, Y)
        assert clf.n_features_in_ == 1
        assert len(clf.attributes_) == 1
        assert clf.attributes_[0].name == "V1"
        assert clf.feature_importances_.shape == (1,)
