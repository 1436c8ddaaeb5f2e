"""Tests for the impurity functions."""

import numpy as np
import pytest

from dtree_python._criterion import SplitRule, impurity


class TestImpurity:

    def test_balanced_binary(self):
        assert impurity([5, 5], 10, SplitRule.GINI) == pytest.approx(0.5)
        assert impurity([5, 5], 10, SplitRule.ENTROPY) == pytest.approx(1.0)
        assert impurity([5, 5], 10, SplitRule.CLASSIFICATION_ERROR) == pytest.approx(0.5)

    @pytest.mark.parametrize("rule", list(SplitRule))
    def test_single_class_is_zero(self, rule):
        assert impurity([10, 0, 0], 10, rule) == 0.0

    def test_three_class_entropy(self):
        assert impurity([1, 1, 2], 4, SplitRule.ENTROPY) == pytest.approx(1.5)

    def test_gini_three_class(self):
        # 1 - (1/16 + 1/16 + 4/16)
        assert impurity([1, 1, 2], 4, SplitRule.GINI) == pytest.approx(0.625)

    def test_classification_error(self):
        assert impurity([1, 3], 4, SplitRule.CLASSIFICATION_ERROR) == pytest.approx(0.25)

    def test_stacked_histograms(self):
        value = impurity(np.array([[5, 5], [10, 0], [1, 3]]), np.array([10, 10, 4]))
        assert isinstance(value, np.ndarray)
        np.testing.assert_allclose(value, [0.5, 0.0, 0.375])

    def test_returns_float_for_single_histogram(self):
        assert isinstance(impurity([2, 2], 4), float)


class TestSplitRule:

    def test_parse_string(self):
        assert SplitRule.parse("gini") is SplitRule.GINI
        assert SplitRule.parse("Entropy") is SplitRule.ENTROPY
        assert SplitRule.parse("classification_error") is SplitRule.CLASSIFICATION_ERROR

    def test_parse_enum(self):
        assert SplitRule.parse(SplitRule.ENTROPY) is SplitRule.ENTROPY

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown split rule"):
            SplitRule.parse("variance")
