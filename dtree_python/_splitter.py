# dtree_python/_splitter.py
import logging
from contextlib import contextmanager

import numpy as np
from joblib import Parallel, delayed
from sklearn.utils import check_random_state

from ._attribute import AttributeType
from ._criterion import SplitRule, impurity as _impurity

logger = logging.getLogger(__name__)

NO_FEATURE = -1


class SplitRecord:
    """Record of a split for a node."""

    __slots__ = ('feature', 'value', 'score', 'true_output', 'false_output')

    def __init__(self):
        self.feature = NO_FEATURE
        self.value = np.nan
        self.score = 0.0
        self.true_output = -1
        self.false_output = -1

    def __repr__(self):
        return (f"SplitRecord(feature={self.feature}, value={self.value:.4f}, "
                f"score={self.score:.4f})")

    @property
    def is_valid(self):
        return self.feature != NO_FEATURE

    def copy_from(self, other):
        """Copy data from another SplitRecord."""
        self.feature = other.feature
        self.value = other.value
        self.score = other.score
        self.true_output = other.true_output
        self.false_output = other.false_output


class Splitter:
    """Find the best split of a node ``[low, high)`` of the order index.

    Splitters are called by tree builders, one node at a time. They only
    read the order index; partitioning is left to the builder.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
    y : ndarray of int of shape (n_samples,)
    samples : ndarray of int of shape (n_samples,)
        Multiplicity of every sample.
    attributes : list of Attribute
    order : OrderIndex
        Compressed index shared with the builder.
    n_classes : int
    rule : SplitRule
    node_size : int
        Minimum weighted size of a child.
    mtry : int
        Number of attributes drawn at every node. With ``mtry`` equal to the
        number of attributes all of them are evaluated, possibly in
        parallel.
    n_jobs : int, optional
        joblib worker count for the all-attributes search.
    random_state : int, RandomState instance or None
    """

    def __init__(self, X, y, samples, attributes, order, n_classes,
                 rule=SplitRule.GINI, node_size=1, mtry=None, n_jobs=None,
                 random_state=None):
        self.X = X
        self.y = y
        self.samples = samples
        self.attributes = attributes
        self.order = order
        self.n_classes = n_classes
        self.rule = rule
        self.node_size = node_size
        self.n_features = len(attributes)
        self.mtry = self.n_features if mtry is None else mtry
        self.n_jobs = n_jobs
        self.random_state = check_random_state(random_state)
        self._parallel = None

    @contextmanager
    def worker_pool(self):
        """Keep one joblib thread pool open for every node searched inside.

        Without it each call to :meth:`evaluate_attributes` starts its own
        pool.
        """
        if self.n_jobs in (None, 1):
            yield
            return

        with Parallel(n_jobs=self.n_jobs, backend="threading") as parallel:
            self._parallel = parallel
            try:
                yield
            finally:
                self._parallel = None

    def impurity(self, count, n):
        return _impurity(count, n, self.rule)

    def node_counts(self, low, high):
        """Weighted class histogram and total of ``[low, high)``."""
        o = self.order.original_order[low:high]
        count = np.bincount(self.y[o], weights=self.samples[o],
                            minlength=self.n_classes).astype(np.int64)
        return count, int(count.sum())

    def node_split(self, low, high):
        """Find the best split on node ``[low, high)``.

        Returns
        -------
        SplitRecord
            Unset (``is_valid`` False) when the node is pure, too small or
            no attribute yields a positive gain.
        """
        best = SplitRecord()

        labels = self.y[self.order.original_order[low:high]]
        # Since all instances have same label, stop splitting.
        if labels.size == 0 or np.all(labels == labels[0]):
            return best

        count, n = self.node_counts(low, high)
        if n <= self.node_size:
            return best

        impurity = self.impurity(count, n)

        if self.mtry < self.n_features:
            variables = self.random_state.permutation(self.n_features)[:self.mtry]
            for j in variables:
                split = self.find_best_split(n, low, high, count, impurity, int(j))
                if split.score > best.score:
                    best.copy_from(split)
        else:
            for split in self.evaluate_attributes(n, low, high, count, impurity):
                if split.score > best.score:
                    best.copy_from(split)

        return best

    def evaluate_attributes(self, n, low, high, count, impurity, features=None):
        """Best split of every attribute in ``features``, in that order.

        The search is read-only, so attributes are farmed out to joblib
        threads when ``n_jobs`` asks for it, reusing the pool opened by
        :meth:`worker_pool` if there is one. If the parallel run fails the
        attributes are evaluated sequentially instead.
        """
        if features is None:
            features = range(self.n_features)
        features = list(features)

        if self.n_jobs not in (None, 1) and len(features) > 1:
            try:
                parallel = self._parallel
                if parallel is None:
                    parallel = Parallel(n_jobs=self.n_jobs, backend="threading")
                return parallel(
                    delayed(self.find_best_split)(n, low, high, count, impurity, j)
                    for j in features
                )
            except Exception as exc:
                logger.warning("Parallel split search failed (%s), "
                               "falling back to sequential evaluation", exc)

        return [self.find_best_split(n, low, high, count, impurity, j)
                for j in features]

    def find_best_split(self, n, low, high, count, impurity, j):
        """Best split of node ``[low, high)`` on attribute ``j``."""
        attribute = self.attributes[j]
        if attribute.type is AttributeType.NOMINAL:
            return self._split_nominal(n, low, high, count, impurity, j, attribute.size)
        if attribute.type is AttributeType.NUMERIC:
            return self._split_numeric(n, low, high, count, impurity, j)
        raise TypeError(f"Unsupported attribute type: {attribute.type}")

    def _split_nominal(self, n, low, high, count, impurity, j, m):
        split = SplitRecord()
        k = self.n_classes

        o = self.order.original_order[low:high]
        true_count = np.zeros((m, k), dtype=np.int64)
        np.add.at(true_count, (self.X[o, j].astype(np.intp), self.y[o]), self.samples[o])

        tc = true_count.sum(axis=1)
        fc = n - tc
        false_count = count[np.newaxis, :] - true_count

        gain = self._gain(n, impurity, true_count, tc, false_count, fc)
        best = self._best_position(gain)
        if best is None:
            return split

        split.feature = j
        split.value = float(best)
        split.score = float(gain[best])
        split.true_output = int(np.argmax(true_count[best]))
        split.false_output = int(np.argmax(false_count[best]))
        return split

    def _split_numeric(self, n, low, high, count, impurity, j):
        split = SplitRecord()
        k = self.n_classes

        o = self.order.order[j][low:high]
        x = self.X[o, j]
        # candidate cuts sit before every position where the value changes
        cuts = np.flatnonzero(x[1:] != x[:-1]) + 1
        if cuts.size == 0:
            return split

        weighted = np.zeros((o.size, k), dtype=np.int64)
        weighted[np.arange(o.size), self.y[o]] = self.samples[o]
        true_count = np.cumsum(weighted, axis=0)[cuts - 1]

        tc = true_count.sum(axis=1)
        fc = n - tc
        false_count = count[np.newaxis, :] - true_count

        gain = self._gain(n, impurity, true_count, tc, false_count, fc)
        best = self._best_position(gain)
        if best is None:
            return split

        i = cuts[best]
        # sum of halves is used to avoid infinite value
        value = x[i - 1] / 2.0 + x[i] / 2.0
        if value >= x[i] or not np.isfinite(value):
            value = x[i - 1]

        split.feature = j
        split.value = float(value)
        split.score = float(gain[best])
        split.true_output = int(np.argmax(true_count[best]))
        split.false_output = int(np.argmax(false_count[best]))
        return split

    def _gain(self, n, impurity, true_count, tc, false_count, fc):
        """Impurity decrease of every candidate; -inf where a child is too small."""
        valid = (tc >= self.node_size) & (fc >= self.node_size)
        gain = np.full(tc.shape, -np.inf)
        if not np.any(valid):
            return gain

        tc, fc = tc[valid], fc[valid]
        gain[valid] = (impurity
                       - tc / n * self.impurity(true_count[valid], tc)
                       - fc / n * self.impurity(false_count[valid], fc))
        return gain

    @staticmethod
    def _best_position(gain):
        # argmax keeps the first of equal maxima
        best = int(np.argmax(gain))
        if not gain[best] > 0.0:
            return None
        return best
