# dtree_python/_tree.py
import heapq
import logging
from collections import deque

import numpy as np
from scipy.sparse import csr_matrix

from ._attribute import AttributeType
from ._splitter import NO_FEATURE

logger = logging.getLogger(__name__)


class Node:
    """Node of a decision tree.

    A leaf holds the predicted class and the posterior distribution over
    classes. An internal node also holds the split and owns its two
    children: samples satisfying the split go to ``true_child``.
    """

    __slots__ = ('node_id', 'output', 'posterior', 'split_feature', 'split_value',
                 'split_score', 'true_child', 'false_child',
                 'true_child_output', 'false_child_output')

    def __init__(self, output=-1, posterior=None):
        self.node_id = -1
        self.output = output
        self.posterior = posterior
        self.split_feature = NO_FEATURE
        self.split_value = np.nan
        self.split_score = 0.0
        self.true_child = None
        self.false_child = None
        self.true_child_output = -1
        self.false_child_output = -1

    def __repr__(self):
        if self.is_leaf:
            return f"Node(id={self.node_id}, output={self.output})"
        return (f"Node(id={self.node_id}, feature={self.split_feature}, "
                f"value={self.split_value:.4f}, score={self.split_score:.4f})")

    @property
    def is_leaf(self):
        return self.true_child is None and self.false_child is None

    def set_split(self, split):
        self.split_feature = split.feature
        self.split_value = split.value
        self.split_score = split.score
        self.true_child_output = split.true_output
        self.false_child_output = split.false_output

    def reset_split(self):
        self.split_feature = NO_FEATURE
        self.split_value = np.nan
        self.split_score = 0.0


class TrainNode:
    """Frontier record: a node and its sample range ``[low, high)``."""

    __slots__ = ('node', 'low', 'high')

    def __init__(self, node, low, high):
        self.node = node
        self.low = low
        self.high = high

    def __lt__(self, other):
        # heapq pops the smallest item, so a larger gain must sort first
        return self.node.split_score > other.node.split_score


class PriorityFrontier:
    """Pending splits ordered by decreasing gain."""

    def __init__(self):
        self._heap = []

    def __len__(self):
        return len(self._heap)

    def extend(self, records):
        for record in records:
            heapq.heappush(self._heap, record)

    def pop(self):
        if not self._heap:
            return None
        return heapq.heappop(self._heap)


class StackFrontier:
    """Pending splits in depth-first order, true child first."""

    def __init__(self):
        self._stack = []

    def __len__(self):
        return len(self._stack)

    def extend(self, records):
        self._stack.extend(reversed(records))

    def pop(self):
        if not self._stack:
            return None
        return self._stack.pop()


class TreeBuilder:
    """Grow a tree by repeatedly splitting the next node of a frontier.

    Subclasses only choose the frontier; the split logic is shared.

    Parameters
    ----------
    splitter : Splitter
        Owns the training data and the order index.
    max_nodes : int
        Maximum number of leaves.
    node_size : int
        Minimum weighted size of a leaf.
    """

    def __init__(self, splitter, max_nodes, node_size):
        self.splitter = splitter
        self.max_nodes = max_nodes
        self.node_size = node_size

    def _make_frontier(self):
        raise NotImplementedError()

    def build(self, tree):
        """Grow ``tree`` from the splitter's training set."""
        splitter = self.splitter
        n_active = len(splitter.order.original_order)

        count, n = splitter.node_counts(0, n_active)
        root = Node(int(np.argmax(count)), count / n)

        frontier = self._make_frontier()
        root_record = TrainNode(root, 0, n_active)

        with splitter.worker_pool():
            if self._find_best_split(root_record):
                frontier.extend([root_record])

            n_leaves = 1
            while n_leaves < self.max_nodes:
                record = frontier.pop()
                if record is None:
                    break
                if self.split(record, frontier, tree.importance):
                    n_leaves += 1

        tree._set_root(root)
        # the order index is only needed while growing
        splitter.order = None

        logger.debug("Built tree with %d leaves, depth %d", tree.n_leaves, tree.max_depth)
        return tree

    def _find_best_split(self, record):
        split = self.splitter.node_split(record.low, record.high)
        if not split.is_valid:
            return False
        record.node.set_split(split)
        return True

    def _goes_true(self, node):
        splitter = self.splitter
        attribute = splitter.attributes[node.split_feature]
        column = splitter.X[:, node.split_feature]
        value = node.split_value

        if attribute.type is AttributeType.NOMINAL:
            return lambda o: column[o] == value
        if attribute.type is AttributeType.NUMERIC:
            return lambda o: column[o] <= value
        raise TypeError(f"Unsupported attribute type: {attribute.type}")

    def split(self, record, frontier, importance):
        """Split the node of ``record`` into two children.

        Children with a positive best split are added to ``frontier``.

        Returns
        -------
        bool
            False if the realized children are smaller than ``node_size``;
            the node then stays a leaf.
        """
        node = record.node
        if node.split_feature == NO_FEATURE:
            raise RuntimeError("Split a node with invalid feature.")

        splitter = self.splitter
        k = splitter.n_classes
        low, high = record.low, record.high
        goes_true = self._goes_true(node)

        o = splitter.order.original_order[low:high]
        mask = goes_true(o)
        labels = splitter.y[o]
        weights = splitter.samples[o]
        true_count = np.bincount(labels[mask], weights=weights[mask], minlength=k)
        false_count = np.bincount(labels[~mask], weights=weights[~mask], minlength=k)
        tc = int(true_count.sum())
        fc = int(false_count.sum())

        if tc < self.node_size or fc < self.node_size:
            logger.debug("Abort split on feature %d at %s: child sizes %d/%d",
                         node.split_feature, node.split_value, tc, fc)
            node.reset_split()
            return False

        split = low + int(np.count_nonzero(mask))

        # add-one smoothing of posteriori probability
        node.true_child = Node(node.true_child_output, (true_count + 1) / (tc + k))
        node.false_child = Node(node.false_child_output, (false_count + 1) / (fc + k))

        splitter.order.partition(low, split, high, goes_true)

        children = []
        true_record = TrainNode(node.true_child, low, split)
        if tc > self.node_size and self._find_best_split(true_record):
            children.append(true_record)

        false_record = TrainNode(node.false_child, split, high)
        if fc > self.node_size and self._find_best_split(false_record):
            children.append(false_record)

        frontier.extend(children)

        importance[node.split_feature] += node.split_score

        logger.debug("Split feature %d at %s, gain %.6f, child sizes %d/%d",
                     node.split_feature, node.split_value, node.split_score, tc, fc)
        return True


class BestFirstTreeBuilder(TreeBuilder):
    """Build a decision tree in best-first fashion.

    The frontier is a priority queue on split gain, so the leaf budget is
    spent on the most useful splits first.
    """

    def _make_frontier(self):
        return PriorityFrontier()


class DepthFirstTreeBuilder(TreeBuilder):
    """Build a decision tree in depth-first fashion."""

    def _make_frontier(self):
        return StackFrontier()


class Tree:
    """Trained binary decision tree.

    Parameters
    ----------
    attributes : list of Attribute
    n_classes : int
    """

    def __init__(self, attributes, n_classes):
        self.attributes = attributes
        self.n_features = len(attributes)
        self.n_classes = n_classes
        self.importance = np.zeros(self.n_features, dtype=np.float64)
        self.root = None
        self.nodes = []

    def _set_root(self, root):
        """Number nodes breadth-first, true child before false child."""
        self.root = root
        nodes = []
        queue = deque([root])
        while queue:
            node = queue.popleft()
            node.node_id = len(nodes)
            nodes.append(node)
            if not node.is_leaf:
                queue.append(node.true_child)
                queue.append(node.false_child)
        self.nodes = nodes

    @property
    def node_count(self):
        return len(self.nodes)

    @property
    def n_leaves(self):
        return sum(1 for node in self.nodes if node.is_leaf)

    @property
    def max_depth(self):
        """Number of nodes on the longest root to leaf path."""
        depth = 0
        stack = [(self.root, 1)] if self.root is not None else []
        while stack:
            node, node_depth = stack.pop()
            depth = max(depth, node_depth)
            if not node.is_leaf:
                stack.append((node.true_child, node_depth + 1))
                stack.append((node.false_child, node_depth + 1))
        return depth

    def _goes_true(self, node, x):
        attribute = self.attributes[node.split_feature]
        if attribute.type is AttributeType.NOMINAL:
            return x[node.split_feature] == node.split_value
        if attribute.type is AttributeType.NUMERIC:
            return x[node.split_feature] <= node.split_value
        raise TypeError(f"Unsupported attribute type: {attribute.type}")

    def _leaf(self, x):
        node = self.root
        while not node.is_leaf:
            node = node.true_child if self._goes_true(node, x) else node.false_child
        return node

    def predict_one(self, x, posterior=None):
        """Predict the class of one sample.

        If ``posterior`` is given, the leaf's class probabilities are copied
        into it.
        """
        leaf = self._leaf(x)
        if posterior is not None:
            posterior[:] = leaf.posterior
        return leaf.output

    def predict(self, X):
        """Predict the class of every row of X."""
        return np.array([self._leaf(x).output for x in X], dtype=np.intp)

    def predict_proba(self, X):
        """Posterior probabilities of every row of X."""
        out = np.zeros((len(X), self.n_classes), dtype=np.float64)
        for i, x in enumerate(X):
            out[i] = self._leaf(x).posterior
        return out

    def apply(self, X):
        """Finds the terminal region (=leaf node) for each sample in X."""
        return np.array([self._leaf(x).node_id for x in X], dtype=np.intp)

    def decision_path(self, X):
        """Finds the decision path (=node) for each sample in X."""
        n_samples = len(X)
        indptr = np.zeros(n_samples + 1, dtype=np.intp)
        indices = []

        for i, x in enumerate(X):
            node = self.root
            indices.append(node.node_id)
            while not node.is_leaf:
                node = node.true_child if self._goes_true(node, x) else node.false_child
                indices.append(node.node_id)
            indptr[i + 1] = len(indices)

        indices = np.asarray(indices, dtype=np.intp)
        data = np.ones(shape=len(indices), dtype=np.intp)
        return csr_matrix((data, indices, indptr), shape=(n_samples, self.node_count))
