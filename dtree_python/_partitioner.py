"""Partition samples in the construction of a tree.

This module keeps, for every numeric attribute, the sample indices sorted
by that attribute's value, plus an "original order" of the active samples.
When a node is split, every array is reordered in place over the node's
range so that the samples going to the true branch come first. Relative
order is preserved on both sides, so each attribute's slice stays sorted
and child nodes can be scanned without re-sorting.
"""

import numpy as np

from ._attribute import AttributeType


class PartitionError(RuntimeError):
    """Realized partition sizes disagree with the expected split point."""


class OrderIndex:
    """Per-attribute sort orders over the active samples.

    Parameters
    ----------
    order : list of ndarray or None
        ``order[j]`` holds the sample indices sorted ascending by attribute
        ``j``, or None for nominal attributes.
    original_order : ndarray, optional
        Ascending indices of the active samples. Set by :meth:`compress`.
    """

    def __init__(self, order, original_order=None):
        self.order = list(order)
        self.original_order = original_order

    @classmethod
    def build(cls, X, attributes):
        """Sort every numeric attribute of X."""
        X = np.asarray(X)
        order = []
        for j, attribute in enumerate(attributes):
            if attribute.type is AttributeType.NUMERIC:
                # stable, so ties keep ascending sample order
                order.append(np.argsort(X[:, j], kind='mergesort').astype(np.intp))
            else:
                order.append(None)
        return cls(order)

    @property
    def n_features(self):
        return len(self.order)

    def copy(self):
        order = [None if a is None else a.copy() for a in self.order]
        original_order = None if self.original_order is None else self.original_order.copy()
        return OrderIndex(order, original_order)

    def compress(self, samples, copy=False):
        """Restrict the index to samples with a non-zero weight.

        Parameters
        ----------
        samples : ndarray of int
            Multiplicity of every training sample.
        copy : bool
            If True, never write into the arrays of this index. Use it
            when the index is shared between several trees.

        Returns
        -------
        OrderIndex
            The index to train on. It is ``self`` unless ``copy`` is set.
        """
        present = np.asarray(samples) != 0
        all_present = bool(np.all(present))

        if all_present:
            index = self.copy() if copy else self
            index.original_order = np.arange(len(present), dtype=np.intp)
            return index

        compressed = [None if a is None else a[present[a]] for a in self.order]
        original_order = np.flatnonzero(present).astype(np.intp)

        if copy:
            return OrderIndex(compressed, original_order)

        # rewrite in place
        self.order = compressed
        self.original_order = original_order
        return self

    def partition(self, low, split, high, goes_true):
        """Stable partition of ``[low, high)`` in every array.

        Parameters
        ----------
        low, high : int
            Node range.
        split : int
            Expected end of the true branch. ``split - low`` must equal the
            number of indices in the range for which ``goes_true`` holds.
        goes_true : callable
            Maps an array of sample indices to a boolean mask.
        """
        for variable_order in self.order:
            if variable_order is not None:
                self._partition_array(variable_order, low, split, high, goes_true)
        self._partition_array(self.original_order, low, split, high, goes_true)

    @staticmethod
    def _partition_array(a, low, split, high, goes_true):
        segment = a[low:high]
        mask = np.asarray(goes_true(segment), dtype=bool)
        n_true = int(np.count_nonzero(mask))
        if low + n_true != split:
            raise PartitionError(
                f"Messed up partition: {low}..{split}..{high} "
                f"ended up splitting at {low + n_true}"
            )
        # boolean indexing keeps relative order; the right side is the buffer
        buffer = segment[~mask]
        a[low:split] = segment[mask]
        a[split:high] = buffer

    def check_consistency(self, low, high):
        """Whether every array references the same samples on ``[low, high)``."""
        expected = np.sort(self.original_order[low:high])
        for variable_order in self.order:
            if variable_order is None:
                continue
            if not np.array_equal(np.sort(variable_order[low:high]), expected):
                return False
        return True
