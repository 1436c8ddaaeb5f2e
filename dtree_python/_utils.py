# _utils.py

import numpy as np

from ._attribute import AttributeType

# =============================================================================
# Input validation
# =============================================================================


def check_labels(y):
    """Check that class labels are exactly ``0 .. k-1``, ``k >= 2``.

    Returns
    -------
    y : ndarray of intp
    n_classes : int
    """
    y = np.asarray(y)
    if y.size == 0:
        raise ValueError("Empty label vector")
    if not np.issubdtype(y.dtype, np.number) or not np.all(np.equal(np.mod(y, 1), 0)):
        raise ValueError("Class labels must be integers")
    y = y.astype(np.intp)

    labels = np.unique(y)
    if labels[0] < 0:
        raise ValueError(f"Negative class label: {labels[0]}")
    for i, label in enumerate(labels):
        if label != i:
            raise ValueError(f"Missing class: {i}")

    n_classes = len(labels)
    if n_classes < 2:
        raise ValueError("Only one class.")
    return y, n_classes


def check_samples(sample_weight, n_samples):
    """Check sample multiplicities; None means one copy of every sample."""
    if sample_weight is None:
        return np.ones(n_samples, dtype=np.int64)

    sample_weight = np.asarray(sample_weight)
    if sample_weight.ndim != 1 or sample_weight.shape[0] != n_samples:
        raise ValueError(
            f"The sizes of X and sample_weight don't match: "
            f"{n_samples} != {sample_weight.shape[0] if sample_weight.ndim else 0}"
        )
    if not np.all(np.isfinite(sample_weight)) or not np.all(np.equal(np.mod(sample_weight, 1), 0)):
        raise ValueError("Sample weights must be integer multiplicities")
    sample_weight = sample_weight.astype(np.int64)
    if np.any(sample_weight < 0):
        raise ValueError("Negative sample weight")
    if sample_weight.sum() == 0:
        raise ValueError("All sample weights are zero")
    return sample_weight


def check_attributes(attributes, X):
    """Check that the schema matches X and nominal codes are in range."""
    n_features = X.shape[1]
    if len(attributes) != n_features:
        raise ValueError(
            f"The sizes of X and attributes don't match: {n_features} != {len(attributes)}"
        )

    for j, attribute in enumerate(attributes):
        if attribute.type is AttributeType.NOMINAL:
            column = X[:, j]
            if (np.any(column < 0) or np.any(column >= attribute.size)
                    or not np.all(np.equal(np.mod(column, 1), 0))):
                raise ValueError(
                    f"Attribute {attribute.name} must hold category codes "
                    f"in [0, {attribute.size})"
                )
        elif attribute.type is not AttributeType.NUMERIC:
            raise ValueError(f"Unsupported attribute type: {attribute.type}")


def check_order(order, attributes, n_samples):
    """Check a precomputed OrderIndex against the schema and X."""
    if order.n_features != len(attributes):
        raise ValueError(
            f"The order index covers {order.n_features} attributes, "
            f"expected {len(attributes)}"
        )
    for j, attribute in enumerate(attributes):
        variable_order = order.order[j]
        if attribute.type is AttributeType.NUMERIC:
            if variable_order is None or len(variable_order) != n_samples:
                raise ValueError(f"Invalid order of attribute {attribute.name}")
        elif variable_order is not None:
            raise ValueError(f"Nominal attribute {attribute.name} must have no order")
