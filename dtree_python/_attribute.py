# dtree_python/_attribute.py
from enum import Enum


class AttributeType(Enum):
    NOMINAL = "nominal"
    NUMERIC = "numeric"


class Attribute:
    """Describe one column of the feature matrix."""

    __slots__ = ('name', 'type')

    def __init__(self, name, type):
        self.name = name
        self.type = type

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


class NumericAttribute(Attribute):
    """Real-valued attribute, split with ``x <= threshold``."""

    __slots__ = ()

    def __init__(self, name):
        super().__init__(name, AttributeType.NUMERIC)


class NominalAttribute(Attribute):
    """Categorical attribute encoded as the integers ``0 .. size - 1``.

    Split with ``x == category``.
    """

    __slots__ = ('size',)

    def __init__(self, name, size):
        super().__init__(name, AttributeType.NOMINAL)
        if size < 1:
            raise ValueError(f"Invalid number of categories for {name}: {size}")
        self.size = int(size)

    def __repr__(self):
        return f"NominalAttribute(name={self.name!r}, size={self.size})"


def infer_attributes(n_features):
    """All-numeric schema used when the caller does not provide one."""
    return [NumericAttribute(f"V{j + 1}") for j in range(n_features)]
