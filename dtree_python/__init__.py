"""
Best-first decision tree for multi-class classification
"""

from .tree import DecisionTreeClassifier
from ._attribute import AttributeType, NominalAttribute, NumericAttribute
from ._criterion import SplitRule
from ._partitioner import OrderIndex, PartitionError
from ._tree import Node, Tree

__all__ = [
    'DecisionTreeClassifier',
    'AttributeType',
    'NominalAttribute',
    'NumericAttribute',
    'SplitRule',
    'OrderIndex',
    'PartitionError',
    'Node',
    'Tree',
]
