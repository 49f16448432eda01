"""
Topology Layer
==============

Radial network structure:
- Arena tree built from a flat list of points
- Source (transformer) identification
- Structural and catalog validation before the physics pass
"""

from .tree import SOURCE_ID, NetworkTree, TreeNode
from .validation import ValidationIssue, ValidationReport, validate_network, validate_tree

__all__ = [
    "SOURCE_ID",
    "NetworkTree",
    "TreeNode",
    "ValidationIssue",
    "ValidationReport",
    "validate_network",
    "validate_tree",
]
