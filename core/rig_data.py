#!/usr/bin/env python3
"""
Rig Data Module
Source-agnostic data structures for skeletons and skin bindings.

This module defines the canonical structures that decouple readers
(USD, Maya ASCII) from the validators. Each reader extracts its source
into these structures, and the validators compare two of them without
knowledge of where they came from.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .matrix_compare import as_matrix

# Influences at or below this weight are treated as unbound
NEGLIGIBLE_WEIGHT = 1e-4


def _frozen_matrices(values) -> Tuple[np.ndarray, ...]:
    """Convert a sequence of matrix-likes into read-only numpy arrays"""
    matrices = []
    for value in values:
        m = as_matrix(value)
        m.setflags(write=False)
        matrices.append(m)
    return tuple(matrices)


class IssueType(Enum):
    """Kinds of mismatch reported by the detailed validators"""
    JOINT_COUNT_MISMATCH = "JOINT_COUNT_MISMATCH"
    JOINT_NAME_MISMATCH = "JOINT_NAME_MISMATCH"
    PARENT_INDEX_MISMATCH = "PARENT_INDEX_MISMATCH"
    BIND_TRANSFORM_MISMATCH = "BIND_TRANSFORM_MISMATCH"
    REST_TRANSFORM_MISMATCH = "REST_TRANSFORM_MISMATCH"
    WEIGHT_COUNT_MISMATCH = "WEIGHT_COUNT_MISMATCH"
    JOINT_INDEX_MISMATCH = "JOINT_INDEX_MISMATCH"
    WEIGHT_VALUE_MISMATCH = "WEIGHT_VALUE_MISMATCH"
    GEOM_BIND_TRANSFORM_MISMATCH = "GEOM_BIND_TRANSFORM_MISMATCH"


@dataclass(frozen=True)
class ValidationIssue:
    """Single mismatch found by a detailed validation

    Attributes:
        issue_type: Kind of mismatch
        description: Human-readable description
        index: Joint or sample position, -1 when the issue is not localized
    """
    issue_type: IssueType
    description: str
    index: int = -1

    @property
    def is_localized(self) -> bool:
        return self.index >= 0

    def __str__(self):
        if self.is_localized:
            return f"[{self.issue_type.value} @{self.index}] {self.description}"
        return f"[{self.issue_type.value}] {self.description}"


@dataclass(frozen=True)
class Skeleton:
    """Ordered joint hierarchy with bind and rest poses

    Joints are stored as parallel sequences. A parent index of -1 marks a
    root; any other parent index refers to an earlier joint.

    Attributes:
        joint_names: Joint names in hierarchy order
        parent_indices: Parent position for each joint (-1 for roots)
        bind_transforms: Inverse-bind matrix for each joint
        rest_transforms: Parent-local rest pose for each joint
        path: Identifier of the skeleton in its source (prim path, root joint)
    """
    joint_names: Sequence[str]
    parent_indices: Sequence[int]
    bind_transforms: Sequence[np.ndarray]
    rest_transforms: Sequence[np.ndarray]
    path: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'joint_names', tuple(str(n) for n in self.joint_names))
        object.__setattr__(self, 'parent_indices', tuple(int(p) for p in self.parent_indices))
        object.__setattr__(self, 'bind_transforms', _frozen_matrices(self.bind_transforms))
        object.__setattr__(self, 'rest_transforms', _frozen_matrices(self.rest_transforms))

    @property
    def joint_count(self) -> int:
        return len(self.joint_names)

    def size_problems(self) -> List[str]:
        """Describe internal inconsistencies of this skeleton

        Returns:
            list: Problem descriptions, empty if the skeleton is consistent
        """
        problems = []
        count = self.joint_count
        for label, values in (('parent indices', self.parent_indices),
                              ('bind transforms', self.bind_transforms),
                              ('rest transforms', self.rest_transforms)):
            if len(values) != count:
                problems.append(f"{len(values)} {label} for {count} joints")

        for i, parent in enumerate(self.parent_indices):
            if parent != -1 and not 0 <= parent < i:
                problems.append(f"Joint {i} has invalid parent index {parent}")

        return problems


@dataclass(frozen=True)
class SkinBinding:
    """Sparse per-vertex joint influences of one skinned geometry

    Attributes:
        skeleton_path: Identifier of the bound skeleton in its source
        geometry_path: Identifier of the bound geometry in its source
        joint_indices: Joint index of every influence (vertex-major)
        weights: Weight of every influence, parallel to joint_indices
        geom_bind_transform: World transform of the geometry at bind time
    """
    skeleton_path: str
    geometry_path: str
    joint_indices: Sequence[int]
    weights: Sequence[float]
    geom_bind_transform: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'joint_indices', tuple(int(i) for i in self.joint_indices))
        object.__setattr__(self, 'weights', tuple(float(w) for w in self.weights))
        object.__setattr__(self, 'geom_bind_transform', _frozen_matrices([self.geom_bind_transform])[0])

    @property
    def influence_count(self) -> int:
        return len(self.joint_indices)

    def size_problems(self) -> List[str]:
        if len(self.joint_indices) != len(self.weights):
            return [f"{len(self.joint_indices)} joint indices but {len(self.weights)} weights"]
        return []


def flatten_influences(per_vertex: Iterable[Iterable[Tuple[int, float]]],
                       threshold: float = NEGLIGIBLE_WEIGHT) -> Tuple[List[int], List[float]]:
    """Flatten per-vertex influences into parallel index/weight lists

    Negligible weights are dropped and each vertex's influences are ordered
    by ascending joint index, so two sources holding the same binding
    produce identical sequences.

    Args:
        per_vertex: One iterable of (joint_index, weight) pairs per vertex
        threshold: Weights <= threshold are skipped

    Returns:
        tuple: (joint_indices, weights)
    """
    joint_indices = []
    weights = []
    for influences in per_vertex:
        kept = sorted((int(j), float(w)) for j, w in influences if w > threshold)
        for joint_index, weight in kept:
            joint_indices.append(joint_index)
            weights.append(weight)
    return joint_indices, weights
