#!/usr/bin/env python3
"""
Skin Validator Module
Compares a file-sourced skin binding against a scene-sourced one.

Influences are compared position-for-position, so both readers must emit
them in the same order (see rig_data.flatten_influences). Detailed output
is capped per category by issue_report.MismatchAccumulator.
"""

from typing import List

from .issue_report import MAX_REPORTED_MISMATCHES, MismatchAccumulator
from .matrix_compare import MATRIX_TOLERANCE, matrices_match
from .rig_data import IssueType, SkinBinding, ValidationIssue

# Maximum absolute difference between two influence weights
WEIGHT_TOLERANCE = 1e-5


def quick_validate_skin_binding(file_skin: SkinBinding, scene_skin: SkinBinding,
                                tolerance: float = MATRIX_TOLERANCE,
                                weight_tolerance: float = WEIGHT_TOLERANCE) -> bool:
    """Check whether two skin bindings agree

    Args:
        file_skin: Skin binding read from the file source
        scene_skin: Skin binding read from the scene source
        tolerance: Per-entry tolerance for the geometry bind transform
        weight_tolerance: Maximum absolute weight difference

    Returns:
        bool: True if indices, weights and geometry bind transform match
    """
    if len(file_skin.joint_indices) != len(scene_skin.joint_indices):
        return False
    if len(file_skin.weights) != len(scene_skin.weights):
        return False

    for file_index, scene_index in zip(file_skin.joint_indices, scene_skin.joint_indices):
        if file_index != scene_index:
            return False

    for file_weight, scene_weight in zip(file_skin.weights, scene_skin.weights):
        if not abs(file_weight - scene_weight) <= weight_tolerance:
            return False

    return matrices_match(file_skin.geom_bind_transform, scene_skin.geom_bind_transform, tolerance)


def detailed_validate_skin_binding(file_skin: SkinBinding, scene_skin: SkinBinding,
                                   tolerance: float = MATRIX_TOLERANCE,
                                   weight_tolerance: float = WEIGHT_TOLERANCE,
                                   limit: int = MAX_REPORTED_MISMATCHES) -> List[ValidationIssue]:
    """List the differences between two skin bindings

    Length mismatches are reported alone. Otherwise joint index and weight
    mismatches are listed up to `limit` each (plus one summary issue for
    the rest), followed by the geometry bind transform check.

    Args:
        file_skin: Skin binding read from the file source
        scene_skin: Skin binding read from the scene source
        tolerance: Per-entry tolerance for the geometry bind transform
        weight_tolerance: Maximum absolute weight difference
        limit: Individual mismatches listed per category

    Returns:
        list: ValidationIssues in discovery order, empty if the bindings match
    """
    issues = []

    file_count, scene_count = len(file_skin.joint_indices), len(scene_skin.joint_indices)
    if file_count != scene_count:
        issues.append(ValidationIssue(
            IssueType.WEIGHT_COUNT_MISMATCH,
            f"Joint indices count mismatch: file has {file_count}, scene has {scene_count}"
        ))
        return issues

    file_count, scene_count = len(file_skin.weights), len(scene_skin.weights)
    if file_count != scene_count:
        issues.append(ValidationIssue(
            IssueType.WEIGHT_COUNT_MISMATCH,
            f"Joint weights count mismatch: file has {file_count}, scene has {scene_count}"
        ))
        return issues

    index_mismatches = MismatchAccumulator(IssueType.JOINT_INDEX_MISMATCH, "joint index", limit)
    for i, (file_index, scene_index) in enumerate(zip(file_skin.joint_indices,
                                                      scene_skin.joint_indices)):
        if file_index != scene_index:
            index_mismatches.record(
                issues, i,
                f"Joint index mismatch at position {i}: file={file_index}, scene={scene_index}"
            )
    index_mismatches.finish(issues)

    weight_mismatches = MismatchAccumulator(IssueType.WEIGHT_VALUE_MISMATCH, "weight", limit)
    for i, (file_weight, scene_weight) in enumerate(zip(file_skin.weights, scene_skin.weights)):
        diff = abs(file_weight - scene_weight)
        if not diff <= weight_tolerance:
            weight_mismatches.record(
                issues, i,
                f"Weight mismatch at position {i}: file={file_weight:g}, "
                f"scene={scene_weight:g} (diff={diff:g})"
            )
    weight_mismatches.finish(issues)

    if not matrices_match(file_skin.geom_bind_transform, scene_skin.geom_bind_transform, tolerance):
        issues.append(ValidationIssue(
            IssueType.GEOM_BIND_TRANSFORM_MISMATCH,
            "Geometry bind transform mismatch"
        ))

    return issues
