#!/usr/bin/env python3
"""
Skeleton Validator Module
Compares a file-sourced skeleton against a scene-sourced skeleton.

Two tiers are provided:
- quick_validate_skeleton(): pass/fail, stops at the first difference
- detailed_validate_skeleton(): every difference, as ValidationIssues

Both agree: the quick check passes iff the detailed check returns no issues.
"""

from typing import List

from .matrix_compare import MATRIX_TOLERANCE, matrices_match
from .rig_data import IssueType, Skeleton, ValidationIssue


def _array_lengths(skel: Skeleton):
    return (
        ('joints', len(skel.joint_names)),
        ('parent indices', len(skel.parent_indices)),
        ('bind transforms', len(skel.bind_transforms)),
        ('rest transforms', len(skel.rest_transforms)),
    )


def quick_validate_skeleton(file_skel: Skeleton, scene_skel: Skeleton,
                            tolerance: float = MATRIX_TOLERANCE) -> bool:
    """Check whether two skeletons describe the same rig

    Cheap checks run first; the result does not depend on the order.

    Args:
        file_skel: Skeleton read from the file source
        scene_skel: Skeleton read from the scene source
        tolerance: Per-entry matrix tolerance

    Returns:
        bool: True if names, hierarchy and transforms all match
    """
    # Counts
    if len(file_skel.joint_names) != len(scene_skel.joint_names):
        return False
    if len(file_skel.parent_indices) != len(scene_skel.parent_indices):
        return False
    if len(file_skel.bind_transforms) != len(scene_skel.bind_transforms):
        return False
    if len(file_skel.rest_transforms) != len(scene_skel.rest_transforms):
        return False

    # Names and hierarchy
    for file_name, scene_name in zip(file_skel.joint_names, scene_skel.joint_names):
        if file_name != scene_name:
            return False
    for file_parent, scene_parent in zip(file_skel.parent_indices, scene_skel.parent_indices):
        if file_parent != scene_parent:
            return False

    # Transforms
    for file_mat, scene_mat in zip(file_skel.bind_transforms, scene_skel.bind_transforms):
        if not matrices_match(file_mat, scene_mat, tolerance):
            return False
    for file_mat, scene_mat in zip(file_skel.rest_transforms, scene_skel.rest_transforms):
        if not matrices_match(file_mat, scene_mat, tolerance):
            return False

    return True


def detailed_validate_skeleton(file_skel: Skeleton, scene_skel: Skeleton,
                               tolerance: float = MATRIX_TOLERANCE) -> List[ValidationIssue]:
    """List every difference between two skeletons

    A count mismatch is reported alone: positional comparison means nothing
    once the joint lists have different lengths. Otherwise names, parent
    indices, bind transforms and rest transforms are each checked for every
    joint, in that order.

    Args:
        file_skel: Skeleton read from the file source
        scene_skel: Skeleton read from the scene source
        tolerance: Per-entry matrix tolerance

    Returns:
        list: ValidationIssues in discovery order, empty if the rigs match
    """
    issues = []

    for (label, file_count), (_, scene_count) in zip(_array_lengths(file_skel),
                                                    _array_lengths(scene_skel)):
        if file_count != scene_count:
            if label == 'joints':
                desc = f"Joint count mismatch: file has {file_count} joints, scene has {scene_count} joints"
            else:
                desc = f"Joint count mismatch: file has {file_count} {label}, scene has {scene_count} {label}"
            issues.append(ValidationIssue(IssueType.JOINT_COUNT_MISMATCH, desc))
            return issues

    for i, (file_name, scene_name) in enumerate(zip(file_skel.joint_names, scene_skel.joint_names)):
        if file_name != scene_name:
            issues.append(ValidationIssue(
                IssueType.JOINT_NAME_MISMATCH,
                f"Joint {i} name mismatch: file='{file_name}', scene='{scene_name}'",
                i
            ))

    for i, (file_parent, scene_parent) in enumerate(zip(file_skel.parent_indices,
                                                        scene_skel.parent_indices)):
        if file_parent != scene_parent:
            issues.append(ValidationIssue(
                IssueType.PARENT_INDEX_MISMATCH,
                f"Joint {i} parent index mismatch: file={file_parent}, scene={scene_parent}",
                i
            ))

    for i, (file_mat, scene_mat) in enumerate(zip(file_skel.bind_transforms,
                                                  scene_skel.bind_transforms)):
        if not matrices_match(file_mat, scene_mat, tolerance):
            issues.append(ValidationIssue(
                IssueType.BIND_TRANSFORM_MISMATCH,
                f"Joint {i} ({_joint_label(scene_skel, i)}) bind transform mismatch",
                i
            ))

    for i, (file_mat, scene_mat) in enumerate(zip(file_skel.rest_transforms,
                                                  scene_skel.rest_transforms)):
        if not matrices_match(file_mat, scene_mat, tolerance):
            issues.append(ValidationIssue(
                IssueType.REST_TRANSFORM_MISMATCH,
                f"Joint {i} ({_joint_label(scene_skel, i)}) rest transform mismatch",
                i
            ))

    return issues


def _joint_label(skel: Skeleton, index: int) -> str:
    if index < len(skel.joint_names):
        return skel.joint_names[index]
    return "?"
