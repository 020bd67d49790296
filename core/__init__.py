#!/usr/bin/env python3
"""
Core Module
Source-agnostic rig data structures and the validation engine.

Readers (USD, Maya ASCII) build Skeleton and SkinBinding instances; the
validators compare a file-sourced instance against a scene-sourced one.
"""

from .matrix_compare import (
    MATRIX_TOLERANCE,
    as_matrix,
    identity_matrix,
    matrices_match,
    max_abs_difference,
)
from .rig_data import (
    NEGLIGIBLE_WEIGHT,
    IssueType,
    Skeleton,
    SkinBinding,
    ValidationIssue,
    flatten_influences,
)
from .issue_report import (
    MAX_REPORTED_MISMATCHES,
    MismatchAccumulator,
    format_issues,
    summarize_issues,
)
from .skeleton_validator import quick_validate_skeleton, detailed_validate_skeleton
from .skin_validator import (
    WEIGHT_TOLERANCE,
    quick_validate_skin_binding,
    detailed_validate_skin_binding,
)

# Names exposed to the host boundary
validate_skeleton_quick = quick_validate_skeleton
validate_skeleton_detailed = detailed_validate_skeleton
validate_skin_binding_quick = quick_validate_skin_binding
validate_skin_binding_detailed = detailed_validate_skin_binding

__all__ = [
    'MATRIX_TOLERANCE',
    'WEIGHT_TOLERANCE',
    'NEGLIGIBLE_WEIGHT',
    'MAX_REPORTED_MISMATCHES',
    'as_matrix',
    'identity_matrix',
    'matrices_match',
    'max_abs_difference',
    'IssueType',
    'Skeleton',
    'SkinBinding',
    'ValidationIssue',
    'flatten_influences',
    'MismatchAccumulator',
    'format_issues',
    'summarize_issues',
    'quick_validate_skeleton',
    'detailed_validate_skeleton',
    'quick_validate_skin_binding',
    'detailed_validate_skin_binding',
    'validate_skeleton_quick',
    'validate_skeleton_detailed',
    'validate_skin_binding_quick',
    'validate_skin_binding_detailed',
]
