#!/usr/bin/env python3
"""
Issue Report Module
Bounded collection and formatting of validation issues.

Issue lists are append-only: validators add issues in discovery order and
callers consume the list as-is (no reordering, no deduplication).
"""

from typing import Dict, List

from .rig_data import IssueType, ValidationIssue

# Individual mismatches listed per category before summarizing the rest
MAX_REPORTED_MISMATCHES = 5


class MismatchAccumulator:
    """Counts positional mismatches, keeping only the first few as issues

    Skin bindings carry thousands of samples, so only the first `limit`
    mismatches become individual issues. The remainder is reported as a
    single summary issue carrying the suppressed count.
    """

    def __init__(self, issue_type: IssueType, noun: str, limit: int = MAX_REPORTED_MISMATCHES):
        """Initialize accumulator

        Args:
            issue_type: Type given to individual and summary issues
            noun: Mismatch name used in the summary ("weight", "joint index")
            limit: Number of individual issues to keep
        """
        self.issue_type = issue_type
        self.noun = noun
        self.limit = limit
        self.count = 0

    @property
    def suppressed(self) -> int:
        return max(0, self.count - self.limit)

    def record(self, issues: List[ValidationIssue], index: int, description: str):
        """Count a mismatch and append it to issues while under the limit"""
        self.count += 1
        if self.count <= self.limit:
            issues.append(ValidationIssue(self.issue_type, description, index))

    def finish(self, issues: List[ValidationIssue]):
        """Append the summary issue if any mismatches were suppressed"""
        if self.suppressed > 0:
            issues.append(ValidationIssue(
                self.issue_type,
                f"... and {self.suppressed} more {self.noun} mismatches "
                f"(showing first {self.limit} only)"
            ))


def summarize_issues(issues: List[ValidationIssue]) -> Dict[IssueType, int]:
    """Count issues per type, in order of first appearance"""
    counts: Dict[IssueType, int] = {}
    for issue in issues:
        counts[issue.issue_type] = counts.get(issue.issue_type, 0) + 1
    return counts


def format_issues(issues: List[ValidationIssue], title: str) -> List[str]:
    """Format an issue list into printable lines

    Args:
        issues: Issues from a detailed validation
        title: Heading, e.g. "Skeleton"

    Returns:
        list: Lines ready to print
    """
    if not issues:
        return [f"{title}: OK"]

    lines = [f"{title}: {len(issues)} issue(s)"]
    for issue in issues:
        lines.append(f"  - {issue}")
    return lines
