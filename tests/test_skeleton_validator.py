"""Tests for quick and detailed skeleton validation"""

import pytest

from core import IssueType, quick_validate_skeleton, detailed_validate_skeleton
from conftest import make_skeleton, translation


def test_identical_skeletons_match(skeleton):
    other = make_skeleton()
    assert quick_validate_skeleton(skeleton, other)
    assert detailed_validate_skeleton(skeleton, other) == []


def test_joint_count_mismatch_is_reported_alone(skeleton):
    shorter = make_skeleton(names=("root", "arm"), parents=(-1, 0))
    assert not quick_validate_skeleton(skeleton, shorter)

    issues = detailed_validate_skeleton(skeleton, shorter)
    assert len(issues) == 1
    assert issues[0].issue_type == IssueType.JOINT_COUNT_MISMATCH
    assert issues[0].index == -1
    assert "file has 3 joints, scene has 2 joints" in issues[0].description


def test_renamed_joint_gives_single_name_issue(skeleton):
    renamed = make_skeleton(names=("root", "forearm", "hand"))
    assert not quick_validate_skeleton(skeleton, renamed)

    issues = detailed_validate_skeleton(skeleton, renamed)
    assert len(issues) == 1
    assert issues[0].issue_type == IssueType.JOINT_NAME_MISMATCH
    assert issues[0].index == 1
    assert "file='arm'" in issues[0].description
    assert "scene='forearm'" in issues[0].description


def test_parent_mismatch(skeleton):
    flat = make_skeleton(parents=(-1, 0, 0))
    issues = detailed_validate_skeleton(skeleton, flat)
    assert [(i.issue_type, i.index) for i in issues] == [(IssueType.PARENT_INDEX_MISMATCH, 2)]


def test_bind_difference_below_tolerance_is_ignored(skeleton):
    binds = [translation(0.0), translation(-1.0), translation(-2.0)]
    binds[1][0, 1] = 1e-7
    nudged = make_skeleton(binds=binds)
    assert quick_validate_skeleton(skeleton, nudged)
    assert detailed_validate_skeleton(skeleton, nudged) == []


def test_transform_mismatches_in_discovery_order(skeleton):
    binds = [translation(0.0), translation(-1.0), translation(-3.0)]
    rests = [translation(0.0), translation(2.0), translation(1.0)]
    moved = make_skeleton(binds=binds, rests=rests)

    issues = detailed_validate_skeleton(skeleton, moved)
    assert [(i.issue_type, i.index) for i in issues] == [
        (IssueType.BIND_TRANSFORM_MISMATCH, 2),
        (IssueType.REST_TRANSFORM_MISMATCH, 1),
    ]
    assert "(hand)" in issues[0].description


def test_tolerance_is_configurable(skeleton):
    rests = [translation(0.0), translation(1.001), translation(1.0)]
    loose = make_skeleton(rests=rests)
    assert not quick_validate_skeleton(skeleton, loose)
    assert quick_validate_skeleton(skeleton, loose, tolerance=1e-2)
    assert detailed_validate_skeleton(skeleton, loose, tolerance=1e-2) == []


@pytest.mark.parametrize("scene", [
    make_skeleton(),
    make_skeleton(names=("root", "arm")),
    make_skeleton(names=("root", "arm"), parents=(-1, 0)),
    make_skeleton(names=("root", "arm", "wrist"), parents=(-1, 0, 0)),
    make_skeleton(rests=[translation(0.0), translation(0.0), translation(0.0)]),
    make_skeleton(binds=[translation(0.0)] * 3),
    make_skeleton(names=(), parents=()),
])
def test_quick_agrees_with_detailed(skeleton, scene):
    issues = detailed_validate_skeleton(skeleton, scene)
    assert quick_validate_skeleton(skeleton, scene) == (not issues)


def test_empty_skeletons_match():
    empty = make_skeleton(names=(), parents=())
    assert quick_validate_skeleton(empty, empty)
    assert detailed_validate_skeleton(empty, empty) == []
