"""Tests for the orchestrator and the command line entry point"""

from pathlib import Path

import pytest

import rig_validator
import validate_rig
from core import IssueType
from readers import ExtractionError
from rig_validator import RigValidator
from conftest import make_skeleton, make_skin


class FakeReader:
    """In-memory stand-in for a scene reader"""

    def __init__(self, skeletons, skins=None, file_path="fake"):
        self.skeletons = skeletons
        self.skins = skins or {}
        self.file_path = file_path

    def list_skeletons(self):
        return list(self.skeletons)

    def read_skeleton(self, identifier):
        if identifier not in self.skeletons:
            raise ExtractionError("Root joint not found", identifier)
        return self.skeletons[identifier]

    def read_all_skeletons(self):
        return list(self.skeletons.values())

    def list_skinned_geometry(self):
        return list(self.skins)

    def read_skin_binding(self, geometry):
        if geometry not in self.skins:
            raise ExtractionError("No skin cluster found for mesh", geometry)
        return self.skins[geometry]


@pytest.fixture
def fake_readers(monkeypatch):
    """Readers keyed by file extension, installed in place of create_reader"""
    readers = {
        '.usda': FakeReader({"/Rig/Skel": make_skeleton()}, {"/Rig/body": make_skin()}),
        '.ma': FakeReader({"root": make_skeleton(path="/root")}, {"body": make_skin()}),
    }

    def fake_create_reader(input_file, progress_callback=None, **options):
        return readers[Path(input_file).suffix]

    monkeypatch.setattr(rig_validator, 'create_reader', fake_create_reader)
    return readers


def test_matching_rig(fake_readers):
    messages = []
    results = RigValidator(progress_callback=messages.append).validate(
        "rig.usda", "rig.ma", geometry="body")

    assert results['success']
    assert results['error'] is None
    assert results['skeleton']['issues'] == []
    assert results['skeleton']['usd_path'] == "/Rig/Skel"
    assert results['skin']['match']
    assert results['message'] == "Rig matches"
    assert "✓ Rig matches" in messages


def test_skin_is_skipped_without_geometry(fake_readers):
    results = RigValidator().validate("rig.usda", "rig.ma")
    assert results['success']
    assert 'skin' not in results


def test_mismatching_skeleton(fake_readers):
    fake_readers['.ma'].skeletons["root"] = make_skeleton(names=("root", "forearm", "hand"))
    results = RigValidator().validate("rig.usda", "rig.ma", root_joint="root",
                                      skeleton_path="/Rig/Skel")

    assert not results['success']
    assert results['error'] is None
    issues = results['skeleton']['issues']
    assert [(i.issue_type, i.index) for i in issues] == [(IssueType.JOINT_NAME_MISMATCH, 1)]
    assert results['message'] == "Rig mismatch: 1 issue(s)"


def test_quick_mode_reports_no_issues(fake_readers):
    fake_readers['.ma'].skins["body"] = make_skin(weights=(1.0, 0.4, 0.6, 1.0))
    results = RigValidator().validate("rig.usda", "rig.ma", geometry="body", quick=True)

    assert not results['success']
    assert results['skeleton']['match']
    assert not results['skin']['match']
    assert results['skin']['issues'] == []


def test_skeleton_found_by_root_joint_name(fake_readers):
    fake_readers['.usda'].skeletons = {
        "/Prop/Skel": make_skeleton(names=("base", "lid"), parents=(-1, 0), path="/Prop/Skel"),
        "/Rig/Skel": make_skeleton(),
    }
    results = RigValidator().validate("rig.usda", "rig.ma")
    assert results['success']
    assert results['skeleton']['usd_path'] == "/Rig/Skel"


def test_extraction_failure_stops_before_validation(fake_readers):
    results = RigValidator().validate("rig.usda", "rig.ma", root_joint="spine")
    assert not results['success']
    assert results['error'] == "Root joint not found: spine"
    assert 'skeleton' not in results


def test_several_root_joints_need_explicit_choice(fake_readers):
    fake_readers['.ma'].skeletons["prop"] = make_skeleton(names=("prop",), parents=(-1,))
    results = RigValidator().validate("rig.usda", "rig.ma")
    assert "several root joints" in results['error']


def test_unsupported_input_is_an_error(fake_readers):
    results = RigValidator().validate("rig.abc", "rig.ma")
    assert not results['success']
    assert "Unsupported file format" in results['error']


@pytest.fixture
def rig_files(tmp_path):
    usd_file = tmp_path / "rig.usda"
    scene_file = tmp_path / "rig.ma"
    usd_file.write_text("")
    scene_file.write_text("")
    return str(usd_file), str(scene_file)


def test_cli_exit_codes(fake_readers, rig_files):
    usd_file, scene_file = rig_files
    assert validate_rig.main([usd_file, scene_file, "--geometry", "body"]) == validate_rig.EXIT_MATCH

    fake_readers['.ma'].skins["body"] = make_skin(indices=(0, 1, 1, 2))
    assert validate_rig.main([usd_file, scene_file, "-g", "body"]) == validate_rig.EXIT_MISMATCH
    assert validate_rig.main([usd_file, scene_file, "-r", "spine"]) == validate_rig.EXIT_ERROR


def test_cli_rejects_bad_input(fake_readers, rig_files, tmp_path, capsys):
    usd_file, scene_file = rig_files
    assert validate_rig.main([str(tmp_path / "missing.usda"), scene_file]) == validate_rig.EXIT_ERROR
    assert validate_rig.main([usd_file]) == validate_rig.EXIT_ERROR
    assert validate_rig.main([usd_file, usd_file]) == validate_rig.EXIT_ERROR
    assert "Unsupported scene format" in capsys.readouterr().err


def test_cli_lists_skeletons(fake_readers, rig_files, capsys):
    usd_file, _ = rig_files
    assert validate_rig.main([usd_file, "--list-skeletons"]) == validate_rig.EXIT_MATCH
    assert "/Rig/Skel" in capsys.readouterr().out.splitlines()


def test_cli_tolerance_flag(fake_readers, rig_files):
    usd_file, scene_file = rig_files
    fake_readers['.ma'].skeletons["root"] = make_skeleton(
        rests=[make_skeleton().rest_transforms[0],
               make_skeleton().rest_transforms[1] + 1e-4,
               make_skeleton().rest_transforms[2]])
    assert validate_rig.main([usd_file, scene_file]) == validate_rig.EXIT_MISMATCH
    assert validate_rig.main([usd_file, scene_file, "--tolerance", "1e-3"]) == validate_rig.EXIT_MATCH
