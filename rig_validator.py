#!/usr/bin/env python3
"""
Rig Validator - Main Orchestrator Module
Cross-checks a UsdSkel rig against the rig of a Maya ASCII scene

Readers extract both sides into the canonical Skeleton / SkinBinding
structures; the core validators compare them without knowing the source.
"""

from pathlib import Path

from core import (
    MATRIX_TOLERANCE,
    format_issues,
    validate_skeleton_detailed,
    validate_skeleton_quick,
    validate_skin_binding_detailed,
    validate_skin_binding_quick,
)
from readers import ExtractionError, create_reader, get_file_type


class RigValidator:
    """Rig cross-validator (orchestrator/facade)

    This class coordinates the validation process:
    1. Read the USD file and the Maya scene (via readers module)
    2. Pick the skeletons and skinned geometry to compare
    3. Run the quick or detailed validators and collect the results
    """

    def __init__(self, progress_callback=None, tolerance=MATRIX_TOLERANCE, strict_bind=False):
        """Initialize validator

        Args:
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
            tolerance: Per-entry matrix tolerance
            strict_bind: Fail when a scene joint has no skinCluster bindPreMatrix
                         instead of deriving its bind transform from the current pose
        """
        self.progress_callback = progress_callback
        self.tolerance = tolerance
        self.strict_bind = strict_bind

    def log(self, message):
        """Send progress updates to callback"""
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    def list_skeletons(self, usd_file):
        """List the skeleton prim paths of a USD file"""
        reader = create_reader(usd_file, progress_callback=self.progress_callback)
        return reader.list_skeletons()

    def validate(self, usd_file, scene_file, root_joint=None, skeleton_path=None,
                 geometry=None, usd_geometry=None, quick=False):
        """Validate the rig of a USD file against a Maya scene

        Args:
            usd_file: Path to the USD file (.usd, .usda, .usdc)
            scene_file: Path to the Maya ASCII scene (.ma)
            root_joint: Scene root joint (None = the only root joint in the scene)
            skeleton_path: USD skeleton prim path (None = the skeleton whose
                           first joint is named like the scene root joint)
            geometry: Scene mesh to compare skin weights on (None = skip skin)
            usd_geometry: USD mesh prim path (None = prim with the same leaf name)
            quick: Only report pass/fail, without issue lists

        Returns:
            dict: Results with keys:
                - 'success': bool, True if extraction worked and everything matched
                - 'skeleton': skeleton results (if extraction succeeded)
                - 'skin': skin results (if geometry was given)
                - 'error': extraction error message or None
                - 'message': Summary message
        """
        results = {
            'success': False,
            'error': None,
            'message': ''
        }

        self.log(f"\n{'='*60}")
        self.log("Rig Validator")
        self.log(f"{'='*60}")
        self.log(f"USD file: {usd_file}")
        self.log(f"Scene: {scene_file}")
        self.log(f"Mode: {'quick' if quick else 'detailed'}")
        self.log(f"{'='*60}\n")

        # Step 1: Extract both rigs before any comparison
        try:
            self._check_file_type(usd_file, 'usd')
            self._check_file_type(scene_file, 'maya')

            self.log("Step 1/3: Reading rigs...")
            usd_reader = create_reader(usd_file, progress_callback=self.progress_callback)
            scene_reader = create_reader(scene_file, progress_callback=self.progress_callback,
                                         strict_bind=self.strict_bind)

            root_joint = root_joint or self._find_root_joint(scene_reader)
            scene_skel = scene_reader.read_skeleton(root_joint)
            self.log(f"  Scene skeleton: {scene_skel.path} ({scene_skel.joint_count} joints)")

            if skeleton_path:
                file_skel = usd_reader.read_skeleton(skeleton_path)
            else:
                file_skel = self._find_matching_skeleton(usd_reader, scene_skel)
            self.log(f"  USD skeleton: {file_skel.path} ({file_skel.joint_count} joints)")

            file_skin = scene_skin = None
            if geometry:
                scene_skin = scene_reader.read_skin_binding(geometry)
                usd_geometry = usd_geometry or self._find_matching_geometry(usd_reader, geometry)
                file_skin = usd_reader.read_skin_binding(usd_geometry)
                self.log(f"  Skinned geometry: {file_skin.geometry_path} <-> {scene_skin.geometry_path}")

        except (ExtractionError, ValueError) as e:
            self.log(f"\n✗ Extraction failed: {e}")
            results['error'] = str(e)
            results['message'] = f"Extraction failed: {e}"
            return results

        # Step 2: Skeleton
        self.log("\nStep 2/3: Validating skeleton...")
        results['skeleton'] = self._compare(
            file_skel, scene_skel, quick,
            validate_skeleton_quick, validate_skeleton_detailed, "Skeleton"
        )
        results['skeleton'].update({
            'usd_path': file_skel.path,
            'scene_path': scene_skel.path,
            'joint_count': scene_skel.joint_count,
        })

        # Step 3: Skin binding
        if file_skin is not None:
            self.log("\nStep 3/3: Validating skin binding...")
            results['skin'] = self._compare(
                file_skin, scene_skin, quick,
                validate_skin_binding_quick, validate_skin_binding_detailed, "Skin binding"
            )
            results['skin'].update({
                'usd_path': file_skin.geometry_path,
                'scene_path': scene_skin.geometry_path,
                'influence_count': scene_skin.influence_count,
            })
        else:
            self.log("\nStep 3/3: Skin binding skipped (no geometry given)")

        checked = [results['skeleton']] + ([results['skin']] if 'skin' in results else [])
        results['success'] = all(part['match'] for part in checked)
        issue_count = sum(len(part['issues']) for part in checked)

        self.log(f"\n{'='*60}")
        if results['success']:
            results['message'] = "Rig matches"
            self.log("✓ Rig matches")
        elif quick:
            results['message'] = "Rig mismatch"
            self.log("✗ Rig mismatch")
        else:
            results['message'] = f"Rig mismatch: {issue_count} issue(s)"
            self.log(f"✗ Rig mismatch: {issue_count} issue(s)")
        self.log(f"{'='*60}")

        return results

    def _compare(self, file_data, scene_data, quick, quick_check, detailed_check, title):
        """Run one validator tier and log its outcome"""
        if quick:
            match = quick_check(file_data, scene_data, self.tolerance)
            self.log(f"  {title}: {'OK' if match else 'MISMATCH'}")
            return {'match': match, 'issues': []}

        issues = detailed_check(file_data, scene_data, self.tolerance)
        for line in format_issues(issues, title):
            self.log(f"  {line}")
        return {'match': not issues, 'issues': issues}

    def _check_file_type(self, file_path, expected):
        if get_file_type(file_path) != expected:
            raise ValueError(f"Unsupported file format for {expected} input: {Path(file_path).suffix}")

    def _find_root_joint(self, scene_reader):
        """The scene's root joint, when there is exactly one"""
        roots = scene_reader.list_skeletons()
        if not roots:
            raise ExtractionError("No joints found in scene", str(scene_reader.file_path))
        if len(roots) > 1:
            raise ExtractionError(
                f"Scene has several root joints ({', '.join(roots)}), pass one explicitly",
                str(scene_reader.file_path)
            )
        return roots[0]

    def _find_matching_skeleton(self, usd_reader, scene_skel):
        """USD skeleton whose first joint is named like the scene root joint"""
        root_name = scene_skel.joint_names[0]
        for skel in usd_reader.read_all_skeletons():
            if skel.joint_names and skel.joint_names[0] == root_name:
                return skel
        raise ExtractionError(f"No USD skeleton with root joint '{root_name}'", str(usd_reader.file_path))

    def _find_matching_geometry(self, usd_reader, geometry):
        """USD skinned prim named like the scene mesh or its transform"""
        leaf = geometry.replace('|', '/').rstrip('/').split('/')[-1]
        candidates = {leaf}
        if leaf.endswith('Shape'):
            candidates.add(leaf[:-len('Shape')])

        for path in usd_reader.list_skinned_geometry():
            if path.rstrip('/').split('/')[-1] in candidates:
                return path
        raise ExtractionError(f"No skinned USD prim named '{leaf}'", str(usd_reader.file_path))
