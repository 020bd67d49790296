#!/usr/bin/env python3
"""
USD Reader Module
UsdSkel skeleton and skin binding extraction implementing the BaseReader interface
"""

import numpy as np
from typing import List, Optional

from core.matrix_compare import as_matrix, identity_matrix
from core.rig_data import NEGLIGIBLE_WEIGHT, Skeleton, SkinBinding, flatten_influences
from .base_reader import BaseReader, ExtractionError


class USDReader(BaseReader):
    """USD file reader for UsdSkel rigs

    Reads Skeleton prims and SkelBindingAPI meshes out of USD files
    (.usd, .usda, .usdc) into the canonical rig structures.

    Conventions applied while reading:
    - Joint names are the leaf names of the joint path tokens
      ("root/arm/hand" -> "hand")
    - Bind transforms are stored inverted: UsdSkel authors world-space bind
      poses, the canonical Skeleton holds inverse-bind matrices
    - Rest transforms are kept as authored (parent-local)
    """

    def __init__(self, usd_file: str, progress_callback=None):
        """Open USD stage

        Args:
            usd_file: Path to USD file (.usd, .usda, .usdc)
            progress_callback: Optional progress callback
        """
        super().__init__(usd_file, progress_callback)

        # Import USD libraries
        try:
            from pxr import Usd, UsdGeom, UsdSkel, Sdf, Tf
            self.Usd = Usd
            self.UsdGeom = UsdGeom
            self.UsdSkel = UsdSkel
            self.Sdf = Sdf
        except ImportError as e:
            raise ImportError(
                f"USD Python library (pxr) not found: {e}\n"
                "Install with: pip install usd-core"
            )

        if not self.file_path.exists():
            raise ExtractionError("USD file not found", str(self.file_path))

        try:
            self.stage = Usd.Stage.Open(str(self.file_path), Usd.Stage.LoadAll)
        except Tf.ErrorException as e:
            raise ExtractionError(f"Failed to open USD file ({e})", str(self.file_path))
        if not self.stage:
            raise ExtractionError("Failed to open USD file", str(self.file_path))

    def get_format_name(self) -> str:
        """Return human-readable format name"""
        return "USD"

    def list_skeletons(self) -> List[str]:
        """Get paths of all Skeleton prims in traversal order"""
        return [
            str(prim.GetPath())
            for prim in self.stage.Traverse()
            if prim.IsA(self.UsdSkel.Skeleton)
        ]

    def read_skeleton(self, skeleton_path: str) -> Skeleton:
        """Extract a Skeleton prim

        Args:
            skeleton_path: Prim path of the skeleton (e.g. "/Rig/Skel")

        Returns:
            Skeleton: Joint names, parent indices, inverse-bind and rest matrices

        Raises:
            ExtractionError: If the prim is missing, not a skeleton, or its
                             joint arrays are unreadable or inconsistent
        """
        prim = self.stage.GetPrimAtPath(skeleton_path)
        if not prim or not prim.IsValid():
            raise ExtractionError("Invalid skeleton path", skeleton_path)
        if not prim.IsA(self.UsdSkel.Skeleton):
            raise ExtractionError("Prim is not a valid UsdSkelSkeleton", skeleton_path)

        skeleton = self.UsdSkel.Skeleton(prim)

        joints = skeleton.GetJointsAttr().Get()
        if joints is None:
            raise ExtractionError("Failed to read joints attribute", skeleton_path)

        # Parent indices from the joint path tokens
        topology = self.UsdSkel.Topology(joints)
        parent_indices = list(topology.GetParentIndices())

        bind_transforms = skeleton.GetBindTransformsAttr().Get()
        if bind_transforms is None:
            raise ExtractionError("Failed to read bind transforms", skeleton_path)

        rest_transforms = skeleton.GetRestTransformsAttr().Get()
        if rest_transforms is None:
            raise ExtractionError("Failed to read rest transforms", skeleton_path)

        num_joints = len(joints)
        if len(bind_transforms) != num_joints or len(rest_transforms) != num_joints:
            raise ExtractionError("Inconsistent skeleton data sizes", skeleton_path)

        try:
            inverse_binds = [np.linalg.inv(as_matrix(m)) for m in bind_transforms]
        except np.linalg.LinAlgError:
            raise ExtractionError("Singular bind transform", skeleton_path)

        skel = Skeleton(
            joint_names=[self._joint_leaf_name(token) for token in joints],
            parent_indices=parent_indices,
            bind_transforms=inverse_binds,
            rest_transforms=[as_matrix(m) for m in rest_transforms],
            path=skeleton_path
        )
        return self._check_skeleton(skel)

    def list_skinned_geometry(self) -> List[str]:
        """Get paths of all prims carrying joint influences"""
        return [
            str(prim.GetPath())
            for prim in self.stage.Traverse()
            if prim.HasAttribute('primvars:skel:jointIndices')
        ]

    def read_skin_binding(self, geometry_path: str) -> SkinBinding:
        """Extract joint influences of a skinned prim

        Args:
            geometry_path: Prim path of the skinned mesh

        Returns:
            SkinBinding: Influences flattened vertex-major, joint indices in
                         skeleton order, plus the geometry bind transform

        Raises:
            ExtractionError: If the prim or its skeleton binding is unusable
        """
        prim = self.stage.GetPrimAtPath(geometry_path)
        if not prim or not prim.IsValid():
            raise ExtractionError("Invalid geometry path", geometry_path)

        binding = self.UsdSkel.BindingAPI(prim)
        indices_primvar = binding.GetJointIndicesPrimvar()
        weights_primvar = binding.GetJointWeightsPrimvar()
        if not indices_primvar.IsDefined() or not weights_primvar.IsDefined():
            raise ExtractionError("Prim has no joint influences", geometry_path)

        joint_indices = indices_primvar.Get()
        joint_weights = weights_primvar.Get()
        if joint_indices is None or joint_weights is None:
            raise ExtractionError("Failed to read joint influences", geometry_path)
        joint_indices = list(joint_indices)
        joint_weights = list(joint_weights)
        if len(joint_indices) != len(joint_weights):
            raise ExtractionError("Joint indices and weights differ in length", geometry_path)

        element_size = indices_primvar.GetElementSize()
        if element_size < 1 or weights_primvar.GetElementSize() != element_size:
            raise ExtractionError("Invalid influence element size", geometry_path)

        skeleton_path = self._find_bound_skeleton(prim)
        if skeleton_path is None:
            raise ExtractionError("No skeleton bound to geometry", geometry_path)

        remap = self._joint_order_remap(binding, skeleton_path, geometry_path)

        # Rigid bindings author one influence set for the whole prim
        influence_sets = [
            list(zip(joint_indices[start:start + element_size],
                     joint_weights[start:start + element_size]))
            for start in range(0, len(joint_indices), element_size)
        ]
        if indices_primvar.GetInterpolation() == self.UsdGeom.Tokens.constant:
            influence_sets = influence_sets[:1] * self._point_count(prim)

        per_vertex = [
            [(remap(index), weight) for index, weight in influences
             if weight > NEGLIGIBLE_WEIGHT]
            for influences in influence_sets
        ]
        flat_indices, flat_weights = flatten_influences(per_vertex)

        geom_bind = binding.GetGeomBindTransformAttr().Get()
        geom_bind_transform = as_matrix(geom_bind) if geom_bind is not None else identity_matrix()

        skin = SkinBinding(
            skeleton_path=skeleton_path,
            geometry_path=geometry_path,
            joint_indices=flat_indices,
            weights=flat_weights,
            geom_bind_transform=geom_bind_transform
        )
        return self._check_skin_binding(skin)

    def _joint_leaf_name(self, token) -> str:
        """Last component of a joint path token"""
        return self.Sdf.Path(str(token)).name

    def _find_bound_skeleton(self, prim) -> Optional[str]:
        """Resolve skel:skeleton on the prim or its nearest ancestor

        Returns:
            str: Skeleton prim path, or None if nothing is bound
        """
        current = prim
        while current and not current.IsPseudoRoot():
            rel = self.UsdSkel.BindingAPI(current).GetSkeletonRel()
            if rel:
                targets = rel.GetTargets()
                if targets:
                    target_prim = self.stage.GetPrimAtPath(targets[0])
                    if target_prim and target_prim.IsA(self.UsdSkel.Skeleton):
                        return str(targets[0])
                    return None
            current = current.GetParent()
        return None

    def _joint_order_remap(self, binding, skeleton_path: str, geometry_path: str):
        """Build a function mapping influence indices to skeleton joint indices

        An authored skel:joints on the binding defines a local joint order;
        without it, influence indices already refer to the skeleton order.
        """
        local_joints = binding.GetJointsAttr().Get()
        if not local_joints:
            return int

        skeleton = self.UsdSkel.Skeleton(self.stage.GetPrimAtPath(skeleton_path))
        skel_joints = [str(j) for j in (skeleton.GetJointsAttr().Get() or [])]
        skel_order = {name: i for i, name in enumerate(skel_joints)}

        mapping = []
        for token in local_joints:
            if str(token) not in skel_order:
                raise ExtractionError(f"Joint '{token}' not found in bound skeleton", geometry_path)
            mapping.append(skel_order[str(token)])

        def remap(index):
            if not 0 <= index < len(mapping):
                raise ExtractionError(f"Joint index {index} outside skel:joints", geometry_path)
            return mapping[index]

        return remap

    def _point_count(self, prim) -> int:
        """Number of points of a point-based prim (1 if it has none)"""
        if not prim.IsA(self.UsdGeom.PointBased):
            return 1
        points = self.UsdGeom.PointBased(prim).GetPointsAttr().Get()
        return len(points) if points else 1
