#!/usr/bin/env python3
"""
Maya ASCII Reader Module
Pure Python parser for Maya ASCII (.ma) rigs implementing the BaseReader interface.

No Maya installation required - parses the text format directly and
rebuilds the joint hierarchy, joint matrices and skinCluster data from it.
"""

import re
from typing import Dict, List, Optional, Tuple

import numpy as np

from core.matrix_compare import as_matrix, identity_matrix
from core.rig_data import NEGLIGIBLE_WEIGHT, Skeleton, SkinBinding, flatten_influences
from .base_reader import BaseReader, ExtractionError

NUMBER_PATTERN = r'[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?'

# Maya rotateOrder enum values
ROTATE_ORDERS = ('xyz', 'yzx', 'zxy', 'xzy', 'yxz', 'zyx')

# Long attribute names -> short names used internally
ATTR_ALIASES = {
    'translate': 't', 'rotate': 'r', 'scale': 's',
    'jointOrient': 'jo', 'rotateAxis': 'ra', 'rotateOrder': 'ro',
    'segmentScaleCompensate': 'ssc', 'intermediateObject': 'io',
}

BOOLEAN_VALUES = {'yes': True, 'on': True, 'true': True,
                  'no': False, 'off': False, 'false': False}


class MayaNode:
    """DAG node declared by a createNode statement"""

    def __init__(self, name: str, node_type: str, parent_name: Optional[str] = None):
        self.name = name
        self.node_type = node_type
        self.parent_name = parent_name
        self.attributes: Dict[str, object] = {}
        self.children: List['MayaNode'] = []
        self.parent: Optional['MayaNode'] = None

    @property
    def full_path(self) -> str:
        """Slash-separated DAG path, e.g. "/root/arm/hand" """
        names = []
        node = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return "/" + "/".join(reversed(names))

    def is_joint(self) -> bool:
        return self.node_type == 'joint'

    def __repr__(self):
        return f"MayaNode({self.name}, {self.node_type})"


class MayaSkinClusterData:
    """Parsed skinCluster deformer data"""

    def __init__(self, name: str):
        self.name = name
        self.bind_pre_matrices: Dict[int, List[float]] = {}  # influence idx -> 16 values
        self.geom_matrix: Optional[List[float]] = None
        # weights[vertex][influence idx] = weight
        self.weights: Dict[int, Dict[int, float]] = {}
        self.influences: Dict[int, str] = {}  # influence idx -> joint name
        self.output_geometry: List[str] = []

    def set_weight(self, vertex: int, influence: int, weight: float):
        self.weights.setdefault(vertex, {})[influence] = weight


class MayaScene:
    """Container for parsed Maya scene data"""

    def __init__(self):
        self.nodes: Dict[str, MayaNode] = {}
        self.skin_clusters: Dict[str, MayaSkinClusterData] = {}
        self.connections: List[Tuple[str, str]] = []  # [(source, dest), ...]
        self.angular_unit: str = 'degree'
        # Statements the parser recognized but could not read
        self.warnings: List[str] = []

    def get_node(self, name: str) -> Optional[MayaNode]:
        return self.nodes.get(name)

    def get_joints(self) -> List[MayaNode]:
        return [n for n in self.nodes.values() if n.node_type == 'joint']


class MayaASCIIParser:
    """Pure Python parser for the rig-related parts of Maya ASCII files"""

    def __init__(self):
        self.scene = MayaScene()
        self._current_node: Optional[MayaNode] = None
        self._current_skin: Optional[MayaSkinClusterData] = None

    def parse(self, file_path: str) -> MayaScene:
        """Parse a Maya ASCII file and return structured scene data"""
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            content = f.read()
        return self.parse_text(content)

    def parse_text(self, content: str) -> MayaScene:
        """Parse Maya ASCII content already loaded into memory"""
        self.scene = MayaScene()
        self._current_node = None
        self._current_skin = None

        for statement in self._statements(content):
            if statement.startswith('createNode '):
                self._parse_create_node(statement)
            elif statement.startswith('setAttr '):
                self._parse_set_attr(statement)
            elif statement.startswith('connectAttr '):
                self._parse_connect_attr(statement)
            elif statement.startswith('currentUnit '):
                self._parse_current_unit(statement)

        # Build node hierarchy and wire up skin clusters
        self._build_hierarchy()
        self._link_skin_clusters()

        return self.scene

    def _statements(self, content: str):
        """Yield MEL statements, joining continuation lines up to the ';'"""
        pending = []
        for raw_line in content.splitlines():
            line = raw_line.strip()
            if not pending and (not line or line.startswith('//')):
                continue
            pending.append(line)
            if line.endswith(';'):
                yield ' '.join(pending)
                pending = []

    def _parse_create_node(self, line: str):
        """Parse createNode command: createNode type -n "name" [-p "parent"];"""
        match = re.match(r'createNode\s+(\w+)', line)
        if not match:
            return
        node_type = match.group(1)

        name_match = re.search(r'-n\s+"([^"]+)"', line)
        name = name_match.group(1) if name_match else f"unnamed_{len(self.scene.nodes)}"

        # Parents may be given as DAG paths ("|grp|root")
        parent_match = re.search(r'-p\s+"([^"]+)"', line)
        parent_name = parent_match.group(1).split('|')[-1] if parent_match else None

        if node_type == 'skinCluster':
            skin = MayaSkinClusterData(name)
            self.scene.skin_clusters[name] = skin
            self._current_skin = skin
            self._current_node = None
        else:
            node = MayaNode(name, node_type, parent_name)
            self.scene.nodes[name] = node
            self._current_node = node
            self._current_skin = None

    def _parse_set_attr(self, line: str):
        """Route setAttr to the node created last"""
        attr_match = re.search(r'"\.([^"]+)"', line)
        if not attr_match:
            return
        attr_name = attr_match.group(1)
        values_str = line[attr_match.end():].rstrip(';').strip()

        if self._current_skin:
            self._parse_skin_cluster_attr(attr_name, values_str)
        elif self._current_node:
            self._parse_node_attr(self._current_node, attr_name, values_str)

    def _parse_skin_cluster_attr(self, attr_name: str, values_str: str):
        """Parse weightList, bindPreMatrix and geomMatrix of a skinCluster"""
        skin = self._current_skin

        # Weights: setAttr -s 2 ".wl[4].w[0:1]"  0.25 0.75;
        wl_match = re.match(r'(?:wl|weightList)\[(\d+)\]\.(?:w|weights)\[(\d+)(?::(\d+))?\]$', attr_name)
        if wl_match:
            vertex = int(wl_match.group(1))
            start = int(wl_match.group(2))
            end = int(wl_match.group(3)) if wl_match.group(3) else start
            numbers = re.findall(NUMBER_PATTERN, values_str)
            for offset, value in enumerate(numbers[:end - start + 1]):
                skin.set_weight(vertex, start + offset, float(value))
            return

        # Compact weights: setAttr ".wl[0:2].w" 1 0 1  2 0 0.5 1 0.5  1 2 1;
        # each vertex is a count followed by that many (influence, weight) pairs
        compact_match = re.match(r'(?:wl|weightList)\[(\d+)(?::(\d+))?\]\.(?:w|weights)$', attr_name)
        if compact_match:
            start = int(compact_match.group(1))
            end = int(compact_match.group(2)) if compact_match.group(2) else start
            numbers = re.findall(NUMBER_PATTERN, values_str)
            # A bare size declaration (setAttr -s 2 ".wl[0].w";) carries no values
            if numbers and not self._read_weight_groups(skin, start, end, numbers):
                self.scene.warnings.append(
                    f"Could not read weight list '.{attr_name}' on {skin.name}")
            return

        if re.match(r'(?:wl|weightList)\[', attr_name):
            self.scene.warnings.append(
                f"Unsupported weight list attribute '.{attr_name}' on {skin.name}")
            return

        # Inverse bind matrices: setAttr ".pm[0]" -type "matrix" 1 0 0 0 ... ;
        pm_match = re.match(r'(?:pm|bindPreMatrix)\[(\d+)(?::(\d+))?\]$', attr_name)
        if pm_match:
            start = int(pm_match.group(1))
            matrices = self._parse_matrix_values(values_str)
            for offset, matrix in enumerate(matrices):
                skin.bind_pre_matrices[start + offset] = matrix
            return

        if attr_name in ('gm', 'geomMatrix'):
            matrices = self._parse_matrix_values(values_str)
            if matrices:
                skin.geom_matrix = matrices[0]

    def _read_weight_groups(self, skin: MayaSkinClusterData, start: int, end: int,
                            numbers: List[str]) -> bool:
        """Read count-prefixed (influence, weight) groups for vertices start..end

        Returns:
            bool: False if the values do not split into exactly those groups
                  (nothing is stored then)
        """
        parsed = []
        pos = 0
        for vertex in range(start, end + 1):
            if pos >= len(numbers):
                return False
            count = int(float(numbers[pos]))
            pairs = numbers[pos + 1:pos + 1 + 2 * count]
            if count < 0 or len(pairs) != 2 * count:
                return False
            for i in range(0, len(pairs), 2):
                parsed.append((vertex, int(float(pairs[i])), float(pairs[i + 1])))
            pos += 1 + 2 * count

        if pos != len(numbers):
            return False
        for vertex, influence, weight in parsed:
            skin.set_weight(vertex, influence, weight)
        return True

    def _parse_matrix_values(self, values_str: str) -> List[List[float]]:
        """Split a -type "matrix" payload into 16-value matrices"""
        type_match = re.search(r'-type\s+"matrix"\s*', values_str)
        if not type_match:
            return []
        payload = values_str[type_match.end():]
        # "xform" payloads hold decomposed transforms, not matrices
        if payload.lstrip().startswith('"xform"'):
            return []
        numbers = [float(n) for n in re.findall(NUMBER_PATTERN, payload)]
        return [numbers[i:i + 16] for i in range(0, len(numbers) - 15, 16)]

    def _parse_node_attr(self, node: MayaNode, attr_name: str, values_str: str):
        """Parse transform/joint channels and mesh vertices"""
        if attr_name.startswith('vt[') or attr_name.startswith('vrts['):
            self._parse_vertex_attr(node, values_str)
            return

        attr_name = ATTR_ALIASES.get(attr_name, attr_name)

        if '-type "double3"' in values_str or '-type "float3"' in values_str:
            type_idx = values_str.find('3"')
            numbers = re.findall(NUMBER_PATTERN, values_str[type_idx + 2:])
            if len(numbers) >= 3:
                node.attributes[attr_name] = [float(numbers[0]), float(numbers[1]), float(numbers[2])]
            return

        self._parse_simple_attr(node, attr_name, values_str)

    def _parse_vertex_attr(self, node: MayaNode, values_str: str):
        """Parse mesh vertex positions: setAttr -s 8 ".vt[0:7]" x y z x y z ..."""
        if 'vertices' not in node.attributes:
            node.attributes['vertices'] = []

        # Skip past -type "float3" if present
        type_match = re.search(r'-type\s+["\']?\w+["\']?\s*', values_str)
        if type_match:
            values_str = values_str[type_match.end():]

        numbers = re.findall(NUMBER_PATTERN, values_str)
        for i in range(0, len(numbers) - 2, 3):
            node.attributes['vertices'].append(
                [float(numbers[i]), float(numbers[i + 1]), float(numbers[i + 2])]
            )

    def _parse_simple_attr(self, node: MayaNode, attr_name: str, values_str: str):
        """Parse simple numeric or boolean attribute"""
        # Remove any remaining flags
        values_str = re.sub(r'-\w+\s+"[^"]*"', '', values_str).strip()

        if values_str.lower() in BOOLEAN_VALUES:
            node.attributes[attr_name] = BOOLEAN_VALUES[values_str.lower()]
            return

        numbers = re.findall(NUMBER_PATTERN, values_str)
        if len(numbers) == 1:
            node.attributes[attr_name] = float(numbers[0])
        elif len(numbers) > 1:
            node.attributes[attr_name] = [float(n) for n in numbers]

    def _parse_connect_attr(self, line: str):
        """Parse connectAttr command: connectAttr [-na] "source.attr" "dest.attr";"""
        match = re.search(r'connectAttr\s+(?:-\w+\s+)*"([^"]+)"\s+"([^"]+)"', line)
        if match:
            self.scene.connections.append((match.group(1), match.group(2)))

    def _parse_current_unit(self, line: str):
        """Parse the angular unit of currentUnit; distances are compared as written"""
        # currentUnit -l centimeter -a degree -t film;
        angular_match = re.search(r'-a\s+(\w+)', line)
        if angular_match:
            self.scene.angular_unit = angular_match.group(1)

    def _build_hierarchy(self):
        """Build parent-child relationships between nodes"""
        for node in self.scene.nodes.values():
            if node.parent_name and node.parent_name in self.scene.nodes:
                parent = self.scene.nodes[node.parent_name]
                node.parent = parent
                parent.children.append(node)

    def _link_skin_clusters(self):
        """Attach influences and output meshes to skinClusters via connections"""
        for source, dest in self.scene.connections:
            source_node, _, source_attr = source.partition('.')
            dest_node, _, dest_attr = dest.partition('.')

            # Influence: connectAttr "root.wm" "skinCluster1.ma[0]";
            if dest_node in self.scene.skin_clusters:
                ma_match = re.match(r'(?:ma|matrix)\[(\d+)\]$', dest_attr)
                if ma_match and source_attr.split('[')[0] in ('wm', 'worldMatrix'):
                    self.scene.skin_clusters[dest_node].influences[int(ma_match.group(1))] = source_node.split('|')[-1]

            # Output: connectAttr "skinCluster1.og[0]" "bodyShape.i";
            if source_node in self.scene.skin_clusters and source_attr.startswith(('og[', 'outputGeometry[')):
                mesh = self._follow_to_mesh(dest_node, dest_attr)
                if mesh and mesh not in self.scene.skin_clusters[source_node].output_geometry:
                    self.scene.skin_clusters[source_node].output_geometry.append(mesh)

    def _follow_to_mesh(self, node_name: str, attr: str, depth: int = 0) -> Optional[str]:
        """Follow deformer output connections until they reach a mesh"""
        node = self.scene.get_node(node_name)
        if node is not None and node.node_type == 'mesh':
            return node_name if attr in ('i', 'inMesh') else None
        if depth > 8:
            return None

        # Deformers stacked after the skinCluster (tweak, groupParts, ...)
        for source, dest in self.scene.connections:
            source_node, _, source_attr = source.partition('.')
            if source_node == node_name and source_attr.startswith(('og', 'outputGeometry')):
                dest_node, _, dest_attr = dest.partition('.')
                mesh = self._follow_to_mesh(dest_node, dest_attr, depth + 1)
                if mesh:
                    return mesh
        return None


def _axis_rotation(axis: str, angle: float) -> np.ndarray:
    """4x4 rotation about one axis, row-vector convention (v' = v * M)"""
    c, s = np.cos(angle), np.sin(angle)
    m = identity_matrix()
    if axis == 'x':
        m[1, 1], m[1, 2], m[2, 1], m[2, 2] = c, s, -s, c
    elif axis == 'y':
        m[0, 0], m[0, 2], m[2, 0], m[2, 2] = c, -s, s, c
    else:
        m[0, 0], m[0, 1], m[1, 0], m[1, 1] = c, s, -s, c
    return m


def euler_to_matrix(angles, order: str = 'xyz') -> np.ndarray:
    """Build a rotation matrix from Euler angles in radians

    Args:
        angles: (rx, ry, rz) in radians
        order: Rotation order, first axis applied first

    Returns:
        np.ndarray: 4x4 rotation matrix
    """
    by_axis = dict(zip('xyz', angles))
    m = identity_matrix()
    for axis in order:
        m = m @ _axis_rotation(axis, by_axis[axis])
    return m


def scale_matrix(scale) -> np.ndarray:
    return np.diag([float(scale[0]), float(scale[1]), float(scale[2]), 1.0])


def translate_matrix(translation) -> np.ndarray:
    m = identity_matrix()
    m[3, :3] = [float(v) for v in translation]
    return m


class MayaReader(BaseReader):
    """Maya ASCII reader implementing BaseReader interface

    Parses .ma files without requiring Maya installation.
    Supports:
    - Joint hierarchies (translate, rotate, scale, jointOrient, rotateAxis,
      rotateOrder, segmentScaleCompensate)
    - skinCluster deformers (influences, bindPreMatrix, geomMatrix, weightList)
    - Mesh vertex counts

    Transform pivots and shear are not evaluated.
    """

    def __init__(self, ma_file: str, progress_callback=None, strict_bind: bool = False):
        """Initialize reader and parse Maya ASCII file

        Args:
            ma_file: Path to Maya ASCII (.ma) file
            progress_callback: Optional progress callback
            strict_bind: Fail instead of falling back when a joint has no
                         skinCluster bindPreMatrix
        """
        super().__init__(ma_file, progress_callback)
        if not self.file_path.exists():
            raise ExtractionError("Maya file not found", str(self.file_path))

        parser = MayaASCIIParser()
        self.scene = parser.parse(str(self.file_path))
        for warning in self.scene.warnings:
            self.log(f"Warning: {warning}")
        self.strict_bind = strict_bind
        self._world_cache: Dict[str, np.ndarray] = {}

    def get_format_name(self) -> str:
        """Return human-readable format name"""
        return "Maya"

    def list_skeletons(self) -> List[str]:
        """Get names of root joints (joints without a joint parent)"""
        return [
            joint.name for joint in self.scene.get_joints()
            if not (joint.parent and joint.parent.is_joint())
        ]

    def read_skeleton(self, root_joint: str) -> Skeleton:
        """Extract the joint hierarchy below a root joint

        Args:
            root_joint: Root joint name or DAG path

        Returns:
            Skeleton: Joints in pre-order, local rest matrices and
                      inverse-bind matrices from skinCluster bindPreMatrix

        Raises:
            ExtractionError: If the root is missing or not a joint
        """
        root = self._resolve_node(root_joint)
        if root is None:
            raise ExtractionError("Root joint not found", root_joint)
        if not root.is_joint():
            raise ExtractionError("Root path is not a joint", root_joint)

        joints = self._collect_joints(root)
        if not joints:
            raise ExtractionError("No joints found in hierarchy", root_joint)

        name_to_index = {}
        parent_indices = []
        for i, joint in enumerate(joints):
            name_to_index[joint.name] = i
            parent = joint.parent
            if parent is not None and parent.is_joint():
                parent_indices.append(name_to_index.get(parent.name, -1))
            else:
                parent_indices.append(-1)

        skel = Skeleton(
            joint_names=[joint.name for joint in joints],
            parent_indices=parent_indices,
            bind_transforms=[self._bind_matrix_for_joint(joint) for joint in joints],
            rest_transforms=[self.local_matrix(joint) for joint in joints],
            path=root.full_path
        )
        self.log(f"Parsed Maya skeleton with {skel.joint_count} joints")
        return self._check_skeleton(skel)

    def list_skinned_geometry(self) -> List[str]:
        """Get names of mesh shapes driven by a skinCluster"""
        meshes = []
        for skin in self.scene.skin_clusters.values():
            meshes.extend(m for m in skin.output_geometry if m not in meshes)
        return meshes

    def read_skin_binding(self, geometry: str) -> SkinBinding:
        """Extract the skinCluster weights of a mesh

        Args:
            geometry: Mesh shape or its transform (name or DAG path)

        Returns:
            SkinBinding: Influences flattened vertex-major, joint indices in
                         the order of read_skeleton() for the skeleton root

        Raises:
            ExtractionError: If no skinned mesh or usable influences are found
        """
        node = self._resolve_node(geometry)
        if node is None:
            raise ExtractionError("Geometry not found", geometry)

        mesh = node if node.node_type == 'mesh' else self._find_shape(node)
        if mesh is None:
            raise ExtractionError("No mesh shape found", geometry)

        skin = self._find_skin_cluster(mesh.name)
        if skin is None:
            raise ExtractionError("No skin cluster found for mesh", mesh.full_path)
        if not skin.influences:
            raise ExtractionError("Skin cluster has no influence objects", skin.name)

        influence_nodes = {}
        for index, name in skin.influences.items():
            influence = self.scene.get_node(name)
            if influence is None:
                raise ExtractionError("Influence object not found", name)
            influence_nodes[index] = influence

        common_root = self._common_root(list(influence_nodes.values()))
        if common_root is None:
            raise ExtractionError("Influences share no common root", skin.name)

        skeleton_root = self._skeleton_root(common_root)
        if skeleton_root is not None:
            joints = self._collect_joints(skeleton_root)
            skeleton_path = skeleton_root.full_path
        else:
            joints = [j for child in common_root.children if child.is_joint()
                      for j in self._collect_joints(child)]
            skeleton_path = common_root.full_path

        joint_order = {joint.name: i for i, joint in enumerate(joints)}
        influence_to_joint = {}
        for index, influence in influence_nodes.items():
            if influence.name not in joint_order:
                raise ExtractionError("Influence is not a joint of the bound skeleton", influence.name)
            influence_to_joint[index] = joint_order[influence.name]

        vertex_count = len(mesh.attributes.get('vertices', []))
        if skin.weights:
            vertex_count = max(vertex_count, max(skin.weights) + 1)

        per_vertex = []
        for vertex in range(vertex_count):
            influences = []
            for index, weight in skin.weights.get(vertex, {}).items():
                if weight <= NEGLIGIBLE_WEIGHT:
                    continue
                if index not in influence_to_joint:
                    raise ExtractionError(f"Weight on unconnected influence {index}", skin.name)
                influences.append((influence_to_joint[index], weight))
            per_vertex.append(influences)

        joint_indices, weights = flatten_influences(per_vertex)

        geom_bind_transform = as_matrix(skin.geom_matrix) if skin.geom_matrix else identity_matrix()

        binding = SkinBinding(
            skeleton_path=skeleton_path,
            geometry_path=mesh.full_path,
            joint_indices=joint_indices,
            weights=weights,
            geom_bind_transform=geom_bind_transform
        )
        return self._check_skin_binding(binding)

    def local_matrix(self, node: MayaNode) -> np.ndarray:
        """Local (parent-relative) matrix of a transform or joint

        Joints: S * RA * R * JO * IS * T, where IS undoes the parent joint's
        scale when segmentScaleCompensate is on. Transforms: S * R * T.
        """
        attrs = node.attributes
        rotate_order = ROTATE_ORDERS[int(attrs.get('ro', 0)) % len(ROTATE_ORDERS)]

        m = scale_matrix(self._vector_attr(node, 's', [1.0, 1.0, 1.0]))
        if node.is_joint():
            m = m @ euler_to_matrix(self._angles(node, 'ra'))
        m = m @ euler_to_matrix(self._angles(node, 'r'), rotate_order)
        if node.is_joint():
            m = m @ euler_to_matrix(self._angles(node, 'jo'))
            parent = node.parent
            if parent is not None and parent.is_joint() and attrs.get('ssc', True):
                parent_scale = self._vector_attr(parent, 's', [1.0, 1.0, 1.0])
                if all(abs(v) > 1e-12 for v in parent_scale):
                    m = m @ scale_matrix([1.0 / v for v in parent_scale])
        return m @ translate_matrix(self._vector_attr(node, 't', [0.0, 0.0, 0.0]))

    def world_matrix(self, node: MayaNode) -> np.ndarray:
        """World matrix of a node (local matrices composed up the parent chain)"""
        if node.name not in self._world_cache:
            m = self.local_matrix(node)
            parent = node.parent
            if parent is not None:
                m = m @ self.world_matrix(parent)
            self._world_cache[node.name] = m
        return self._world_cache[node.name]

    def _vector_attr(self, node: MayaNode, attr: str, default: List[float]) -> List[float]:
        value = node.attributes.get(attr)
        if isinstance(value, list) and len(value) >= 3:
            return [float(v) for v in value[:3]]
        return list(default)

    def _angles(self, node: MayaNode, attr: str) -> List[float]:
        """Rotation channel in radians, honoring the scene's angular unit"""
        values = self._vector_attr(node, attr, [0.0, 0.0, 0.0])
        if self.scene.angular_unit.startswith('deg'):
            return [float(np.radians(v)) for v in values]
        return values

    def _resolve_node(self, name: str) -> Optional[MayaNode]:
        """Find a node by name or DAG path ("|root|arm" or "/root/arm")"""
        short_name = re.split(r'[|/]', name.strip())[-1]
        return self.scene.get_node(short_name)

    def _collect_joints(self, root: MayaNode) -> List[MayaNode]:
        """Joints below (and including) root in depth-first pre-order"""
        ordered = []
        stack = [root]
        while stack:
            node = stack.pop()
            ordered.append(node)
            # Reversed so children come off the stack in file order
            stack.extend(reversed([child for child in node.children if child.is_joint()]))
        return ordered

    def _bind_matrix_for_joint(self, joint: MayaNode) -> np.ndarray:
        """Inverse bind matrix of a joint from the skinCluster it influences"""
        for skin in self.scene.skin_clusters.values():
            for index, name in skin.influences.items():
                if name == joint.name:
                    # Unwritten bindPreMatrix entries hold Maya's identity default
                    return as_matrix(skin.bind_pre_matrices.get(index, identity_matrix()))

        if self.strict_bind:
            raise ExtractionError("No skinCluster bindPreMatrix for joint", joint.name)

        self.log(f"Warning: Joint '{joint.name}' is not a skinCluster influence; "
                 f"using the inverse of its current world matrix as bind transform")
        try:
            return np.linalg.inv(self.world_matrix(joint))
        except np.linalg.LinAlgError:
            raise ExtractionError("Singular world matrix", joint.name)

    def _find_shape(self, node: MayaNode) -> Optional[MayaNode]:
        """First non-intermediate mesh shape under a transform"""
        for child in node.children:
            if child.node_type == 'mesh' and not child.attributes.get('io', False):
                return child
        return None

    def _find_skin_cluster(self, mesh_name: str) -> Optional[MayaSkinClusterData]:
        for skin in self.scene.skin_clusters.values():
            if mesh_name in skin.output_geometry:
                return skin
        return None

    def _common_root(self, influences: List[MayaNode]) -> Optional[MayaNode]:
        """Deepest node whose path is a prefix of every influence path"""
        paths = [influence.full_path.strip('/').split('/') for influence in influences]
        common = paths[0]
        for parts in paths[1:]:
            length = 0
            while length < min(len(common), len(parts)) and common[length] == parts[length]:
                length += 1
            common = common[:length]

        if not common:
            return None
        return self.scene.get_node(common[-1])

    def _skeleton_root(self, node: MayaNode) -> Optional[MayaNode]:
        """Topmost joint in the joint chain containing node, None if node is no joint"""
        if not node.is_joint():
            return None
        while node.parent is not None and node.parent.is_joint():
            node = node.parent
        return node
