"""Shared fixtures: synthetic rigs and a matching Maya ASCII / USD rig pair"""

import numpy as np
import pytest

from core import Skeleton, SkinBinding


def translation(x, y=0.0, z=0.0):
    """Row-vector translation matrix (translation in the last row)"""
    m = np.identity(4)
    m[3, :3] = [x, y, z]
    return m


def make_skeleton(names=("root", "arm", "hand"), parents=(-1, 0, 1),
                  binds=None, rests=None, path="/Rig/Skel"):
    count = len(names)
    if binds is None:
        binds = [translation(-float(i)) for i in range(count)]
    if rests is None:
        rests = [translation(float(i > 0)) for i in range(count)]
    return Skeleton(
        joint_names=list(names),
        parent_indices=list(parents),
        bind_transforms=binds,
        rest_transforms=rests,
        path=path
    )


def make_skin(indices=(0, 0, 1, 2), weights=(1.0, 0.5, 0.5, 1.0), geom=None,
              skeleton_path="/Rig/Skel", geometry_path="/Rig/body"):
    return SkinBinding(
        skeleton_path=skeleton_path,
        geometry_path=geometry_path,
        joint_indices=list(indices),
        weights=list(weights),
        geom_bind_transform=np.identity(4) if geom is None else geom
    )


@pytest.fixture
def skeleton():
    return make_skeleton()


@pytest.fixture
def skin():
    return make_skin()


# Three joints along +X, three vertices: one bound to root, one split
# between root and arm, one bound to hand.
SAMPLE_MA = """//Maya ASCII 2024 scene
//Name: rig.ma
requires maya "2024";
currentUnit -l centimeter -a degree -t film;
createNode transform -n "body";
createNode mesh -n "bodyShape" -p "body";
\tsetAttr -k off ".v";
\tsetAttr -s 3 ".vt[0:2]"  0 0 0 1 0 0
\t\t 2 0 0;
createNode mesh -n "bodyShapeOrig" -p "body";
\tsetAttr -k off ".v";
\tsetAttr ".io" yes;
createNode joint -n "root";
\tsetAttr ".t" -type "double3" 0 0 0 ;
createNode joint -n "arm" -p "root";
\tsetAttr ".t" -type "double3" 1 0 0 ;
createNode joint -n "hand" -p "arm";
\tsetAttr ".t" -type "double3" 1 0 0 ;
createNode skinCluster -n "skinCluster1";
\tsetAttr -s 3 ".wl";
\tsetAttr ".wl[0].w[0]"  1;
\tsetAttr -s 2 ".wl[1].w[0:1]"  0.5 0.5;
\tsetAttr ".wl[2].w[2]"  1;
\tsetAttr -s 3 ".pm";
\tsetAttr ".pm[0]" -type "matrix" 1 0 0 0 0 1 0 0 0 0 1 0 0 0 0 1;
\tsetAttr ".pm[1]" -type "matrix" 1 0 0 0 0 1 0 0 0 0 1 0 -1 0 0 1;
\tsetAttr ".pm[2]" -type "matrix" 1 0 0 0 0 1 0 0 0 0 1 0
\t\t -2 0 0 1;
\tsetAttr ".gm" -type "matrix" 1 0 0 0 0 1 0 0 0 0 1 0 0 0 0 1;
\tsetAttr -s 3 ".ma";
connectAttr "root.wm" "skinCluster1.ma[0]";
connectAttr "arm.wm" "skinCluster1.ma[1]";
connectAttr "hand.wm" "skinCluster1.ma[2]";
connectAttr "bodyShapeOrig.w" "skinCluster1.ip[0].ig";
connectAttr "skinCluster1.og[0]" "bodyShape.i";
// End of rig.ma
"""

SAMPLE_USDA = """#usda 1.0
(
    defaultPrim = "Rig"
    upAxis = "Y"
)

def SkelRoot "Rig"
{
    def Skeleton "Skel"
    {
        uniform token[] joints = ["root", "root/arm", "root/arm/hand"]
        uniform matrix4d[] bindTransforms = [
            ( (1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (0, 0, 0, 1) ),
            ( (1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (1, 0, 0, 1) ),
            ( (1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (2, 0, 0, 1) )
        ]
        uniform matrix4d[] restTransforms = [
            ( (1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (0, 0, 0, 1) ),
            ( (1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (1, 0, 0, 1) ),
            ( (1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (1, 0, 0, 1) )
        ]
    }

    def Mesh "body" (
        prepend apiSchemas = ["SkelBindingAPI"]
    )
    {
        int[] faceVertexCounts = [3]
        int[] faceVertexIndices = [0, 1, 2]
        point3f[] points = [(0, 0, 0), (1, 0, 0), (2, 0, 0)]
        int[] primvars:skel:jointIndices = [0, 0, 0, 1, 2, 0] (
            elementSize = 2
            interpolation = "vertex"
        )
        float[] primvars:skel:jointWeights = [1, 0, 0.5, 0.5, 1, 0] (
            elementSize = 2
            interpolation = "vertex"
        )
        matrix4d primvars:skel:geomBindTransform = ( (1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (0, 0, 0, 1) )
        rel skel:skeleton = </Rig/Skel>
    }
}
"""


@pytest.fixture
def ma_file(tmp_path):
    path = tmp_path / "rig.ma"
    path.write_text(SAMPLE_MA)
    return path


@pytest.fixture
def usda_file(tmp_path):
    path = tmp_path / "rig.usda"
    path.write_text(SAMPLE_USDA)
    return path
