"""Action that wraps the visible surface in a layer of new hexahedra."""

from __future__ import annotations

import copy

import numpy as np

from hexmesher import dag
from hexmesher.actions import extrude_utils
from hexmesher.commander import Action
from hexmesher.meshing.mesh_utils import HEX_FI_VIS, fi as face_index, fi_vids, fid_vids
from hexmesher.meshing.mesher import MesherState
from hexmesher.projection.smooth import smooth_internal


class Pad(Action):
    """Shrink the mesh inwards and fill the gap with one extruded hexahedron per visible face."""

    def __init__(
        self,
        length: float,
        smooth_iterations: int,
        smooth_surf_vert_weight: float,
        corner_shrink_factor: float,
    ) -> None:
        super().__init__()
        self.length = length
        self.smooth_iterations = smooth_iterations
        self.smooth_surf_vert_weight = smooth_surf_vert_weight
        self.corner_shrink_factor = corner_shrink_factor
        self._prepared = False
        self._old_state = MesherState()
        self._new_verts: list[np.ndarray] = []
        self._other_verts: list[np.ndarray] = []
        self._operations: list[tuple[dag.Element, dag.Extrude]] = []

    def _swap_verts(self) -> None:
        mesher = self.mesher()
        mesh = mesher.mesh()
        for vid, vert in enumerate(self._other_verts):
            old = mesh.vert(vid)
            mesher.move_vert(vid, vert)
            self._other_verts[vid] = old

    def _prepare(self) -> None:
        mesher = self.mesher()
        mesh = mesher.mesh()
        self._old_state = mesher.state()
        new_vids: dict[int, int] = {}
        temp = copy.deepcopy(mesh)
        surf_vids: list[int] = []
        for vid in range(temp.num_verts()):
            visible = False
            displacement = np.zeros(3)
            for adj_fid in mesh.adj_v2f(vid):
                adj_pid = mesh.face_is_visible(adj_fid)
                if adj_pid is None:
                    continue
                if not visible:
                    visible = True
                    surf_vids.append(vid)
                    new_vids[vid] = mesh.num_verts() + len(self._new_verts)
                    self._new_verts.append(mesh.vert(vid))
                displacement += mesh.poly_face_normal(adj_pid, adj_fid)
            if visible:
                adj_poly_count = sum(1 for pid in temp.adj_v2p(vid) if mesher.shown(pid))
                factor = (1.0 - self.corner_shrink_factor) + adj_poly_count * self.corner_shrink_factor
                norm = float(np.linalg.norm(displacement))
                if norm != 0.0:
                    displacement /= norm
                temp.set_vert(vid, temp.vert(vid) + displacement * -self.length / factor)
        for _ in range(self.smooth_iterations):
            temp.set_vector_verts(smooth_internal(temp, surf_vids, self.smooth_surf_vert_weight))
        self._other_verts = temp.vector_verts()
        for fid in range(mesh.num_faces()):
            pid = mesh.face_is_visible(fid)
            if pid is None:
                continue
            element = mesher.element(pid)
            fi = face_index(element.vids, fid_vids(mesh, fid))
            vids = fi_vids(element.vids, fi)
            extrude = extrude_utils.prepare([fi], HEX_FI_VIS[fi][0], False)
            extrude.handles += 1
            child = extrude.children.single()
            child.vids = vids + [new_vids[v] for v in vids]
            self._operations.append((element, extrude))

    def apply(self) -> None:
        if not self._prepared:
            self._prepared = True
            self._prepare()
        mesher = self.mesher()
        self._swap_verts()
        for parent, operation in self._operations:
            operation.parents.attach(parent)
        mesher.add([operation.children.single() for _, operation in self._operations], self._new_verts)
        mesher.update_mesh()

    def unapply(self) -> None:
        mesher = self.mesher()
        for _, operation in self._operations:
            operation.parents.detach_all(False)
        mesher.restore(self._old_state)
        self._swap_verts()
        mesher.update_mesh()

    def operations(self) -> list[tuple[dag.Element, dag.Extrude]]:
        return list(self._operations)