"""Projection of a hexahedral mesh's surface onto a target surface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

import numpy as np

from hexmesher.meshing.hexmesh import HexMesh
from hexmesher.projection.features import (
    EidsPath,
    Point,
    SurfaceExporter,
    Tweak,
    VidsPath,
    eids_to_vids_path,
    invert_and_normalize_distances,
    normalize_weights,
    set_point_feat_verts,
    set_source_verts,
    set_verts,
    to_surf_path_feats,
    to_surf_point_feats,
    vids_path_adj_vids,
)
from hexmesher.projection.fill import fill, fill_path
from hexmesher.projection.jacobian import JacobianAdvanceMode, hex_scaled_jacobian, jacobian_advance
from hexmesher.projection.match import SourceToTargetVid, match_path_eid, match_surface_fid
from hexmesher.projection.percentile import percentile_advance
from hexmesher.projection.smooth import smooth, smooth_internal, smooth_path

logger = logging.getLogger(__name__)

_NEWTON_STEPS = 32


class BaseWeightMode(Enum):
    """How the base weight of a match is computed."""

    DISTANCE = "distance"
    BARYCENTRIC_COORDS = "barycentric_coords"


class DisplaceMode(Enum):
    """How the weighted matches are turned into a new position."""

    VERT_AVG = "vert_avg"
    DIR_AVG = "dir_avg"
    NORM_DIR_AVG_AND_DIR_AVG = "norm_dir_avg_and_dir_avg"
    NORM_DIR_AVG_AND_DIR_NORM_AVG = "norm_dir_avg_and_dir_norm_avg"


class JacobianCheckMode(Enum):
    """Which vertices are pulled back to avoid inverted hexahedra."""

    NONE = "none"
    SURFACE = "surface"
    ALL = "all"


@dataclass
class Options:
    """Parameters of a projection."""

    iterations: int = 5
    base_weight_mode: BaseWeightMode = BaseWeightMode.DISTANCE
    base_weight_tweak: Tweak = Tweak(0.0, 1.0)
    normal_dot_tweak: Tweak = Tweak(-1.0, 0.0)
    distance_weight: float = 0.0
    distance_weight_power: float = 1.0
    displace_mode: DisplaceMode = DisplaceMode.DIR_AVG
    unset_verts_dist_weight_tweak: Tweak = Tweak(0.0, 1.0)
    smooth_surface_iterations: int = 1
    advance_percentile: float = 0.5
    smooth_internal_iterations: int = 1
    smooth_internal_done_weight: float = 1.0
    jacobian_check_mode: JacobianCheckMode = JacobianCheckMode.ALL
    jacobian_advance_mode: JacobianAdvanceMode = JacobianAdvanceMode.LENGTH
    jacobian_advance_max_tests: int = 8
    jacobian_advance_stop_threshold: float = 0.05
    vertex_mask: Sequence[bool] | None = None


class _Accumulator:
    """Weighted sums of target positions and displacement directions."""

    def __init__(self, source_vert: np.ndarray) -> None:
        self.source_vert = source_vert
        self.weight_sum = 0.0
        self.target_sum = np.zeros(3)
        self.dir_sum = np.zeros(3)
        self.norm_dir_sum = np.zeros(3)
        self.dir_length_sum = 0.0

    def add(self, target_vert: np.ndarray, weight: float) -> None:
        direction = target_vert - self.source_vert
        length = float(np.linalg.norm(direction))
        self.weight_sum += weight
        self.target_sum += target_vert * weight
        self.dir_sum += direction * weight
        if length != 0.0:
            self.norm_dir_sum += direction / length * weight
        self.dir_length_sum += length * weight

    def result(self, mode: DisplaceMode) -> np.ndarray | None:
        w = self.weight_sum
        if w == 0:
            return None
        if mode is DisplaceMode.VERT_AVG:
            return self.target_sum / w
        if mode is DisplaceMode.DIR_AVG:
            return self.source_vert + self.dir_sum / w
        if mode is DisplaceMode.NORM_DIR_AVG_AND_DIR_AVG:
            return self.source_vert + self.norm_dir_sum * (float(np.linalg.norm(self.dir_sum / w)) / w)
        if mode is DisplaceMode.NORM_DIR_AVG_AND_DIR_NORM_AVG:
            return self.source_vert + self.norm_dir_sum * self.dir_length_sum / w / w
        raise ValueError(f"unknown displace mode {mode!r}")


def _quad_barycentric(quad: Sequence, point: np.ndarray) -> list[float]:
    """Bilinear weights of ``point`` with respect to the four corners of ``quad``."""
    p0, p1, p2, p3 = (np.asarray(q, dtype=float) for q in quad)
    u = v = 0.5
    for _ in range(_NEWTON_STEPS):
        f = p0 * (1 - u) * (1 - v) + p1 * u * (1 - v) + p2 * u * v + p3 * (1 - u) * v - point
        du = (p1 - p0) * (1 - v) + (p2 - p3) * v
        dv = (p3 - p0) * (1 - u) + (p2 - p1) * u
        step, *_ = np.linalg.lstsq(np.column_stack([du, dv]), -f, rcond=None)
        u += float(step[0])
        v += float(step[1])
        if float(np.abs(step).max()) < 1e-12:
            break
    return [(1 - u) * (1 - v), u * (1 - v), u * v, (1 - u) * v]


def surface_vert_base_weights(
    source: Any,
    vid: int,
    matches: Sequence[Sequence[SourceToTargetVid]],
    mode: BaseWeightMode,
) -> list[float]:
    """Base weight of every match on the polygons around ``vid``, in polygon order."""
    adj_fids = source.adj_v2p(vid)
    if mode is BaseWeightMode.DISTANCE:
        source_vert = np.asarray(source.vert(vid), dtype=float)
        return invert_and_normalize_distances(
            float(np.linalg.norm(source_vert - m.pos)) for fid in adj_fids for m in matches[fid]
        )
    if mode is BaseWeightMode.BARYCENTRIC_COORDS:
        weights = []
        for fid in adj_fids:
            offset = source.poly_vert_offset(fid, vid)
            quad = source.poly_verts(fid)
            for m in matches[fid]:
                weights.append(_quad_barycentric(quad, np.asarray(m.pos, dtype=float))[offset])
        return normalize_weights(weights)
    raise ValueError(f"unknown base weight mode {mode!r}")


def _surface_vert_normalized_dists(
    source: Any, target: Any, vid: int, matches: Sequence[Sequence[SourceToTargetVid]]
) -> list[float]:
    source_vert = np.asarray(source.vert(vid), dtype=float)
    return normalize_weights(
        float(np.linalg.norm(np.asarray(target.vert(m.target_vid), dtype=float) - source_vert))
        for fid in source.adj_v2p(vid)
        for m in matches[fid]
    )


def project_surface_vert(
    source: Any,
    target: Any,
    vid: int,
    matches: Sequence[Sequence[SourceToTargetVid]],
    options: Options,
) -> np.ndarray | None:
    """New position of a surface vertex, or None when no match contributes."""
    source_vert = np.asarray(source.vert(vid), dtype=float)
    base_weights = surface_vert_base_weights(source, vid, matches, options.base_weight_mode)
    dists = _surface_vert_normalized_dists(source, target, vid, matches)
    source_normal = np.asarray(source.vert_normal(vid), dtype=float)
    acc = _Accumulator(source_vert)
    base_it = iter(base_weights)
    dist_it = iter(dists)
    for fid in source.adj_v2p(vid):
        for m in matches[fid]:
            base_weight = next(base_it)
            if options.base_weight_tweak.should_skip(base_weight):
                continue
            target_normal = np.asarray(target.vert_normal(m.target_vid), dtype=float)
            normal_dot = float(source_normal @ target_normal)
            if options.normal_dot_tweak.should_skip(normal_dot):
                continue
            dist = next(dist_it)
            distance_weight = dist ** options.distance_weight_power * options.distance_weight + 1.0
            weight = (
                options.base_weight_tweak.apply(base_weight)
                * options.normal_dot_tweak.apply(normal_dot)
                * distance_weight
            )
            acc.add(np.asarray(target.vert(m.target_vid), dtype=float), weight)
    return acc.result(options.displace_mode)


def project_surface(source: Any, target: Any, options: Options) -> list[np.ndarray]:
    """New positions of every source surface vertex."""
    matches = match_surface_fid(source, target)
    projected = [
        project_surface_vert(source, target, vid, matches, options) for vid in range(source.num_verts())
    ]
    return fill(source, projected, options.unset_verts_dist_weight_tweak)


def path_vert_base_weights(
    source: Any,
    vid: int,
    adj_eids: Sequence[int],
    matches: Mapping[int, Sequence[SourceToTargetVid]],
    mode: BaseWeightMode,
) -> list[float]:
    """Base weight of every match on the path edges around ``vid``."""
    vert = np.asarray(source.vert(vid), dtype=float)
    if mode is BaseWeightMode.DISTANCE:
        return invert_and_normalize_distances(
            float(np.linalg.norm(vert - m.pos)) for eid in adj_eids for m in matches[eid]
        )
    if mode is BaseWeightMode.BARYCENTRIC_COORDS:
        weights = []
        for eid in adj_eids:
            other = np.asarray(source.vert(source.vert_opposite_to(eid, vid)), dtype=float)
            edge_dir = other - vert
            for m in matches[eid]:
                progress = float((np.asarray(m.pos, dtype=float) - vert) @ edge_dir) / float(edge_dir @ edge_dir)
                weights.append(1.0 - progress)
        return normalize_weights(weights)
    raise ValueError(f"unknown base weight mode {mode!r}")


def project_path_vert(
    source: Any,
    target: Any,
    vid: int,
    adj_eids: Sequence[int],
    matches: Mapping[int, Sequence[SourceToTargetVid]],
    options: Options,
) -> np.ndarray | None:
    """New position of a path vertex, or None when no match contributes."""
    acc = _Accumulator(np.asarray(source.vert(vid), dtype=float))
    base_it = iter(path_vert_base_weights(source, vid, adj_eids, matches, options.base_weight_mode))
    for eid in adj_eids:
        for m in matches[eid]:
            base_weight = next(base_it)
            if options.base_weight_tweak.should_skip(base_weight):
                continue
            acc.add(np.asarray(target.vert(m.target_vid), dtype=float), options.base_weight_tweak.apply(base_weight))
    return acc.result(options.displace_mode)


def project_path(
    source: Any,
    target: Any,
    source_eids_path: Sequence[int],
    source_vids_path: Sequence[int],
    target_vids_path: Sequence[int],
    options: Options,
) -> list[np.ndarray]:
    """New positions of the source path vertices, one per path position."""
    matches = match_path_eid(source, target, source_eids_path, target_vids_path)
    projected = []
    for i, vid in enumerate(source_vids_path):
        adj_eids = [source.edge_id(vid, adj) for adj in vids_path_adj_vids(source_vids_path, i)]
        projected.append(project_path_vert(source, target, vid, adj_eids, matches, options))
    return fill_path(source, projected, options.unset_verts_dist_weight_tweak, source_vids_path)


def project(
    source: HexMesh,
    target: Any,
    point_feats: Sequence[Point],
    path_feats: Sequence[EidsPath],
    options: Options,
) -> list[np.ndarray]:
    """New positions of every vertex of ``source`` after projecting its surface onto ``target``."""
    exporter = SurfaceExporter(source)
    surf, vol = exporter.surf, exporter.vol
    on_surf_vol_vids = exporter.on_surf_vol_vids()
    surf_points = to_surf_point_feats(point_feats, exporter)
    surf_eids_paths = to_surf_path_feats(path_feats, exporter)
    surf_vids_paths = [
        VidsPath(eids_to_vids_path(surf, p.source_eids), eids_to_vids_path(target, p.target_eids))
        for p in surf_eids_paths
    ]
    target_verts = target.vector_verts()
    path_temp: list[list[np.ndarray]] = [[] for _ in surf_eids_paths]

    def pin_points() -> None:
        surf.set_vector_verts(set_point_feat_verts(surf.vector_verts(), target_verts, surf_points))

    def set_paths() -> None:
        surf.set_vector_verts(set_source_verts(path_temp, surf.vector_verts(), surf_vids_paths))

    for i in range(options.iterations):
        last = i + 1 == options.iterations
        if i > 0 and options.normal_dot_tweak.power != 0.0:
            surf.update_normals()
        old_vol = vol.vector_verts()
        old_surf = surf.vector_verts()
        pin_points()
        for k, (eids_path, vids_path) in enumerate(zip(surf_eids_paths, surf_vids_paths)):
            path_temp[k] = project_path(
                surf, target, eids_path.source_eids, vids_path.source_vids, vids_path.target_vids, options
            )
        set_paths()
        pin_points()
        surf.set_vector_verts(project_surface(surf, target, options))
        set_paths()
        pin_points()
        if not last:
            for _ in range(options.smooth_surface_iterations):
                surf.set_vector_verts(smooth(surf))
                set_paths()
                pin_points()
                for vids_path in surf_vids_paths:
                    smoothed = smooth_path(surf, vids_path.source_vids)
                    surf.set_vector_verts(set_verts(smoothed, surf.vector_verts(), vids_path.source_vids))
                pin_points()
        if options.advance_percentile < 1.0 and not last:
            surf.set_vector_verts(percentile_advance(old_surf, surf.vector_verts(), options.advance_percentile))
        exporter.apply_surf_to_vol()
        for _ in range(options.smooth_internal_iterations):
            vol.set_vector_verts(smooth_internal(vol, on_surf_vol_vids, options.smooth_internal_done_weight))
        exporter.apply_surf_to_vol()
        if options.jacobian_check_mode is JacobianCheckMode.SURFACE:
            jacobian_advance(
                vol,
                old_surf,
                options.jacobian_advance_mode,
                options.jacobian_advance_max_tests,
                options.jacobian_advance_stop_threshold,
                on_surf_vol_vids,
            )
        elif options.jacobian_check_mode is JacobianCheckMode.ALL:
            jacobian_advance(
                vol,
                old_vol,
                options.jacobian_advance_mode,
                options.jacobian_advance_max_tests,
                options.jacobian_advance_stop_threshold,
            )
    if logger.isEnabledFor(logging.DEBUG):
        inverted = sum(1 for pid in range(vol.num_polys()) if hex_scaled_jacobian(vol.poly_verts(pid)) < 0.0)
        logger.debug("%d polys with negative scaled jacobian", inverted)
    return vol.vector_verts()