"""
Mesh Utilities
Conversion of the engine's point/quad geometry into PyVista datasets.
"""
import logging

import numpy as np
import numpy.typing as npt
import pyvista as pv

from screencompare.model.panel_geometry import SurfaceMesh

logger = logging.getLogger(__name__)

# Sphere tessellation of the viewer marker
MARKER_THETA_RESOLUTION: int = 32
MARKER_PHI_RESOLUTION: int = 16


class MeshUtils:
    @staticmethod
    def quads_to_faces(quads: npt.NDArray[np.int_]) -> npt.NDArray[np.int_]:
        """(M, 4) quad indices -> flat VTK face array [4, a, b, c, d, 4, ...]."""
        quads = np.asarray(quads, dtype=np.int_).reshape(-1, 4)
        sizes = np.full((quads.shape[0], 1), 4, dtype=np.int_)
        return np.hstack([sizes, quads]).ravel()

    @staticmethod
    def surface_to_polydata(mesh: SurfaceMesh) -> pv.PolyData:
        return pv.PolyData(np.asarray(mesh.points, dtype=np.float64), MeshUtils.quads_to_faces(mesh.quads))

    @staticmethod
    def merge_surfaces(meshes: list[SurfaceMesh]) -> pv.PolyData:
        """
        Merge several surfaces into one dataset (one actor per border
        instead of one per border piece).
        """
        if not meshes:
            return pv.PolyData()

        points_list: list[npt.NDArray[np.float64]] = []
        quads_list: list[npt.NDArray[np.int_]] = []
        offset = 0
        for mesh in meshes:
            points_list.append(mesh.points)
            quads_list.append(mesh.quads + offset)
            offset += mesh.n_points

        points = np.vstack(points_list)
        quads = np.vstack(quads_list)
        return pv.PolyData(points, MeshUtils.quads_to_faces(quads))

    @staticmethod
    def segments_to_polydata(segments: npt.NDArray[np.float64]) -> pv.PolyData:
        """(K, 2, 3) start/end points -> PolyData of K independent lines."""
        segments = np.asarray(segments, dtype=np.float64).reshape(-1, 2, 3)
        k = segments.shape[0]
        if k == 0:
            return pv.PolyData()
        points = segments.reshape(-1, 3)
        # line cell: [2, id_start, id_end]
        ids = np.arange(2 * k, dtype=np.int_).reshape(-1, 2)
        lines = np.hstack([np.full((k, 1), 2, dtype=np.int_), ids]).ravel()
        pd = pv.PolyData(points)
        pd.lines = lines
        return pd

    @staticmethod
    def marker_sphere(radius: float) -> pv.PolyData:
        return pv.Sphere(
            radius=radius,
            center=(0.0, 0.0, 0.0),
            theta_resolution=MARKER_THETA_RESOLUTION,
            phi_resolution=MARKER_PHI_RESOLUTION
        )
