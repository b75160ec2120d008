###############################################################################
# Audit the intersection test for leaks: cast rays from the centre of a      #
# closed icosphere and make sure every one of them hits the surface.          #
#                                                                             #
#   python -m watertight.check_watertight [config.json]                       #
###############################################################################

import sys
import time

import numpy as np
import trimesh
from numba import njit

from watertight.helpers import load_config, mesh_triangles, sphere_directions
from watertight.intersects import RayData
from watertight.kernels import ray_intersects_tri, ray_precompute


@njit(cache=True)
def count_forward_hits(origin, direction, triangles):
    kx, ky, kz, sx, sy, sz = ray_precompute(direction)
    out = np.empty(4, dtype=np.float64)
    hits = 0
    for j in range(triangles.shape[0]):
        if ray_intersects_tri(origin, kx, ky, kz, sx, sy, sz, triangles[j], out):
            if out[0] > 0:
                hits += 1
    return hits


def count_forward_hits_host(origin, direction, triangles):
    ray = RayData(origin, direction)
    hits = 0
    for a, b, c in triangles:
        hit = ray.intersect(a, b, c)
        if hit is not None and hit.t > 0:
            hits += 1
    return hits


def trace_sphere(config):
    """
    Returns the forward hit count of every ray. Rays go through random
    directions, through every vertex and through every edge midpoint.
    """
    dtype = np.dtype(config.get("dtype", "float64"))
    sphere = trimesh.creation.icosphere(subdivisions=config["subdivisions"],
                                        radius=config["radius"])
    triangles = mesh_triangles(sphere, dtype)
    center = np.zeros(3, dtype=dtype)

    vertices = np.asarray(sphere.vertices, dtype=dtype)
    edges = np.asarray(sphere.edges_unique)
    midpoints = 0.5 * (vertices[edges[:, 0]] + vertices[edges[:, 1]])
    directions = np.concatenate([
        sphere_directions(config["n_rays"], seed=config.get("seed"), dtype=dtype),
        vertices,
        midpoints.astype(dtype),
    ])

    if config.get("use_numba", True):
        count = count_forward_hits
    else:
        count = count_forward_hits_host

    print(f"Tracing {len(directions)} rays against {len(triangles)} triangles")
    hits = np.array([count(center, d, triangles) for d in directions])
    return directions, hits


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config = load_config(argv[0] if argv else 'config.json')

    t0 = time.time()
    directions, hits = trace_sphere(config)
    t1 = time.time()
    print(f'Timings :: tracing: {t1-t0} (s)')

    leaks = np.flatnonzero(hits == 0)
    print(f"Rays with a single hit: {np.sum(hits == 1)}")
    print(f"Rays with several hits (shared edges/vertices): {np.sum(hits > 1)}")
    if len(leaks):
        print(f"Leaking rays: {len(leaks)}")
        for i in leaks:
            print(f"Direction: {directions[i]}")
        return 1

    print("The test is watertight for this mesh.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
