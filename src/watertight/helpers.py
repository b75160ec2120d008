import numpy as np
import json


def load_config(config_file='config.json'):
    with open(config_file, 'r') as file:
        config = json.load(file)
    return config


def sphere_directions(n, seed=None, dtype=np.float64):
    """
    Generate n unit directions spread evenly over the sphere (Fibonacci
    lattice). If a seed is given, the lattice is randomly rotated so that
    repeated runs probe different directions.
    """
    i = np.arange(n) + 0.5
    polar = np.arccos(1 - 2 * i / n)
    azimuth = np.pi * (1 + 5 ** 0.5) * i

    directions = np.stack([np.cos(azimuth) * np.sin(polar),
                           np.sin(azimuth) * np.sin(polar),
                           np.cos(polar)], axis=1)

    if seed is not None:
        rng = np.random.default_rng(seed)
        # orthonormal basis from the QR factors of a random matrix
        q, r = np.linalg.qr(rng.standard_normal((3, 3)))
        q *= np.sign(np.diag(r))
        directions = directions @ q.T

    return directions.astype(dtype)


def mesh_triangles(mesh, dtype=np.float64):
    """
    Vertex triples of a trimesh mesh as an (n, 3, 3) array, one row per
    vertex in face order.
    """
    return np.asarray(mesh.vertices, dtype=dtype)[np.asarray(mesh.faces)]
