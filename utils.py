import numpy as np


def vec(list):
    """Handy shorthand to make a double-precision 3D vector (or color)."""
    return np.array(list, dtype=np.float64)

def normalize(v):
    """Return a unit vector in the direction of the vector v."""
    return v / np.linalg.norm(v)

def length(v):
    """Return the Euclidean length of the vector v."""
    return np.linalg.norm(v)


def read_obj(f):
    """Read a file in the Wavefront OBJ file format.

    Argument is an open file.
    Returns a tuple of NumPy arrays: (indices, positions).
    Only vertex positions and faces are used; normals and texture
    coordinates are skipped.
    """

    # position and face data in the order they appear in the file
    f_posns = []
    f_faces = []

    for words in (line.split() for line in f.readlines()):
        if not words:
            continue
        if words[0] == 'v':
            f_posns.append([float(s) for s in words[1:4]])
        elif words[0] == 'f':
            # "7/3/2" style entries: the position index comes first
            face = [int(w.split('/')[0]) for w in words[1:]]
            # fan-triangulate quads and larger polygons
            for k in range(1, len(face) - 1):
                f_faces.append([face[0], face[k], face[k + 1]])

    posns = np.array(f_posns, dtype=np.float64).reshape(-1, 3)
    inds = np.array(f_faces, dtype=np.int32).reshape(-1, 3)

    # negative indices count back from the end of the vertex list
    inds = np.where(inds < 0, inds + len(posns), inds - 1)
    return inds, posns


def read_obj_triangles(f):
    """Read a file in the Wavefront OBJ file format and convert to separate triangles.

    Argument is an open file.
    Returns an array of shape (n, 3, 3) that has the 3D vertex positions of n triangles.
    """

    (i, p) = read_obj(f)
    return p[i,:]
