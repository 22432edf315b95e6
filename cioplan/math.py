import math

import numpy as np


# epsilon for testing whether a number is close to zero
_EPS = np.finfo(float).eps * 4.0

# Central finite-difference stencils shared by the smoothness model and the
# rigid body dynamics. Each entry is (coefficients, derivative order).
VELOCITY_RULE = (np.array([-0.5, 0.0, 0.5]), 1)
ACCELERATION_RULE = (np.array([1.0, -2.0, 1.0]), 2)
JERK_RULE = (np.array([-0.5, 1.0, 0.0, -1.0, 0.5]), 3)
DIFF_RULES = (VELOCITY_RULE, ACCELERATION_RULE, JERK_RULE)


def normalize_vector(v, ord=2):
    """Return normalized vector

    Parameters
    ----------
    v : list or numpy.ndarray
        vector
    ord : int (optional)
        ord of np.linalg.norm

    Returns
    -------
    v : numpy.ndarray
        normalized vector

    Examples
    --------
    >>> from cioplan.math import normalize_vector
    >>> normalize_vector([1, 1, 1])
    array([0.57735027, 0.57735027, 0.57735027])
    >>> normalize_vector([0, 0, 0])
    array([0., 0., 0.])
    """
    v = np.array(v, dtype=np.float64)
    norm = np.linalg.norm(v, ord=ord)
    if norm == 0:
        return v
    return v / norm


def outer_product_matrix(v):
    """Returns the skew-symmetric matrix of v, so that ``M @ b == v x b``.

    Examples
    --------
    >>> from cioplan.math import outer_product_matrix
    >>> outer_product_matrix([1, 2, 3])
    array([[ 0, -3,  2],
           [ 3,  0, -1],
           [-2,  1,  0]])
    """
    return np.array([[0, -v[2], v[1]],
                     [v[2], 0, -v[0]],
                     [-v[1], v[0], 0]])


def rotation_matrix(theta, axis):
    """Return the rotation matrix about ``axis`` by ``theta`` radians.

    Parameters
    ----------
    theta : float
        radian
    axis : list or numpy.ndarray
        rotation axis. It does not need to be normalized.

    Returns
    -------
    rot : numpy.ndarray
        3x3 rotation matrix (Rodrigues' formula).
    """
    axis = normalize_vector(axis)
    K = outer_product_matrix(axis)
    return np.eye(3) + np.sin(theta) * K \
        + (1.0 - np.cos(theta)) * np.matmul(K, K)


def matrix2quaternion(m):
    """Returns quaternion of given rotation matrix.

    Parameters
    ----------
    m : list or numpy.ndarray
        3x3 rotation matrix

    Returns
    -------
    quaternion : numpy.ndarray
        quaternion [w, x, y, z] order

    Examples
    --------
    >>> import numpy as np
    >>> from cioplan.math import matrix2quaternion
    >>> matrix2quaternion(np.eye(3))
    array([1., 0., 0., 0.])
    """
    m = np.array(m, dtype=np.float64)
    tr = m[0, 0] + m[1, 1] + m[2, 2]
    if tr > 0:
        S = math.sqrt(tr + 1.0) * 2
        qw = 0.25 * S
        qx = (m[2, 1] - m[1, 2]) / S
        qy = (m[0, 2] - m[2, 0]) / S
        qz = (m[1, 0] - m[0, 1]) / S
    elif (m[0, 0] > m[1, 1]) and (m[0, 0] > m[2, 2]):
        S = math.sqrt(1. + m[0, 0] - m[1, 1] - m[2, 2]) * 2
        qw = (m[2, 1] - m[1, 2]) / S
        qx = 0.25 * S
        qy = (m[0, 1] + m[1, 0]) / S
        qz = (m[0, 2] + m[2, 0]) / S
    elif m[1, 1] > m[2, 2]:
        S = math.sqrt(1. + m[1, 1] - m[0, 0] - m[2, 2]) * 2
        qw = (m[0, 2] - m[2, 0]) / S
        qx = (m[0, 1] + m[1, 0]) / S
        qy = 0.25 * S
        qz = (m[1, 2] + m[2, 1]) / S
    else:
        S = math.sqrt(1. + m[2, 2] - m[0, 0] - m[1, 1]) * 2
        qw = (m[1, 0] - m[0, 1]) / S
        qx = (m[0, 2] + m[2, 0]) / S
        qy = (m[1, 2] + m[2, 1]) / S
        qz = 0.25 * S
    return np.array([qw, qx, qy, qz])


def matrix_log(m):
    """Returns matrix log of given rotation matrix, it returns [-pi, pi]

    The result is the rotation vector (axis times angle).

    Examples
    --------
    >>> import numpy as np
    >>> from cioplan.math import matrix_log
    >>> matrix_log(np.eye(3))
    array([0., 0., 0.])
    """
    q = matrix2quaternion(m)
    q_w = q[0]
    q_xyz = q[1:]
    theta = 2.0 * np.arctan2(np.linalg.norm(q_xyz), q_w)
    if theta > np.pi:
        theta = theta - 2.0 * np.pi
    elif theta < - np.pi:
        theta = theta + 2.0 * np.pi
    return theta * normalize_vector(q_xyz)


def make_transform(rotation=None, translation=None):
    """Build a 4x4 homogeneous transform."""
    T = np.eye(4)
    if rotation is not None:
        T[:3, :3] = rotation
    if translation is not None:
        T[:3, 3] = translation
    return T


def transform_point(T, p):
    return T[:3, :3].dot(p) + T[:3, 3]


def central_difference(values, start, end, dt, rule=VELOCITY_RULE, out=None):
    """Differentiate a sampled sequence with a central stencil.

    Derivatives are written for indices ``start..end`` (inclusive). An index
    whose stencil would reach outside ``values`` gets a zero derivative, and
    every index outside ``[start, end]`` is zeroed as well.

    Parameters
    ----------
    values : numpy.ndarray
        Samples with time along the first axis, shape (n_points, ...).
    start : int
        First index to differentiate.
    end : int
        Last index to differentiate (inclusive).
    dt : float
        Sample spacing.
    rule : tuple(numpy.ndarray, int)
        Stencil coefficients and derivative order, e.g. ``VELOCITY_RULE``.
    out : numpy.ndarray, optional
        Destination with the same shape as ``values``.

    Returns
    -------
    out : numpy.ndarray
        Derivative samples.

    Examples
    --------
    >>> import numpy as np
    >>> from cioplan.math import ACCELERATION_RULE, central_difference
    >>> t = np.arange(5) * 0.5
    >>> central_difference(t ** 2, 1, 3, 0.5, ACCELERATION_RULE)
    array([0., 2., 2., 2., 0.])
    """
    coefficients, order = rule
    values = np.asarray(values, dtype=np.float64)
    if out is None:
        out = np.zeros_like(values)
    else:
        out[...] = 0.0
    n_points = len(values)
    half = len(coefficients) // 2
    scale = 1.0 / dt ** order
    for i in range(max(start, 0), min(end, n_points - 1) + 1):
        if i - half < 0 or i + half >= n_points:
            continue
        acc = np.zeros(values.shape[1:])
        for k, c in enumerate(coefficients):
            if c != 0.0:
                acc = acc + c * values[i - half + k]
        out[i] = acc * scale
    return out


def difference_matrix(n_points, rule, dt):
    """Return the matrix applying ``rule`` wherever the stencil fits.

    The result has ``n_points - len(stencil) + 1`` rows and ``n_points``
    columns, so ``D @ x`` is the derivative of ``x`` at every interior
    sample with a complete stencil.
    """
    coefficients, order = rule
    width = len(coefficients)
    n_rows = max(n_points - width + 1, 0)
    D = np.zeros((n_rows, n_points))
    for r in range(n_rows):
        D[r, r:r + width] = coefficients
    return D / dt ** order
