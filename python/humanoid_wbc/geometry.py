"""
@file geometry.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import numpy as np
from scipy.spatial.transform import Rotation as R

def positionPD(des_pos, cur_pos,
               des_vel=np.zeros(3), cur_vel=np.zeros(3),
               des_acc=np.zeros(3),
               kp=np.array([100, 100, 100]), kd=np.array([0.0, 0.0, 0.0])):
    return kp*(des_pos-cur_pos) + kd*(des_vel-cur_vel) + des_acc

def rotation_error(des_rot, cur_rot):
    """Rotation vector taking cur_rot to des_rot, expressed in the world frame."""
    return cur_rot.dot(R.from_matrix(cur_rot.T.dot(des_rot)).as_rotvec())

def rotationPD(des_rot, cur_rot,
               des_omega=np.zeros(3), cur_omega=np.zeros(3),
               des_omega_dot=np.zeros(3),
               kp=np.array([100, 100, 100]), kd=np.array([0.0, 0.0, 0.0])):
    return (kp * rotation_error(des_rot, cur_rot) +
        kd * (des_omega - cur_omega) + des_omega_dot)

def normalize(vec):
    return vec / np.linalg.norm(vec)

def vec_to_so3(omg):
    """Skew matrix of a 3-vector: vec_to_so3(a).dot(b) == np.cross(a, b)."""
    return np.array([[0,      -omg[2],  omg[1]],
                     [omg[2],       0, -omg[0]],
                     [-omg[1], omg[0],       0]])

def tangent_basis(normal):
    """Two unit vectors that complete a unit normal to a right-handed frame.

    Args:
        normal (ndarray): A unit 3-vector.
    Returns:
        (t1, t2) with t1 x t2 == normal.
    """
    # pick the world axis least aligned with the normal
    axis = np.zeros(3)
    axis[np.argmin(np.abs(normal))] = 1.
    t1 = normalize(np.cross(normal, axis))
    t2 = np.cross(normal, t1)
    return t1, t2

def friction_cone_basis(normal, mu, num_basis):
    """Edges of a discretized friction cone. Any non-negative combination of
    the columns is a force inside the (inner) pyramid approximation of the
    Coulomb cone.

    Args:
        normal (ndarray): Contact normal pointing into the robot.
        mu (float): Friction coefficient.
        num_basis (int): Number of edges. A single edge is the pure normal
            direction (frictionless contact).
    Returns:
        A 3 x num_basis matrix of unit column vectors.
    """
    normal = normalize(np.asarray(normal, dtype=float))
    if num_basis == 1:
        return normal.reshape(3, 1)
    t1, t2 = tangent_basis(normal)
    basis = np.zeros((3, num_basis))
    for k in range(num_basis):
        theta = 2. * np.pi * k / num_basis
        edge = normal + mu * (np.cos(theta) * t1 + np.sin(theta) * t2)
        basis[:, k] = normalize(edge)
    return basis

def wrench_matrix(points, reference_point):
    """Map stacked point forces to the equivalent wrench [force; torque]
    about reference_point.

    Args:
        points (list): Contact points in the world frame.
        reference_point (ndarray): Point the torque is taken about.
    Returns:
        A 6 x 3*len(points) matrix.
    """
    mat = np.zeros((6, 3 * len(points)))
    for j, point in enumerate(points):
        mat[0:3, 3*j:3*j+3] = np.identity(3)
        mat[3:6, 3*j:3*j+3] = vec_to_so3(np.asarray(point) - reference_point)
    return mat
