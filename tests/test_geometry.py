import numpy as np
import pytest

from humanoid_wbc.geometry import (friction_cone_basis, positionPD, rotation_error,
                                   rotationPD, tangent_basis, vec_to_so3, wrench_matrix)


class TestSkew:
    def test_cross_product(self):
        a, b = np.array([1., 2., 3.]), np.array([-0.5, 0.3, 2.])
        assert np.allclose(vec_to_so3(a).dot(b), np.cross(a, b))

    def test_antisymmetric(self):
        S = vec_to_so3(np.array([0.1, -0.4, 0.7]))
        assert np.allclose(S, -S.T)


class TestPD:
    def test_position_pd(self):
        acc = positionPD(np.array([1., 0., 0.]), np.zeros(3),
                         cur_vel=np.array([0., 1., 0.]),
                         kp=np.array([10., 10., 10.]), kd=np.array([2., 2., 2.]))
        assert np.allclose(acc, [10., -2., 0.])

    def test_rotation_error_world_frame(self):
        # a yaw offset seen from a pitched body is still about world z
        pitch = np.array([[np.cos(0.4), 0., np.sin(0.4)],
                          [0., 1., 0.],
                          [-np.sin(0.4), 0., np.cos(0.4)]])
        yaw = np.array([[np.cos(0.2), -np.sin(0.2), 0.],
                        [np.sin(0.2), np.cos(0.2), 0.],
                        [0., 0., 1.]])
        assert np.allclose(rotation_error(yaw.dot(pitch), pitch), [0., 0., 0.2])

    def test_rotation_pd_at_target(self):
        acc = rotationPD(np.identity(3), np.identity(3))
        assert np.allclose(acc, np.zeros(3))

    def test_rotation_pd_direction(self):
        theta = 0.1
        des_rot = np.array([[np.cos(theta), -np.sin(theta), 0.],
                            [np.sin(theta), np.cos(theta), 0.],
                            [0., 0., 1.]])
        acc = rotationPD(des_rot, np.identity(3), kp=np.ones(3))
        assert np.allclose(acc, [0., 0., theta])


class TestFrictionCone:
    @pytest.mark.parametrize("normal", [[0., 0., 1.], [1., 0., 0.], [0.3, -0.2, 0.9]])
    def test_tangent_basis(self, normal):
        normal = np.array(normal) / np.linalg.norm(normal)
        t1, t2 = tangent_basis(normal)
        assert np.isclose(np.linalg.norm(t1), 1.)
        assert np.isclose(np.linalg.norm(t2), 1.)
        assert np.isclose(t1.dot(normal), 0.)
        assert np.isclose(t2.dot(normal), 0.)
        assert np.allclose(np.cross(t1, t2), normal)

    def test_edges_on_cone(self):
        mu = 0.5
        basis = friction_cone_basis(np.array([0., 0., 2.]), mu, 4)
        assert basis.shape == (3, 4)
        assert np.allclose(np.linalg.norm(basis, axis=0), 1.)
        # angle between every edge and the normal is atan(mu)
        assert np.allclose(basis[2], 1. / np.sqrt(1. + mu**2))
        assert np.allclose(basis.sum(axis=1)[0:2], 0.)

    def test_single_edge_is_normal(self):
        basis = friction_cone_basis(np.array([0., 1., 0.]), 0.8, 1)
        assert basis.shape == (3, 1)
        assert np.allclose(basis[:, 0], [0., 1., 0.])

    def test_frictionless(self):
        basis = friction_cone_basis(np.array([0., 0., 1.]), 0., 3)
        assert np.allclose(basis, np.array([[0., 0., 0.], [0., 0., 0.], [1., 1., 1.]]))


class TestWrenchMatrix:
    def test_wrench_about_reference(self):
        points = [np.array([1., 0., 0.]), np.array([0., 1., 0.])]
        ref = np.array([0., 0., 1.])
        forces = np.array([0., 0., 10., 1., 0., 5.])
        wrench = wrench_matrix(points, ref).dot(forces)
        torque = (np.cross(points[0] - ref, forces[0:3]) +
                  np.cross(points[1] - ref, forces[3:6]))
        assert np.allclose(wrench[0:3], [1., 0., 15.])
        assert np.allclose(wrench[3:6], torque)
