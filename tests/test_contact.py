import numpy as np
import pytest

from humanoid_wbc.contact import ContactInformation, ResolvedContact


class TestContactInformation:
    def test_dimensions(self):
        contact = ContactInformation("l_foot", [[0.1, 0., 0.], [-0.1, 0., 0.]],
                                     num_basis_per_contact_point=3)
        assert contact.name == "l_foot"
        assert contact.num_contact_points == 2
        assert contact.num_basis == 6
        assert contact.force_dim == 6

    @pytest.mark.parametrize("kwargs", [
        {"contact_points": []},
        {"contact_points": [[0., 0.]]},
        {"contact_points": [[0., 0., 0.]], "num_basis_per_contact_point": 0},
        {"contact_points": [[0., 0., 0.]], "mu": -0.1},
        {"contact_points": [[0., 0., 0.]], "normal": [0., 0., 0.]},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            ContactInformation("l_foot", **kwargs)

    def test_world_points(self, robot):
        contact = ContactInformation("l_foot", [[0.1, 0., 0.]], reference_point=[0., 0., 0.05])
        points, reference_point = contact.compute_contact_points_and_reference_point(robot)
        foot = robot.get_frame_position("l_foot")
        assert np.allclose(points[0], foot + [0.1, 0., 0.])
        assert np.allclose(reference_point, foot + [0., 0., 0.05])

    def test_stacked_jacobian(self, robot):
        contact = ContactInformation("r_foot", [[0., 0., 0.], [0.1, 0., 0.]])
        J = contact.compute_jacobian_at_contact_points(robot)
        assert J.shape == (6, robot.nv)
        assert np.allclose(J[0:3], robot.get_point_jacobian_world_aligned("r_foot", np.zeros(3)))
        assert np.allclose(J[0:3, 9:12], np.identity(3))
        assert contact.compute_jacobian_dot_times_v_at_contact_points(robot).shape == (6,)

    def test_basis_matrix(self, robot):
        contact = ContactInformation("l_foot", [[0., 0., 0.], [0.1, 0., 0.]],
                                     num_basis_per_contact_point=4, mu=0.7)
        basis = contact.compute_basis_matrix(robot)
        assert basis.shape == (6, 8)
        assert np.allclose(basis[0:3, 4:8], 0.)
        assert np.allclose(basis[3:6, 0:4], 0.)
        assert np.all(basis[2, 0:4] > 0.)

    def test_unknown_body(self, robot):
        contact = ContactInformation("hand", [[0., 0., 0.]])
        with pytest.raises(ValueError):
            contact.compute_basis_matrix(robot)


class TestResolvedContact:
    def test_force_and_torque(self):
        resolved = ResolvedContact("l_foot", "left_foot")
        resolved.equivalent_wrench = np.array([1., 2., 3., 4., 5., 6.])
        assert resolved.name == "left_foot"
        assert np.allclose(resolved.force, [1., 2., 3.])
        assert np.allclose(resolved.torque, [4., 5., 6.])
        assert resolved.num_contact_points == 0
