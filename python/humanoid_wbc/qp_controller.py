"""
@file qp_controller.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import collections
import enum
import logging
import numpy as np
from humanoid_wbc.contact import ResolvedContact
from humanoid_wbc.exceptions import ConsistencyError, TopologyError
from humanoid_wbc.qp_data import QPData
from humanoid_wbc.qp_output import BodyAcceleration, QPOutput
from humanoid_wbc.qp_solver import QPSolver, SolutionResult
from humanoid_wbc.qp_workspace import QPWorkspace

logger = logging.getLogger(__name__)

class ControlResult(enum.IntEnum):
    SUCCESS = 0
    INPUT_INVALID = 1
    SOLVER_UNAVAILABLE = 2
    NO_SOLUTION_FOUND = 3
    OUTPUT_INVALID = 4


QPTopology = collections.namedtuple("QPTopology", [
    "num_contact_body", "num_vd", "num_basis", "num_point_force",
    "num_torque", "num_variable", "num_body_acceleration",
    "contact_shapes", "body_shapes"])


class QPController:
    """Whole body inverse dynamics controller solving one QP per control cycle.

    The equations of motion are

        M(q) * vd + h(q, v) = S * tau + J^T * basis_to_force * beta

    where beta are the non-negative friction cone coefficients of all contact
    points. The top 6 rows of S are zero (floating base), so with x = [vd, beta]

        tau = M_l * vd + h_l - (J^T * basis_to_force)_l * beta

    (_l: the num_torque bottom rows) and only x has to be optimized:

        min   w_com * |Jcom * vd + Jcomd * v - comdd_d|^2
            + sum_i w_i * |J_i * vd + Jd_i * v - acc_i_d|^2
            + w_vd * |vd - vd_d|^2 + w_basis_reg * |beta|^2
        s.t.  M_u * vd + h_u = (J^T * basis_to_force)_u * beta    (dynamics)
              J_c * vd + Jd_c * v = 0                              (contacts)
              0 <= beta <= basis_upper_bound
              effort_min <= tau <= effort_max

    Args:
        qp_solver (QPSolver): Backend used to solve the QP.
        basis_upper_bound (float): Upper bound of every basis coefficient.
        tolerance (float): Tolerance of the post-solve consistency checks.
        assert_consistency (bool): Raise ConsistencyError instead of returning
            OUTPUT_INVALID when a consistency check fails.
    """
    def __init__(self, qp_solver=None, basis_upper_bound=1000., tolerance=1e-6,
                 assert_consistency=False):
        self.qp_solver = QPSolver() if qp_solver is None else qp_solver
        self.basis_upper_bound = basis_upper_bound
        self.tolerance = tolerance
        self.assert_consistency = assert_consistency

        self.topology = None
        self.topology_version = 0
        self.qp_data = QPData()
        self.workspace = QPWorkspace()
        self.solution = None

        self.eq_dynamics = None
        self.eq_contacts = []
        self.ineq_contact_wrench = None
        self.ineq_torque_limit = None
        self.cost_comdd = None
        self.cost_body_accelerations = []
        self.cost_vd_reg = None
        self.cost_basis_reg = None

    @classmethod
    def from_setting(cls, setting):
        return cls(QPSolver(setting.solver),
                   basis_upper_bound=setting.basis_upper_bound,
                   tolerance=setting.tolerance,
                   assert_consistency=setting.assert_consistency)

    @staticmethod
    def compute_topology(robot, contacts, body_accelerations):
        num_vd = robot.nv
        num_basis = sum(contact.num_basis for contact in contacts)
        return QPTopology(
            num_contact_body=len(contacts),
            num_vd=num_vd,
            num_basis=num_basis,
            num_point_force=sum(contact.num_contact_points for contact in contacts),
            num_torque=robot.num_actuators,
            num_variable=num_vd + num_basis,
            num_body_acceleration=len(body_accelerations),
            # per-term shapes and labels, in declaration order
            contact_shapes=tuple((contact.name, contact.force_dim, contact.num_basis)
                                 for contact in contacts),
            body_shapes=tuple((body.name, body.dim) for body in body_accelerations))

    def resize_qp(self, robot, contacts, body_accelerations):
        """Reallocate the QP if the contacts or tracked bodies changed.

        Renaming, reordering or resizing any contact or tracked body triggers
        a rebuild, so the term descriptions and shapes match the input.

        Returns:
            True if the QP was rebuilt, in which case all previous handles are
            invalid.
        """
        topology = self.compute_topology(robot, contacts, body_accelerations)
        if topology == self.topology:
            return False

        logger.debug("Rebuilding QP for %s", topology)
        self.topology = topology
        self.topology_version += 1
        num_vd, num_basis = topology.num_vd, topology.num_basis
        num_torque, num_variable = topology.num_torque, topology.num_variable

        # The order of insertion is important, the rest of the controller
        # assumes this layout.
        self.qp_data = QPData()
        self.qp_data.add_variables("vd", num_vd)
        self.qp_data.add_variables("basis", num_basis)

        self.workspace.resize(num_vd, num_basis, topology.num_point_force, num_torque,
                              [body.dim for body in body_accelerations])

        # Equality constraints
        self.eq_dynamics = self.qp_data.add_linear_equality_constraint(
            np.zeros((6, num_variable)), np.zeros(6), ["vd", "basis"], "dynamics eq")
        self.eq_contacts = []
        for contact in contacts:
            self.eq_contacts.append(self.qp_data.add_linear_equality_constraint(
                np.zeros((contact.force_dim, num_vd)), np.zeros(contact.force_dim),
                ["vd"], contact.name + " contact eq"))

        # Inequality constraints. The basis bounds do not depend on the robot
        # configuration.
        self.ineq_contact_wrench = self.qp_data.add_linear_constraint(
            np.identity(num_basis), np.zeros(num_basis),
            np.full(num_basis, float(self.basis_upper_bound)),
            ["basis"], "contact force basis ineq")
        self.ineq_torque_limit = self.qp_data.add_linear_constraint(
            np.zeros((num_torque, num_variable)), np.zeros(num_torque),
            np.zeros(num_torque), ["vd", "basis"], "torque limit ineq")

        # Cost terms
        zero_hessian, zero_gradient = np.zeros((num_vd, num_vd)), np.zeros(num_vd)
        self.cost_comdd = self.qp_data.add_quadratic_cost(
            zero_hessian, zero_gradient, ["vd"], "com cost")
        self.cost_body_accelerations = []
        for body in body_accelerations:
            self.cost_body_accelerations.append(self.qp_data.add_quadratic_cost(
                zero_hessian, zero_gradient, ["vd"], body.name + " cost"))
        self.cost_vd_reg = self.qp_data.add_quadratic_cost(
            zero_hessian, zero_gradient, ["vd"], "vd reg cost")
        self.cost_basis_reg = self.qp_data.add_quadratic_cost(
            np.identity(num_basis), np.zeros(num_basis), ["basis"], "basis reg cost")
        return True

    def compute_joint_torque(self, x):
        """Joint torques as the affine function of the decision variables."""
        return self.workspace.torque_linear.dot(x) + self.workspace.torque_constant

    def _update_tracking_cost(self, handle, weight, J, Jdv, desired):
        err = Jdv - desired
        self.qp_data.update_quadratic_cost(
            handle, weight * J.T.dot(J), weight * J.T.dot(err), 0.5 * weight * err.dot(err))

    def formulate(self, robot, qp_input):
        """Fill every constraint and cost of the allocated QP for this cycle."""
        topo, ws = self.topology, self.workspace
        num_vd, num_torque = topo.num_vd, topo.num_torque
        vd_start, _ = self.qp_data.variables["vd"]
        basis_start, num_basis = self.qp_data.variables["basis"]
        vd_cols = slice(vd_start, vd_start + num_vd)
        basis_cols = slice(basis_start, basis_start + num_basis)

        M = robot.get_inertia_matrix()
        h = robot.get_nonlinear_effects()

        # Stack the contact Jacobians and basis matrices of every contact body
        row_idx, col_idx = 0, 0
        for contact in qp_input.contact_info:
            force_dim, basis_dim = contact.force_dim, contact.num_basis
            ws.basis_to_force_matrix[row_idx:row_idx+force_dim, col_idx:col_idx+basis_dim] = \
                contact.compute_basis_matrix(robot)
            ws.stacked_contact_jacobians[row_idx:row_idx+force_dim] = \
                contact.compute_jacobian_at_contact_points(robot)
            ws.stacked_contact_jacobians_dot_times_v[row_idx:row_idx+force_dim] = \
                contact.compute_jacobian_dot_times_v_at_contact_points(robot)
            row_idx += force_dim
            col_idx += basis_dim
        if row_idx != 3 * topo.num_point_force or col_idx != topo.num_basis:
            raise TopologyError(
                "Stacked %d force rows and %d basis columns, the QP was allocated "
                "for %d and %d." % (row_idx, col_idx, 3 * topo.num_point_force, topo.num_basis))
        np.dot(ws.stacked_contact_jacobians.T, ws.basis_to_force_matrix, out=ws.JB)

        # tau = torque_linear * x + torque_constant
        ws.torque_linear[:, vd_cols] = M[num_vd-num_torque:]
        ws.torque_linear[:, basis_cols] = -ws.JB[num_vd-num_torque:]
        ws.torque_constant[:] = h[num_vd-num_torque:]

        # Equations of motion of the floating base, 6 rows
        ws.dynamics_linear[:, vd_cols] = M[:6]
        ws.dynamics_linear[:, basis_cols] = -ws.JB[:6]
        ws.dynamics_constant[:] = -h[:6]
        self.qp_data.update_linear_equality_constraint(
            self.eq_dynamics, ws.dynamics_linear, ws.dynamics_constant)

        # Stationary contacts, 3 rows per contact point
        row_idx = 0
        for handle, contact in zip(self.eq_contacts, qp_input.contact_info):
            force_dim = contact.force_dim
            self.qp_data.update_linear_equality_constraint(
                handle,
                ws.stacked_contact_jacobians[row_idx:row_idx+force_dim],
                -ws.stacked_contact_jacobians_dot_times_v[row_idx:row_idx+force_dim])
            row_idx += force_dim

        # Torque limits, expressed in actuator space: u = B_l^T * tau since
        # B_l is orthonormal.
        B_l = robot.get_actuator_selection_matrix()[num_vd-num_torque:]
        effort_min, effort_max = robot.get_effort_limits()
        np.dot(B_l.T, ws.torque_linear, out=ws.inequality_linear)
        projected_constant = B_l.T.dot(ws.torque_constant)
        ws.inequality_lower_bound[:] = effort_min - projected_constant
        ws.inequality_upper_bound[:] = effort_max - projected_constant
        self.qp_data.update_linear_constraint(
            self.ineq_torque_limit, ws.inequality_linear,
            ws.inequality_lower_bound, ws.inequality_upper_bound)

        # Task space acceleration costs
        ws.com_J[:] = robot.get_com_jacobian()
        ws.com_Jdv[:] = robot.get_com_jacobian_dot_times_v()
        self._update_tracking_cost(
            self.cost_comdd, qp_input.w_com, ws.com_J, ws.com_Jdv, qp_input.desired_comdd)

        for i, body in enumerate(qp_input.desired_body_accelerations):
            J = robot.get_frame_jacobian_world_aligned(body.body)[:body.dim]
            Jdv = robot.get_frame_jacobian_dot_times_v_world_aligned(body.body)[:body.dim]
            ws.body_J[i][:] = J
            ws.body_Jdv[i][:] = Jdv
            self._update_tracking_cost(
                self.cost_body_accelerations[i], body.weight,
                ws.body_J[i], ws.body_Jdv[i], body.acceleration)

        # Regularization of vd towards the desired vd and of the basis to zero
        self.qp_data.update_quadratic_cost(
            self.cost_vd_reg, qp_input.w_vd * np.identity(num_vd),
            -qp_input.w_vd * qp_input.desired_vd,
            0.5 * qp_input.w_vd * qp_input.desired_vd.dot(qp_input.desired_vd))
        self.qp_data.update_quadratic_cost(
            self.cost_basis_reg, qp_input.w_basis_reg * np.identity(num_basis),
            np.zeros(num_basis))

    def decompose(self, robot, qp_input, x):
        """Split a solution into accelerations, torques and contact wrenches."""
        ws = self.workspace
        vd = self.qp_data.get_variable_value(x, "vd").copy()
        basis = self.qp_data.get_variable_value(x, "basis").copy()
        np.dot(ws.basis_to_force_matrix, basis, out=ws.point_forces)

        output = QPOutput(robot.velocity_names)
        basis_index, point_force_index = 0, 0
        for contact in qp_input.contact_info:
            resolved = ResolvedContact(contact.body, contact.name)
            resolved.basis = basis[basis_index:basis_index+contact.num_basis]
            basis_index += contact.num_basis

            points, reference_point = contact.compute_contact_points_and_reference_point(robot)
            resolved.contact_points = points
            resolved.reference_point = reference_point

            forces = ws.point_forces[point_force_index:point_force_index+contact.force_dim].copy()
            point_force_index += contact.force_dim
            resolved.equivalent_wrench = contact.compute_wrench_matrix(
                points, reference_point).dot(forces)
            resolved.point_forces = [forces[3*j:3*j+3] for j in range(contact.num_contact_points)]
            output.resolved_contacts.append(resolved)

        output.vd = vd
        output.comdd = ws.com_J.dot(vd) + ws.com_Jdv
        for i, body in enumerate(qp_input.desired_body_accelerations):
            body_acceleration = BodyAcceleration(body.body, body.name)
            body_acceleration.acceleration = ws.body_J[i].dot(vd) + ws.body_Jdv[i]
            output.body_accelerations.append(body_acceleration)

        output.joint_torque = self.compute_joint_torque(x)
        output.costs = self.qp_data.evaluate_costs(x)
        return output

    def compute_net_external_wrench(self, robot, output):
        """Gravity plus all contact wrenches, [force; torque] about the CoM."""
        com = robot.get_com_position()
        net_wrench = np.zeros(6)
        net_wrench[0:3] = robot.get_total_mass() * robot.get_gravity()
        for contact in output.resolved_contacts:
            force = contact.equivalent_wrench[0:3]
            net_wrench[0:3] += force
            net_wrench[3:6] += contact.equivalent_wrench[3:6] + np.cross(
                contact.reference_point - com, force)
        return net_wrench

    def check_consistency(self, robot, output, x):
        """Returns a description of the first violated check, None if all hold."""
        for desc, residual in self.qp_data.equality_residuals(x):
            if residual.size and np.max(np.abs(residual)) > self.tolerance:
                return "%s residual %g" % (desc, np.max(np.abs(residual)))

        for desc, value, lower, upper in self.qp_data.inequality_values(x):
            if np.any(value < lower - self.tolerance) or np.any(value > upper + self.tolerance):
                return "%s out of bounds" % desc

        # The net external wrench must equal the rate of change of the
        # centroidal momentum.
        Ld = (robot.get_centroidal_momentum_matrix().dot(output.vd) +
              robot.get_centroidal_momentum_matrix_dot_times_v())
        net_wrench = self.compute_net_external_wrench(robot, output)
        if not np.allclose(net_wrench, Ld, rtol=0., atol=self.tolerance):
            return "momentum rate mismatch %g" % np.max(np.abs(net_wrench - Ld))
        return None

    def control(self, robot, qp_input, output):
        """Run one control cycle.

        Args:
            robot: Kinematics and dynamics provider at the current state.
            qp_input (QPInput): Desired accelerations, weights and contacts.
            output (QPOutput): Overwritten only when SUCCESS is returned.
        Returns:
            ControlResult of the cycle.
        """
        if not qp_input.is_valid(robot.nv):
            logger.warning("QP input is invalid")
            return ControlResult.INPUT_INVALID

        self.resize_qp(robot, qp_input.contact_info, qp_input.desired_body_accelerations)
        self.workspace.set_zero()
        self.formulate(robot, qp_input)

        result, x = self.qp_solver.solve(self.qp_data)
        if result == SolutionResult.SOLVER_UNAVAILABLE:
            logger.warning("QP solver %s is not available", self.qp_solver.solver)
            return ControlResult.SOLVER_UNAVAILABLE
        if result != SolutionResult.SOLUTION_FOUND:
            logger.warning("QP solution not found")
            return ControlResult.NO_SOLUTION_FOUND

        new_output = self.decompose(robot, qp_input, x)
        error = self.check_consistency(robot, new_output, x)
        if error is not None:
            logger.error("QP solution is inconsistent: %s", error)
            if self.assert_consistency:
                raise ConsistencyError(error)
            return ControlResult.OUTPUT_INVALID

        if not new_output.is_valid(robot.nv, self.topology.num_torque):
            logger.warning("QP output is invalid")
            return ControlResult.OUTPUT_INVALID

        self.solution = x
        output.assign(new_output)
        return ControlResult.SUCCESS
