"""
@file qp_data.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import numpy as np

class QPData:
    """Registry of the decision variables, constraints and costs of a QP

        minimize    sum_i 0.5 * x_i^T Q_i x_i + c_i^T x_i + r_i
        subject to  A_j x_j = b_j
                    lb_k <= C_k x_k <= ub_k

    where x_i, x_j, x_k are the sub-vectors of the variable blocks each term
    was declared over. Every term is addressed by the integer handle returned
    when it was added; updates overwrite the coefficients in place and must
    keep their shape.
    """
    def __init__(self):
        self.num_vars = 0
        self.variables = {}
        self.equality_constraints = []
        self.inequality_constraints = []
        self.costs = []
        self._buffers = None

    def add_variables(self, name, dim):
        assert name not in self.variables
        self.variables[name] = (self.num_vars, dim)
        self.num_vars += dim
        self._buffers = None
        return self.variables[name]

    def variable_indices(self, var_names):
        idx = [np.arange(start, start + dim)
               for start, dim in (self.variables[name] for name in var_names)]
        if len(idx) == 0:
            return np.zeros(0, dtype=int)
        return np.concatenate(idx)

    def get_variable_value(self, x, name):
        start, dim = self.variables[name]
        return x[start:start+dim]

    def add_linear_equality_constraint(self, matrix, vector, var_names, description=""):
        idx = self.variable_indices(var_names)
        assert matrix.shape == (vector.shape[0], idx.shape[0])
        self.equality_constraints.append({
            "description": description, "vars": idx,
            "A": np.array(matrix, dtype=float), "b": np.array(vector, dtype=float)})
        self._buffers = None
        return len(self.equality_constraints) - 1

    def add_linear_constraint(self, matrix, lower, upper, var_names, description=""):
        idx = self.variable_indices(var_names)
        assert matrix.shape == (lower.shape[0], idx.shape[0])
        assert lower.shape == upper.shape
        self.inequality_constraints.append({
            "description": description, "vars": idx,
            "C": np.array(matrix, dtype=float),
            "lb": np.array(lower, dtype=float), "ub": np.array(upper, dtype=float)})
        self._buffers = None
        return len(self.inequality_constraints) - 1

    def add_quadratic_cost(self, hessian, gradient, var_names, description="", constant=0.):
        idx = self.variable_indices(var_names)
        assert hessian.shape == (idx.shape[0], idx.shape[0])
        assert gradient.shape == (idx.shape[0],)
        self.costs.append({
            "description": description, "vars": idx,
            "Q": np.array(hessian, dtype=float), "c": np.array(gradient, dtype=float),
            "r": float(constant)})
        return len(self.costs) - 1

    def update_linear_equality_constraint(self, handle, matrix, vector):
        cons = self.equality_constraints[handle]
        assert matrix.shape == cons["A"].shape and vector.shape == cons["b"].shape
        cons["A"][:] = matrix
        cons["b"][:] = vector

    def update_linear_constraint(self, handle, matrix, lower, upper):
        cons = self.inequality_constraints[handle]
        assert matrix.shape == cons["C"].shape
        assert lower.shape == cons["lb"].shape and upper.shape == cons["ub"].shape
        cons["C"][:] = matrix
        cons["lb"][:] = lower
        cons["ub"][:] = upper

    def update_quadratic_cost(self, handle, hessian, gradient, constant=0.):
        cost = self.costs[handle]
        assert hessian.shape == cost["Q"].shape and gradient.shape == cost["c"].shape
        cost["Q"][:] = hessian
        cost["c"][:] = gradient
        cost["r"] = float(constant)

    @property
    def num_equalities(self):
        return sum(cons["b"].shape[0] for cons in self.equality_constraints)

    @property
    def num_inequalities(self):
        return sum(cons["lb"].shape[0] for cons in self.inequality_constraints)

    def _allocate(self):
        n = self.num_vars
        m_eq, m_in = self.num_equalities, self.num_inequalities
        self._buffers = {
            "P": np.zeros((n, n)), "q": np.zeros(n),
            "A": np.zeros((m_eq, n)), "b": np.zeros(m_eq),
            "G": np.zeros((2 * m_in, n)), "h": np.zeros(2 * m_in)}

    def assemble(self):
        """Stack all terms into the dense problem

            minimize 0.5 x^T P x + q^T x  s.t.  G x <= h,  A x = b

        Infinite inequality bounds are dropped. Returns (P, q, G, h, A, b),
        with None for an empty constraint set.
        """
        if self._buffers is None:
            self._allocate()
        buf = self._buffers
        for key in buf:
            buf[key].fill(0.)

        for cost in self.costs:
            idx = cost["vars"]
            buf["P"][np.ix_(idx, idx)] += cost["Q"]
            buf["q"][idx] += cost["c"]

        row = 0
        for cons in self.equality_constraints:
            m = cons["b"].shape[0]
            buf["A"][row:row+m, cons["vars"]] = cons["A"]
            buf["b"][row:row+m] = cons["b"]
            row += m

        row, m_in = 0, self.num_inequalities
        for cons in self.inequality_constraints:
            m = cons["lb"].shape[0]
            buf["G"][row:row+m, cons["vars"]] = cons["C"]
            buf["h"][row:row+m] = cons["ub"]
            buf["G"][m_in+row:m_in+row+m, cons["vars"]] = -cons["C"]
            buf["h"][m_in+row:m_in+row+m] = -cons["lb"]
            row += m

        finite = np.isfinite(buf["h"])
        G, h = buf["G"][finite], buf["h"][finite]
        A, b = buf["A"], buf["b"]
        return (buf["P"], buf["q"],
                G if h.shape[0] else None, h if h.shape[0] else None,
                A if b.shape[0] else None, b if b.shape[0] else None)

    def equality_residuals(self, x):
        return [(cons["description"], cons["A"].dot(x[cons["vars"]]) - cons["b"])
                for cons in self.equality_constraints]

    def inequality_values(self, x):
        return [(cons["description"], cons["C"].dot(x[cons["vars"]]), cons["lb"], cons["ub"])
                for cons in self.inequality_constraints]

    def evaluate_costs(self, x):
        values = []
        for cost in self.costs:
            xi = x[cost["vars"]]
            values.append((cost["description"],
                           0.5 * xi.dot(cost["Q"]).dot(xi) + cost["c"].dot(xi) + cost["r"]))
        return values
