"""
@file qp_solver.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import enum
import logging
import numpy as np
import qpsolvers
from qpsolvers import solve_qp
from qpsolvers.exceptions import QPError
from scipy.linalg import qr

logger = logging.getLogger(__name__)

class SolutionResult(enum.IntEnum):
    SOLUTION_FOUND = 0
    SOLUTION_NOT_FOUND = 1
    SOLVER_UNAVAILABLE = 2


def independent_rows(A, tolerance=1e-9):
    """Indices of a maximal set of linearly independent rows of A, in order.

    Rigid contacts with several points give rank deficient equality
    constraints that quadprog reports as inconsistent.
    """
    if A.shape[0] == 0:
        return np.arange(0)
    _, R, pivots = qr(A.T, mode="economic", pivoting=True)
    diag = np.abs(np.diag(R))
    if diag.size == 0 or diag[0] == 0.:
        return np.arange(0)
    rank = int(np.sum(diag > tolerance * max(diag[0], 1.)))
    return np.sort(pivots[:rank])


class QPSolver:
    """Solves the program held by a QPData with one of the qpsolvers backends.

    Args:
        solver (str): Name of the qpsolvers backend, e.g. "quadprog".
        slack_variable (float): Diagonal term added to the Hessian.
        equality_tolerance (float): Largest equality residual accepted once
            dependent rows have been dropped.
        **solver_options: Forwarded to the backend on every solve.
    """
    def __init__(self, solver="quadprog", slack_variable=1e-10, equality_tolerance=1e-6,
                 **solver_options):
        self.solver = solver
        self.slack_variable = slack_variable
        self.equality_tolerance = equality_tolerance
        self.solver_options = solver_options

    def available(self):
        return self.solver in qpsolvers.available_solvers

    def solve(self, qp_data):
        """Returns (SolutionResult, x). x is None unless a solution was found."""
        if not self.available():
            return SolutionResult.SOLVER_UNAVAILABLE, None

        P, q, G, h, A, b = qp_data.assemble()
        P = P + np.eye(P.shape[0]) * float(self.slack_variable)
        A_full, b_full = A, b
        if A is not None:
            rows = independent_rows(A)
            if rows.size < A.shape[0]:
                logger.debug("Dropping %d dependent equality rows", A.shape[0] - rows.size)
            A, b = (A[rows], b[rows]) if rows.size else (None, None)
        try:
            x = solve_qp(P=P, q=q, G=G, h=h, A=A, b=b,
                         solver=self.solver, **self.solver_options)
        except QPError as e:
            logger.warning("%s failed on a %d variable QP: %s",
                           self.solver, qp_data.num_vars, e)
            return SolutionResult.SOLUTION_NOT_FOUND, None

        if x is None or not np.all(np.isfinite(x)):
            return SolutionResult.SOLUTION_NOT_FOUND, None
        # The dropped rows only hold if the equality system was consistent
        if A_full is not None and not np.allclose(A_full.dot(x), b_full,
                                                  rtol=0., atol=self.equality_tolerance):
            logger.warning("%s solution violates dependent equality rows", self.solver)
            return SolutionResult.SOLUTION_NOT_FOUND, None
        return SolutionResult.SOLUTION_FOUND, np.asarray(x, dtype=float)
