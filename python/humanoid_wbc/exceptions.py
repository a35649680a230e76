"""
@file exceptions.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

class WbcError(Exception):
    """Base class of the errors raised by the whole body controller."""


class TopologyError(WbcError):
    """The stacked contact quantities disagree with the allocated QP."""


class ConsistencyError(WbcError):
    """A solved QP violates its own constraints or the momentum balance."""
