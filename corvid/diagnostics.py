# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Error and diagnostic conventions.

Contract errors abort a call with no partial result. Recoverable
input-shape issues are reported as warnings and the computation
proceeds with a documented fallback. Informational notes go to the
module loggers at INFO level.
"""

from __future__ import annotations

import warnings


class ContractError(ValueError):
    """Input violates the contract of a Corvid operation."""


class CorvidWarning(UserWarning):
    """Input was accepted after a documented fallback was applied."""


def warn(message: str, stacklevel: int = 3) -> None:
    """Emit a CorvidWarning attributed to the caller of the public API."""
    warnings.warn(message, CorvidWarning, stacklevel=stacklevel)
