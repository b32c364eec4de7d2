# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""HTTP surface for practice session persistence.

``app`` is resolved lazily so that importing the session package does not
build the FastAPI application.
"""

from typing import TYPE_CHECKING

__all__ = ["app"]

if TYPE_CHECKING:  # pragma: no cover
    from .app import app as app


def __getattr__(name: str):  # pragma: no cover - lazy application import
    if name != "app":
        raise AttributeError(name)
    from .app import app as loop_trainer_app

    return loop_trainer_app
