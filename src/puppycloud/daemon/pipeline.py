# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ordered pipeline of async step functions.

Create a :class:`Pipeline` at module level and register steps with its
:meth:`~Pipeline.step` decorator.  Steps may live in separate modules;
each one imports the pipeline instance and decorates its function.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar, overload

logger = logging.getLogger(__name__)

_Ctx = TypeVar("_Ctx")

_StepFn = Callable[[_Ctx], Awaitable[None]]

_DEFAULT_ORDER = 500


class Pipeline(Generic[_Ctx]):
    """Async step functions run in ascending ``order``.

    Steps with equal order run in the order they were registered.  Use
    multiples of 100 so new steps can slot in between.

    Example::

        provision = Pipeline[ProvisionContext]("provision")

        @provision.step(order=100)
        async def pull_image(ctx: ProvisionContext) -> None: ...

    A step aborts the run by raising; later steps are not executed.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: list[tuple[int, int, _StepFn[_Ctx]]] = []

    @overload
    def step(self, fn: _StepFn[_Ctx]) -> _StepFn[_Ctx]: ...
    @overload
    def step(self, *, order: int) -> Callable[[_StepFn[_Ctx]], _StepFn[_Ctx]]: ...

    def step(
        self,
        fn: _StepFn[_Ctx] | None = None,
        *,
        order: int = _DEFAULT_ORDER,
    ) -> _StepFn[_Ctx] | Callable[[_StepFn[_Ctx]], _StepFn[_Ctx]]:
        """Register *fn* as a step, bare or as ``@pipeline.step(order=...)``."""
        def _register(f: _StepFn[_Ctx]) -> _StepFn[_Ctx]:
            self._entries.append((order, len(self._entries), f))
            return f

        if fn is not None:
            return _register(fn)
        return _register

    @property
    def steps(self) -> list[_StepFn[_Ctx]]:
        """Registered steps in execution order."""
        return [f for _ord, _seq, f in sorted(self._entries, key=lambda e: e[:2])]

    async def run(self, ctx: _Ctx) -> None:
        """Execute every registered step in order."""
        for s in self.steps:
            logger.debug("%s: running step %s", self.name, s.__name__)
            await s(ctx)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        ordered = sorted(self._entries, key=lambda e: e[:2])
        names = ", ".join(f"{f.__name__}({o})" for o, _s, f in ordered)
        return f"Pipeline({self.name!r}, [{names}])"
