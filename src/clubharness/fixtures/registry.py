"""Teardown bookkeeping for fixtures.

Two strategies are provided:

- ``ResourceRegistry`` runs registered cleanups in strict reverse order of
  registration, for resources that depend on each other (an item inside a
  container, a registration against a workshop).
- ``gather_cleanups`` fans independent cleanups out concurrently.

Both attempt every cleanup regardless of earlier failures: leaving later
fixtures behind is worse than one failed deletion.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, TypeVar

import structlog

from clubharness.core.exceptions import CleanupError
from clubharness.models.fixtures import CleanupFn

log = structlog.get_logger(__name__)

Failures = list[tuple[str, BaseException]]


class Cleanable(Protocol):
    clean_up: CleanupFn


C = TypeVar("C", bound=Cleanable)


async def run_steps(
    steps: Sequence[tuple[str, Callable[[], Awaitable[Any]]]],
    *,
    resource: str,
) -> Failures:
    """Run dependent cleanup steps in order, continuing past failures.

    Args:
        steps: (step name, action) pairs, children before parents.
        resource: Label of the owning fixture for log context.

    Returns:
        Failed steps with their exceptions.
    """
    failures: Failures = []
    for name, action in steps:
        try:
            await action()
        except Exception as e:
            log.warning("cleanup_step_failed", resource=resource, step=name, error=str(e))
            failures.append((name, e))
    return failures


async def gather_cleanups(*cleanups: CleanupFn) -> list[BaseException]:
    """Run independent cleanups concurrently, tolerating failures.

    Returns:
        Exceptions raised by the cleanups that failed.
    """
    results = await asyncio.gather(*(clean_up() for clean_up in cleanups), return_exceptions=True)
    failures = [result for result in results if isinstance(result, BaseException)]
    for failure in failures:
        log.warning("cleanup_failed", error=str(failure))
    return failures


class ResourceRegistry:
    """Stack of teardown actions for one test or suite.

    Example:
        async with ResourceRegistry() as registry:
            container = registry.track("container", await builders.create_container(...))
            item = registry.track("item", await builders.create_item(container.id, ...))
        # item deleted, then container
    """

    def __init__(self) -> None:
        self._actions: list[tuple[str, CleanupFn]] = []

    def __len__(self) -> int:
        return len(self._actions)

    def register(self, name: str, clean_up: CleanupFn) -> None:
        """Push a teardown action."""
        self._actions.append((name, clean_up))

    def track(self, name: str, fixture: C) -> C:
        """Register ``fixture.clean_up`` and hand the fixture back."""
        self.register(name, fixture.clean_up)
        return fixture

    async def close(self, *, strict: bool = False) -> Failures:
        """Run every action, most recent first.

        Args:
            strict: Raise CleanupError if anything failed.

        Returns:
            Failed actions with their exceptions.

        Raises:
            CleanupError: Only when ``strict`` and at least one action failed.
        """
        failures: Failures = []
        while self._actions:
            name, clean_up = self._actions.pop()
            try:
                await clean_up()
            except Exception as e:
                log.warning("cleanup_failed", resource=name, error=str(e))
                failures.append((name, e))

        if failures:
            log.warning("registry_closed_with_failures", failed=len(failures))
            if strict:
                raise CleanupError(failures)
        return failures

    async def __aenter__(self) -> "ResourceRegistry":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
