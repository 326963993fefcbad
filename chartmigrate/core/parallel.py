"""Overlapping the schema fetch with rule application."""

import asyncio
from typing import Callable, TypeVar

F = TypeVar("F")
T = TypeVar("T")


def run_concurrently(
    fetch: Callable[[], F],
    transform: Callable[[], T],
    parallel: bool = True,
) -> tuple[F, T]:
    """Run ``fetch`` and ``transform`` and return both results.

    With ``parallel`` both callables run in the default executor and the
    call waits for both to finish. If both fail, the transformation error is
    raised (it reflects the document or rule set, which the fetch result
    cannot fix); otherwise whichever failed is raised.

    Without ``parallel`` the transformation runs first, then the fetch.

    Args:
        fetch: Schema fetch (performs network I/O).
        transform: Rule application (pure CPU work).
        parallel: Overlap the two callables.

    Returns:
        ``(fetch_result, transform_result)``
    """
    if not parallel:
        transformed = transform()
        return fetch(), transformed

    return asyncio.run(_gather(fetch, transform))


async def _gather(fetch: Callable[[], F], transform: Callable[[], T]) -> tuple[F, T]:
    loop = asyncio.get_running_loop()
    fetch_result, transform_result = await asyncio.gather(
        loop.run_in_executor(None, fetch),
        loop.run_in_executor(None, transform),
        return_exceptions=True,
    )
    if isinstance(transform_result, BaseException):
        raise transform_result
    if isinstance(fetch_result, BaseException):
        raise fetch_result
    return fetch_result, transform_result
