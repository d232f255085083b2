"""Bounded-concurrency fan-out helper.

Wraps asyncio.Semaphore to limit how many independent runs are in flight.
Preserves input order in results and collects per-item failures.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, TypeVar

from craftstudio.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

log = get_logger(__name__)

T = TypeVar("T")
Item = TypeVar("Item")


def is_connectivity_error(exc: Exception) -> bool:
    """Check if an exception indicates provider connectivity loss.

    Recognises httpx network/timeout errors, Python built-in
    ConnectionError and image provider connection errors. Walks the
    ``__cause__`` chain so wrapped errors are also detected.
    """
    import httpx

    from craftstudio.providers.image import ImageProviderConnectionError

    if isinstance(
        exc,
        (
            httpx.NetworkError,
            httpx.TimeoutException,
            ConnectionError,
            ImageProviderConnectionError,
        ),
    ):
        return True

    cause = exc.__cause__
    if cause is not None and isinstance(cause, Exception):
        return is_connectivity_error(cause)

    return False


async def fan_out(
    items: Sequence[Item],
    call_fn: Callable[[Item], Awaitable[T]],
    max_concurrency: int = 2,
) -> tuple[list[T | None], list[tuple[int, Exception]]]:
    """Run ``call_fn`` over ``items`` with bounded parallelism.

    A failing item does not cancel the others.

    Args:
        items: Input items to process.
        call_fn: Async function taking one item.
        max_concurrency: Maximum calls in flight at once.

    Returns:
        Tuple of:
            - results: List in input order (None for failed items).
            - errors: List of (index, exception) for failed items, by index.
    """
    if not items:
        return [], []

    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    results: list[T | None] = [None] * len(items)
    errors: list[tuple[int, Exception]] = []

    async def _run_one(idx: int, item: Item) -> None:
        async with semaphore:
            try:
                results[idx] = await call_fn(item)
            except Exception as e:
                errors.append((idx, e))
                log.warning(
                    "fan_out_item_failed",
                    index=idx,
                    error=str(e),
                    connectivity=is_connectivity_error(e),
                )

    await asyncio.gather(*(_run_one(i, item) for i, item in enumerate(items)))

    errors.sort(key=lambda pair: pair[0])
    if errors and all(is_connectivity_error(e) for _, e in errors) and len(errors) >= 2:
        log.error(
            "fan_out_connectivity_failure",
            total_items=len(items),
            failed=len(errors),
            error_sample=str(errors[0][1]),
        )

    log.debug(
        "fan_out_complete",
        total_items=len(items),
        succeeded=len(items) - len(errors),
        failed=len(errors),
    )
    return results, errors
