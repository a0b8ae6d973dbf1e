"""
Bridge between the asyncio core and blocking collaborators.

The YouTube client, the OpenAI client and the SQLModel repository are all
synchronous. The job runner awaits them through this shared thread pool so
every network or database call is a suspension point of its task.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, TypeVar

T = TypeVar("T")

# Thread pool for blocking I/O operations
executor = ThreadPoolExecutor(max_workers=10, thread_name_prefix="playlist-analyzer")


async def run_in_executor(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a synchronous function in the shared thread pool.

    Args:
        func: Synchronous function to run
        *args, **kwargs: Arguments to pass to the function

    Returns:
        Result from the function
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, partial(func, *args, **kwargs))
