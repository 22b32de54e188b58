"""
Utility functions for filterbox.
"""

import inspect
import os
from typing import Awaitable, TypeVar

T = TypeVar("T")


def get_project_root() -> str:
    """
    Get the project root directory (parent of src/filterbox).

    Returns:
        Absolute path to the project root directory
    """
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


async def resolve(result: T | Awaitable[T]) -> T:
    """
    Await ``result`` if it is awaitable, otherwise return it as is.

    Suggestion sources may answer synchronously or with a coroutine; callers
    use this to treat both the same way.
    """
    if inspect.isawaitable(result):
        return await result
    return result
