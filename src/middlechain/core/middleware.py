"""
Module defining the continuation protocol and the argument merging rule.

A pipeline is made of stages: zero or more middlewares followed by one terminal
handler. Middlewares receive the positional arguments of the handler, followed by a
continuation (`Next`) that they call to pass control to the next stage.

Example:
```python
    from middlechain import Next, pipe_sync

    def greet(name: str) -> str:
        return f"hello {name}"

    def shout(name: str, next_: Next[str]) -> str:
        return next_(None, name.upper()) + "!"

    greeter = pipe_sync(shout, greet)
    greeter("world")  # "hello WORLD!"
```
"""

from collections.abc import Sequence
from typing import Any, Protocol, TypeVar

__all__ = ["Next", "merge_args"]


ReturnType_co = TypeVar("ReturnType_co", covariant=True)


class Next(Protocol[ReturnType_co]):
    """
    Continuation handed to each middleware.

    Calling it with no arguments (or with `None`) runs the next stage with unchanged
    arguments. Calling it with an error stops the pipeline, and the error is raised
    to the caller. Calling it with `None` followed by positional values runs the next
    stage with those values substituted for the original arguments.

    In a synchronous pipeline the continuation returns the value produced by the rest
    of the pipeline, so middlewares annotate it as `Next[T]`. In an asynchronous
    pipeline it returns an awaitable, `Next[Awaitable[T]]`.
    """

    def __call__(self, error: object = None, /, *args: Any) -> ReturnType_co: ...


def merge_args(args: Sequence[Any], overrides: Sequence[Any]) -> tuple[Any, ...]:
    """
    Merge positional overrides into the original arguments.

    The result always has the arity of `args`. An override replaces the original
    argument at its position unless it is `None`. Overrides past the original arity
    are ignored. Note that this means a middleware can not override an argument with
    `None`.

    Arguments:
        args: The original arguments of the pipeline call.
        overrides: Values passed to the continuation after the error.

    Returns:
        The arguments for the next stage.

    """
    return tuple(
        arg if i >= len(overrides) or overrides[i] is None else overrides[i]
        for i, arg in enumerate(args)
    )
