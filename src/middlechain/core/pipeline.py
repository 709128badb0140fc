"""
Module for chaining middlewares in front of a terminal handler.

This module provides the asynchronous `Pipeline` and the synchronous `SyncPipeline`,
along with the `pipe` and `pipe_sync` shortcuts that build them from a variadic list
of stages. Both variants share the same invocation state (`_Invocation`): the
original call arguments, a cursor pointing at the next middleware, and the failure
normalization rules. They differ only in whether the continuation awaits the result
of the stage it dispatches to.
"""

import inspect
import logging
from collections.abc import Callable, Sequence
from typing import Any

from .errors import ValidationError, is_error, normalize_error, wrap_error
from .middleware import Next, merge_args

__all__ = ["Pipeline", "SyncPipeline", "pipe", "pipe_sync"]

logger = logging.getLogger(__name__)

ErrorPredicate = Callable[[object], bool]
ErrorWrapper = Callable[[BaseException], BaseException]


class _BasePipeline:
    """
    Holds the stages and the error handling configuration shared by both variants.
    """

    def __init__(
        self,
        middlewares: Sequence[Callable[..., Any]],
        handler: Callable[..., Any],
        *,
        is_error: ErrorPredicate = is_error,
        wrap_error: ErrorWrapper = wrap_error,
        name: str | None = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            middlewares: Middlewares, in the order in which they are run. Each one is
                called with the arguments of the pipeline call, followed by a
                continuation.
            handler: The terminal handler, called after all the middlewares.
            is_error: Predicate recognizing errors that are raised to the caller
                unchanged. (Default: any `Exception`)
            wrap_error: Constructor wrapping failures not recognized by `is_error`.
                (Default: wraps into a `PipelineError` with status 500)
            name: Name of the pipeline used in its representation and in log
                records. (Default: qualified name of the handler)

        Raises:
            ValidationError: If the handler or any of the middlewares is not
                callable.

        """
        self._middlewares = tuple(middlewares)
        self._handler = handler
        self.is_error = is_error
        self.wrap_error = wrap_error
        self.name = name or getattr(handler, "__qualname__", type(handler).__name__)

        self.validate()

    @property
    def middlewares(self) -> tuple[Callable[..., Any], ...]:
        return self._middlewares

    @property
    def handler(self) -> Callable[..., Any]:
        return self._handler

    def validate(self) -> None:
        """
        Check that every stage of the pipeline can be called.

        Raises:
            ValidationError: If a stage is not callable. The index of the stage in
                the full list of stages (middlewares followed by the handler) is
                given in the error message.

        """
        for i, stage in enumerate((*self._middlewares, self._handler)):
            if not callable(stage):
                msg = f"Stage {stage!r}, at index {i}, is not callable."
                raise ValidationError(msg)

    def __repr__(self) -> str:
        stages = ", ".join(
            getattr(stage, "__qualname__", type(stage).__name__)
            for stage in (*self._middlewares, self._handler)
        )
        return f"{type(self).__name__}({self.name!r}, stages=[{stages}])"


class _Invocation:
    """
    State of a single call of a pipeline.

    The cursor is the index of the next middleware to run. Once it reaches the number
    of middlewares, every dispatch targets the terminal handler.
    """

    def __init__(self, pipeline: _BasePipeline, args: tuple[Any, ...]) -> None:
        self.pipeline = pipeline
        self.args = args
        self.cursor = 0
        self.failure: BaseException | None = None

    def dispatch(self, overrides: tuple[Any, ...], next_: Next[Any]) -> Any:
        """
        Run the stage at the cursor and return its (possibly awaitable) result.
        """
        args = merge_args(self.args, overrides)
        middlewares = self.pipeline.middlewares

        if self.cursor < len(middlewares):
            middleware = middlewares[self.cursor]
            self.cursor += 1
            return middleware(*args, next_)

        return self.pipeline.handler(*args)

    def fail(self, value: object, stage: int) -> BaseException:
        """
        Normalize a failure, unless it was already normalized by an inner stage.

        `stage` is the index of the failing stage in the full list of stages, the
        handler being at index `len(middlewares)`.
        """
        if value is self.failure:
            return value

        error = normalize_error(
            value, is_error=self.pipeline.is_error, wrap_error=self.pipeline.wrap_error
        )
        if error is not value:
            logger.debug(
                "Pipeline %s failed at stage %d with %r, normalized to %r.",
                self.pipeline.name,
                stage,
                value,
                error,
            )

        self.failure = error
        return error


class Pipeline(_BasePipeline):
    """
    Runs a chain of middlewares in front of a terminal handler, asynchronously.

    Calling the pipeline returns a coroutine. Stages may be coroutine functions or
    plain functions: results which are awaitable are awaited, others are used as
    they are. Each middleware receives the arguments of the call followed by a
    continuation, `next`, which is itself a coroutine function:

    - `await next()` runs the rest of the pipeline with unchanged arguments,
    - `await next(None, *args)` runs it with `args` substituted for the original
      arguments (positions given as `None` keep the original value),
    - `await next(error)` stops the pipeline, the error is raised to the caller.

    Any failure is normalized once (see `normalize_error`) at the continuation where
    it is first caught, and then propagates unchanged to the caller of the pipeline.

    Example:
    ```python
        async def handler(value: str) -> str:
            return f"hello {value}"

        async def middleware(value: str, next_: Next[Awaitable[str]]) -> str:
            return await next_(None, f", {value}")

        pipeline = Pipeline([middleware], handler)
        await pipeline("world")  # "hello , world"
    ```

    """

    async def __call__(self, *args: Any) -> Any:
        """
        Run the pipeline.

        Args:
            args: Positional arguments for the stages.

        Returns:
            The value returned by the first stage.

        """
        invocation = _Invocation(self, args)

        async def next_(error: object = None, /, *overrides: Any) -> Any:
            if error:
                # Only middlewares hold the continuation, the caller is the last
                # one dispatched.
                raise invocation.fail(error, invocation.cursor - 1)

            stage = invocation.cursor
            try:
                result = invocation.dispatch(overrides, next_)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as e:
                normalized = invocation.fail(e, stage)
                if normalized is e:
                    raise
                raise normalized from e

            return result

        return await next_(None, *args)


class SyncPipeline(_BasePipeline):
    """
    Runs a chain of middlewares in front of a terminal handler, synchronously.

    This works exactly like `Pipeline`, except that the pipeline and the
    continuations return their results directly. Stages must not suspend: if a stage
    returns an awaitable, it is returned as it is, without being awaited.
    """

    def __call__(self, *args: Any) -> Any:
        """
        Run the pipeline.

        Args:
            args: Positional arguments for the stages.

        Returns:
            The value returned by the first stage.

        """
        invocation = _Invocation(self, args)

        def next_(error: object = None, /, *overrides: Any) -> Any:
            if error:
                raise invocation.fail(error, invocation.cursor - 1)

            stage = invocation.cursor
            try:
                return invocation.dispatch(overrides, next_)
            except Exception as e:
                normalized = invocation.fail(e, stage)
                if normalized is e:
                    raise
                raise normalized from e

        return next_(None, *args)


def _split_stages(
    stages: tuple[Callable[..., Any], ...],
) -> tuple[tuple[Callable[..., Any], ...], Callable[..., Any]]:
    if not stages:
        msg = "A pipeline requires at least one stage, the handler."
        raise ValidationError(msg)

    return stages[:-1], stages[-1]


def pipe(
    *stages: Callable[..., Any],
    is_error: ErrorPredicate = is_error,
    wrap_error: ErrorWrapper = wrap_error,
    name: str | None = None,
) -> Pipeline:
    """
    Build an asynchronous pipeline from middlewares followed by a handler.

    Arguments:
        stages: The middlewares, in order, followed by the terminal handler as the
            last stage.
        is_error: Predicate recognizing errors raised unchanged.
        wrap_error: Constructor wrapping failures not recognized by `is_error`.
        name: Name of the pipeline.

    Returns:
        A `Pipeline`, callable with the arguments of the handler.

    Raises:
        ValidationError: If no stage is given, or a stage is not callable.

    """
    middlewares, handler = _split_stages(stages)
    return Pipeline(
        middlewares, handler, is_error=is_error, wrap_error=wrap_error, name=name
    )


def pipe_sync(
    *stages: Callable[..., Any],
    is_error: ErrorPredicate = is_error,
    wrap_error: ErrorWrapper = wrap_error,
    name: str | None = None,
) -> SyncPipeline:
    """
    Build a synchronous pipeline from middlewares followed by a handler.

    See `pipe` for the description of the arguments.

    Returns:
        A `SyncPipeline`, callable with the arguments of the handler.

    """
    middlewares, handler = _split_stages(stages)
    return SyncPipeline(
        middlewares, handler, is_error=is_error, wrap_error=wrap_error, name=name
    )
