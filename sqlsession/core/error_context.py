"""
Diagnostic context for configuration errors.

Each thread owns its own ErrorContext. Components record what they are
working on (resource, activity, element) while they work, and the builder
renders that information into the BuildError message when something fails.
The builder resets the context at the end of every build call.
"""
import threading
from typing import Optional

_local = threading.local()


class ErrorContext:
    """Per-thread record of the resource and activity being processed."""

    def __init__(self):
        self._resource: Optional[str] = None
        self._activity: Optional[str] = None
        self._object: Optional[str] = None
        self._message: Optional[str] = None
        self._cause: Optional[BaseException] = None

    @classmethod
    def instance(cls) -> "ErrorContext":
        """
        Returns the context bound to the calling thread.

        Returns:
            The thread's ErrorContext, created on first access
        """
        context = getattr(_local, "context", None)
        if context is None:
            context = cls()
            _local.context = context
        return context

    def resource(self, resource: Optional[str]) -> "ErrorContext":
        self._resource = resource
        return self

    def activity(self, activity: Optional[str]) -> "ErrorContext":
        self._activity = activity
        return self

    def object(self, obj: Optional[str]) -> "ErrorContext":
        self._object = obj
        return self

    def message(self, message: Optional[str]) -> "ErrorContext":
        self._message = message
        return self

    def cause(self, cause: Optional[BaseException]) -> "ErrorContext":
        self._cause = cause
        return self

    def reset(self) -> "ErrorContext":
        """
        Replaces the thread's context with an empty one.

        Only the calling thread is affected.

        Returns:
            The new, empty context
        """
        context = ErrorContext()
        _local.context = context
        return context

    def __str__(self) -> str:
        lines = []
        if self._message:
            lines.append(self._message)
        if self._resource:
            lines.append(f"### The error may exist in {self._resource}")
        if self._activity:
            lines.append(f"### The error occurred while {self._activity}")
        if self._object:
            lines.append(f"### The error may involve {self._object}")
        if self._cause is not None:
            lines.append(f"### Cause: {type(self._cause).__name__}: {self._cause}")
        return "\n".join(lines)
