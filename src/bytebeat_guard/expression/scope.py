from collections.abc import Iterable, Iterator
from contextlib import contextmanager


class ScopeStack:
    """Identifier names visible at each level of function nesting.

    The bottom frame is a copy of the baseline allowlist. Entering a
    function pushes a frame holding the enclosing frame's names plus the
    function's own bindings; leaving it pops the frame again, so the depth is
    always the current function-nesting depth plus one.
    """

    def __init__(self, baseline: Iterable[str]) -> None:
        self._frames: list[set[str]] = [set(baseline)]

    @property
    def depth(self) -> int:
        return len(self._frames)

    def declare(self, name: str) -> None:
        self._frames[-1].add(name)

    def resolves(self, name: str) -> bool:
        return any(name in frame for frame in self._frames)

    def enter_function(self, bindings: Iterable[str]) -> set[str]:
        frame = set(self._frames[-1])
        frame.update(bindings)
        self._frames.append(frame)
        return frame

    def leave_function(self) -> None:
        if len(self._frames) == 1:
            raise RuntimeError("Cannot leave the baseline frame")
        self._frames.pop()

    @contextmanager
    def function_frame(self, bindings: Iterable[str]) -> Iterator[set[str]]:
        frame = self.enter_function(bindings)
        try:
            yield frame
        finally:
            self.leave_function()
