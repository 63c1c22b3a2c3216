"""Rolling asset host index for spreading public URLs over mirror hosts."""

import threading
from typing import Optional


class AssetHostCycler:
    """
    Thread-safe counter cycling 1..size.

    Used to fill the ``%d`` placeholder of a URL template such as
    ``http://asset%d.example.com/media`` so that served files are spread
    over several front-end hosts. Under contention the strict round-robin
    order may be lost; every value is still within 1..size.

    Example:
        >>> cycler = AssetHostCycler()
        >>> [cycler.next() for _ in range(5)]
        [1, 2, 3, 4, 1]
    """

    def __init__(self, size: int = 4, start: Optional[int] = None):
        if size < 1:
            raise ValueError(f"size must be positive, got: {size}")
        self.size = size
        self._lock = threading.Lock()
        self._counter = -1 if start is None else start - 2

    def next(self) -> int:
        """Advance the counter and return the next host index."""
        with self._lock:
            self._counter += 1
            return self._counter % self.size + 1

    def reset(self, start: Optional[int] = None):
        """
        Reset the cycle.

        Args:
            start: Value the next call to next() returns (default: 1)
        """
        with self._lock:
            self._counter = -1 if start is None else start - 2

    def __repr__(self) -> str:
        return f"AssetHostCycler(size={self.size})"


# Shared by every backend that is not handed its own cycler
default_cycler = AssetHostCycler()
