# cosmicclock/physics/trail.py
import numpy as np


class Trail:
    """
    Fixed-capacity ring buffer of scene positions.
    The backing array is allocated once; push overwrites the oldest slot when full.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Trail capacity must be > 0")
        self.capacity = int(capacity)
        self._buf = np.zeros((self.capacity, 3), dtype=float)
        self._cursor = 0
        self.filled = 0

    def __len__(self):
        return self.filled

    def push(self, position) -> None:
        self._buf[self._cursor, :] = position
        self._cursor = (self._cursor + 1) % self.capacity
        if self.filled < self.capacity:
            self.filled += 1

    def clear(self) -> None:
        self._cursor = 0
        self.filled = 0

    def latest(self):
        if self.filled == 0:
            return None
        return self._buf[(self._cursor - 1) % self.capacity].copy()

    def positions(self) -> np.ndarray:
        """Copy of the stored positions, oldest first."""
        if self.filled < self.capacity:
            return self._buf[: self.filled].copy()
        return np.concatenate((self._buf[self._cursor:], self._buf[: self._cursor]))

    @property
    def buffer(self) -> np.ndarray:
        return self._buf
