from __future__ import annotations

import numpy as np


class RandomStream:
    """
    A seeded source of standard-normal and uniform draws.

    Wraps a ``numpy.random.Generator`` so that the whole experiment consumes
    one sequential stream. Two streams seeded identically and called in the
    same order produce bit-identical draws. Vectorised calls consume the
    stream exactly as the same number of scalar calls would, so
    ``normal(size=3)`` equals three successive ``normal()`` calls.

    Example::

        stream = RandomStream(12345)
        y0 = stream.normal(size=1000)
        keys = stream.uniform(size=1000)

        stream.seed(12345)   # back to the first draw
    """

    def __init__(self, seed: int) -> None:
        self.seed(seed)

    def seed(self, s: int) -> None:
        """Reset the stream deterministically from integer ``s``."""
        self._seed = int(s)
        self._rng = np.random.default_rng(self._seed)
        self._draws = 0

    @property
    def initial_seed(self) -> int:
        """The seed the stream was last reset with."""
        return self._seed

    @property
    def draws(self) -> int:
        """Number of scalar draws consumed since the last ``seed()``."""
        return self._draws

    def normal(self, size: int | None = None):
        """One standard-normal draw, or an array of ``size`` draws."""
        if size is None:
            self._draws += 1
            return float(self._rng.standard_normal())
        out = self._rng.standard_normal(size)
        self._draws += out.size
        return out

    def uniform(self, size: int | None = None):
        """
        One draw on the open interval (0, 1), or an array of ``size`` draws.

        numpy's generator samples [0, 1); an exact 0.0 is replaced by a
        fresh draw so the interval is open at both ends.
        """
        if size is None:
            return float(self._open_uniform(1)[0])
        return self._open_uniform(size)

    def _open_uniform(self, size: int) -> np.ndarray:
        out = self._rng.random(size)
        self._draws += out.size
        zeros = np.flatnonzero(out == 0.0)
        while zeros.size:
            redraw = self._rng.random(zeros.size)
            self._draws += redraw.size
            out[zeros] = redraw
            zeros = zeros[redraw == 0.0]
        return out

    def __repr__(self) -> str:
        return f"RandomStream(seed={self._seed}, draws={self._draws})"
