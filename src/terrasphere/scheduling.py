"""Cooperative build scheduling — progress hooks and supersession tokens.

Long builds (projection grids, full-resolution map sampling) run in
slices.  Between slices they call a :data:`ProgressHook`, which is the
host's chance to repaint or pump its event loop, and check a
:class:`BuildToken`.  Starting a newer build of the same artefact bumps
a generation counter in :class:`BuildTracker`; the older token then
raises :class:`BuildSuperseded` at its next slice boundary, so a stale
result can never overwrite newer state.

Usage
-----
>>> tracker = BuildTracker()
>>> token = tracker.start("winkel-grid")
>>> tracker.start("winkel-grid").superseded   # the new one is current
False
>>> token.superseded
True
"""

from __future__ import annotations

from typing import Callable, Dict

ProgressHook = Callable[[str, int, int], None]
"""Signature for progress hooks: ``(label, done, total)``."""


class BuildSuperseded(RuntimeError):
    """Raised inside a build whose token has been replaced by a newer one."""


class BuildToken:
    """Handle identifying one build of one artefact."""

    __slots__ = ("artefact", "generation", "_tracker")

    def __init__(self, tracker: "BuildTracker", artefact: str, generation: int) -> None:
        self._tracker = tracker
        self.artefact = artefact
        self.generation = generation

    @property
    def superseded(self) -> bool:
        return self._tracker.current(self.artefact) != self.generation

    def check(self) -> None:
        """Raise :class:`BuildSuperseded` if a newer build has started."""
        if self.superseded:
            raise BuildSuperseded(
                f"{self.artefact} build #{self.generation} superseded by "
                f"#{self._tracker.current(self.artefact)}"
            )

    def __repr__(self) -> str:
        return f"BuildToken({self.artefact!r}, generation={self.generation})"


class BuildTracker:
    """Generation counters, one per artefact name."""

    def __init__(self) -> None:
        self._generations: Dict[str, int] = {}

    def start(self, artefact: str) -> BuildToken:
        """Begin a new build of *artefact*, superseding any in flight."""
        generation = self._generations.get(artefact, 0) + 1
        self._generations[artefact] = generation
        return BuildToken(self, artefact, generation)

    def current(self, artefact: str) -> int:
        return self._generations.get(artefact, 0)

    def cancel(self, artefact: str) -> None:
        """Supersede the in-flight build without starting another."""
        self._generations[artefact] = self._generations.get(artefact, 0) + 1
