"""
Drag-to-select crop region tracking.

``RegionSelection`` is an immutable value: every pointer event returns a
new selection, so an editor keeps exactly one current value and tests
can drive it without any UI toolkit. It round-trips through plain dicts
for storing in a session or sending to a client.

    Idle --start--> Dragging --move*--> Dragging --end--> Idle
"""

import enum
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from photoshelf.editing.crop import CropRegion

Point = Tuple[int, int]


class SelectionState(str, enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def _snap(x: float, y: float) -> Point:
    """Snap pointer coordinates to the pixel grid."""
    return int(round(x)), int(round(y))


@dataclass(frozen=True)
class RegionSelection:
    """
    Selection state for one editing session.

    Attributes:
        state: Whether a drag is in progress.
        anchor: Where the current drag started (None when idle).
        candidate: Region under the pointer while dragging.
        committed: Region fixed by the last completed drag.
    """

    state: SelectionState = SelectionState.IDLE
    anchor: Optional[Point] = None
    candidate: Optional[CropRegion] = None
    committed: Optional[CropRegion] = None

    @property
    def is_dragging(self) -> bool:
        return self.state is SelectionState.DRAGGING

    def start(self, x: float, y: float) -> "RegionSelection":
        """Begin a drag at ``(x, y)``; restarts if a drag was already running."""
        anchor = _snap(x, y)
        return replace(
            self,
            state=SelectionState.DRAGGING,
            anchor=anchor,
            candidate=CropRegion(anchor[0], anchor[1], 0, 0),
        )

    def move(self, x: float, y: float) -> "RegionSelection":
        """Recompute the candidate from the anchor to ``(x, y)``."""
        if not self.is_dragging:
            return self
        px, py = _snap(x, y)
        ax, ay = self.anchor
        return replace(self, candidate=CropRegion.from_corners(ax, ay, px, py))

    def end(self, x: Optional[float] = None, y: Optional[float] = None) -> "RegionSelection":
        """
        Finish the drag and commit the last candidate.

        When the release position is given it counts as a final move.
        """
        if not self.is_dragging:
            return self
        current = self.move(x, y) if x is not None and y is not None else self
        return RegionSelection(
            state=SelectionState.IDLE,
            committed=current.candidate,
        )

    def reset(self) -> "RegionSelection":
        return RegionSelection()

    @property
    def region(self) -> Optional[CropRegion]:
        """The region to preview: the live candidate, else the committed one."""
        return self.candidate if self.is_dragging else self.committed

    # ── Serialization ───────────────────────────────────────────────
    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "anchor": list(self.anchor) if self.anchor else None,
            "candidate": self.candidate.to_dict() if self.candidate else None,
            "committed": self.committed.to_dict() if self.committed else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegionSelection":
        anchor = data.get("anchor")
        candidate = data.get("candidate")
        committed = data.get("committed")
        return cls(
            state=SelectionState(data.get("state", SelectionState.IDLE.value)),
            anchor=tuple(anchor) if anchor else None,
            candidate=CropRegion(**candidate) if candidate else None,
            committed=CropRegion(**committed) if committed else None,
        )
