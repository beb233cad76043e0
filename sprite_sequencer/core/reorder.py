"""
Frame Reorder - Drag-to-reorder for the frame list

The frame list sits in a scrollable container. Dragging is off by default
so that touch scrolling keeps working; it is switched on by grabbing a
drag handle or, on pointer-primary layouts, by hovering a row.

While a drag session is active:
- consider() shows the tentative order
- a per-frame loop scrolls the container when the pointer is near an edge
- finalize() commits the order and switches dragging off again

Auto-scroll model, per edge of the scrolled axis:

    band = 50 units inside the edge
    intensity = (band_edge - pointer) / 50      (>= 0)
    speed = 15 * intensity units per frame, towards the edge
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .grid import Frame
from .scheduler import Scheduler, ScheduledHandle


logger = logging.getLogger(__name__)


class PointerEnvironment(Enum):
    """What kind of input the layout is built for"""
    POINTER_PRIMARY = "pointer"   # wide desktop layout, vertical frame list
    TOUCH_PRIMARY = "touch"       # narrow/touch layout, horizontal frame strip


class Axis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def scroll_axis_for(environment: PointerEnvironment) -> Axis:
    """The frame list scrolls vertically on desktop and horizontally on touch"""
    if environment is PointerEnvironment.POINTER_PRIMARY:
        return Axis.VERTICAL
    return Axis.HORIZONTAL


@dataclass
class AutoScrollConfig:
    """Edge band size and top speed of drag auto-scroll"""
    threshold: float = 50.0
    max_speed: float = 15.0


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


class ScrollContainer:
    """
    Minimal scrollable region.

    Hosts with a real widget subclass this (or duck-type it) and override
    bounding_rect() and scroll_by(). The default keeps its own scroll
    offsets clamped to the content size.
    """

    def __init__(self, rect: Rect, content_width: float = 0.0, content_height: float = 0.0):
        self.rect = rect
        self.content_width = content_width
        self.content_height = content_height
        self.scroll_left = 0.0
        self.scroll_top = 0.0

    def bounding_rect(self) -> Rect:
        return self.rect

    def scroll_by(self, dx: float, dy: float) -> None:
        max_left = max(self.content_width - self.rect.width, 0.0)
        max_top = max(self.content_height - self.rect.height, 0.0)
        self.scroll_left = min(max(self.scroll_left + dx, 0.0), max_left)
        self.scroll_top = min(max(self.scroll_top + dy, 0.0), max_top)


class PointerTracker:
    """Last known pointer position, from mouse and single-finger touch"""

    def __init__(self):
        self.x: Optional[float] = None
        self.y: Optional[float] = None

    @property
    def position(self) -> Optional[Tuple[float, float]]:
        if self.x is None or self.y is None:
            return None
        return (self.x, self.y)

    def on_mouse_move(self, x: float, y: float) -> None:
        self.x, self.y = x, y

    def on_touch_move(self, touches: Sequence[Tuple[float, float]]) -> None:
        # Multi-touch belongs to pinch gestures
        if len(touches) == 1:
            self.x, self.y = touches[0]


def edge_scroll_speed(pointer: float, start: float, end: float,
                      config: Optional[AutoScrollConfig] = None) -> float:
    """
    Signed scroll speed along one axis.

    Args:
        pointer: Pointer coordinate on this axis
        start, end: Container edges on this axis
        config: Band size and top speed

    Returns:
        Negative towards start, positive towards end, 0 outside both bands.
        The speed reaches max_speed at the edge itself and keeps growing
        for a pointer outside the container; it is not capped.
    """
    config = config or AutoScrollConfig()
    threshold = config.threshold

    if pointer < start + threshold:
        intensity = max(0.0, (start + threshold - pointer) / threshold)
        return -config.max_speed * intensity
    if pointer > end - threshold:
        intensity = max(0.0, (pointer - (end - threshold)) / threshold)
        return config.max_speed * intensity
    return 0.0


@dataclass
class DragSession:
    """State of one in-progress reorder gesture"""
    original: List[Frame]
    pointer: Optional[Tuple[float, float]] = None
    auto_scrolling: bool = False
    scroll_handle: Optional[ScheduledHandle] = field(default=None, repr=False)


class FrameReorderEngine:
    """
    Reorders frames in response to drag events.

    Example:
        engine = FrameReorderEngine(scheduler, tracker, container)
        engine.set_frames(frames)
        engine.activate_handle()
        engine.move(0, 2)      # session opens, order is tentative
        engine.finalize()      # order committed, dragging disabled
    """

    def __init__(
        self,
        scheduler: Scheduler,
        tracker: Optional[PointerTracker] = None,
        container: Optional[ScrollContainer] = None,
        environment: PointerEnvironment = PointerEnvironment.POINTER_PRIMARY,
        config: Optional[AutoScrollConfig] = None,
        on_commit: Optional[Callable[[List[Frame]], None]] = None,
    ):
        self.scheduler = scheduler
        self.tracker = tracker or PointerTracker()
        self.container = container
        self.environment = environment
        self.config = config or AutoScrollConfig()
        self.on_commit = on_commit

        self._frames: List[Frame] = []
        self._authorized = False
        self._hover_authorized = False
        self.session: Optional[DragSession] = None

    # ------------------------------------------------------------------
    # Frame list
    # ------------------------------------------------------------------

    @property
    def frames(self) -> List[Frame]:
        """Visible order (tentative while a session is active)"""
        return list(self._frames)

    @property
    def committed(self) -> List[Frame]:
        """Last committed order, ignoring any drag in progress"""
        if self.session is not None:
            return list(self.session.original)
        return list(self._frames)

    @property
    def active(self) -> bool:
        return self.session is not None

    def set_frames(self, frames: List[Frame]) -> None:
        """
        Replace the whole list, e.g. after a re-slice.

        An active session is dropped without committing.
        """
        if self.session is not None:
            logger.debug("Frame list replaced during drag, discarding tentative order")
            self._end_session()
            self._deauthorize()
        self._frames = list(frames)

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    @property
    def drag_enabled(self) -> bool:
        return self._authorized

    def activate_handle(self) -> None:
        """Drag handle pressed"""
        self._authorized = True
        self._hover_authorized = False

    def pointer_enter_row(self) -> None:
        """Pointer entered a row; only enables dragging on pointer-primary layouts"""
        if self.environment is PointerEnvironment.POINTER_PRIMARY and not self._authorized:
            self._authorized = True
            self._hover_authorized = True

    def pointer_leave_row(self) -> None:
        if self._hover_authorized and self.session is None:
            self._deauthorize()

    def _deauthorize(self) -> None:
        self._authorized = False
        self._hover_authorized = False

    # ------------------------------------------------------------------
    # Drag lifecycle
    # ------------------------------------------------------------------

    def consider(self, items: Sequence[Frame]) -> bool:
        """
        Show a tentative order during a drag.

        The first call after authorization opens the session. Returns False
        when the event was ignored (dragging disabled, or items that are not
        a permutation of the current frames).
        """
        if self.session is None and not self._authorized:
            return False
        if not self._same_frames(items):
            logger.warning("Ignoring reorder of frames that are no longer in the list")
            return False

        if self.session is None:
            self._begin_session()
        self._frames = list(items)
        return True

    def move(self, source: int, target: int) -> bool:
        """Tentatively move the frame at source to index target"""
        order = list(self._frames)
        if not (0 <= source < len(order) and 0 <= target < len(order)):
            raise IndexError(f"Cannot move frame {source} to {target} in list of {len(order)}")
        order.insert(target, order.pop(source))
        return self.consider(order)

    def finalize(self, items: Optional[Sequence[Frame]] = None) -> List[Frame]:
        """
        Drop: commit the tentative order and disable dragging.

        Args:
            items: Final order reported by the drop, defaults to the
                current tentative order

        Returns:
            The committed frame order.
        """
        if items is not None and self._same_frames(items):
            self._frames = list(items)

        was_active = self.session is not None
        self._end_session()
        self._deauthorize()

        if was_active:
            logger.debug("Reorder committed: %d frames", len(self._frames))
            if self.on_commit is not None:
                self.on_commit(list(self._frames))
        return list(self._frames)

    def cancel(self) -> None:
        """Abort the gesture and restore the order it started from"""
        if self.session is not None:
            self._frames = list(self.session.original)
        self._end_session()
        self._deauthorize()

    def _same_frames(self, items: Sequence[Frame]) -> bool:
        return sorted(f.id for f in items) == sorted(f.id for f in self._frames)

    def _begin_session(self) -> None:
        self.session = DragSession(original=list(self._frames), pointer=self.tracker.position)
        logger.debug("Drag session started")
        if self.container is not None:
            self.session.auto_scrolling = True
            self._schedule_scroll()

    def _end_session(self) -> None:
        if self.session is None:
            return
        if self.session.scroll_handle is not None:
            self.session.scroll_handle.cancel()
        self.session.auto_scrolling = False
        self.session = None

    # ------------------------------------------------------------------
    # Auto-scroll
    # ------------------------------------------------------------------

    def scroll_velocity(self) -> Tuple[float, float]:
        """(dx, dy) to scroll this frame given the last pointer position"""
        pointer = self.tracker.position
        if pointer is None or self.container is None:
            return (0.0, 0.0)

        rect = self.container.bounding_rect()
        if scroll_axis_for(self.environment) is Axis.VERTICAL:
            return (0.0, edge_scroll_speed(pointer[1], rect.top, rect.bottom, self.config))
        return (edge_scroll_speed(pointer[0], rect.left, rect.right, self.config), 0.0)

    def _schedule_scroll(self) -> None:
        self.session.scroll_handle = self.scheduler.request_frame(
            self._auto_scroll_tick, label="reorder auto-scroll"
        )

    def _auto_scroll_tick(self) -> None:
        session = self.session
        if session is None or not session.auto_scrolling:
            return

        session.pointer = self.tracker.position
        dx, dy = self.scroll_velocity()
        if dx or dy:
            self.container.scroll_by(dx, dy)

        self._schedule_scroll()
