"""
Interactive box editor as an explicit state machine.

The editor never touches a rendering surface. Pointer events arrive in
screen coordinates, are mapped back to source-image pixels through the
viewport, and each event produces a new EditorState plus the BoxDelta it
caused. BoxEditor wraps the pure `step` function for callers that prefer
a mutable session object.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

from texttag.region import DEFAULT_CLASS, BoundingBox, BoxClass
from texttag.tagging import assign_class, toggle_selection

MIN_BOX_SIZE = 5
HANDLE_RADIUS = 8  # screen pixels
DELETE_KEYS = ('Delete', 'Backspace')

HANDLES = ('top-left', 'top-center', 'top-right',
           'middle-left', 'middle-right',
           'bottom-left', 'bottom-center', 'bottom-right')


@dataclass(frozen=True)
class Viewport:
    """Uniformly scaled, letterboxed view of the source image."""

    width: float
    height: float
    image_width: float
    image_height: float

    @property
    def is_empty(self) -> bool:
        """No layout yet; maps with scale 1 and no offset."""
        return not (self.width and self.height and self.image_width and self.image_height)

    @property
    def scale(self) -> float:
        if self.is_empty:
            return 1.0
        return min(self.width / self.image_width, self.height / self.image_height)

    @property
    def offset_x(self) -> float:
        if self.is_empty:
            return 0.0
        return (self.width - self.image_width * self.scale) / 2

    @property
    def offset_y(self) -> float:
        if self.is_empty:
            return 0.0
        return (self.height - self.image_height * self.scale) / 2

    def to_image(self, sx: float, sy: float) -> Tuple[float, float]:
        """Screen point -> source-image pixel."""
        return ((sx - self.offset_x) / self.scale,
                (sy - self.offset_y) / self.scale)

    def to_screen(self, ix: float, iy: float) -> Tuple[float, float]:
        return (ix * self.scale + self.offset_x,
                iy * self.scale + self.offset_y)


IDENTITY_VIEWPORT = Viewport(0, 0, 0, 0)


# Modes

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Drawing:
    origin: Tuple[float, float]
    current: Tuple[float, float]

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        """Candidate (x, y, w, h); w and h are negative when dragging up/left."""
        ox, oy = self.origin
        cx, cy = self.current
        return (ox, oy, cx - ox, cy - oy)


@dataclass(frozen=True)
class Dragging:
    box_id: int
    anchor_offset: Tuple[float, float]
    moved: bool = False


@dataclass(frozen=True)
class Resizing:
    box_id: int
    handle: str


Mode = Union[Idle, Drawing, Dragging, Resizing]


# Events

@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float
    multi: bool = False


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    x: float
    y: float


@dataclass(frozen=True)
class KeyDown:
    key: str


@dataclass(frozen=True)
class Resize:
    width: float
    height: float


Event = Union[PointerDown, PointerMove, PointerUp, KeyDown, Resize]


@dataclass(frozen=True)
class BoxDelta:
    """Working-set changes caused by a single event."""

    added: Tuple[BoundingBox, ...] = ()
    updated: Tuple[BoundingBox, ...] = ()
    removed: Tuple[int, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.added or self.updated or self.removed)


NO_CHANGE = BoxDelta()


@dataclass(frozen=True)
class EditorState:
    boxes: Tuple[BoundingBox, ...] = ()
    selection: Tuple[int, ...] = ()
    hovered: Optional[int] = None
    mode: Mode = field(default_factory=Idle)
    viewport: Viewport = IDENTITY_VIEWPORT
    next_id: int = 1

    @classmethod
    def initial(cls, boxes: Iterable[BoundingBox] = (),
                viewport: Viewport = IDENTITY_VIEWPORT) -> 'EditorState':
        boxes = tuple(boxes)
        ids = [b.id for b in boxes]
        if len(set(ids)) != len(ids):
            raise ValueError("Box ids must be unique within the working set")
        return cls(boxes=boxes, viewport=viewport,
                   next_id=max(ids, default=0) + 1)

    def box(self, box_id: int) -> Optional[BoundingBox]:
        for b in self.boxes:
            if b.id == box_id:
                return b
        return None


def box_under_point(boxes: Sequence[BoundingBox], x: float,
                    y: float) -> Optional[BoundingBox]:
    """Topmost box containing the point (later boxes are drawn on top)."""
    for box in reversed(boxes):
        if box.contains_point(x, y):
            return box
    return None


def handle_points(box: BoundingBox) -> Dict[str, Tuple[float, float]]:
    cx, cy = box.center
    return {
        'top-left': (box.x, box.y),
        'top-center': (cx, box.y),
        'top-right': (box.x2, box.y),
        'middle-left': (box.x, cy),
        'middle-right': (box.x2, cy),
        'bottom-left': (box.x, box.y2),
        'bottom-center': (cx, box.y2),
        'bottom-right': (box.x2, box.y2),
    }


def handle_at_point(box: BoundingBox, x: float, y: float,
                    radius: float) -> Optional[str]:
    for name, (hx, hy) in handle_points(box).items():
        if abs(x - hx) <= radius and abs(y - hy) <= radius:
            return name
    return None


def resized_extent(box: BoundingBox, handle: str, x: float,
                   y: float) -> Optional[Tuple[float, float, float, float]]:
    """
    Extent after dragging `handle` to (x, y).

    Returns:
        (x, y, w, h), or None if the result would be narrower or shorter
        than MIN_BOX_SIZE
    """
    left, top, right, bottom = box.x, box.y, box.x2, box.y2
    if handle.endswith('left'):
        left = x
    elif handle.endswith('right'):
        right = x
    if handle.startswith('top'):
        top = y
    elif handle.startswith('bottom'):
        bottom = y

    w, h = right - left, bottom - top
    if w < MIN_BOX_SIZE or h < MIN_BOX_SIZE:
        return None
    return (left, top, w, h)


def editable_box_id(state: EditorState) -> Optional[int]:
    """Box that shows an editable outline: the sole selection, else the hover."""
    if len(state.selection) == 1:
        return state.selection[0]
    if not state.selection:
        return state.hovered
    return None


def _replace_box(state: EditorState, box: BoundingBox) -> EditorState:
    boxes = tuple(box if b.id == box.id else b for b in state.boxes)
    return replace(state, boxes=boxes)


def _pointer_down(state: EditorState, x: float, y: float,
                  multi: bool) -> Tuple[EditorState, BoxDelta]:
    if len(state.selection) == 1 and not multi:
        selected = state.box(state.selection[0])
        radius = HANDLE_RADIUS / state.viewport.scale
        handle = handle_at_point(selected, x, y, radius) if selected else None
        if handle is not None:
            return replace(state, mode=Resizing(selected.id, handle), hovered=None), NO_CHANGE

    hit = box_under_point(state.boxes, x, y)
    if hit is not None:
        if not multi and state.selection == (hit.id,):
            mode = Dragging(hit.id, (x - hit.x, y - hit.y))
            return replace(state, mode=mode, hovered=None), NO_CHANGE
        selection = toggle_selection(state.selection, hit.id, multi)
        return replace(state, selection=selection, hovered=None), NO_CHANGE

    selection = state.selection if multi else ()
    mode = Drawing(origin=(x, y), current=(x, y))
    return replace(state, mode=mode, selection=selection, hovered=None), NO_CHANGE


def _pointer_move(state: EditorState, x: float,
                  y: float) -> Tuple[EditorState, BoxDelta]:
    mode = state.mode

    if isinstance(mode, Drawing):
        return replace(state, mode=replace(mode, current=(x, y))), NO_CHANGE

    if isinstance(mode, Dragging):
        box = state.box(mode.box_id)
        ax, ay = mode.anchor_offset
        new_x, new_y = x - ax, y - ay
        if (new_x, new_y) == (box.x, box.y):
            return state, NO_CHANGE
        moved = box.moved_to(new_x, new_y)
        state = replace(_replace_box(state, moved), mode=replace(mode, moved=True))
        return state, BoxDelta(updated=(moved,))

    if isinstance(mode, Resizing):
        box = state.box(mode.box_id)
        extent = resized_extent(box, mode.handle, x, y)
        if extent is None:
            return state, NO_CHANGE
        resized = box.with_extent(*extent)
        return _replace_box(state, resized), BoxDelta(updated=(resized,))

    if state.selection:
        return replace(state, hovered=None), NO_CHANGE
    hit = box_under_point(state.boxes, x, y)
    return replace(state, hovered=hit.id if hit else None), NO_CHANGE


def _pointer_up(state: EditorState, x: float,
                y: float) -> Tuple[EditorState, BoxDelta]:
    mode = state.mode

    if isinstance(mode, Drawing):
        state = replace(state, mode=replace(mode, current=(x, y)))
        ox, oy, w, h = state.mode.rect
        state = replace(state, mode=Idle())
        if abs(w) > MIN_BOX_SIZE and abs(h) > MIN_BOX_SIZE:
            box = BoundingBox(
                x=ox if w > 0 else ox + w,
                y=oy if h > 0 else oy + h,
                w=abs(w),
                h=abs(h),
                area=int(abs(w * h)),
                id=state.next_id,
                label=DEFAULT_CLASS,
            )
            state = replace(state, boxes=state.boxes + (box,),
                            next_id=state.next_id + 1)
            return state, BoxDelta(added=(box,))
        return state, NO_CHANGE

    if isinstance(mode, Dragging):
        state, delta = _pointer_move(state, x, y)
        if not state.mode.moved:
            selection = toggle_selection(state.selection, mode.box_id, False)
            return replace(state, mode=Idle(), selection=selection), NO_CHANGE
        return replace(state, mode=Idle()), delta

    if isinstance(mode, Resizing):
        state, delta = _pointer_move(state, x, y)
        return replace(state, mode=Idle()), delta

    return state, NO_CHANGE


def _key_down(state: EditorState, key: str) -> Tuple[EditorState, BoxDelta]:
    if key not in DELETE_KEYS or not state.selection or not isinstance(state.mode, Idle):
        return state, NO_CHANGE

    removed = tuple(i for i in state.selection if state.box(i) is not None)
    boxes = tuple(b for b in state.boxes if b.id not in state.selection)
    return replace(state, boxes=boxes, selection=(), hovered=None), BoxDelta(removed=removed)


def step(state: EditorState, event: Event) -> Tuple[EditorState, BoxDelta]:
    """
    Apply one input event.

    Args:
        state: Current editor state
        event: Pointer, keyboard or viewport event

    Returns:
        Tuple of (new_state, delta); the input state is left untouched
    """
    if isinstance(event, Resize):
        viewport = replace(state.viewport, width=event.width, height=event.height)
        return replace(state, viewport=viewport), NO_CHANGE

    if isinstance(event, KeyDown):
        return _key_down(state, event.key)

    x, y = state.viewport.to_image(event.x, event.y)

    if isinstance(event, PointerDown):
        if not isinstance(state.mode, Idle):
            return state, NO_CHANGE
        return _pointer_down(state, x, y, event.multi)
    if isinstance(event, PointerMove):
        return _pointer_move(state, x, y)
    if isinstance(event, PointerUp):
        return _pointer_up(state, x, y)

    raise TypeError(f"Unknown editor event: {event!r}")


class BoxEditor:
    """Editing session that owns the working set of boxes."""

    def __init__(self, boxes: Iterable[BoundingBox] = (),
                 viewport: Viewport = IDENTITY_VIEWPORT):
        self.state = EditorState.initial(boxes, viewport)

    def dispatch(self, event: Event) -> BoxDelta:
        self.state, delta = step(self.state, event)
        return delta

    @property
    def boxes(self):
        return list(self.state.boxes)

    @property
    def selection(self) -> Tuple[int, ...]:
        return self.state.selection

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def editable_box_id(self) -> Optional[int]:
        return editable_box_id(self.state)

    def select(self, box_ids: Iterable[int]) -> None:
        known = {b.id for b in self.state.boxes}
        selection = tuple(dict.fromkeys(i for i in box_ids if i in known))
        self.state = replace(self.state, selection=selection, hovered=None)

    def assign_class(self, box_class: Optional[BoxClass]) -> BoxDelta:
        """Tag every selected box, then clear the selection."""
        selected = set(self.state.selection)
        boxes = tuple(assign_class(self.state.boxes, selected, box_class))
        updated = tuple(b for b in boxes if b.id in selected)
        self.state = replace(self.state, boxes=boxes, selection=())
        return BoxDelta(updated=updated)
