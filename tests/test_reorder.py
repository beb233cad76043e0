"""
Tests for drag reordering: authorization, session lifecycle, auto-scroll.
"""

import pytest

from sprite_sequencer.core import (
    AutoScrollConfig, FrameReorderEngine, PointerEnvironment, PointerTracker,
    Rect, ScrollContainer, edge_scroll_speed,
)


def ids(frames):
    return [f.id for f in frames]


@pytest.fixture
def container():
    # Vertical list 300 tall inside 1000 of content, also wide for touch tests
    return ScrollContainer(Rect(left=0, top=100, width=400, height=300),
                           content_width=2000, content_height=1000)


@pytest.fixture
def engine(scheduler, container, three_frames):
    engine = FrameReorderEngine(scheduler, PointerTracker(), container)
    engine.set_frames(three_frames)
    return engine


class TestAuthorization:
    """Dragging is off until a handle or hover enables it."""

    def test_disabled_by_default(self, engine, three_frames):
        f0, f1, f2 = three_frames
        assert not engine.drag_enabled
        assert engine.consider([f2, f0, f1]) is False
        assert ids(engine.frames) == ids(three_frames)
        assert not engine.active

    def test_handle_enables(self, engine):
        engine.activate_handle()
        assert engine.drag_enabled

    def test_hover_enables_on_pointer_layout(self, engine):
        engine.pointer_enter_row()
        assert engine.drag_enabled
        engine.pointer_leave_row()
        assert not engine.drag_enabled

    def test_hover_ignored_on_touch_layout(self, scheduler, three_frames):
        engine = FrameReorderEngine(scheduler, environment=PointerEnvironment.TOUCH_PRIMARY)
        engine.set_frames(three_frames)
        engine.pointer_enter_row()
        assert not engine.drag_enabled

        engine.activate_handle()
        assert engine.drag_enabled

    def test_leave_row_does_not_revoke_handle(self, engine):
        engine.activate_handle()
        engine.pointer_leave_row()
        assert engine.drag_enabled

    def test_leave_row_keeps_active_session(self, engine):
        engine.pointer_enter_row()
        engine.move(0, 1)
        engine.pointer_leave_row()
        assert engine.active
        assert engine.drag_enabled


class TestSessionLifecycle:
    """idle -> active -> idle."""

    def test_consider_opens_session_with_tentative_order(self, engine, three_frames):
        f0, f1, f2 = three_frames
        engine.activate_handle()

        assert engine.consider([f2, f0, f1])

        assert engine.active
        assert ids(engine.frames) == ids([f2, f0, f1])
        assert ids(engine.committed) == ids([f0, f1, f2])

    def test_finalize_commits(self, engine, three_frames):
        f0, f1, f2 = three_frames
        committed = []
        engine.on_commit = committed.append
        engine.activate_handle()
        engine.consider([f1, f0, f2])

        result = engine.finalize([f2, f0, f1])

        assert ids(result) == ids([f2, f0, f1])
        assert ids(engine.frames) == ids([f2, f0, f1])
        assert ids(committed[0]) == ids([f2, f0, f1])
        assert not engine.active
        assert not engine.drag_enabled

    def test_move_builds_order(self, engine, three_frames):
        f0, f1, f2 = three_frames
        engine.activate_handle()
        engine.move(2, 0)
        engine.finalize()
        assert ids(engine.frames) == ids([f2, f0, f1])

    def test_move_out_of_range(self, engine):
        engine.activate_handle()
        with pytest.raises(IndexError):
            engine.move(0, 3)

    def test_ids_survive_reorder(self, engine, three_frames):
        engine.activate_handle()
        engine.move(0, 2)
        engine.finalize()
        assert sorted(ids(engine.frames)) == sorted(ids(three_frames))

    def test_consider_with_foreign_frames_is_ignored(self, engine, three_frames):
        from sprite_sequencer.core import Frame
        engine.activate_handle()
        stranger = Frame(pixels=three_frames[0].pixels)
        assert engine.consider([stranger, three_frames[1], three_frames[2]]) is False
        assert not engine.active

    def test_cancel_restores_original(self, engine, three_frames):
        engine.activate_handle()
        engine.move(0, 2)
        engine.cancel()
        assert ids(engine.frames) == ids(three_frames)
        assert not engine.drag_enabled

    def test_set_frames_supersedes_session(self, engine, scheduler, three_frames):
        engine.activate_handle()
        engine.move(0, 2)
        replacement = three_frames[:1]

        engine.set_frames(replacement)

        assert not engine.active
        assert not engine.drag_enabled
        assert ids(engine.frames) == ids(replacement)
        assert scheduler.pending == 0


class TestEdgeScrollSpeed:
    """Speed model inside the 50-unit band."""

    def test_zero_outside_bands(self):
        assert edge_scroll_speed(200, 0, 400) == 0
        assert edge_scroll_speed(50, 0, 400) == 0
        assert edge_scroll_speed(350, 0, 400) == 0

    def test_cap_at_edge(self):
        assert edge_scroll_speed(0, 0, 400) == pytest.approx(-15)
        assert edge_scroll_speed(400, 0, 400) == pytest.approx(15)

    def test_monotonic_with_depth(self):
        speeds = [abs(edge_scroll_speed(400 - d, 0, 400)) for d in range(50, -1, -1)]
        assert speeds == sorted(speeds)
        assert speeds[-1] == pytest.approx(15)
        assert all(s <= 15 for s in speeds)

    def test_linear_in_band(self):
        assert edge_scroll_speed(25, 0, 400) == pytest.approx(-7.5)
        assert edge_scroll_speed(390, 0, 400) == pytest.approx(12)

    def test_custom_config(self):
        config = AutoScrollConfig(threshold=20, max_speed=4)
        assert edge_scroll_speed(10, 0, 100, config) == pytest.approx(-2)


class TestAutoScroll:
    """Per-frame loop while a session is active."""

    def test_scrolls_towards_bottom_edge(self, engine, scheduler, container):
        engine.tracker.on_mouse_move(200, 400)   # exactly on the bottom edge
        engine.activate_handle()
        engine.move(0, 1)

        scheduler.run_frames(3)

        assert container.scroll_top == pytest.approx(45)

    def test_keeps_scrolling_without_pointer_movement(self, engine, scheduler, container):
        engine.tracker.on_mouse_move(200, 375)   # halfway into the band
        engine.activate_handle()
        engine.move(0, 1)

        scheduler.run_frames(10)

        assert container.scroll_top == pytest.approx(75)

    def test_scrolls_up_and_clamps(self, engine, scheduler, container):
        container.scroll_top = 20
        engine.tracker.on_mouse_move(200, 100)
        engine.activate_handle()
        engine.move(0, 1)

        scheduler.run_frames(5)

        assert container.scroll_top == 0

    def test_follows_pointer_updates(self, engine, scheduler, container):
        engine.tracker.on_mouse_move(200, 250)
        engine.activate_handle()
        engine.move(0, 1)
        scheduler.run_frames(2)
        assert container.scroll_top == 0

        engine.tracker.on_touch_move([(200, 400)])
        scheduler.run_frames(1)
        assert container.scroll_top == pytest.approx(15)

    def test_multi_touch_not_tracked(self):
        tracker = PointerTracker()
        tracker.on_touch_move([(1, 1), (5, 5)])
        assert tracker.position is None

    def test_horizontal_on_touch_layout(self, scheduler, container, three_frames):
        engine = FrameReorderEngine(scheduler, PointerTracker(), container,
                                    environment=PointerEnvironment.TOUCH_PRIMARY)
        engine.set_frames(three_frames)
        engine.tracker.on_mouse_move(400, 400)   # right edge, also bottom edge
        engine.activate_handle()
        engine.move(0, 1)

        scheduler.run_frames(2)

        assert container.scroll_left == pytest.approx(30)
        assert container.scroll_top == 0

    def test_finalize_stops_loop(self, engine, scheduler, container):
        engine.tracker.on_mouse_move(200, 400)
        engine.activate_handle()
        engine.move(0, 1)
        scheduler.run_frames(1)
        engine.finalize()

        scheduler.run_frames(5)

        assert container.scroll_top == pytest.approx(15)
        assert scheduler.pending == 0

    def test_no_loop_when_idle(self, engine, scheduler, container):
        engine.tracker.on_mouse_move(200, 400)
        scheduler.run_frames(5)
        assert container.scroll_top == 0
