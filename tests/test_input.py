import pygame
import pytest

from core.input import InputRouter, pixel_to_ndc


@pytest.mark.parametrize(
    "px, py, expected",
    [
        (0, 0, (-1.0, 1.0)),
        (800, 600, (1.0, -1.0)),
        (400, 300, (0.0, 0.0)),
        (200, 450, (-0.5, -0.5)),
    ],
)
def test_pixel_to_ndc(px, py, expected):
    assert pixel_to_ndc(px, py, 800, 600) == pytest.approx(expected)


def test_pixel_to_ndc_degenerate_viewport():
    assert pixel_to_ndc(10, 10, 0, 600) == (0.0, 0.0)


def _router(state, **kwargs):
    kwargs.setdefault("width", 800)
    kwargs.setdefault("height", 600)
    kwargs.setdefault("content_height", 1800)
    return InputRouter(state, **kwargs)


def test_pointer_move_arms_pointer(state):
    router = _router(state)
    router.on_pointer_move(400, 150)
    assert state.pointer.armed
    assert state.pointer.ndc == pytest.approx((0.0, 0.5))


def test_wheel_scrolls_within_range(state):
    router = _router(state, wheel_pixels=100)
    assert state.scroll.max_offset == 1200
    router.on_scroll(-3)
    assert state.scroll.offset == 300
    router.on_scroll(10)
    assert state.scroll.offset == 0
    router.on_scroll(-100)
    assert state.scroll.offset == 1200


def test_resize_updates_aspect_range_and_callback(state):
    seen = []
    router = _router(state, on_resize=lambda w, h: seen.append((w, h)))
    router.on_resize(1000, 500)
    assert state.camera.aspect == pytest.approx(2.0)
    assert state.scroll.max_offset == 1300
    assert seen == [(1000, 500)]
    router.on_pointer_move(1000, 0)
    assert state.pointer.ndc == pytest.approx((1.0, 1.0))


def test_resize_to_zero_is_ignored(state):
    router = _router(state)
    router.on_resize(0, 0)
    assert (router.width, router.height) == (800, 600)


def test_click_invokes_callback(state):
    clicks = []
    router = _router(state, on_click=lambda: clicks.append(1))
    router.on_click()
    assert clicks == [1]


class _Orbit:
    def __init__(self):
        self.drags = []

    def on_drag(self, dx, dy):
        self.drags.append((dx, dy))


def test_handle_event_dispatch(state):
    clicks = []
    orbit = _Orbit()
    router = _router(state, on_click=lambda: clicks.append(state.pointer.ndc), orbit=orbit)

    router.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(400, 300), rel=(5, -2), buttons=(0, 0, 1)))
    assert state.pointer.ndc == pytest.approx((0.0, 0.0))
    assert orbit.drags == [(5, -2)]

    router.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(800, 0), button=1))
    assert clicks == [pytest.approx((1.0, 1.0))]

    router.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(0, 0), button=3))
    assert len(clicks) == 1

    router.handle_event(pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=-1))
    assert state.scroll.offset == router.wheel_pixels

    router.handle_event(pygame.event.Event(pygame.VIDEORESIZE, w=400, h=400, size=(400, 400)))
    assert state.camera.aspect == pytest.approx(1.0)
