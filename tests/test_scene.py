import pytest
from pygame.math import Vector3

from core.scene import InteractiveSet, PointerState, ScrollState
from core.sync import sync
from physics.math3d import quat_from_axis_angle
from physics.shapes import SphereShape
from physics.world import PhysicsWorld

from conftest import make_box, make_sphere


def _paired(state, position=(0, 5, 0)):
    world = PhysicsWorld()
    state.world = world
    h = world.add_body(SphereShape(1), mass=1.0, position=position)
    visual = make_sphere(position=(0, 0, 0))
    state.pair(world.body(h), visual)
    return world, world.body(h), visual


def test_sync_copies_transform(state):
    world, body, visual = _paired(state)
    body.orientation = quat_from_axis_angle(Vector3(0, 1, 0), 0.5)
    assert sync(state.pairs) == 1
    assert visual.position == Vector3(0, 5, 0)
    assert visual.orientation == body.orientation


def test_sync_does_not_alias_positions(state):
    world, body, visual = _paired(state)
    sync(state.pairs)
    body.position.y = -3
    assert visual.position.y == 5


def test_sync_after_step_matches_body(state):
    world, body, visual = _paired(state)
    world.step(1 / 60, substeps=10)
    sync(state.pairs)
    assert visual.position == body.position


def test_pair_twice_rejected(state):
    world, body, visual = _paired(state)
    with pytest.raises(ValueError):
        state.pair(body, make_sphere())
    other = world.add_body(SphereShape(1), mass=1.0)
    with pytest.raises(ValueError):
        state.pair(world.body(other), visual)


def test_pair_after_seal_raises(state):
    world = PhysicsWorld()
    h = world.add_body(SphereShape(1), mass=1.0)
    state.seal()
    with pytest.raises(RuntimeError):
        state.pair(world.body(h), make_sphere())


def test_visuals_can_be_added_after_seal(state):
    state.seal()
    late = make_box()
    state.add_visual(late, interactive=True)
    assert late in state.interactive
    assert state.visuals[-1] is late


def test_body_for_lookup(state):
    _, body, visual = _paired(state)
    assert state.body_for(visual) is body
    assert state.body_for(make_sphere()) is None


def test_teardown_releases_everything(state):
    world, _, visual = _paired(state)
    state.interactive.add(visual)
    state.selection = visual
    state.teardown()
    assert state.pairs == ()
    assert state.visuals == []
    assert len(state.interactive) == 0
    assert state.selection is None
    assert world.bodies == []


def test_interactive_set_is_ordered_and_unique():
    a, b = make_sphere(name="a"), make_sphere(name="b")
    items = InteractiveSet()
    assert items.add(a)
    assert items.add(b)
    assert not items.add(a)
    assert list(items) == [a, b]
    items.discard(a)
    assert list(items) == [b]


def test_pointer_starts_unarmed_and_clamps():
    pointer = PointerState()
    assert not pointer.armed
    pointer.move_to(3.0, -2.0)
    assert pointer.armed
    assert pointer.ndc == (1.0, -1.0)


def test_scroll_state_clamps_to_range():
    scroll = ScrollState()
    scroll.set_range(content_height=2000, viewport_height=500)
    assert scroll.max_offset == 1500
    scroll.scroll_by(-100)
    assert scroll.offset == 0
    scroll.scroll_to(99999)
    assert scroll.offset == 1500
    # Shrinking content pulls the offset back in range
    scroll.set_range(content_height=400, viewport_height=500)
    assert scroll.max_offset == 0
    assert scroll.offset == 0
