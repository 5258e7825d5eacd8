import pytest

from core.loop_config import LoopConfig, PickingPolicy


def test_defaults_are_valid():
    config = LoopConfig().validate()
    assert config.picking is PickingPolicy.PERSISTENT
    assert config.scroll_camera and not config.orbit_controls
    assert config.upper_range_max == config.particle_reset_range[1]


@pytest.mark.parametrize(
    "overrides",
    [
        {"substeps": 0},
        {"max_substeps": 0},
        {"fixed_timestep": 0.0},
        {"max_frame_dt": 0.0},
        {"mesh_count": -1},
        {"particle_count": -5},
        {"particle_floor": 30.0, "particle_reset_range": (25.0, 50.0)},
        {"particle_reset_range": (50.0, 25.0)},
        {"particle_speed_range": (2.0, 1.0)},
        {"particle_step": -0.1},
        {"highlight_scale": 0.0},
        {"scroll_mode": "cubic"},
        {"scroll_camera": True, "orbit_controls": True},
    ],
)
def test_invalid_configs_raise(overrides):
    with pytest.raises(ValueError):
        LoopConfig(**overrides).validate()


def test_policy_values_round_trip_from_cli_names():
    assert PickingPolicy("hover") is PickingPolicy.HOVER
    assert PickingPolicy("off") is PickingPolicy.OFF
