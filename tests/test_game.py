import pytest

from orcslayer.aseprite import (
    HEADER_MAGIC,
    AsepriteError,
    AsepriteFile,
    Frame,
    FrameHeader,
    Header,
    Tag,
)
from orcslayer.game import (
    AnimationRanges,
    Game,
    GameOver,
    Key,
    PlayerState,
    Sound,
    animation_ranges_from_tags,
)
from orcslayer.orc import SCREEN_HEIGHT, SCREEN_WIDTH, Orc, OrcState


def make_tag(name, first, last):
    return Tag(name=name, from_frame=first, to_frame=last, direction=0, repeat=0, color=(0, 0, 0))


def make_sheet(frame_count, tags, size=100):
    header = Header(
        file_size=0,
        magic_number=HEADER_MAGIC,
        frames=frame_count,
        width=size,
        height=size,
        color_depth=32,
        flags=0,
        speed=100,
        transparent=0,
        colors=0,
        pixel_width=1,
        pixel_height=1,
        grid_x=0,
        grid_y=0,
        grid_width=16,
        grid_height=16,
    )
    frames = [Frame(FrameHeader(16, 0xF1FA, 0, 100, 0)) for _ in range(frame_count)]
    return AsepriteFile(header=header, frames=frames, tags=list(tags))


PLAYER_TAGS = [
    make_tag("Idle", 0, 3),
    make_tag("Walk", 4, 9),
    make_tag("Attack02", 10, 13),
    make_tag("Hurt", 14, 16),
    make_tag("Death", 17, 20),
    make_tag("Attack01", 21, 22),
]
ORC_TAGS = [make_tag("walk", 0, 3), make_tag("hurt", 4, 5), make_tag("Death", 6, 8)]


@pytest.fixture
def orc_sheet():
    return make_sheet(10, ORC_TAGS)


@pytest.fixture
def orc_factory(orc_sheet):
    return lambda x, y: Orc(x, y, orc_sheet)


@pytest.fixture
def game(orc_factory):
    return Game(make_sheet(24, PLAYER_TAGS), orc_factory)


def test_ranges_from_tags_pick_player_animations():
    ranges = animation_ranges_from_tags(PLAYER_TAGS)
    assert ranges == AnimationRanges(
        idle=(0, 3), walk=(4, 9), attack=(10, 13), hurt=(14, 16), death=(17, 20)
    )


def test_ranges_fall_back_to_defaults():
    ranges = animation_ranges_from_tags([make_tag("Run", 1, 2)])
    assert ranges.idle == (0, 0)
    assert ranges.walk == (6, 13)
    assert ranges.attack == (14, 19)
    assert ranges.hurt == (20, 25)
    assert ranges.death == (26, 31)


def test_new_game_state(game):
    assert game.player_health == 100.0
    assert game.player_state == PlayerState.ALIVE
    assert game.spawn_interval == 9.0
    assert game.walk_speed == 5.0
    assert game.current_frame == game.ranges.idle[0]
    assert [orc.position_x for orc in game.orcs] == [300.0]
    assert game.orcs[0].position_y == pytest.approx(SCREEN_HEIGHT * 0.2)


def test_walking_right_moves_and_switches_animation(game):
    game.handle_player_input({Key.RIGHT})
    assert game.position_x == game.walk_speed
    assert game.is_walking
    assert not game.facing_left
    assert game.current_frame == game.ranges.walk[0]


def test_walking_left_with_a_key(game):
    game.handle_player_input({Key.A})
    assert game.position_x == -game.walk_speed
    assert game.facing_left


def test_walking_is_clamped_to_screen(game):
    game.position_x = -SCREEN_WIDTH / 2
    game.handle_player_input({Key.LEFT})
    assert game.position_x == -SCREEN_WIDTH / 2


def test_stopping_returns_to_idle(game):
    game.handle_player_input({Key.D})
    game.handle_player_input(set())
    assert not game.is_walking
    assert game.current_frame == game.ranges.idle[0]


def test_space_starts_attack_with_sound(game):
    game.handle_player_input({Key.SPACE, Key.RIGHT})
    assert game.is_attacking
    assert game.current_frame == game.ranges.attack[0]
    assert game.sounds == [Sound.ATTACK]
    assert game.position_x == 0.0


def test_no_attack_while_hurt(game):
    game.player_state = PlayerState.HURT
    game.handle_player_input({Key.SPACE})
    assert not game.is_attacking
    assert game.sounds == []


def test_spawn_alternates_sides_and_speeds_up(game):
    game.orcs_killed = 2
    game.spawn_orc()
    game.spawn_orc()
    right, left = game.orcs[1], game.orcs[2]
    assert right.position_x == SCREEN_WIDTH / 2 + 200
    assert left.position_x == -SCREEN_WIDTH / 2 - 200
    assert right.walk_speed == pytest.approx(2.2)
    assert game.spawn_interval < 9.0


def test_spawn_interval_has_minimum(game):
    game.spawn_interval = 0.5
    game.spawn_orc()
    assert game.spawn_interval == 0.5


def test_spawn_failure_leaves_game_unchanged(game):
    def failing(x, y):
        raise AsepriteError("missing")

    game.orc_factory = failing
    game.spawn_orc()
    assert len(game.orcs) == 1
    assert game.spawn_interval == 9.0


def test_spawn_timer_triggers_spawn(game):
    game.spawn_timer = game.spawn_interval
    game.update_orc_logic()
    assert len(game.orcs) == 2
    assert game.spawn_timer == 0.0


def test_idle_animation_advances_and_loops(game):
    first, last = game.ranges.idle
    seen = []
    for _ in range(200):
        game.update_player_animation()
        if not seen or seen[-1] != game.current_frame:
            seen.append(game.current_frame)
    assert seen[:3] == [first + 1, first + 2, last]
    assert first in seen
    assert all(first <= frame <= last for frame in seen)


def test_hurt_animation_ends_in_alive(game):
    game.player_state = PlayerState.HURT
    game.current_frame = game.ranges.hurt[1]
    game.frame_timer = game.frame_duration
    game.update_player_animation()
    assert game.player_state == PlayerState.ALIVE
    assert game.current_frame == game.ranges.idle[0]


def test_attack_animation_ends(game):
    game.is_attacking = True
    game.current_frame = game.ranges.attack[1]
    game.frame_timer = game.frame_duration
    game.update_player_animation()
    assert not game.is_attacking
    assert game.current_frame == game.ranges.idle[0]


def test_orc_touching_player_hurts_and_knocks_back(game, orc_factory):
    game.orcs = [orc_factory(0.0, SCREEN_HEIGHT * 0.2)]
    game.update_orc_logic()
    assert game.player_state == PlayerState.HURT
    assert game.player_health == 90.0
    assert game.current_frame == game.ranges.hurt[0]
    assert game.position_x == 100.0


def test_last_hit_starts_dying(game, orc_factory):
    game.player_health = 10.0
    game.is_attacking = True
    game.orcs = [orc_factory(0.0, SCREEN_HEIGHT * 0.2)]
    game.update_orc_logic()
    assert game.player_health == 0.0
    assert game.player_state == PlayerState.DYING
    assert game.current_frame == game.ranges.death[0]
    assert game.death_timer == 3.0
    assert not game.is_attacking


def test_death_sequence_ends_in_game_over(game):
    game.player_state = PlayerState.DYING
    game.orcs_killed = 4
    with pytest.raises(GameOver) as excinfo:
        for _ in range(1000):
            game.update_player_death()
    assert excinfo.value.orcs_killed == 4
    assert game.flash_count == 6


def test_attack_hits_orc_in_front(game, orc_factory):
    orc = orc_factory(100.0, SCREEN_HEIGHT * 0.2)
    game.orcs = [orc]
    game.is_attacking = True
    game.update_orc_logic()
    assert orc.health() == 2
    assert orc.state == OrcState.HURT
    assert game.sounds == [Sound.ORC_HIT]
    assert game.player_state == PlayerState.ALIVE


def test_attack_facing_away_misses(game, orc_factory):
    orc = orc_factory(100.0, SCREEN_HEIGHT * 0.2)
    game.orcs = [orc]
    game.is_attacking = True
    game.facing_left = True
    game.update_orc_logic()
    assert orc.health() == 3
    assert game.sounds == []


def test_final_attack_kills_orc(game, orc_factory):
    orc = orc_factory(100.0, SCREEN_HEIGHT * 0.2)
    for _ in range(2):
        orc.take_damage(0.0)
        orc.state = OrcState.WALK
    orc.knockback_x = 0.0
    orc.position_x = 100.0
    game.orcs = [orc]
    game.is_attacking = True
    game.update_orc_logic()
    assert not orc.is_alive()
    assert game.sounds == [Sound.ORC_DIE]


def test_dead_orc_is_removed_and_counted(game, orc_factory):
    orc = orc_factory(600.0, SCREEN_HEIGHT * 0.2)
    for _ in range(3):
        orc.take_damage(0.0)
        if orc.is_alive():
            orc.state = OrcState.WALK
    game.orcs = [orc]
    game.spawn_interval = 1e9
    for _ in range(2000):
        if not game.orcs:
            break
        game.update_orc_logic()
    assert game.orcs == []
    assert game.orcs_killed == 1


def test_update_runs_input_and_logic(game):
    game.update({Key.RIGHT})
    assert game.position_x == game.walk_speed
    assert game.spawn_timer > 0.0
    assert game.orcs[0].position_x < 300.0