"""Player state, orc spawning and combat rules of the game."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass
from enum import Enum

from .aseprite import AsepriteError, AsepriteFile, Image, Tag
from .orc import SCREEN_HEIGHT, SCREEN_WIDTH, TICK, Orc, load_orc

log = logging.getLogger(__name__)

PLAYER_Y = SCREEN_HEIGHT * 0.2
FIRST_ORC_X = 300.0

_HALF_WIDTH = SCREEN_WIDTH / 2
_SPAWN_OFFSET = 200.0
_BASE_ORC_SPEED = 2.0
_ORC_SPEEDUP_PER_KILL = 0.05
_SPAWN_INTERVAL = 9.0
_SPAWN_SPEEDUP = 0.95
_MIN_SPAWN_INTERVAL = 0.5
_MAX_HEALTH = 100.0
_DAMAGE_PER_HIT = 10.0
_KNOCKBACK = 100.0
_DEATH_DELAY = 3.0
_FLASH_INTERVAL = 0.1
_FLASHES_BEFORE_GAME_OVER = 6

OrcFactory = Callable[[float, float], Orc]


class PlayerState(Enum):
    """Condition of the player character."""

    ALIVE = "alive"
    HURT = "hurt"
    DYING = "dying"
    DEAD = "dead"


class Key(Enum):
    """Keys the game reacts to."""

    LEFT = "left"
    RIGHT = "right"
    A = "a"
    D = "d"
    SPACE = "space"


class Sound(Enum):
    """Sound effects the game asks to be played."""

    ATTACK = "attack"
    ORC_HIT = "orc_hit"
    ORC_DIE = "orc_die"


@dataclass(frozen=True)
class AnimationRanges:
    """Inclusive (first, last) frame numbers of the player's animations."""

    idle: tuple[int, int] = (0, 0)
    walk: tuple[int, int] = (6, 13)
    attack: tuple[int, int] = (14, 19)
    hurt: tuple[int, int] = (20, 25)
    death: tuple[int, int] = (26, 31)


# Tag name in the sprite sheet -> field of AnimationRanges.
_PLAYER_TAGS = {
    "Idle": "idle",
    "Walk": "walk",
    "Attack02": "attack",
    "Hurt": "hurt",
    "Death": "death",
}


def animation_ranges_from_tags(tags: Iterable[Tag]) -> AnimationRanges:
    """Pick the player's animation ranges from sprite tags, with fallbacks."""
    found: dict[str, tuple[int, int]] = {}
    for tag in tags:
        field_name = _PLAYER_TAGS.get(tag.name)
        if field_name is not None:
            found[field_name] = (tag.from_frame, tag.to_frame)

    for tag_name, field_name in _PLAYER_TAGS.items():
        if field_name in found:
            first, last = found[field_name]
            log.info("Found %s animation: frames %d-%d", tag_name, first, last)
        else:
            log.warning("%s animation tag not found", tag_name)
    return AnimationRanges(**found)


class GameOver(Exception):
    """Raised when the player's death sequence has finished."""

    def __init__(self, orcs_killed: int) -> None:
        super().__init__(f"Game Over! Player died after killing {orcs_killed} orcs.")
        self.orcs_killed = orcs_killed


class Game:
    """The complete game state, advanced one tick of 1/60 s at a time."""

    def __init__(
        self, sprite_sheet: AsepriteFile, orc_factory: OrcFactory = load_orc
    ) -> None:
        self.sprite_sheet = sprite_sheet
        self.orc_factory = orc_factory
        self.sprite: Image = sprite_sheet.frame_image(0)
        self.ranges = animation_ranges_from_tags(sprite_sheet.tags)

        self.current_frame = self.ranges.idle[0]
        self.frame_timer = 0.0
        self.frame_duration = 0.1

        self.position_x = 0.0
        self.is_walking = False
        self.facing_left = False
        self.walk_speed = 5.0
        self.is_attacking = False

        self.player_state = PlayerState.ALIVE
        self.player_health = _MAX_HEALTH
        self.death_timer = 0.0
        self.flash_timer = 0.0
        self.flash_visible = True
        self.flash_count = 0

        self.sounds: list[Sound] = []

        self.orcs_killed = 0
        self.spawn_timer = 0.0
        self.spawn_interval = _SPAWN_INTERVAL
        self.orcs: list[Orc] = [orc_factory(FIRST_ORC_X, PLAYER_Y)]

    def spawn_orc(self) -> None:
        """Add an orc off-screen, faster for every kill, and shorten the spawn interval."""
        if len(self.orcs) % 2 == 0:
            spawn_x = -_HALF_WIDTH - _SPAWN_OFFSET
        else:
            spawn_x = _HALF_WIDTH + _SPAWN_OFFSET

        try:
            orc = self.orc_factory(spawn_x, PLAYER_Y)
        except AsepriteError as exc:
            log.error("Failed to create new orc: %s", exc)
            return

        orc.walk_speed = _BASE_ORC_SPEED * (1.0 + self.orcs_killed * _ORC_SPEEDUP_PER_KILL)
        self.orcs.append(orc)
        self.spawn_interval = max(self.spawn_interval * _SPAWN_SPEEDUP, _MIN_SPAWN_INTERVAL)

    def _clamp_position(self) -> None:
        self.position_x = min(max(self.position_x, -_HALF_WIDTH), _HALF_WIDTH)

    def handle_player_input(self, pressed: Collection[Key]) -> None:
        """Start attacks and move the player according to the pressed keys."""
        alive = self.player_state == PlayerState.ALIVE
        if Key.SPACE in pressed and not self.is_attacking and alive:
            self.is_attacking = True
            self.current_frame = self.ranges.attack[0]
            self.frame_timer = 0.0
            self.sounds.append(Sound.ATTACK)

        if self.is_attacking or not alive:
            return

        was_walking = self.is_walking
        self.is_walking = False
        if Key.LEFT in pressed or Key.A in pressed:
            self.is_walking = True
            self.facing_left = True
            self.position_x = max(self.position_x - self.walk_speed, -_HALF_WIDTH)
        if Key.RIGHT in pressed or Key.D in pressed:
            self.is_walking = True
            self.facing_left = False
            self.position_x = min(self.position_x + self.walk_speed, _HALF_WIDTH)

        if self.is_walking != was_walking:
            ranges = self.ranges.walk if self.is_walking else self.ranges.idle
            self.current_frame = ranges[0]
            self.frame_timer = 0.0

    def update_player_death(self) -> None:
        """Run the wait-then-flash sequence of a dying player; raise GameOver at its end."""
        if self.player_state != PlayerState.DYING:
            return
        self.death_timer -= TICK
        if self.death_timer > 0:
            return
        self.flash_timer -= TICK
        if self.flash_timer > 0:
            return
        self.flash_visible = not self.flash_visible
        self.flash_timer = _FLASH_INTERVAL
        if not self.flash_visible:
            self.flash_count += 1
        if self.flash_count >= _FLASHES_BEFORE_GAME_OVER:
            log.info("Game Over! Player died after killing %d orcs.", self.orcs_killed)
            raise GameOver(self.orcs_killed)

    def update_player_animation(self) -> None:
        """Advance the player's animation frame when its time has come."""
        self.frame_timer += TICK
        if self.frame_timer < self.frame_duration:
            return
        self.frame_timer = 0.0
        self.current_frame += 1

        ranges = self.ranges
        if self.player_state == PlayerState.DYING:
            self.current_frame = min(self.current_frame, ranges.death[1])
        elif self.player_state == PlayerState.HURT:
            if self.current_frame > ranges.hurt[1]:
                self.player_state = PlayerState.ALIVE
                self.current_frame = ranges.idle[0]
        elif self.is_attacking:
            if self.current_frame > ranges.attack[1]:
                self.is_attacking = False
                self.current_frame = (ranges.walk if self.is_walking else ranges.idle)[0]
        else:
            first, last = ranges.walk if self.is_walking else ranges.idle
            if self.current_frame > last:
                self.current_frame = first

        try:
            self.sprite = self.sprite_sheet.frame_image(self.current_frame)
        except AsepriteError:
            pass

    def _hurt_player(self, orc: Orc) -> None:
        self.player_health -= _DAMAGE_PER_HIT
        if self.player_health <= 0:
            self.player_health = 0.0
            self.player_state = PlayerState.DYING
            self.current_frame = self.ranges.death[0]
            self.death_timer = _DEATH_DELAY
        else:
            self.player_state = PlayerState.HURT
            self.current_frame = self.ranges.hurt[0]
        self.frame_timer = 0.0
        self.is_attacking = False
        self.is_walking = False

        if self.position_x < orc.position_x:
            self.position_x -= _KNOCKBACK
        else:
            self.position_x += _KNOCKBACK
        self._clamp_position()

    def update_orc_logic(self) -> None:
        """Spawn orcs, move them, and resolve hits in both directions."""
        self.spawn_timer += TICK
        if self.spawn_timer >= self.spawn_interval:
            self.spawn_orc()
            self.spawn_timer = 0.0

        for orc in reversed(list(self.orcs)):
            previous_health = orc.health()
            was_alive = orc.is_alive()

            orc.update(self.position_x)

            if orc.should_remove():
                self.orcs_killed += 1
                self.orcs.remove(orc)
                continue

            if (
                self.is_attacking
                and orc.is_alive()
                and orc.in_player_attack(self.position_x, 0, self.facing_left)
            ):
                orc.take_damage(self.position_x)
                health = orc.health()
                if health < previous_health:
                    died = health <= 0 and was_alive
                    self.sounds.append(Sound.ORC_DIE if died else Sound.ORC_HIT)

            if (
                orc.is_alive()
                and self.player_state == PlayerState.ALIVE
                and orc.collides_with_player(self.position_x, 0)
            ):
                self._hurt_player(orc)
                # Only one orc can hurt the player per tick.
                break

    def update(self, pressed: Collection[Key]) -> None:
        """Advance the whole game by one tick."""
        self.handle_player_input(pressed)
        self.update_player_animation()
        self.update_player_death()
        self.update_orc_logic()