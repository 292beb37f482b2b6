"""Enemy orcs that chase the player."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from .aseprite import AsepriteError, AsepriteFile, Image, load_file

SCREEN_WIDTH = 1536
SCREEN_HEIGHT = 1024
SPRITE_SCALE = 10.0
TICK = 1.0 / 60.0

DEFAULT_ORC_PATH = "assets/Orc.aseprite"

# Full size of the player's sprite, in unscaled pixels.
_PLAYER_SPRITE_SIZE = 100.0
# Collision boxes of orc and player, in unscaled pixels.
_BODY_SIZE = 8.0
# The player's attack reach, in unscaled pixels.
_ATTACK_SIZE = 15.0

_MAX_HEALTH = 3
_HURT_DURATION = 0.5
_DEATH_DELAY = 3.0
_FLASH_INTERVAL = 0.1
_FLASHES_BEFORE_REMOVAL = 6
_KNOCKBACK_SPEED = 30.0
_KNOCKBACK_FRICTION = 0.9


class OrcState(Enum):
    """What an orc is currently doing."""

    IDLE = "idle"
    WALK = "walk"
    ATTACK01 = "attack01"
    ATTACK02 = "attack02"
    HURT = "hurt"
    DEATH = "Death"


# Tag names in the sprite sheet, as they appear in the file.
_TAG_STATES = {state.value: state for state in OrcState}


def _player_sprite_origin(player_x: float) -> tuple[float, float]:
    size = _PLAYER_SPRITE_SIZE * SPRITE_SCALE
    return (
        (SCREEN_WIDTH - size) / 2 + player_x,
        (SCREEN_HEIGHT - size) / 2 + SCREEN_HEIGHT * 0.2,
    )


def _overlaps(
    a: tuple[float, float, float, float], b: tuple[float, float, float, float]
) -> bool:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


class Orc:
    """An orc enemy with its animation, chasing AI and combat state."""

    def __init__(self, x: float, y: float, sprite_sheet: AsepriteFile) -> None:
        self.sprite_sheet = sprite_sheet
        self.sprite: Image = sprite_sheet.frame_image(0)

        self.position_x = float(x)
        self.position_y = float(y)
        self.facing_left = False

        self.frame_timer = 0.0
        self.frame_duration = 0.1
        self.frame_ranges: dict[OrcState, tuple[int, int]] = {
            state: (0, 0) for state in OrcState
        }
        for tag in sprite_sheet.tags:
            state = _TAG_STATES.get(tag.name)
            if state is not None:
                self.frame_ranges[state] = (tag.from_frame, tag.to_frame)

        self.state = OrcState.WALK
        self.current_frame = self.frame_ranges[OrcState.WALK][0]

        self.walk_speed = 2.0
        self.patrol_left = self.position_x - 150
        self.patrol_right = self.position_x + 150
        self.moving_right = True

        self._health = _MAX_HEALTH
        self.max_health = _MAX_HEALTH
        self.hurt_timer = 0.0
        self.knockback_x = 0.0

        self.death_timer = 0.0
        self.flash_timer = 0.0
        self.flash_visible = True
        self.flash_count = 0
        self._should_remove = False

    def _set_state(self, new_state: OrcState) -> None:
        if self.state == new_state:
            return
        self.state = new_state
        self.frame_timer = 0.0
        self.current_frame = self.frame_ranges[new_state][0]

    def _update_death(self) -> None:
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
        if self.flash_count >= _FLASHES_BEFORE_REMOVAL:
            self._should_remove = True

    def _advance_animation(self) -> None:
        self.frame_timer += TICK
        if self.frame_timer < self.frame_duration:
            return
        self.frame_timer = 0.0
        self.current_frame += 1

        start, end = self.frame_ranges[self.state]
        if self.current_frame > end:
            if self.state in (OrcState.IDLE, OrcState.WALK, OrcState.HURT):
                self.current_frame = start
            elif self.state in (OrcState.ATTACK01, OrcState.ATTACK02):
                self._set_state(OrcState.IDLE)
            else:
                self.current_frame = end

        try:
            self.sprite = self.sprite_sheet.frame_image(self.current_frame)
        except AsepriteError:
            pass

    def update(self, player_x: float) -> None:
        """Advance the orc by one tick of 1/60 s."""
        if self.state == OrcState.HURT:
            self.hurt_timer -= TICK
            if self.hurt_timer <= 0:
                self._set_state(OrcState.WALK)

        if self.state == OrcState.DEATH:
            self._update_death()

        if self.knockback_x != 0:
            self.position_x += self.knockback_x
            self.knockback_x *= _KNOCKBACK_FRICTION
            if -1 < self.knockback_x < 1:
                self.knockback_x = 0.0

        if self.state == OrcState.WALK:
            if player_x > self.position_x:
                self.position_x += self.walk_speed
                self.facing_left = False
            elif player_x < self.position_x:
                self.position_x -= self.walk_speed
                self.facing_left = True

        self._advance_animation()

    def take_damage(self, attacker_x: float) -> None:
        """Lose one hit point, unless already hurt or dead."""
        if self.state in (OrcState.HURT, OrcState.DEATH):
            return
        self._health -= 1
        if self._health <= 0:
            self._set_state(OrcState.DEATH)
            self.death_timer = _DEATH_DELAY
        else:
            self._set_state(OrcState.HURT)
            self.hurt_timer = _HURT_DURATION
            self.knockback_x = (
                _KNOCKBACK_SPEED if attacker_x < self.position_x else -_KNOCKBACK_SPEED
            )

    def bounds(self) -> tuple[float, float, float, float]:
        """Screen-space collision box (x, y, width, height) of the orc's body."""
        sprite_width = self.sprite.width * SPRITE_SCALE
        sprite_height = self.sprite.height * SPRITE_SCALE
        body = _BODY_SIZE * SPRITE_SCALE
        x = (SCREEN_WIDTH - sprite_width) / 2 + self.position_x + (sprite_width - body) / 2
        y = (SCREEN_HEIGHT - sprite_height) / 2 + self.position_y + (sprite_height - body) / 2
        return (x, y, body, body)

    def collides_with_player(self, player_x: float, player_y: float) -> bool:
        """Whether the orc's body touches the player's body."""
        sprite_x, sprite_y = _player_sprite_origin(player_x)
        size = _PLAYER_SPRITE_SIZE * SPRITE_SCALE
        body = _BODY_SIZE * SPRITE_SCALE
        player_box = (
            sprite_x + (size - body) / 2,
            sprite_y + (size - body) / 2,
            body,
            body,
        )
        return _overlaps(player_box, self.bounds())

    def in_player_attack(self, player_x: float, player_y: float, facing_left: bool) -> bool:
        """Whether the orc is inside the player's attack reach on the facing side."""
        sprite_x, sprite_y = _player_sprite_origin(player_x)
        size = _PLAYER_SPRITE_SIZE * SPRITE_SCALE
        reach = _ATTACK_SIZE * SPRITE_SCALE
        centered_x = sprite_x + (size - reach) / 2
        attack_x = centered_x - reach / 2 if facing_left else centered_x + reach / 2
        attack_box = (attack_x, sprite_y + (size - reach) / 2, reach, reach)
        return _overlaps(attack_box, self.bounds())

    def is_alive(self) -> bool:
        """Whether the orc has not started dying."""
        return self.state != OrcState.DEATH

    def should_remove(self) -> bool:
        """Whether the death sequence has finished."""
        return self._should_remove

    def health(self) -> int:
        """Remaining hit points."""
        return self._health


def load_orc(x: float, y: float, path: str | Path = DEFAULT_ORC_PATH) -> Orc:
    """Create an orc at x, y using the sprite sheet stored at path."""
    return Orc(x, y, load_file(path))