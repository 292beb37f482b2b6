"""Window, rendering, input and audio around the game state."""

from __future__ import annotations

import argparse
import functools
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pygame

from .aseprite import AsepriteError, Image, load_file
from .game import Game, GameOver, Key, PlayerState, Sound
from .orc import SCREEN_HEIGHT, SCREEN_WIDTH, SPRITE_SCALE, OrcState, load_orc

log = logging.getLogger(__name__)

WINDOW_TITLE = "RPG Demo - Aseprite Loading"
FPS = 60

_KEY_BINDINGS = (
    (pygame.K_LEFT, Key.LEFT),
    (pygame.K_RIGHT, Key.RIGHT),
    (pygame.K_a, Key.A),
    (pygame.K_d, Key.D),
    (pygame.K_SPACE, Key.SPACE),
)

_MUSIC = ("soundtrack.mp3", 0.3)
_SOUND_FILES = {
    Sound.ATTACK: ("attack.mp3", 0.5),
    Sound.ORC_HIT: ("orc_hit.mp3", 0.4),
    Sound.ORC_DIE: ("orc_die.mp3", 0.4),
}

_WHITE = (255, 255, 255)
_BAR_WIDTH = 300.0
_BAR_HEIGHT = 20.0
_BAR_BACKGROUND = (100, 0, 0)
_BAR_HEALTH = (0, 255, 0)
_FONT_SIZE = 18

_SpriteCache = dict[int, tuple[Image, pygame.Surface]]


def surface_from_image(image: Image) -> pygame.Surface:
    """Convert an RGBA image into a pygame surface with per-pixel alpha."""
    size = (image.width, image.height)
    if image.width == 0 or image.height == 0:
        return pygame.Surface(size, pygame.SRCALPHA)
    return pygame.image.frombuffer(bytes(image.pixels), size, "RGBA").copy()


def pressed_keys(key_state: Any) -> frozenset[Key]:
    """The game keys held down in a pygame key state (indexable by key code)."""
    return frozenset(key for code, key in _KEY_BINDINGS if key_state[code])


class App:
    """Loads the assets and shows the game in a window."""

    def __init__(self, assets_dir: str | Path = "assets") -> None:
        self.assets_dir = Path(assets_dir)

        background_path = self.assets_dir / "background.png"
        if not background_path.is_file():
            raise FileNotFoundError(f"Failed to load background.png: no such file {background_path}")
        self.background: pygame.Surface = pygame.image.load(str(background_path))

        self.sprite_sheet = load_file(self.assets_dir / "Soldier.aseprite")
        orc_factory = functools.partial(load_orc, path=self.assets_dir / "Orc.aseprite")
        self.game = Game(self.sprite_sheet, orc_factory)

        header = self.sprite_sheet.header
        log.info(
            "Loaded Aseprite file: %dx%d, %d frames, %d bpp",
            header.width,
            header.height,
            header.frames,
            header.color_depth,
        )

        self._font: pygame.font.Font | None = None
        self._sprite_cache: _SpriteCache = {}
        self._sounds: dict[Sound, pygame.mixer.Sound] = {}

    def _text_font(self) -> pygame.font.Font:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.Font(None, _FONT_SIZE)
        return self._font

    def _draw_text(self, screen: pygame.Surface, text: str, x: float, baseline: float) -> None:
        font = self._text_font()
        rendered = font.render(text, True, _WHITE)
        screen.blit(rendered, (int(x), int(baseline) - font.get_ascent()))

    def _scaled(self, image: Image, fresh: _SpriteCache) -> pygame.Surface:
        entry = self._sprite_cache.get(id(image))
        if entry is not None and entry[0] is image:
            surface = entry[1]
        else:
            size = (int(image.width * SPRITE_SCALE), int(image.height * SPRITE_SCALE))
            surface = pygame.transform.scale(surface_from_image(image), size)
        fresh[id(image)] = (image, surface)
        return surface

    def _draw_sprite(
        self,
        screen: pygame.Surface,
        image: Image,
        x: float,
        y: float,
        facing_left: bool,
        fresh: _SpriteCache,
    ) -> None:
        surface = self._scaled(image, fresh)
        width, height = surface.get_size()
        if facing_left:
            surface = pygame.transform.flip(surface, True, False)
        final_x = (SCREEN_WIDTH - width) / 2 + x
        final_y = (SCREEN_HEIGHT - height) / 2 + y
        screen.blit(surface, (round(final_x), round(final_y)))

    def draw(self, screen: pygame.Surface) -> None:
        """Render background, player, orcs, kill counter and life bar."""
        game = self.game
        fresh: _SpriteCache = {}

        screen.blit(self.background, (0, 0))

        flashing_off = (
            game.player_state == PlayerState.DYING
            and game.death_timer <= 0
            and not game.flash_visible
        )
        if not flashing_off:
            self._draw_sprite(
                screen,
                game.sprite,
                game.position_x,
                SCREEN_HEIGHT * 0.2,
                game.facing_left,
                fresh,
            )

        for orc in game.orcs:
            if orc.state == OrcState.DEATH and orc.death_timer <= 0 and not orc.flash_visible:
                continue
            self._draw_sprite(
                screen, orc.sprite, orc.position_x, orc.position_y, orc.facing_left, fresh
            )

        self._sprite_cache = fresh

        self._draw_text(screen, f"Orcs Killed: {game.orcs_killed}", 20, 30)

        bar_x = (SCREEN_WIDTH - _BAR_WIDTH) / 2
        bar_y = SCREEN_HEIGHT - 60.0
        screen.fill(_BAR_BACKGROUND, pygame.Rect(int(bar_x), int(bar_y), int(_BAR_WIDTH), int(_BAR_HEIGHT)))
        health_width = _BAR_WIDTH * max(game.player_health / 100.0, 0.0)
        if int(health_width) > 0:
            screen.fill(
                _BAR_HEALTH,
                pygame.Rect(int(bar_x), int(bar_y), int(health_width), int(_BAR_HEIGHT)),
            )
        self._draw_text(screen, f"Health: {game.player_health:.0f}%", bar_x, bar_y - 10)

    def _audio_path(self, name: str) -> Path:
        path = self.assets_dir / name
        if not path.is_file():
            raise FileNotFoundError(f"Failed to load {name}: no such file {path}")
        return path

    def _start_audio(self) -> None:
        music_name, music_volume = _MUSIC
        music_path = self._audio_path(music_name)
        effect_paths = {
            sound: (self._audio_path(name), volume)
            for sound, (name, volume) in _SOUND_FILES.items()
        }

        if pygame.mixer.get_init() is None:
            pygame.mixer.init()

        pygame.mixer.music.load(str(music_path))
        pygame.mixer.music.set_volume(music_volume)
        pygame.mixer.music.play(-1)

        for sound, (path, volume) in effect_paths.items():
            effect = pygame.mixer.Sound(str(path))
            effect.set_volume(volume)
            self._sounds[sound] = effect

    def _play_requested_sounds(self) -> None:
        for sound in self.game.sounds:
            effect = self._sounds.get(sound)
            if effect is not None:
                effect.stop()
                effect.play()
        self.game.sounds.clear()

    def run(self) -> int:
        """Open the window and play until it is closed or the player dies.

        Returns the number of orcs killed.
        """
        for name in [_MUSIC[0], *(name for name, _ in _SOUND_FILES.values())]:
            self._audio_path(name)

        pygame.init()
        try:
            self._start_audio()
            screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
            pygame.display.set_caption(WINDOW_TITLE)
            clock = pygame.time.Clock()

            running = True
            while running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                if not running:
                    break
                try:
                    self.game.update(pressed_keys(pygame.key.get_pressed()))
                except GameOver as over:
                    log.info("%s", over)
                    break
                self._play_requested_sounds()
                self.draw(screen)
                pygame.display.flip()
                clock.tick(FPS)
            return self.game.orcs_killed
        finally:
            pygame.quit()


def main(argv: list[str] | None = None) -> int:
    """Start the game with assets from the given directory."""
    parser = argparse.ArgumentParser(prog="orcslayer", description="Fight waves of orcs.")
    parser.add_argument("--assets", default="assets", help="directory holding the game assets")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        App(args.assets).run()
    except (AsepriteError, OSError, pygame.error) as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())