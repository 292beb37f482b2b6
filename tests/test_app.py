import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import struct
import zlib
from collections import defaultdict

import pygame
import pytest

from orcslayer.app import App, main, pressed_keys, surface_from_image
from orcslayer.aseprite import AsepriteError, Image
from orcslayer.game import Key, PlayerState

BACKGROUND = (40, 80, 120)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)
YELLOW = (255, 255, 0, 255)


def _cel_chunk(width, height, pixels):
    cel = (
        struct.pack("<HhhBHh", 0, 0, 0, 255, 2, 0)
        + bytes(5)
        + struct.pack("<HH", width, height)
        + zlib.compress(pixels)
    )
    return struct.pack("<IH", len(cel) + 6, 0x2005) + cel


def _tags_chunk(tags):
    body = struct.pack("<H", len(tags)) + bytes(8)
    for name, first, last in tags:
        encoded = name.encode()
        body += (
            struct.pack("<HHBH", first, last, 0, 0)
            + bytes(6)
            + bytes(3)
            + bytes(1)
            + struct.pack("<H", len(encoded))
            + encoded
        )
    return struct.pack("<IH", len(body) + 6, 0x2018) + body


def _aseprite(width, height, pixels, tags=()):
    header = (
        struct.pack("<IHHHHHIH", 0, 0xA5E0, 1, width, height, 32, 0, 100)
        + bytes(8)
        + struct.pack("<B", 0)
        + bytes(3)
        + struct.pack("<HBBhhHH", 0, 1, 1, 0, 0, 16, 16)
        + bytes(84)
    )
    chunks = [_cel_chunk(width, height, pixels)]
    if tags:
        chunks.append(_tags_chunk(tags))
    body = b"".join(chunks)
    frame = (
        struct.pack("<IHHH", 16 + len(body), 0xF1FA, len(chunks), 100)
        + bytes(2)
        + struct.pack("<I", len(chunks))
        + body
    )
    return header + frame


def _soldier_pixels():
    # Leftmost column white, the rest blue.
    rows = []
    for _ in range(10):
        rows.append(bytes(WHITE) + bytes(BLUE) * 9)
    return b"".join(rows)


@pytest.fixture
def assets(tmp_path):
    background = pygame.Surface((1536, 1024))
    background.fill(BACKGROUND)
    pygame.image.save(background, str(tmp_path / "background.png"))
    (tmp_path / "Soldier.aseprite").write_bytes(
        _aseprite(10, 10, _soldier_pixels(), [("Idle", 0, 0), ("Walk", 0, 0)])
    )
    (tmp_path / "Orc.aseprite").write_bytes(
        _aseprite(10, 10, bytes(YELLOW) * 100, [("walk", 0, 0)])
    )
    return tmp_path


def _drawn(app):
    screen = pygame.Surface((1536, 1024))
    app.draw(screen)
    return screen


def test_surface_from_image_keeps_pixels():
    image = Image(2, 1)
    image.pixels[0:4] = bytes([10, 20, 30, 40])
    image.pixels[4:8] = bytes([1, 2, 3, 255])
    surface = surface_from_image(image)
    assert surface.get_size() == (2, 1)
    assert surface.get_at((0, 0)) == pygame.Color(10, 20, 30, 40)
    assert surface.get_at((1, 0)) == pygame.Color(1, 2, 3, 255)


def test_pressed_keys_maps_game_keys():
    state = defaultdict(bool)
    state[pygame.K_a] = True
    state[pygame.K_SPACE] = True
    assert pressed_keys(state) == frozenset({Key.A, Key.SPACE})


def test_pressed_keys_empty_when_nothing_held():
    assert pressed_keys(defaultdict(bool)) == frozenset()


def test_app_builds_game_from_assets(assets):
    app = App(assets)
    assert app.game.ranges.walk == (0, 0)
    assert len(app.game.orcs) == 1
    assert app.game.orcs[0].position_x == 300.0


def test_draw_shows_player_orc_and_full_health_bar(assets):
    screen = _drawn(App(assets))
    assert screen.get_at((5, 500)) == pygame.Color(*BACKGROUND)
    assert screen.get_at((768, 716)) == pygame.Color(*BLUE)
    assert screen.get_at((1068, 716)) == pygame.Color(*YELLOW)
    assert screen.get_at((620, 970)) == pygame.Color(0, 255, 0)


def test_draw_empty_health_bar_shows_background_colour(assets):
    app = App(assets)
    app.game.player_health = 0.0
    screen = _drawn(app)
    assert screen.get_at((620, 970)) == pygame.Color(100, 0, 0)


def test_draw_flips_sprite_when_facing_left(assets):
    app = App(assets)
    facing_right = _drawn(app)
    assert facing_right.get_at((720, 716)) == pygame.Color(*WHITE)
    app.game.facing_left = True
    facing_left = _drawn(app)
    assert facing_left.get_at((720, 716)) == pygame.Color(*BLUE)
    assert facing_left.get_at((815, 716)) == pygame.Color(*WHITE)


def test_draw_hides_player_while_flashing_off(assets):
    app = App(assets)
    app.game.player_state = PlayerState.DYING
    app.game.death_timer = 0.0
    app.game.flash_visible = False
    screen = _drawn(app)
    assert screen.get_at((768, 716)) == pygame.Color(*BACKGROUND)


def test_missing_background_raises(assets):
    (assets / "background.png").unlink()
    with pytest.raises(FileNotFoundError):
        App(assets)


def test_missing_orc_sheet_raises(assets):
    (assets / "Orc.aseprite").unlink()
    with pytest.raises(AsepriteError):
        App(assets)


def test_run_without_sound_files_raises(assets):
    app = App(assets)
    with pytest.raises(FileNotFoundError):
        app.run()


def test_main_reports_failure_for_missing_assets(tmp_path):
    assert main(["--assets", str(tmp_path / "nowhere")]) == 1