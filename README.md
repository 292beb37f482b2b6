# orcslayer

A small side-scrolling arcade game. You are a soldier standing in a field
while orcs walk in from both edges of the screen. Hit them before they reach
you. Every orc you kill makes the next ones faster, and they arrive more
often.

The package also holds a reader for Aseprite sprite files (`.aseprite`) and a
command-line inspector that prints what such a file contains.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Playing

The game reads its assets from a directory, `assets` by default:

- `Soldier.aseprite` and `Orc.aseprite`: the sprite sheets, with animation
  tags (`Idle`, `Walk`, `Attack02`, `Hurt`, `Death` for the soldier; `idle`,
  `walk`, `attack01`, `attack02`, `hurt`, `Death` for the orc)
- `background.png`
- `soundtrack.mp3`, `attack.mp3`, `orc_hit.mp3`, `orc_die.mp3`

Start it with:

```
orcslayer
```

or point it at another directory:

```
orcslayer --assets path/to/assets
```

Controls:

| Key                | Action     |
|--------------------|------------|
| Left arrow or `A`  | walk left  |
| Right arrow or `D` | walk right |
| Space              | attack     |

Each orc takes three hits. Touching a living orc costs you 10 health and
knocks you back. When your health reaches zero the soldier falls, flashes,
and the game ends, logging how many orcs you killed. A missing or unreadable
asset is reported and the command exits with status 1.

If a soldier animation tag is missing, fixed frame ranges are used instead
(see `AnimationRanges` in `orcslayer.game`).

## Inspecting Aseprite files

```
aseprite-inspector assets/Soldier.aseprite
```

prints the canvas size, frame count, colour depth, the animation tags with
their frame ranges, direction and repeat count, and the duration of each
frame. Without an argument, or when the file cannot be read, it prints a
message to standard error and exits with status 1.

## Using the sprite reader

```python
from orcslayer.aseprite import load_file

sheet = load_file("assets/Orc.aseprite")
print(sheet.header.width, sheet.header.height)
for tag in sheet.tags:
    print(tag.name, tag.from_frame, tag.to_frame)

image = sheet.frame_image(0)
print(image.get_pixel(0, 0))  # (r, g, b, a)
```

`parse_file` does the same for bytes already in memory. Malformed data, or a
frame index out of range, raises `AsepriteError`. `parse_cel_chunk` and
`parse_tags_chunk` decode single chunks.

## Running the game logic without a window

`orcslayer.game.Game` holds the whole game state and needs no display. Build
it from a parsed sprite sheet and a function that makes orcs, then call
`update` once per 1/60 s tick with the set of pressed `Key` values. Sound
effects to be played are collected in `game.sounds`, and `GameOver` is raised
when the player's death sequence ends.

```python
from orcslayer.aseprite import load_file
from orcslayer.game import Game, GameOver, Key

game = Game(load_file("assets/Soldier.aseprite"))
try:
    for _ in range(600):
        game.update({Key.RIGHT, Key.SPACE})
except GameOver as over:
    print(over.orcs_killed)
```

## Limits

The sprite reader covers only what the game needs:

- Only zlib-compressed image cels are drawn; raw, linked and tilemap cels
  are skipped.
- Palettes are not read: indexed pixels are shown as gray.
- Cels are copied over one another in file order; layer visibility, blend
  modes and alpha blending between layers are not applied.
- Frame durations are read but the game plays every animation at a fixed
  0.1 s per frame, and tag direction and repeat count are only reported by
  the inspector.