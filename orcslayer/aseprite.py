"""Reader for the Aseprite sprite file format."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path

HEADER_MAGIC = 0xA5E0
CHUNK_CEL = 0x2005
CHUNK_TAGS = 0x2018
CEL_COMPRESSED_IMAGE = 2

_CHUNK_HEADER_SIZE = 6
_FIELDS = {code: struct.Struct("<" + code) for code in "BbHhIi"}


class AsepriteError(Exception):
    """Raised when Aseprite data cannot be read."""


class Direction(IntEnum):
    """Playback direction of an animation tag."""

    FORWARD = 0
    REVERSE = 1
    PING_PONG = 2
    PING_PONG_REVERSE = 3


@dataclass
class Header:
    """The 128-byte file header."""

    file_size: int
    magic_number: int
    frames: int
    width: int
    height: int
    color_depth: int
    flags: int
    speed: int
    transparent: int
    colors: int
    pixel_width: int
    pixel_height: int
    grid_x: int
    grid_y: int
    grid_width: int
    grid_height: int


@dataclass
class FrameHeader:
    """The 16-byte header in front of every frame."""

    bytes_in_frame: int
    magic_number: int
    old_chunks: int
    duration: int
    new_chunks: int


@dataclass
class Chunk:
    """A raw chunk within a frame."""

    size: int
    chunk_type: int
    data: bytes


@dataclass
class Frame:
    """One animation frame and its chunks."""

    header: FrameHeader
    chunks: list[Chunk] = field(default_factory=list)


@dataclass
class Cel:
    """The content of one layer in one frame."""

    layer_index: int
    x: int
    y: int
    opacity: int
    cel_type: int
    z_index: int
    width: int = 0
    height: int = 0
    pixels: bytes = b""


@dataclass
class Tag:
    """A named range of frames."""

    name: str
    from_frame: int
    to_frame: int
    direction: int
    repeat: int
    color: tuple[int, int, int]


@dataclass
class Image:
    """An RGBA image with one byte per channel, initially transparent."""

    width: int
    height: int
    pixels: bytearray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.pixels = bytearray(self.width * self.height * 4)

    def _contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (r, g, b, a) value at x, y; transparent outside the image."""
        if not self._contains(x, y):
            return (0, 0, 0, 0)
        offset = (y * self.width + x) * 4
        r, g, b, a = self.pixels[offset:offset + 4]
        return (r, g, b, a)

    def _put(self, x: int, y: int, rgba: tuple[int, int, int, int]) -> None:
        if self._contains(x, y):
            offset = (y * self.width + x) * 4
            self.pixels[offset:offset + 4] = bytes(rgba)


@dataclass
class AsepriteFile:
    """A parsed Aseprite file."""

    header: Header
    frames: list[Frame] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    def frame_image(self, frame_index: int) -> Image:
        """Compose the cels of one frame into an image of the canvas size."""
        if not 0 <= frame_index < len(self.frames):
            raise AsepriteError(f"frame index {frame_index} out of range")
        image = Image(self.header.width, self.header.height)
        for chunk in self.frames[frame_index].chunks:
            if chunk.chunk_type != CHUNK_CEL:
                continue
            try:
                cel = parse_cel_chunk(chunk.data)
            except AsepriteError:
                continue
            _draw_cel(image, cel, self.header.color_depth)
        return image


class _Reader:
    """Little-endian cursor over a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def take(self, size: int) -> bytes:
        if size > self.remaining:
            raise AsepriteError("EOF" if self.remaining == 0 else "unexpected EOF")
        piece = self._data[self._pos:self._pos + size]
        self._pos += size
        return piece

    def unpack(self, codes: str) -> tuple[int, ...]:
        values = []
        for code in codes:
            spec = _FIELDS[code]
            values.append(spec.unpack(self.take(spec.size))[0])
        return tuple(values)

    def skip(self, size: int) -> None:
        self._pos = min(self._pos + size, len(self._data))

    def rest(self) -> bytes:
        return self.take(self.remaining)


def _read_header(reader: _Reader) -> Header:
    file_size, magic, frames, width, height, depth, flags, speed = reader.unpack("IHHHHHIH")
    reader.skip(8)
    (transparent,) = reader.unpack("B")
    reader.skip(3)
    colors, pixel_width, pixel_height, grid_x, grid_y, grid_width, grid_height = reader.unpack(
        "HBBhhHH"
    )
    reader.skip(84)
    return Header(
        file_size=file_size,
        magic_number=magic,
        frames=frames,
        width=width,
        height=height,
        color_depth=depth,
        flags=flags,
        speed=speed,
        transparent=transparent,
        colors=colors,
        pixel_width=pixel_width,
        pixel_height=pixel_height,
        grid_x=grid_x,
        grid_y=grid_y,
        grid_width=grid_width,
        grid_height=grid_height,
    )


def _read_chunk(reader: _Reader) -> Chunk:
    size, chunk_type = reader.unpack("IH")
    if size < _CHUNK_HEADER_SIZE:
        raise AsepriteError(f"invalid chunk size: {size}")
    return Chunk(size=size, chunk_type=chunk_type, data=reader.take(size - _CHUNK_HEADER_SIZE))


def _read_frame(reader: _Reader) -> Frame:
    bytes_in_frame, magic, old_chunks, duration = reader.unpack("IHHH")
    reader.skip(2)
    (new_chunks,) = reader.unpack("I")
    header = FrameHeader(bytes_in_frame, magic, old_chunks, duration, new_chunks)
    frame = Frame(header=header)
    for index in range(new_chunks or old_chunks):
        try:
            frame.chunks.append(_read_chunk(reader))
        except AsepriteError as exc:
            raise AsepriteError(f"failed to read chunk {index}: {exc}") from exc
    return frame


def parse_file(data: bytes) -> AsepriteFile:
    """Parse the bytes of an Aseprite file."""
    reader = _Reader(data)
    try:
        header = _read_header(reader)
    except AsepriteError as exc:
        raise AsepriteError(f"failed to read header: {exc}") from exc
    if header.magic_number != HEADER_MAGIC:
        raise AsepriteError(f"invalid magic number: {header.magic_number:x}")

    ase_file = AsepriteFile(header=header)
    for index in range(header.frames):
        try:
            frame = _read_frame(reader)
        except AsepriteError as exc:
            raise AsepriteError(f"failed to read frame {index}: {exc}") from exc
        ase_file.frames.append(frame)
        for chunk in frame.chunks:
            if chunk.chunk_type == CHUNK_TAGS:
                try:
                    ase_file.tags.extend(parse_tags_chunk(chunk.data))
                except AsepriteError:
                    pass
    return ase_file


def load_file(filename: str | Path) -> AsepriteFile:
    """Read and parse an Aseprite file from disk."""
    try:
        data = Path(filename).read_bytes()
    except OSError as exc:
        raise AsepriteError(f"failed to read file: {exc}") from exc
    return parse_file(data)


def _inflate(data: bytes) -> bytes:
    inflater = zlib.decompressobj()
    try:
        output = inflater.decompress(data)
    except zlib.error as exc:
        raise AsepriteError(f"zlib: {exc}") from exc
    if not inflater.eof:
        raise AsepriteError("unexpected EOF in compressed data")
    return output


def parse_cel_chunk(data: bytes) -> Cel:
    """Parse a cel chunk; only compressed image cels are supported."""
    reader = _Reader(data)
    layer_index, x, y, opacity, cel_type, z_index = reader.unpack("HhhBHh")
    reader.skip(5)
    if cel_type != CEL_COMPRESSED_IMAGE:
        raise AsepriteError(f"unsupported cel type: {cel_type}")
    width, height = reader.unpack("HH")
    pixels = _inflate(reader.rest())
    return Cel(
        layer_index=layer_index,
        x=x,
        y=y,
        opacity=opacity,
        cel_type=cel_type,
        z_index=z_index,
        width=width,
        height=height,
        pixels=pixels,
    )


def _decode_pixel(pixels: bytes, offset: int, color_depth: int) -> tuple[int, int, int, int]:
    if color_depth == 32:
        r, g, b, a = pixels[offset:offset + 4]
        return (r, g, b, a)
    if color_depth == 16:
        gray, alpha = pixels[offset:offset + 2]
        return (gray, gray, gray, alpha)
    if color_depth == 8:
        gray = pixels[offset]
        return (gray, gray, gray, 255)
    return (0, 0, 0, 0)


def _draw_cel(image: Image, cel: Cel, color_depth: int) -> None:
    pixels = cel.pixels
    if not pixels:
        return
    bytes_per_pixel = color_depth // 8 or 1
    for y in range(cel.height):
        for x in range(cel.width):
            offset = (y * cel.width + x) * bytes_per_pixel
            if offset + bytes_per_pixel > len(pixels):
                continue
            r, g, b, a = _decode_pixel(pixels, offset, color_depth)
            image._put(cel.x + x, cel.y + y, (r, g, b, a * cel.opacity // 255))


def parse_tags_chunk(data: bytes) -> list[Tag]:
    """Parse a tags chunk into its tags."""
    reader = _Reader(data)
    (count,) = reader.unpack("H")
    reader.skip(8)
    tags = []
    for _ in range(count):
        from_frame, to_frame, direction, repeat = reader.unpack("HHBH")
        reader.skip(6)
        red, green, blue = reader.unpack("BBB")
        reader.skip(1)
        (name_length,) = reader.unpack("H")
        name = reader.take(name_length).decode("utf-8", errors="replace")
        tags.append(
            Tag(
                name=name,
                from_frame=from_frame,
                to_frame=to_frame,
                direction=direction,
                repeat=repeat,
                color=(red, green, blue),
            )
        )
    return tags