"""A side-scrolling orc-slaying arcade game with an Aseprite sprite reader and inspector."""

__version__ = "0.1.0"
__all__ = ["aseprite", "inspector", "orc", "game", "app"]