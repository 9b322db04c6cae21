"""Client library for managing containers, images, volumes and plugins on containerz targets."""

__version__ = "0.1.0"

__all__ = [
    "chunker",
    "client",
    "messages",
    "start_options",
    "streams",
    "types",
]