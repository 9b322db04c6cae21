"""Result records, option sets and errors used by the containerz client."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class StatusCode(enum.IntEnum):
    """Canonical RPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def label(self) -> str:
        """The code's conventional display name, e.g. ``NotFound``."""
        special = {StatusCode.OK: "OK", StatusCode.CANCELLED: "Canceled"}
        if self in special:
            return special[self]
        return "".join(part.capitalize() for part in self.name.split("_"))


class StatusError(Exception):
    """An error carrying an RPC status code and a message."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(code, message)
        self.code = StatusCode(code)
        self.message = message

    def __str__(self) -> str:
        return f"rpc error: code = {self.code.label} desc = {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatusError):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))


class NotFoundError(StatusError):
    """The requested resource was not found on the target system."""

    def __init__(self) -> None:
        super().__init__(StatusCode.NOT_FOUND, "resource was not found")


class RunningError(StatusError):
    """The resource is in use by a running container."""

    def __init__(self) -> None:
        super().__init__(StatusCode.FAILED_PRECONDITION, "resource is running")


@dataclass
class Progress:
    """Progress of an image transfer."""

    finished: bool = False
    image: str = ""
    tag: str = ""
    bytes_received: int = 0
    error: Exception | None = None


@dataclass
class ContainerInfo:
    """A container on the target system."""

    id: str = ""
    name: str = ""
    image_name: str = ""
    state: str = ""
    error: Exception | None = None


@dataclass
class ImageInfo:
    """An image on the target system."""

    id: str = ""
    image_name: str = ""
    image_tag: str = ""
    error: Exception | None = None


@dataclass
class VolumeInfo:
    """A volume on the target system."""

    name: str = ""
    driver: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    options: dict[str, str] = field(default_factory=dict)
    creation_time: datetime | None = None
    error: Exception | None = None


@dataclass
class LogMessage:
    """A piece of container log output, or the error that ended the stream."""

    msg: str = ""
    error: Exception | None = None


@dataclass
class StartOptions:
    """Optional settings for starting or updating a container."""

    envs: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    devices: list[str] = field(default_factory=list)
    network: str = ""
    cap_add: list[str] = field(default_factory=list)
    cap_remove: list[str] = field(default_factory=list)
    policy: str = ""
    run_as: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    cpus: float = 0.0
    soft_mem: int = 0
    hard_mem: int = 0