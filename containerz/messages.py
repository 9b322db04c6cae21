"""Request and response messages of the containerz service, and its stub interface."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Iterable, Iterator, Protocol


def _ensure_one_of(message: object, names: tuple[str, ...]) -> None:
    chosen = [name for name in names if getattr(message, name) is not None]
    if len(chosen) > 1:
        raise ValueError(
            f"{type(message).__name__} accepts only one of {', '.join(names)}; got {', '.join(chosen)}"
        )


class Driver(enum.IntEnum):
    DS_UNSPECIFIED = 0
    DS_LOCAL = 1
    DS_CUSTOM = 2


class LocalDriverType(enum.IntEnum):
    TYPE_NONE = 0


@dataclass
class LocalDriverOptions:
    type: LocalDriverType = LocalDriverType.TYPE_NONE
    options: list[str] = field(default_factory=list)
    mountpoint: str = ""


@dataclass
class CustomOptions:
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class CreateVolumeRequest:
    name: str = ""
    driver: Driver = Driver.DS_UNSPECIFIED
    labels: dict[str, str] = field(default_factory=dict)
    local_mount_options: LocalDriverOptions | None = None
    custom_options: CustomOptions | None = None

    def __post_init__(self) -> None:
        _ensure_one_of(self, ("local_mount_options", "custom_options"))


class ContainerStatus(enum.IntEnum):
    UNSPECIFIED = 0
    STOPPED = 1
    RUNNING = 2


@dataclass
class ListContainerRequest:
    all: bool = False
    limit: int = 0
    filter: list[object] = field(default_factory=list)


@dataclass
class ListContainerResponse:
    id: str = ""
    name: str = ""
    image_name: str = ""
    status: ContainerStatus = ContainerStatus.UNSPECIFIED


@dataclass
class ListImageRequest:
    limit: int = 0
    filter: list[object] = field(default_factory=list)


@dataclass
class ListImageResponse:
    id: str = ""
    image_name: str = ""
    tag: str = ""


@dataclass
class ListVolumeRequest:
    filter: list[object] = field(default_factory=list)


@dataclass
class ListVolumeResponse:
    name: str = ""
    driver: str = ""
    created: datetime | None = None
    labels: dict[str, str] = field(default_factory=dict)
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class LogRequest:
    instance_name: str = ""
    follow: bool = False


@dataclass
class LogResponse:
    msg: str = ""


@dataclass
class ImageTransfer:
    name: str = ""
    tag: str = ""
    image_size: int = 0
    is_plugin: bool = False
    remote_download: bool = False


@dataclass
class ImageTransferEnd:
    pass


@dataclass
class ImageTransferReady:
    chunk_size: int = 0


@dataclass
class ImageTransferProgress:
    bytes_received: int = 0


@dataclass
class ImageTransferSuccess:
    name: str = ""
    tag: str = ""
    image_size: int = 0


@dataclass
class DeployRequest:
    """One message sent to the target during an image deployment."""

    image_transfer: ImageTransfer | None = None
    content: bytes | None = None
    image_transfer_end: ImageTransferEnd | None = None

    def __post_init__(self) -> None:
        _ensure_one_of(self, tuple(f.name for f in fields(self)))

    def kind(self) -> type | None:
        """Return the type of the payload that is set, or None."""
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                return type(value)
        return None


@dataclass
class DeployResponse:
    """One message received from the target during an image deployment."""

    image_transfer_ready: ImageTransferReady | None = None
    image_transfer_progress: ImageTransferProgress | None = None
    image_transfer_success: ImageTransferSuccess | None = None

    def __post_init__(self) -> None:
        _ensure_one_of(self, tuple(f.name for f in fields(self)))

    def kind(self) -> type | None:
        """Return the type of the payload that is set, or None."""
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                return type(value)
        return None


@dataclass
class RemoveContainerRequest:
    name: str = ""
    force: bool = False


class RemoveImageCode(enum.IntEnum):
    UNSPECIFIED = 0
    SUCCESS = 1
    NOT_FOUND = 2
    RUNNING = 3


@dataclass
class RemoveImageRequest:
    name: str = ""
    tag: str = ""
    force: bool = False


@dataclass
class RemoveImageResponse:
    code: RemoveImageCode = RemoveImageCode.UNSPECIFIED
    details: str = ""


@dataclass
class RemoveVolumeRequest:
    name: str = ""
    force: bool = False


@dataclass
class Port:
    internal: int = 0
    external: int = 0


@dataclass
class Volume:
    name: str = ""
    mount_point: str = ""
    read_only: bool = False


class DevicePermission(enum.IntEnum):
    UNSPECIFIED = 0
    READ = 1
    WRITE = 2
    MKNOD = 3


@dataclass
class Device:
    src_path: str = ""
    dst_path: str = ""
    permissions: list[DevicePermission] = field(default_factory=list)


@dataclass
class RunAs:
    user: str = ""
    group: str = ""


class RestartPolicy(enum.IntEnum):
    NONE = 0
    ALWAYS = 1
    ON_FAILURE = 2
    UNLESS_STOPPED = 3


@dataclass
class Restart:
    policy: RestartPolicy = RestartPolicy.NONE
    attempts: int = 0


@dataclass
class Capabilities:
    add: list[str] = field(default_factory=list)
    remove: list[str] = field(default_factory=list)


@dataclass
class Limits:
    max_cpu: float = 0.0
    soft_mem_bytes: int = 0
    hard_mem_bytes: int = 0


@dataclass
class StartContainerRequest:
    image_name: str = ""
    tag: str = ""
    cmd: str = ""
    instance_name: str = ""
    ports: list[Port] = field(default_factory=list)
    environment: dict[str, str] = field(default_factory=dict)
    volumes: list[Volume] = field(default_factory=list)
    devices: list[Device] = field(default_factory=list)
    network: str = ""
    cap: Capabilities | None = None
    run_as: RunAs | None = None
    restart: Restart | None = None
    labels: dict[str, str] = field(default_factory=dict)
    limits: Limits | None = None


@dataclass
class StartContainerResponse:
    """Either the started instance's name or the details of a failure."""

    instance_name: str | None = None
    error_details: str | None = None

    def __post_init__(self) -> None:
        _ensure_one_of(self, ("instance_name", "error_details"))


@dataclass
class StopContainerRequest:
    instance_name: str = ""
    force: bool = False


class UpdateErrorCode(enum.IntEnum):
    UNSPECIFIED = 0
    UNKNOWN = 1
    NOT_FOUND = 2
    NOT_RUNNING = 3
    PORT_USED = 4


@dataclass
class UpdateContainerRequest:
    instance_name: str = ""
    image_name: str = ""
    image_tag: str = ""
    params: StartContainerRequest | None = None
    async_: bool = False


@dataclass
class UpdateContainerResponse:
    """Either a successful update (``instance_name``) or a failure (``error_code``)."""

    instance_name: str | None = None
    is_async: bool = False
    error_code: UpdateErrorCode | None = None
    error_details: str = ""

    def __post_init__(self) -> None:
        _ensure_one_of(self, ("instance_name", "error_code"))


@dataclass
class Plugin:
    instance_name: str = ""
    name: str = ""
    config: str = ""


@dataclass
class ListPluginsRequest:
    instance_name: str = ""


@dataclass
class StartPluginRequest:
    name: str = ""
    instance_name: str = ""
    config: str = ""


@dataclass
class StopPluginRequest:
    instance_name: str = ""


@dataclass
class RemovePluginRequest:
    instance_name: str = ""


class ContainerzStub(Protocol):
    """The calls a containerz service offers.

    Failures are raised as ``containerz.types.StatusError``; streaming calls
    raise it from the returned iterator.
    """

    def create_volume(self, request: CreateVolumeRequest) -> str:
        """Create a volume and return its name."""
        ...

    def list_container(self, request: ListContainerRequest) -> Iterable[ListContainerResponse]:
        ...

    def list_image(self, request: ListImageRequest) -> Iterable[ListImageResponse]:
        ...

    def list_volume(self, request: ListVolumeRequest) -> Iterable[ListVolumeResponse]:
        ...

    def log(self, request: LogRequest) -> Iterable[LogResponse]:
        ...

    def deploy(self, requests: Iterator[DeployRequest]) -> Iterator[DeployResponse]:
        """Run a bidirectional deployment exchange."""
        ...

    def remove_container(self, request: RemoveContainerRequest) -> None:
        ...

    def remove_image(self, request: RemoveImageRequest) -> RemoveImageResponse:
        ...

    def remove_volume(self, request: RemoveVolumeRequest) -> None:
        ...

    def start_container(self, request: StartContainerRequest) -> StartContainerResponse:
        ...

    def stop_container(self, request: StopContainerRequest) -> None:
        ...

    def update_container(self, request: UpdateContainerRequest) -> UpdateContainerResponse:
        ...

    def list_plugins(self, request: ListPluginsRequest) -> list[Plugin]:
        ...

    def start_plugin(self, request: StartPluginRequest) -> None:
        ...

    def stop_plugin(self, request: StopPluginRequest) -> None:
        ...

    def remove_plugin(self, request: RemovePluginRequest) -> None:
        ...