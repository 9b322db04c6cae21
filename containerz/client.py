"""A client for a containerz service, built on top of a service stub."""

from __future__ import annotations

import json
import os
from typing import Iterator, Mapping, Sequence

from containerz import streams
from containerz.messages import (
    ContainerzStub,
    ListPluginsRequest,
    Plugin,
    RemoveContainerRequest,
    RemoveImageCode,
    RemoveImageRequest,
    RemovePluginRequest,
    RemoveVolumeRequest,
    StartPluginRequest,
    StopContainerRequest,
    StopPluginRequest,
    UpdateContainerRequest,
    UpdateErrorCode,
)
from containerz.start_options import build_start_request, request_for_driver
from containerz.types import (
    ContainerInfo,
    ImageInfo,
    LogMessage,
    NotFoundError,
    Progress,
    RunningError,
    StartOptions,
    StatusCode,
    StatusError,
    VolumeInfo,
)


def _reject_constant(name: str) -> float:
    raise ValueError(f"invalid json constant: {name}")


class Client:
    """Operations on containers, images, volumes and plugins of a target."""

    def __init__(self, stub: ContainerzStub) -> None:
        self._stub = stub

    def create_volume(
        self,
        name: str = "",
        driver: str = "",
        labels: Mapping[str, str] | None = None,
        options: Mapping[str, str] | None = None,
    ) -> str:
        """Create a volume and return its name.

        An empty name lets the target choose one; an empty driver selects the
        target's local driver.
        """
        request = request_for_driver(driver, options)
        request.name = name
        request.labels = dict(labels or {})
        return self._stub.create_volume(request)

    def list_containers(
        self,
        all: bool = False,
        limit: int = 0,
        filter: Mapping[str, Sequence[str]] | None = None,
    ) -> Iterator[ContainerInfo]:
        """List the containers on the target."""
        return streams.list_containers(self._stub, all, limit, filter)

    def list_images(
        self,
        limit: int = 0,
        filter: Mapping[str, Sequence[str]] | None = None,
    ) -> Iterator[ImageInfo]:
        """List the images on the target."""
        return streams.list_images(self._stub, limit, filter)

    def list_volumes(
        self, filter: Mapping[str, Sequence[str]] | None = None
    ) -> Iterator[VolumeInfo]:
        """List the volumes on the target."""
        return streams.list_volumes(self._stub, filter)

    def logs(self, instance: str, follow: bool = False) -> Iterator[LogMessage]:
        """Fetch a container's logs, optionally following them."""
        return streams.logs(self._stub, instance, follow)

    def pull_image(
        self, image: str, tag: str, credentials: object | None = None
    ) -> Iterator[Progress]:
        """Have the target download an image and report the progress."""
        return streams.pull_image(self._stub, image, tag, credentials)

    def push_image(
        self,
        image: str,
        tag: str,
        file: str | os.PathLike[str],
        is_plugin: bool = False,
    ) -> Iterator[Progress]:
        """Upload a local image archive to the target and report the progress."""
        return streams.push_image(self._stub, image, tag, file, is_plugin)

    def list_plugins(self, instance: str = "") -> list[Plugin]:
        """List the plugins on the target, or only the one named ``instance``."""
        return list(self._stub.list_plugins(ListPluginsRequest(instance_name=instance)))

    def remove_container(self, name: str, force: bool = False) -> None:
        """Remove a container.

        Raises NotFoundError if it does not exist and RunningError if it is
        still running.
        """
        try:
            self._stub.remove_container(RemoveContainerRequest(name=name, force=force))
        except StatusError as err:
            if err.code == StatusCode.FAILED_PRECONDITION:
                raise RunningError() from err
            if err.code == StatusCode.NOT_FOUND:
                raise NotFoundError() from err
            raise StatusError(StatusCode.UNKNOWN, f"unknown error: {err.message}") from err

    def remove_image(self, image: str, tag: str, force: bool = False) -> None:
        """Remove an image.

        Raises NotFoundError if it does not exist and RunningError if a
        container still uses it.
        """
        response = self._stub.remove_image(
            RemoveImageRequest(name=image, tag=tag, force=force)
        )
        if response.code == RemoveImageCode.SUCCESS:
            return
        if response.code == RemoveImageCode.NOT_FOUND:
            raise NotFoundError()
        if response.code == RemoveImageCode.RUNNING:
            raise RunningError()
        raise RuntimeError("unknown error occurred")

    def remove_plugin(self, instance: str) -> None:
        """Remove the plugin named ``instance``."""
        self._stub.remove_plugin(RemovePluginRequest(instance_name=instance))

    def remove_volume(self, name: str, force: bool = False) -> None:
        """Remove a volume."""
        self._stub.remove_volume(RemoveVolumeRequest(name=name, force=force))

    def start_container(
        self,
        image: str,
        tag: str,
        cmd: str,
        instance: str,
        options: StartOptions | None = None,
    ) -> str:
        """Start a container and return its instance name."""
        request = build_start_request(image, tag, cmd, instance, options)
        response = self._stub.start_container(request)
        if response.instance_name is not None:
            return response.instance_name
        if response.error_details is not None:
            raise StatusError(
                StatusCode.INTERNAL, f"failed to start container: {response.error_details}"
            )
        raise StatusError(StatusCode.UNKNOWN, "unknown container state")

    def start_plugin(
        self, name: str, instance: str, config_file: str | os.PathLike[str]
    ) -> None:
        """Start a plugin with the JSON configuration held in ``config_file``."""
        try:
            with open(config_file, "rb") as handle:
                raw = handle.read()
        except OSError as err:
            raise OSError(f"failed to read config file: {err}") from err

        try:
            config = raw.decode("utf-8")
            json.loads(config, parse_constant=_reject_constant)
        except ValueError as err:
            raise ValueError(f"invalid json: {err}") from err

        self._stub.start_plugin(
            StartPluginRequest(name=name, instance_name=instance, config=config)
        )

    def stop_container(self, instance: str, force: bool = False) -> None:
        """Stop a container, forcibly if ``force`` is set."""
        self._stub.stop_container(StopContainerRequest(instance_name=instance, force=force))

    def stop_plugin(self, instance: str) -> None:
        """Stop the plugin named ``instance``."""
        self._stub.stop_plugin(StopPluginRequest(instance_name=instance))

    def update_container(
        self,
        image: str,
        tag: str,
        cmd: str,
        instance: str,
        async_: bool = False,
        options: StartOptions | None = None,
    ) -> str:
        """Update a running container and return its instance name."""
        params = build_start_request(image, tag, cmd, instance, options)
        request = UpdateContainerRequest(
            instance_name=instance,
            image_name=image,
            image_tag=tag,
            params=params,
            async_=async_,
        )
        response = self._stub.update_container(request)
        if response.instance_name is not None:
            return response.instance_name
        if response.error_code is not None:
            details = response.error_details
            if response.error_code == UpdateErrorCode.NOT_FOUND:
                raise NotFoundError()
            if response.error_code == UpdateErrorCode.NOT_RUNNING:
                raise StatusError(
                    StatusCode.FAILED_PRECONDITION,
                    f"failed to update container as container is not running: {details}",
                )
            if response.error_code == UpdateErrorCode.PORT_USED:
                raise StatusError(
                    StatusCode.ALREADY_EXISTS,
                    f"failed to update container as port already exists: {details}",
                )
            raise StatusError(StatusCode.INTERNAL, f"failed to update container: {details}")
        raise StatusError(StatusCode.UNKNOWN, "unknown container state")