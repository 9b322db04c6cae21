"""Streaming calls of the containerz client: listings, logs and image transfers."""

from __future__ import annotations

import logging
import os
import queue
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Mapping, Sequence, TypeVar

from containerz.chunker import Reader
from containerz.messages import (
    ContainerzStub,
    DeployRequest,
    DeployResponse,
    ImageTransfer,
    ImageTransferEnd,
    ListContainerRequest,
    ListContainerResponse,
    ListImageRequest,
    ListImageResponse,
    ListVolumeRequest,
    ListVolumeResponse,
    LogRequest,
    LogResponse,
)
from containerz.types import (
    ContainerInfo,
    ImageInfo,
    LogMessage,
    Progress,
    StatusCode,
    StatusError,
    VolumeInfo,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

_Msg = TypeVar("_Msg")
_Info = TypeVar("_Info")


def _to_filter(filter: Mapping[str, Sequence[str]] | None) -> list[object]:
    """Return the request filters for ``filter``.

    Filters are not forwarded to the target yet, so this is always empty.
    """
    return []


def _stream(
    responses: Iterator[_Msg],
    convert: Callable[[_Msg], _Info],
    on_error: Callable[[Exception], _Info],
) -> Iterator[_Info]:
    """Convert each response; an error ends the stream with one error record."""
    while True:
        try:
            message = next(responses)
        except StopIteration:
            return
        except Exception as err:  # the stream reports any failure as a record
            yield on_error(err)
            return
        yield convert(message)


def list_containers(
    stub: ContainerzStub,
    all: bool = False,
    limit: int = 0,
    filter: Mapping[str, Sequence[str]] | None = None,
) -> Iterator[ContainerInfo]:
    """List the containers on the target system."""
    request = ListContainerRequest(all=all, limit=limit, filter=_to_filter(filter))
    responses = iter(stub.list_container(request))

    def convert(msg: ListContainerResponse) -> ContainerInfo:
        return ContainerInfo(
            id=msg.id, name=msg.name, image_name=msg.image_name, state=msg.status.name
        )

    return _stream(responses, convert, lambda err: ContainerInfo(error=err))


def list_images(
    stub: ContainerzStub,
    limit: int = 0,
    filter: Mapping[str, Sequence[str]] | None = None,
) -> Iterator[ImageInfo]:
    """List the images on the target system."""
    request = ListImageRequest(limit=limit, filter=_to_filter(filter))
    responses = iter(stub.list_image(request))

    def convert(msg: ListImageResponse) -> ImageInfo:
        return ImageInfo(id=msg.id, image_name=msg.image_name, image_tag=msg.tag)

    return _stream(responses, convert, lambda err: ImageInfo(error=err))


def list_volumes(
    stub: ContainerzStub,
    filter: Mapping[str, Sequence[str]] | None = None,
) -> Iterator[VolumeInfo]:
    """List the volumes on the target system."""
    request = ListVolumeRequest(filter=_to_filter(filter))
    responses = iter(stub.list_volume(request))

    def convert(msg: ListVolumeResponse) -> VolumeInfo:
        return VolumeInfo(
            name=msg.name,
            driver=msg.driver,
            labels=dict(msg.labels),
            options=dict(msg.options),
            creation_time=msg.created if msg.created is not None else _EPOCH,
        )

    return _stream(responses, convert, lambda err: VolumeInfo(error=err))


def logs(stub: ContainerzStub, instance: str, follow: bool = False) -> Iterator[LogMessage]:
    """Fetch a container's logs, optionally following them as they are produced."""
    responses = iter(stub.log(LogRequest(instance_name=instance, follow=follow)))

    def convert(msg: LogResponse) -> LogMessage:
        return LogMessage(msg=msg.msg)

    return _stream(responses, convert, lambda err: LogMessage(error=err))


def pull_image(
    stub: ContainerzStub,
    image: str,
    tag: str,
    credentials: object | None = None,
) -> Iterator[Progress]:
    """Ask the target to download an image itself and report its progress.

    A broken connection ends the progress stream without an error record.
    """
    request = DeployRequest(
        image_transfer=ImageTransfer(name=image, tag=tag, remote_download=True)
    )
    responses = iter(stub.deploy(iter([request])))

    def progress() -> Iterator[Progress]:
        while True:
            try:
                message = next(responses)
            except StopIteration:
                return
            except Exception as err:
                logger.warning("server unexpectedly disconnected: %s", err)
                return
            if message.image_transfer_progress is not None:
                yield Progress(bytes_received=message.image_transfer_progress.bytes_received)

    return progress()


def _outgoing(outbox: queue.Queue[DeployRequest | None]) -> Iterator[DeployRequest]:
    """Hand queued requests to the stub until the closing marker arrives."""
    while True:
        request = outbox.get()
        if request is None:
            return
        yield request


def _expect(responses: Iterator[DeployResponse], attribute: str) -> object:
    """Receive the next response and return its payload named ``attribute``."""
    try:
        message = next(responses)
    except StopIteration:
        raise EOFError("deploy stream ended unexpectedly") from None
    payload = getattr(message, attribute)
    if payload is None:
        kind = message.kind()
        name = kind.__name__ if kind is not None else "None"
        raise StatusError(
            StatusCode.INVALID_ARGUMENT, f"received unexpected message type: {name}"
        )
    return payload


def push_image(
    stub: ContainerzStub,
    image: str,
    tag: str,
    file: str | os.PathLike[str],
    is_plugin: bool = False,
) -> Iterator[Progress]:
    """Upload a local image archive to the target and report the progress.

    The last record is either a finished one naming the stored image, or one
    carrying the error that stopped the transfer.
    """
    reader = Reader(file)
    outbox: queue.Queue[DeployRequest | None] = queue.Queue()
    try:
        responses = iter(stub.deploy(_outgoing(outbox)))
    except BaseException:
        reader.close()
        raise

    def transfer() -> Iterator[Progress]:
        try:
            outbox.put(
                DeployRequest(
                    image_transfer=ImageTransfer(
                        name=image, tag=tag, image_size=reader.size(), is_plugin=is_plugin
                    )
                )
            )
            ready = _expect(responses, "image_transfer_ready")
            chunk_size = ready.chunk_size
            while True:
                try:
                    chunk = reader.read(chunk_size)
                except EOFError:
                    break
                outbox.put(DeployRequest(content=chunk))
                progress = _expect(responses, "image_transfer_progress")
                yield Progress(bytes_received=progress.bytes_received)
            outbox.put(DeployRequest(image_transfer_end=ImageTransferEnd()))
            success = _expect(responses, "image_transfer_success")
            yield Progress(finished=True, image=success.name, tag=success.tag)
        except Exception as err:  # reported to the caller as the last record
            yield Progress(error=err)
        finally:
            outbox.put(None)
            reader.close()

    return transfer()