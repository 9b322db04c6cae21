"""Turn user-supplied container and volume settings into service requests."""

from __future__ import annotations

import json
import re
from typing import Iterable, Mapping

from containerz.messages import (
    Capabilities,
    CreateVolumeRequest,
    CustomOptions,
    Device,
    DevicePermission,
    Driver,
    Limits,
    LocalDriverOptions,
    LocalDriverType,
    Port,
    Restart,
    RestartPolicy,
    RunAs,
    StartContainerRequest,
    Volume,
)
from containerz.types import StartOptions, StatusCode, StatusError

_INTEGER = re.compile(r"[+-]?[0-9]+")
_UINT32 = 1 << 32

_PERMISSIONS = {
    "r": DevicePermission.READ,
    "w": DevicePermission.WRITE,
    "m": DevicePermission.MKNOD,
}

_POLICIES = {
    "always": RestartPolicy.ALWAYS,
    "on-failure": RestartPolicy.ON_FAILURE,
    "unless-stopped": RestartPolicy.UNLESS_STOPPED,
    "none": RestartPolicy.NONE,
}


def _to_int(text: str) -> int:
    """Parse a plain decimal integer, rejecting anything looser."""
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _to_uint32(value: int) -> int:
    return value % _UINT32


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def parse_ports(ports: Iterable[str]) -> list[Port]:
    """Parse ``<internal>:<external>`` port definitions."""
    mapping = []
    for port in ports:
        parts = port.split(":", 1)
        if len(parts) != 2:
            raise ValueError(f"port definition {port} is invalid")
        internal = _to_int(parts[0])
        external = _to_int(parts[1])
        mapping.append(Port(internal=_to_uint32(internal), external=_to_uint32(external)))
    return mapping


def parse_envs(envs: Iterable[str]) -> dict[str, str]:
    """Parse ``NAME=VALUE`` environment definitions."""
    mapping: dict[str, str] = {}
    for env in envs:
        key, sep, value = env.partition("=")
        if not sep:
            raise ValueError(f"env definition {env} is invalid")
        mapping[key] = value
    return mapping


def parse_volumes(volumes: Iterable[str]) -> list[Volume]:
    """Parse ``<name>:<mountpoint>[:ro]`` volume definitions."""
    result = []
    for volume in volumes:
        parts = volume.split(":", 2)
        if len(parts) == 2:
            result.append(Volume(name=parts[0], mount_point=parts[1]))
        elif len(parts) == 3:
            result.append(
                Volume(name=parts[0], mount_point=parts[1], read_only=parts[2] == "ro")
            )
        else:
            raise ValueError(f"volume definition {volume} is invalid")
    return result


def parse_devices(devices: Iterable[str]) -> list[Device]:
    """Parse ``<src>[:<dst>[:<permissions>]]`` device definitions."""
    result = []
    for dev in devices:
        parts = dev.split(":", 2)
        if len(parts) == 1:
            result.append(
                Device(
                    src_path=parts[0],
                    dst_path=parts[0],
                    permissions=[
                        DevicePermission.READ,
                        DevicePermission.WRITE,
                        DevicePermission.MKNOD,
                    ],
                )
            )
        elif len(parts) == 2:
            result.append(
                Device(
                    src_path=parts[0],
                    dst_path=parts[1],
                    permissions=[DevicePermission.READ, DevicePermission.WRITE],
                )
            )
        else:
            perms = []
            for letter in parts[2]:
                try:
                    perms.append(_PERMISSIONS[letter])
                except KeyError:
                    raise ValueError(f"unknown device permission {letter}") from None
            result.append(Device(src_path=parts[0], dst_path=parts[1], permissions=perms))
    return result


def parse_run_as(run_as: str) -> RunAs | None:
    """Parse a ``<user>[:<group>]`` definition; an empty one yields None."""
    if not run_as:
        return None
    user, sep, group = run_as.partition(":")
    if sep:
        return RunAs(user=user, group=group)
    return RunAs(user=user)


def parse_restart(policy: str) -> Restart | None:
    """Parse a ``<policy>[:<max_attempts>]`` definition; an empty one yields None."""
    if not policy:
        return None
    parts = policy.split(":", 1)
    attempts = 0
    if len(parts) == 2:
        try:
            attempts = _to_int(parts[1])
        except ValueError as err:
            raise ValueError(f"failed to parse attempts in restart policy: {err}") from err

    policy_type = _POLICIES.get(parts[0].lower())
    if policy_type is None:
        raise StatusError(
            StatusCode.FAILED_PRECONDITION,
            f"restart policy `{parts[0]}` is none of always, on-failure, unless-stopped, none",
        )
    return Restart(policy=policy_type, attempts=_to_uint32(attempts))


def build_start_request(
    image: str,
    tag: str,
    cmd: str,
    instance: str,
    options: StartOptions | None = None,
) -> StartContainerRequest:
    """Build the request that starts a container with the given settings."""
    opts = options if options is not None else StartOptions()

    ports = parse_ports(opts.ports)
    environment = parse_envs(opts.envs)
    volumes = parse_volumes(opts.volumes)
    devices = parse_devices(opts.devices)
    cap = Capabilities(add=list(opts.cap_add), remove=list(opts.cap_remove))
    run_as = parse_run_as(opts.run_as)
    restart = parse_restart(opts.policy)

    return StartContainerRequest(
        image_name=image,
        tag=tag,
        cmd=cmd,
        instance_name=instance,
        ports=ports,
        environment=environment,
        volumes=volumes,
        devices=devices,
        network=opts.network,
        cap=cap,
        run_as=run_as,
        restart=restart,
        labels=dict(opts.labels),
        limits=Limits(
            max_cpu=opts.cpus,
            soft_mem_bytes=opts.soft_mem,
            hard_mem_bytes=opts.hard_mem,
        ),
    )


def request_for_driver(
    driver: str, options: Mapping[str, str] | None = None
) -> CreateVolumeRequest:
    """Build a volume creation request for ``driver`` with its options.

    The empty driver and ``local`` select the local driver, whose options are
    checked; any other name is a custom driver whose options pass through.
    """
    options = options or {}
    if driver.lower() in ("local", ""):
        local = LocalDriverOptions()
        for key, value in options.items():
            lowered = key.lower()
            if lowered == "type":
                if value.lower() not in ("none", ""):
                    raise ValueError(f"invalid type: {_quote(value)}")
                local.type = LocalDriverType.TYPE_NONE
            elif lowered == "options":
                local.options = value.split(",")
            elif lowered == "mountpoint":
                local.mountpoint = value
            else:
                raise ValueError(f"invalid key: {_quote(key)}")
        return CreateVolumeRequest(driver=Driver.DS_LOCAL, local_mount_options=local)

    return CreateVolumeRequest(
        driver=Driver.DS_CUSTOM,
        custom_options=CustomOptions(options=dict(options)),
    )