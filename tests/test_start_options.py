import pytest

from containerz.messages import (
    Capabilities,
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
    Volume,
)
from containerz.start_options import (
    build_start_request,
    parse_devices,
    parse_envs,
    parse_ports,
    parse_restart,
    parse_run_as,
    parse_volumes,
    request_for_driver,
)
from containerz.types import StartOptions, StatusCode, StatusError


def _simple(options=None):
    return build_start_request("some-image", "some-tag", "some-cmd", "some-instance", options)


def test_simple_request():
    req = _simple()
    assert req.image_name == "some-image"
    assert req.tag == "some-tag"
    assert req.cmd == "some-cmd"
    assert req.instance_name == "some-instance"
    assert req.ports == []
    assert req.environment == {}
    assert req.run_as is None
    assert req.restart is None
    assert req.limits == Limits()


def test_with_ports():
    req = _simple(StartOptions(ports=["1:1", "2:2"]))
    assert req.ports == [Port(internal=1, external=1), Port(internal=2, external=2)]


def test_with_envs():
    req = _simple(StartOptions(envs=["env1=cool", "env2=cooler"]))
    assert req.environment == {"env1": "cool", "env2": "cooler"}


def test_with_envs_and_volumes():
    req = _simple(StartOptions(envs=["env1=cool", "env2=cooler"], volumes=["vol1:/aa", "vol2:/bb:ro"]))
    assert req.environment == {"env1": "cool", "env2": "cooler"}
    assert req.volumes == [
        Volume(name="vol1", mount_point="/aa"),
        Volume(name="vol2", mount_point="/bb", read_only=True),
    ]


def test_with_devices():
    req = _simple(StartOptions(devices=["dev1", "dev2:mydev2", "dev3:mydev3:rw"]))
    assert req.devices == [
        Device(
            src_path="dev1",
            dst_path="dev1",
            permissions=[DevicePermission.READ, DevicePermission.WRITE, DevicePermission.MKNOD],
        ),
        Device(
            src_path="dev2",
            dst_path="mydev2",
            permissions=[DevicePermission.READ, DevicePermission.WRITE],
        ),
        Device(
            src_path="dev3",
            dst_path="mydev3",
            permissions=[DevicePermission.READ, DevicePermission.WRITE],
        ),
    ]


def test_with_network():
    assert _simple(StartOptions(network="some-network")).network == "some-network"


def test_with_run_as_only_user():
    assert _simple(StartOptions(run_as="my-user")).run_as == RunAs(user="my-user")


def test_with_run_as_with_group():
    assert _simple(StartOptions(run_as="my-user:my-group")).run_as == RunAs(
        user="my-user", group="my-group"
    )


def test_with_capabilities():
    req = _simple(StartOptions(cap_add=["cap1", "cap2"], cap_remove=["cap3", "cap4"]))
    assert req.cap == Capabilities(add=["cap1", "cap2"], remove=["cap3", "cap4"])


def test_with_policy_no_attempts():
    assert _simple(StartOptions(policy="always")).restart == Restart(
        policy=RestartPolicy.ALWAYS, attempts=0
    )


def test_with_policy_with_attempts():
    assert _simple(StartOptions(policy="always:3")).restart == Restart(
        policy=RestartPolicy.ALWAYS, attempts=3
    )


def test_with_labels_and_limits():
    req = _simple(StartOptions(labels={"key1": "value1"}, cpus=1.0, soft_mem=1000, hard_mem=2000))
    assert req.labels == {"key1": "value1"}
    assert req.limits == Limits(max_cpu=1.0, soft_mem_bytes=1000, hard_mem_bytes=2000)


def test_unrecognized_policy():
    with pytest.raises(StatusError) as info:
        _simple(StartOptions(policy="my-policy"))
    assert info.value == StatusError(
        StatusCode.FAILED_PRECONDITION,
        "restart policy `my-policy` is none of always, on-failure, unless-stopped, none",
    )


@pytest.mark.parametrize(
    "policy, expected",
    [
        ("ON-FAILURE:5", RestartPolicy.ON_FAILURE),
        ("unless-stopped", RestartPolicy.UNLESS_STOPPED),
        ("none", RestartPolicy.NONE),
    ],
)
def test_restart_policies(policy, expected):
    assert parse_restart(policy).policy == expected


def test_restart_bad_attempts():
    with pytest.raises(ValueError, match="failed to parse attempts"):
        parse_restart("always:x")


def test_restart_empty_is_none():
    assert parse_restart("") is None
    assert parse_run_as("") is None


@pytest.mark.parametrize("port", ["80", "a:1", "1:b", "1:2:3"])
def test_bad_ports(port):
    with pytest.raises(ValueError):
        parse_ports([port])


def test_bad_env():
    with pytest.raises(ValueError, match="env definition FOO is invalid"):
        parse_envs(["FOO"])


def test_env_value_keeps_equals():
    assert parse_envs(["A=b=c"]) == {"A": "b=c"}


def test_bad_volume():
    with pytest.raises(ValueError, match="volume definition vol is invalid"):
        parse_volumes(["vol"])


def test_volume_rw_flag_is_not_read_only():
    assert parse_volumes(["v:/m:rw"]) == [Volume(name="v", mount_point="/m", read_only=False)]


def test_bad_device_permission():
    with pytest.raises(ValueError, match="unknown device permission x"):
        parse_devices(["a:b:rx"])


def test_device_mknod_permission():
    assert parse_devices(["a:b:m"])[0].permissions == [DevicePermission.MKNOD]


def test_driver_default_is_local():
    req = request_for_driver("", {})
    assert req.driver == Driver.DS_LOCAL
    assert req.local_mount_options == LocalDriverOptions()
    assert req.custom_options is None


def test_custom_driver():
    req = request_for_driver("custom-driver", {"foo": "bar"})
    assert req.driver == Driver.DS_CUSTOM
    assert req.custom_options == CustomOptions(options={"foo": "bar"})
    assert req.local_mount_options is None


def test_local_driver_wrong_option():
    with pytest.raises(ValueError) as info:
        request_for_driver("local", {"foo": "bar"})
    assert str(info.value) == 'invalid key: "foo"'


def test_local_driver_wrong_type():
    with pytest.raises(ValueError) as info:
        request_for_driver("local", {"type": "bar"})
    assert str(info.value) == 'invalid type: "bar"'


def test_bind_mount():
    req = request_for_driver(
        "local", {"type": "none", "options": "opt1,opt2", "mountpoint": "/here"}
    )
    assert req.driver == Driver.DS_LOCAL
    assert req.local_mount_options == LocalDriverOptions(
        type=LocalDriverType.TYPE_NONE, options=["opt1", "opt2"], mountpoint="/here"
    )


def test_local_driver_is_case_insensitive():
    req = request_for_driver("LOCAL", {"MountPoint": "/x"})
    assert req.driver == Driver.DS_LOCAL
    assert req.local_mount_options.mountpoint == "/x"