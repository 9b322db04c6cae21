# containerz

A client library for a containerz service: the management interface that
deploys and runs containers, images, volumes and plugins on a remote target.

The package has no runtime dependencies. It does not carry a network
transport of its own; you hand the client an object implementing
`containerz.messages.ContainerzStub`, which delivers the request messages
defined in `containerz.messages` to the target and returns its responses.
The stub reports failures by raising `containerz.types.StatusError`; for
streaming calls it raises it from the returned iterator.

## What is in the package

| Module | Purpose |
| --- | --- |
| `containerz.chunker` | `Reader` and `Writer` for moving files in fixed-size chunks |
| `containerz.types` | Result records (`Progress`, `ContainerInfo`, `ImageInfo`, `VolumeInfo`, `LogMessage`), `StartOptions`, `StatusCode` and the errors `StatusError`, `NotFoundError`, `RunningError` |
| `containerz.messages` | Request and response messages and the `ContainerzStub` interface |
| `containerz.start_options` | Parsing of port, environment, volume, device, run-as and restart-policy definitions, and of volume driver options |
| `containerz.streams` | Streaming operations: container, image and volume listings, logs, image pull and push |
| `containerz.client` | The `Client` class bringing all operations together |

## Using the client

```python
from containerz.client import Client
from containerz.types import NotFoundError, RunningError, StartOptions

client = Client(stub)  # stub implements containerz.messages.ContainerzStub

# Push a tarball produced by `docker save`, following its progress.
for progress in client.push_image("my-image", "latest", "my-image.tar", False):
    if progress.error is not None:
        raise progress.error
    if progress.finished:
        print(f"Pushed {progress.image}/{progress.tag}")
    else:
        print(f"{progress.bytes_received} bytes received")

# List containers; a failure arrives as a final record with `error` set.
for info in client.list_containers(False, -1, None):
    if info.error is not None:
        raise info.error
    print(info.id, info.name, info.image_name, info.state)

# Start a container with some options.
instance = client.start_container(
    "my-image", "latest", "/bin/bash", "my-instance",
    StartOptions(ports=["8080:80"], envs=["MODE=test"], policy="on-failure:3"),
)

# Remove an image, telling apart the two expected failures.
try:
    client.remove_image("my-image", "latest", False)
except NotFoundError:
    print("no such image")
except RunningError:
    print("a container is still running this image")
```

The streaming operations (`list_containers`, `list_images`, `list_volumes`,
`logs`, `pull_image`, `push_image`) return iterators. Listings, logs and
pushes end with one record carrying the error when the stream fails;
`pull_image` simply stops on a broken connection.

Operations that the target rejects raise `StatusError`, which carries a
`StatusCode` and a message. `NotFoundError` and `RunningError` are the
specific cases for missing resources and resources still in use.
`start_plugin` reads a JSON configuration file and raises `OSError` if it
cannot be read and `ValueError` if it is not valid JSON.

### Definition formats

Container start and update options (`StartOptions`) accept these textual
forms:

- ports: `<internal_port>:<external_port>`
- environment: `<NAME>=<VALUE>`
- volumes: `<volume-name>:<mountpoint>[:ro]`
- devices: `<src-path>[:<dst-path>[:<permissions>]]`, permissions drawn from `r`, `w`, `m`
- run as: `<user>[:<group>]`
- restart policy: `always`, `on-failure`, `unless-stopped` or `none`, optionally followed by `:<max_attempts>`

A malformed definition raises `ValueError`; an unknown restart policy raises
`StatusError` with `StatusCode.FAILED_PRECONDITION`.

Volume creation with the `local` driver (the default, also chosen by an
empty driver name) accepts the options `type` (only `none`), `options`
(comma separated) and `mountpoint`; any other driver name is treated as a
custom driver and its options are passed through unchanged.

## Chunked files

```python
from containerz.chunker import Reader, Writer

with Reader("image.tar") as reader:
    while not reader.is_eof():
        chunk = reader.read(3_000_000)
        ...

with Writer("/tmp", 1024) as writer:
    writer.write(b"some data")
    print(writer.size())
```

`Reader.read` raises `EOFError` once the last chunk has been returned.
`Writer` writes into a new temporary file in the given directory, reachable
through `Writer.file()`.

## What the package does not do

- It has no command-line program; it is a library to be called from Python.
- It has no network transport: it does not open connections to a target by
  itself, so a `ContainerzStub` implementation must be supplied.
- It has no server side: it cannot run as a containerz service or manage a
  local container runtime.
- Listing filters are accepted but not sent to the target.

## Running the tests

Install the `test` extra and run pytest from the project directory.