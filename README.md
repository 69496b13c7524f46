# argonkit

A toolkit of small parts that can be used separately:

| Module | What it gives you |
| --- | --- |
| `argonkit.version` | Semantic version comparisons |
| `argonkit.links` | Finding the `rel="next"` URI in an HTTP `Link` header |
| `argonkit.json_formatter` | Human readable JSON, with arrays optionally kept on one line |
| `argonkit.fields` | Getting, setting and iterating dataclass fields by name |
| `argonkit.events`, `argonkit.cache`, `argonkit.debouncer` | Debouncing raw file system events |
| `argonkit.archive` | Archive detection and extraction, safe file moves, update status |
| `argonkit.download` | Downloading a URL into a binary stream |
| `argonkit.errors` | The exceptions raised by the update helpers |

## Installation

```
pip install argonkit
```

The only runtime dependency is `semver`.

## Version checks

```python
from argonkit.version import (
    bump_is_greater, bump_is_compatible, bump_is_major, bump_is_minor, bump_is_patch,
)

bump_is_greater("1.2.0", "1.2.3")      # True
bump_is_compatible("1.2.0", "1.3.3")   # True
bump_is_compatible("0.2.0", "0.3.0")   # False: for 0.x only patch bumps are compatible
bump_is_minor("1.2.3", "1.3.0")        # True
bump_is_patch("1.2.3", "1.2.3")        # False
```

`should_update(current, latest)` is the same check as `bump_is_greater`.
An invalid version string raises `argonkit.errors.SemVerError`.

## Link headers

```python
from argonkit.links import find_rel_next_link

find_rel_next_link('<https://example.com/items?page=2>; rel="next"')
# 'https://example.com/items?page=2'
```

With several links the first `rel="next"` one wins; links whose URI is not
enclosed in `<...>` are skipped. `None` is returned when nothing matches.

## JSON pretty printing

```python
from argonkit.json_formatter import JsonFormatter, dumps

print(dumps({"a": [1, 2], "b": {}}))
# {
#   "a": [
#     1,
#     2
#   ],
#   "b": {}
# }

print(dumps({"a": [1, 2]}, indent="\t", array_breaks=False))
# {
# 	"a": [1, 2]
# }
```

`JsonFormatter(indent=..., array_breaks=...)` offers `format(value)`, which
returns a string, and `write(value, stream)`, which writes to a text stream.
Objects are always broken over lines; empty objects and arrays print as `{}`
and `[]`. Non-finite floats are written as `null`.

## Typed field access

```python
from dataclasses import dataclass, field
from argonkit.fields import FieldAccess

@dataclass
class Settings(FieldAccess):
    host: str = "localhost"
    port: int = 8000
    verbose: bool = False
    internal: str = field(default="", metadata={"skip": True})

settings = Settings()
settings.set("port", "9000")     # parsed as int
settings.set("verbose", "true")  # only "true" or "false" are accepted
settings.get("port")             # 9000
settings.get("missing")          # None
dict(settings)                   # {'host': 'localhost', 'port': 9000, 'verbose': True}
```

Fields whose metadata holds a true `skip` entry are left out. Setting an
unknown field raises `KeyError`; text that does not parse as the field's type
raises `ValueError`. `parse_value(text, kind)` does the parsing for `str`,
`bool`, `int` and `float`.

## File event debouncing

Raw events are `argonkit.events.Event` values with an `EventKind` such as
`EventKind.CREATE_FILE` or `EventKind.RENAME_FROM` (kinds can also be looked
up by name with `EventKind.parse("rename-from")`). `DebounceData` holds the
state: feed it events with `add_event` and collect the ones older than the
timeout with `debounced_events()`. Along the way it

- joins a `rename-from` and a `rename-to` event into one `rename-both` event
  when their trackers or their cached file IDs match,
- updates the paths of queued events after a rename,
- drops duplicate creations and modifications that follow a creation,
- keeps only one remove event when a directory is deleted,
- emits a single rescan event when the back-end flags `Flag.RESCAN`.

```python
from argonkit.cache import NoCache
from argonkit.debouncer import DebounceData
from argonkit.events import Event, EventKind

now = [0.0]
data = DebounceData(NoCache(), timeout=0.05, clock=lambda: now[0])
data.add_event(Event(EventKind.CREATE_FILE, ["/tmp/a.txt"]))
data.add_event(Event(EventKind.MODIFY_DATA_CONTENT, ["/tmp/a.txt"]))
now[0] = 0.1
[e.kind for e in data.debounced_events()]   # [EventKind.CREATE_FILE]
```

`new_debouncer(timeout, tick_rate, event_handler, merge_renames, cache)`
starts a `Debouncer` with a background thread. The tick rate defaults to a
quarter of the timeout; a tick rate above the timeout raises `WatchError`.
The handler is a callable or an object with a `put` method (such as
`queue.Queue`) and receives lists of `DebouncedEvent`, or separately lists of
`WatchError`.

```python
import queue
from argonkit.debouncer import new_debouncer

batches = queue.Queue()
with new_debouncer(2.0, None, batches, True, None) as debouncer:
    debouncer.feed(some_event)        # an Event, or a WatchError
    with debouncer.cache() as cache:  # the FileIdMap, under the debouncer lock
        ...
```

`stop()` waits for the thread to finish; `stop_nonblocking()` does not.

The file ID cache, `argonkit.cache.FileIdMap`, records `FileId`s (device and
inode numbers) of the paths below roots added with
`add_root(path, RecursiveMode.RECURSIVE)` or `RecursiveMode.NON_RECURSIVE`.
`NoCache` turns file ID tracking off.

## Release archives and downloads

```python
from argonkit.archive import ArchiveKind, Compression, Extract, Move, detect_archive

detect_archive("tool.tar.gz")   # ArchiveKind(format=ArchiveFormat.TAR, compression=Compression.GZ)
detect_archive("tool.exe.gz")   # plain file, gzip compressed

Extract("release.tar.gz").extract_into("out")
Extract("release.zip").extract_file("out", "bin/tool")
Extract("blob", ArchiveKind.tar(Compression.GZ)).extract_into("out")

Move("out/tool", temp="backup/tool").to_dest("/usr/local/bin/tool")
```

Plain, gzip, tar, tar.gz/tgz and zip are supported. A compressed plain file
is written under its own name without the last extension by `extract_into`,
or under the requested name by `extract_file`. `Move` with `temp` set moves
an existing destination aside first and puts it back if the move fails.
Failures raise `IoError` or `UpdateError` from `argonkit.errors`.

```python
from argonkit.download import Download

with open("tool.tar.gz", "wb") as dest:
    Download("https://example.com/tool.tar.gz", show_progress=True) \
        .set_header("Accept", "application/octet-stream") \
        .download_to(dest)
```

A non-success status raises `UpdateError`; a failed request raises
`NetworkError`. The progress bar is drawn on standard error, and only when
the response has a content length.

Also in `argonkit.archive`: `get_target()` returns the machine's target
triple (for example `x86_64-unknown-linux-gnu`), `confirm(msg)` asks on
standard input and raises `UpdateError` unless the reply is blank or `y`,
and `Status` records a version tag and whether an update was installed.

## What is not included

- There is no file system watcher back-end. The debouncer only processes
  events and errors passed to it through `Debouncer.feed` or
  `DebounceData.add_event`.
- There is no release listing from a hosting service and no replacement of
  the running executable. The archive and download helpers are building
  blocks for an updater, not an updater.
- There is no command-line program.

## Running the tests

```
pip install "argonkit[test]"
pytest
```