# nfskit

Building blocks for an NFS server, in plain Python with no third-party
dependencies:

- `nfskit.xdr`: an XDR (RFC 4506) `Reader` and `Writer` driven by type
  specs, the RPC message `Header` and `MsgType`, and the `pad` helper.
- `nfskit.inodes`: `FileInfo` and `stat()` for file metadata taken without
  following a final symbolic link, and `Inodes`, a thread-safe two-way map
  between inode numbers and host paths.
- `nfskit.utils`: `rand_uint32()`, a random 32-bit number from a
  cryptographic source.

## Installation

```
pip install .
```

## XDR

```python
import io
from nfskit.xdr import Reader, Writer, pad

buf = io.BytesIO()
writer = Writer(buf)
writer.write_any("hello", str)    # 12: length word, 5 bytes, 3 bytes padding
writer.write_uint32(7)            # 4

reader = Reader(io.BytesIO(buf.getvalue()))
print(reader.read_as(str))        # ('hello', 12): the value and bytes consumed
print(reader.read_uint32())       # 7
print(pad(5))                     # 3
```

`Reader.read_as(spec)` always returns a pair of the decoded value and the
number of bytes it took from the stream. `Writer.write_any(value, spec=None)`
returns the number of bytes written; without a spec, one is inferred from the
value, and `None` is written as nothing at all.

Specs describe the wire shape:

- scalar names `"bool"`, `"int8"` to `"int64"`, `"uint8"` to `"uint64"`,
  `"float32"`, `"float64"`, `"string"` and `"opaque"`; 64-bit integers and
  `"float64"` take eight bytes, every other number four;
- the Python types `bool`, `int` (a `uint32`), `float` (a `float64`), `str`
  (a string) and `bytes` (variable-length opaque data);
- `FixedOpaque(length)`, `FixedArray(elem, length)` and `VarArray(elem)`;
  arrays of `"uint8"` are encoded as opaque data;
- dataclasses, encoded field by field. A field's spec comes from
  `metadata={"xdr": spec}` or else from its annotation, where `list[X]` is a
  variable-length array and `X | None` is encoded as `X`.

```python
import dataclasses
import io
from nfskit.xdr import Reader, Writer

@dataclasses.dataclass
class Entry:
    cookie: int = dataclasses.field(metadata={"xdr": "uint64"})
    name: str
    children: list[int]

buf = io.BytesIO()
Writer(buf).write_any(Entry(1, "a", [2, 3]))
entry, size = Reader(io.BytesIO(buf.getvalue())).read_as(Entry)
```

Values that do not fit their spec raise `XdrError`; a stream that ends
early raises `EOFError`.

## File metadata and inodes

```python
from nfskit.inodes import Inodes, stat

fi = stat("/srv/export/readme.txt")
print(fi.name, fi.inode(), fi.size(), fi.is_dir(), fi.mtime())

inodes = Inodes()
inodes.scan("/srv/export")          # every entry below, the directory included
path = inodes.get_path(fi.inode())  # "" when unknown
inode = inodes.get_id(path)         # 0 when unknown
```

`FileInfo` also offers `atime()`, `ctime()` (UTC datetimes), `num_links()`
and `mode()`. `Inodes.update_all(path)` records a path and each of its
parents up to the first one already known; `add`, `exist_path`,
`remove_id` and `remove_path` maintain the map by hand.

## What this package does not do

It holds no NFS server, no RPC dispatch and no filesystem that performs
file operations: it offers the encoding, metadata and inode bookkeeping
such a server is built from, and no command to run.

## Running the tests

```
pip install ".[test]"
pytest
```