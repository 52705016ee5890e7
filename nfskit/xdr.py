"""XDR (RFC 4506) encoding and decoding of typed values.

Values are described by *specs*:

* scalar names: ``"bool"``, ``"int8"`` .. ``"int64"``, ``"uint8"`` ..
  ``"uint64"``, ``"float32"``, ``"float64"``, ``"string"``, ``"opaque"``;
* the Python types ``bool``, ``int`` (``uint32``), ``float`` (``float64``),
  ``str`` (``string``) and ``bytes`` (``opaque``);
* :class:`FixedOpaque`, :class:`FixedArray` and :class:`VarArray`;
* dataclass types, encoded field by field.  A field's spec comes from
  ``metadata={"xdr": spec}`` or else from its type annotation, where
  ``list[X]`` is a variable-length array and ``X | None`` is encoded as ``X``.

``None`` is written as nothing at all.
"""

import dataclasses
import enum
import struct
import types
import typing
from typing import Any, BinaryIO, Iterator


class XdrError(Exception):
    """Raised when a value cannot be encoded or decoded."""


class MsgType(enum.IntEnum):
    """RPC message types."""

    RPC_CALL = 0
    RPC_REPLY = 1


@dataclasses.dataclass
class Header:
    """The leading words of an RPC message."""

    xid: int = 0
    msg_type: int = MsgType.RPC_CALL


@dataclasses.dataclass(frozen=True)
class FixedOpaque:
    """Fixed-length opaque data: ``opaque name[length]``."""

    length: int


@dataclasses.dataclass(frozen=True)
class FixedArray:
    """Fixed-length array: ``elem name[length]``."""

    elem: Any
    length: int


@dataclasses.dataclass(frozen=True)
class VarArray:
    """Variable-length array: ``elem name<>``.

    ``elem`` may be ``None`` when writing; each item's spec is then inferred.
    """

    elem: Any = None


# name -> (bytes on the wire, significant bits, signed)
_INTEGERS = {
    "int8": (4, 8, True),
    "uint8": (4, 8, False),
    "int16": (4, 16, True),
    "uint16": (4, 16, False),
    "int32": (4, 32, True),
    "uint32": (4, 32, False),
    "int64": (8, 64, True),
    "uint64": (8, 64, False),
}

_SCALARS = frozenset({"bool", "float32", "float64", "string", "opaque", *_INTEGERS})

_UNION_ORIGINS = (typing.Union, types.UnionType)

# Annotations kept as text are understood only for the plain built-in types.
_BUILTIN_HINTS = {
    "bool": bool,
    "int": int,
    "float": float,
    "str": str,
    "bytes": bytes,
    "bytearray": bytearray,
}


def pad(size: int) -> int:
    """Return the number of zero bytes that align ``size`` to four bytes."""
    return -size % 4


def _resolve(spec: Any) -> Any:
    """Turn a spec into its canonical form."""
    if isinstance(spec, str):
        if spec in _SCALARS:
            return spec
        raise XdrError(f"type not supported: {spec}")

    origin = typing.get_origin(spec)
    if origin is not None:
        args = typing.get_args(spec)
        if origin in (list, tuple) and args:
            return _resolve(VarArray(args[0]))
        if origin in _UNION_ORIGINS:
            present = [arg for arg in args if arg is not type(None)]
            if len(present) == 1:
                return _resolve(present[0])
        raise XdrError(f"type not supported: {spec!r}")

    if isinstance(spec, FixedOpaque):
        return spec
    if isinstance(spec, FixedArray):
        if spec.elem is not None and _resolve(spec.elem) == "uint8":
            return FixedOpaque(spec.length)
        return spec
    if isinstance(spec, VarArray):
        if spec.elem is not None and _resolve(spec.elem) == "uint8":
            return "opaque"
        return spec

    if isinstance(spec, type):
        if issubclass(spec, bool):
            return "bool"
        if issubclass(spec, int):
            return "uint32"
        if issubclass(spec, float):
            return "float64"
        if issubclass(spec, str):
            return "string"
        if issubclass(spec, (bytes, bytearray)):
            return "opaque"
        if dataclasses.is_dataclass(spec):
            return spec

    raise XdrError(f"type not supported: {spec!r}")


def _infer(value: Any) -> Any:
    """Choose a spec for a value written without one."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "uint32"
    if isinstance(value, float):
        return "float64"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "opaque"
    if isinstance(value, (list, tuple)):
        return VarArray(None)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return type(value)
    raise XdrError(f"type not supported: {type(value).__name__}")


def _field_spec(field: dataclasses.Field) -> Any:
    if "xdr" in field.metadata:
        return field.metadata["xdr"]
    hint = field.type
    if isinstance(hint, str):
        if hint not in _BUILTIN_HINTS:
            raise XdrError(f"type not supported: {hint}")
        return _BUILTIN_HINTS[hint]
    return hint


def _struct_fields(cls: type) -> Iterator[tuple[str, Any]]:
    """Yield (name, spec) for each initialisable field of a dataclass."""
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        try:
            spec = _field_spec(field)
        except XdrError as exc:
            raise XdrError(f"field {field.name}: {exc}") from exc
        yield field.name, spec


def _fit(raw: int, bits: int, signed: bool) -> int:
    value = raw & ((1 << bits) - 1)
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


class Reader:
    """Decodes XDR values from a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read(self, size: int) -> bytes:
        """Perform a single read of at most ``size`` bytes."""
        if size <= 0:
            return b""
        return self._stream.read(size) or b""

    def read_bytes(self, size: int) -> bytes:
        """Read exactly ``size`` bytes; raise EOFError if the stream ends first."""
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)
        if len(data) < size:
            raise EOFError(f"expected {size} bytes, got {len(data)}")
        return data

    def read_uint32(self) -> int:
        return int.from_bytes(self.read_bytes(4), "big")

    def read_as(self, spec: Any) -> tuple[Any, int]:
        """Decode a value of the given spec; return it with the bytes consumed."""
        return self._read(_resolve(spec))

    def _read(self, spec: Any) -> tuple[Any, int]:
        if isinstance(spec, str):
            return self._read_scalar(spec)
        if isinstance(spec, FixedOpaque):
            data = self.read_bytes(spec.length + pad(spec.length))
            return data[: spec.length], len(data)
        if isinstance(spec, FixedArray):
            return self._read_items(spec.elem, spec.length)
        if isinstance(spec, VarArray):
            count = self.read_uint32()
            items, consumed = self._read_items(spec.elem, count)
            return items, consumed + 4
        return self._read_struct(spec)

    def _read_scalar(self, kind: str) -> tuple[Any, int]:
        if kind == "bool":
            return self.read_uint32() > 0, 4
        if kind == "float32":
            (value,) = struct.unpack(">f", self.read_bytes(4))
            return value, 4
        if kind == "float64":
            (value,) = struct.unpack(">d", self.read_bytes(8))
            return value, 8
        if kind in ("string", "opaque"):
            length = self.read_uint32()
            data = self.read_bytes(length + pad(length))
            body = data[:length]
            if kind == "string":
                return body.decode("utf-8", "surrogateescape"), 4 + len(data)
            return body, 4 + len(data)
        width, bits, signed = _INTEGERS[kind]
        raw = int.from_bytes(self.read_bytes(width), "big")
        return _fit(raw, bits, signed), width

    def _read_items(self, elem: Any, count: int) -> tuple[list[Any], int]:
        if elem is None:
            raise XdrError("array element type is required for reading")
        elem = _resolve(elem)
        items = []
        consumed = 0
        for _ in range(count):
            item, size = self._read(elem)
            items.append(item)
            consumed += size
        return items, consumed

    def _read_struct(self, cls: type) -> tuple[Any, int]:
        values = {}
        consumed = 0
        for name, field_spec in _struct_fields(cls):
            try:
                value, size = self._read(_resolve(field_spec))
            except XdrError as exc:
                raise XdrError(f"field {name}: {exc}") from exc
            values[name] = value
            consumed += size
        return cls(**values), consumed


class Writer:
    """Encodes XDR values onto a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write(self, data: bytes) -> int:
        written = self._stream.write(data)
        return len(data) if written is None else written

    def write_any(self, value: Any, spec: Any = None) -> int:
        """Encode ``value``; return the number of bytes written."""
        if value is None:
            return 0
        if spec is None:
            spec = _infer(value)
        return self._write(value, _resolve(spec))

    def write_bytes_auto_pad(self, data: bytes) -> int:
        size = self.write(data)
        padding = pad(len(data))
        if padding:
            size += self.write(bytes(padding))
        return size

    def write_uint32(self, value: int) -> int:
        if not isinstance(value, int) or not 0 <= value <= 0xFFFFFFFF:
            raise XdrError(f"not a uint32: {value!r}")
        return self.write(value.to_bytes(4, "big"))

    def flush(self) -> None:
        flush = getattr(self._stream, "flush", None)
        if callable(flush):
            flush()

    def _write(self, value: Any, spec: Any) -> int:
        if value is None:
            return 0
        if isinstance(spec, str):
            return self._write_scalar(value, spec)
        if isinstance(spec, FixedOpaque):
            data = self._as_bytes(value, "fixed opaque")
            if len(data) != spec.length:
                raise XdrError(f"expected {spec.length} bytes, got {len(data)}")
            if not data:
                return 0
            return self.write_bytes_auto_pad(data)
        if isinstance(spec, FixedArray):
            items = list(value)
            if len(items) != spec.length:
                raise XdrError(f"expected {spec.length} elements, got {len(items)}")
            return sum(self._write_item(item, spec.elem) for item in items)
        if isinstance(spec, VarArray):
            items = list(value)
            size = self.write_uint32(len(items))
            return size + sum(self._write_item(item, spec.elem) for item in items)
        if not isinstance(value, spec):
            raise XdrError(f"unable to assign {type(value).__name__} to {spec.__name__}")
        size = 0
        for name, field_spec in _struct_fields(spec):
            try:
                size += self._write(getattr(value, name), _resolve(field_spec))
            except XdrError as exc:
                raise XdrError(f"field {name}: {exc}") from exc
        return size

    def _write_item(self, item: Any, elem: Any) -> int:
        if item is None:
            return 0
        return self._write(item, _resolve(_infer(item) if elem is None else elem))

    def _write_scalar(self, value: Any, kind: str) -> int:
        if kind == "bool":
            return self.write_uint32(1 if value else 0)
        if kind in ("float32", "float64"):
            fmt = ">f" if kind == "float32" else ">d"
            try:
                return self.write(struct.pack(fmt, value))
            except (struct.error, TypeError, OverflowError) as exc:
                raise XdrError(f"unable to assign {value!r} to {kind}") from exc
        if kind == "string":
            if not isinstance(value, str):
                raise XdrError(f"unable to assign {type(value).__name__} to string")
            data = value.encode("utf-8", "surrogateescape")
            return self.write_uint32(len(data)) + self.write_bytes_auto_pad(data)
        if kind == "opaque":
            data = self._as_bytes(value, "opaque")
            return self.write_uint32(len(data)) + self.write_bytes_auto_pad(data)
        if not isinstance(value, int):
            raise XdrError(f"unable to assign {type(value).__name__} to {kind}")
        width, _, _ = _INTEGERS[kind]
        raw = value & ((1 << (8 * width)) - 1)
        return self.write(raw.to_bytes(width, "big"))

    @staticmethod
    def _as_bytes(value: Any, what: str) -> bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        raise XdrError(f"unable to assign {type(value).__name__} to {what}")