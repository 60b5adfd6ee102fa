"""
Byte stream wrappers.

InputStream and OutputStream wrap a native binary file object. A stream whose
native object is None is "invalid": this is how a missing remote file is
reported, so callers check is_valid() before reading.
"""

import io
import shutil
from typing import BinaryIO

from .codec import bytes_to_text, text_to_bytes, to_bytes

COPY_CHUNK_SIZE = 64 * 1024


class InputStream:
    """Readable byte stream."""

    def __init__(self, native: BinaryIO | None = None):
        self.native = native

    def _require_native(self) -> BinaryIO:
        if self.native is None:
            raise ValueError("Stream is not valid")
        return self.native

    def read(self) -> int:
        """Read a single byte. Returns -1 at end of stream."""
        chunk = self._require_native().read(1)
        if not chunk:
            return -1
        return chunk[0]

    def read_bytes(self) -> bytes:
        """Read all remaining bytes."""
        return self._require_native().read()

    def read_text(self) -> str:
        """Read all remaining bytes and decode them as text."""
        return bytes_to_text(self.read_bytes())

    def close(self) -> None:
        if self.native is not None:
            self.native.close()

    def is_valid(self) -> bool:
        return self.native is not None

    def __enter__(self) -> "InputStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class OutputStream:
    """Writable byte stream."""

    def __init__(self, native: BinaryIO | None = None):
        self.native = native

    def _require_native(self) -> BinaryIO:
        if self.native is None:
            raise ValueError("Stream is not valid")
        return self.native

    def write(self, byte: int) -> None:
        """Write a single byte (0-255)."""
        self._require_native().write(bytes([byte]))

    def write_bytes(self, data) -> None:
        self._require_native().write(to_bytes(data))

    def write_text(self, text: str) -> None:
        self._require_native().write(text_to_bytes(text))

    def close(self) -> None:
        if self.native is not None:
            self.native.close()

    def get_bytes(self) -> bytes:
        """
        Return everything written so far.

        Only in-memory streams (created by create_byte_array_output_stream or
        wrapping an io.BytesIO) keep their content.
        """
        native = self._require_native()
        if not isinstance(native, io.BytesIO):
            raise ValueError("Accumulated content is only available for in-memory streams")
        return native.getvalue()

    def get_text(self) -> str:
        return bytes_to_text(self.get_bytes())

    def is_valid(self) -> bool:
        return self.native is not None

    def __enter__(self) -> "OutputStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def copy(input_stream: InputStream, output_stream: OutputStream) -> int:
    """Copy all remaining bytes from input to output. Returns the byte count."""
    data = input_stream.read_bytes()
    output_stream._require_native().write(data)
    return len(data)


def copy_large(input_stream: InputStream, output_stream: OutputStream) -> None:
    """Copy input to output in fixed-size chunks without buffering it whole."""
    shutil.copyfileobj(
        input_stream._require_native(), output_stream._require_native(), COPY_CHUNK_SIZE
    )


def create_byte_array_input_stream(data) -> InputStream:
    """Create an in-memory InputStream over the given bytes."""
    return InputStream(io.BytesIO(to_bytes(data)))


def create_byte_array_output_stream() -> OutputStream:
    """Create an in-memory OutputStream whose content can be fetched with get_bytes()."""
    return OutputStream(io.BytesIO())


def create_input_stream(native: BinaryIO | None) -> InputStream:
    return InputStream(native)


def create_output_stream(native: BinaryIO | None) -> OutputStream:
    return OutputStream(native)
