# cloudscribe/services/speech/multipart.py

from __future__ import annotations

import uuid
from typing import List

_CRLF = b"\r\n"


class MultipartFormDataBuilder:
    """
    Accumulates multipart/form-data parts in call order.
    Call finalize() once, after the last part, to get the request body.
    """

    def __init__(self, boundary: str | None = None) -> None:
        self.boundary = boundary or f"Boundary-{uuid.uuid4()}"
        self._parts: List[bytes] = []

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def add_field(self, name: str, value: str) -> None:
        self._parts.append(
            b"".join(
                [
                    f"--{self.boundary}".encode("utf-8"),
                    _CRLF,
                    f'Content-Disposition: form-data; name="{name}"'.encode("utf-8"),
                    _CRLF,
                    _CRLF,
                    str(value).encode("utf-8"),
                    _CRLF,
                ]
            )
        )

    def add_file(self, name: str, filename: str, data: bytes, content_type: str) -> None:
        self._parts.append(
            b"".join(
                [
                    f"--{self.boundary}".encode("utf-8"),
                    _CRLF,
                    f'Content-Disposition: form-data; name="{name}"; filename="{filename}"'.encode("utf-8"),
                    _CRLF,
                    f"Content-Type: {content_type}".encode("utf-8"),
                    _CRLF,
                    _CRLF,
                    bytes(data),
                    _CRLF,
                ]
            )
        )

    def finalize(self) -> bytes:
        return b"".join(self._parts) + f"--{self.boundary}--".encode("utf-8") + _CRLF
