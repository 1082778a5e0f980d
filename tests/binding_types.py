"""Custom conversion types shared by the binding tests."""

from __future__ import annotations

import ipaddress
from typing import Optional

from pydantic import BaseModel


class HonorDecodeInModel(BaseModel):
    """A model that decodes itself instead of being recursed into."""

    value: str = ""

    def decode(self, value: str) -> None:
        self.value = "decoded"


class CustomAddress:
    """Parses an IP address from raw bytes."""

    def __init__(self) -> None:
        self.value: Optional[ipaddress.IPv4Address | ipaddress.IPv6Address] = None

    def unmarshal_binary(self, data: bytes) -> None:
        self.value = ipaddress.ip_address(data.decode("utf-8"))


class Bracketed:
    def __init__(self, text: str = "") -> None:
        self.text = text

    def set(self, value: str) -> None:
        self.text = f"[{value}]"

    def __str__(self) -> str:
        return self.text


class Quoted(Bracketed):
    """Checks that ``decode`` takes precedence over ``set``."""

    def decode(self, value: str) -> None:
        self.set(f'"{value}"')


class SetterModel(BaseModel):
    inner: str = ""

    def set(self, value: str) -> None:
        self.inner = f'settermodel{{"{value}"}}'


class DecodingAddress(CustomAddress):
    """Both decode and binary-unmarshal; decode must win."""

    def decode(self, value: str) -> None:
        self.value = ipaddress.ip_address("127.0.0.1")


class Upper:
    """Decoder returning a new value rather than mutating."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    @classmethod
    def decode(cls, value: str) -> "Upper":
        return cls(value.upper())


class Hostname:
    """Text unmarshaler that rejects blanks."""

    def __init__(self) -> None:
        self.name = ""

    def unmarshal_text(self, text: str) -> None:
        if not text:
            raise ValueError("hostname must not be empty")
        self.name = text.lower()


class RequiredDecoder(BaseModel):
    """Decoder model whose fields have no defaults."""

    name: str

    def decode(self, value: str) -> None:
        self.name = value
