"""Tests for perch.config — MessageConfig frozen dataclass."""

import dataclasses

import pytest

from perch.config import MessageConfig
from perch.errors import UnsupportedMediaType
from perch.http.message import Message
from perch.http.request import ServerRequest


class TestMessageConfig:
    def test_defaults(self) -> None:
        cfg = MessageConfig()

        assert cfg.default_protocol_version == "1.0"
        assert cfg.charset == "utf-8"
        assert cfg.max_content_length == 16 * 1024 * 1024
        assert cfg.parse_xml is True

    def test_override(self) -> None:
        cfg = MessageConfig(charset="latin-1", max_content_length=1024)

        assert cfg.charset == "latin-1"
        assert cfg.max_content_length == 1024

    def test_frozen(self) -> None:
        cfg = MessageConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.charset = "ascii"  # type: ignore[misc]

    def test_shared_by_derived_messages(self) -> None:
        cfg = MessageConfig()
        m = Message(config=cfg).with_header("A", "1").with_protocol_version("1.1")
        assert m.config is cfg

    def test_xml_disabled(self) -> None:
        r = (
            ServerRequest(config=MessageConfig(parse_xml=False))
            .with_header("Content-Type", "text/xml")
        )
        with pytest.raises(UnsupportedMediaType, match="text/xml isn't supported"):
            r.parsed_body
