"""Message configuration.

MessageConfig is a frozen dataclass: immutable after creation, shared by
every message derived from the one it was given to.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MessageConfig:
    """Settings that shape derivation and body parsing. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = MessageConfig(max_content_length=1024, parse_xml=False)
        request = ServerRequest(config=config)
    """

    # Protocol version reported when none was set or derived
    default_protocol_version: str = "1.0"

    # Form bodies without a charset parameter, and unknown charsets
    charset: str = "utf-8"

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # text/xml and application/xml bodies become ElementTree elements
    parse_xml: bool = True
