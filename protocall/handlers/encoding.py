"""``base64:`` handler."""

from base64 import b64decode

from protocall.handler import Transform


def base64() -> Transform:
    """Create the ``base64:`` handler, decoding the value into ``bytes``."""

    def base64_handler(value: str) -> bytes:
        return b64decode(value)

    return Transform(base64_handler)
