"""
Module: payload
Purpose: Dataclass holding the original bytes of an imported image.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ImagePayload:
    """
    Original binary content of one input file plus its filename.
    Items only ever hold a reference to a payload; it is never copied.
    """

    filename: str
    data: bytes = field(repr=False)
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)
