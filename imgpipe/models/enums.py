from __future__ import annotations

from enum import Enum


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class ImageFormat(_CaseInsensitiveEnum):
    """Output codec. Wire values match the query-string spelling."""

    PNG = "Png"
    JPEG = "Jpeg"
    WEBP = "Webp"

    @property
    def media_type(self) -> str:
        return f"image/{self.value.lower()}"

    @property
    def pil_format(self) -> str:
        return self.value.upper()


class OriginPolicy(_CaseInsensitiveEnum):
    """How a watermark's anchor point is interpreted."""

    CENTER = "Center"
    LEFT_TOP = "LeftTop"
    RIGHT_BOTTOM = "RightBottom"


class Rotation(_CaseInsensitiveEnum):
    """Clockwise rotation applied to the base image after resizing."""

    R90 = "R90"
    R180 = "R180"
    R270 = "R270"
