from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .enums import ImageFormat, OriginPolicy, Rotation


class Size(BaseModel):
    """Desired target box. A missing dimension is unconstrained."""

    model_config = ConfigDict(frozen=True)

    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.width is None and self.height is None


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int = 0
    y: int = 0


# ---------------------------------------------------------------------------
# Inbound parameters (asset keys, before fetching)
# ---------------------------------------------------------------------------


class WatermarkParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1)
    size: Size = Size()
    origin: OriginPolicy = OriginPolicy.LEFT_TOP
    position: Point = Point()
    alpha: float = Field(1.0, allow_inf_nan=False)


class TransformParams(BaseModel):
    """A fully parsed transformation, still referring to assets by key."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1)
    size: Size = Size()
    format: ImageFormat = ImageFormat.JPEG
    quality: int = 100
    rotation: Optional[Rotation] = None
    watermarks: tuple[WatermarkParams, ...] = ()

    @field_validator("quality")
    @classmethod
    def check_quality_range(cls, value: int, info: ValidationInfo) -> int:
        # PNG ignores the request quality, so any value passes
        if info.data.get("format") is not ImageFormat.PNG and not 0 <= value <= 100:
            raise ValueError("quality must be between 0 and 100")
        return value

    @property
    def keys(self) -> list[str]:
        """Base key first, then one key per watermark in request order."""
        return [self.filename, *(wm.filename for wm in self.watermarks)]


# ---------------------------------------------------------------------------
# Fetched request (asset bytes in hand)
# ---------------------------------------------------------------------------


class WatermarkSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: bytes
    filename: str = ""
    size: Size = Size()
    origin: OriginPolicy = OriginPolicy.LEFT_TOP
    position: Point = Point()
    alpha: float = 1.0


class TransformRequest(BaseModel):
    """Everything the render stages need, consumed once per request."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    size: Size = Size()
    format: ImageFormat = ImageFormat.JPEG
    quality: int = 100
    watermarks: tuple[WatermarkSpec, ...] = ()
    rotation: Optional[Rotation] = None

    @classmethod
    def from_params(cls, params: TransformParams, blobs: list[bytes]) -> "TransformRequest":
        """Pair fetched blobs (ordered like ``params.keys``) with their params."""
        base, *layers = blobs
        return cls(
            data=base,
            size=params.size,
            format=params.format,
            quality=params.quality,
            rotation=params.rotation,
            watermarks=tuple(
                WatermarkSpec(
                    data=layer,
                    filename=wm.filename,
                    size=wm.size,
                    origin=wm.origin,
                    position=wm.position,
                    alpha=wm.alpha,
                )
                for wm, layer in zip(params.watermarks, layers)
            ),
        )
