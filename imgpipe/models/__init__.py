from .enums import ImageFormat, OriginPolicy, Rotation
from .transform import (
    Point,
    Size,
    TransformParams,
    TransformRequest,
    WatermarkParams,
    WatermarkSpec,
)

__all__ = [
    "ImageFormat",
    "OriginPolicy",
    "Rotation",
    "Point",
    "Size",
    "TransformParams",
    "TransformRequest",
    "WatermarkParams",
    "WatermarkSpec",
]
