import pytest
from pydantic import ValidationError

from imgpipe.config import Settings
from imgpipe.handlers.query import describe_validation_error, parse_transform_query
from imgpipe.models import ImageFormat, OriginPolicy, Point, Rotation, Size


@pytest.fixture
def settings():
    return Settings(
        default_quality=90,
        default_format=ImageFormat.JPEG,
        default_origin=OriginPolicy.LEFT_TOP,
        default_watermark_alpha=0.75,
    )


def test_defaults(settings):
    params = parse_transform_query("cat.jpg", [], settings)
    assert params.filename == "cat.jpg"
    assert params.format is ImageFormat.JPEG
    assert params.quality == 90
    assert params.size == Size()
    assert params.rotation is None
    assert params.watermarks == ()


def test_nested_syntax(settings):
    items = [
        ("format", "Webp"),
        ("quality", "40"),
        ("rotation", "R270"),
        ("size[width]", "300"),
        ("size[height]", "200"),
        ("watermarks[0][filename]", "logo.png"),
        ("watermarks[0][alpha]", "0.3"),
        ("watermarks[0][size][width]", "50"),
        ("watermarks[0][size][height]", "60"),
        ("watermarks[0][origin]", "RightBottom"),
        ("watermarks[0][position][x]", "10"),
        ("watermarks[0][position][y]", "12"),
    ]
    params = parse_transform_query("cat.jpg", items, settings)
    assert params.format is ImageFormat.WEBP
    assert params.quality == 40
    assert params.rotation is Rotation.R270
    assert params.size == Size(width=300, height=200)
    (wm,) = params.watermarks
    assert wm.filename == "logo.png"
    assert wm.alpha == pytest.approx(0.3)
    assert wm.size == Size(width=50, height=60)
    assert wm.origin is OriginPolicy.RIGHT_BOTTOM
    assert wm.position == Point(x=10, y=12)


def test_watermarks_follow_index_order(settings):
    items = [
        ("watermarks[2][filename]", "c"),
        ("watermarks[0][filename]", "a"),
        ("watermarks[1][filename]", "b"),
    ]
    params = parse_transform_query("x", items, settings)
    assert [wm.filename for wm in params.watermarks] == ["a", "b", "c"]


def test_watermark_defaults_come_from_settings(settings):
    params = parse_transform_query("x", [("watermarks[0][filename]", "a")], settings)
    (wm,) = params.watermarks
    assert wm.origin is OriginPolicy.LEFT_TOP
    assert wm.alpha == pytest.approx(0.75)
    assert wm.position == Point(x=0, y=0)


def test_legacy_flat_keys(settings):
    items = [
        ("w", "120"),
        ("h", "80"),
        ("r", "R90"),
        ("wm_file", "logo.png"),
        ("wm_px", "5"),
        ("wm_py", "6"),
        ("wm_alpha", "0.4"),
        ("wm_w", "20"),
        ("wm_h", "30"),
        ("wm_position", "Center"),
    ]
    params = parse_transform_query("x", items, settings)
    assert params.size == Size(width=120, height=80)
    assert params.rotation is Rotation.R90
    (wm,) = params.watermarks
    assert wm.filename == "logo.png"
    assert wm.position == Point(x=5, y=6)
    assert wm.size == Size(width=20, height=30)
    assert wm.origin is OriginPolicy.CENTER


def test_legacy_watermark_is_appended_after_nested(settings):
    items = [("wm_file", "legacy"), ("watermarks[0][filename]", "nested")]
    params = parse_transform_query("x", items, settings)
    assert [wm.filename for wm in params.watermarks] == ["nested", "legacy"]


def test_legacy_watermark_without_file_is_ignored(settings):
    params = parse_transform_query("x", [("wm_px", "5")], settings)
    assert params.watermarks == ()


def test_enum_values_are_case_insensitive(settings):
    params = parse_transform_query("x", [("format", "png"), ("r", "r180")], settings)
    assert params.format is ImageFormat.PNG
    assert params.rotation is Rotation.R180


def test_unknown_keys_are_ignored(settings):
    items = [("utm_source", "mail"), ("watermarks[0][colour]", "red"), ("watermarks[0][filename]", "a")]
    params = parse_transform_query("x", items, settings)
    assert [wm.filename for wm in params.watermarks] == ["a"]


def test_non_positive_size_is_left_to_the_resolver(settings):
    params = parse_transform_query("x", [("size[width]", "0")], settings)
    assert params.size == Size(width=0)


@pytest.mark.parametrize(
    "items",
    [
        [("format", "gif")],
        [("quality", "high")],
        [("quality", "101")],
        [("size[width]", "wide")],
        [("rotation", "R45")],
        [("watermarks[0][alpha]", "0.5")],
        [("watermarks[0][filename]", "a"), ("watermarks[0][origin]", "Middle")],
    ],
)
def test_invalid_values_raise(settings, items):
    with pytest.raises(ValidationError) as excinfo:
        parse_transform_query("x", items, settings)
    assert describe_validation_error(excinfo.value)


@pytest.mark.parametrize("alpha", ["nan", "NaN", "inf", "-inf"])
def test_non_finite_alpha_is_rejected(settings, alpha):
    items = [("watermarks[0][filename]", "a.png"), ("watermarks[0][alpha]", alpha)]
    with pytest.raises(ValidationError) as excinfo:
        parse_transform_query("x", items, settings)
    assert "alpha" in describe_validation_error(excinfo.value)


def test_png_accepts_any_quality(settings):
    params = parse_transform_query("x", [("format", "Png"), ("quality", "150")], settings)
    assert params.format is ImageFormat.PNG
    assert params.quality == 150


@pytest.mark.parametrize("fmt", ["Jpeg", "Webp"])
def test_lossy_formats_keep_quality_range(settings, fmt):
    with pytest.raises(ValidationError):
        parse_transform_query("x", [("format", fmt), ("quality", "150")], settings)
