from unittest.mock import MagicMock

from slideshow_processor.imaging.exceptions import RenderError
from slideshow_processor.imaging.models import RenderedImage
from slideshow_processor.layout.evaluator import LayoutEvaluator
from slideshow_processor.layout.geometry import Orientation
from slideshow_processor.layout.models import DeviceGeometry, LayoutFlags, LayoutType
from slideshow_processor.processor.variant_renderer import VariantRenderer
from slideshow_processor.storage.exceptions import StorageError

FP = "a" * 64


def _rendered(width: int, height: int, data: bytes = b"jpeg") -> RenderedImage:
    return RenderedImage(data=data, width=width, height=height)


def _make_renderer(
    render_contain: bool = True,
) -> tuple[VariantRenderer, MagicMock, MagicMock]:
    image_renderer = MagicMock()
    image_renderer.render_cover.side_effect = lambda _d, w, h: _rendered(w, h, b"cover-bytes")
    image_renderer.render_contain.side_effect = lambda _d, w, h: _rendered(w, h)
    storage = MagicMock()
    storage.upload.side_effect = lambda _data, key, _type: f"gs://bucket/{key}"
    renderer = VariantRenderer(
        renderer=image_renderer,
        storage=storage,
        evaluator=LayoutEvaluator(),
        render_contain=render_contain,
    )
    return renderer, image_renderer, storage


def _device(**flags: bool) -> DeviceGeometry:
    return DeviceGeometry(width=1920, height=1080, gap=10, layouts=LayoutFlags(**flags))


class TestRenderAll:
    def test_matching_source_yields_one_full_size_variant(self) -> None:
        renderer, image_renderer, _storage = _make_renderer()

        result = renderer.render_all(b"src", FP, 1920, 1080, [_device(single=True)])

        assert not result.has_failures
        assert len(result.variants) == 1
        variant = result.variants[0]
        assert (variant.width, variant.height) == (1920, 1080)
        assert variant.layout_type is LayoutType.SINGLE
        assert variant.orientation is Orientation.LANDSCAPE
        assert variant.storage_path == f"gs://bucket/processed/single/1920x1080/{FP}.jpg"
        assert variant.contain_storage_path == (
            f"gs://bucket/processed/single/1920x1080/contain/{FP}.jpg"
        )
        assert variant.file_size_bytes == len(b"cover-bytes")
        image_renderer.render_cover.assert_called_once_with(b"src", 1920, 1080)

    def test_rejected_layout_never_reaches_renderer(self) -> None:
        renderer, image_renderer, storage = _make_renderer()

        result = renderer.render_all(b"src", FP, 500, 1000, [_device(single=True)])

        assert result.variants == []
        assert not result.has_failures
        image_renderer.render_cover.assert_not_called()
        image_renderer.render_contain.assert_not_called()
        storage.upload.assert_not_called()

    def test_variants_follow_ranking(self) -> None:
        renderer, _image_renderer, _storage = _make_renderer()

        result = renderer.render_all(
            b"src", FP, 955, 1080, [_device(single=True, paired=True)]
        )

        assert [v.layout_type for v in result.variants] == [LayoutType.PAIRED]
        assert (result.variants[0].width, result.variants[0].height) == (955, 1080)

    def test_contain_render_can_be_disabled(self) -> None:
        renderer, image_renderer, storage = _make_renderer(render_contain=False)

        result = renderer.render_all(b"src", FP, 1920, 1080, [_device(single=True)])

        image_renderer.render_contain.assert_not_called()
        assert storage.upload.call_count == 1
        assert result.variants[0].contain_storage_path is None

    def test_same_geometry_on_two_devices_renders_once(self) -> None:
        renderer, image_renderer, _storage = _make_renderer()
        devices = [_device(single=True), DeviceGeometry(width=1920, height=1080, name="tv")]

        result = renderer.render_all(b"src", FP, 1920, 1080, devices)

        assert len(result.variants) == 1
        image_renderer.render_cover.assert_called_once()


class TestPartialFailure:
    def test_render_failure_is_recorded_and_siblings_continue(self) -> None:
        renderer, image_renderer, _storage = _make_renderer()

        def cover(_data: bytes, width: int, height: int) -> RenderedImage:
            if width == 1920:
                raise RenderError("encoder crashed")
            return _rendered(width, height)

        image_renderer.render_cover.side_effect = cover
        devices = [_device(single=True), DeviceGeometry(width=1080, height=1080)]

        result = renderer.render_all(b"src", FP, 1200, 1080, devices)

        assert [(v.width, v.height) for v in result.variants] == [(1080, 1080)]
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.layout_type is LayoutType.SINGLE
        assert (failure.width, failure.height) == (1920, 1080)
        assert "encoder crashed" in failure.reason

    def test_upload_failure_is_recorded(self) -> None:
        renderer, _image_renderer, storage = _make_renderer()
        storage.upload.side_effect = StorageError("bucket gone")

        result = renderer.render_all(b"src", FP, 1920, 1080, [_device(single=True)])

        assert result.variants == []
        assert result.failures[0].reason == "bucket gone"

    def test_failed_geometry_is_retried_for_next_device(self) -> None:
        renderer, image_renderer, _storage = _make_renderer()
        image_renderer.render_cover.side_effect = [
            RenderError("flaky"),
            _rendered(1920, 1080),
        ]
        devices = [_device(single=True), _device(single=True)]

        result = renderer.render_all(b"src", FP, 1920, 1080, devices)

        assert len(result.failures) == 1
        assert len(result.variants) == 1

    def test_contain_failure_uploads_nothing(self) -> None:
        renderer, image_renderer, storage = _make_renderer()
        image_renderer.render_contain.side_effect = RenderError("contain crashed")

        result = renderer.render_all(b"src", FP, 1920, 1080, [_device(single=True)])

        assert result.variants == []
        assert result.failures[0].reason == "contain crashed"
        image_renderer.render_cover.assert_called_once()
        storage.upload.assert_not_called()
