import pytest

from tests.factories import make_image_bytes


@pytest.fixture()
def landscape_jpeg_bytes() -> bytes:
    return make_image_bytes(320, 180)


@pytest.fixture()
def portrait_jpeg_bytes() -> bytes:
    return make_image_bytes(180, 320)


@pytest.fixture()
def transparent_png_bytes() -> bytes:
    return make_image_bytes(64, 64, image_format="PNG", mode="RGBA", color=(0, 0, 0, 0))


@pytest.fixture()
def required_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Set every required variable; tests override or delete individual ones."""
    monkeypatch.setenv("TASK_INDEX", "0")
    monkeypatch.setenv("TASK_COUNT", "1")
    monkeypatch.setenv("BACKEND_API_URL", "http://backend.test")
    monkeypatch.setenv("BUCKET_NAME", "slideshow-bucket")
    return monkeypatch
