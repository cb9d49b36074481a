import io

import pytest
from PIL import Image

from snapframe.cache import DecodedImageCache
from snapframe.errors import ImageDecodeError
from snapframe.imaging.image_processor import ImageLoader


def _png_bytes(mode="RGBA", size=(6, 4), color=(10, 20, 30, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def loader() -> ImageLoader:
    return ImageLoader(cache=DecodedImageCache())


def test_decode_normalises_to_rgba(loader):
    image = loader.decode(_png_bytes("RGB", color=(1, 2, 3)))
    assert image.mode == "RGBA"
    assert image.size == (6, 4)
    assert image.getpixel((0, 0)) == (1, 2, 3, 255)


def test_decode_reuses_cached_image(loader):
    data = _png_bytes()
    assert loader.decode(data) is loader.decode(data)
    assert len(loader.cache) == 1


def test_info_reports_source_details(loader):
    info = loader.info(_png_bytes(color=(0, 0, 0, 0)))
    assert info.format == "PNG"
    assert info.source_mode == "RGBA"
    assert info.size == (6, 4)
    assert info.has_transparency is True


def test_exif_orientation_is_applied(loader):
    image = Image.new("RGB", (8, 2), "red")
    exif = Image.Exif()
    exif[0x0112] = 6
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", exif=exif.tobytes())
    assert loader.decode(buffer.getvalue()).size == (2, 8)


def test_invalid_bytes_raise_decode_error(loader):
    with pytest.raises(ImageDecodeError):
        loader.decode(b"definitely not an image")


def test_load_validates_path(loader, tmp_path):
    bogus = tmp_path / "notes.txt"
    bogus.write_text("hello")
    with pytest.raises(ValueError):
        loader.load(bogus)


def test_load_batch_reports_failures_as_none(loader, tmp_path):
    good = tmp_path / "good.png"
    good.write_bytes(_png_bytes())
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"\x89PNG garbage")
    results = loader.load_batch([good, broken, tmp_path / "missing.png"])
    assert results[str(good)].size == (6, 4)
    assert results[str(broken)] is None
    assert results[str(tmp_path / "missing.png")] is None
    assert loader.load_batch([]) == {}
