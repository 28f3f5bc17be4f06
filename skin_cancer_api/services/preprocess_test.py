import io

import numpy as np
import pytest
from PIL import Image

from skin_cancer_api.services.errors import DecodeError
from skin_cancer_api.services.preprocess import preprocess_image, to_three_channels


def make_image_bytes(mode: str, size=(50, 50), fmt="PNG") -> bytes:
    color = {"L": 128, "RGB": (200, 100, 50), "RGBA": (200, 100, 50, 255), "LA": (128, 255)}[mode]
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.mark.parametrize("mode", ["L", "RGB", "RGBA", "LA"])
def test_preprocess_shape_for_any_channel_count(mode):
    tensor = preprocess_image(make_image_bytes(mode))
    assert tensor.shape == (1, 224, 224, 3)
    assert tensor.dtype == np.float32


def test_preprocess_jpeg():
    tensor = preprocess_image(make_image_bytes("RGB", size=(640, 480), fmt="JPEG"))
    assert tensor.shape == (1, 224, 224, 3)


def test_preprocess_palette_image():
    buf = io.BytesIO()
    Image.new("RGB", (30, 40), (10, 20, 30)).convert("P").save(buf, format="PNG")
    tensor = preprocess_image(buf.getvalue())
    assert tensor.shape == (1, 224, 224, 3)


def test_preprocess_keeps_pixel_range():
    tensor = preprocess_image(make_image_bytes("RGB"))
    assert tensor[0, 100, 100, 0] == pytest.approx(200, abs=1)
    assert tensor[0, 100, 100, 1] == pytest.approx(100, abs=1)
    assert tensor[0, 100, 100, 2] == pytest.approx(50, abs=1)


def test_preprocess_grayscale_replicates_channel():
    tensor = preprocess_image(make_image_bytes("L"))
    assert np.array_equal(tensor[..., 0], tensor[..., 1])
    assert np.array_equal(tensor[..., 1], tensor[..., 2])


def test_preprocess_drops_alpha():
    buf = io.BytesIO()
    Image.new("RGBA", (50, 50), (10, 20, 30, 200)).save(buf, format="PNG")
    tensor = preprocess_image(buf.getvalue())
    assert tensor[0, 0, 0].tolist() == pytest.approx([10, 20, 30], abs=2)


@pytest.mark.parametrize("data", [b"", b"not an image"])
def test_preprocess_corrupt_image(data):
    with pytest.raises(DecodeError):
        preprocess_image(data)


def test_to_three_channels_rejects_two_channels():
    with pytest.raises(DecodeError):
        to_three_channels(np.zeros((4, 4, 2), dtype=np.float32))


def test_preprocess_16bit_grayscale_is_rescaled():
    buf = io.BytesIO()
    Image.fromarray(np.full((50, 50), 30000, dtype=np.uint16)).save(buf, format="PNG")
    tensor = preprocess_image(buf.getvalue())
    assert tensor.shape == (1, 224, 224, 3)
    # 30000 / 257 ~ 116.7
    assert tensor[0, 100, 100].tolist() == pytest.approx([116.7, 116.7, 116.7], abs=1)
