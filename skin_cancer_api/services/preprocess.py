import io
import logging

import numpy as np
from PIL import Image

from skin_cancer_api.services.errors import DecodeError

log = logging.getLogger("skin_cancer_api")

MODEL_INPUT_SIZE = (224, 224)  # width, height

# Режимы, которые Pillow умеет ресайзить билинейно без конвертации
_NATIVE_MODES = ("L", "RGB", "RGBA")
_WIDE_GRAY_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


def _normalize_mode(img: Image.Image) -> Image.Image:
    if img.mode in _NATIVE_MODES:
        return img
    if img.mode in _WIDE_GRAY_MODES:
        # 16-bit отсчеты масштабируются в 8 bit, convert("L") их обрезает
        arr = np.clip(np.asarray(img), 0, 65535).astype(np.uint16) >> 8
        return Image.fromarray(arr.astype(np.uint8))
    if img.mode in ("1", "F"):
        return img.convert("L")
    if img.mode in ("LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    ):
        return img.convert("RGBA")
    return img.convert("RGB")


def decode_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        return _normalize_mode(img)
    except Exception as e:
        raise DecodeError(f"Cannot decode image: {e}") from e


def to_three_channels(arr: np.ndarray) -> np.ndarray:
    """(H, W) | (H, W, 1) | (H, W, 3) | (H, W, 4) -> (H, W, 3)"""
    if arr.ndim == 2:
        arr = arr[:, :, np.newaxis]
    channels = arr.shape[2]
    if channels == 4:
        return arr[:, :, :3]
    if channels == 1:
        return np.repeat(arr, 3, axis=2)
    if channels == 3:
        return arr
    raise DecodeError(f"Unsupported number of channels: {channels}")


def preprocess_image(
    data: bytes, size: tuple[int, int] = MODEL_INPUT_SIZE
) -> np.ndarray:
    img = decode_image(data)
    log.debug(f"Original image: mode={img.mode} size={img.size}")

    img = img.resize(size, Image.Resampling.BILINEAR)
    arr = np.asarray(img, dtype=np.float32)
    log.debug(f"Resized image tensor shape: {arr.shape}")

    arr = to_three_channels(arr)
    log.debug(f"Converted image tensor shape: {arr.shape}")

    tensor = np.expand_dims(arr, axis=0)
    log.debug(f"Input tensor shape: {tensor.shape}")
    return tensor
