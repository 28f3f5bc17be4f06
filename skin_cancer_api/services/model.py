import asyncio
import logging

import httpx
import numpy as np
import onnxruntime as ort

from skin_cancer_api.services.errors import InferenceError, ModelNotReadyError

log = logging.getLogger("skin_cancer_api")

READY = "ready"
LOADING = "loading"
FAILED = "failed"


class ModelState:
    """
    Обертка над сессией модели, которая живет в app.state.
    Пока модель не загружена, predict отдает ModelNotReadyError.
    """

    def __init__(self):
        self.session: ort.InferenceSession | None = None
        self.error: str | None = None
        self._load_started = False

    @property
    def status(self) -> str:
        if self.session is not None:
            return READY
        if self.error is not None:
            return FAILED
        return LOADING

    @property
    def is_ready(self) -> bool:
        return self.session is not None

    def begin_load(self) -> bool:
        """False, если загрузка уже запускалась"""
        if self._load_started:
            return False
        self._load_started = True
        return True

    def set_session(self, session) -> None:
        self.session = session
        self.error = None

    def set_error(self, error: str) -> None:
        self.error = error

    def predict(self, tensor: np.ndarray) -> float:
        session = self.session
        if session is None:
            raise ModelNotReadyError
        try:
            input_name = session.get_inputs()[0].name
            outputs = session.run(None, {input_name: tensor})
            scores = np.asarray(outputs[0]).ravel()
        except Exception as e:
            raise InferenceError(f"Model inference failed: {e}") from e
        if scores.size == 0:
            raise InferenceError("Model returned an empty output")
        return float(scores[0])


async def download_model(
    url: str, timeout: float, transport: httpx.AsyncBaseTransport | None = None
) -> bytes:
    async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
        resp = await client.get(url, follow_redirects=True)
        resp.raise_for_status()
        return resp.content


def build_session(model_bytes: bytes) -> ort.InferenceSession:
    return ort.InferenceSession(model_bytes, providers=["CPUExecutionProvider"])


async def load_model(
    state: ModelState,
    url: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Загрузка модели ровно один раз; ошибка логируется и сохраняется в state."""
    if not state.begin_load():
        log.warning("⚠️ Model load already started, skipping")
        return

    try:
        model_bytes = await download_model(url, timeout, transport=transport)
        session = await asyncio.to_thread(build_session, model_bytes)
    except Exception as e:
        state.set_error(str(e))
        log.error(f"❌ Failed to load model from {url}: {e}", exc_info=True)
        return

    state.set_session(session)
    log.info(f"✅ Model loaded successfully from {url}")


def make_model_state() -> ModelState:
    return ModelState()
