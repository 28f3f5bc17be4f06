import asyncio
import logging
from datetime import datetime, timezone
from uuid import uuid4

from skin_cancer_api.repositories.artifact import ArtifactRepository
from skin_cancer_api.repositories.prediction import PredictionRepository
from skin_cancer_api.services.errors import (
    ModelNotReadyError,
    PredictionError,
    UnexpectedPipelineError,
)
from skin_cancer_api.services.model import ModelState
from skin_cancer_api.services.preprocess import preprocess_image
from skin_cancer_api.services.upload import ValidatedUpload
from skin_cancer_api.services.verdict import map_verdict

log = logging.getLogger("skin_cancer_api")


def utc_now_iso() -> str:
    # 2026-10-16T08:15:30.123Z
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def log_orphan(image_key: str) -> None:
    # запись в БД не состоялась, файл остается в bucket
    log.warning(f"⚠️ Orphaned artifact left in storage: key={image_key}")


class PredictionService:
    def __init__(
        self,
        artifact_repository: ArtifactRepository,
        prediction_repository: PredictionRepository,
        model_state: ModelState,
        threshold: float,
    ):
        self.artifact_repository = artifact_repository
        self.prediction_repository = prediction_repository
        self.model_state = model_state
        self.threshold = threshold

    async def predict(self, upload: ValidatedUpload) -> dict:
        """
        upload -> preprocess -> inference -> verdict -> save.
        Запись в bucket и в БД не транзакционны: при ошибке сохранения
        файл остается в bucket.
        """
        if not self.model_state.is_ready:
            raise ModelNotReadyError

        image_key = await self.artifact_repository.upload(
            upload.data, upload.filename, upload.content_type
        )

        try:
            return await self._classify_and_save(upload.data, image_key)
        except (PredictionError, ModelNotReadyError):
            log_orphan(image_key)
            raise
        except Exception as e:
            log.error(f"❌ Unexpected pipeline failure: {e}", exc_info=True)
            log_orphan(image_key)
            raise UnexpectedPipelineError(str(e)) from e

    async def _classify_and_save(self, data: bytes, image_key: str) -> dict:
        tensor = await asyncio.to_thread(preprocess_image, data)
        score = await asyncio.to_thread(self.model_state.predict, tensor)
        verdict = map_verdict(score, self.threshold)
        log.info(f"Prediction score={score:.4f} result={verdict.result}")

        record = {
            "id": str(uuid4()),
            "result": verdict.result,
            "suggestion": verdict.suggestion,
            "createdAt": utc_now_iso(),
        }
        await self.prediction_repository.upsert(record, image_key=image_key)
        return record


def make_prediction_service(
    artifact_repository: ArtifactRepository,
    prediction_repository: PredictionRepository,
    model_state: ModelState,
    threshold: float,
) -> PredictionService:
    return PredictionService(
        artifact_repository=artifact_repository,
        prediction_repository=prediction_repository,
        model_state=model_state,
        threshold=threshold,
    )
