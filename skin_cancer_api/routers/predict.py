import logging
from typing import Literal

from fastapi import APIRouter, File, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from skin_cancer_api.services.errors import (
    ArtifactUploadError,
    ModelNotReadyError,
    PredictionError,
)
from skin_cancer_api.services.prediction import PredictionService
from skin_cancer_api.services.upload import (
    NoFileUploadedError,
    UploadValidationError,
    UploadValidator,
    ValidatedUpload,
)

log = logging.getLogger("skin_cancer_api")

SUCCESS_MESSAGE = "Model is predicted successfully"
UPLOAD_ERROR_MESSAGE = "Error uploading file"
PREDICTION_ERROR_MESSAGE = "Terjadi kesalahan dalam melakukan prediksi"


class PredictionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Уникальный идентификатор предсказания")
    result: Literal["Cancer", "Non-cancer"] = Field(
        ..., description="Результат классификации"
    )
    suggestion: str = Field(..., description="Рекомендация для пользователя")
    created_at: str = Field(
        ..., alias="createdAt", description="Время создания в формате ISO-8601"
    )


class PredictResponse(BaseModel):
    status: str = "success"
    message: str = SUCCESS_MESSAGE
    data: PredictionRecord


class FailResponse(BaseModel):
    status: str = "fail"
    message: str
    error: str | None = None


def fail(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    body = FailResponse(message=message, error=error)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


def make_predict_router(
    prediction_service: PredictionService, upload_validator: UploadValidator
) -> APIRouter:
    router = APIRouter(tags=["predict"])

    @router.post(
        "/predict",
        status_code=status.HTTP_201_CREATED,
        response_model=PredictResponse,
        responses={
            400: {"model": FailResponse},
            413: {"model": FailResponse},
            500: {"model": FailResponse},
            503: {"model": FailResponse},
        },
    )
    async def predict(image: UploadFile | str | None = File(None)):
        try:
            # текстовое поле image вместо файла считается отсутствием файла
            if image is None or isinstance(image, str):
                raise NoFileUploadedError
            upload_validator.check_present(image.filename)
            upload_validator.check_content_type(image.content_type)
            # размер из multipart парсера, до чтения файла в память
            upload_validator.check_size(image.size)
            data = await image.read()
            if image.size is None:
                upload_validator.check_size(len(data))
            upload = ValidatedUpload(
                data=data, filename=image.filename, content_type=image.content_type
            )
        except UploadValidationError as e:
            log.info(f"Upload rejected: {e.message}")
            return fail(e.status_code, e.message)

        try:
            record = await prediction_service.predict(upload)
        except ModelNotReadyError as e:
            log.warning("⚠️ Prediction requested before model is ready")
            return fail(status.HTTP_503_SERVICE_UNAVAILABLE, e.message)
        except ArtifactUploadError as e:
            return fail(
                status.HTTP_500_INTERNAL_SERVER_ERROR, UPLOAD_ERROR_MESSAGE, str(e)
            )
        except PredictionError as e:
            log.error(f"❌ Prediction error [{e.kind}]: {e}", exc_info=True)
            return fail(status.HTTP_400_BAD_REQUEST, PREDICTION_ERROR_MESSAGE)

        response = PredictResponse(data=PredictionRecord(**record))
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=response.model_dump(by_alias=True),
        )

    return router
