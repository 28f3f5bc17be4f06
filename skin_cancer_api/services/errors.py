class ArtifactUploadError(Exception):
    """Не удалось записать загруженный файл в blob storage."""


class ModelNotReadyError(Exception):
    message = "Service not ready: model is not loaded"


class PredictionError(Exception):
    """Ошибка конвейера после загрузки файла: декодирование, инференс, сохранение."""

    kind = "prediction"


class DecodeError(PredictionError):
    kind = "decode"


class InferenceError(PredictionError):
    kind = "inference"


class StoreError(PredictionError):
    kind = "store"


class UnexpectedPipelineError(PredictionError):
    """Необработанное исключение на шаге после загрузки файла."""

    kind = "unexpected"
