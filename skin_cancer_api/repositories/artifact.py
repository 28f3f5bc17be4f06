import asyncio
import logging
from uuid import uuid4

from google.cloud import storage

from skin_cancer_api.services.errors import ArtifactUploadError

log = logging.getLogger("skin_cancer_api")


def make_artifact_key(filename: str) -> str:
    return f"{uuid4()}_{filename}"


class ArtifactRepository:
    def __init__(self, bucket: storage.Bucket):
        self.bucket = bucket

    def _write(self, key: str, data: bytes, content_type: str | None) -> None:
        blob = self.bucket.blob(key)
        blob.upload_from_string(data, content_type=content_type)

    async def upload(
        self, data: bytes, filename: str, content_type: str | None = None
    ) -> str:
        """Записать байты в bucket под ключом <uuid>_<filename>, вернуть ключ"""
        key = make_artifact_key(filename)
        try:
            await asyncio.to_thread(self._write, key, data, content_type)
        except Exception as e:
            log.error(f"❌ Failed to upload artifact {key}: {e}", exc_info=True)
            raise ArtifactUploadError(str(e)) from e
        log.info(f"✅ Artifact uploaded: key={key} bytes={len(data)}")
        return key


def make_artifact_repository(bucket_name: str) -> ArtifactRepository:
    # credentials берутся из GOOGLE_APPLICATION_CREDENTIALS (ADC)
    client = storage.Client()
    return ArtifactRepository(client.bucket(bucket_name))
