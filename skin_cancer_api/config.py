import os

from dotenv import load_dotenv

load_dotenv()

# App
APP_TITLE: str = os.getenv("APP_TITLE", "Skin Cancer Prediction API")
APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT: int = int(os.getenv("APP_PORT", 8080))
CORS_ALLOW_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

# Model
MODEL_URL: str = os.getenv(
    "MODEL_URL",
    "https://storage.googleapis.com/skin-cancer-models/model/model.onnx",
)
MODEL_DOWNLOAD_TIMEOUT: float = float(os.getenv("MODEL_DOWNLOAD_TIMEOUT", 60.0))
PREDICTION_THRESHOLD: float = float(os.getenv("PREDICTION_THRESHOLD", 0.5))

# Upload
MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", 1_000_000))
GCS_BUCKET_NAME: str = os.getenv("GCS_BUCKET_NAME", "skin-cancer-uploads")

# Postgres
POSTGRES_USER = os.getenv("POSTGRES_USER", "skin_user")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "skin_password")
POSTGRES_DB = os.getenv("POSTGRES_DB", "skin_db")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "postgres")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", 5432)
POSTGRES_POOL_MIN_SIZE = int(os.getenv("POSTGRES_POOL_MIN_SIZE", 1))
POSTGRES_POOL_MAX_SIZE = int(os.getenv("POSTGRES_POOL_MAX_SIZE", 10))
POSTGRES_POOL_MAX_IDLE = float(os.getenv("POSTGRES_POOL_MAX_IDLE", 60.0))

POSTGRES_DSN = f"postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
