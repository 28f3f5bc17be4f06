import asyncio
import logging
from contextlib import asynccontextmanager

import asyncpg
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skin_cancer_api import config
from skin_cancer_api.middlewares.logging import JsonLoggingMiddleware
from skin_cancer_api.repositories.artifact import make_artifact_repository
from skin_cancer_api.repositories.prediction import make_prediction_repository
from skin_cancer_api.routers.predict import make_predict_router
from skin_cancer_api.services.model import load_model, make_model_state
from skin_cancer_api.services.prediction import make_prediction_service
from skin_cancer_api.services.upload import make_upload_validator

log = logging.getLogger("skin_cancer_api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    pool = await asyncpg.create_pool(
        dsn=config.POSTGRES_DSN,
        min_size=config.POSTGRES_POOL_MIN_SIZE,
        max_size=config.POSTGRES_POOL_MAX_SIZE,
        max_inactive_connection_lifetime=config.POSTGRES_POOL_MAX_IDLE,
    )
    app.state.db_pool = pool

    prediction_repo = make_prediction_repository(pool)
    await prediction_repo.init()
    artifact_repo = make_artifact_repository(config.GCS_BUCKET_NAME)

    # модель грузится один раз в фоне, до готовности /predict отвечает 503
    model_state = make_model_state()
    app.state.model_state = model_state
    app.state.model_task = asyncio.create_task(
        load_model(model_state, config.MODEL_URL, config.MODEL_DOWNLOAD_TIMEOUT)
    )

    prediction_service = make_prediction_service(
        artifact_repository=artifact_repo,
        prediction_repository=prediction_repo,
        model_state=model_state,
        threshold=config.PREDICTION_THRESHOLD,
    )
    upload_validator = make_upload_validator(config.MAX_UPLOAD_BYTES)
    app.include_router(make_predict_router(prediction_service, upload_validator))

    log.info(f"Server listening on http://{config.APP_HOST}:{config.APP_PORT}")
    try:
        yield
    finally:
        app.state.model_task.cancel()
        await pool.close()


app = FastAPI(title=config.APP_TITLE, lifespan=lifespan)
app.add_middleware(JsonLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    model_status = app.state.model_state.status
    try:
        async with app.state.db_pool.acquire() as conn:
            await conn.execute("SELECT 1")
        database = "ok"
    except Exception:
        database = "fail"
    ok = model_status == "ready" and database == "ok"
    return {
        "status": "ok" if ok else "fail",
        "model": model_status,
        "database": database,
    }


if __name__ == "__main__":
    uvicorn.run(app, host=config.APP_HOST, port=config.APP_PORT, reload=False)
