from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from config import CORS_ALLOW_ORIGINS, KAFKA_ENABLED, LOG_LEVEL
from database import engine, Base, SessionLocal, get_db
from errors import TrackerError
from schemas.response import ErrorResponse, HealthCheckResponse
from api.endpoints import v1_users_router, v1_projects_router, v1_tasks_router, v1_chats_router
import models  # noqa: F401  регистрирует таблицы в Base.metadata

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Task Access Service", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(v1_users_router)
app.include_router(v1_projects_router)
app.include_router(v1_tasks_router)
app.include_router(v1_chats_router)

kafka_consumer = None


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    details = {"kind": exc.kind}
    if exc.details:
        details["context"] = exc.details
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(ErrorResponse(error=exc.message, details=details))
    )


@app.on_event("startup")
def startup():
    """Создаёт таблицы и при необходимости запускает синхронизацию пользователей"""
    global kafka_consumer
    Base.metadata.create_all(bind=engine)
    if KAFKA_ENABLED:
        from kafka_consumer import KafkaConsumer
        kafka_consumer = KafkaConsumer(SessionLocal)
        kafka_consumer.start()


@app.on_event("shutdown")
def shutdown():
    if kafka_consumer is not None:
        kafka_consumer.stop()


@app.get("/")
def read_root():
    return {"message": "Task Access Service API"}


@app.get("/health", response_model=HealthCheckResponse)
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        database = "unavailable"
    return HealthCheckResponse(
        success=database == "ok",
        message="healthy" if database == "ok" else "degraded",
        service="task-access-service",
        database=database
    )

#Запуск через консоль: uvicorn main:app --reload
