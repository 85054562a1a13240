import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .db import init_db
from .errors import (
    ObjectStoreError,
    object_store_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .routers import assessments, auth, courses, enrollments, files, results, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="EduSync", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ObjectStoreError, object_store_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(auth.router, prefix="/api/Auth", tags=["auth"])
app.include_router(users.router, prefix="/api/Users", tags=["users"])
app.include_router(courses.router, prefix="/api/Courses", tags=["courses"])
app.include_router(assessments.router, prefix="/api/Assessments", tags=["assessments"])
app.include_router(enrollments.router, prefix="/api/Enrollments", tags=["enrollments"])
app.include_router(results.router, prefix="/api/Results", tags=["results"])
app.include_router(files.router, prefix="/api/Files", tags=["files"])
