import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Connection

from config import settings
from database import Database, get_db
from errors import AppError
from logger import get_logger
from routes import auth, carts, orders, products, users
from security import require_admin
from seed import seed_database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Connecting to database...")
    Database.connect()
    yield
    Database.disconnect()


app = FastAPI(title="PenPal Market API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error mapping
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "error": exc.error})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"message": problems, "error": "Bad Request"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal Server Error", "error": "Unexpected error"})


@app.get("/")
def read_root():
    return {"message": "Hello from PenPal Market API!"}


@app.post("/seed", dependencies=[Depends(require_admin)])
def seed(conn: Connection = Depends(get_db)):
    return {"ok": True, "inserted": seed_database(conn)}


app.include_router(products.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(carts.router)
app.include_router(orders.router)


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
