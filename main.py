import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from adstudio.config import CORS_ORIGINS, HOST, PORT, configure_logging
from adstudio.database import Base, engine
from adstudio.errors import AdStudioError, ValidationError
from adstudio.models import secret  # noqa: F401  (registers the secrets table)
from adstudio.routes import studio


configure_logging()

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Radio Ad Studio API",
    description="Provider proxy for AI-drafted radio ad scripts and voiceovers",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    logger.info(f"🔵 [ReqID {request_id}] Start request: {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"✅ [ReqID {request_id}] End request: {response.status_code}")
    return response


@app.exception_handler(AdStudioError)
async def handle_studio_error(request: Request, exc: AdStudioError):
    logger.warning(f"❌ {request.url.path} failed [{exc.code}]: {exc.message}")
    return JSONResponse(status_code=exc.status, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    error = ValidationError("Invalid request: " + "; ".join(problems))
    logger.warning(f"❌ {request.url.path} rejected: {error.message}")
    return JSONResponse(status_code=error.status, content=error.to_payload())


# Register routes
app.include_router(studio.router)


@app.get("/")
async def root():
    return {
        "message": "Radio Ad Studio API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=True
    )
