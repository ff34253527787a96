from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .logging_config import configure_logging, get_logger
from .settings import settings
from .routers import courses, content, generate, debug

logger = get_logger(__name__)

app = FastAPI(title="Canvas Study Aids API")
app.include_router(courses.router)
app.include_router(content.router)
app.include_router(generate.router)
app.include_router(debug.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	# Malformed bodies are input errors, same class as a missing field
	errors = exc.errors()
	message = errors[0].get("msg") if errors else "Invalid request"
	return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
	logger.exception("unhandled_error", path=request.url.path)
	return JSONResponse(status_code=500, content={"detail": str(exc) or "Internal server error"})


@app.get("/info")
def root():
	return {"status": "ok", "openai_configured": bool(settings.openai_api_key)}


@app.on_event("startup")
async def startup_event():
	configure_logging(settings.log_level, console=settings.environment == "test")
	logger.info("startup", canvas_api_url=settings.canvas_api_url, environment=settings.environment)
