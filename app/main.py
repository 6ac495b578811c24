import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.api import api_router
from app.core.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)
app = FastAPI(title="Survey backend")

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS or ["http://localhost:4200"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

class SensitiveDataFilter(logging.Filter):
    sensitive_keywords = ('authorization', 'token', 'password')

    def filter(self, record):
        record.msg = self.sanitize_message(record.msg)
        return True

    def sanitize_message(self, message):
        if not isinstance(message, str):
            return message
        lowered = message.lower()
        if any(keyword in lowered for keyword in self.sensitive_keywords):
            return "[REDACTED]"
        return message

sensitive_data_filter = SensitiveDataFilter()
for handler in logging.getLogger().handlers:
    handler.addFilter(sensitive_data_filter)

def sanitize_headers(headers):
    return {k: (v[:10] + '...') if k.lower() in ('authorization', 'cookie') else v for k, v in headers.items()}


# Middleware for Logging Requests and Responses
@app.middleware("http")
async def log_request(request: Request, call_next):
    logging.info(f"Received request: {request.method} {request.url}")
    logging.debug(f"Request headers: {sanitize_headers(request.headers)}")
    response = await call_next(request)
    logging.info(f"Response status code: {response.status_code}")
    return response

# Include API Router
app.include_router(api_router, prefix="/api/v1")

@app.get("/")
async def root():
    return {"message": "Welcome to the survey API"}
