# leadflow/app/exceptions.py
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

from leadflow.services.messaging.errors import VerifyError
from leadflow.services.messaging.otp_store import OTPStoreError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(VerifyError)
    async def verify_error_handler(request: Request, exc: VerifyError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(OTPStoreError)
    async def otp_store_error_handler(request: Request, exc: OTPStoreError):
        logger.error(f"OTP store unavailable: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Verification is temporarily unavailable. Please try again."},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "Please check your information and try again.",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    return app
