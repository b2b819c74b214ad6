from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler

from plantscan.exceptions.base import EnumException
from plantscan.exceptions.detection import AnalysisError


def to_http_exception(exc: AnalysisError) -> EnumException:
    return EnumException(
        exc.code,
        extras={"category": exc.category.value},
        err_kwargs={"message": exc.message},
    )


async def analysis_error_handler(request: Request, exc: AnalysisError):
    return await http_exception_handler(request, to_http_exception(exc))


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AnalysisError, analysis_error_handler)
