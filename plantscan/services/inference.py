"""
Client for the remote image-classification endpoint.

Transport (httpx) and retry policy are kept apart: every HTTP response is
mapped by ``classify_response`` onto a tagged outcome (Success / Retry /
Fail) and tenacity drives the attempts from there.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Union

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from plantscan.exceptions import (
    AuthenticationError,
    DetectionError,
    InferenceApiError,
    InferenceNetworkError,
    InferenceTimeoutError,
    InvalidInputError,
    NoPredictionsError,
    RateLimitedError,
    ServiceUnavailableError,
    UnexpectedFormatError,
)

logger = logging.getLogger(__name__)

LOADING_RETRY_DELAY = 8.0
TIMEOUT_RETRY_DELAY = 3.0
GENERIC_RETRY_DELAY = 2.0


@dataclass(frozen=True)
class Success:
    predictions: List[Any]


@dataclass(frozen=True)
class Retry:
    delay: float
    # raised if no attempts are left
    error: BaseException


@dataclass(frozen=True)
class Fail:
    error: DetectionError


Outcome = Union[Success, Retry, Fail]


def classify_response(status: int, payload: Any) -> Outcome:
    """Map an HTTP status and decoded JSON body onto a retry outcome."""
    error_msg = payload.get("error") if isinstance(payload, dict) else None

    if status == 503:
        msg = str(error_msg or "Model is loading")
        if "loading" in msg.lower():
            return Retry(
                LOADING_RETRY_DELAY,
                ServiceUnavailableError("Model is still loading after multiple attempts. Please try again later."),
            )
        return Fail(ServiceUnavailableError(f"Service temporarily unavailable: {msg}"))

    if status == 401:
        return Fail(AuthenticationError())

    if status == 429:
        return Fail(RateLimitedError())

    if status >= 400:
        return Fail(InferenceApiError(f"API request failed: {error_msg or f'HTTP {status}'}"))

    if isinstance(payload, list) and len(payload) > 0:
        return Success(payload)

    if error_msg:
        return Fail(UnexpectedFormatError(str(error_msg)))
    return Fail(UnexpectedFormatError())


class RetryableAttempt(Exception):
    """Raised from a single attempt when the policy allows another try."""

    def __init__(self, delay: float, final_error: BaseException):
        super().__init__(str(final_error))
        self.delay = delay
        self.final_error = final_error


def _wait_for_outcome(retry_state: RetryCallState) -> float:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    return getattr(exc, "delay", GENERIC_RETRY_DELAY)


class InferenceClient:
    USER_AGENT = "PlantScan/1.0"

    def __init__(
        self,
        api_url: str,
        api_token: str,
        disease_model: str,
        pest_model: str,
        timeout: float = 45.0,
        max_attempts: int = 3,
        max_response_bytes: int = 50 * 1024 * 1024,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_token = api_token
        self.models = {"disease": disease_model, "pest": pest_model}
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.max_response_bytes = max_response_bytes
        self._transport = transport
        self._sleep = sleep

    def model_url(self, model_kind: str) -> str:
        model = self.models.get(model_kind)
        if model is None:
            raise InvalidInputError("Type must be either 'pest' or 'disease'")
        return f"{self.api_url}/models/{model}"

    async def classify(self, image_bytes: bytes, model_kind: str, content_type: str = "image/jpeg") -> List[Any]:
        """
        Send the image to the model for ``model_kind`` and return its
        predictions, highest score first.

        Up to ``max_attempts`` requests are made. Model-loading 503s, timeouts
        and unexpected exceptions are retried. Every other failure is raised
        straight away.
        """
        url = self.model_url(model_kind)
        logger.info(f"Using model: {self.models[model_kind]} ({content_type})")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=_wait_for_outcome,
            retry=retry_if_exception_type(RetryableAttempt),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        predictions = None
        try:
            async for attempt in retrying:
                with attempt:
                    number = attempt.retry_state.attempt_number
                    logger.info(f"API request attempt {number}/{self.max_attempts}")
                    predictions = await self._attempt(url, image_bytes, content_type)
        except RetryableAttempt as exc:
            raise exc.final_error

        if not predictions:
            raise NoPredictionsError()

        logger.info(f"Successful predictions received: {len(predictions)}")
        return predictions

    async def _attempt(self, url: str, image_bytes: bytes, content_type: str) -> List[Any]:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": content_type,
            "User-Agent": self.USER_AGENT,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                async with client.stream("POST", url, content=image_bytes, headers=headers) as response:
                    status = response.status_code
                    body = await self._read_capped(response)
        except httpx.TimeoutException as e:
            logger.warning("Request timeout")
            raise RetryableAttempt(TIMEOUT_RETRY_DELAY, InferenceTimeoutError()) from e
        except httpx.NetworkError as e:
            logger.error(f"Network error calling inference API: {e}")
            raise InferenceNetworkError() from e
        except DetectionError:
            raise
        except Exception as e:
            logger.warning(f"Inference attempt failed: {e!r}")
            raise RetryableAttempt(GENERIC_RETRY_DELAY, e) from e

        logger.info(f"API Response status: {status}")
        outcome = classify_response(status, self._decode(body))

        match outcome:
            case Success(predictions=predictions):
                return predictions
            case Retry(delay=delay, error=error):
                logger.warning(f"Model is loading, retry allowed in {delay}s")
                raise RetryableAttempt(delay, error)
            case Fail(error=error):
                logger.error(f"Inference request failed ({status}): {error}")
                raise error

    async def _read_capped(self, response: httpx.Response) -> bytes:
        chunks = []
        total = 0
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if total > self.max_response_bytes:
                raise UnexpectedFormatError(f"Response body exceeds {self.max_response_bytes} bytes")
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def _decode(body: bytes) -> Any:
        if not body:
            return None
        try:
            return json.loads(body)
        except ValueError:
            logger.warning("Inference response is not valid JSON")
            return None
