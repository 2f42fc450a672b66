"""Completion API calls and merge review orchestration."""

import json
import time

import requests

from .config import DEEPINFRA_API_URL
from .logger import get_logger
from .models import CompletionResponse, Entity, ReviewResult
from .parser import parse_decision
from .prompt import SYSTEM_PROMPT, build_prompt
from .retry import exponential_backoff

TIMEOUT_SECONDS = 30
MAX_ATTEMPTS = 3
BASE_DELAY_SECONDS = 1.0
TEMPERATURE = 0.1
MAX_TOKENS = 10  # decision-only: one word expected
CHUNK_SIZE = 64


class ProviderError(Exception):
    """Completion provider answered with a non-success status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"DeepInfra API error: {status_code} - {body}")


class ConfigurationError(Exception):
    """Gateway is missing settings needed to reach the provider."""
    pass


def _log_retry(attempt: int, error: Exception, delay: float) -> None:
    get_logger().warning(
        "Completion attempt failed, retrying",
        attempt=attempt,
        error=str(error),
        delay_seconds=delay,
    )


def read_body(resp, deadline: float) -> bytes:
    """
    Read a streamed response body, giving up once the attempt deadline passes.

    The socket timeout bounds each read, not the whole attempt.

    Raises:
        requests.exceptions.Timeout: If the deadline passes before the body is complete
    """
    chunks = []
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        chunks.append(chunk)
        if time.monotonic() > deadline:
            raise requests.exceptions.Timeout(
                f"Completion attempt exceeded {TIMEOUT_SECONDS}s"
            )
    return b"".join(chunks)


def build_payload(model: str, prompt: str) -> dict:
    """Chat-completion request body for a single review."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
    }


@exponential_backoff(
    max_attempts=MAX_ATTEMPTS,
    base_delay=BASE_DELAY_SECONDS,
    exceptions=(requests.exceptions.RequestException, ProviderError, ValueError),
    on_retry=_log_retry,
)
def call_completion_with_retry(
    api_key: str,
    model: str,
    prompt: str,
    api_url: str = DEEPINFRA_API_URL,
) -> CompletionResponse:
    """
    Send one chat-completion request, retried on any failure.

    Each attempt is bounded by TIMEOUT_SECONDS of wall-clock time. Up to
    MAX_ATTEMPTS attempts are made with 1s and 2s pauses between them.

    Raises:
        requests.exceptions.RequestException: Network error or timeout on the last attempt
        ProviderError: Non-success status on the last attempt
        ValueError: Malformed response body on the last attempt
    """
    logger = get_logger()
    logger.record_api_call()
    try:
        deadline = time.monotonic() + TIMEOUT_SECONDS
        resp = requests.post(
            api_url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            json=build_payload(model, prompt),
            timeout=TIMEOUT_SECONDS,
            stream=True,
        )
        with resp:
            body = read_body(resp, deadline)
        if not resp.ok:
            raise ProviderError(resp.status_code, body.decode(resp.encoding or "utf-8", errors="replace"))
        return CompletionResponse.from_dict(json.loads(body))
    except requests.exceptions.Timeout:
        logger.record_api_failure("Timeout")
        raise
    except requests.exceptions.RequestException as e:
        logger.record_api_failure(type(e).__name__)
        raise
    except ProviderError as e:
        logger.record_api_failure(f"HTTPError_{e.status_code}")
        raise
    except ValueError:
        logger.record_api_failure("MalformedResponse")
        raise


def review_merge(
    api_key: str,
    model: str,
    entity1: Entity,
    entity2: Entity,
    similarity: float,
    api_url: str = DEEPINFRA_API_URL,
) -> ReviewResult:
    """
    Ask the model whether two entity records are the same real-world entity.

    Args:
        api_key: Provider bearer token
        model: Provider model identifier
        entity1: First candidate record
        entity2: Second candidate record
        similarity: Upstream similarity score
        api_url: Chat-completion endpoint

    Returns:
        ReviewResult with the parsed decision and provider token usage

    Raises:
        ConfigurationError: If api_key is empty (no request is sent)
        Exception: The last error once all attempts have failed
    """
    logger = get_logger()
    logger.record_review_attempt()
    try:
        if not api_key:
            raise ConfigurationError("DEEPINFRA_API_KEY is not configured")

        prompt = build_prompt(entity1, entity2, similarity)
        response = call_completion_with_retry(api_key, model, prompt, api_url=api_url)
    except Exception as e:
        logger.record_review_failure(type(e).__name__)
        logger.error("Review failed", entity1=entity1.label, entity2=entity2.label, error=str(e))
        raise

    decision = parse_decision(response.first_content)
    logger.record_review_success(decision.value, response.total_tokens)
    logger.info(
        "Review decided",
        entity1=entity1.label,
        entity2=entity2.label,
        similarity=similarity,
        decision=decision.value,
        total_tokens=response.total_tokens,
    )

    return ReviewResult(
        decision=decision,
        input_tokens=response.prompt_tokens,
        output_tokens=response.completion_tokens,
        total_tokens=response.total_tokens,
    )
