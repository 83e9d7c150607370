"""Client for the external text-completion service used for CV extraction."""
import json
from typing import Any, Dict, List, Optional

import httpx
from httpx import Timeout

from app.config import settings
from app.exceptions import CompletionServiceError
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_completion_payload(text: Optional[str]) -> List[Dict[str, Any]]:
    """
    Parse completion output into a flat list of raw candidate objects.

    Accepted shapes:
    - a bare array of objects
    - an object wrapping the array under "candidates"
    - a single candidate object

    Items that are not objects are dropped; nothing else is validated here.

    Raises:
        CompletionServiceError: If the text is empty or not valid JSON, or the
            top-level value is neither an array nor an object
    """
    if not text or not text.strip():
        raise CompletionServiceError("Completion service returned an empty response")

    try:
        parsed = json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as e:
        logger.error(
            "Failed to parse JSON from completion response",
            extra={"response_preview": text[:500], "response_length": len(text), "error": str(e)}
        )
        raise CompletionServiceError(f"Completion response is not valid JSON: {e}") from e

    if isinstance(parsed, dict) and "candidates" in parsed:
        parsed = parsed["candidates"]

    if isinstance(parsed, dict):
        items = [parsed]
    elif isinstance(parsed, list):
        items = parsed
    else:
        raise CompletionServiceError(
            f"Unexpected completion payload type: {type(parsed).__name__}"
        )

    records = [item for item in items if isinstance(item, dict)]
    if len(records) != len(items):
        logger.warning(
            f"Dropped {len(items) - len(records)} non-object item(s) from completion payload",
            extra={"item_count": len(items)}
        )
    return records


class CompletionClient:
    """Calls an OpenAI-compatible chat completions endpoint and returns parsed JSON records."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        self.http_client = http_client
        self.base_url = (base_url or settings.completion_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.completion_api_key
        self.model = model or settings.completion_model
        self.max_tokens = settings.completion_max_tokens
        self.temperature = settings.completion_temperature
        self.timeout = settings.completion_timeout

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post(self, client: httpx.AsyncClient, prompt: str) -> httpx.Response:
        response = await client.post(
            f"{self.base_url}/chat/completions",
            json=self._build_payload(prompt),
            headers=self._headers(),
        )
        response.raise_for_status()
        return response

    async def complete_text(self, prompt: str) -> str:
        """
        Send one prompt and return the raw text of the first choice.

        Single attempt, no retries.

        Raises:
            CompletionServiceError: On network failure, non-2xx status or an
                unexpected response body
        """
        logger.debug(
            "Calling completion service",
            extra={"model": self.model, "prompt_length": len(prompt), "max_tokens": self.max_tokens}
        )

        try:
            if self.http_client is not None:
                response = await self._post(self.http_client, prompt)
            else:
                async with httpx.AsyncClient(timeout=Timeout(self.timeout)) as client:
                    response = await self._post(client, prompt)
        except httpx.TimeoutException as e:
            logger.error(f"Completion service timed out: {e}", extra={"model": self.model})
            raise CompletionServiceError(f"Completion service timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Completion service returned HTTP {e.response.status_code}",
                extra={"status_code": e.response.status_code, "response_preview": e.response.text[:500]}
            )
            raise CompletionServiceError(
                f"Completion service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling completion service: {e}", extra={"error": str(e)})
            raise CompletionServiceError(f"Completion service request failed: {e}") from e

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(
                "Unexpected response format from completion service",
                extra={"response_preview": response.text[:500]}
            )
            raise CompletionServiceError("Unexpected response format from completion service") from e

        usage = body.get("usage") or {}
        logger.info(
            "Completion received",
            extra={
                "model": body.get("model", self.model),
                "finish_reason": body["choices"][0].get("finish_reason"),
                "prompt_tokens": usage.get("prompt_tokens"),
                "completion_tokens": usage.get("completion_tokens"),
            }
        )
        return content or ""

    async def complete_json(self, prompt: str) -> List[Dict[str, Any]]:
        """Send one prompt and return the raw candidate-shaped objects it produced."""
        content = await self.complete_text(prompt)
        return parse_completion_payload(content)
