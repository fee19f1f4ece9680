import json
import logging
import re
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.core.config import settings
from app.core.exceptions import (
    AIError,
    AIKillSwitchError,
    AIQuotaError,
    AIRateLimitError,
    AIResponseParseError,
)

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)

Message = Dict[str, Any]


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers the model wraps JSON in."""
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_response(text: str) -> Any:
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.error(f"Failed to decode AI JSON response: {cleaned[:500]}")
        raise AIResponseParseError("Failed to parse AI response.")


class LLMGateway:
    """
    Chat-completion client for the hosted LLM gateway.

    Transport failures (connection reset, timeout) are retried when ``retry``
    is set; HTTP error statuses are mapped straight to domain errors and are
    never retried.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ai.api_key
        self.url = url or settings.ai.gateway_url
        self.model_name = model_name or settings.ai.model_name
        self.timeout = timeout or settings.ai.timeout_seconds
        self.http = session or requests.Session()

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        return self.http.post(
            self.url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=self.timeout,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.exceptions.ConnectionError, requests.exceptions.Timeout)),
        reraise=True,
    )
    def _post_with_retry(self, payload: Dict[str, Any]) -> requests.Response:
        return self._post(payload)

    def chat(
        self,
        messages: List[Message],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        retry: bool = True,
    ) -> str:
        if settings.ai.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AIKillSwitchError()

        if not self.api_key:
            logger.error("LLM API key missing.")
            raise AIError("LLM_API_KEY is not configured")

        model_name = model or self.model_name
        payload = {
            "model": model_name,
            "messages": messages,
            "temperature": settings.ai.temperature if temperature is None else temperature,
        }
        logger.info(f"Calling AI Model: {model_name}")

        try:
            response = self._post_with_retry(payload) if retry else self._post(payload)
        except requests.exceptions.Timeout:
            logger.error("AI service timeout.")
            raise AIError("AI service reached timeout limit.")
        except requests.exceptions.RequestException as e:
            logger.error(f"AI service transport error: {e}")
            raise AIError(f"AI service error: {e}")

        if response.status_code == 429:
            logger.warning("AI gateway rate limited the request.")
            raise AIRateLimitError()
        if response.status_code == 402:
            logger.warning("AI gateway reports exhausted credits.")
            raise AIQuotaError()
        if not response.ok:
            logger.error(f"AI service HTTP error: {response.status_code} {response.text[:300]}")
            raise AIError(
                f"AI service returned error: {response.status_code}",
                details={"status": response.status_code},
            )

        try:
            return response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError):
            logger.error(f"Unexpected AI gateway payload: {response.text[:300]}")
            raise AIError("AI service returned an unexpected payload.")

    def chat_json(
        self,
        system_prompt: str,
        user_content: str,
        temperature: Optional[float] = None,
    ) -> Any:
        """ Helper for analysis tasks that expect JSON back. """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]
        return parse_json_response(self.chat(messages, temperature=temperature))
