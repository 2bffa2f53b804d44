"""
Chat-completions client for the Azure-hosted analysis model.

One request per call: no retries, no streaming.
"""
import logging
from typing import Optional

import httpx

from hootai.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Upstream model call failed or returned nothing usable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AzureChatClient:
    def __init__(
        self,
        endpoint: Optional[str],
        api_key: Optional[str],
        max_tokens: int = 1000,
        temperature: float = 0.7,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.transport = transport

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send one chat-completions request.

        Args:
            system_prompt: System message content
            user_prompt: User message content

        Returns:
            Text of the first choice

        Raises:
            LLMError: If the client is not configured, the request fails,
                the API returns a non-2xx status or the completion is empty
        """
        if not self.endpoint or not self.api_key:
            raise LLMError("One or more Azure OpenAI environment variables are not set.")

        payload = {
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": 1.0,
            "frequency_penalty": 0.0,
            "presence_penalty": 0.0,
        }
        headers = {
            "api-key": self.api_key,
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"LLM request failed: {e}")
            raise LLMError("Azure Grok API call failed") from e

        if not response.is_success:
            error_detail = response.text
            try:
                error_detail = response.json().get("error", {}).get("message", response.text)
            except Exception:
                pass
            logger.error(f"LLM API returned {response.status_code}: {error_detail}")
            raise LLMError(
                f"Azure Grok API error: {error_detail}",
                status_code=response.status_code,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None
        if not content:
            raise LLMError("No response from Azure Grok")
        return content


def get_llm_client() -> AzureChatClient:
    return AzureChatClient(
        endpoint=settings.azure_chat_completions_url,
        api_key=settings.azure_openai_api_key,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
        timeout=settings.llm_timeout_seconds,
    )
