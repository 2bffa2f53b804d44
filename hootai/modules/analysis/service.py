import asyncio
import json
import logging
import re
import socket
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup
from fastapi import HTTPException
from pydantic import ValidationError

from hootai.config import settings
from hootai.modules.analysis import prompts
from hootai.modules.analysis.file_extract import FileExtractionError, extract_text
from hootai.modules.analysis.llm_client import AzureChatClient, LLMError
from hootai.modules.analysis.schemas import AnalysisRequest, AnalysisResult
from hootai.modules.analysis.validators import (
    ip_literal, is_email, is_public_address, is_search_engine, normalize_url
)

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")

PAGE_FETCH_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; HootAI-UX-Analyzer/1.0)",
    "Accept": "text/html,application/xhtml+xml",
}

Resolver = Callable[[str], Awaitable[List[str]]]


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """First JSON object in text: the whole string, fenced code, or embedded in prose."""
    candidate = _FENCE_RE.sub("", text.strip())
    try:
        parsed = json.loads(candidate)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    decoder = json.JSONDecoder()
    start = candidate.find("{")
    while start != -1:
        try:
            parsed, _ = decoder.raw_decode(candidate, start)
            if isinstance(parsed, dict):
                return parsed
        except ValueError:
            pass
        start = candidate.find("{", start + 1)
    return None


def normalize_result(data: Dict[str, Any]) -> AnalysisResult:
    problems = data.get("problems")
    issues = data.get("issues")
    return AnalysisResult.model_validate({
        "summary": data.get("summary") or prompts.DEFAULT_SUMMARY,
        "problems": problems if isinstance(problems, list) else [],
        "issues": issues if isinstance(issues, list) else [],
    })


def parse_completion(text: str) -> AnalysisResult:
    data = extract_json_object(text)
    if data is None:
        logger.error(f"LLM response was not valid JSON ({len(text)} chars)")
        raise HTTPException(status_code=500, detail="LLM response was not valid JSON")
    try:
        return normalize_result(data)
    except ValidationError as e:
        logger.error(f"LLM response did not match the report format: {e.error_count()} errors")
        raise HTTPException(status_code=500, detail="LLM response did not match the report format")


async def resolve_host(hostname: str) -> List[str]:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


async def read_capped(response: httpx.Response, limit: int) -> bytes:
    """At most limit bytes of a streamed body; the rest is never downloaded"""
    body = bytearray()
    async for chunk in response.aiter_bytes():
        body.extend(chunk[:limit - len(body)])
        if len(body) >= limit:
            break
    return bytes(body)


def decode_body(body: bytes, encoding: Optional[str]) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def visible_text(html: str, limit: int) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template", "svg"]):
        tag.decompose()
    text = _WS_RE.sub(" ", soup.get_text(" ", strip=True)).strip()
    return text[:limit]


class AnalysisService:
    def __init__(
        self,
        llm: AzureChatClient,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        resolver: Optional[Resolver] = None,
    ):
        self.llm = llm
        self.transport = transport
        self.resolver = resolver or resolve_host

    @staticmethod
    def validate_request(request: AnalysisRequest) -> None:
        if not request.type or not request.content:
            raise HTTPException(status_code=400, detail="Missing required fields: type and content")
        if request.type not in ("url", "file"):
            raise HTTPException(status_code=400, detail='Invalid type: must be "url" or "file"')

    async def is_fetchable(self, url: str) -> bool:
        """http(s) URLs whose host resolves only to public addresses"""
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL:
            return False
        if parsed.scheme not in ("http", "https") or not parsed.host:
            return False
        literal = ip_literal(parsed.host)
        if literal is not None:
            return is_public_address(literal)
        try:
            addresses = await self.resolver(parsed.host)
        except (OSError, UnicodeError) as e:
            logger.warning(f"Could not resolve {parsed.host}: {e}")
            return False
        return bool(addresses) and all(is_public_address(a) for a in addresses)

    async def fetch_page_excerpt(self, url: str) -> str:
        """One best-effort GET of a public page; any failure yields an empty excerpt"""
        try:
            async with httpx.AsyncClient(
                timeout=settings.page_fetch_timeout_seconds,
                headers=PAGE_FETCH_HEADERS,
                transport=self.transport,
            ) as client:
                # Redirects are followed by hand so every hop gets the address check
                for _ in range(settings.page_fetch_max_redirects + 1):
                    if not await self.is_fetchable(url):
                        logger.warning(f"Refusing to fetch non-public URL {url}")
                        return ""
                    async with client.stream("GET", url) as response:
                        if response.is_redirect:
                            url = str(response.url.join(response.headers["location"]))
                            continue
                        response.raise_for_status()
                        if "html" not in response.headers.get("content-type", ""):
                            return ""
                        body = await read_capped(response, settings.page_fetch_max_bytes)
                        html = decode_body(body, response.charset_encoding)
                        return visible_text(html, settings.page_excerpt_chars)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Page fetch failed for {url}: {e}")
            return ""
        logger.warning(f"Too many redirects fetching {url}")
        return ""

    async def build_prompt(self, request: AnalysisRequest) -> str:
        prompt = prompts.UX_ANALYSIS_PROMPT
        if request.type == "url":
            url = normalize_url(request.content)
            excerpt = await self.fetch_page_excerpt(url)
            return prompt + prompts.url_section(url, excerpt)
        content = request.content
        if len(content) > settings.max_content_chars:
            logger.info(f"Truncating file content from {len(content)} chars")
            content = content[:settings.max_content_chars]
        return prompt + prompts.file_section(content, request.file_name)

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Validate, short-circuit non-analysable URLs, call the model once, parse its JSON"""
        self.validate_request(request)

        if request.type == "url":
            candidate = request.content.strip()
            if is_email(candidate):
                logger.info("Skipping analysis: input is an email address")
                return AnalysisResult(summary=prompts.EMAIL_INPUT_SUMMARY)
            if is_search_engine(normalize_url(candidate)):
                logger.info("Skipping analysis: search engine URL")
                return AnalysisResult(summary=prompts.SEARCH_ENGINE_SUMMARY)

        prompt = await self.build_prompt(request)
        logger.info(f"Requesting {request.type} analysis ({len(prompt)} prompt chars)")
        try:
            completion = await self.llm.complete(prompts.SYSTEM_PROMPT, prompt)
        except LLMError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return parse_completion(completion)

    async def analyze_upload(self, file_name: str, data: bytes) -> AnalysisResult:
        if len(data) > settings.max_upload_bytes:
            raise HTTPException(status_code=400, detail="Uploaded file is too large")
        try:
            content = extract_text(file_name, data)
        except FileExtractionError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return await self.analyze(AnalysisRequest(type="file", content=content, file_name=file_name))
