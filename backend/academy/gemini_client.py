from __future__ import annotations
import httpx
from typing import Any, Dict, Optional
from .errors import UpstreamEmptyResponse, UpstreamStatusError, UpstreamUnavailable
from .logger import get_logger
from .settings import settings

log = get_logger("gemini")


class GeminiClient:
	"""Single-shot client for the Gemini generateContent endpoint.

	One request per call, no retries; retry policy belongs to whoever calls
	this. Failures are raised as UpstreamUnavailable subclasses.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
		self.generation_config: Dict[str, Any] = {
			"temperature": settings.gemini_temperature,
			"topP": settings.gemini_top_p,
			"maxOutputTokens": settings.gemini_max_output_tokens,
		}
		self._client = httpx.AsyncClient(timeout=timeout or settings.gemini_timeout_seconds, transport=transport)

	async def generate(self, prompt: str) -> str:
		payload: Dict[str, Any] = {
			"contents": [{"parts": [{"text": prompt}]}],
			"generationConfig": self.generation_config,
		}
		# Key goes in a header so it never shows up in URL logs
		headers = {"x-goog-api-key": self.api_key}
		try:
			r = await self._client.post(self.base_url, headers=headers, json=payload)
		except httpx.TimeoutException as err:
			log.warning("Gemini call timed out: %s", err)
			raise UpstreamUnavailable("generator timed out") from err
		except httpx.RequestError as err:
			log.warning("Gemini call failed: %s", err)
			raise UpstreamUnavailable(f"generator unreachable: {err}") from err
		if r.status_code < 200 or r.status_code >= 300:
			body = r.text[:200]
			log.error("Gemini returned HTTP %s: %s", r.status_code, body)
			raise UpstreamStatusError(r.status_code, body)
		try:
			data = r.json()
		except ValueError as err:
			raise UpstreamEmptyResponse() from err
		return self._candidate_text(data)

	@staticmethod
	def _candidate_text(data: Any) -> str:
		candidates = data.get("candidates") if isinstance(data, dict) else None
		if not candidates:
			raise UpstreamEmptyResponse()
		first = candidates[0] or {}
		parts = (first.get("content") or {}).get("parts") or []
		if parts and isinstance(parts[0].get("text"), str):
			return parts[0]["text"]
		raise UpstreamEmptyResponse(first.get("finishReason") or "NO_TEXT")

	async def aclose(self) -> None:
		await self._client.aclose()
