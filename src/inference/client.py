import logging
from typing import Any, Dict, List, Optional

import httpx

from services.trait_engine.definitions import OCEAN_KEYS

logger = logging.getLogger(__name__)

# Status codes after which the fallback endpoint is tried
FALLBACK_STATUS_CODES = {403, 404, 410, 503}

# Label names seen in hosted personality models, mapped to trait keys
LABEL_ALIASES = {
    "openness": "O",
    "conscientiousness": "C",
    "extraversion": "E",
    "extroversion": "E",
    "agreeableness": "A",
    "neuroticism": "N",
}


class InferenceError(Exception):
    """Base class for failures talking to the external inference provider."""
    def __init__(self, message: str, status_code: Optional[int] = None, detail: str = ""):
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ModelLoadingError(InferenceError):
    """The provider is warming the model up; the caller should retry later."""
    def __init__(self, retry_after: int, detail: str = ""):
        self.retry_after = retry_after
        super().__init__(
            f"AI model is loading. Please wait {retry_after} seconds and try again.",
            status_code=503,
            detail=detail,
        )


class InferenceOutputError(InferenceError):
    pass


def parse_model_output(output: Any) -> Dict[str, float]:
    """
    Converts a provider payload into a trait vector keyed O, C, E, A, N.

    Accepts a flat list of numbers, a list wrapping one such list, or a list of
    {label, score} dicts (optionally wrapped). Numeric lists are read in OCEAN order.
    """
    vec = output
    if isinstance(vec, list) and vec and isinstance(vec[0], list):
        vec = vec[0]
    if not isinstance(vec, list):
        raise InferenceOutputError(f"Unexpected model output format: {str(output)[:200]}")

    if vec and all(isinstance(entry, dict) for entry in vec):
        by_label = {}
        for entry in vec:
            key = LABEL_ALIASES.get(str(entry.get("label", "")).strip().lower())
            if key is not None and "score" in entry:
                try:
                    by_label[key] = float(entry["score"])
                except (TypeError, ValueError):
                    raise InferenceOutputError(f"Non-numeric score for label '{entry.get('label')}': {entry['score']!r}")
        if set(by_label) == set(OCEAN_KEYS):
            return {trait: by_label[trait] for trait in OCEAN_KEYS}
        vec = [entry.get("score") for entry in vec]

    try:
        numbers = [float(x) for x in vec]
    except (TypeError, ValueError):
        raise InferenceOutputError(f"Unexpected model output format: {str(output)[:200]}")
    if len(numbers) < len(OCEAN_KEYS):
        raise InferenceOutputError(
            f"Model returned {len(numbers)} values, expected at least {len(OCEAN_KEYS)}"
        )
    return dict(zip(OCEAN_KEYS, numbers))


class InferenceClient:
    """Async client for a hosted Big Five regression model."""

    def __init__(
        self,
        api_token: str,
        model_id: str,
        base_url: str,
        fallback_url: Optional[str] = None,
        timeout: float = 30.0,
        retry_after_seconds: int = 20,
    ):
        self.api_token = api_token
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")
        self.fallback_url = fallback_url.rstrip("/") if fallback_url else None
        self.timeout = timeout
        self.retry_after_seconds = retry_after_seconds

    @classmethod
    def from_settings(cls, settings) -> "InferenceClient":
        return cls(
            api_token=settings.api_token,
            model_id=settings.model_id,
            base_url=settings.base_url,
            fallback_url=settings.fallback_url,
            timeout=settings.timeout_seconds,
            retry_after_seconds=settings.retry_after_seconds,
        )

    def endpoints(self) -> List[str]:
        urls = [f"{self.base_url}/{self.model_id}"]
        if self.fallback_url:
            urls.append(f"{self.fallback_url}/{self.model_id}")
        return urls

    async def predict(self, text: str) -> Dict[str, float]:
        """
        Sends text to the provider and returns its raw trait vector.

        Raises:
            ModelLoadingError: the final attempt answered 503.
            InferenceOutputError: the payload could not be read as five numbers.
            InferenceError: any other HTTP or transport failure.
        """
        headers = {
            'Authorization': f'Bearer {self.api_token}',
            'Content-Type': 'application/json',
        }
        urls = self.endpoints()
        response = None

        async with httpx.AsyncClient() as client:
            for attempt, url in enumerate(urls):
                try:
                    logger.debug(f"Sending inference request to {url}")
                    response = await client.post(url, headers=headers, json={"inputs": text}, timeout=self.timeout)
                except httpx.RequestError as e:
                    logger.error(f"Request error occurred while calling inference provider {url}: {e}")
                    raise InferenceError(f"AI model request failed: {e}") from e

                if response.is_success:
                    try:
                        payload = response.json()
                    except ValueError:
                        raise InferenceOutputError(f"Model returned a non-JSON body: {response.text[:200]}")
                    return parse_model_output(payload)

                logger.error(f"Inference provider error: {response.status_code} - {response.text[:200]}")
                if response.status_code in FALLBACK_STATUS_CODES and attempt < len(urls) - 1:
                    logger.warning(f"Retrying inference against fallback endpoint {urls[attempt + 1]}")
                    continue
                break

        if response.status_code == 503:
            raise ModelLoadingError(self.retry_after_seconds, detail=response.text[:200])
        raise InferenceError(
            f"AI model error ({response.status_code})",
            status_code=response.status_code,
            detail=response.text[:200],
        )
