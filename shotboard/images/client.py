"""
shotboard.images.client - Image service abstraction using litellm.

Provides the two operations the core consumes, generate from text and edit
from an existing image, with error classification and retry of transient
failures.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from shotboard.config import DEFAULT_PROMPT_TEMPLATE
from shotboard.exceptions import (
    CredentialError,
    CredentialRevokedError,
    GenerationError,
    InvalidCredentialError,
    NoImageProducedError,
    RateLimitedError,
    ServiceError,
)
from shotboard.images.handles import (
    b64_to_data_uri,
    decode_handle,
    extension_for,
    is_data_uri,
    to_data_uri,
)
from shotboard.images.prompts import PromptBuilder
from shotboard.logging import logger

INVALID_KEY_MESSAGE = "The selected API key is not valid. Please select a different key."
REVOKED_KEY_MARKER = "requested entity was not found"
GENERIC_FAILURE_MESSAGE = "Failed to generate image due to an API error."
RATE_LIMIT_MESSAGE = "The image service is rate limiting requests. Try again shortly."
NO_IMAGE_MESSAGE = "No image was generated."


class ImageService(Protocol):
    """The external image service as seen by the core."""

    async def generate_image(self, description: str) -> str: ...

    async def edit_image(self, source_handle: str, instruction: str) -> str: ...


def classify_error(error: Exception) -> GenerationError:
    """Map a service or transport exception onto the GenerationError taxonomy."""
    if isinstance(error, GenerationError):
        return error

    import litellm

    text = str(error)
    lowered = text.lower()

    if "api key not valid" in lowered or isinstance(error, litellm.AuthenticationError):
        return InvalidCredentialError(INVALID_KEY_MESSAGE)
    if REVOKED_KEY_MARKER in lowered:
        return CredentialRevokedError(text)
    if (
        isinstance(error, litellm.RateLimitError)
        or "rate limit" in lowered
        or "resource_exhausted" in lowered
    ):
        return RateLimitedError(RATE_LIMIT_MESSAGE)
    return ServiceError(GENERIC_FAILURE_MESSAGE)


def _is_transient(error: Exception, classified: GenerationError) -> bool:
    if isinstance(classified, RateLimitedError):
        return True
    if isinstance(classified, CredentialError):
        return False

    import litellm

    if isinstance(error, (litellm.Timeout, litellm.APIConnectionError)):
        return True
    lowered = str(error).lower()
    return "timeout" in lowered or "timed out" in lowered or "connection" in lowered


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _download(url: str, timeout: int) -> tuple[bytes, str]:
    import requests

    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    mime_type = response.headers.get("Content-Type", "image/png").split(";")[0].strip()
    return response.content, mime_type or "image/png"


class ImageClient:
    """litellm-backed image client with credential error mapping and retries."""

    def __init__(
        self,
        model: str = "gemini/imagen-4.0-generate-001",
        edit_model: str = "gemini/gemini-2.5-flash-image",
        api_key: str | None = None,
        prompt_template: str = DEFAULT_PROMPT_TEMPLATE,
        aspect_ratio: str | None = "16:9",
        size: str | None = None,
        timeout: int = 120,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> None:
        self.model = model
        self.edit_model = edit_model
        self.api_key = api_key
        self.prompts = PromptBuilder(prompt_template)
        self.aspect_ratio = aspect_ratio
        self.size = size
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._usage = {"generate": 0, "edit": 0}

    def _common_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"n": 1, "timeout": self.timeout}
        if self.api_key:
            params["api_key"] = self.api_key
        if self.size:
            params["size"] = self.size
        if self.aspect_ratio:
            params["aspect_ratio"] = self.aspect_ratio
        return params

    async def generate_image(self, description: str) -> str:
        """Generate one image for a visual description.

        Args:
            description: Shot description; wrapped by the prompt template

        Returns:
            Image handle (data URI)

        Raises:
            GenerationError: On any service-side failure
        """
        prompt = self.prompts.render(description)
        logger.debug("Generating image with %s (%d chars)", self.model, len(prompt))
        response = await self._call(
            "aimage_generation",
            model=self.model,
            prompt=prompt,
            **self._common_params(),
        )
        self._usage["generate"] += 1
        return await self._extract_handle(response)

    async def edit_image(self, source_handle: str, instruction: str) -> str:
        """Edit an existing image following an instruction.

        Args:
            source_handle: Handle of the image to edit
            instruction: Free-text edit instruction

        Returns:
            Handle of the edited image

        Raises:
            GenerationError: On any service-side failure
        """
        try:
            data, mime_type = decode_handle(source_handle)
        except ValueError as e:
            raise ServiceError(f"Cannot edit image: {e}") from e

        logger.debug("Editing image with %s", self.edit_model)
        response = await self._call(
            "aimage_edit",
            model=self.edit_model,
            image=(f"source{extension_for(mime_type)}", data, mime_type),
            prompt=instruction.strip(),
            **self._common_params(),
        )
        self._usage["edit"] += 1
        return await self._extract_handle(response)

    async def _call(self, operation: str, **kwargs: Any) -> Any:
        try:
            import litellm
        except ImportError as e:
            raise ServiceError("litellm not installed. Install with: pip install litellm") from e

        litellm.telemetry = False
        func = getattr(litellm, operation)
        last_error: GenerationError | None = None

        for attempt in range(self.max_retries):
            if attempt > 0:
                logger.info("Retry %d/%d for %s", attempt + 1, self.max_retries, operation)
            try:
                return await func(**kwargs)
            except Exception as e:
                classified = classify_error(e)
                last_error = classified
                if not _is_transient(e, classified) or attempt == self.max_retries - 1:
                    logger.warning("%s failed: %s", operation, e)
                    raise classified from e

                delay = self.retry_delay
                if isinstance(classified, RateLimitedError):
                    delay *= 2
                logger.warning("%s failed (%s), retrying in %.1fs", operation, e, delay)
                await asyncio.sleep(delay)

        raise last_error or ServiceError(GENERIC_FAILURE_MESSAGE)

    async def _extract_handle(self, response: Any) -> str:
        items = _field(response, "data") or []
        if not items:
            raise NoImageProducedError(NO_IMAGE_MESSAGE)

        image = items[0]
        b64_data = _field(image, "b64_json")
        if b64_data:
            return b64_to_data_uri(b64_data)

        url = _field(image, "url")
        if url:
            if is_data_uri(url):
                return url
            try:
                content, mime_type = await asyncio.to_thread(_download, url, self.timeout)
            except Exception as e:
                raise ServiceError(f"Could not download generated image: {e}") from e
            return to_data_uri(content, mime_type)

        raise NoImageProducedError(NO_IMAGE_MESSAGE)

    def get_usage(self) -> dict[str, int]:
        """Get count of billed generate/edit requests."""
        return self._usage.copy()


def create_client_from_config(config: Any, api_key: str | None = None) -> ImageClient:
    """Create image client from ShotboardConfig.

    Args:
        config: ShotboardConfig instance
        api_key: Credential to send; litellm falls back to its own env lookup when None

    Returns:
        Configured ImageClient
    """
    return ImageClient(
        model=config.image_model,
        edit_model=config.edit_model,
        api_key=api_key,
        prompt_template=config.prompt_template,
        aspect_ratio=config.aspect_ratio,
        size=config.image_size,
        timeout=config.request_timeout,
        max_retries=config.max_retries,
        retry_delay=config.retry_delay,
    )
