import logging
import threading
import time
from typing import Optional

from google import genai
from google.genai import types

from .config import (
    GEMINI_API_KEY,
    GEMINI_MODEL,
    CAPTION_PROMPT,
    CAPTION_MAX_TOKENS,
    CAPTION_TEMPERATURE,
    CAPTION_TIMEOUT,
    CAPTION_FALLBACK,
    CAPTION_EMPTY_TEXT,
)

logger = logging.getLogger(__name__)


class CaptionService:
    """Short natural-language description of a source image.

    Failures never propagate: the caller always gets a string back, either
    the model's caption or one of the fixed fallback texts.
    """

    def __init__(self, client=None, api_key: Optional[str] = GEMINI_API_KEY, model: str = GEMINI_MODEL,
                 prompt: str = CAPTION_PROMPT, max_tokens: int = CAPTION_MAX_TOKENS,
                 temperature: float = CAPTION_TEMPERATURE, fallback: str = CAPTION_FALLBACK,
                 empty_text: str = CAPTION_EMPTY_TEXT, timeout: float = CAPTION_TIMEOUT):
        self.api_key = api_key
        self.model = model
        self.prompt = prompt
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.fallback = fallback
        self.empty_text = empty_text
        self.timeout = timeout
        self._client = client

    @property
    def client(self):
        if self._client is None and self.api_key:
            self._client = genai.Client(
                api_key=self.api_key,
                # HttpOptions.timeout is in milliseconds
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
            logger.info(f"Caption client initialized with model: {self.model}")
        return self._client

    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def describe(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
        if not self.is_configured():
            logger.warning("No caption API key configured, using fallback caption")
            return self.fallback

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=[
                    self.prompt,
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                ],
                config=types.GenerateContentConfig(
                    max_output_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            logger.error(f"Caption request failed: {e}")
            return self.fallback

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            logger.warning("Caption response was empty")
            return self.empty_text
        return text

    def start(self, image_bytes: bytes, mime_type: str = "image/jpeg", timeout: float = None) -> "PendingCaption":
        """Request a caption in the background; collect it later with ``result()``."""
        return PendingCaption(self, image_bytes, mime_type, self.timeout if timeout is None else timeout)

    def describe_with_timeout(self, image_bytes: bytes, mime_type: str = "image/jpeg",
                              timeout: float = None) -> str:
        return self.start(image_bytes, mime_type, timeout).result()


class PendingCaption:
    """Caption request running on a daemon thread.

    The deadline counts from when the request started, so work done in the
    meantime (segmentation, assembly) uses up the wait. A request still
    running at exit does not keep the process alive.
    """

    def __init__(self, service: CaptionService, image_bytes: bytes, mime_type: str, timeout: float):
        self.fallback = service.fallback
        self.timeout = timeout
        self.deadline = time.monotonic() + timeout
        self._caption = None
        self._done = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(service, image_bytes, mime_type), name="caption", daemon=True
        )
        self._thread.start()

    def _run(self, service, image_bytes, mime_type):
        self._caption = service.describe(image_bytes, mime_type)
        self._done.set()

    def result(self) -> str:
        if not self._done.wait(max(0.0, self.deadline - time.monotonic())):
            logger.warning(f"Caption request timed out after {self.timeout}s, using fallback caption")
            return self.fallback
        return self._caption
