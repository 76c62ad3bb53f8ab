import os

DEFAULT_PAGE_SIZE = os.getenv("DEFAULT_PAGE_SIZE", "A4")
DEFAULT_ORIENTATION = os.getenv("DEFAULT_ORIENTATION", "portrait")
DEFAULT_MARGIN_MM = float(os.getenv("DEFAULT_MARGIN_MM", "10"))
DEFAULT_QUALITY = float(os.getenv("DEFAULT_QUALITY", "0.9"))
MAX_MARGIN_MM = 50

PAGE_BG_COLOR = "white"
PAGE_IMAGE_FORMAT = "JPEG"
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "4"))

OUTPUT_DIR = os.getenv("OUTPUT_DIR", "/tmp")
FETCH_TIMEOUT = int(os.getenv("FETCH_TIMEOUT", "60"))

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
CAPTION_MAX_TOKENS = int(os.getenv("CAPTION_MAX_TOKENS", "100"))
CAPTION_TEMPERATURE = float(os.getenv("CAPTION_TEMPERATURE", "0.7"))
CAPTION_TIMEOUT = int(os.getenv("CAPTION_TIMEOUT", "20"))
CAPTION_PROMPT = os.getenv(
    "CAPTION_PROMPT",
    "Briefly describe the content of this long image. Is it a web page, a chat log "
    "or a technical document? Does it contain natural section breaks? "
    "Answer in under 40 words.",
)
CAPTION_FALLBACK = os.getenv("CAPTION_FALLBACK", "Ready to convert your document.")
CAPTION_EMPTY_TEXT = os.getenv("CAPTION_EMPTY_TEXT", "Analyzing document structure.")
