# docportal/llm/errors.py


class LLMError(Exception):
    """Base LLM error (wrapped). Keeps the provider's message and HTTP status."""

    def __init__(self, message: str, *, status_code: int | None = None, provider: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.provider = provider


class LLMRetryableError(LLMError):
    """Transient error: timeouts, 429s, 5xx, network."""


class LLMNonRetryableError(LLMError):
    """Bad request, auth, unknown model, empty input, prompt too large."""


class LLMResponseParseError(LLMError):
    """Provider answered, but the body is not valid JSON / does not match the schema."""

    def __init__(self, message: str, *, raw_text: str, response=None):
        super().__init__(message, provider=getattr(response, "provider", None))
        self.raw_text = raw_text
        self.response = response
