"""Errors raised by provider adapters."""


class ProviderError(RuntimeError):
    """Transient failure talking to a nutrition provider."""

    def __init__(
        self, provider: str, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class ProviderTimeoutError(ProviderError):
    """Provider did not answer within its timeout."""


class ProviderDecodeError(ProviderError):
    """Provider answered with a body neither decode tier understood."""
