"""Mixin for adding retry functionality to providers."""

from ..config import get_settings
from ..utils.retry import RetryConfig, with_exponential_backoff


class RetryMixin:
    """Mixin to add retry functionality to providers."""

    retry_config: RetryConfig | None = None

    def get_retry_config(self) -> RetryConfig:
        """Return the provider's retry configuration.

        An explicitly assigned ``retry_config`` wins; otherwise the values come
        from the ``retry`` section of the application settings.
        """
        if self.retry_config is not None:
            return self.retry_config

        retry = get_settings().retry
        return RetryConfig(
            max_retries=retry.max_retries,
            base_delay=retry.base_delay,
            max_delay=retry.max_delay,
            exponential_base=retry.exponential_base,
            jitter=retry.jitter,
        )

    def with_retry(self, func):
        """Wrap an async function with exponential backoff retry."""
        return with_exponential_backoff(config=self.get_retry_config())(func)
