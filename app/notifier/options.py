"""Dispatch policy options.

Immutable option models shared by configuration loading, event definitions
and the dispatch engine. All of them are frozen pydantic models so a single
instance can be shared by concurrent dispatches.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RetryOptions(BaseModel):
    """Attempt policy for a single channel send.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1).
        delay: Base delay between attempts, in seconds.
        exponential_backoff: Double the delay after every failed attempt.

    Example:
        RetryOptions(max_attempts=3, delay=0.1, exponential_backoff=True)
        # waits 0.1s after attempt 1, 0.2s after attempt 2
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    delay: float = Field(default=0.5, ge=0)
    exponential_backoff: bool = True

    def delay_for(self, attempt: int) -> float:
        """Return the wait after the given (1-based) failed attempt."""
        if self.exponential_backoff:
            return self.delay * (2 ** (attempt - 1))
        return self.delay


SINGLE_ATTEMPT = RetryOptions(max_attempts=1, delay=0)


class BulkOptions(BaseModel):
    """Chunking and concurrency settings for multi-recipient sends.

    Attributes:
        concurrency_limit: Maximum sends in flight at once in the generic loop.
        max_batch_size: Largest chunk handed to a provider or fanned out at once.
        auto_chunk: Split lists larger than max_batch_size into contiguous chunks.
    """

    model_config = ConfigDict(frozen=True)

    concurrency_limit: int = Field(default=10, ge=1)
    max_batch_size: int = Field(default=1000, ge=1)
    auto_chunk: bool = True


class NamedProviderDefinition(BaseModel):
    """Caller-selectable alias for a provider inside one channel.

    Callers pick it with ``payload.metadata["provider"] = "<name>"``.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    fallback: Optional[str] = None


class ChannelOptions(BaseModel):
    """Provider configuration for one channel.

    Attributes:
        provider: Active provider key (e.g. "sendgrid"). Empty for channels
            that have a single adapter registered under the bare channel name.
        fallback: Provider key tried when the active provider exhausts retries.
        providers: Named provider routing table.
        retry: Channel default retry policy, used when the event has none.

    Example:
        ChannelOptions(
            provider="sendgrid",
            fallback="smtp",
            providers={
                "transactional": NamedProviderDefinition(type="postmark", fallback="sendgrid"),
            },
        )
    """

    model_config = ConfigDict(frozen=True)

    provider: str = ""
    fallback: Optional[str] = None
    providers: Dict[str, NamedProviderDefinition] = Field(default_factory=dict)
    retry: Optional[RetryOptions] = None
