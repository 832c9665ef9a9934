"""TraceView configuration."""

from dataclasses import dataclass, field

DEFAULT_IDENTIFIER_FIELDS = frozenset({"traceId", "spanId", "parentSpanId"})


@dataclass
class TraceviewConfig:
    """Configuration for TraceView."""

    identifier_field_names: frozenset[str] = field(
        default_factory=lambda: DEFAULT_IDENTIFIER_FIELDS
    )
    """Object keys whose string values are base64 identifiers."""

    strict_identifiers: bool = False
    """Raise on the first malformed identifier instead of skipping the field."""

    server_host: str = "127.0.0.1"
    """Host to bind the web server to."""

    server_port: int = 8746
    """Port for the web server."""
