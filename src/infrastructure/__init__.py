"""In-memory port implementations and structlog/correlation setup."""

__all__: list[str] = []
