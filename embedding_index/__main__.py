"""Run the API server with ``python -m embedding_index``."""

import uvicorn

from embedding_index.config import get_settings


def main() -> None:
    """Serve the FastAPI application on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "embedding_index.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
