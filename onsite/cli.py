from __future__ import annotations

import uvicorn

from onsite.config import get_settings


def main() -> None:
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "onsite.main:app",
        host="0.0.0.0",  # noqa: S104
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
