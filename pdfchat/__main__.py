"""Run the pdfchat API with uvicorn: ``python -m pdfchat``."""

import uvicorn

from pdfchat.configs import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "pdfchat.api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
