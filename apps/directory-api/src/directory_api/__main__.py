from __future__ import annotations

import os

import uvicorn
from devkit.observability import configure_logging


def main() -> None:
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    host = os.getenv("DIRECTORY_API_HOST", "0.0.0.0")
    port = int(os.getenv("DIRECTORY_API_PORT", "8000"))
    uvicorn.run("directory_api.app:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
