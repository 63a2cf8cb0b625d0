"""Run the gateway with uvicorn: ``python -m atlas_gateway``."""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "atlas_gateway.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "").lower() in ("1", "true", "yes"),
    )


if __name__ == "__main__":
    main()
