"""Run the storefront API with uvicorn.

Usage:
    python src/server.py                       # HOST/PORT from the environment
    python src/server.py --port 9000 --reload
"""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Storefront API server")
    parser.add_argument("--host", default=os.environ.get("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "app:app",
        app_dir=os.path.dirname(os.path.abspath(__file__)),
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,  # structlog owns the handlers
    )


if __name__ == "__main__":
    main()
