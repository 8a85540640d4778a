"""Run the plan engine API with uvicorn.

Run with:  python3 serve.py
"""

from __future__ import annotations

import os

API_PORT = int(os.getenv("PORT", "8000"))


def main() -> None:
    import uvicorn

    from api.main import create_app

    uvicorn.run(create_app(), host=os.getenv("HOST", "127.0.0.1"), port=API_PORT, log_level="warning")


if __name__ == "__main__":
    main()
