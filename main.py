#!/usr/bin/env python3
"""
Main entry point for the GoBiz proxy when running from a source checkout.
This file allows running the proxy directly from the project root.
"""

import sys
from pathlib import Path

# Add the src directory to Python path
src_dir = Path(__file__).parent / "src"
sys.path.insert(0, str(src_dir))


def main():
    """Run the GoBiz proxy with auto-reload for local development."""
    import uvicorn
    from gobiz_proxy.core.config import get_settings

    settings = get_settings()
    print(f"Starting GoBiz proxy at http://{settings.HOST}:{settings.PORT}")
    print(f"Upstream: {settings.UPSTREAM_BASE}")
    print(f"API docs: http://{settings.HOST}:{settings.PORT}/docs")

    uvicorn.run(
        "gobiz_proxy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="debug",
        reload=True,
        reload_dirs=[str(src_dir)]
    )


if __name__ == "__main__":
    main()
