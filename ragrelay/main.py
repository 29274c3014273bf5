"""Main application entry point.

Runs the FastAPI relay (port 8000) with NiceGUI mounted for the chat interface.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_integrated() -> None:
    """Run the relay with NiceGUI mounted on the same server.

    FastAPI handles the relay routes, NiceGUI serves the UI on ``/``.
    """
    import uvicorn
    from nicegui import ui

    from ragrelay.api.app import app
    from ragrelay.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    port = int(os.getenv("PORT", "8000"))

    ui.run_with(
        app,
        title="R2R Chatbot",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "r2r-chatbot-secret"),
    )

    logger.info(f"Starting integrated server on http://localhost:{port}")
    logger.info(f"API docs available at http://localhost:{port}/docs")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the relay and NiceGUI as separate servers.

    Relay on port 8000, NiceGUI on port 8080.
    """
    import asyncio
    import subprocess

    async def run_servers() -> None:
        logger.info("Starting relay API on http://localhost:8000")
        logger.info("Starting NiceGUI on http://localhost:8080")

        api_proc = subprocess.Popen(
            [
                sys.executable,
                "-m",
                "uvicorn",
                "ragrelay.api.app:app",
                "--host",
                os.getenv("HOST", "0.0.0.0"),
                "--port",
                "8000",
            ]
        )

        nicegui_proc = subprocess.Popen(
            [sys.executable, "-c", "from ragrelay.ui.chat_page import main; main()"]
        )

        try:
            while True:
                await asyncio.sleep(1)
                if api_proc.poll() is not None or nicegui_proc.poll() is not None:
                    break
        except KeyboardInterrupt:
            logger.info("Shutting down servers...")
        finally:
            api_proc.terminate()
            nicegui_proc.terminate()
            api_proc.wait()
            nicegui_proc.wait()

    asyncio.run(run_servers())


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run the relay and NiceGUI on different ports.
    Default is integrated mode (both on port 8000).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting R2R chatbot in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
