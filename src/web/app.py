"""FastAPI application serving the Quiet HN front page."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError

from src.agent.workflow import StorySource, load_front_page
from src.config.settings import Settings
from src.connectors.hacker_news import FeedFetchError, HackerNewsClient


logger = logging.getLogger(__name__)


TEMPLATES_DIR = Path(__file__).parent / "templates"


def create_app(settings: Settings, source: StorySource | None = None) -> FastAPI:
    """Build the web application.

    Args:
        settings: Configuration settings
        source: Ranked feed and item lookup; defaults to a HackerNewsClient
                built from settings

    Returns:
        Configured FastAPI application
    """
    if source is None:
        source = HackerNewsClient(
            settings.api_base,
            timeout=settings.request_timeout_seconds,
        )

    app = FastAPI(title="Quiet HN")
    app.state.settings = settings
    app.state.source = source
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        state = request.app.state
        try:
            page = load_front_page(state.source, state.settings)
        except FeedFetchError as e:
            logger.error(f"Failed to load top stories: {e}")
            return PlainTextResponse("Failed to load top stories", status_code=500)

        try:
            return state.templates.TemplateResponse(
                request,
                "index.html",
                {
                    "stories": page.stories,
                    "complete": page.complete,
                    "requested": page.requested,
                    "elapsed": f"{page.elapsed_seconds:.3f}s",
                },
            )
        except TemplateError as e:
            logger.error(f"Failed to process the template: {e}")
            return PlainTextResponse(
                "Failed to process the template", status_code=500
            )

    return app
