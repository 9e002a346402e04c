"""Pydantic schemas for tool input validation."""

from pydantic import BaseModel, Field
from typing import Optional


# Browser tool schemas
class BrowserLaunchInput(BaseModel):
    headless: bool = Field(default=False, description="Launch browser in headless mode")
    viewport_width: int = Field(default=1280, description="Browser viewport width")
    viewport_height: int = Field(default=900, description="Browser viewport height")
    mobile_user_agent: bool = Field(default=False, description="Present a mobile Safari user agent")


class OpenFrontPageInput(BaseModel):
    url: str = Field(default="https://www.nytimes.com", description="Page to open in the main browser tab")


class PendingArticleLinksInput(BaseModel):
    clear: bool = Field(default=True, description="Forget the links once returned")


# Resolver tool schemas
class ClassifyUrlInput(BaseModel):
    url: str = Field(description="URL to classify")


class ResolveArticleInput(BaseModel):
    url: str = Field(description="Article URL to resolve")
    prefer_reader_mode: Optional[bool] = Field(
        default=None,
        description="Start via the reader proxy instead of the paywall aggregator. "
        "If not provided, uses the server configuration."
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Deadline for the whole resolution before falling back"
    )
    open_in_browser: bool = Field(
        default=False,
        description="Load the resolved URL in the main browser tab afterwards"
    )
