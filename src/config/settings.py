"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use MDXFORMER_ prefix (e.g., MDXFORMER_DEBOUNCE_MS=250).

Settings can also be loaded from a .env file in the project root.
"""

import re
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use MDXFORMER_ prefix.

    Examples:
        MDXFORMER_TEMPLATE_DIR=.mdxformer/templates
        MDXFORMER_DEBOUNCE_MS=250
        MDXFORMER_PYGMENTS_STYLE=monokai
    """

    model_config = SettingsConfigDict(
        env_prefix="MDXFORMER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Discovery configuration
    content_suffix: str = Field(
        default=".md",
        description="Suffix of input documents (matched case-insensitively)",
    )

    ignored_dirs: List[str] = Field(
        default_factory=lambda: ["node_modules", ".git", "dist"],
        description="Directory names skipped during discovery and watching",
    )

    # Template configuration
    template_dir: str = Field(
        default="template",
        description="Default template directory (relative to the input directory)",
    )

    template_ext: str = Field(
        default="html",
        description="Extension of template files: <key>.template.<ext>",
    )

    # Output configuration
    output_ext: str = Field(
        default="html",
        description="Extension of rendered output files",
    )

    # Highlighting configuration
    default_language: str = Field(
        default="text",
        description="Language reported for fences without an info string",
    )

    pygments_style: str = Field(
        default="default",
        description="Pygments style used when highlighting with inline styles",
    )

    highlight_noclasses: bool = Field(
        default=False,
        description="Emit inline styles instead of CSS classes in highlighted code",
    )

    # Watch configuration
    debounce_ms: int = Field(
        default=100,
        ge=0,
        description="Quiet period after the last change before a rebuild starts",
    )

    stability_ms: int = Field(
        default=50,
        ge=0,
        description="Grace period for a file write to settle before it is reported",
    )

    poll_interval_ms: int = Field(
        default=10,
        ge=1,
        description="How often the watcher checks for settled writes",
    )

    def templateFilename_pattern(self) -> "re.Pattern[str]":
        """
        Compile the pattern matching template filenames.

        Group 1 of a match is the template key.

        Example:
            >>> settings = AppSettings()
            >>> settings.templateFilename_pattern().match('H2.template.html').group(1)
            'H2'
        """
        ext = re.escape(self.template_ext)
        return re.compile(rf"^([a-z0-9]+)\.template\.{ext}$", re.IGNORECASE)

    def contentSuffix_matches(self, name: str) -> bool:
        """Check whether a filename carries the content suffix"""
        return name.lower().endswith(self.content_suffix.lower())


# Singleton instance - import this in your code
appsettings = AppSettings()
