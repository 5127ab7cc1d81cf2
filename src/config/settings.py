"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use NBDECK_ prefix (e.g., NBDECK_COMMAND_START="<!--@").

Settings can also be loaded from a .env file in the project root.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use NBDECK_ prefix.

    Examples:
        NBDECK_COMMAND_START=<!--@
        NBDECK_COMMAND_END=@-->
        NBDECK_OUTPUT_FILE=slides.md
    """

    model_config = SettingsConfigDict(
        env_prefix="NBDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Command comment configuration
    command_start: str = Field(
        default="<!--!",
        description="Marker opening a command region (matched against the trimmed line start)",
    )

    command_end: str = Field(
        default="-->",
        description="Marker closing a command region (matched against the trimmed line end)",
    )

    code_comment_prefix: str = Field(
        default="#",
        description="Line comment prefix removed from code cell lines before marker detection",
    )

    # Presentation layout
    page_separator: str = Field(
        default="\n\n---\n",
        description="Separator placed between the pages of one notebook",
    )

    document_separator: str = Field(
        default="\n\n---\n\n",
        description="Separator written before every non-empty document of the presentation",
    )

    class_template: str = Field(
        default="class: {}\n\n",
        description="Template prefixed onto a page when a class is set for it",
    )

    fence_language: str = Field(
        default="",
        description="Language tag of the fenced blocks used for stream and error outputs",
    )

    code_language: str = Field(
        default="python",
        description="Language tag of the fenced blocks holding code cell source lines",
    )

    # Input / output configuration
    notebook_extension: str = Field(
        default=".ipynb",
        description="Extension of the files that are converted as notebooks",
    )

    output_file: str = Field(
        default="presentation.rmd",
        description="Default presentation file name (relative to the output directory)",
    )

    def pageClass_make(self, value: str) -> str:
        """
        Generate the class prefix of a page.

        Example:
            >>> AppSettings().pageClass_make('center, middle')
            'class: center, middle\\n\\n'
        """
        return self.class_template.format(value)

    def fence_make(self, text: str, language: Optional[str] = None) -> str:
        """
        Wrap text in a fenced code block terminated by a line break.

        The language tag defaults to fence_language.

        Example:
            >>> AppSettings().fence_make('hello\\n')
            '```\\nhello\\n```\\n'
            >>> AppSettings().fence_make('x = 1\\n', 'python')
            '```python\\nx = 1\\n```\\n'
        """
        tag = self.fence_language if language is None else language
        return f"```{tag}\n{text.rstrip()}\n```\n"


# Singleton instance - import this in your code
appsettings = AppSettings()
