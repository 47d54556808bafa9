"""Formatting strategies for the file contents report (tagged / Markdown). All comments in English."""

from __future__ import annotations
from abc import ABC, abstractmethod


class FormatterStrategy(ABC):
    """Abstract base class for different formatting strategies."""

    @abstractmethod
    def format_text_file(self, path: str, content: str) -> str:
        """
        Format text file content.

        :param path: Path of the file, relative to the project root.
        :param content: The text content of the file.
        :return: A formatted string representing the file content.
        """
        raise NotImplementedError()

    def format_report(self, blocks: list[str]) -> str:
        """
        Join formatted file blocks into the final report.

        :param blocks: Outputs of format_text_file, in walk order.
        :return: The complete report.
        """
        return "\n".join(blocks)


class TaggedFormatter(FormatterStrategy):
    """Tag-delimited formatting, one <path>...</path> block per file."""

    def format_text_file(self, path: str, content: str) -> str:
        return f"<{path}>\n{content}\n</{path}>\n"

    def format_report(self, blocks: list[str]) -> str:
        return "<File_Contents>\n" + "".join(blocks) + "</File_Contents>"


class MarkdownFormatter(FormatterStrategy):
    """Markdown formatting strategy."""

    def format_text_file(self, path: str, content: str) -> str:
        """
        Format text file in Markdown style.

        :param path: File path.
        :param content: The text content of the file.
        :return: Markdown formatted string.
        """
        return f"## {path}\n```\n{content}\n```\n"


FORMATTERS: dict[str, type[FormatterStrategy]] = {
    "tagged": TaggedFormatter,
    "markdown": MarkdownFormatter,
}
