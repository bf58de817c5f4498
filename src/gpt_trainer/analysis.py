"""Content analysis runner.

Picks the prompt configured for a content type and submits the content to
the API. Failures are logged and reported to hooks, never raised, so a
caller saving content is not interrupted by the analysis step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from gpt_trainer.errors import GptTrainerError
from gpt_trainer.hooks import ANALYSIS_COMPLETE, ANALYSIS_FAILED, EventHooks
from gpt_trainer.logger.event_log import ErrorSink, NullLog
from gpt_trainer.models import AnalysisContent, AnalysisResult

if TYPE_CHECKING:
    from gpt_trainer.api.client import GptTrainerClient

DEFAULT_CONTENT_PROMPTS: dict[str, str] = {
    "document": "Analyze this document: {content}",
    "video": "Describe this video content: {content}",
    "presentation": "Summarize this presentation: {content}",
    "audio": "Transcribe and analyze this audio: {content}",
}


class ContentAnalyzer:
    """Runs prompt-driven analysis for typed content.

    Args:
        client: API client used to submit the analysis.
        prompts: Content type -> prompt template. Defaults to DEFAULT_CONTENT_PROMPTS.
        sink: Event sink for failures. Defaults to the client's sink.
        hooks: Hooks notified of results. Defaults to the client's hooks.
    """

    def __init__(
        self,
        client: "GptTrainerClient",
        prompts: Optional[Mapping[str, str]] = None,
        sink: Optional[ErrorSink] = None,
        hooks: Optional[EventHooks] = None,
    ):
        self.client = client
        self.prompts = dict(DEFAULT_CONTENT_PROMPTS if prompts is None else prompts)
        self.sink = sink or getattr(client, "sink", None) or NullLog()
        self.hooks = hooks or getattr(client, "hooks", None) or EventHooks()

    def prompt_for(self, content_type: str) -> Optional[str]:
        return self.prompts.get(content_type) or None

    def analyze(
        self, content_type: str, content: AnalysisContent | Mapping[str, Any]
    ) -> Optional[AnalysisResult]:
        """Analyze content with the prompt for its type.

        Args:
            content_type: Key into the prompt table, e.g. "document".
            content: Content to analyze.

        Returns:
            Analysis result, or None if no prompt is configured or the call failed.
        """
        prompt = self.prompt_for(content_type)
        if prompt is None:
            return None

        try:
            result = self.client.analyze_content(prompt, content)
        except GptTrainerError as e:
            self.sink.log(
                "ERROR",
                f"Content analysis failed for {content_type}",
                {"content_type": content_type, "exception": type(e).__name__, "message": e.message},
            )
            self.hooks.emit(ANALYSIS_FAILED, content_type, e.message)
            return None

        self.hooks.emit(ANALYSIS_COMPLETE, content_type, result)
        return result


__all__ = ["DEFAULT_CONTENT_PROMPTS", "ContentAnalyzer"]
