"""Base interface for the analysis modes shown in the app."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from core.config import AppConfig
from core.gemini_service import GeminiService
from core.models import AnalysisResult, AnalysisType
from src.theme_config import ThemeConfig


@dataclass
class PluginContext:
    """Everything a mode needs from the app shell."""

    config: AppConfig
    theme: ThemeConfig
    history: list[AnalysisResult]
    get_service: Callable[[], GeminiService]
    on_complete: Callable[[AnalysisResult], None]


class AnalysisPlugin(ABC):
    """Abstract base class for all analysis modes."""

    analysis_type: AnalysisType

    def __init__(self, name: str, description: str, icon: str = "") -> None:
        """Initialize the plugin.

        Args:
            name: Label shown in the navigation
            description: One-line summary shown under the page title
            icon: Emoji prefix for the navigation label
        """
        self.name = name
        self.description = description
        self.icon = icon

    @property
    def label(self) -> str:
        return f"{self.icon} {self.name}".strip()

    @property
    def state_prefix(self) -> str:
        return self.analysis_type.value.lower()

    def state_key(self, suffix: str) -> str:
        return f"{self.state_prefix}_{suffix}"

    @abstractmethod
    def render_ui(self, ctx: PluginContext) -> None:
        """Render the mode's input form and its latest result.

        Args:
            ctx: Shared app context
        """

    @abstractmethod
    def run(self, service: GeminiService, **inputs: Any) -> AnalysisResult:
        """Call the model for this mode and wrap the response.

        Args:
            service: Gemini service used for the request
            **inputs: Mode-specific user inputs

        Returns:
            The analysis record to append to the session history
        """

    def is_available(self, history: list[AnalysisResult]) -> bool:
        """Check whether the mode can run with the current session history.

        Args:
            history: Session history, newest first

        Returns:
            True if the mode can run, False otherwise
        """
        return True


class PluginManager:
    """Keeps the registered analysis modes in navigation order."""

    def __init__(self) -> None:
        self.plugins: dict[str, AnalysisPlugin] = {}

    def register_plugin(self, plugin: AnalysisPlugin) -> None:
        """Register a new plugin.

        Args:
            plugin: Plugin instance to register
        """
        self.plugins[plugin.name] = plugin

    def by_type(self, analysis_type: AnalysisType) -> AnalysisPlugin | None:
        for plugin in self.plugins.values():
            if plugin.analysis_type is analysis_type:
                return plugin
        return None

    def labels(self) -> list[str]:
        return [plugin.label for plugin in self.plugins.values()]

    def from_label(self, label: str) -> AnalysisPlugin | None:
        for plugin in self.plugins.values():
            if plugin.label == label:
                return plugin
        return None
