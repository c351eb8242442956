"""NovaSynth Research Assistant - Main Application."""

import logging

import streamlit as st

from core.config import AppConfig, load_config
from core.gemini_service import GeminiService
from core.models import AnalysisResult, AnalysisType
from plugins.base_plugin import PluginContext, PluginManager
from plugins.comparison_plugin import ComparisonPlugin
from plugins.image_plugin import ImageAnalysisPlugin
from plugins.report_plugin import ReportPlugin
from plugins.text_plugin import TextAnalysisPlugin
from src.theme_config import THEMES, inject_theme_css
from src.ui_components import show_history

logger = logging.getLogger(__name__)


@st.cache_resource(show_spinner=False)
def get_service(api_key: str, model_name: str) -> GeminiService:
    """One configured service per key/model pair."""
    return GeminiService(AppConfig(api_key=api_key, model_name=model_name))


def report_hint(plugins: PluginManager, history: list[AnalysisResult]) -> str | None:
    """Sidebar note once the session holds something to report on."""
    report = plugins.by_type(AnalysisType.REPORT)
    if report is None or not report.is_available(history):
        return None
    return f"{report.icon} {len(history)} analyses ready for the {report.name}."


class NovaSynthApp:
    """Main application class for the research assistant."""

    def __init__(self) -> None:
        """Initialize the app."""
        self.config = load_config()
        logging.basicConfig(
            level=getattr(logging, self.config.log_level, logging.INFO),
            format="%(asctime)s - %(levelname)s - %(message)s",
        )

        self.plugins = PluginManager()
        for plugin in (ImageAnalysisPlugin(), TextAnalysisPlugin(), ComparisonPlugin(), ReportPlugin()):
            self.plugins.register_plugin(plugin)

        # Initialize session state
        if "history" not in st.session_state:
            st.session_state.history = []

    def run(self) -> None:
        """Run the main application."""
        st.set_page_config(
            page_title="NovaSynth",
            page_icon="🧬",
            layout="wide",
            initial_sidebar_state="expanded",
        )

        self._setup_sidebar()
        inject_theme_css(self.theme)

        plugin = self.plugins.from_label(self.mode)
        st.title(f"{plugin.icon} {plugin.name}")
        st.markdown(plugin.description)

        ctx = PluginContext(
            config=self.config,
            theme=self.theme,
            history=st.session_state.history,
            get_service=self._service,
            on_complete=self._record,
        )
        plugin.render_ui(ctx)

    def _setup_sidebar(self) -> None:
        """Set up the sidebar configuration."""
        st.sidebar.title("🧬 NovaSynth")

        self.mode = st.sidebar.radio("Mode", self.plugins.labels(), key="nav_mode")

        st.sidebar.subheader("Configuration")
        api_key = st.sidebar.text_input(
            "Gemini API key",
            type="password",
            help="Overrides GEMINI_API_KEY / API_KEY from the environment.",
        )
        self.config = self.config.with_api_key(api_key)
        if not self.config.has_api_key:
            st.sidebar.warning("No API key configured.")

        theme_name = st.sidebar.selectbox("Theme", list(THEMES), index=0)
        self.theme = THEMES[theme_name]

        show_history(st.session_state.history)
        hint = report_hint(self.plugins, st.session_state.history)
        if hint:
            st.sidebar.caption(hint)
        if st.session_state.history and st.sidebar.button("Clear History"):
            st.session_state.history = []
            st.rerun()

        with st.sidebar.expander("ℹ️ About This App"):
            st.markdown("""
            **NovaSynth Research Assistant**
            - Identify molecules from images and predict their properties.
            - Break down scientific text into mechanisms and key concepts.
            - Compare two molecules and build a session research report.

            Predictions are hypotheses, not validated results.
            """)

    def _service(self) -> GeminiService:
        return get_service(self.config.api_key or "", self.config.model_name)

    def _record(self, result: AnalysisResult) -> None:
        logger.info("Recorded %s analysis: %s", result.type.value, result.title)
        st.session_state.history.insert(0, result)


def main() -> None:
    """Main entry point."""
    app = NovaSynthApp()
    app.run()


if __name__ == "__main__":
    main()
