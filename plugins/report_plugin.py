"""Research Insight Report built from the session history."""

from typing import Any

import streamlit as st

from core.gemini_service import AnalysisError, GeminiService
from core.models import AnalysisResult, AnalysisType, new_result
from core.parsing import clean_text
from src.ui_components import report_markdown, show_error

from .base_plugin import AnalysisPlugin, PluginContext

REPORT_SECTIONS = [
    ("introduction", "Introduction"),
    ("methodInputs", "Method & Inputs"),
    ("keyInsights", "Key Insights"),
    ("suggestedVariations", "Suggested Variations"),
    ("limitations", "Limitations"),
    ("domainSummary", "Domain Summary"),
]


class ReportPlugin(AnalysisPlugin):
    """Summarises every analysis in the session, grouped by domain."""

    analysis_type = AnalysisType.REPORT

    def __init__(self) -> None:
        super().__init__(
            name="Research Report",
            description="Generate a Research Insight Report from this session's analyses.",
            icon="📊",
        )

    def is_available(self, history: list[AnalysisResult]) -> bool:
        return any(item.type is not AnalysisType.REPORT for item in history)

    def run(self, service: GeminiService, **inputs: Any) -> AnalysisResult:
        history = [item for item in inputs["history"] if item.type is not AnalysisType.REPORT]
        data = service.generate_research_report(history)
        return new_result(self.analysis_type, "Research Insight Report", data)

    def render_ui(self, ctx: PluginContext) -> None:
        data_key, error_key = self.state_key("data"), self.state_key("error")
        if not self.is_available(ctx.history):
            st.info("Run at least one image, text or comparison analysis to build a report.")
            return

        st.caption(f"{len(ctx.history)} analyses in this session.")
        if st.button("📝 Generate Report", type="primary"):
            st.session_state[error_key] = None
            st.session_state[data_key] = None
            try:
                with st.spinner("Compiling the report..."):
                    result = self.run(ctx.get_service(), history=ctx.history)
            except AnalysisError as exc:
                st.session_state[error_key] = str(exc) or "Report generation failed."
            else:
                st.session_state[data_key] = result.data

        show_error(error_key)
        data = st.session_state.get(data_key)
        if data is not None:
            self._render_result(data)

    def _render_result(self, data: dict) -> None:
        reports = [r for r in data.get("reports") or [] if isinstance(r, dict)]
        if not reports:
            st.warning("The model returned an empty report. Try again.")
            return

        tabs = st.tabs([clean_text(r.get("domainName")) or f"Domain {i + 1}" for i, r in enumerate(reports)])
        for tab, report in zip(tabs, reports):
            with tab:
                st.markdown(f"### {clean_text(report.get('title'))}")
                for field, heading in REPORT_SECTIONS:
                    body = clean_text(report.get(field))
                    if body:
                        st.markdown(f"**{heading}**")
                        st.write(body)

        notice = clean_text(data.get("globalSafetyNotice"))
        if notice:
            st.warning(notice)

        st.download_button(
            "Download Markdown",
            data=report_markdown(data),
            file_name="novasynth_report.md",
            mime="text/markdown",
            key=self.state_key("download"),
        )
