"""Scientific text analysis with an Advanced/Student reading mode."""

from typing import Any

import pandas as pd
import streamlit as st

from core.gemini_service import AnalysisError, GeminiService
from core.models import AnalysisResult, AnalysisType, new_result
from core.parsing import clean_text
from src.ui_components import badge, bullet_list, show_error, show_key_properties

from .base_plugin import AnalysisPlugin, PluginContext

MODES = ["Advanced", "Student"]

SECTIONS = [
    ("keyConcepts", "Key Concepts"),
    ("experimentGoals", "Experiment Goals"),
    ("variables", "Variables"),
    ("results", "Results"),
    ("potentialAnalogModifications", "Potential Analog Modifications"),
    ("limitationsAssumptions", "Limitations & Assumptions"),
]


def relationships_frame(visuals: Any) -> pd.DataFrame:
    rows = visuals.get("relationships") if isinstance(visuals, dict) else None
    records = [r for r in rows or [] if isinstance(r, dict)]
    return pd.DataFrame(
        [
            {
                "Source": clean_text(r.get("source")),
                "Interaction": clean_text(r.get("interaction")),
                "Target": clean_text(r.get("target")),
            }
            for r in records
        ],
        columns=["Source", "Interaction", "Target"],
    )


class TextAnalysisPlugin(AnalysisPlugin):
    """Summarises a passage of scientific text and extracts its mechanism."""

    analysis_type = AnalysisType.TEXT

    def __init__(self) -> None:
        super().__init__(
            name="Text Analysis",
            description="Paste a paper excerpt, protocol or lab note for a structured breakdown.",
            icon="📄",
        )

    def run(self, service: GeminiService, **inputs: Any) -> AnalysisResult:
        data = service.analyze_scientific_text(inputs["text"])
        return new_result(self.analysis_type, "Text Analysis Session", data)

    def render_ui(self, ctx: PluginContext) -> None:
        data_key, error_key = self.state_key("data"), self.state_key("error")
        text = st.text_area("Scientific text", height=200, key=self.state_key("input"))

        if st.button("📑 Analyze Text", disabled=not text.strip(), type="primary"):
            st.session_state[error_key] = None
            st.session_state[data_key] = None
            try:
                with st.spinner("Reading the text..."):
                    result = self.run(ctx.get_service(), text=text.strip())
            except AnalysisError as exc:
                st.session_state[error_key] = str(exc) or "Analysis failed. Please check your API configuration."
            else:
                st.session_state[data_key] = result.data
                ctx.on_complete(result)

        show_error(error_key)
        data = st.session_state.get(data_key)
        if data is not None:
            self._render_result(data)

    def _render_result(self, data: dict) -> None:
        if not data:
            st.warning("The model returned no readable analysis. Try again.")
            return

        mode = st.radio("Reading mode", MODES, horizontal=True, key=self.state_key("mode"))
        student = mode == "Student"

        st.markdown(
            badge(data.get("domain"), accent=True, fallback="General Science")
            + badge(data.get("experimentType"), fallback="Unspecified"),
            unsafe_allow_html=True,
        )
        summary = data.get("studentSummary") if student else data.get("summary")
        st.markdown(clean_text(summary) or clean_text(data.get("summary")) or "—")

        if student:
            explanation = clean_text(data.get("educationalExplanation"))
            if explanation:
                st.info(explanation)

        mechanism = data.get("simpleMechanism") if student else data.get("mechanisticInterpretation")
        with st.expander("Mechanism", expanded=True):
            st.write(clean_text(mechanism) or "—")

        for field, title in SECTIONS:
            items = [clean_text(item) for item in data.get(field) or [] if item]
            if items:
                with st.expander(title):
                    bullet_list(title, items)

        if not student:
            for field, title in (("molecularBehavior", "Molecular Behavior"), ("computationalReasoning", "Computational Reasoning")):
                body = clean_text(data.get(field))
                if body:
                    with st.expander(title):
                        st.write(body)

        visuals = data.get("visuals") if isinstance(data.get("visuals"), dict) else {}
        ascii_art = visuals.get("asciiArt")
        if ascii_art:
            st.markdown("#### Schematic")
            st.code(str(ascii_art).replace("\\n", "\n"), language=None)

        relationships = relationships_frame(visuals)
        if not relationships.empty:
            st.markdown("#### Relationships")
            st.dataframe(relationships, use_container_width=True, hide_index=True)

        groups = [g for g in visuals.get("functionalGroups") or [] if isinstance(g, dict)]
        if groups:
            st.markdown("#### Functional Groups")
            st.markdown(
                "".join(
                    badge(f"{clean_text(g.get('name'))} · {clean_text(g.get('type')) or 'Other'}")
                    for g in groups
                ),
                unsafe_allow_html=True,
            )

        show_key_properties(visuals.get("keyProperties"))
