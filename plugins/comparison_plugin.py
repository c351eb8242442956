"""Side-by-side molecule comparison."""

from typing import Any, Optional

import plotly.graph_objects as go
import streamlit as st

from core.comparison import InvalidComparisonInput, run_comparison
from core.gemini_service import AnalysisError, GeminiService
from core.models import AnalysisResult, AnalysisType, MoleculeStructure
from core.parsing import clean_text
from src.theme_config import ThemeConfig
from src.ui_components import (
    badge,
    bullet_list,
    comparison_frame,
    confidence_badge,
    show_error,
    show_therapeutic_predictions,
)
from src.viewer_utils import render_molecule_viewer

from .base_plugin import AnalysisPlugin, PluginContext


def similarity_percent(score: Any) -> Optional[float]:
    """Similarity as a 0-100 percentage; scores in [0, 1] are scaled up."""
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    value = float(score) * 100 if 0 <= score <= 1 else float(score)
    return max(0.0, min(100.0, value))


def similarity_gauge(score: float, theme: ThemeConfig) -> go.Figure:
    fig = go.Figure(
        go.Indicator(
            mode="gauge+number",
            value=score,
            number={"suffix": "%"},
            gauge={"axis": {"range": [0, 100]}, "bar": {"color": theme.accent}},
            title={"text": "Structural Similarity"},
        )
    )
    fig.update_layout(template=theme.plot_template, height=220, margin=dict(l=20, r=20, t=50, b=10))
    return fig


class ComparisonPlugin(AnalysisPlugin):
    """Validates two molecule inputs and compares them."""

    analysis_type = AnalysisType.COMPARISON

    def __init__(self) -> None:
        super().__init__(
            name="Comparison Engine",
            description="Compare two molecules by name, SMILES or InChI.",
            icon="⚖️",
        )

    def run(self, service: GeminiService, **inputs: Any) -> AnalysisResult:
        _, result = run_comparison(service, inputs["mol1"], inputs["mol2"])
        return result

    def render_ui(self, ctx: PluginContext) -> None:
        data_key, error_key = self.state_key("data"), self.state_key("error")
        col1, col2 = st.columns(2)
        mol1 = col1.text_input("Molecule A", placeholder="e.g. aspirin", key=self.state_key("mol1"))
        mol2 = col2.text_input("Molecule B", placeholder="e.g. ibuprofen", key=self.state_key("mol2"))

        if st.button("⚖️ Compare", disabled=not (mol1.strip() and mol2.strip()), type="primary"):
            st.session_state[error_key] = None
            st.session_state[data_key] = None
            try:
                with st.spinner("Validating inputs and comparing..."):
                    result = self.run(ctx.get_service(), mol1=mol1, mol2=mol2)
            except InvalidComparisonInput as exc:
                st.session_state[error_key] = str(exc)
            except AnalysisError as exc:
                st.session_state[error_key] = str(exc) or "Analysis failed. Please check your connection."
            else:
                st.session_state[data_key] = result.data
                ctx.on_complete(result)

        show_error(error_key)
        data = st.session_state.get(data_key)
        if data is not None:
            self._render_result(data, ctx)

    def _render_result(self, data: dict, ctx: PluginContext) -> None:
        if not data:
            st.warning("The model returned no readable comparison. Try again.")
            return

        name1 = clean_text(data.get("molecule1")) or "Molecule A"
        name2 = clean_text(data.get("molecule2")) or "Molecule B"
        st.markdown(f"### {name1} vs {name2}")
        st.markdown(
            badge(data.get("domain"), accent=True, fallback="General Science")
            + confidence_badge(data.get("confidenceScore")),
            unsafe_allow_html=True,
        )

        view1, view2 = st.columns(2)
        with view1:
            render_molecule_viewer(
                name1, MoleculeStructure.from_dict(data.get("structure1")),
                theme=ctx.theme, config=ctx.config, key="compare_left",
            )
            st.caption(clean_text(data.get("molecule1Visual")))
        with view2:
            render_molecule_viewer(
                name2, MoleculeStructure.from_dict(data.get("structure2")),
                theme=ctx.theme, config=ctx.config, key="compare_right",
            )
            st.caption(clean_text(data.get("molecule2Visual")))

        score = similarity_percent(data.get("similarityScore"))
        gauge_col, text_col = st.columns([1, 2])
        if score is not None:
            gauge_col.plotly_chart(similarity_gauge(score, ctx.theme), use_container_width=True)
        with text_col:
            st.write(clean_text(data.get("similarityExplanation")) or "—")
            bullet_list("Reasoning Snapshot", (clean_text(r) for r in data.get("reasoningSnapshot") or []))

        frame = comparison_frame(data.get("comparisonTable"), name1, name2)
        if not frame.empty:
            st.markdown("#### Comparison Matrix")
            st.dataframe(frame, use_container_width=True, hide_index=True)

        modifications = [m for m in data.get("structuralModifications") or [] if isinstance(m, dict)]
        if modifications:
            st.markdown("#### 🧬 Structural Modifications")
            for mod in modifications:
                st.markdown(
                    f"- **{clean_text(mod.get('molecule'))}**: {clean_text(mod.get('suggestion'))}"
                    f" ({clean_text(mod.get('impact'))})"
                )

        left, right = st.columns(2)
        with left:
            show_therapeutic_predictions(data.get("molecule1TherapeuticClasses"), name1)
        with right:
            show_therapeutic_predictions(data.get("molecule2TherapeuticClasses"), name2)
