"""Molecule identification from an uploaded image."""

from typing import Any, Optional

import streamlit as st

from core.gemini_service import AnalysisError, GeminiService, UnsupportedImageError
from core.models import AnalysisResult, AnalysisType, MoleculeStructure, new_result
from core.parsing import clean_text
from src.ui_components import (
    badge,
    bullet_list,
    show_error,
    show_properties,
    show_therapeutic_predictions,
)
from src.viewer_utils import render_molecule_viewer, show_structure_summary

from .base_plugin import AnalysisPlugin, PluginContext

UPLOAD_TYPES = ["png", "jpg", "jpeg", "webp", "heic", "heif", "avif", "bmp", "gif", "tif", "tiff"]
NOT_DETECTED = {"", "not detected", "unknown molecule", "n/a"}


def lookup_name(name: Optional[str]) -> str:
    """Name worth sending to PubChem, or an empty string."""
    cleaned = (name or "").strip()
    return "" if cleaned.lower() in NOT_DETECTED else cleaned


class ImageAnalysisPlugin(AnalysisPlugin):
    """Identifies a molecule in a diagram and predicts its properties."""

    analysis_type = AnalysisType.IMAGE

    def __init__(self) -> None:
        super().__init__(
            name="Image Analysis",
            description="Upload a molecular diagram, formula or lab note to decode its structure.",
            icon="🧪",
        )

    def run(self, service: GeminiService, **inputs: Any) -> AnalysisResult:
        data = service.analyze_molecule_image(inputs["data"], inputs.get("mime_type"))
        return new_result(self.analysis_type, data.get("chemicalName") or "Unknown Molecule", data)

    def render_ui(self, ctx: PluginContext) -> None:
        data_key, error_key = self.state_key("data"), self.state_key("error")
        uploaded = st.file_uploader(
            "Molecular image",
            type=UPLOAD_TYPES,
            key=self.state_key("upload"),
            help="PNG, JPG and WEBP are sent as-is; other formats are converted to JPEG first.",
        )
        if uploaded is not None:
            st.image(uploaded, width=320)

        if st.button("🔬 Analyze Structure", disabled=uploaded is None, type="primary"):
            st.session_state[error_key] = None
            st.session_state[data_key] = None
            try:
                with st.spinner("Identifying structure and generating geometry..."):
                    result = self.run(ctx.get_service(), data=uploaded.getvalue(), mime_type=uploaded.type)
            except (AnalysisError, UnsupportedImageError) as exc:
                st.session_state[error_key] = (
                    str(exc) or "Analysis failed. Please try a clearer image or check your API configuration."
                )
            else:
                st.session_state[data_key] = result.data
                ctx.on_complete(result)

        show_error(error_key)
        data = st.session_state.get(data_key)
        if data is not None:
            self._render_result(data, ctx)

    def _render_result(self, data: dict, ctx: PluginContext) -> None:
        if not data:
            st.warning("The model returned no readable analysis. Try again or use a clearer image.")
            return

        name = clean_text(data.get("chemicalName")) or "Unknown Molecule"
        if not lookup_name(name):
            st.warning(clean_text(data.get("rawAnalysis")) or "No chemical structure identified in image.")
            return

        st.markdown(f"### {name}")
        st.markdown(
            badge(data.get("domain"), accent=True, fallback="General Science")
            + badge(data.get("formula"), fallback="N/A"),
            unsafe_allow_html=True,
        )

        structure = MoleculeStructure.from_dict(data.get("structure"))
        viewer_col, info_col = st.columns([3, 2])
        with viewer_col:
            render_molecule_viewer(lookup_name(name), structure, theme=ctx.theme, config=ctx.config, key="image_viewer")
        with info_col:
            show_structure_summary(structure, label=name, key="image_summary")
            bullet_list("Key Features", (clean_text(f) for f in data.get("features") or []))
            bullet_list("Similar Families", (clean_text(f) for f in data.get("similarFamilies") or []))

        show_properties(data.get("properties"))

        variations = [v for v in data.get("hypotheticalVariations") or [] if isinstance(v, dict)]
        if variations:
            st.markdown("#### 🧬 Hypothetical Variations")
            for variation in variations:
                st.markdown(f"- **{clean_text(variation.get('structure'))}**: {clean_text(variation.get('purpose'))}")

        show_therapeutic_predictions(data.get("therapeuticPredictions"), name)

        with st.expander("Raw analysis"):
            st.write(clean_text(data.get("rawAnalysis")) or "—")
