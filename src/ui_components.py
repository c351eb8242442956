from datetime import datetime
from html import escape
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import streamlit as st

from core.models import AnalysisResult
from core.parsing import clean_text

TREND_ICONS = {
    "Positive": "📈",
    "Negative": "📉",
    "Neutral": "➖",
    "Uncertain": "❔",
}

CONFIDENCE_COLORS = {
    "High": "#34D399",
    "Medium": "#FACC15",
    "Low": "#F87171",
}


def _as_records(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [clean_text(str(item)) for item in value if item]


def show_error(state_key: str) -> None:
    """Inline, dismissible error banner for the message stored under ``state_key``."""
    message = st.session_state.get(state_key)
    if not message:
        return
    col_msg, col_btn = st.columns([6, 1])
    col_msg.error(message)
    if col_btn.button("Dismiss", key=f"{state_key}_dismiss"):
        st.session_state[state_key] = None
        st.rerun()


def badge(text: Any, *, accent: bool = False, fallback: str = "") -> str:
    """Badge span around model text, escaped for `unsafe_allow_html` markdown."""
    label = escape(clean_text(text) or fallback)
    return f"<span class='novasynth-badge{' accent' if accent else ''}'>{label}</span>"


def confidence_badge(level: Optional[str]) -> str:
    level = level if level in CONFIDENCE_COLORS else "Medium"
    color = CONFIDENCE_COLORS[level]
    return (
        f"<span class='novasynth-badge' style='border-color:{color};color:{color}'>"
        f"{level} Confidence</span>"
    )


def bullet_list(title: str, items: Iterable[str]) -> None:
    items = list(items)
    if not items:
        return
    st.markdown(f"**{title}**")
    st.markdown("\n".join(f"- {item}" for item in items))


def show_therapeutic_predictions(predictions: Any, molecule_name: Optional[str] = None) -> None:
    records = _as_records(predictions)
    if not records:
        return
    st.markdown("#### 🩺 Therapeutic Potential")
    if molecule_name:
        st.markdown(f"<div class='novasynth-mono'>{escape(molecule_name)}</div>", unsafe_allow_html=True)
    for pred in records:
        st.markdown(
            f"<div class='novasynth-card'><strong>{escape(clean_text(pred.get('class')))}</strong> "
            f"{confidence_badge(pred.get('confidence'))}<br/>{escape(clean_text(pred.get('explanation')))}</div>",
            unsafe_allow_html=True,
        )
    st.caption("⚠️ Hypothesis only. Not validated for clinical use.")


def show_properties(properties: Any) -> None:
    if not isinstance(properties, dict) or not properties:
        return
    labels = {"solubility": "Solubility", "stability": "Stability", "toxicity_risk": "Toxicity Risk"}
    cols = st.columns(len(labels))
    for col, (field, label) in zip(cols, labels.items()):
        col.markdown(
            f"<div class='novasynth-card'><div class='novasynth-mono'>{label}</div>"
            f"{escape(clean_text(properties.get(field))) or '—'}</div>",
            unsafe_allow_html=True,
        )


def comparison_frame(rows: Any, molecule1: str, molecule2: str) -> pd.DataFrame:
    records = _as_records(rows)
    frame = pd.DataFrame(
        [
            {
                "Feature": clean_text(row.get("feature")),
                molecule1 or "Molecule A": clean_text(row.get("val1")),
                molecule2 or "Molecule B": clean_text(row.get("val2")),
                "Trend": f"{TREND_ICONS.get(row.get('trend'), '➖')} {row.get('trend') or ''}".strip(),
            }
            for row in records
        ]
    )
    return frame


def show_key_properties(items: Any) -> None:
    records = _as_records(items)
    if not records:
        return
    cols = st.columns(min(len(records), 4))
    for idx, item in enumerate(records):
        cols[idx % len(cols)].metric(
            clean_text(item.get("label")) or "—",
            clean_text(item.get("value")) or "—",
            help=f"Trend: {item.get('trend') or 'Neutral'}",
        )


def report_markdown(report: Dict[str, Any]) -> str:
    sections = ["# NovaSynth Research Insight Report", ""]
    for entry in _as_records(report.get("reports")):
        sections.append(f"## {clean_text(entry.get('domainName'))}: {clean_text(entry.get('title'))}")
        for field, heading in (
            ("introduction", "Introduction"),
            ("methodInputs", "Method & Inputs"),
            ("keyInsights", "Key Insights"),
            ("suggestedVariations", "Suggested Variations"),
            ("limitations", "Limitations"),
            ("domainSummary", "Domain Summary"),
        ):
            body = clean_text(entry.get(field))
            if body:
                sections.extend([f"### {heading}", body, ""])
    notice = clean_text(report.get("globalSafetyNotice"))
    if notice:
        sections.extend(["---", f"**Safety notice:** {notice}"])
    return "\n".join(sections).strip() + "\n"


def show_history(history: List[AnalysisResult]) -> None:
    st.sidebar.subheader("🕘 Session History")
    if not history:
        st.sidebar.caption("No analyses yet.")
        return
    for item in history:
        stamp = datetime.fromtimestamp(item.timestamp).strftime("%H:%M:%S")
        tag = f" · {escape(item.domain_tag)}" if item.domain_tag else ""
        st.sidebar.markdown(
            f"- **{escape(item.title)}**  \n  <small>{item.type.value.title()}{tag} · {stamp}</small>",
            unsafe_allow_html=True,
        )
