from dataclasses import dataclass
from typing import Dict

import streamlit as st


@dataclass
class ThemeConfig:
    background: str
    panel_bg: str
    text_color: str
    accent: str
    muted: str
    plot_template: str


THEMES: Dict[str, ThemeConfig] = {
    "Dark": ThemeConfig(
        background="#0B0F19",
        panel_bg="#111827",
        text_color="#E2E8F0",
        accent="#06B6D4",
        muted="#64748B",
        plot_template="plotly_dark",
    ),
    "Light": ThemeConfig(
        background="#FAFBFF",
        panel_bg="#F1F3F9",
        text_color="#0F172A",
        accent="#2E86DE",
        muted="#475569",
        plot_template="plotly_white",
    ),
}


def inject_theme_css(theme: ThemeConfig) -> None:
    st.markdown(
        f"""
        <style>
            .stApp {{
                background-color: {theme.background};
                color: {theme.text_color};
            }}
            [data-testid="stSidebar"] {{
                background-color: {theme.panel_bg};
            }}
            .novasynth-badge {{
                display: inline-block;
                font-size: 10px;
                font-weight: 700;
                letter-spacing: 0.08em;
                text-transform: uppercase;
                padding: 2px 8px;
                margin-right: 6px;
                border-radius: 6px;
                border: 1px solid {theme.muted};
                color: {theme.muted};
            }}
            .novasynth-badge.accent {{
                border-color: {theme.accent};
                color: {theme.accent};
            }}
            .novasynth-card {{
                background: {theme.panel_bg};
                border: 1px solid rgba(100, 116, 139, 0.25);
                border-radius: 12px;
                padding: 12px 16px;
                margin-bottom: 10px;
            }}
            .novasynth-mono {{
                font-family: monospace;
                font-size: 11px;
                color: {theme.muted};
            }}
        </style>
        """,
        unsafe_allow_html=True,
    )
