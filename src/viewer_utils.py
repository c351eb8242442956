from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from functools import partial
import json
from html import escape
from typing import Optional

import streamlit as st
import streamlit.components.v1 as components

from core.bonds import drawing_to_svg, render_layout
from core.config import AppConfig
from core.layout import LayoutSource, ResolvedLayout, resolve_layout
from core.models import MoleculeStructure
from core.molecule_viz import atoms_to_xyz, structure_to_atoms, summarize_structure
from core.pubchem import StructureFetcher, fetch_pubchem_2d
from core.scene import Scene, build_scene, scene_payload
from core.viewport import ViewportController
from src.theme_config import ThemeConfig

PAN_STEP = 24.0
POLL_SECONDS = 1.0

SOURCE_BADGES = {
    LayoutSource.PUBCHEM: ("PubChem Source", True),
    LayoutSource.MODEL: ("AI Generated", False),
    LayoutSource.PROJECTION: ("Projected from 3D", False),
}


@st.cache_resource(show_spinner=False)
def get_fetch_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=4, thread_name_prefix="pubchem")


def _safe_key(value: Optional[str], *, default: str = "viewer") -> str:
    if not value:
        return default
    cleaned = "".join(ch if ch.isalnum() or ch in ("-", "_") else "-" for ch in value)
    return cleaned.strip("-") or default


def get_fetcher(key: str, config: AppConfig) -> StructureFetcher:
    state_key = f"{key}__fetcher"
    if state_key not in st.session_state:
        fetch = partial(fetch_pubchem_2d, base_url=config.pubchem_url, timeout=config.pubchem_timeout)
        st.session_state[state_key] = StructureFetcher(get_fetch_executor(), fetch=fetch)
    return st.session_state[state_key]


def get_controller(key: str) -> ViewportController:
    state_key = f"{key}__viewport"
    if state_key not in st.session_state:
        st.session_state[state_key] = ViewportController()
    return st.session_state[state_key]


def render_scene_view(scene: Scene, *, theme: ThemeConfig, height: int, container_id: Optional[str] = None) -> str:
    """3Dmol.js markup drawing the scene's spheres and cylinders."""
    payload = {"background": theme.background, **scene_payload(scene)}

    js = """
    function initScene() {
        var cfg = __PAYLOAD__;
        let viewer = $3Dmol.createViewer('scene-viewer', { backgroundColor: cfg.background });
        cfg.cylinders.forEach(function(spec) { viewer.addCylinder(spec); });
        cfg.spheres.forEach(function(spec) {
            viewer.addSphere({center: spec.center, radius: spec.radius, color: spec.color});
        });
        viewer.zoomTo();
        viewer.render();
    }

    function load3Dmol() {
        if (typeof $3Dmol !== 'undefined') {
            initScene();
            return;
        }
        var script = document.createElement('script');
        script.src = "https://cdnjs.cloudflare.com/ajax/libs/3Dmol/1.4.0/3Dmol-min.js";
        script.onload = initScene;
        document.head.appendChild(script);
    }

    load3Dmol();
    """
    dom_id = _safe_key(container_id, default="scene-viewer")
    js = js.replace("scene-viewer", dom_id).replace("__PAYLOAD__", json.dumps(payload))

    return (
        f'<div id="{dom_id}" style="width: 100%; height: {height}px; position: relative;"></div>'
        f"<script>{js}</script>"
    )


def _badges_html(structure: Optional[MoleculeStructure], layout: ResolvedLayout) -> str:
    parts = []
    if structure is not None and structure.smiles:
        parts.append(f"<span class='novasynth-badge'>SMILES: {escape(structure.smiles[:60])}</span>")
    if layout.source in SOURCE_BADGES:
        label, accent = SOURCE_BADGES[layout.source]
        parts.append(f"<span class='novasynth-badge{' accent' if accent else ''}'>{label}</span>")
    return "".join(parts)


def _zoom_controls(controller: ViewportController, key: str) -> None:
    cols = st.columns(7)
    if cols[0].button("＋", key=f"{key}_zoom_in", help="Zoom in"):
        controller.zoom_in()
    if cols[1].button("－", key=f"{key}_zoom_out", help="Zoom out"):
        controller.zoom_out()
    if cols[2].button("↻", key=f"{key}_reset", help="Reset view"):
        controller.reset()
    if cols[3].button("←", key=f"{key}_pan_left"):
        controller.pan_by(-PAN_STEP, 0.0)
    if cols[4].button("→", key=f"{key}_pan_right"):
        controller.pan_by(PAN_STEP, 0.0)
    if cols[5].button("↑", key=f"{key}_pan_up"):
        controller.pan_by(0.0, -PAN_STEP)
    if cols[6].button("↓", key=f"{key}_pan_down"):
        controller.pan_by(0.0, PAN_STEP)


def _structure_2d_panel(
    molecule_name: str,
    structure: Optional[MoleculeStructure],
    *,
    key: str,
    theme: ThemeConfig,
    config: AppConfig,
    height: int,
    polling: bool = False,
) -> None:
    fetcher = get_fetcher(key, config)
    fetcher.request(molecule_name)
    state = fetcher.snapshot()
    if polling and not state.loading:
        # fetch settled; a full rerun drops the fragment and its timer
        st.rerun(scope="app")
    fetched = state.structure if state.name == molecule_name else None
    layout = resolve_layout(structure, fetched)

    if layout.is_empty:
        message = "Fetching structure..." if state.loading else "Structure unavailable"
        st.markdown(f"<div class='novasynth-mono'>{message}</div>", unsafe_allow_html=True)
        return

    controller = get_controller(key)
    _zoom_controls(controller, key)
    drawing = render_layout(layout, controller.transform.k, background=theme.background)
    svg = drawing_to_svg(
        drawing, layout.view_box, controller.transform, dragging=controller.dragging, background=theme.background
    )
    components.html(
        f"<div style='background:{theme.background};width:100%;height:{height - 10}px;overflow:hidden;"
        f"border-radius:12px'>{svg}</div>",
        height=height,
    )
    st.markdown(_badges_html(structure, layout), unsafe_allow_html=True)
    if state.loading:
        st.caption("Fetching PubChem layout...")


def render_molecule_viewer(
    molecule_name: str,
    structure: Optional[MoleculeStructure],
    *,
    theme: ThemeConfig,
    config: AppConfig,
    key: Optional[str] = None,
    height: int = 380,
) -> None:
    """3D/2D viewer for one analysed molecule.

    The 2D tab asks PubChem for the canonical layout of ``molecule_name`` in
    the background and falls back to the model's own layout (or a projection
    of the 3D atoms) until, or unless, that lookup succeeds.
    """
    key = _safe_key(key or molecule_name)
    header, toggle = st.columns([3, 2])
    header.markdown(f"**{molecule_name or 'Structure'}**")
    view_mode = toggle.radio(
        "View", ["3D", "2D"], horizontal=True, key=f"{key}_mode", label_visibility="collapsed"
    )

    if view_mode == "3D":
        scene = build_scene(structure)
        if scene.is_empty:
            st.info("Structure unavailable")
        else:
            components.html(
                render_scene_view(scene, theme=theme, height=height - 20, container_id=f"{key}-scene"),
                height=height,
            )
        st.caption("MMFF94 FORCE-FIELD GEOMETRY")
    else:
        fetcher = get_fetcher(key, config)
        fetcher.request(molecule_name)
        if fetcher.snapshot().loading:
            poll = st.fragment(_structure_2d_panel, run_every=POLL_SECONDS)
            poll(molecule_name, structure, key=key, theme=theme, config=config, height=height, polling=True)
        else:
            _structure_2d_panel(molecule_name, structure, key=key, theme=theme, config=config, height=height)
        st.caption("STANDARD EXPLICIT STRUCTURE")

    if structure is not None and structure.verification_note:
        st.caption(f"✅ {structure.verification_note}")


def show_structure_summary(structure: Optional[MoleculeStructure], *, label: str, key: str) -> None:
    summary = summarize_structure(structure)
    cols = st.columns(3)
    cols[0].metric("Formula", summary["formula"])
    cols[1].metric("Atoms", summary["num_atoms"])
    cols[2].metric("Mass (amu)", summary["mass_amu"] if summary["mass_amu"] is not None else "—")
    if structure is not None and summary["num_atoms"]:
        xyz = atoms_to_xyz(structure_to_atoms(structure), comment=label)
        st.download_button(
            "Download XYZ",
            data=xyz,
            file_name=f"{_safe_key(label, default='structure')}.xyz",
            mime="chemical/x-xyz",
            key=f"{_safe_key(key)}_xyz",
        )
