"""ThatNightMoon — Streamlit app for the Moon's phase at a given place and time."""

import datetime
import html
import math

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import get_geolocation, streamlit_js_eval

load_dotenv()

from thatnightmoon.geocode import coordinate_label, location_name  # noqa: E402
from thatnightmoon.i18n import t  # noqa: E402
from thatnightmoon.renderers.plotly_3d import (  # noqa: E402
    render_moon_animation,
    render_moon_figure,
)
from thatnightmoon.solver import synodic_age_days  # noqa: E402
from thatnightmoon.state import (  # noqa: E402
    SCRUB_MAX_STEPS,
    AppState,
    format_scrub,
    observation_instant,
    playback_instants,
    scrub_hours,
    solve_for_display,
)

_PLAYBACK_DAYS = 29.5
_PLAYBACK_FPS = 4
_PLAYBACK_SPEEDS = [0.0, 0.5, 1.0, 2.0, 4.0]

# --- Language detection (browser-first via streamlit-js-eval) ---
# navigator.language is read once and cached in session_state.
# On the first run the JS call returns None; the rerun triggered by
# streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ko" if _browser_lang.lower().startswith("ko") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🌙",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# --- Application state: one struct owned by this controller ---
if "app_state" not in st.session_state:
    st.session_state.app_state = AppState(lang=_lang)
state: AppState = st.session_state.app_state
state.lang = _lang

st.markdown(
    """
    <style>
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #0d1b35 !important;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] {
        display: none !important;
    }
    [data-testid="stMainBlockContainer"] {
        padding-top: 1rem !important;
    }
    label, [data-testid="stWidgetLabel"] p {
        color: #aaaaaa !important;
        font-size: 0.85rem !important;
    }
    [data-testid="stButton"] button {
        background-color: rgba(126, 200, 227, 0.2) !important;
        color: #7ec8e3 !important;
        border: 1px solid #7ec8e3 !important;
        border-radius: 6px !important;
        font-weight: 600;
    }
    .readout {
        color: #e8d5a3;
        font-size: 0.95rem;
        line-height: 1.7;
    }
    .readout .phase {
        font-size: 1.4rem;
        font-weight: 600;
    }
    .scrub-scale {
        display: flex;
        justify-content: space-between;
        font-size: 0.7rem;
        color: #888888;
        margin-top: -0.6rem;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

# --- Geolocation: browser navigator.geolocation, resolved to a place name ---
if state.location_status == "requesting":
    _geo = get_geolocation(component_key="_geolocation")
    if _geo is not None:
        coords = _geo.get("coords") if isinstance(_geo, dict) else None
        if coords:
            state.lat = float(coords["latitude"])
            state.lon = float(coords["longitude"])
            state.location_name = location_name(state.lat, state.lon)
            state.location_status = "granted"
        else:
            state.location_status = "denied"
        st.rerun()

controls, scene = st.columns([1, 2])

with controls:
    date_val = st.date_input(
        t("label_date", _lang),
        value=state.local_date,
        min_value=datetime.date(1900, 1, 1),
        max_value=datetime.date(2050, 12, 31),
    )
    time_val = st.time_input(t("label_time", _lang), value=state.local_time, step=900)

    lat_col, btn_col = st.columns([3, 2])
    with lat_col:
        lat_val = st.number_input(
            t("label_lat", _lang),
            value=state.lat,
            min_value=-90.0,
            max_value=90.0,
            step=0.0001,
            format="%.4f",
        )
    with btn_col:
        st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
        _btn_key = {"requesting": "btn_locating", "granted": "btn_located"}.get(
            state.location_status, "btn_locate"
        )
        if st.button(t(_btn_key, _lang), disabled=state.location_status == "requesting"):
            state.location_status = "requesting"
            st.rerun()
    lon_val = st.number_input(
        t("label_lon", _lang),
        value=state.lon,
        min_value=-180.0,
        max_value=180.0,
        step=0.0001,
        format="%.4f",
    )
    elev_val = st.number_input(t("label_elevation", _lang), value=state.elevation, step=10.0)

    if state.location_status == "denied":
        st.caption(t("location_denied", _lang))

    scrub_val = st.slider(
        t("label_scrub", _lang),
        min_value=-SCRUB_MAX_STEPS,
        max_value=SCRUB_MAX_STEPS,
        value=state.scrub_steps,
        step=1,
        format="%d",
    )
    st.caption(format_scrub(scrub_hours(scrub_val)))
    st.markdown(
        f"<div class='scrub-scale'><span>{t('scrub_past', _lang)}</span>"
        f"<span>{t('scrub_now', _lang)}</span><span>{t('scrub_future', _lang)}</span></div>",
        unsafe_allow_html=True,
    )

    orientation_val = st.radio(
        t("label_orientation", _lang),
        options=["phase", "sky"],
        index=0 if state.orientation == "phase" else 1,
        format_func=lambda o: t(f"orientation_{o}", _lang),
        horizontal=True,
    )
    speed_val = st.select_slider(
        t("label_speed", _lang), options=_PLAYBACK_SPEEDS, value=state.speed_days_per_sec
    )

# --- Fold widget values back into the state ---
if lat_val != state.lat or lon_val != state.lon:
    state.lat, state.lon = lat_val, lon_val
    state.location_name = coordinate_label(lat_val, lon_val)
    state.location_status = "unknown"
state.local_date = date_val
state.local_time = time_val
state.scrub_steps = scrub_val
state.orientation = orientation_val
state.speed_days_per_sec = speed_val
state.elevation = elev_val

instant = observation_instant(state)
sol = solve_for_display(instant, state.lat, state.lon, state.elevation)

with scene:
    if state.speed_days_per_sec > 0:
        instants = playback_instants(
            instant, _PLAYBACK_DAYS, fps=_PLAYBACK_FPS, speed_days_per_sec=state.speed_days_per_sec
        )
        solutions = [solve_for_display(i, state.lat, state.lon, state.elevation) for i in instants]
        labels = [i.strftime("%Y-%m-%d %H:%M UTC") for i in instants]
        fig = render_moon_animation(
            solutions, labels, state.orientation, frame_ms=int(1000 / _PLAYBACK_FPS)
        )
    else:
        fig = render_moon_figure(sol, state.orientation)
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})

with controls:
    _angles = t("readout_angles", _lang).format(
        q=f"{math.degrees(sol.parallactic_angle_rad):.1f}",
        chi=f"{math.degrees(sol.bright_limb_angle_rad):.1f}",
        pole=f"{math.degrees(sol.pole_angle_rad):.1f}",
    )
    _libration = t("readout_libration", _lang).format(mlat=f"{sol.mlat:+.2f}", mlon=f"{sol.mlon:+.2f}")
    _age = synodic_age_days(instant)
    st.markdown(
        f"<div class='readout'>"
        f"<div>📍 <strong>{t('readout_location', _lang)}:</strong> {html.escape(state.location_name)}</div>"
        f"<div class='phase'>{sol.phase_emoji} {t(sol.phase_name, _lang)}</div>"
        f"<div>{t('readout_illumination', _lang)}: {sol.illum_fraction * 100:.1f}%"
        f" · {t('readout_age', _lang)}: {_age:.1f} d</div>"
        f"<div>{t('readout_distance', _lang)}: {sol.distance_km:,.0f} km</div>"
        f"<div>{_angles}</div>"
        f"<div>{_libration}</div>"
        "</div>",
        unsafe_allow_html=True,
    )

st.markdown(
    "<div style='color:#556688; font-size:0.75rem; text-align:center;'>"
    "skyfield • plotly • streamlit</div>",
    unsafe_allow_html=True,
)
