"""
SimTrack: UI Styling
Header bar, buttons, inputs, undo banner and activity cards.
"""

SIM_CSS = """
<style>
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap');

:root {
    --sim-green:       #0f7a4f;
    --sim-green-light: #e7f6ee;
    --sim-green-mid:   #22a06b;
    --sim-bg:          #f6f8f7;
    --sim-white:       #ffffff;
    --sim-border:      #dfe8e3;
    --sim-text:        #17241e;
    --sim-text-soft:   #56695f;
    --sim-danger:      #c0392b;
    --sim-radius:      12px;
    --sim-radius-sm:   8px;
    --sim-shadow:      0 2px 12px rgba(15,122,79,0.08);
    --sim-font:        'Inter', sans-serif;
}

html, body, [class*="css"] {
    font-family: var(--sim-font) !important;
    color: var(--sim-text) !important;
}

.stApp { background-color: var(--sim-bg) !important; }

[data-testid="stSidebar"] { display: none !important; }
[data-testid="collapsedControl"] { display: none !important; }

.main .block-container {
    padding: 1rem 1.5rem 3rem 1.5rem !important;
    max-width: 1200px !important;
}

h1 { font-size: 1.6rem !important; font-weight: 700 !important; letter-spacing: -0.02em !important; }
h3 { font-size: 1rem !important; font-weight: 600 !important; }

@media (max-width: 768px) {
    h1 { font-size: 1.2rem !important; }
    .main .block-container { padding: 0.8rem 0.6rem 2rem 0.6rem !important; }
}

/* ── BUTTONS ─────────────────────────────────── */
.stButton > button[kind="primary"] {
    background: var(--sim-green) !important;
    color: white !important;
    border: none !important;
    border-radius: var(--sim-radius-sm) !important;
    font-weight: 600 !important;
}
.stButton > button[kind="primary"]:hover { background: var(--sim-green-mid) !important; }
.stButton > button {
    border: 1.5px solid var(--sim-border) !important;
    border-radius: var(--sim-radius-sm) !important;
    font-weight: 500 !important;
}
.stButton > button:hover {
    border-color: var(--sim-green) !important;
    color: var(--sim-green) !important;
}

/* ── INPUTS ──────────────────────────────────── */
.stTextInput > div > div > input:focus {
    border-color: var(--sim-green) !important;
    box-shadow: 0 0 0 3px rgba(15,122,79,0.1) !important;
}

/* ── PROGRESS (wizard + undo countdown) ──────── */
.stProgress > div > div > div > div { background-color: var(--sim-green) !important; }

/* ── METRICS ─────────────────────────────────── */
[data-testid="metric-container"] {
    background: var(--sim-white) !important;
    border: 1px solid var(--sim-border) !important;
    border-radius: var(--sim-radius) !important;
    padding: 1rem 1.2rem !important;
    box-shadow: var(--sim-shadow) !important;
}

/* ── HEADER BAR ──────────────────────────────── */
.sim-header {
    background: var(--sim-green);
    color: white;
    padding: 0.55rem 1.2rem;
    display: flex;
    align-items: center;
    justify-content: space-between;
    border-radius: 0 0 10px 10px;
    margin-bottom: 0.75rem;
    box-shadow: 0 2px 8px rgba(15,122,79,0.18);
}
.sim-header .app-title { font-size: 1rem; font-weight: 700; }
.sim-header .user-info { font-size: 0.78rem; opacity: 0.88; }

/* ── ACTIVITY FEED ───────────────────────────── */
.sim-activity-card {
    background: white;
    border: 1px solid var(--sim-border);
    border-left: 4px solid var(--sim-green);
    border-radius: var(--sim-radius-sm);
    padding: 0.75rem 1rem;
    margin-bottom: 0.5rem;
    display: flex;
    align-items: flex-start;
    gap: 0.75rem;
}
.sim-activity-emoji { font-size: 1.4rem; line-height: 1; margin-top: 2px; }
.sim-activity-label { font-weight: 600; font-size: 0.88rem; margin-bottom: 2px; }
.sim-activity-message { font-size: 0.92rem; margin-bottom: 4px; }
.sim-activity-meta { font-size: 0.78rem; color: var(--sim-text-soft); }

#MainMenu { visibility: hidden !important; }
footer { visibility: hidden !important; }
header[data-testid="stHeader"] { display: none !important; }
</style>
"""


def apply_styles():
    """Apply all SimTrack styles."""
    import streamlit as st
    st.markdown(SIM_CSS, unsafe_allow_html=True)
