# farmops/ui.py
import html
import logging

import streamlit as st

from .config import get_settings
from .errors import FarmOpsError
from .logging_config import setup_logging
from .models import Snapshot
from .store import LocalPhotoStore, SQLiteRecordStore, fetch_snapshot

logger = logging.getLogger(__name__)

FLASH_KEY = "_flash_messages"


def init_page(title: str) -> None:
    st.set_page_config(
        page_title=f"{title} · Farm Operations",
        page_icon="🌱",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    setup_logging()
    load_css()
    show_flash()


def flash(message: str, kind: str = "success") -> None:
    """Queue a message to show at the top of the next run."""
    st.session_state.setdefault(FLASH_KEY, []).append((kind, message))


def show_flash() -> None:
    for kind, message in st.session_state.pop(FLASH_KEY, []):
        if kind == "info":
            st.info(message)
        elif kind == "warning":
            st.warning(message)
        else:
            st.success(message)


@st.cache_resource
def get_store() -> SQLiteRecordStore:
    return SQLiteRecordStore(get_settings().db_path)


@st.cache_resource
def get_photo_store() -> LocalPhotoStore:
    return LocalPhotoStore(get_settings().photo_dir)


def load_snapshot() -> Snapshot | None:
    """Fetch the page's snapshot; on failure show the error and return None."""
    try:
        return fetch_snapshot(get_store())
    except FarmOpsError as e:
        logger.error(f"Error fetching data: {e}")
        st.error(f"### ⚠️ Could not load data\n{e}")
        return None


def show_error(title: str, error: Exception) -> None:
    logger.error(f"{title}: {error}")
    st.error(f"**{title}**  \n{error}")


def load_css():
    st.markdown(
        """
    <style>
    :root {
        --color-green-dark: #2d5016;
        --color-green-medium: #4a7c29;
        --color-green-bg: #e8f5e9;
        --color-brown-dark: #5d4037;
    }

    .metric-card {
        background: white;
        border-radius: 15px;
        padding: 20px;
        box-shadow: 0 2px 10px rgba(0,0,0,0.08);
        border-left: 5px solid var(--color-green-medium);
        margin: 10px 0;
    }

    .metric-title {
        font-size: 13px;
        color: #757575;
        text-transform: uppercase;
        letter-spacing: 1px;
        font-weight: 600;
    }

    .metric-value {
        font-size: 32px;
        font-weight: 700;
        color: var(--color-brown-dark);
    }

    .metric-subtitle {
        font-size: 14px;
        color: #757575;
    }

    .trend-up { color: var(--color-green-dark); background: var(--color-green-bg); }
    .trend-down { color: #c62828; background: #ffebee; }
    .trend-neutral { color: #757575; background: #f5f5f5; }

    .trend-badge {
        font-size: 13px;
        font-weight: 600;
        padding: 3px 10px;
        border-radius: 20px;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
    </style>
    """,
        unsafe_allow_html=True,
    )


def stat_card(title: str, value: str, subtitle: str = "", subtitle_value: str = "", icon: str = "") -> None:
    title, value, subtitle, subtitle_value = (html.escape(str(t)) for t in (title, value, subtitle, subtitle_value))
    st.markdown(
        f"""
    <div class="metric-card">
        <div class="metric-title">{icon} {title}</div>
        <div class="metric-value">{value}</div>
        <div class="metric-subtitle">{subtitle} <b>{subtitle_value}</b></div>
    </div>
    """,
        unsafe_allow_html=True,
    )
