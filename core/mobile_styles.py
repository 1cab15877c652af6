"""CSS tweaks applied once per page load."""
import streamlit as st


def apply_mobile_styles():
    """Apply sidebar sizing, status badges and mobile-friendly touch targets."""
    st.markdown("""
    <style>
    /* Fixed sidebar width */
    section[data-testid="stSidebar"] {
        width: 17rem !important;
        min-width: 17rem !important;
    }

    /* Service order status pill */
    .status-badge {
        color: #ffffff;
        padding: 2px 10px;
        border-radius: 999px;
        font-size: 0.8rem;
        font-weight: 600;
        white-space: nowrap;
    }

    /* Money KPIs line up on narrow screens */
    div[data-testid="stMetricValue"] {
        font-variant-numeric: tabular-nums;
    }

    @media (max-width: 768px) {
        /* Larger touch targets at the counter tablet */
        .stButton button {
            min-height: 48px !important;
            font-size: 16px !important;
        }

        /* Prevent zoom on iOS when focusing inputs */
        input, select, textarea {
            font-size: 16px !important;
        }

        .block-container {
            padding-left: 1rem !important;
            padding-right: 1rem !important;
        }
    }
    </style>
    """, unsafe_allow_html=True)
