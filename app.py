"""
Streamlit UI — AgreeGenius crop advisory.
Home: location, farm size, soil, climate, budget, water → "Get Recommendations".
Results: top 3 crops with confidence, reasons, risks and benefits; CSV download.
Sidebar: crop health check (photo analysis) and government scheme finder.
Run with: streamlit run app.py
"""

import base64
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

from agreegenius.config import (
    SOIL_TYPES,
    CLIMATES,
    BUDGET_TIERS,
    BUDGET_LABELS,
    WATER_AVAILABILITY_LEVELS,
)
from agreegenius.conditions import FarmConditions, InvalidConditionsError
from agreegenius.crop_catalog import CATALOG_VERSION
from agreegenius.scorer import SuitabilityScorer
from agreegenius.report import recommendations_to_frame, to_csv_bytes, describe_conditions
from agreegenius.inference_gateway import GatewayError, analyze_crop_image, analyze_schemes

NOT_SURE = "— Not sure —"


@st.cache_resource
def get_scorer() -> SuitabilityScorer:
    """One scorer (and catalog) per server process."""
    return SuitabilityScorer()


def _level_colour(level: str) -> str:
    return {"high": "green", "medium": "orange", "low": "grey"}.get(level, "grey")


def _water_colour(level: str) -> str:
    return {"high": "blue", "medium": "violet", "low": "green"}.get(level, "grey")


def _label(value: str) -> str:
    return value.replace("-", " ").title()


# ---------------------------------------------------------------------------
# Light agricultural theme
# ---------------------------------------------------------------------------

def apply_theme():
    st.markdown("""
    <style>
    .stApp { background: linear-gradient(180deg, #f6fbf4 0%, #eef6ea 60%, #f6fbf4 100%); }
    .main .block-container { padding-top: 1.5rem; }
    h1, h2, h3 { color: #2d5a2d !important; }
    div[data-testid="stExpander"] { background: #ffffff; border-radius: 8px; border: 1px solid #cfe3c8; }
    .stButton > button { background: #2d5a2d !important; color: white !important; border-radius: 8px; }
    .stButton > button:hover { background: #3d7a3d !important; }
    </style>
    """, unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Main app
# ---------------------------------------------------------------------------

def main():
    st.set_page_config(
        page_title="AgreeGenius Crop Advisory",
        page_icon="🌱",
        layout="wide",
    )
    apply_theme()

    st.title("🌱 AgreeGenius Crop Advisory")
    st.caption("Rule-based crop suitability • Prices in ₹ • Advisory only")

    scorer = get_scorer()

    # -----------------------------------------------------------------------
    # Farm conditions form
    # -----------------------------------------------------------------------
    st.header("Tell us about your farm")
    with st.form("farm_conditions"):
        col1, col2 = st.columns(2)
        with col1:
            location = st.text_input("Location (district, state or country)", placeholder="e.g. Ludhiana, Punjab, India")
            soil = st.selectbox("Soil type", SOIL_TYPES, format_func=_label)
            budget = st.selectbox("Budget", list(BUDGET_TIERS), format_func=lambda b: BUDGET_LABELS[b])
        with col2:
            farm_size = st.number_input("Farm size (acres)", min_value=0.1, max_value=10_000.0, value=2.0, step=0.5)
            climate = st.selectbox("Climate", CLIMATES, format_func=_label)
            water = st.selectbox("Water availability", [NOT_SURE] + WATER_AVAILABILITY_LEVELS, format_func=_label)
        submitted = st.form_submit_button("Get Recommendations", type="primary", use_container_width=True)

    if submitted:
        form = {
            "location": location,
            "soil_type": soil,
            "climate": climate,
            "budget_tier": budget,
            "water_availability": None if water == NOT_SURE else water,
            "farm_size_acres": farm_size,
        }
        try:
            conditions = FarmConditions.from_form(form)
        except InvalidConditionsError as exc:
            for field, msg in exc.errors.items():
                st.error(f"{_label(field.replace('_', ' '))}: {msg}")
            st.stop()
        st.session_state["conditions"] = conditions
        st.session_state["recommendations"] = scorer.recommend(conditions)

    conditions = st.session_state.get("conditions")
    recommendations = st.session_state.get("recommendations")
    if conditions is None:
        st.info("Fill in your farm details and click **Get Recommendations**.")
        _render_sidebar()
        return

    # -----------------------------------------------------------------------
    # Farm summary
    # -----------------------------------------------------------------------
    st.subheader("Farm summary")
    summary = describe_conditions(conditions)
    cols = st.columns(len(summary))
    for col, (label, value) in zip(cols, summary.items()):
        col.metric(label, value)

    st.divider()

    if not recommendations:
        st.warning(
            "**No suitable crop found** for these conditions. "
            "Try a nearby location name, a different soil description, or a higher budget."
        )
        _render_breakdown(scorer, conditions)
        _render_sidebar()
        return

    # -----------------------------------------------------------------------
    # Top recommendations
    # -----------------------------------------------------------------------
    st.subheader(f"Top {len(recommendations)} recommended crops")
    medals = {1: "🥇", 2: "🥈", 3: "🥉"}

    for rec in recommendations:
        header = f"{medals.get(rec.rank, '#' + str(rec.rank))}  {rec.name}  |  Confidence: {rec.confidence:.0f}%"
        if rec.rank == 1:
            header += "  |  ⭐ Best Match"
        with st.expander(header, expanded=(rec.rank == 1)):
            st.progress(rec.confidence / 100)
            st.markdown(rec.suitability_reason)

            m1, m2, m3, m4 = st.columns(4)
            m1.metric("Expected yield", rec.expected_yield)
            m2.metric("Growth period", rec.growth_period)
            m3.metric("Investment", rec.investment_tier)
            m4.metric("Market price", rec.market_price)

            st.markdown(
                f"Profitability: :{_level_colour(rec.profitability)}[{rec.profitability.capitalize()}]"
                f" &nbsp;•&nbsp; Water requirement: "
                f":{_water_colour(rec.water_requirement)}[{rec.water_requirement.capitalize()}]"
            )

            col1, col2 = st.columns(2)
            with col1:
                st.markdown("**Risks**")
                for r in rec.risks:
                    st.markdown(f"- ⚠️ {r}")
            with col2:
                st.markdown("**Benefits**")
                for b in rec.benefits:
                    st.markdown(f"- ✅ {b}")

    _render_breakdown(scorer, conditions)

    st.divider()
    st.subheader("Download report")
    report_df = recommendations_to_frame(recommendations)
    loc_tag = (conditions.location or "farm").replace(" ", "_").replace(",", "")
    st.dataframe(report_df, use_container_width=True)
    st.download_button(
        label="Download CSV",
        data=to_csv_bytes(report_df),
        file_name=f"crop_advisory_{loc_tag}.csv",
        mime="text/csv",
    )

    if st.button("Start new analysis"):
        st.session_state.pop("conditions", None)
        st.session_state.pop("recommendations", None)
        st.rerun()

    _render_sidebar()


def _render_breakdown(scorer: SuitabilityScorer, conditions: FarmConditions):
    with st.expander("How were crops scored?"):
        scores = scorer.score(conditions)
        rows = []
        for s in sorted(scores, key=lambda s: -s.score):
            rows.append({
                "Crop": s.crop.name,
                "Climate": s.climate,
                "Soil": s.soil,
                "Region": s.region,
                "Budget": s.budget,
                "Water": s.water if s.water is not None else "—",
                "Score": s.score,
                "Passes": "✅" if s.passed else "—",
            })
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
        if scores:
            st.caption(f"Minimum score to be recommended: {scores[0].threshold}. Catalog v{CATALOG_VERSION}.")


def _render_sidebar():
    sb = st.sidebar
    sb.markdown("**Crop health check**")
    with sb.expander("Analyze a crop photo"):
        upload = st.file_uploader("Crop photo", type=["jpg", "jpeg", "png", "webp"])
        if upload is not None and st.button("Analyze photo"):
            data_url = f"data:{upload.type};base64,{base64.b64encode(upload.getvalue()).decode()}"
            with st.spinner("Analyzing..."):
                try:
                    analysis = analyze_crop_image(data_url)
                except GatewayError as exc:
                    st.error(f"Analysis failed: {exc}")
                else:
                    st.markdown(
                        f"**{analysis.get('cropType', 'Unknown')}** — "
                        f"{str(analysis.get('healthStatus', 'unknown')).replace('_', ' ')} "
                        f"({analysis.get('confidence', 0)}%)"
                    )
                    for d in analysis.get("diseases", []):
                        st.markdown(f"- {d.get('name')} *({d.get('severity', '?')})*")
                    for t in analysis.get("treatments", []):
                        st.info(t)
                    if analysis.get("additionalNotes"):
                        st.caption(analysis["additionalNotes"])

    sb.divider()
    sb.markdown("**Government schemes**")
    with sb.expander("Find schemes for my farm"):
        state = st.text_input("State")
        farm_type = st.text_input("Farm type", placeholder="e.g. small holding, dairy, horticulture")
        if st.button("Find schemes"):
            conditions = st.session_state.get("conditions")
            profile = {
                "location": conditions.location if conditions else None,
                "state": state,
                "farm_size": conditions.farm_size_acres if conditions else None,
                "farm_type": farm_type,
            }
            with st.spinner("Looking up schemes..."):
                try:
                    result = analyze_schemes(profile)
                except GatewayError as exc:
                    st.error(f"Scheme lookup failed: {exc}")
                else:
                    for scheme in result.get("eligibleSchemes", []):
                        st.markdown(f"**{scheme.get('name')}** — {scheme.get('category', '')}")
                        st.caption(scheme.get("benefits", ""))
                    if result.get("generalAdvice"):
                        st.info(result["generalAdvice"])
    sb.divider()
    sb.caption(f"AgreeGenius Crop Advisory • catalog v{CATALOG_VERSION}")


if __name__ == "__main__":
    main()
