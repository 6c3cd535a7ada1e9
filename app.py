"""
UBI Transition Simulator - Interactive Dashboard

Models a world in which AI automation revenue funds a voluntary,
corporation-driven universal basic income, next to a no-UBI shadow world.

Run with: streamlit run app.py
"""

import logging

import streamlit as st
import plotly.graph_objects as go
import plotly.express as px
import pandas as pd

from ubi_sim.anchors import run_anchor_suite
from ubi_sim.config import (
    CORP_POLICY_PRESETS,
    ModelParameters,
    SCENARIO_PRESETS,
)
from ubi_sim.engine import TransitionSimulator
from ubi_sim.game_theory import classify_outcome

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

# ── Page config ──────────────────────────────────────────────────────
st.set_page_config(
    page_title="UBI Transition Simulator",
    layout="wide",
    initial_sidebar_state="expanded",
)

COLORS = px.colors.qualitative.Set2
STANCE_COLORS = {"generous": "#59a14f", "moderate": "#edc948", "selfish": "#e15759"}

# Common layout for all charts
CHART_THEME = dict(
    template="simple_white",
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font=dict(color="#262730"),
)


# ── Helper: build line chart ─────────────────────────────────────────
def line_chart(
    x, y, title, yaxis, color="#1f77b4", fmt=None, milestones=None, labels=None
):
    fig = go.Figure()
    hover = "%{y:.1f}" if fmt is None else fmt
    fig.add_trace(
        go.Scatter(
            x=x, y=y, mode="lines", line=dict(color=color, width=2.5),
            hovertemplate=hover + "<extra></extra>",
        )
    )
    if milestones and labels:
        # Invisible markers so milestone labels only show on hover
        ms_x, ms_y, ms_text = [], [], []
        for mi, label in milestones:
            if 0 <= mi < len(y):
                ms_x.append(labels[mi])
                ms_y.append(y[mi])
                ms_text.append(label)
        if ms_x:
            fig.add_trace(
                go.Scatter(
                    x=ms_x, y=ms_y, mode="markers",
                    marker=dict(size=9, color="red", symbol="diamond",
                                line=dict(width=1, color="#333")),
                    text=ms_text,
                    hovertemplate="%{text}<extra></extra>",
                    showlegend=False,
                )
            )
    fig.update_layout(
        **CHART_THEME,
        title=dict(text=title, font=dict(size=14)),
        yaxis_title=yaxis, height=320,
        margin=dict(l=50, r=20, t=35, b=30),
        hovermode="x unified",
    )
    return fig


def multi_line(x, series_dict, title, yaxis, height=340, colors=None):
    fig = go.Figure()
    for i, (name, vals) in enumerate(series_dict.items()):
        color = (colors or {}).get(name, COLORS[i % len(COLORS)])
        fig.add_trace(
            go.Scatter(
                x=x, y=vals, name=name, mode="lines",
                line=dict(color=color, width=2),
            )
        )
    fig.update_layout(
        **CHART_THEME,
        title=dict(text=title, font=dict(size=14)),
        yaxis_title=yaxis, height=height,
        margin=dict(l=50, r=20, t=35, b=30),
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=-0.35, font=dict(size=10)),
    )
    return fig


def stance_area(x, results):
    fig = go.Figure()
    for name, vals in [
        ("generous", results.cooperation_count),
        ("moderate", results.moderate_count),
        ("selfish", results.defection_count),
    ]:
        fig.add_trace(
            go.Scatter(
                x=x, y=vals, name=name, stackgroup="one",
                line=dict(width=0.5), fillcolor=STANCE_COLORS[name],
            )
        )
    fig.update_layout(
        **CHART_THEME,
        title=dict(text="Corporate Policy Stances", font=dict(size=14)),
        yaxis_title="Corporations", height=340,
        margin=dict(l=50, r=20, t=35, b=30),
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=-0.35, font=dict(size=10)),
    )
    return fig


# ── Sidebar ──────────────────────────────────────────────────────────
st.sidebar.title("Simulation Controls")

preset_name = st.sidebar.selectbox(
    "Scenario Preset",
    ["Custom"] + list(SCENARIO_PRESETS.keys()),
    index=1,  # default to Free Market
)

if preset_name != "Custom":
    preset = SCENARIO_PRESETS[preset_name]
    st.sidebar.caption(preset.description)
else:
    preset = ModelParameters(name="Custom", description="")

with st.sidebar.expander("AI Dynamics", expanded=True):
    ai_growth = st.slider(
        "AI Growth Rate (%/month)",
        0, 30, int(round(preset.ai_growth_rate * 100)),
        help="How fast operating markets adopt AI",
    )
    displacement = st.slider(
        "Displacement Rate (%)",
        0, 100, int(round(preset.displacement_rate * 100)),
        help="Share of labor income displaced at full adoption",
    )
    gdp_scaling = st.slider(
        "UBI GDP Scaling (%)",
        0, 100, int(round(preset.gdp_scaling * 100)),
        help="0 = a dollar of UBI is worth the same everywhere, 100 = worth more in poor countries",
    )

with st.sidebar.expander("Corporate Behaviour", expanded=False):
    corp_policy = st.selectbox(
        "Starting Corporate Policy",
        CORP_POLICY_PRESETS,
        index=CORP_POLICY_PRESETS.index(preset.default_corp_policy),
    )
    market_pressure = st.slider(
        "Market Pressure (%)",
        0, 100, int(round(preset.market_pressure * 100)),
        help="Reserved for custom demand-response models; the built-in formulas do not read it",
    )

with st.sidebar.expander("Company Formation", expanded=False):
    random_events = st.checkbox("Enable random company formation", value=False)
    seed = st.number_input("Random seed", min_value=0, value=42, step=1, disabled=not random_events)
    incentive = st.slider(
        "Adoption Incentive (%)",
        0, 100, int(round(preset.adoption_incentive * 100)),
        help="Extra pull on new AI companies while adoption is still low",
    )

with st.sidebar.expander("Advanced", expanded=False):
    num_months = st.slider("Simulation Length (months)", 12, 120, 60, step=6)

params = ModelParameters(
    name=preset.name,
    description=preset.description,
    ai_growth_rate=ai_growth / 100,
    displacement_rate=displacement / 100,
    gdp_scaling=gdp_scaling / 100,
    market_pressure=market_pressure / 100,
    default_corp_policy=corp_policy,
    adoption_incentive=incentive / 100,
)

# ── Run simulation ───────────────────────────────────────────────────
sim = TransitionSimulator(params=params, seed=int(seed) if random_events else None)
results = sim.run(num_months)
labels = results.labels
n = len(labels)
last = n - 1

# ── Header ───────────────────────────────────────────────────────────
st.title("UBI Transition Simulator")
st.markdown(
    "Monthly model of AI automation revenue flowing back to people as a voluntary, "
    "corporation-funded UBI. The **shadow** world runs the same automation with no UBI at all."
)

month = st.slider("Timeline", 0, last, last, format="%d", help="Rewind to any month of the run")
snap = results.snapshot(month)
state = snap.state

c1, c2, c3, c4, c5, c6 = st.columns(6)
c1.metric("Month", labels[month])
c2.metric(
    "Wellbeing",
    f"{state.average_wellbeing:.1f}/100",
    f"{state.average_wellbeing - results.average_wellbeing[0]:+.1f}",
)
c3.metric(
    "UBI Advantage",
    f"{state.average_wellbeing - state.shadow_average_wellbeing:+.1f}",
    help="Wellbeing above the no-UBI shadow world",
)
c4.metric("Global Fund", f"${state.global_fund:,.1f}B")
c5.metric("Countries in Crisis", f"{state.countries_in_crisis}", delta_color="inverse")
c6.metric("Outcome", classify_outcome(snap.game_theory).replace("-", " ").title())

if results.milestones:
    with st.expander(f"Simulation Milestones ({len(results.milestones)} events)", expanded=False):
        for mi, label in sorted(results.milestones):
            st.markdown(f"- **{labels[mi]}**: {label}")

# ── Tabs ─────────────────────────────────────────────────────────────
tab_overview, tab_countries, tab_corps, tab_game, tab_valid, tab_method = st.tabs(
    ["Overview", "Countries", "Corporations", "Game Theory", "Validation", "Methodology"]
)

# ── TAB: Overview ────────────────────────────────────────────────────
with tab_overview:
    st.plotly_chart(
        multi_line(
            labels,
            {
                "With UBI": results.average_wellbeing,
                "Shadow (no UBI)": results.shadow_average_wellbeing,
            },
            "Average Wellbeing (0-100)", "Index", height=360,
            colors={"With UBI": "#4e79a7", "Shadow (no UBI)": "#e15759"},
        ),
        use_container_width=True,
    )

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(
            line_chart(
                labels, results.global_fund, "Cumulative UBI Fund ($B)", "$B",
                color="#2ca02c", milestones=results.milestones, labels=labels,
            ),
            use_container_width=True,
        )
        st.plotly_chart(
            line_chart(
                labels, results.global_displacement_gap,
                "Displaced Wages ($/month x millions of people)", "$M", color="#ff7f0e",
            ),
            use_container_width=True,
        )
    with col2:
        st.plotly_chart(
            line_chart(
                labels, results.countries_in_crisis,
                "Countries in Displacement Crisis", "Countries", color="#d62728",
                fmt="%{y:.0f}", milestones=results.milestones, labels=labels,
            ),
            use_container_width=True,
        )
        st.plotly_chart(
            line_chart(
                labels, results.monthly_inflow, "Monthly Contributions ($B)", "$B",
                color="#9467bd", fmt="%{y:.3f}",
            ),
            use_container_width=True,
        )

# ── TAB: Countries ───────────────────────────────────────────────────
with tab_countries:
    country_df = results.country_frame(month)
    st.subheader(f"Countries at {labels[month]}")
    st.dataframe(
        country_df.round({
            "ai_adoption": 3, "wellbeing": 1, "shadow_wellbeing": 1, "displacement_gap": 1,
            "ubi_global": 4, "ubi_customer_weighted": 4, "ubi_local": 4, "ubi_total": 4,
        }),
        hide_index=True, use_container_width=True,
    )

    default_pick = [cid for cid in ("USA", "CHN", "IND", "NGA", "DEU") if cid in results.country_ids]
    picked = st.multiselect("Compare countries", results.country_ids, default=default_pick)
    if picked:
        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(
                multi_line(
                    labels,
                    {cid: results.wellbeing[:, results.country_ids.index(cid)] for cid in picked},
                    "Wellbeing by Country", "Index",
                ),
                use_container_width=True,
            )
        with col2:
            st.plotly_chart(
                multi_line(
                    labels,
                    {cid: results.ai_adoption[:, results.country_ids.index(cid)] for cid in picked},
                    "AI Adoption by Country", "Fraction",
                ),
                use_container_width=True,
            )

    gap = country_df.assign(ubi_advantage=country_df["wellbeing"] - country_df["shadow_wellbeing"])
    gap = gap.sort_values("ubi_advantage")
    fig = go.Figure(go.Bar(
        x=gap["ubi_advantage"], y=gap["name"], orientation="h",
        marker_color=["#59a14f" if v >= 0 else "#e15759" for v in gap["ubi_advantage"]],
    ))
    fig.update_layout(
        **CHART_THEME,
        title=dict(text="Wellbeing vs Shadow World", font=dict(size=14)),
        xaxis_title="Wellbeing points", height=720,
        margin=dict(l=130, r=20, t=35, b=30),
    )
    st.plotly_chart(fig, use_container_width=True)

# ── TAB: Corporations ────────────────────────────────────────────────
with tab_corps:
    st.subheader(f"Corporations at {labels[month]}")
    st.dataframe(
        results.corporation_frame(month).round({
            "ai_revenue": 3, "contribution_rate": 3, "reputation": 1, "demand_collapse": 3,
        }),
        hide_index=True, use_container_width=True,
    )

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(
            multi_line(
                labels,
                {cid: results.contribution_rate[:, i] for i, cid in enumerate(results.corporation_ids)},
                "Contribution Rate by Corporation", "Share of AI revenue",
            ),
            use_container_width=True,
        )
    with col2:
        st.plotly_chart(
            multi_line(
                labels,
                {cid: results.reputation[:, i] for i, cid in enumerate(results.corporation_ids)},
                "Reputation by Corporation", "Score",
            ),
            use_container_width=True,
        )

    breakdown = snap.ledger.distribution_breakdown
    if breakdown:
        fig = go.Figure(go.Pie(labels=list(breakdown), values=list(breakdown.values()), hole=0.45))
        fig.update_layout(
            **CHART_THEME,
            title=dict(text=f"Distribution by Strategy ({labels[month]})", font=dict(size=14)),
            height=320, margin=dict(l=20, r=20, t=35, b=20),
        )
        st.plotly_chart(fig, use_container_width=True)

# ── TAB: Game Theory ─────────────────────────────────────────────────
with tab_game:
    g = snap.game_theory
    gc1, gc2, gc3, gc4 = st.columns(4)
    gc1.metric("Avg Contribution", f"{g.avg_contribution_rate * 100:.1f}%")
    gc2.metric("Race-to-Bottom Risk", f"{g.race_to_bottom_risk * 100:.0f}%", delta_color="inverse")
    gc3.metric("Virtuous Cycle", f"{g.virtuous_cycle_strength * 100:.0f}%")
    gc4.metric("Prisoner's Dilemma", "Yes" if g.is_in_prisoners_dilemma else "No")

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(stance_area(labels, results), use_container_width=True)
    with col2:
        st.plotly_chart(
            multi_line(
                labels,
                {
                    "Race-to-bottom risk": results.race_to_bottom_risk,
                    "Virtuous cycle strength": results.virtuous_cycle_strength,
                },
                "Cooperation Dynamics", "0-1",
                colors={"Race-to-bottom risk": "#e15759", "Virtuous cycle strength": "#59a14f"},
            ),
            use_container_width=True,
        )
    st.plotly_chart(
        line_chart(
            labels, results.avg_contribution_rate * 100,
            "Average Contribution Rate (%)", "%", color="#4e79a7",
            milestones=results.milestones, labels=labels,
        ),
        use_container_width=True,
    )

# ── TAB: Validation ──────────────────────────────────────────────────
with tab_valid:
    st.header("Anchor Scenarios")
    st.markdown(
        "Directional checks any credible configuration should satisfy. "
        "They test which way things move, not by how much. "
        "The model passes when at least four of six hold."
    )

    @st.cache_data
    def anchor_table():
        suite = run_anchor_suite()
        rows = [
            {
                "Anchor": r.test_id,
                "Name": r.test_name,
                "Category": r.category,
                "Result": "PASS" if r.passed else "FAIL",
                "Detail": r.reason,
            }
            for r in suite.results
        ]
        return suite.passed, suite.total, suite.tier2_passed, rows

    if st.button("Run anchor scenarios"):
        passed, total, ok, rows = anchor_table()
        (st.success if ok else st.error)(f"{passed}/{total} anchors passed")
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

# ── TAB: Methodology ─────────────────────────────────────────────────
with tab_method:
    st.header("Model Structure")
    st.markdown("""
Each month the world advances through six phases:

1. **Revenue**: Automation revenue, limited by how much customers can still spend and by reputation; operating markets adopt more AI
2. **Contribution**: Each corporation pays a share of its AI revenue into UBI
3. **Distribution**: Global (per capita worldwide), customer-weighted (by population across operating markets) or headquarters-local
4. **Wellbeing**: UBI boost against displacement friction, with crisis and subsistence rules; the shadow world runs without UBI
5. **Adaptation**: Corporations respond to projected demand collapse, competitors, reputation and regional pressure
6. **Analysis**: Race-to-bottom risk vs virtuous-cycle strength across the corporate population
""")

    st.header("Key Assumptions")
    st.markdown("""
- UBI is voluntary: no government levies it, corporations choose their own rates
- Contribution rates stay between 5% and 50% of AI revenue once a corporation has adapted
- Displacement friction peaks at half adoption and is worse where governance is weak and inequality high
- A dollar of UBI matters more in poorer countries, controlled by the GDP scaling slider
- Corporations look 12 months ahead by extrapolating their customers' recent wellbeing trend
- The shadow world's wages collapse with adoption and it suffers extra instability past half adoption
""")

    st.header("Known Limitations")
    st.markdown("""
- **Narrative coefficients**: The constants carry economic stories, not estimates from data.
- **No governments**: Taxes, transfers and regulation are outside the model.
- **Unit mixing**: Funds are in billions while wages are per person, so UBI per capita is small in absolute terms.
- **Directions more reliable than magnitudes**: The model says whether a policy helps more reliably than by how much.
""")

    # ── Sensitivity Analysis ──────────────────────────────────────
    st.header("Sensitivity Analysis")
    st.markdown(
        "Each parameter is varied **±20%** from current settings. "
        "Bars show how much the output metric changes from baseline."
    )

    SWEEP_PARAMS = [
        ("ai_growth_rate", "AI Growth Rate"),
        ("displacement_rate", "Displacement Rate"),
        ("gdp_scaling", "GDP Scaling"),
        ("adoption_incentive", "Adoption Incentive"),
    ]

    @st.cache_data
    def run_sensitivity(params_dict, months):
        """Run ±20% sweeps for key parameters and return deltas."""
        base = TransitionSimulator(params=ModelParameters(**params_dict)).run(months)
        base_wb = base.average_wellbeing[-1]
        base_adv = base_wb - base.shadow_average_wellbeing[-1]
        base_rate = base.avg_contribution_rate[-1] * 100

        rows = []
        for attr, label in SWEEP_PARAMS:
            for direction, mult in [("-20%", 0.8), ("+20%", 1.2)]:
                tweaked = dict(params_dict)
                tweaked[attr] = min(1.0, params_dict[attr] * mult)
                r = TransitionSimulator(params=ModelParameters(**tweaked)).run(months)
                rows.append({
                    "param": label,
                    "direction": direction,
                    "wb_delta": r.average_wellbeing[-1] - base_wb,
                    "adv_delta": r.average_wellbeing[-1] - r.shadow_average_wellbeing[-1] - base_adv,
                    "rate_delta": r.avg_contribution_rate[-1] * 100 - base_rate,
                })
        return rows

    _params_for_sweep = {
        "ai_growth_rate": params.ai_growth_rate,
        "displacement_rate": params.displacement_rate,
        "gdp_scaling": params.gdp_scaling,
        "market_pressure": params.market_pressure,
        "default_corp_policy": params.default_corp_policy,
        "adoption_incentive": params.adoption_incentive,
    }
    sens_df = pd.DataFrame(run_sensitivity(_params_for_sweep, num_months))

    def tornado_chart(df, metric_col, title, xaxis_label):
        """Build a horizontal tornado chart for one output metric."""
        low = df[df["direction"] == "-20%"][["param", metric_col]].rename(
            columns={metric_col: "low"}
        )
        high = df[df["direction"] == "+20%"][["param", metric_col]].rename(
            columns={metric_col: "high"}
        )
        merged = low.merge(high, on="param")
        # Most sensitive at top
        merged["spread"] = merged["high"].abs() + merged["low"].abs()
        merged = merged.sort_values("spread", ascending=True)

        fig = go.Figure()
        fig.add_trace(go.Bar(
            y=merged["param"], x=merged["low"], name="-20%",
            orientation="h", marker_color="#4e79a7",
        ))
        fig.add_trace(go.Bar(
            y=merged["param"], x=merged["high"], name="+20%",
            orientation="h", marker_color="#e15759",
        ))
        fig.update_layout(
            **CHART_THEME,
            title=dict(text=title, font=dict(size=14)),
            xaxis_title=xaxis_label,
            barmode="overlay",
            height=340,
            margin=dict(l=160, r=20, t=40, b=30),
            legend=dict(orientation="h", yanchor="bottom", y=-0.2),
        )
        return fig

    tc1, tc2, tc3 = st.columns(3)
    with tc1:
        st.plotly_chart(
            tornado_chart(sens_df, "wb_delta", "Average Wellbeing", "Index change"),
            use_container_width=True,
        )
    with tc2:
        st.plotly_chart(
            tornado_chart(sens_df, "adv_delta", "UBI Advantage over Shadow", "Index change"),
            use_container_width=True,
        )
    with tc3:
        st.plotly_chart(
            tornado_chart(sens_df, "rate_delta", "Avg Contribution Rate", "pp change"),
            use_container_width=True,
        )

# ── Footer ───────────────────────────────────────────────────────────
st.divider()
st.caption(
    "This is a simplified simulation for educational exploration of voluntary, "
    "corporation-funded UBI during an AI transition. It should not be used for policy "
    "or financial decisions. Parameters can be tuned in the sidebar to explore different scenarios."
)
