import logging
from pathlib import Path

from shiny import reactive
from shiny.express import input, ui
from shinywidgets import render_plotly

# Import organized modules
from survey_dashboard.config import BIN_COUNT, CHART_OPTIONS, DATA_SOURCE
from survey_dashboard.data_manager import try_load_survey
from survey_dashboard.datasets import build_all
from survey_dashboard.plotting import (
    create_education_chart,
    create_gender_pictograph,
    create_occupation_sunburst,
    create_political_view_chart,
    create_usage_box_plot,
    create_verification_radar,
)

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

CHART_TITLES = {value: label for label, value in CHART_OPTIONS}


# ======================================================
#  REACTIVE STATE
# ======================================================
# Load once on startup; values stay in-memory until app restart.
responses_store = reactive.Value(try_load_survey())


@reactive.calc
def chart_data():
    responses = responses_store.get()
    if responses is None:
        return None
    return build_all(responses, bin_count=input.bin_count())


def _chart(key):
    data = chart_data()
    if data is None:
        return None
    return data[key]


# ======================================================
#  UI LAYOUT
# ======================================================
css_file = Path(__file__).parent / "css" / "theme.css"

ui.include_css(css_file)

ui.page_opts(
    title="Fake News Verification Survey",
    fillable=False,
    fillable_mobile=True,
    full_width=True,
    id="page",
    lang="en",
)

with ui.sidebar(open="desktop", position="right"):
    ui.input_slider(
        "bin_count",
        "Usage bins (box plot)",
        min=1,
        max=10,
        value=BIN_COUNT,
        step=1,
    )
    ui.input_action_button("reload", "Reload data", class_="btn-primary mt-3")
    ui.p(f"Source: {DATA_SOURCE}", class_="text-muted small mt-3")


@reactive.effect
@reactive.event(input.reload)
def _reload_data():
    responses = try_load_survey(force_reload=True)
    if responses is None:
        ui.notification_show(
            f"Could not load survey data from {DATA_SOURCE}", type="error"
        )
    responses_store.set(responses)


with ui.layout_columns(col_widths=[6, 6]):
    with ui.card(full_screen=True):
        ui.card_header(CHART_TITLES["gender"])

        @render_plotly
        def gender_chart():
            data = _chart("gender")
            return create_gender_pictograph(data) if data else None

    with ui.card(full_screen=True):
        ui.card_header(CHART_TITLES["education"])

        @render_plotly
        def education_chart():
            data = _chart("education")
            return create_education_chart(data) if data else None

    with ui.card(full_screen=True):
        ui.card_header(CHART_TITLES["occupation"])

        @render_plotly
        def occupation_chart():
            data = _chart("occupation_hierarchy")
            return create_occupation_sunburst(data) if data else None

    with ui.card(full_screen=True):
        ui.card_header(CHART_TITLES["political_view"])

        @render_plotly
        def political_view_chart():
            data = _chart("political_view")
            return create_political_view_chart(data) if data else None

    with ui.card(full_screen=True):
        ui.card_header(CHART_TITLES["usage"])

        @render_plotly
        def usage_chart():
            data = _chart("usage")
            return create_usage_box_plot(data) if data else None

    with ui.card(full_screen=True):
        ui.card_header(CHART_TITLES["verification"])

        @render_plotly
        def verification_chart():
            data = _chart("verification")
            return create_verification_radar(data) if data else None


with ui.div(class_="dashboard-footer"):
    ui.p("Fake News Verification Survey Data Visualization")
