import pandas as pd
import pytest

from survey_dashboard.aggregation import (
    average_metrics,
    bin_edges,
    count_categories,
    five_number_summary,
    format_percentage,
    group_two_level,
    partition_hierarchy,
    round_half_up,
    summarize_bins,
)
from survey_dashboard.cleaning import clean_rows, normalize_gender, to_camel_case


def _frame(**columns):
    return pd.DataFrame({name: [str(v) for v in values] for name, values in columns.items()})


# ---------------------------------------------------------------------------
# Percentages
# ---------------------------------------------------------------------------


def test_format_percentage_uses_one_decimal():
    assert format_percentage(1, 3) == "33.3"
    assert format_percentage(2, 3) == "66.7"
    assert format_percentage(3, 3) == "100.0"


def test_format_percentage_rounds_exact_halves_up():
    assert format_percentage(1, 16) == "6.3"
    assert format_percentage(5, 16) == "31.3"
    assert format_percentage(15, 16) == "93.8"


def test_format_percentage_guards_zero_total():
    assert format_percentage(0, 0) == "0.0"
    assert format_percentage(5, 0) == "0.0"


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(0.5) == 1


# ---------------------------------------------------------------------------
# Categorical counter
# ---------------------------------------------------------------------------


def test_gender_counts_match_worked_example():
    cleaned = clean_rows(_frame(gender=["male", "male", "female"]), ["gender"])

    result = count_categories(cleaned, "gender", labeler=normalize_gender)

    assert result == {
        "items": [
            {"gender": "Male", "count": 2, "percentage": "66.7"},
            {"gender": "Female", "count": 1, "percentage": "33.3"},
        ],
        "total": 3,
    }


def test_labels_are_normalised_before_counting():
    frame = _frame(gender=["male", "Male", " male"])

    result = count_categories(frame, "gender", labeler=normalize_gender)

    assert result["items"] == [{"gender": "Male", "count": 3, "percentage": "100.0"}]


def test_ties_keep_first_appearance_order():
    frame = _frame(political_view=["B", "A", "C", "A", "B"])

    result = count_categories(frame, "political_view", label_key="view")

    assert [item["view"] for item in result["items"]] == ["B", "A", "C"]


def test_counts_conserve_total_and_percentages_sum_to_100(survey_frame):
    cleaned = clean_rows(survey_frame, ["political_view"])

    result = count_categories(cleaned, "political_view")

    assert sum(item["count"] for item in result["items"]) == len(cleaned)
    percentages = [float(item["percentage"]) for item in result["items"]]
    assert all(0 <= p <= 100 for p in percentages)
    assert sum(percentages) == pytest.approx(100, abs=0.1 * len(percentages))


def test_counter_percentages_round_halves_up():
    frame = _frame(political_view=["A"] + ["B"] * 15)

    result = count_categories(frame, "political_view", label_key="view")

    assert [(i["view"], i["percentage"]) for i in result["items"]] == [
        ("B", "93.8"),
        ("A", "6.3"),
    ]


def test_no_valid_rows_gives_empty_counter():
    cleaned = clean_rows(_frame(political_view=["", "  ", ""]), ["political_view"])

    result = count_categories(cleaned, "political_view")

    assert len(cleaned) == 0
    assert result == {"items": [], "total": 0}


# ---------------------------------------------------------------------------
# Two-level grouper
# ---------------------------------------------------------------------------


@pytest.fixture
def education_frame():
    return _frame(
        education=["BSc", "BSc", "MSc", "BSc", "PhD"],
        gender=["male", "female", "female", "male", "non-binary"],
    )


def test_two_level_groups(education_frame):
    result = group_two_level(
        education_frame,
        "education",
        "gender",
        ("Male", "Female"),
        secondary_labeler=normalize_gender,
    )

    assert result["total"] == 5
    assert [item["education"] for item in result["items"]] == ["BSc", "MSc", "PhD"]
    bsc = result["items"][0]
    assert bsc["total"] == 3
    assert bsc["counts"]["Male"] == 2
    assert bsc["counts"]["Female"] == 1
    assert bsc["percentages"]["Male"] == "66.7"
    assert bsc["percentages"]["Female"] == "33.3"
    assert bsc["total_percentage"] == "60.0"


def test_two_level_domain_labels_always_present(education_frame):
    result = group_two_level(
        education_frame,
        "education",
        "gender",
        ("Male", "Female"),
        secondary_labeler=normalize_gender,
    )

    phd = result["items"][-1]
    assert phd["counts"]["Male"] == 0
    assert phd["counts"]["Female"] == 0
    assert phd["counts"]["non-binary"] == 1
    assert phd["percentages"]["Male"] == "0.0"


def test_two_level_totals_are_consistent(education_frame):
    result = group_two_level(
        education_frame,
        "education",
        "gender",
        ("Male", "Female"),
        secondary_labeler=normalize_gender,
    )

    for item in result["items"]:
        assert item["total"] == sum(item["counts"].values())
    assert sum(item["total"] for item in result["items"]) == result["total"]


def test_two_level_occupations_collapse_spellings():
    frame = _frame(
        occupation=["Software Engineer", "software-engineer", "Teacher"],
        gender=["male", "female", "female"],
    )

    result = group_two_level(
        frame,
        "occupation",
        "gender",
        ("Male", "Female"),
        primary_labeler=to_camel_case,
        secondary_labeler=normalize_gender,
    )

    assert [item["occupation"] for item in result["items"]] == [
        "softwareEngineer",
        "teacher",
    ]
    assert result["items"][0]["counts"] == {"Male": 1, "Female": 1}


def test_two_level_empty_input():
    result = group_two_level(_frame(a=[], b=[]), "a", "b", ("Male", "Female"))

    assert result == {"items": [], "total": 0}


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


def _occupation_hierarchy(frame):
    return partition_hierarchy(
        frame,
        "occupation",
        "gender",
        ("Male", "Female"),
        root_name="Survey Respondents",
        primary_labeler=to_camel_case,
        secondary_labeler=normalize_gender,
    )


def test_hierarchy_nests_occupations_under_gender():
    frame = _frame(
        occupation=["Software Engineer", "software-engineer", "Teacher", "teacher", "Student", "Student"],
        gender=["male", "male", "female", "male", "female", "female"],
    )

    root = _occupation_hierarchy(frame)

    assert root["name"] == "Survey Respondents"
    assert root["value"] == 6
    male, female = root["children"]
    assert (male["name"], male["value"], male["percentage"]) == ("Male", 3, "50.0")
    assert [(c["name"], c["value"]) for c in male["children"]] == [
        ("softwareEngineer", 2),
        ("teacher", 1),
    ]
    assert male["children"][1]["percentage"] == "16.7"
    assert [(c["name"], c["value"]) for c in female["children"]] == [
        ("student", 2),
        ("teacher", 1),
    ]


def test_hierarchy_skips_genders_without_rows():
    frame = _frame(occupation=["Teacher", "Nurse"], gender=["female", "female"])

    root = _occupation_hierarchy(frame)

    assert [child["name"] for child in root["children"]] == ["Female"]


def test_hierarchy_empty_input():
    root = _occupation_hierarchy(_frame(occupation=[], gender=[]))

    assert root == {"name": "Survey Respondents", "value": 0, "children": []}


# ---------------------------------------------------------------------------
# Binned numeric summarizer
# ---------------------------------------------------------------------------


def test_bin_edges_end_exactly_at_max():
    edges = bin_edges(0.0, 1.0, 3)

    assert len(edges) == 4
    assert edges[-1] == 1.0
    assert edges[0] == 0.0


def test_boundary_values_belong_to_both_adjacent_bins():
    frame = _frame(
        minute_per_day=[0, 10, 20, 30, 40, 50],
        share_per_week=[100, 101, 102, 103, 104, 105],
    )

    result = summarize_bins(frame, "minute_per_day", "share_per_week", 5)

    assert bin_edges(0.0, 50.0, 5) == [0, 10, 20, 30, 40, 50]
    labels = [group["label"] for group in result["groups"]]
    assert labels == ["0-10 min", "10-20 min", "20-30 min", "30-40 min", "40-50 min"]
    by_label = {group["label"]: group for group in result["groups"]}
    # the row at minute 20 shares 102 per week
    assert 102.0 in by_label["10-20 min"]["values"]
    assert 102.0 in by_label["20-30 min"]["values"]
    assert sum(group["count"] for group in result["groups"]) == 10
    assert result["total"] == 6


def test_bins_cover_every_row(survey_frame):
    cleaned = clean_rows(
        survey_frame,
        ["minute_per_day", "share_per_week"],
        numeric_fields=["minute_per_day", "share_per_week"],
    )

    result = summarize_bins(cleaned, "minute_per_day", "share_per_week")

    for minutes in cleaned["minute_per_day"].astype(float):
        assert any(low <= minutes <= high for low, high in (g["range"] for g in result["groups"]))


def test_empty_bins_are_omitted():
    frame = _frame(minute_per_day=[0, 1, 100], share_per_week=[1, 2, 3])

    result = summarize_bins(frame, "minute_per_day", "share_per_week", 5)

    assert [group["group"] for group in result["groups"]] == [1, 5]
    assert result["groups"][1]["label"] == "80-100 min"


def test_zero_width_range_fills_every_bin():
    frame = _frame(minute_per_day=[5, 5], share_per_week=[1, 2])

    result = summarize_bins(frame, "minute_per_day", "share_per_week", 5)

    assert len(result["groups"]) == 5
    assert {group["label"] for group in result["groups"]} == {"5-5 min"}
    assert all(group["count"] == 2 for group in result["groups"])


def test_bin_labels_round_bounds():
    frame = _frame(minute_per_day=[2.4, 14.5], share_per_week=[1, 2])

    result = summarize_bins(frame, "minute_per_day", "share_per_week", 1)

    assert result["groups"][0]["label"] == "2-15 min"


def test_bin_count_must_be_positive():
    frame = _frame(minute_per_day=[1], share_per_week=[1])

    with pytest.raises(ValueError):
        summarize_bins(frame, "minute_per_day", "share_per_week", 0)


def test_summarize_bins_empty_input():
    result = summarize_bins(_frame(minute_per_day=[], share_per_week=[]), "minute_per_day", "share_per_week")

    assert result == {"groups": [], "total": 0}


def test_quartiles_interpolate_linearly():
    summary = five_number_summary(pd.Series([4.0, 1.0, 3.0, 2.0]))

    assert summary["quartiles"] == {
        "min": 1.0,
        "q1": 1.75,
        "median": 2.5,
        "q3": 3.25,
        "max": 4.0,
    }
    assert summary["outliers"] == []


def test_outliers_are_fenced_out_of_whiskers():
    summary = five_number_summary(pd.Series([100.0, 1.0, 3.0, 2.0, 4.0]))

    assert summary["quartiles"] == {
        "min": 1.0,
        "q1": 2.0,
        "median": 3.0,
        "q3": 4.0,
        "max": 4.0,
    }
    assert summary["outliers"] == [100.0]


def test_single_value_summary():
    summary = five_number_summary(pd.Series([5.0]))

    assert set(summary["quartiles"].values()) == {5.0}
    assert summary["outliers"] == []


@pytest.mark.parametrize(
    "values",
    [
        [0, 0, 0, 100],
        [1, 2, 3, 4, 100],
        [-50, 1, 2, 3, 4],
        [7],
        [3, 3, 3, 3],
    ],
)
def test_quartiles_are_monotonic(values):
    q = five_number_summary(pd.Series([float(v) for v in values]))["quartiles"]

    assert q["min"] <= q["q1"] <= q["median"] <= q["q3"] <= q["max"]


# ---------------------------------------------------------------------------
# Category metric averager
# ---------------------------------------------------------------------------


@pytest.fixture
def radar_frame():
    return _frame(
        political_view=["Moderate", "Liberal", "Liberal"],
        importance=[3, 4, 5],
        trust=[3, 3, 4],
        level=[3, 5, 4],
    )


def test_metric_averages_follow_field_order(radar_frame):
    result = average_metrics(
        radar_frame,
        "political_view",
        ["importance", "trust", "level"],
        axis_labels=["Importance", "Trust", "Level"],
    )

    assert result["total"] == 3
    liberal, moderate = result["items"]
    assert liberal["political_view"] == "Liberal"
    assert liberal["count"] == 2
    assert [m["axis"] for m in liberal["metrics"]] == ["Importance", "Trust", "Level"]
    assert [m["value"] for m in liberal["metrics"]] == pytest.approx([4.5, 3.5, 4.5])
    assert moderate["count"] == 1
    assert [m["value"] for m in moderate["metrics"]] == pytest.approx([3.0, 3.0, 3.0])


def test_metric_axes_default_to_field_names(radar_frame):
    result = average_metrics(radar_frame, "political_view", ["trust"])

    assert result["items"][0]["metrics"][0]["axis"] == "trust"


def test_axis_labels_must_match_fields(radar_frame):
    with pytest.raises(ValueError):
        average_metrics(radar_frame, "political_view", ["trust", "level"], axis_labels=["Trust"])


def test_metric_averages_empty_input():
    frame = _frame(political_view=[], trust=[])

    assert average_metrics(frame, "political_view", ["trust"]) == {"items": [], "total": 0}
