import pandas as pd
import pytest

COLUMNS = [
    "gender",
    "education_qualifications",
    "current_occupation",
    "political_view",
    "minute_per_day",
    "share_per_week",
    "verification_importance",
    "trustworthiness",
    "verification_level",
]

# One tuple per respondent, in COLUMNS order
RESPONSES = [
    ("male", "BSc", "Software Engineer", "Liberal", "120", "3", "4.5", "4", "4"),
    ("female", "MSc", "Teacher", "Moderate", "45", "1", "5", "4", "5"),
    ("male", "BSc", "software-engineer", "Liberal", "90", "2", "4", "4", "4"),
    ("female", "BSc", "Student", "Conservative", "240", "10", "4", "3", "4"),
    ("female", "", "Student", "Moderate", "30", "0", "5", "5", "5"),
    ("male", "MSc", "Teacher", "  ", "60", "abc", "4", "4", "4"),
    ("", "PhD", "Researcher", "Liberal", "20", "1", "5", "4", "5"),
]


@pytest.fixture
def survey_rows():
    return [dict(zip(COLUMNS, response)) for response in RESPONSES]


@pytest.fixture
def survey_frame(survey_rows):
    return pd.DataFrame(survey_rows, columns=COLUMNS)
