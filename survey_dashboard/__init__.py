"""survey_dashboard package initializer.

This package contains the aggregation library behind the survey
dashboard.  Modules include row cleaning, the shared aggregation
functions, per-chart dataset builders, data loading and plotting
helpers.  See individual module docstrings for details.
"""
