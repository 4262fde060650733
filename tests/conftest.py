import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

from src.preprocessing.time_aggregation import DailyAggregator

SEASONS = ['Winter', 'Spring', 'Summer', 'Autumn']
SEASON_BASE_TEMP = {'Winter': -3.0, 'Spring': 12.0, 'Summer': 26.0, 'Autumn': 14.0}


def make_hourly(n_days: int = 120, seed: int = 0, closed_days=(7,)) -> pd.DataFrame:
    """Synthetic hourly table shaped like the cleaned Seoul dataset."""
    rng = np.random.default_rng(seed)
    rows = []
    start = pd.Timestamp('2018-01-01')
    for day in range(n_days):
        season = SEASONS[(day // 30) % 4]
        holiday = 'Holiday' if day % 10 == 3 else 'No Holiday'
        day_temp = SEASON_BASE_TEMP[season] + rng.normal(0, 3)
        rainy = rng.random() < 0.2
        cloud_cover = rng.uniform(0.3, 1.0)
        for hour in range(24):
            temp = day_temp + 4 * np.sin((hour - 9) / 24 * 2 * np.pi)
            rain = float(rng.exponential(2.0)) if rainy and rng.random() < 0.5 else 0.0
            snow = float(rng.exponential(0.5)) if season == 'Winter' and rng.random() < 0.1 else 0.0
            closed = day in closed_days
            count = 0.0 if closed else max(
                0.0, round(300 + 25 * temp + 150 * np.sin(hour / 24 * np.pi)
                           - 60 * rain - (100 if holiday == 'Holiday' else 0)
                           + rng.normal(0, 30)))
            rows.append({
                'date': start + pd.Timedelta(days=day),
                'rented_bike_count': float(count),
                'hour': float(hour),
                'temperature': temp,
                'humidity': float(rng.uniform(20, 95)),
                'wind_speed': float(rng.uniform(0, 5)),
                'visibility': float(rng.uniform(300, 2000)),
                'dew_point_temperature': temp - rng.uniform(2, 10),
                'solar_radiation': cloud_cover * max(0.0, float(np.sin((hour - 6) / 12 * np.pi))),
                'rainfall': rain,
                'snowfall': snow,
                'seasons': season,
                'holiday': holiday,
                'functioning_day': 'No' if closed else 'Yes',
            })
    return pd.DataFrame(rows)


@pytest.fixture
def hourly_df():
    return make_hourly()


@pytest.fixture
def daily_df(hourly_df, tmp_path):
    return DailyAggregator(tmp_path).aggregate(hourly_df)
