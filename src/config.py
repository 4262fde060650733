"""
config.py

Project-wide settings for the Seoul bike-rental modeling pipeline:
paths, data source, reproducibility seed, column groups and the recipe
chosen for each model family.
"""

from pathlib import Path

# --- Directory Structure ---
PROJECT_ROOT = Path(__file__).resolve().parent.parent
RAW_SUBDIR = 'data/raw'
PROCESSED_SUBDIR = 'data/processed'
LOGS_SUBDIR = 'outputs/logs'
FIGURES_SUBDIR = 'outputs/figures'

# --- Data Source ---
DATA_URL = 'https://archive.ics.uci.edu/ml/machine-learning-databases/00560/SeoulBikeData.csv'
RAW_FILENAME = 'SeoulBikeData.csv'
DAILY_FILENAME = 'SeoulBike-Daily.csv'

# --- Reproducibility ---
RANDOM_SEED = 1234
TRAIN_PROP = 0.75
CV_FOLDS = 10
# Parallel jobs for the grid search (None = sequential)
N_JOBS = None

# --- Columns ---
DATE_COL = 'date'
TARGET = 'rented_bike_count'
HOUR_COL = 'hour'
SEASON_COL = 'seasons'
HOLIDAY_COL = 'holiday'
FUNCTIONING_COL = 'functioning_day'
CLOSED_VALUE = 'No'

NUMERIC_COLUMNS = [
    'rented_bike_count', 'hour', 'temperature', 'humidity', 'wind_speed',
    'visibility', 'dew_point_temperature', 'solar_radiation',
    'rainfall', 'snowfall',
]
CATEGORICAL_COLUMNS = ['seasons', 'holiday', 'functioning_day']
REQUIRED_COLUMNS = [DATE_COL] + NUMERIC_COLUMNS + CATEGORICAL_COLUMNS

# Summed when reducing hours to days; every other weather field is averaged
SUM_COLUMNS = ['rented_bike_count', 'rainfall', 'snowfall']
DAILY_GROUP_KEYS = [DATE_COL, SEASON_COL, HOLIDAY_COL]

# --- Recipes ---
RECIPE_DROP_COLUMNS = [DATE_COL, HOUR_COL, FUNCTIONING_COL]
INTERACTION_PAIRS = [
    ('seasons', 'holiday'),
    ('seasons', 'temperature'),
    ('temperature', 'rainfall'),
]

# Recipe variant used for each model family (trees do not need explicit
# interaction or polynomial terms)
FAMILY_RECIPES = {
    'linear': 'polynomial',
    'lasso': 'polynomial',
    'decision_tree': 'basic',
    'bagged_tree': 'basic',
    'random_forest': 'basic',
}
