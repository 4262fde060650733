"""
time_aggregation.py

Aggregates hourly bike-rental records to one row per day:
- Drops hours when the rental system was not operating (Functioning Day = No)
- Groups by date, season and holiday
- Sums rented bike count, rainfall and snowfall
- Averages every other weather covariate

Output:
- SeoulBike-Daily.csv
"""

import logging
from pathlib import Path

import pandas as pd

from src import config


class DailyAggregator:
    def __init__(self, project_root: Path):
        self.project_root = project_root
        self.proc_dir = project_root / config.PROCESSED_SUBDIR
        # Days removed because none of their hours were operating
        self.last_dropped_days = []

    def filter_operating(self, df: pd.DataFrame) -> pd.DataFrame:
        """Remove hours flagged as non-operating (zero rentals by construction)."""
        closed = df[config.FUNCTIONING_COL] == config.CLOSED_VALUE
        logging.info(f"Removing {int(closed.sum())} non-operating hours")
        return df.loc[~closed]

    def aggregate(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Reduce hourly rows to daily summary rows.

        Args:
            df: Cleaned hourly observations

        Returns:
            pd.DataFrame: One row per (date, seasons, holiday)

        Raises:
            ValueError: If no operating hours remain
        """
        try:
            operating = self.filter_operating(df)
            if operating.empty:
                raise ValueError("No operating hours left after filtering; cannot aggregate")

            all_days = set(df[config.DATE_COL].unique())
            kept_days = set(operating[config.DATE_COL].unique())
            self.last_dropped_days = sorted(all_days - kept_days)
            if self.last_dropped_days:
                logging.warning(f"{len(self.last_dropped_days)} day(s) had no operating hours "
                                f"and are absent from the daily table")

            excluded = set(config.DAILY_GROUP_KEYS) | {config.HOUR_COL, config.FUNCTIONING_COL}
            numeric_cols = [c for c in operating.select_dtypes(include='number').columns
                            if c not in excluded]
            agg_spec = {c: ('sum' if c in config.SUM_COLUMNS else 'mean') for c in numeric_cols}

            daily = (operating
                     .groupby(config.DAILY_GROUP_KEYS, as_index=False, sort=True)
                     .agg(agg_spec))
            daily = daily.sort_values(config.DATE_COL).reset_index(drop=True)

            logging.info(f"Aggregated {len(operating)} hourly rows into {len(daily)} daily rows")
            return daily

        except Exception as e:
            logging.error(f"Error in daily aggregation: {str(e)}")
            raise

    def save(self, daily: pd.DataFrame) -> Path:
        self.proc_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.proc_dir / config.DAILY_FILENAME
        daily.to_csv(output_path, index=False)
        logging.info(f"Saved: {output_path}")
        return output_path
