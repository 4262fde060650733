"""
data_loader.py

Fetches the Seoul bike-sharing hourly dataset and normalizes it:
- Snake-case column names without unit suffixes
- Day-first date parsing
- Numeric casting of counts and weather covariates
- Stripped categorical flags (Seasons, Holiday, Functioning Day)

Input:
- SeoulBikeData.csv (remote, cached to data/raw/)

Output:
- Cleaned hourly DataFrame
"""

import re
import logging
from pathlib import Path

import pandas as pd

from src import config


class BikeDataLoader:
    def __init__(self, project_root: Path, url: str = config.DATA_URL):
        """Initialize the BikeDataLoader."""
        self.project_root = project_root
        self.url = url
        self.raw_dir = project_root / config.RAW_SUBDIR
        self.cache_file = self.raw_dir / config.RAW_FILENAME

    def fetch(self) -> pd.DataFrame:
        """
        Read the raw CSV, downloading it once and caching it locally.

        Returns:
            pd.DataFrame: Raw table with the original column headers
        """
        if self.cache_file.exists():
            logging.info(f"Reading cached dataset from {self.cache_file}")
            return pd.read_csv(self.cache_file)

        logging.info(f"Downloading dataset from {self.url}")
        try:
            try:
                df = pd.read_csv(self.url, encoding='utf-8')
            except UnicodeDecodeError:
                logging.info("UTF-8 decoding failed; retrying with latin1")
                df = pd.read_csv(self.url, encoding='latin1')
        except Exception as e:
            logging.error(f"Error fetching dataset from {self.url}: {str(e)}")
            raise

        self.raw_dir.mkdir(parents=True, exist_ok=True)
        df.to_csv(self.cache_file, index=False)
        logging.info(f"Cached raw dataset to {self.cache_file}")
        return df

    @staticmethod
    def normalize_column(name: str) -> str:
        """'Temperature(°C)' -> 'temperature', 'Wind speed (m/s)' -> 'wind_speed'."""
        name = re.sub(r'\(.*?\)', '', str(name))
        name = re.sub(r'[^0-9a-zA-Z]+', '_', name.strip())
        return name.strip('_').lower()

    def normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df.columns = [self.normalize_column(c) for c in df.columns]
        return df

    def clean(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Validate the schema and cast columns to their expected types.

        Args:
            df: Table with normalized column names

        Returns:
            pd.DataFrame: Cleaned hourly observations

        Raises:
            ValueError: If columns are missing or values cannot be parsed
        """
        missing = [c for c in config.REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Missing required columns: {missing}")
        if df.empty:
            raise ValueError("Dataset contains no rows")

        df = df[config.REQUIRED_COLUMNS].copy()

        if not pd.api.types.is_datetime64_any_dtype(df[config.DATE_COL]):
            parsed = pd.to_datetime(df[config.DATE_COL], format='%d/%m/%Y', errors='coerce')
            bad = df.loc[parsed.isna(), config.DATE_COL]
            if not bad.empty:
                raise ValueError(f"Unparseable dates, e.g. {bad.iloc[0]!r}")
            df[config.DATE_COL] = parsed

        for col in config.NUMERIC_COLUMNS:
            converted = pd.to_numeric(df[col], errors='coerce')
            if converted.isna().any():
                raise ValueError(f"Non-numeric or missing values in column '{col}'")
            df[col] = converted.astype(float)

        for col in config.CATEGORICAL_COLUMNS:
            df[col] = df[col].astype(str).str.strip()

        return df.sort_values([config.DATE_COL, config.HOUR_COL]).reset_index(drop=True)

    def load(self) -> pd.DataFrame:
        """Fetch, normalize and clean the hourly dataset."""
        try:
            df = self.normalize_columns(self.fetch())
            df = self.clean(df)
            logging.info(f"Loaded {len(df)} hourly rows spanning "
                         f"{df[config.DATE_COL].min():%Y-%m-%d} to {df[config.DATE_COL].max():%Y-%m-%d}")
            return df
        except Exception as e:
            logging.error(f"Error loading dataset: {str(e)}")
            raise
