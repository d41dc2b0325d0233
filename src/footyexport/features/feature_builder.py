# path: src/footyexport/features/feature_builder.py
"""
Feature engineering utilities for FootyExport.

This module transforms a season dataset into per-match rows:

- Builds a club-centric long-format view with one row per club per match.
- Computes rolling "recent form" features for each club based on its
  previous matches only (no leakage of the current result).
- Tracks points and table position before each match.
- Merges home and away features back into one row per match, adds deltas,
  optional club metadata and the outcome label.
- Splits the rows into training data (played rounds) and test data (the
  round to predict).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from footyexport.config import FORM_WINDOWS, MIN_MATCHES, TARGET_COLUMN
from footyexport.data.schema import Dataset, Round
from footyexport.utils.logging_utils import get_logger

logger = get_logger(__name__)

Row = Dict[str, Any]

VERBOSE_COLUMNS = ["round", "round_name", "date", "team_h", "team_a"]


@dataclass
class FeatureConfig:
    """Configuration for feature engineering."""

    min_matches: int = MIN_MATCHES
    form_windows: Tuple[int, ...] = FORM_WINDOWS
    exclude: Sequence[str] = field(default_factory=tuple)
    verbose: bool = False
    complete: bool = False


@dataclass
class FeatureRows:
    """Training and test row-sets sharing one column schema."""

    training_rows: List[Row]
    test_rows: List[Row]
    columns: List[str]


def last_completed_round(rounds: Sequence[Round]) -> int:
    """
    Return the number of leading rounds in which every match is played.

    0 means not even the first round is complete.
    """
    count = 0
    for rnd in rounds:
        if not rnd.is_complete:
            break
        count += 1
    return count


def _matches_frame(dataset: Dataset) -> pd.DataFrame:
    """One row per match with round information and goals (NaN if unplayed)."""
    records = []
    for rnd in dataset.rounds:
        for match in rnd.matches:
            records.append(
                {
                    "match_id": len(records),
                    "round": rnd.number,
                    "round_name": rnd.name,
                    "date": match.date,
                    "team_h": match.home,
                    "team_a": match.away,
                    "goals_h": match.home_goals,
                    "goals_a": match.away_goals,
                    TARGET_COLUMN: match.outcome,
                }
            )

    columns = [
        "match_id", "round", "round_name", "date", "team_h", "team_a",
        "goals_h", "goals_a", TARGET_COLUMN,
    ]
    df = pd.DataFrame.from_records(records, columns=columns)
    df["goals_h"] = pd.to_numeric(df["goals_h"], errors="coerce").astype(float)
    df["goals_a"] = pd.to_numeric(df["goals_a"], errors="coerce").astype(float)
    return df


def _build_long_club_view(df_matches: pd.DataFrame) -> pd.DataFrame:
    """
    Construct a long-format DataFrame with one row per club per match.

    Columns: match_id, round, club, is_home, goals_for, goals_against,
    played, points (3/1/0, NaN if unplayed).
    """
    df_home = df_matches[["match_id", "round", "team_h", "goals_h", "goals_a"]].rename(
        columns={"team_h": "club", "goals_h": "goals_for", "goals_a": "goals_against"}
    )
    df_home["is_home"] = 1

    df_away = df_matches[["match_id", "round", "team_a", "goals_a", "goals_h"]].rename(
        columns={"team_a": "club", "goals_a": "goals_for", "goals_h": "goals_against"}
    )
    df_away["is_home"] = 0

    df_long = pd.concat([df_home, df_away], ignore_index=True)
    df_long["played"] = df_long["goals_for"].notna() & df_long["goals_against"].notna()

    diff = df_long["goals_for"] - df_long["goals_against"]
    df_long["goal_diff"] = diff
    df_long["points"] = np.select([diff > 0, diff == 0, diff < 0], [3.0, 1.0, 0.0], np.nan)

    return df_long


def _compute_rolling_features(
    df_long: pd.DataFrame,
    config: FeatureConfig,
) -> pd.DataFrame:
    """
    Compute per-club features from earlier matches.

    shift(1) before rolling/cumsum ensures only matches that occurred BEFORE
    the current one contribute.
    """
    df = df_long.sort_values(["club", "round", "match_id"]).copy()
    group = df.groupby("club", sort=False)

    df["matches_played"] = group["played"].transform(
        lambda s: s.astype(int).shift(1, fill_value=0).cumsum()
    )
    df["points_total"] = group["points"].transform(
        lambda s: s.fillna(0.0).shift(1, fill_value=0.0).cumsum()
    )
    df["goal_diff_total"] = group["goal_diff"].transform(
        lambda s: s.fillna(0.0).shift(1, fill_value=0.0).cumsum()
    )

    for window in config.form_windows:
        df[f"form_last_{window}"] = group["points"].transform(
            lambda s, w=window: s.shift(1).rolling(window=w, min_periods=1).mean()
        )
        df[f"goal_diff_last_{window}"] = group["goal_diff"].transform(
            lambda s, w=window: s.shift(1).rolling(window=w, min_periods=1).mean()
        )

    # Table position before the round, ties broken by goal difference
    ranking = df["points_total"] * 1000 + df["goal_diff_total"]
    df["position"] = ranking.groupby(df["round"]).rank(ascending=False, method="min")

    return df


def _club_stats(config: FeatureConfig) -> List[str]:
    stats = ["matches_played"]
    for window in config.form_windows:
        stats += [f"form_last_{window}", f"goal_diff_last_{window}"]
    return stats + ["points_total", "position"]


def _add_club_meta(
    df: pd.DataFrame,
    club_meta: Mapping[str, Mapping[str, Any]],
) -> List[str]:
    """Add team_h_/team_a_/delta columns for numeric club metadata fields."""
    fields = sorted({k for values in club_meta.values() for k in values})
    added: List[str] = []
    for name in fields:
        lookup = {
            code: values.get(name)
            for code, values in club_meta.items()
            if isinstance(values.get(name), (int, float))
        }
        if not lookup:
            continue
        df[f"team_h_{name}"] = df["team_h"].map(lookup).astype(float)
        df[f"team_a_{name}"] = df["team_a"].map(lookup).astype(float)
        df[f"{name}_delta"] = df[f"team_h_{name}"] - df[f"team_a_{name}"]
        added += [f"team_h_{name}", f"team_a_{name}", f"{name}_delta"]
    return added


def build_league_table(dataset: Dataset, upto_round: int) -> pd.DataFrame:
    """
    Build the league table after the given round.

    Parameters
    ----------
    dataset : Dataset
        Season dataset.
    upto_round : int
        Last round (inclusive) whose played matches are counted.

    Returns
    -------
    pandas.DataFrame
        position, code, name, played, won, drawn, lost, goals_for,
        goals_against, goal_diff, points, sorted by points, goal difference
        and goals scored.
    """
    table = {
        club.code: {
            "code": club.code, "name": club.name, "played": 0, "won": 0,
            "drawn": 0, "lost": 0, "goals_for": 0, "goals_against": 0,
        }
        for club in dataset.clubs
    }

    for rnd in dataset.rounds[:max(upto_round, 0)]:
        for match in rnd.matches:
            if not match.is_played:
                continue
            for code, scored, conceded in (
                (match.home, match.home_goals, match.away_goals),
                (match.away, match.away_goals, match.home_goals),
            ):
                entry = table[code]
                entry["played"] += 1
                entry["goals_for"] += scored
                entry["goals_against"] += conceded
                if scored > conceded:
                    entry["won"] += 1
                elif scored == conceded:
                    entry["drawn"] += 1
                else:
                    entry["lost"] += 1

    df = pd.DataFrame(list(table.values()))
    if df.empty:
        return df

    df["goal_diff"] = df["goals_for"] - df["goals_against"]
    df["points"] = df["won"] * 3 + df["drawn"]
    df = df.sort_values(
        ["points", "goal_diff", "goals_for", "code"],
        ascending=[False, False, False, True],
    ).reset_index(drop=True)
    df.insert(0, "position", np.arange(1, len(df) + 1))
    return df


def _to_rows(df: pd.DataFrame, columns: List[str]) -> List[Row]:
    subset = df[columns].astype(object).where(df[columns].notna(), None)
    return subset.to_dict(orient="records")


def build_feature_rows(
    dataset: Dataset,
    club_meta: Mapping[str, Mapping[str, Any]] | None,
    round_meta: Mapping[int, Mapping[str, Any]] | None,
    last_played_round: int,
    config: FeatureConfig | None = None,
) -> FeatureRows:
    """
    Build training and test rows from a season dataset.

    Parameters
    ----------
    dataset : Dataset
        Season dataset (clubs and rounds).
    club_meta : Mapping | None
        Club code -> metadata fields. May be empty.
    round_meta : Mapping | None
        Round number -> metadata. Its 'round_name' overrides the verbose
        round name column.
    last_played_round : int
        Last completely played round (see `last_completed_round`).
    config : FeatureConfig | None
        Feature configuration. If None, uses defaults from config.py.

    Returns
    -------
    FeatureRows
        Training rows: played matches with min_matches < round <= last_played_round.
        Test rows: matches of the next round, or all later matches with
        `complete`.
    """
    if config is None:
        config = FeatureConfig()
    club_meta = club_meta or {}
    round_meta = round_meta or {}

    logger.info(
        "Building match features with windows=%s, min_matches=%d",
        list(config.form_windows),
        config.min_matches,
    )

    df_matches = _matches_frame(dataset)
    stats = _club_stats(config)

    if df_matches.empty:
        logger.warning("Dataset %s has no matches.", dataset.season.dataset_key)
        merged = df_matches
        for prefix in ("team_h_", "team_a_"):
            for stat in stats:
                merged[f"{prefix}{stat}"] = pd.Series(dtype=float)
    else:
        df_long = _compute_rolling_features(_build_long_club_view(df_matches), config)
        home = df_long[df_long["is_home"] == 1][["match_id"] + stats].add_prefix("team_h_")
        away = df_long[df_long["is_home"] == 0][["match_id"] + stats].add_prefix("team_a_")
        home = home.rename(columns={"team_h_match_id": "match_id"})
        away = away.rename(columns={"team_a_match_id": "match_id"})
        merged = (
            df_matches.merge(home, on="match_id", how="left")
            .merge(away, on="match_id", how="left")
            .sort_values("match_id")
            .reset_index(drop=True)
        )

    delta_columns = []
    for window in config.form_windows:
        merged[f"form_delta_last_{window}"] = (
            merged[f"team_h_form_last_{window}"] - merged[f"team_a_form_last_{window}"]
        )
        merged[f"goal_diff_delta_last_{window}"] = (
            merged[f"team_h_goal_diff_last_{window}"]
            - merged[f"team_a_goal_diff_last_{window}"]
        )
        delta_columns += [f"form_delta_last_{window}", f"goal_diff_delta_last_{window}"]
    merged["points_delta"] = merged["team_h_points_total"] - merged["team_a_points_total"]
    merged["position_delta"] = merged["team_h_position"] - merged["team_a_position"]
    delta_columns += ["points_delta", "position_delta"]

    meta_columns = _add_club_meta(merged, club_meta)

    names = {n: m["round_name"] for n, m in round_meta.items() if m.get("round_name")}
    if names:
        merged["round_name"] = merged["round"].map(names).fillna(merged["round_name"])

    columns = (
        ([*VERBOSE_COLUMNS] if config.verbose else [])
        + [f"team_h_{s}" for s in stats]
        + [f"team_a_{s}" for s in stats]
        + delta_columns
        + meta_columns
        + [TARGET_COLUMN]
    )

    unknown = [c for c in config.exclude if c not in columns]
    if unknown:
        logger.warning("Ignoring unknown excluded attributes: %s", unknown)
    columns = [c for c in columns if c not in set(config.exclude)]

    played = merged[TARGET_COLUMN].notna()
    in_training = (merged["round"] > config.min_matches) & (
        merged["round"] <= last_played_round
    )
    if config.complete:
        in_test = merged["round"] > last_played_round
    else:
        in_test = merged["round"] == last_played_round + 1

    training_rows = _to_rows(merged[played & in_training], columns)
    test_rows = _to_rows(merged[in_test], columns)

    logger.info(
        "Built %d training rows and %d test rows with %d columns (out of %d matches).",
        len(training_rows),
        len(test_rows),
        len(columns),
        len(merged),
    )

    return FeatureRows(training_rows=training_rows, test_rows=test_rows, columns=columns)
