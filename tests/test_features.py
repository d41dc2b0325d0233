import pytest

from footyexport.config import TARGET_COLUMN
from footyexport.data.schema import Dataset
from footyexport.features.feature_builder import (
    FeatureConfig,
    build_feature_rows,
    build_league_table,
    last_completed_round,
)


def _by_home(rows):
    return {row["team_h"]: row for row in rows}


def test_last_completed_round(dataset):
    assert last_completed_round(dataset.rounds) == 3
    assert last_completed_round(dataset.rounds[3:]) == 0
    assert last_completed_round(()) == 0


def test_build_feature_rows_splits_training_and_test(dataset):
    rows = build_feature_rows(dataset, {}, {}, 3, FeatureConfig(min_matches=1, verbose=True))

    assert len(rows.training_rows) == 4
    assert len(rows.test_rows) == 2
    assert {r["round"] for r in rows.training_rows} == {2, 3}
    assert {r["round"] for r in rows.test_rows} == {4}

    # One schema for both row-sets
    assert list(rows.training_rows[0].keys()) == rows.columns
    assert list(rows.test_rows[0].keys()) == rows.columns
    assert rows.columns[-1] == TARGET_COLUMN


def test_features_only_use_earlier_matches(dataset):
    rows = build_feature_rows(dataset, {}, {}, 3, FeatureConfig(min_matches=2, verbose=True))

    row = _by_home(rows.training_rows)["AAA"]
    assert row["team_a"] == "CCC"
    assert row["team_h_matches_played"] == 2
    assert row["team_h_form_last_3"] == pytest.approx(3.0)
    assert row["team_a_form_last_3"] == pytest.approx(1.0)
    assert row["form_delta_last_3"] == pytest.approx(2.0)
    assert row["team_h_goal_diff_last_3"] == pytest.approx(2.0)
    assert row["team_h_points_total"] == pytest.approx(6.0)
    assert row["team_h_position"] == 1
    assert row["team_a_position"] == 2
    assert row["position_delta"] == -1
    assert row[TARGET_COLUMN] == "home_win"


def test_test_rows_have_no_result(dataset):
    rows = build_feature_rows(dataset, {}, {}, 3, FeatureConfig(min_matches=1, verbose=True))
    assert all(r[TARGET_COLUMN] is None for r in rows.test_rows)
    assert _by_home(rows.test_rows)["CCC"]["team_a"] == "AAA"


def test_complete_adds_all_unplayed_rounds(dataset):
    standard = build_feature_rows(dataset, {}, {}, 2, FeatureConfig(min_matches=1))
    complete = build_feature_rows(dataset, {}, {}, 2, FeatureConfig(min_matches=1, complete=True))

    assert len(standard.test_rows) == 2
    assert len(complete.test_rows) == 4


def test_verbose_columns_are_optional(dataset):
    rows = build_feature_rows(dataset, {}, {}, 3, FeatureConfig(min_matches=1))
    assert "team_h" not in rows.columns
    assert "round" not in rows.columns


def test_exclude_drops_columns(dataset):
    config = FeatureConfig(min_matches=1, exclude=("form_delta_last_3", "not_a_column"))
    rows = build_feature_rows(dataset, {}, {}, 3, config)

    assert "form_delta_last_3" not in rows.columns
    assert "form_delta_last_5" in rows.columns
    assert "form_delta_last_3" not in rows.training_rows[0]


def test_club_meta_adds_columns_and_tolerates_missing_clubs(dataset):
    meta = {"AAA": {"market_value": 100.0}, "BBB": {"market_value": 40.0}}
    rows = build_feature_rows(dataset, meta, {}, 3, FeatureConfig(min_matches=1, verbose=True))

    assert "market_value_delta" in rows.columns
    aaa = _by_home(rows.training_rows)["AAA"]
    assert aaa["team_h_market_value"] == pytest.approx(100.0)
    assert aaa["team_a_market_value"] is None


def test_round_meta_names_rounds(dataset):
    round_meta = {4: {"round_name": "Matchday 4"}}
    rows = build_feature_rows(dataset, {}, round_meta, 3, FeatureConfig(min_matches=1, verbose=True))
    assert {r["round_name"] for r in rows.test_rows} == {"Matchday 4"}


def test_empty_season_yields_empty_row_sets(season, dataset):
    empty = Dataset(season=season, clubs=dataset.clubs, rounds=())
    rows = build_feature_rows(empty, {}, {}, 0, FeatureConfig())
    assert rows.training_rows == []
    assert rows.test_rows == []


def test_league_table_after_round(dataset):
    table = build_league_table(dataset, 3)

    assert list(table["code"]) == ["AAA", "BBB", "CCC", "DDD"]
    assert list(table["points"]) == [9, 2, 2, 2]
    assert list(table["position"]) == [1, 2, 3, 4]
    aaa = table.iloc[0]
    assert (aaa["won"], aaa["goals_for"], aaa["goals_against"]) == (3, 6, 1)


def test_league_table_before_first_round(dataset):
    table = build_league_table(dataset, 0)
    assert table["points"].sum() == 0
    assert len(table) == 4
