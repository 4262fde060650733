import numpy as np
import pandas as pd
import pytest
from sklearn.model_selection import ParameterGrid

from src.models.model_families import ModelFamily
from src.models.train_model import ModelTrainer, ModelTrainingError
from src.preprocessing.feature_engineering import RecipeVariant
from src.preprocessing.splitter import DataSplitter

SMALL_GRIDS = {
    ModelFamily.LASSO: {'model__alpha': [0.1, 10.0]},
    ModelFamily.DECISION_TREE: {'model__max_depth': [3, None]},
    ModelFamily.BAGGED_TREE: {'model__n_estimators': [10]},
    ModelFamily.RANDOM_FOREST: {'model__n_estimators': [25], 'model__min_samples_leaf': [1, 5]},
}


@pytest.fixture
def resampled(daily_df):
    splitter = DataSplitter(seed=5)
    split = splitter.split(daily_df)
    return split, splitter.folds(split.train, k=3)


@pytest.fixture
def trainer(tmp_path):
    return ModelTrainer(tmp_path, seed=5, param_grids=SMALL_GRIDS)


def test_every_family_builds_and_has_a_grid():
    for family in ModelFamily:
        assert family.build_estimator(seed=1) is not None
        assert isinstance(family.param_grid(), dict)
        assert isinstance(family.default_recipe, RecipeVariant)
    assert ModelFamily.LINEAR.param_grid() == {}


@pytest.mark.parametrize('family', list(ModelFamily))
def test_default_grid_keys_match_pipeline(tmp_path, family):
    trainer = ModelTrainer(tmp_path)
    pipeline = trainer.make_pipeline(family, family.default_recipe)

    for params in ParameterGrid(family.param_grid()):
        pipeline.set_params(**params)
        for name, value in params.items():
            assert pipeline.get_params()[name] == value


def test_untuned_family_is_cross_validated(trainer, resampled):
    split, folds = resampled
    result = trainer.tune(ModelFamily.LINEAR, 'basic', split, folds)

    assert len(result.table) == 1
    assert result.best_params == {}
    assert result.best_candidate == 0
    assert np.isfinite(result.best_rmse) and result.best_rmse > 0
    assert result.best_mae <= result.best_rmse


def test_candidate_table_statistics(trainer, resampled):
    split, folds = resampled
    result = trainer.tune(ModelFamily.LASSO, 'interactions', split, folds)
    table = result.table

    assert list(table['candidate']) == [0, 1]
    assert not table['failed'].any()
    assert (table['std_err_rmse'] >= 0).all()
    assert result.best_rmse == pytest.approx(table['mean_rmse'].min())
    assert result.best_params == table.loc[table['mean_rmse'].idxmin(), 'params']


def test_failed_candidate_is_excluded(tmp_path, resampled):
    split, folds = resampled
    trainer = ModelTrainer(tmp_path, param_grids={ModelFamily.LASSO: {'model__alpha': [-1.0, 1.0]}})

    result = trainer.tune(ModelFamily.LASSO, 'basic', split, folds)

    assert result.n_failed == 1
    assert bool(result.table.loc[0, 'failed'])
    assert np.isnan(result.table.loc[0, 'mean_rmse'])
    assert result.best_params == {'model__alpha': 1.0}


def test_all_candidates_failing_raises(tmp_path, resampled):
    split, folds = resampled
    trainer = ModelTrainer(tmp_path, param_grids={ModelFamily.LASSO: {'model__alpha': [-1.0, -2.0]}})

    with pytest.raises(ModelTrainingError):
        trainer.tune(ModelFamily.LASSO, 'basic', split, folds)


def test_ties_go_to_first_candidate(tmp_path, resampled):
    split, folds = resampled
    # Both depths grow the same fully-grown tree
    trainer = ModelTrainer(tmp_path, param_grids={ModelFamily.DECISION_TREE: {'model__max_depth': [None, 1000]}})

    result = trainer.tune(ModelFamily.DECISION_TREE, 'basic', split, folds)

    assert result.table.loc[0, 'mean_rmse'] == result.table.loc[1, 'mean_rmse']
    assert result.best_candidate == 0
    assert result.best_params == {'model__max_depth': None}


def test_fit_final_scores_test_set_once(trainer, resampled):
    split, folds = resampled
    tuning = trainer.tune(ModelFamily.LASSO, 'polynomial', split, folds)
    fit = trainer.fit_final(tuning, split)

    assert fit.family is ModelFamily.LASSO
    assert fit.params == tuning.best_params
    assert fit.pipeline.named_steps['model'].alpha == tuning.best_params['model__alpha']
    assert fit.predictions.index.equals(split.test.index)

    errors = split.test['rented_bike_count'] - fit.predictions
    assert fit.rmse == pytest.approx(np.sqrt((errors ** 2).mean()))
    assert fit.mae == pytest.approx(errors.abs().mean())


def test_compare_recipes_covers_all_variants(trainer, resampled):
    split, folds = resampled
    comparison, results = trainer.compare_recipes(ModelFamily.LINEAR, split, folds)

    assert sorted(comparison['recipe']) == sorted(v.value for v in RecipeVariant)
    assert comparison['mean_rmse'].is_monotonic_increasing
    assert set(results) == set(RecipeVariant)
    for _, row in comparison.iterrows():
        assert results[RecipeVariant(row['recipe'])].best_rmse == row['mean_rmse']


def test_train_all_reuses_precomputed_tuning(trainer, resampled, monkeypatch):
    split, folds = resampled
    _, results = trainer.compare_recipes(ModelFamily.LINEAR, split, folds)
    linear = results[RecipeVariant.INTERACTIONS]

    tuned_families = []
    original_tune = trainer.tune

    def recording_tune(family, *args, **kwargs):
        tuned_families.append(family)
        return original_tune(family, *args, **kwargs)

    monkeypatch.setattr(trainer, 'tune', recording_tune)
    tunings, fits = trainer.train_all(split, folds, tuned={ModelFamily.LINEAR: linear})

    assert ModelFamily.LINEAR not in tuned_families
    assert tunings[ModelFamily.LINEAR] is linear
    assert fits[0].family is ModelFamily.LINEAR
    assert fits[0].variant is RecipeVariant.INTERACTIONS


def test_train_all_fits_every_family(trainer, resampled):
    split, folds = resampled
    tunings, fits = trainer.train_all(split, folds)

    assert set(tunings) == set(ModelFamily)
    assert [f.family for f in fits] == list(ModelFamily)
    assert all(np.isfinite(f.rmse) and np.isfinite(f.mae) for f in fits)
    assert tunings[ModelFamily.RANDOM_FOREST].variant is RecipeVariant.BASIC


def test_train_all_skips_unfittable_family(tmp_path, resampled):
    split, folds = resampled
    grids = dict(SMALL_GRIDS)
    grids[ModelFamily.LASSO] = {'model__alpha': [-1.0]}
    trainer = ModelTrainer(tmp_path, param_grids=grids)

    tunings, fits = trainer.train_all(split, folds)

    assert ModelFamily.LASSO not in tunings
    assert len(fits) == len(ModelFamily) - 1


def test_split_xy_separates_target(daily_df):
    X, y = ModelTrainer.split_xy(daily_df)
    assert 'rented_bike_count' not in X.columns
    assert isinstance(y, pd.Series)
    assert len(X) == len(y) == len(daily_df)
