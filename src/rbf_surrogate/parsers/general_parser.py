"""
Parser for the library's standard sample format (CSV + JSON).
"""
import json
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Any, List, Tuple


def load_standard_format(
    features_path: Path,
    targets_path: Path,
    run_ids_to_load: List[str] = None
) -> Tuple[np.ndarray, List[Any], List[str]]:
    """
    Reads samples from a features file (CSV) and a targets file (JSON).

    features.csv holds a 'run_id' column plus one numeric column per input
    dimension; targets.json maps each run_id to a scalar or a list of outputs.

    Args:
        features_path (Path): Path to the .csv file with the features.
        targets_path (Path): Path to the .json file with the outputs.
        run_ids_to_load (List[str], optional): run_ids to load. Loads all if None.

    Returns:
        A tuple:
        1. Array of input points, shape (n, d), in CSV order.
        2. List of the n outputs (scalars or lists), aligned with the points.
        3. Names of the d feature columns.
    """
    features_path = Path(features_path)
    targets_path = Path(targets_path)
    if not features_path.is_file() or not targets_path.is_file():
        raise FileNotFoundError("One or both sample files (features.csv, targets.json) were not found.")

    df_features = pd.read_csv(features_path)
    if 'run_id' not in df_features.columns:
        raise KeyError("The features file needs a 'run_id' column")

    df_features['run_id'] = df_features['run_id'].astype(str)

    with open(targets_path, 'r', encoding='UTF-8') as f:
        targets_dict = {str(k): v for k, v in json.load(f).items()}

    if run_ids_to_load:
        run_ids_to_load = [str(r) for r in run_ids_to_load]
        df_features = df_features[df_features['run_id'].isin(run_ids_to_load)]

    df_features = df_features[df_features['run_id'].isin(targets_dict.keys())].reset_index(drop=True)

    feature_names = [col for col in df_features.columns if col != 'run_id']
    X = df_features[feature_names].to_numpy(dtype=float)
    Y = [targets_dict[run_id] for run_id in df_features['run_id']]

    return X, Y, feature_names
