import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

import pandas as pd

from aggregation import bias_table, distribution_summary, long_format, summarize_arms
from config import GenerativeParams, OversamplingArm, SimConfig, true_parameters
from errors import InvalidArgumentError


def load_parameters(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Parameter file not found: {p.resolve()}")
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _check_positive_int(cfg: Dict[str, Any], key: str, errors: List[str]) -> None:
    if key not in cfg:
        return
    try:
        value = int(cfg[key])
        if value <= 0 or value != float(cfg[key]):
            errors.append(f"{key} must be a positive integer.")
    except (TypeError, ValueError):
        errors.append(f"{key} must be an integer.")


def validate_parameters(cfg: Dict[str, Any]) -> List[str]:
    """
    Expected structure (every key optional, defaults from SimConfig):
      {"reps": ..., "n": ..., "test_set_pct": ..., "k_neighbors": ..., "seed": ...,
       "output_dir": ..., "replace_beyond_pool": ...,
       "generative_parameters": {"intercept": ..., "slope_x1": ..., "slope_x2": ...,
                                 "rate_x1": ..., "sd_x2": ...},
       "oversampling_arms": [{"name": ..., "target_ratio": ..., "under_pct": ...}, ...]}
    Returns a list of error messages; empty when the parameters are valid.
    """
    errors: List[str] = []
    for key in ("reps", "n", "k_neighbors"):
        _check_positive_int(cfg, key, errors)

    if "test_set_pct" in cfg:
        try:
            pct = float(cfg["test_set_pct"])
            if pct <= 0 or pct >= 100:
                errors.append("test_set_pct must be between 0 and 100.")
        except (TypeError, ValueError):
            errors.append("test_set_pct must be numeric.")

    gen = cfg.get("generative_parameters", {})
    if not isinstance(gen, dict):
        errors.append("generative_parameters must be an object.")
        gen = {}
    numeric_gen: Dict[str, float] = {}
    for key in ("intercept", "slope_x1", "slope_x2", "rate_x1", "sd_x2"):
        if key in gen:
            try:
                numeric_gen[key] = float(gen[key])
            except (TypeError, ValueError):
                errors.append(f"generative_parameters.{key} must be numeric.")
    if numeric_gen.get("rate_x1", 1.0) <= 0:
        errors.append("generative_parameters.rate_x1 must be > 0.")
    if numeric_gen.get("sd_x2", 1.0) < 0:
        errors.append("generative_parameters.sd_x2 must be >= 0.")

    if "replace_beyond_pool" in cfg and not isinstance(cfg["replace_beyond_pool"], bool):
        errors.append("replace_beyond_pool must be true or false.")

    if "oversampling_arms" in cfg:
        arms = cfg["oversampling_arms"]
        if not isinstance(arms, list):
            errors.append("oversampling_arms must be a list.")
            arms = []
        names = []
        for i, arm in enumerate(arms):
            if not isinstance(arm, dict):
                errors.append(f"oversampling_arms[{i}] must be an object.")
                continue
            missing = [key for key in ("name", "target_ratio", "under_pct") if key not in arm]
            if missing:
                errors.append(f"oversampling_arms[{i}] is missing: {', '.join(missing)}.")
            name = arm.get("name", f"oversampling_arms[{i}]")
            if "name" in arm and not isinstance(name, str):
                errors.append(f"oversampling_arms[{i}]: name must be a string.")
            elif "name" in arm:
                names.append(name)
                if name == "baseline":
                    errors.append("Arm name 'baseline' is reserved.")
            if "target_ratio" in arm:
                try:
                    ratio = float(arm["target_ratio"])
                    if ratio <= 0 or ratio >= 1:
                        errors.append(f"{name}: target_ratio must be between 0 and 1.")
                except (TypeError, ValueError):
                    errors.append(f"{name}: target_ratio must be numeric.")
            if "under_pct" in arm:
                try:
                    if float(arm["under_pct"]) < 0:
                        errors.append(f"{name}: under_pct must be >= 0.")
                except (TypeError, ValueError):
                    errors.append(f"{name}: under_pct must be numeric.")
        if len(names) != len(set(names)):
            errors.append("Duplicate oversampling arm names detected.")

    return errors


def config_from_parameters(cfg: Dict[str, Any]) -> SimConfig:
    errors = validate_parameters(cfg)
    if errors:
        raise InvalidArgumentError("Invalid simulation parameters:\n" + "\n".join(errors))

    defaults = SimConfig()
    gen = cfg.get("generative_parameters", {})
    params = GenerativeParams(**{k: float(v) for k, v in gen.items() if k in GenerativeParams.__dataclass_fields__})

    arms = defaults.arms
    if "oversampling_arms" in cfg:
        arms = tuple(
            OversamplingArm(
                name=str(a["name"]),
                target_ratio=float(a["target_ratio"]),
                under_pct=float(a["under_pct"]),
            )
            for a in cfg["oversampling_arms"]
        )

    test_fraction = defaults.test_fraction
    if "test_set_pct" in cfg:
        test_fraction = float(cfg["test_set_pct"]) / 100.0

    return SimConfig(
        reps=int(cfg.get("reps", defaults.reps)),
        n=int(cfg.get("n", defaults.n)),
        test_fraction=test_fraction,
        k_neighbors=int(cfg.get("k_neighbors", defaults.k_neighbors)),
        seed=int(cfg.get("seed", defaults.seed)),
        output_dir=str(cfg.get("output_dir", defaults.output_dir)),
        replace_beyond_pool=cfg.get("replace_beyond_pool", defaults.replace_beyond_pool),
        params=params,
        arms=arms,
    )


def write_results(
    tables: Mapping[str, pd.DataFrame],
    config: SimConfig,
    output_dir: Path,
) -> Dict[str, Path]:
    """Write the long-format table, per-arm summaries and bias for downstream consumers."""
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        "long": output_dir / "results_long.csv",
        "summary": output_dir / "summary.csv",
        "bias": output_dir / "bias.csv",
    }

    long_format(tables).to_csv(paths["long"], index=False)
    summarize_arms(tables).to_csv(paths["summary"])
    bias_table(tables, true_parameters(config.params)).to_csv(paths["bias"])

    for name, table in tables.items():
        path = output_dir / f"distribution_{name}.csv"
        distribution_summary(table).to_csv(path, index_label="metric")
        paths[f"distribution_{name}"] = path

    return paths
