from pathlib import Path
import sys

# Allow running without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import pandas as pd

from aggregation import bias_table, summarize_arms, undefined_f1_count
from config import SimConfig, true_parameters
from io_utils import config_from_parameters, load_parameters, write_results
from logging_utils import logger
from simulator import run_simulation


def main() -> None:
    params_path = Path("input_parameters") / "simulation_parameters.json"

    if params_path.exists():
        config = config_from_parameters(load_parameters(str(params_path)))
    else:
        logger.info("No %s found; using default configuration.", params_path)
        config = SimConfig()

    tables = run_simulation(config)

    with pd.option_context("display.width", 160, "display.max_columns", 20):
        logger.info("Mean estimates per arm:\n%s", summarize_arms(tables))
        logger.info(
            "Percentage relative bias per arm:\n%s",
            bias_table(tables, true_parameters(config.params)),
        )
    for name, table in tables.items():
        logger.info("Arm '%s': %d undefined F1 values.", name, undefined_f1_count(table))

    paths = write_results(tables, config, Path(config.output_dir))
    for label, path in paths.items():
        logger.info("Wrote %s: %s", label, path)


if __name__ == "__main__":
    main()
