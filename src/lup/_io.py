import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import ValidationError

from ._models import Array, DataFile, LoopReport, array_depth, irregular_path

logger = logging.getLogger(__name__)


class DataFileError(Exception):
    """A data file could not be read, validated, or does not hold a table."""


def toml_to_data_file(toml_contents: dict[str, Any]) -> DataFile:
    """Validate parsed TOML contents as a data file.

    Raises:
        DataFileError: If the contents do not match the data file schema.

    """
    try:
        return DataFile.model_validate(toml_contents)
    except ValidationError as e:
        msg = f"Invalid data file contents: {e}"
        raise DataFileError(msg) from e


def load_data_file(input_path: Path | str) -> DataFile:
    """Load named arrays from the `[tables]` section of a TOML file.

    Args:
        input_path: Path to the TOML data file.

    Returns:
        The validated data file.

    Raises:
        DataFileError: If the file is missing, is not valid TOML, or does not
            match the data file schema.

    """
    input_path = Path(input_path)
    try:
        with input_path.open("rb") as f:
            toml_contents = tomllib.load(f)
    except FileNotFoundError as e:
        msg = f"Data file not found: {input_path}"
        raise DataFileError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {input_path}: {e}"
        raise DataFileError(msg) from e

    data_file = toml_to_data_file(toml_contents)
    logger.debug(f"Loaded {len(data_file.tables)} table(s) from {input_path}")
    return data_file


def get_table(data_file: DataFile, name: str) -> Array:
    """Get a table by name.

    Raises:
        DataFileError: If there is no table with that name.

    """
    try:
        return data_file.tables[name]
    except KeyError:
        available = ", ".join(sorted(data_file.tables)) or "(none)"
        msg = f"No table named '{name}'. Available tables: {available}"
        raise DataFileError(msg) from None


def check_table_shape(name: str, array: Array) -> None:
    """Check that a table nests uniformly, so it can be walked level by level.

    Raises:
        DataFileError: If some element mixes arrays and plain values across a level.

    """
    path = irregular_path(array)
    if path is not None:
        msg = (
            f"Table '{name}' mixes nested arrays and plain values at index {list(path)} "
            f"(expected depth {array_depth(array)})"
        )
        raise DataFileError(msg)


def report_to_dict(report: LoopReport) -> dict[str, Any]:
    """Convert a report to a TOML-compatible dictionary.

    None values are dropped since TOML has no null; evidence tuples become arrays.
    """
    return {"report": report.model_dump(mode="json", exclude_none=True)}


def export_report_to_toml(report: LoopReport, output_path: Path | str) -> None:
    """Write a loop report to a TOML file under a `[report]` table."""
    output_path = Path(output_path)
    with output_path.open("wb") as f:
        tomli_w.dump(report_to_dict(report), f)

    logger.debug(f"Exported report to {output_path}")
