"""
Rules-file storage - versioned JSON artifact shared by the batch job and the grader.
"""
import os
import logging
from pathlib import Path
from typing import Optional, Union

from .config import get_config
from .models.export import RulesFile


logger = logging.getLogger(__name__)


def _resolve(path: Optional[Union[str, Path]]) -> Path:
    if path is None:
        return get_config().paths.rules_file
    return Path(path)


def save_rules_file(rules_file: RulesFile, path: Optional[Union[str, Path]] = None) -> Path:
    """
    Write a rules file atomically.

    The JSON goes to a temporary sibling first and then replaces the target,
    so readers see either the previous file or the new one, never a partial write.

    Returns:
        The path written
    """
    path = _resolve(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.{os.getpid()}.tmp")

    try:
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(rules_file.model_dump_json(indent=2))
        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    logger.info(
        f"Saved rules for {len(rules_file.rules)} categories to {path} "
        f"({len(rules_file.metadata.fallback_categories)} on fallback)"
    )
    return path


def load_rules_file(path: Optional[Union[str, Path]] = None) -> RulesFile:
    """
    Load and validate a rules file.
    Missing files and invalid content raise; a bad rules file is a deployment error.
    """
    path = _resolve(path)
    with open(path, "r", encoding="utf-8") as f:
        rules_file = RulesFile.model_validate_json(f.read())

    logger.info(
        f"Loaded rules for {len(rules_file.rules)} categories from {path} "
        f"(generated {rules_file.metadata.generated_at.isoformat()})"
    )
    return rules_file
