import logging
import yaml
from pathlib import Path
from pydantic import ValidationError
from typing import Dict, Any, List

from services.tool_engine.models import ToolConfig, ToolConfigurationError

logger = logging.getLogger(__name__)


def load_tool_config_data(data: Dict[str, Any]) -> ToolConfig:
    """
    Validates the raw dictionary data against the ToolConfig model
    and performs the cross-field checks pydantic cannot express.
    """
    try:
        config = ToolConfig.model_validate(data)
    except ValidationError as e:
        raise ToolConfigurationError(f"Invalid tool configuration: {e}") from e

    question_ids = set()
    for question in config.questions:
        if question.id in question_ids:
            raise ToolConfigurationError(f"Duplicate question ID '{question.id}' in tool '{config.slug}'")
        question_ids.add(question.id)

        if question.kind == "choice":
            if not question.options:
                raise ToolConfigurationError(f"Choice question '{question.id}' in tool '{config.slug}' has no options")
            option_values = set()
            for option in question.options:
                if option.value in option_values:
                    raise ToolConfigurationError(
                        f"Duplicate option value '{option.value}' in question '{question.id}' (tool '{config.slug}')"
                    )
                option_values.add(option.value)
        elif question.options:
            raise ToolConfigurationError(f"Text question '{question.id}' in tool '{config.slug}' must not declare options")

    if not config.questions:
        raise ToolConfigurationError(f"Tool '{config.slug}' declares no questions")

    _validate_bands(config)

    for trigger in config.text_triggers:
        question = config.question(trigger.question_id)
        if question is None:
            raise ToolConfigurationError(
                f"Trigger '{trigger.id}' references unknown question '{trigger.question_id}'"
            )
        if question.kind != "text":
            raise ToolConfigurationError(
                f"Trigger '{trigger.id}' must target a text question, '{trigger.question_id}' is '{question.kind}'"
            )
        if not trigger.phrases:
            raise ToolConfigurationError(f"Trigger '{trigger.id}' declares no phrases")

    if config.score_bounds.min > config.score_bounds.max:
        raise ToolConfigurationError(f"Tool '{config.slug}' has score_bounds.min above score_bounds.max")

    return config


def _validate_bands(config: ToolConfig) -> None:
    if not config.bands:
        raise ToolConfigurationError(f"Tool '{config.slug}' declares no bands")
    thresholds = [band.min_percentage for band in config.bands]
    for higher, lower in zip(thresholds, thresholds[1:]):
        if higher <= lower:
            raise ToolConfigurationError(
                f"Bands for tool '{config.slug}' must be strictly descending, got {thresholds}"
            )
    if thresholds[-1] != 0:
        raise ToolConfigurationError(f"Last band for tool '{config.slug}' must start at 0, got {thresholds[-1]}")


def load_tool_config_from_file(file_path: str) -> ToolConfig:
    """
    Loads a tool rule table from a YAML file, validates it,
    and returns a ToolConfig object.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ToolConfigurationError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise ToolConfigurationError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        raise ToolConfigurationError(f"YAML file is empty or invalid: {file_path}")

    return load_tool_config_data(data)


def load_tool_configs(directory: str) -> List[ToolConfig]:
    """Loads every *.yml rule table in a directory, sorted by file name."""
    path = Path(directory)
    if not path.is_dir():
        raise ToolConfigurationError(f"Tool configuration directory not found: {directory}")

    configs = []
    for file_path in sorted(path.glob("*.yml")):
        config = load_tool_config_from_file(str(file_path))
        logger.info(f"Loaded tool configuration '{config.slug}' (version {config.version}) from {file_path}")
        configs.append(config)
    return configs
