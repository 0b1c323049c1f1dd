"""JSON schema composition and request parsing for tools with extensions."""

import copy
import logging
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ValidationError

from .extensions import CompositeInput, FilterExtension

logger = logging.getLogger(__name__)


class InputValidationError(ValueError):
    """Tool arguments do not match the input model."""


def generate_schema(model: type[BaseModel]) -> dict:
    """Generate the JSON schema of an input model."""
    return model.model_json_schema()


def merge_schemas(base: dict, extension_schemas: Iterable[tuple[str, dict]]) -> dict:
    """
    Graft extension schemas into a base schema.

    Each property and required name of an extension schema is added as
    "<namespace>_<field>". Later extensions overwrite properties of earlier
    ones with the same prefixed name. The inputs are left untouched.

    Args:
        base: Schema of the base input
        extension_schemas: (namespace, schema) pairs in registration order

    Returns:
        A new schema; without a "required" key if no field is required
    """
    merged = copy.deepcopy(base)
    properties = merged.setdefault("properties", {})
    required = list(merged.get("required", []))
    definitions = dict(merged.get("$defs", {}))

    for namespace, schema in extension_schemas:
        prefix = f"{namespace}_"
        for field_name, definition in schema.get("properties", {}).items():
            properties[prefix + field_name] = copy.deepcopy(definition)
        for field_name in schema.get("required", []):
            if prefix + field_name not in required:
                required.append(prefix + field_name)
        # keep "#/$defs/..." references of nested models resolvable
        for def_name, definition in schema.get("$defs", {}).items():
            definitions[def_name] = copy.deepcopy(definition)

    if required:
        merged["required"] = required
    else:
        merged.pop("required", None)
    if definitions:
        merged["$defs"] = definitions
    return merged


def compose_input_schema(base_model: type[BaseModel], extensions: Sequence[FilterExtension]) -> dict:
    """Schema of the base model extended by every extension that takes input."""
    schema = merge_schemas(
        generate_schema(base_model),
        [(ext.namespace, generate_schema(ext.input_model)) for ext in extensions if ext.input_model is not None],
    )
    logger.debug(f"composed schema for {base_model.__name__} with {len(extensions)} extensions")
    return schema


def _format_location(location: tuple) -> str:
    return ".".join(str(part) for part in location) or "input"


def parse_and_validate(arguments: dict[str, Any], model: type[BaseModel]) -> BaseModel:
    """
    Convert raw arguments into a validated model instance.

    Unknown keys are ignored.

    Raises:
        InputValidationError: With one "Field '<name>' <problem>" entry per violation
    """
    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        message = "; ".join(
            f"Field '{_format_location(error['loc'])}' {error['msg']}" for error in e.errors()
        )
        logger.debug(f"failed to validate {model.__name__}: {message}")
        raise InputValidationError(f"Validation failed: {message}") from e


def parse_composite_input(
    arguments: dict[str, Any],
    base_model: type[BaseModel],
    extensions: Sequence[FilterExtension],
) -> CompositeInput:
    """
    Split raw tool arguments into the base input and per-extension inputs.

    An extension is only configured when at least one "<namespace>_" key is
    present; its input is then parsed without the prefix.
    """
    composite = CompositeInput(parse_and_validate(arguments, base_model))

    for extension in extensions:
        if extension.input_model is None:
            continue
        prefix = f"{extension.namespace}_"
        extension_arguments = {
            key[len(prefix):]: value for key, value in arguments.items() if key.startswith(prefix)
        }
        if extension_arguments:
            composite.add_extension_input(
                extension.namespace, parse_and_validate(extension_arguments, extension.input_model)
            )

    return composite
