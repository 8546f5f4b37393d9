"""Mask profiles: declarative YAML rule chains for mapping records.

A profile names the properties of a record and the builder steps applied to
each, in order::

    version: "1.0"
    name: customer
    behavior: include
    properties:
      email:
        type: string
        rules:
          - email_mask: {local_keep: 1}
      salary:
        type: numeric
        rules:
          - with_seed: 42
          - noise_additive: {max_abs: 100}

Step parameters may be a mapping (keyword arguments), a list (positional
arguments), a scalar (single argument) or empty.
"""

import dataclasses
import keyword
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .config import MaskingConfig
from .exceptions import ProfileValidationError, RuleConfigurationError
from .results import MaskingResult
from .types import PropertyRuleBehavior

logger = logging.getLogger(__name__)

# Steps that take live Python objects and cannot be expressed in YAML.
_UNSUPPORTED_STEPS = frozenset({"add_rule"})


class RuleStepSchema(BaseModel):
    """One builder step, written as ``- step_name: params``."""

    step: str = Field(..., description="Builder method name")
    params: Any = Field(None, description="Arguments for the step")

    @model_validator(mode="before")
    @classmethod
    def from_single_key_mapping(cls, data: Any) -> Any:
        """Accept ``{"mask_end": {...}}`` and bare ``"null_out"`` forms."""
        if isinstance(data, str):
            return {"step": data}
        if isinstance(data, Mapping) and "step" not in data:
            if len(data) != 1:
                raise ValueError(f"Each rule step must have exactly one key, got {sorted(data)}")
            ((step, params),) = data.items()
            return {"step": step, "params": params}
        return data

    def arguments(self) -> tuple[tuple[Any, ...], dict[str, Any]]:
        if self.params is None:
            return (), {}
        if isinstance(self.params, Mapping):
            return (), dict(self.params)
        if isinstance(self.params, list):
            return tuple(self.params), {}
        return (self.params,), {}


class PropertySchema(BaseModel):
    """Pydantic model for one property's configuration."""

    type: str = Field("string", description="Builder kind: string, numeric or date")
    rules: list[RuleStepSchema] = Field(default_factory=list, description="Ordered rule steps")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: Any) -> Any:
        from ..masking.builders import BUILDERS

        if v not in BUILDERS:
            raise ValueError(f"Invalid property type '{v}'. Valid types: {list(BUILDERS)}")
        return v


class ProfileFileSchema(BaseModel):
    """Pydantic model for profile file schema validation."""

    version: Optional[str] = Field("1.0", description="Profile schema version")
    name: Optional[str] = Field(None, description="Profile name")
    description: Optional[str] = Field(None, description="Profile description")
    behavior: Optional[str] = Field(None, description="include, exclude or remove")
    properties: dict[str, PropertySchema] = Field(..., description="Per-property rule chains")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: Any) -> Any:
        if v is not None:
            version_pattern = r"^\d+\.\d+(\.\d+)?$"
            if not re.match(version_pattern, str(v)):
                raise ValueError(f"Version must follow format 'x.y' or 'x.y.z', got '{v}'")
        return v

    @field_validator("behavior")
    @classmethod
    def validate_behavior(cls, v: Any) -> Any:
        if v is not None:
            PropertyRuleBehavior.from_string(v)
        return v

    @field_validator("properties")
    @classmethod
    def validate_property_names(cls, v: dict[str, PropertySchema]) -> dict[str, PropertySchema]:
        if not v:
            raise ValueError("A profile must declare at least one property")
        for name in v:
            if not name.isidentifier() or keyword.iskeyword(name):
                raise ValueError(f"Property name '{name}' is not a valid identifier")
        return v


def _record_class_name(profile_name: Optional[str]) -> str:
    words = re.findall(r"[A-Za-z0-9]+", profile_name or "")
    return "".join(w.capitalize() for w in words) + "Record" if words else "ProfileRecord"


@dataclass
class MaskingProfile:
    """A loaded profile, able to create maskers and mask mapping records.

    Records are converted to a dataclass generated from the property list.
    Keys a record carries beyond the declared properties are appended raw
    when the masker's behavior is ``exclude`` and dropped otherwise.
    """

    schema: ProfileFileSchema
    source_path: Optional[Path] = None
    record_type: type = field(init=False)
    _default_masker: Any = field(init=False, default=None, repr=False)
    _lock: Any = field(init=False, default_factory=Lock, repr=False)

    def __post_init__(self) -> None:
        self.record_type = dataclasses.make_dataclass(
            _record_class_name(self.schema.name),
            [(name, Any, field(default=None)) for name in self.schema.properties],
        )

    @property
    def name(self) -> Optional[str]:
        return self.schema.name

    @property
    def version(self) -> Optional[str]:
        return self.schema.version

    @property
    def property_names(self) -> list[str]:
        return list(self.schema.properties)

    def create_masker(
        self,
        config: Optional[MaskingConfig] = None,
        output_format: Optional[str] = None,
    ) -> Any:
        """Build a fresh masker for ``record_type`` with every declared chain.

        Raises:
            ProfileValidationError: If a step is unknown or its parameters are invalid
        """
        from ..masking.builders import create_builder
        from ..masking.masker import AbstractMasker

        masker: AbstractMasker[Any] = AbstractMasker(
            self.record_type, config=config, output_format=output_format
        )
        if self.schema.behavior is not None:
            masker.set_property_rule_behavior(self.schema.behavior)

        for prop_name, prop in self.schema.properties.items():
            if not prop.rules:
                continue
            builder = create_builder(prop.type)
            for index, step in enumerate(prop.rules):
                self._apply_step(builder, prop_name, index, step)
            # Build outside register_builder so step errors keep their location.
            masker.register_builder(prop_name, lambda b, built=builder: built)
        return masker

    def _apply_step(self, builder: Any, prop_name: str, index: int, step: RuleStepSchema) -> None:
        location = f"properties.{prop_name}.rules[{index}]"
        if step.step in _UNSUPPORTED_STEPS or step.step not in builder.steps:
            allowed = [s for s in builder.steps if s not in _UNSUPPORTED_STEPS]
            raise ProfileValidationError(
                f"{location}: unknown step '{step.step}' for {builder.kind} properties. "
                f"Valid steps: {allowed}",
                file_path=str(self.source_path) if self.source_path else None,
            )
        args, kwargs = step.arguments()
        try:
            getattr(builder, step.step)(*args, **kwargs)
        except (RuleConfigurationError, TypeError, ValueError) as e:
            raise ProfileValidationError(
                f"{location}: invalid parameters for '{step.step}': {e}",
                file_path=str(self.source_path) if self.source_path else None,
            ) from e

    @property
    def masker(self) -> Any:
        """Masker shared by :meth:`mask_record` calls, created on first use."""
        if self._default_masker is None:
            with self._lock:
                if self._default_masker is None:
                    self._default_masker = self.create_masker()
        return self._default_masker

    def to_record(self, record: Mapping[str, Any]) -> Any:
        if not isinstance(record, Mapping):
            raise TypeError(f"Records must be mappings, got {type(record).__name__}")
        return self.record_type(**{name: record.get(name) for name in self.schema.properties})

    def mask_record(self, record: Mapping[str, Any], masker: Any = None) -> MaskingResult:
        """Mask one mapping record.

        Args:
            record: Mapping of property name to value
            masker: Masker from :meth:`create_masker`; the shared one when omitted

        Raises:
            TypeError: If ``record`` is not a mapping
        """
        from ..masking.assembler import assemble_result, to_structure

        masker = masker or self.masker
        structure, errors, stats = masker.collect(self.to_record(record))
        if masker.behavior is PropertyRuleBehavior.EXCLUDE:
            for key, value in record.items():
                if key not in self.schema.properties:
                    structure[str(key)] = to_structure(value)
        return assemble_result(structure, errors, stats, masker.serializer)


class ProfileLoader:
    """Loads mask profiles from YAML with schema validation.

    Loaded profiles are cached per resolved path and invalidated when the
    file's modification time changes.
    """

    def __init__(self, base_path: Optional[Path] = None):
        self.base_path = base_path
        self._profile_cache: dict[Path, tuple[float, MaskingProfile]] = {}
        self._lock = Lock()

    def _resolve(self, profile_path: Union[str, Path]) -> Path:
        path = Path(profile_path)
        if not path.is_absolute():
            path = (self.base_path or Path.cwd()) / path
        return path.resolve()

    def load_profile(self, profile_path: Union[str, Path]) -> MaskingProfile:
        """Load and validate a profile.

        Every step is applied once to a throwaway masker so that invalid
        steps fail here instead of at first use.

        Raises:
            ProfileValidationError: If the YAML or the profile content is invalid
            FileNotFoundError: If the profile file doesn't exist
        """
        path = self._resolve(profile_path)
        if not path.exists():
            raise FileNotFoundError(f"Profile file not found: {path}")

        mtime = path.stat().st_mtime
        with self._lock:
            cached = self._profile_cache.get(path)
        if cached is not None and cached[0] == mtime:
            return cached[1]

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ProfileValidationError(f"Invalid YAML in {path}: {e}", file_path=str(path)) from e

        profile = self.load_profile_data(data, source_path=path)
        with self._lock:
            self._profile_cache[path] = (mtime, profile)
        logger.debug(f"Loaded profile '{profile.name}' from {path} with properties {profile.property_names}")
        return profile

    def load_profile_data(self, data: Any, source_path: Optional[Path] = None) -> MaskingProfile:
        """Validate an already-parsed profile document."""
        file_path = str(source_path) if source_path else None
        if not isinstance(data, Mapping):
            raise ProfileValidationError(
                f"Profile must be a mapping, got {type(data).__name__}", file_path=file_path
            )
        try:
            schema = ProfileFileSchema(**data)
        except ValidationError as e:
            raise ProfileValidationError(
                f"Schema validation failed for {file_path or 'profile'}: {e}",
                file_path=file_path,
                errors=[
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
                ],
            ) from e

        profile = MaskingProfile(schema=schema, source_path=source_path)
        profile.create_masker()
        return profile

    def validate_profile_file(self, profile_path: Union[str, Path]) -> list[str]:
        """Validate a profile file and return any validation errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        try:
            self.load_profile(profile_path)
            return []
        except ProfileValidationError as e:
            return list(e.errors) or [e.message]
        except FileNotFoundError as e:
            return [str(e)]


_default_loader = ProfileLoader()


def load_profile(profile_path: Union[str, Path]) -> MaskingProfile:
    """Load a profile with the process-wide loader."""
    return _default_loader.load_profile(profile_path)


def validate_profile_file(profile_path: Union[str, Path]) -> list[str]:
    return _default_loader.validate_profile_file(profile_path)
