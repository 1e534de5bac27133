"""Settings field schemas.

Describes the module-level (credentials) and rule-level (per notification
rule) settings a host must collect. The core only uses schemas to check that
required values are present; rendering forms is the host's job.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from infrastructure.notifications.errors import SettingsValidationError


class FieldType(Enum):
    """Setting field types understood by the host."""

    TEXT = "text"
    PASSWORD = "password"
    YESNO = "yesno"
    DROPDOWN = "dropdown"
    RADIO = "radio"
    TEXTAREA = "textarea"
    DYNAMIC = "dynamic"


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class SettingField(BaseModel):
    """A single setting field.

    Attributes:
        key: Settings key (e.g. "api_username")
        friendly_name: Label shown by the host
        type: FieldType (default: TEXT)
        description: Help text shown by the host
        required: Whether a value must be present before use
        default: Value used when the host supplies none
    """

    model_config = ConfigDict(frozen=True)

    key: str
    friendly_name: str
    type: FieldType = FieldType.TEXT
    description: str = ""
    required: bool = False
    default: Optional[Any] = None

    def is_satisfied_by(self, values: Mapping[str, Any]) -> bool:
        if not self.required:
            return True
        return not is_blank(values.get(self.key)) or not is_blank(self.default)

    def to_host_dict(self) -> Dict[str, Any]:
        """Host-style field description."""
        described: Dict[str, Any] = {
            "FriendlyName": self.friendly_name,
            "Type": self.type.value,
            "Description": self.description,
        }
        if self.required:
            described["Required"] = True
        if self.default is not None:
            described["Default"] = self.default
        return described


class FieldSchema:
    """Ordered collection of setting fields.

    Example:
        schema = FieldSchema([
            SettingField(key="api_username", friendly_name="API Username", required=True),
        ])
        schema.missing_required({"api_username": ""})  # ["api_username"]
    """

    def __init__(self, fields: Iterable[SettingField]):
        self._fields = tuple(fields)
        keys = [f.key for f in self._fields]
        if len(keys) != len(set(keys)):
            raise ValueError("Setting field keys must be unique")

    def __iter__(self) -> Iterator[SettingField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, key: object) -> bool:
        return any(f.key == key for f in self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldSchema):
            return NotImplemented
        return self._fields == other._fields

    def get(self, key: str) -> Optional[SettingField]:
        for f in self._fields:
            if f.key == key:
                return f
        return None

    def keys(self) -> List[str]:
        return [f.key for f in self._fields]

    def dynamic_fields(self) -> List[str]:
        return [f.key for f in self._fields if f.type == FieldType.DYNAMIC]

    def missing_required(self, values: Optional[Mapping[str, Any]]) -> List[str]:
        """Keys of required fields with neither a value nor a default."""
        values = values or {}
        return [f.key for f in self._fields if not f.is_satisfied_by(values)]

    def apply_defaults(self, values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Copy of ``values`` with blank fields filled from defaults."""
        merged = dict(values or {})
        for f in self._fields:
            if f.default is not None and is_blank(merged.get(f.key)):
                merged[f.key] = f.default
        return merged

    def validate(self, values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Check required fields and return values with defaults applied.

        Raises:
            SettingsValidationError: If a required field is missing
        """
        missing = self.missing_required(values)
        if missing:
            names = [self.get(key).friendly_name for key in missing]
            raise SettingsValidationError(
                f"Missing required settings: {', '.join(names)}",
                missing_fields=missing,
            )
        return self.apply_defaults(values)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Host-style schema, keyed by field key, in declaration order."""
        return {f.key: f.to_host_dict() for f in self._fields}


CHANNEL_FIELD = "channel"
SENDER_FIELD = "botname"

NOTIFICATION_SETTINGS_SCHEMA = FieldSchema(
    [
        SettingField(
            key=SENDER_FIELD,
            friendly_name="Bot Name",
            type=FieldType.TEXT,
            description="Define the name of your notification bot.",
            required=True,
            default="Notification Bot",
        ),
        SettingField(
            key=CHANNEL_FIELD,
            friendly_name="Channel",
            type=FieldType.DYNAMIC,
            description="Select the desired channel for notification delivery.",
            required=True,
        ),
    ]
)
