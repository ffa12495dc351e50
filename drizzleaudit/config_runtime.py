"""Runtime configuration for drizzleaudit - centralized per-rule settings."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from drizzleaudit.utils.constants import CONFIG_FILE_NAME, ENV_PREFIX, STATE_DIR
from drizzleaudit.utils.logging import logger

OFF = "off"

DEFAULT_SENSITIVE_PATTERNS = [
    "user",
    "account",
    "profile",
    "payment",
    "order",
    "invoice",
    "medical",
    "health",
    "personal",
    "private",
    "auth",
    "session",
    "token",
]

DEFAULTS = {
    "enforce-delete-with-where": {
        "severity": "high",
        "options": {"drizzle_object_name": []},
    },
    "enforce-update-with-where": {
        "severity": "high",
        "options": {"drizzle_object_name": []},
    },
    "enforce-uuid-indexes": {
        "severity": "high",
        "options": {"exempt_primary_keys": True},
    },
    "enforce-snake-case-naming": {"severity": "high", "options": {}},
    "enforce-index-naming": {"severity": "high", "options": {}},
    "require-timestamp-columns": {
        "severity": "medium",
        "options": {"check_tables": None, "ignore_tables": []},
    },
    "prefer-uuid-primary-key": {"severity": "medium", "options": {}},
    "no-select-star": {"severity": "medium", "options": {}},
    "limit-join-complexity": {"severity": "medium", "options": {"max_joins": 3}},
    "require-rls-enabled": {
        "severity": "medium",
        "options": {
            "sensitive_tables": [],
            "ignore_tables": [],
            "sensitive_patterns": list(DEFAULT_SENSITIVE_PATTERNS),
        },
    },
    "prevent-rls-bypass": {"severity": "medium", "options": {}},
}

# Shareable presets: which rules run and at what severity
PRESETS = {
    "all": {name: record["severity"] for name, record in DEFAULTS.items()},
    "recommended": {
        "enforce-delete-with-where": "high",
        "enforce-update-with-where": "high",
        "enforce-snake-case-naming": "medium",
        "no-select-star": "medium",
    },
    "strict": {name: "high" for name in DEFAULTS},
}

# Presets that also narrow rule options
PRESET_OPTIONS = {
    "all": {"require-rls-enabled": {"sensitive_patterns": ["user", "account", "payment", "auth", "session"]}},
    "strict": {"require-rls-enabled": {"sensitive_patterns": ["user", "account", "payment", "auth", "session"]}},
}

# No preset: every rule at its default severity with its default options
DEFAULT_PRESET = None

# Options that may be omitted (None) but are lists when set
_OPTIONAL_LIST_OPTIONS = {("require-timestamp-columns", "check_tables")}

# ESLint-style severities accepted in rule settings
ESLINT_SEVERITIES = {2: "high", 1: "medium", "error": "high", "warn": "medium", "warning": "medium"}

# Option constraints: (rule, option) -> minimum integer value
_MINIMUMS = {("limit-join-complexity", "max_joins"): 1}


def rule_defaults(rule: str) -> dict[str, Any]:
    """Default options for a rule (a fresh copy)."""
    return copy.deepcopy(DEFAULTS.get(rule, {}).get("options", {}))


def _normalize_rule_severity(value: Any) -> str | None:
    """Severity name for a configured value, OFF, or None when unrecognized."""
    from drizzleaudit.rules.base import Severity

    if isinstance(value, bool):
        return OFF if value is False else None
    if isinstance(value, int):
        return OFF if value == 0 else ESLINT_SEVERITIES.get(value)
    if not isinstance(value, str):
        return None

    name = value.strip().lower()
    if name == OFF:
        return OFF
    if name in {severity.value for severity in Severity}:
        return name
    return ESLINT_SEVERITIES.get(name)


def _coerce_option(rule: str, option: str, value: Any) -> tuple[bool, Any]:
    """Validate ``value`` against the default's type. Returns (ok, coerced)."""
    default = DEFAULTS[rule]["options"][option]

    if (rule, option) in _OPTIONAL_LIST_OPTIONS:
        if value is None:
            return True, None
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return True, list(value)
        return False, None

    if isinstance(default, bool):
        return (True, value) if isinstance(value, bool) else (False, None)
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            return False, None
        minimum = _MINIMUMS.get((rule, option))
        if minimum is not None and value < minimum:
            return False, None
        return True, value
    if isinstance(default, list):
        if isinstance(value, str):
            return True, [value]
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return True, list(value)
        return False, None
    return (True, value) if isinstance(value, type(default)) else (False, None)


def _parse_env_value(rule: str, option: str, raw: str) -> Any:
    default = DEFAULTS[rule]["options"][option]
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, list) or (rule, option) in _OPTIONAL_LIST_OPTIONS:
        return [v.strip() for v in raw.split(",") if v.strip()]
    return raw


class RuntimeConfig:
    """Resolved per-rule severities and options."""

    def __init__(self, preset: str | None, rules: dict[str, dict[str, Any]]):
        self.preset = preset
        self.rules = rules

    @classmethod
    def defaults(cls, preset: str | None = DEFAULT_PRESET) -> "RuntimeConfig":
        if preset is not None and preset not in PRESETS:
            raise ValueError(f"Unknown preset '{preset}'. Choose from: {', '.join(sorted(PRESETS))}")
        rules = {}
        for name in DEFAULTS:
            rules[name] = {
                "severity": PRESETS[preset].get(name, OFF) if preset else DEFAULTS[name]["severity"],
                "options": rule_defaults(name),
            }
            rules[name]["options"].update(copy.deepcopy(PRESET_OPTIONS.get(preset, {}).get(name, {})))
        return cls(preset, rules)

    def is_enabled(self, rule: str) -> bool:
        record = self.rules.get(rule)
        if record is None:
            # Rules without a configuration record run with their own defaults
            return True
        return record["severity"] != OFF

    def severity(self, rule: str):
        from drizzleaudit.rules.base import Severity

        record = self.rules.get(rule)
        if record is None or record["severity"] in (None, OFF):
            return None
        return Severity(record["severity"])

    def options(self, rule: str) -> dict[str, Any]:
        record = self.rules.get(rule)
        if record is None:
            return {}
        return copy.deepcopy(record["options"])

    def apply_rule_settings(self, rule: str, settings: Any, source: str) -> None:
        """Merge one rule's settings (severity string or record) into the config."""
        if rule not in self.rules:
            logger.warning("{source}: unknown rule '{rule}' ignored", source=source, rule=rule)
            return

        if not isinstance(settings, dict):
            settings = {"severity": settings}

        for key, value in settings.items():
            if key == "severity":
                severity = _normalize_rule_severity(value)
                if severity is None:
                    logger.warning(
                        "{source}: invalid severity {value!r} for {rule}; keeping {current!r}",
                        source=source,
                        value=value,
                        rule=rule,
                        current=self.rules[rule]["severity"],
                    )
                    continue
                self.rules[rule]["severity"] = severity
                continue

            if key not in self.rules[rule]["options"]:
                logger.warning(
                    "{source}: unknown option '{option}' for rule '{rule}' ignored",
                    source=source,
                    option=key,
                    rule=rule,
                )
                continue

            ok, coerced = _coerce_option(rule, key, value)
            if not ok:
                logger.warning(
                    "{source}: invalid value {value!r} for {rule}.{option}; keeping {current!r}",
                    source=source,
                    value=value,
                    rule=rule,
                    option=key,
                    current=self.rules[rule]["options"][key],
                )
                continue
            self.rules[rule]["options"][key] = coerced


def _read_config_file(path: Path) -> dict[str, Any] | None:
    try:
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not load config file from {path}: {err}", path=path, err=e)
        logger.info("Continuing with default configuration")
        return None

    if not isinstance(data, dict):
        logger.warning("Config file {path} must contain a JSON object", path=path)
        return None
    return data


def _apply_environment(config: RuntimeConfig, environ: dict[str, str]) -> None:
    for rule in DEFAULTS:
        rule_key = rule.replace("-", "_").upper()

        env_var = f"{ENV_PREFIX}_{rule_key}_SEVERITY"
        if env_var in environ:
            config.apply_rule_settings(rule, {"severity": environ[env_var]}, env_var)

        for option in DEFAULTS[rule]["options"]:
            env_var = f"{ENV_PREFIX}_{rule_key}_{option.upper()}"
            if env_var not in environ:
                continue
            try:
                value = _parse_env_value(rule, option, environ[env_var])
            except ValueError as e:
                logger.warning("Ignoring {var}: {err}", var=env_var, err=e)
                continue
            config.apply_rule_settings(rule, {option: value}, env_var)


def load_runtime_config(
    root: str = ".",
    preset: str | None = None,
    config_path: str | None = None,
    environ: dict[str, str] | None = None,
) -> RuntimeConfig:
    """
    Load runtime configuration from defaults, preset, config file and environment.

    Config priority (highest to lowest):
    1. Environment variables (DRIZZLEAUDIT_<RULE>_<OPTION> prefixed)
    2. Config file (--config path, else <root>/.drizzleaudit/config.json)
    3. Preset (explicit argument, else the file's "preset", if any)
    4. Built-in defaults

    Args:
        root: Root directory to look for the config file
        preset: Preset name overriding the file's choice
        config_path: Explicit config file path
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved RuntimeConfig
    """
    environ = os.environ if environ is None else environ

    path = Path(config_path) if config_path else Path(root) / STATE_DIR.name / CONFIG_FILE_NAME
    data = _read_config_file(path) or {}

    chosen_preset = preset or data.get("preset") or DEFAULT_PRESET
    if chosen_preset is not None and chosen_preset not in PRESETS:
        logger.warning("Unknown preset '{preset}' ignored", preset=chosen_preset)
        chosen_preset = DEFAULT_PRESET

    config = RuntimeConfig.defaults(chosen_preset)

    rules_section = data.get("rules", {})
    if isinstance(rules_section, dict):
        for rule, settings in rules_section.items():
            config.apply_rule_settings(rule, settings, str(path))
    else:
        logger.warning("'rules' in {path} must be an object", path=path)

    _apply_environment(config, environ)
    return config
