"""Layered configuration loader and CLI for SuperFacts."""
from __future__ import annotations

import argparse
import json
import os
import sys
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Sequence

import tomli_w
from dotenv import dotenv_values
from pydantic import ValidationError

from superfacts.config_schema import DEFAULT_CONFIG, Config, iter_field_docs

DEFAULT_ENV_PREFIX = "SUPERFACTS"
DEFAULT_CONFIG_FILENAME = "config.toml"
DEFAULT_ENV_FILENAME = ".env"
CONFIG_PATH_ENV = "SUPERFACTS_CONFIG"


@dataclass(frozen=True)
class ConfigValueOrigin:
    """Where a single configuration value came from."""

    layer: str
    source: str
    env_var: str | None = None

    def render(self) -> str:
        details = [item for item in (self.env_var, self.source) if item]
        if details:
            return f"{self.layer} ({', '.join(details)})"
        return self.layer


@dataclass
class ConfigMetadata:
    """Metadata returned alongside the loaded configuration."""

    config_path: Path
    env_path: Optional[Path]
    env_prefix: str
    provenance: Dict[str, ConfigValueOrigin] = field(default_factory=dict)

    def describe_sources(self) -> list[str]:
        sources = [
            "defaults: built into superfacts.config_schema",
            f"config file: {self.config_path}",
            f".env file: {self.env_path}" if self.env_path else ".env file: not found",
            f"environment prefix: {self.env_prefix}__*",
        ]
        return sources


class ConfigError(RuntimeError):
    """Raised when configuration loading or validation fails."""


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _default_config_path() -> Path:
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override)
    return _project_root() / DEFAULT_CONFIG_FILENAME


def _is_secret(path: str) -> bool:
    lowered = path.lower()
    return any(token in lowered for token in ("password", "secret", "token"))


def _merge_layer(
    target: MutableMapping[str, Any],
    updates: Mapping[str, Any],
    provenance: Dict[str, ConfigValueOrigin],
    *,
    origin: ConfigValueOrigin,
    prefix: str = "",
) -> None:
    for key, value in updates.items():
        composed = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            existing = target.get(key)
            if not isinstance(existing, MutableMapping):
                existing = {}
                target[key] = existing
            _merge_layer(existing, value, provenance, origin=origin, prefix=composed)
        else:
            target[key] = value
            provenance[composed] = origin


def _coerce_text(value: str) -> Any:
    text = value.strip()
    if not text:
        return ""
    lowered = text.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    if text.lstrip("-").isdigit():
        return int(text)
    try:
        return float(text)
    except ValueError:
        pass
    if text[0] in "[{" and text[-1] in "]}":
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text
    return text


def _parse_env_override(raw_key: str, raw_value: str, prefix: str) -> tuple[str, Any]:
    if not raw_key.startswith(prefix + "__"):
        raise ConfigError(
            f"Environment override '{raw_key}' does not start with prefix {prefix}__"
        )
    segments = [segment for segment in raw_key[len(prefix) + 2 :].split("__") if segment]
    if not segments:
        raise ConfigError(f"Environment override '{raw_key}' is missing key segments")
    return ".".join(segment.lower() for segment in segments), _coerce_text(raw_value)


def _assign_path(target: MutableMapping[str, Any], path: str, value: Any) -> None:
    segments = path.split(".")
    current: MutableMapping[str, Any] = target
    for segment in segments[:-1]:
        next_value = current.get(segment)
        if not isinstance(next_value, MutableMapping):
            next_value = {}
            current[segment] = next_value
        current = next_value
    current[segments[-1]] = value


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return {}
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _format_validation_error(
    error: ValidationError,
    provenance: Mapping[str, ConfigValueOrigin],
) -> ConfigError:
    messages: list[str] = []
    for record in error.errors():
        location = ".".join(str(part) for part in record.get("loc", ()))
        origin = provenance.get(location)
        origin_text = f" [{origin.render()}]" if origin else ""
        detail = record.get("msg", "invalid value")
        input_value = record.get("input")
        if input_value is not None and not _is_secret(location):
            detail += f" (received={input_value!r})"
        messages.append(f"{location or '<root>'}: {detail}{origin_text}")
    combined = "\n - ".join(messages)
    return ConfigError(f"Configuration validation failed:\n - {combined}")


def load_config(
    path: Path | None = None,
    *,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Merge defaults, the TOML file, the .env file and the environment."""

    config_path = path if path else _default_config_path()
    env_path = config_path.parent / DEFAULT_ENV_FILENAME
    runtime_env = os.environ if environ is None else environ

    merged: Dict[str, Any] = {}
    provenance: Dict[str, ConfigValueOrigin] = {}
    _merge_layer(
        merged,
        DEFAULT_CONFIG.model_dump(mode="python"),
        provenance,
        origin=ConfigValueOrigin(layer="defaults", source="DEFAULT_CONFIG"),
    )

    file_data = _load_toml(config_path)
    if file_data:
        _merge_layer(
            merged,
            file_data,
            provenance,
            origin=ConfigValueOrigin(layer="file", source=str(config_path)),
        )

    layers: list[tuple[str, str, Mapping[str, Optional[str]]]] = []
    if env_path.exists():
        layers.append(("env-file", str(env_path), dotenv_values(env_path)))
    layers.append(("env", "process", runtime_env))

    for layer, source, values in layers:
        for key, value in values.items():
            if value is None or not key.startswith(env_prefix + "__"):
                continue
            path_key, parsed_value = _parse_env_override(key, value, env_prefix)
            _assign_path(merged, path_key, parsed_value)
            provenance[path_key] = ConfigValueOrigin(
                layer=layer, source=source, env_var=key
            )

    try:
        config = Config.model_validate(merged)
    except ValidationError as exc:
        raise _format_validation_error(exc, provenance) from exc
    config._metadata = ConfigMetadata(
        config_path=config_path,
        env_path=env_path if env_path.exists() else None,
        env_prefix=env_prefix,
        provenance=provenance,
    )
    return config


def _serialize_for_toml(value: Any) -> Any:
    if isinstance(value, Config):
        return _serialize_for_toml(value.model_dump(mode="python"))
    if isinstance(value, Mapping):
        # TOML has no null; unset optionals are simply omitted.
        return {
            key: _serialize_for_toml(val) for key, val in value.items() if val is not None
        }
    if isinstance(value, list):
        return [_serialize_for_toml(item) for item in value]
    if isinstance(value, Path):
        return str(value)
    return value


def save_config(config: Config, path: Path | None = None) -> Path:
    """Persist the configuration as TOML, replacing the target atomically."""

    metadata: ConfigMetadata | None = getattr(config, "_metadata", None)
    target = path or (metadata.config_path if metadata else _default_config_path())
    target.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        prefix=".superfacts-config-", dir=str(target.parent), delete=False
    ) as handle:
        tomli_w.dump(_serialize_for_toml(config), handle)
        tmp_path = Path(handle.name)
    try:
        os.replace(tmp_path, target)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Failed to persist configuration: {exc}") from exc
    return target


def _resolve_value(mapping: Mapping[str, Any], path: str) -> Any:
    current: Any = mapping
    for segment in path.split("."):
        if isinstance(current, Mapping) and segment in current:
            current = current[segment]
        else:
            raise ConfigError(f"Unknown configuration key: {path}")
    return current


def _safe_repr(value: Any) -> str:
    if isinstance(value, Path):
        return str(value)
    try:
        return json.dumps(value, ensure_ascii=False)
    except TypeError:
        return repr(value)


def explain(config: Config, key: str) -> str:
    """Describe the value of ``key`` and the layer it came from."""

    metadata: ConfigMetadata | None = getattr(config, "_metadata", None)
    if metadata is None:
        raise ConfigError("Configuration metadata is unavailable")
    value = _resolve_value(config.model_dump(mode="python"), key)
    origin = metadata.provenance.get(key)
    origin_text = origin.render() if origin else "unknown"
    formatted_value = "***masked***" if _is_secret(key) else _safe_repr(value)
    return f"{key} = {formatted_value}\nsource: {origin_text}"


def _format_schema_table() -> str:
    headers = ["Field", "Type", "Default", "Description", "Constraints"]
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(["---"] * len(headers)) + " |",
    ]
    for entry in iter_field_docs(DEFAULT_CONFIG):
        if entry["is_nested"]:
            continue
        default = "" if entry["default"] is None else _safe_repr(entry["default"])
        row = [
            str(entry["name"]),
            str(entry["type"]),
            default,
            str(entry["description"]),
            str(entry["constraints"]),
        ]
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="SuperFacts configuration utilities",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="Path to the TOML configuration file")
    parser.add_argument(
        "--env-prefix",
        default=DEFAULT_ENV_PREFIX,
        help="Environment variable prefix (e.g. SUPERFACTS__NEWS__HOT_LIMIT)",
    )
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("--validate", action="store_true", help="Validate the active configuration")
    actions.add_argument("--dump-defaults", action="store_true", help="Print built-in defaults as TOML")
    actions.add_argument("--print-schema", action="store_true", help="Print a Markdown table of all fields")
    actions.add_argument("--show-sources", action="store_true", help="Show configuration source precedence")
    actions.add_argument("--explain", metavar="KEY", help="Explain where a field value originates")

    args = parser.parse_args(argv)

    try:
        if args.dump_defaults:
            sys.stdout.write(tomli_w.dumps(_serialize_for_toml(DEFAULT_CONFIG)))
            return 0
        if args.print_schema:
            sys.stdout.write(_format_schema_table() + "\n")
            return 0

        config = load_config(args.config, env_prefix=args.env_prefix)
        if args.validate:
            print("Configuration OK")
        elif args.show_sources:
            sources = config._metadata.describe_sources()
            print("Active configuration sources:")
            print("\n".join(f"- {item}" for item in sources))
        elif args.explain:
            print(explain(config, args.explain))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
