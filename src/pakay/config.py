"""Configuration for Pakay.

Two layers live here. HashidConfig holds the encoding parameters a scope
derives its codec from; PakayConfig holds the gateway settings plus the
base HashidConfig and per-scope overrides.

Reads from config/pakay.ini if present, environment variables override.
Salts never checked into version control.
"""

from __future__ import annotations

import configparser
import os
import threading
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

from pakay.errors import InvalidOption

_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent / "config" / "pakay.ini"

# No i, l, o in either case: they read too much like 1 and 0.
DEFAULT_ALPHABET = (
    "abcdefghjkmnpqrstuvwxyz"
    "ABCDEFGHJKMNPQRSTUVWXYZ"
    "1234567890"
)

# hashids refuses anything smaller.
MIN_ALPHABET_LENGTH = 16

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class HashidConfig:
    """Encoding parameters for one scope. Immutable once derived."""

    salt: str = ""
    scope_tag: str = ""
    min_length: int = 6
    alphabet: str = DEFAULT_ALPHABET
    override_lookup: bool = True
    override_string_form: bool = True
    sign: bool = True
    test_mode: bool = False

    def seed_material(self) -> str:
        """Seed handed to the transform.

        Salt first, then scope tag. Swapping the order changes every
        token already issued.
        """
        return f"{self.salt}{self.scope_tag}"


FIELD_NAMES = frozenset(f.name for f in fields(HashidConfig))
_BOOL_FIELDS = frozenset(
    {"override_lookup", "override_string_form", "sign", "test_mode"}
)


def validate(config: HashidConfig) -> HashidConfig:
    """Raise InvalidOption unless the transform can work with config."""
    for name in ("salt", "scope_tag", "alphabet"):
        if not isinstance(getattr(config, name), str):
            raise InvalidOption(f"{name} must be a string")
    for name in _BOOL_FIELDS:
        if not isinstance(getattr(config, name), bool):
            raise InvalidOption(f"{name} must be a boolean")
    if (
        not isinstance(config.min_length, int)
        or isinstance(config.min_length, bool)
        or config.min_length < 0
    ):
        raise InvalidOption(
            f"min_length must be a non-negative integer, got {config.min_length!r}"
        )

    alphabet = config.alphabet
    if len(set(alphabet)) != len(alphabet):
        raise InvalidOption("alphabet must not contain duplicate characters")
    if any(ch.isspace() for ch in alphabet):
        raise InvalidOption("alphabet must not contain whitespace")
    if len(alphabet) < MIN_ALPHABET_LENGTH:
        raise InvalidOption(
            f"alphabet needs at least {MIN_ALPHABET_LENGTH} characters, "
            f"got {len(alphabet)}"
        )
    return config


def default() -> HashidConfig:
    return HashidConfig()


def derive_for_scope(
    base: HashidConfig,
    scope_tag: str,
    overrides: Mapping[str, Any] | None = None,
) -> HashidConfig:
    """Copy base for one scope, with scope_tag set and overrides applied."""
    overrides = dict(overrides or {})
    unknown = sorted(set(overrides) - FIELD_NAMES)
    if unknown:
        raise InvalidOption(f"Unknown hashid option(s): {', '.join(unknown)}")
    scope_tag = overrides.pop("scope_tag", scope_tag)
    return validate(replace(base, scope_tag=scope_tag, **overrides))


# ── Process-wide default ──────────────────────────────────────

_lock = threading.Lock()
_configuration: HashidConfig | None = None


def configuration() -> HashidConfig:
    """The process-wide default, created on first use."""
    global _configuration
    current = _configuration
    if current is None:
        with _lock:
            if _configuration is None:
                _configuration = default()
            current = _configuration
    return current


def configure(**options: Any) -> HashidConfig:
    """Replace the process-wide default with a copy carrying options.

    Scopes already derived keep the configuration they were built from.
    """
    global _configuration
    unknown = sorted(set(options) - FIELD_NAMES)
    if unknown:
        raise InvalidOption(f"Unknown hashid option(s): {', '.join(unknown)}")
    with _lock:
        base = _configuration if _configuration is not None else default()
        _configuration = validate(replace(base, **options))
        return _configuration


def reset_to_default() -> HashidConfig:
    """Put the documented defaults back as the process-wide default."""
    global _configuration
    with _lock:
        _configuration = default()
        return _configuration


# ── Gateway configuration ─────────────────────────────────────


@dataclass(frozen=True)
class PakayConfig:
    """Gateway configuration. Immutable once loaded."""

    host: str = "127.0.0.1"
    port: int = 8000
    api_key: str = ""
    log_level: str = "INFO"
    hashid: HashidConfig = field(default_factory=HashidConfig)
    scopes: dict[str, dict[str, Any]] = field(default_factory=dict)


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise InvalidOption(f"Not a boolean: {value!r}")


def coerce_option(name: str, value: str) -> Any:
    """Turn a string from an INI file or the environment into a field value."""
    if name not in FIELD_NAMES:
        raise InvalidOption(f"Unknown hashid option: {name}")
    if name in _BOOL_FIELDS:
        return parse_bool(value)
    if name == "min_length":
        try:
            return int(value)
        except ValueError:
            raise InvalidOption(f"min_length must be an integer, got {value!r}") from None
    return value


def load_config(config_path: Path | None = None) -> PakayConfig:
    """Load config from INI file, then override with environment variables."""
    path = config_path or _CONFIG_FILE
    kwargs: dict = {}
    hashid_kwargs: dict[str, Any] = {}
    scopes: dict[str, dict[str, Any]] = {}

    if path.exists():
        parser = configparser.ConfigParser()
        parser.read(path)
        if parser.has_section("gateway"):
            for key in ("host", "api_key", "log_level"):
                val = parser.get("gateway", key, fallback=None)
                if val is not None:
                    kwargs[key] = val
            port_str = parser.get("gateway", "port", fallback=None)
            if port_str is not None:
                kwargs["port"] = int(port_str)
        if parser.has_section("hashid"):
            for key, val in parser.items("hashid"):
                if key == "scope_tag":
                    raise InvalidOption("scope_tag belongs in a [scope:<Name>] section")
                hashid_kwargs[key] = coerce_option(key, val)
        for section in parser.sections():
            if section.startswith("scope:"):
                name = section[len("scope:"):].strip()
                scopes[name] = {
                    key: coerce_option(key, val)
                    for key, val in parser.items(section)
                }

    env_map = {
        "PAKAY_HOST": "host",
        "PAKAY_PORT": "port",
        "PAKAY_API_KEY": "api_key",
        "PAKAY_LOG_LEVEL": "log_level",
    }
    for env_key, config_key in env_map.items():
        val = os.getenv(env_key)
        if val is not None:
            if config_key == "port":
                kwargs[config_key] = int(val)
            else:
                kwargs[config_key] = val

    hashid_env_map = {
        "PAKAY_SALT": "salt",
        "PAKAY_MIN_LENGTH": "min_length",
        "PAKAY_ALPHABET": "alphabet",
        "PAKAY_SIGN": "sign",
        "PAKAY_TEST_MODE": "test_mode",
        "PAKAY_OVERRIDE_LOOKUP": "override_lookup",
        "PAKAY_OVERRIDE_STRING_FORM": "override_string_form",
    }
    for env_key, option in hashid_env_map.items():
        val = os.getenv(env_key)
        if val is not None:
            hashid_kwargs[option] = coerce_option(option, val)

    kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return PakayConfig(
        hashid=validate(replace(default(), **hashid_kwargs)),
        scopes=scopes,
        **kwargs,
    )
