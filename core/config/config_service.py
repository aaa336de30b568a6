"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
ENV_PREFIX = "SIGNSTAMP_"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Canvas": {
        "width": "300",
        "height": "150",
        "stroke_width": "2",
        "stroke_color": "#000000",
    },
    "Text": {
        "font_path": "",
        "font_size": "40",
        "margin": "10",
        "color": "#000000",
    },
    "Placement": {
        "default_x": "100",
        "default_y": "100",
        "mark_width": "150",
        "mark_height": "75",
        "preserve_aspect": "false",
        "page_overflow": "reject",
    },
    "Preview": {
        "render_width": "400",
        "mark_opacity": "0.6",
    },
    "Export": {
        "default_filename": "signed.pdf",
        "suffix": "_signed",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class CanvasConfig:
    width: int = 300
    height: int = 150
    stroke_width: int = 2
    stroke_color: str = "#000000"


@dataclass
class TextConfig:
    font_path: str = ""
    font_size: int = 40
    margin: int = 10
    color: str = "#000000"


@dataclass
class PlacementConfig:
    default_x: float = 100.0
    default_y: float = 100.0
    mark_width: float = 150.0
    mark_height: float = 75.0
    preserve_aspect: bool = False
    page_overflow: str = "reject"   # "reject" | "clamp"


@dataclass
class PreviewConfig:
    render_width: int = 400
    mark_opacity: float = 0.6


@dataclass
class ExportConfig:
    default_filename: str = "signed.pdf"
    suffix: str = "_signed"


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser()
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    if typ in (Path, "Path"):
        return Path(str(value)).expanduser()
    if typ in (bool, "bool"):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ in (int, "int"):
        return int(float(value))
    if typ in (float, "float"):
        return float(value)
    if typ in (str, "str"):
        return str(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, field.type)
    return cls(**kwargs)


def _env_overlays(environ: Mapping[str, str]) -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "SignStamp" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "signstamp" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety.

    Layers, lowest precedence first: embedded defaults, ``defaults.ini``,
    ``SIGNSTAMP_<SECTION>__<KEY>`` environment variables, user config file.
    """

    def __init__(
        self,
        *,
        defaults_ini: Optional[Path] = None,
        user_ini: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._lock = RLock()
        self._defaults_ini = Path(defaults_ini) if defaults_ini else DEFAULTS_INI
        self._user_ini = Path(user_ini) if user_ini else _user_config_path()
        self._environ = environ if environ is not None else os.environ
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if self._defaults_ini.exists():
                _apply(merged, _read_ini(self._defaults_ini), "defaults.ini",
                       str(self._defaults_ini), sources)

            # Layer 2: environment variables
            _apply(merged, _env_overlays(self._environ), "env", "os.environ", sources)

            # Layer 3: user overrides
            if self._user_ini.exists():
                _apply(merged, _read_ini(self._user_ini), "user", str(self._user_ini), sources)

            self._merged = merged
            self._sources = sources

            self.canvas = _build_dataclass(CanvasConfig, merged.get("Canvas", {}))
            self.text = _build_dataclass(TextConfig, merged.get("Text", {}))
            self.placement = _build_dataclass(PlacementConfig, merged.get("Placement", {}))
            self.preview = _build_dataclass(PreviewConfig, merged.get("Preview", {}))
            self.export = _build_dataclass(ExportConfig, merged.get("Export", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


_config_service: Optional[ConfigService] = None
_config_lock = RLock()


def get_config_service() -> ConfigService:
    """Lazily created process-wide instance."""
    global _config_service
    with _config_lock:
        if _config_service is None:
            _config_service = ConfigService()
        return _config_service
