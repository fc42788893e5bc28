from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomllib as toml

from pisanotower.utility import UserInputError
from pisanotower.workspace import ensure_workspace_seeded, workspace_dir


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [_PROFILE_] section).
    .as_dict() feeds runtime.apply().

    Added fields:
      - name:        resolved profile name (FILE.stem if not provided in [_PROFILE_])
      - description: one-line description from [_PROFILE_] or "(no description)"
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


# --- I/O -------------------------------------------------------------------


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except (OSError, toml.TOMLDecodeError) as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


# --- Metadata handling -----------------------------------------------------


def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [_PROFILE_] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("_PROFILE_") or {}
    data = {k: v for k, v in raw.items() if k != "_PROFILE_"}

    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))

    return data, name, description


# --- Validation ------------------------------------------------------------

# (section, key) -> smallest accepted integer
_INT_KEYS = {
    ("LIMITS", "SAFE_BOUND_BITS"): 2,
    ("PERIOD", "NAIVE_STEP_FACTOR"): 1,
}
_BOOL_KEYS = {("PERIOD", "VERIFY")}


def _check_limits(data: dict[str, Any], fname: str) -> None:
    """Type and range checks for the LIMITS and PERIOD values."""
    for section in ("BEHAVIOUR", "LIMITS", "PERIOD"):
        if not isinstance(data.get(section, {}), dict):
            raise UserInputError(f"{fname}: [{section}] must be a table.")

    for (section, key), minimum in _INT_KEYS.items():
        if key not in data.get(section, {}):
            continue
        val = data[section][key]
        if isinstance(val, bool) or not isinstance(val, int):
            raise UserInputError(f"{fname}: {section}.{key} must be an integer, got {val!r}.")
        if val < minimum:
            raise UserInputError(f"{fname}: {section}.{key} must be >= {minimum}, got {val}.")

    for section, key in _BOOL_KEYS:
        val = data.get(section, {}).get(key)
        if val is not None and not isinstance(val, bool):
            raise UserInputError(f"{fname}: {section}.{key} must be true or false, got {val!r}.")


# --- Public API ------------------------------------------------------------


def list_all_profiles() -> list[str]:
    """Return the list of available profile *names* (filename stems)."""
    ensure_workspace_seeded()
    pdir = _profiles_dir()
    if not pdir.exists():
        return []
    return sorted(p.stem for p in pdir.glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for all profiles.
    Profiles lacking [_PROFILE_] get "(no description)".
    """
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            raw = _load_toml(p)
        except UserInputError:
            # Best-effort listing; fall back to filename
            items.append((p.stem, "(unreadable)"))
            continue
        _, nm, desc = _split_profile_data(raw, p.stem)
        items.append((nm, desc))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def load_settings(name: str | None) -> Settings:
    """
    Load a profile by name (default 'default'), strip the [_PROFILE_] metadata
    and return Settings(data=..., name=..., description=..., _source=path).
    """
    if not name:
        name = "default"

    path = _profile_path(name)
    if not path.exists():
        raise UserInputError(f"profile '{name}' not found at {path}")

    raw = _load_toml(path)
    data, resolved_name, description = _split_profile_data(raw, path.stem)

    _check_limits(data, path.name)

    # Flags must be real booleans; drop anything else so runtime defaults apply
    beh = data.get("BEHAVIOUR", {}) or {}
    data["BEHAVIOUR"] = {str(k): v for k, v in beh.items() if isinstance(v, bool)}

    return Settings(
        data=data,
        name=resolved_name,
        description=description,
        _source=path,
    )
