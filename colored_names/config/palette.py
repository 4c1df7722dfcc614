"""
Palette configuration: the available chat colors and the policy flags.

The palette document is a YAML mapping. Parsing goes through
:func:`normalize_document`, which fills defaults and rewrites the document
into one canonical shape, so persisting a normalized document again always
yields the same bytes.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from colored_names.log_config import get_logger

logger = get_logger(__name__)

SECTION_SIGN = "§"

COLORS_KEY = "colors"
SCOREBOARD_KEY = "scoreboard"
AUTO_UPDATE_KEY = "auto-update"
COLLISION_POLICY_KEY = "collision-policy"

CollisionPolicyName = Literal["random", "least-used"]
COLLISION_POLICY_NAMES: Tuple[str, ...] = ("random", "least-used")


class ConfigError(ValueError):
    """The palette document is malformed or enables no colors."""


class ChatColor(str, Enum):
    """The sixteen host chat colors, valued by their legacy format code."""
    BLACK = "0"
    DARK_BLUE = "1"
    DARK_GREEN = "2"
    DARK_AQUA = "3"
    DARK_RED = "4"
    DARK_PURPLE = "5"
    GOLD = "6"
    GRAY = "7"
    DARK_GRAY = "8"
    BLUE = "9"
    GREEN = "a"
    AQUA = "b"
    RED = "c"
    LIGHT_PURPLE = "d"
    YELLOW = "e"
    WHITE = "f"

    @property
    def code(self) -> str:
        """The legacy formatting prefix, e.g. ``§c`` for RED."""
        return f"{SECTION_SIGN}{self.value}"

    @property
    def label(self) -> str:
        """Lowercase name used in team labels and messages."""
        return self.name.lower()

    def format(self, text: str) -> str:
        """Wrap ``text`` in this color and reset formatting afterwards."""
        return f"{self.code}{text}{SECTION_SIGN}r"

    @classmethod
    def lookup(cls, name: Any) -> Optional["ChatColor"]:
        """Resolve a user-facing color name ("light purple", "Dark-Red")."""
        if isinstance(name, ChatColor):
            return name
        if not isinstance(name, str):
            return None
        key = name.strip().upper().replace(" ", "_").replace("-", "_")
        return cls.__members__.get(key)


# Low-contrast colors are off by default
DEFAULT_DISABLED = frozenset({
    ChatColor.BLACK,
    ChatColor.DARK_BLUE,
    ChatColor.GRAY,
    ChatColor.DARK_GRAY,
    ChatColor.WHITE,
})


class Palette(BaseModel):
    """
    Immutable result of parsing a palette document.

    :ivar colors: Enabled colors in canonical order
    :ivar scoreboard: Whether team membership is synchronized
    :ivar auto_update: Reported only
    :ivar collision_policy: Name of the policy used once every color is held
    """

    model_config = ConfigDict(frozen=True)

    colors: Tuple[ChatColor, ...]
    scoreboard: bool = True
    auto_update: bool = True
    collision_policy: CollisionPolicyName = "random"

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v: Tuple[ChatColor, ...]) -> Tuple[ChatColor, ...]:
        """
        Validate the palette holds at least one color and no duplicates.

        :param v: Enabled colors
        :return: The validated colors
        :raises ValueError: If empty or duplicated
        """
        if not v:
            raise ValueError("No colors are enabled")
        if len(set(v)) != len(v):
            raise ValueError("Palette lists a color more than once")
        return v

    @property
    def size(self) -> int:
        return len(self.colors)

    def to_document(self) -> Dict[str, Any]:
        """Render this palette back into a normalized document."""
        enabled = set(self.colors)
        return {
            COLORS_KEY: {color.name: color in enabled for color in ChatColor},
            SCOREBOARD_KEY: self.scoreboard,
            AUTO_UPDATE_KEY: self.auto_update,
            COLLISION_POLICY_KEY: self.collision_policy,
        }


def default_document() -> Dict[str, Any]:
    """The document written when no configuration exists yet."""
    return {
        COLORS_KEY: {color.name: color not in DEFAULT_DISABLED for color in ChatColor},
        SCOREBOARD_KEY: True,
        AUTO_UPDATE_KEY: True,
        COLLISION_POLICY_KEY: "random",
    }


def _require_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def _normalize_colors(raw: Any) -> Dict[str, bool]:
    defaults = default_document()[COLORS_KEY]
    if raw is None:
        return dict(defaults)

    if isinstance(raw, list):
        enabled = set()
        for item in raw:
            color = ChatColor.lookup(item)
            if color is None:
                logger.warning(f"[Palette] Ignoring unknown color {item!r}")
                continue
            enabled.add(color)
        return {color.name: color in enabled for color in ChatColor}

    if isinstance(raw, dict):
        result = dict(defaults)
        for key, value in raw.items():
            color = ChatColor.lookup(key)
            if color is None:
                logger.warning(f"[Palette] Ignoring unknown color {key!r}")
                continue
            result[color.name] = _require_bool(f"{COLORS_KEY}.{key}", value)
        return result

    raise ConfigError(
        f"'{COLORS_KEY}' must be a mapping of color names or a list, got {type(raw).__name__}"
    )


def normalize_document(raw: Any) -> Dict[str, Any]:
    """
    Validate a raw document and rewrite it into canonical form.

    Missing keys take their defaults, color names are canonicalized and
    listed in palette order, and unknown keys are dropped with a warning.

    :param raw: The parsed YAML document (``None`` for an empty file)
    :return: The normalized document
    :raises ConfigError: If the document shape or a value is invalid
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(raw).__name__}")

    known = {COLORS_KEY, SCOREBOARD_KEY, AUTO_UPDATE_KEY, COLLISION_POLICY_KEY}
    for key in raw:
        if key not in known:
            logger.warning(f"[Palette] Ignoring unknown configuration key {key!r}")

    policy = raw.get(COLLISION_POLICY_KEY, "random")
    if policy not in COLLISION_POLICY_NAMES:
        raise ConfigError(
            f"'{COLLISION_POLICY_KEY}' must be one of {', '.join(COLLISION_POLICY_NAMES)}, got {policy!r}"
        )

    return {
        COLORS_KEY: _normalize_colors(raw.get(COLORS_KEY)),
        SCOREBOARD_KEY: _require_bool(SCOREBOARD_KEY, raw.get(SCOREBOARD_KEY, True)),
        AUTO_UPDATE_KEY: _require_bool(AUTO_UPDATE_KEY, raw.get(AUTO_UPDATE_KEY, True)),
        COLLISION_POLICY_KEY: policy,
    }


def _enabled(colors: Dict[str, bool]) -> List[ChatColor]:
    return [ChatColor[name] for name, on in colors.items() if on]


def parse_palette(raw: Any) -> Palette:
    """
    Parse a raw document into a :class:`Palette`.

    :param raw: The parsed YAML document
    :return: The palette
    :raises ConfigError: If the document is malformed or enables no colors
    """
    document = normalize_document(raw)
    try:
        return Palette(
            colors=tuple(_enabled(document[COLORS_KEY])),
            scoreboard=document[SCOREBOARD_KEY],
            auto_update=document[AUTO_UPDATE_KEY],
            collision_policy=document[COLLISION_POLICY_KEY],
        )
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ConfigError(f"Invalid palette: {messages}") from e


def palette_of(colors: Iterable[ChatColor], **flags: Any) -> Palette:
    """Build a palette directly from colors, bypassing the document."""
    try:
        return Palette(colors=tuple(colors), **flags)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ConfigError(f"Invalid palette: {messages}") from e
