from enum import Enum

from singbox_rules.models import BuildStatus


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


BUILD_STATUS_STYLE = {
    BuildStatus.COMPILED: UIStyle.GREEN.value,
    BuildStatus.FALLBACK_JSON: UIStyle.YELLOW.value,
    BuildStatus.SKIPPED: UIStyle.DIM.value,
    BuildStatus.FAILED: UIStyle.RED.value,
}


def valid_style(valid: bool) -> str:
    return UIStyle.GREEN.value if valid else UIStyle.RED.value
