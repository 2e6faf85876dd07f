"""evo-installer: terminal dashboard and prompts for the Evolution CMS installer."""

# Configuration
from evo.installer.config import InstallerSettings

# Keyboard input handling
from evo.installer.keys import Key, KeyBuffer, parse_key, split_keys

# Log region
from evo.installer.log_region import LogBuffer, format_progress_line

# Header panels
from evo.installer.panels import StatusItem, StepItem, compose_fixed_block

# Prompt state machines
from evo.installer.prompts import MenuSelect, PromptState, TextPrompt

# Renderer
from evo.installer.renderer import TuiRenderer, new_renderer

# Terminal interface
from evo.installer.terminal import ProcessTerminal, Terminal, is_interactive

# Utilities
from evo.installer.utils import strip_ansi, truncate_to_width, visible_width

__all__ = [
    "InstallerSettings",
    "Key",
    "KeyBuffer",
    "LogBuffer",
    "MenuSelect",
    "ProcessTerminal",
    "PromptState",
    "StatusItem",
    "StepItem",
    "Terminal",
    "TextPrompt",
    "TuiRenderer",
    "compose_fixed_block",
    "format_progress_line",
    "is_interactive",
    "new_renderer",
    "parse_key",
    "split_keys",
    "strip_ansi",
    "truncate_to_width",
    "visible_width",
]
