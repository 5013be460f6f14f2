"""
gitcheckout CLI package.

Commands are discovered from the domain subfolders (auth/, submodule/).

Utilities for building commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Settings loading and git runner construction
"""
from ._output import OutputFormatter
from ._args import add_config_flag, add_json_flag, add_repository_flags, add_standard_flags
from ._utils import git_for, load_command_settings, settings_overrides

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_config_flag",
    "add_json_flag",
    "add_repository_flags",
    "add_standard_flags",
    # Utilities
    "git_for",
    "load_command_settings",
    "settings_overrides",
]
