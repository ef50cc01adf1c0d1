"""CLI commands; each module exposes ``add_*_parser`` and ``handle_*_command``."""
