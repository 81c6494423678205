"""Bundled prompt texts, shipped as package data."""
from importlib import resources

SYSTEM_INSTRUCTION_FILE = "system_instruction.txt"


def default_system_instruction_path() -> str:
    return str(resources.files(__name__) / SYSTEM_INSTRUCTION_FILE)
