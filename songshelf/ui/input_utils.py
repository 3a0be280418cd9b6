"""
Utility functions for handling user input in the CLI.
"""
import asyncio
from typing import Optional


async def get_input(prompt: str, default: Optional[str] = None) -> str:
    """
    Get input from the user without blocking the event loop.

    Args:
        prompt: Prompt to display
        default: Default value

    Returns:
        User input, or "" when cancelled
    """
    if default:
        prompt_display = f"{prompt} [{default}]: "
    else:
        prompt_display = f"{prompt}: "

    try:
        value = await asyncio.to_thread(input, prompt_display)
    except (KeyboardInterrupt, EOFError):
        print("\nOperation cancelled")
        return ""
    if not value and default:
        return default
    return value.strip()


async def get_number(prompt: str, default: Optional[float] = None) -> Optional[float]:
    """
    Get a number from the user.

    Returns:
        The number, or None if the user entered nothing or cancelled
    """
    while True:
        value = await get_input(prompt, str(default) if default is not None else None)
        if not value:
            return None
        try:
            return float(value)
        except ValueError:
            print("Please enter a number.")


async def get_index(prompt: str, count: int) -> Optional[int]:
    """
    Get a 1-based choice from the user and return it 0-based.

    Returns:
        Index in [0, count), or None if the user entered nothing or cancelled
    """
    while True:
        value = await get_input(prompt)
        if not value:
            return None
        try:
            index = int(value) - 1
        except ValueError:
            print("Please enter a valid number.")
            continue
        if 0 <= index < count:
            return index
        print(f"Please enter a number between 1 and {count}.")


async def get_yes_no(prompt: str, default: bool = False) -> bool:
    """
    Get a yes/no answer from the user.

    Args:
        prompt: Prompt to display
        default: Default value

    Returns:
        True for yes, False for no
    """
    default_str = "Y" if default else "N"
    while True:
        value = await get_input(f"{prompt} (Y/N)", default_str)
        if value.lower() in ["y", "yes"]:
            return True
        elif value.lower() in ["n", "no"]:
            return False
        if value == "":
            return default
        print("Please enter Y or N.")
