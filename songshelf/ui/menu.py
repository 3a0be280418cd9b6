"""
Menu system for Songshelf.

This module provides a numbered menu for the interactive CLI. Item labels
and availability may be computed at display time, so the menu follows the
player's state.
"""

from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar, Union

from songshelf.ui.input_utils import get_input

T = TypeVar('T')

Label = Union[str, Callable[[], str]]
Predicate = Union[bool, Callable[[], bool]]


class MenuItem(Generic[T]):
    """
    Menu item class.

    This class represents a menu item with a label, action, and optional data.
    """

    def __init__(
        self,
        label: Label,
        action: Optional[Callable[..., Awaitable[T]]] = None,
        data: Any = None,
        enabled: Predicate = True,
    ):
        """
        Initialize a menu item.

        Args:
            label: Text, or a callable returning the text at display time
            action: Optional async function to call when the item is selected
            data: Optional data to pass to the action
            enabled: Whether the item is offered; may be a callable
        """
        self._label = label
        self.action = action
        self.data = data
        self._enabled = enabled

    @property
    def label(self) -> str:
        return self._label() if callable(self._label) else self._label

    @property
    def enabled(self) -> bool:
        return bool(self._enabled() if callable(self._enabled) else self._enabled)

    async def run(self) -> Optional[T]:
        if self.action is None:
            return None
        if self.data is not None:
            return await self.action(self.data)
        return await self.action()


class Menu:
    """
    Menu class.

    This class represents a menu with a title and items.
    """

    def __init__(self, title: str, items: Optional[List[MenuItem]] = None, exit_label: str = "Back"):
        self.title = title
        self.items = items or []
        self.exit_label = exit_label

    def add_item(self, item: MenuItem) -> None:
        self.items.append(item)

    def get_enabled_items(self) -> List[MenuItem]:
        return [item for item in self.items if item.enabled]

    async def display(self, prompt: str = "Enter your choice", header: Optional[str] = None) -> Optional[Any]:
        """
        Display the menu and run the chosen item's action.

        Args:
            prompt: Prompt to display
            header: Optional line printed under the title (e.g. now playing)

        Returns:
            True after an action ran, or None when the user chose to leave
        """
        items = self.get_enabled_items()

        print(f"\n=== {self.title} ===")
        if header:
            print(header)

        for i, item in enumerate(items):
            print(f"{i + 1}. {item.label}")

        print(f"0. {self.exit_label}")
        print("=" * (len(self.title) + 8))

        while True:
            choice = await get_input(prompt)

            if not choice or choice == "0":
                return None

            try:
                index = int(choice) - 1
            except ValueError:
                print("Please enter a number")
                continue

            if 0 <= index < len(items):
                await items[index].run()
                return True

            print(f"Please enter a number between 0 and {len(items)}")
