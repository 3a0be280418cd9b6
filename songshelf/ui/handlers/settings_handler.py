"""
Handles settings-related actions for the CLI.
"""
from pathlib import Path

from pydantic import ValidationError

from songshelf.core.settings import Settings, LibraryOrder, save_settings
from songshelf.ui.input_utils import get_input, get_number, get_yes_no


class SettingsHandler:
    def __init__(self, settings: Settings):
        """
        Initialize the SettingsHandler.

        Args:
            settings: The application settings object.
        """
        self.settings = settings

    async def _print_settings_menu(self) -> None:
        """Prints the settings menu."""
        print("\n=== Settings ===")
        print(f"1. Data Folder: {self.settings.data_root}")
        print(f"2. Metadata Service: {self.settings.metadata_base_url}")
        print(f"3. Library Order: {self.settings.library_order.value}")
        print(f"4. Connection Timeout: {self.settings.connection_timeout}s")
        print(f"5. Volume: {self.settings.volume}")
        print("0. Back")
        print("================\n")
        print("Data folder and volume changes apply after a restart.")

    async def handle_settings(self) -> bool:
        """Handle the settings menu."""
        while True:
            await self._print_settings_menu()
            choice = await get_input("Enter your choice")

            if not choice or choice == "0":
                save_settings(self.settings)
                print("Settings saved.")
                return True

            try:
                if choice == "1":
                    path_str = await get_input("Enter data folder", str(self.settings.data_root))
                    if path_str:
                        self.settings.data_root = Path(path_str)
                        print(f"Data folder set to: {self.settings.data_root}")
                elif choice == "2":
                    url = await get_input("Enter metadata service URL", self.settings.metadata_base_url)
                    if url:
                        self.settings.metadata_base_url = url
                elif choice == "3":
                    by_title = await get_yes_no(
                        "Sort library by title? (No keeps folder order)",
                        self.settings.library_order == LibraryOrder.TITLE,
                    )
                    self.settings.library_order = LibraryOrder.TITLE if by_title else LibraryOrder.FILESYSTEM
                elif choice == "4":
                    timeout = await get_number("Connection timeout (seconds)", self.settings.connection_timeout)
                    if timeout is not None:
                        self.settings.connection_timeout = int(timeout)
                elif choice == "5":
                    volume = await get_number("Volume (0-100)", self.settings.volume)
                    if volume is not None:
                        self.settings.volume = int(volume)
                else:
                    print("Invalid choice.")
                    continue
            except (ValidationError, OSError) as e:
                print(f"Invalid value: {e}")
                continue
            save_settings(self.settings)
