"""
Bridge between external transport controls (media keys, OS media
sessions) and the playback engine.
"""

from enum import Enum
from typing import Callable, Dict, Union

from songshelf.core.errors import CommandRejected
from songshelf.playback.engine import PlaybackEngine
from songshelf.utils.logger import get_logger


class RemoteCommand(str, Enum):
    PLAY = "play"
    PAUSE = "pause"


class CommandStatus(str, Enum):
    SUCCESS = "success"
    COMMAND_FAILED = "commandFailed"


class RemoteCommandCenter:
    """Maps inbound transport commands onto engine operations and reports acceptance."""

    def __init__(self, engine: PlaybackEngine):
        self.engine = engine
        self.logger = get_logger(__name__)
        self._handlers: Dict[RemoteCommand, Callable[[], CommandStatus]] = {
            RemoteCommand.PLAY: self.handle_play,
            RemoteCommand.PAUSE: self.handle_pause,
        }

    def handle_play(self) -> CommandStatus:
        """Resume the loaded track; fails when nothing is loaded or it is already playing."""
        return self._run(RemoteCommand.PLAY, self.engine.resume)

    def handle_pause(self) -> CommandStatus:
        """Pause the playing track; fails when nothing is playing."""
        return self._run(RemoteCommand.PAUSE, self.engine.pause)

    def dispatch(self, command: Union[RemoteCommand, str]) -> CommandStatus:
        try:
            handler = self._handlers[RemoteCommand(command)]
        except ValueError:
            self.logger.warning(f"Unknown remote command: {command}")
            return CommandStatus.COMMAND_FAILED
        return handler()

    def _run(self, command: RemoteCommand, operation: Callable[[], None]) -> CommandStatus:
        try:
            operation()
        except CommandRejected as e:
            self.logger.debug(f"Remote {command.value} rejected: {e.detail}")
            return CommandStatus.COMMAND_FAILED
        return CommandStatus.SUCCESS
