from __future__ import annotations

from enum import Enum


class RoomStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class Role(str, Enum):
    UNASSIGNED = "unassigned"
    CIVILIAN = "civilian"
    UNDERCOVER = "undercover"
    MR_WHITE = "mr_white"


class Winner(str, Enum):
    NONE = "none"
    CIVILIANS = "civilians"
    UNDERCOVER = "undercover"
    MR_WHITE = "mr_white"
