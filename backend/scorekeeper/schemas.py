from typing import Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, StrictInt, ConfigDict

from .config import (
    DEFAULT_GAMES_TO_WIN,
    DEFAULT_POINTS_TO_WIN,
    DEFAULT_SETS_TO_WIN,
    DEFAULT_WIN_BY,
)

ScoringMode = Literal["flat", "hierarchical"]


class MatchConfig(BaseModel):
    """Scoring rules fixed when a match is created.

    ``winBy`` defaults to ``DEFAULT_WIN_BY`` for flat matches and to ``1``
    (first to ``pointsToWin``) inside hierarchical games. ``gamesToWin`` and
    ``setsToWin`` only apply to hierarchical matches.
    """

    mode: ScoringMode = "flat"
    pointsToWin: StrictInt = DEFAULT_POINTS_TO_WIN
    winBy: Optional[StrictInt] = None
    gamesToWin: Optional[StrictInt] = None
    setsToWin: Optional[StrictInt] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def hierarchical(self) -> bool:
        return self.mode == "hierarchical"

    @property
    def margin(self) -> int:
        if self.winBy is not None:
            return self.winBy
        return 1 if self.hierarchical else DEFAULT_WIN_BY

    @property
    def games_needed(self) -> int:
        return self.gamesToWin if self.gamesToWin is not None else DEFAULT_GAMES_TO_WIN

    @property
    def sets_needed(self) -> int:
        return self.setsToWin if self.setsToWin is not None else DEFAULT_SETS_TO_WIN


class PointOutcome(BaseModel):
    """Result of one played point as reported by the scorer."""

    winnerId: str = Field(..., min_length=1)
    faults: StrictInt = Field(default=0, ge=0)
    lets: StrictInt = Field(default=0, ge=0)
    ace: bool = False
    unforcedError: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class ScoreOut(BaseModel):
    """Per-participant counts at the open scope.

    ``games`` and ``sets`` are ``None`` for flat matches.
    """

    points: Dict[str, int]
    games: Optional[Dict[str, int]] = None
    sets: Optional[Dict[str, int]] = None


class ScoreUpdate(BaseModel):
    """Next state returned after a scoring transaction."""

    matchId: str
    pointNumber: Optional[int] = None
    setId: Optional[str] = None
    gameId: Optional[str] = None
    serverId: Optional[str] = None
    receiverId: Optional[str] = None
    tallies: ScoreOut
    complete: bool = False
    winnerId: Optional[str] = None


class PlayerMatchStats(BaseModel):
    """Serving and error counters for one player in one match."""

    playerId: str
    faults: int = 0
    doubleFaults: int = 0
    lets: int = 0
    aces: int = 0
    unforcedErrors: int = 0


class StandingRow(BaseModel):
    """One row of a competition table."""

    playerId: str
    played: int
    wins: int
    losses: int


class MatchOut(BaseModel):
    """Match record together with its currently open scope."""

    id: str
    competitionId: Optional[str] = None
    config: MatchConfig
    playerIds: List[str]
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    winnerId: Optional[str] = None
    openPoint: Optional[ScoreUpdate] = None
