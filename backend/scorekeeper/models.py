from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Integer,
    Boolean,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from .db import Base

FLAT = "flat"
HIERARCHICAL = "hierarchical"


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)


class Competition(Base):
    __tablename__ = "competition"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    competition_id = Column(String, ForeignKey("competition.id"), nullable=True)
    mode = Column(String, nullable=False)  # "flat" | "hierarchical"
    points_to_win = Column(Integer, nullable=False)
    win_by = Column(Integer, nullable=False)
    games_to_win = Column(Integer, nullable=True)
    sets_to_win = Column(Integer, nullable=True)
    player1_id = Column(String, ForeignKey("player.id"), nullable=False)
    player2_id = Column(String, ForeignKey("player.id"), nullable=False)
    start_date = Column(DateTime, nullable=False, server_default=func.now())
    end_date = Column(DateTime, nullable=True)
    winner_id = Column(String, ForeignKey("player.id"), nullable=True)

    @property
    def participants(self) -> tuple[str, str]:
        return (self.player1_id, self.player2_id)


class MatchSet(Base):
    __tablename__ = "match_set"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    number = Column(Integer, nullable=False)
    winner_id = Column(String, ForeignKey("player.id"), nullable=True)

    __table_args__ = (
        UniqueConstraint("match_id", "number", name="uq_match_set_match_id_number"),
    )


class Game(Base):
    __tablename__ = "game"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    set_id = Column(String, ForeignKey("match_set.id"), nullable=False)
    number = Column(Integer, nullable=False)
    server_id = Column(String, ForeignKey("player.id"), nullable=False)
    receiver_id = Column(String, ForeignKey("player.id"), nullable=False)
    winner_id = Column(String, ForeignKey("player.id"), nullable=True)

    __table_args__ = (
        UniqueConstraint("set_id", "number", name="uq_game_set_id_number"),
    )


class Point(Base):
    """One row of the point ledger.

    ``seq`` orders every point of a match; ``number`` restarts with each game
    in hierarchical matches and equals ``seq`` in flat matches. A point with
    no ``winner_id`` is the open point waiting to be played.
    """

    __tablename__ = "point"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    game_id = Column(String, ForeignKey("game.id"), nullable=True)
    seq = Column(Integer, nullable=False)
    number = Column(Integer, nullable=False)
    server_id = Column(String, ForeignKey("player.id"), nullable=False)
    receiver_id = Column(String, ForeignKey("player.id"), nullable=False)
    winner_id = Column(String, ForeignKey("player.id"), nullable=True)
    faults = Column(Integer, nullable=False, default=0)
    lets = Column(Integer, nullable=False, default=0)
    ace = Column(Boolean, nullable=False, default=False)
    unforced_error = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("match_id", "seq", name="uq_point_match_id_seq"),
        UniqueConstraint("game_id", "number", name="uq_point_game_id_number"),
    )


class MatchResult(Base):
    __tablename__ = "match_result"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False, unique=True)
    winner_id = Column(String, ForeignKey("player.id"), nullable=False)
