from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
    )
    op.create_table(
        "competition",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("competition_id", sa.String(), sa.ForeignKey("competition.id"), nullable=True),
        sa.Column("mode", sa.String(), nullable=False),
        sa.Column("points_to_win", sa.Integer(), nullable=False),
        sa.Column("win_by", sa.Integer(), nullable=False),
        sa.Column("games_to_win", sa.Integer(), nullable=True),
        sa.Column("sets_to_win", sa.Integer(), nullable=True),
        sa.Column("player1_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("player2_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("start_date", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("player.id"), nullable=True),
    )
    op.create_table(
        "match_set",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("player.id"), nullable=True),
        sa.UniqueConstraint("match_id", "number", name="uq_match_set_match_id_number"),
    )
    op.create_table(
        "game",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("set_id", sa.String(), sa.ForeignKey("match_set.id"), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("server_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("receiver_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("player.id"), nullable=True),
        sa.UniqueConstraint("set_id", "number", name="uq_game_set_id_number"),
    )
    op.create_table(
        "point",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("game_id", sa.String(), sa.ForeignKey("game.id"), nullable=True),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("server_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("receiver_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("player.id"), nullable=True),
        sa.Column("faults", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("ace", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("unforced_error", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("match_id", "seq", name="uq_point_match_id_seq"),
        sa.UniqueConstraint("game_id", "number", name="uq_point_game_id_number"),
    )
    op.create_table(
        "match_result",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False, unique=True),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
    )

def downgrade():
    for t in [
        "match_result", "point", "game", "match_set", "match", "competition", "player"
    ]:
        op.drop_table(t)
