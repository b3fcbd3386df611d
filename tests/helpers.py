"""Builders for ranking sheets laid out like the real export, and test records"""
import csv
import io

from src.core.models import Position, RankingRecord

SHEET_WIDTH = 48


def standard_block(name, team_bye="", pos_rank="", ecr="", tier="", adp="", val_adp="",
                   val_f="", val="", val_c="", ps="", dyn="", drafted=""):
    return ["", "", "", name, team_bye, pos_rank, ecr, tier, adp, val_adp,
            val_f, val, val_c, ps, dyn, drafted]


def defense_kicker_block(name, team_bye="", pos_rank="", ecr="", proj="", tier=""):
    return ["", "", "", name, team_bye, pos_rank, ecr, proj, tier]


def _place(row, start, cells):
    # Empty cells leave neighbouring blocks alone; kicker padding overlaps the defense block
    for offset, value in enumerate(cells):
        if value:
            row[start + offset] = value


def build_sheet_rows(qbs=(), rbs=(), wrs=(), tes=(), defenses=(), kickers=(), te_title=True):
    """Rows of a sheet with the default layout; each block is a list of cell lists"""
    rows = [[""] * SHEET_WIDTH for _ in range(74 + max(len(defenses), len(kickers), 1))]
    rows[0][3] = "MockoSheet 2025"
    for start in (0, 16, 32):
        rows[6][start + 3] = "Player"

    for i, cells in enumerate(qbs):
        _place(rows[7 + i], 0, cells)
    for i, cells in enumerate(rbs):
        _place(rows[7 + i], 16, cells)
    for i, cells in enumerate(wrs):
        _place(rows[7 + i], 32, cells)

    if te_title:
        rows[41][3] = "TIGHT ENDS"
    for i, cells in enumerate(tes):
        _place(rows[42 + i], 0, cells)

    for i, cells in enumerate(defenses):
        _place(rows[74 + i], 0, cells)
    for i, cells in enumerate(kickers):
        _place(rows[74 + i], 7, cells)

    return rows


def rows_to_csv(rows):
    buffer = io.StringIO()
    csv.writer(buffer).writerows(rows)
    return buffer.getvalue()


def record(name, position, tier="", adp=0.0, ecr=0, val=0.0, val_adp="", ps=""):
    return RankingRecord(
        name=name,
        team_and_bye_week="",
        position_rank=0,
        expert_consensus_rank=ecr,
        position_tier=tier,
        average_draft_position=adp,
        value_over_adp=val_adp,
        val_f=0.0,
        val=val,
        val_c=0.0,
        playoff_share=ps,
        dynasty_value=0.0,
        drafted_marker="",
        position=Position(position),
    )


