"""Parser for the multi-section MockoSheet ranking export

The sheet places several position groups side by side in the same rows
(QB, RB and WR blocks of 16 columns each) and stacks others below them
(TE reuses the QB columns further down, DEF and K share a narrower
layout at the bottom). Where each block lives is configuration, see
``SHEET_LAYOUT`` in config.py.
"""
import csv
import io
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from src.core.models import RankingRecord, Position, NO_DATA
from src.core.matcher import normalize_name
from src.utils.monitoring import measure_performance
from config import SHEET_LAYOUT


logger = logging.getLogger(__name__)

STANDARD = "standard"
DEFENSE_KICKER = "defense_kicker"

# Column offsets from the start of a standard block
STANDARD_COLUMNS = {
    "player": 3,
    "team_bye": 4,
    "pos_rank": 5,
    "ecr": 6,
    "pos_tier": 7,
    "adp": 8,
    "val_adp": 9,
    "val_f": 10,
    "val": 11,
    "val_c": 12,
    "ps": 13,
    "dyn": 14,
    "drafted": 15,
}

# Column offsets from the start of a defense/kicker block
DEFENSE_KICKER_COLUMNS = {
    "player": 3,
    "team_bye": 4,
    "pos_rank": 5,
    "ecr": 6,
    "proj_pts": 7,
    "pos_tier": 8,
}

_NUMBER_CHARS = re.compile(r'[^\d.\-]')
_LEADING_FLOAT = re.compile(r'-?(\d+\.?\d*|\.\d+)')
_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


class SheetParseError(Exception):
    """Raised when the ranking sheet cannot be parsed"""
    pass


class SheetStructureError(SheetParseError):
    """The sheet is missing a structural element (e.g. its header row)"""
    pass


@dataclass(frozen=True)
class SheetSection:
    """Where one position group lives in the sheet"""
    position: Position
    start_column: int
    row_start: int
    row_end: Optional[int] = None  # exclusive, None = to end of sheet
    kind: str = STANDARD
    title: Optional[str] = None

    def rows(self, total_rows: int) -> range:
        end = total_rows if self.row_end is None else min(self.row_end, total_rows)
        return range(self.row_start, end)


@dataclass(frozen=True)
class SheetLayout:
    header_row: int
    sections: Sequence[SheetSection]
    teams_per_round: int = 10
    header_tokens: Sequence[str] = field(default_factory=lambda: ("Player",))

    @classmethod
    def from_config(cls, settings: Dict, teams_per_round: Optional[int] = None) -> 'SheetLayout':
        """Build a layout from a SHEET_LAYOUT-style dictionary"""
        sections = []
        for section in settings["sections"]:
            position = Position.from_string(section["position"])
            if position is None:
                raise SheetParseError(f"Unknown position in sheet layout: {section['position']}")
            sections.append(SheetSection(
                position=position,
                start_column=section["start_column"],
                row_start=section["row_start"],
                row_end=section.get("row_end"),
                kind=section.get("kind", STANDARD),
                title=section.get("title"),
            ))
        return cls(
            header_row=settings["header_row"],
            sections=tuple(sections),
            teams_per_round=teams_per_round or settings.get("teams_per_round", 10),
            header_tokens=tuple(settings.get("header_tokens", ("Player",))),
        )

    @property
    def rejected_names(self) -> frozenset:
        titles = {s.title for s in self.sections if s.title}
        return frozenset(set(self.header_tokens) | titles)


DEFAULT_LAYOUT = SheetLayout.from_config(SHEET_LAYOUT)


def parse_number(text: Optional[str]) -> float:
    """Parse a loosely formatted number, returning 0 when nothing parses.

    Everything except digits, '.' and '-' is stripped first, so "14%"
    becomes 14.0 and "+ 2.04" becomes 2.04. A zero result means
    "unknown" to callers.
    """
    if not text or not text.strip():
        return 0.0
    cleaned = _NUMBER_CHARS.sub('', text)
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_adp(text: Optional[str], teams_per_round: int = 10) -> float:
    """Convert a "round.pick" ADP such as "3.03" into an overall pick number"""
    if not text or not text.strip():
        return 0.0
    if '.' in text:
        parts = text.split('.')
        if len(parts) == 2:
            round_no = _leading_int(parts[0])
            pick = _leading_int(parts[1])
            return float((round_no - 1) * teams_per_round + pick)
    return parse_number(text)


def _cell(row: Sequence[str], index: int) -> str:
    if index < len(row):
        value = row[index]
        return value.strip() if value else ''
    return ''


def _extract_standard(row: Sequence[str], section: SheetSection, name: str,
                      teams_per_round: int) -> RankingRecord:
    start = section.start_column
    col = {key: start + offset for key, offset in STANDARD_COLUMNS.items()}

    return RankingRecord(
        name=name,
        team_and_bye_week=_cell(row, col["team_bye"]),
        position_rank=int(parse_number(_cell(row, col["pos_rank"]))),
        expert_consensus_rank=int(parse_number(_cell(row, col["ecr"]))),
        position_tier=_cell(row, col["pos_tier"]),
        average_draft_position=parse_adp(_cell(row, col["adp"]), teams_per_round),
        value_over_adp=_cell(row, col["val_adp"]),
        val_f=parse_number(_cell(row, col["val_f"])),
        val=parse_number(_cell(row, col["val"])),
        val_c=parse_number(_cell(row, col["val_c"])),
        playoff_share=_cell(row, col["ps"]),
        dynasty_value=parse_number(_cell(row, col["dyn"])),
        drafted_marker=_cell(row, col["drafted"]),
        position=section.position,
    )


def _extract_defense_or_kicker(row: Sequence[str], section: SheetSection,
                               name: str) -> RankingRecord:
    start = section.start_column
    col = {key: start + offset for key, offset in DEFENSE_KICKER_COLUMNS.items()}

    # No ADP, VAL-ADP, playoff share or dynasty data for DEF/K
    return RankingRecord(
        name=name,
        team_and_bye_week=_cell(row, col["team_bye"]),
        position_rank=int(parse_number(_cell(row, col["pos_rank"]))),
        expert_consensus_rank=int(parse_number(_cell(row, col["ecr"]))),
        position_tier=_cell(row, col["pos_tier"]),
        average_draft_position=0.0,
        value_over_adp=NO_DATA,
        val_f=0.0,
        val=parse_number(_cell(row, col["proj_pts"])),
        val_c=0.0,
        playoff_share=NO_DATA,
        dynasty_value=0.0,
        drafted_marker='',
        position=section.position,
    )


def extract_record(row: Sequence[str], section: SheetSection, layout: SheetLayout,
                   row_index: int) -> Optional[RankingRecord]:
    """Pull one record out of one block of one row, or None to skip it"""
    offsets = DEFENSE_KICKER_COLUMNS if section.kind == DEFENSE_KICKER else STANDARD_COLUMNS
    name = _cell(row, section.start_column + offsets["player"])
    if not name or name in layout.rejected_names:
        return None

    try:
        if section.kind == DEFENSE_KICKER:
            return _extract_defense_or_kicker(row, section, name)
        return _extract_standard(row, section, name, layout.teams_per_round)
    except Exception as e:
        logger.warning(f"Error parsing {section.position.value} player in row {row_index}: {e}")
        return None


def _check_header(rows: Sequence[Sequence[str]], layout: SheetLayout) -> None:
    if len(rows) <= layout.header_row:
        raise SheetStructureError(
            f"Could not find header row {layout.header_row} in sheet ({len(rows)} rows)"
        )
    header = {cell.strip() for cell in rows[layout.header_row] if cell}
    if not header.intersection(layout.header_tokens):
        raise SheetStructureError(
            f"Row {layout.header_row} is not a header row "
            f"(expected one of: {', '.join(layout.header_tokens)})"
        )


def parse_rows(rows: Sequence[Sequence[str]], layout: SheetLayout = DEFAULT_LAYOUT) -> List[RankingRecord]:
    """Extract ranking records from already split sheet rows.

    Records come out in row-major order: within a row, sections in the
    order the layout lists them. Overlapping row ranges can produce the
    same player twice; use ``dedupe_records`` if that matters.
    """
    _check_header(rows, layout)

    records = []
    for row_index in range(layout.header_row + 1, len(rows)):
        row = rows[row_index]
        if not row:
            continue
        for section in layout.sections:
            if row_index not in section.rows(len(rows)):
                continue
            record = extract_record(row, section, layout, row_index)
            if record:
                records.append(record)

    logger.info(f"Parsed {len(records)} ranking records from {len(rows)} rows")
    return records


def read_rows(text: str) -> List[List[str]]:
    """Split sheet text into rows, dropping blank lines"""
    reader = csv.reader(io.StringIO(text))
    return [row for row in reader if row]


@measure_performance("parse_sheet")
def parse_sheet(text: str, layout: SheetLayout = DEFAULT_LAYOUT) -> List[RankingRecord]:
    """Parse the raw CSV export of the ranking sheet"""
    if text is None or not text.strip():
        raise SheetStructureError("Ranking sheet is empty")
    return parse_rows(read_rows(text), layout)


def dedupe_records(records: Iterable[RankingRecord]) -> List[RankingRecord]:
    """Drop repeated (name, position) records, keeping the first seen"""
    seen = set()
    unique = []
    for record in records:
        key = (normalize_name(record.name), record.position)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def records_by_position(records: Iterable[RankingRecord]) -> Dict[str, int]:
    """Count records per position, with every position present"""
    counts = Counter(r.position.value for r in records)
    return {p.value: counts.get(p.value, 0) for p in Position}
