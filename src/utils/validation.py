"""
Validation of command line and configuration inputs
"""
from pathlib import Path
from typing import Dict, Mapping, Union

from config import MAX_WEEKS


class ValidationError(Exception):
    """Raised when a user supplied value is unusable"""
    pass


class InputValidator:
    """Validates user inputs and configuration"""

    VALID_POSITIONS = {'QB', 'RB', 'WR', 'TE', 'K', 'DEF'}
    POSITION_ALIASES = {'DST': 'DEF', 'D/ST': 'DEF'}

    MIN_TEAMS = 4
    MAX_TEAMS = 32

    MAX_STARTERS_PER_POSITION = 10

    @staticmethod
    def validate_league_id(league_id: Union[str, int, None]) -> str:
        """Sleeper league ids are long numeric strings"""
        if league_id is None or not str(league_id).strip():
            raise ValidationError("League ID is required")

        cleaned = str(league_id).strip()
        if not cleaned.isdigit():
            raise ValidationError(f"League ID must be numeric: {league_id}")

        return cleaned

    @staticmethod
    def validate_team_count(teams: int) -> int:
        if not isinstance(teams, int) or isinstance(teams, bool):
            raise ValidationError("Number of teams must be an integer")

        if teams < InputValidator.MIN_TEAMS:
            raise ValidationError(f"Number of teams must be at least {InputValidator.MIN_TEAMS}")

        if teams > InputValidator.MAX_TEAMS:
            raise ValidationError(f"Number of teams cannot exceed {InputValidator.MAX_TEAMS}")

        return teams

    @staticmethod
    def validate_teams_per_round(teams_per_round: int) -> int:
        """Picks per round used to flatten "round.pick" ADP labels"""
        try:
            return InputValidator.validate_team_count(teams_per_round)
        except ValidationError as e:
            raise ValidationError(f"Invalid teams per round: {e}")

    @staticmethod
    def validate_week(week: Union[int, str]) -> int:
        try:
            week_int = int(week)
        except (TypeError, ValueError):
            raise ValidationError(f"Week must be a number: {week}")

        if week_int < 1 or week_int > MAX_WEEKS:
            raise ValidationError(f"Week must be between 1 and {MAX_WEEKS}: {week_int}")

        return week_int

    @staticmethod
    def validate_position(position: str) -> str:
        if not position or not isinstance(position, str):
            raise ValidationError("Position must be a non-empty string")

        pos = position.strip().upper()
        pos = InputValidator.POSITION_ALIASES.get(pos, pos)
        if pos not in InputValidator.VALID_POSITIONS:
            raise ValidationError(
                f"Invalid position: {position}. Valid positions: "
                f"{', '.join(sorted(InputValidator.VALID_POSITIONS))}"
            )
        return pos

    @staticmethod
    def validate_starter_requirements(requirements: Mapping[str, int]) -> Dict[str, int]:
        """Starters per position used for tier weighting"""
        if not isinstance(requirements, Mapping):
            raise ValidationError("Starter requirements must be a mapping")

        validated = {}
        for position, count in requirements.items():
            pos = InputValidator.validate_position(position)

            if not isinstance(count, int) or isinstance(count, bool):
                raise ValidationError(f"Starter count for {position} must be an integer")

            if count < 0:
                raise ValidationError(f"Starter count for {position} cannot be negative")

            if count > InputValidator.MAX_STARTERS_PER_POSITION:
                raise ValidationError(f"Starter count for {position} seems too high: {count}")

            validated[pos] = count

        return validated

    @staticmethod
    def validate_file_path(path: Union[str, Path], must_exist: bool = False) -> Path:
        if path is None or not str(path).strip():
            raise ValidationError("File path cannot be empty")

        path_obj = Path(path).expanduser()

        if must_exist and not path_obj.exists():
            raise ValidationError(f"Path does not exist: {path}")

        if must_exist and not path_obj.is_file():
            raise ValidationError(f"Path is not a file: {path}")

        return path_obj
