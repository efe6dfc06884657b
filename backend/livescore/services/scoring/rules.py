"""Sport catalogue and per-sport constants shared by the engines."""

SCHEDULED = 'SCHEDULED'
LIVE = 'LIVE'
COMPLETED = 'COMPLETED'
STATUS_ORDER = (SCHEDULED, LIVE, COMPLETED)

SIDES = ('A', 'B')

CRICKET = 'CRICKET'
GOAL_SPORTS = ('FOOTBALL', 'HOCKEY')
POINT_SPORTS = ('BASKETBALL', 'KABADDI', 'KHOKHO')
SET_SPORTS = ('BADMINTON', 'TABLE_TENNIS', 'VOLLEYBALL')
SPORTS = (CRICKET,) + GOAL_SPORTS + POINT_SPORTS + SET_SPORTS

# Periods are halves for most timed sports, quarters for basketball and
# innings for cricket.
MAX_PERIODS = {
    'CRICKET': 2,
    'FOOTBALL': 2,
    'HOCKEY': 2,
    'KABADDI': 2,
    'KHOKHO': 2,
    'BASKETBALL': 4,
}

TOSS_DECISIONS = {
    'CRICKET': ('BAT', 'BOWL'),
    'FOOTBALL': ('KICK_OFF', 'CHOOSE_SIDE'),
    'HOCKEY': ('KICK_OFF', 'CHOOSE_SIDE'),
    'BASKETBALL': ('FIRST_POSSESSION', 'CHOOSE_SIDE'),
    'VOLLEYBALL': ('SERVE', 'CHOOSE_SIDE'),
    'BADMINTON': ('SERVE', 'CHOOSE_SIDE'),
}
DEFAULT_TOSS_DECISIONS = ('FIRST', 'CHOOSE_SIDE')

FOUL_TYPES = {
    'FOOTBALL': ('YELLOW_CARD', 'RED_CARD', 'FOUL', 'PENALTY', 'FREE_KICK', 'OFFSIDE'),
    'BASKETBALL': ('PERSONAL_FOUL', 'TECHNICAL_FOUL', 'FLAGRANT_FOUL', 'OFFENSIVE_FOUL'),
    'HOCKEY': ('GREEN_CARD', 'YELLOW_CARD', 'RED_CARD', 'PENALTY_CORNER', 'PENALTY_STROKE'),
    'KABADDI': ('BONUS', 'SUPER_TACKLE', 'ALL_OUT'),
    'CRICKET': ('NO_BALL', 'WIDE', 'OVERTHROW'),
}

# Cricket
BALLS_PER_OVER = 6
MAX_WICKETS = 10
MAX_INNINGS = 2
EXTRA_TYPES = ('WIDE', 'NOBALL', 'BYE')
PENALTY_EXTRAS = ('WIDE', 'NOBALL')
DISMISSAL_TYPES = ('BOWLED', 'CAUGHT', 'LBW', 'RUN_OUT', 'STUMPED', 'HIT_WICKET', 'RETIRED')
BOWLER_CREDITED = ('BOWLED', 'CAUGHT', 'LBW', 'STUMPED', 'HIT_WICKET')
OUT_BY_DELIMITER = '|'


def other_side(side: str) -> str:
    return 'B' if side == 'A' else 'A'
