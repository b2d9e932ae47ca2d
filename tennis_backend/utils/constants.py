"""
Constants used across the tournament scoring system.
"""

# Match format defaults
DEFAULT_GAMES_PER_SET = 6
DEFAULT_SETS_PER_MATCH = 3
MAX_SETS_PER_MATCH = 5

# Winner resolution on equal aggregate games.
# Observed rule: player 1 is awarded the match. Pending product confirmation;
# set to False to reject tied matches instead.
TIE_BREAK_DEFAULTS_TO_PLAYER1 = True

# Password policy
MIN_PASSWORD_LENGTH = 8
