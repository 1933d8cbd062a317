"""Default tunables for the diff review extension."""

# Minimum terminal width for side-by-side view
SIDE_BY_SIDE_MIN_WIDTH = 120

# Maximum files shown in the status widget
MAX_WIDGET_FILES = 5

# Default context lines around diff hunks
DIFF_CONTEXT_LINES = 3
