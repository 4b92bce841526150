"""Default settings and command line value validation"""

# Delay used for frames whose delay is 0, in hundredths of a second
DEFAULT_FRAME_DELAY = 10

# Timeout of HTTP requests in seconds
FETCH_TIMEOUT = 30

# Actions triggered by key presses
PAUSE = 'pause'
HELP = 'help'
NEXT_FRAME = 'next'
PREVIOUS_FRAME = 'previous'
QUIT = 'quit'

KEY_BINDINGS = {
    'space': PAUSE,
    '?': HELP,
    'n': NEXT_FRAME,
    'right': NEXT_FRAME,
    'p': PREVIOUS_FRAME,
    'left': PREVIOUS_FRAME,
    'q': QUIT,
    'ctrl+c': QUIT,
}

HELP_TEXT = """
  Space      Pause/Resume
  n / →      Next frame
  p / ←      Previous frame
  ?          Toggle help
  q / Ctrl+C Quit
"""

# 256 color palette indexes used by the overlays
STATUS_COLOR = 240
LOADING_COLOR = 86
HELP_COLOR = 213


def validate_geometry(screen_geometry):
    """Raise ValueError if 'screen_geometry' does not conform to <integer>x<integer> format"""
    columns, rows = [int(value) for value in screen_geometry.lower().split('x')]
    if columns <= 0 or rows <= 0:
        raise ValueError('Invalid value for screen-geometry option: "{}"'.format(screen_geometry))
    return columns, rows


def validate_delay(delay):
    """Return the delay in hundredths of a second from a value in milliseconds

    The value may carry an 'ms' suffix and must be at least 10ms. Raise
    ValueError otherwise.
    """
    if delay.lower().endswith('ms'):
        delay = delay[:-len('ms')]

    if delay.isdigit() and int(delay) >= 10:
        return int(delay) // 10
    raise ValueError('delay must be an integer greater than or equal to 10ms')
