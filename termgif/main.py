"""Command line interface of termgif"""

import argparse
import logging
import sys
import tempfile

import termgif.config
from termgif.source import GifError, load

logger = logging.getLogger('termgif')

USAGE = """termgif source [-g GEOMETRY] [-d DELAY] [--paused] [-v] [-h]

Play a GIF animation in the terminal
"""
EPILOG = "Press '?' while viewing for keybindings"


def parse(args, default_delay):
    """Parse command line arguments

    :param args: Arguments to parse
    :param default_delay: Default delay of frames without delay in
    hundredths of a second
    :return: Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog='termgif',
        usage=USAGE,
        epilog=EPILOG
    )
    parser.add_argument(
        'source',
        help='path of a GIF file or URL of a GIF (http:// or https://)',
    )
    parser.add_argument(
        '-g', '--screen-geometry',
        help='geometry of the screen used for rendering the animation instead '
             'of the size of the terminal. The geometry must be given as the '
             'number of columns and the number of rows on the screen separated '
             'by the character "x". For example "82x19" for an 82 columns by '
             '19 rows screen.',
        metavar='GEOMETRY',
        type=termgif.config.validate_geometry
    )
    parser.add_argument(
        '-d', '--default-delay',
        type=termgif.config.validate_delay,
        metavar='DELAY',
        default=default_delay,
        help=('display time in milliseconds of frames without delay '
              '(default: {}ms)'.format(default_delay * 10))
    )
    parser.add_argument(
        '--paused',
        action='store_true',
        help='start with playback paused'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='log debug messages to a temporary file'
    )
    return parser.parse_args(args)


def play(frame_source, geometry, paused, default_delay, input_fileno, output_fileno):
    """Play the animation until the user quits"""
    from termgif.player import Player
    from termgif.term import EventLoop, TerminalMode, get_terminal_size

    if geometry is None:
        columns, lines = get_terminal_size(output_fileno)
    else:
        columns, lines = geometry

    loop = EventLoop(input_fileno, output_fileno, watch_resize=geometry is None)
    player = Player(frame_source, loop, paused=paused, min_delay=default_delay)
    with TerminalMode(input_fileno, output_fileno):
        # Do not write anything to the terminal (print, logger...) while in
        # this context manager, the screen belongs to the event loop.
        player.start(columns, lines)
        loop.run(player)


def main(args=None, input_fileno=None, output_fileno=None):
    if args is None:
        args = sys.argv
    if input_fileno is None:
        input_fileno = sys.stdin.fileno()
    if output_fileno is None:
        output_fileno = sys.stdout.fileno()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter('%(message)s')
    console_handler.setFormatter(console_formatter)
    logger.handlers = [console_handler]
    logger.setLevel(logging.INFO)

    args = parse(args[1:], termgif.config.DEFAULT_FRAME_DELAY)

    if args.verbose:
        _, log_filename = tempfile.mkstemp(prefix='termgif_', suffix='.log')
        file_handler = logging.FileHandler(filename=log_filename, mode='w')
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(file_formatter)
        logger.handlers.append(file_handler)
        logger.setLevel(logging.DEBUG)
        logger.info('Logging to {}'.format(log_filename))

    status = 0
    try:
        frame_source = load(args.source)
    except GifError as exc:
        logger.error('Error loading GIF: {}'.format(exc))
        status = 1
    else:
        # Console messages would be drawn over the animation
        console_handler.setLevel(logging.CRITICAL)
        play(frame_source, args.screen_geometry, args.paused, args.default_delay,
             input_fileno, output_fileno)

    for handler in logger.handlers:
        handler.close()

    return status
