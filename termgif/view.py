"""Screen layouts of the GIF viewer

The screen is drawn as a stack of layers, each one a block of text placed at
a given column and line. Layers are written with absolute cursor positioning
in order, so later layers overwrite earlier ones on the terminal.
"""

from collections import namedtuple

from colors import color, strip_color
from wcwidth import wcswidth

from termgif import config

CSI = '\x1b['
RESET = CSI + '0m'

PLAY_ICON = '▶'
PAUSE_ICON = '⏸'

Layer = namedtuple('Layer', ['text', 'x', 'y'])


def text_lines(text):
    if not text:
        return []
    return text.rstrip('\n').split('\n')


def text_width(text):
    """Return the number of columns needed to display the widest line of text"""
    width = 0
    for line in text_lines(text):
        visible = strip_color(line)
        line_width = wcswidth(visible)
        if line_width < 0:
            line_width = len(visible)
        width = max(width, line_width)
    return width


def text_height(text):
    return len(text_lines(text))


def _place(layer, lines):
    for offset, line in enumerate(text_lines(layer.text)):
        row = layer.y + offset
        if 0 <= row < lines:
            yield '{}{};{}H{}{}'.format(CSI, row + 1, layer.x + 1, line, RESET)


def render_screen(columns, lines, layers):
    """Return the text drawing the layers on a blank screen"""
    chunks = ['{}{};1H{}2K'.format(CSI, row + 1, CSI) for row in range(lines)]
    for layer in layers:
        chunks.extend(_place(layer, lines))
    return ''.join(chunks)


def centered(text, columns, lines, vertical=True):
    x = max(0, (columns - text_width(text)) // 2)
    y = max(0, (lines - text_height(text)) // 2) if vertical else 0
    return Layer(text, x, y)


def initial_loading(columns, lines):
    message = color('Loading GIF...', fg=config.LOADING_COLOR)
    return render_screen(columns, lines, [centered(message, columns, lines)])


def loading_view(columns, lines, partial_frame, rows_complete, total_rows):
    status = ' Loading... {}/{} rows '.format(rows_complete, total_rows)
    layers = [
        centered(partial_frame, columns, lines, vertical=False),
        Layer(color(status, fg=config.LOADING_COLOR), 1, 0),
    ]
    return render_screen(columns, lines, layers)


def status_line(index, count, paused):
    icon = PAUSE_ICON if paused else PLAY_ICON
    status = ' {} {}/{} '.format(icon, index + 1, count)
    return color(status, fg=config.STATUS_COLOR)


def help_panel():
    """Return the key bindings surrounded by a rounded border"""
    title = color('  Keybindings', fg=config.HELP_COLOR, style='bold')
    content = [title] + config.HELP_TEXT.split('\n')
    inner_width = max(text_width(line) for line in content)

    horizontal_padding = ' ' * 2
    blank = ' ' * (inner_width + 2 * len(horizontal_padding))
    side = color('│', fg=config.HELP_COLOR)

    rows = [color('╭' + '─' * len(blank) + '╮', fg=config.HELP_COLOR),
            side + blank + side]
    for line in content:
        fill = ' ' * (inner_width - text_width(line))
        rows.append(side + horizontal_padding + line + fill + horizontal_padding + side)
    rows.append(side + blank + side)
    rows.append(color('╰' + '─' * len(blank) + '╯', fg=config.HELP_COLOR))
    return '\n'.join(rows)


def playback_view(columns, lines, frame, index, count, paused, show_help):
    layers = [
        centered(frame, columns, lines),
        Layer(status_line(index, count, paused), 1, 0),
    ]
    if show_help:
        layers.append(centered(help_panel(), columns, lines))
    return render_screen(columns, lines, layers)
