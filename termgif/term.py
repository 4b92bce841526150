"""Terminal handling and event loop

This module exposes
    - a context manager named `TerminalMode` switching the terminal to raw
    mode and to the alternate screen, which ensures the terminal state is
    always properly restored, otherwise a failure during playback could
    render the terminal unusable
    - `EventLoop`, a single threaded loop delivering key presses, terminal
    resizes, timers and messages posted by a worker thread to a handler, one
    message at a time, and redrawing the screen after each batch of messages
"""

import heapq
import itertools
import logging
import os
import queue
import select
import signal
import threading
import time
import tty
from collections import namedtuple

logger = logging.getLogger(__name__)

CSI = '\x1b['
ENTER_ALTERNATE_SCREEN = CSI + '?1049h'
EXIT_ALTERNATE_SCREEN = CSI + '?1049l'
HIDE_CURSOR = CSI + '?25l'
SHOW_CURSOR = CSI + '?25h'
BEGIN_SYNCHRONIZED_UPDATE = CSI + '?2026h'
END_SYNCHRONIZED_UPDATE = CSI + '?2026l'

Key = namedtuple('Key', ['name'])
Resize = namedtuple('Resize', ['columns', 'lines'])

ESCAPE_SEQUENCES = {
    '\x1b[A': 'up',
    '\x1b[B': 'down',
    '\x1b[C': 'right',
    '\x1b[D': 'left',
    '\x1bOA': 'up',
    '\x1bOB': 'down',
    '\x1bOC': 'right',
    '\x1bOD': 'left',
}

NAMED_CHARACTERS = {
    ' ': 'space',
    '\x03': 'ctrl+c',
    '\x04': 'ctrl+d',
    '\r': 'enter',
    '\t': 'tab',
    '\x7f': 'backspace',
    '\x1b': 'esc',
}


def _write(fileno, text):
    data = text.encode('utf-8')
    while data:
        n = os.write(fileno, data)
        data = data[n:]


class TerminalMode:
    """Save terminal mode on entry, restore it on exit

    On entry the input terminal is set to raw mode, the alternate screen is
    used and the cursor is hidden. Input and output streams which are not
    terminals (pipes, regular files) are tolerated.
    """
    def __init__(self, input_fileno, output_fileno):
        self.input_fileno = input_fileno
        self.output_fileno = output_fileno
        self.mode = None

    def __enter__(self):
        try:
            self.mode = tty.tcgetattr(self.input_fileno)
        except tty.error:
            pass
        else:
            tty.setraw(self.input_fileno)

        _write(self.output_fileno, ENTER_ALTERNATE_SCREEN + HIDE_CURSOR)
        return self.mode

    def __exit__(self, exc_type, exc_val, exc_tb):
        _write(self.output_fileno, SHOW_CURSOR + EXIT_ALTERNATE_SCREEN)

        if self.mode is not None:
            tty.tcsetattr(self.input_fileno, tty.TCSAFLUSH, self.mode)


def get_terminal_size(fileno):
    try:
        columns, lines = os.get_terminal_size(fileno)
    except OSError:
        columns, lines = 80, 24

    return columns, lines


def parse_keys(text):
    """Yield the names of the keys pressed from terminal input

    Arrow keys are named 'up', 'down', 'right' and 'left', control
    characters are named after NAMED_CHARACTERS and any other character is
    its own name.
    """
    index = 0
    while index < len(text):
        for sequence, name in ESCAPE_SEQUENCES.items():
            if text.startswith(sequence, index):
                yield name
                index += len(sequence)
                break
        else:
            char = text[index]
            yield NAMED_CHARACTERS.get(char, char)
            index += 1


class EventLoop:
    """Single threaded event loop

    Messages are handled one at a time by the handler given to `run`, which
    must provide a `handle(message)` method and a `view()` method returning
    the text of the whole screen. The handler state is only ever touched from
    the thread running the loop: worker threads communicate with it by posting
    messages.

    :param input_fileno: File descriptor keys are read from
    :param output_fileno: File descriptor the screen is drawn to
    :param watch_resize: Deliver Resize messages when the terminal size changes
    """
    def __init__(self, input_fileno, output_fileno, watch_resize=True):
        self.input_fileno = input_fileno
        self.output_fileno = output_fileno
        self.watch_resize = watch_resize
        self._messages = queue.SimpleQueue()
        self._timers = []
        self._sequence = itertools.count()
        self._running = False
        self._closed = False
        self._wakeup_read, self._wakeup_write = os.pipe()
        os.set_blocking(self._wakeup_write, False)

    def post(self, message):
        """Queue a message for the loop, may be called from any thread"""
        self._messages.put(message)
        if self._closed:
            return
        try:
            os.write(self._wakeup_write, b'\0')
        except OSError:
            # Either the pipe is full and the loop is already due to wake up,
            # or the loop was closed meanwhile
            pass

    def call_later(self, delay, message):
        """Deliver `message` once, after `delay` seconds"""
        deadline = time.monotonic() + delay
        heapq.heappush(self._timers, (deadline, next(self._sequence), message))

    def run_in_worker(self, function):
        """Run `function(post)` in a worker thread and post its return value"""
        def target():
            self.post(function(self.post))

        worker = threading.Thread(target=target, name='termgif-worker', daemon=True)
        worker.start()
        return worker

    def stop(self):
        self._running = False

    def _on_resize(self, signum, frame):
        self.post(Resize(*get_terminal_size(self.output_fileno)))

    def _timeout(self):
        if not self._timers:
            return None
        return max(0, self._timers[0][0] - time.monotonic())

    def _due_timers(self):
        now = time.monotonic()
        while self._timers and self._timers[0][0] <= now:
            _, _, message = heapq.heappop(self._timers)
            yield message

    def _posted_messages(self):
        while True:
            try:
                yield self._messages.get_nowait()
            except queue.Empty:
                return

    def _draw(self, screen):
        _write(self.output_fileno, BEGIN_SYNCHRONIZED_UPDATE + screen +
               END_SYNCHRONIZED_UPDATE)

    def run(self, handler):
        """Deliver messages to `handler` until `stop` is called or the input
        stream is closed"""
        previous_handler = None
        if self.watch_resize:
            previous_handler = signal.signal(signal.SIGWINCH, self._on_resize)

        self._running = True
        try:
            self._draw(handler.view())
            while self._running:
                rfds, _, _ = select.select([self.input_fileno, self._wakeup_read],
                                           [], [], self._timeout())
                messages = []
                if self.input_fileno in rfds:
                    data = os.read(self.input_fileno, 1024)
                    if not data:
                        logger.debug('End of input stream')
                        break
                    text = data.decode('utf-8', 'replace')
                    messages.extend(Key(name) for name in parse_keys(text))
                if self._wakeup_read in rfds:
                    os.read(self._wakeup_read, 4096)
                messages.extend(self._posted_messages())
                messages.extend(self._due_timers())

                for message in messages:
                    handler.handle(message)
                    if not self._running:
                        break

                if messages and self._running:
                    self._draw(handler.view())
        finally:
            self._running = False
            self._closed = True
            if previous_handler is not None:
                signal.signal(signal.SIGWINCH, previous_handler)
            os.close(self._wakeup_read)
            os.close(self._wakeup_write)
