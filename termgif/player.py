"""Playback of a GIF animation in the terminal

`Player` holds the state of a viewing session and reacts to the messages
delivered by the event loop: key presses, terminal resizes, frame timers and
the results of the processing worker. The worker composites and rasterizes
every frame of the animation for the current terminal size, streaming the
rendering of the first frame so that something is displayed while the other
frames are being processed.

Timers and worker results may arrive after the state they were meant for was
superseded (pause, resize...). Every handler checks the current state first
and silently ignores such stale messages.
"""

import logging
from collections import namedtuple
from functools import partial

from termgif import config, view
from termgif.compositor import composite
from termgif.raster import Progress, rasterize
from termgif.term import Key, Resize

logger = logging.getLogger(__name__)

FrameTick = namedtuple('FrameTick', ['generation'])
ProcessingComplete = namedtuple('ProcessingComplete', ['frames', 'size'])


def process_frames(subframes, columns, lines, post):
    """Return the list of the rendered frames of an animation

    :param subframes: Sequence of SubFrame
    :param columns: Number of columns of the terminal
    :param lines: Number of lines of the terminal
    :param post: Callable receiving Progress instances while the first frame
    is being rendered
    """
    frames = []
    for index, image in enumerate(composite(subframes)):
        progress = post if index == 0 else None
        frames.append(rasterize(image, columns, lines, progress))
    return frames


class Player:
    """State machine of a viewing session

    :param source: FrameSource of the animation
    :param loop: Event loop providing `call_later(delay, message)`,
    `run_in_worker(function)` and `stop()`
    :param paused: Start with playback paused
    :param min_delay: Delay, in hundredths of a second, used for frames
    without delay
    """
    def __init__(self, source, loop, paused=False, min_delay=config.DEFAULT_FRAME_DELAY):
        self.source = source
        self.loop = loop
        self.min_delay = min_delay

        self.current_frame = 0
        self.paused = paused
        self.show_help = False
        self.ready = False
        self.running = True
        self.size = None
        self.frames = []

        # Progressive loading state
        self.loading = False
        self.loading_frame = ''
        self.loading_rows = 0
        self.total_rows = 0

        # Frame timers scheduled before the last change of generation are stale
        self._generation = 0

    def start(self, columns, lines):
        self.size = (columns, lines)
        self._process()

    def delay_of(self, index):
        """Return the display time of a frame in seconds"""
        delay = self.source[index].delay
        if delay == 0:
            delay = self.min_delay
        return delay / 100

    def handle(self, message):
        if not self.running:
            return

        if isinstance(message, Key):
            self._on_key(message)
        elif isinstance(message, FrameTick):
            self._on_frame_tick(message)
        elif isinstance(message, Progress):
            self._on_progress(message)
        elif isinstance(message, ProcessingComplete):
            self._on_processing_complete(message)
        elif isinstance(message, Resize):
            self._on_resize(message)
        else:
            logger.debug('Ignoring unknown message {}'.format(message))

    def _process(self):
        self.ready = False
        self.loading = True
        self.loading_frame = ''
        self.loading_rows = 0
        self.total_rows = 0
        self.frames = []
        self._generation += 1

        columns, lines = self.size
        logger.debug('Processing {} frames for a {}x{} screen'
                     .format(len(self.source), columns, lines))
        self.loop.run_in_worker(partial(self._pipeline, self.source.subframes,
                                        columns, lines))

    @staticmethod
    def _pipeline(subframes, columns, lines, post):
        frames = process_frames(subframes, columns, lines, post)
        return ProcessingComplete(frames, (columns, lines))

    def _schedule_next_frame(self):
        self._generation += 1
        self.loop.call_later(self.delay_of(self.current_frame),
                             FrameTick(self._generation))

    def _on_key(self, key):
        action = config.KEY_BINDINGS.get(key.name)
        if action == config.PAUSE:
            self.paused = not self.paused
            self._generation += 1
            if not self.paused and self.ready:
                self._schedule_next_frame()
        elif action == config.HELP:
            self.show_help = not self.show_help
        elif action in (config.NEXT_FRAME, config.PREVIOUS_FRAME):
            if self.frames:
                self.paused = True
                self._generation += 1
                step = 1 if action == config.NEXT_FRAME else -1
                self.current_frame = (self.current_frame + step) % len(self.frames)
        elif action == config.QUIT:
            self.running = False
            self.loop.stop()

    def _on_frame_tick(self, tick):
        if tick.generation != self._generation:
            return
        if self.paused or not self.ready or not self.frames:
            return
        self.current_frame = (self.current_frame + 1) % len(self.frames)
        self._schedule_next_frame()

    def _on_progress(self, progress):
        if self.loading and not self.ready:
            self.loading_frame = progress.partial_frame
            self.loading_rows = progress.rows_complete
            self.total_rows = progress.total_rows

    def _on_processing_complete(self, result):
        if result.size != self.size:
            # The terminal was resized while the frames were being processed
            logger.debug('Discarding frames rendered for a {}x{} screen'.format(*result.size))
            self._process()
            return

        self.frames = list(result.frames)
        self.ready = True
        self.loading = False
        self.current_frame = 0
        logger.debug('Processing complete')
        if not self.paused:
            self._schedule_next_frame()

    def _on_resize(self, resize):
        previous_size = self.size
        self.size = (resize.columns, resize.lines)

        if previous_size is None or previous_size == self.size:
            return

        # Deferred until the frames being processed are delivered
        if self.loading:
            return

        self._process()

    def view(self):
        """Return the text of the whole screen"""
        columns, lines = self.size or (0, 0)
        if self.loading and self.loading_frame:
            return view.loading_view(columns, lines, self.loading_frame,
                                     self.loading_rows, self.total_rows)

        if not self.ready or not self.frames:
            return view.initial_loading(columns, lines)

        return view.playback_view(columns, lines, self.frames[self.current_frame],
                                  self.current_frame, len(self.frames), self.paused,
                                  self.show_help)
