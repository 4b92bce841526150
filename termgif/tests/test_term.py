import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from termgif import term
from termgif.term import Key, Resize


class RecordingHandler:
    """Handler stopping the loop once a given message is received"""
    def __init__(self, loop, last_message):
        self.loop = loop
        self.last_message = last_message
        self.messages = []
        self.views = 0

    def handle(self, message):
        self.messages.append(message)
        if message == self.last_message:
            self.loop.stop()

    def view(self):
        self.views += 1
        return 'screen #{}'.format(self.views)


class TestTerm(unittest.TestCase):
    def setUp(self):
        self.fd_in_read, self.fd_in_write = os.pipe()
        self.output = tempfile.TemporaryFile()
        self.addCleanup(self.output.close)

    def tearDown(self):
        for fd in self.fd_in_read, self.fd_in_write:
            try:
                os.close(fd)
            except OSError:
                pass

    def read_output(self):
        self.output.seek(0)
        return self.output.read().decode('utf-8')

    def test_parse_keys(self):
        test_cases = [
            ('q', ['q']),
            (' ', ['space']),
            ('\x03', ['ctrl+c']),
            ('\x1b[C\x1b[D', ['right', 'left']),
            ('\x1bOA\x1b[B', ['up', 'down']),
            ('n p?', ['n', 'space', 'p', '?']),
            ('\x1b', ['esc']),
            ('\x1b[Cx', ['right', 'x']),
            ('é', ['é']),
            ('', []),
        ]
        for text, expected in test_cases:
            with self.subTest(case=repr(text)):
                self.assertEqual(list(term.parse_keys(text)), expected)

    def test_get_terminal_size(self):
        with self.subTest(case='Successful get_terminal_size call'):
            term_size_mock = MagicMock(return_value=(42, 84))
            with patch('os.get_terminal_size', term_size_mock):
                cols, lines, = term.get_terminal_size(-1)
                self.assertEqual(cols, 42)
                self.assertEqual(lines, 84)

        with self.subTest(case='Not a terminal'):
            self.assertEqual(term.get_terminal_size(self.output.fileno()), (80, 24))

    def test_terminal_mode(self):
        with term.TerminalMode(self.fd_in_read, self.output.fileno()) as mode:
            self.assertIsNone(mode)
            os.write(self.output.fileno(), b'inside')

        self.assertEqual(self.read_output(),
                         term.ENTER_ALTERNATE_SCREEN + term.HIDE_CURSOR + 'inside' +
                         term.SHOW_CURSOR + term.EXIT_ALTERNATE_SCREEN)

    def test_terminal_mode_restores_on_error(self):
        with self.assertRaises(RuntimeError):
            with term.TerminalMode(self.fd_in_read, self.output.fileno()):
                raise RuntimeError
        self.assertTrue(self.read_output().endswith(term.EXIT_ALTERNATE_SCREEN))

    def test_event_loop_keys(self):
        loop = term.EventLoop(self.fd_in_read, self.output.fileno(), watch_resize=False)
        handler = RecordingHandler(loop, Key('q'))
        os.write(self.fd_in_write, b' \x1b[Cq')
        loop.run(handler)

        self.assertEqual(handler.messages, [Key('space'), Key('right'), Key('q')])
        output = self.read_output()
        self.assertIn('screen #1', output)
        self.assertTrue(output.startswith(term.BEGIN_SYNCHRONIZED_UPDATE))

    def test_event_loop_timers(self):
        loop = term.EventLoop(self.fd_in_read, self.output.fileno(), watch_resize=False)
        handler = RecordingHandler(loop, 'second')
        loop.call_later(0.1, 'second')
        loop.call_later(0.01, 'first')
        loop.run(handler)

        self.assertEqual(handler.messages, ['first', 'second'])
        self.assertGreaterEqual(handler.views, 2)

    def test_event_loop_worker(self):
        loop = term.EventLoop(self.fd_in_read, self.output.fileno(), watch_resize=False)
        handler = RecordingHandler(loop, 'done')

        def work(post):
            post('progress 1')
            post('progress 2')
            return 'done'

        loop.run_in_worker(work)
        loop.run(handler)
        self.assertEqual(handler.messages, ['progress 1', 'progress 2', 'done'])

    def test_event_loop_end_of_input(self):
        loop = term.EventLoop(self.fd_in_read, self.output.fileno(), watch_resize=False)
        handler = RecordingHandler(loop, None)
        os.write(self.fd_in_write, b'a')
        os.close(self.fd_in_write)
        loop.run(handler)
        self.assertEqual(handler.messages, [Key('a')])

    def test_event_loop_resize(self):
        loop = term.EventLoop(self.fd_in_read, self.output.fileno())
        handler = RecordingHandler(loop, Resize(80, 24))
        loop._on_resize(None, None)
        loop.run(handler)
        self.assertEqual(handler.messages, [Resize(80, 24)])

    def test_post_after_run(self):
        loop = term.EventLoop(self.fd_in_read, self.output.fileno(), watch_resize=False)
        handler = RecordingHandler(loop, 'stop')
        loop.post('stop')
        loop.run(handler)
        # Workers outliving the loop must not fail
        loop.post('late')
