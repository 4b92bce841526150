import unittest

from termgif import config


class TestConf(unittest.TestCase):
    def test_validate_geometry(self):
        test_cases = [
            ('82x19', (82, 19)),
            ('1X1', (1, 1)),
        ]
        for geometry, expected in test_cases:
            with self.subTest(case=geometry):
                self.assertEqual(config.validate_geometry(geometry), expected)

        failure_test_cases = ['0x19', '82x0', '82', 'axb', '82x19x3', '-1x19']
        for geometry in failure_test_cases:
            with self.subTest(case=geometry):
                with self.assertRaises(ValueError):
                    config.validate_geometry(geometry)

    def test_validate_delay(self):
        test_cases = [
            ('100', 10),
            ('100ms', 10),
            ('10MS', 1),
            ('155', 15),
        ]
        for delay, expected in test_cases:
            with self.subTest(case=delay):
                self.assertEqual(config.validate_delay(delay), expected)

        failure_test_cases = ['', 'ms', '9', '0', '-100', '1.5', 'abc']
        for delay in failure_test_cases:
            with self.subTest(case=delay):
                with self.assertRaises(ValueError):
                    config.validate_delay(delay)

    def test_key_bindings(self):
        actions = set(config.KEY_BINDINGS.values())
        self.assertEqual(actions, {config.PAUSE, config.HELP, config.NEXT_FRAME,
                                   config.PREVIOUS_FRAME, config.QUIT})
