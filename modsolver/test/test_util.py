import logging
import unittest

from modsolver.util import NotifyingMixin
from modsolver.util import get_extended_logger
from modsolver.util import pop_iter


class Dumped(object):
    _dump_attrs = ['items', 'missing']

    def __init__(self):
        self.items = {3, 1, 2}

    def __repr__(self):
        return '<Dumped>'


class LoggerTestCase(unittest.TestCase):

    def setUp(self):
        self.logger = get_extended_logger('modsolver.test.util')

    def test_wrap(self):
        @self.logger.wrap
        def answer():
            return 42

        with self.assertLogs(self.logger, logging.DEBUG) as cm:
            self.assertEqual(42, answer())

        header, footer = cm.output
        self.assertIn(' answer ', header)
        self.assertIn(' answer ', footer)

    def test_dump(self):
        with self.assertLogs(self.logger, logging.DEBUG) as cm:
            self.logger.dump(Dumped())

        text = '\n'.join(cm.output)
        self.assertIn('<Dumped>', text)
        self.assertIn('.items: (len=3)', text)
        self.assertIn('[1, 2, 3]', text)
        self.assertIn('.missing:', text)

    def test_dump_public_attrs(self):
        class Plain(object):
            visible = 'shown'
            _hidden = 'hidden'

        with self.assertLogs(self.logger, logging.DEBUG) as cm:
            self.logger.dump(Plain())

        text = '\n'.join(cm.output)
        self.assertIn('.visible:', text)
        self.assertNotIn('_hidden', text)


class NotifyingTestCase(unittest.TestCase):

    def test_subscribe(self):
        notifier = NotifyingMixin()
        calls = []

        @notifier.subscribe
        def callback(*args, **kwargs):
            calls.append((args, kwargs))

        notifier._notify(1, two=2)

        self.assertEqual([((1,), {'two': 2})], calls)
        self.assertTrue(callable(callback))


class PopIterTestCase(unittest.TestCase):

    def test_drains_growing_collection(self):
        queue = [1]
        seen = []
        for item in pop_iter(queue):
            seen.append(item)
            if item < 3:
                queue.append(item + 1)

        self.assertEqual([1, 2, 3], seen)
        self.assertEqual([], queue)


if __name__ == '__main__':
    unittest.main()
