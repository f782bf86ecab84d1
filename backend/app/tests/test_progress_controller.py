"""
ReadTrack Progress Controller Tests
"""
import unittest
from unittest.mock import MagicMock

from app.services.position_service import page_index_from_position, position_from_page_index
from app.services.progress_controller import ProgressController, ProgressSnapshot, ReaderState
from app.services.save_debouncer import ManualClock, SaveDebouncer

CONTENT = "a" * 3000 + "b" * 3000 + "c" * 3000

# 900 high page in a 500 high viewport
PAGE_HEIGHT = 900
VIEWPORT = 500

def make_controller(position=0.0, completed=False, content=CONTENT):
    notifier = MagicMock()
    debouncer = MagicMock(spec=SaveDebouncer)
    controller = ProgressController(
        content,
        current_position=position,
        is_completed=completed,
        target_page_size=3000,
        debouncer=debouncer,
        on_completion=notifier,
    )
    return controller, debouncer, notifier

class TestNavigation(unittest.TestCase):
    """Page navigation transitions"""

    def test_initial_state(self):
        """A fresh controller starts at the first page, reading"""
        controller, debouncer, _ = make_controller()
        self.assertEqual(controller.page_count, 3)
        self.assertEqual(controller.current_page, 0)
        self.assertEqual(controller.state, ReaderState.READING)
        self.assertEqual(controller.page_text(), "a" * 3000)
        self.assertFalse(controller.can_go_previous)
        debouncer.mark_saved.assert_called_once_with(ProgressSnapshot(position=0.0, completed=False))

    def test_next_lands_on_page_start(self):
        """Next moves to the start of the following page"""
        controller, debouncer, _ = make_controller()
        self.assertTrue(controller.navigate_next())

        self.assertEqual(controller.current_page, 1)
        self.assertEqual(controller.position, position_from_page_index(1, 3))
        self.assertEqual(controller.page_text(), "b" * 3000)
        debouncer.schedule.assert_called_once_with(ProgressSnapshot(position=position_from_page_index(1, 3), completed=False))

    def test_reaching_last_page_does_not_complete(self):
        """Arriving on the last page needs one more Next to complete"""
        controller, _, notifier = make_controller()
        controller.navigate_next()
        controller.navigate_next()

        self.assertEqual(controller.current_page, 2)
        self.assertFalse(controller.completed)
        notifier.assert_not_called()

        self.assertTrue(controller.navigate_next())
        self.assertTrue(controller.completed)
        self.assertEqual(controller.state, ReaderState.COMPLETED)
        self.assertEqual(controller.position, position_from_page_index(2, 3))
        self.assertFalse(controller.can_go_next)
        notifier.assert_called_once_with()

    def test_repeated_next_on_last_page_notifies_once(self):
        """Completion is announced exactly once per session"""
        controller, debouncer, notifier = make_controller(position=95.0)
        self.assertEqual(controller.current_page, 2)

        controller.navigate_next()
        debouncer.schedule.reset_mock()
        self.assertFalse(controller.navigate_next())
        self.assertFalse(controller.navigate_next())

        self.assertTrue(controller.completed)
        self.assertEqual(controller.position, 95.0)
        notifier.assert_called_once_with()
        debouncer.schedule.assert_not_called()

    def test_recompleting_does_not_notify_again(self):
        """Backing out and finishing again stays silent"""
        controller, _, notifier = make_controller(position=95.0)
        controller.navigate_next()
        controller.navigate_previous()
        self.assertFalse(controller.completed)
        self.assertEqual(controller.current_page, 1)

        controller.navigate_next()
        controller.navigate_next()
        self.assertTrue(controller.completed)
        self.assertTrue(controller.completion_notified)
        notifier.assert_called_once_with()

    def test_previous(self):
        """Previous moves back a page and clears completion"""
        controller, _, _ = make_controller(position=100.0, completed=True)
        self.assertTrue(controller.navigate_previous())
        self.assertEqual(controller.current_page, 1)
        self.assertEqual(controller.position, position_from_page_index(1, 3))
        self.assertFalse(controller.completed)

    def test_previous_on_first_page_is_ignored(self):
        """Previous on the first page changes nothing"""
        controller, debouncer, _ = make_controller()
        self.assertFalse(controller.navigate_previous())
        self.assertEqual(controller.position, 0.0)
        debouncer.schedule.assert_not_called()

    def test_empty_content(self):
        """An empty work has one page and completes on the first Next"""
        controller, _, notifier = make_controller(content="")
        self.assertEqual(controller.page_count, 1)
        self.assertEqual(controller.page_text(), "")

        controller.navigate_next()
        self.assertTrue(controller.completed)
        notifier.assert_called_once_with()

class TestSlider(unittest.TestCase):
    """Slider transitions"""

    def test_slider_completes_at_threshold(self):
        """Dragging to 99 or above completes the work"""
        controller, _, notifier = make_controller()
        controller.set_slider(99.0)
        self.assertTrue(controller.completed)
        self.assertEqual(controller.current_page, 2)
        notifier.assert_called_once_with()

    def test_slider_back_uncompletes(self):
        """Dragging from 100 down to 50 clears completion"""
        controller, _, _ = make_controller()
        controller.set_slider(100.0)
        self.assertTrue(controller.completed)

        controller.set_slider(50.0)
        self.assertFalse(controller.completed)
        self.assertEqual(controller.position, 50.0)
        self.assertEqual(controller.current_page, 1)

    def test_slider_values_are_clamped(self):
        """Out-of-range slider values are clamped, never raised"""
        controller, _, _ = make_controller()
        controller.set_slider(150.0)
        self.assertEqual(controller.position, 100.0)
        self.assertTrue(controller.completed)

        controller.set_slider(-20.0)
        self.assertEqual(controller.position, 0.0)
        self.assertFalse(controller.completed)

        controller.set_slider(float("nan"))
        self.assertEqual(controller.position, 0.0)

    def test_resumed_completed_work_is_not_congratulated(self):
        """A work completed in an earlier session does not notify again"""
        controller, _, notifier = make_controller(position=100.0, completed=True)
        controller.set_slider(50.0)
        controller.set_slider(100.0)
        self.assertTrue(controller.completed)
        notifier.assert_not_called()

class TestScrolling(unittest.TestCase):
    """Scroll transitions"""

    def test_scroll_interpolates_within_page(self):
        """Half way down the second page is half way through the work"""
        controller, debouncer, _ = make_controller(position=position_from_page_index(1, 3))
        update = controller.on_scroll(200, PAGE_HEIGHT, VIEWPORT)

        self.assertTrue(update.should_update)
        self.assertAlmostEqual(controller.position, 50.0)
        self.assertEqual(controller.current_page, 1)
        debouncer.schedule.assert_called_once()

    def test_scroll_to_page_end_stays_on_page(self):
        """Scrolling to the bottom of a page does not turn the page"""
        controller, _, _ = make_controller()
        controller.on_scroll(400, PAGE_HEIGHT, VIEWPORT)

        self.assertEqual(controller.current_page, 0)
        self.assertLess(controller.position, 100 / 3)
        self.assertGreater(controller.position, 33.0)

    def test_scroll_never_completes(self):
        """Scrolling to the very end stops at 99 without completing"""
        controller, _, notifier = make_controller(position=70.0)
        controller.on_scroll(400, PAGE_HEIGHT, VIEWPORT)

        self.assertEqual(controller.position, 99.0)
        self.assertFalse(controller.completed)
        notifier.assert_not_called()

    def test_scroll_keeps_completion(self):
        """Scrolling a completed work leaves it completed"""
        controller, _, _ = make_controller()
        controller.set_slider(100.0)
        controller.on_scroll(200, PAGE_HEIGHT, VIEWPORT)

        self.assertTrue(controller.completed)
        self.assertAlmostEqual(controller.position, 250 / 3)

    def test_small_scroll_ignored(self):
        """Scroll noise neither moves the position nor schedules a save"""
        controller, debouncer, _ = make_controller()
        update = controller.on_scroll(8, PAGE_HEIGHT, VIEWPORT)

        self.assertFalse(update.should_update)
        self.assertEqual(controller.position, 0.0)
        debouncer.schedule.assert_not_called()

    def test_non_finite_scroll_ignored(self):
        """NaN or infinite scroll metrics leave the state untouched"""
        controller, debouncer, _ = make_controller(position=position_from_page_index(1, 3))
        for metrics in [(float("nan"), PAGE_HEIGHT, VIEWPORT), (float("inf"), PAGE_HEIGHT, VIEWPORT), (100, float("nan"), VIEWPORT)]:
            update = controller.on_scroll(*metrics)
            self.assertFalse(update.should_update)

        self.assertEqual(controller.position, position_from_page_index(1, 3))
        self.assertEqual(controller.current_page, 1)
        debouncer.schedule.assert_not_called()

    def test_page_change_resets_scroll_baseline(self):
        """The scroll baseline starts over on a new page"""
        controller, _, _ = make_controller()
        controller.on_scroll(400, PAGE_HEIGHT, VIEWPORT)
        self.assertEqual(controller.scroll_tracker.baseline, 100)

        controller.navigate_next()
        self.assertEqual(controller.scroll_tracker.baseline, 0)
        self.assertEqual(controller.current_page, 1)

    def test_scroll_positions_bounded(self):
        """No scroll sequence pushes the position past 99 or completes"""
        controller, _, _ = make_controller()
        for page in range(controller.page_count):
            controller.set_slider(position_from_page_index(page, 3))
            for scroll_top in [0, 100, 200, 300, 400, 300, 400]:
                controller.on_scroll(scroll_top, PAGE_HEIGHT, VIEWPORT)
                self.assertLessEqual(controller.position, 99.0)
                self.assertFalse(controller.completed)
                self.assertEqual(page_index_from_position(controller.position, 3), page)

class TestCompletionCallback(unittest.TestCase):
    """Completion callback failures"""

    def test_failing_callback_does_not_break_session(self):
        """A raising completion callback is logged and the transition stands"""
        controller, debouncer, notifier = make_controller(position=95.0)
        notifier.side_effect = RuntimeError("dialog unavailable")

        self.assertTrue(controller.navigate_next())
        self.assertTrue(controller.completed)
        debouncer.schedule.assert_called_once_with(ProgressSnapshot(position=95.0, completed=True))

class TestControllerPersistence(unittest.IsolatedAsyncioTestCase):
    """Controller wired to a real debouncer on a logical clock"""

    async def asyncSetUp(self):
        self.clock = ManualClock()
        self.saved = []
        self.debouncer = SaveDebouncer(self.saved.append, delay=2.0, clock=self.clock)
        self.controller = ProgressController(CONTENT, target_page_size=3000, debouncer=self.debouncer)

    async def test_rapid_navigation_writes_once(self):
        """Quick page turns persist only the final state"""
        self.controller.navigate_next()
        self.clock.advance(0.5)
        self.controller.navigate_next()
        self.clock.advance(2.0)
        await self.debouncer.wait_idle()

        self.assertEqual(self.saved, [ProgressSnapshot(position=position_from_page_index(2, 3), completed=False)])

    async def test_returning_to_saved_state_writes_nothing(self):
        """Moving away and back inside the window leaves nothing to save"""
        self.controller.navigate_next()
        self.controller.navigate_previous()
        self.clock.advance(5.0)
        await self.debouncer.wait_idle()

        self.assertEqual(self.saved, [])
        self.assertFalse(self.debouncer.dirty)

    async def test_close_flushes(self):
        """Closing the reader persists the pending state"""
        self.controller.set_slider(100.0)
        self.assertTrue(await self.controller.close())

        self.assertEqual(self.saved, [ProgressSnapshot(position=100.0, completed=True)])
        self.assertEqual(self.clock.pending, 0)

if __name__ == "__main__":
    unittest.main()
