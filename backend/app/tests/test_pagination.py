"""
ReadTrack Pagination and Position Tests
"""
import math
import unittest

from app.services.pagination_service import compute_layout, layout_for_content, page_content
from app.services.position_service import (
    clamp_position,
    clamp_to_page,
    page_index_from_position,
    position_from_page_index,
)

class TestPagination(unittest.TestCase):
    """Page layout tests"""

    def test_three_equal_pages(self):
        """9000 characters at 3000 per page gives three full pages"""
        layout = compute_layout(9000, 3000)
        self.assertEqual(layout.page_count, 3)
        self.assertEqual(layout.page_size, 3000)
        self.assertEqual(list(layout.page_ranges()), [(0, 3000), (3000, 6000), (6000, 9000)])

    def test_empty_content_has_one_page(self):
        """Zero-length content still has a single, empty page"""
        layout = compute_layout(0)
        self.assertEqual(layout.page_count, 1)
        self.assertEqual(layout.page_range(0), (0, 0))
        self.assertEqual(page_content("", layout, 0), "")

    def test_uneven_content_is_balanced(self):
        """Pages are sized evenly and the final page is clipped"""
        layout = compute_layout(3001, 3000)
        self.assertEqual(layout.page_count, 2)
        self.assertEqual(layout.page_size, 1501)
        self.assertEqual(layout.page_range(1), (1501, 3001))

        layout = compute_layout(10, 3)
        self.assertEqual(list(layout.page_ranges()), [(0, 3), (3, 6), (6, 9), (9, 10)])

    def test_page_count_never_zero(self):
        """Every length yields at least one page"""
        for length in [0, 1, 2, 2999, 3000, 3001, 123456]:
            self.assertGreaterEqual(compute_layout(length).page_count, 1)

    def test_ranges_cover_content(self):
        """Ranges are contiguous, non-overlapping and cover the content"""
        for length in [0, 1, 7, 10, 101, 2999, 3000, 3001, 9000, 9001, 45678]:
            for target in [1, 3, 7, 1000, 3000]:
                layout = compute_layout(length, target)
                ranges = list(layout.page_ranges())

                self.assertEqual(len(ranges), layout.page_count)
                self.assertEqual(ranges[0][0], 0)
                self.assertEqual(ranges[-1][1], length)
                for (start, end), (next_start, _) in zip(ranges, ranges[1:]):
                    self.assertLessEqual(start, end)
                    self.assertEqual(end, next_start)

    def test_invalid_inputs_are_clamped(self):
        """Negative lengths and sizes never raise"""
        self.assertEqual(compute_layout(-5).page_count, 1)
        self.assertEqual(compute_layout(10, 0).page_count, 10)

        layout = compute_layout(9000, 3000)
        self.assertEqual(layout.page_range(-1), (0, 3000))
        self.assertEqual(layout.page_range(7), (6000, 9000))

    def test_page_content(self):
        """Page text is the matching slice of the content"""
        content = "a" * 3000 + "b" * 3000 + "c" * 1000
        layout = layout_for_content(content, 3000)
        self.assertEqual(layout.page_count, 3)
        self.assertEqual(set(page_content(content, layout, 0)), {"a"})
        self.assertEqual(len(page_content(content, layout, 2)), 7000 - 2 * layout.page_size)

class TestPositionModel(unittest.TestCase):
    """Percentage to page conversion tests"""

    def test_page_index_from_position(self):
        """Positions map onto pages, with 100 on the last page"""
        self.assertEqual(page_index_from_position(0, 3), 0)
        self.assertEqual(page_index_from_position(33.3, 3), 0)
        self.assertEqual(page_index_from_position(50, 3), 1)
        self.assertEqual(page_index_from_position(95, 3), 2)
        self.assertEqual(page_index_from_position(100, 3), 2)
        self.assertEqual(page_index_from_position(100, 1), 0)

    def test_out_of_range_positions(self):
        """Out-of-range and NaN positions are clamped"""
        self.assertEqual(page_index_from_position(-10, 3), 0)
        self.assertEqual(page_index_from_position(250, 3), 2)
        self.assertEqual(page_index_from_position(math.nan, 3), 0)
        self.assertEqual(clamp_position(math.nan), 0.0)
        self.assertEqual(clamp_position(-1), 0.0)
        self.assertEqual(clamp_position(101), 100.0)
        self.assertEqual(clamp_position("bad"), 0.0)

    def test_position_from_page_index(self):
        """Navigation lands on the page start"""
        self.assertEqual(position_from_page_index(0, 4), 0.0)
        self.assertEqual(position_from_page_index(1, 4), 25.0)
        self.assertEqual(position_from_page_index(3, 4), 75.0)
        self.assertEqual(position_from_page_index(9, 4), 75.0)
        self.assertEqual(position_from_page_index(-1, 4), 0.0)

    def test_round_trip_at_page_starts(self):
        """A page start always derives back to its own page"""
        for page_count in range(1, 200):
            for page_index in range(page_count):
                position = position_from_page_index(page_index, page_count)
                self.assertEqual(page_index_from_position(position, page_count), page_index)

    def test_clamp_to_page(self):
        """Positions are held inside the given page"""
        limited = clamp_to_page(40.0, 0, 3)
        self.assertLess(limited, 100 / 3)
        self.assertEqual(page_index_from_position(limited, 3), 0)

        self.assertAlmostEqual(clamp_to_page(10.0, 1, 3), 100 / 3)
        self.assertEqual(clamp_to_page(20.0, 1, 4), 25.0)
        self.assertEqual(clamp_to_page(99.0, 2, 3), 99.0)

        for page_count in range(1, 50):
            for page_index in range(page_count):
                end = ((page_index + 1) / page_count) * 100
                limited = clamp_to_page(end, page_index, page_count)
                self.assertEqual(page_index_from_position(limited, page_count), page_index)

if __name__ == "__main__":
    unittest.main()
