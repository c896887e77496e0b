"""
Tests for the candy color palette.
"""

import pytest

from stack_attack.core.config_loader import load_config
from stack_attack.core.palette import Palette


@pytest.fixture
def palette():
    return Palette(load_config())


class TestPalette:
    """Indexed and named access to the configured colors."""

    def test_tags_in_order(self, palette):
        assert len(palette) == 5
        assert palette.tags == (0, 1, 2, 3, 4)
        assert [color.tag for color in palette] == list(palette.tags)

    def test_index_out_of_range(self, palette):
        with pytest.raises(IndexError):
            palette[5]
        with pytest.raises(IndexError):
            palette[-1]

    def test_get_by_name_ignores_case(self, palette):
        lemon = palette.get_by_name("Lemon")
        assert lemon is not None
        assert lemon.tag == 2
        assert palette.get_by_name("GRAPE") is palette[4]

    def test_get_by_name_unknown(self, palette):
        assert palette.get_by_name("durian") is None

    def test_shades(self, palette):
        strawberry = palette[0]
        assert strawberry.rgb == (244, 63, 94)
        assert strawberry.highlight == (255, 123, 154)
        assert strawberry.shadow == (146, 37, 56)
