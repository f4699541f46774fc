"""Integer month arithmetic and season mapping."""
import pytest

from calendar_utils import add_months, next_month, preceding_months, season_for_month
from models import Season


class TestAddMonths:
    def test_moves_forward_within_year(self):
        assert add_months(2025, 3, 2) == (2025, 5)

    def test_rolls_over_december(self):
        assert next_month(2025, 12) == (2026, 1)

    def test_borrows_from_year_when_going_back(self):
        assert add_months(2025, 2, -3) == (2024, 11)

    def test_multi_year_jump(self):
        assert add_months(2025, 6, 30) == (2027, 12)


class TestPrecedingMonths:
    def test_excludes_the_month_itself(self):
        assert preceding_months(2025, 4) == [(2025, 3), (2025, 2), (2025, 1)]

    def test_crosses_year_boundary(self):
        assert preceding_months(2026, 2) == [(2026, 1), (2025, 12), (2025, 11)]


class TestSeasonForMonth:
    @pytest.mark.parametrize("month", [12, 1, 2])
    def test_winter(self, month):
        assert season_for_month(month) is Season.WINTER

    @pytest.mark.parametrize("month,season", [
        (3, Season.SPRING), (5, Season.SPRING),
        (6, Season.SUMMER), (8, Season.SUMMER),
        (9, Season.FALL), (11, Season.FALL),
    ])
    def test_other_seasons(self, month, season):
        assert season_for_month(month) is season

    def test_every_month_maps_to_exactly_one_season(self):
        seasons = [season_for_month(m) for m in range(1, 13)]
        assert len(seasons) == 12
        assert {s: seasons.count(s) for s in Season} == {s: 3 for s in Season}

    def test_season_codes_are_one_to_four(self):
        assert [int(s) for s in Season] == [1, 2, 3, 4]

    @pytest.mark.parametrize("month", [0, 13])
    def test_rejects_out_of_range_month(self, month):
        with pytest.raises(ValueError):
            season_for_month(month)
