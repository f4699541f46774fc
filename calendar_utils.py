from models import Season


def add_months(year: int, month: int, n: int):
    """
    Add n months to given (year, month); n may be negative.
    Returns new (year, month)
    """
    new_month = month + n
    new_year = year + (new_month - 1) // 12
    new_month = ((new_month - 1) % 12) + 1
    return new_year, new_month


def next_month(year: int, month: int):
    return add_months(year, month, 1)


def preceding_months(year: int, month: int, count: int = 3):
    """The `count` calendar months strictly before (year, month), newest first."""
    return [add_months(year, month, -i) for i in range(1, count + 1)]


def season_for_month(month: int) -> Season:
    if month in (12, 1, 2):
        return Season.WINTER
    if month in (3, 4, 5):
        return Season.SPRING
    if month in (6, 7, 8):
        return Season.SUMMER
    if month in (9, 10, 11):
        return Season.FALL
    raise ValueError(f"month must be in 1..12, got {month}")
