"""Paged view over the schema's table list for the interactive prompt."""


class TablePager:
    def __init__(self, tables: list[str], page_size: int = 10):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.tables = list(tables)
        self.page_size = page_size
        self.page = 1

    @property
    def total_pages(self) -> int:
        return max(1, (len(self.tables) + self.page_size - 1) // self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def current(self) -> list[str]:
        start = (self.page - 1) * self.page_size
        return self.tables[start:start + self.page_size]

    def next_page(self) -> bool:
        """Advance one page. False (and no move) when already on the last page."""
        if not self.has_next:
            return False
        self.page += 1
        return True

    def previous_page(self) -> bool:
        if not self.has_previous:
            return False
        self.page -= 1
        return True
