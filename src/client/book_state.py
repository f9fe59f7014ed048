"""Reducer-based book list state.

Each action is a frozen dataclass. `book_reducer` maps (state, action) to a
new BookState without mutating its inputs; `BookStore` holds the latest
state and exposes one helper per action.
"""

import uuid
from dataclasses import dataclass, replace

from domain.model.book import Book, BookState, initial_book_state


# ── Actions ──────────────────────────────────────────────


@dataclass(frozen=True)
class AddBook:
    book: Book


@dataclass(frozen=True)
class DeleteBook:
    book_id: str


@dataclass(frozen=True)
class UpdateBook:
    book: Book


@dataclass(frozen=True)
class SetCurrent:
    book: Book


@dataclass(frozen=True)
class ClearCurrent:
    pass


@dataclass(frozen=True)
class FilterBooks:
    text: str


@dataclass(frozen=True)
class ClearFilter:
    pass


@dataclass(frozen=True)
class SetDialog:
    pass


@dataclass(frozen=True)
class ClearDialog:
    pass


@dataclass(frozen=True)
class SetUpdate:
    pass


@dataclass(frozen=True)
class ClearUpdate:
    pass


# ── Reducer ──────────────────────────────────────────────


def book_reducer(state: BookState, action) -> BookState:
    """Return the state that results from applying `action` to `state`.

    Raises:
        TypeError: unknown action
    """
    if isinstance(action, AddBook):
        return replace(state, books=state.books + (action.book,))

    if isinstance(action, DeleteBook):
        books = tuple(b for b in state.books if b.id != action.book_id)
        filtered = state.filtered
        if filtered is not None:
            filtered = tuple(b for b in filtered if b.id != action.book_id)
        current = state.current
        if current is not None and current.id == action.book_id:
            current = None
        return replace(state, books=books, filtered=filtered, current=current)

    if isinstance(action, UpdateBook):
        books = tuple(action.book if b.id == action.book.id else b for b in state.books)
        return replace(state, books=books)

    if isinstance(action, SetCurrent):
        return replace(state, current=action.book)

    if isinstance(action, ClearCurrent):
        return replace(state, current=None)

    if isinstance(action, FilterBooks):
        return replace(state, filtered=tuple(b for b in state.books if b.matches(action.text)))

    if isinstance(action, ClearFilter):
        return replace(state, filtered=None)

    if isinstance(action, SetDialog):
        return replace(state, show_dialog=True)

    if isinstance(action, ClearDialog):
        return replace(state, show_dialog=False)

    if isinstance(action, SetUpdate):
        return replace(state, show_update=True)

    if isinstance(action, ClearUpdate):
        return replace(state, show_update=False)

    raise TypeError(f"Unknown book action: {type(action).__name__}")


# ── Store ────────────────────────────────────────────────


class BookStore:
    """Holds the current BookState; passed by reference to whatever renders it."""

    def __init__(self, state: BookState | None = None):
        self.state = state if state is not None else initial_book_state()

    def dispatch(self, action) -> BookState:
        self.state = book_reducer(self.state, action)
        return self.state

    @property
    def books(self) -> tuple[Book, ...]:
        return self.state.books

    @property
    def current(self) -> Book | None:
        return self.state.current

    def add_book(self, title: str, author: str, isbn: str = '', date: str = '',
                 description: str = '') -> Book:
        """Create a book with a fresh id and add it to the list."""
        book = Book(
            id=str(uuid.uuid4()),
            title=title,
            author=author,
            isbn=isbn,
            date=date,
            description=description,
        )
        self.dispatch(AddBook(book))
        return book

    def delete_book(self, book_id: str) -> None:
        self.dispatch(DeleteBook(book_id))

    def update_book(self, book: Book) -> None:
        self.dispatch(UpdateBook(book))

    def set_current(self, book: Book) -> None:
        self.dispatch(SetCurrent(book))

    def clear_current(self) -> None:
        self.dispatch(ClearCurrent())

    def filter_books(self, text: str) -> None:
        self.dispatch(FilterBooks(text))

    def clear_filter(self) -> None:
        self.dispatch(ClearFilter())

    def set_dialog(self) -> None:
        self.dispatch(SetDialog())

    def clear_dialog(self) -> None:
        self.dispatch(ClearDialog())

    def set_update(self) -> None:
        self.dispatch(SetUpdate())

    def clear_update(self) -> None:
        self.dispatch(ClearUpdate())
