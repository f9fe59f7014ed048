# domain/model/book.py

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Book:
    """A catalog entry kept in the client's book list."""
    id: str
    title: str
    author: str
    isbn: str = ''
    date: str = ''
    description: str = ''

    def matches(self, text: str) -> bool:
        """Case-insensitive match of `text` against title or author."""
        needle = text.lower()
        return needle in self.title.lower() or needle in self.author.lower()


@dataclass(frozen=True)
class BookState:
    """Snapshot of the client-side book list and its UI flags."""
    books: tuple[Book, ...] = field(default_factory=tuple)
    current: Book | None = None
    filtered: tuple[Book, ...] | None = None
    show_dialog: bool = False
    show_update: bool = False


SAMPLE_BOOKS = (
    Book(id='1', title='Book 1', author='Author 1', isbn='1234567890123',
         date='10/12/2018', description='Best ever'),
    Book(id='2', title='Book 2', author='Author 2', isbn='1234567890124',
         date='12/07/2019', description='Best ever 2'),
    Book(id='3', title='Book 3', author='Author 3', isbn='1234567890125',
         date='06/07/2020', description='Best ever 3'),
)


def initial_book_state() -> BookState:
    return BookState(books=SAMPLE_BOOKS)
